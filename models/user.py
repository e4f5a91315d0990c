from datetime import datetime

from flask_login import UserMixin
from sqlalchemy.orm import validates
from werkzeug.security import generate_password_hash, check_password_hash

from extensions import db
from .roles import RoleEnum, DetailedRole


class User(UserMixin, db.Model):
    """
    Cuenta de autenticación. La metadata de registro (rol pedido, solicitud
    de admin de college, postulación HOD) queda guardada para que el
    IdentityResolver arme el perfil en el primer login.
    """

    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=True)
    signup_metadata = db.Column(db.JSON, nullable=True)
    active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    profile = db.relationship("Profile", back_populates="user", uselist=False)

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def metadata_dict(self) -> dict:
        return dict(self.signup_metadata or {})


class Profile(db.Model):
    __tablename__ = "profile"

    # Un perfil por cuenta: la clave primaria es el id de la cuenta.
    id = db.Column(db.Integer, db.ForeignKey("user.id"), primary_key=True, autoincrement=False)
    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(RoleEnum), nullable=False, default=RoleEnum.STUDENT)
    detailed_role = db.Column(db.String(50), nullable=True)

    # Datos de la postulación HOD
    is_hod = db.Column(db.Boolean, nullable=False, default=False)
    employee_id = db.Column(db.String(100), nullable=True)
    student_id = db.Column(db.String(100), nullable=True)
    qualification = db.Column(db.String(255), nullable=True)
    experience = db.Column(db.String(255), nullable=True)
    hod_details = db.Column(db.Text, nullable=True)

    # Pertenencia actual
    college_id = db.Column(db.Integer, db.ForeignKey("college.id"), nullable=True)
    department_id = db.Column(db.Integer, db.ForeignKey("department.id"), nullable=True)
    room_id = db.Column(db.Integer, db.ForeignKey("department_room.id"), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    pending_approval = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship("User", back_populates="profile")
    college = db.relationship("College", foreign_keys=[college_id])
    department = db.relationship("Department", foreign_keys=[department_id])
    room = db.relationship("DepartmentRoom", foreign_keys=[room_id])

    # Marca del perfil en memoria que se arma cuando la base no responde.
    is_degraded = False

    @validates("detailed_role")
    def _validate_detailed_role(self, key, value):
        DetailedRole.parse(value)
        return value

    @property
    def refinement(self) -> DetailedRole:
        return DetailedRole.parse(self.detailed_role)

    @property
    def is_hod_track(self) -> bool:
        return bool(self.is_hod) or self.refinement in (DetailedRole.HOD, DetailedRole.REJECTED_HOD)
