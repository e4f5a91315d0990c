from datetime import datetime

from extensions import db


class College(db.Model):
    __tablename__ = "college"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(50), nullable=False, unique=True)
    address = db.Column(db.String(512), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    website = db.Column(db.String(512), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    departments = db.relationship("Department", back_populates="college", cascade="all, delete-orphan")


class Department(db.Model):
    __tablename__ = "department"

    id = db.Column(db.Integer, primary_key=True)
    college_id = db.Column(db.Integer, db.ForeignKey("college.id"), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    college = db.relationship("College", back_populates="departments")
    rooms = db.relationship("DepartmentRoom", back_populates="department", cascade="all, delete-orphan")
    codes = db.relationship("DepartmentCode", back_populates="department", cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("college_id", "code", name="uq_department_college_code"),
    )


class DepartmentRoom(db.Model):
    __tablename__ = "department_room"

    id = db.Column(db.Integer, primary_key=True)
    department_id = db.Column(db.Integer, db.ForeignKey("department.id"), nullable=False)
    room_name = db.Column(db.String(255), nullable=False)
    room_code = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=True)
    max_students = db.Column(db.Integer, nullable=True, default=100)
    max_teachers = db.Column(db.Integer, nullable=True, default=10)
    room_admin = db.Column(
        db.Integer,
        db.ForeignKey("profile.id", use_alter=True, name="fk_department_room_admin"),
        nullable=True,
    )
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    department = db.relationship("Department", back_populates="rooms")


class DepartmentCode(db.Model):
    """
    Par de códigos de ingreso (alumno / profesor) de un departamento.
    expires_at NULL = no vence.
    """

    __tablename__ = "department_code"

    id = db.Column(db.Integer, primary_key=True)
    department_id = db.Column(db.Integer, db.ForeignKey("department.id"), nullable=False)
    college_id = db.Column(db.Integer, db.ForeignKey("college.id"), nullable=False)
    student_code = db.Column(db.String(50), nullable=False, index=True)
    teacher_code = db.Column(db.String(50), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_by = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    department = db.relationship("Department", back_populates="codes")

    def is_usable(self, now: datetime | None = None) -> bool:
        if not self.is_active:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at > (now or datetime.utcnow())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "department_id": self.department_id,
            "college_id": self.college_id,
            "student_code": self.student_code,
            "teacher_code": self.teacher_code,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class DepartmentAdmin(db.Model):
    __tablename__ = "department_admin"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False)
    department_id = db.Column(db.Integer, db.ForeignKey("department.id"), nullable=False)
    college_id = db.Column(db.Integer, db.ForeignKey("college.id"), nullable=False)
    assigned_by = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "department_id", name="uq_department_admin_user_department"),
    )
