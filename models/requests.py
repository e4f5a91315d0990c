from datetime import datetime

from extensions import db
from .roles import RequestStatus


class PendingDepartmentJoin(db.Model):
    """
    Pedido de ingreso a un departamento hecho con un código.
    No da membresía: eso ocurre recién al aprobarse.
    """

    __tablename__ = "pending_department_join"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False)
    department_id = db.Column(db.Integer, db.ForeignKey("department.id"), nullable=False)
    college_id = db.Column(db.Integer, db.ForeignKey("college.id"), nullable=False)
    join_code = db.Column(db.String(50), nullable=False)
    user_role = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=RequestStatus.PENDING.value)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    requester = db.relationship("Profile", foreign_keys=[user_id])
    department = db.relationship("Department")

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING.value


class CollegeAdminRequest(db.Model):
    __tablename__ = "college_admin_request"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False)
    college_name = db.Column(db.String(255), nullable=False)
    college_code = db.Column(db.String(50), nullable=False)
    college_address = db.Column(db.String(512), nullable=True)
    admin_name = db.Column(db.String(255), nullable=False)
    admin_email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=True)
    website = db.Column(db.String(512), nullable=True)
    status = db.Column(db.String(20), nullable=False, default=RequestStatus.PENDING.value)
    approved_by = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    requester = db.relationship("Profile", foreign_keys=[user_id])

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING.value
