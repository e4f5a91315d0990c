"""
Procedimientos atómicos del flujo de aprobación.

Cada uno corre dentro de DataService.call: una sola transacción, commit al
final, rollback ante cualquier error. Los permisos se validan acá (lado
servidor) sin importar lo que haya chequeado el cliente.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from flask import current_app

from extensions import db
from models import (
    College,
    CollegeAdminRequest,
    Department,
    DepartmentAdmin,
    DepartmentCode,
    DetailedRole,
    PendingDepartmentJoin,
    Profile,
    RequestStatus,
    RoleEnum,
    User,
)
from services.data_service import ProcedureContext, procedure
from services.errors import InvalidCodeError, NotFoundError, ValidationError
from services.join_codes import generate_code_pair, normalize_join_code
from services.permissions import ProfilePermissions


logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "Rejected by super admin"
MIN_PASSWORD_LENGTH = 6


def _get_or_404(model, pk, label: str):
    row = db.session.get(model, pk) if pk is not None else None
    if row is None:
        raise NotFoundError(f"{label} not found.")
    return row


# ----------------------------------------------
# Admin de college
# ----------------------------------------------
@procedure("approve_college_admin_request")
def approve_college_admin_request(ctx: ProcedureContext, request_id: int, approver_id: int) -> dict:
    caller = ctx.require_caller()
    ProfilePermissions.require(
        caller.id == approver_id and ProfilePermissions.is_super_admin(caller),
        "Only a super admin can approve college admin requests.",
    )

    req = _get_or_404(CollegeAdminRequest, request_id, "College admin request")
    if not req.is_pending:
        raise ValidationError("This request has already been processed.")

    requester = _get_or_404(Profile, req.user_id, "Requester profile")
    college = _open_college(req)
    _promote_college_admin(requester, college)

    req.status = RequestStatus.APPROVED.value
    req.approved_by = caller.id
    req.approved_at = datetime.utcnow()
    req.rejection_reason = None

    logger.info("College admin request %s approved by %s (college %s)", req.id, caller.id, college.id)
    return {"request_id": req.id, "college_id": college.id, "profile_id": requester.id}


def _open_college(req: CollegeAdminRequest) -> College:
    code = normalize_join_code(req.college_code)
    college = College.query.filter_by(code=code).first()

    if college is not None:
        if college.is_active:
            raise ValidationError(f"A college with code {code} already exists.")
        college.is_active = True
        return college

    college = College(
        name=req.college_name,
        code=code,
        address=req.college_address,
        email=req.admin_email,
        phone=req.phone,
        website=req.website,
        is_active=True,
    )
    db.session.add(college)
    db.session.flush()
    return college


def _promote_college_admin(profile: Profile, college: College) -> None:
    profile.college_id = college.id
    profile.role = RoleEnum.ADMIN
    profile.detailed_role = DetailedRole.COLLEGE_ADMIN.value
    profile.is_active = True
    profile.pending_approval = False


@procedure("reject_college_admin_request")
def reject_college_admin_request(
    ctx: ProcedureContext, request_id: int, rejection_reason: str | None = None
) -> dict:
    caller = ctx.require_caller()
    ProfilePermissions.require(
        ProfilePermissions.is_super_admin(caller),
        "Only a super admin can reject college admin requests.",
    )

    req = _get_or_404(CollegeAdminRequest, request_id, "College admin request")
    if not req.is_pending:
        raise ValidationError("This request has already been processed.")

    req.status = RequestStatus.REJECTED.value
    req.rejection_reason = (rejection_reason or "").strip() or DEFAULT_REJECTION_REASON

    logger.info("College admin request %s rejected by %s", req.id, caller.id)
    return {"request_id": req.id, "status": req.status}


# ----------------------------------------------
# Postulaciones HOD
# ----------------------------------------------
@procedure("get_hod_requests")
def get_hod_requests(ctx: ProcedureContext, college_id: int) -> list[dict]:
    caller = ctx.require_caller()
    ProfilePermissions.require(ProfilePermissions.can_manage_college(caller, college_id))

    college = _get_or_404(College, college_id, "College")
    applicants = (
        Profile.query.filter_by(college_id=college_id, pending_approval=True, department_id=None)
        .order_by(Profile.created_at.asc())
        .all()
    )

    return [
        {
            "id": applicant.id,
            "name": applicant.name,
            "email": applicant.user.email if applicant.user else None,
            "employee_id": applicant.employee_id or "",
            "qualification": applicant.qualification or "",
            "experience": applicant.experience or "",
            "hod_details": applicant.hod_details or "",
            "college_name": college.name,
            "created_at": applicant.created_at.isoformat() if applicant.created_at else None,
        }
        for applicant in applicants
        if applicant.is_hod_track and not applicant.refinement.is_rejected
    ]


def _require_open_hod_application(applicant: Profile) -> None:
    """
    Postulación abierta: perfil HOD sin rechazo, sin departamento y todavía
    sin admitir. Un HOD ya aprobado no se puede aprobar ni rechazar de nuevo.
    """
    if not applicant.is_hod_track or applicant.refinement.is_rejected:
        raise ValidationError("This profile has no open HOD application.")
    if applicant.department_id is not None:
        raise ValidationError("This HOD is already assigned to a department.")
    if applicant.is_active and not applicant.pending_approval:
        raise ValidationError("This profile has no open HOD application.")


@procedure("approve_hod_request")
def approve_hod_request(ctx: ProcedureContext, user_id: int, department_id: int) -> dict:
    caller = ctx.require_caller()
    department = _get_or_404(Department, department_id, "Department")
    ProfilePermissions.require(
        ProfilePermissions.can_manage_college(caller, department.college_id),
        "Only the college admin can approve HOD requests.",
    )

    applicant = _get_or_404(Profile, user_id, "HOD applicant")
    _require_open_hod_application(applicant)
    if applicant.college_id is not None and applicant.college_id != department.college_id:
        raise ValidationError("The department does not belong to the college the applicant selected.")
    if not department.is_active:
        raise ValidationError("The department is not active.")

    if applicant.college_id is None:
        applicant.college_id = department.college_id
    applicant.department_id = department.id
    applicant.role = RoleEnum.TEACHER
    applicant.detailed_role = DetailedRole.HOD.value
    applicant.is_hod = True
    applicant.is_active = True
    applicant.pending_approval = False

    logger.info("HOD %s approved for department %s by %s", applicant.id, department.id, caller.id)
    return {"user_id": applicant.id, "department_id": department.id, "college_id": applicant.college_id}


@procedure("reject_hod_request")
def reject_hod_request(ctx: ProcedureContext, user_id: int) -> dict:
    caller = ctx.require_caller()
    applicant = _get_or_404(Profile, user_id, "HOD applicant")
    ProfilePermissions.require(
        ProfilePermissions.can_manage_college(caller, applicant.college_id),
        "Only the college admin can reject HOD requests.",
    )
    _require_open_hod_application(applicant)

    applicant.detailed_role = DetailedRole.REJECTED_HOD.value
    applicant.is_active = False
    applicant.pending_approval = False

    logger.info("HOD application of %s rejected by %s", applicant.id, caller.id)
    return {"user_id": applicant.id, "detailed_role": applicant.detailed_role}


# ----------------------------------------------
# Códigos de departamento
# ----------------------------------------------
@procedure("generate_department_codes")
def generate_department_codes(
    ctx: ProcedureContext,
    department_id: int,
    college_id: int,
    created_by: int,
    expires_in_days: int | None = None,
) -> dict:
    caller = ctx.require_caller()
    department = _get_or_404(Department, department_id, "Department")
    if department.college_id != college_id:
        raise ValidationError("The department does not belong to this college.")

    ProfilePermissions.require(
        caller.id == created_by
        and (
            ProfilePermissions.is_department_manager(caller, department.id)
            or ProfilePermissions.can_manage_college(caller, department.college_id)
        ),
        "Only the HOD or an admin of this department can generate join codes.",
    )

    expires_at = _expiry_from_days(expires_in_days)

    # Un solo par activo por departamento.
    previous = DepartmentCode.query.filter_by(department_id=department.id, is_active=True).all()
    for old in previous:
        old.is_active = False

    length = current_app.config.get("JOIN_CODE_LENGTH", 8)
    student_code, teacher_code = generate_code_pair(length, department.code)
    code = DepartmentCode(
        department_id=department.id,
        college_id=department.college_id,
        student_code=student_code,
        teacher_code=teacher_code,
        is_active=True,
        created_by=caller.id,
        expires_at=expires_at,
    )
    db.session.add(code)
    db.session.flush()

    logger.info(
        "Generated join codes %s for department %s (%s previous deactivated)",
        code.id,
        department.id,
        len(previous),
    )
    return code.to_dict()


def _expiry_from_days(expires_in_days) -> datetime | None:
    if expires_in_days in (None, ""):
        return None
    try:
        days = int(expires_in_days)
    except (TypeError, ValueError):
        raise ValidationError("expires_in_days must be a number.")
    if days < 0:
        raise ValidationError("expires_in_days must be >= 0.")
    if days == 0:
        return None
    return datetime.utcnow() + timedelta(days=days)


# ----------------------------------------------
# Ingreso a departamentos
# ----------------------------------------------
def _is_plain_member(profile: Profile) -> bool:
    # Sólo alumnos/docentes admitidos sin postulación HOD ni de admin.
    return (
        bool(profile.is_active)
        and not profile.pending_approval
        and not profile.is_hod
        and profile.refinement == DetailedRole.NONE
    )


@procedure("join_department_with_code")
def join_department_with_code(ctx: ProcedureContext, user_id: int, join_code: str, user_role: str) -> dict:
    caller = ctx.require_caller()
    ProfilePermissions.require(caller.id == user_id, "You can only submit join requests for yourself.")

    canonical = normalize_join_code(join_code)
    if not canonical:
        raise ValidationError("A join code is required.")

    if user_role not in (RoleEnum.STUDENT.value, RoleEnum.TEACHER.value):
        raise ValidationError("Only students and teachers can join a department with a code.")
    ProfilePermissions.require(
        caller.role.value == user_role,
        "The role of the request does not match your profile.",
    )
    if caller.department_id is not None:
        raise ValidationError("You are already part of a department.")
    if not _is_plain_member(caller):
        raise ValidationError("Only students and teachers without a pending application can join with a code.")

    column = DepartmentCode.student_code if user_role == RoleEnum.STUDENT.value else DepartmentCode.teacher_code
    candidates = DepartmentCode.query.filter(column == canonical, DepartmentCode.is_active.is_(True)).all()

    now = datetime.utcnow()
    match = next(
        (c for c in candidates if c.is_usable(now) and c.department and c.department.is_active),
        None,
    )
    if match is None:
        raise InvalidCodeError()

    join = PendingDepartmentJoin(
        user_id=caller.id,
        department_id=match.department_id,
        college_id=match.college_id,
        join_code=canonical,
        user_role=user_role,
        status=RequestStatus.PENDING.value,
    )
    db.session.add(join)
    db.session.flush()

    logger.info("Join request %s created for user %s in department %s", join.id, caller.id, join.department_id)
    return {"join_id": join.id, "department_id": join.department_id, "status": join.status}


@procedure("approve_department_join")
def approve_department_join(ctx: ProcedureContext, join_id: int, approver_id: int) -> dict:
    caller = ctx.require_caller()
    join = _get_or_404(PendingDepartmentJoin, join_id, "Join request")
    ProfilePermissions.require(
        caller.id == approver_id and ProfilePermissions.is_department_manager(caller, join.department_id),
        "Only the HOD or an admin of this department can approve join requests.",
    )
    if not join.is_pending:
        raise ValidationError("This join request has already been processed.")

    requester = _get_or_404(Profile, join.user_id, "Requester profile")
    if requester.is_hod_track or requester.refinement != DetailedRole.NONE:
        raise ValidationError("This requester is on an HOD or admin track and cannot join with a code.")

    join.status = RequestStatus.APPROVED.value
    join.reviewed_by = caller.id

    requester.department_id = join.department_id
    if requester.college_id is None:
        requester.college_id = join.college_id
    requester.is_active = True
    requester.pending_approval = False

    logger.info("Join request %s approved by %s", join.id, caller.id)
    return {"join_id": join.id, "user_id": requester.id, "department_id": join.department_id}


@procedure("reject_department_join")
def reject_department_join(ctx: ProcedureContext, join_id: int) -> dict:
    caller = ctx.require_caller()
    join = _get_or_404(PendingDepartmentJoin, join_id, "Join request")
    ProfilePermissions.require(
        ProfilePermissions.is_department_manager(caller, join.department_id),
        "Only the HOD or an admin of this department can reject join requests.",
    )
    if not join.is_pending:
        raise ValidationError("This join request has already been processed.")

    join.status = RequestStatus.REJECTED.value
    join.reviewed_by = caller.id

    logger.info("Join request %s rejected by %s", join.id, caller.id)
    return {"join_id": join.id, "status": join.status}


# ----------------------------------------------
# Admins de departamento
# ----------------------------------------------
@procedure("create_department_admin")
def create_department_admin(
    ctx: ProcedureContext,
    admin_email: str,
    admin_name: str,
    admin_password: str,
    department_id: int,
    college_id: int,
    assigned_by: int,
) -> dict:
    """
    Crea cuenta + perfil + asignación en una sola transacción.
    """
    caller = ctx.require_caller()
    ProfilePermissions.require(
        caller.id == assigned_by and ProfilePermissions.can_manage_college(caller, college_id),
        "Only the college admin can create department admins.",
    )

    department = _get_or_404(Department, department_id, "Department")
    if department.college_id != college_id:
        raise ValidationError("The department does not belong to this college.")

    email = (admin_email or "").strip().lower()
    name = (admin_name or "").strip()
    if not email or not name or not admin_password:
        raise ValidationError("Name, email and password are required.")
    if len(admin_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
    if User.query.filter_by(email=email).first():
        raise ValidationError("An account with this email already exists.")

    user = User(email=email, signup_metadata={"name": name, "role": RoleEnum.ADMIN.value})
    user.set_password(admin_password)
    db.session.add(user)
    db.session.flush()

    profile = Profile(
        id=user.id,
        name=name,
        role=RoleEnum.ADMIN,
        detailed_role=DetailedRole.DEPARTMENT_ADMIN.value,
        college_id=college_id,
        department_id=department.id,
        is_active=True,
        pending_approval=False,
    )
    db.session.add(profile)
    db.session.flush()

    assignment = DepartmentAdmin(
        user_id=profile.id,
        department_id=department.id,
        college_id=college_id,
        assigned_by=caller.id,
        is_active=True,
    )
    db.session.add(assignment)
    db.session.flush()

    logger.info("Department admin %s created for department %s by %s", profile.id, department.id, caller.id)
    return {"user_id": profile.id, "department_admin_id": assignment.id}


@procedure("get_current_user_role")
def get_current_user_role(ctx: ProcedureContext) -> str | None:
    if ctx.caller is None:
        return None
    return ctx.caller.role.value
