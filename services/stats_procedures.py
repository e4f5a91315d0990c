"""
Procedimientos de solo lectura con los números de cada dashboard.
"""

from __future__ import annotations

from sqlalchemy import func

from extensions import db
from models import (
    College,
    CollegeAdminRequest,
    Department,
    DepartmentCode,
    DepartmentRoom,
    PendingDepartmentJoin,
    Profile,
    RequestStatus,
    RoleEnum,
)
from services.data_service import ProcedureContext, procedure
from services.errors import PERMISSION_DENIED_MESSAGE
from services.permissions import ProfilePermissions


def _count_profiles(**filters) -> int:
    return Profile.query.filter_by(**filters).count()


@procedure("get_super_admin_stats")
def get_super_admin_stats(ctx: ProcedureContext) -> dict:
    caller = ctx.require_caller()
    ProfilePermissions.require(ProfilePermissions.is_super_admin(caller))

    by_status = dict(
        db.session.query(CollegeAdminRequest.status, func.count(CollegeAdminRequest.id))
        .group_by(CollegeAdminRequest.status)
        .all()
    )
    return {
        "total_colleges": College.query.count(),
        "active_colleges": College.query.filter_by(is_active=True).count(),
        "pending_requests": by_status.get(RequestStatus.PENDING.value, 0),
        "approved_requests": by_status.get(RequestStatus.APPROVED.value, 0),
        "rejected_requests": by_status.get(RequestStatus.REJECTED.value, 0),
        "total_users": Profile.query.count(),
    }


@procedure("get_admin_stats")
def get_admin_stats(ctx: ProcedureContext) -> dict:
    caller = ctx.require_caller()
    ProfilePermissions.require(
        ProfilePermissions.is_admitted(caller) and caller.role == RoleEnum.ADMIN
    )

    return {
        "total_students": _count_profiles(role=RoleEnum.STUDENT),
        "total_teachers": _count_profiles(role=RoleEnum.TEACHER),
        "total_admins": _count_profiles(role=RoleEnum.ADMIN),
        "active_users": _count_profiles(is_active=True, pending_approval=False),
        "pending_users": _count_profiles(pending_approval=True),
        "total_departments": Department.query.count(),
    }


@procedure("get_college_stats")
def get_college_stats(ctx: ProcedureContext, college_uuid: int | None = None) -> dict:
    caller = ctx.require_caller()
    college_id = college_uuid if college_uuid is not None else caller.college_id
    ProfilePermissions.require(ProfilePermissions.can_manage_college(caller, college_id))

    department_ids = [d.id for d in Department.query.filter_by(college_id=college_id).all()]
    rooms = (
        DepartmentRoom.query.filter(DepartmentRoom.department_id.in_(department_ids)).count()
        if department_ids
        else 0
    )
    pending_hods = [
        p
        for p in Profile.query.filter_by(college_id=college_id, pending_approval=True, department_id=None).all()
        if p.is_hod_track and not p.refinement.is_rejected
    ]
    return {
        "college_id": college_id,
        "total_departments": len(department_ids),
        "total_rooms": rooms,
        "total_students": _count_profiles(college_id=college_id, role=RoleEnum.STUDENT, is_active=True),
        "total_teachers": _count_profiles(college_id=college_id, role=RoleEnum.TEACHER, is_active=True),
        "pending_hod_requests": len(pending_hods),
    }


@procedure("get_department_stats")
def get_department_stats(ctx: ProcedureContext) -> list[dict]:
    """
    Una fila por departamento visible para quien llama:
    super admin → todos, admin de college → los de su college,
    HOD / admin de departamento → el propio.
    """
    caller = ctx.require_caller()

    if ProfilePermissions.is_super_admin(caller):
        departments = Department.query.order_by(Department.name.asc()).all()
    elif ProfilePermissions.is_college_admin(caller, caller.college_id):
        departments = Department.query.filter_by(college_id=caller.college_id).order_by(Department.name.asc()).all()
    elif ProfilePermissions.is_department_manager(caller, caller.department_id):
        departments = Department.query.filter_by(id=caller.department_id).all()
    else:
        raise PermissionError(PERMISSION_DENIED_MESSAGE)

    rows = []
    for department in departments:
        students = _count_profiles(department_id=department.id, role=RoleEnum.STUDENT, is_active=True)
        teachers = _count_profiles(department_id=department.id, role=RoleEnum.TEACHER, is_active=True)
        rows.append(
            {
                "department_id": department.id,
                "department_name": department.name,
                "department_code": department.code,
                "total_students": students,
                "total_teachers": teachers,
                "total_users": students + teachers,
                "pending_requests": PendingDepartmentJoin.query.filter_by(
                    department_id=department.id, status=RequestStatus.PENDING.value
                ).count(),
                "active_codes": DepartmentCode.query.filter_by(department_id=department.id, is_active=True).count(),
            }
        )
    return rows
