from __future__ import annotations

import enum

from models import DetailedRole, RoleEnum


class ViewKind(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
    PENDING = "pending"
    UNRECOGNIZED = "unrecognized"


class AdminScope(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    COLLEGE_ADMIN = "college_admin"
    DEPARTMENT_ADMIN = "department_admin"


_ROLE_VIEWS = {
    RoleEnum.STUDENT: ViewKind.STUDENT,
    RoleEnum.TEACHER: ViewKind.TEACHER,
    RoleEnum.ADMIN: ViewKind.ADMIN,
}


def route(profile) -> ViewKind:
    """
    Elige la vista a montar. Sin estado ni efectos.
    Un perfil pendiente de aprobación nunca recibe una vista autenticada.
    """
    if profile is None or profile.pending_approval:
        return ViewKind.PENDING

    role = profile.role
    if not isinstance(role, RoleEnum):
        try:
            role = RoleEnum(role)
        except ValueError:
            return ViewKind.UNRECOGNIZED
    return _ROLE_VIEWS.get(role, ViewKind.UNRECOGNIZED)


def admin_scope(profile) -> AdminScope | None:
    """
    Admin sin college → super admin; con college → admin de college,
    salvo que el perfil sea de un departamento.
    """
    if route(profile) is not ViewKind.ADMIN:
        return None

    try:
        refinement = DetailedRole.parse(profile.detailed_role)
    except ValueError:
        return None

    if refinement == DetailedRole.DEPARTMENT_ADMIN:
        return AdminScope.DEPARTMENT_ADMIN
    if profile.college_id is None:
        return AdminScope.SUPER_ADMIN
    return AdminScope.COLLEGE_ADMIN
