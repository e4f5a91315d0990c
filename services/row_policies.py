"""
Políticas de fila para escrituras directas (sin procedimiento).

Cada política recibe el perfil que llama, la cuenta autenticada, la acción,
la fila (ya construida para inserts) y los cambios pedidos. Lo que no tiene
política queda denegado: las transiciones entre entidades van siempre por
procedimientos.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from extensions import db
from models import Department, DetailedRole
from services.errors import PERMISSION_DENIED_MESSAGE
from services.permissions import ProfilePermissions


PROFILE_SELF_COLUMNS = {"name", "college_id"}
COLLEGE_EDITABLE_COLUMNS = {"name", "address", "email", "phone", "website"}


def _profiles(caller, account_id, action, row, changes) -> bool:
    if account_id is None or row.id != account_id:
        return False

    if action == "insert":
        return True

    if not set(changes) <= PROFILE_SELF_COLUMNS:
        return False

    if "college_id" in changes:
        return (
            row.is_hod_track
            and row.refinement != DetailedRole.REJECTED_HOD
            and row.department_id is None
        )
    return True


def _college_admin_requests(caller, account_id, action, row, changes) -> bool:
    return action == "insert" and account_id is not None and row.user_id == account_id


def _colleges(caller, account_id, action, row, changes) -> bool:
    if action != "update" or not set(changes) <= COLLEGE_EDITABLE_COLUMNS:
        return False
    return ProfilePermissions.can_manage_college(caller, row.id)


def _departments(caller, account_id, action, row, changes) -> bool:
    return ProfilePermissions.can_manage_college(caller, row.college_id)


def _department_rooms(caller, account_id, action, row, changes) -> bool:
    department = db.session.get(Department, row.department_id)
    if department is None:
        return False
    return ProfilePermissions.can_manage_college(
        caller, department.college_id
    ) or ProfilePermissions.is_department_manager(caller, department.id)


def _department_codes(caller, account_id, action, row, changes) -> bool:
    if action != "update" or set(changes) != {"is_active"}:
        return False
    return ProfilePermissions.is_department_manager(
        caller, row.department_id
    ) or ProfilePermissions.can_manage_college(caller, row.college_id)


_POLICIES: dict[str, Callable[..., bool]] = {
    "profiles": _profiles,
    "college_admin_requests": _college_admin_requests,
    "colleges": _colleges,
    "departments": _departments,
    "department_rooms": _department_rooms,
    "department_codes": _department_codes,
}


def check_write(caller, account_id, entity: str, action: str, row: Any, changes: Mapping[str, Any]) -> None:
    policy = _POLICIES.get(entity)
    if policy is None or not policy(caller, account_id, action, row, changes):
        raise PermissionError(PERMISSION_DENIED_MESSAGE)
