"""
Derivación pura del estado del flujo a partir del perfil y sus filas
relacionadas. No toca la base: recibe todo lo que necesita.
"""

from __future__ import annotations

import enum
from typing import Iterable

from models import DetailedRole, RequestStatus, RoleEnum


class WorkflowState(str, enum.Enum):
    UNRESOLVED = "unresolved"
    PENDING_COLLEGE_ADMIN_APPROVAL = "pending_college_admin_approval"
    PENDING_HOD_COLLEGE_ASSIGNMENT = "pending_hod_college_assignment"
    PENDING_DEPARTMENT_ASSIGNMENT = "pending_department_assignment"
    PENDING_MEMBERSHIP = "pending_membership"
    PENDING_JOIN_APPROVAL = "pending_join_approval"
    PENDING_APPROVAL = "pending_approval"
    ACTIVE = "active"
    REJECTED = "rejected"
    DEACTIVATED = "deactivated"

    @property
    def is_admitted(self) -> bool:
        return self is WorkflowState.ACTIVE

    @property
    def is_terminal(self) -> bool:
        return self is WorkflowState.REJECTED


def _parse_refinement(profile) -> DetailedRole:
    refinement = getattr(profile, "refinement", None)
    if isinstance(refinement, DetailedRole):
        return refinement
    return DetailedRole.parse(getattr(profile, "detailed_role", None))


def _has_pending_join(profile, pending_joins: Iterable) -> bool:
    for join in pending_joins or ():
        if join.user_id == profile.id and join.status == RequestStatus.PENDING.value:
            return True
    return False


def derive_state(profile, pending_joins: Iterable = (), college_request=None) -> WorkflowState:
    """
    Estado del perfil dentro del flujo de aprobación.

    - pending_joins: filas PendingDepartmentJoin del usuario (cualquier estado).
    - college_request: la CollegeAdminRequest ligada, si existe.

    Un perfil con pending_approval nunca da ACTIVE.
    """
    if profile is None:
        return WorkflowState.UNRESOLVED

    refinement = _parse_refinement(profile)
    pending = bool(profile.pending_approval)
    active = bool(profile.is_active)
    hod_track = bool(getattr(profile, "is_hod", False)) or refinement == DetailedRole.HOD

    if refinement.is_rejected and not pending and not active:
        return WorkflowState.REJECTED

    if refinement == DetailedRole.COLLEGE_ADMIN and pending:
        if college_request is not None and college_request.status == RequestStatus.REJECTED.value:
            return WorkflowState.REJECTED
        if profile.college_id is None:
            return WorkflowState.PENDING_COLLEGE_ADMIN_APPROVAL
        return WorkflowState.PENDING_APPROVAL

    if hod_track and profile.department_id is None and (pending or not active):
        if profile.college_id is None:
            return WorkflowState.PENDING_HOD_COLLEGE_ASSIGNMENT
        return WorkflowState.PENDING_DEPARTMENT_ASSIGNMENT

    if pending:
        return WorkflowState.PENDING_APPROVAL

    if not active:
        return WorkflowState.DEACTIVATED

    if profile.role == RoleEnum.ADMIN or profile.department_id is not None:
        return WorkflowState.ACTIVE

    if _has_pending_join(profile, pending_joins):
        return WorkflowState.PENDING_JOIN_APPROVAL
    return WorkflowState.PENDING_MEMBERSHIP
