from __future__ import annotations

import logging

from models import CollegeAdminRequest, PendingDepartmentJoin, Profile, User
from services.dashboard_router import ViewKind, route
from services.data_service import DataService
from services.identity_service import IdentityResolver
from services.workflow_state import WorkflowState, derive_state


logger = logging.getLogger(__name__)


class WorkflowSession:
    """
    Contexto explícito de sesión: cuenta autenticada, su perfil resuelto y un
    DataService ligado a esa identidad.

    Ciclo de vida:
      - open(account): resuelve el perfil (lo crea si hace falta)
      - close(): al cerrar sesión o al terminar el request
    """

    def __init__(self, account: User, data: DataService | None = None):
        self.account = account
        self.data = data or DataService(account_id=account.id)
        self.profile: Profile | None = None
        self.is_open = False

    @classmethod
    def open(cls, account: User, data: DataService | None = None) -> "WorkflowSession":
        session = cls(account, data)
        session.profile = IdentityResolver(session.data).resolve(account)
        session.data.bind(None if session.profile.is_degraded else session.profile)
        session.is_open = True
        logger.debug("Workflow session opened for account %s", account.id)
        return session

    def close(self) -> None:
        if not self.is_open:
            return
        self.data.bind(None)
        self.profile = None
        self.is_open = False
        logger.debug("Workflow session closed for account %s", self.account.id)

    def require_profile(self) -> Profile:
        if not self.is_open or self.profile is None:
            raise PermissionError("Authentication required.")
        return self.profile

    def refresh(self) -> Profile:
        """
        Relee el perfil después de una transición.
        """
        profile = self.require_profile()
        if profile.is_degraded:
            return profile
        fresh = self.data.read_one("profiles", id=profile.id)
        if fresh is not None:
            self.profile = fresh
            self.data.bind(fresh)
        return self.profile

    # -----------------
    # Estado / vista
    # -----------------

    def pending_joins(self) -> list[PendingDepartmentJoin]:
        profile = self.require_profile()
        if profile.is_degraded:
            return []
        return self.data.read(
            "pending_department_joins",
            {"user_id": profile.id},
            order="-created_at",
        )

    def college_request(self) -> CollegeAdminRequest | None:
        profile = self.require_profile()
        if profile.is_degraded:
            return None
        rows = self.data.read("college_admin_requests", {"user_id": profile.id}, order="-created_at")
        return rows[0] if rows else None

    def state(self) -> WorkflowState:
        if not self.is_open:
            return WorkflowState.UNRESOLVED
        return derive_state(self.profile, self.pending_joins(), self.college_request())

    def view(self) -> ViewKind:
        return route(self.profile)
