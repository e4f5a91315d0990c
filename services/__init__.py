from .errors import (
    WorkflowError,
    ValidationError,
    InvalidCodeError,
    ConflictError,
    NotFoundError,
    TransientServiceError,
    ConsistencyError,
)
from .data_service import DataService
from . import procedures, stats_procedures  # noqa: F401  (registran los procedimientos)
from .identity_service import IdentityResolver
from .workflow_state import WorkflowState, derive_state
from .dashboard_router import ViewKind, AdminScope, route, admin_scope
from .session_context import WorkflowSession
from .approval_workflow import ApprovalWorkflow
from .management_service import ManagementService

__all__ = [
    "WorkflowError",
    "ValidationError",
    "InvalidCodeError",
    "ConflictError",
    "NotFoundError",
    "TransientServiceError",
    "ConsistencyError",
    "DataService",
    "IdentityResolver",
    "WorkflowState",
    "derive_state",
    "ViewKind",
    "AdminScope",
    "route",
    "admin_scope",
    "WorkflowSession",
    "ApprovalWorkflow",
    "ManagementService",
]
