# api/utils/permissions.py

from functools import wraps

from flask import abort, g, jsonify
from flask_login import current_user

from models import Profile
from services import ApprovalWorkflow, ManagementService, WorkflowSession


def get_current_session() -> WorkflowSession | None:
    """
    Devuelve el WorkflowSession del request actual (lo abre la primera vez),
    o None si no hay usuario logueado.
    """
    if not current_user.is_authenticated:
        return None

    session = g.get("workflow_session")
    if session is None:
        session = WorkflowSession.open(current_user._get_current_object())
        g.workflow_session = session
    return session


def close_current_session(exc=None) -> None:
    session = g.pop("workflow_session", None)
    if session is not None:
        session.close()


def get_current_profile() -> Profile | None:
    session = get_current_session()
    return session.profile if session else None


def get_workflow() -> ApprovalWorkflow:
    session = get_current_session()
    if session is None:
        abort(401)
    return ApprovalWorkflow(session)


def get_management() -> ManagementService:
    session = get_current_session()
    if session is None:
        abort(401)
    return ManagementService(session)


def has_role(*role_names: str) -> bool:
    """
    True si el perfil actual tiene alguno de los roles indicados
    por valor (por ejemplo: "admin", "teacher", "student").
    """
    profile = get_current_profile()
    if not profile or not profile.role:
        return False
    return profile.role.value in role_names


def require_admitted(f):
    """
    Decorador para vistas que sólo pueden usar perfiles activos
    (ni pendientes, ni rechazados, ni desactivados).
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        session = get_current_session()
        if session is None:
            abort(401)
        state = session.state()
        if not state.is_admitted:
            return jsonify({
                "error": "Your account is not active yet.",
                "kind": "not_admitted",
                "state": state.value,
            }), 403
        return f(*args, **kwargs)
    return wrapper


def require_roles(*role_names: str):
    """
    Uso:
        @require_roles("admin")
        @require_roles("admin", "teacher")
    Sólo filtra la UI: los permisos reales se validan en los procedimientos.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not has_role(*role_names):
                abort(403)
            return f(*args, **kwargs)
        return wrapper
    return decorator
