# api/auth.py

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from extensions import db
from models import User
from services import (
    ApprovalWorkflow,
    DataService,
    ValidationError,
    ViewKind,
    WorkflowState,
    admin_scope,
)
from services.procedures import MIN_PASSWORD_LENGTH
from api.utils import profile_to_dict
from api.utils.permissions import close_current_session, get_current_session, get_management

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


STATE_MESSAGES = {
    WorkflowState.PENDING_COLLEGE_ADMIN_APPROVAL: (
        "Your college admin request is currently being reviewed by our super administrators."
    ),
    WorkflowState.PENDING_HOD_COLLEGE_ASSIGNMENT: (
        "Select the college where you want to apply as Head of Department."
    ),
    WorkflowState.PENDING_DEPARTMENT_ASSIGNMENT: (
        "Your HOD application is waiting for the college administration to assign a department."
    ),
    WorkflowState.PENDING_MEMBERSHIP: "Join your department with the code provided by your department admin.",
    WorkflowState.PENDING_JOIN_APPROVAL: "Your join request is waiting for approval from the department admin.",
    WorkflowState.PENDING_APPROVAL: "Your account is pending approval from the administration.",
    WorkflowState.REJECTED: "Your request was not approved. Please contact support if you have questions.",
    WorkflowState.DEACTIVATED: "Your account has been deactivated.",
}

# Estados en los que no se mantiene la sesión abierta.
BLOCKED_STATES = (WorkflowState.REJECTED, WorkflowState.DEACTIVATED)


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


def _session_payload(session) -> dict:
    state = session.state()
    view = session.view()
    scope = admin_scope(session.profile)

    message = STATE_MESSAGES.get(state)
    if state.is_admitted and view is ViewKind.UNRECOGNIZED:
        message = (
            "Your account role is not recognized. "
            f"Please contact {current_app.config['SUPPORT_EMAIL']}."
        )

    return {
        "profile": profile_to_dict(session.profile),
        "state": state.value,
        "admitted": state.is_admitted,
        "view": view.value if state.is_admitted else ViewKind.PENDING.value,
        "admin_scope": scope.value if scope and state.is_admitted else None,
        "message": message,
    }


def _create_account(email: str, password: str, metadata: dict) -> User:
    if not email or not password:
        raise ValidationError("Email and password are required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
    if User.query.filter_by(email=email).first():
        raise ValidationError("An account with this email already exists. Please try logging in.")

    user = User(email=email, signup_metadata=metadata)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def _sign_in(user: User):
    login_user(user)
    session = get_current_session()
    payload = _session_payload(session)

    if session.state() in BLOCKED_STATES:
        # Estado explicativo, no error: se informa y se cierra la sesión.
        close_current_session()
        logout_user()
    return payload


# ----------------------------------------------
# REGISTRO
# ----------------------------------------------
@auth_bp.post("/signup")
def signup():
    """
    Crea la cuenta con su metadata de registro. El perfil lo arma el
    IdentityResolver al iniciar la sesión.

    Espera JSON:
      - email, password, name
      - role: student | teacher | admin (otro valor → student)
      - hod_application (opcional) + employee_id, qualification, experience, hod_details
    """
    data = _json_body()
    email = (data.get("email") or "").strip().lower()
    password = (data.get("password") or "").strip()
    name = (data.get("name") or "").strip()

    metadata = {"name": name, "full_name": name, "role": data.get("role")}
    if data.get("hod_application"):
        metadata["hod_application"] = True
        for field in ("employee_id", "qualification", "experience", "hod_details"):
            if data.get(field):
                metadata[field] = data.get(field)

    user = _create_account(email, password, metadata)
    current_app.logger.info("Account %s created", user.id)
    return jsonify(_sign_in(user)), 201


@auth_bp.post("/college-admin/register")
def register_college_admin():
    """
    Registro de un admin de college: cuenta + perfil inerte + solicitud
    pendiente para el super admin.
    """
    data = _json_body()
    college_info = {
        "college_name": data.get("college_name"),
        "college_code": data.get("college_code"),
        "college_address": data.get("college_address"),
        "website": data.get("website"),
        "phone": data.get("phone"),
    }
    admin_info = {
        "admin_name": data.get("admin_name"),
        "admin_email": data.get("admin_email"),
        "admin_password": data.get("admin_password"),
        "phone": data.get("admin_phone"),
    }

    # Validar antes de crear la cuenta para no dejar cuentas huérfanas.
    ApprovalWorkflow.validate_college_admin_submission(DataService(), college_info, admin_info)

    email = (admin_info["admin_email"] or "").strip().lower()
    password = (admin_info["admin_password"] or "").strip()
    name = (admin_info["admin_name"] or "").strip()
    user = _create_account(
        email,
        password,
        {"name": name, "role": "student", "college_request": True},
    )

    login_user(user)
    session = get_current_session()
    request_row = ApprovalWorkflow(session).submit_college_admin_request(college_info, admin_info)

    payload = _session_payload(session)
    payload["request_id"] = request_row.id
    return jsonify(payload), 201


# ----------------------------------------------
# LOGIN / LOGOUT
# ----------------------------------------------
@auth_bp.post("/login")
def login_submit():
    data = _json_body()
    email = (data.get("email") or "").strip().lower()
    password = (data.get("password") or "").strip()

    if not email or not password:
        raise ValidationError("Email and password are required.")

    user = User.query.filter_by(email=email).first()
    if not user or not user.active or not user.check_password(password):
        return jsonify({"error": "Invalid email or password.", "kind": "invalid_credentials"}), 401

    return jsonify(_sign_in(user))


@auth_bp.post("/logout")
@login_required
def logout():
    close_current_session()
    logout_user()
    return jsonify({"status": "ok"})


# ----------------------------------------------
# PERFIL / ESTADO
# ----------------------------------------------
@auth_bp.get("/me")
@login_required
def me():
    return jsonify(_session_payload(get_current_session()))


@auth_bp.post("/profile")
@login_required
def update_profile():
    """
    Actualiza datos básicos del perfil (por ahora solo name).
    """
    profile = get_management().update_own_name(_json_body().get("name"))
    current_app.logger.info("Profile %s renamed by %s", profile.id, current_user.id)
    return jsonify(_session_payload(get_current_session()))
