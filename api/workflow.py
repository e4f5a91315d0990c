from flask import current_app, jsonify, request
from flask_login import login_required

from models import Department
from api.utils import (
    college_request_to_dict,
    college_to_dict,
    department_to_dict,
    join_to_dict,
    member_to_dict,
    profile_to_dict,
)
from api.utils.permissions import get_current_profile, get_workflow, require_admitted
from services import ValidationError
from . import api_bp


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


def _required_int(data: dict, field: str) -> int:
    raw = data.get(field)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} is required.")


# ----------------------------------------------
# COLLEGES
# ----------------------------------------------
@api_bp.get("/colleges")
@login_required
def list_colleges():
    colleges = get_workflow().active_colleges()
    return jsonify([college_to_dict(c) for c in colleges])


@api_bp.get("/colleges/<int:college_id>/departments")
@login_required
def list_college_departments(college_id):
    workflow = get_workflow()
    departments = workflow.data.read(
        "departments",
        {"college_id": college_id, "is_active": True},
        order="name",
    )
    return jsonify([department_to_dict(d) for d in departments])


# ----------------------------------------------
# HOD
# ----------------------------------------------
@api_bp.post("/hod/college-selection")
@login_required
def hod_college_selection():
    """
    El postulante HOD elige el college donde quiere aplicar.
    Espera JSON: { "college_id": 1 }
    """
    workflow = get_workflow()
    profile = workflow.submit_hod_college_selection(_required_int(_json_body(), "college_id"))
    return jsonify({
        "status": "ok",
        "profile": profile_to_dict(profile),
        "state": workflow.session.state().value,
    })


@api_bp.get("/colleges/<int:college_id>/hod-requests")
@login_required
@require_admitted
def list_hod_requests(college_id):
    return jsonify(get_workflow().hod_requests(college_id))


@api_bp.post("/hod-requests/<int:user_id>/approve")
@login_required
@require_admitted
def approve_hod(user_id):
    result = get_workflow().approve_hod_request(user_id, _required_int(_json_body(), "department_id"))
    return jsonify({"status": "ok", **result})


@api_bp.post("/hod-requests/<int:user_id>/reject")
@login_required
@require_admitted
def reject_hod(user_id):
    result = get_workflow().reject_hod_request(user_id)
    return jsonify({"status": "ok", **result})


# ----------------------------------------------
# SOLICITUDES DE ADMIN DE COLLEGE
# ----------------------------------------------
@api_bp.get("/college-admin-requests")
@login_required
@require_admitted
def list_college_admin_requests():
    rows = get_workflow().college_admin_requests()
    return jsonify([college_request_to_dict(r) for r in rows])


@api_bp.post("/college-admin-requests/<int:request_id>/approve")
@login_required
@require_admitted
def approve_college_admin(request_id):
    result = get_workflow().approve_college_admin_request(request_id, get_current_profile().id)
    current_app.logger.info("College admin request %s approved through the API", request_id)
    return jsonify({"status": "ok", **result})


@api_bp.post("/college-admin-requests/<int:request_id>/reject")
@login_required
@require_admitted
def reject_college_admin(request_id):
    reason = _json_body().get("reason")
    result = get_workflow().reject_college_admin_request(request_id, reason)
    return jsonify({"status": "ok", **result})


# ----------------------------------------------
# CÓDIGOS DE DEPARTAMENTO
# ----------------------------------------------
@api_bp.get("/departments/<int:department_id>/codes")
@login_required
@require_admitted
def list_department_codes(department_id):
    rows = get_workflow().department_codes(department_id)
    return jsonify([c.to_dict() for c in rows])


@api_bp.post("/departments/<int:department_id>/codes")
@login_required
@require_admitted
def create_department_codes(department_id):
    """
    Genera un par nuevo de códigos (alumno / docente).
    Espera JSON opcional: { "expires_in_days": 30 }  (0 = sin vencimiento)
    """
    data = _json_body()
    department = Department.query.get_or_404(department_id)
    expires = data.get("expires_in_days", current_app.config.get("DEFAULT_CODE_EXPIRY_DAYS"))

    result = get_workflow().generate_department_codes(
        department.id,
        department.college_id,
        get_current_profile().id,
        expires,
    )
    return jsonify(result), 201


@api_bp.post("/department-codes/<int:code_id>/toggle")
@login_required
@require_admitted
def toggle_department_code(code_id):
    data = _json_body()
    if "is_active" not in data:
        raise ValidationError("is_active is required.")
    code = get_workflow().set_department_code_active(code_id, bool(data.get("is_active")))
    return jsonify(code.to_dict())


# ----------------------------------------------
# INGRESO CON CÓDIGO
# ----------------------------------------------
@api_bp.post("/departments/join")
@login_required
def join_department():
    """
    Espera JSON: { "join_code": "CSES-ABCD2345" }
    El rol sale del perfil: un alumno sólo puede usar el código de alumnos.
    """
    workflow = get_workflow()
    profile = workflow.session.require_profile()
    result = workflow.join_department_with_code(
        profile.id,
        _json_body().get("join_code"),
        profile.role.value,
    )
    return jsonify({"status": "ok", **result, "state": workflow.session.state().value}), 201


@api_bp.get("/departments/<int:department_id>/join-requests")
@login_required
@require_admitted
def list_join_requests(department_id):
    rows = get_workflow().department_join_requests(department_id)
    return jsonify([join_to_dict(j) for j in rows])


@api_bp.post("/join-requests/<int:join_id>/approve")
@login_required
@require_admitted
def approve_join(join_id):
    result = get_workflow().approve_department_join(join_id, get_current_profile().id)
    return jsonify({"status": "ok", **result})


@api_bp.post("/join-requests/<int:join_id>/reject")
@login_required
@require_admitted
def reject_join(join_id):
    result = get_workflow().reject_department_join(join_id)
    return jsonify({"status": "ok", **result})


# ----------------------------------------------
# MIEMBROS DEL DEPARTAMENTO
# ----------------------------------------------
@api_bp.get("/departments/<int:department_id>/members")
@login_required
@require_admitted
def list_department_members(department_id):
    """
    Alumnos y docentes admitidos del departamento.
    Query opcional: ?role=student | teacher
    """
    rows = get_workflow().department_members(department_id, request.args.get("role"))
    return jsonify([member_to_dict(p) for p in rows])
