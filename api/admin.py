# api/admin.py

from flask import Blueprint, abort, current_app, jsonify, request
from flask_login import login_required

from api.utils import department_to_dict, member_to_dict, room_to_dict
from api.utils.permissions import get_management, require_admitted, require_roles

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")

# Procedimientos de estadísticas que se pueden pedir por nombre.
STATS_PROCEDURES = {
    "super-admin": "get_super_admin_stats",
    "admin": "get_admin_stats",
    "college": "get_college_stats",
    "departments": "get_department_stats",
}


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@admin_bp.post("/colleges/<int:college_id>/departments")
@login_required
@require_admitted
@require_roles("admin")
def create_department(college_id):
    """
    Alta de un departamento en un college.
    Espera JSON: { "name": "...", "code": "CSE", "description": "..." }
    """
    department = get_management().create_department(college_id, _json_body())
    return jsonify(department_to_dict(department)), 201


@admin_bp.post("/departments/<int:department_id>/rooms")
@login_required
@require_admitted
def create_room(department_id):
    """
    Alta de un aula. La puede crear el admin del college o quien gestiona
    el departamento (HOD / admin de departamento).
    """
    room = get_management().create_room(department_id, _json_body())
    return jsonify(room_to_dict(room)), 201


@admin_bp.get("/colleges/<int:college_id>/rooms")
@login_required
@require_admitted
def list_college_rooms(college_id):
    rooms = get_management().college_rooms(college_id)
    return jsonify([room_to_dict(r) for r in rooms])


@admin_bp.get("/colleges/<int:college_id>/users")
@login_required
@require_admitted
def list_college_users(college_id):
    """
    Usuarios activos del college (alumnos, docentes y admins).
    """
    users = get_management().college_users(college_id)
    return jsonify([member_to_dict(p) for p in users])


@admin_bp.post("/departments/<int:department_id>/admins")
@login_required
@require_admitted
@require_roles("admin")
def create_department_admin(department_id):
    """
    Crea cuenta + perfil de un admin de departamento.
    Espera JSON: { "email": "...", "name": "...", "password": "..." }
    """
    result = get_management().create_department_admin(department_id, _json_body())
    current_app.logger.info("Department admin %s created for department %s", result["user_id"], department_id)
    return jsonify({"status": "ok", **result}), 201


@admin_bp.get("/stats/<string:name>")
@login_required
@require_admitted
def stats(name):
    procedure = STATS_PROCEDURES.get(name)
    if procedure is None:
        abort(404)

    args = {}
    if name == "college" and request.args.get("college_id"):
        args["college_uuid"] = request.args.get("college_id", type=int)
    return jsonify(get_management().stats(procedure, **args))
