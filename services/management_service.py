from __future__ import annotations

import logging
from typing import Mapping

from models import Department, DepartmentRoom, Profile
from services.errors import NotFoundError, ValidationError
from services.join_codes import normalize_join_code
from services.permissions import ProfilePermissions
from services.session_context import WorkflowSession


logger = logging.getLogger(__name__)


def _to_int(raw, field: str, default: int | None = None) -> int | None:
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number.")
    if value < 0:
        raise ValidationError(f"{field} must be >= 0.")
    return value


class ManagementService:
    """
    Altas de la estructura (departamentos, aulas, admins de departamento)
    y actualizaciones propias del perfil.
    """

    def __init__(self, session: WorkflowSession):
        self.session = session

    @property
    def data(self):
        return self.session.data

    def create_department(self, college_id: int, payload: Mapping) -> Department:
        name = (payload.get("name") or "").strip()
        code = normalize_join_code(payload.get("code"))
        if not name or not code:
            raise ValidationError("Name and code are required.")

        if self.data.read_one("colleges", id=college_id) is None:
            raise NotFoundError("College not found.")
        if self.data.read_one("departments", college_id=college_id, code=code) is not None:
            raise ValidationError(f"Department code {code} is already used in this college.")

        department = self.data.write(
            "departments",
            "insert",
            {
                "college_id": college_id,
                "name": name,
                "code": code,
                "description": (payload.get("description") or "").strip() or None,
                "is_active": True,
            },
        )[0]
        logger.info("Department %s (%s) created in college %s", department.id, code, college_id)
        return department

    def create_room(self, department_id: int, payload: Mapping) -> DepartmentRoom:
        room_name = (payload.get("room_name") or "").strip()
        room_code = normalize_join_code(payload.get("room_code"))
        if not room_name or not room_code:
            raise ValidationError("Department, room name and code are required.")

        if self.data.read_one("departments", id=department_id) is None:
            raise NotFoundError("Department not found.")

        profile = self.session.require_profile()
        room = self.data.write(
            "department_rooms",
            "insert",
            {
                "department_id": department_id,
                "room_name": room_name,
                "room_code": room_code,
                "description": (payload.get("description") or "").strip() or None,
                "max_students": _to_int(payload.get("max_students"), "max_students", 100),
                "max_teachers": _to_int(payload.get("max_teachers"), "max_teachers", 10),
                "room_admin": profile.id,
                "is_active": True,
            },
        )[0]
        logger.info("Room %s created in department %s", room.id, department_id)
        return room

    def create_department_admin(self, department_id: int, payload: Mapping) -> dict:
        profile = self.session.require_profile()
        department = self.data.read_one("departments", id=department_id)
        if department is None:
            raise NotFoundError("Department not found.")

        return self.data.call(
            "create_department_admin",
            admin_email=payload.get("email"),
            admin_name=payload.get("name"),
            admin_password=payload.get("password"),
            department_id=department.id,
            college_id=department.college_id,
            assigned_by=profile.id,
        )

    def update_own_name(self, name: str) -> Profile:
        profile = self.session.require_profile()
        name = (name or "").strip()
        if not name:
            raise ValidationError("The name cannot be empty.")
        self.data.write("profiles", "update", {"name": name}, {"id": profile.id})
        return self.session.refresh()

    # ----------------------------------------------
    # Lecturas del college
    # ----------------------------------------------
    def _require_college_manager(self, college_id: int) -> None:
        profile = self.session.require_profile()
        if self.data.read_one("colleges", id=college_id) is None:
            raise NotFoundError("College not found.")
        ProfilePermissions.require(ProfilePermissions.can_manage_college(profile, college_id))

    def college_rooms(self, college_id: int) -> list[DepartmentRoom]:
        self._require_college_manager(college_id)
        departments = self.data.read("departments", {"college_id": college_id})
        if not departments:
            return []
        return self.data.read(
            "department_rooms",
            {"department_id": [d.id for d in departments], "is_active": True},
            order="room_name",
        )

    def college_users(self, college_id: int) -> list[Profile]:
        self._require_college_manager(college_id)
        return self.data.read(
            "profiles",
            {"college_id": college_id, "is_active": True, "pending_approval": False},
            order="name",
        )

    def stats(self, procedure: str, **args):
        return self.data.call(procedure, **args)
