from __future__ import annotations

import logging
from typing import Mapping

from models import College, CollegeAdminRequest, DetailedRole, RequestStatus, RoleEnum
from services.errors import NotFoundError, ValidationError
from services.join_codes import normalize_join_code
from services.permissions import ProfilePermissions
from services.session_context import WorkflowSession


logger = logging.getLogger(__name__)

COLLEGE_INFO_REQUIRED = ("college_name", "college_code")
ADMIN_INFO_REQUIRED = ("admin_name", "admin_email", "admin_password")


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


class ApprovalWorkflow:
    """
    Operaciones que disparan transiciones del flujo de aprobación.

    Las transiciones que tocan más de una entidad son siempre un único
    DataService.call (una transacción del lado servidor). Las de una sola
    fila usan DataService.write y pasan por las políticas de fila.
    """

    def __init__(self, session: WorkflowSession):
        self.session = session

    @property
    def data(self):
        return self.session.data

    def _caller(self):
        return self.session.require_profile()

    # ----------------------------------------------
    # Admin de college
    # ----------------------------------------------
    def submit_college_admin_request(
        self,
        college_info: Mapping,
        admin_info: Mapping,
    ) -> CollegeAdminRequest:
        profile = self._caller()
        code = self.validate_college_admin_submission(self.data, college_info, admin_info)

        if profile.refinement != DetailedRole.COLLEGE_ADMIN or not profile.pending_approval:
            raise ValidationError("This account is not awaiting college admin approval.")

        payload = {
            "user_id": profile.id,
            "college_name": _clean(college_info.get("college_name")),
            "college_code": code,
            "college_address": _clean(college_info.get("college_address")) or None,
            "website": _clean(college_info.get("website")) or None,
            "admin_name": _clean(admin_info.get("admin_name")),
            "admin_email": _clean(admin_info.get("admin_email")).lower(),
            "phone": _clean(admin_info.get("phone") or college_info.get("phone")) or None,
            "status": RequestStatus.PENDING.value,
        }
        request = self.data.write("college_admin_requests", "insert", payload)[0]
        logger.info("College admin request %s submitted by %s for %s", request.id, profile.id, code)
        return request

    @staticmethod
    def validate_college_admin_submission(data, college_info: Mapping, admin_info: Mapping) -> str:
        """
        Chequeos previos a crear la cuenta del solicitante. Devuelve el código
        de college ya normalizado.
        """
        missing = [f for f in COLLEGE_INFO_REQUIRED if not _clean(college_info.get(f))]
        missing += [f for f in ADMIN_INFO_REQUIRED if not _clean(admin_info.get(f))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        code = normalize_join_code(college_info.get("college_code"))
        if data.read_one("colleges", code=code) is not None:
            raise ValidationError(f"A college with code {code} already exists.")
        if data.read_one("college_admin_requests", college_code=code, status=RequestStatus.PENDING.value):
            raise ValidationError(f"A request for college code {code} is already pending.")
        return code

    def approve_college_admin_request(self, request_id: int, approver_id: int) -> dict:
        return self.data.call(
            "approve_college_admin_request",
            request_id=request_id,
            approver_id=approver_id,
        )

    def reject_college_admin_request(self, request_id: int, reason: str | None = None) -> dict:
        return self.data.call(
            "reject_college_admin_request",
            request_id=request_id,
            rejection_reason=reason,
        )

    # ----------------------------------------------
    # HOD
    # ----------------------------------------------
    def submit_hod_college_selection(self, college_id: int):
        profile = self._caller()
        if not profile.is_hod_track or profile.refinement.is_rejected:
            raise ValidationError("Only HOD applicants can select a college.")
        if profile.department_id is not None:
            raise ValidationError("You are already assigned to a department.")

        college = self.data.read_one("colleges", id=college_id)
        if college is None or not college.is_active:
            raise ValidationError("Please select an active college.")

        rows = self.data.write("profiles", "update", {"college_id": college.id}, {"id": profile.id})
        self.session.refresh()
        logger.info("HOD applicant %s selected college %s", profile.id, college.id)
        return rows[0]

    def approve_hod_request(self, user_id: int, department_id: int) -> dict:
        return self.data.call("approve_hod_request", user_id=user_id, department_id=department_id)

    def reject_hod_request(self, user_id: int) -> dict:
        return self.data.call("reject_hod_request", user_id=user_id)

    def hod_requests(self, college_id: int) -> list[dict]:
        return self.data.call("get_hod_requests", college_id=college_id)

    # ----------------------------------------------
    # Códigos e ingresos
    # ----------------------------------------------
    def generate_department_codes(
        self,
        department_id: int,
        college_id: int,
        created_by: int,
        expires_in_days: int | None = None,
    ) -> dict:
        return self.data.call(
            "generate_department_codes",
            department_id=department_id,
            college_id=college_id,
            created_by=created_by,
            expires_in_days=expires_in_days,
        )

    def set_department_code_active(self, code_id: int, is_active: bool):
        rows = self.data.write("department_codes", "update", {"is_active": bool(is_active)}, {"id": code_id})
        if not rows:
            raise NotFoundError("Department code not found.")
        return rows[0]

    def join_department_with_code(self, user_id: int, join_code: str, user_role: str) -> dict:
        if not _clean(join_code):
            raise ValidationError("Please enter the join code.")
        return self.data.call(
            "join_department_with_code",
            user_id=user_id,
            join_code=join_code,
            user_role=user_role,
        )

    def approve_department_join(self, join_id: int, approver_id: int) -> dict:
        return self.data.call("approve_department_join", join_id=join_id, approver_id=approver_id)

    def reject_department_join(self, join_id: int) -> dict:
        return self.data.call("reject_department_join", join_id=join_id)

    # ----------------------------------------------
    # Lecturas de apoyo
    # ----------------------------------------------
    def active_colleges(self) -> list[College]:
        return self.data.read("colleges", {"is_active": True}, order="name")

    def college_admin_requests(self) -> list[CollegeAdminRequest]:
        ProfilePermissions.require(ProfilePermissions.is_super_admin(self._caller()))
        return self.data.read("college_admin_requests", order="-created_at")

    def department_join_requests(self, department_id: int) -> list:
        self._require_department_access(department_id)
        return self.data.read("pending_department_joins", {"department_id": department_id}, order="-created_at")

    def department_codes(self, department_id: int) -> list:
        self._require_department_access(department_id)
        return self.data.read("department_codes", {"department_id": department_id}, order="-created_at")

    def department_members(self, department_id: int, role: str | None = None) -> list:
        """
        Alumnos y docentes admitidos del departamento. role filtra por
        "student" o "teacher"; sin role devuelve ambos.
        """
        self._require_department_access(department_id)
        if role in (None, ""):
            roles = [RoleEnum.STUDENT, RoleEnum.TEACHER]
        elif role in (RoleEnum.STUDENT.value, RoleEnum.TEACHER.value):
            roles = [RoleEnum(role)]
        else:
            raise ValidationError("role must be student or teacher.")

        return self.data.read(
            "profiles",
            {
                "department_id": department_id,
                "role": roles,
                "is_active": True,
                "pending_approval": False,
            },
            order="name",
        )

    def _require_department_access(self, department_id: int) -> None:
        caller = self._caller()
        department = self.data.read_one("departments", id=department_id)
        if department is None:
            raise NotFoundError("Department not found.")
        ProfilePermissions.require(
            ProfilePermissions.is_department_manager(caller, department.id)
            or ProfilePermissions.can_manage_college(caller, department.college_id)
        )
