from __future__ import annotations

from models import DepartmentAdmin, DetailedRole, Profile, RoleEnum
from services.errors import PERMISSION_DENIED_MESSAGE


class ProfilePermissions:
    """
    Chequeos de rol/pertenencia usados por los procedimientos y las
    políticas de fila. Todas las funciones reciben el perfil que llama.
    """

    @staticmethod
    def is_admitted(profile: Profile | None) -> bool:
        return bool(profile and profile.is_active and not profile.pending_approval)

    @staticmethod
    def is_super_admin(profile: Profile | None) -> bool:
        if not ProfilePermissions.is_admitted(profile):
            return False
        return (
            profile.role == RoleEnum.ADMIN
            and profile.college_id is None
            and profile.refinement in (DetailedRole.SUPER_ADMIN, DetailedRole.NONE)
        )

    @staticmethod
    def is_college_admin(profile: Profile | None, college_id: int | None) -> bool:
        if not ProfilePermissions.is_admitted(profile) or college_id is None:
            return False
        return profile.refinement == DetailedRole.COLLEGE_ADMIN and profile.college_id == college_id

    @staticmethod
    def is_department_manager(profile: Profile | None, department_id: int | None) -> bool:
        """
        HOD del departamento o admin de departamento (por perfil o por fila
        activa en department_admin).
        """
        if not ProfilePermissions.is_admitted(profile) or department_id is None:
            return False

        if profile.department_id == department_id and profile.refinement in (
            DetailedRole.HOD,
            DetailedRole.DEPARTMENT_ADMIN,
        ):
            return True

        assignment = DepartmentAdmin.query.filter_by(
            user_id=profile.id,
            department_id=department_id,
            is_active=True,
        ).first()
        return assignment is not None

    @staticmethod
    def can_manage_college(profile: Profile | None, college_id: int | None) -> bool:
        return ProfilePermissions.is_super_admin(profile) or ProfilePermissions.is_college_admin(
            profile, college_id
        )

    @staticmethod
    def require(condition: bool, message: str | None = None) -> None:
        if not condition:
            raise PermissionError(message or PERMISSION_DENIED_MESSAGE)
