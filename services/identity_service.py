from __future__ import annotations

import logging

from models import DetailedRole, Profile, RoleEnum, User
from services.data_service import DataService
from services.errors import ConflictError, TransientServiceError


logger = logging.getLogger(__name__)

HOD_APPLICATION_FIELDS = ("employee_id", "qualification", "experience", "hod_details")


class IdentityResolver:
    """
    Mapea una cuenta autenticada a su Profile.
    Si no existe, lo crea a partir de la metadata de registro.
    """

    def __init__(self, data: DataService):
        self.data = data

    def resolve(self, account: User) -> Profile:
        try:
            profile = self.data.read_one("profiles", id=account.id)
            if profile is not None:
                return profile
            return self._create_profile(account)
        except TransientServiceError as exc:
            logger.warning("Profile lookup for account %s failed, using a degraded profile: %s", account.id, exc)
            return self.degraded_profile(account)

    def _create_profile(self, account: User) -> Profile:
        payload = self.default_profile_payload(account)
        try:
            rows = self.data.write("profiles", "upsert", payload)
        except ConflictError:
            # Otro request creó la fila primero: nos quedamos con esa.
            profile = self.data.read_one("profiles", id=account.id)
            if profile is None:
                raise
            return profile

        profile = rows[0]
        logger.info(
            "Created profile %s (role=%s, detailed_role=%s, pending=%s)",
            profile.id,
            profile.role.value,
            profile.detailed_role,
            profile.pending_approval,
        )
        return profile

    @staticmethod
    def display_name(account: User) -> str:
        metadata = account.metadata_dict
        email = account.email or ""
        return (
            (metadata.get("name") or "").strip()
            or (metadata.get("full_name") or "").strip()
            or email.split("@")[0]
            or "User"
        )

    @staticmethod
    def default_profile_payload(account: User) -> dict:
        metadata = account.metadata_dict
        payload = {"id": account.id, "name": IdentityResolver.display_name(account)}

        if metadata.get("college_request"):
            # Inerte hasta que un super admin apruebe la solicitud.
            payload.update(
                role=RoleEnum.STUDENT,
                detailed_role=DetailedRole.COLLEGE_ADMIN.value,
                is_active=False,
                pending_approval=True,
            )
            return payload

        if metadata.get("hod_application"):
            payload.update(
                role=RoleEnum.TEACHER,
                detailed_role=DetailedRole.HOD.value,
                is_hod=True,
                is_active=False,
                pending_approval=True,
            )
            for field in HOD_APPLICATION_FIELDS:
                value = metadata.get(field)
                if value:
                    payload[field] = str(value).strip()
            return payload

        role = RoleEnum.from_signup(metadata.get("role"))
        payload.update(
            role=role,
            detailed_role=DetailedRole.SUPER_ADMIN.value if role == RoleEnum.ADMIN else role.value,
            is_active=True,
            pending_approval=False,
        )
        return payload

    @staticmethod
    def degraded_profile(account: User) -> Profile:
        """
        Perfil en memoria para no dejar al usuario colgado. No se agrega a la
        sesión de la base y no debe tomarse como registro persistido.
        """
        profile = Profile(
            id=account.id,
            name=IdentityResolver.display_name(account),
            role=RoleEnum.STUDENT,
            detailed_role=RoleEnum.STUDENT.value,
            is_active=True,
            pending_approval=False,
        )
        profile.is_degraded = True
        return profile
