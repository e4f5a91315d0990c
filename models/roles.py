import enum


class RoleEnum(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

    @classmethod
    def from_signup(cls, raw) -> "RoleEnum":
        """
        Coincidencia exacta (distingue mayúsculas) contra los valores del
        enum. Cualquier otro valor cae en STUDENT.
        """
        for role in cls:
            if raw == role.value:
                return role
        return cls.STUDENT


class DetailedRole(str, enum.Enum):
    """
    Refinamiento sobre RoleEnum.

    Las filas viejas guardan el nombre del rol ("student", "teacher") o nada;
    eso se interpreta como NONE. Cualquier otro texto desconocido se rechaza.
    """

    NONE = "none"
    HOD = "hod"
    COLLEGE_ADMIN = "college_admin"
    DEPARTMENT_ADMIN = "department_admin"
    SUPER_ADMIN = "super_admin"
    REJECTED_HOD = "rejected_hod"
    REJECTED_COLLEGE_ADMIN = "rejected_college_admin"

    @classmethod
    def parse(cls, raw: str | None) -> "DetailedRole":
        if raw is None:
            return cls.NONE
        value = raw.strip()
        if value in ("", RoleEnum.STUDENT.value, RoleEnum.TEACHER.value):
            return cls.NONE
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown detailed role: {raw!r}")

    @property
    def is_rejected(self) -> bool:
        return self in (DetailedRole.REJECTED_HOD, DetailedRole.REJECTED_COLLEGE_ADMIN)


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
