from __future__ import annotations

import secrets

# Sin caracteres ambiguos (0/O, 1/I) para que se puedan dictar.
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def normalize_join_code(raw: str | None) -> str:
    """
    Forma canónica que se usa al guardar y al buscar códigos.
    """
    return (raw or "").strip().upper()


def generate_code(length: int, prefix: str | None = None) -> str:
    token = "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
    if prefix:
        return f"{normalize_join_code(prefix)}-{token}"
    return token


def generate_code_pair(length: int, department_code: str | None = None) -> tuple[str, str]:
    """
    Devuelve (student_code, teacher_code). El prefijo S/T los hace distintos.
    """
    base = normalize_join_code(department_code)
    return (
        generate_code(length, prefix=f"{base}S"),
        generate_code(length, prefix=f"{base}T"),
    )
