# seeds/basic_seed.py
"""
Seed para demos de CampusConnect.

CREA (o reutiliza si ya existen):
    - Super admin de la plataforma
    - College demo con un departamento y un aula
    - Admin del college, HOD del departamento
    - Un par de códigos de ingreso vigente
    - Alumno y profesor con su pedido de ingreso pendiente

Modo de uso:
    flask seed-demo
    flask seed-super-admin admin@campus.edu admin123

o desde el shell:
    flask shell
    >>> from seeds.basic_seed import run_basic_seed
    >>> run_basic_seed()
"""

from extensions import db
from models import (
    College,
    Department,
    DepartmentCode,
    DepartmentRoom,
    DetailedRole,
    PendingDepartmentJoin,
    Profile,
    RequestStatus,
    RoleEnum,
    User,
)

DEMO_PASSWORDS = {
    "super@demo.edu": "super123",
    "college.admin@demo.edu": "college123",
    "hod@demo.edu": "hod12345",
    "alumno@demo.edu": "alumno123",
    "profe@demo.edu": "profe123",
}

DEMO_STUDENT_CODE = "CSES-DEMO2345"
DEMO_TEACHER_CODE = "CSET-DEMO6789"


def _get_or_create(model, defaults=None, **kwargs):
    instance = model.query.filter_by(**kwargs).first()
    if instance:
        return instance, False

    params = {**kwargs}
    if defaults:
        params.update(defaults)

    instance = model(**params)
    db.session.add(instance)
    return instance, True


def _ensure_user(email, name, role, password=None, **profile_fields):
    user, created = _get_or_create(User, email=email, defaults={"signup_metadata": {"name": name, "role": role.value}})
    if created or (not user.password_hash and password):
        user.set_password(password or DEMO_PASSWORDS.get(email, "changeme123"))
    db.session.flush()

    profile = db.session.get(Profile, user.id)
    if profile is None:
        profile = Profile(id=user.id, name=name, role=role, **profile_fields)
        db.session.add(profile)
        db.session.flush()
    return user, profile


def ensure_super_admin(email, password, name="Super Admin"):
    email = email.strip().lower()
    return _ensure_user(
        email,
        name,
        RoleEnum.ADMIN,
        password=password,
        detailed_role=DetailedRole.SUPER_ADMIN.value,
        is_active=True,
        pending_approval=False,
    )


def run_basic_seed():
    ensure_super_admin("super@demo.edu", DEMO_PASSWORDS["super@demo.edu"])

    college, _ = _get_or_create(
        College,
        code="DEMO",
        defaults={
            "name": "Demo Engineering College",
            "address": "Av. Siempreviva 742",
            "email": "college.admin@demo.edu",
            "is_active": True,
        },
    )
    db.session.flush()

    department, _ = _get_or_create(
        Department,
        college_id=college.id,
        code="CSE",
        defaults={"name": "Computer Science", "description": "Departamento demo", "is_active": True},
    )
    db.session.flush()

    _, college_admin = _ensure_user(
        "college.admin@demo.edu",
        "Demo College Admin",
        RoleEnum.ADMIN,
        detailed_role=DetailedRole.COLLEGE_ADMIN.value,
        college_id=college.id,
        is_active=True,
        pending_approval=False,
    )

    _, hod = _ensure_user(
        "hod@demo.edu",
        "Demo HOD",
        RoleEnum.TEACHER,
        detailed_role=DetailedRole.HOD.value,
        is_hod=True,
        college_id=college.id,
        department_id=department.id,
        employee_id="EMP-001",
        is_active=True,
        pending_approval=False,
    )

    _get_or_create(
        DepartmentRoom,
        department_id=department.id,
        room_code="CSE-A",
        defaults={"room_name": "Aula A", "room_admin": hod.id, "is_active": True},
    )

    _get_or_create(
        DepartmentCode,
        department_id=department.id,
        student_code=DEMO_STUDENT_CODE,
        defaults={
            "college_id": college.id,
            "teacher_code": DEMO_TEACHER_CODE,
            "created_by": hod.id,
            "is_active": True,
        },
    )

    _, student = _ensure_user(
        "alumno@demo.edu",
        "Demo Student",
        RoleEnum.STUDENT,
        detailed_role=RoleEnum.STUDENT.value,
        is_active=True,
        pending_approval=False,
    )
    _, teacher = _ensure_user(
        "profe@demo.edu",
        "Demo Teacher",
        RoleEnum.TEACHER,
        detailed_role=RoleEnum.TEACHER.value,
        is_active=True,
        pending_approval=False,
    )

    for profile, code in ((student, DEMO_STUDENT_CODE), (teacher, DEMO_TEACHER_CODE)):
        _get_or_create(
            PendingDepartmentJoin,
            user_id=profile.id,
            department_id=department.id,
            defaults={
                "college_id": college.id,
                "join_code": code,
                "user_role": profile.role.value,
                "status": RequestStatus.PENDING.value,
            },
        )

    db.session.commit()
    print(f"Seed listo: college {college.code}, admin {college_admin.id}, HOD {hod.id}.")
