"""
CampusConnect - configuración y fixtures de tests
"""
import itertools
from types import SimpleNamespace

import pytest

from app import create_app
from config import TestConfig
from extensions import db
from models import College, Department, DetailedRole, Profile, RoleEnum, User
from services import ApprovalWorkflow, ManagementService, WorkflowSession

DEFAULT_PASSWORD = "secret123"


@pytest.fixture
def app():
    """App con base SQLite en memoria, creada de cero en cada test"""
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_account(app):
    """Crea una cuenta (sin perfil) con la metadata de registro indicada"""
    counter = itertools.count(1)

    def _make(email=None, password=DEFAULT_PASSWORD, **metadata):
        user = User(email=email or f"user{next(counter)}@campus.edu", signup_metadata=metadata)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_profile(make_account):
    """Crea cuenta + perfil ya persistido, salteando el IdentityResolver"""

    def _make(role=RoleEnum.STUDENT, name="Test User", email=None, **fields):
        user = make_account(email=email, name=name, role=role.value)
        values = {"is_active": True, "pending_approval": False, "detailed_role": role.value}
        values.update(fields)
        profile = Profile(id=user.id, name=name, role=role, **values)
        db.session.add(profile)
        db.session.commit()
        return profile

    return _make


@pytest.fixture
def open_session(app):
    def _open(profile_or_user):
        user = profile_or_user if isinstance(profile_or_user, User) else profile_or_user.user
        return WorkflowSession.open(user)

    return _open


@pytest.fixture
def workflow_for(open_session):
    def _workflow(profile_or_user):
        return ApprovalWorkflow(open_session(profile_or_user))

    return _workflow


@pytest.fixture
def management_for(open_session):
    def _management(profile_or_user):
        return ManagementService(open_session(profile_or_user))

    return _management


@pytest.fixture
def campus(make_profile):
    """
    College activo con un departamento y sus autoridades:
    super admin, admin del college y HOD del departamento.
    """
    college = College(name="Demo College", code="DEMO", is_active=True)
    db.session.add(college)
    db.session.flush()

    department = Department(college_id=college.id, name="Computer Science", code="CSE", is_active=True)
    other_department = Department(college_id=college.id, name="Mechanical", code="MEC", is_active=True)
    db.session.add_all([department, other_department])
    db.session.commit()

    super_admin = make_profile(
        RoleEnum.ADMIN,
        name="Super",
        email="super@campus.edu",
        detailed_role=DetailedRole.SUPER_ADMIN.value,
    )
    college_admin = make_profile(
        RoleEnum.ADMIN,
        name="College Admin",
        email="admin@demo.edu",
        detailed_role=DetailedRole.COLLEGE_ADMIN.value,
        college_id=college.id,
    )
    hod = make_profile(
        RoleEnum.TEACHER,
        name="HOD",
        email="hod@demo.edu",
        detailed_role=DetailedRole.HOD.value,
        is_hod=True,
        college_id=college.id,
        department_id=department.id,
    )

    return SimpleNamespace(
        college=college,
        department=department,
        other_department=other_department,
        super_admin=super_admin,
        college_admin=college_admin,
        hod=hod,
    )


@pytest.fixture
def login(client):
    """Loguea por HTTP con el password por defecto"""

    def _login(email, password=DEFAULT_PASSWORD):
        return client.post("/auth/login", json={"email": email, "password": password})

    return _login
