"""
Tests del IdentityResolver y del contexto de sesión
"""
import pytest

from extensions import db
from models import DetailedRole, Profile, RoleEnum
from services import (
    DataService,
    IdentityResolver,
    TransientServiceError,
    ViewKind,
    WorkflowSession,
    WorkflowState,
)


class TestProfileCreation:

    def test_teacher_signup_creates_active_profile_without_department(self, make_account, open_session):
        user = make_account(email="t1@x.edu", role="teacher")

        session = open_session(user)
        profile = session.profile

        assert profile.id == user.id
        assert profile.role is RoleEnum.TEACHER
        assert profile.detailed_role == "teacher"
        assert profile.is_active is True
        assert profile.pending_approval is False
        assert profile.department_id is None
        assert session.state() is WorkflowState.PENDING_MEMBERSHIP

    def test_resolving_twice_keeps_one_profile(self, make_account):
        user = make_account(role="student")

        first = IdentityResolver(DataService(account_id=user.id)).resolve(user)
        second = IdentityResolver(DataService(account_id=user.id)).resolve(user)

        assert first.id == second.id == user.id
        assert Profile.query.filter_by(id=user.id).count() == 1

    def test_creation_after_a_concurrent_insert_reuses_the_row(self, make_account, monkeypatch):
        user = make_account(name="Loser", role="teacher")

        # El otro request ya insertó la fila, pero esta sesión no la ve.
        winner = Profile(id=user.id, name="Winner", role=RoleEnum.STUDENT, detailed_role="student")
        db.session.add(winner)
        db.session.commit()
        db.session.expunge(winner)

        original_read = DataService.read
        reads = []

        def stale_first_read(self, entity, filters=None, order=None):
            reads.append(entity)
            if len(reads) == 1:
                return []
            return original_read(self, entity, filters, order)

        monkeypatch.setattr(DataService, "read", stale_first_read)
        # El upsert tampoco encuentra la fila y va directo al INSERT.
        monkeypatch.setattr(
            DataService, "_upsert", lambda self, entity, model, changes: self._insert(entity, model, changes)
        )

        profile = IdentityResolver(DataService(account_id=user.id)).resolve(user)

        assert len(reads) == 2
        assert profile.id == user.id
        assert profile.name == "Winner"
        assert profile.role is RoleEnum.STUDENT
        assert Profile.query.count() == 1

    @pytest.mark.parametrize("raw_role", ["Teacher", "parent", None])
    def test_unknown_signup_role_defaults_to_student(self, make_account, open_session, raw_role):
        user = make_account(role=raw_role)
        assert open_session(user).profile.role is RoleEnum.STUDENT

    def test_admin_signup_gets_super_admin_refinement(self, make_account, open_session):
        profile = open_session(make_account(role="admin")).profile
        assert profile.role is RoleEnum.ADMIN
        assert profile.refinement is DetailedRole.SUPER_ADMIN

    def test_college_request_signup_is_inert(self, make_account, open_session):
        session = open_session(make_account(name="Priya", role="student", college_request=True))
        profile = session.profile

        assert profile.refinement is DetailedRole.COLLEGE_ADMIN
        assert profile.role is RoleEnum.STUDENT
        assert profile.is_active is False
        assert profile.pending_approval is True
        assert session.state() is WorkflowState.PENDING_COLLEGE_ADMIN_APPROVAL
        assert session.view() is ViewKind.PENDING

    def test_hod_application_keeps_application_details(self, make_account, open_session):
        user = make_account(
            name="Ravi",
            hod_application=True,
            employee_id="EMP-42",
            qualification="PhD",
            experience="12 years",
        )
        session = open_session(user)
        profile = session.profile

        assert profile.role is RoleEnum.TEACHER
        assert profile.refinement is DetailedRole.HOD
        assert profile.is_hod is True
        assert profile.pending_approval is True
        assert profile.employee_id == "EMP-42"
        assert profile.qualification == "PhD"
        assert session.state() is WorkflowState.PENDING_HOD_COLLEGE_ASSIGNMENT

    def test_display_name_falls_back_to_email_local_part(self, make_account, open_session):
        profile = open_session(make_account(email="maria.lopez@campus.edu")).profile
        assert profile.name == "maria.lopez"

    def test_display_name_prefers_full_name_over_email(self, make_account):
        user = make_account(email="x@campus.edu", full_name="Maria Lopez")
        assert IdentityResolver.display_name(user) == "Maria Lopez"


class TestDegradedProfile:

    def test_store_failure_returns_in_memory_student_profile(self, make_account, monkeypatch):
        user = make_account(name="Offline", role="teacher")

        def unavailable(self, entity, filters=None, order=None):
            raise TransientServiceError()

        monkeypatch.setattr(DataService, "read", unavailable)
        session = WorkflowSession.open(user)

        assert session.profile.is_degraded is True
        assert session.profile.role is RoleEnum.STUDENT
        assert session.profile.name == "Offline"
        assert session.data.caller is None
        assert session.pending_joins() == []

        monkeypatch.undo()
        assert Profile.query.count() == 0
        assert session.profile not in db.session


class TestWorkflowSession:

    def test_close_clears_the_context(self, make_account, open_session):
        session = open_session(make_account(role="student"))
        assert session.is_open

        session.close()

        assert session.profile is None
        assert session.data.caller is None
        assert session.state() is WorkflowState.UNRESOLVED
        with pytest.raises(PermissionError):
            session.require_profile()

    def test_refresh_reloads_profile_after_changes(self, make_account, open_session):
        session = open_session(make_account(name="Old", role="student"))

        session.data.write("profiles", "update", {"name": "New"}, {"id": session.profile.id})

        assert session.refresh().name == "New"
