"""
Tests del ingreso a departamentos con código y su aprobación
"""
from datetime import datetime, timedelta

import pytest

from extensions import db
from models import DepartmentCode, DetailedRole, PendingDepartmentJoin, Profile, RoleEnum
from services import InvalidCodeError, ValidationError, WorkflowState


@pytest.fixture
def codes(campus, workflow_for):
    hod = campus.hod
    return workflow_for(hod).generate_department_codes(campus.department.id, campus.college.id, hod.id, 0)


@pytest.fixture
def student(make_profile):
    return make_profile(RoleEnum.STUDENT, name="Stu")


@pytest.fixture
def teacher(make_profile):
    return make_profile(RoleEnum.TEACHER, name="Tea")


def _join(workflow, profile, code, role=None):
    return workflow.join_department_with_code(profile.id, code, role or profile.role.value)


class TestJoinRequest:

    def test_student_code_creates_pending_request(self, campus, codes, student, workflow_for):
        workflow = workflow_for(student)

        result = _join(workflow, student, codes["student_code"])

        join = db.session.get(PendingDepartmentJoin, result["join_id"])
        assert join.status == "pending"
        assert join.department_id == campus.department.id
        assert join.college_id == campus.college.id
        assert join.user_role == "student"
        assert workflow.session.state() is WorkflowState.PENDING_JOIN_APPROVAL
        # Pedir ingreso no da membresía.
        assert db.session.get(Profile, student.id).department_id is None

    def test_lower_case_input_matches_stored_code(self, codes, student, workflow_for):
        result = _join(workflow_for(student), student, "  " + codes["student_code"].lower() + " ")
        assert db.session.get(PendingDepartmentJoin, result["join_id"]).join_code == codes["student_code"]

    def test_teacher_code_works_for_teachers(self, codes, teacher, workflow_for):
        result = _join(workflow_for(teacher), teacher, codes["teacher_code"])
        assert db.session.get(PendingDepartmentJoin, result["join_id"]).user_role == "teacher"

    def test_student_cannot_use_the_teacher_code(self, codes, student, workflow_for):
        with pytest.raises(InvalidCodeError):
            _join(workflow_for(student), student, codes["teacher_code"])
        assert PendingDepartmentJoin.query.count() == 0

    def test_role_must_match_the_profile(self, codes, student, workflow_for):
        with pytest.raises(PermissionError):
            _join(workflow_for(student), student, codes["teacher_code"], role="teacher")

    def test_admin_role_cannot_join_with_a_code(self, codes, student, workflow_for):
        with pytest.raises(ValidationError):
            _join(workflow_for(student), student, codes["student_code"], role="admin")

    def test_expired_code_is_invalid_even_if_active(self, codes, student, workflow_for):
        code = db.session.get(DepartmentCode, codes["id"])
        code.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.session.commit()

        with pytest.raises(InvalidCodeError):
            _join(workflow_for(student), student, codes["student_code"])

    def test_deactivated_code_is_invalid(self, campus, codes, student, workflow_for):
        workflow_for(campus.hod).set_department_code_active(codes["id"], False)

        with pytest.raises(InvalidCodeError):
            _join(workflow_for(student), student, codes["student_code"])

    def test_unknown_code_is_invalid(self, codes, student, workflow_for):
        with pytest.raises(InvalidCodeError):
            _join(workflow_for(student), student, "CSES-NOPE2345")

    def test_empty_code_is_rejected_before_lookup(self, student, workflow_for):
        with pytest.raises(ValidationError):
            _join(workflow_for(student), student, "   ")

    def test_cannot_request_for_someone_else(self, codes, student, teacher, workflow_for):
        with pytest.raises(PermissionError):
            workflow_for(teacher).join_department_with_code(student.id, codes["student_code"], "student")

    def test_members_cannot_join_again(self, campus, codes, make_profile, workflow_for):
        member = make_profile(RoleEnum.STUDENT, department_id=campus.other_department.id)
        with pytest.raises(ValidationError):
            _join(workflow_for(member), member, codes["student_code"])

    def test_duplicate_requests_are_kept(self, codes, student, workflow_for):
        workflow = workflow_for(student)
        _join(workflow, student, codes["student_code"])
        _join(workflow, student, codes["student_code"])

        rows = PendingDepartmentJoin.query.filter_by(user_id=student.id).all()
        assert len(rows) == 2
        assert {r.status for r in rows} == {"pending"}


class TestJoinReview:

    @pytest.fixture
    def join_id(self, codes, student, workflow_for):
        return _join(workflow_for(student), student, codes["student_code"])["join_id"]

    def test_hod_approval_grants_membership(self, campus, student, join_id, workflow_for, open_session):
        hod = campus.hod

        workflow_for(hod).approve_department_join(join_id, hod.id)

        join = db.session.get(PendingDepartmentJoin, join_id)
        assert join.status == "approved"
        assert join.reviewed_by == hod.id

        profile = db.session.get(Profile, student.id)
        assert profile.department_id == campus.department.id
        assert profile.college_id == campus.college.id
        assert profile.is_active is True
        assert profile.pending_approval is False
        assert open_session(student).state() is WorkflowState.ACTIVE

    def test_approving_one_duplicate_leaves_the_other_pending(self, campus, codes, student, join_id, workflow_for):
        second_id = _join(workflow_for(student), student, codes["student_code"])["join_id"]

        workflow_for(campus.hod).approve_department_join(join_id, campus.hod.id)

        assert db.session.get(PendingDepartmentJoin, second_id).status == "pending"

    def test_other_department_hod_cannot_approve(self, campus, join_id, make_profile, workflow_for):
        other_hod = make_profile(
            RoleEnum.TEACHER,
            detailed_role=DetailedRole.HOD.value,
            is_hod=True,
            college_id=campus.college.id,
            department_id=campus.other_department.id,
        )
        with pytest.raises(PermissionError):
            workflow_for(other_hod).approve_department_join(join_id, other_hod.id)

        assert db.session.get(PendingDepartmentJoin, join_id).status == "pending"

    def test_college_admin_is_not_a_department_reviewer(self, campus, join_id, workflow_for):
        admin = campus.college_admin
        with pytest.raises(PermissionError):
            workflow_for(admin).approve_department_join(join_id, admin.id)
        assert db.session.get(PendingDepartmentJoin, join_id).status == "pending"

    def test_approver_id_must_be_the_caller(self, campus, join_id, workflow_for):
        with pytest.raises(PermissionError):
            workflow_for(campus.hod).approve_department_join(join_id, campus.college_admin.id)

    def test_department_admin_can_approve(self, campus, student, join_id, management_for, workflow_for):
        created = management_for(campus.college_admin).create_department_admin(
            campus.department.id,
            {"email": "dept.admin@demo.edu", "name": "Dept Admin", "password": "secret123"},
        )
        dept_admin = db.session.get(Profile, created["user_id"])

        workflow_for(dept_admin).approve_department_join(join_id, dept_admin.id)

        assert db.session.get(Profile, student.id).department_id == campus.department.id

    def test_rejection_returns_student_to_membership(self, campus, student, join_id, workflow_for, open_session):
        workflow_for(campus.hod).reject_department_join(join_id)

        join = db.session.get(PendingDepartmentJoin, join_id)
        assert join.status == "rejected"
        assert join.reviewed_by == campus.hod.id
        assert open_session(student).state() is WorkflowState.PENDING_MEMBERSHIP

    def test_processed_requests_cannot_be_reviewed_again(self, campus, join_id, workflow_for):
        workflow = workflow_for(campus.hod)
        workflow.reject_department_join(join_id)

        with pytest.raises(ValidationError):
            workflow.approve_department_join(join_id, campus.hod.id)

    def test_reviewers_can_list_requests(self, campus, join_id, student, workflow_for):
        rows = workflow_for(campus.hod).department_join_requests(campus.department.id)
        assert [r.id for r in rows] == [join_id]

        with pytest.raises(PermissionError):
            workflow_for(student).department_join_requests(campus.department.id)


class TestApplicantsCannotJoinWithCodes:

    @pytest.fixture
    def college_admin_applicant(self, make_profile):
        return make_profile(
            RoleEnum.STUDENT,
            name="Applicant",
            detailed_role=DetailedRole.COLLEGE_ADMIN.value,
            is_active=False,
            pending_approval=True,
        )

    @pytest.fixture
    def hod_applicant(self, campus, make_profile):
        return make_profile(
            RoleEnum.TEACHER,
            name="Would-be HOD",
            detailed_role=DetailedRole.HOD.value,
            is_hod=True,
            college_id=campus.college.id,
            is_active=False,
            pending_approval=True,
        )

    def test_pending_college_admin_cannot_use_the_student_code(self, codes, college_admin_applicant, workflow_for):
        with pytest.raises(ValidationError):
            _join(workflow_for(college_admin_applicant), college_admin_applicant, codes["student_code"])
        assert PendingDepartmentJoin.query.count() == 0

    def test_hod_applicant_cannot_use_the_teacher_code(self, codes, hod_applicant, workflow_for):
        with pytest.raises(ValidationError):
            _join(workflow_for(hod_applicant), hod_applicant, codes["teacher_code"])
        assert PendingDepartmentJoin.query.count() == 0

    def test_rejected_hod_cannot_use_the_teacher_code(self, codes, make_profile, workflow_for):
        rejected = make_profile(
            RoleEnum.TEACHER,
            detailed_role=DetailedRole.REJECTED_HOD.value,
            is_hod=True,
            is_active=True,
        )
        with pytest.raises(ValidationError):
            _join(workflow_for(rejected), rejected, codes["teacher_code"])

    @pytest.mark.parametrize("applicant_fixture", ["college_admin_applicant", "hod_applicant"])
    def test_approval_refuses_requests_from_applicants(self, request, campus, applicant_fixture, workflow_for):
        applicant = request.getfixturevalue(applicant_fixture)
        # Fila cargada por fuera del procedimiento de ingreso.
        join = PendingDepartmentJoin(
            user_id=applicant.id,
            department_id=campus.department.id,
            college_id=campus.college.id,
            join_code="CSES-LEGACY234",
            user_role=applicant.role.value,
            status="pending",
        )
        db.session.add(join)
        db.session.commit()
        join_id = join.id

        with pytest.raises(ValidationError):
            workflow_for(campus.hod).approve_department_join(join_id, campus.hod.id)

        profile = db.session.get(Profile, applicant.id)
        assert profile.department_id is None
        assert profile.is_active is False
        assert profile.pending_approval is True
        assert db.session.get(PendingDepartmentJoin, join_id).status == "pending"
