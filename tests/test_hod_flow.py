"""
Tests de la postulación HOD: elección de college, aprobación y rechazo
"""
import pytest

from extensions import db
from models import College, Department, DetailedRole, Profile, RoleEnum
from services import ValidationError, ViewKind, WorkflowState
from services.permissions import ProfilePermissions


@pytest.fixture
def applicant(make_account):
    return make_account(
        email="ravi@demo.edu",
        name="Ravi",
        hod_application=True,
        employee_id="EMP-9",
        qualification="PhD",
        experience="10 years",
    )


@pytest.fixture
def applied(campus, applicant, workflow_for):
    workflow = workflow_for(applicant)
    workflow.submit_hod_college_selection(campus.college.id)
    return workflow


@pytest.fixture
def other_college(make_profile):
    college = College(name="Other College", code="OTH", is_active=True)
    db.session.add(college)
    db.session.flush()
    department = Department(college_id=college.id, name="Physics", code="PHY", is_active=True)
    db.session.add(department)
    db.session.commit()
    admin = make_profile(
        RoleEnum.ADMIN,
        name="Other Admin",
        detailed_role=DetailedRole.COLLEGE_ADMIN.value,
        college_id=college.id,
    )
    return college, department, admin


class TestCollegeSelection:

    def test_selection_moves_applicant_to_department_assignment(self, campus, applicant, workflow_for):
        workflow = workflow_for(applicant)
        assert workflow.session.state() is WorkflowState.PENDING_HOD_COLLEGE_ASSIGNMENT

        profile = workflow.submit_hod_college_selection(campus.college.id)

        assert profile.college_id == campus.college.id
        assert workflow.session.state() is WorkflowState.PENDING_DEPARTMENT_ASSIGNMENT
        assert workflow.session.view() is ViewKind.PENDING

    def test_inactive_college_cannot_be_selected(self, applicant, workflow_for):
        closed = College(name="Closed", code="CLS", is_active=False)
        db.session.add(closed)
        db.session.commit()

        with pytest.raises(ValidationError):
            workflow_for(applicant).submit_hod_college_selection(closed.id)

    def test_non_applicants_cannot_select_a_college(self, campus, make_profile, workflow_for):
        student = make_profile(RoleEnum.STUDENT)
        with pytest.raises(ValidationError):
            workflow_for(student).submit_hod_college_selection(campus.college.id)

    def test_students_cannot_set_college_through_direct_writes(self, campus, make_profile, open_session):
        student = make_profile(RoleEnum.STUDENT)
        session = open_session(student)

        with pytest.raises(PermissionError):
            session.data.write("profiles", "update", {"college_id": campus.college.id}, {"id": student.id})
        assert db.session.get(Profile, student.id).college_id is None


class TestHodApproval:

    def test_college_admin_sees_the_application(self, campus, applicant, applied, workflow_for):
        rows = workflow_for(campus.college_admin).hod_requests(campus.college.id)

        assert [r["id"] for r in rows] == [applicant.id]
        assert rows[0]["employee_id"] == "EMP-9"
        assert rows[0]["email"] == "ravi@demo.edu"
        assert rows[0]["college_name"] == "Demo College"

    def test_approval_assigns_department_and_activates(self, campus, applicant, applied, workflow_for, open_session):
        department = campus.other_department

        workflow_for(campus.college_admin).approve_hod_request(applicant.id, department.id)

        profile = db.session.get(Profile, applicant.id)
        assert profile.department_id == department.id
        assert profile.role is RoleEnum.TEACHER
        assert profile.refinement is DetailedRole.HOD
        assert profile.is_active is True
        assert profile.pending_approval is False
        assert ProfilePermissions.is_department_manager(profile, department.id)

        session = open_session(applicant)
        assert session.state() is WorkflowState.ACTIVE
        assert session.view() is ViewKind.TEACHER

    def test_admin_of_another_college_cannot_approve(self, campus, applicant, applied, other_college, workflow_for):
        _, _, other_admin = other_college
        with pytest.raises(PermissionError):
            workflow_for(other_admin).approve_hod_request(applicant.id, campus.other_department.id)
        assert db.session.get(Profile, applicant.id).pending_approval is True

    def test_department_must_belong_to_selected_college(self, campus, applicant, applied, other_college, workflow_for):
        _, foreign_department, _ = other_college
        with pytest.raises(ValidationError):
            workflow_for(campus.super_admin).approve_hod_request(applicant.id, foreign_department.id)

    def test_plain_teachers_cannot_be_approved_as_hod(self, campus, make_profile, workflow_for):
        teacher = make_profile(RoleEnum.TEACHER, college_id=campus.college.id, pending_approval=True)
        with pytest.raises(ValidationError):
            workflow_for(campus.college_admin).approve_hod_request(teacher.id, campus.other_department.id)


class TestHodRejection:

    def test_rejection_is_terminal(self, campus, applicant, applied, workflow_for, open_session):
        workflow_for(campus.college_admin).reject_hod_request(applicant.id)

        profile = db.session.get(Profile, applicant.id)
        assert profile.refinement is DetailedRole.REJECTED_HOD
        assert profile.is_active is False
        assert profile.pending_approval is False

        state = open_session(applicant).state()
        assert state is WorkflowState.REJECTED
        assert not state.is_admitted

    def test_rejected_application_leaves_the_queue(self, campus, applicant, applied, workflow_for):
        admin_workflow = workflow_for(campus.college_admin)
        admin_workflow.reject_hod_request(applicant.id)

        assert admin_workflow.hod_requests(campus.college.id) == []
        with pytest.raises(ValidationError):
            admin_workflow.reject_hod_request(applicant.id)
        with pytest.raises(ValidationError):
            admin_workflow.approve_hod_request(applicant.id, campus.other_department.id)

    def test_rejected_applicant_cannot_pick_another_college(self, campus, applicant, applied, other_college, workflow_for):
        workflow_for(campus.college_admin).reject_hod_request(applicant.id)
        college, _, _ = other_college

        with pytest.raises(ValidationError):
            workflow_for(applicant).submit_hod_college_selection(college.id)

    def test_students_cannot_reject(self, campus, applicant, applied, make_profile, workflow_for):
        student = make_profile(RoleEnum.STUDENT)
        with pytest.raises(PermissionError):
            workflow_for(student).reject_hod_request(applicant.id)

    def test_working_hod_cannot_be_rejected(self, campus, workflow_for, open_session):
        hod = campus.hod
        with pytest.raises(ValidationError):
            workflow_for(campus.college_admin).reject_hod_request(hod.id)

        profile = db.session.get(Profile, hod.id)
        assert profile.refinement is DetailedRole.HOD
        assert profile.is_active is True
        assert open_session(hod).state() is WorkflowState.ACTIVE

    def test_approved_applicant_leaves_the_open_requests(self, campus, applicant, applied, workflow_for):
        admin_workflow = workflow_for(campus.college_admin)
        admin_workflow.approve_hod_request(applicant.id, campus.other_department.id)

        with pytest.raises(ValidationError):
            admin_workflow.reject_hod_request(applicant.id)
        with pytest.raises(ValidationError):
            admin_workflow.approve_hod_request(applicant.id, campus.department.id)
        assert db.session.get(Profile, applicant.id).department_id == campus.other_department.id
