"""
Tests del Dashboard Router
"""
from types import SimpleNamespace

import pytest

from models import Profile, RoleEnum
from services import AdminScope, ViewKind, admin_scope, route


def _profile(role=RoleEnum.STUDENT, detailed_role=None, **fields):
    values = {
        "id": 7,
        "name": "Router",
        "role": role,
        "detailed_role": detailed_role if detailed_role is not None else role.value,
        "is_active": True,
        "pending_approval": False,
        "college_id": None,
        "department_id": None,
    }
    values.update(fields)
    return Profile(**values)


class TestRoute:

    def test_missing_profile_gets_pending_view(self):
        assert route(None) is ViewKind.PENDING

    @pytest.mark.parametrize("role,view", [
        (RoleEnum.STUDENT, ViewKind.STUDENT),
        (RoleEnum.TEACHER, ViewKind.TEACHER),
        (RoleEnum.ADMIN, ViewKind.ADMIN),
    ])
    def test_each_role_gets_its_dashboard(self, role, view):
        assert route(_profile(role)) is view

    @pytest.mark.parametrize("role", list(RoleEnum))
    @pytest.mark.parametrize("is_active", [True, False])
    def test_pending_profiles_never_get_an_authenticated_view(self, role, is_active):
        profile = _profile(role, is_active=is_active, pending_approval=True)
        assert route(profile) is ViewKind.PENDING

    def test_unknown_role_is_unrecognized(self):
        legacy = SimpleNamespace(role="parent", pending_approval=False, detailed_role=None, college_id=None)
        assert route(legacy) is ViewKind.UNRECOGNIZED

    def test_role_given_as_plain_string_is_accepted(self):
        legacy = SimpleNamespace(role="teacher", pending_approval=False)
        assert route(legacy) is ViewKind.TEACHER


class TestAdminScope:

    def test_admin_without_college_is_super_admin(self):
        assert admin_scope(_profile(RoleEnum.ADMIN, "super_admin")) is AdminScope.SUPER_ADMIN

    def test_admin_with_college_is_college_admin(self):
        profile = _profile(RoleEnum.ADMIN, "college_admin", college_id=3)
        assert admin_scope(profile) is AdminScope.COLLEGE_ADMIN

    def test_department_admin(self):
        profile = _profile(RoleEnum.ADMIN, "department_admin", college_id=3, department_id=9)
        assert admin_scope(profile) is AdminScope.DEPARTMENT_ADMIN

    def test_non_admins_have_no_scope(self):
        assert admin_scope(_profile(RoleEnum.TEACHER, "hod", department_id=9)) is None

    def test_pending_admin_has_no_scope(self):
        profile = _profile(RoleEnum.ADMIN, "college_admin", pending_approval=True)
        assert admin_scope(profile) is None
