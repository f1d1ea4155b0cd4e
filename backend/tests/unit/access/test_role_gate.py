"""
Unit Tests for the role gate
Tests for: role membership, record visibility, navigation and page variants
"""
from types import SimpleNamespace

from prefect_portal.models.user import AppRole
from prefect_portal.modules.access.role_gate import (
    NAVIGATION,
    PageVariant,
    can_open,
    filter_visible,
    is_admin,
    is_in_role,
    page_variant,
    primary_role,
    visible_navigation,
)


def _user(user_id="u1", *roles):
    return SimpleNamespace(id=user_id, roles={AppRole(r) for r in roles})


class TestRoleMembership:
    def test_is_in_role_accepts_enum_and_string(self):
        user = _user("u1", "prefect")

        assert is_in_role(user, AppRole.PREFECT)
        assert is_in_role(user, "prefect")
        assert not is_in_role(user, "admin")

    def test_is_admin(self):
        assert is_admin(_user("u1", "admin", "faculty"))
        assert not is_admin(_user("u1", "student"))

    def test_no_user_has_no_roles(self):
        assert not is_in_role(None, "student")

    def test_primary_role_precedence(self):
        assert primary_role(["student", "prefect"]) == "prefect"
        assert primary_role(["prefect", "faculty"]) == "faculty"
        assert primary_role(["student", "admin", "faculty"]) == "admin"
        assert primary_role([]) is None


class TestFilterVisible:
    records = [
        {"id": "r1", "owner_id": "u1"},
        {"id": "r2", "owner_id": "u2"},
        {"id": "r3", "owner_id": "u1"},
    ]

    def test_admin_sees_everything_in_order(self):
        visible = filter_visible(self.records, _user("u1"), is_admin=True)

        assert visible == self.records

    def test_non_admin_sees_only_own_records(self):
        visible = filter_visible(self.records, _user("u1"), is_admin=False)

        assert [r["id"] for r in visible] == ["r1", "r3"]

    def test_custom_owner_field(self):
        records = [{"id": "a", "prefect_id": "u2"}, {"id": "b", "prefect_id": "u1"}]

        visible = filter_visible(records, _user("u2"), is_admin=False, owner_field="prefect_id")

        assert [r["id"] for r in visible] == ["a"]

    def test_signed_out_sees_nothing(self):
        assert filter_visible(self.records, None, is_admin=False) == []


class TestNavigation:
    def test_student_navigation(self):
        keys = [entry.key for entry in visible_navigation({"student"})]

        assert keys == ["dashboard", "training", "conversations", "complaints", "recruitment", "profile"]
        assert "users" not in keys
        assert "attendance" not in keys

    def test_admin_sees_every_entry(self):
        assert len(visible_navigation({"admin"})) == len(NAVIGATION)

    def test_faculty_sees_evaluations_but_not_user_management(self):
        keys = {entry.key for entry in visible_navigation({"faculty"})}

        assert "evaluations" in keys
        assert "users" not in keys

    def test_union_of_roles(self):
        keys = {entry.key for entry in visible_navigation({"student", "prefect"})}

        assert {"attendance", "duties", "complaints"} <= keys

    def test_can_open_nested_path(self):
        assert can_open("/attendance/123", {"prefect"})
        assert not can_open("/attendance", {"student"})
        assert not can_open("/users", {"faculty"})


class TestPageVariant:
    def test_admin_gets_management(self):
        assert page_variant("complaints", {"admin"}) == PageVariant.MANAGEMENT

    def test_student_gets_self_service(self):
        assert page_variant("complaints", {"student"}) == PageVariant.SELF_SERVICE

    def test_faculty_manages_evaluations_only(self):
        assert page_variant("evaluations", {"faculty"}) == PageVariant.MANAGEMENT
        assert page_variant("attendance", {"faculty"}) == PageVariant.SELF_SERVICE
