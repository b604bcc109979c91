"""Role-hierarchy guards, visibility scopes and role resolution."""

import pytest

from app.application.services.authorization_service import AuthorizationService
from app.domain.authorization import (
    can_assign_role,
    can_assign_task,
    can_comment_on_task,
    can_delete_task,
    can_edit_task,
    can_perform,
    task_visibility_scope,
)
from app.domain.entities.role import capabilities_from_bag, capabilities_to_bag
from app.domain.entities.user import Actor, UserEntity
from app.domain.enums import Capability, VisibilityKind
from app.domain.exceptions import AuthorizationException
from tests.fakes import (
    ALL_CAPABILITIES,
    InMemoryRoleRepository,
    Org,
    make_role,
    make_task,
)


def test_can_assign_role_follows_managed_edges(org: Org) -> None:
    head = org.roles.roles["role-departmenthead"]
    assert can_assign_role(head, org.roles.roles["role-staff"]) is True
    assert can_assign_role(head, org.roles.roles["role-generalmanager"]) is False


def test_static_role_assigns_any_non_static_role(org: Org) -> None:
    static = org.roles.roles["role-superadmin"]
    for role in org.roles.roles.values():
        assert can_assign_role(static, role) is (not role.is_static)


def test_static_role_is_never_a_target_even_when_listed() -> None:
    static = make_role("superadmin", 99, is_static=True)
    sneaky = make_role("sneaky", 1, manages=("superadmin",))
    assert can_assign_role(sneaky, static) is False


def test_role_containment_for_every_pair(org: Org) -> None:
    """A non-static role R can only reach roles on its managed list."""
    roles = list(org.roles.roles.values())
    for actor_role in roles:
        if actor_role.is_static:
            continue
        for target in roles:
            if target.id not in actor_role.managed_role_ids:
                assert can_assign_role(actor_role, target) is False


def test_can_assign_task_allows_self_assignment(org: Org) -> None:
    actor = org.actor("y")
    assert can_assign_task(actor, actor.id, org.roles.roles["role-generalmanager"]) is True


def test_can_perform_with_enum_and_string_names(org: Org) -> None:
    staff = org.roles.roles["role-staff"]
    assert can_perform(staff, Capability.CREATE_TASKS) is True
    assert can_perform(staff, "createTasks") is True
    assert can_perform(staff, "viewAllTasks") is False


def test_can_perform_fails_closed_on_unknown_name(org: Org) -> None:
    gm = org.roles.roles["role-generalmanager"]
    assert can_perform(gm, "launchRockets") is False


def test_capabilities_from_bag_reports_unknown_names() -> None:
    capabilities, unknown = capabilities_from_bag(
        {"createTasks": True, "viewReports": False, "legacyThing": True}
    )
    assert capabilities == frozenset({Capability.CREATE_TASKS})
    assert unknown == ["legacyThing"]


def test_capabilities_to_bag_lists_every_capability() -> None:
    bag = capabilities_to_bag({Capability.VIEW_ROLES})
    assert set(bag) == set(Capability.values())
    assert bag["viewRoles"] is True
    assert bag["createRoles"] is False


def test_visibility_scope_tiers(org: Org) -> None:
    assert task_visibility_scope(org.actor("gm")).kind == VisibilityKind.ALL
    assert task_visibility_scope(org.actor("admin")).kind == VisibilityKind.ALL
    head_scope = task_visibility_scope(org.actor("head"))
    assert head_scope.kind == VisibilityKind.DEPARTMENT
    assert head_scope.department_id == "ops"
    assert task_visibility_scope(org.actor("x")).kind == VisibilityKind.OWN


def test_department_capability_without_department_falls_back_to_own(org: Org) -> None:
    user = UserEntity(id="u-nodept", name="No Dept", email="nd@corp.test", role_id="role-departmenthead")
    actor = Actor(user=user, role=org.roles.roles["role-departmenthead"])
    assert task_visibility_scope(actor).kind == VisibilityKind.OWN


def test_department_scope_permits(org: Org) -> None:
    scope = task_visibility_scope(org.actor("head"))
    departments = {u.id: u.department_id for u in org.people.values()}
    inside = make_task(org.user("x"), org.user("y"))
    outside = make_task(org.user("gm"), org.user("z"), sno=2)
    forwarded = make_task(
        org.user("gm"), org.user("z"), sno=3, is_forwarded=True, forwarded_by="u-head"
    )
    assert scope.permits(inside, departments.get) is True
    assert scope.permits(outside, departments.get) is False
    assert scope.permits(forwarded, departments.get) is True


def test_own_scope_permits_creator_and_assignee_only(org: Org) -> None:
    scope = task_visibility_scope(org.actor("x"))
    mine = make_task(org.user("head"), org.user("x"))
    others = make_task(org.user("head"), org.user("y"), sno=2)
    assert scope.permits(mine, lambda _: None) is True
    assert scope.permits(others, lambda _: None) is False


def test_task_guards(org: Org) -> None:
    task = make_task(org.user("head"), org.user("x"))
    assert can_edit_task(org.actor("head"), task) is True
    assert can_edit_task(org.actor("x"), task) is False
    assert can_edit_task(org.actor("gm"), task) is True
    assert can_delete_task(org.actor("head"), task) is True
    assert can_delete_task(org.actor("x"), task) is False
    assert can_comment_on_task(org.actor("x"), task) is True
    assert can_comment_on_task(org.actor("z"), task) is False
    assert can_comment_on_task(org.actor("gm"), task) is True


def test_task_giver_may_comment(org: Org) -> None:
    task = make_task(
        org.user("head"), org.user("x"), task_given_by_contact=org.user("z").contact
    )
    assert can_comment_on_task(org.actor("z"), task) is True


async def test_resolve_role_falls_back_to_lowest_privilege(org: Org) -> None:
    authorization = AuthorizationService(org.roles)
    actor = await authorization.resolve_actor(org.user("ghost"))
    assert actor.role.name == "viewer"
    assert actor.role.capabilities == frozenset()


async def test_resolve_role_without_any_roles_is_unprivileged() -> None:
    authorization = AuthorizationService(InMemoryRoleRepository())
    role = await authorization.resolve_role(None)
    assert role.capabilities == frozenset()
    assert role.managed_role_ids == frozenset()


async def test_resolve_role_is_cached_per_instance(org: Org) -> None:
    authorization = AuthorizationService(org.roles)
    first = await authorization.resolve_role("role-staff")
    org.roles.roles.pop("role-staff")
    assert await authorization.resolve_role("role-staff") is first


def test_static_actor_passes_known_checks_only(org: Org) -> None:
    authorization = AuthorizationService(org.roles)
    admin = org.actor("admin")
    assert authorization.check(admin, Capability.DELETE_ROLES) is True
    assert authorization.check(admin, "deleteAllTasks") is True
    assert authorization.check(admin, "notACapability") is False


def test_require_raises_forbidden(org: Org) -> None:
    authorization = AuthorizationService(org.roles)
    with pytest.raises(AuthorizationException) as exc_info:
        authorization.require(org.actor("x"), Capability.CREATE_ROLES, "role", "create")
    assert exc_info.value.details == {"resource": "role", "action": "create"}


def test_all_capabilities_role_can_do_everything() -> None:
    role = make_role("boss", 5, ALL_CAPABILITIES)
    assert all(can_perform(role, name) for name in Capability.values())
