"""RoleService and UserService with in-memory repositories."""

import pytest

from app.application.dtos.role import RoleCreate, RoleUpdate
from app.application.dtos.user import UserCreate
from app.application.services.authorization_service import AuthorizationService
from app.application.services.role_service import RoleService
from app.application.services.user_service import UserService
from app.domain.entities.user import Actor, UserEntity
from app.domain.enums import Capability
from app.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    RoleAlreadyExistsException,
    RoleInUseException,
    UserAlreadyExistsException,
    ValidationException,
)
from tests.fakes import Org


@pytest.fixture
def roles(org: Org, authorization: AuthorizationService) -> RoleService:
    return RoleService(org.roles, authorization)


@pytest.fixture
def users(org: Org, authorization: AuthorizationService) -> UserService:
    return UserService(org.users, org.roles, authorization, lambda pw: f"hashed:{pw}")


async def test_create_role_normalizes_name(org: Org, roles: RoleService) -> None:
    role = await roles.create_role(
        org.actor("gm"),
        RoleCreate(
            name="  ProjectLead ",
            display_name="Project Lead",
            level=2,
            permissions={"createTasks": True, "viewReports": False},
            managed_role_ids=["role-staff"],
        ),
    )
    assert role.name == "projectlead"
    assert role.capabilities == frozenset({Capability.CREATE_TASKS})
    assert role.managed_role_ids == frozenset({"role-staff"})
    assert role.is_static is False
    assert (await org.roles.get_by_name("projectlead")) is not None


async def test_create_role_rejects_duplicates_and_unknowns(org: Org, roles: RoleService) -> None:
    gm = org.actor("gm")
    with pytest.raises(RoleAlreadyExistsException):
        await roles.create_role(gm, RoleCreate(name="staff", display_name="Staff again"))
    with pytest.raises(ValidationException):
        await roles.create_role(
            gm, RoleCreate(name="odd", display_name="Odd", permissions={"flyPlanes": True})
        )
    with pytest.raises(ValidationException):
        await roles.create_role(
            gm, RoleCreate(name="odd", display_name="Odd", managed_role_ids=["role-nope"])
        )
    with pytest.raises(ValidationException):
        await roles.create_role(
            gm,
            RoleCreate(name="odd", display_name="Odd", managed_role_ids=["role-superadmin"]),
        )


async def test_create_role_requires_capability(org: Org, roles: RoleService) -> None:
    with pytest.raises(AuthorizationException):
        await roles.create_role(org.actor("head"), RoleCreate(name="odd", display_name="Odd"))


async def test_update_role_merges_permissions(org: Org, roles: RoleService) -> None:
    updated = await roles.update_role(
        org.actor("admin"),
        "role-staff",
        RoleUpdate(permissions={"viewReports": True, "editOwnTasks": False}),
    )
    assert updated.capabilities == frozenset(
        {Capability.CREATE_TASKS, Capability.VIEW_REPORTS}
    )
    assert org.roles.roles["role-staff"].capabilities == updated.capabilities


async def test_role_may_manage_itself(org: Org, roles: RoleService) -> None:
    updated = await roles.update_role(
        org.actor("admin"), "role-projectmanager", RoleUpdate(managed_role_ids=["role-projectmanager"])
    )
    assert updated.manages("role-projectmanager")


async def test_static_role_cannot_be_edited_or_deleted(org: Org, roles: RoleService) -> None:
    admin = org.actor("admin")
    with pytest.raises(AuthorizationException):
        await roles.update_role(admin, "role-superadmin", RoleUpdate(level=1))
    with pytest.raises(AuthorizationException):
        await roles.delete_role(admin, "role-superadmin")


async def test_delete_role_in_use_conflicts(org: Org, roles: RoleService) -> None:
    with pytest.raises(RoleInUseException) as exc_info:
        await roles.delete_role(org.actor("gm"), "role-staff")
    assert exc_info.value.details["user_count"] == 4


async def test_delete_role_removes_managed_edges(org: Org, roles: RoleService) -> None:
    await roles.delete_role(org.actor("gm"), "role-projectmanager")
    assert "role-projectmanager" not in org.roles.roles
    assert not org.roles.roles["role-staff"].manages("role-projectmanager")
    with pytest.raises(ResourceNotFoundException):
        await roles.get_role(org.actor("gm"), "role-projectmanager")


async def test_list_roles_most_senior_first(org: Org, roles: RoleService) -> None:
    listed = await roles.list_roles(org.actor("gm"))
    assert listed[0].name == "superadmin"
    assert listed[-1].name == "viewer"


async def test_create_user_with_manageable_role(org: Org, users: UserService) -> None:
    user = await users.create_user(
        org.actor("head"),
        UserCreate(
            name="New Hire",
            password="s3cret-pass",
            role_id="role-staff",
            email="new@corp.test",
            department_id="ops",
        ),
    )
    assert user.role_id == "role-staff"
    assert org.users.passwords[user.id] == "hashed:s3cret-pass"


async def test_create_user_cannot_grant_unmanaged_role(org: Org, users: UserService) -> None:
    with pytest.raises(AuthorizationException):
        await users.create_user(
            org.actor("head"),
            UserCreate(
                name="Climber",
                password="s3cret-pass",
                role_id="role-generalmanager",
                email="climb@corp.test",
            ),
        )


async def test_nobody_grants_the_static_role(org: Org, users: UserService) -> None:
    with pytest.raises(AuthorizationException):
        await users.create_user(
            org.actor("admin"),
            UserCreate(
                name="Second Admin",
                password="s3cret-pass",
                role_id="role-superadmin",
                email="admin2@corp.test",
            ),
        )


async def test_grantable_roles_follow_managed_list(org: Org, users: UserService) -> None:
    admin_roles = await users.list_grantable_roles(org.actor("admin"))
    assert [r.name for r in admin_roles] == [
        "departmenthead",
        "generalmanager",
        "projectmanager",
        "staff",
        "viewer",
    ]
    assert [r.name for r in await users.list_grantable_roles(org.actor("head"))] == ["staff"]
    assert [r.name for r in await users.list_grantable_roles(org.actor("x"))] == [
        "departmenthead",
        "projectmanager",
        "staff",
    ]


async def test_assignable_users_skip_unmanaged_and_inactive(org: Org, users: UserService) -> None:
    head = await users.list_assignable_users(org.actor("head"))
    assert [u.id for u in head] == ["u-head", "u-x", "u-y", "u-z"]

    admin = await users.list_assignable_users(org.actor("admin"))
    assert [u.id for u in admin] == ["u-gm", "u-head", "u-admin", "u-x", "u-y", "u-z"]


async def test_assignable_users_without_managed_roles_is_self_only(
    org: Org, users: UserService
) -> None:
    vera = org.users.put(
        UserEntity(id="u-v", name="Vera Viewer", email="v@corp.test", role_id="role-viewer")
    )
    actor = Actor(user=vera, role=org.roles.roles["role-viewer"])
    assert [u.id for u in await users.list_assignable_users(actor)] == ["u-v"]


@pytest.mark.parametrize(
    ("data", "error"),
    [
        (UserCreate(name="A", password="s3cret-pass", role_id="role-staff"), ValidationException),
        (UserCreate(name="A", password="short", role_id="role-staff", email="a@corp.test"), ValidationException),
        (UserCreate(name="A", password="s3cret-pass", role_id="role-nope", email="a@corp.test"), ResourceNotFoundException),
        (UserCreate(name="A", password="s3cret-pass", role_id="role-staff", email="x@corp.test"), UserAlreadyExistsException),
    ],
)
async def test_create_user_validation(
    org: Org, users: UserService, data: UserCreate, error: type
) -> None:
    with pytest.raises(error):
        await users.create_user(org.actor("head"), data)
