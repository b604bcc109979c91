"""Role administration and user provisioning endpoints."""

from httpx import AsyncClient

from tests.fakes import Org


async def test_list_roles_highest_level_first(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/v1/roles", headers=auth_headers("gm"))
    assert response.status_code == 200
    levels = [r["level"] for r in response.json()]
    assert levels == sorted(levels, reverse=True)
    staff = next(r for r in response.json() if r["name"] == "staff")
    assert staff["permissions"]["createTasks"] is True
    assert staff["permissions"]["deleteRoles"] is False


async def test_create_role_requires_capability(client: AsyncClient, auth_headers) -> None:
    body = {"name": "auditor", "display_name": "Auditor", "level": 1}
    response = await client.post("/api/v1/roles", json=body, headers=auth_headers("head"))
    assert response.status_code == 403


async def test_admin_creates_role(client: AsyncClient, auth_headers, org: Org) -> None:
    body = {
        "name": "Auditor",
        "display_name": "Auditor",
        "level": 1,
        "permissions": {"viewUsers": True},
        "managed_roles": ["role-staff"],
    }
    response = await client.post("/api/v1/roles", json=body, headers=auth_headers("admin"))
    assert response.status_code == 201
    created = response.json()
    assert created["name"] == "auditor"
    assert created["managed_roles"] == ["role-staff"]
    assert created["is_static"] is False
    assert created["id"] in org.roles.roles


async def test_create_role_rejects_unknown_permission(client: AsyncClient, auth_headers) -> None:
    body = {"name": "auditor", "display_name": "Auditor", "permissions": {"flyPlanes": True}}
    response = await client.post("/api/v1/roles", json=body, headers=auth_headers("admin"))
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_duplicate_role_name_is_409(client: AsyncClient, auth_headers) -> None:
    body = {"name": "staff", "display_name": "Staff again"}
    response = await client.post("/api/v1/roles", json=body, headers=auth_headers("admin"))
    assert response.status_code == 409
    assert response.json()["error"] == "ROLE_ALREADY_EXISTS"


async def test_delete_role_in_use_is_409(client: AsyncClient, auth_headers) -> None:
    response = await client.delete("/api/v1/roles/role-staff", headers=auth_headers("admin"))
    assert response.status_code == 409
    assert response.json()["error"] == "ROLE_IN_USE"


async def test_delete_unused_role(client: AsyncClient, auth_headers, org: Org) -> None:
    response = await client.delete("/api/v1/roles/role-viewer", headers=auth_headers("admin"))
    assert response.status_code == 204
    assert "role-viewer" not in org.roles.roles


async def test_static_role_cannot_be_edited(client: AsyncClient, auth_headers) -> None:
    response = await client.put(
        "/api/v1/roles/role-superadmin",
        json={"display_name": "Root"},
        headers=auth_headers("admin"),
    )
    assert response.status_code == 403


async def test_head_creates_staff_user(client: AsyncClient, auth_headers, org: Org) -> None:
    body = {
        "name": "Nia New",
        "email": "nia@corp.test",
        "password": "warehouse-42",
        "role_id": "role-staff",
        "department_id": "ops",
    }
    response = await client.post("/api/v1/users", json=body, headers=auth_headers("head"))
    assert response.status_code == 201
    created = response.json()
    assert created["role_id"] == "role-staff"
    assert "password" not in created
    assert org.users.passwords[created["id"]] != "warehouse-42"


async def test_head_cannot_grant_unmanaged_role(client: AsyncClient, auth_headers) -> None:
    body = {
        "name": "Gina Boss",
        "email": "gina@corp.test",
        "password": "warehouse-42",
        "role_id": "role-generalmanager",
    }
    response = await client.post("/api/v1/users", json=body, headers=auth_headers("head"))
    assert response.status_code == 403


async def test_create_user_validation(client: AsyncClient, auth_headers) -> None:
    headers = auth_headers("head")
    bad_email = {"name": "N", "email": "not-an-email", "password": "warehouse-42", "role_id": "role-staff"}
    assert (await client.post("/api/v1/users", json=bad_email, headers=headers)).status_code == 422
    no_contact = {"name": "N", "password": "warehouse-42", "role_id": "role-staff"}
    assert (await client.post("/api/v1/users", json=no_contact, headers=headers)).status_code == 422


async def test_duplicate_contact_is_409(client: AsyncClient, auth_headers) -> None:
    body = {"name": "Copy", "email": "x@corp.test", "password": "warehouse-42", "role_id": "role-staff"}
    response = await client.post("/api/v1/users", json=body, headers=auth_headers("head"))
    assert response.status_code == 409


async def test_available_roles_for_head(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/v1/users/available-roles", headers=auth_headers("head"))
    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == ["role-staff"]

    admin = await client.get("/api/v1/users/available-roles", headers=auth_headers("admin"))
    names = [r["name"] for r in admin.json()]
    assert "superadmin" not in names
    assert "generalmanager" in names


async def test_users_for_tasks(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/v1/users/for-tasks", headers=auth_headers("x"))
    assert response.status_code == 200
    ids = [u["id"] for u in response.json()]
    assert ids == ["u-head", "u-x", "u-y", "u-z"]
    assert "u-gm" not in ids
    assert "u-off" not in ids
