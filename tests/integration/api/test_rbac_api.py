from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlmodel import select

from bastion.domain.entities import AuditEvent
from tests.utils.api_client import bearer, create_user, login, permission_ids

TENANT_A = str(uuid4())
TENANT_B = str(uuid4())


async def _check(client, headers, user_id, resource_type, action, tenant_id=None):
    payload = {"resource_type": resource_type, "action": action, "user_id": user_id}
    if tenant_id is not None:
        payload["tenant_id"] = tenant_id
    response = await client.post("/authz/check", json=payload, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


async def _assign(client, headers, user_id, role_name, tenant_id=None):
    payload = {"user_id": user_id}
    if tenant_id is not None:
        payload["tenant_id"] = tenant_id
    response = await client.post(f"/roles/{role_name}/assign", json=payload, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_tenant_grant_applies_only_in_its_tenant(client: AsyncClient, admin_headers):
    user_id = await create_user(client, "member@acme.com", "SecurePass123!")

    assigned = await _assign(client, admin_headers, user_id, "bastion:viewer", TENANT_A)
    assert assigned["created"] is True
    assert assigned["scope"] == TENANT_A

    in_tenant = await _check(client, admin_headers, user_id, "bastion:api-key", "read", TENANT_A)
    other_tenant = await _check(client, admin_headers, user_id, "bastion:api-key", "read", TENANT_B)
    globally = await _check(client, admin_headers, user_id, "bastion:api-key", "read")
    not_granted = await _check(client, admin_headers, user_id, "bastion:api-key", "create", TENANT_A)

    assert in_tenant["allowed"] is True
    assert other_tenant["allowed"] is False
    assert globally["allowed"] is False
    assert not_granted == {
        "allowed": False,
        "reason": "user lacks bastion:api-key:create permission",
    }


@pytest.mark.asyncio
async def test_global_grant_applies_in_every_tenant(client: AsyncClient, admin_headers):
    user_id = await create_user(client, "member@acme.com", "SecurePass123!")

    await _assign(client, admin_headers, user_id, "bastion:viewer")

    for tenant_id in (None, TENANT_A, TENANT_B):
        decision = await _check(
            client, admin_headers, user_id, "bastion:service-account", "read", tenant_id
        )
        assert decision["allowed"] is True


@pytest.mark.asyncio
async def test_duplicate_assignment_changes_nothing(client: AsyncClient, admin_headers):
    user_id = await create_user(client, "member@acme.com", "SecurePass123!")
    tokens = await login(client, "member@acme.com", "SecurePass123!")
    own = bearer(tokens["access_token"])

    await _assign(client, admin_headers, user_id, "bastion:viewer", TENANT_A)
    before = await client.get(
        f"/users/{user_id}/permissions", params={"tenant_id": TENANT_A}, headers=own
    )

    again = await _assign(client, admin_headers, user_id, "bastion:viewer", TENANT_A)
    after = await client.get(
        f"/users/{user_id}/permissions", params={"tenant_id": TENANT_A}, headers=own
    )
    grants = await client.get(
        f"/users/{user_id}/roles", params={"tenant_id": TENANT_A}, headers=own
    )

    assert again["created"] is False
    assert before.status_code == 200
    assert sorted(p["id"] for p in before.json()) == sorted(p["id"] for p in after.json())
    assert len(grants.json()) == 1


@pytest.mark.asyncio
async def test_revoke_tenant_grant_keeps_global_grant(client: AsyncClient, admin_headers):
    user_id = await create_user(client, "member@acme.com", "SecurePass123!")
    await _assign(client, admin_headers, user_id, "bastion:viewer", TENANT_A)
    await _assign(client, admin_headers, user_id, "bastion:viewer")

    response = await client.delete(
        "/roles/bastion:viewer/assign",
        params={"user_id": user_id, "tenant_id": TENANT_A},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["revoked"] is True

    decision = await _check(client, admin_headers, user_id, "bastion:api-key", "read", TENANT_A)
    assert decision["allowed"] is True

    response = await client.delete(
        "/roles/bastion:viewer/assign", params={"user_id": user_id}, headers=admin_headers
    )
    assert response.json()["revoked"] is True

    decision = await _check(client, admin_headers, user_id, "bastion:api-key", "read", TENANT_A)
    assert decision["allowed"] is False


@pytest.mark.asyncio
async def test_assign_unknown_role(client: AsyncClient, admin_headers):
    user_id = await create_user(client, "member@acme.com", "SecurePass123!")

    response = await client.post(
        "/roles/no-such-role/assign", json={"user_id": user_id}, headers=admin_headers
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ROLE_NOT_FOUND"


@pytest.mark.asyncio
async def test_guarded_route_denies_user_without_role(client: AsyncClient, seeded):
    await create_user(client, "member@acme.com", "SecurePass123!")
    tokens = await login(client, "member@acme.com", "SecurePass123!")

    response = await client.get("/roles", headers=bearer(tokens["access_token"]))

    assert response.status_code == 403
    assert response.json()["error"] == {
        "code": "PERMISSION_DENIED",
        "message": "user lacks bastion:role:read permission",
    }


@pytest.mark.asyncio
async def test_tenant_admin_cannot_grant_globally(client: AsyncClient, admin_headers):
    tenant_admin_id = await create_user(client, "owner@acme.com", "SecurePass123!")
    member_id = await create_user(client, "member@acme.com", "SecurePass123!")
    await _assign(client, admin_headers, tenant_admin_id, "bastion:admin", TENANT_A)
    tokens = await login(client, "owner@acme.com", "SecurePass123!")
    headers = bearer(tokens["access_token"])

    in_tenant = await client.post(
        "/roles/bastion:viewer/assign",
        json={"user_id": member_id, "tenant_id": TENANT_A},
        headers=headers,
    )
    globally = await client.post(
        "/roles/bastion:viewer/assign", json={"user_id": member_id}, headers=headers
    )

    assert in_tenant.status_code == 200
    assert globally.status_code == 403


@pytest.mark.asyncio
async def test_list_roles_shows_builtin_catalogue(client: AsyncClient, admin_headers):
    response = await client.get("/roles", headers=admin_headers)

    assert response.status_code == 200
    roles = {r["name"]: r for r in response.json()}
    assert set(roles) == {"bastion:admin", "bastion:viewer"}
    viewer_actions = {p["action"] for p in roles["bastion:viewer"]["permissions"]}
    assert viewer_actions == {"read"}


@pytest.mark.asyncio
async def test_check_own_permission(client: AsyncClient, admin_headers):
    response = await client.post(
        "/authz/check",
        json={"resource_type": "bastion:tenant", "action": "create"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json() == {
        "allowed": True,
        "reason": "user has bastion:tenant:create permission",
    }


@pytest.mark.asyncio
async def test_check_rejects_empty_action(client: AsyncClient, admin_headers):
    response = await client.post(
        "/authz/check",
        json={"resource_type": "bastion:tenant", "action": ""},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MALFORMED_INPUT"


@pytest.mark.asyncio
async def test_reading_another_users_permissions_needs_permission(
    client: AsyncClient, seeded
):
    other_id = await create_user(client, "other@acme.com", "SecurePass123!")
    await create_user(client, "member@acme.com", "SecurePass123!")
    tokens = await login(client, "member@acme.com", "SecurePass123!")

    response = await client.get(
        f"/users/{other_id}/permissions", headers=bearer(tokens["access_token"])
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_grants_by_api_key_record_no_acting_user(
    client: AsyncClient, admin_headers, db_session
):
    """
    Given an API key allowed to assign and revoke roles
    When it assigns and then revokes a role
    Then neither audit event names the key as the acting user
    """
    catalogue = await permission_ids(client, admin_headers, "bastion:admin")
    response = await client.post(
        "/api-keys",
        json={
            "name": "role-bot",
            "permission_ids": [
                catalogue[("bastion:role", "assign")],
                catalogue[("bastion:role", "revoke")],
            ],
        },
        headers=admin_headers,
    )
    key_headers = {"X-API-Key": response.json()["key"]}
    user_id = await create_user(client, "member@acme.com", "SecurePass123!")

    await _assign(client, key_headers, user_id, "bastion:viewer")
    revoked = await client.delete(
        "/roles/bastion:viewer/assign", params={"user_id": user_id}, headers=key_headers
    )
    assert revoked.json()["revoked"] is True

    result = await db_session.exec(
        select(AuditEvent).where(AuditEvent.action.in_(["role_assigned", "role_revoked"]))
    )
    events = [e for e in result.all() if e.event_metadata["user_id"] == user_id]
    assert sorted(e.action for e in events) == ["role_assigned", "role_revoked"]
    assert all(e.principal_id is None for e in events)
