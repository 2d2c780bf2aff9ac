from datetime import timedelta
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from bastion.domain.base import utcnow
from bastion.domain.entities import ApiKey
from tests.utils.api_client import permission_ids


async def _create_key(client, headers, permissions=(), **fields):
    catalogue = await permission_ids(client, headers, "bastion:admin")
    payload = {
        "name": "deploy-bot",
        "permission_ids": [catalogue[p] for p in permissions],
        **fields,
    }
    response = await client.post("/api-keys", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_api_key_authenticates_and_is_authorized(client: AsyncClient, admin_headers):
    """
    Given an API key holding bastion:api-key read
    When it calls routes through the X-API-Key header
    Then reads are allowed and creates are denied
    """
    created = await _create_key(client, admin_headers, [("bastion:api-key", "read")])
    key = created["key"]
    prefix, _, secret = key.partition(".")
    assert prefix == created["api_key"]["key_prefix"]
    assert prefix.startswith("bst_") and len(prefix) == 12
    assert len(secret) == 32

    headers = {"X-API-Key": key}
    me = await client.get("/users/me", headers=headers)
    assert me.json() == {
        "kind": "api_key",
        "principal_id": created["api_key"]["id"],
        "scope": "global",
    }

    listed = await client.get("/api-keys", headers=headers)
    assert listed.status_code == 200
    assert [k["key_prefix"] for k in listed.json()] == [prefix]
    assert listed.json()[0]["last_used_at"] is not None

    denied = await client.post("/api-keys", json={"name": "x"}, headers=headers)
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_api_key_header_wins_over_bearer(client: AsyncClient, admin_headers):
    created = await _create_key(client, admin_headers)

    response = await client.get(
        "/users/me", headers={**admin_headers, "X-API-Key": created["key"]}
    )

    assert response.json()["kind"] == "api_key"


@pytest.mark.asyncio
async def test_disabled_api_key_is_rejected(client: AsyncClient, admin_headers, db_session):
    created = await _create_key(client, admin_headers, [("bastion:api-key", "read")])
    await db_session.execute(
        update(ApiKey)
        .where(ApiKey.id == UUID(created["api_key"]["id"]))
        .values(enabled=False)
    )
    await db_session.commit()

    response = await client.get("/api-keys", headers={"X-API-Key": created["key"]})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_expired_api_key_is_rejected(client: AsyncClient, admin_headers):
    created = await _create_key(
        client,
        admin_headers,
        [("bastion:api-key", "read")],
        expires_at=(utcnow() - timedelta(minutes=1)).isoformat(),
    )

    response = await client.get("/api-keys", headers={"X-API-Key": created["key"]})

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("mangle", ["secret", "prefix", "malformed"])
async def test_bad_api_keys_look_the_same(client: AsyncClient, admin_headers, mangle):
    created = await _create_key(client, admin_headers)
    prefix, _, secret = created["key"].partition(".")
    bad = {
        "secret": f"{prefix}.{'x' * 32}",
        "prefix": f"bst_zzzzzzzz.{secret}",
        "malformed": "garbage",
    }[mangle]

    response = await client.get("/users/me", headers={"X-API-Key": bad})

    assert response.status_code == 401
    assert response.json() == {
        "error": {"code": "UNAUTHORIZED", "message": "Authentication required"}
    }


@pytest.mark.asyncio
async def test_change_api_key_permissions(client: AsyncClient, admin_headers):
    catalogue = await permission_ids(client, admin_headers, "bastion:admin")
    created = await _create_key(client, admin_headers)
    key_id = created["api_key"]["id"]
    headers = {"X-API-Key": created["key"]}
    permission_id = catalogue[("bastion:tenant", "create")]

    async def can_create_tenant():
        response = await client.post(
            "/authz/check",
            json={"resource_type": "bastion:tenant", "action": "create"},
            headers=headers,
        )
        return response.json()["allowed"]

    assert await can_create_tenant() is False

    added = await client.post(
        f"/api-keys/{key_id}/permissions",
        json={"permission_id": permission_id},
        headers=admin_headers,
    )
    again = await client.post(
        f"/api-keys/{key_id}/permissions",
        json={"permission_id": permission_id},
        headers=admin_headers,
    )
    assert added.json()["changed"] is True
    assert again.json()["changed"] is False
    assert await can_create_tenant() is True

    detail = await client.get(f"/api-keys/{key_id}", headers=admin_headers)
    assert [p["id"] for p in detail.json()["permissions"]] == [permission_id]

    removed = await client.delete(
        f"/api-keys/{key_id}/permissions/{permission_id}", headers=admin_headers
    )
    assert removed.json()["changed"] is True
    assert await can_create_tenant() is False


@pytest.mark.asyncio
async def test_create_with_unknown_permission(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api-keys",
        json={"name": "deploy-bot", "permission_ids": ["00000000-0000-0000-0000-000000000000"]},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PERMISSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_deleted_api_key_stops_working(client: AsyncClient, admin_headers):
    created = await _create_key(client, admin_headers)
    key_id = created["api_key"]["id"]

    response = await client.delete(f"/api-keys/{key_id}", headers=admin_headers)
    assert response.status_code == 200

    me = await client.get("/users/me", headers={"X-API-Key": created["key"]})
    missing = await client.get(f"/api-keys/{key_id}", headers=admin_headers)
    assert me.status_code == 401
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_tenant_key_invisible_to_other_tenant(client: AsyncClient, admin_headers):
    tenant_key = await _create_key(
        client,
        admin_headers,
        [("bastion:api-key", "read")],
        tenant_id="5f1b2a8e-9c1d-4e6f-8a2b-3c4d5e6f7a8b",
    )
    other_key = await _create_key(
        client,
        admin_headers,
        [("bastion:api-key", "read")],
        tenant_id="0a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d",
    )

    response = await client.get(
        f"/api-keys/{other_key['api_key']['id']}",
        headers={"X-API-Key": tenant_key["key"]},
    )

    assert response.status_code == 404
