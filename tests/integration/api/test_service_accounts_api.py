from uuid import uuid4

import pytest
from httpx import AsyncClient

from tests.utils.api_client import bearer


async def _create_account(client, headers, roles=("bastion:viewer",), tenant_id=None):
    payload = {"name": "ci-runner", "roles": list(roles)}
    if tenant_id is not None:
        payload["tenant_id"] = tenant_id
    response = await client.post("/service-accounts", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _exchange(client, client_id, client_secret):
    return await client.post(
        "/auth/token",
        data={
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
        },
    )


@pytest.mark.asyncio
async def test_client_credentials_flow(client: AsyncClient, admin_headers, token_issuer):
    """
    Given a service account with the viewer role
    When it exchanges its client credentials
    Then it receives a service-account bearer token
    And the token grants exactly the viewer permissions
    """
    created = await _create_account(client, admin_headers)
    account = created["service_account"]
    assert account["client_id"].startswith("sa_")
    assert account["roles"] == ["bastion:viewer"]

    response = await _exchange(client, account["client_id"], created["client_secret"])
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "Bearer"
    assert body["expires_in"] == 900

    claims = token_issuer.verify(body["access_token"]).value
    assert str(claims.sub) == account["id"]
    assert claims.identity_type.value == "service_account"

    headers = bearer(body["access_token"])
    me = await client.get("/users/me", headers=headers)
    assert me.json()["kind"] == "service_account"

    listed = await client.get("/service-accounts", headers=headers)
    assert listed.status_code == 200
    assert [a["id"] for a in listed.json()] == [account["id"]]

    denied = await client.post("/service-accounts", json={"name": "x"}, headers=headers)
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_service_account_cannot_logout(client: AsyncClient, admin_headers):
    created = await _create_account(client, admin_headers)
    token = (
        await _exchange(
            client, created["service_account"]["client_id"], created["client_secret"]
        )
    ).json()["access_token"]

    response = await client.post("/auth/logout", headers=bearer(token))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_regenerate_secret_invalidates_old_secret(client: AsyncClient, admin_headers):
    created = await _create_account(client, admin_headers)
    account_id = created["service_account"]["id"]
    client_id = created["service_account"]["client_id"]

    response = await client.post(
        f"/service-accounts/{account_id}/regenerate-secret", headers=admin_headers
    )
    assert response.status_code == 200
    new_secret = response.json()["client_secret"]
    assert new_secret != created["client_secret"]

    old = await _exchange(client, client_id, created["client_secret"])
    new = await _exchange(client, client_id, new_secret)

    assert old.status_code == 401
    assert old.json() == {"error": "invalid_client"}
    assert new.status_code == 200


@pytest.mark.asyncio
async def test_disabled_account_cannot_exchange(client: AsyncClient, admin_headers):
    created = await _create_account(client, admin_headers)
    account_id = created["service_account"]["id"]

    response = await client.put(
        f"/service-accounts/{account_id}", json={"enabled": False}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["enabled"] is False

    exchange = await _exchange(
        client, created["service_account"]["client_id"], created["client_secret"]
    )
    assert exchange.status_code == 401
    assert exchange.json() == {"error": "invalid_client"}


@pytest.mark.asyncio
async def test_create_with_unknown_role(client: AsyncClient, admin_headers):
    response = await client.post(
        "/service-accounts",
        json={"name": "ci-runner", "roles": ["no-such-role"]},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "ROLE_NOT_FOUND"


@pytest.mark.asyncio
async def test_get_and_delete_service_account(client: AsyncClient, admin_headers):
    created = await _create_account(client, admin_headers)
    account_id = created["service_account"]["id"]

    response = await client.get(f"/service-accounts/{account_id}", headers=admin_headers)
    assert response.status_code == 200
    assert "client_secret" not in response.json()
    assert "client_secret_hash" not in response.json()

    response = await client.delete(f"/service-accounts/{account_id}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.get(f"/service-accounts/{account_id}", headers=admin_headers)
    assert response.status_code == 404

    exchange = await _exchange(
        client, created["service_account"]["client_id"], created["client_secret"]
    )
    assert exchange.status_code == 401


@pytest.mark.asyncio
async def test_assign_role_to_service_account(client: AsyncClient, admin_headers):
    created = await _create_account(client, admin_headers, roles=())
    account_id = created["service_account"]["id"]
    token = (
        await _exchange(
            client, created["service_account"]["client_id"], created["client_secret"]
        )
    ).json()["access_token"]

    before = await client.get("/api-keys", headers=bearer(token))
    assert before.status_code == 403

    response = await client.post(
        f"/service-accounts/{account_id}/roles",
        json={"role_name": "bastion:viewer"},
        headers=admin_headers,
    )
    assert response.status_code == 200

    after = await client.get("/api-keys", headers=bearer(token))
    assert after.status_code == 200


@pytest.mark.asyncio
async def test_tenant_account_token_is_tenant_scoped(client: AsyncClient, admin_headers):
    tenant_id = str(uuid4())
    created = await _create_account(client, admin_headers, tenant_id=tenant_id)
    token = (
        await _exchange(
            client, created["service_account"]["client_id"], created["client_secret"]
        )
    ).json()["access_token"]
    headers = bearer(token)

    in_tenant = await client.post(
        "/authz/check",
        json={"resource_type": "bastion:api-key", "action": "read", "tenant_id": tenant_id},
        headers=headers,
    )
    other_tenant = await client.post(
        "/authz/check",
        json={"resource_type": "bastion:api-key", "action": "read", "tenant_id": str(uuid4())},
        headers=headers,
    )

    assert in_tenant.json()["allowed"] is True
    assert other_tenant.json()["allowed"] is False
