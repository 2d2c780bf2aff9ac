from uuid import uuid4

import pytest
from pydantic import TypeAdapter, ValidationError

from bastion.domain.principal import (
    GLOBAL_SCOPE_KEY,
    GlobalScope,
    HumanPrincipal,
    Scope,
    TenantScope,
    covers,
    owned_visible_from,
    scope_for,
    visible_scope_keys,
)


def test_scope_for_maps_nullable_tenant():
    tenant_id = uuid4()

    assert scope_for(None) == GlobalScope()
    assert scope_for(tenant_id) == TenantScope(tenant_id=tenant_id)
    assert scope_for(None).key == GLOBAL_SCOPE_KEY
    assert scope_for(tenant_id).key == str(tenant_id)


def test_tenant_scope_sees_own_and_global_grants():
    tenant_id = uuid4()

    assert visible_scope_keys(TenantScope(tenant_id=tenant_id)) == [
        str(tenant_id),
        GLOBAL_SCOPE_KEY,
    ]
    assert visible_scope_keys(GlobalScope()) == [GLOBAL_SCOPE_KEY]


@pytest.mark.parametrize(
    "grant,requested,expected",
    [
        ("global", "global", True),
        ("global", "t1", True),
        ("t1", "t1", True),
        ("t1", "t2", False),
        ("t1", "global", False),
    ],
)
def test_covers(grant, requested, expected):
    tenants = {"t1": TenantScope(tenant_id=uuid4()), "t2": TenantScope(tenant_id=uuid4())}
    tenants["global"] = GlobalScope()

    assert covers(tenants[grant], tenants[requested]) is expected


def test_owned_visible_from():
    tenant_id = uuid4()

    assert owned_visible_from(None, TenantScope(tenant_id=tenant_id)) is True
    assert owned_visible_from(tenant_id, TenantScope(tenant_id=tenant_id)) is True
    assert owned_visible_from(tenant_id, TenantScope(tenant_id=uuid4())) is False
    assert owned_visible_from(tenant_id, GlobalScope()) is False


def test_scope_discriminator_parses_tagged_values():
    tenant_id = uuid4()
    adapter = TypeAdapter(Scope)

    assert adapter.validate_python({"kind": "global"}) == GlobalScope()
    assert adapter.validate_python(
        {"kind": "tenant", "tenant_id": str(tenant_id)}
    ) == TenantScope(tenant_id=tenant_id)


def test_principals_are_immutable():
    principal = HumanPrincipal(principal_id=uuid4())

    with pytest.raises(ValidationError):
        principal.email = "changed@acme.com"
