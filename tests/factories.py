"""Factory functions for building test principals, matrices and resources.

Usage::

    from tests.factories import make_principal, make_items

    def test_something(engine):
        seller = make_principal(Role.SELLER, id="u1")
        items = make_items("u1", None, "u2")
        assert engine.filter_by_ownership(seller, items) == items[:1]
"""

from typing import Optional

from tenantguard.core.rbac.permissions import NO_CAPABILITY, Capability, PermissionMatrix
from tenantguard.core.rbac.principal import Principal
from tenantguard.core.rbac.roles import PLATFORM_ROLES, Role


def make_principal(
    role: Role,
    id: str = "u1",
    tenant_id: Optional[str] = "t1",
) -> Principal:
    """Principal with a tenant unless the role is a platform role."""
    if role in PLATFORM_ROLES:
        tenant_id = None
    return Principal(id=id, role=role, tenant_id=tenant_id)


def full_row(capability: Capability = NO_CAPABILITY) -> dict:
    """Same capability for every role."""
    return {role: capability for role in Role}


def make_matrix(module: str = "customers", **overrides: Capability) -> PermissionMatrix:
    """One-module matrix; keyword arguments override single roles by name."""
    row = full_row()
    for role_name, capability in overrides.items():
        row[Role(role_name)] = capability
    return PermissionMatrix({module: row})


def make_items(*owner_ids: Optional[str], owner_field: str = "owner_id") -> list[dict]:
    """One dict resource per owner id, numbered in order."""
    return [
        {"id": f"r{index}", owner_field: owner_id}
        for index, owner_id in enumerate(owner_ids, start=1)
    ]
