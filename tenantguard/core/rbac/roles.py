"""Role catalog for tenantguard.

Defines the five platform roles, their hierarchy (highest platform
privilege first) and the ownership scope each role resolves to:

1. SUPERADMIN - SaaS platform operator; manages tenants, locations and
   tenant admins but never tenant business data
2. ADMIN - Dealership owner; full control of its tenant
3. SALES_LEADER - Branch/team lead; own records plus subordinates'
4. SELLER - Individual seller; own records only
5. AUDITOR - Read-only across the tenant
"""

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple, Union

from ..errors import UnknownRole


class Role(str, Enum):
    """Roles a principal can hold."""

    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    SALES_LEADER = "SALES_LEADER"
    SELLER = "SELLER"
    AUDITOR = "AUDITOR"


class OwnershipScope(str, Enum):
    """Which resource instances a role may touch once a module allows it."""

    PLATFORM = "platform"     # No tenant business resources at all
    TENANT = "tenant"         # Every resource in the tenant
    READ_ONLY = "read_only"   # Every resource, view actions only
    TEAM = "team"             # Own, subordinates' and unassigned resources
    OWN = "own"               # Own resources only


# Highest platform privilege first
ROLE_HIERARCHY: Tuple[Role, ...] = (
    Role.SUPERADMIN,
    Role.ADMIN,
    Role.SALES_LEADER,
    Role.SELLER,
    Role.AUDITOR,
)

ROLE_LABELS: Mapping[Role, str] = MappingProxyType({
    Role.SUPERADMIN: "Super Administrator",
    Role.ADMIN: "Administrator",
    Role.SALES_LEADER: "Sales Leader",
    Role.SELLER: "Seller",
    Role.AUDITOR: "Auditor",
})

ROLE_DESCRIPTIONS: Mapping[Role, str] = MappingProxyType({
    Role.SUPERADMIN: "SaaS platform management: tenants, locations and admin users",
    Role.ADMIN: "Full control of the dealership",
    Role.SALES_LEADER: "Manages a team of sellers in a branch",
    Role.SELLER: "Manages their own sales and customers",
    Role.AUDITOR: "Views reports and metrics",
})

ROLE_SCOPES: Mapping[Role, OwnershipScope] = MappingProxyType({
    Role.SUPERADMIN: OwnershipScope.PLATFORM,
    Role.ADMIN: OwnershipScope.TENANT,
    Role.SALES_LEADER: OwnershipScope.TEAM,
    Role.SELLER: OwnershipScope.OWN,
    Role.AUDITOR: OwnershipScope.READ_ONLY,
})

# Role classes. SUPERADMIN belongs to none of the business sets.
PLATFORM_ROLES = frozenset([Role.SUPERADMIN])
WRITE_ROLES = frozenset([Role.ADMIN, Role.SALES_LEADER, Role.SELLER])
READ_ONLY_ROLES = frozenset([Role.AUDITOR])
TEAM_MANAGER_ROLES = frozenset([Role.ADMIN, Role.SALES_LEADER])
INDIVIDUAL_CONTRIBUTOR_ROLES = frozenset([Role.SELLER])


class RoleCatalog:
    """Immutable view over the role tables.

    All lookups are pure. Values outside the catalog raise ``UnknownRole``
    from ``rank`` and ``parse``; decision code should use ``is_known``
    first and deny.
    """

    def __init__(
        self,
        hierarchy: Iterable[Role] = ROLE_HIERARCHY,
        scopes: Mapping[Role, OwnershipScope] = ROLE_SCOPES,
        labels: Mapping[Role, str] = ROLE_LABELS,
        descriptions: Mapping[Role, str] = ROLE_DESCRIPTIONS,
    ):
        self._hierarchy = tuple(hierarchy)
        self._ranks = MappingProxyType(
            {role: index for index, role in enumerate(self._hierarchy)}
        )
        if len(self._ranks) != len(self._hierarchy):
            raise ValueError("Role hierarchy contains duplicates")
        self._scopes = MappingProxyType(dict(scopes))
        self._labels = MappingProxyType(dict(labels))
        self._descriptions = MappingProxyType(dict(descriptions))

    def roles(self) -> Tuple[Role, ...]:
        """All roles, highest platform privilege first."""
        return self._hierarchy

    def is_known(self, role: object) -> bool:
        return isinstance(role, Role) and role in self._ranks

    def parse(self, value: Union[str, Role]) -> Role:
        """Parse a role name into a ``Role``.

        Accepts ``Role`` members and case-insensitive role names.

        Raises:
            UnknownRole: If the value does not name a catalog role
        """
        if isinstance(value, Role):
            role = value
        elif isinstance(value, str):
            try:
                role = Role(value.strip().upper())
            except ValueError:
                raise UnknownRole(value) from None
        else:
            raise UnknownRole(value)

        if role not in self._ranks:
            raise UnknownRole(value)
        return role

    def rank(self, role: Role) -> int:
        """Position in the hierarchy, 0 being the highest privilege."""
        if not self.is_known(role):
            raise UnknownRole(role)
        return self._ranks[role]

    def at_least_as_privileged(self, role: Role, threshold: Role) -> bool:
        return self.rank(role) <= self.rank(threshold)

    def scope(self, role: object) -> Optional[OwnershipScope]:
        """Ownership scope for a role, or None when the role is unknown."""
        if not self.is_known(role):
            return None
        return self._scopes.get(role)

    def label(self, role: Role) -> str:
        if not self.is_known(role):
            raise UnknownRole(role)
        return self._labels.get(role, role.value.replace("_", " ").title())

    def description(self, role: Role) -> str:
        if not self.is_known(role):
            raise UnknownRole(role)
        return self._descriptions.get(role, "")


# Process-wide default, never mutated
ROLE_CATALOG = RoleCatalog()
