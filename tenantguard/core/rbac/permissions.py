"""Permission matrix for tenantguard.

Maps each module to a capability set per role. The matrix is data: new
modules or roles are added as rows, never as branches in decision code.

Capability flags per (module, role):
  - can_view, can_create, can_edit, can_delete
  - can_assign  (e.g. reassigning customers to sellers)
  - can_approve (e.g. approving sales)

A (module, role) pair missing from the matrix has no capability. The
constructor refuses to build a matrix with missing pairs so that every
"no" in the table is written down on purpose.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..errors import ConfigurationError, IncompleteMatrix
from .roles import PLATFORM_ROLES, ROLE_CATALOG, Role, RoleCatalog


class Action(str, Enum):
    """Actions that can be checked against a module."""

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    ASSIGN = "assign"         # Assign records to team members
    APPROVE = "approve"       # Approve sales


VIEW_ACTIONS = frozenset([Action.VIEW])
MUTATING_ACTIONS = frozenset(set(Action) - VIEW_ACTIONS)
# Actions that target one specific resource instance
RESOURCE_ACTIONS = frozenset([Action.VIEW, Action.EDIT, Action.DELETE])


class Module(str, Enum):
    """Modules declared by the default matrix."""

    # Tenant business modules
    CUSTOMERS = "customers"
    VEHICLES = "vehicles"
    SALES = "sales"
    CONSIGNMENTS = "consignments"

    # Platform administration modules
    LOCATIONS = "locations"
    USERS = "users"
    TENANTS = "tenants"


BUSINESS_MODULES = frozenset([
    Module.CUSTOMERS.value,
    Module.VEHICLES.value,
    Module.SALES.value,
    Module.CONSIGNMENTS.value,
])
PLATFORM_MODULES = frozenset([
    Module.LOCATIONS.value,
    Module.USERS.value,
    Module.TENANTS.value,
])


@dataclass(frozen=True)
class Capability:
    """What a role may do in one module."""

    can_view: bool = False
    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_assign: bool = False
    can_approve: bool = False

    def allows(self, action: Action) -> bool:
        """Project a single action onto this capability set."""
        try:
            return getattr(self, _ACTION_FLAGS[Action(action)])
        except (KeyError, ValueError):
            return False

    @property
    def is_empty(self) -> bool:
        return not any(asdict(self).values())

    def to_dict(self) -> Dict[str, bool]:
        return asdict(self)


_ACTION_FLAGS: Mapping[Action, str] = MappingProxyType({
    Action.VIEW: "can_view",
    Action.CREATE: "can_create",
    Action.EDIT: "can_edit",
    Action.DELETE: "can_delete",
    Action.ASSIGN: "can_assign",
    Action.APPROVE: "can_approve",
})

NO_CAPABILITY = Capability()


def _caps(*actions: Action) -> Capability:
    """Build a capability granting exactly the given actions."""
    return Capability(**{_ACTION_FLAGS[action]: True for action in actions})


_CRUD = (Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE)
_READ = (Action.VIEW,)


# Default matrix. Comments note where ownership narrows a module grant.
DEFAULT_ENTRIES: Dict[str, Dict[Role, Capability]] = {
    # CRM / customers
    Module.CUSTOMERS.value: {
        Role.SUPERADMIN: NO_CAPABILITY,
        Role.ADMIN: _caps(*_CRUD, Action.ASSIGN),
        # Team records only; assigns within the team
        Role.SALES_LEADER: _caps(Action.VIEW, Action.CREATE, Action.EDIT, Action.ASSIGN),
        # Own records only
        Role.SELLER: _caps(Action.VIEW, Action.CREATE, Action.EDIT),
        Role.AUDITOR: _caps(*_READ),
    },

    # Vehicles / inventory
    Module.VEHICLES.value: {
        Role.SUPERADMIN: NO_CAPABILITY,
        Role.ADMIN: _caps(*_CRUD),
        Role.SALES_LEADER: _caps(Action.VIEW, Action.CREATE, Action.EDIT),
        Role.SELLER: _caps(*_READ),
        Role.AUDITOR: _caps(*_READ),
    },

    # Sales
    Module.SALES.value: {
        Role.SUPERADMIN: NO_CAPABILITY,
        Role.ADMIN: _caps(*_CRUD, Action.APPROVE),
        Role.SALES_LEADER: _caps(Action.VIEW, Action.CREATE, Action.EDIT, Action.APPROVE),
        Role.SELLER: _caps(Action.VIEW, Action.CREATE, Action.EDIT),
        Role.AUDITOR: _caps(*_READ),
    },

    # Consignments
    Module.CONSIGNMENTS.value: {
        Role.SUPERADMIN: NO_CAPABILITY,
        Role.ADMIN: _caps(*_CRUD),
        Role.SALES_LEADER: _caps(*_CRUD),
        Role.SELLER: _caps(*_READ),
        Role.AUDITOR: _caps(*_READ),
    },

    # Locations are managed by the platform as well as the tenant
    Module.LOCATIONS.value: {
        Role.SUPERADMIN: _caps(*_CRUD),
        Role.ADMIN: _caps(*_CRUD),
        Role.SALES_LEADER: _caps(*_READ),
        Role.SELLER: _caps(*_READ),
        Role.AUDITOR: _caps(*_READ),
    },

    # User management; SUPERADMIN creates tenant admins
    Module.USERS.value: {
        Role.SUPERADMIN: _caps(*_CRUD),
        Role.ADMIN: _caps(*_CRUD),
        Role.SALES_LEADER: _caps(*_READ),
        Role.SELLER: NO_CAPABILITY,
        Role.AUDITOR: _caps(*_READ),
    },

    # Tenants (platform only). Tenants are soft-deleted, so no delete.
    Module.TENANTS.value: {
        Role.SUPERADMIN: _caps(Action.VIEW, Action.CREATE, Action.EDIT),
        Role.ADMIN: NO_CAPABILITY,
        Role.SALES_LEADER: NO_CAPABILITY,
        Role.SELLER: NO_CAPABILITY,
        Role.AUDITOR: NO_CAPABILITY,
    },
}

MATRIX_VERSION = 1


class PermissionMatrix:
    """Validated, read-only (module -> role -> Capability) table."""

    def __init__(
        self,
        entries: Mapping[str, Mapping[Any, Capability]],
        catalog: RoleCatalog = ROLE_CATALOG,
        modules: Optional[Iterable[str]] = None,
        platform_modules: Iterable[str] = PLATFORM_MODULES,
        version: int = MATRIX_VERSION,
    ):
        """
        Build and validate a matrix.

        Args:
            entries: Capabilities per module and role. Role keys may be
                ``Role`` members or role names.
            catalog: Role catalog the matrix is checked against
            modules: Declared module names. Defaults to the entry keys;
                declared modules without any entry count as missing.
            platform_modules: The only modules where platform roles may
                hold capabilities
            version: Version of the table the entries came from

        Raises:
            UnknownRole: A role key is not in the catalog
            IncompleteMatrix: A declared (module, role) pair has no entry
            ConfigurationError: An entry is malformed or a platform role
                holds capabilities in a tenant business module
        """
        self._catalog = catalog
        self.version = version

        declared = list(entries.keys()) if modules is None else list(modules)
        table: Dict[str, Mapping[Role, Capability]] = {}
        missing: list[Tuple[str, str]] = []

        for module in declared:
            if not isinstance(module, str) or not module:
                raise ConfigurationError(f"Invalid module name: {module!r}")

            row: Dict[Role, Capability] = {}
            for role_key, capability in (entries.get(module) or {}).items():
                role = catalog.parse(role_key)
                if role in row:
                    raise ConfigurationError(f"Duplicate entry {module}/{role.value}")
                if not isinstance(capability, Capability):
                    raise ConfigurationError(
                        f"Entry {module}/{role.value} must be a Capability, "
                        f"got {type(capability).__name__}"
                    )
                row[role] = capability

            for role in catalog.roles():
                if role not in row:
                    missing.append((module, role.value))

            table[module] = MappingProxyType(row)

        undeclared = set(entries.keys()) - set(declared)
        if undeclared:
            raise ConfigurationError(
                f"Entries for undeclared modules: {', '.join(sorted(undeclared))}"
            )

        if missing:
            raise IncompleteMatrix(missing)

        platform_modules = frozenset(platform_modules)
        for module, row in table.items():
            if module in platform_modules:
                continue
            for role in PLATFORM_ROLES:
                if role in row and not row[role].is_empty:
                    raise ConfigurationError(
                        f"Platform role {role.value} cannot hold capabilities "
                        f"in tenant module '{module}'"
                    )

        self._table = MappingProxyType(table)
        self._platform_modules = platform_modules

    @property
    def catalog(self) -> RoleCatalog:
        return self._catalog

    def modules(self) -> Tuple[str, ...]:
        return tuple(self._table.keys())

    def roles(self) -> Tuple[Role, ...]:
        return self._catalog.roles()

    def has_module(self, module: str) -> bool:
        return isinstance(module, str) and module in self._table

    def is_platform_module(self, module: str) -> bool:
        return module in self._platform_modules

    def capabilities(self, module: str, role: Role) -> Capability:
        """Capability set for (module, role); all-false when absent."""
        if not self._catalog.is_known(role) or not self.has_module(module):
            return NO_CAPABILITY
        return self._table[module].get(role, NO_CAPABILITY)

    def allows(self, module: str, role: Role, action: Action) -> bool:
        return self.capabilities(module, role).allows(action)

    def can_view(self, module: str, role: Role) -> bool:
        return self.capabilities(module, role).can_view

    def can_create(self, module: str, role: Role) -> bool:
        return self.capabilities(module, role).can_create

    def can_edit(self, module: str, role: Role) -> bool:
        return self.capabilities(module, role).can_edit

    def can_delete(self, module: str, role: Role) -> bool:
        return self.capabilities(module, role).can_delete

    def can_assign(self, module: str, role: Role) -> bool:
        return self.capabilities(module, role).can_assign

    def can_approve(self, module: str, role: Role) -> bool:
        return self.capabilities(module, role).can_approve

    def as_dict(self) -> Dict[str, Dict[str, Dict[str, bool]]]:
        """Plain nested dict, suitable for JSON/YAML serialization."""
        return {
            module: {role.value: cap.to_dict() for role, cap in row.items()}
            for module, row in self._table.items()
        }


DEFAULT_MATRIX = PermissionMatrix(DEFAULT_ENTRIES)
