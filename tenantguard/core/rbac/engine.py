"""Authorization engine for tenantguard.

The single decision point callers use. Composes two gates:

- module gate: PermissionMatrix lookup by the principal's role
- resource gate: OwnershipResolver check on the resource's owner

``can_edit_resource`` / ``can_delete_resource`` require both and check the
module gate first. Every query returns a value; denial is ``False``.
"""

from typing import Iterable, List, Optional, Sequence, TypeVar

from ...common.logger import get_logger
from ..config import Settings, get_settings
from ..errors import CallerMisuseError
from .loader import build_matrix
from .ownership import DEFAULT_OWNER_FIELD, OwnershipResolver
from .permissions import NO_CAPABILITY, RESOURCE_ACTIONS, Action, Capability, PermissionMatrix
from .principal import Principal
from .reasons import DenialReason, denied_message, denied_reason
from .roles import (
    PLATFORM_ROLES,
    READ_ONLY_ROLES,
    TEAM_MANAGER_ROLES,
    WRITE_ROLES,
    Role,
)

logger = get_logger("engine")

T = TypeVar("T")

ADMIN_MENU_ROLES = frozenset([Role.SUPERADMIN, Role.ADMIN])
SETTINGS_ROLES = frozenset([Role.SUPERADMIN, Role.ADMIN, Role.SALES_LEADER])
REPORTS_ROLES = frozenset([Role.SUPERADMIN, Role.ADMIN, Role.SALES_LEADER, Role.AUDITOR])


class AuthorizationEngine:
    """
    Answers access questions for principals.

    The engine holds only immutable configuration and is safe to share
    across threads and requests.
    """

    def __init__(
        self,
        matrix: PermissionMatrix,
        resolver: Optional[OwnershipResolver] = None,
        strict: bool = False,
    ):
        """
        Args:
            matrix: Validated permission matrix
            resolver: Ownership resolver; built from the matrix's catalog
                when omitted
            strict: Raise CallerMisuseError on malformed queries instead
                of denying them
        """
        self.matrix = matrix
        self.catalog = matrix.catalog
        self.resolver = resolver or OwnershipResolver(self.catalog)
        self.strict = strict

    # Module-level gate

    def module_capabilities(self, principal: Optional[Principal], module: str) -> Capability:
        """Capability set of the principal's role in a module."""
        if not self._valid_module(module) or not self._known_principal(principal):
            return NO_CAPABILITY
        if not self.matrix.has_module(module):
            logger.debug(f"Query for unregistered module '{module}'")
        return self.matrix.capabilities(module, principal.role)

    def has_permission(self, principal: Optional[Principal], module: str, action: Action) -> bool:
        return self.module_capabilities(principal, module).allows(action)

    def can_view_module(self, principal: Optional[Principal], module: str) -> bool:
        return self.module_capabilities(principal, module).can_view

    def can_create_in_module(self, principal: Optional[Principal], module: str) -> bool:
        return self.module_capabilities(principal, module).can_create

    def can_edit_in_module(self, principal: Optional[Principal], module: str) -> bool:
        return self.module_capabilities(principal, module).can_edit

    def can_delete_in_module(self, principal: Optional[Principal], module: str) -> bool:
        return self.module_capabilities(principal, module).can_delete

    def can_assign_in_module(self, principal: Optional[Principal], module: str) -> bool:
        return self.module_capabilities(principal, module).can_assign

    def can_approve_in_module(self, principal: Optional[Principal], module: str) -> bool:
        return self.module_capabilities(principal, module).can_approve

    # Resource-level gate

    def can_access_resource(
        self,
        principal: Optional[Principal],
        owner_id: Optional[str],
        subordinate_ids: Optional[Iterable[str]] = None,
    ) -> bool:
        """Ownership check only; does not consult the matrix."""
        return self.resolver.can_access(principal, owner_id, subordinate_ids)

    def can_edit_resource(
        self,
        principal: Optional[Principal],
        module: str,
        owner_id: Optional[str],
        subordinate_ids: Optional[Iterable[str]] = None,
    ) -> bool:
        return self._can_act_on_resource(principal, module, Action.EDIT, owner_id, subordinate_ids)

    def can_delete_resource(
        self,
        principal: Optional[Principal],
        module: str,
        owner_id: Optional[str],
        subordinate_ids: Optional[Iterable[str]] = None,
    ) -> bool:
        return self._can_act_on_resource(principal, module, Action.DELETE, owner_id, subordinate_ids)

    def can_act_on_resource(
        self,
        principal: Optional[Principal],
        module: str,
        action: Action,
        owner_id: Optional[str],
        subordinate_ids: Optional[Iterable[str]] = None,
    ) -> bool:
        """Two-gate check for any resource-scoped action (view/edit/delete)."""
        try:
            action = Action(action)
        except ValueError:
            return self._misuse(f"Unknown action {action!r}")
        if action not in RESOURCE_ACTIONS:
            return self._misuse(f"Action '{action.value}' does not target a single resource")
        return self._can_act_on_resource(principal, module, action, owner_id, subordinate_ids)

    def filter_by_ownership(
        self,
        principal: Optional[Principal],
        items: Sequence[T],
        subordinate_ids: Optional[Iterable[str]] = None,
        owner_field: str = DEFAULT_OWNER_FIELD,
    ) -> List[T]:
        return self.resolver.filter_by_ownership(principal, items, subordinate_ids, owner_field)

    # Denials

    def denied_reason(self, principal: Optional[Principal]) -> DenialReason:
        return denied_reason(principal)

    def denied_message(self, principal: Optional[Principal], messages=None) -> str:
        return denied_message(principal, messages)

    # Role helpers

    def has_role(self, principal: Optional[Principal], role: Role) -> bool:
        return principal is not None and principal.role is role

    def has_any_role(self, principal: Optional[Principal], roles: Iterable[Role]) -> bool:
        if not self._known_principal(principal):
            return False
        return principal.role in frozenset(roles)

    def has_higher_or_equal_role(self, principal: Optional[Principal], required: Role) -> bool:
        """Hierarchy comparison; unknown roles on either side deny."""
        if not self._known_principal(principal) or not self.catalog.is_known(required):
            return False
        return self.catalog.at_least_as_privileged(principal.role, required)

    def is_super_admin(self, principal: Optional[Principal]) -> bool:
        return self.has_any_role(principal, PLATFORM_ROLES)

    def can_write(self, principal: Optional[Principal]) -> bool:
        """Whether the role writes in business modules at all."""
        return self.has_any_role(principal, WRITE_ROLES)

    def is_read_only(self, principal: Optional[Principal]) -> bool:
        if not self._known_principal(principal):
            return True
        return principal.role in READ_ONLY_ROLES

    def can_manage_team(self, principal: Optional[Principal]) -> bool:
        return self.has_any_role(principal, TEAM_MANAGER_ROLES)

    def can_access_admin_menu(self, principal: Optional[Principal]) -> bool:
        return self.has_any_role(principal, ADMIN_MENU_ROLES)

    def can_access_settings(self, principal: Optional[Principal]) -> bool:
        return self.has_any_role(principal, SETTINGS_ROLES)

    def can_access_reports(self, principal: Optional[Principal]) -> bool:
        return self.has_any_role(principal, REPORTS_ROLES)

    # Internals

    def _can_act_on_resource(
        self,
        principal: Optional[Principal],
        module: str,
        action: Action,
        owner_id: Optional[str],
        subordinate_ids: Optional[Iterable[str]],
    ) -> bool:
        # Module gate first; ownership is never consulted without it
        if not self.has_permission(principal, module, action):
            return False
        return self.resolver.can_access(principal, owner_id, subordinate_ids, action)

    def _known_principal(self, principal: Optional[Principal]) -> bool:
        if principal is None:
            return False
        if not self.catalog.is_known(principal.role):
            logger.debug(f"Unrecognized role {principal.role!r} for principal {principal.id}")
            return False
        return True

    def _valid_module(self, module: str) -> bool:
        if isinstance(module, str) and module.strip():
            return True
        return self._misuse(f"Module name must be a non-empty string, got {module!r}")

    def _misuse(self, message: str) -> bool:
        """Raise in strict mode; otherwise log and deny."""
        if self.strict:
            raise CallerMisuseError(message)
        logger.warning(f"{message}; denying")
        return False


def build_engine(settings: Optional[Settings] = None) -> AuthorizationEngine:
    """
    Build a validated engine from settings.

    Configuration errors propagate so the host process fails at startup.
    """
    settings = settings or get_settings()
    matrix = build_matrix(settings)
    engine = AuthorizationEngine(matrix, strict=settings.strict_mode)
    logger.info(
        f"Authorization engine ready: {len(matrix.modules())} modules, "
        f"{len(matrix.roles())} roles, strict={engine.strict}"
    )
    return engine
