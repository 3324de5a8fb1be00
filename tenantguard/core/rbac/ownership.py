"""Resource-level ownership checks.

Runs after the module-level gate has passed and decides whether a
principal may act on one particular resource instance. Precedence, first
match wins:

1. PLATFORM scope (SUPERADMIN)  -> deny, always
2. TENANT scope (ADMIN)         -> allow
3. READ_ONLY scope (AUDITOR)    -> allow view actions, deny mutations
4. Unassigned resource          -> allow team managers, deny the rest
5. OWN scope (SELLER)           -> allow own resources
6. TEAM scope (SALES_LEADER)    -> allow own and subordinates' resources
7. anything else                -> deny

Subordinate ids are a flat set supplied by the caller; multi-level
reporting chains must be flattened before the call.
"""

from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Sequence, TypeVar

from ...common.logger import get_logger
from .permissions import VIEW_ACTIONS, Action
from .principal import Principal
from .roles import ROLE_CATALOG, OwnershipScope, RoleCatalog

logger = get_logger("ownership")

T = TypeVar("T")

DEFAULT_OWNER_FIELD = "owner_id"


def _is_unassigned(owner_id: Optional[str]) -> bool:
    return owner_id is None or owner_id == ""


def owner_of(item: Any, owner_field: str = DEFAULT_OWNER_FIELD) -> Optional[str]:
    """Read the owner id from a mapping or an object."""
    if isinstance(item, Mapping):
        return item.get(owner_field)
    return getattr(item, owner_field, None)


class OwnershipResolver:
    """Decides access to individual resources from their owner id."""

    def __init__(self, catalog: RoleCatalog = ROLE_CATALOG):
        self._catalog = catalog

    def can_access(
        self,
        principal: Optional[Principal],
        owner_id: Optional[str],
        subordinate_ids: Optional[Iterable[str]] = None,
        action: Action = Action.VIEW,
    ) -> bool:
        """
        Check whether a principal may act on a resource.

        Args:
            principal: Authenticated principal, or None
            owner_id: The resource's owner; None or "" means unassigned
            subordinate_ids: Flat set of the principal's direct reports
            action: Action being attempted on the resource

        Returns:
            True if the resource is within the principal's scope
        """
        subordinates = frozenset(subordinate_ids or ())
        return self._decide(principal, owner_id, subordinates, action)

    def filter_by_ownership(
        self,
        principal: Optional[Principal],
        items: Sequence[T],
        subordinate_ids: Optional[Iterable[str]] = None,
        owner_field: str = DEFAULT_OWNER_FIELD,
    ) -> List[T]:
        """
        Keep the items the principal may view.

        Applies the same precedence as ``can_access`` with a view action.
        Returns a new list in input order; items are not copied or changed.
        """
        scope = self._scope(principal)
        if scope is None or scope is OwnershipScope.PLATFORM:
            return []
        if scope in (OwnershipScope.TENANT, OwnershipScope.READ_ONLY):
            return list(items)

        subordinates = frozenset(subordinate_ids or ())
        return [
            item for item in items
            if self._decide(principal, owner_of(item, owner_field), subordinates, Action.VIEW)
        ]

    def _scope(self, principal: Optional[Principal]) -> Optional[OwnershipScope]:
        if principal is None:
            return None
        scope = self._catalog.scope(principal.role)
        if scope is None:
            logger.debug(f"Unrecognized role {principal.role!r} for principal {principal.id}")
        return scope

    def _decide(
        self,
        principal: Optional[Principal],
        owner_id: Optional[str],
        subordinates: frozenset,
        action: Action,
    ) -> bool:
        scope = self._scope(principal)
        if scope is None:
            return False

        if scope is OwnershipScope.PLATFORM:
            return False

        if scope is OwnershipScope.TENANT:
            return True

        # Read-only is enforced here too, so a matrix entry granting
        # writes to a read-only role still cannot reach a resource.
        if scope is OwnershipScope.READ_ONLY:
            return action in VIEW_ACTIONS

        if _is_unassigned(owner_id):
            return scope is OwnershipScope.TEAM

        if not isinstance(owner_id, str):
            logger.debug(f"Non-string owner {owner_id!r} treated as foreign")
            return False

        if scope is OwnershipScope.OWN:
            return owner_id == principal.id

        if scope is OwnershipScope.TEAM:
            return owner_id == principal.id or owner_id in subordinates

        return False
