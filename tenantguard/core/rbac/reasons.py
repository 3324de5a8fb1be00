"""Denial reason codes.

Codes are locale-agnostic; presentation layers map them to their own copy.
``DEFAULT_MESSAGES`` is a plain English fallback.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from .principal import Principal
from .roles import Role


class DenialReason(str, Enum):
    """Why a principal is typically denied, by role."""

    SIGN_IN_REQUIRED = "sign_in_required"
    READ_ONLY_ACCESS = "read_only_access"
    OWN_RESOURCES_ONLY = "own_resources_only"
    TEAM_RESOURCES_ONLY = "team_resources_only"
    PLATFORM_SCOPE_ONLY = "platform_scope_only"
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"


_ROLE_REASONS: Mapping[Role, DenialReason] = MappingProxyType({
    Role.AUDITOR: DenialReason.READ_ONLY_ACCESS,
    Role.SELLER: DenialReason.OWN_RESOURCES_ONLY,
    Role.SALES_LEADER: DenialReason.TEAM_RESOURCES_ONLY,
    Role.SUPERADMIN: DenialReason.PLATFORM_SCOPE_ONLY,
})

DEFAULT_MESSAGES: Mapping[DenialReason, str] = MappingProxyType({
    DenialReason.SIGN_IN_REQUIRED: "You must sign in to access this resource.",
    DenialReason.READ_ONLY_ACCESS: "Auditors have read-only access.",
    DenialReason.OWN_RESOURCES_ONLY: "You can only access your own resources.",
    DenialReason.TEAM_RESOURCES_ONLY: "You can only access your team's resources.",
    DenialReason.PLATFORM_SCOPE_ONLY: "Platform administrators cannot access tenant business data.",
    DenialReason.INSUFFICIENT_PERMISSIONS: "You do not have permission to perform this action.",
})


def denied_reason(principal: Optional[Principal]) -> DenialReason:
    """Role-appropriate reason code for a denial. Never used to decide."""
    if principal is None:
        return DenialReason.SIGN_IN_REQUIRED
    if not isinstance(principal.role, Role):
        return DenialReason.INSUFFICIENT_PERMISSIONS
    return _ROLE_REASONS.get(principal.role, DenialReason.INSUFFICIENT_PERMISSIONS)


def denied_message(
    principal: Optional[Principal],
    messages: Optional[Mapping[DenialReason, str]] = None,
) -> str:
    """Denial reason rendered through a message table."""
    reason = denied_reason(principal)
    table = messages if messages is not None else DEFAULT_MESSAGES
    return table.get(reason, DEFAULT_MESSAGES[reason])
