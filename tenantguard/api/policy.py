"""Policy query surface for request handlers and UI guards.

Wraps an ``AuthorizationEngine`` with validated request/response shapes.
Queries accept either schema instances or plain dicts; dicts are
validated first, so a malformed payload (unknown role, empty module name)
raises ``pydantic.ValidationError`` and never reaches the engine.
"""

from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from tenantguard.common.logger import get_logger
from tenantguard.core.rbac.engine import AuthorizationEngine
from tenantguard.core.rbac.principal import Principal
from tenantguard.core.rbac.reasons import DenialReason

from .schemas.policy import (
    CapabilityResponse,
    DecisionResponse,
    FilterQuery,
    FilterResponse,
    GuardQuery,
    ModuleQuery,
    OwnershipQuery,
    PrincipalSchema,
    ResourceQuery,
)

logger = get_logger("policy_api")

Q = TypeVar("Q", bound=BaseModel)


def _coerce(model: Type[Q], query: Union[Q, Mapping[str, Any]]) -> Q:
    if isinstance(query, model):
        return query
    return model.model_validate(query)


def _principal(schema: Optional[PrincipalSchema]) -> Optional[Principal]:
    return schema.to_principal() if schema is not None else None


class PolicyQueryAPI:
    """Answers policy questions with plain, serializable results."""

    def __init__(self, engine: AuthorizationEngine):
        self.engine = engine

    def check_module(self, query: Union[ModuleQuery, Mapping[str, Any]]) -> DecisionResponse:
        """Can the principal perform ``action`` anywhere in ``module``?"""
        query = _coerce(ModuleQuery, query)
        principal = _principal(query.principal)
        allowed = self.engine.has_permission(principal, query.module, query.action)
        return self._decision(principal, allowed)

    def check_access(self, query: Union[OwnershipQuery, Mapping[str, Any]]) -> DecisionResponse:
        """Is the resource owner within the principal's scope?"""
        query = _coerce(OwnershipQuery, query)
        principal = _principal(query.principal)
        allowed = self.engine.can_access_resource(
            principal, query.owner_id, query.subordinate_ids
        )
        return self._decision(principal, allowed)

    def check_resource(self, query: Union[ResourceQuery, Mapping[str, Any]]) -> DecisionResponse:
        """Module capability and ownership, both required."""
        query = _coerce(ResourceQuery, query)
        principal = _principal(query.principal)
        allowed = self.engine.can_act_on_resource(
            principal, query.module, query.action, query.owner_id, query.subordinate_ids
        )
        return self._decision(principal, allowed)

    def filter_items(self, query: Union[FilterQuery, Mapping[str, Any]]) -> FilterResponse:
        query = _coerce(FilterQuery, query)
        items = self.engine.filter_by_ownership(
            _principal(query.principal),
            query.items,
            query.subordinate_ids,
            owner_field=query.owner_field,
        )
        return FilterResponse(items=items, total=len(items))

    def check_guard(self, query: Union[GuardQuery, Mapping[str, Any]]) -> DecisionResponse:
        """Evaluate every requirement present on the guard."""
        query = _coerce(GuardQuery, query)
        principal = _principal(query.principal)
        engine = self.engine

        checks = []
        if query.require_role is not None:
            checks.append(engine.has_role(principal, query.require_role))
        if query.require_any_role is not None:
            checks.append(engine.has_any_role(principal, query.require_any_role))
        if query.require_view_module is not None:
            checks.append(engine.can_view_module(principal, query.require_view_module))
        if query.require_create_module is not None:
            checks.append(engine.can_create_in_module(principal, query.require_create_module))
        if query.require_edit_module is not None:
            checks.append(engine.can_edit_in_module(principal, query.require_edit_module))
        if query.require_delete_module is not None:
            checks.append(engine.can_delete_in_module(principal, query.require_delete_module))

        # A guard without requirements only asks for a signed-in principal
        allowed = all(checks) if checks else principal is not None
        return self._decision(principal, allowed)

    def capabilities(
        self,
        principal: Union[PrincipalSchema, Mapping[str, Any], None],
        module: str,
    ) -> CapabilityResponse:
        schema = _coerce(PrincipalSchema, principal) if principal is not None else None
        capability = self.engine.module_capabilities(_principal(schema), module)
        return CapabilityResponse(
            module=module,
            role=schema.role if schema is not None else None,
            **capability.to_dict(),
        )

    def denied_reason(
        self,
        principal: Union[PrincipalSchema, Mapping[str, Any], None],
    ) -> DenialReason:
        schema = _coerce(PrincipalSchema, principal) if principal is not None else None
        return self.engine.denied_reason(_principal(schema))

    def _decision(self, principal: Optional[Principal], allowed: bool) -> DecisionResponse:
        if allowed:
            return DecisionResponse(allowed=True)
        reason = self.engine.denied_reason(principal)
        logger.debug(f"Denied {principal.id if principal else 'anonymous'}: {reason.value}")
        return DecisionResponse(allowed=False, reason=reason)
