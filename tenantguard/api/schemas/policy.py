"""Request and response shapes for policy queries."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tenantguard.core.rbac.permissions import RESOURCE_ACTIONS, Action
from tenantguard.core.rbac.principal import Principal
from tenantguard.core.rbac.reasons import DenialReason
from tenantguard.core.rbac.roles import PLATFORM_ROLES, ROLE_CATALOG, Role


class PrincipalSchema(BaseModel):
    """Authenticated principal as supplied by the identity provider."""
    id: str = Field(..., min_length=1)
    role: Role
    tenant_id: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, value: Any) -> Role:
        # UnknownRole is a ValueError, reported as a validation error
        return ROLE_CATALOG.parse(value)

    @model_validator(mode="after")
    def check_platform_tenant(self) -> "PrincipalSchema":
        if self.role in PLATFORM_ROLES and self.tenant_id is not None:
            raise ValueError(f"{self.role.value} principals cannot belong to a tenant")
        return self

    def to_principal(self) -> Principal:
        return Principal(id=self.id, role=self.role, tenant_id=self.tenant_id)


def _module_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Module name must not be empty")
    return value


class ModuleQuery(BaseModel):
    """Module-level capability question."""
    principal: Optional[PrincipalSchema] = None
    module: str = Field(..., min_length=1)
    action: Action = Action.VIEW

    @field_validator("module")
    @classmethod
    def check_module(cls, value: str) -> str:
        return _module_name(value)


class OwnershipQuery(BaseModel):
    """Resource-level question that ignores the module matrix."""
    principal: Optional[PrincipalSchema] = None
    owner_id: Optional[str] = None
    subordinate_ids: List[str] = Field(default_factory=list)


class ResourceQuery(OwnershipQuery):
    """Two-gate question: module capability and ownership."""
    module: str = Field(..., min_length=1)
    action: Action = Action.EDIT

    @field_validator("module")
    @classmethod
    def check_module(cls, value: str) -> str:
        return _module_name(value)

    @field_validator("action")
    @classmethod
    def check_resource_action(cls, value: Action) -> Action:
        if value not in RESOURCE_ACTIONS:
            allowed = ", ".join(sorted(a.value for a in RESOURCE_ACTIONS))
            raise ValueError(f"Action must target a single resource ({allowed})")
        return value


class FilterQuery(BaseModel):
    """Collection to narrow down to the principal's visible items."""
    principal: Optional[PrincipalSchema] = None
    items: List[Dict[str, Any]] = Field(default_factory=list)
    subordinate_ids: List[str] = Field(default_factory=list)
    owner_field: str = Field("owner_id", min_length=1)


class GuardQuery(BaseModel):
    """Combined requirements for a UI guard; all given ones must hold."""
    principal: Optional[PrincipalSchema] = None
    require_role: Optional[Role] = None
    require_any_role: Optional[List[Role]] = None
    require_view_module: Optional[str] = None
    require_create_module: Optional[str] = None
    require_edit_module: Optional[str] = None
    require_delete_module: Optional[str] = None


class DecisionResponse(BaseModel):
    """Outcome of a decision query."""
    allowed: bool
    reason: Optional[DenialReason] = None


class FilterResponse(BaseModel):
    """Visible subset of a collection."""
    items: List[Dict[str, Any]]
    total: int


class CapabilityResponse(BaseModel):
    """Capability set of a role in a module."""
    module: str
    role: Optional[Role] = None
    can_view: bool = False
    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_assign: bool = False
    can_approve: bool = False
