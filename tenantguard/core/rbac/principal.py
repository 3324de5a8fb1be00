"""The authenticated actor a decision is made for."""

from dataclasses import dataclass
from typing import Optional, Union

from ..errors import CallerMisuseError
from .roles import PLATFORM_ROLES, ROLE_CATALOG, Role, RoleCatalog


@dataclass(frozen=True)
class Principal:
    """An already-authenticated user.

    Platform roles live outside every tenant, so a SUPERADMIN principal
    must not carry a tenant id.
    """

    id: str
    role: Role
    tenant_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise CallerMisuseError("Principal id must be a non-empty string")
        if self.role in PLATFORM_ROLES and self.tenant_id is not None:
            raise CallerMisuseError(
                f"{getattr(self.role, 'value', self.role)} principals cannot belong to a tenant"
            )

    @classmethod
    def from_claims(
        cls,
        id: str,
        role: Union[str, Role],
        tenant_id: Optional[str] = None,
        catalog: RoleCatalog = ROLE_CATALOG,
    ) -> "Principal":
        """Build a principal from identity claims, parsing the role name.

        Raises:
            UnknownRole: If the role is not in the catalog
            CallerMisuseError: If the claims break a principal invariant
        """
        return cls(id=id, role=catalog.parse(role), tenant_id=tenant_id)
