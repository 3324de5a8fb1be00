"""RBAC module for tenantguard.

Role catalog, permission matrix, ownership resolution and the composed
authorization engine.
"""

from .roles import Role, OwnershipScope, RoleCatalog, ROLE_CATALOG
from .permissions import Action, Capability, Module, PermissionMatrix, NO_CAPABILITY, DEFAULT_MATRIX
from .principal import Principal
from .ownership import OwnershipResolver
from .reasons import DenialReason
from .engine import AuthorizationEngine, build_engine
from .loader import load_matrix, parse_matrix

__all__ = [
    "Role",
    "OwnershipScope",
    "RoleCatalog",
    "ROLE_CATALOG",
    "Action",
    "Capability",
    "Module",
    "PermissionMatrix",
    "NO_CAPABILITY",
    "DEFAULT_MATRIX",
    "Principal",
    "OwnershipResolver",
    "DenialReason",
    "AuthorizationEngine",
    "build_engine",
    "load_matrix",
    "parse_matrix",
]
