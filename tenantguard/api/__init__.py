"""Boundary surfaces for tenantguard: policy queries and FastAPI guards."""

from .policy import PolicyQueryAPI
from .guards import ModulePermissionDependency, get_engine, install_engine, require_module_permission

__all__ = [
    "PolicyQueryAPI",
    "ModulePermissionDependency",
    "get_engine",
    "install_engine",
    "require_module_permission",
]
