"""tenantguard: role and ownership based authorization for multi-tenant apps."""

__version__ = "0.1.0"
