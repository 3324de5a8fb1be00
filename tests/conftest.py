"""Pytest configuration and shared fixtures."""

import pytest

from tenantguard.core.rbac import DEFAULT_MATRIX, AuthorizationEngine, Principal, Role


@pytest.fixture
def engine():
    """Engine over the built-in matrix, denying on misuse."""
    return AuthorizationEngine(DEFAULT_MATRIX)


@pytest.fixture
def strict_engine():
    """Engine over the built-in matrix, raising on misuse."""
    return AuthorizationEngine(DEFAULT_MATRIX, strict=True)


@pytest.fixture
def superadmin():
    return Principal(id="root", role=Role.SUPERADMIN)


@pytest.fixture
def admin():
    return Principal(id="a1", role=Role.ADMIN, tenant_id="t1")


@pytest.fixture
def leader():
    return Principal(id="l1", role=Role.SALES_LEADER, tenant_id="t1")


@pytest.fixture
def seller():
    return Principal(id="s1", role=Role.SELLER, tenant_id="t1")


@pytest.fixture
def auditor():
    return Principal(id="au1", role=Role.AUDITOR, tenant_id="t1")


@pytest.fixture
def matrix_yaml(tmp_path):
    """Write a YAML document to a temporary file and return its path."""
    def _write(text: str, name: str = "permissions.yaml"):
        path = tmp_path / name
        path.write_text(text)
        return path
    return _write
