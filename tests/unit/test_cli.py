"""Tests for the matrix check CLI."""

import logging
from pathlib import Path

import pytest

from tenantguard.__main__ import format_matrix, main
from tenantguard.common.logger import LOGGER_ROOT
from tenantguard.core.config import get_settings
from tenantguard.core.rbac.permissions import DEFAULT_MATRIX

SHIPPED_MATRIX = Path(__file__).parents[2] / "config" / "permissions.yaml"


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch):
    """Fresh settings and no leftover handlers on the package logger."""
    monkeypatch.delenv("AUTHZ_MATRIX_PATH", raising=False)
    monkeypatch.setenv("LOG_TO_FILE", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    logger = logging.getLogger(LOGGER_ROOT)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


class TestFormatMatrix:
    def test_lists_every_module_and_role(self):
        output = format_matrix(DEFAULT_MATRIX)

        assert output.startswith("Permission matrix v1")
        assert "tenants (platform)" in output
        assert "  SELLER        view, create, edit" in output


class TestMain:
    """Tests for CLI exit codes."""

    def test_valid_file(self, capsys):
        assert main([str(SHIPPED_MATRIX)]) == 0
        assert "customers" in capsys.readouterr().out

    def test_builtin_matrix(self, capsys):
        assert main([]) == 0
        assert "consignments" in capsys.readouterr().out

    def test_matrix_from_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("AUTHZ_MATRIX_PATH", str(SHIPPED_MATRIX))
        assert main([]) == 0
        assert "Permission matrix v1" in capsys.readouterr().out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "absent.yaml")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_malformed_entry(self, matrix_yaml, capsys):
        path = matrix_yaml("version: 1\nmodules:\n  leads:\n    ADMIN: [{view: true}]\n")

        assert main([str(path)]) == 1
        assert "leads/ADMIN" in capsys.readouterr().err

    def test_invalid_file(self, matrix_yaml, capsys):
        path = matrix_yaml("version: 1\nmodules:\n  leads:\n    ADMIN: [view]\n")

        assert main([str(path)]) == 1
        assert "Invalid permission matrix" in capsys.readouterr().err
