"""Tests for the permission matrix."""

import dataclasses

import pytest

from tenantguard.core.errors import ConfigurationError, IncompleteMatrix, UnknownRole
from tenantguard.core.rbac.permissions import (
    BUSINESS_MODULES,
    DEFAULT_MATRIX,
    NO_CAPABILITY,
    Action,
    Capability,
    Module,
    PermissionMatrix,
)
from tenantguard.core.rbac.roles import Role

from tests.factories import full_row


class TestCapability:
    """Test capability sets."""

    def test_no_capability_denies_everything(self):
        for action in Action:
            assert not NO_CAPABILITY.allows(action)
        assert NO_CAPABILITY.is_empty

    def test_allows_projects_flags(self):
        capability = Capability(can_view=True, can_approve=True)
        assert capability.allows(Action.VIEW)
        assert capability.allows(Action.APPROVE)
        assert capability.allows("approve")
        assert not capability.allows(Action.EDIT)
        assert not capability.is_empty

    def test_allows_unknown_action(self):
        """Test unknown action names deny instead of raising."""
        assert not Capability(can_view=True).allows("fly")

    def test_capability_is_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            NO_CAPABILITY.can_view = True


class TestDefaultMatrix:
    """Test the built-in table."""

    def test_declares_all_modules(self):
        assert set(DEFAULT_MATRIX.modules()) == {m.value for m in Module}

    def test_total_over_modules_and_roles(self):
        """Test every declared module has an entry for every role."""
        table = DEFAULT_MATRIX.as_dict()
        for module in DEFAULT_MATRIX.modules():
            assert set(table[module]) == {role.value for role in Role}

    def test_superadmin_excluded_from_business_modules(self):
        """Test the platform role has no rights in tenant business modules."""
        for module in BUSINESS_MODULES:
            assert DEFAULT_MATRIX.capabilities(module, Role.SUPERADMIN) == NO_CAPABILITY

    def test_superadmin_platform_modules(self):
        assert DEFAULT_MATRIX.can_create("tenants", Role.SUPERADMIN)
        assert DEFAULT_MATRIX.can_edit("tenants", Role.SUPERADMIN)
        # Tenants are soft-deleted
        assert not DEFAULT_MATRIX.can_delete("tenants", Role.SUPERADMIN)
        assert DEFAULT_MATRIX.can_delete("locations", Role.SUPERADMIN)
        assert DEFAULT_MATRIX.can_create("users", Role.SUPERADMIN)

    def test_tenants_module_is_platform_only(self):
        for role in (Role.ADMIN, Role.SALES_LEADER, Role.SELLER, Role.AUDITOR):
            assert not DEFAULT_MATRIX.can_view("tenants", role)

    def test_customers_rows(self):
        assert DEFAULT_MATRIX.can_assign("customers", Role.ADMIN)
        assert DEFAULT_MATRIX.can_assign("customers", Role.SALES_LEADER)
        assert not DEFAULT_MATRIX.can_assign("customers", Role.SELLER)
        assert DEFAULT_MATRIX.can_edit("customers", Role.SELLER)
        assert not DEFAULT_MATRIX.can_delete("customers", Role.SELLER)
        assert not DEFAULT_MATRIX.can_delete("customers", Role.SALES_LEADER)

    def test_sales_approval(self):
        assert DEFAULT_MATRIX.can_approve("sales", Role.ADMIN)
        assert DEFAULT_MATRIX.can_approve("sales", Role.SALES_LEADER)
        assert not DEFAULT_MATRIX.can_approve("sales", Role.SELLER)
        assert not DEFAULT_MATRIX.can_approve("sales", Role.AUDITOR)

    def test_seller_inventory_read_only(self):
        assert DEFAULT_MATRIX.can_view("vehicles", Role.SELLER)
        assert not DEFAULT_MATRIX.can_create("vehicles", Role.SELLER)
        assert not DEFAULT_MATRIX.can_edit("consignments", Role.SELLER)
        assert DEFAULT_MATRIX.can_delete("consignments", Role.SALES_LEADER)

    def test_seller_cannot_see_users(self):
        assert DEFAULT_MATRIX.capabilities("users", Role.SELLER) == NO_CAPABILITY

    def test_auditor_never_writes(self):
        for module in DEFAULT_MATRIX.modules():
            for action in (Action.CREATE, Action.EDIT, Action.DELETE, Action.ASSIGN, Action.APPROVE):
                assert not DEFAULT_MATRIX.allows(module, Role.AUDITOR, action)


class TestFailClosed:
    """Test absent entries deny."""

    def test_unregistered_module(self):
        for role in Role:
            assert DEFAULT_MATRIX.capabilities("unregistered_module", role) == NO_CAPABILITY
        assert not DEFAULT_MATRIX.can_create("unregistered_module", Role.AUDITOR)

    def test_unparsed_role_string(self):
        """Test a raw string is not treated as a role."""
        assert DEFAULT_MATRIX.capabilities("customers", "ADMIN") == NO_CAPABILITY

    def test_non_string_module(self):
        assert DEFAULT_MATRIX.capabilities(None, Role.ADMIN) == NO_CAPABILITY
        assert not DEFAULT_MATRIX.has_module(None)


class TestValidation:
    """Test eager validation on construction."""

    def test_missing_role_raises(self):
        row = full_row(NO_CAPABILITY)
        del row[Role.AUDITOR]

        with pytest.raises(IncompleteMatrix) as exc_info:
            PermissionMatrix({"reports": row})
        assert exc_info.value.missing == [("reports", "AUDITOR")]

    def test_declared_module_without_entries(self):
        """Test a declared module with no row reports every role."""
        with pytest.raises(IncompleteMatrix) as exc_info:
            PermissionMatrix({}, modules=["reports"])
        assert len(exc_info.value.missing) == len(Role)

    def test_unknown_role_key(self):
        row = full_row(NO_CAPABILITY)
        row["OWNER"] = NO_CAPABILITY

        with pytest.raises(UnknownRole):
            PermissionMatrix({"reports": row})

    def test_role_names_accepted_as_keys(self):
        row = {role.value: NO_CAPABILITY for role in Role}
        matrix = PermissionMatrix({"reports": row})
        assert matrix.capabilities("reports", Role.ADMIN) == NO_CAPABILITY

    def test_duplicate_role_keys_rejected(self):
        """Test a role named twice in one row is rejected."""
        row = full_row(NO_CAPABILITY)
        row["seller"] = Capability(can_view=True, can_delete=True)

        with pytest.raises(ConfigurationError, match="Duplicate entry reports/SELLER"):
            PermissionMatrix({"reports": row})

    def test_entry_must_be_capability(self):
        row = full_row(NO_CAPABILITY)
        row[Role.ADMIN] = {"can_view": True}

        with pytest.raises(ConfigurationError):
            PermissionMatrix({"reports": row})

    def test_undeclared_entries_rejected(self):
        with pytest.raises(ConfigurationError):
            PermissionMatrix(
                {"reports": full_row(NO_CAPABILITY), "extra": full_row(NO_CAPABILITY)},
                modules=["reports"],
            )

    def test_platform_role_in_business_module_rejected(self):
        row = full_row(NO_CAPABILITY)
        row[Role.SUPERADMIN] = Capability(can_view=True)

        with pytest.raises(ConfigurationError):
            PermissionMatrix({"leads": row})

    def test_platform_role_in_platform_module_allowed(self):
        row = full_row(NO_CAPABILITY)
        row[Role.SUPERADMIN] = Capability(can_view=True)

        matrix = PermissionMatrix({"billing": row}, platform_modules=["billing"])
        assert matrix.can_view("billing", Role.SUPERADMIN)
        assert matrix.is_platform_module("billing")

    def test_new_module_is_data_only(self):
        """Test a new module needs only a new row."""
        row = full_row(NO_CAPABILITY)
        row[Role.SELLER] = Capability(can_view=True, can_create=True)

        matrix = PermissionMatrix({"leads": row})
        assert matrix.can_create("leads", Role.SELLER)
        assert not matrix.can_create("leads", Role.ADMIN)
