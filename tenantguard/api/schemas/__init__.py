"""Schemas for tenantguard policy queries."""
