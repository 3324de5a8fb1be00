"""Core authorization components for tenantguard."""
