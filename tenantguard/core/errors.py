"""Exception types for tenantguard.

Only configuration problems and caller misuse are exceptions. A denied
decision is a normal ``False`` return value and never raised.
"""

from typing import Iterable, Optional


class AuthorizationError(Exception):
    """Base class for tenantguard errors."""


class ConfigurationError(AuthorizationError):
    """Role catalog or permission matrix is invalid.

    Raised while building configuration at startup. A process must refuse
    to answer queries with a configuration that failed validation.
    """


class UnknownRole(ConfigurationError, ValueError):
    """A role name is not part of the role catalog."""

    def __init__(self, role: object, context: Optional[str] = None):
        self.role = role
        message = f"Unknown role: {role!r}"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)


class IncompleteMatrix(ConfigurationError):
    """The permission matrix is missing (module, role) entries."""

    def __init__(self, missing: Iterable[tuple[str, str]]):
        self.missing = sorted(missing)
        pairs = ", ".join(f"{module}/{role}" for module, role in self.missing)
        super().__init__(f"Permission matrix is missing entries: {pairs}")


class CallerMisuseError(AuthorizationError, ValueError):
    """A decision query was made with an invalid call shape."""
