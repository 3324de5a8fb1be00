"""Loading permission matrices from versioned YAML documents.

Document format::

    version: 1
    platform_modules: [locations, users, tenants]   # optional
    modules:
      customers:
        SUPERADMIN: {}                               # explicit "no rights"
        ADMIN: {view: true, create: true, edit: true, delete: true}
        SELLER: [view, create, edit]                 # list shorthand
        ...

Every declared module must list every role; validation happens before a
matrix object exists, so a bad file stops startup.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from ...common.config import load_config
from ...common.logger import get_logger
from ..config import Settings
from ..errors import ConfigurationError
from .permissions import (
    DEFAULT_MATRIX,
    PLATFORM_MODULES,
    Action,
    Capability,
    PermissionMatrix,
)
from .roles import ROLE_CATALOG, RoleCatalog

logger = get_logger("matrix_loader")

SUPPORTED_VERSIONS = frozenset([1])


def parse_capability(value: Any, where: str) -> Capability:
    """Parse one capability entry.

    Args:
        value: Mapping of action -> bool, list of action names, or None
        where: "module/ROLE" for error messages

    Returns:
        Capability instance

    Raises:
        ConfigurationError: On unknown actions, non-string list items or
            non-boolean flags
    """
    if value is None:
        return Capability()

    if isinstance(value, list):
        for action in value:
            if not isinstance(action, str):
                raise ConfigurationError(
                    f"Entry {where} lists a non-string action: {action!r}"
                )
        value = {action: True for action in value}

    if not isinstance(value, dict):
        raise ConfigurationError(
            f"Entry {where} must be a mapping or a list, got {type(value).__name__}"
        )

    flags: Dict[str, bool] = {}
    for key, flag in value.items():
        name = str(key)
        if name.startswith("can_"):
            name = name[len("can_"):]
        try:
            action = Action(name)
        except ValueError:
            raise ConfigurationError(
                f"Entry {where} has unknown capability '{key}'"
            ) from None
        if not isinstance(flag, bool):
            raise ConfigurationError(
                f"Entry {where} capability '{key}' must be true or false"
            )
        flags[f"can_{action.value}"] = flag

    return Capability(**flags)


def parse_matrix(
    document: Mapping[str, Any],
    catalog: RoleCatalog = ROLE_CATALOG,
) -> PermissionMatrix:
    """Parse and validate a matrix document.

    Args:
        document: Parsed YAML document
        catalog: Role catalog to validate role names against

    Returns:
        Validated PermissionMatrix

    Raises:
        ConfigurationError: Malformed document or unsupported version
        UnknownRole: A role name is not in the catalog
        IncompleteMatrix: A (module, role) pair is missing
    """
    version = document.get("version")
    # YAML booleans compare equal to 1
    if isinstance(version, bool) or version not in SUPPORTED_VERSIONS:
        raise ConfigurationError(
            f"Unsupported permission matrix version: {version!r}"
        )

    modules = document.get("modules")
    if not isinstance(modules, dict) or not modules:
        raise ConfigurationError("Permission matrix must define 'modules'")

    entries: Dict[str, Dict[Any, Capability]] = {}
    for module, row in modules.items():
        if row is None:
            row = {}
        if not isinstance(row, dict):
            raise ConfigurationError(
                f"Module '{module}' must map role names to capabilities"
            )
        entries[str(module)] = {}
        for role_name, value in row.items():
            role = catalog.parse(role_name)
            if role in entries[str(module)]:
                raise ConfigurationError(f"Duplicate entry {module}/{role.value}")
            entries[str(module)][role] = parse_capability(
                value, f"{module}/{role.value}"
            )

    platform_modules = document.get("platform_modules", sorted(PLATFORM_MODULES))
    if not isinstance(platform_modules, list):
        raise ConfigurationError("'platform_modules' must be a list")

    return PermissionMatrix(
        entries,
        catalog=catalog,
        platform_modules=[str(m) for m in platform_modules],
        version=version,
    )


def load_matrix(
    path: Union[str, Path],
    catalog: RoleCatalog = ROLE_CATALOG,
) -> PermissionMatrix:
    """Load and validate a matrix from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the file is not a valid matrix
    """
    try:
        document = load_config(path)
    except (yaml.YAMLError, TypeError) as e:
        raise ConfigurationError(f"Invalid permission matrix file {path}: {e}") from e

    matrix = parse_matrix(document, catalog=catalog)
    logger.info(
        f"Loaded permission matrix v{matrix.version} from {path} "
        f"({len(matrix.modules())} modules)"
    )
    return matrix


def build_matrix(settings: Optional[Settings] = None) -> PermissionMatrix:
    """Matrix selected by settings: a YAML file, or the built-in table."""
    if settings is not None and settings.authz_matrix_path:
        return load_matrix(settings.authz_matrix_path)

    logger.debug("Using built-in permission matrix")
    return DEFAULT_MATRIX
