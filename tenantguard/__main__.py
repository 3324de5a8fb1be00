"""CLI for validating permission matrix files.

Usage: python -m tenantguard [permissions.yaml]

Without an argument the file named by AUTHZ_MATRIX_PATH is checked, or the
built-in matrix when that is unset.
"""

import sys

from .common.logger import LOGGER_ROOT, setup_logger
from .core.config import get_settings
from .core.errors import ConfigurationError
from .core.rbac.loader import build_matrix, load_matrix
from .core.rbac.permissions import Action


def format_matrix(matrix) -> str:
    """Render a matrix as one line per (module, role)."""
    lines = [f"Permission matrix v{matrix.version}"]
    for module in matrix.modules():
        marker = " (platform)" if matrix.is_platform_module(module) else ""
        lines.append(f"{module}{marker}")
        for role in matrix.roles():
            capability = matrix.capabilities(module, role)
            granted = [action.value for action in Action if capability.allows(action)]
            lines.append(f"  {role.value:<13} {', '.join(granted) or '-'}")
    return "\n".join(lines)


def main(argv=None) -> int:
    """Main entry point for the matrix check CLI."""
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()

    setup_logger(
        LOGGER_ROOT,
        log_dir=settings.log_dir,
        level=settings.log_level,
        file_logging=settings.log_to_file,
    )

    try:
        if argv:
            matrix = load_matrix(argv[0])
        else:
            matrix = build_matrix(settings)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ConfigurationError as e:
        print(f"Invalid permission matrix: {e}", file=sys.stderr)
        return 1

    print(format_matrix(matrix))
    return 0


if __name__ == "__main__":
    sys.exit(main())
