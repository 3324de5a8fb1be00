"""Common utilities for tenantguard."""

from .logger import setup_logger, get_logger
from .config import load_config

__all__ = ["get_logger", "load_config", "setup_logger"]
