"""Utility functions and constants."""

from .constants import APP_NAME, APP_VERSION
from .errors import (
    AlreadyExistsError,
    CommandFailedError,
    ConfigError,
    PlatformError,
    SystemdPermissionError,
    TransportError,
    UnicornSystemdError,
)

__all__ = [
    "APP_NAME",
    "APP_VERSION",
    "AlreadyExistsError",
    "CommandFailedError",
    "ConfigError",
    "PlatformError",
    "SystemdPermissionError",
    "TransportError",
    "UnicornSystemdError",
]
