"""Data models for the Unicorn systemd service."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..utils.constants import SYSTEM_SYSTEMD_DIR, USER_SYSTEMD_DIR
from ..utils.errors import ConfigError


class InstallMode(Enum):
    """Where the unit is installed and which systemd manager owns it."""

    USER = "user"
    SYSTEM = "system"

    @classmethod
    def from_setting(cls, value: Optional[str]) -> 'InstallMode':
        """Convert the ``unicorn_system_or_user`` setting to an InstallMode.

        Args:
            value: Raw setting value

        Returns:
            InstallMode enum value

        Raises:
            ConfigError: If the value is neither 'user' nor 'system'
        """
        try:
            return cls(value)
        except ValueError:
            raise ConfigError(
                f"Undefined unicorn_system_or_user value {value!r}. Must be 'user' or 'system'."
            ) from None

    @property
    def systemctl_flags(self) -> Tuple[str, ...]:
        """Flags passed to every systemctl and journalctl call."""
        return ("--user",) if self is InstallMode.USER else ()

    @property
    def config_dir(self) -> str:
        return USER_SYSTEMD_DIR if self is InstallMode.USER else SYSTEM_SYSTEMD_DIR

    @property
    def requires_elevation(self) -> bool:
        """Whether mutating verbs need the setup user (unit lives in a root-owned path)."""
        return self is InstallMode.SYSTEM

    @property
    def wanted_by(self) -> str:
        return "default.target" if self is InstallMode.USER else "multi-user.target"

    def config_path(self, service_name: str) -> str:
        """Get the unit file path for this mode.

        Args:
            service_name: Systemd unit name (e.g. 'unicorn-blog.service')

        Returns:
            Absolute path, possibly starting with $HOME for user units
        """
        return f"{self.config_dir}/{service_name}"


@dataclass(frozen=True)
class ServiceConfig:
    """Resolved identity of the Unicorn service for one task invocation.

    Attributes:
        application_name: Application the unit runs
        service_name: Systemd unit name, e.g. 'unicorn-blog.service'
        install_mode: User or system installation
        systemd_config_path: Remote path of the unit file
        socket_path: Unix socket Unicorn listens on, used by the reverse proxy
    """

    application_name: str
    service_name: str
    install_mode: InstallMode
    systemd_config_path: str
    socket_path: str

    def __post_init__(self):
        """Validate service configuration after initialization."""
        if not self.application_name:
            raise ConfigError("application_name cannot be empty")

        if not self.service_name:
            raise ConfigError("Service name cannot be empty")

    def is_user_service(self) -> bool:
        return self.install_mode is InstallMode.USER

    def to_dict(self) -> dict:
        """Convert to dictionary for template rendering.

        Returns:
            Dictionary representation of the service config
        """
        return {
            "application_name": self.application_name,
            "service_name": self.service_name,
            "install_mode": self.install_mode.value,
            "systemd_config_path": self.systemd_config_path,
            "socket_path": self.socket_path,
            "wanted_by": self.install_mode.wanted_by,
        }


@dataclass(frozen=True)
class ElevationContext:
    """Identities involved in a privileged block."""

    original_user: Optional[str]
    setup_user: Optional[str]

    @property
    def elevated(self) -> bool:
        return bool(self.setup_user) and self.setup_user != self.original_user
