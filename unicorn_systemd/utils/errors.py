"""Exceptions raised by unicorn-systemd tasks."""

from typing import Optional


class UnicornSystemdError(Exception):
    """Base class for all errors surfaced to the operator."""

    exit_code = 1


class ConfigError(UnicornSystemdError):
    """Invalid or missing setting."""


class PlatformError(UnicornSystemdError):
    """The remote host cannot run systemd services."""


class SystemdPermissionError(UnicornSystemdError, PermissionError):
    """Linger or daemon-reload could not be performed.

    The message always carries a remediation hint.
    """


class AlreadyExistsError(UnicornSystemdError, FileExistsError):
    """A local file would be clobbered."""


class TransportError(UnicornSystemdError):
    """SSH connection to the remote host failed."""


class CommandFailedError(UnicornSystemdError):
    """A command script exited with a non-zero status."""

    def __init__(self, message: str, returncode: int, stderr: Optional[str] = None):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr

    @property
    def exit_code(self) -> int:
        return self.returncode
