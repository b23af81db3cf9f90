"""Core functionality for the Unicorn systemd service."""

from .config_manager import SettingsStore, resolve_install_mode, resolve_service_config
from .command_runner import CommandRunner
from .elevation import PrivilegeElevator
from .template_manager import TemplateRenderer, TemplateResolver
from .service_manager import ServiceManager
from .installer import ServiceInstaller, generate
from .inspector import RemoteInspector

__all__ = [
    "SettingsStore",
    "resolve_install_mode",
    "resolve_service_config",
    "CommandRunner",
    "PrivilegeElevator",
    "TemplateRenderer",
    "TemplateResolver",
    "ServiceManager",
    "ServiceInstaller",
    "generate",
    "RemoteInspector",
]
