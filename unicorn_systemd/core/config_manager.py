"""Settings store and resolution of the Unicorn service identity."""

import getpass
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml

from ..models.service import InstallMode, ServiceConfig
from ..utils.errors import ConfigError

logger = logging.getLogger(__name__)

_MISSING = object()

Default = Callable[['SettingsStore'], Any]


def _default_deploy_to(s: 'SettingsStore') -> str:
    return f"/home/{s.get('user')}/{s.get('application_name')}"


def _default_systemd_config_path(s: 'SettingsStore') -> str:
    return resolve_config_path(resolve_install_mode(s), s.get("unicorn_service_name"))


DEFAULTS: Dict[str, Default] = {
    "user": lambda s: getpass.getuser(),
    "setup_user": lambda s: s.get("user"),
    "port": lambda s: None,
    "ssh_options": lambda s: "",
    "deploy_to": _default_deploy_to,
    "current_path": lambda s: f"{s.get('deploy_to')}/current",
    "shared_path": lambda s: f"{s.get('deploy_to')}/shared",
    "rails_env": lambda s: "production",
    "bundle_bin": lambda s: "bundle",
    "unicorn_config_path": lambda s: f"{s.get('current_path')}/config/unicorn.rb",
    "unicorn_service_name": lambda s: f"unicorn-{s.get('application_name')}.service",
    "unicorn_systemd_config_path": _default_systemd_config_path,
    "nginx_socket_path": lambda s: f"{s.get('shared_path')}/unicorn.sock",
}


class SettingsStore:
    """Key/value settings with lazily computed defaults.

    Lookup order is explicit values (config file, then command line
    overrides) before computed defaults. Defaults are evaluated on every
    lookup against the store they are looked up on, so a derived view from
    ``with_overrides`` sees its own values.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None,
                 defaults: Optional[Mapping[str, Default]] = None):
        """Initialize the settings store.

        Args:
            values: Explicitly configured settings
            defaults: Computed defaults, keyed by setting name
        """
        self._values: Dict[str, Any] = dict(values or {})
        self._defaults: Dict[str, Default] = dict(DEFAULTS if defaults is None else defaults)

    @classmethod
    def load(cls, path: Path, required: bool = False,
             overrides: Optional[Mapping[str, Any]] = None) -> 'SettingsStore':
        """Load settings from a YAML file.

        Args:
            path: YAML file to read
            required: Fail when the file does not exist
            overrides: Values that take precedence over the file

        Returns:
            SettingsStore instance

        Raises:
            ConfigError: If the file is missing (when required) or invalid
        """
        data: Dict[str, Any] = {}

        if path.exists():
            try:
                with open(path, 'r') as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"YAML parsing error in {path}: {e}") from e

            if loaded is None:
                logger.warning(f"Empty config file {path}, using defaults")
            elif not isinstance(loaded, dict):
                raise ConfigError(f"Config file {path} must contain a mapping")
            else:
                data = loaded
                logger.debug(f"Loaded {len(data)} settings from {path}")
        elif required:
            raise ConfigError(f"Config file not found: {path}")
        else:
            logger.debug(f"Config file {path} not found, using defaults")

        data.update(overrides or {})
        return cls(data)

    def get(self, key: str) -> Any:
        """Get a setting value.

        Args:
            key: Setting key

        Returns:
            Explicit value, or the computed default

        Raises:
            ConfigError: If the setting has neither a value nor a default
        """
        value = self.fetch(key, _MISSING)
        if value is _MISSING:
            raise ConfigError(f"Missing required setting: {key}")
        return value

    def fetch(self, key: str, default: Any = None) -> Any:
        """Get a setting value, falling back to ``default`` when unset."""
        if key in self._values:
            return self._values[key]
        if key in self._defaults:
            return self._defaults[key](self)
        return default

    def is_set(self, key: str) -> bool:
        """Whether ``key`` was configured explicitly, ignoring computed defaults."""
        return key in self._values

    def with_overrides(self, **values: Any) -> 'SettingsStore':
        """Create a derived store. The receiver is left untouched.

        Args:
            **values: Settings replaced in the derived store

        Returns:
            New SettingsStore sharing this store's defaults
        """
        merged = dict(self._values)
        merged.update(values)
        return SettingsStore(merged, self._defaults)

    def resolved(self) -> Dict[str, Any]:
        """Resolve every known setting that can be resolved.

        Settings whose value or default cannot be computed are skipped.

        Returns:
            Dictionary of setting name to value
        """
        result = {}
        for key in list(self._defaults) + list(self._values):
            try:
                result[key] = self.get(key)
            except ConfigError as e:
                logger.debug(f"Skipping setting {key}: {e}")
        return result


def resolve_install_mode(settings: SettingsStore) -> InstallMode:
    """Resolve ``unicorn_system_or_user``.

    Raises:
        ConfigError: If the setting is absent, or anything other than 'user' or 'system'
    """
    if not settings.is_set("unicorn_system_or_user"):
        raise ConfigError("Missing required setting: unicorn_system_or_user. Must be 'user' or 'system'.")
    return InstallMode.from_setting(settings.get("unicorn_system_or_user"))


def resolve_config_path(mode: InstallMode, service_name: str) -> str:
    return mode.config_path(service_name)


def resolve_service_config(settings: SettingsStore) -> ServiceConfig:
    """Build the ServiceConfig for one task invocation.

    Args:
        settings: Settings store to resolve from

    Returns:
        ServiceConfig instance
    """
    mode = resolve_install_mode(settings)
    service_name = settings.get("unicorn_service_name")

    config = ServiceConfig(
        application_name=settings.get("application_name"),
        service_name=service_name,
        install_mode=mode,
        systemd_config_path=settings.get("unicorn_systemd_config_path"),
        socket_path=settings.get("nginx_socket_path"),
    )
    logger.debug(f"Resolved {config.service_name} ({mode.value}) at {config.systemd_config_path}")
    return config
