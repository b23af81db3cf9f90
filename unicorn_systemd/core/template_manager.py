"""Unit template lookup and rendering."""

import logging
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from ..models.service import ServiceConfig
from ..utils.constants import BUNDLED_TEMPLATE_PATH, CUSTOM_TEMPLATE_PATH
from ..utils.errors import ConfigError
from .config_manager import SettingsStore

logger = logging.getLogger(__name__)


class TemplateResolver:
    """Picks the project-local template override or the bundled default."""

    def __init__(self, working_dir: Optional[Path] = None,
                 bundled_path: Path = BUNDLED_TEMPLATE_PATH):
        """Initialize the resolver.

        Args:
            working_dir: Local project directory (defaults to the current directory)
            bundled_path: Template shipped with this package
        """
        self.working_dir = working_dir
        self.bundled_path = bundled_path

    @property
    def custom_path(self) -> Path:
        """Location of the project-local override."""
        base = self.working_dir if self.working_dir is not None else Path.cwd()
        return (base / CUSTOM_TEMPLATE_PATH).resolve()

    def resolve(self) -> Path:
        """Get the path to the template to use.

        Returns:
            The custom template if it exists, otherwise the bundled one
        """
        custom_path = self.custom_path
        if custom_path.exists():
            logger.debug(f"Using custom template {custom_path}")
            return custom_path

        logger.debug(f"Using bundled template {self.bundled_path}")
        return self.bundled_path


class TemplateRenderer:
    """Renders unit templates with Jinja2 against the settings store."""

    def render(self, path: Path, settings: SettingsStore, service: ServiceConfig) -> str:
        """Render a template file.

        Args:
            path: Template file
            settings: Settings exposed to the template
            service: Resolved service identity

        Returns:
            Rendered text

        Raises:
            ConfigError: If the template is missing or references an unknown value
        """
        env = Environment(
            loader=FileSystemLoader(str(path.parent)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

        context = settings.resolved()
        context.update(service.to_dict())
        context["fetch"] = settings.fetch

        try:
            return env.get_template(path.name).render(**context)
        except TemplateError as e:
            raise ConfigError(f"Failed to render template {path}: {e}") from e
