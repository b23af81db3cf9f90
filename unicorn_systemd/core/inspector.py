"""Read-only views of the local and remote unit file."""

import logging

from ..models.command import AlternativeCommand, HeredocCommand, ShellCommand
from ..utils.constants import PRINT_REMOTE_PLACEHOLDER
from .installer import ServiceInstaller

logger = logging.getLogger(__name__)


class RemoteInspector:
    """Prints the unit as it would be installed, or as it is installed."""

    def __init__(self, installer: ServiceInstaller):
        self.installer = installer
        self.runner = installer.runner
        self.service = installer.service

    def print_local(self):
        """Print the unit expanded from the local template."""
        content = self.installer.render()
        logger.debug(f"Rendered {len(content)} bytes for {self.service.service_name}")
        with self.runner.run_local() as run:
            run.command(HeredocCommand(content))

    def print_remote(self):
        """Print the installed unit, or a placeholder if there is none."""
        path = self.service.systemd_config_path
        with self.runner.run_remote() as run:
            run.comment(f"Printing content of {path} from remote server")
            run.command(AlternativeCommand(
                ShellCommand.of("cat", path),
                ShellCommand.of("echo", PRINT_REMOTE_PLACEHOLDER),
            ))
