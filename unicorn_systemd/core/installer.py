"""Installation of the Unicorn unit template, locally and on the remote host."""

import logging
import posixpath
import shutil
from pathlib import Path
from typing import Optional

from ..models.command import FailureKind, GuardedCommand, HeredocCommand, RawCommand, ShellCommand
from ..models.service import ServiceConfig
from ..utils.constants import BUNDLED_TEMPLATE_PATH, CUSTOM_TEMPLATE_PATH
from ..utils.errors import AlreadyExistsError
from .command_runner import CommandRunner
from .config_manager import SettingsStore
from .elevation import PrivilegeElevator
from .service_manager import systemctl
from .template_manager import TemplateRenderer, TemplateResolver

logger = logging.getLogger(__name__)

# Succeeds only when systemd is PID 1: its root mount unit shows up in the unit list
SYSTEMD_PROBE = RawCommand('[[ "$(systemctl 2>/dev/null)" =~ -\\.mount ]]')

SYSTEMD_MISSING = "Systemd not found, but unicorn-systemd needs it."
DAEMON_RELOAD_HINT = (
    "If this command fails in user mode then you likely have disabled UsePAM "
    "in your /etc/ssh/sshd_config which is needed"
)


def generate(working_dir: Optional[Path] = None, source: Path = BUNDLED_TEMPLATE_PATH,
             simulate: bool = False) -> Path:
    """Copy the bundled template into the local project for customization.

    Args:
        working_dir: Local project directory (defaults to the current directory)
        source: Template to copy
        simulate: Only log what would be done

    Returns:
        Path of the generated template

    Raises:
        AlreadyExistsError: If a template is already present; nothing is written
    """
    base = working_dir if working_dir is not None else Path.cwd()
    target = (base / CUSTOM_TEMPLATE_PATH).resolve()

    if target.exists():
        raise AlreadyExistsError(
            f"Unicorn service template already exists; please rm to continue: {target}"
        )

    if simulate:
        logger.info(f"Would copy {source} to {target}")
        return target

    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)
    logger.info(f"Generated Unicorn service template at {target}")
    return target


class ServiceInstaller:
    """Renders the unit and installs it on the remote host."""

    def __init__(self, service: ServiceConfig, settings: SettingsStore, runner: CommandRunner,
                 resolver: Optional[TemplateResolver] = None,
                 renderer: Optional[TemplateRenderer] = None):
        """Initialize the installer.

        Args:
            service: Resolved service identity
            settings: Settings store
            runner: Command runner
            resolver: Template resolver (defaults to the current directory)
            renderer: Template renderer
        """
        self.service = service
        self.settings = settings
        self.runner = runner
        self.resolver = resolver or TemplateResolver()
        self.renderer = renderer or TemplateRenderer()

    def render(self) -> str:
        """Render the resolved template with the current settings."""
        return self.renderer.render(self.resolver.resolve(), self.settings, self.service)

    def setup(self):
        """Install the unit file and reload systemd. Does not start the service.

        Raises:
            PlatformError: If the remote host lacks systemd
            SystemdPermissionError: If linger or daemon-reload fails
        """
        # Captured before elevation, which changes the acting user
        username = self.settings.get("user")
        target_path = self.service.systemd_config_path
        content = self.render()
        mode = self.service.install_mode

        with PrivilegeElevator.elevated(self.settings) as acting:
            with self.runner.run_remote(acting) as run:
                run.comment("Check for systemd on remote server")
                run.command(GuardedCommand(SYSTEMD_PROBE, FailureKind.PLATFORM, SYSTEMD_MISSING))

                if self.service.is_user_service():
                    run.comment("Check for libpam on remote server")
                    run.command(RawCommand(
                        "DEBIAN_FRONTEND=noninteractive apt -yqq install libpam-systemd"
                    ))

                    run.comment("Enable linger for systemd --user")
                    run.command(GuardedCommand(
                        ShellCommand.of("loginctl", "enable-linger", username),
                        FailureKind.PERMISSION,
                        f"Could not enable linger for user {username} but unicorn-systemd needs it.",
                    ))

                run.comment(f"Installing unicorn systemd config file to {target_path}")
                run.command(ShellCommand.of("mkdir", "-p", posixpath.dirname(target_path)))
                run.command(HeredocCommand(content, target=target_path))

                run.comment("Reloading systemd configuration")
                run.command(GuardedCommand(
                    systemctl(mode, "daemon-reload"),
                    FailureKind.PERMISSION,
                    DAEMON_RELOAD_HINT,
                ))

        logger.info(f"Installed {self.service.service_name} at {target_path}")
