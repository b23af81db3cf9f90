"""Lifecycle control of the Unicorn service via systemctl."""

import logging

from ..models.command import FallbackCommand, ShellCommand, Substitution
from ..models.service import InstallMode, ServiceConfig
from .command_runner import CommandRunner
from .config_manager import SettingsStore
from .elevation import PrivilegeElevator

logger = logging.getLogger(__name__)

VERBS = ("start", "stop", "restart", "enable", "disable")


def systemctl(mode: InstallMode, *args: str) -> ShellCommand:
    """Build a systemctl command for the given install mode."""
    return ShellCommand(("systemctl",) + mode.systemctl_flags + args)


def journal_for_invocation(mode: InstallMode, service_name: str) -> ShellCommand:
    """Build a journal query for the unit's last invocation.

    Args:
        mode: Install mode of the unit
        service_name: Systemd unit name

    Returns:
        journalctl command filtered on the unit's InvocationID
    """
    invocation_id = Substitution(
        systemctl(mode, "show", "-p", "InvocationID", "--value", service_name),
        prefix="_SYSTEMD_INVOCATION_ID=",
    )
    return ShellCommand(("journalctl",) + mode.systemctl_flags + ("--no-pager", invocation_id))


class ServiceManager:
    """Manages the Unicorn unit through systemctl on the remote host."""

    def __init__(self, service: ServiceConfig, settings: SettingsStore, runner: CommandRunner):
        """Initialize the service manager.

        Args:
            service: Resolved service identity
            settings: Settings store, used for elevation
            runner: Command runner
        """
        self.service = service
        self.settings = settings
        self.runner = runner

    @property
    def mode(self) -> InstallMode:
        return self.service.install_mode

    def build_status_command(self) -> ShellCommand:
        return systemctl(self.mode, "status", self.service.service_name)

    def build_verb_command(self, verb: str) -> FallbackCommand:
        """Build the command for a lifecycle verb.

        The verb is followed by a status query on success, and by the
        journal of the unit's invocation when either step fails.

        Args:
            verb: One of start, stop, restart, enable, disable

        Returns:
            FallbackCommand for the verb

        Raises:
            ValueError: If the verb is unknown
        """
        if verb not in VERBS:
            raise ValueError(f"Unknown systemd verb: {verb}. Must be one of {', '.join(VERBS)}")

        name = self.service.service_name
        return FallbackCommand(
            primary=systemctl(self.mode, verb, name),
            follow_up=self.build_status_command(),
            diagnostic=journal_for_invocation(self.mode, name),
        )

    def status(self):
        """Get the status of the Unicorn service. Never elevated."""
        with self.runner.run_remote(self.settings) as run:
            run.command(self.build_status_command())

    def start(self):
        """Start the Unicorn service."""
        self._execute_verb("start")

    def stop(self):
        """Stop the Unicorn service."""
        self._execute_verb("stop")

    def restart(self):
        """Restart the Unicorn service."""
        self._execute_verb("restart")

    def enable(self):
        """Enable the Unicorn service to start on boot."""
        self._execute_verb("enable")

    def disable(self):
        """Disable the Unicorn service from starting on boot."""
        self._execute_verb("disable")

    def _execute_verb(self, verb: str):
        """Run a verb, as the setup user when the unit is a system unit."""
        command = self.build_verb_command(verb)
        logger.debug(f"{verb} {self.service.service_name} ({self.mode.value})")

        if not self.mode.requires_elevation:
            self._run(command, self.settings)
            return

        with PrivilegeElevator.elevated(self.settings) as acting:
            self._run(command, acting)

    def _run(self, command: FallbackCommand, settings: SettingsStore):
        with self.runner.run_remote(settings) as run:
            run.comment(command.render())
            run.command(command)
