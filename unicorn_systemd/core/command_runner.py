"""Command runner executing queued commands locally or over SSH."""

import contextlib
import logging
import shlex
import subprocess
import sys
from enum import Enum
from typing import Iterator, List, Optional, Union

from ..models.command import Command, Comment, FailureKind, RawCommand
from ..utils.errors import CommandFailedError, ConfigError, TransportError
from .config_manager import SettingsStore

logger = logging.getLogger(__name__)

SSH_CONNECTION_FAILED = 255


class Scope(Enum):
    """Where a queued script runs."""

    LOCAL = "local"
    REMOTE = "remote"


def format_ssh_connection_error(host: str, stderr: Optional[str]) -> str:
    """Format a user-friendly SSH connection error message with hints."""
    stderr_lower = stderr.lower() if stderr else ""

    if "connection refused" in stderr_lower:
        hint = "Check that SSH is running on the remote host"
    elif "could not resolve" in stderr_lower or "name or service not known" in stderr_lower:
        hint = "Check that the domain setting is correct"
    elif "permission denied" in stderr_lower:
        hint = "Check your SSH credentials or key configuration for the acting user"
    else:
        hint = "Check that the host is reachable and SSH is running"

    return f"Cannot connect to '{host}' via SSH\nhint: {hint}"


class CommandRunner:
    """Queues commands inside a local or remote scope and runs them on exit.

    Every scope becomes one bash script run with ``set -e``, so the first
    failing command aborts the rest of the queue. The script is passed as
    the ``bash -c`` argument and stdin is /dev/null, so a queued command
    that reads stdin cannot consume the commands after it.
    """

    def __init__(self, settings: SettingsStore, simulate: bool = False, timeout: Optional[int] = None):
        """Initialize the command runner.

        Args:
            settings: Settings used for the SSH connection
            simulate: Print scripts instead of running them
            timeout: Seconds before a script is abandoned (None for no limit)
        """
        self.settings = settings
        self.simulate = simulate
        self.timeout = timeout
        self._queue: Optional[List[Command]] = None

    @contextlib.contextmanager
    def run_local(self) -> Iterator['CommandRunner']:
        """Open a scope whose commands run on this machine."""
        with self._scope(Scope.LOCAL, self.settings):
            yield self

    @contextlib.contextmanager
    def run_remote(self, settings: Optional[SettingsStore] = None) -> Iterator['CommandRunner']:
        """Open a scope whose commands run on the remote host.

        Args:
            settings: Settings to connect with, e.g. an elevated view
        """
        with self._scope(Scope.REMOTE, settings or self.settings):
            yield self

    @contextlib.contextmanager
    def _scope(self, scope: Scope, settings: SettingsStore) -> Iterator[None]:
        if self._queue is not None:
            raise RuntimeError("Command scopes cannot be nested")

        self._queue = []
        try:
            yield
            queue = self._queue
        finally:
            self._queue = None

        if queue:
            self.execute(scope, queue, settings)

    def command(self, command: Union[Command, str]):
        """Queue a command in the open scope.

        Args:
            command: Typed command, or raw shell text
        """
        if self._queue is None:
            raise RuntimeError("command() called outside of a run_local/run_remote scope")
        if isinstance(command, str):
            command = RawCommand(command)
        self._queue.append(command)

    def comment(self, text: str):
        """Queue an annotation echoed before the following commands."""
        logger.info(text)
        self.command(Comment(text))

    def script(self, commands: List[Command]) -> str:
        """Serialize commands into the bash script sent to the transport."""
        lines = ["set -e"]
        lines.extend(command.render() for command in commands)
        return "\n".join(lines) + "\n"

    def ssh_command(self, settings: SettingsStore) -> List[str]:
        """Build the SSH command prefix for the acting user.

        Raises:
            ConfigError: If no domain is configured
        """
        domain = settings.fetch("domain")
        if not domain:
            raise ConfigError("Missing required setting: domain")

        cmd = ["ssh"]
        port = settings.fetch("port")
        if port:
            cmd.extend(["-p", str(port)])
        ssh_options = settings.fetch("ssh_options")
        if ssh_options:
            cmd.extend(shlex.split(ssh_options))

        user = settings.fetch("user")
        cmd.append(f"{user}@{domain}" if user else domain)
        return cmd

    def execute(self, scope: Scope, commands: List[Command], settings: SettingsStore):
        """Run a serialized scope.

        Raises:
            TransportError: If SSH could not connect
            PlatformError, SystemdPermissionError: If a guarded command failed
            CommandFailedError: If the script failed for any other reason
        """
        script = self.script(commands)

        if scope is Scope.REMOTE:
            prefix = self.ssh_command(settings)
            where = prefix[-1]
            # ssh joins its arguments into one remote command line
            cmd = prefix + ["bash", "-c", shlex.quote(script)]
        else:
            prefix = []
            where = "local"
            cmd = ["bash", "-c", script]

        if self.simulate:
            print(f"# {scope.value}: {' '.join(prefix + ['bash', '-c'])}")
            sys.stdout.write(script)
            return

        logger.debug(f"Running {len(commands)} commands on {where}")

        try:
            result = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandFailedError(f"Timed out after {self.timeout}s on {where}", 124) from e

        if result.stderr:
            sys.stderr.write(result.stderr)

        if result.returncode == 0:
            return

        stderr = result.stderr.strip() if result.stderr else ""

        if scope is Scope.REMOTE and result.returncode == SSH_CONNECTION_FAILED:
            raise TransportError(format_ssh_connection_error(settings.fetch("domain"), stderr))

        failure = FailureKind.from_exit_code(result.returncode)
        if failure is not None:
            # The guard's message is the last thing written before it exits
            message = stderr.splitlines()[-1] if stderr else f"Command failed on {where}"
            raise failure.error_class(message)

        raise CommandFailedError(
            f"Command failed on {where} (exit code {result.returncode})",
            result.returncode,
            stderr,
        )
