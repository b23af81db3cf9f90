"""Typed shell command descriptors.

Commands are built as data and only turned into shell text by ``render()``
when the runner hands a script to the transport.
"""

import shlex
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Type, Union

from ..utils.constants import COMMENT_PREFIX, EXIT_PERMISSION, EXIT_PLATFORM
from ..utils.errors import PlatformError, SystemdPermissionError, UnicornSystemdError

HOME_PREFIX = "$HOME/"
HEREDOC_DELIMITER = "UNICORN_SYSTEMD_EOF"


def quote_arg(arg: str) -> str:
    """Quote a single argument for a POSIX shell.

    A leading ``$HOME`` is left expandable so user unit paths resolve on
    the remote host.
    """
    if arg == "$HOME":
        return '"$HOME"'
    if arg.startswith(HOME_PREFIX):
        return '"$HOME"/' + shlex.quote(arg[len(HOME_PREFIX):])
    return shlex.quote(arg)


class Command:
    """Base class for everything a runner scope can queue."""

    def render(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Substitution:
    """``$(...)`` command substitution used as (part of) an argument."""

    command: 'ShellCommand'
    prefix: str = ""

    def render(self) -> str:
        return f'{quote_arg(self.prefix) if self.prefix else ""}"$({self.command.render()})"'


Argument = Union[str, Substitution]


@dataclass(frozen=True)
class ShellCommand(Command):
    """A program invocation built from an argument list."""

    argv: Tuple[Argument, ...]

    def __post_init__(self):
        if not self.argv:
            raise ValueError("ShellCommand needs at least a program name")

    @classmethod
    def of(cls, *argv: Argument) -> 'ShellCommand':
        return cls(tuple(argv))

    def render(self) -> str:
        return " ".join(
            arg.render() if isinstance(arg, Substitution) else quote_arg(arg)
            for arg in self.argv
        )


@dataclass(frozen=True)
class RawCommand(Command):
    """Shell text passed through as-is, for probes that need shell syntax."""

    script: str

    def render(self) -> str:
        return self.script


class FailureKind(Enum):
    """Fatal failures a guarded command reports back through its exit code."""

    PLATFORM = EXIT_PLATFORM
    PERMISSION = EXIT_PERMISSION

    @property
    def exit_code(self) -> int:
        return self.value

    @property
    def error_class(self) -> Type[UnicornSystemdError]:
        if self is FailureKind.PLATFORM:
            return PlatformError
        return SystemdPermissionError

    @classmethod
    def from_exit_code(cls, code: int) -> Optional['FailureKind']:
        try:
            return cls(code)
        except ValueError:
            return None


@dataclass(frozen=True)
class GuardedCommand(Command):
    """A command that aborts the script with a typed failure when it fails."""

    command: Command
    failure: FailureKind
    message: str

    def render(self) -> str:
        return (
            f"{self.command.render()} || "
            f"{{ echo {shlex.quote(self.message)} >&2; exit {self.failure.exit_code}; }}"
        )


@dataclass(frozen=True)
class FallbackCommand(Command):
    """Run ``primary`` then ``follow_up``; if either fails run ``diagnostic``."""

    primary: Command
    follow_up: Command
    diagnostic: Command

    def render(self) -> str:
        return (
            f"({self.primary.render()} && {self.follow_up.render()}) || "
            f"{self.diagnostic.render()}"
        )


@dataclass(frozen=True)
class AlternativeCommand(Command):
    """Run ``primary``; if it fails run ``alternative`` instead."""

    primary: Command
    alternative: Command

    def render(self) -> str:
        return f"{self.primary.render()} || {self.alternative.render()}"


@dataclass(frozen=True)
class HeredocCommand(Command):
    """Emit ``content`` verbatim, to ``target`` when given, else to stdout."""

    content: str
    target: Optional[str] = None

    def _delimiter(self) -> str:
        delimiter = HEREDOC_DELIMITER
        lines = self.content.splitlines()
        while delimiter in lines:
            delimiter += "_"
        return delimiter

    def render(self) -> str:
        delimiter = self._delimiter()
        body = self.content if self.content.endswith("\n") else self.content + "\n"
        redirect = f" > {quote_arg(self.target)}" if self.target else ""
        return f"cat{redirect} <<'{delimiter}'\n{body}{delimiter}"


@dataclass(frozen=True)
class Comment(Command):
    """Annotation echoed when the script runs."""

    text: str

    def render(self) -> str:
        return f"echo {shlex.quote(f'{COMMENT_PREFIX} {self.text}')}"
