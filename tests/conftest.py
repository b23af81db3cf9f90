"""Shared fixtures for unicorn-systemd tests."""

from dataclasses import dataclass
from typing import List

import pytest

from unicorn_systemd.core.command_runner import CommandRunner, Scope
from unicorn_systemd.core.config_manager import SettingsStore
from unicorn_systemd.models.command import Command, Comment


@dataclass
class Execution:
    """One scope handed to the transport."""

    scope: Scope
    commands: List[Command]
    user: str

    @property
    def rendered(self) -> List[str]:
        return [c.render() for c in self.commands if not isinstance(c, Comment)]

    @property
    def script(self) -> str:
        return "\n".join(self.rendered)


class RecordingRunner(CommandRunner):
    """CommandRunner that records scopes instead of running them."""

    def __init__(self, settings):
        super().__init__(settings)
        self.executions: List[Execution] = []

    def execute(self, scope, commands, settings):
        self.executions.append(Execution(scope, list(commands), settings.fetch("user")))


@pytest.fixture
def make_settings():
    """Build a SettingsStore with sensible test values."""

    def _make(**values):
        base = {
            "application_name": "blog",
            "domain": "blog.example.com",
            "user": "deploy",
        }
        base.update(values)
        return SettingsStore(base)

    return _make


@pytest.fixture
def user_settings(make_settings):
    return make_settings(unicorn_system_or_user="user")


@pytest.fixture
def system_settings(make_settings):
    return make_settings(unicorn_system_or_user="system", setup_user="root")


@pytest.fixture
def recording_runner():
    def _make(settings):
        return RecordingRunner(settings)

    return _make
