"""Tests for print and print_remote."""

from unicorn_systemd.core.command_runner import Scope
from unicorn_systemd.core.config_manager import resolve_service_config
from unicorn_systemd.core.inspector import RemoteInspector
from unicorn_systemd.core.installer import ServiceInstaller
from unicorn_systemd.core.template_manager import TemplateResolver


def make_inspector(settings, recording_runner, tmp_path):
    runner = recording_runner(settings)
    installer = ServiceInstaller(resolve_service_config(settings), settings, runner,
                                 resolver=TemplateResolver(tmp_path))
    return RemoteInspector(installer), runner


def test_print_local_emits_rendered_template(user_settings, recording_runner, tmp_path):
    inspector, runner = make_inspector(user_settings, recording_runner, tmp_path)

    inspector.print_local()

    [execution] = runner.executions
    assert execution.scope is Scope.LOCAL
    [command] = execution.commands
    assert command.target is None
    assert command.content == inspector.installer.render()
    assert command.render().startswith("cat <<'UNICORN_SYSTEMD_EOF'\n")


def test_print_remote_falls_back_to_placeholder(system_settings, recording_runner, tmp_path):
    inspector, runner = make_inspector(system_settings, recording_runner, tmp_path)

    inspector.print_remote()

    [execution] = runner.executions
    assert execution.scope is Scope.REMOTE
    assert execution.user == "deploy"
    assert execution.rendered == [
        "cat /etc/systemd/system/unicorn-blog.service || "
        "echo 'No unicorn systemd config found on remote server'"
    ]
