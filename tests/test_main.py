"""Tests for the command line entry point."""

import pytest

from unicorn_systemd import main as cli
from unicorn_systemd.core.command_runner import CommandRunner
from unicorn_systemd.utils.constants import CUSTOM_TEMPLATE_PATH
from unicorn_systemd.utils.errors import ConfigError


@pytest.fixture
def recorded(monkeypatch):
    """Record scripts instead of running them."""
    executions = []

    def _execute(self, scope, commands, settings):
        executions.append((scope, [c.render() for c in commands], settings.fetch("user")))

    monkeypatch.setattr(CommandRunner, "execute", _execute)
    return executions


def test_parse_overrides_reads_yaml_scalars():
    overrides = cli.parse_overrides(["port=2222", "user=deploy", "setup_user="])

    assert overrides == {"port": 2222, "user": "deploy", "setup_user": None}


def test_parse_overrides_rejects_missing_equals():
    with pytest.raises(ConfigError):
        cli.parse_overrides(["application_name"])


def test_generate_twice(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert cli.main(["generate"]) == 0
    assert (tmp_path / CUSTOM_TEMPLATE_PATH).exists()
    assert cli.main(["generate"]) == 1


def test_invalid_install_mode_fails(tmp_path, monkeypatch, recorded):
    monkeypatch.chdir(tmp_path)

    code = cli.main(["-s", "application_name=blog", "-s", "unicorn_system_or_user=both", "start"])

    assert code == 1
    assert recorded == []


def test_missing_explicit_config_fails(tmp_path):
    assert cli.main(["-c", str(tmp_path / "nope.yml"), "status"]) == 1


def test_scenario_system_mode_from_config_file(tmp_path, monkeypatch, recorded):
    monkeypatch.chdir(tmp_path)
    config = tmp_path / "config" / "deploy.yml"
    config.parent.mkdir()
    config.write_text(
        "application_name: blog\n"
        "domain: blog.example.com\n"
        "user: deploy\n"
        "setup_user: root\n"
        "unicorn_system_or_user: system\n"
    )

    assert cli.main(["setup"]) == 0
    assert cli.main(["enable"]) == 0
    assert cli.main(["status"]) == 0

    setup, enable, status = recorded
    assert setup[2] == "root"
    assert any(line.startswith("cat > /etc/systemd/system/unicorn-blog.service") for line in setup[1])
    assert enable[2] == "root"
    assert enable[1][-1].startswith("(systemctl enable unicorn-blog.service && ")
    assert status[2] == "deploy"
    assert status[1] == ["systemctl status unicorn-blog.service"]


def test_scenario_user_mode_from_overrides(tmp_path, monkeypatch, recorded):
    monkeypatch.chdir(tmp_path)

    code = cli.main([
        "-s", "application_name=blog", "-s", "domain=blog.example.com",
        "-s", "user=deploy", "-s", "setup_user=root",
        "-s", "unicorn_system_or_user=user", "start",
    ])

    assert code == 0
    [(scope, lines, user)] = recorded
    assert user == "deploy"
    assert lines[-1].startswith("(systemctl --user start unicorn-blog.service && ")


def test_absent_install_mode_fails_before_running(tmp_path, monkeypatch, recorded):
    monkeypatch.chdir(tmp_path)

    code = cli.main([
        "-s", "application_name=blog", "-s", "domain=blog.example.com",
        "-s", "user=deploy", "start",
    ])

    assert code == 1
    assert recorded == []


def test_print_uses_local_scope(tmp_path, monkeypatch, recorded):
    monkeypatch.chdir(tmp_path)

    assert cli.main([
        "-s", "application_name=blog", "-s", "user=deploy",
        "-s", "unicorn_system_or_user=user", "print",
    ]) == 0

    [(scope, lines, _)] = recorded
    assert scope.value == "local"
    assert "Description=Unicorn server for blog" in lines[0]


def test_utils_exports_only_public_names():
    import unicorn_systemd
    from unicorn_systemd import utils

    assert utils.APP_VERSION == unicorn_systemd.__version__
    assert all(hasattr(utils, name) for name in utils.__all__)
    assert not hasattr(utils, "DEFAULT_CONFIG_FILE")
    assert not hasattr(utils, "EXIT_PERMISSION")
