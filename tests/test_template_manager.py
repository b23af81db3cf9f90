"""Tests for template lookup and rendering."""

import pytest

from unicorn_systemd.core.config_manager import resolve_service_config
from unicorn_systemd.core.template_manager import TemplateRenderer, TemplateResolver
from unicorn_systemd.utils.constants import BUNDLED_TEMPLATE_PATH, CUSTOM_TEMPLATE_PATH
from unicorn_systemd.utils.errors import ConfigError


def test_resolver_falls_back_to_bundled_template(tmp_path):
    assert TemplateResolver(tmp_path).resolve() == BUNDLED_TEMPLATE_PATH


def test_resolver_prefers_custom_template(tmp_path):
    custom = tmp_path / CUSTOM_TEMPLATE_PATH
    custom.parent.mkdir(parents=True)
    custom.write_text("[Service]\n")

    assert TemplateResolver(tmp_path).resolve() == custom.resolve()


def test_resolver_uses_current_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    custom = tmp_path / CUSTOM_TEMPLATE_PATH
    custom.parent.mkdir(parents=True)
    custom.write_text("[Service]\n")

    assert TemplateResolver().resolve() == custom.resolve()


def test_bundled_template_ships_with_package():
    assert BUNDLED_TEMPLATE_PATH.is_file()


def test_render_bundled_template_user_mode(user_settings):
    service = resolve_service_config(user_settings)
    content = TemplateRenderer().render(BUNDLED_TEMPLATE_PATH, user_settings, service)

    assert "Description=Unicorn server for blog" in content
    assert "WorkingDirectory=/home/deploy/blog/current" in content
    assert "-c /home/deploy/blog/current/config/unicorn.rb -E production" in content
    assert "WantedBy=default.target" in content
    assert "User=" not in content
    assert content.endswith("\n")


def test_render_bundled_template_system_mode(system_settings):
    service = resolve_service_config(system_settings)
    content = TemplateRenderer().render(BUNDLED_TEMPLATE_PATH, system_settings, service)

    assert "User=deploy\n" in content
    assert "WantedBy=multi-user.target" in content


def test_render_custom_template_with_fetch(tmp_path, user_settings):
    template = tmp_path / "unit.erb"
    template.write_text("{{ service_name }} {{ fetch('workers', 4) }} {{ rails_env }}")
    service = resolve_service_config(user_settings)

    assert TemplateRenderer().render(template, user_settings, service) == "unicorn-blog.service 4 production"


def test_render_unknown_variable_is_a_config_error(tmp_path, user_settings):
    template = tmp_path / "unit.erb"
    template.write_text("{{ no_such_setting }}")
    service = resolve_service_config(user_settings)

    with pytest.raises(ConfigError, match="no_such_setting"):
        TemplateRenderer().render(template, user_settings, service)
