"""Tests for the config manager (load_config + save helpers)."""

import json

import pytest
from pydantic import ValidationError

from autotheme.config.config_manager import atomic_write_json, load_config, save_automation_enabled
from autotheme.core.models.config import AutoThemeConfig


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "autotheme_config.json"
    path.write_text(json.dumps({"automation": {"enabled": True}, "system": {"log_level": "INFO"}}))
    return path


class TestLoadConfig:
    def test_load_default_config(self, monkeypatch):
        """The shipped autotheme_config.json loads without errors."""
        monkeypatch.delenv("AUTOTHEME_CONFIG_FILE", raising=False)
        cfg = load_config()
        assert isinstance(cfg, AutoThemeConfig)
        assert cfg.system.webui_port == 8080
        assert cfg.automation.poll_interval_seconds == 60

    def test_load_custom_config(self, tmp_path):
        path = tmp_path / "custom.json"
        path.write_text(
            json.dumps(
                {
                    "automation": {"poll_interval_seconds": 30, "default_sunrise": "06:00"},
                    "theme": {"applier": "mock"},
                }
            )
        )
        cfg = load_config(path)
        assert cfg.automation.poll_interval_seconds == 30
        assert cfg.automation.default_sunrise.hour == 6
        assert cfg.theme.applier == "mock"

    def test_env_config_file(self, config_file, monkeypatch):
        monkeypatch.setenv("AUTOTHEME_CONFIG_FILE", str(config_file))
        monkeypatch.setenv("AUTOTHEME_LOG_LEVEL", "DEBUG")
        assert load_config().system.log_level == "DEBUG"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.json")

    def test_invalid_value_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"automation": {"poll_interval_seconds": -1}}))
        with pytest.raises(ValidationError):
            load_config(path)

    @pytest.mark.parametrize("env, value, check", [
        ("AUTOTHEME_DEV_MODE", "1", lambda c: c.system.dev_mode is True),
        ("AUTOTHEME_WEBUI_PORT", "3000", lambda c: c.system.webui_port == 3000),
        ("AUTOTHEME_ENABLED", "false", lambda c: c.automation.enabled is False),
        ("AUTOTHEME_ENABLED", "yes", lambda c: c.automation.enabled is True),
    ])
    def test_env_overrides(self, config_file, monkeypatch, env, value, check):
        monkeypatch.setenv(env, value)
        assert check(load_config(config_file))


class TestSaveAutomationEnabled:
    def test_toggle_persisted(self, config_file):
        save_automation_enabled(False, config_file)
        assert load_config(config_file).automation.enabled is False

        save_automation_enabled(True, config_file)
        assert load_config(config_file).automation.enabled is True

    def test_other_keys_preserved(self, config_file):
        save_automation_enabled(False, config_file)
        raw = json.loads(config_file.read_text())
        assert raw["system"] == {"log_level": "INFO"}
        assert raw["automation"] == {"enabled": False}

    def test_invalid_file_not_overwritten(self, tmp_path):
        path = tmp_path / "bad.json"
        original = json.dumps({"automation": {"poll_interval_seconds": 0}})
        path.write_text(original)
        with pytest.raises(ValidationError):
            save_automation_enabled(False, path)
        assert path.read_text() == original


def test_atomic_write_leaves_no_temp_files(tmp_path):
    target = tmp_path / "nested" / "out.json"
    atomic_write_json(target, {"a": 1})
    atomic_write_json(target, {"a": 2})

    assert json.loads(target.read_text()) == {"a": 2}
    assert [p.name for p in target.parent.iterdir()] == ["out.json"]
