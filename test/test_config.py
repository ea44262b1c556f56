"""
Tests for settings loading
"""
import json

import pytest

from config import Config


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    monkeypatch.setattr(Config, "_config", None)


@pytest.fixture
def settings(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "host": {"url": "http://shop:3000/"},
        "items": {"endpoint": "/api/items"},
    }))
    return path


class TestConfig:
    def test_reload_from_path(self, settings):
        config = Config.reload_config(str(settings))
        assert config["items"]["endpoint"] == "/api/items"
        assert Config.get_config() is config

    def test_env_override(self, settings, monkeypatch):
        monkeypatch.setenv("INSPECTION_SETTINGS", str(settings))
        assert Config.get_config()["host"]["url"] == "http://shop:3000/"

    def test_url_for(self, settings):
        Config.reload_config(str(settings))
        assert Config.url_for("items") == "http://shop:3000/api/items"
