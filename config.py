import json
import os

DEFAULT_SETTINGS = "settings.json"


class Config:
    _config = None

    @classmethod
    def get_config(cls):
        if cls._config is None:
            cls.reload_config()
        return cls._config

    @classmethod
    def reload_config(cls, path=None):
        path = path or os.environ.get("INSPECTION_SETTINGS", DEFAULT_SETTINGS)
        with open(path, "r") as f:
            cls._config = json.load(f)
        return cls._config

    @classmethod
    def url_for(cls, section: str) -> str:
        """Full URL of a service endpoint, e.g. url_for("asr")."""
        config = cls.get_config()
        return config["host"]["url"].rstrip("/") + config[section]["endpoint"]
