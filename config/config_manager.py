import os
import yaml

DEFAULT_CONFIG = {
    "photos": {
        "root": "~/Pictures/gallery",
        "ignore_patterns": ["._*", ".*"],  # glob patterns
    },
    "thumbnails": {
        "cache_dir": "~/.photogallery/thumbnails",
        "width": 400,
        "height": 300,
        "quality": 80,
        "workers": 4,
    },
    "catalog": {
        "page_size": 10,  # date folders per index page
        "refresh_interval": 0,  # seconds; 0 rescans on every request
        "watch": False,
    },
    "latest": {
        "default_amount": 3,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
    },
    "logging_level": "INFO",
    "log_file": "~/.photogallery/server.log",
}


def _default_config_path() -> str:
    env_path = os.environ.get("PHOTOGALLERY_CONFIG")
    if env_path:
        return os.path.expanduser(env_path)
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return os.path.join(xdg_config_home, "photogallery", "config.yaml")


def _deep_merge(base: dict, override: dict) -> dict:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigManager:
    def __init__(self, config_path: str | None = None):
        self.config_path = config_path or _default_config_path()
        self.config = self.load_config()

    def load_config(self):
        try:
            with open(self.config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            self.save_config(DEFAULT_CONFIG)
            return _deep_merge(DEFAULT_CONFIG, {})
        except yaml.YAMLError as exc:
            raise ValueError(f"Malformed config at {self.config_path}") from exc
        if not isinstance(user_config, dict):
            raise ValueError(f"Config at {self.config_path} must be a mapping")
        return _deep_merge(DEFAULT_CONFIG, user_config)

    def save_config(self, config):
        parent = os.path.dirname(self.config_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(self.config_path, "w") as f:
            yaml.dump(config, f, default_flow_style=False)

    def get(self, key, default=None):
        keys = key.split('.')
        value = self.config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default

    def get_path(self, key, default=None):
        """Like get(), with ``~`` expanded."""
        value = self.get(key, default)
        return os.path.expanduser(value) if value else value

    @property
    def logging_level(self):
        return self.get("logging_level", "INFO")
