import os
import pytest
import yaml

from config.config_manager import DEFAULT_CONFIG, ConfigManager


def test_missing_file_writes_defaults(tmp_path):
    path = tmp_path / "conf" / "config.yaml"
    config = ConfigManager(str(path))
    assert path.exists()
    assert config.get("catalog.page_size") == 10
    assert config.get("latest.default_amount") == 3
    with open(path) as f:
        assert yaml.safe_load(f) == DEFAULT_CONFIG


def test_user_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("thumbnails:\n  width: 200\ncatalog:\n  watch: true\n")
    config = ConfigManager(str(path))
    assert config.get("thumbnails.width") == 200
    assert config.get("thumbnails.height") == 300
    assert config.get("catalog.watch") is True


def test_get_default_for_unknown_key(tmp_path):
    config = ConfigManager(str(tmp_path / "config.yaml"))
    assert config.get("nope.nothing", 42) == 42
    assert config.get("server.port.deeper", "x") == "x"


def test_get_path_expands_home(tmp_path):
    config = ConfigManager(str(tmp_path / "config.yaml"))
    assert config.get_path("thumbnails.cache_dir") == os.path.expanduser("~/.photogallery/thumbnails")


@pytest.mark.parametrize("content", ["catalog: [unclosed", "- just\n- a list\n"])
def test_malformed_config(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(ValueError):
        ConfigManager(str(path))


def test_env_var_selects_config(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("server:\n  port: 9999\n")
    monkeypatch.setenv("PHOTOGALLERY_CONFIG", str(path))
    assert ConfigManager().get("server.port") == 9999
