"""
Shared pytest fixtures for photo gallery tests.
"""
import os
import sys

# Ensure project root is on path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
from PIL import Image

from core.filesystem_scanner import FilesystemScanner
from core.photo_catalog import PhotoCatalog
from plugins.pil_plugin import PILThumbnailGenerator

SUPPORTED = PILThumbnailGenerator().get_supported_formats()


class MockConfigManager:
    """Minimal ConfigManager substitute that accepts a plain dict."""

    def __init__(self, overrides: dict | None = None):
        self._cfg: dict = {
            "latest": {"default_amount": 3},
        }
        if overrides:
            self._cfg.update(overrides)

    def get(self, key: str, default=None):
        keys = key.split(".")
        val = self._cfg
        for k in keys:
            if isinstance(val, dict):
                val = val.get(k)
            else:
                return default
        return val if val is not None else default


def make_image(path, size=(800, 600), color=(200, 30, 30)):
    os.makedirs(os.path.dirname(str(path)), exist_ok=True)
    Image.new("RGB", size, color=color).save(str(path), "JPEG")
    return str(path)


@pytest.fixture()
def photo_root(tmp_path):
    """Photo tree: 2023-01-01 (2 photos), 2023-01-02 (empty), 2023-01-03 (1 photo)."""
    root = tmp_path / "photos"
    make_image(root / "2023-01-01" / "a.jpg", color=(10, 20, 30))
    make_image(root / "2023-01-01" / "b.jpg", color=(40, 50, 60))
    (root / "2023-01-02").mkdir()
    make_image(root / "2023-01-03" / "c.jpg", color=(70, 80, 90))
    return root


@pytest.fixture()
def scanner(photo_root):
    return FilesystemScanner(str(photo_root), SUPPORTED, ["._*", ".*"])


@pytest.fixture()
def catalog(scanner):
    return PhotoCatalog(scanner, page_size=1)
