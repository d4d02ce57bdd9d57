from config.config_manager import ConfigManager
from filewatcher.watcher import CatalogWatcher
from photogallery_server import build_services


def _config(tmp_path, photo_root, extra=""):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"photos:\n  root: {photo_root}\n"
        f"thumbnails:\n  cache_dir: {tmp_path / 'thumbs'}\n  width: 32\n  height: 32\n"
        f"catalog:\n  page_size: 2\n{extra}"
    )
    return ConfigManager(str(path))


def test_build_services_wires_configuration(tmp_path, photo_root):
    catalog, cache, watcher = build_services(_config(tmp_path, photo_root))
    try:
        assert watcher is None
        assert catalog.page_size == 2
        assert catalog.scanner.photo_root == str(photo_root)
        assert cache.thumbnail_root == str(tmp_path / "thumbs")
        assert cache.generator.width == 32
        assert len(catalog.list_dates_paginated()) == 1
    finally:
        cache.shutdown()


def test_build_services_with_watcher(tmp_path, photo_root):
    catalog, cache, watcher = build_services(_config(tmp_path, photo_root, "  watch: true\n"))
    try:
        assert isinstance(watcher, CatalogWatcher)
        assert watcher.catalog is catalog
    finally:
        cache.shutdown()
