import os
import sys
import logging
import argparse
from core.filesystem_scanner import FilesystemScanner
from core.photo_catalog import PhotoCatalog
from core.thumbnail_cache import ThumbnailCache
from plugins.pil_plugin import PILThumbnailGenerator
from filewatcher.watcher import CatalogWatcher
from network.http_server import create_app
from config.config_manager import ConfigManager


def setup_logging(log_level, log_path=None):
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_path:
        log_dir = os.path.dirname(log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, mode="a"))
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=handlers,
    )


def build_services(config_manager):
    """Construct the catalog, thumbnail cache, and watcher from configuration."""
    photo_root = config_manager.get_path("photos.root")
    thumbnail_root = config_manager.get_path("thumbnails.cache_dir")

    generator = PILThumbnailGenerator(
        width=config_manager.get("thumbnails.width", 400),
        height=config_manager.get("thumbnails.height", 300),
        quality=config_manager.get("thumbnails.quality", 80),
    )
    ignore_patterns = config_manager.get("photos.ignore_patterns", ["._*"])
    scanner = FilesystemScanner(photo_root, generator.get_supported_formats(), ignore_patterns)
    catalog = PhotoCatalog(
        scanner,
        page_size=config_manager.get("catalog.page_size", 10),
        refresh_interval=config_manager.get("catalog.refresh_interval", 0),
    )
    thumbnail_cache = ThumbnailCache(
        thumbnail_root, photo_root, generator,
        max_workers=config_manager.get("thumbnails.workers", 4),
    )
    watcher = None
    if config_manager.get("catalog.watch", False):
        watcher = CatalogWatcher(catalog, photo_root, ignore_patterns)
    return catalog, thumbnail_cache, watcher


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serve a date-organized photo collection over HTTP.")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--host", help="Override server.host")
    parser.add_argument("--port", type=int, help="Override server.port")
    args = parser.parse_args(argv)

    config_manager = ConfigManager(args.config)
    logging_level = config_manager.logging_level
    setup_logging(logging_level, config_manager.get_path("log_file"))
    logging.info(f"Logging level set to: {logging_level.upper()}")
    logging.info(f"Using config: {config_manager.config_path}")

    catalog, thumbnail_cache, watcher = build_services(config_manager)
    photo_root = catalog.scanner.photo_root
    if os.path.isdir(photo_root):
        logging.info(f"Serving photos from: {photo_root}")
    else:
        logging.warning(f"Photo root does not exist: {photo_root}")

    host = args.host or config_manager.get("server.host", "127.0.0.1")
    port = args.port or config_manager.get("server.port", 8080)

    app = create_app(catalog, thumbnail_cache, config_manager)
    try:
        if watcher:
            watcher.start()
        logging.info(f"Server listening on {host}:{port}...")
        app.run(host=host, port=port, threaded=True, use_reloader=False)
    except Exception as e:  # why: startup failure must be logged before process dies; no narrower type covers all init failures
        logging.error(f"Server failed: {e}", exc_info=True)
        raise
    finally:
        logging.info("Shutting down photo gallery server...")
        if watcher:
            watcher.stop()
        thumbnail_cache.shutdown()
        logging.info("Shutdown complete.")


if __name__ == "__main__":
    main()
