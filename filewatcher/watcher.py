import logging
import os
import fnmatch
from typing import Iterable
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

logger = logging.getLogger(__name__)


class CatalogWatcher(FileSystemEventHandler):
    """
    Filesystem event handler that marks the catalog snapshot stale whenever
    something changes under the photo root.
    """
    def __init__(self, catalog, photo_root: str, ignore_patterns: Iterable[str] = ("._*",)):
        super().__init__()
        self.catalog = catalog
        self.photo_root = photo_root
        self.ignore_patterns = list(ignore_patterns)
        self.observer = Observer()

    def start(self):
        """Schedule a recursive observer on the photo root."""
        self.stop()
        # Observer threads cannot be restarted.
        self.observer = Observer()

        if not os.path.isdir(self.photo_root):
            logger.warning(f"Photo root does not exist, not watching: {self.photo_root}")
            return

        self.observer.schedule(self, path=self.photo_root, recursive=True)
        self.observer.start()
        logger.info(f"Watching {self.photo_root} for changes...")

    def stop(self):
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join(timeout=1.0)
            if self.observer.is_alive():
                logger.warning("Watchdog observer thread did not stop gracefully.")
            else:
                logger.info("Watchdog observer stopped.")

    def _is_ignored(self, path: str) -> bool:
        rel = os.path.relpath(path, self.photo_root)
        for part in rel.split(os.sep):
            if part.startswith('.') and part not in ('.', '..'):
                return True
            if any(fnmatch.fnmatch(part, pattern) for pattern in self.ignore_patterns):
                return True
        return False

    def on_any_event(self, event):
        if event.event_type in ("opened", "closed", "closed_no_write"):
            return
        paths = [event.src_path, getattr(event, "dest_path", "") or ""]
        if all(not p or self._is_ignored(p) for p in paths):
            return
        logger.debug(f"Filesystem change ({event.event_type}): {event.src_path}. Invalidating catalog.")
        self.catalog.invalidate()
