import os
import logging
import time
import fnmatch
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Set

from core.errors import CatalogError, ValidationError
from core.validation import parse_date_key, validate_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    filename: str
    size: int
    mtime: float


@dataclass
class FolderListing:
    """Raw result of listing one date folder. *entries* is unsorted."""
    key: str
    date: date
    entries: List[FileEntry] = field(default_factory=list)


class FilesystemScanner:
    """Lists the date folders under the photo root and the images inside them."""

    def __init__(self, photo_root: str, supported_extensions: Iterable[str],
                 ignore_patterns: Iterable[str] = ("._*",)):
        self.photo_root = photo_root
        self.ignore_patterns = list(ignore_patterns)
        self._supported_extensions: Set[str] = {ext.lower() for ext in supported_extensions}

    def is_supported_file(self, filename: str) -> bool:
        """Check the filename against ignore patterns, the safe charset, and supported extensions."""
        for pattern in self.ignore_patterns:
            if fnmatch.fnmatch(filename, pattern):
                logger.debug(f"Skipping {filename}: matches ignore pattern '{pattern}'")
                return False

        _, ext = os.path.splitext(filename)
        if ext.lower() not in self._supported_extensions:
            return False

        try:
            validate_filename(filename)
        except ValidationError:
            logger.debug(f"Skipping {filename}: not a servable filename")
            return False
        return True

    def scan(self) -> List[FolderListing]:
        """List every date folder under the root, including empty ones."""
        scan_start = time.monotonic()
        try:
            with os.scandir(self.photo_root) as it:
                dirs = [entry for entry in it if entry.is_dir()]
        except OSError as e:
            raise CatalogError(f"Cannot read photo root {self.photo_root}: {e}") from e

        listings = []
        for entry in dirs:
            try:
                folder_date = parse_date_key(entry.name)
            except ValidationError:
                logger.debug(f"Ignoring non-date directory: {entry.path}")
                continue
            listings.append(FolderListing(key=entry.name, date=folder_date,
                                          entries=self._scan_folder(entry.path)))

        elapsed = time.monotonic() - scan_start
        logger.info(f"Scanned {len(listings)} date folders under {self.photo_root} in {elapsed:.3f}s")
        return listings

    def _scan_folder(self, folder_path: str) -> List[FileEntry]:
        found = []
        try:
            with os.scandir(folder_path) as it:
                for entry in it:
                    if not self.is_supported_file(entry.name):
                        continue
                    try:
                        if not entry.is_file():
                            continue
                        st = entry.stat()
                    except OSError as e:
                        logger.debug(f"Cannot stat {entry.path}: {e}")
                        continue
                    found.append(FileEntry(filename=entry.name, size=st.st_size, mtime=st.st_mtime))
        except OSError as e:
            logger.error(f"Error scanning date folder {folder_path}: {e}")
        return found
