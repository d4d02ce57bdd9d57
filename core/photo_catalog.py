# core/photo_catalog.py
"""Ordered, paginated, navigable view over the date-organized photo tree.

Photos are ordered by date folder, then by filename. Filename order is a
fallback: no capture-time metadata is read, so two photos taken out of
filename order on the same day are shown in filename order.
"""
import time
import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

from core.filesystem_scanner import FilesystemScanner
from core.validation import parse_count, parse_page, validate_date_key, validate_filename

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateFolder:
    key: str
    date: date

    @property
    def display(self) -> str:
        return f"{self.date.strftime('%B')} {self.date.day}, {self.date.year}"


@dataclass(frozen=True)
class Photo:
    folder: DateFolder
    filename: str
    size: int = 0
    mtime: float = 0.0

    @property
    def key(self) -> Tuple[str, str]:
        return (self.folder.key, self.filename)


@dataclass(frozen=True)
class DatedPhotos:
    folder: DateFolder
    photos: Tuple[Photo, ...]


@dataclass(frozen=True)
class CatalogPage:
    number: int
    entries: Tuple[DatedPhotos, ...]
    total_pages: int


@dataclass(frozen=True)
class PhotoView:
    photo: Photo
    previous: Optional[Photo]
    next: Optional[Photo]


@dataclass(frozen=True)
class CatalogSnapshot:
    """Immutable result of one scan. *dates* and *photos* are chronological."""
    dates: Tuple[DatedPhotos, ...]
    photos: Tuple[Photo, ...]
    built_at: float = 0.0
    _positions: Dict[Tuple[str, str], int] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_listings(cls, listings, built_at: float = 0.0) -> "CatalogSnapshot":
        dates = []
        for listing in sorted(listings, key=lambda item: item.date):
            if not listing.entries:
                continue
            folder = DateFolder(key=listing.key, date=listing.date)
            photos = tuple(
                Photo(folder=folder, filename=e.filename, size=e.size, mtime=e.mtime)
                for e in sorted(listing.entries, key=lambda e: e.filename)
            )
            dates.append(DatedPhotos(folder=folder, photos=photos))

        flat = tuple(p for d in dates for p in d.photos)
        positions = {p.key: i for i, p in enumerate(flat)}
        return cls(dates=tuple(dates), photos=flat, built_at=built_at, _positions=positions)

    def paginate(self, page_size: int) -> List[CatalogPage]:
        latest_first = tuple(reversed(self.dates))
        chunks = [latest_first[i:i + page_size] for i in range(0, len(latest_first), page_size)]
        return [CatalogPage(number=n, entries=chunk, total_pages=len(chunks))
                for n, chunk in enumerate(chunks, start=1)]

    def recent(self, limit: int) -> List[Photo]:
        if limit <= 0:
            return []
        return list(reversed(self.photos[-limit:]))

    def find(self, date_key: str, filename: str) -> Optional[PhotoView]:
        index = self._positions.get((date_key, filename))
        if index is None:
            return None
        previous = self.photos[index - 1] if index > 0 else None
        following = self.photos[index + 1] if index + 1 < len(self.photos) else None
        return PhotoView(photo=self.photos[index], previous=previous, next=following)


class PhotoCatalog:
    """Builds catalog snapshots from the scanner and answers queries against them.

    With a ``refresh_interval`` of 0 every query rescans the photo root.
    Otherwise a snapshot is reused until it is older than the interval or
    ``invalidate()`` is called (e.g. by the filesystem watcher).
    """

    def __init__(self, scanner: FilesystemScanner, page_size: int = 10, refresh_interval: float = 0):
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self.scanner = scanner
        self.page_size = page_size
        self.refresh_interval = refresh_interval
        self._snapshot: Optional[CatalogSnapshot] = None
        self._stale = True
        self._build_lock = threading.Lock()

    def invalidate(self) -> None:
        self._stale = True

    def _is_fresh(self, snapshot: Optional[CatalogSnapshot]) -> bool:
        if snapshot is None or self._stale:
            return False
        return time.monotonic() - snapshot.built_at < self.refresh_interval

    def _build(self) -> CatalogSnapshot:
        snapshot = CatalogSnapshot.from_listings(self.scanner.scan(), built_at=time.monotonic())
        logger.debug(f"Catalog snapshot built: {len(snapshot.dates)} dates, {len(snapshot.photos)} photos")
        return snapshot

    def snapshot(self) -> CatalogSnapshot:
        if self.refresh_interval <= 0:
            return self._build()

        current = self._snapshot
        if self._is_fresh(current):
            return current

        with self._build_lock:
            # Another thread may have rebuilt while we waited for the lock.
            current = self._snapshot
            if self._is_fresh(current):
                return current
            self._stale = False
            try:
                snapshot = self._build()
            except Exception:
                self._stale = True
                raise
            self._snapshot = snapshot
            return snapshot

    def list_dates_paginated(self) -> List[CatalogPage]:
        return self.snapshot().paginate(self.page_size)

    def get_page(self, page) -> Optional[CatalogPage]:
        """Return the 1-based *page*, or None if it is past the last page."""
        number = parse_page(page)
        pages = self.list_dates_paginated()
        if number > len(pages):
            return None
        return pages[number - 1]

    def list_recent_photos(self, limit) -> List[Photo]:
        count = parse_count(limit)
        return self.snapshot().recent(count)

    def get_photo(self, date_key: str, filename: str) -> Optional[PhotoView]:
        validate_date_key(date_key)
        validate_filename(filename)
        return self.snapshot().find(date_key, filename)
