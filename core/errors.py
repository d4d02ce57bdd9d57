# core/errors.py
"""Error taxonomy shared by the catalog, the thumbnail cache, and the HTTP layer."""
from enum import Enum
from typing import Optional, Tuple


class GalleryError(Exception):
    """Base class for all errors raised by the gallery core."""


class ValidationError(GalleryError):
    """A date key, filename, or numeric parameter is malformed."""


class CatalogError(GalleryError):
    """The photo root could not be read or scanned."""


class ThumbnailErrorKind(Enum):
    MISSING_ORIGINAL = "missing_original"
    UNREADABLE_ORIGINAL = "unreadable_original"
    UNDECODABLE = "undecodable"
    STORE_FAILED = "store_failed"


class ThumbnailError(GalleryError):
    """A thumbnail could not be produced.

    Callers branch on ``kind``; the underlying exception is chained as
    ``__cause__``.
    """

    def __init__(self, kind: ThumbnailErrorKind, message: str,
                 key: Optional[Tuple[str, str]] = None):
        super().__init__(message)
        self.kind = kind
        self.key = key

    @property
    def is_not_found(self) -> bool:
        return self.kind in (ThumbnailErrorKind.MISSING_ORIGINAL,
                             ThumbnailErrorKind.UNREADABLE_ORIGINAL)

    def __str__(self):
        return f"[{self.kind.value}] {super().__str__()}"
