from abc import ABC, abstractmethod
from typing import List


class BaseThumbnailGenerator(ABC):
    """Base class for thumbnail generators.

    Generators are stateless: the same source file and settings always yield
    the same bytes. The thumbnail cache relies on this to key its store by
    (date, filename) alone.
    """

    def __init__(self, width: int = 400, height: int = 300, quality: int = 80):
        if width < 1 or height < 1:
            raise ValueError(f"Thumbnail dimensions must be positive, got {width}x{height}")
        if not 1 <= quality <= 100:
            raise ValueError(f"Thumbnail quality must be within 1..100, got {quality}")
        self.width = width
        self.height = height
        self.quality = quality

    @abstractmethod
    def get_supported_formats(self) -> List[str]:
        """Return list of supported file extensions (with dots, lowercase)."""
        pass

    @abstractmethod
    def generate(self, source_path: str) -> bytes:
        """
        Produce the encoded thumbnail for *source_path*.
        Raises ThumbnailError when the source is missing, unreadable, or undecodable.
        """
        pass
