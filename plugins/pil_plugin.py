import io
import logging
from typing import List
from PIL import Image, ImageOps, UnidentifiedImageError
from core.errors import ThumbnailError, ThumbnailErrorKind
from .base_plugin import BaseThumbnailGenerator

logger = logging.getLogger(__name__)


class PILThumbnailGenerator(BaseThumbnailGenerator):
    """Thumbnail generator for standard image formats using PIL/Pillow."""

    def get_supported_formats(self) -> List[str]:
        """Return list of supported file extensions."""
        return ['.jpg', '.jpeg', '.png', '.bmp', '.gif', '.tiff', '.tif', '.webp']

    def generate(self, source_path: str) -> bytes:
        """
        Resize *source_path* to fit within width x height and encode it as JPEG.
        The aspect ratio is kept and images smaller than the box are not upscaled.
        """
        try:
            f = open(source_path, 'rb')
        except FileNotFoundError as e:
            raise ThumbnailError(ThumbnailErrorKind.MISSING_ORIGINAL,
                                 f"Original not found: {source_path}") from e
        except OSError as e:
            raise ThumbnailError(ThumbnailErrorKind.UNREADABLE_ORIGINAL,
                                 f"Cannot open original {source_path}: {e}") from e

        with f:
            try:
                with Image.open(f) as img:
                    img = ImageOps.exif_transpose(img)
                    # Convert to RGB if necessary
                    if img.mode != 'RGB':
                        img = img.convert('RGB')

                    img.thumbnail((self.width, self.height), Image.Resampling.LANCZOS)

                    buffer = io.BytesIO()
                    img.save(buffer, 'JPEG', quality=self.quality)
            except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
                raise ThumbnailError(ThumbnailErrorKind.UNDECODABLE,
                                     f"Cannot decode {source_path}: {e}") from e

        data = buffer.getvalue()
        logger.debug(f"Generated thumbnail for {source_path} ({len(data)} bytes)")
        return data
