import os
import logging
import tempfile
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import BinaryIO, Dict, NamedTuple, Optional

from core.errors import ThumbnailError, ThumbnailErrorKind
from core.validation import validate_date_key, validate_filename
from plugins.base_plugin import BaseThumbnailGenerator

logger = logging.getLogger(__name__)


class ThumbnailKey(NamedTuple):
    date_key: str
    filename: str


class ThumbnailCache:
    """Get-or-create access to thumbnails stored under ``thumbnail_root``.

    The cache store mirrors the photo tree: the thumbnail for
    ``<photo_root>/<date>/<file>`` lives at ``<thumbnail_root>/<date>/<file>``.
    Files are written once, atomically, and never modified afterwards.

    Concurrent misses for the same key share a single generation. The
    in-flight table maps each key to the Future of the generation running on
    the worker pool; it is the only shared mutable state and is only touched
    under ``_in_flight_lock``. Generations belong to the pool, not to the
    request that started them, so a client going away mid-request neither
    aborts the generation nor leaves its entry behind.
    """

    def __init__(self, thumbnail_root: str, photo_root: str, generator: BaseThumbnailGenerator,
                 max_workers: int = 4):
        self.thumbnail_root = thumbnail_root
        self.photo_root = photo_root
        self.generator = generator
        os.makedirs(self.thumbnail_root, exist_ok=True)

        self._in_flight: Dict[ThumbnailKey, Future] = {}
        self._in_flight_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ThumbnailWorker")

    def thumbnail_path(self, key: ThumbnailKey) -> str:
        return os.path.join(self.thumbnail_root, key.date_key, key.filename)

    def original_path(self, key: ThumbnailKey) -> str:
        return os.path.join(self.photo_root, key.date_key, key.filename)

    def in_flight_count(self) -> int:
        with self._in_flight_lock:
            return len(self._in_flight)

    def get_thumbnail(self, date_key: str, filename: str) -> BinaryIO:
        """
        Return an open binary stream of the thumbnail for (date_key, filename),
        generating and storing it first if needed. The caller closes the stream.
        """
        key = ThumbnailKey(validate_date_key(date_key), validate_filename(filename))
        thumbnail_path = self.thumbnail_path(key)

        stream = self._open_cached(thumbnail_path)
        if stream is not None:
            logger.debug(f"Thumbnail cache hit: {thumbnail_path}")
            return stream

        with self._in_flight_lock:
            future = self._in_flight.get(key)
            if future is None:
                logger.info(f"Thumbnail cache miss, generating: {key.date_key}/{key.filename}")
                future = self._executor.submit(self._generate_and_store, key)
                self._in_flight[key] = future
            else:
                logger.debug(f"Joining in-flight generation for {key.date_key}/{key.filename}")

        try:
            stored_path = future.result()
        except ThumbnailError as e:
            # The Future hands the same instance to every waiter; give each
            # caller its own so tracebacks do not pile up on a shared object.
            raise ThumbnailError(e.kind, e.args[0], key=e.key) from e.__cause__
        return open(stored_path, "rb")

    def shutdown(self, wait: bool = True) -> None:
        logger.info("Shutting down thumbnail workers...")
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _open_cached(path: str) -> Optional[BinaryIO]:
        try:
            return open(path, "rb")
        except FileNotFoundError:
            return None

    def _generate_and_store(self, key: ThumbnailKey) -> str:
        """Worker task: generate the thumbnail for *key* and store it atomically."""
        thumbnail_path = self.thumbnail_path(key)
        try:
            # A generation that finished between the caller's cache check and
            # its registration has already stored the file.
            if os.path.isfile(thumbnail_path):
                return thumbnail_path

            data = self.generator.generate(self.original_path(key))
            self._write_atomic(thumbnail_path, data)
            logger.info(f"Stored thumbnail {thumbnail_path} ({len(data)} bytes)")
            return thumbnail_path
        except ThumbnailError as e:
            if e.key is None:
                e.key = tuple(key)
            logger.warning(f"Thumbnail generation failed for {key.date_key}/{key.filename}: {e}")
            raise
        except Exception as e:  # why: any other failure (store write, generator bug) must still reach every waiter as a ThumbnailError
            logger.error(f"Could not store thumbnail for {key.date_key}/{key.filename}: {e}", exc_info=True)
            raise ThumbnailError(ThumbnailErrorKind.STORE_FAILED,
                                 f"Could not store thumbnail {thumbnail_path}: {e}",
                                 key=tuple(key)) from e
        finally:
            # Removed before the Future resolves, so anyone arriving after this
            # point either finds the stored file or starts a fresh generation.
            with self._in_flight_lock:
                self._in_flight.pop(key, None)

    def _write_atomic(self, path: str, data: bytes) -> None:
        directory = os.path.dirname(path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
            raise
