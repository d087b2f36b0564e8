"""Content-addressed object store.

Objects are written to a private staging file while being hashed and
size-checked, then atomically renamed to a path derived from their digest:

    <base_path>/<mapper segments...>/<hex digest>

The digest is the key. The same mapper derives the same path on reads, so an
object can be found from its key alone. The filesystem tree is the only index.

Technical Notes:
- Staging files live under the base path (``.staging`` by default) so the
  commit is a same-filesystem ``os.replace``; a reader sees either nothing or
  the whole object, never a partial write.
- Concurrent puts of identical content replace the same file with the same
  bytes. No locks are taken.
- Reads trust the write path: stored content is not re-hashed on ``get``. Use
  ``castore.hashing.compute_key`` to check an object out of band.
"""

import contextlib
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

from .config import StoreOptions
from .constants import MISSING_SIZE, STAGING_PREFIX
from .copying import copy_limited
from .errors import SizeExceededError, StoreIOError
from .hashing import key_from_hasher

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = {"/", "\x00", os.sep} | ({os.altsep} if os.altsep else set())


@contextlib.contextmanager
def _io_errors(action: str) -> Iterator[None]:
    """Re-raise OSError as StoreIOError, keeping the original as the cause."""
    try:
        yield
    except StoreIOError:
        raise
    except OSError as e:
        raise StoreIOError(f"{action}: {e}") from e


def _fsync_dir(path: Path) -> None:
    """Fsync a directory so a rename into it survives a crash.

    Best effort: Windows and some filesystems don't support directory fsync.
    """
    try:
        flags = os.O_RDONLY
        if hasattr(os, "O_DIRECTORY"):
            flags |= os.O_DIRECTORY
        fd = os.open(str(path), flags)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError:
        logger.debug("Directory fsync not supported for %s", path)


def _check_key(key: str) -> None:
    """Reject keys that could escape the base path.

    Raises:
        ValueError: If the key is empty, hidden, or contains a separator or NUL
    """
    if not isinstance(key, str) or not key:
        raise ValueError(f"Invalid key: {key!r}")
    if key.startswith(".") or any(c in key for c in _UNSAFE_CHARS):
        raise ValueError(f"Invalid key (path characters not allowed): {key!r}")


def _check_segments(key: str, segments: List[str]) -> None:
    for segment in segments:
        if not segment or segment.startswith(".") or any(c in segment for c in _UNSAFE_CHARS):
            raise ValueError(f"Path mapper produced invalid segment {segment!r} for key {key!r}")


class Store:
    """Content-addressed storage on the local filesystem.

    Attributes:
        options: Normalized StoreOptions
        root: Absolute base directory
        staging_dir: Absolute directory for uncommitted puts

    Example:
        >>> store = Store(base_path="/tmp/objects")
        >>> key = store.put_string("foobar")
        >>> with store.get(key) as f:
        ...     f.read()
        b'foobar'
    """

    def __init__(self, options: Optional[StoreOptions] = None, **kwargs):
        """Create a store, creating its base directory if needed.

        Args:
            options: Store options. If None, built from keyword arguments.
            **kwargs: StoreOptions fields (base_path, hash_algorithm,
                path_mapper, max_size, staging_dir, durable)

        Raises:
            ConfigurationError: If base_path is empty or an option is invalid
            StoreIOError: If the base or staging directory cannot be created
        """
        if options is not None and kwargs:
            raise TypeError("Pass either a StoreOptions instance or keyword options, not both")
        self.options = options if options is not None else StoreOptions(**kwargs)
        self.root = Path(self.options.base_path).absolute()
        self.staging_dir = Path(self.options.staging_path).absolute()

        with _io_errors(f"Could not create the base path {self.root}"):
            self.root.mkdir(parents=True, exist_ok=True)
            self.staging_dir.mkdir(parents=True, exist_ok=True)

        logger.debug(
            "Opened store at %s (mapper=%r, max_size=%d)",
            self.root, self.options.path_mapper, self.options.max_size,
        )

    def __repr__(self) -> str:
        return f"Store({str(self.root)!r}, mapper={self.options.path_mapper!r})"

    # ---- Paths ---------------------------------------------------------------

    def path_for(self, key: str) -> Path:
        """Get the path an object with this key is stored at.

        The single place keys are turned into paths; put, get and size all
        go through it.

        Args:
            key: Content key

        Returns:
            <root>/<mapper segments...>/<key>, whether or not it exists

        Raises:
            ValueError: If the key is malformed or too short for the mapper
        """
        _check_key(key)
        segments = list(self.options.path_mapper(key))
        _check_segments(key, segments)
        return self.root.joinpath(*segments, key)

    # ---- Writes --------------------------------------------------------------

    def put(self, stream: BinaryIO) -> str:
        """Store the content of a binary stream.

        The stream is read to the end (or until the size ceiling is crossed).
        Nothing is left on disk if the put fails.

        Args:
            stream: Readable binary stream

        Returns:
            Key of the stored object (lowercase hex digest)

        Raises:
            SizeExceededError: If the stream holds more than max_size bytes
            StoreIOError: If reading, staging or committing fails
        """
        with _io_errors(f"Could not create staging file in {self.staging_dir}"):
            fd, name = tempfile.mkstemp(prefix=STAGING_PREFIX, dir=self.staging_dir)
        tmppath = Path(name)

        try:
            return self._stage_and_commit(fd, tmppath, stream)
        except BaseException:
            with contextlib.suppress(OSError):
                tmppath.unlink()
            logger.debug("Discarded staging file %s", tmppath)
            raise

    def _stage_and_commit(self, fd: int, tmppath: Path, stream: BinaryIO) -> str:
        with _io_errors(f"Failed writing staging file {tmppath}"):
            with os.fdopen(fd, "wb") as staged:
                hasher = self.options.hash_algorithm()
                result = copy_limited(staged, stream, self.options.max_size, hasher=hasher)
                if self.options.durable and not result.exceeded:
                    staged.flush()
                    os.fsync(staged.fileno())

        if result.exceeded:
            logger.debug("Rejected put larger than %d bytes", self.options.max_size)
            raise SizeExceededError(self.options.max_size)

        key = key_from_hasher(hasher)
        dest = self.path_for(key)

        with _io_errors(f"Could not commit object {key}"):
            dest.parent.mkdir(parents=True, exist_ok=True)
            os.replace(tmppath, dest)

        if self.options.durable:
            _fsync_dir(dest.parent)

        logger.debug("CAS committed: %s (%d bytes)", dest, result.written)
        return key

    def put_bytes(self, data: bytes) -> str:
        """Store a byte string. See put()."""
        return self.put(io.BytesIO(data))

    def put_string(self, text: str, encoding: str = "utf-8") -> str:
        """Store a text string, encoded with `encoding`. See put()."""
        return self.put(io.BytesIO(text.encode(encoding)))

    def put_file(self, path: Path) -> str:
        """Store the contents of a file. See put()."""
        with _io_errors(f"Could not open {path}"):
            f = Path(path).open("rb")
        with f:
            return self.put(f)

    # ---- Reads ---------------------------------------------------------------

    def get(self, key: str) -> Optional[BinaryIO]:
        """Open a stored object for reading.

        The content is not re-hashed; the caller gets whatever is stored at
        the key's path.

        Args:
            key: Content key

        Returns:
            Open binary file owned by the caller (use it as a context
            manager), or None if no object is stored under the key

        Raises:
            StoreIOError: If the object exists but cannot be opened
            ValueError: If the key is malformed or too short for the mapper
        """
        path = self.path_for(key)
        try:
            return path.open("rb")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreIOError(f"Could not open object {key}: {e}") from e

    def size(self, key: str) -> int:
        """Get the byte length of a stored object without opening it.

        Args:
            key: Content key

        Returns:
            Size in bytes, or MISSING_SIZE (-1) if no object is stored

        Raises:
            StoreIOError: If stat fails for a reason other than absence
            ValueError: If the key is malformed or too short for the mapper
        """
        path = self.path_for(key)
        try:
            return path.stat().st_size
        except FileNotFoundError:
            return MISSING_SIZE
        except OSError as e:
            raise StoreIOError(f"Could not stat object {key}: {e}") from e

    def has(self, key: str) -> bool:
        """Check if an object is stored under the key."""
        return self.size(key) != MISSING_SIZE


__all__ = ["Store"]
