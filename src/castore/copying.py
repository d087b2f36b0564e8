"""Size-bounded streaming copy.

Copies a readable byte stream into a writable sink in fixed-size chunks,
mirroring every chunk into a hash accumulator, and stops once a byte ceiling
would be crossed. The key is not needed (or known) until the copy completes.
"""

from typing import Any, BinaryIO, NamedTuple, Optional

from .constants import COPY_CHUNK_SIZE
from .errors import StoreIOError


class CopyResult(NamedTuple):
    """Outcome of a bounded copy."""
    written: int    # Bytes written to the sink
    exceeded: bool  # Source had more than `limit` bytes


def _read(src: BinaryIO, size: int) -> bytes:
    try:
        chunk = src.read(size)
    except OSError as e:
        raise StoreIOError(f"Failed reading source stream: {e}") from e
    if chunk is None:
        # Non-blocking stream with nothing available
        raise StoreIOError("Source stream returned no data (non-blocking streams are not supported)")
    return chunk


def _write(dst: Any, chunk: bytes) -> None:
    try:
        n = dst.write(chunk)
    except OSError as e:
        raise StoreIOError(f"Failed writing to destination: {e}") from e
    # Raw streams may accept fewer bytes than offered
    if n is not None and n != len(chunk):
        raise StoreIOError(f"Short write: destination accepted {n} of {len(chunk)} bytes")


def copy_limited(
    dst: Any,
    src: BinaryIO,
    limit: int,
    hasher: Optional[Any] = None,
    chunk_size: int = COPY_CHUNK_SIZE,
) -> CopyResult:
    """Copy at most `limit` bytes from src to dst, hashing as we go.

    Reads never request more than the remaining allowance. Once the allowance
    is used up, a single probe byte is read: end of stream means the content
    fits exactly; anything else flags the copy as exceeded. Bytes past the
    ceiling are never written or hashed.

    Args:
        dst: Writable binary sink
        src: Readable binary stream
        limit: Maximum number of bytes accepted
        hasher: Optional accumulator fed with every byte written
        chunk_size: Maximum bytes per read

    Returns:
        CopyResult with the byte count and the exceeded flag

    Raises:
        StoreIOError: On a source or destination failure, or a short write
    """
    remaining = limit
    written = 0

    while True:
        if remaining <= 0:
            probe = _read(src, 1)
            return CopyResult(written, bool(probe))

        chunk = _read(src, min(chunk_size, remaining))
        if not chunk:
            return CopyResult(written, False)

        exceeded = len(chunk) > remaining
        if exceeded:
            # Stream ignored the requested size
            chunk = chunk[:remaining]

        _write(dst, chunk)
        if hasher is not None:
            hasher.update(chunk)
        written += len(chunk)
        remaining -= len(chunk)

        if exceeded:
            return CopyResult(written, True)


__all__ = ["CopyResult", "copy_limited"]
