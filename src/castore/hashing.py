"""Hashing utilities for content keys.

A store is configured with a digest constructor: a zero-argument callable that
returns a fresh accumulator with ``update(bytes)`` and ``digest()``. Every
``hashlib`` constructor qualifies. Keys are the lowercase hex of the digest.
"""

import hashlib
from pathlib import Path
from typing import Any, BinaryIO, Callable, Union

from .constants import COPY_CHUNK_SIZE
from .errors import ConfigurationError

HashFactory = Callable[[], Any]

DEFAULT_HASH: HashFactory = hashlib.sha256


def resolve_hash_factory(value: Union[str, HashFactory, None]) -> HashFactory:
    """Turn a configured hash algorithm into a digest constructor.

    Args:
        value: None for the default (SHA-256), a ``hashlib`` algorithm name
            such as "sha256" or "blake2b", or a digest constructor

    Returns:
        Zero-argument callable producing a fresh hash accumulator

    Raises:
        ConfigurationError: If the name is unknown, the algorithm has no fixed
            digest length, or the constructor does not produce an accumulator
    """
    if value is None:
        return DEFAULT_HASH

    if isinstance(value, str):
        name = value.strip().lower()
        if name not in hashlib.algorithms_available:
            name = name.replace("-", "_")
        if not name:
            return DEFAULT_HASH
        if name.startswith("shake"):
            raise ConfigurationError(
                f"Hash algorithm '{value}' has a variable digest length and cannot produce keys"
            )
        if name not in hashlib.algorithms_available:
            raise ConfigurationError(f"Unknown hash algorithm: {value!r}")
        # blake2b, sha256, ... have direct constructors; others go through new()
        return getattr(hashlib, name, None) or (lambda: hashlib.new(name))

    if not callable(value):
        raise ConfigurationError(
            f"hash_algorithm must be a name or a digest constructor, got {type(value).__name__}"
        )

    try:
        probe = value()
    except Exception as e:
        raise ConfigurationError(f"Hash constructor {value!r} failed: {e}") from e
    if not (hasattr(probe, "update") and hasattr(probe, "digest")):
        raise ConfigurationError(
            f"Hash constructor {value!r} must return an object with update() and digest()"
        )
    return value


def key_from_hasher(hasher: Any) -> str:
    """Hex-encode a finished accumulator into a content key."""
    return hasher.digest().hex()


def compute_key(stream: BinaryIO, hash_factory: HashFactory = DEFAULT_HASH) -> str:
    """Compute the key a stream's content would be stored under.

    Reads the stream to the end without storing anything.

    Args:
        stream: Readable binary stream
        hash_factory: Digest constructor

    Returns:
        Lowercase hex digest
    """
    hasher = hash_factory()
    for chunk in iter(lambda: stream.read(COPY_CHUNK_SIZE), b""):
        hasher.update(chunk)
    return key_from_hasher(hasher)


def compute_file_key(path: Path, hash_factory: HashFactory = DEFAULT_HASH) -> str:
    """Compute the key of a file's contents."""
    with Path(path).open("rb") as f:
        return compute_key(f, hash_factory)


__all__ = [
    "DEFAULT_HASH",
    "HashFactory",
    "compute_file_key",
    "compute_key",
    "key_from_hasher",
    "resolve_hash_factory",
]
