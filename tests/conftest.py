"""Shared test fixtures and utilities."""

import io

import pytest

from castore import Store


class InfiniteReader(io.RawIOBase):
    """Stream that never ends, filled with a single byte."""

    def __init__(self, ch: bytes = b"\x00"):
        self.ch = ch
        self.bytes_read = 0

    def readable(self):
        return True

    def readinto(self, b):
        n = len(b)
        b[:n] = self.ch * n
        self.bytes_read += n
        return n


class FailingReader(io.RawIOBase):
    """Stream that yields some bytes, then fails."""

    def __init__(self, prefix: bytes = b"partial data"):
        self.prefix = prefix
        self.done = False

    def readable(self):
        return True

    def readinto(self, b):
        if self.done:
            raise OSError("Simulated read failure")
        self.done = True
        n = min(len(b), len(self.prefix))
        b[:n] = self.prefix[:n]
        return n


@pytest.fixture
def infinite_reader():
    """Factory for endless streams of one repeated byte."""
    return InfiniteReader


@pytest.fixture
def failing_reader():
    """Factory for streams that fail after their first read."""
    return FailingReader


@pytest.fixture
def store(tmp_path):
    """Create a Store with default options in a temp directory."""
    return Store(base_path=tmp_path / "store")


@pytest.fixture
def stored_files():
    """Return a function listing committed objects (staging excluded)."""
    def _stored(store):
        return sorted(
            p for p in store.root.rglob("*")
            if p.is_file() and store.staging_dir not in p.parents
        )
    return _stored


@pytest.fixture
def staged_files():
    """Return a function listing a store's staging directory."""
    def _staged(store):
        return list(store.staging_dir.iterdir())
    return _staged
