"""Key-to-directory mapping strategies.

A path mapper turns a content key into the ordered list of directory names the
object is stored under. The store calls the same mapper with the same key on
every write and read, so a mapper must be pure and deterministic.

Layouts:
    flat:      <base>/<key>
    depth(2):  <base>/ab/cd/<key>
"""

from typing import List, Protocol

from .errors import ConfigurationError


class PathMapper(Protocol):
    """
    Protocol for path mappers.

    Any callable taking a key and returning a list of directory names
    satisfies it, including plain functions.
    """

    def __call__(self, key: str) -> List[str]:
        """
        Map a key to its directory segments.

        Args:
            key: Content key (hex digest)

        Returns:
            Directory names, outermost first
        """
        ...


class FlatMapper:
    """Place every object directly under the base path."""

    def __call__(self, key: str) -> List[str]:
        return []

    def __repr__(self) -> str:
        return "FlatMapper()"

    def __eq__(self, other) -> bool:
        return isinstance(other, FlatMapper)

    def __hash__(self) -> int:
        return hash(FlatMapper)


class DepthMapper:
    """
    Bucket objects into nested two-character directories.

    ``DepthMapper(2)`` maps "abcdef..." to ["ab", "cd"], bounding the number
    of entries per directory in large stores.
    """

    def __init__(self, depth: int):
        """
        Initialize depth mapper.

        Args:
            depth: Number of directory levels, at least 1

        Raises:
            ValueError: If depth is less than 1
        """
        if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
            raise ValueError(f"depth must be a positive integer, got {depth!r}")
        self.depth = depth

    def __call__(self, key: str) -> List[str]:
        """
        Split the key prefix into two-character segments.

        Raises:
            ValueError: If the key is shorter than 2 * depth characters
        """
        if len(key) < 2 * self.depth:
            raise ValueError(
                f"Key {key!r} is too short for depth {self.depth} "
                f"(needs at least {2 * self.depth} characters)"
            )
        return [key[i * 2:(i + 1) * 2] for i in range(self.depth)]

    def __repr__(self) -> str:
        return f"DepthMapper({self.depth})"

    def __eq__(self, other) -> bool:
        return isinstance(other, DepthMapper) and other.depth == self.depth

    def __hash__(self) -> int:
        return hash((DepthMapper, self.depth))


def make_mapper(layout: str = "flat", depth: int = 2) -> PathMapper:
    """
    Create a path mapper from configuration values.

    Args:
        layout: "flat" or "depth"
        depth: Directory levels for the depth layout

    Returns:
        PathMapper instance

    Raises:
        ConfigurationError: If layout is unknown or depth is invalid
    """
    layout = (layout or "flat").strip().lower()
    if layout == "flat":
        return FlatMapper()
    if layout == "depth":
        try:
            return DepthMapper(depth)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
    raise ConfigurationError(f"Unknown layout {layout!r} (expected 'flat' or 'depth')")


__all__ = ["DepthMapper", "FlatMapper", "PathMapper", "make_mapper"]
