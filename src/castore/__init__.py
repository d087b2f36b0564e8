"""castore: content-addressed storage on the local filesystem.

Arbitrary byte streams are stored under the hex digest of their content:

    >>> from castore import Store, DepthMapper
    >>> store = Store(base_path="/tmp/objects", path_mapper=DepthMapper(2))
    >>> key = store.put_string("foobar")
    >>> store.size(key)
    6
"""

from .config import StoreOptions, load_store_options
from .constants import CASTORE_VERSION, DEFAULT_MAX_SIZE, MISSING_SIZE
from .copying import CopyResult, copy_limited
from .errors import CastoreError, ConfigurationError, SizeExceededError, StoreIOError
from .hashing import DEFAULT_HASH, compute_file_key, compute_key
from .mappers import DepthMapper, FlatMapper, PathMapper, make_mapper
from .store import Store

__version__ = CASTORE_VERSION

__all__ = [
    "CastoreError",
    "ConfigurationError",
    "CopyResult",
    "DEFAULT_HASH",
    "DEFAULT_MAX_SIZE",
    "DepthMapper",
    "FlatMapper",
    "MISSING_SIZE",
    "PathMapper",
    "SizeExceededError",
    "Store",
    "StoreIOError",
    "StoreOptions",
    "compute_file_key",
    "compute_key",
    "copy_limited",
    "load_store_options",
    "make_mapper",
]
