"""Store configuration.

``StoreOptions`` is validated and normalized once, when a store is built, and
is immutable afterwards. ``load_store_options`` builds it from an optional YAML
file, the environment, and explicit overrides.
"""

import os
from pathlib import Path, PurePath
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import BASE_PATH_ENV, DEFAULT_MAX_SIZE, STAGING_DIR_NAME
from .errors import ConfigurationError
from .hashing import resolve_hash_factory
from .mappers import FlatMapper, make_mapper


class StoreOptions(BaseModel):
    """
    Options controlling a Store.

    Unset or non-positive values fall back to defaults:
    SHA-256 keys, flat layout, 10 MiB ceiling, staging under <base>/.staging.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    base_path: Path = Field(default=None, validate_default=True)
    hash_algorithm: Any = Field(default=None, validate_default=True)  # name or digest constructor
    path_mapper: Any = Field(default=None, validate_default=True)     # key -> [segments]
    max_size: Optional[int] = Field(default=None, validate_default=True)
    staging_dir: Optional[Path] = None
    durable: bool = True  # fsync staged data and directory entries on commit

    def __init__(self, **data):
        """Report type errors as configuration errors."""
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid store options: {e}") from e

    @field_validator("base_path", mode="before")
    @classmethod
    def require_base_path(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ConfigurationError("base_path cannot be empty")
        # Path("") collapses to Path(".")
        if isinstance(v, PurePath) and str(v) == ".":
            raise ConfigurationError("base_path cannot be empty")
        return v

    @field_validator("hash_algorithm")
    @classmethod
    def resolve_hash(cls, v):
        return resolve_hash_factory(v)

    @field_validator("path_mapper")
    @classmethod
    def default_mapper(cls, v):
        if v is None:
            return FlatMapper()
        if not callable(v):
            raise ConfigurationError(
                f"path_mapper must be callable, got {type(v).__name__}"
            )
        return v

    @field_validator("max_size")
    @classmethod
    def default_max_size(cls, v: Optional[int]) -> int:
        return v if v is not None and v > 0 else DEFAULT_MAX_SIZE

    @property
    def staging_path(self) -> Path:
        """Directory holding uncommitted puts."""
        if self.staging_dir is not None:
            return self.staging_dir
        return self.base_path / STAGING_DIR_NAME


def _read_config_file(path: Path) -> dict:
    """Read a YAML config file, accepting an optional top-level `store:` section."""
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        text = path.read_text()
    except OSError as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}") from e

    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    section = data.get("store", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"'store' section in {path} must be a mapping")
    return dict(section)


def _hash_alias(values: dict) -> dict:
    """Accept `hash` as a short name for `hash_algorithm`."""
    if "hash" in values:
        values["hash_algorithm"] = values.pop("hash")
    return values


def load_store_options(path: Optional[Path] = None, **overrides) -> StoreOptions:
    """
    Build StoreOptions from a config file, the environment and overrides.

    Resolution order: overrides (non-None) > $CASTORE_BASE_PATH > file > defaults.

    File keys: base_path, hash, layout ("flat" | "depth"), depth, max_size,
    durable, staging_dir. Overrides use the same names; `hash_algorithm` and
    `path_mapper` are also accepted.

    Args:
        path: Optional YAML file
        **overrides: Explicit values, typically from the command line

    Returns:
        Validated StoreOptions

    Raises:
        ConfigurationError: If the file is missing or malformed, or any value is invalid
    """
    data = _hash_alias(_read_config_file(Path(path))) if path is not None else {}

    env_base = os.environ.get(BASE_PATH_ENV)
    if env_base:
        data["base_path"] = env_base

    data.update(_hash_alias({k: v for k, v in overrides.items() if v is not None}))

    layout = data.pop("layout", None)
    depth = data.pop("depth", None)
    if "path_mapper" not in data and (layout is not None or depth is not None):
        try:
            depth = int(depth) if depth is not None else 2
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"depth must be an integer, got {depth!r}") from e
        data["path_mapper"] = make_mapper(layout or "depth", depth)

    return StoreOptions(**data)


__all__ = ["StoreOptions", "load_store_options"]
