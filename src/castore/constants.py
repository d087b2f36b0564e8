"""Constants for castore."""

# Size ceiling applied when none (or a non-positive one) is configured
DEFAULT_MAX_SIZE = 10 * 1024 * 1024

# Chunk size for the bounded copy
COPY_CHUNK_SIZE = 32 * 1024

# Private staging directory under the base path (never a valid key)
STAGING_DIR_NAME = ".staging"
STAGING_PREFIX = ".put-"

# Size reported for keys with no stored object
MISSING_SIZE = -1

# Environment variable overriding the configured base path
BASE_PATH_ENV = "CASTORE_BASE_PATH"

# Version
CASTORE_VERSION = "0.1.0"
