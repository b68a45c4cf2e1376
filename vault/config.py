"""Configuration settings for the storage engine server."""

import os
from common.constants import (
    DEFAULT_CALLER_ID_HEADER,
    DEFAULT_CHECKPOINT_PATH,
    DEFAULT_MAX_CHUNK_SIZE_BYTES,
    DEFAULT_MAX_OBJECT_SIZE_BYTES,
    DEFAULT_VAULT_PORT,
)


CHECKPOINT_PATH = os.environ.get("VAULT_CHECKPOINT_PATH", DEFAULT_CHECKPOINT_PATH)

VAULT_HOST = os.environ.get("VAULT_HOST", "0.0.0.0")

VAULT_PORT = int(os.environ.get("VAULT_PORT", str(DEFAULT_VAULT_PORT)))

MAX_OBJECT_SIZE_BYTES = int(os.environ.get("MAX_OBJECT_SIZE_BYTES", str(DEFAULT_MAX_OBJECT_SIZE_BYTES)))

MAX_CHUNK_SIZE_BYTES = int(os.environ.get("MAX_CHUNK_SIZE_BYTES", str(DEFAULT_MAX_CHUNK_SIZE_BYTES)))

CALLER_ID_HEADER = os.environ.get("CALLER_ID_HEADER", DEFAULT_CALLER_ID_HEADER)
