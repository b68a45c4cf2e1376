"""Project-wide constants (size ceilings, default paths, ports)."""

DEFAULT_MAX_CHUNK_SIZE_BYTES: int = 1_000_000  # ~1 MB per chunk upload
DEFAULT_MAX_OBJECT_SIZE_BYTES: int = 512 * 1024 * 1024  # 512 MiB per object

DEFAULT_CHECKPOINT_PATH: str = "/app/data/checkpoint.json"
CHECKPOINT_FORMAT_VERSION: int = 1

DEFAULT_VAULT_PORT: int = 8000
DEFAULT_CALLER_ID_HEADER: str = "X-Caller-Id"
DEFAULT_CONTENT_TYPE: str = "application/octet-stream"
