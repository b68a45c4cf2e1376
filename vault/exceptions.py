"""Custom exception classes for the storage engine."""


class StorageEngineError(Exception):
    """
    Base exception class for all storage engine errors.
    """
    pass


class SizeLimitExceededError(StorageEngineError):
    """
    Raised when an object's declared size is over the configured ceiling.
    """

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Declared size {size} exceeds maximum object size {limit}")


class ChunkSizeExceededError(StorageEngineError):
    """
    Raised when a single chunk upload is over the configured ceiling.
    """

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Chunk of {size} bytes exceeds maximum chunk size {limit}")


class InvalidChunkIndexError(StorageEngineError):
    """
    Raised when a chunk index is negative.
    """
    pass


class InvalidObjectSizeError(StorageEngineError):
    """
    Raised when an object is created with a negative declared size.
    """
    pass


class ObjectNotFoundError(StorageEngineError):
    """
    Raised when a requested object does not exist.
    """
    pass


class UnauthorizedAccessError(StorageEngineError):
    """
    Raised when the caller does not own the object it tries to access.
    """
    pass


class AuthenticationRequiredError(StorageEngineError):
    """
    Raised when an anonymous caller requests a private object.
    """
    pass


class MissingChunkError(StorageEngineError):
    """
    Raised when an object cannot be reconstructed because a chunk is absent.
    Carries the lowest missing index so uploads can resume from it.
    """

    def __init__(self, object_id: str, chunk_index: int):
        self.object_id = object_id
        self.chunk_index = chunk_index
        super().__init__(f"Object {object_id} is missing chunk {chunk_index}")


class CheckpointVersionError(StorageEngineError):
    """
    Raised when a checkpoint snapshot was written in an unsupported format.
    """
    pass


class ChecksumMismatchError(StorageEngineError):
    """
    Raised when restored chunk bytes do not match their recorded checksum.
    """
    pass
