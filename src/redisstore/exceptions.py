"""
Error vocabulary shared by cache store backends.

Client-level failures (connection refused, timeouts, protocol errors) are
not wrapped: they propagate from the redis client unchanged. The classes
below only describe conditions the store itself detects.
"""

from typing import Optional


class CacheError(Exception):
    """
    Base exception for all cache store errors.

    Use this for catching any condition reported by the store itself.
    """

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        """
        Initialize CacheError.

        Args:
            message: Error description
            key: Optional cache key the error refers to
        """
        self.message = message
        self.key = key
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class CacheMiss(CacheError, KeyError):
    """
    Raised when a key is absent but the operation requires it.

    Raised by get, delete, increment and decrement.

    Example:
        >>> raise CacheMiss("user:42")
    """

    def __init__(self, key: str, message: Optional[str] = None) -> None:
        """
        Initialize CacheMiss.

        Args:
            key: The missing cache key
            message: Optional custom error message
        """
        if message is None:
            message = f"cache miss for key '{key}'"
        super().__init__(message, key=key)


class NotStored(CacheError):
    """
    Raised when a conditional write is refused.

    This occurs when:
    - add() targets a key that already exists
    - replace() targets a key that does not exist
    - replace() is given a value that serializes to nothing
    """

    def __init__(self, key: str, message: Optional[str] = None) -> None:
        if message is None:
            message = f"item for key '{key}' not stored"
        super().__init__(message, key=key)


class NotSupported(CacheError):
    """
    Raised when a backend does not implement an operation.

    Reserved for other CacheStore backends; RedisStore never raises it.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"operation '{operation}' not supported by this store")


class SerializationError(CacheError, ValueError):
    """
    Raised when a value cannot be encoded, or a stored payload cannot be
    decoded into the requested shape.

    Attributes:
        target: Name of the destination type for decode failures
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        target: Optional[str] = None,
    ) -> None:
        self.target = target
        super().__init__(message, key=key)


class NotAnIntegerError(CacheError, TypeError):
    """
    Raised when a counter operation finds a value that is not integer-shaped.

    Example:
        >>> raise NotAnIntegerError("hits", b"abc")
    """

    def __init__(self, key: str, raw: bytes) -> None:
        """
        Initialize NotAnIntegerError.

        Args:
            key: Cache key holding the value
            raw: The raw stored payload
        """
        self.raw = raw
        preview = raw[:32].decode("utf-8", errors="replace")
        super().__init__(
            f"value for key '{key}' is not an integer: {preview!r}", key=key
        )
