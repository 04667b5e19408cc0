"""Cache store backed by a Redis-compatible server.

This module provides the CacheStore protocol, the method contract every
cache backend implements, and RedisStore, which maps each operation onto
one or two commands of a redis client.
"""

import contextlib
import os
import re
from datetime import timedelta
from typing import Any, Callable, Iterator, Optional, Protocol, Union, runtime_checkable

from redis.exceptions import RedisError

from redisstore.client import KeyValueClient
from redisstore.connection import ClientOptions, new_universal_client
from redisstore.exceptions import CacheMiss, NotAnIntegerError, NotStored, SerializationError
from redisstore.expiration import DEFAULT, Expires, resolve, to_milliseconds, to_timedelta
from redisstore.serializer import deserialize, serialize
from redisstore.utils.logger import get_logger

logger = get_logger(__name__)

_INTEGER = re.compile(rb"-?[0-9]+")


@runtime_checkable
class CacheStore(Protocol):
    """Operations a cache backend offers to the HTTP caching layer."""

    def get(self, key: str, into: Optional[Any] = None) -> Any: ...

    def set(self, key: str, value: Any, expires: Expires = DEFAULT) -> None: ...

    def add(self, key: str, value: Any, expires: Expires = DEFAULT) -> None: ...

    def replace(self, key: str, value: Any, expires: Expires = DEFAULT) -> None: ...

    def delete(self, key: str) -> None: ...

    def increment(self, key: str, delta: int) -> int: ...

    def decrement(self, key: str, delta: int) -> int: ...

    def flush(self) -> None: ...


def _check_delta(delta: int) -> None:
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise TypeError(f"delta must be an int, got {type(delta).__name__}")
    if delta < 0:
        raise ValueError(f"delta must be non-negative, got {delta}")


class RedisStore:
    """
    Cache store persisting entries in Redis.

    Every operation is a blocking round trip (two for replace). Failures
    reported by the client propagate unchanged; conditions detected by the
    store raise the errors from :mod:`redisstore.exceptions`.

    Attributes:
        client: The key-value client commands are sent to
        default_expiration: TTL applied when a write asks for DEFAULT,
            None for no expiration

    Example:
        >>> store = RedisStore.from_options(ClientOptions(), timedelta(minutes=5))
        >>> store.set("page:/home", {"status": 200, "body": "..."})
        >>> store.get("page:/home")["status"]
        200
    """

    def __init__(
        self,
        client: KeyValueClient,
        default_expiration: Union[timedelta, int, float, None] = None,
        serializer: Callable[[Any], bytes] = serialize,
        deserializer: Callable[..., Any] = deserialize,
    ) -> None:
        """
        Wrap an existing client. No liveness check is performed.

        Args:
            client: redis-py client (or any KeyValueClient)
            default_expiration: TTL for DEFAULT writes, timedelta or seconds
            serializer: Encodes values to bytes
            deserializer: Decodes bytes, called as deserializer(data, into)
        """
        self.client = client
        self.default_expiration: Optional[timedelta] = None
        if default_expiration is not None:
            ttl = to_timedelta(default_expiration)
            if ttl > timedelta(0):
                self.default_expiration = ttl
        self._serialize = serializer
        self._deserialize = deserializer

    @classmethod
    def from_options(
        cls,
        options: ClientOptions,
        default_expiration: Union[timedelta, int, float, None] = None,
        **kwargs: Any,
    ) -> "RedisStore":
        """
        Create a client from options and verify the server answers PING.

        Raises:
            redis.exceptions.RedisError: If the server cannot be reached
        """
        client = new_universal_client(options)

        try:
            client.ping()
        except RedisError as e:
            logger.error(
                "redis_ping_failed",
                topology=options.topology,
                error=str(e),
                error_type=type(e).__name__,
            )
            client.close()
            raise

        logger.info("redis_store_ready", topology=options.topology)
        return cls(client, default_expiration, **kwargs)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "RedisStore":
        """
        Create a store from REDIS_* environment variables.

        REDIS_DEFAULT_EXPIRATION (seconds) sets the default expiration.
        """
        raw = os.getenv("REDIS_DEFAULT_EXPIRATION")
        default_expiration = float(raw) if raw else None
        return cls.from_options(ClientOptions.from_env(), default_expiration, **kwargs)

    @contextlib.contextmanager
    def _command(self, operation: str, key: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except RedisError as e:
            logger.error(
                "cache_command_failed",
                operation=operation,
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def _write(self, key: str, payload: bytes, expires: Expires) -> None:
        px = to_milliseconds(resolve(expires, self.default_expiration))
        with self._command("set", key):
            self.client.set(key, payload, px=px)
        logger.debug("cache_set", key=key, ttl_ms=px, size=len(payload))

    def _get_int(self, key: str) -> int:
        with self._command("get", key):
            raw = self.client.get(key)
        if raw is None:
            logger.debug("cache_miss", key=key)
            raise CacheMiss(key)
        if not _INTEGER.fullmatch(bytes(raw)):
            raise NotAnIntegerError(key, bytes(raw))
        return int(raw)

    def set(self, key: str, value: Any, expires: Expires = DEFAULT) -> None:
        """
        Store a value unconditionally.

        Args:
            key: Cache key
            value: Value to store
            expires: DEFAULT, FOREVER, a timedelta or a number of seconds
        """
        self._write(key, self._serialize(value), expires)

    def add(self, key: str, value: Any, expires: Expires = DEFAULT) -> None:
        """
        Store a value only if the key does not exist yet.

        Raises:
            NotStored: If the key already exists
        """
        payload = self._serialize(value)
        px = to_milliseconds(resolve(expires, self.default_expiration))

        with self._command("set_nx", key):
            stored = self.client.set(key, payload, px=px, nx=True)

        if not stored:
            logger.debug("cache_not_stored", operation="add", key=key)
            raise NotStored(key)

        logger.debug("cache_add", key=key, ttl_ms=px, size=len(payload))

    def replace(self, key: str, value: Any, expires: Expires = DEFAULT) -> None:
        """
        Store a value only if the key already exists.

        The existence check and the write are separate commands, so a
        concurrent delete between them can still leave the key written.

        Raises:
            NotStored: If the key is absent or the value encodes to nothing
        """
        payload = self._serialize(value)

        with self._command("exists", key):
            present = self.client.exists(key)

        if not present:
            logger.debug("cache_not_stored", operation="replace", key=key, reason="absent")
            raise NotStored(key)

        if not payload:
            logger.debug("cache_not_stored", operation="replace", key=key, reason="empty")
            raise NotStored(key)

        self._write(key, payload, expires)

    def get(self, key: str, into: Optional[Any] = None) -> Any:
        """
        Retrieve and decode a value.

        Args:
            key: Cache key
            into: Destination type (e.g. ``int``, ``bytes``, a pydantic
                model). None decodes to plain Python values.

        Returns:
            The decoded value

        Raises:
            CacheMiss: If the key does not exist
            SerializationError: If the payload does not fit ``into``

        Example:
            >>> store.set("hits", 5)
            >>> store.get("hits", into=int)
            5
        """
        with self._command("get", key):
            raw = self.client.get(key)

        if raw is None:
            logger.debug("cache_miss", key=key)
            raise CacheMiss(key)

        logger.debug("cache_hit", key=key, size=len(raw))

        try:
            return self._deserialize(raw, into)
        except SerializationError as e:
            e.key = key
            logger.error("cache_get_decode_error", key=key, target=e.target)
            raise

    def delete(self, key: str) -> None:
        """
        Remove a key.

        Raises:
            CacheMiss: If nothing was removed
        """
        with self._command("delete", key):
            deleted = self.client.delete(key)

        if deleted == 0:
            logger.debug("cache_miss", key=key, operation="delete")
            raise CacheMiss(key)

        logger.debug("cache_delete", key=key)

    def increment(self, key: str, delta: int) -> int:
        """
        Add delta to an integer value and return the result.

        The new value is written back without an expiration, so any TTL the
        key had is dropped.

        Raises:
            CacheMiss: If the key does not exist
            NotAnIntegerError: If the stored value is not an integer
        """
        _check_delta(delta)
        total = self._get_int(key) + delta

        with self._command("set", key):
            self.client.set(key, total)

        logger.debug("cache_increment", key=key, delta=delta, value=total)
        return total

    def decrement(self, key: str, delta: int) -> int:
        """
        Subtract delta from an integer value, never going below zero.

        Raises:
            CacheMiss: If the key does not exist
            NotAnIntegerError: If the stored value is not an integer
        """
        _check_delta(delta)
        current = self._get_int(key)
        if delta > current:
            delta = max(current, 0)

        with self._command("decrby", key):
            value = self.client.decrby(key, delta)

        logger.debug("cache_decrement", key=key, delta=delta, value=value)
        return int(value)

    def flush(self) -> None:
        """Remove every key on the connected server(s)."""
        with self._command("flushall"):
            self.client.flushall()
        logger.info("cache_flushed")

    def ping(self) -> bool:
        """Check the server answers. Client errors propagate."""
        with self._command("ping"):
            return bool(self.client.ping())

    def close(self) -> None:
        """Release the client's connections."""
        close = getattr(self.client, "close", None)
        if close is not None:
            close()
            logger.info("redis_store_closed")

    def __enter__(self) -> "RedisStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
