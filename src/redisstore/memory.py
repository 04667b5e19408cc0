"""In-process key-value client.

Implements the :class:`redisstore.client.KeyValueClient` primitives over a
dictionary so a :class:`redisstore.store.RedisStore` can run without a
server, e.g. in tests or single-process development setups.
"""

import threading
import time
from typing import Dict, Optional, Tuple, Union

from redis.exceptions import ResponseError

from redisstore.utils.logger import get_logger

logger = get_logger(__name__)


class InMemoryClient:
    """
    Dictionary-backed client with millisecond expirations.

    Entries are expired lazily on access. All operations hold a lock, so an
    instance can be shared between threads like a pooled redis client.

    Example:
        >>> client = InMemoryClient()
        >>> client.set("k", b"v", px=1000)
        True
        >>> client.get("k")
        b'v'
    """

    def __init__(self) -> None:
        self._store: Dict[str, Tuple[bytes, Optional[float]]] = {}
        self._lock = threading.Lock()

    def _live(self, name: str) -> Optional[bytes]:
        entry = self._store.get(name)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            del self._store[name]
            return None

        return value

    def set(
        self,
        name: str,
        value: Union[bytes, int],
        px: Optional[int] = None,
        nx: bool = False,
    ) -> Optional[bool]:
        """Store a value. With ``nx=True`` returns None if the key exists."""
        if isinstance(value, int):
            value = str(value).encode("ascii")
        elif isinstance(value, str):
            value = value.encode("utf-8")
        else:
            value = bytes(value)

        expires_at = None
        if px is not None:
            if px <= 0:
                raise ResponseError("invalid expire time in 'set' command")
            expires_at = time.monotonic() + px / 1000

        with self._lock:
            if nx and self._live(name) is not None:
                return None
            self._store[name] = (value, expires_at)
        return True

    def exists(self, *names: str) -> int:
        with self._lock:
            return sum(1 for name in names if self._live(name) is not None)

    def get(self, name: str) -> Optional[bytes]:
        with self._lock:
            return self._live(name)

    def delete(self, *names: str) -> int:
        with self._lock:
            count = 0
            for name in names:
                if self._live(name) is not None:
                    del self._store[name]
                    count += 1
            return count

    def decrby(self, name: str, amount: int = 1) -> int:
        """Atomically decrement an integer value, creating it at 0 if absent."""
        with self._lock:
            raw = self._live(name)
            expires_at = self._store[name][1] if raw is not None else None
            try:
                current = int(raw) if raw is not None else 0
            except ValueError:
                raise ResponseError("value is not an integer or out of range") from None

            new_value = current - amount
            # DECRBY keeps the key's TTL
            self._store[name] = (str(new_value).encode("ascii"), expires_at)
            return new_value

    def ttl_ms(self, name: str) -> Optional[int]:
        """Remaining time to live in milliseconds, None if persistent or absent."""
        with self._lock:
            if self._live(name) is None:
                return None
            expires_at = self._store[name][1]
            if expires_at is None:
                return None
            return max(0, int((expires_at - time.monotonic()) * 1000))

    def flushall(self) -> bool:
        with self._lock:
            count = len(self._store)
            self._store.clear()
        logger.debug("memory_client_flushed", keys=count)
        return True

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        """No connections to release; present for parity with redis clients."""
