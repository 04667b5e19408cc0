"""Expiration sentinels and resolution rules.

Callers pass either one of the :class:`Expiration` sentinels or a literal
duration (``timedelta`` or seconds) to every write operation.
"""

from datetime import timedelta
from enum import Enum
from typing import Optional, Union

from redisstore.utils.logger import get_logger

logger = get_logger(__name__)


class Expiration(Enum):
    """
    Special expiration values understood by every store.

    DEFAULT uses the store's configured default expiration.
    FOREVER writes the entry without any expiration.
    """

    DEFAULT = "default"
    FOREVER = "forever"


DEFAULT = Expiration.DEFAULT
FOREVER = Expiration.FOREVER

Expires = Union[Expiration, timedelta, int, float, None]


def to_timedelta(value: Union[timedelta, int, float]) -> timedelta:
    """Convert a number of seconds (or a timedelta) to a timedelta."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(
            f"expiration must be a timedelta or a number of seconds, got {type(value).__name__}"
        )
    return timedelta(seconds=value)


def resolve(expires: Expires, default: Optional[timedelta]) -> Optional[timedelta]:
    """
    Resolve a requested expiration to the TTL sent to the store.

    Args:
        expires: Sentinel, literal duration, or None (treated as DEFAULT)
        default: The store's configured default expiration

    Returns:
        A positive timedelta, or None when the entry must not expire

    Example:
        >>> resolve(Expiration.DEFAULT, timedelta(minutes=5))
        datetime.timedelta(seconds=300)
        >>> resolve(Expiration.FOREVER, timedelta(minutes=5)) is None
        True
    """
    if expires is None or expires is Expiration.DEFAULT:
        ttl = default
    elif expires is Expiration.FOREVER:
        ttl = None
    else:
        ttl = to_timedelta(expires)
        # A literal zero duration is the same as DEFAULT
        if ttl == timedelta(0):
            ttl = default

    if ttl is not None and ttl <= timedelta(0):
        ttl = None

    logger.debug("expiration_resolved", requested=str(expires), ttl=str(ttl))
    return ttl


def to_milliseconds(ttl: Optional[timedelta]) -> Optional[int]:
    """Convert a resolved TTL to the integer milliseconds PX expects."""
    if ttl is None:
        return None
    # PX rejects 0, sub-millisecond TTLs round up to 1ms
    return max(1, int(ttl.total_seconds() * 1000))
