"""Default value codec for cache entries.

Raw bytes are stored untouched and integers as decimal ASCII, so counters
written through the store stay usable by the server's own INCRBY/DECRBY.
Everything else is stored as JSON. Typed reads are validated with pydantic,
which lets callers ask for models, dataclasses and generic containers.
"""

import functools
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, from_json, to_json

from redisstore.exceptions import SerializationError
from redisstore.utils.logger import get_logger

logger = get_logger(__name__)

_RAW_TYPES = (bytes, bytearray, memoryview)


def serialize(value: Any) -> bytes:
    """
    Encode a value for storage.

    Args:
        value: bytes-like, int, or anything pydantic can dump to JSON

    Returns:
        The encoded payload

    Raises:
        SerializationError: If the value cannot be encoded

    Example:
        >>> serialize(42)
        b'42'
        >>> serialize({"a": [1, 2]})
        b'{"a":[1,2]}'
    """
    if isinstance(value, _RAW_TYPES):
        return bytes(value)

    # bool is an int subclass but must round-trip as JSON true/false;
    # other int subclasses (IntEnum, HTTPStatus) may override __str__
    if isinstance(value, int) and not isinstance(value, bool):
        return str(int(value)).encode("ascii")

    try:
        return to_json(value)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        logger.debug(
            "serialize_failed",
            value_type=type(value).__name__,
            error=str(e),
        )
        raise SerializationError(
            f"cannot serialize value of type {type(value).__name__}: {e}"
        ) from e


@functools.lru_cache(maxsize=128)
def _adapter(into: Any) -> TypeAdapter:
    return TypeAdapter(into)


def deserialize(data: bytes, into: Optional[Any] = None) -> Any:
    """
    Decode a stored payload.

    Args:
        data: Raw payload read from the store
        into: Destination type. ``bytes`` returns the payload as-is, None
            returns plain JSON values, any other type is validated with
            pydantic.

    Returns:
        The decoded value

    Raises:
        SerializationError: If the payload does not match the destination

    Example:
        >>> deserialize(b'{"a":1}')
        {'a': 1}
        >>> deserialize(b"8", into=int)
        8
    """
    if into is bytes:
        return bytes(data)

    target = getattr(into, "__name__", repr(into)) if into is not None else "json"
    try:
        if into is None:
            return from_json(data)
        return _adapter(into).validate_json(data)
    except (ValidationError, ValueError) as e:
        logger.debug("deserialize_failed", target=target, size=len(data))
        raise SerializationError(
            f"cannot decode {len(data)} byte payload as {target}: {e}",
            target=target,
        ) from e
