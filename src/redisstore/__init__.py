"""Redis persistence for HTTP response caches.

This package provides:
- The CacheStore contract and its Redis implementation (RedisStore)
- Client construction for single node, cluster and sentinel setups
- Expiration sentinels (DEFAULT, FOREVER)
- The default value codec
- An in-memory client for tests and development

NotSupported is part of the shared error vocabulary and is reserved for
backends that lack an operation; RedisStore implements every operation and
never raises it.
"""

from redisstore.client import KeyValueClient
from redisstore.connection import ClientOptions, new_universal_client
from redisstore.exceptions import (
    CacheError,
    CacheMiss,
    NotAnIntegerError,
    NotStored,
    NotSupported,
    SerializationError,
)
from redisstore.expiration import DEFAULT, FOREVER, Expiration
from redisstore.memory import InMemoryClient
from redisstore.serializer import deserialize, serialize
from redisstore.store import CacheStore, RedisStore

__all__ = [
    # Store
    "CacheStore",
    "RedisStore",
    # Client
    "ClientOptions",
    "KeyValueClient",
    "InMemoryClient",
    "new_universal_client",
    # Expiration
    "Expiration",
    "DEFAULT",
    "FOREVER",
    # Serialization
    "serialize",
    "deserialize",
    # Errors
    "CacheError",
    "CacheMiss",
    "NotStored",
    "NotSupported",
    "SerializationError",
    "NotAnIntegerError",
]
