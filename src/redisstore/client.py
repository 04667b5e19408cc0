"""Key-value client protocol."""

from typing import Any, Optional, Protocol, Union, runtime_checkable


@runtime_checkable
class KeyValueClient(Protocol):
    """Primitives the store needs from its client.

    ``redis.Redis``, ``redis.cluster.RedisCluster`` and sentinel master
    clients satisfy this structurally, as does
    :class:`redisstore.memory.InMemoryClient`. Clients must return raw
    bytes (``decode_responses=False``).
    """

    def set(
        self,
        name: str,
        value: Union[bytes, int],
        px: Optional[int] = None,
        nx: bool = False,
    ) -> Optional[bool]: ...

    def exists(self, *names: str) -> int: ...

    def get(self, name: str) -> Optional[bytes]: ...

    def delete(self, *names: str) -> int: ...

    def decrby(self, name: str, amount: int = 1) -> int: ...

    def flushall(self) -> Any: ...

    def ping(self) -> Any: ...
