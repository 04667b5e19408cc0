"""Redis client construction.

This module provides ClientOptions, the connection settings for a store,
and new_universal_client, which picks a standalone, cluster or
sentinel-managed client from those settings.
"""

import os
from typing import Any, Dict, List, Optional, Tuple

import redis
from pydantic import BaseModel, Field, field_validator
from redis.cluster import ClusterNode, RedisCluster
from redis.sentinel import Sentinel

from redisstore.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ADDR = "localhost:6379"


def _split_addr(addr: str) -> Tuple[str, int]:
    """Split "host:port" into its parts. The port defaults to 6379."""
    host, sep, port = addr.rpartition(":")
    if not sep:
        return addr, 6379
    # Bracketed IPv6 literal
    host = host.strip("[]")
    return host, int(port)


def _redact(url: str) -> str:
    """Drop credentials from a redis URL before logging it."""
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url.split("@")[-1]
    return f"{scheme}://{rest.split('@')[-1]}"


class ClientOptions(BaseModel):
    """
    Connection settings for a Redis-compatible store.

    The topology is derived from the options:
    - master_name set: sentinel-managed master, addrs are the sentinels
    - more than one address: cluster, addrs are the seed nodes
    - otherwise: single node (url takes precedence over addrs when given)

    Attributes:
        addrs: "host:port" seed addresses
        url: Optional redis:// or rediss:// URL for a single node
        db: Database index (ignored by clusters)
        username: ACL username
        password: Password for data nodes
        master_name: Sentinel service name
        sentinel_password: Password for the sentinels themselves
        read_only: Let cluster clients read from replicas
        max_connections: Connection pool size
        socket_timeout: Read/write timeout in seconds
        socket_connect_timeout: Connect timeout in seconds
        retry_on_timeout: Retry a command once after a timeout
        ssl: Use TLS for addrs-based connections
    """

    addrs: List[str] = Field(default_factory=lambda: [DEFAULT_ADDR])
    url: Optional[str] = None
    db: int = Field(0, ge=0)
    username: Optional[str] = None
    password: Optional[str] = None
    master_name: Optional[str] = None
    sentinel_password: Optional[str] = None
    read_only: bool = False
    max_connections: int = Field(20, ge=1)
    socket_timeout: Optional[float] = Field(5.0, gt=0)
    socket_connect_timeout: Optional[float] = Field(5.0, gt=0)
    retry_on_timeout: bool = True
    ssl: bool = False

    @field_validator("addrs")
    @classmethod
    def _require_addrs(cls, value: List[str]) -> List[str]:
        addrs = [addr.strip() for addr in value if addr.strip()]
        if not addrs:
            raise ValueError("at least one address is required")
        return addrs

    @classmethod
    def from_env(cls) -> "ClientOptions":
        """
        Build options from environment variables.

        Reads REDIS_ADDRS (comma separated), REDIS_URL, REDIS_DB,
        REDIS_USERNAME, REDIS_PASSWORD, REDIS_MASTER_NAME,
        REDIS_SENTINEL_PASSWORD, REDIS_READ_ONLY, REDIS_MAX_CONNECTIONS,
        REDIS_SOCKET_TIMEOUT, REDIS_SOCKET_CONNECT_TIMEOUT and REDIS_SSL.
        Unset variables keep their defaults.

        Example:
            >>> os.environ["REDIS_ADDRS"] = "node1:7000,node2:7000"
            >>> ClientOptions.from_env().topology
            'cluster'
        """
        values: Dict[str, Any] = {}

        addrs = os.getenv("REDIS_ADDRS")
        if addrs:
            values["addrs"] = addrs.split(",")

        env_fields = {
            "url": "REDIS_URL",
            "db": "REDIS_DB",
            "username": "REDIS_USERNAME",
            "password": "REDIS_PASSWORD",
            "master_name": "REDIS_MASTER_NAME",
            "sentinel_password": "REDIS_SENTINEL_PASSWORD",
            "read_only": "REDIS_READ_ONLY",
            "max_connections": "REDIS_MAX_CONNECTIONS",
            "socket_timeout": "REDIS_SOCKET_TIMEOUT",
            "socket_connect_timeout": "REDIS_SOCKET_CONNECT_TIMEOUT",
            "ssl": "REDIS_SSL",
        }
        for field, env_var in env_fields.items():
            raw = os.getenv(env_var)
            if raw is not None and raw != "":
                values[field] = raw

        # pydantic coerces "1"/"true"/"5.0" into the declared types
        return cls.model_validate(values)

    @property
    def topology(self) -> str:
        """One of "sentinel", "cluster" or "single"."""
        if self.master_name:
            return "sentinel"
        if self.url is None and len(self.addrs) > 1:
            return "cluster"
        return "single"

    def connection_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments shared by every client type."""
        return {
            "username": self.username,
            "password": self.password,
            "socket_timeout": self.socket_timeout,
            "socket_connect_timeout": self.socket_connect_timeout,
            "retry_on_timeout": self.retry_on_timeout,
        }


def new_universal_client(options: ClientOptions) -> Any:
    """
    Create a redis client matching the options' topology.

    No connection is attempted here; redis-py connects lazily on the first
    command.

    Args:
        options: Connection settings

    Returns:
        redis.Redis, redis.cluster.RedisCluster, or a sentinel master client

    Example:
        >>> client = new_universal_client(ClientOptions(addrs=["localhost:6379"]))
        >>> client.ping()
        True
    """
    topology = options.topology
    kwargs = options.connection_kwargs()

    if topology == "sentinel":
        sentinel_kwargs: Dict[str, Any] = {
            "socket_timeout": options.socket_timeout,
            "socket_connect_timeout": options.socket_connect_timeout,
        }
        if options.sentinel_password:
            sentinel_kwargs["password"] = options.sentinel_password

        sentinel = Sentinel(
            [_split_addr(addr) for addr in options.addrs],
            sentinel_kwargs=sentinel_kwargs,
            ssl=options.ssl,
        )
        client = sentinel.master_for(options.master_name, db=options.db, **kwargs)
        target = ",".join(options.addrs)

    elif topology == "cluster":
        client = RedisCluster(
            startup_nodes=[ClusterNode(*_split_addr(addr)) for addr in options.addrs],
            read_from_replicas=options.read_only,
            max_connections=options.max_connections,
            ssl=options.ssl,
            **kwargs,
        )
        target = ",".join(options.addrs)

    elif options.url is not None:
        client = redis.Redis.from_url(
            options.url,
            db=options.db,
            max_connections=options.max_connections,
            **kwargs,
        )
        target = _redact(options.url)

    else:
        host, port = _split_addr(options.addrs[0])
        client = redis.Redis(
            host=host,
            port=port,
            db=options.db,
            max_connections=options.max_connections,
            ssl=options.ssl,
            **kwargs,
        )
        target = options.addrs[0]

    logger.info(
        "redis_client_created",
        topology=topology,
        target=target,
        db=options.db,
        max_connections=options.max_connections,
    )
    return client
