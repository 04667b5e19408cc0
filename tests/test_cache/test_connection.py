"""Unit tests for client options and client construction."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from redisstore.connection import (
    ClientOptions,
    _redact,
    _split_addr,
    new_universal_client,
)


class TestClientOptions:
    """Test suite for ClientOptions."""

    def test_defaults(self):
        options = ClientOptions()

        assert options.addrs == ["localhost:6379"]
        assert options.db == 0
        assert options.max_connections == 20
        assert options.topology == "single"

    def test_multiple_addrs_select_cluster(self):
        options = ClientOptions(addrs=["node1:7000", "node2:7001"])

        assert options.topology == "cluster"

    def test_master_name_selects_sentinel(self):
        options = ClientOptions(addrs=["s1:26379", "s2:26379"], master_name="mymaster")

        assert options.topology == "sentinel"

    def test_url_selects_single_node(self):
        options = ClientOptions(addrs=["a:1", "b:2"], url="redis://cache:6379/0")

        assert options.topology == "single"

    def test_empty_addrs_rejected(self):
        with pytest.raises(ValidationError):
            ClientOptions(addrs=["", " "])

    def test_negative_db_rejected(self):
        with pytest.raises(ValidationError):
            ClientOptions(db=-1)

    @patch.dict(
        os.environ,
        {
            "REDIS_ADDRS": "a:7000, b:7001",
            "REDIS_DB": "3",
            "REDIS_PASSWORD": "secret",
            "REDIS_READ_ONLY": "true",
            "REDIS_SOCKET_TIMEOUT": "2.5",
        },
        clear=True,
    )
    def test_from_env(self):
        """Test environment values are coerced to the declared types."""
        options = ClientOptions.from_env()

        assert options.addrs == ["a:7000", "b:7001"]
        assert options.db == 3
        assert options.password == "secret"
        assert options.read_only is True
        assert options.socket_timeout == 2.5

    @patch.dict(os.environ, {}, clear=True)
    def test_from_env_defaults(self):
        assert ClientOptions.from_env() == ClientOptions()

    @patch.dict(os.environ, {"REDIS_URL": "redis://cache:6380/1"}, clear=True)
    def test_from_env_url(self):
        options = ClientOptions.from_env()

        assert options.url == "redis://cache:6380/1"
        assert options.topology == "single"


class TestHelpers:
    """Test suite for address helpers."""

    def test_split_addr(self):
        assert _split_addr("cache:7000") == ("cache", 7000)

    def test_split_addr_default_port(self):
        assert _split_addr("cache") == ("cache", 6379)

    def test_split_addr_ipv6(self):
        assert _split_addr("[::1]:6380") == ("::1", 6380)

    def test_redact_credentials(self):
        assert _redact("redis://user:pw@cache:6379/0") == "redis://cache:6379/0"

    def test_redact_without_credentials(self):
        assert _redact("redis://cache:6379/0") == "redis://cache:6379/0"


class TestNewUniversalClient:
    """Test suite for new_universal_client()."""

    @patch("redisstore.connection.redis.Redis")
    def test_single_node(self, mock_redis):
        options = ClientOptions(addrs=["cache:6380"], db=2, password="pw")

        client = new_universal_client(options)

        assert client is mock_redis.return_value
        kwargs = mock_redis.call_args[1]
        assert kwargs["host"] == "cache"
        assert kwargs["port"] == 6380
        assert kwargs["db"] == 2
        assert kwargs["password"] == "pw"
        assert kwargs["max_connections"] == 20

    @patch("redisstore.connection.redis.Redis")
    def test_single_node_from_url(self, mock_redis):
        options = ClientOptions(url="redis://user:pw@cache:6379/0")

        client = new_universal_client(options)

        assert client is mock_redis.from_url.return_value
        assert mock_redis.from_url.call_args[0][0] == "redis://user:pw@cache:6379/0"
        mock_redis.assert_not_called()

    @patch("redisstore.connection.RedisCluster")
    def test_cluster(self, mock_cluster):
        options = ClientOptions(addrs=["node1:7000", "node2:7001"], read_only=True)

        client = new_universal_client(options)

        assert client is mock_cluster.return_value
        kwargs = mock_cluster.call_args[1]
        nodes = [(node.host, node.port) for node in kwargs["startup_nodes"]]
        assert nodes == [("node1", 7000), ("node2", 7001)]
        assert kwargs["read_from_replicas"] is True

    @patch("redisstore.connection.Sentinel")
    def test_sentinel(self, mock_sentinel):
        options = ClientOptions(
            addrs=["s1:26379", "s2:26380"],
            master_name="mymaster",
            sentinel_password="sentinel-pw",
            db=1,
        )

        client = new_universal_client(options)

        sentinel = mock_sentinel.return_value
        assert client is sentinel.master_for.return_value
        assert mock_sentinel.call_args[0][0] == [("s1", 26379), ("s2", 26380)]
        assert mock_sentinel.call_args[1]["sentinel_kwargs"]["password"] == "sentinel-pw"
        assert sentinel.master_for.call_args[0][0] == "mymaster"
        assert sentinel.master_for.call_args[1]["db"] == 1
