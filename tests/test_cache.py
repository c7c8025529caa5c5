"""Unit tests for publicdashboard.engine.cache — RedisCache and the session store."""

import time
from unittest.mock import MagicMock, patch

import redis

from publicdashboard.engine.cache import SESSION_STORE_DB, RedisCache, create_session_store


class TestRedisCacheUnavailable:
    """Every call degrades to a miss without a server."""

    def test_initial_state(self):
        cache = RedisCache()
        assert cache.is_available is False
        assert cache.is_circuit_open is False

    def test_get_and_set(self):
        cache = RedisCache()
        assert cache.get("k") is None
        assert cache.set("k", "v") is False
        assert cache.delete("k") is False

    def test_json_helpers(self):
        cache = RedisCache()
        assert cache.get_json("k") is None
        assert cache.set_json("k", [1]) is False

    def test_ping_without_client(self):
        assert RedisCache().ping() is False


class TestRedisCacheOperations:

    def test_set_and_get_prefixed(self, redis_cache, mock_redis):
        assert redis_cache.set("k", "v", ttl=5) is True
        mock_redis.set.assert_called_with("test:k", "v", ex=5)
        assert redis_cache.get("k") == "v"

    def test_default_ttl(self, redis_cache, mock_redis):
        redis_cache.set("k", "v")
        mock_redis.set.assert_called_with("test:k", "v", ex=3600)

    def test_json_round_trip(self, redis_cache):
        redis_cache.set_json("ids", [3, 1, 2])
        assert redis_cache.get_json("ids") == [3, 1, 2]

    def test_undecodable_json(self, redis_cache, mock_redis):
        mock_redis.data["test:bad"] = "{not json"
        assert redis_cache.get_json("bad") is None

    def test_unserializable_value(self, redis_cache, mock_redis):
        assert redis_cache.set_json("k", object()) is False
        mock_redis.set.assert_not_called()

    def test_delete(self, redis_cache, mock_redis):
        redis_cache.set("k", "v")
        assert redis_cache.delete("k") is True
        assert "test:k" not in mock_redis.data

    def test_close_resets(self, redis_cache, mock_redis):
        redis_cache.close()
        mock_redis.close.assert_called_once()
        assert redis_cache.is_available is False


class TestCircuitBreaker:

    def test_opens_after_threshold(self, redis_cache, mock_redis):
        mock_redis.get.side_effect = redis.ConnectionError("down")
        for _ in range(5):
            assert redis_cache.get("k") is None
        assert redis_cache.is_circuit_open
        assert redis_cache.is_available is False

        mock_redis.get.reset_mock()
        redis_cache.get("k")
        mock_redis.get.assert_not_called()

    def test_below_threshold_stays_closed(self, redis_cache, mock_redis):
        mock_redis.get.side_effect = redis.ConnectionError("down")
        for _ in range(4):
            redis_cache.get("k")
        assert not redis_cache.is_circuit_open

    def test_reconnects_after_window(self, redis_cache, mock_redis):
        redis_cache._circuit_open = True
        redis_cache._first_failure_time = 0.0
        with patch.object(redis_cache, "connect", return_value=True) as mock_connect:
            redis_cache.get("k")
        mock_connect.assert_called_once()
        assert not redis_cache.is_circuit_open


class TestConnect:

    def test_connect_success(self):
        client = MagicMock()
        with patch("publicdashboard.engine.cache.redis.Redis.from_url", return_value=client) as from_url:
            cache = RedisCache(redis_url="redis://cache:6379/0")
            assert cache.connect() is True
        assert from_url.call_args.kwargs["db"] == SESSION_STORE_DB
        assert cache.is_available

    def test_connect_failure(self):
        client = MagicMock()
        client.ping.side_effect = redis.ConnectionError("refused")
        with patch("publicdashboard.engine.cache.redis.Redis.from_url", return_value=client):
            cache = RedisCache()
            assert cache.connect() is False
        assert cache.is_available is False

    def test_failed_connect_retried_after_window(self):
        client = MagicMock()
        client.ping.side_effect = [redis.ConnectionError("refused"), True]
        client.get.return_value = "v"
        cache = RedisCache(prefix="p:", failure_window=30.0)
        with patch("publicdashboard.engine.cache.redis.Redis.from_url", return_value=client):
            assert cache.connect() is False
            cache._last_connect_attempt = time.time() - 10
            assert cache.get("k") is None
            client.get.assert_not_called()
            cache._last_connect_attempt = time.time() - 31
            assert cache.get("k") == "v"
        assert cache.is_available
        client.get.assert_called_once_with("p:k")

    def test_never_connected_cache_does_not_retry(self):
        cache = RedisCache()
        with patch.object(cache, "connect") as mock_connect:
            assert cache.get("k") is None
        mock_connect.assert_not_called()

    def test_create_session_store(self):
        with patch.object(RedisCache, "connect", return_value=False) as mock_connect:
            cache = create_session_store("redis://cache:6379/0", ttl=120)
        mock_connect.assert_called_once()
        assert cache._prefix == "publicdashboard:session:"
        assert cache._default_ttl == 120
