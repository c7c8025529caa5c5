"""
PublicDashboard Redis Cache Layer — Session store for admin list snapshots.

Redis DB allocation:
  DB 4: Session store (TTL=session_timeout)

All Redis data is ephemeral and reconstructible from the dashboard store:
a miss or an unavailable server only costs one extra ordering query.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

import redis

logger = logging.getLogger("publicdashboard.engine.cache")

SESSION_STORE_DB = 4


class RedisCache:
    """
    Redis wrapper with JSON helpers and a circuit breaker.

    Every operation degrades to a miss (``None`` / ``False``) when Redis is
    unreachable; after ``failure_threshold`` failures inside
    ``failure_window`` seconds the circuit opens and Redis is left alone
    until the window has passed.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "publicdashboard:",
        default_ttl: int = 3600,
        db: int = SESSION_STORE_DB,
        failure_threshold: int = 5,
        failure_window: float = 30.0,
    ):
        self._redis_url = redis_url
        self._prefix = prefix
        self._default_ttl = default_ttl
        self._db = db
        self._client: Optional[redis.Redis] = None
        self._available = False

        self._failure_count = 0
        self._failure_threshold = failure_threshold
        self._failure_window = failure_window
        self._first_failure_time = 0.0
        self._circuit_open = False
        self._last_connect_attempt = 0.0

    def connect(self) -> bool:
        """Open the Redis connection and ping it."""
        self._last_connect_attempt = time.time()
        try:
            self._client = redis.Redis.from_url(
                self._redis_url,
                db=self._db,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
            )
            self._client.ping()
            self._available = True
            self._circuit_open = False
            self._failure_count = 0
            logger.info(f"Redis connected: DB {self._db} ({self._prefix})")
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed (DB {self._db}): {e}")
            self._available = False
            return False

    def _check_circuit(self) -> bool:
        if self._circuit_open:
            if time.time() - self._first_failure_time > self._failure_window:
                self._circuit_open = False
                self._failure_count = 0
                return self.connect()
            return False
        if not self._available and self._last_connect_attempt:
            # A failed connect is retried once per failure window
            if time.time() - self._last_connect_attempt > self._failure_window:
                return self.connect()
        return self._available

    def _record_failure(self, error: Exception) -> None:
        now = time.time()
        if self._failure_count == 0:
            self._first_failure_time = now
        self._failure_count += 1
        logger.debug(f"Redis operation failed ({self._failure_count}): {error}")

        if self._failure_count >= self._failure_threshold:
            elapsed = now - self._first_failure_time
            if elapsed <= self._failure_window:
                self._circuit_open = True
                logger.error(
                    f"Redis circuit breaker OPEN: {self._failure_count} failures in {elapsed:.1f}s"
                )

    def _make_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        """Get a value. Returns None on miss or failure."""
        if not self._check_circuit():
            return None
        try:
            return self._client.get(self._make_key(key))
        except redis.RedisError as e:
            self._record_failure(e)
            return None

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """Set a value with optional TTL. Returns False on failure."""
        if not self._check_circuit():
            return False
        try:
            self._client.set(self._make_key(key), value, ex=ttl or self._default_ttl)
            return True
        except redis.RedisError as e:
            self._record_failure(e)
            return False

    def delete(self, key: str) -> bool:
        if not self._check_circuit():
            return False
        try:
            self._client.delete(self._make_key(key))
            return True
        except redis.RedisError as e:
            self._record_failure(e)
            return False

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding undecodable cache value: {key}")
            return None

    def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Value for {key} is not JSON serializable: {e}")
            return False
        return self.set(key, payload, ttl=ttl)

    def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def close(self) -> None:
        """Close the connection and reset breaker state."""
        if self._client is not None:
            try:
                self._client.close()
            except redis.RedisError as e:
                logger.debug(f"Redis close failed: {e}")
            self._client = None
        self._available = False
        self._circuit_open = False
        self._failure_count = 0

    @property
    def is_available(self) -> bool:
        return self._available and not self._circuit_open

    @property
    def is_circuit_open(self) -> bool:
        return self._circuit_open


def create_session_store(redis_url: str, ttl: int = 3600) -> RedisCache:
    """Create and connect the session store (Redis DB 4)."""
    cache = RedisCache(
        redis_url=redis_url,
        prefix="publicdashboard:session:",
        default_ttl=ttl,
        db=SESSION_STORE_DB,
    )
    cache.connect()
    return cache
