"""
PublicDashboard Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

from typing import List
from unittest.mock import MagicMock

import pytest

from publicdashboard.dashboards.store import DashboardRecord, InMemoryDashboardStore
from publicdashboard.engine.registry import ComponentRegistry, DashboardComponent


# ---------------------------------------------------------------------------
# Environment setup — avoid touching real Redis / Postgres in unit tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset global singletons between tests."""
    import publicdashboard.engine.config as cfg_mod
    import publicdashboard.engine.logging as log_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None
    log_mod.shutdown_logging()


class StubComponent(DashboardComponent):
    """Minimal component with a fixed id and description."""

    def __init__(self, component_id: str, description: str = ""):
        self._component_id = component_id
        self._description = description or f"{component_id} component"

    @property
    def component_id(self) -> str:
        return self._component_id

    @property
    def description(self) -> str:
        return self._description


@pytest.fixture
def registry():
    """Fresh registry with two components."""
    reg = ComponentRegistry()
    reg.register(StubComponent("weather", "Weather forecast"))
    reg.register(StubComponent("news", "Latest news"))
    return reg


def seed_records() -> List[DashboardRecord]:
    """A(10), B(20), C(30) — ids 1, 2, 3."""
    return [
        DashboardRecord(id=1, name="A", component_type_id="weather", position=10),
        DashboardRecord(id=2, name="B", component_type_id="news", position=20),
        DashboardRecord(id=3, name="C", component_type_id="weather", position=30),
    ]


@pytest.fixture
def memory_store():
    """In-memory store seeded with A(10), B(20), C(30)."""
    return InMemoryDashboardStore(seed_records())


@pytest.fixture
def sql_session_factory(tmp_path):
    """SQLite file database with the dashboard table created."""
    from publicdashboard.db.session import close_db, init_db

    factory = init_db(f"sqlite:///{tmp_path}/test.db", create_tables=True)
    yield factory
    close_db()


@pytest.fixture
def sql_store(sql_session_factory):
    """SQL store seeded with A(10), B(20), C(30) through the ORM."""
    from publicdashboard.dashboards.store import SqlDashboardStore
    from publicdashboard.db.models import PublicDashboard
    from publicdashboard.db.session import session_scope

    with session_scope(sql_session_factory) as session:
        for record in seed_records():
            session.add(PublicDashboard(
                id=record.id,
                name=record.name,
                component_type_id=record.component_type_id,
                position=record.position,
            ))
    return SqlDashboardStore(sql_session_factory)


@pytest.fixture
def mock_redis():
    """MagicMock standing in for a redis.Redis client, backed by a dict."""
    data = {}
    client = MagicMock()
    client.get.side_effect = lambda key: data.get(key)
    client.set.side_effect = lambda key, value, ex=None: data.__setitem__(key, value)
    client.delete.side_effect = lambda key: data.pop(key, None)
    client.ping.return_value = True
    client.data = data
    return client


@pytest.fixture
def redis_cache(mock_redis):
    """RedisCache wired to the mock client."""
    from publicdashboard.engine.cache import RedisCache

    cache = RedisCache(prefix="test:")
    cache._client = mock_redis
    cache._available = True
    return cache


@pytest.fixture
def component_factory():
    """Build stub components: ``component_factory("weather", "Weather forecast")``."""
    return StubComponent
