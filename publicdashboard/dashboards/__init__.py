"""PublicDashboard Dashboards — Store, reorder engine, list session cache, admin service."""

from publicdashboard.dashboards.list_cache import ListSessionCache, RedisListSessionCache  # noqa: F401
from publicdashboard.dashboards.reorder import ReorderEngine  # noqa: F401
from publicdashboard.dashboards.store import (  # noqa: F401
    DashboardRecord,
    DashboardStore,
    InMemoryDashboardStore,
    LookupResult,
    LookupStatus,
    SqlDashboardStore,
)

__all__ = [
    "DashboardRecord",
    "DashboardStore",
    "InMemoryDashboardStore",
    "ListSessionCache",
    "LookupResult",
    "LookupStatus",
    "RedisListSessionCache",
    "ReorderEngine",
    "SqlDashboardStore",
]
