"""PublicDashboard Engine — Config, errors, logging, component registry, cache, security."""

from publicdashboard.engine.errors import PublicDashboardError  # noqa: F401
from publicdashboard.engine.registry import (  # noqa: F401
    ComponentRegistry,
    DashboardComponent,
    component_registry,
    dashboard_component,
)

__all__ = [
    "PublicDashboardError",
    "ComponentRegistry",
    "DashboardComponent",
    "component_registry",
    "dashboard_component",
]
