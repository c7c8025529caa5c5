"""
PublicDashboard — Main Reflex application entry point.

Boot sequence:
    1. _init_platform() — config, logging, database, component modules,
                          admin service registered with the console state
    2. Create rx.App() and register the dashboard management routes
"""

import logging

import reflex as rx
from sqlalchemy.exc import SQLAlchemyError

from publicdashboard.admin.pages.dashboards import (
    create_dashboard_page,
    manage_dashboards_page,
    modify_dashboard_page,
)
from publicdashboard.admin.state import (
    ROUTE_CREATE,
    ROUTE_MANAGE,
    ROUTE_MODIFY,
    DashboardsState,
    set_service,
)
from publicdashboard.engine.errors import PublicDashboardError

logger = logging.getLogger("publicdashboard.startup")

# Guard: only initialize once, even if the module is re-imported
_platform_initialized = False


def _init_platform() -> None:
    """Load config, start logging, build the admin service."""
    global _platform_initialized
    if _platform_initialized:
        return
    _platform_initialized = True

    from publicdashboard.dashboards.service import create_admin_service
    from publicdashboard.engine.config import load_config
    from publicdashboard.engine.logging import configure_logging, init_logging, log, log_system_event

    try:
        config = load_config()
        configure_logging(config.logging.level)
        init_logging(
            log_dir=config.logging.directory,
            flush_interval_ms=config.logging.async_queue.flush_interval_ms,
            flush_batch_size=config.logging.async_queue.flush_batch_size,
            max_queue_size=config.logging.async_queue.max_queue_size,
        )
        service = create_admin_service(config)
        set_service(service)
        log(log_system_event("startup", {"components": service.registry.count}))
        logger.info("PublicDashboard admin console initialized")
    except (PublicDashboardError, SQLAlchemyError, OSError) as e:
        logger.error(f"Failed to initialize PublicDashboard: {e}", exc_info=True)


_init_platform()

app = rx.App()

app.add_page(
    manage_dashboards_page,
    route=ROUTE_MANAGE,
    title="PublicDashboard — Manage dashboards",
    on_load=DashboardsState.load_dashboards,
)
app.add_page(
    create_dashboard_page,
    route=ROUTE_CREATE,
    title="PublicDashboard — Create dashboard",
    on_load=DashboardsState.load_create_form,
)
app.add_page(
    modify_dashboard_page,
    route=ROUTE_MODIFY,
    title="PublicDashboard — Modify dashboard",
    on_load=DashboardsState.load_modify_form,
)

# Redirect /admin → /admin/dashboards
app.add_page(lambda: rx.fragment(), route="/admin", on_load=rx.redirect(ROUTE_MANAGE))
