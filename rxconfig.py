"""
PublicDashboard — Reflex configuration.

Routes:
  /admin/dashboards         → Manage dashboards (paginated list)
  /admin/dashboards/create  → Create dashboard
  /admin/dashboards/modify  → Modify dashboard
"""

import reflex as rx

config = rx.Config(
    app_name="publicdashboard",
    frontend_port=3000,
    backend_port=8000,
    telemetry_enabled=False,
    disable_plugins=["reflex.plugins.sitemap.SitemapPlugin"],
)
