"""
PublicDashboard Admin Console — Layout component (sidebar + header + messages).
"""

import reflex as rx

from publicdashboard.admin.state import ROUTE_CREATE, ROUTE_MANAGE, DashboardsState


def admin_layout(content: rx.Component, title: str) -> rx.Component:
    """Wrap content in the admin layout with sidebar, header and feedback area."""
    return rx.hstack(
        _sidebar(),
        rx.box(
            rx.heading(title, size="6", padding="4"),
            rx.divider(),
            _feedback(),
            rx.box(content, padding="4"),
            flex="1",
            overflow_y="auto",
            height="100vh",
        ),
        spacing="0",
        width="100%",
        height="100vh",
    )


def _sidebar() -> rx.Component:
    return rx.box(
        rx.vstack(
            rx.heading("PublicDashboard", size="4", padding="4"),
            rx.divider(),
            _nav_item("Dashboards", ROUTE_MANAGE, "layout-dashboard"),
            _nav_item("New dashboard", ROUTE_CREATE, "plus"),
            spacing="1",
            padding="3",
            width="100%",
        ),
        width="220px",
        min_width="220px",
        height="100vh",
        border_right="1px solid var(--gray-5)",
        background="var(--gray-2)",
    )


def _nav_item(label: str, href: str, icon: str) -> rx.Component:
    return rx.link(
        rx.hstack(
            rx.icon(icon, size=16),
            rx.text(label, size="2"),
            spacing="2",
            padding_x="3",
            padding_y="2",
            border_radius="6px",
            width="100%",
            _hover={"background": "var(--gray-4)"},
        ),
        href=href,
        width="100%",
        underline="none",
    )


def _feedback() -> rx.Component:
    """Info messages and the last error, shown until dismissed."""
    return rx.vstack(
        rx.foreach(
            DashboardsState.messages,
            lambda msg: rx.callout(msg, icon="info", color_scheme="green", size="1", width="100%"),
        ),
        rx.cond(
            DashboardsState.error != "",
            rx.callout(DashboardsState.error, icon="triangle_alert", color_scheme="red", size="1", width="100%"),
        ),
        rx.cond(
            (DashboardsState.messages.length() > 0) | (DashboardsState.error != ""),
            rx.button("Dismiss", variant="ghost", size="1", on_click=DashboardsState.dismiss_messages),
        ),
        padding_x="4",
        padding_top="2",
        width="100%",
    )
