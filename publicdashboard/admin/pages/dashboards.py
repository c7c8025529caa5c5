"""
PublicDashboard Admin Console — Dashboard management pages

Routes:
  /admin/dashboards         — paginated list with move up/down and remove
  /admin/dashboards/create  — create form
  /admin/dashboards/modify  — modify form for DashboardsState.editing_id
"""

import reflex as rx

from publicdashboard.admin.components.layout import admin_layout
from publicdashboard.admin.state import ROUTE_MANAGE, DashboardsState
from publicdashboard.engine.security import MARK_TOKEN


def _row(dashboard: rx.Var) -> rx.Component:
    return rx.table.row(
        rx.table.cell(dashboard["position"]),
        rx.table.cell(dashboard["name"]),
        rx.table.cell(dashboard["component"]),
        rx.table.cell(
            rx.hstack(
                rx.icon_button(
                    rx.icon("arrow-up", size=14),
                    size="1",
                    variant="soft",
                    on_click=DashboardsState.move_up(dashboard["id"]),
                ),
                rx.icon_button(
                    rx.icon("arrow-down", size=14),
                    size="1",
                    variant="soft",
                    on_click=DashboardsState.move_down(dashboard["id"]),
                ),
                rx.icon_button(
                    rx.icon("pencil", size=14),
                    size="1",
                    variant="soft",
                    on_click=DashboardsState.open_modify(dashboard["id"]),
                ),
                rx.icon_button(
                    rx.icon("trash-2", size=14),
                    size="1",
                    variant="soft",
                    color_scheme="red",
                    on_click=DashboardsState.ask_remove(dashboard["id"]),
                ),
                spacing="1",
            )
        ),
    )


def _pager() -> rx.Component:
    return rx.hstack(
        rx.button("Previous", size="1", variant="outline",
                  on_click=DashboardsState.prev_page,
                  disabled=DashboardsState.page_index <= 1),
        rx.text(
            f"Page {DashboardsState.page_index} / {DashboardsState.page_count} "
            f"({DashboardsState.total} dashboards)",
            size="2",
        ),
        rx.button("Next", size="1", variant="outline",
                  on_click=DashboardsState.next_page,
                  disabled=DashboardsState.page_index >= DashboardsState.page_count),
        rx.select(
            DashboardsState.items_per_page_options,
            value=DashboardsState.items_per_page.to_string(),
            on_change=DashboardsState.set_page_size,
            size="1",
        ),
        spacing="3",
        align="center",
    )


def _confirm_remove_dialog() -> rx.Component:
    return rx.alert_dialog.root(
        rx.alert_dialog.content(
            rx.alert_dialog.title("Remove dashboard"),
            rx.alert_dialog.description(
                f"Are you sure you want to remove the dashboard \"{DashboardsState.confirm_remove_name}\"?"
            ),
            rx.hstack(
                rx.alert_dialog.cancel(
                    rx.button("Cancel", variant="soft", on_click=DashboardsState.cancel_remove),
                ),
                rx.alert_dialog.action(
                    rx.button("Remove", color_scheme="red", on_click=DashboardsState.do_remove),
                ),
                spacing="3",
                justify="end",
            ),
        ),
        open=DashboardsState.confirm_open,
    )


def manage_dashboards_page() -> rx.Component:
    """Paginated list of dashboards ordered by position."""
    return admin_layout(
        rx.vstack(
            rx.hstack(
                rx.button("Add a dashboard", on_click=DashboardsState.open_create),
                justify="end",
                width="100%",
            ),
            rx.table.root(
                rx.table.header(
                    rx.table.row(
                        rx.table.column_header_cell("Position"),
                        rx.table.column_header_cell("Name"),
                        rx.table.column_header_cell("Component"),
                        rx.table.column_header_cell("Actions"),
                    ),
                ),
                rx.table.body(rx.foreach(DashboardsState.dashboards, _row)),
                width="100%",
            ),
            _pager(),
            _confirm_remove_dialog(),
            spacing="4",
            width="100%",
        ),
        title="Manage dashboards",
    )


def _dashboard_form(on_submit, submit_label: str) -> rx.Component:
    return rx.form(
        rx.vstack(
            rx.foreach(
                DashboardsState.form_errors,
                lambda err: rx.text(err, color="red", size="2"),
            ),
            rx.text("Name", size="2", weight="bold"),
            rx.input(name="name", default_value=DashboardsState.form_name, width="100%"),
            rx.text("Dashboard component", size="2", weight="bold"),
            rx.select(
                DashboardsState.component_choices,
                name="component_type_id",
                default_value=DashboardsState.form_component,
                placeholder="Select a component…",
            ),
            rx.input(type="hidden", name=MARK_TOKEN, value=DashboardsState.form_token),
            rx.hstack(
                rx.button(submit_label, type="submit"),
                rx.link(rx.button("Cancel", variant="soft", type="button"), href=ROUTE_MANAGE),
                spacing="3",
            ),
            spacing="3",
            width="400px",
        ),
        on_submit=on_submit,
        reset_on_submit=False,
    )


def create_dashboard_page() -> rx.Component:
    return admin_layout(
        _dashboard_form(DashboardsState.submit_create, "Create"),
        title="Create dashboard",
    )


def modify_dashboard_page() -> rx.Component:
    return admin_layout(
        _dashboard_form(DashboardsState.submit_modify, "Modify"),
        title="Modify dashboard",
    )
