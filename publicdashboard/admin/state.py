"""
PublicDashboard Admin Console — Reflex state for the dashboard management screen.

Reflex keeps one state instance per client, which is the admin session.
Each event handler restores a ``DashboardAdminSession`` from the backend
vars, calls the admin service, and stores the session back; the service
itself holds no per-user state.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import reflex as rx

from publicdashboard.dashboards.service import (
    ERROR_RESOURCE_NOT_FOUND,
    DashboardAdminService,
    DashboardAdminSession,
    DashboardFormView,
)
from publicdashboard.dashboards.store import DashboardRecord
from publicdashboard.engine.errors import (
    DashboardNotFoundError,
    DashboardStoreError,
    DashboardValidationError,
    SecurityTokenError,
)
from publicdashboard.engine.security import MARK_TOKEN

logger = logging.getLogger("publicdashboard.admin.state")

ROUTE_MANAGE = "/admin/dashboards"
ROUTE_CREATE = "/admin/dashboards/create"
ROUTE_MODIFY = "/admin/dashboards/modify"


class DashboardsState(rx.State):
    """Manage, create, modify, remove and reorder dashboards."""

    # List view
    dashboards: list[dict] = []
    components: dict[str, str] = {}
    page_index: int = 1
    page_count: int = 1
    items_per_page: int = 10
    items_per_page_options: list[str] = []
    total: int = 0

    # Form view
    component_choices: list[str] = []
    form_name: str = ""
    form_component: str = ""
    form_token: str = ""
    editing_id: int = 0
    form_errors: list[str] = []

    # Removal confirmation
    confirm_remove_id: int = 0
    confirm_remove_name: str = ""

    # Feedback
    messages: list[str] = []
    error: str = ""

    # Session working values, never sent to the browser
    _list_ids: list[int] = []
    _current: dict = {}
    _tokens: dict = {}

    # ── Session plumbing ──

    def _open(self) -> Optional[DashboardAdminSession]:
        service = get_service()
        if service is None:
            self.error = "Platform not initialized. Run: publicdashboard init"
            return None
        current = DashboardRecord(**self._current) if self._current else None
        return service.open_session(
            session_id=self.router.session.client_token,
            ordered_ids=self._list_ids,
            current=current,
            tokens=self._tokens,
        )

    def _store_session(self, session: DashboardAdminSession) -> None:
        self._list_ids = session.list_cache.ordered_ids
        self._current = session.current.to_dict() if session.current else {}
        self._tokens = dict(session.tokens)
        self.messages = self.messages + session.pop_messages()

    # ── Manage view ──

    def load_dashboards(self) -> None:
        """Fresh visit: re-snapshot the ordering and show the first page."""
        self._load_page(None)

    def go_to_page(self, page_index: int) -> None:
        self._load_page(page_index)

    def next_page(self) -> None:
        if self.page_index < self.page_count:
            self._load_page(self.page_index + 1)

    def prev_page(self) -> None:
        if self.page_index > 1:
            self._load_page(self.page_index - 1)

    def set_page_size(self, value: str) -> None:
        self.items_per_page = int(value)
        self._load_page(1)

    def _load_page(self, page_index: Optional[int]) -> None:
        session = self._open()
        if session is None:
            return
        try:
            view = get_service().manage_view(
                session, page_index=page_index, items_per_page=self.items_per_page
            )
        except DashboardStoreError as e:
            logger.error(f"Failed to load dashboards: {e}")
            self.error = e.message
            return
        self.dashboards = [
            {**r.to_dict(), "component": view.components.get(r.component_type_id, r.component_type_id)}
            for r in view.records
        ]
        self.components = view.components
        self.page_index = view.page.page_index
        self.page_count = view.page.page_count
        self.items_per_page = view.page.items_per_page
        self.items_per_page_options = [str(o) for o in view.page.options]
        self.total = view.page.total
        self._store_session(session)

    def dismiss_messages(self) -> None:
        self.messages = []
        self.error = ""

    # ── Reorder ──

    def move_up(self, record_id: int) -> None:
        self._reorder(record_id, up=True)

    def move_down(self, record_id: int) -> None:
        self._reorder(record_id, up=False)

    def _reorder(self, record_id: int, up: bool) -> None:
        session = self._open()
        if session is None:
            return
        service = get_service()
        try:
            if up:
                service.move_up(session, record_id)
            else:
                service.move_down(session, record_id)
        except (DashboardNotFoundError, DashboardStoreError) as e:
            logger.error(f"Failed to move dashboard {record_id}: {e}")
            self.error = e.message
        self._store_session(session)
        self._load_page(self.page_index)

    # ── Create / modify ──

    def _show_form(self, view: DashboardFormView) -> None:
        self.form_name = view.dashboard.name
        self.form_component = view.dashboard.component_type_id
        self.form_token = view.token
        self.component_choices = [cid for cid, _ in view.components]
        self.components = dict(view.components)

    def open_create(self) -> rx.event.EventSpec:
        self.form_errors = []
        self._current = {}
        return rx.redirect(ROUTE_CREATE)

    def load_create_form(self) -> None:
        session = self._open()
        if session is None:
            return
        self.editing_id = 0
        self._show_form(get_service().create_view(session))
        self._store_session(session)

    def open_modify(self, record_id: int) -> rx.event.EventSpec:
        self.editing_id = record_id
        self.form_errors = []
        return rx.redirect(ROUTE_MODIFY)

    def load_modify_form(self) -> Optional[rx.event.EventSpec]:
        session = self._open()
        if session is None:
            return None
        try:
            view = get_service().modify_view(session, self.editing_id)
        except DashboardNotFoundError:
            self.error = ERROR_RESOURCE_NOT_FOUND
            self._store_session(session)
            return rx.redirect(ROUTE_MANAGE)
        self._show_form(view)
        self._store_session(session)
        return None

    def submit_create(self, form_data: dict) -> Optional[rx.event.EventSpec]:
        return self._submit(form_data, create=True)

    def submit_modify(self, form_data: dict) -> Optional[rx.event.EventSpec]:
        return self._submit(form_data, create=False)

    def _submit(self, form_data: Dict[str, Any], create: bool) -> Optional[rx.event.EventSpec]:
        session = self._open()
        if session is None:
            return None
        service = get_service()
        token = form_data.get(MARK_TOKEN) or self.form_token
        try:
            if create:
                service.create(session, form_data, token)
            else:
                service.modify(session, form_data, token)
        except DashboardValidationError as e:
            self.form_errors = [f"{err['field']}: {err['message']}" for err in e.validation_errors]
            self._store_session(session)
            # Fresh token for the redisplayed form
            return self.load_create_form() if create else self.load_modify_form()
        except SecurityTokenError as e:
            self.error = e.message
            self._store_session(session)
            return rx.redirect(ROUTE_MANAGE)
        except DashboardNotFoundError:
            self.error = ERROR_RESOURCE_NOT_FOUND
            self._store_session(session)
            return rx.redirect(ROUTE_MANAGE)
        except DashboardStoreError as e:
            self.error = e.message
            self._store_session(session)
            return None
        self.form_errors = []
        self._store_session(session)
        return rx.redirect(ROUTE_MANAGE)

    # ── Remove ──

    def ask_remove(self, record_id: int) -> None:
        session = self._open()
        if session is None:
            return
        try:
            record = get_service().confirm_remove(session, record_id)
        except DashboardNotFoundError:
            self.error = ERROR_RESOURCE_NOT_FOUND
            return
        self.confirm_remove_id = record.id
        self.confirm_remove_name = record.name or record.component_type_id

    def cancel_remove(self) -> None:
        self.confirm_remove_id = 0
        self.confirm_remove_name = ""

    def do_remove(self) -> None:
        session = self._open()
        if session is None or not self.confirm_remove_id:
            return
        try:
            get_service().remove(session, self.confirm_remove_id)
        except DashboardStoreError as e:
            self.error = e.message
        self.cancel_remove()
        self._store_session(session)
        self._load_page(self.page_index)

    @rx.var
    def confirm_open(self) -> bool:
        return self.confirm_remove_id != 0


# ---------------------------------------------------------------------------
# Service singleton accessor
# ---------------------------------------------------------------------------

_service_instance: Optional[DashboardAdminService] = None


def set_service(service: Optional[DashboardAdminService]) -> None:
    """Set the process-wide admin service used by the console state."""
    global _service_instance
    _service_instance = service


def get_service() -> Optional[DashboardAdminService]:
    return _service_instance
