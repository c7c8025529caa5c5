"""
PublicDashboard Admin Service — Operations behind the dashboard management screen.

The service is process-wide and stateless; everything that belongs to one
operator's interaction (the record being edited, the list snapshot, issued
security tokens, pending info messages) lives on a ``DashboardAdminSession``
passed into every call.

Usage:
    service = create_admin_service(get_config())
    session = service.open_session(username="admin")
    view = service.manage_view(session)                  # fresh visit
    view = service.manage_view(session, page_index=2)    # same snapshot
    service.move_up(session, view.records[0].id)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from publicdashboard.dashboards.forms import DashboardForm, validate_dashboard_form
from publicdashboard.dashboards.list_cache import ListSessionCache, RedisListSessionCache
from publicdashboard.dashboards.pagination import Page, paginate
from publicdashboard.dashboards.reorder import ReorderEngine
from publicdashboard.dashboards.store import DashboardRecord, DashboardStore, SqlDashboardStore
from publicdashboard.engine.cache import RedisCache, create_session_store
from publicdashboard.engine.config import PlatformConfig
from publicdashboard.engine.errors import (
    DashboardNotFoundError,
    DashboardValidationError,
    SecurityTokenError,
)
from publicdashboard.engine.logging import log, log_dashboard_operation, log_security_event
from publicdashboard.engine.registry import ComponentRegistry, component_registry
from publicdashboard.engine.security import SecurityTokenService

logger = logging.getLogger("publicdashboard.dashboards.service")

# Actions (token scopes)
ACTION_CREATE_DASHBOARD = "createDashboard"
ACTION_MODIFY_DASHBOARD = "modifyDashboard"

# Infos
INFO_DASHBOARD_CREATED = "Dashboard created"
INFO_DASHBOARD_UPDATED = "Dashboard updated"
INFO_DASHBOARD_REMOVED = "Dashboard removed"

ERROR_RESOURCE_NOT_FOUND = "Resource not found"


@dataclass
class DashboardAdminSession:
    """Per-session working state of the dashboard management screen."""

    list_cache: ListSessionCache
    session_id: str = field(default_factory=lambda: f"sess_{uuid.uuid4().hex}")
    username: Optional[str] = None
    current: Optional[DashboardRecord] = None
    tokens: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)

    def pop_messages(self) -> List[str]:
        messages, self.messages = self.messages, []
        return messages


@dataclass
class DashboardListView:
    """Model of the manage view: one page of records plus component labels."""

    page: Page
    records: List[DashboardRecord]
    components: Dict[str, str]


@dataclass
class DashboardFormView:
    """Model of the create / modify form."""

    dashboard: DashboardRecord
    components: List[Tuple[str, str]]
    token: str


class DashboardAdminService:
    """
    Dashboard management operations.

    Args:
        store:          Dashboard store.
        registry:       Component registry supplying the selectable types.
        token_service:  CSRF token issuer/validator.
        items_per_page: Default page size of the manage view.
        session_store:  Redis session store; when set, list snapshots are
                        kept in Redis instead of in the session object.
        session_ttl:    TTL of snapshots kept in Redis.
    """

    def __init__(
        self,
        store: DashboardStore,
        registry: Optional[ComponentRegistry] = None,
        token_service: Optional[SecurityTokenService] = None,
        items_per_page: int = 10,
        items_per_page_options: Optional[List[int]] = None,
        session_store: Optional[RedisCache] = None,
        session_ttl: Optional[int] = None,
    ):
        self._store = store
        self._registry = registry if registry is not None else component_registry
        self._tokens = token_service or SecurityTokenService()
        self._items_per_page = items_per_page
        self._items_per_page_options = list(items_per_page_options or [])
        self._session_store = session_store
        self._session_ttl = session_ttl

    @property
    def store(self) -> DashboardStore:
        return self._store

    @property
    def registry(self) -> ComponentRegistry:
        return self._registry

    # ── Sessions ──

    def open_session(
        self,
        session_id: Optional[str] = None,
        username: Optional[str] = None,
        ordered_ids: Optional[Sequence[int]] = None,
        current: Optional[DashboardRecord] = None,
        tokens: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> DashboardAdminSession:
        """
        Open (or restore) an admin session.

        Controllers that keep session state between requests themselves pass
        it back in through ``ordered_ids``, ``current`` and ``tokens``. With a
        Redis session store the snapshot is read from Redis and
        ``ordered_ids`` is ignored.
        """
        session_id = session_id or f"sess_{uuid.uuid4().hex}"
        if self._session_store is not None:
            cache: ListSessionCache = RedisListSessionCache(
                self._store, self._session_store, session_id, ttl=self._session_ttl
            )
        else:
            cache = ListSessionCache(self._store, ordered_ids)
        return DashboardAdminSession(
            list_cache=cache,
            session_id=session_id,
            username=username,
            current=current,
            tokens=dict(tokens or {}),
        )

    # ── Core surface ──

    def list_ordered_ids(self, session: DashboardAdminSession, refresh: bool = False) -> List[int]:
        return session.list_cache.get_ordered_ids(force_refresh=refresh)

    def resolve_records(
        self, session: DashboardAdminSession, ids: Sequence[int]
    ) -> List[DashboardRecord]:
        return session.list_cache.resolve_records(ids)

    def invalidate_list(self, session: DashboardAdminSession) -> None:
        session.list_cache.invalidate()

    def move_up(self, session: DashboardAdminSession, record_id: int) -> bool:
        return self._move(session, record_id, "move_up")

    def move_down(self, session: DashboardAdminSession, record_id: int) -> bool:
        return self._move(session, record_id, "move_down")

    def _move(self, session: DashboardAdminSession, record_id: int, operation: str) -> bool:
        engine = ReorderEngine(self._store, on_reordered=session.list_cache.invalidate)
        moved = engine.move_up(record_id) if operation == "move_up" else engine.move_down(record_id)
        if moved:
            self._log_operation(session, operation, record_id)
        return moved

    # ── Views ──

    def components(self) -> List[Tuple[str, str]]:
        return self._registry.list_components()

    def manage_view(
        self,
        session: DashboardAdminSession,
        page_index: Optional[Any] = None,
        items_per_page: Optional[Any] = None,
    ) -> DashboardListView:
        """
        Build the paginated list. A visit without ``page_index`` is a fresh
        visit and re-snapshots the ordering; paging keeps the snapshot.
        """
        session.current = None
        ids = self.list_ordered_ids(session, refresh=page_index is None)
        page = paginate(
            ids,
            page_index=page_index,
            items_per_page=items_per_page if items_per_page is not None else self._items_per_page,
            options=self._items_per_page_options,
        )
        return DashboardListView(
            page=page,
            records=self.resolve_records(session, page.ids),
            components=self._registry.as_map(),
        )

    def create_view(self, session: DashboardAdminSession) -> DashboardFormView:
        if session.current is None or session.current.id is not None:
            session.current = DashboardRecord(name="", component_type_id="")
        return DashboardFormView(
            dashboard=session.current,
            components=self.components(),
            token=self._tokens.get_token(session.tokens, ACTION_CREATE_DASHBOARD),
        )

    def modify_view(self, session: DashboardAdminSession, record_id: int) -> DashboardFormView:
        """Load the record for editing unless it is already the working record."""
        if session.current is None or session.current.id != record_id:
            session.current = self.get_dashboard(record_id)
        return DashboardFormView(
            dashboard=session.current,
            components=self.components(),
            token=self._tokens.get_token(session.tokens, ACTION_MODIFY_DASHBOARD),
        )

    def get_dashboard(self, record_id: int) -> DashboardRecord:
        """Single-record lookup for edit/view. Raises DashboardNotFoundError."""
        return self._store.find_by_id(record_id).unwrap(record_id)

    # ── Actions ──

    def create(
        self,
        session: DashboardAdminSession,
        form_data: Mapping[str, Any],
        token: Optional[str],
    ) -> DashboardRecord:
        """
        Create a dashboard from submitted form data.

        The working record keeps the submitted values, so a failed
        validation redisplays them.
        """
        record = session.current
        if record is None or record.id is not None:
            record = DashboardRecord(name="", component_type_id="")
        session.current = self._populate(record, form_data)
        self._check_token(session, ACTION_CREATE_DASHBOARD, token)
        form = self._validate(form_data)

        record = DashboardRecord(name=form.name, component_type_id=form.component_type_id)
        self._store.create(record)
        session.current = None
        session.messages.append(INFO_DASHBOARD_CREATED)
        self.invalidate_list(session)
        self._log_operation(session, "create", record.id, {"component_type_id": record.component_type_id})
        return record

    def modify(
        self,
        session: DashboardAdminSession,
        form_data: Mapping[str, Any],
        token: Optional[str],
    ) -> DashboardRecord:
        """Apply submitted form data to the working record and persist it."""
        if session.current is None or session.current.id is None:
            raise DashboardNotFoundError(ERROR_RESOURCE_NOT_FOUND, session_id=session.session_id)
        record = self._populate(session.current, form_data)
        self._check_token(session, ACTION_MODIFY_DASHBOARD, token)
        form = self._validate(form_data)

        record.name = form.name
        record.component_type_id = form.component_type_id
        # The working record's position may be stale; only the edited fields are written
        record = self._store.update_details(record)
        session.current = None
        session.messages.append(INFO_DASHBOARD_UPDATED)
        self.invalidate_list(session)
        self._log_operation(session, "update", record.id)
        return record

    def confirm_remove(self, session: DashboardAdminSession, record_id: int) -> DashboardRecord:
        """Record to show in the removal confirmation. Raises DashboardNotFoundError."""
        return self.get_dashboard(record_id)

    def remove(self, session: DashboardAdminSession, record_id: int) -> None:
        self._store.delete(record_id)
        if session.current is not None and session.current.id == record_id:
            session.current = None
        session.messages.append(INFO_DASHBOARD_REMOVED)
        self.invalidate_list(session)
        self._log_operation(session, "remove", record_id)

    # ── Helpers ──

    @staticmethod
    def _populate(record: DashboardRecord, form_data: Mapping[str, Any]) -> DashboardRecord:
        if "name" in form_data:
            record.name = str(form_data["name"] or "")
        if "component_type_id" in form_data:
            record.component_type_id = str(form_data["component_type_id"] or "")
        return record

    def _validate(self, form_data: Mapping[str, Any]) -> DashboardForm:
        allowed = [cid for cid, _ in self.components()] if self._registry.count else None
        try:
            return validate_dashboard_form(form_data, allowed_components=allowed)
        except DashboardValidationError:
            logger.info("Dashboard form rejected by validation")
            raise

    def _check_token(self, session: DashboardAdminSession, action: str, token: Optional[str]) -> None:
        try:
            self._tokens.require_valid(session.tokens, action, token, session_id=session.session_id)
        except SecurityTokenError:
            logger.warning(f"Rejected security token for {action} (session {session.session_id})")
            log(log_security_event(
                "invalid_security_token",
                action=action,
                session_id=session.session_id,
                username=session.username,
            ))
            raise

    def _log_operation(
        self,
        session: DashboardAdminSession,
        operation: str,
        record_id: Optional[int],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        log(log_dashboard_operation(
            operation,
            record_id=record_id,
            session_id=session.session_id,
            username=session.username,
            details=details,
        ))


def create_admin_service(
    config: PlatformConfig,
    registry: Optional[ComponentRegistry] = None,
) -> DashboardAdminService:
    """
    Wire the service from configuration: database, component modules,
    optional Redis snapshot store and token TTL.
    """
    from publicdashboard.db.session import init_db

    db = config.database
    session_factory = init_db(
        db.url,
        create_tables=db.create_tables,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
        pool_pre_ping=db.pool_pre_ping,
    )

    registry = registry if registry is not None else component_registry
    if config.components:
        loaded = registry.load_modules(config.components)
        logger.info(f"Loaded {loaded}/{len(config.components)} component modules")

    session_store = None
    if config.redis.enabled:
        session_store = create_session_store(config.redis.url, ttl=config.security.session_timeout)

    return DashboardAdminService(
        SqlDashboardStore(session_factory),
        registry=registry,
        token_service=SecurityTokenService(token_ttl=config.security.token_ttl),
        items_per_page=config.ui.items_per_page,
        items_per_page_options=config.ui.items_per_page_options,
        session_store=session_store,
        session_ttl=config.security.session_timeout,
    )
