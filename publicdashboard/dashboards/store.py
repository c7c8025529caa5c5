"""
PublicDashboard Store — Persistence of dashboard records.

Two implementations of the ``DashboardStore`` contract:
- SqlDashboardStore:      SQLAlchemy-backed, one transaction per call
- InMemoryDashboardStore: dict-backed, for embedding and tests

Records cross the store boundary as detached ``DashboardRecord`` values;
callers mutate them freely and persist with ``update()``.
"""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Dict, Generator, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from publicdashboard.db.models import PublicDashboard
from publicdashboard.db.session import session_scope
from publicdashboard.engine.errors import DashboardNotFoundError, DashboardStoreError

logger = logging.getLogger("publicdashboard.dashboards.store")


@dataclass
class DashboardRecord:
    """A dashboard entry. ``id`` is assigned by the store on create."""

    name: str
    component_type_id: str
    position: Optional[int] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "component_type_id": self.component_type_id,
            "position": self.position,
        }


class LookupStatus(enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a single-record lookup: found, not found, or store error."""

    status: LookupStatus
    record: Optional[DashboardRecord] = None
    error: Optional[DashboardStoreError] = None

    @classmethod
    def found(cls, record: DashboardRecord) -> "LookupResult":
        return cls(LookupStatus.FOUND, record=record)

    @classmethod
    def not_found(cls) -> "LookupResult":
        return cls(LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: DashboardStoreError) -> "LookupResult":
        return cls(LookupStatus.ERROR, error=error)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND

    def unwrap(self, record_id: Optional[int] = None) -> DashboardRecord:
        """Return the record, or raise the matching error."""
        if self.status is LookupStatus.FOUND:
            return self.record
        if self.status is LookupStatus.ERROR:
            raise self.error
        raise DashboardNotFoundError("Resource not found", record_id=record_id)


class DashboardStore(ABC):
    """Storage contract consumed by the reorder engine and the list cache."""

    @abstractmethod
    def create(self, record: DashboardRecord) -> int:
        """Persist a new record after the current last position. Returns its id."""

    @abstractmethod
    def update(self, *records: DashboardRecord) -> None:
        """Persist all given records together: every update applies or none does."""

    @abstractmethod
    def update_details(self, record: DashboardRecord) -> DashboardRecord:
        """
        Persist name and component of an existing record, leaving its stored
        position untouched. Returns the record as now stored.
        """

    @abstractmethod
    def delete(self, record_id: int) -> None:
        """Remove a record. Unknown ids are ignored; positions are not renumbered."""

    @abstractmethod
    def find_by_id(self, record_id: int) -> LookupResult:
        ...

    @abstractmethod
    def find_by_ids(self, record_ids: Iterable[int]) -> List[DashboardRecord]:
        """Records for the given ids, in no particular order; unknown ids are skipped."""

    @abstractmethod
    def list_all_ordered_by_position(self) -> List[DashboardRecord]:
        ...

    def list_ids_ordered_by_position(self) -> List[int]:
        return [record.id for record in self.list_all_ordered_by_position()]


# ---------------------------------------------------------------------------
# SQLAlchemy store
# ---------------------------------------------------------------------------

def _to_record(row: PublicDashboard) -> DashboardRecord:
    return DashboardRecord(
        id=row.id,
        name=row.name,
        component_type_id=row.component_type_id,
        position=row.position,
    )


class SqlDashboardStore(DashboardStore):
    """
    Dashboard store on the ``publicdashboard_dashboard`` table.

    Every public method runs in its own session; SQLAlchemy failures roll the
    transaction back and surface as DashboardStoreError.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _transaction(
        self, operation: str, record_id: Optional[int] = None
    ) -> Generator[Session, None, None]:
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Dashboard store {operation} failed: {e}")
            raise DashboardStoreError(
                f"Dashboard store {operation} failed: {e}",
                operation=operation,
                record_id=record_id,
            ) from e

    def create(self, record: DashboardRecord) -> int:
        with self._transaction("create") as session:
            last = session.execute(select(func.max(PublicDashboard.position))).scalar()
            row = PublicDashboard(
                name=record.name,
                component_type_id=record.component_type_id,
                position=(last or 0) + 1,
            )
            session.add(row)
            session.flush()
            record.id = row.id
            record.position = row.position
        logger.debug(f"Created dashboard {record.id} at position {record.position}")
        return record.id

    def update(self, *records: DashboardRecord) -> None:
        if not records:
            return
        with self._transaction("update", record_id=records[0].id) as session:
            for record in records:
                row = session.get(PublicDashboard, record.id)
                if row is None:
                    raise DashboardNotFoundError(
                        f"Dashboard {record.id} no longer exists",
                        record_id=record.id,
                    )
                row.name = record.name
                row.component_type_id = record.component_type_id
                row.position = record.position

    def update_details(self, record: DashboardRecord) -> DashboardRecord:
        with self._transaction("update_details", record_id=record.id) as session:
            row = session.get(PublicDashboard, record.id)
            if row is None:
                raise DashboardNotFoundError(
                    f"Dashboard {record.id} no longer exists",
                    record_id=record.id,
                )
            row.name = record.name
            row.component_type_id = record.component_type_id
            session.flush()
            return _to_record(row)

    def delete(self, record_id: int) -> None:
        with self._transaction("delete", record_id=record_id) as session:
            row = session.get(PublicDashboard, record_id)
            if row is not None:
                session.delete(row)

    def find_by_id(self, record_id: int) -> LookupResult:
        try:
            with self._transaction("find_by_id", record_id=record_id) as session:
                row = session.get(PublicDashboard, record_id)
                if row is None:
                    return LookupResult.not_found()
                return LookupResult.found(_to_record(row))
        except DashboardStoreError as e:
            return LookupResult.failed(e)

    def find_by_ids(self, record_ids: Iterable[int]) -> List[DashboardRecord]:
        ids = list(record_ids)
        if not ids:
            return []
        with self._transaction("find_by_ids") as session:
            rows = session.execute(
                select(PublicDashboard).where(PublicDashboard.id.in_(ids))
            ).scalars()
            return [_to_record(row) for row in rows]

    def list_all_ordered_by_position(self) -> List[DashboardRecord]:
        with self._transaction("list") as session:
            rows = session.execute(
                select(PublicDashboard).order_by(PublicDashboard.position, PublicDashboard.id)
            ).scalars()
            return [_to_record(row) for row in rows]

    def list_ids_ordered_by_position(self) -> List[int]:
        with self._transaction("list_ids") as session:
            return list(
                session.execute(
                    select(PublicDashboard.id).order_by(PublicDashboard.position, PublicDashboard.id)
                ).scalars()
            )


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------

class InMemoryDashboardStore(DashboardStore):
    """Dict-backed store. Hands out copies so callers never alter stored state."""

    def __init__(self, records: Optional[Iterable[DashboardRecord]] = None):
        self._records: Dict[int, DashboardRecord] = {}
        self._next_id = 1
        for record in records or ():
            self._seed(record)

    def _seed(self, record: DashboardRecord) -> None:
        # Seeded records keep explicit ids and positions
        if record.id is None:
            record.id = self._next_id
        if record.position is None:
            record.position = self._last_position() + 1
        self._records[record.id] = replace(record)
        self._next_id = max(self._next_id, record.id + 1)

    def _last_position(self) -> int:
        return max((r.position for r in self._records.values()), default=0)

    def create(self, record: DashboardRecord) -> int:
        record.id = self._next_id
        record.position = self._last_position() + 1
        self._next_id += 1
        self._records[record.id] = replace(record)
        return record.id

    def update(self, *records: DashboardRecord) -> None:
        for record in records:
            if record.id not in self._records:
                raise DashboardNotFoundError(
                    f"Dashboard {record.id} no longer exists",
                    record_id=record.id,
                )
        for record in records:
            self._records[record.id] = replace(record)

    def update_details(self, record: DashboardRecord) -> DashboardRecord:
        stored = self._records.get(record.id)
        if stored is None:
            raise DashboardNotFoundError(
                f"Dashboard {record.id} no longer exists",
                record_id=record.id,
            )
        stored = replace(stored, name=record.name, component_type_id=record.component_type_id)
        self._records[record.id] = stored
        return replace(stored)

    def delete(self, record_id: int) -> None:
        self._records.pop(record_id, None)

    def find_by_id(self, record_id: int) -> LookupResult:
        record = self._records.get(record_id)
        if record is None:
            return LookupResult.not_found()
        return LookupResult.found(replace(record))

    def find_by_ids(self, record_ids: Iterable[int]) -> List[DashboardRecord]:
        wanted = set(record_ids)
        return [replace(r) for rid, r in self._records.items() if rid in wanted]

    def list_all_ordered_by_position(self) -> List[DashboardRecord]:
        ordered = sorted(self._records.values(), key=lambda r: (r.position, r.id))
        return [replace(r) for r in ordered]

    def __len__(self) -> int:
        return len(self._records)
