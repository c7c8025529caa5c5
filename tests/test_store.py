"""Unit tests for publicdashboard.dashboards.store — in-memory and SQLAlchemy stores."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from publicdashboard.dashboards.store import (
    DashboardRecord,
    InMemoryDashboardStore,
    LookupResult,
    LookupStatus,
    SqlDashboardStore,
)
from publicdashboard.engine.errors import DashboardNotFoundError, DashboardStoreError


class TestLookupResult:

    def test_found(self):
        record = DashboardRecord(id=1, name="A", component_type_id="x", position=1)
        result = LookupResult.found(record)
        assert result.is_found
        assert result.unwrap() is record

    def test_not_found_raises(self):
        result = LookupResult.not_found()
        assert result.status is LookupStatus.NOT_FOUND
        with pytest.raises(DashboardNotFoundError) as exc:
            result.unwrap(7)
        assert exc.value.record_id == 7
        assert exc.value.message == "Resource not found"

    def test_failed_reraises_store_error(self):
        error = DashboardStoreError("boom", operation="find_by_id")
        result = LookupResult.failed(error)
        assert result.status is LookupStatus.ERROR
        assert not result.is_found
        with pytest.raises(DashboardStoreError):
            result.unwrap(1)


class _StoreContract:
    """Behaviour shared by every DashboardStore implementation."""

    @pytest.fixture
    def store(self):
        raise NotImplementedError

    def test_list_ordered_by_position(self, store):
        assert [r.name for r in store.list_all_ordered_by_position()] == ["A", "B", "C"]
        assert store.list_ids_ordered_by_position() == [1, 2, 3]

    def test_create_appends_after_last_position(self, store):
        record = DashboardRecord(name="D", component_type_id="news")
        new_id = store.create(record)
        assert record.id == new_id
        assert record.position == 31
        assert store.list_ids_ordered_by_position()[-1] == new_id

    def test_find_by_id(self, store):
        result = store.find_by_id(2)
        assert result.is_found
        assert result.record.name == "B"
        assert result.record.position == 20

    def test_find_by_id_missing(self, store):
        assert store.find_by_id(99).status is LookupStatus.NOT_FOUND

    def test_find_by_ids_skips_unknown(self, store):
        found = store.find_by_ids([3, 1, 99])
        assert sorted(r.id for r in found) == [1, 3]

    def test_find_by_ids_empty(self, store):
        assert store.find_by_ids([]) == []

    def test_update_persists(self, store):
        record = store.find_by_id(1).unwrap()
        record.name = "Renamed"
        store.update(record)
        assert store.find_by_id(1).unwrap().name == "Renamed"

    def test_update_is_all_or_nothing(self, store):
        a = store.find_by_id(1).unwrap()
        a.position = 99
        ghost = DashboardRecord(id=42, name="ghost", component_type_id="x", position=1)
        with pytest.raises(DashboardNotFoundError):
            store.update(a, ghost)
        assert store.find_by_id(1).unwrap().position == 10

    def test_delete_keeps_other_positions(self, store):
        store.delete(2)
        assert store.find_by_id(2).status is LookupStatus.NOT_FOUND
        assert [r.position for r in store.list_all_ordered_by_position()] == [10, 30]

    def test_delete_unknown_is_ignored(self, store):
        store.delete(99)
        assert store.list_ids_ordered_by_position() == [1, 2, 3]

    def test_update_details_keeps_stored_position(self, store):
        stale = store.find_by_id(1).unwrap()
        moved = store.find_by_id(1).unwrap()
        moved.position = 25
        store.update(moved)

        stale.name = "Renamed"
        stale.component_type_id = "news"
        saved = store.update_details(stale)
        assert (saved.name, saved.component_type_id, saved.position) == ("Renamed", "news", 25)
        assert store.find_by_id(1).unwrap().position == 25

    def test_update_details_missing(self, store):
        with pytest.raises(DashboardNotFoundError):
            store.update_details(DashboardRecord(id=42, name="x", component_type_id="x", position=1))

    def test_equal_positions_order_by_id(self, store):
        c = store.find_by_id(3).unwrap()
        c.position = 10
        store.update(c)
        assert store.list_ids_ordered_by_position() == [1, 3, 2]


class TestInMemoryStore(_StoreContract):

    @pytest.fixture
    def store(self, memory_store):
        return memory_store

    def test_returned_records_are_copies(self, store):
        record = store.find_by_id(1).unwrap()
        record.position = 1000
        assert store.find_by_id(1).unwrap().position == 10

    def test_seed_assigns_missing_ids_and_positions(self):
        store = InMemoryDashboardStore([
            DashboardRecord(name="x", component_type_id="a"),
            DashboardRecord(name="y", component_type_id="a"),
        ])
        assert [(r.id, r.position) for r in store.list_all_ordered_by_position()] == [(1, 1), (2, 2)]
        assert len(store) == 2

    def test_create_on_empty_store_starts_at_one(self):
        store = InMemoryDashboardStore()
        record = DashboardRecord(name="first", component_type_id="a")
        store.create(record)
        assert (record.id, record.position) == (1, 1)


class TestSqlStore(_StoreContract):

    @pytest.fixture
    def store(self, sql_store):
        return sql_store

    def test_create_on_empty_table_starts_at_one(self, sql_session_factory):
        store = SqlDashboardStore(sql_session_factory)
        record = DashboardRecord(name="", component_type_id="weather")
        store.create(record)
        assert record.position == 1
        assert store.find_by_id(record.id).unwrap().name == ""

    def test_sqlalchemy_failure_becomes_store_error(self):
        session = MagicMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        store = SqlDashboardStore(MagicMock(return_value=session))
        with pytest.raises(DashboardStoreError) as exc:
            store.list_all_ordered_by_position()
        assert exc.value.operation == "list"
        session.rollback.assert_called_once()
        session.close.assert_called_once()

    def test_find_by_id_failure_is_reported_not_raised(self):
        session = MagicMock()
        session.get.side_effect = OperationalError("SELECT", {}, Exception("db down"))
        store = SqlDashboardStore(MagicMock(return_value=session))
        result = store.find_by_id(1)
        assert result.status is LookupStatus.ERROR
        assert isinstance(result.error, DashboardStoreError)
