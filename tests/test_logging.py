"""Unit tests for publicdashboard.engine.logging — JSONL operation log."""

import json
import logging

import pytest

from publicdashboard.engine.logging import (
    AsyncLogQueue,
    FileLogger,
    LogEntry,
    configure_logging,
    get_log_queue,
    init_logging,
    log,
    log_dashboard_operation,
    log_security_event,
    log_system_event,
    shutdown_logging,
)


class TestLogEntry:

    def test_valid_target(self):
        entry = LogEntry("dashboards", "execution", {"event": "x"})
        assert json.loads(entry.to_json()) == {"event": "x"}

    def test_invalid_target(self):
        with pytest.raises(ValueError):
            LogEntry("dashboards", "performance", {})
        with pytest.raises(ValueError):
            LogEntry("records", "execution", {})


class TestBuilders:

    def test_dashboard_operation(self):
        entry = log_dashboard_operation("move_up", record_id=3, session_id="s1", username="admin")
        assert (entry.object_type, entry.category) == ("dashboards", "execution")
        assert entry.data["event"] == "dashboard_move_up"
        assert entry.data["record_id"] == 3
        assert entry.data["username"] == "admin"
        assert "ts" in entry.data

    def test_dashboard_operation_details(self):
        entry = log_dashboard_operation("create", record_id=1, details={"component_type_id": "news"})
        assert entry.data["details"] == {"component_type_id": "news"}
        assert "session_id" not in entry.data

    def test_unknown_operation(self):
        with pytest.raises(ValueError):
            log_dashboard_operation("rename", record_id=1)

    def test_security_event(self):
        entry = log_security_event("invalid_security_token", action="createDashboard", session_id="s1")
        assert (entry.object_type, entry.category) == ("admin", "security")
        assert entry.data["level"] == "WARNING"
        assert entry.data["action"] == "createDashboard"

    def test_system_event(self):
        entry = log_system_event("startup", {"components": 2})
        assert entry.object_type == "system"
        assert entry.data["details"]["components"] == 2


class TestFileLogger:

    def test_write_and_read(self, tmp_path):
        logger = FileLogger(str(tmp_path))
        logger.write(log_dashboard_operation("remove", record_id=5))
        rows = logger.read("dashboards", "execution")
        assert len(rows) == 1
        assert rows[0]["record_id"] == 5
        assert logger.resolve_path("dashboards", "execution").exists()

    def test_batch_groups_by_file(self, tmp_path):
        logger = FileLogger(str(tmp_path))
        logger.write_batch([
            log_dashboard_operation("create", record_id=1),
            log_dashboard_operation("update", record_id=1),
            log_security_event("invalid_security_token", action="modifyDashboard"),
        ])
        assert len(logger.read("dashboards", "execution")) == 2
        assert len(logger.read("admin", "security")) == 1

    def test_read_missing_file(self, tmp_path):
        assert FileLogger(str(tmp_path)).read("system", "execution") == []


class TestAsyncLogQueue:

    def test_push_and_flush(self, tmp_path):
        queue = AsyncLogQueue(FileLogger(str(tmp_path)))
        assert queue.push(log_system_event("startup"))
        assert queue.pending_count == 1
        assert queue.flush() == 1
        assert queue.pending_count == 0
        assert len(FileLogger(str(tmp_path)).read("system", "execution")) == 1

    def test_drops_when_full(self, tmp_path):
        queue = AsyncLogQueue(FileLogger(str(tmp_path)), max_queue_size=1)
        queue.push(log_system_event("a"))
        assert queue.push(log_system_event("b")) is False
        assert queue.dropped_count == 1

    def test_stop_flushes_remaining(self, tmp_path):
        queue = AsyncLogQueue(FileLogger(str(tmp_path)), flush_interval_ms=50)
        queue.start()
        queue.push(log_system_event("shutdown"))
        queue.stop()
        assert len(FileLogger(str(tmp_path)).read("system", "execution")) == 1


class TestGlobalQueue:

    def test_log_without_init(self):
        assert get_log_queue() is None
        assert log(log_system_event("startup")) is False

    def test_init_and_shutdown(self, tmp_path):
        init_logging(str(tmp_path))
        assert log(log_dashboard_operation("create", record_id=1)) is True
        shutdown_logging()
        assert get_log_queue() is None
        assert len(FileLogger(str(tmp_path)).read("dashboards", "execution")) == 1

    def test_configure_logging(self):
        configure_logging("DEBUG")
        root = logging.getLogger("publicdashboard")
        assert root.level == logging.DEBUG
        handlers = len(root.handlers)
        configure_logging("INFO")
        assert len(root.handlers) == handlers
