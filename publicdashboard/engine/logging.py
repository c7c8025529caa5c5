"""
PublicDashboard Logging — Structured JSON operation log with an async queue.

Implements:
- FileLogger: per-object-type, per-category JSONL files (daily files)
- AsyncLogQueue: in-memory queue flushed by a background thread
- Entry builders for dashboard operations and security events
- configure_logging(): stdlib logging level/format for the process

Layout: {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections import defaultdict
from datetime import date, datetime, timezone
from pathlib import Path
from queue import Empty, Full, Queue
from typing import Any, Dict, List, Optional

logger = logging.getLogger("publicdashboard.engine.logging")

OBJECT_TYPE_CATEGORIES = {
    "dashboards": ["execution", "security"],
    "admin": ["execution", "security"],
    "system": ["execution"],
}

DASHBOARD_OPERATIONS = frozenset({"create", "update", "remove", "move_up", "move_down"})


class LogEntry:
    """A structured log entry destined for a specific file."""

    __slots__ = ("object_type", "category", "data")

    def __init__(self, object_type: str, category: str, data: Dict[str, Any]):
        if category not in OBJECT_TYPE_CATEGORIES.get(object_type, ()):
            raise ValueError(f"Invalid log target: {object_type}/{category}")
        self.object_type = object_type
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, separators=(",", ":"))


class FileLogger:
    """
    Appends JSON lines to one file per object type, category and day.
    Thread-safe — one lock per file path.
    """

    def __init__(self, log_dir: str = "logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        for obj_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for cat in categories:
                (self._log_dir / obj_type / cat).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        self.write_batch([entry])

    def write_batch(self, entries: List[LogEntry]) -> None:
        """Write entries grouped by destination file."""
        grouped: Dict[str, List[LogEntry]] = defaultdict(list)
        for entry in entries:
            grouped[str(self.resolve_path(entry.object_type, entry.category))].append(entry)

        for file_path, batch in grouped.items():
            with self._file_locks[file_path]:
                with open(file_path, "a", encoding="utf-8") as f:
                    for entry in batch:
                        f.write(entry.to_json())
                        f.write("\n")

    def resolve_path(self, object_type: str, category: str, day: Optional[date] = None) -> Path:
        day = day or date.today()
        return self._log_dir / object_type / category / f"{day.isoformat()}.jsonl"

    def read(self, object_type: str, category: str, day: Optional[date] = None) -> List[Dict[str, Any]]:
        """Read all entries of one day's file, oldest first."""
        path = self.resolve_path(object_type, category, day)
        if not path.exists():
            return []
        entries: List[Dict[str, Any]] = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
        return entries

    @property
    def log_dir(self) -> Path:
        return self._log_dir


class AsyncLogQueue:
    """
    Non-blocking queue in front of a FileLogger.

    A daemon thread flushes every flush_interval_ms or when flush_batch_size
    entries are waiting, whichever comes first. Entries pushed while the
    queue is full are dropped and counted.
    """

    def __init__(
        self,
        file_logger: FileLogger,
        flush_interval_ms: int = 100,
        flush_batch_size: int = 50,
        max_queue_size: int = 10000,
    ):
        self._logger = file_logger
        self._flush_interval = flush_interval_ms / 1000.0
        self._flush_batch_size = flush_batch_size
        self._queue: Queue[LogEntry] = Queue(maxsize=max_queue_size)
        self._running = False
        self._flush_thread: Optional[threading.Thread] = None
        self._dropped_count = 0

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._flush_thread = threading.Thread(
            target=self._flush_loop,
            name="publicdashboard-log-flush",
            daemon=True,
        )
        self._flush_thread.start()
        logger.info("Async log queue started")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the flush thread and write whatever is still queued."""
        self._running = False
        if self._flush_thread and self._flush_thread.is_alive():
            self._flush_thread.join(timeout=timeout)
        self.flush()
        logger.info(f"Async log queue stopped (dropped: {self._dropped_count})")

    def push(self, entry: LogEntry) -> bool:
        try:
            self._queue.put_nowait(entry)
            return True
        except Full:
            self._dropped_count += 1
            return False

    def flush(self) -> int:
        """Synchronously write all queued entries. Returns the count written."""
        batch: List[LogEntry] = []
        while True:
            try:
                batch.append(self._queue.get_nowait())
            except Empty:
                break
        if batch:
            try:
                self._logger.write_batch(batch)
            except OSError as e:
                logger.error(f"Log flush error: {e}")
                return 0
        return len(batch)

    def _flush_loop(self) -> None:
        while self._running:
            batch = self._collect_batch()
            if not batch:
                time.sleep(self._flush_interval)
                continue
            try:
                self._logger.write_batch(batch)
            except OSError as e:
                logger.error(f"Log flush error: {e}")

    def _collect_batch(self) -> List[LogEntry]:
        batch: List[LogEntry] = []
        deadline = time.monotonic() + self._flush_interval
        while len(batch) < self._flush_batch_size:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                batch.append(self._queue.get(timeout=min(remaining, 0.01)))
            except Empty:
                if batch:
                    break
        return batch

    @property
    def pending_count(self) -> int:
        return self._queue.qsize()

    @property
    def dropped_count(self) -> int:
        return self._dropped_count


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(event: str, level: str, **fields: Any) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
    }
    entry.update({k: v for k, v in fields.items() if v is not None})
    return entry


def log_dashboard_operation(
    operation: str,
    record_id: Optional[int],
    session_id: Optional[str] = None,
    username: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build a dashboard create/update/remove/move log entry."""
    if operation not in DASHBOARD_OPERATIONS:
        raise ValueError(f"Unknown dashboard operation: {operation}")
    data = _base_entry(
        event=f"dashboard_{operation}",
        level="INFO",
        operation=operation,
        record_id=record_id,
        session_id=session_id,
        username=username,
    )
    if details:
        data["details"] = details
    return LogEntry("dashboards", "execution", data)


def log_security_event(
    event: str,
    action: str,
    session_id: Optional[str] = None,
    username: Optional[str] = None,
    level: str = "WARNING",
) -> LogEntry:
    """Build a security event log entry (rejected token, etc.)."""
    data = _base_entry(
        event=event,
        level=level,
        action=action,
        session_id=session_id,
        username=username,
    )
    return LogEntry("admin", "security", data)


def log_system_event(event: str, details: Optional[Dict[str, Any]] = None) -> LogEntry:
    """Build a system event log entry (startup, shutdown)."""
    data = _base_entry(event=event, level="INFO")
    if details:
        data["details"] = details
    return LogEntry("system", "execution", data)


# ---------------------------------------------------------------------------
# Process-wide setup
# ---------------------------------------------------------------------------

_global_queue: Optional[AsyncLogQueue] = None


def configure_logging(level: str = "INFO") -> None:
    """Set level and format on the ``publicdashboard`` logger tree."""
    root = logging.getLogger("publicdashboard")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        root.addHandler(handler)


def init_logging(
    log_dir: str = "logs",
    flush_interval_ms: int = 100,
    flush_batch_size: int = 50,
    max_queue_size: int = 10000,
) -> AsyncLogQueue:
    """Initialize and start the global async log queue."""
    global _global_queue
    if _global_queue is not None:
        _global_queue.stop()
    _global_queue = AsyncLogQueue(
        file_logger=FileLogger(log_dir=log_dir),
        flush_interval_ms=flush_interval_ms,
        flush_batch_size=flush_batch_size,
        max_queue_size=max_queue_size,
    )
    _global_queue.start()
    return _global_queue


def get_log_queue() -> Optional[AsyncLogQueue]:
    return _global_queue


def log(entry: LogEntry) -> bool:
    """Push an entry to the global queue. Non-blocking; dropped if not initialized."""
    if _global_queue is None:
        logger.debug(f"Log queue not initialized — {entry.data.get('event')} dropped")
        return False
    return _global_queue.push(entry)


def shutdown_logging() -> None:
    global _global_queue
    if _global_queue:
        _global_queue.stop()
        _global_queue = None
