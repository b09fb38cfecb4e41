# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: access log data access.
Append-only: entries are never updated or deleted here.
"""
import threading
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from member_access.models.domain import AccessLogEntry


def _to_utc(value) -> datetime:
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AccessLogRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def append(self, dni: str, at: datetime) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                text("INSERT INTO access_log (id, dni, created_at) VALUES (:id, :dni, :ts)"),
                {"id": str(uuid.uuid4()), "dni": dni,
                 "ts": _to_utc(at).isoformat(timespec="microseconds")},
            )

    def most_recent(self, dni: str) -> Optional[AccessLogEntry]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT dni, created_at FROM access_log WHERE dni = :dni "
                     "ORDER BY created_at DESC LIMIT 1"),
                {"dni": dni},
            ).fetchone()
        if not row:
            return None
        return AccessLogEntry(dni=row[0], created_at=_to_utc(row[1]))

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM access_log")).scalar() or 0


class InMemoryAccessLogRepository:
    """In-memory append-only access log."""

    def __init__(self) -> None:
        self._entries: list[AccessLogEntry] = []
        self._lock = threading.Lock()

    def append(self, dni: str, at: datetime) -> None:
        with self._lock:
            self._entries.append(AccessLogEntry(dni=dni, created_at=_to_utc(at)))

    def most_recent(self, dni: str) -> Optional[AccessLogEntry]:
        matches = [e for e in self._entries if e.dni == dni]
        return max(matches, key=lambda e: e.created_at) if matches else None

    def count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def entries(self) -> list[AccessLogEntry]:
        return list(self._entries)
