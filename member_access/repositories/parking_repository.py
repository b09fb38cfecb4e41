# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: parking occupancy singleton.
The bound check and the write happen in one statement, so concurrent
entries near capacity can never push ``occupied`` past ``total``.
"""
import threading
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from member_access.core.errors import StoreError
from member_access.models.domain import ParkingState

PARKING_ID = 1


class ParkingRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def read(self) -> Optional[ParkingState]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT total, occupied FROM parking WHERE id = :id"), {"id": PARKING_ID}
            ).fetchone()
        return ParkingState(total=row[0], occupied=row[1]) if row else None

    def initialize(self, total: int) -> ParkingState:
        with self._engine.begin() as conn:
            conn.execute(
                text("INSERT INTO parking (id, total, occupied) VALUES (:id, :total, 0) "
                     "ON CONFLICT (id) DO NOTHING"),
                {"id": PARKING_ID, "total": total},
            )
            row = conn.execute(
                text("SELECT total, occupied FROM parking WHERE id = :id"), {"id": PARKING_ID}
            ).fetchone()
        return ParkingState(total=row[0], occupied=row[1])

    def adjust(self, delta: int) -> tuple[ParkingState, bool]:
        with self._engine.begin() as conn:
            result = conn.execute(
                text("""
                    UPDATE parking SET occupied = occupied + :delta
                    WHERE id = :id
                      AND occupied + :delta >= 0
                      AND occupied + :delta <= total
                """),
                {"id": PARKING_ID, "delta": delta},
            )
            row = conn.execute(
                text("SELECT total, occupied FROM parking WHERE id = :id"), {"id": PARKING_ID}
            ).fetchone()
        if not row:
            raise StoreError("Parking state has not been initialised")
        return ParkingState(total=row[0], occupied=row[1]), result.rowcount > 0


class InMemoryParkingRepository:
    """In-memory parking singleton guarded by a lock."""

    def __init__(self) -> None:
        self._state: Optional[ParkingState] = None
        self._lock = threading.Lock()
        self.writes = 0

    def read(self) -> Optional[ParkingState]:
        return self._state

    def initialize(self, total: int) -> ParkingState:
        with self._lock:
            if self._state is None:
                self._state = ParkingState(total=total, occupied=0)
            return self._state

    def adjust(self, delta: int) -> tuple[ParkingState, bool]:
        with self._lock:
            if self._state is None:
                raise StoreError("Parking state has not been initialised")
            occupied = self._state.occupied + delta
            if occupied < 0 or occupied > self._state.total:
                return self._state, False
            self._state = ParkingState(total=self._state.total, occupied=occupied)
            self.writes += 1
            return self._state, True

    def clear(self) -> None:
        with self._lock:
            self._state = None
            self.writes = 0
