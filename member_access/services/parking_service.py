# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Service: parking occupancy counter."""
from typing import Any, Dict

from member_access.core.logging import get_logger
from member_access.metrics import PARKING_EVENTS, PARKING_OCCUPIED
from member_access.models.domain import ParkingState
from member_access.repositories.contracts import ParkingStore

logger = get_logger(__name__)


class ParkingService:
    def __init__(self, store: ParkingStore, total: int):
        if total < 0:
            raise ValueError("total must be >= 0")
        self._store = store
        self._total = total

    def initialize(self) -> ParkingState:
        """Create the singleton on first start; an existing record is left as is."""
        state = self._store.initialize(self._total)
        PARKING_OCCUPIED.set(state.occupied)
        logger.info("Parking ready total=%d occupied=%d", state.total, state.occupied)
        return state

    def status(self) -> Dict[str, Any]:
        state = self._current()
        return {"total": state.total, "occupied": state.occupied, "available": state.available}

    def enter(self) -> ParkingState:
        return self._apply(+1, "enter")

    def leave(self) -> ParkingState:
        return self._apply(-1, "leave")

    def _current(self) -> ParkingState:
        state = self._store.read()
        if state is None:
            state = self.initialize()
        return state

    def _apply(self, delta: int, event: str) -> ParkingState:
        if self._store.read() is None:
            self.initialize()
        state, applied = self._store.adjust(delta)
        PARKING_EVENTS.labels(event=event, applied=str(applied).lower()).inc()
        PARKING_OCCUPIED.set(state.occupied)
        if not applied:
            logger.info("Parking %s ignored occupied=%d total=%d", event, state.occupied, state.total)
        return state
