# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Store contracts consumed by the service layer.

Services depend on these protocols only, so any backend (SQL, in-memory or a
test fake) can be injected.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from member_access.models.domain import (
    AccessLogEntry, BulkWriteResult, InsertOutcome, Member, ParkingState,
)


@runtime_checkable
class MemberStore(Protocol):
    """Minimal member store: single lookups and single inserts."""

    def find_by_dni(self, dni: str) -> Optional[Member]: ...

    def insert_one(self, full_name: str, dni: str) -> InsertOutcome: ...


@runtime_checkable
class BulkMemberStore(MemberStore, Protocol):
    """Member store that also supports bulk lookup and unordered bulk insert."""

    def find_existing(self, dnis: list[str]) -> list[Member]: ...

    def insert_many(self, docs: list[dict[str, str]]) -> BulkWriteResult: ...


class AccessLogStore(Protocol):
    def append(self, dni: str, at: datetime) -> None: ...

    def most_recent(self, dni: str) -> Optional[AccessLogEntry]: ...


class ParkingStore(Protocol):
    def read(self) -> Optional[ParkingState]: ...

    def initialize(self, total: int) -> ParkingState: ...

    def adjust(self, delta: int) -> tuple[ParkingState, bool]:
        """Apply delta only if the result stays within [0, total].

        Returns the resulting state and whether a write happened.
        """
        ...
