# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package: store contracts plus SQL and in-memory implementations."""
from member_access.repositories.access_log_repository import (
    AccessLogRepository, InMemoryAccessLogRepository,
)
from member_access.repositories.contracts import (
    AccessLogStore, BulkMemberStore, MemberStore, ParkingStore,
)
from member_access.repositories.member_repository import (
    InMemoryMemberRepository, MemberRepository,
)
from member_access.repositories.parking_repository import (
    InMemoryParkingRepository, ParkingRepository,
)

__all__ = [
    "AccessLogRepository", "InMemoryAccessLogRepository",
    "AccessLogStore", "BulkMemberStore", "MemberStore", "ParkingStore",
    "InMemoryMemberRepository", "MemberRepository",
    "InMemoryParkingRepository", "ParkingRepository",
]
