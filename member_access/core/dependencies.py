# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire repositories and services.
STORAGE_BACKEND=memory swaps every store for its in-memory twin.
"""
from member_access.core.config import settings
from member_access.core.database import engine
from member_access.repositories.access_log_repository import (
    AccessLogRepository, InMemoryAccessLogRepository,
)
from member_access.repositories.member_repository import (
    InMemoryMemberRepository, MemberRepository,
)
from member_access.repositories.parking_repository import (
    InMemoryParkingRepository, ParkingRepository,
)
from member_access.services.access_service import AccessService
from member_access.services.bulk_import import BulkImportService
from member_access.services.member_service import MemberService
from member_access.services.parking_service import ParkingService

# ── Singleton repository instances ──
if settings.STORAGE_BACKEND == "memory":
    _member_repo = InMemoryMemberRepository()
    _access_log_repo = InMemoryAccessLogRepository()
    _parking_repo = InMemoryParkingRepository()
else:
    _member_repo = MemberRepository(engine)
    _access_log_repo = AccessLogRepository(engine)
    _parking_repo = ParkingRepository(engine)

# ── Service instances (with injected dependencies) ──
_member_service = MemberService(_member_repo)
_bulk_import_service = BulkImportService(_member_repo, chunk_size=settings.IMPORT_CHUNK_SIZE)
_access_service = AccessService(
    _member_repo, _access_log_repo, threshold_minutes=settings.ACCESS_LOG_THRESHOLD,
)
_parking_service = ParkingService(_parking_repo, total=settings.PARKING_SPACES)


# ── FastAPI dependency functions ──
def get_member_service() -> MemberService:
    return _member_service


def get_bulk_import_service() -> BulkImportService:
    return _bulk_import_service


def get_access_service() -> AccessService:
    return _access_service


def get_parking_service() -> ParkingService:
    return _parking_service


def get_member_repo():
    return _member_repo


def get_access_log_repo():
    return _access_log_repo


def get_parking_repo():
    return _parking_repo
