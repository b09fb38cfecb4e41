# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: parking occupancy."""
from fastapi import APIRouter, Depends

from member_access.core.dependencies import get_parking_service
from member_access.schemas import ParkingStatus
from member_access.services.parking_service import ParkingService

router = APIRouter(prefix="/api/v1", tags=["Parking"])


def _status(state) -> ParkingStatus:
    return ParkingStatus(total=state.total, occupied=state.occupied, available=state.available)


@router.get("/parking", response_model=ParkingStatus)
def get_status(service: ParkingService = Depends(get_parking_service)):
    return service.status()


@router.post("/parking/enter", response_model=ParkingStatus)
def car_enters(service: ParkingService = Depends(get_parking_service)):
    return _status(service.enter())


@router.post("/parking/leave", response_model=ParkingStatus)
def car_leaves(service: ParkingService = Depends(get_parking_service)):
    return _status(service.leave())
