# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: access gate. Unknown member and cooldown are answers, not errors."""
from fastapi import APIRouter, Depends

from member_access.core.dependencies import get_access_service
from member_access.schemas import AccessRequest, AccessResponse
from member_access.services.access_service import AccessService

router = APIRouter(prefix="/api/v1", tags=["Access"])


@router.post("/access-log", response_model=AccessResponse)
def register_access(body: AccessRequest, service: AccessService = Depends(get_access_service)):
    return service.evaluate_access(body.dni)
