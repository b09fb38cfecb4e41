# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: member CRUD, DNI search and bulk row upload.
Thin HTTP layer: delegates ALL logic to MemberService / BulkImportService.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from member_access.core.config import settings
from member_access.core.dependencies import get_bulk_import_service, get_member_service
from member_access.core.errors import DuplicateMemberError, StoreError
from member_access.schemas import (
    SORT_FIELDS, SORT_ORDERS, BulkUploadResponse, MemberIn, MemberOut, PaginatedMembers,
)
from member_access.services.bulk_import import BulkImportService
from member_access.services.member_service import MemberService

router = APIRouter(prefix="/api/v1", tags=["Members"])


@router.post("/members", status_code=201, response_model=MemberOut)
def create_member(body: MemberIn, service: MemberService = Depends(get_member_service)):
    try:
        return service.create(body.full_name, body.dni)
    except DuplicateMemberError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@router.get("/members", response_model=PaginatedMembers)
def list_members(
    query: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    sort_by: str = Query(default="full_name"),
    sort_order: str = Query(default="asc"),
    service: MemberService = Depends(get_member_service),
):
    if sort_by not in SORT_FIELDS:
        raise HTTPException(status_code=422, detail=f"sort_by must be one of {SORT_FIELDS}")
    if sort_order not in SORT_ORDERS:
        raise HTTPException(status_code=422, detail=f"sort_order must be one of {SORT_ORDERS}")
    return service.list_members(query, page, limit, sort_by, sort_order)


@router.post("/members/upload-rows", response_model=BulkUploadResponse)
def upload_rows(rows: List[Any] = Body(...),
                service: BulkImportService = Depends(get_bulk_import_service)):
    """Bulk import of already-parsed rows; bad rows are reported, never fatal."""
    if not rows:
        raise HTTPException(status_code=400, detail="No se recibieron filas para subir")
    if len(rows) > settings.MAX_IMPORT_ROWS:
        raise HTTPException(
            status_code=413,
            detail=f"Demasiadas filas: máximo {settings.MAX_IMPORT_ROWS} por carga",
        )
    try:
        result = service.import_rows(rows)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return BulkUploadResponse(inserted=len(result.inserted), failures=result.failures)


@router.get("/members/dni/{dni}", response_model=MemberOut)
def search_by_dni(dni: str, service: MemberService = Depends(get_member_service)):
    try:
        return service.search_by_dni(dni)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])


@router.get("/members/{member_id}", response_model=MemberOut)
def get_member(member_id: str, service: MemberService = Depends(get_member_service)):
    try:
        return service.get(member_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])


@router.put("/members/{member_id}", response_model=MemberOut)
def update_member(member_id: str, body: MemberIn,
                  service: MemberService = Depends(get_member_service)):
    try:
        return service.update(member_id, body.full_name, body.dni)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])
    except DuplicateMemberError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except StoreError as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@router.delete("/members/{member_id}", response_model=MemberOut)
def delete_member(member_id: str, service: MemberService = Depends(get_member_service)):
    try:
        return service.delete(member_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0])
