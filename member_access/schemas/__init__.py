# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas."""
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from member_access.models.domain import ImportFailure, Member

SORT_FIELDS = ("full_name", "dni")
SORT_ORDERS = ("asc", "desc")


class MemberIn(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    dni: Union[str, int] = Field(...)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full_name cannot be blank")
        return v


class MemberOut(BaseModel):
    id: str
    full_name: str
    dni: str


class PaginatedMembers(BaseModel):
    data: List[MemberOut]
    total: int
    pages: int
    current_page: int


class BulkUploadResponse(BaseModel):
    inserted: int
    failures: List[ImportFailure]


class AccessRequest(BaseModel):
    dni: Union[str, int]


class AccessResponse(BaseModel):
    granted: bool
    title: str
    subtitle: str
    member: Optional[Member] = None


class ParkingStatus(BaseModel):
    total: int
    occupied: int
    available: int


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
