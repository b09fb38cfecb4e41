# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, NO FastAPI dependency.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field


class Member(BaseModel):
    """A roster member identified by DNI."""
    id: str
    full_name: str = Field(..., min_length=1)
    dni: str = Field(..., min_length=1)


class ParkingState(BaseModel):
    total: int = Field(..., ge=0)
    occupied: int = Field(..., ge=0)

    @property
    def available(self) -> int:
        return self.total - self.occupied


class AccessDecision(BaseModel):
    granted: bool
    title: str
    subtitle: str
    member: Optional[Member] = None


class AccessLogEntry(BaseModel):
    dni: str
    created_at: datetime


# ── Bulk import ──

@dataclass
class ImportCandidate:
    """One input row on its way through a bulk import."""
    original_index: int
    row_number: int
    raw_dni: Any
    full_name: str
    dni: str


class ImportedMember(BaseModel):
    dni: str
    full_name: str


class ImportFailure(BaseModel):
    index: int
    row_number: int
    dni: Optional[str] = None
    full_name: Optional[str] = None
    message: str


class BulkImportResult(BaseModel):
    inserted: list[ImportedMember] = []
    failures: list[ImportFailure] = []


# ── Store outcomes ──

@dataclass(frozen=True)
class Inserted:
    member: Member


@dataclass(frozen=True)
class DuplicateKey:
    dni: str


@dataclass(frozen=True)
class InsertFailed:
    message: str


InsertOutcome = Union[Inserted, DuplicateKey, InsertFailed]


@dataclass(frozen=True)
class WriteError:
    """Per-document failure reported by an unordered bulk insert."""
    index: int
    duplicate_key: bool
    message: str


@dataclass
class BulkWriteResult:
    inserted_count: int
    write_errors: list[WriteError] = field(default_factory=list)
