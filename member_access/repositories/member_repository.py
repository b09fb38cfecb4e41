# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for members."""
import threading
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from member_access.core.errors import DuplicateMemberError, StoreError
from member_access.core.logging import get_logger
from member_access.models.domain import (
    BulkWriteResult, DuplicateKey, InsertFailed, Inserted, InsertOutcome, Member, WriteError,
)

logger = get_logger(__name__)

MEMBER_COLS = "id, full_name, dni"
SORTABLE_COLUMNS = {"full_name": "full_name", "dni": "dni"}
LOOKUP_CHUNK = 500


def _row_to_member(row) -> Member:
    return Member(id=str(row[0]), full_name=row[1], dni=row[2])


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MemberRepository:
    """SQL member store. The unique constraint on ``dni`` is the final authority."""

    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def insert_one(self, full_name: str, dni: str) -> InsertOutcome:
        member_id = str(uuid.uuid4())
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text("INSERT INTO members (id, full_name, dni) VALUES (:id, :full_name, :dni)"),
                    {"id": member_id, "full_name": full_name, "dni": dni},
                )
        except IntegrityError:
            return DuplicateKey(dni)
        except SQLAlchemyError as exc:
            logger.error("Member insert failed dni=%s: %s", dni, exc)
            return InsertFailed(str(getattr(exc, "orig", None) or exc))
        return Inserted(Member(id=member_id, full_name=full_name, dni=dni))

    def insert_many(self, docs: List[Dict[str, str]]) -> BulkWriteResult:
        """Unordered insert: conflicting documents are skipped, never abort the batch."""
        if not docs:
            return BulkWriteResult(inserted_count=0)
        values = []
        params: Dict[str, Any] = {}
        for i, doc in enumerate(docs):
            values.append(f"(:id{i}, :full_name{i}, :dni{i})")
            params[f"id{i}"] = str(uuid.uuid4())
            params[f"full_name{i}"] = doc["full_name"]
            params[f"dni{i}"] = doc["dni"]
        try:
            with self._engine.begin() as conn:
                rows = conn.execute(
                    text(
                        f"INSERT INTO members (id, full_name, dni) VALUES {', '.join(values)} "
                        "ON CONFLICT (dni) DO NOTHING RETURNING dni"
                    ),
                    params,
                ).fetchall()
        except SQLAlchemyError as exc:
            raise StoreError(f"Bulk insert failed: {exc}") from exc

        written = {r[0] for r in rows}
        errors = [
            WriteError(index=i, duplicate_key=True,
                       message=f"duplicate key value violates unique constraint: dni={doc['dni']}")
            for i, doc in enumerate(docs) if doc["dni"] not in written
        ]
        return BulkWriteResult(inserted_count=len(written), write_errors=errors)

    def update(self, member_id: str, full_name: str, dni: str) -> Optional[Member]:
        try:
            with self._engine.begin() as conn:
                result = conn.execute(
                    text("UPDATE members SET full_name = :full_name, dni = :dni WHERE id = :id"),
                    {"id": member_id, "full_name": full_name, "dni": dni},
                )
        except IntegrityError as exc:
            raise DuplicateMemberError(dni) from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"Member update failed: {exc}") from exc
        if result.rowcount == 0:
            return None
        return Member(id=member_id, full_name=full_name, dni=dni)

    def delete(self, member_id: str) -> Optional[Member]:
        with self._engine.begin() as conn:
            row = conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM members WHERE id = :id"), {"id": member_id}
            ).fetchone()
            if not row:
                return None
            conn.execute(text("DELETE FROM members WHERE id = :id"), {"id": member_id})
        return _row_to_member(row)

    # ── Read ───────────────────────────────────────────────────────────

    def get(self, member_id: str) -> Optional[Member]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM members WHERE id = :id"), {"id": member_id}
            ).fetchone()
        return _row_to_member(row) if row else None

    def find_by_dni(self, dni: str) -> Optional[Member]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM members WHERE dni = :dni"), {"dni": dni}
            ).fetchone()
        return _row_to_member(row) if row else None

    def find_existing(self, dnis: List[str]) -> List[Member]:
        stmt = text(f"SELECT {MEMBER_COLS} FROM members WHERE dni IN :dnis").bindparams(
            bindparam("dnis", expanding=True)
        )
        found: List[Member] = []
        try:
            with self._engine.connect() as conn:
                for start in range(0, len(dnis), LOOKUP_CHUNK):
                    chunk = dnis[start:start + LOOKUP_CHUNK]
                    found.extend(_row_to_member(r) for r in conn.execute(stmt, {"dnis": chunk}))
        except SQLAlchemyError as exc:
            raise StoreError(f"Member lookup failed: {exc}") from exc
        return found

    def list_members(self, query: Optional[str] = None, page: int = 1, per_page: int = 10,
                     sort_by: str = "full_name",
                     sort_order: str = "asc") -> Tuple[int, List[Member]]:
        where = ""
        params: Dict[str, Any] = {}
        if query:
            where = (" WHERE LOWER(full_name) LIKE :prefix ESCAPE '\\'"
                     " OR dni LIKE :contains ESCAPE '\\'")
            escaped = _escape_like(query.strip())
            params["prefix"] = f"{escaped.lower()}%"
            params["contains"] = f"%{escaped}%"
        column = SORTABLE_COLUMNS.get(sort_by, "full_name")
        direction = "DESC" if sort_order == "desc" else "ASC"

        with self._engine.connect() as conn:
            total = conn.execute(text(f"SELECT COUNT(*) FROM members{where}"), params).scalar()
            params["limit"] = per_page
            params["offset"] = (page - 1) * per_page
            rows = conn.execute(
                text(f"SELECT {MEMBER_COLS} FROM members{where} "
                     f"ORDER BY {column} {direction}, id {direction} LIMIT :limit OFFSET :offset"),
                params,
            ).fetchall()
        return total or 0, [_row_to_member(r) for r in rows]

    def count(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM members")).scalar() or 0

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))


class InMemoryMemberRepository:
    """In-memory member store with the same contract as MemberRepository."""

    def __init__(self) -> None:
        self._by_id: dict[str, Member] = {}
        self._by_dni: dict[str, str] = {}
        self._lock = threading.Lock()

    # ── Write ──

    def insert_one(self, full_name: str, dni: str) -> InsertOutcome:
        with self._lock:
            if dni in self._by_dni:
                return DuplicateKey(dni)
            member = Member(id=str(uuid.uuid4()), full_name=full_name, dni=dni)
            self._by_id[member.id] = member
            self._by_dni[dni] = member.id
        return Inserted(member)

    def insert_many(self, docs: list[dict[str, str]]) -> BulkWriteResult:
        errors: list[WriteError] = []
        inserted = 0
        for i, doc in enumerate(docs):
            outcome = self.insert_one(doc["full_name"], doc["dni"])
            if isinstance(outcome, Inserted):
                inserted += 1
            else:
                errors.append(WriteError(
                    index=i, duplicate_key=True,
                    message=f"duplicate key value violates unique constraint: dni={doc['dni']}",
                ))
        return BulkWriteResult(inserted_count=inserted, write_errors=errors)

    def update(self, member_id: str, full_name: str, dni: str) -> Optional[Member]:
        with self._lock:
            current = self._by_id.get(member_id)
            if current is None:
                return None
            owner = self._by_dni.get(dni)
            if owner is not None and owner != member_id:
                raise DuplicateMemberError(dni)
            del self._by_dni[current.dni]
            member = Member(id=member_id, full_name=full_name, dni=dni)
            self._by_id[member_id] = member
            self._by_dni[dni] = member_id
        return member

    def delete(self, member_id: str) -> Optional[Member]:
        with self._lock:
            member = self._by_id.pop(member_id, None)
            if member is not None:
                del self._by_dni[member.dni]
        return member

    # ── Read ──

    def get(self, member_id: str) -> Optional[Member]:
        return self._by_id.get(member_id)

    def find_by_dni(self, dni: str) -> Optional[Member]:
        member_id = self._by_dni.get(dni)
        return self._by_id.get(member_id) if member_id else None

    def find_existing(self, dnis: list[str]) -> list[Member]:
        return [m for m in (self.find_by_dni(d) for d in dict.fromkeys(dnis)) if m]

    def list_members(self, query: Optional[str] = None, page: int = 1, per_page: int = 10,
                     sort_by: str = "full_name",
                     sort_order: str = "asc") -> tuple[int, list[Member]]:
        result = list(self._by_id.values())
        if query:
            q = query.strip()
            result = [m for m in result
                      if m.full_name.lower().startswith(q.lower()) or q in m.dni]
        column = SORTABLE_COLUMNS.get(sort_by, "full_name")
        result.sort(key=lambda m: (getattr(m, column), m.id), reverse=sort_order == "desc")
        start = (page - 1) * per_page
        return len(result), result[start:start + per_page]

    def count(self) -> int:
        return len(self._by_id)

    def verify_connection(self):
        return True

    # ── Bulk / internal ──

    def clear(self) -> None:
        with self._lock:
            self._by_id.clear()
            self._by_dni.clear()
