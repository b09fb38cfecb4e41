# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: bulk member import.

Turns a batch of untyped row records into members, continuing past any bad
or conflicting row and reporting a disposition for every input row:

    rows ─► candidates ─► partition (invalid / duplicated in file)
         ─► pre-check existing DNIs ─► chunked unordered insert
         ─► interpret write result (re-query when ambiguous)

Every row ends up either in ``inserted`` or in ``failures``.
"""
from typing import Any, Mapping, Sequence

from member_access.core.errors import StoreError
from member_access.core.logging import get_logger
from member_access.metrics import IMPORT_DURATION, IMPORT_ROWS, MEMBERS_TOTAL
from member_access.models.domain import (
    BulkImportResult, BulkWriteResult, DuplicateKey, ImportCandidate, ImportedMember,
    ImportFailure, Inserted, WriteError,
)
from member_access.repositories.contracts import BulkMemberStore, MemberStore
from member_access.services.duplicates import duplicate_counts, failure_for, partition
from member_access.services.identity import DNI_FIELDS, NAME_FIELDS, find_field, normalize_dni

logger = get_logger(__name__)

DUPLICATE_IN_STORE = "DNI duplicado"
AMBIGUOUS_INSERT = "Error al insertar fila (posible conflicto)"
INSERT_ERROR = "Error al insertar fila"

ROW_NUMBER_KEYS = ("rowNumber", "row_number", "sourceRow")


def _row_number(row: Mapping[str, Any], index: int) -> int:
    # Row 1 is the spreadsheet header, so data starts at row 2
    for key in ROW_NUMBER_KEYS:
        value = row.get(key)
        if value in (None, "") or isinstance(value, bool):
            continue
        try:
            number = int(value)
        except (TypeError, ValueError):
            continue
        if number >= 1:
            return number
    return index + 2


def build_candidates(rows: Sequence[Any]) -> list[ImportCandidate]:
    candidates: list[ImportCandidate] = []
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            candidates.append(ImportCandidate(i, i + 2, None, "", ""))
            continue
        raw_dni = find_field(row, DNI_FIELDS)
        name = find_field(row, NAME_FIELDS)
        full_name = str(name).strip() if name is not None else ""
        candidates.append(ImportCandidate(
            original_index=i,
            row_number=_row_number(row, i),
            raw_dni=raw_dni,
            full_name=full_name,
            dni=normalize_dni(raw_dni),
        ))
    return candidates


class BulkImportService:
    """Reconciles a batch of candidate members against the member store."""

    def __init__(self, store: MemberStore, chunk_size: int = 500):
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self._store = store
        self._chunk_size = chunk_size

    def import_rows(self, rows: Sequence[Any]) -> BulkImportResult:
        """Import untyped row records. Never raises for per-row problems."""
        if not isinstance(rows, (list, tuple)) or not rows:
            return BulkImportResult()

        with IMPORT_DURATION.time():
            candidates = build_candidates(rows)
            unique, rejected = partition(candidates)
            result = self.reconcile(unique)

        failures = sorted(rejected + result.failures, key=lambda f: f.index)
        result = BulkImportResult(inserted=result.inserted, failures=failures)

        IMPORT_ROWS.labels(outcome="inserted").inc(len(result.inserted))
        IMPORT_ROWS.labels(outcome="failed").inc(len(result.failures))
        MEMBERS_TOTAL.inc(len(result.inserted))
        repeated = sum(1 for n in duplicate_counts(candidates).values() if n > 1)
        logger.info(
            "Bulk import finished rows=%d inserted=%d failed=%d repeated_dnis=%d",
            len(rows), len(result.inserted), len(result.failures), repeated,
        )
        return result

    def reconcile(self, unique: list[ImportCandidate]) -> BulkImportResult:
        """Persist candidates already free of in-batch duplicates."""
        if not unique:
            return BulkImportResult()
        if not isinstance(self._store, BulkMemberStore):
            return self._insert_sequentially(unique)

        inserted: list[ImportedMember] = []
        failures: list[ImportFailure] = []

        existing = {m.dni for m in self._store.find_existing([c.dni for c in unique])}
        ready: list[ImportCandidate] = []
        for c in unique:
            if c.dni in existing:
                failures.append(failure_for(c, DUPLICATE_IN_STORE))
            else:
                ready.append(c)

        for start in range(0, len(ready), self._chunk_size):
            batch = ready[start:start + self._chunk_size]
            ok, failed = self._insert_chunk(batch)
            inserted.extend(ok)
            failures.extend(failed)

        failures.sort(key=lambda f: f.index)
        return BulkImportResult(inserted=inserted, failures=failures)

    # ── Chunk handling ─────────────────────────────────────────────────

    def _insert_chunk(self, batch: list[ImportCandidate]):
        docs = [{"full_name": c.full_name, "dni": c.dni} for c in batch]
        try:
            outcome = self._store.insert_many(docs)
        except StoreError as exc:
            logger.warning("Bulk insert of %d rows failed, re-querying: %s", len(batch), exc)
            return self._resolve_by_requery(batch, str(exc))

        if outcome.write_errors:
            return self._apply_write_errors(batch, outcome)
        if outcome.inserted_count == len(batch):
            return [_imported(c) for c in batch], []
        logger.warning("Bulk insert reported %d/%d rows without errors, re-querying",
                       outcome.inserted_count, len(batch))
        return self._resolve_by_requery(batch, AMBIGUOUS_INSERT)

    def _apply_write_errors(self, batch: list[ImportCandidate], outcome: BulkWriteResult):
        errors: dict[int, WriteError] = {
            e.index: e for e in outcome.write_errors if 0 <= e.index < len(batch)
        }
        failures = [failure_for(batch[i], _write_error_message(e)) for i, e in errors.items()]
        remaining = [c for i, c in enumerate(batch) if i not in errors]

        if outcome.inserted_count == len(remaining):
            inserted = [_imported(c) for c in remaining]
        else:
            # error list and count disagree: do not assume the rest made it
            inserted, unresolved = self._resolve_by_requery(remaining, AMBIGUOUS_INSERT)
            failures.extend(unresolved)
        failures.sort(key=lambda f: f.index)
        return inserted, failures

    def _resolve_by_requery(self, batch: list[ImportCandidate], message: str):
        """Ask the store which rows of the batch exist now.

        Rows present are reported as inserted, the rest fail with ``message``.
        If the store cannot answer, every row of the batch fails with ``message``.
        A concurrent import of the same DNI is indistinguishable from our own
        write here; the unique index still guarantees a single member.
        """
        if not batch:
            return [], []
        try:
            present = {m.dni for m in self._store.find_existing([c.dni for c in batch])}
        except StoreError as exc:
            logger.error("Re-query of %d rows failed, reporting them as failed: %s", len(batch), exc)
            return [], [failure_for(c, message) for c in batch]
        inserted = [_imported(c) for c in batch if c.dni in present]
        failures = [failure_for(c, message) for c in batch if c.dni not in present]
        return inserted, failures

    # ── Degenerate stores ──────────────────────────────────────────────

    def _insert_sequentially(self, unique: list[ImportCandidate]) -> BulkImportResult:
        inserted: list[ImportedMember] = []
        failures: list[ImportFailure] = []
        for c in unique:
            try:
                outcome = self._store.insert_one(c.full_name, c.dni)
            except StoreError as exc:
                failures.append(failure_for(c, str(exc) or INSERT_ERROR))
                continue
            if isinstance(outcome, Inserted):
                inserted.append(_imported(c))
            elif isinstance(outcome, DuplicateKey):
                failures.append(failure_for(c, DUPLICATE_IN_STORE))
            else:
                failures.append(failure_for(c, outcome.message or INSERT_ERROR))
        return BulkImportResult(inserted=inserted, failures=failures)


def _imported(c: ImportCandidate) -> ImportedMember:
    return ImportedMember(dni=c.dni, full_name=c.full_name)


def _write_error_message(error: WriteError) -> str:
    if error.duplicate_key:
        return DUPLICATE_IN_STORE
    return error.message or INSERT_ERROR
