# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Validation and in-batch duplicate detection for bulk imports.

Invalid rows are rejected before counting. For a DNI that repeats inside the
batch the first occurrence is kept and every later one is rejected, so at
least one representative reaches the store.
"""
from member_access.models.domain import ImportCandidate, ImportFailure

INVALID_ROW = "Fila inválida: nombre o DNI faltante"
DUPLICATE_IN_FILE = "DNI duplicado en archivo"


def failure_for(candidate: ImportCandidate, message: str) -> ImportFailure:
    return ImportFailure(
        index=candidate.original_index,
        row_number=candidate.row_number,
        dni=candidate.dni or None,
        full_name=candidate.full_name or None,
        message=message,
    )


def partition(candidates: list[ImportCandidate]) -> tuple[list[ImportCandidate], list[ImportFailure]]:
    """Split candidates into (unique, rejected), both in input order."""
    unique: list[ImportCandidate] = []
    rejected: list[ImportFailure] = []
    first_seen: dict[str, int] = {}
    for candidate in candidates:
        if not candidate.dni or not candidate.full_name.strip():
            rejected.append(failure_for(candidate, INVALID_ROW))
            continue
        if candidate.dni in first_seen:
            rejected.append(failure_for(candidate, DUPLICATE_IN_FILE))
            continue
        first_seen[candidate.dni] = candidate.original_index
        unique.append(candidate)
    return unique, rejected


def duplicate_counts(candidates: list[ImportCandidate]) -> dict[str, int]:
    """Occurrences per DNI among valid candidates; handy for import summaries."""
    counts: dict[str, int] = {}
    for c in candidates:
        if c.dni and c.full_name.strip():
            counts[c.dni] = counts.get(c.dni, 0) + 1
    return counts

