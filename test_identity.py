"""
Identity normalisation, header resolution and in-batch duplicate detection.

Run:  pytest test_identity.py -v
"""
import pytest

from member_access.models.domain import ImportCandidate
from member_access.services.duplicates import (
    DUPLICATE_IN_FILE, INVALID_ROW, duplicate_counts, partition,
)
from member_access.services.identity import DNI_FIELDS, NAME_FIELDS, find_field, normalize_dni


def _candidate(index, dni, name="Alice"):
    return ImportCandidate(
        original_index=index, row_number=index + 2, raw_dni=dni,
        full_name=name, dni=normalize_dni(dni),
    )


# ============================================
# normalize_dni
# ============================================
class TestNormalizeDni:
    @pytest.mark.parametrize("raw,expected", [
        ("30.123.456", "30123456"),
        ("30 123 456", "30123456"),
        ("30-123-456", "30123456"),
        (" 30.123-456 ", "30123456"),
        ("30\t123\n456", "30123456"),
        (30123456, "30123456"),
        (30123456.0, "30123456"),
        ("AB-123", "AB123"),
    ])
    def test_strips_separators(self, raw, expected):
        assert normalize_dni(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", " . - ", True, [], {}, object(), float("nan")])
    def test_absent_or_unsupported_is_empty(self, raw):
        assert normalize_dni(raw) == ""

    @pytest.mark.parametrize("raw", ["30.123.456", "12 34-5", 987654, "x.y z"])
    def test_idempotent(self, raw):
        once = normalize_dni(raw)
        assert normalize_dni(once) == once


# ============================================
# find_field
# ============================================
class TestFindField:
    def test_exact_match_ignores_case_and_spaces(self):
        row = {" Nombre ": "Alice", "DNI": "123"}
        assert find_field(row, NAME_FIELDS) == "Alice"
        assert find_field(row, DNI_FIELDS) == "123"

    def test_camel_case_full_name(self):
        assert find_field({"fullName": "Bob"}, NAME_FIELDS) == "Bob"

    def test_candidate_order_wins_over_row_order(self):
        row = {"name": "second", "nombre": "first"}
        assert find_field(row, NAME_FIELDS) == "first"

    def test_exact_match_preferred_over_contains(self):
        row = {"DNI del tutor": "999", "dni": "123"}
        assert find_field(row, DNI_FIELDS) == "123"

    def test_loose_contains_match(self):
        row = {"Numero de Documento": "30.111.222"}
        assert find_field(row, DNI_FIELDS) == "30.111.222"

    def test_missing_returns_none(self):
        assert find_field({"email": "a@b.c"}, DNI_FIELDS) is None

    def test_empty_row(self):
        assert find_field({}, NAME_FIELDS) is None


# ============================================
# partition
# ============================================
class TestPartition:
    def test_first_occurrence_kept(self):
        cands = [_candidate(0, "123", "Alice"), _candidate(1, "123", "Bob"), _candidate(2, "456", "Charlie")]
        unique, rejected = partition(cands)
        assert [c.full_name for c in unique] == ["Alice", "Charlie"]
        assert len(rejected) == 1
        assert rejected[0].full_name == "Bob"
        assert rejected[0].row_number == 3
        assert rejected[0].message == DUPLICATE_IN_FILE

    def test_key_repeated_n_times(self):
        cands = [_candidate(i, "1.2.3") for i in range(5)]
        unique, rejected = partition(cands)
        assert len(unique) == 1
        assert unique[0].original_index == 0
        assert [f.row_number for f in rejected] == [3, 4, 5, 6]
        assert all(f.message == DUPLICATE_IN_FILE for f in rejected)

    def test_separator_variants_are_the_same_key(self):
        unique, rejected = partition([_candidate(0, "30.123.456"), _candidate(1, "30123456")])
        assert len(unique) == 1
        assert rejected[0].index == 1

    def test_invalid_rows_rejected_and_not_counted(self):
        cands = [
            _candidate(0, "123", "   "),    # blank name, same key as row 1
            _candidate(1, "123", "Alice"),
            _candidate(2, None, "Bob"),
        ]
        unique, rejected = partition(cands)
        assert [c.original_index for c in unique] == [1]
        assert [(f.index, f.message) for f in rejected] == [(0, INVALID_ROW), (2, INVALID_ROW)]

    def test_every_candidate_accounted(self):
        cands = [_candidate(i, str(i % 3), "X" if i % 4 else "") for i in range(12)]
        unique, rejected = partition(cands)
        assert len(unique) + len(rejected) == len(cands)

    def test_duplicate_counts_skip_invalid(self):
        cands = [_candidate(0, "1"), _candidate(1, "1"), _candidate(2, "1", ""), _candidate(3, "2")]
        assert duplicate_counts(cands) == {"1": 2, "2": 1}
