# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
DNI normalisation and header resolution for untyped row records.
Pure functions, no I/O.
"""
import math
import re
from typing import Any, Iterable, Mapping, Optional

NAME_FIELDS = ("nombre", "name", "fullname", "full_name", "nombre completo", "nombre_completo")
DNI_FIELDS = ("dni", "documento", "document", "cedula", "rut")

_SEPARATORS = re.compile(r"[.\s-]")


def normalize_dni(raw: Any) -> str:
    """Canonical DNI: the textual value with dots, whitespace and dashes removed.

    Anything that is not a string or a number normalises to "".
    """
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        return ""
    if isinstance(raw, float):
        if not math.isfinite(raw):
            return ""
        # spreadsheets hand back 30123456.0 for numeric cells
        if raw.is_integer():
            raw = int(raw)
    return _SEPARATORS.sub("", str(raw))


def find_field(row: Mapping[str, Any], candidates: Iterable[str]) -> Optional[Any]:
    """Value of the first header matching a candidate, ignoring case.

    Exact (trimmed) matches win; otherwise the first header that contains a
    candidate is used, e.g. "DNI del socio" for "dni".
    """
    candidates = [c.lower().strip() for c in candidates]
    headers = {str(k).lower().strip(): k for k in row.keys()}
    for c in candidates:
        if c in headers:
            return row[headers[c]]
    for key in row.keys():
        lowered = str(key).lower()
        for c in candidates:
            if c in lowered:
                return row[key]
    return None
