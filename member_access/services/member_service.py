# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for the member roster (single-record operations)."""
import math
from typing import Any, Dict, Optional

from member_access.core.errors import DuplicateMemberError, StoreError
from member_access.core.logging import get_logger
from member_access.metrics import MEMBERS_TOTAL
from member_access.models.domain import DuplicateKey, Inserted, Member
from member_access.services.identity import normalize_dni

logger = get_logger(__name__)


def _clean(full_name: str, dni: Any) -> tuple[str, str]:
    name = (full_name or "").strip()
    key = normalize_dni(dni)
    if not name or not key:
        raise ValueError("full_name and dni are required")
    return name, key


class MemberService:
    def __init__(self, repo):
        self._repo = repo

    def seed_gauges(self):
        MEMBERS_TOTAL.set(self._repo.count())
        logger.info("Prometheus gauges loaded from store")

    def create(self, full_name: str, dni: Any) -> Member:
        name, key = _clean(full_name, dni)
        outcome = self._repo.insert_one(name, key)
        if isinstance(outcome, DuplicateKey):
            raise DuplicateMemberError(key)
        if not isinstance(outcome, Inserted):
            raise StoreError(outcome.message)
        MEMBERS_TOTAL.inc()
        logger.info("Member created id=%s dni=%s", outcome.member.id, key)
        return outcome.member

    def get(self, member_id: str) -> Member:
        member = self._repo.get(member_id)
        if member is None:
            raise KeyError(f"Member #{member_id} not found")
        return member

    def search_by_dni(self, dni: Any) -> Member:
        key = normalize_dni(dni)
        member = self._repo.find_by_dni(key) if key else None
        if member is None:
            raise KeyError(f"Socio no encontrado con el DNI: {dni}")
        return member

    def list_members(self, query: Optional[str] = None, page: int = 1, per_page: int = 10,
                     sort_by: str = "full_name", sort_order: str = "asc") -> Dict[str, Any]:
        total, members = self._repo.list_members(query, page, per_page, sort_by, sort_order)
        return {
            "data": members,
            "total": total,
            "pages": math.ceil(total / per_page) if per_page else 0,
            "current_page": page,
        }

    def update(self, member_id: str, full_name: str, dni: Any) -> Member:
        name, key = _clean(full_name, dni)
        member = self._repo.update(member_id, name, key)
        if member is None:
            raise KeyError(f"Member #{member_id} not found")
        logger.info("Member updated id=%s dni=%s", member_id, key)
        return member

    def delete(self, member_id: str) -> Member:
        member = self._repo.delete(member_id)
        if member is None:
            raise KeyError(f"Member #{member_id} not found")
        MEMBERS_TOTAL.dec()
        logger.info("Member deleted id=%s dni=%s", member_id, member.dni)
        return member
