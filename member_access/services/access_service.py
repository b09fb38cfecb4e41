# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: access gate.

Per request:
    lookup member ─► not found ──────────────► DENIED (nothing logged)
                 └► last access ─► none ─────► GRANTED (logged)
                                 ├► too recent ► DENIED (nothing logged)
                                 └► old enough ► GRANTED (logged)
"""
from datetime import datetime, timedelta, timezone
from typing import Callable

from member_access.core.logging import get_logger
from member_access.metrics import ACCESS_DECISIONS
from member_access.models.domain import AccessDecision
from member_access.repositories.contracts import AccessLogStore, MemberStore
from member_access.services.identity import normalize_dni

logger = get_logger(__name__)

DENIED_TITLE = "Acceso Denegado"
GRANTED_TITLE = "Acceso Permitido"
GRANTED_SUBTITLE = "Acceso registrado con éxito"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccessService:
    def __init__(self, members: MemberStore, access_log: AccessLogStore,
                 threshold_minutes: int, clock: Callable[[], datetime] = utcnow):
        if threshold_minutes < 0:
            raise ValueError("threshold_minutes must be >= 0")
        self._members = members
        self._log = access_log
        self._threshold_minutes = threshold_minutes
        self._threshold = timedelta(minutes=threshold_minutes)
        self._clock = clock

    def evaluate_access(self, dni) -> AccessDecision:
        key = normalize_dni(dni)
        member = self._members.find_by_dni(key) if key else None
        if member is None:
            ACCESS_DECISIONS.labels(outcome="unknown_member").inc()
            logger.info("Access denied, unknown dni=%s", dni)
            return AccessDecision(
                granted=False, title=DENIED_TITLE,
                subtitle=f"Socio no encontrado con el DNI: {dni}",
            )

        now = self._clock()
        last = self._log.most_recent(member.dni)
        if last is not None and now - last.created_at < self._threshold:
            ACCESS_DECISIONS.labels(outcome="cooldown").inc()
            logger.info("Access denied, cooldown active dni=%s last=%s",
                        member.dni, last.created_at.isoformat())
            # The configured threshold is reported, not the time left
            return AccessDecision(
                granted=False, title=DENIED_TITLE,
                subtitle=("Ya registraste un acceso recientemente, "
                          f"debes esperar {self._threshold_minutes} minutos"),
                member=member,
            )

        self._log.append(member.dni, now)
        ACCESS_DECISIONS.labels(outcome="granted").inc()
        logger.info("Access granted dni=%s", member.dni)
        return AccessDecision(
            granted=True, title=GRANTED_TITLE, subtitle=GRANTED_SUBTITLE, member=member,
        )
