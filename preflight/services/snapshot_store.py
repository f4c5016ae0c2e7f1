"""
Read-through cache and idempotent persistence for executive analyses.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Protocol

from pydantic import ValidationError

from preflight.schemas import CEOAnalysis, PersistedSnapshot

logger = logging.getLogger(__name__)


class SnapshotBackend(Protocol):
    """Storage for analysis records keyed by ``analysis_date``."""

    async def fetch_for_date(self, analysis_date: date) -> Optional[Dict[str, Any]]: ...

    async def fetch_latest(self) -> Optional[Dict[str, Any]]: ...

    async def upsert(self, record: Dict[str, Any]) -> None: ...


class SnapshotStore:
    """Cache lookups, previous-analysis reads and upserts.

    Reads never raise: a failed or malformed lookup is a miss. Writes log and
    swallow their errors so a freshly computed analysis is still returned
    even if it cannot be cached.
    """

    def __init__(
        self,
        backend: SnapshotBackend,
        *,
        ttl_hours: float = 1.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._backend = backend
        self._ttl = timedelta(hours=ttl_hours)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_cached_analysis(self) -> Optional[PersistedSnapshot]:
        """Return today's analysis if it is still fresh, else ``None``."""
        now = self._clock()
        try:
            raw = await self._backend.fetch_for_date(now.date())
        except Exception as exc:
            logger.warning("Cached analysis lookup failed: %s", exc)
            return None
        if not raw:
            return None

        snapshot = _parse(raw)
        if snapshot is None or snapshot.generated_at is None:
            return None

        age = now - snapshot.generated_at
        if age > self._ttl:
            logger.info(
                "Cached analysis is stale (%.2f hours old)",
                age.total_seconds() / 3600,
                extra={"analysis_date": snapshot.analysis_date.isoformat()},
            )
            return None
        return snapshot

    async def get_previous_snapshot(self) -> Optional[PersistedSnapshot]:
        """Most recent persisted analysis by date, regardless of freshness."""
        try:
            raw = await self._backend.fetch_latest()
        except Exception as exc:
            logger.warning("Previous analysis lookup failed: %s", exc)
            return None
        return _parse(raw) if raw else None

    async def save_analysis(self, analysis: CEOAnalysis) -> bool:
        """Upsert the analysis for its date; returns whether the write succeeded."""
        record = analysis.to_record()
        record["generated_at"] = self._clock().isoformat()
        try:
            await self._backend.upsert(record)
        except Exception:
            logger.exception(
                "Failed to save analysis",
                extra={"analysis_date": record["analysis_date"]},
            )
            return False
        return True


def _parse(raw: Dict[str, Any]) -> Optional[PersistedSnapshot]:
    try:
        return PersistedSnapshot.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Ignoring malformed analysis record: %s", exc)
        return None


__all__ = ["SnapshotBackend", "SnapshotStore"]
