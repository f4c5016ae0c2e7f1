"""
Facade over the live snapshot, the analysis cache and the generation workflow.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from preflight.schemas import CEOAnalysis, LiveSnapshot
from preflight.services.live_snapshot import LiveSnapshotAssembler
from preflight.services.snapshot_store import SnapshotStore
from preflight.engine.graph import create_generation_graph

logger = logging.getLogger(__name__)


class PreFlightEngine:
    """Executive analytics entry point.

    ``get_ceo_analysis`` walks three states in order: a fresh cached analysis,
    a newly generated one, and finally the raw live snapshot when generation
    fails. Callers tell them apart by ``isCached`` and ``key_metrics``.
    """

    def __init__(
        self,
        assembler: LiveSnapshotAssembler,
        store: SnapshotStore,
        *,
        clock: Callable[[], datetime] | None = None,
        currency: str = "LKR",
    ) -> None:
        self._assembler = assembler
        self._store = store
        self._graph = create_generation_graph(
            assembler,
            store,
            clock=clock or (lambda: datetime.now(timezone.utc)),
            currency=currency,
        )

    async def fetch_all_live_data(self, query: str = "") -> LiveSnapshot:
        return await self._assembler.fetch_all_live_data(query)

    async def generate_hourly_analysis(self) -> Optional[CEOAnalysis]:
        """Fetch, compare, compute and save; ``None`` if any step raised."""
        logger.info("Generating new CEO-level analysis")
        try:
            final_state = await self._graph.ainvoke({"query": ""})
        except Exception:
            logger.exception("Analysis generation failed")
            return None

        analysis: CEOAnalysis = final_state["analysis"]
        logger.info(
            "CEO analysis generated",
            extra={
                "analysis_date": analysis.analysis_date.isoformat(),
                "saved": final_state.get("saved", False),
            },
        )
        return analysis

    async def get_ceo_analysis(self, force_refresh: bool = False) -> Dict[str, Any]:
        if not force_refresh:
            cached = await self._store.get_cached_analysis()
            if cached is not None:
                logger.info("Using cached CEO analysis")
                return cached.to_payload()

        analysis = await self.generate_hourly_analysis()
        if analysis is not None:
            return analysis.to_payload()

        logger.warning("Falling back to live data without analytics")
        live = await self._assembler.fetch_all_live_data()
        return live.to_payload()


__all__ = ["PreFlightEngine"]
