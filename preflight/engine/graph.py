"""
LangGraph workflow that produces and persists one executive analysis.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from langgraph.graph import END, START, StateGraph

from preflight.services.ceo_analysis import compute_ceo_analysis
from preflight.services.live_snapshot import LiveSnapshotAssembler
from preflight.services.snapshot_store import SnapshotStore
from preflight.engine.models import GenerationState


async def _fetch_live_data(
    state: GenerationState, assembler: LiveSnapshotAssembler
) -> GenerationState:
    """Assemble the live snapshot from every source."""
    state["live"] = await assembler.fetch_all_live_data(state.get("query", ""))
    return state


async def _load_previous(state: GenerationState, store: SnapshotStore) -> GenerationState:
    """Fetch the most recent persisted analysis for trend comparison."""
    state["previous"] = await store.get_previous_snapshot()
    return state


async def _compute_analysis(
    state: GenerationState,
    clock: Callable[[], datetime],
    currency: str,
) -> GenerationState:
    """Run the rule-based analysis over the live snapshot."""
    previous = state.get("previous")
    state["analysis"] = compute_ceo_analysis(
        state["live"],
        previous.model_dump(mode="json") if previous else None,
        now=clock(),
        currency=currency,
    )
    return state


async def _save_analysis(state: GenerationState, store: SnapshotStore) -> GenerationState:
    """Upsert the analysis for today's date."""
    state["saved"] = await store.save_analysis(state["analysis"])
    return state


def create_generation_graph(
    assembler: LiveSnapshotAssembler,
    store: SnapshotStore,
    *,
    clock: Callable[[], datetime],
    currency: str = "LKR",
) -> Any:
    """Compile and return the generation workflow."""
    graph = StateGraph(GenerationState)

    async def fetch_live_data_node(state: GenerationState) -> GenerationState:
        return await _fetch_live_data(state, assembler)

    async def load_previous_node(state: GenerationState) -> GenerationState:
        return await _load_previous(state, store)

    async def compute_analysis_node(state: GenerationState) -> GenerationState:
        return await _compute_analysis(state, clock, currency)

    async def save_analysis_node(state: GenerationState) -> GenerationState:
        return await _save_analysis(state, store)

    graph.add_node("fetch_live_data", fetch_live_data_node)
    graph.add_node("load_previous", load_previous_node)
    graph.add_node("compute_analysis", compute_analysis_node)
    graph.add_node("save_analysis", save_analysis_node)

    graph.add_edge(START, "fetch_live_data")
    graph.add_edge("fetch_live_data", "load_previous")
    graph.add_edge("load_previous", "compute_analysis")
    graph.add_edge("compute_analysis", "save_analysis")
    graph.add_edge("save_analysis", END)
    return graph.compile()


__all__ = ["create_generation_graph"]
