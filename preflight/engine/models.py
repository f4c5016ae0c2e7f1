"""
State shared across the analysis generation workflow.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from preflight.schemas import CEOAnalysis, LiveSnapshot, PersistedSnapshot


class GenerationState(TypedDict, total=False):
    """State tracked inside the LangGraph workflow."""

    query: str
    live: LiveSnapshot
    previous: Optional[PersistedSnapshot]
    analysis: CEOAnalysis
    saved: bool


__all__ = ["GenerationState"]
