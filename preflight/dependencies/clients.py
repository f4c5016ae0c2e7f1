"""
Factory functions providing the data-store clients and the engine as shared
FastAPI dependencies.
"""

from datetime import datetime
from functools import lru_cache
from typing import Callable

from preflight.clients import SQLiteSnapshotStore, SupabaseRestClient, SupabaseSnapshotTable
from preflight.core.config import get_settings
from preflight.engine import PreFlightEngine
from preflight.services import LiveSnapshotAssembler, SnapshotBackend, SnapshotStore, SourceReaders


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


def get_clock() -> Callable[[], datetime]:
    """Clock bound to the configured analysis timezone."""
    return _settings().analysis.now


@lru_cache()
def get_supabase_client() -> SupabaseRestClient:
    """Provide the PostgREST client."""
    return SupabaseRestClient(_settings().supabase)


@lru_cache()
def get_snapshot_backend() -> SnapshotBackend:
    """Select where analysis snapshots are persisted."""
    analysis = _settings().analysis
    if analysis.snapshot_backend == "sqlite":
        return SQLiteSnapshotStore(analysis.sqlite_path, table=analysis.snapshot_table)
    return SupabaseSnapshotTable(get_supabase_client(), table=analysis.snapshot_table)


@lru_cache()
def get_snapshot_store() -> SnapshotStore:
    """Provide the analysis cache and store."""
    return SnapshotStore(
        get_snapshot_backend(),
        ttl_hours=_settings().analysis.cache_ttl_hours,
        clock=get_clock(),
    )


@lru_cache()
def get_live_snapshot_assembler() -> LiveSnapshotAssembler:
    """Provide the live snapshot assembler over the Supabase readers."""
    return LiveSnapshotAssembler(SourceReaders(get_supabase_client()), clock=get_clock())


@lru_cache()
def get_preflight_engine() -> PreFlightEngine:
    """Provide the executive analytics engine."""
    return PreFlightEngine(
        get_live_snapshot_assembler(),
        get_snapshot_store(),
        clock=get_clock(),
        currency=_settings().analysis.currency,
    )


__all__ = [
    "get_clock",
    "get_live_snapshot_assembler",
    "get_preflight_engine",
    "get_snapshot_backend",
    "get_snapshot_store",
    "get_supabase_client",
]
