"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_clock,
    get_live_snapshot_assembler,
    get_preflight_engine,
    get_snapshot_backend,
    get_snapshot_store,
    get_supabase_client,
)
from .config import get_app_settings

__all__ = [
    "get_app_settings",
    "get_clock",
    "get_live_snapshot_assembler",
    "get_preflight_engine",
    "get_snapshot_backend",
    "get_snapshot_store",
    "get_supabase_client",
]
