"""Expose constructed client wrappers."""

from .sqlite_store import SQLiteSnapshotStore
from .supabase_rest import SupabaseError, SupabaseRestClient, SupabaseSnapshotTable

__all__ = [
    "SQLiteSnapshotStore",
    "SupabaseError",
    "SupabaseRestClient",
    "SupabaseSnapshotTable",
]
