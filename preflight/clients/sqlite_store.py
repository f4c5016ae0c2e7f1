"""SQLite-backed substitute for the hosted analysis snapshot table."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

_JSON_COLUMNS = ("snapshot_data", "key_metrics", "alerts")


class SQLiteSnapshotStore:
    """One row per ``analysis_date``; writes for an existing date replace it."""

    def __init__(self, db_path: str, table: str = "ai_daily_snapshots") -> None:
        if not table.isidentifier():
            raise ValueError(f"Invalid table name {table!r}")
        self._db_path = Path(db_path)
        self._table = table
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    analysis_date TEXT PRIMARY KEY,
                    generated_at TEXT NOT NULL,
                    snapshot_data TEXT NOT NULL,
                    key_metrics TEXT NOT NULL,
                    alerts TEXT NOT NULL
                )
                """
            )

    async def fetch_for_date(self, analysis_date: date) -> Optional[Dict[str, Any]]:
        return await asyncio.to_thread(self.get_record, analysis_date.isoformat())

    async def fetch_latest(self) -> Optional[Dict[str, Any]]:
        return await asyncio.to_thread(self.get_latest_record)

    async def upsert(self, record: Dict[str, Any]) -> None:
        await asyncio.to_thread(self.put_record, record)

    def put_record(self, record: Dict[str, Any]) -> None:
        analysis_date = record.get("analysis_date")
        generated_at = record.get("generated_at")
        if not analysis_date or not generated_at:
            raise ValueError("Record must include 'analysis_date' and 'generated_at'")

        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO {self._table}
                    (analysis_date, generated_at, snapshot_data, key_metrics, alerts)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(analysis_date) DO UPDATE SET
                    generated_at = excluded.generated_at,
                    snapshot_data = excluded.snapshot_data,
                    key_metrics = excluded.key_metrics,
                    alerts = excluded.alerts
                """,
                (
                    str(analysis_date),
                    str(generated_at),
                    json.dumps(record.get("snapshot_data") or {}),
                    json.dumps(record.get("key_metrics") or {}),
                    json.dumps(record.get("alerts") or []),
                ),
            )

    def get_record(self, analysis_date: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT * FROM {self._table} WHERE analysis_date = ?",
                (analysis_date,),
            ).fetchone()
        return _decode(row)

    def get_latest_record(self) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT * FROM {self._table} ORDER BY analysis_date DESC LIMIT 1"
            ).fetchone()
        return _decode(row)

    def count_records(self) -> int:
        with self._connect() as conn:
            (count,) = conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()
        return count


def _decode(row: sqlite3.Row | None) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    record = dict(row)
    for column in _JSON_COLUMNS:
        record[column] = json.loads(record[column])
    return record


__all__ = ["SQLiteSnapshotStore"]
