"""
Fail-open readers for the portal tables consumed by the analytics engine.

Each reader wraps exactly one remote read. A failure of any kind is logged
and converted to the reader's neutral value (``[]`` or ``None``) so a single
unreachable table never blocks the rest of the snapshot.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, TypeVar

from preflight.schemas import Record

logger = logging.getLogger(__name__)

T = TypeVar("T")

ATTENDANCE_LIMIT = 500
WORKER_IDENTITY = "worker:workers(id,fullName,role)"


class TableReader(Protocol):
    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Dict[str, Any] | None = None,
        order: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
    ) -> List[Record]: ...


def fail_open(
    source: str, default: Callable[[], T]
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Convert any exception raised by a reader into ``default()``."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as exc:
                logger.warning(
                    "%s fetch failed, using neutral default: %s",
                    source,
                    exc,
                    extra={"source": source},
                )
                return default()

        return wrapper

    return decorator


class SourceReaders:
    """The twelve data sources behind a live snapshot."""

    def __init__(self, client: TableReader) -> None:
        self._client = client

    async def _rows(self, table: str, **query: Any) -> List[Record]:
        return await self._client.select(table, **query) or []

    async def _latest(self, table: str, order: str) -> Optional[Record]:
        rows = await self._client.select(table, order=order, ascending=False, limit=1)
        return rows[0] if rows else None

    @fail_open("workers", list)
    async def fetch_workers(self) -> List[Record]:
        return await self._rows("workers", order="createdAt", ascending=False)

    @fail_open("attendance", list)
    async def fetch_attendance(self) -> List[Record]:
        return await self._rows(
            "attendances",
            columns=f"*,{WORKER_IDENTITY}",
            order="date",
            ascending=False,
            limit=ATTENDANCE_LIMIT,
        )

    @fail_open("projects", list)
    async def fetch_projects(self) -> List[Record]:
        return await self._rows("projects", order="createdAt", ascending=False, limit=50)

    @fail_open("materials", list)
    async def fetch_materials(self) -> List[Record]:
        return await self._rows("materials", limit=100)

    @fail_open("suppliers", list)
    async def fetch_suppliers(self) -> List[Record]:
        return await self._rows("suppliers", order="createdAt", ascending=False, limit=50)

    @fail_open("clients", list)
    async def fetch_clients(self) -> List[Record]:
        return await self._rows("clients", order="created_at", ascending=False, limit=50)

    @fail_open("finance snapshot", lambda: None)
    async def fetch_finance(self) -> Optional[Record]:
        return await self._latest("finance_snapshot_daily", order="snapshot_date")

    @fail_open("system snapshot", lambda: None)
    async def fetch_system_snapshot(self) -> Optional[Record]:
        return await self._latest("system_snapshot_daily", order="snapshot_date")

    @fail_open("leave requests", list)
    async def fetch_leave_requests(self) -> List[Record]:
        return await self._rows(
            "leave_requests", order="created_at", ascending=False, limit=50
        )

    @fail_open("incidents", list)
    async def fetch_incidents(self) -> List[Record]:
        return await self._rows("incidents", order="created_at", ascending=False, limit=30)

    @fail_open("daily reports", list)
    async def fetch_daily_reports(self) -> List[Record]:
        return await self._rows(
            "daily_reports", order="created_at", ascending=False, limit=30
        )

    @fail_open("holidays", list)
    async def fetch_holidays(self) -> List[Record]:
        return await self._rows("holidays", order="holiday_date", ascending=True)


__all__ = ["SourceReaders", "TableReader", "fail_open"]
