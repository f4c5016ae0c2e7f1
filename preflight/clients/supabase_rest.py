"""Async client for the Supabase PostgREST interface."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Mapping, Optional

import httpx

from preflight.core.config import SupabaseSettings
from preflight.utils.http import RetryConfig, request_with_retry


class SupabaseError(Exception):
    """Raised when PostgREST rejects a request or returns an unexpected body."""

    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.table = table
        self.status_code = status_code


class SupabaseRestClient:
    """Minimal table reads and upserts against ``/rest/v1``."""

    def __init__(
        self,
        settings: SupabaseSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._retry = RetryConfig(
            attempts=settings.retry_attempts,
            backoff_seconds=settings.retry_backoff_seconds,
        )

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self._settings.key,
            "Authorization": f"Bearer {self._settings.key}",
            "Accept": "application/json",
        }

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        """Read rows from ``table``; ``filters`` are equality matches."""
        params: Dict[str, str] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = f"{order}.{'asc' if ascending else 'desc'}"
        if limit is not None:
            params["limit"] = str(limit)

        response = await self._send("GET", table, params=params)
        payload = response.json()
        if not isinstance(payload, list):
            raise SupabaseError(
                f"Expected a list of rows from {table}, got {type(payload).__name__}",
                table=table,
                status_code=response.status_code,
            )
        return payload

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order: str | None = None,
        ascending: bool = True,
    ) -> Optional[Dict[str, Any]]:
        """Return the first row matching the query, or ``None``."""
        rows = await self.select(
            table,
            columns=columns,
            filters=filters,
            order=order,
            ascending=ascending,
            limit=1,
        )
        return rows[0] if rows else None

    async def upsert(
        self,
        table: str,
        rows: Dict[str, Any] | List[Dict[str, Any]],
        *,
        on_conflict: str,
    ) -> None:
        """Insert ``rows``, merging into existing rows that collide on ``on_conflict``."""
        await self._send(
            "POST",
            table,
            params={"on_conflict": on_conflict},
            json=rows,
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    async def _send(self, method: str, table: str, **kwargs: Any) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self._settings.rest_url,
            headers=self._headers,
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                return await request_with_retry(
                    client.request,
                    method,
                    f"/{table}",
                    retry_config=self._retry,
                    **kwargs,
                )
            except httpx.HTTPStatusError as exc:
                raise SupabaseError(
                    _error_message(exc.response),
                    table=table,
                    status_code=exc.response.status_code,
                ) from exc


class SupabaseSnapshotTable:
    """Analysis snapshot persistence on the hosted table."""

    def __init__(self, client: SupabaseRestClient, table: str = "ai_daily_snapshots") -> None:
        self._client = client
        self._table = table

    async def fetch_for_date(self, analysis_date: date) -> Optional[Dict[str, Any]]:
        return await self._client.select_one(
            self._table,
            filters={"analysis_date": analysis_date.isoformat()},
            order="generated_at",
            ascending=False,
        )

    async def fetch_latest(self) -> Optional[Dict[str, Any]]:
        return await self._client.select_one(
            self._table,
            columns="analysis_date,generated_at,snapshot_data,key_metrics",
            order="analysis_date",
            ascending=False,
        )

    async def upsert(self, record: Dict[str, Any]) -> None:
        await self._client.upsert(self._table, record, on_conflict="analysis_date")


def _error_message(response: httpx.Response) -> str:
    """Pull the PostgREST error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text[:200]}"
    if isinstance(body, dict):
        message = body.get("message") or body.get("error") or body.get("hint")
        if message:
            return f"HTTP {response.status_code}: {message}"
    return f"HTTP {response.status_code}"


__all__ = ["SupabaseError", "SupabaseRestClient", "SupabaseSnapshotTable"]
