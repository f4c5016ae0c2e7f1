try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import date, datetime, timedelta, timezone

import pytest

from preflight.clients import SQLiteSnapshotStore
from preflight.schemas import LiveSnapshot
from preflight.services import SnapshotStore, compute_ceo_analysis

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class MemoryBackend:
    def __init__(self, records: dict[str, dict] | None = None) -> None:
        self.records = dict(records or {})
        self.upserts: list[dict] = []

    async def fetch_for_date(self, analysis_date: date):
        return self.records.get(analysis_date.isoformat())

    async def fetch_latest(self):
        if not self.records:
            return None
        return self.records[max(self.records)]

    async def upsert(self, record: dict) -> None:
        self.upserts.append(record)
        self.records[record["analysis_date"]] = record


class BrokenBackend:
    async def fetch_for_date(self, analysis_date: date):
        raise RuntimeError("snapshot table unavailable")

    async def fetch_latest(self):
        raise RuntimeError("snapshot table unavailable")

    async def upsert(self, record: dict) -> None:
        raise RuntimeError("permission denied for table ai_daily_snapshots")


def _record(stamp: datetime, **overrides) -> dict:
    record = {
        "analysis_date": stamp.date().isoformat(),
        "generated_at": stamp.isoformat(),
        "snapshot_data": {"workers": [{"id": 1}]},
        "key_metrics": {"workers": {"total": 1}},
        "alerts": [],
    }
    record.update(overrides)
    return record


def _analysis(workers: int = 1):
    live = LiveSnapshot(workers=[{"id": index} for index in range(workers)])
    return compute_ceo_analysis(live, None, now=NOW)


@pytest.mark.asyncio
async def test_cached_analysis_is_fresh_within_ttl() -> None:
    backend = MemoryBackend({"2026-10-19": _record(NOW - timedelta(minutes=59))})
    store = SnapshotStore(backend, ttl_hours=1, clock=lambda: NOW)

    cached = await store.get_cached_analysis()

    assert cached is not None
    payload = cached.to_payload()
    assert payload["isCached"] is True
    assert payload["workers"] == [{"id": 1}]
    assert payload["key_metrics"] == {"workers": {"total": 1}}


@pytest.mark.asyncio
async def test_cached_analysis_older_than_ttl_is_a_miss() -> None:
    backend = MemoryBackend({"2026-10-19": _record(NOW - timedelta(minutes=61))})
    store = SnapshotStore(backend, ttl_hours=1, clock=lambda: NOW)

    assert await store.get_cached_analysis() is None


@pytest.mark.asyncio
async def test_cache_only_considers_todays_record() -> None:
    yesterday = NOW - timedelta(days=1)
    backend = MemoryBackend({"2026-10-18": _record(yesterday)})
    store = SnapshotStore(backend, clock=lambda: NOW)

    assert await store.get_cached_analysis() is None
    previous = await store.get_previous_snapshot()
    assert previous is not None
    assert previous.analysis_date == date(2026, 10, 18)


@pytest.mark.asyncio
async def test_naive_timestamps_are_read_as_utc() -> None:
    naive = (NOW - timedelta(minutes=10)).replace(tzinfo=None)
    backend = MemoryBackend({"2026-10-19": _record(NOW, generated_at=naive.isoformat())})
    store = SnapshotStore(backend, clock=lambda: NOW)

    cached = await store.get_cached_analysis()

    assert cached is not None
    assert cached.generated_at.tzinfo is not None


@pytest.mark.asyncio
async def test_null_columns_become_empty_values() -> None:
    backend = MemoryBackend(
        {"2026-10-19": _record(NOW, snapshot_data=None, key_metrics=None, alerts=None)}
    )
    store = SnapshotStore(backend, clock=lambda: NOW)

    cached = await store.get_cached_analysis()

    assert cached is not None
    assert cached.snapshot_data == {}
    assert cached.key_metrics == {}
    assert cached.alerts == []


@pytest.mark.asyncio
async def test_malformed_record_is_a_miss() -> None:
    backend = MemoryBackend({"2026-10-19": {"analysis_date": "not-a-date"}})
    store = SnapshotStore(backend, clock=lambda: NOW)

    assert await store.get_cached_analysis() is None


@pytest.mark.asyncio
async def test_lookup_failures_are_misses() -> None:
    store = SnapshotStore(BrokenBackend(), clock=lambda: NOW)

    assert await store.get_cached_analysis() is None
    assert await store.get_previous_snapshot() is None


@pytest.mark.asyncio
async def test_save_failure_is_reported_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    store = SnapshotStore(BrokenBackend(), clock=lambda: NOW)

    with caplog.at_level("ERROR"):
        saved = await store.save_analysis(_analysis())

    assert saved is False
    assert "Failed to save analysis" in caplog.text


@pytest.mark.asyncio
async def test_save_stamps_generation_time_from_clock() -> None:
    backend = MemoryBackend()
    later = NOW + timedelta(minutes=5)
    store = SnapshotStore(backend, clock=lambda: later)

    assert await store.save_analysis(_analysis()) is True

    (record,) = backend.upserts
    assert record["analysis_date"] == "2026-10-19"
    assert record["generated_at"] == later.isoformat()
    assert set(record) == {
        "analysis_date",
        "generated_at",
        "snapshot_data",
        "key_metrics",
        "alerts",
    }


@pytest.mark.asyncio
async def test_sqlite_upsert_keeps_one_row_per_date(tmp_path) -> None:
    backend = SQLiteSnapshotStore(str(tmp_path / "snapshots.db"))
    store = SnapshotStore(backend, clock=lambda: NOW)

    assert await store.save_analysis(_analysis(workers=1))
    assert await store.save_analysis(_analysis(workers=3))

    assert backend.count_records() == 1
    cached = await store.get_cached_analysis()
    assert cached is not None
    assert len(cached.snapshot_data["workers"]) == 3
    assert cached.key_metrics["workers"]["total"] == 3


@pytest.mark.asyncio
async def test_sqlite_latest_record_orders_by_date(tmp_path) -> None:
    backend = SQLiteSnapshotStore(str(tmp_path / "snapshots.db"))
    backend.put_record(_record(NOW - timedelta(days=2)))
    backend.put_record(_record(NOW - timedelta(days=1), key_metrics={"workers": {"total": 7}}))

    latest = await backend.fetch_latest()

    assert latest["analysis_date"] == "2026-10-18"
    assert latest["key_metrics"] == {"workers": {"total": 7}}
    assert await backend.fetch_for_date(date(2026, 10, 19)) is None


def test_sqlite_rejects_incomplete_records(tmp_path) -> None:
    backend = SQLiteSnapshotStore(str(tmp_path / "snapshots.db"))

    with pytest.raises(ValueError):
        backend.put_record({"analysis_date": "2026-10-19"})
