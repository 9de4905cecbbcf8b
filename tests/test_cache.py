from datetime import datetime, timedelta, timezone

from portfolio_index.models import CacheEntry
from portfolio_index.services.cache import TickerCache, is_fresh

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_round_trip_uses_upper_case_file_name(tmp_path):
    cache = TickerCache(tmp_path / "cache")
    entry = CacheEntry(fetched_at=NOW, series={"2024-03-15": 10.5}, source="TIME_SERIES_WEEKLY_ADJUSTED")

    cache.put("brk-b", entry)

    assert (tmp_path / "cache" / "BRK-B.json").exists()
    assert cache.get("BRK-B") == entry


def test_quotes_are_stored_beside_the_weekly_history(tmp_path):
    cache = TickerCache(tmp_path)
    history = CacheEntry(fetched_at=NOW, series={"2024-03-08": 9.0, "2024-03-15": 10.0}, source="TIME_SERIES_WEEKLY_ADJUSTED")
    quote = CacheEntry(fetched_at=NOW, series={"2024-03-18": 11.0}, source="GLOBAL_QUOTE")

    cache.put("A", history)
    cache.put("A", quote)

    assert (tmp_path / "A.GLOBAL_QUOTE.json").exists()
    assert cache.get("A") == history
    assert cache.get("A", "GLOBAL_QUOTE") == quote


def test_missing_and_malformed_entries_read_as_absent(tmp_path):
    cache = TickerCache(tmp_path)
    (tmp_path / "BAD.json").write_text("{", encoding="utf-8")
    (tmp_path / "NOTS.json").write_text('{"series": {}}', encoding="utf-8")

    assert cache.get("NOPE") is None
    assert cache.get("BAD") is None
    assert cache.get("NOTS") is None


def test_failed_write_is_logged_not_raised(tmp_path, caplog):
    blocker = tmp_path / "cache"
    blocker.write_text("not a directory", encoding="utf-8")
    cache = TickerCache(blocker)

    cache.put("A", CacheEntry(fetched_at=NOW, series={"2024-03-15": 1.0}))

    assert cache.get("A") is None
    assert "Could not write cache for A" in caplog.text


def test_freshness_window():
    entry = CacheEntry(fetched_at=NOW - timedelta(hours=23), series={"2024-03-15": 1.0})

    assert is_fresh(entry, 24, now=NOW)
    assert not is_fresh(entry, 24, now=NOW + timedelta(hours=2))
    assert not is_fresh(None, 24, now=NOW)


def test_freshness_requires_matching_source():
    entry = CacheEntry(fetched_at=NOW, series={"2024-03-15": 1.0}, source="GLOBAL_QUOTE")

    assert is_fresh(entry, 24, now=NOW, source="GLOBAL_QUOTE")
    assert not is_fresh(entry, 24, now=NOW, source="TIME_SERIES_WEEKLY_ADJUSTED")


def test_naive_timestamps_are_treated_as_utc():
    entry = CacheEntry(fetched_at=datetime(2024, 3, 15, 11, 0), series={})

    assert is_fresh(entry, 2, now=NOW)
