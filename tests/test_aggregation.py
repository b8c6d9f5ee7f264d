"""
Tests für Historie und Kennzahlen
=================================
"""

import pytest

from austria_weather.aggregation import (
    history,
    latest_stats,
    overview,
    resolve_limit,
    snapshot_stats,
    state_summary,
    station_timeseries,
    stations_frame,
)
from austria_weather.normalizer import Snapshot, normalize_snapshot
from austria_weather.storage import StorageUnavailableError

from conftest import FIXED_NOW, make_raw_station


def _snapshot_with_temperature(station_id: str, temperature: str) -> Snapshot:
    payload = {"station_list": [make_raw_station(station_id, "Graz", "Steiermark", temperature=temperature)]}
    return normalize_snapshot(payload, now=FIXED_NOW)


class TestResolveLimit:

    @pytest.mark.parametrize("limit,expected", [
        (None, 24),
        ("abc", 24),
        (0, 24),
        (-5, 24),
        ("10", 10),
        ("10abc", 10),
        ("2.5", 2),
        (2.5, 2),
        ("-3", 24),
        (5, 5),
        (5000, 1000),
    ])
    def test_resolve_limit(self, limit, expected):
        assert resolve_limit(limit) == expected

    def test_limits_from_config(self, isolated_config):
        isolated_config.history.default_limit = 3
        isolated_config.history.max_limit = 7

        assert resolve_limit(None) == 3
        assert resolve_limit(50) == 7


class TestSnapshotStats:
    """Tests für die Kennzahlen eines Snapshots"""

    @pytest.mark.critical
    def test_stats_ignore_missing_values(self, snapshot):
        stats = snapshot_stats(snapshot)

        # Wien 21.4, Graz -3.5, Obergurgl ohne Wert
        assert stats["avg_temperature"] == pytest.approx(8.95)
        assert stats["max_temperature"] == pytest.approx(21.4)
        assert stats["min_temperature"] == pytest.approx(-3.5)
        assert stats["avg_humidity"] == pytest.approx(73.5)
        assert stats["max_wind_speed"] == pytest.approx(3.2)
        assert stats["avg_pressure"] == pytest.approx(1015.3)
        assert stats["total_rainfall"] == pytest.approx(2.4)
        assert stats["station_count"] == 3

    def test_stats_are_plain_python(self, snapshot):
        stats = snapshot_stats(snapshot)

        for key, value in stats.items():
            assert value is None or type(value) in (int, float), key

    def test_all_values_missing(self):
        payload = {"station_list": [make_raw_station(
            "1", "Graz", "Steiermark",
            temperature="-", humidity="-", wind_speed="-", airpressure="-", raindown="-",
        )]}
        stats = snapshot_stats(normalize_snapshot(payload, now=FIXED_NOW))

        assert stats["avg_temperature"] is None
        assert stats["max_pressure"] is None
        assert stats["total_rainfall"] == 0
        assert stats["station_count"] == 1

    def test_empty_snapshot(self):
        assert snapshot_stats(Snapshot(timestamp="x")) == {}

    def test_accepts_stored_document(self, snapshot):
        assert snapshot_stats(snapshot.to_dict()) == snapshot_stats(snapshot)


class TestOverview:

    def test_overview(self, snapshot):
        result = overview(snapshot)

        assert result == {
            "total_stations": 3,
            "avg_temperature": f"{(21.4 - 3.5) / 2:.1f}",
            "avg_humidity": "73.5",
        }

    def test_overview_without_data(self):
        result = overview(Snapshot(timestamp="x"))

        assert result["avg_temperature"] == "N/A"
        assert result["avg_humidity"] == "N/A"
        assert result["total_stations"] == 0


class TestFrames:

    def test_stations_frame(self, snapshot):
        df = stations_frame(snapshot)

        assert len(df) == 3
        assert {"id", "lat", "lon", "temperature", "rainfall"} <= set(df.columns)
        assert df["temperature"].isna().sum() == 1

    def test_state_summary(self, snapshot):
        summary = state_summary(snapshot)

        assert set(summary["state"]) == {"Wien", "Steiermark", "Tirol"}
        assert summary["stations"].sum() == 3

    def test_state_summary_empty(self):
        summary = state_summary(Snapshot(timestamp="x"))

        assert summary.empty
        assert "avg_temperature" in summary.columns

    def test_station_timeseries(self):
        docs = [
            dict(_snapshot_with_temperature("5", "12").to_dict(), created_at="2025-06-01T12:00:00+00:00"),
            dict(_snapshot_with_temperature("5", "10").to_dict(), created_at="2025-06-01T10:00:00+00:00"),
            dict(_snapshot_with_temperature("6", "30").to_dict(), created_at="2025-06-01T11:00:00+00:00"),
        ]

        series = station_timeseries(docs, "5", "temperature")

        assert list(series["value"]) == [10.0, 12.0]


class TestHistory:
    """Tests für historische Ausschnitte"""

    @pytest.mark.critical
    def test_history_is_chronological(self, sql_store):
        ids = [sql_store.save(_snapshot_with_temperature("5", str(n))) for n in range(4)]

        result = history(sql_store, limit=3)

        assert result.count == 3
        assert [d["id"] for d in result.data] == ids[1:]

    def test_history_to_dict(self, sql_store, snapshot):
        sql_store.save(snapshot)

        result = history(sql_store).to_dict()

        assert set(result) == {"count", "data"}
        assert result["count"] == 1

    def test_history_station_filter(self, sql_store):
        sql_store.save(_snapshot_with_temperature("5", "1"))
        sql_store.save(_snapshot_with_temperature("6", "2"))

        result = history(sql_store, station_id="6")

        assert result.count == 1
        assert result.data[0]["stations"][0]["id"] == "6"

    def test_history_without_database(self, null_store):
        with pytest.raises(StorageUnavailableError):
            history(null_store)

    def test_latest_stats(self, sql_store):
        sql_store.save(_snapshot_with_temperature("5", "10"))
        sql_store.save(_snapshot_with_temperature("5", "20"))

        stats = latest_stats(sql_store)

        assert stats["avg_temperature"] == pytest.approx(20.0)

    def test_latest_stats_empty(self, sql_store):
        assert latest_stats(sql_store) == {}
