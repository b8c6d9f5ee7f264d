"""
Wetterkarte Österreich - Pytest Fixtures und Konfiguration
==========================================================
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock

from austria_weather.api_client import APIResponse
from austria_weather.config import Config, set_config
from austria_weather.db import close_connection, init_database, reset_engine
from austria_weather.normalizer import normalize_snapshot
from austria_weather.storage import NullSnapshotStore, SQLSnapshotStore


FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_raw_station(station_id: str, location: str, state: str, **readings) -> dict:
    """Rohdatensatz wie von der Wetter-API (alle Werte als String)"""
    raw = {
        "station_id": station_id,
        "location": location,
        "state": state,
        "altitude": "171",
        "temperature": "21.4",
        "humidity": "55",
        "wind_speed": "3.2",
        "wind_direction": "270",
        "windpeak": "8.1",
        "raindown": "0",
        "airpressure": "1015.3",
        "sun_h": "0.8",
        "sun_w": "640",
        "weather_time": "01.06.2025 13:50",
        "weather_timestamp": "1748778600",
    }
    raw.update(readings)
    return raw


@pytest.fixture(autouse=True)
def isolated_config():
    """Standard-Konfiguration ohne Datenbank für jeden Test"""
    config = Config()
    config.database.enabled = False
    set_config(config)
    reset_engine()

    yield config

    reset_engine()
    set_config(None)


@pytest.fixture
def raw_station():
    """Einzelner Rohdatensatz (Wien Innere Stadt)"""
    return make_raw_station("11034", "Wien Innere Stadt", "Wien")


@pytest.fixture
def api_payload(raw_station):
    """Vollständige API-Antwort mit drei Stationen"""
    return {
        "station_list": [
            raw_station,
            make_raw_station(
                "11240", "Graz Flughafen", "Steiermark",
                altitude="340", temperature="-3.5", humidity="92", raindown="2.4",
            ),
            make_raw_station(
                "11320", "Obergurgl", "Tirol",
                altitude="1941", temperature="-", humidity="", wind_speed="-",
                airpressure="-", raindown="-",
            ),
        ]
    }


@pytest.fixture
def snapshot(api_payload):
    """Normalisierter Snapshot mit festem Zeitstempel"""
    return normalize_snapshot(api_payload, now=FIXED_NOW)


@pytest.fixture
def mock_client(api_payload):
    """API Client, der immer die Beispiel-Antwort liefert"""
    client = Mock()
    client.fetch_station_list.return_value = APIResponse(
        success=True,
        status_code=200,
        data=api_payload,
        response_time_ms=12.0,
    )
    return client


@pytest.fixture
def failing_client():
    """API Client mit fehlgeschlagenem Abruf"""
    client = Mock()
    client.fetch_station_list.return_value = APIResponse(
        success=False,
        status_code=503,
        error="Weather API responded with status: 503",
    )
    return client


@pytest.fixture
def db_config(isolated_config, tmp_path):
    """Konfiguration mit temporärer SQLite-Datenbank"""
    isolated_config.database.enabled = True
    isolated_config.database.url = f"sqlite:///{tmp_path / 'weather_test.db'}"
    reset_engine()

    yield isolated_config

    close_connection()


@pytest.fixture
def sql_store(db_config):
    """Initialisierter SQL-Speicher"""
    init_database()
    return SQLSnapshotStore()


@pytest.fixture
def null_store():
    return NullSnapshotStore()


def pytest_configure(config):
    """Pytest Marker konfigurieren"""
    config.addinivalue_line("markers", "critical: Kritische Tests (höchste Priorität)")
    config.addinivalue_line("markers", "integration: Integrations-Tests (benötigen API-Zugang)")
    config.addinivalue_line("markers", "security: Sicherheits-Tests")
    config.addinivalue_line("markers", "slow: Langsame Tests")
