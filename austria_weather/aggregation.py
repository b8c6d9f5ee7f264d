"""
Aggregation
===========

Historische Ausschnitte und Kennzahlen über gespeicherte Snapshots.
Gruppierung und Statistik laufen über pandas.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from .config import get_config
from .normalizer import Snapshot, parse_integer
from .storage import SnapshotStore

logger = logging.getLogger(__name__)


STATION_COLUMNS = [
    "id", "location", "state", "altitude", "lat", "lon",
    "temperature", "humidity", "wind_speed", "wind_direction", "wind_peak",
    "rainfall", "air_pressure", "sun_hours", "sun_watts",
    "last_updated", "timestamp",
]

READING_COLUMNS = [
    "temperature", "humidity", "wind_speed", "wind_direction", "wind_peak",
    "rainfall", "air_pressure", "sun_hours", "sun_watts",
]


@dataclass
class HistorySlice:
    """Ausschnitt der Snapshot-Historie (chronologisch)"""
    data: List[dict] = field(default_factory=list)
    limit: int = 0
    station_id: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.data)

    def to_dict(self) -> dict:
        return {"count": self.count, "data": self.data}


# =============================================================================
# HELPERS
# =============================================================================

def resolve_limit(limit: Union[int, str, None]) -> int:
    """
    Ermittelt das effektive Limit.

    Gelesen wird die führende Ganzzahl ("10abc" -> 10, "2.5" -> 2).
    Fehlend, nicht numerisch oder <= 0 -> Standard-Limit;
    Obergrenze ist history.max_limit.
    """
    config = get_config()

    value = parse_integer(limit) or 0

    if value <= 0:
        value = config.history.default_limit

    return min(value, config.history.max_limit)


def _to_python(value: Any) -> Optional[float]:
    """Konvertiert numpy-Skalare nach Python; NaN -> None"""
    if value is None:
        return None
    if isinstance(value, (np.floating, float)) and np.isnan(value):
        return None
    if isinstance(value, np.generic):
        return value.item()
    return value


def _as_snapshot(snapshot: Union[Snapshot, dict]) -> Snapshot:
    if isinstance(snapshot, Snapshot):
        return snapshot
    return Snapshot.from_dict(snapshot)


# =============================================================================
# DATAFRAMES
# =============================================================================

def stations_frame(snapshot: Union[Snapshot, dict]) -> pd.DataFrame:
    """
    Flache Tabelle aller Stationen eines Snapshots.

    Eine Zeile pro Station, Messwerte als float (NaN bei fehlenden Werten).
    """
    snapshot = _as_snapshot(snapshot)

    rows = []
    for station in snapshot.stations:
        coords = station.coordinates or (None, None)
        row = {
            "id": station.id,
            "location": station.location,
            "state": station.state,
            "altitude": station.altitude,
            "lat": coords[0],
            "lon": coords[1],
            "last_updated": station.weather.last_updated,
            "timestamp": station.weather.timestamp,
        }
        for column in READING_COLUMNS:
            row[column] = station.weather.get(column)
        rows.append(row)

    df = pd.DataFrame(rows, columns=STATION_COLUMNS)

    if not df.empty:
        df[READING_COLUMNS] = df[READING_COLUMNS].apply(pd.to_numeric, errors="coerce")

    return df


def station_timeseries(
    documents: List[dict],
    station_id: str,
    metric: str = "temperature"
) -> pd.DataFrame:
    """
    Zeitreihe eines Messwerts für eine Station.

    Args:
        documents: Gespeicherte Snapshots (beliebige Reihenfolge)
        station_id: Station
        metric: Messwert (z.B. temperature)

    Returns:
        DataFrame mit Spalten created_at, value (chronologisch sortiert)
    """
    rows = []
    for doc in documents:
        for station in doc.get("stations") or []:
            if str(station.get("id")) == str(station_id):
                rows.append({
                    "created_at": doc.get("created_at") or doc.get("timestamp"),
                    "value": (station.get("weather") or {}).get(metric),
                })
                break

    df = pd.DataFrame(rows, columns=["created_at", "value"])

    if not df.empty:
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True, errors="coerce")
        df["value"] = pd.to_numeric(df["value"], errors="coerce")
        df = df.sort_values("created_at").reset_index(drop=True)

    return df


def state_summary(snapshot: Union[Snapshot, dict]) -> pd.DataFrame:
    """Stationsanzahl und Mittelwerte pro Bundesland"""
    df = stations_frame(snapshot)

    if df.empty:
        return pd.DataFrame(columns=["state", "stations", "avg_temperature", "avg_humidity"])

    summary = df.groupby("state").agg(
        stations=("id", "count"),
        avg_temperature=("temperature", "mean"),
        avg_humidity=("humidity", "mean"),
    ).reset_index()

    return summary.sort_values("stations", ascending=False).reset_index(drop=True)


# =============================================================================
# KENNZAHLEN
# =============================================================================

def snapshot_stats(snapshot: Union[Snapshot, dict]) -> Dict[str, Any]:
    """
    Kennzahlen über alle Stationen eines Snapshots.

    Fehlende Messwerte werden ignoriert. Ohne Werte ist eine Kennzahl
    None, nur total_rainfall ist dann 0.
    """
    df = stations_frame(snapshot)

    if df.empty:
        return {}

    def col(name: str) -> pd.Series:
        return df[name].dropna()

    temperature = col("temperature")
    humidity = col("humidity")
    wind = col("wind_speed")
    pressure = col("air_pressure")

    stats = {
        "avg_temperature": temperature.mean(),
        "max_temperature": temperature.max(),
        "min_temperature": temperature.min(),
        "avg_humidity": humidity.mean(),
        "max_humidity": humidity.max(),
        "min_humidity": humidity.min(),
        "avg_wind_speed": wind.mean(),
        "max_wind_speed": wind.max(),
        "avg_pressure": pressure.mean(),
        "max_pressure": pressure.max(),
        "min_pressure": pressure.min(),
    }

    result = {key: _to_python(value) for key, value in stats.items()}
    result["total_rainfall"] = float(col("rainfall").sum())
    result["station_count"] = int(len(df))

    return result


def latest_stats(store: SnapshotStore) -> Dict[str, Any]:
    """Kennzahlen des neuesten gespeicherten Snapshots ({} wenn leer)"""
    document = store.latest()

    if document is None:
        logger.debug("Keine Snapshots gespeichert")
        return {}

    return snapshot_stats(document)


def overview(snapshot: Union[Snapshot, dict]) -> Dict[str, Any]:
    """
    Kurzübersicht für Dashboard/Karte.

    Durchschnittswerte als String mit einer Nachkommastelle, "N/A" ohne Daten.
    """
    snapshot = _as_snapshot(snapshot)
    df = stations_frame(snapshot)

    def average(name: str) -> str:
        if df.empty:
            return "N/A"
        values = df[name].dropna()
        if values.empty:
            return "N/A"
        return f"{values.mean():.1f}"

    return {
        "total_stations": snapshot.total_stations,
        "avg_temperature": average("temperature"),
        "avg_humidity": average("humidity"),
    }


# =============================================================================
# HISTORIE
# =============================================================================

def history(
    store: SnapshotStore,
    limit: Union[int, str, None] = None,
    station_id: str = None
) -> HistorySlice:
    """
    Historischer Ausschnitt: die neuesten `limit` Snapshots,
    chronologisch (älteste zuerst) zurückgegeben.

    Raises:
        StorageUnavailableError: ohne Datenbank
    """
    effective_limit = resolve_limit(limit)
    station_id = str(station_id).strip() if station_id else None

    documents = store.recent(effective_limit, station_id=station_id or None)
    documents.reverse()

    logger.debug(
        f"Historie: {len(documents)} Snapshots (limit={effective_limit}, station={station_id})"
    )

    return HistorySlice(data=documents, limit=effective_limit, station_id=station_id)
