"""
Normalisierung der Stationsdaten
================================

Bildet die Rohdaten der Wetter-API auf ein einheitliches Schema ab:

    Snapshot { timestamp, total_stations, stations: [Station] }
    Station  { id, location, state, altitude, coordinates, weather }

Die API liefert alle Werte als Strings; fehlende Werte kommen als
"-" oder leerer String.
"""

import logging
import math
import re
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .coordinates import resolve_coordinates

logger = logging.getLogger(__name__)


# Führende Zahl, optional mit Dezimalkomma
_NUMBER_PATTERN = re.compile(r'^\s*([+-]?(?:\d+(?:[.,]\d*)?|[.,]\d+)(?:[eE][+-]?\d+)?)')
_INTEGER_PATTERN = re.compile(r'^\s*([+-]?\d+)')

# Rohfeld -> Feld im Schema
READING_FIELDS = {
    "temperature": "temperature",
    "humidity": "humidity",
    "wind_speed": "wind_speed",
    "wind_direction": "wind_direction",
    "windpeak": "wind_peak",
    "raindown": "rainfall",
    "airpressure": "air_pressure",
    "sun_h": "sun_hours",
    "sun_w": "sun_watts",
}


# =============================================================================
# PARSING
# =============================================================================

def parse_number(value: Any) -> Optional[float]:
    """
    Liest einen Messwert tolerant ein.

    Akzeptiert Zahlen und Strings mit führender Zahl ("12.5 km/h" -> 12.5,
    "3,4" -> 3.4). None, "", "-" und nicht-numerische Werte ergeben None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        match = _NUMBER_PATTERN.match(str(value))
        if not match:
            return None
        try:
            number = float(match.group(1).replace(",", "."))
        except ValueError:
            return None

    if math.isnan(number) or math.isinf(number):
        return None

    return number


def parse_integer(value: Any) -> Optional[int]:
    """Liest eine Ganzzahl (z.B. Unix-Timestamp) ein"""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)

    match = _INTEGER_PATTERN.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class WeatherReading:
    """Zeitabhängige Messwerte einer Station"""
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None
    wind_peak: Optional[float] = None
    rainfall: Optional[float] = None
    air_pressure: Optional[float] = None
    sun_hours: Optional[float] = None
    sun_watts: Optional[float] = None
    last_updated: Optional[str] = None
    timestamp: Optional[int] = None

    def get(self, key: str) -> Optional[float]:
        """Messwert nach Name (None bei unbekanntem Namen)"""
        return getattr(self, key, None)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WeatherReading":
        known = {k: data.get(k) for k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class Station:
    """Wetterstation mit statischen Attributen und aktuellen Messwerten"""
    id: str
    location: str
    state: str
    altitude: float = 0.0
    coordinates: Tuple[float, float] = (0.0, 0.0)
    weather: WeatherReading = field(default_factory=WeatherReading)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "location": self.location,
            "state": self.state,
            "altitude": self.altitude,
            "coordinates": list(self.coordinates) if self.coordinates else None,
            "weather": self.weather.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Station":
        """Baut eine Station aus einem gespeicherten Dokument"""
        coords = data.get("coordinates")
        return cls(
            id=str(data.get("id")),
            location=data.get("location") or "",
            state=data.get("state") or "",
            altitude=data.get("altitude") or 0.0,
            coordinates=tuple(coords) if coords else None,
            weather=WeatherReading.from_dict(data.get("weather") or {}),
        )


@dataclass
class Snapshot:
    """Ein Abrufzyklus: alle Stationen mit Zeitstempel"""
    timestamp: str
    stations: List[Station] = field(default_factory=list)

    @property
    def total_stations(self) -> int:
        return len(self.stations)

    def find_station(self, station_id: str) -> Optional[Station]:
        """Sucht eine Station über ihre ID"""
        for station in self.stations:
            if station.id == str(station_id):
                return station
        return None

    @property
    def station_ids(self) -> List[str]:
        return [s.id for s in self.stations]

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "total_stations": self.total_stations,
            "stations": [s.to_dict() for s in self.stations],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        return cls(
            timestamp=data.get("timestamp") or "",
            stations=[Station.from_dict(s) for s in data.get("stations") or []],
        )


# =============================================================================
# NORMALISIERUNG
# =============================================================================

def normalize_station(raw: Dict[str, Any]) -> Station:
    """
    Normalisiert einen Rohdatensatz der API.

    Args:
        raw: Eintrag aus station_list

    Returns:
        Station im Schema
    """
    location = _text(raw.get("location")) or ""
    state = _text(raw.get("state")) or ""

    readings = {
        target: parse_number(raw.get(source))
        for source, target in READING_FIELDS.items()
    }

    altitude = parse_number(raw.get("altitude"))

    return Station(
        id=str(raw.get("station_id", "")),
        location=location,
        state=state,
        altitude=altitude if altitude is not None else 0.0,
        coordinates=resolve_coordinates(location, state),
        weather=WeatherReading(
            last_updated=_text(raw.get("weather_time")),
            timestamp=parse_integer(raw.get("weather_timestamp")),
            **readings,
        ),
    )


def normalize_snapshot(payload: Dict[str, Any], now: datetime = None) -> Snapshot:
    """
    Normalisiert die vollständige API-Antwort.

    Args:
        payload: JSON-Antwort mit "station_list"
        now: Zeitstempel des Abrufs (Standard: jetzt, UTC)

    Returns:
        Snapshot mit allen Stationen
    """
    now = now or datetime.now(timezone.utc)

    raw_list = payload.get("station_list") if isinstance(payload, dict) else None
    if not isinstance(raw_list, list):
        logger.warning("Antwort enthält keine station_list")
        raw_list = []

    stations = []
    for raw in raw_list:
        if not isinstance(raw, dict):
            logger.warning(f"Ungültiger Stationseintrag übersprungen: {raw!r:.80}")
            continue
        stations.append(normalize_station(raw))

    logger.debug(f"{len(stations)} Stationen normalisiert")

    return Snapshot(timestamp=now.isoformat(), stations=stations)
