"""
Koordinaten-Auflösung
=====================

Die Wetter-API liefert keine Koordinaten. Stationen werden über eine
statische Tabelle näherungsweise verortet:

1. Exakter Ortsname
2. Teilstring-Treffer (Ort enthält Schlüssel oder umgekehrt)
3. Mittelpunkt des Bundeslandes
4. Mittelpunkt Österreichs
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

Coordinates = Tuple[float, float]


AUSTRIA_CENTER: Coordinates = (47.5, 14.5)


# Reihenfolge ist relevant: der erste Teilstring-Treffer gewinnt
LOCATION_COORDINATES: Dict[str, Coordinates] = {
    "Wien": (48.2082, 16.3738),
    "Graz": (47.0707, 15.4395),
    "Linz": (48.3069, 14.2858),
    "Salzburg": (47.8095, 13.0550),
    "Innsbruck": (47.2692, 11.4041),
    "Klagenfurt": (46.6247, 14.3051),
    "Villach": (46.6111, 13.8558),
    "Wels": (48.1667, 14.0333),
    "St. Pölten": (48.2000, 15.6167),
    "Dornbirn": (47.4125, 9.7417),
    "Steyr": (48.0333, 14.4167),
    "Wiener Neustadt": (47.8167, 16.2333),
    "Feldkirch": (47.2333, 9.6000),
    "Bregenz": (47.5000, 9.7500),
    "Leonding": (48.2667, 14.2500),
    "Klosterneuburg": (48.3056, 16.3256),
    "Baden": (48.0060, 16.2317),
    "Wolfsberg": (46.8392, 14.8428),
    "Leoben": (47.3833, 14.8167),
    "Krems": (48.4167, 15.6000),
}

STATE_CENTROIDS: Dict[str, Coordinates] = {
    "Wien": (48.2082, 16.3738),
    "Niederösterreich": (48.2, 15.6),
    "Oberösterreich": (48.2, 14.0),
    "Steiermark": (47.2, 15.0),
    "Kärnten": (46.7, 14.3),
    "Salzburg": (47.5, 13.0),
    "Tirol": (47.3, 11.4),
    "Vorarlberg": (47.2, 9.9),
    "Burgenland": (47.5, 16.5),
}


class CoordinateSource(str, Enum):
    """Stufe, über die eine Koordinate gefunden wurde"""
    EXACT = "exact"
    PARTIAL = "partial"
    STATE = "state"
    COUNTRY = "country"


@dataclass(frozen=True)
class CoordinateMatch:
    """Ergebnis der Koordinaten-Auflösung"""
    coordinates: Coordinates
    source: CoordinateSource
    matched_key: Optional[str] = None

    @property
    def is_approximate(self) -> bool:
        return self.source in (CoordinateSource.STATE, CoordinateSource.COUNTRY)


def locate(location: Optional[str], state: Optional[str]) -> CoordinateMatch:
    """
    Löst die Koordinaten einer Station auf.

    Args:
        location: Ortsname laut API
        state: Bundesland laut API

    Returns:
        CoordinateMatch mit Koordinaten und Fundstufe
    """
    name = (location or "").strip()

    if name:
        if name in LOCATION_COORDINATES:
            return CoordinateMatch(LOCATION_COORDINATES[name], CoordinateSource.EXACT, name)

        folded = name.casefold()
        for key, coords in LOCATION_COORDINATES.items():
            key_folded = key.casefold()
            if key_folded in folded or folded in key_folded:
                return CoordinateMatch(coords, CoordinateSource.PARTIAL, key)

    state_name = (state or "").strip()
    if state_name in STATE_CENTROIDS:
        return CoordinateMatch(STATE_CENTROIDS[state_name], CoordinateSource.STATE, state_name)

    logger.debug(f"Keine Koordinaten für '{location}' ({state}) - verwende Österreich-Mittelpunkt")
    return CoordinateMatch(AUSTRIA_CENTER, CoordinateSource.COUNTRY)


def resolve_coordinates(location: Optional[str], state: Optional[str]) -> Coordinates:
    """Gibt nur die Koordinaten (lat, lon) zurück"""
    return locate(location, state).coordinates
