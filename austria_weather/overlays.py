"""
Overlays, Farbskalen und Legenden
=================================

Jede Overlay-Metrik hat eine geordnete Liste von Schwellwerten.
Ein Messwert bekommt die Farbe des ersten Bandes mit value <= max.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional


NO_DATA_COLOR = "#999999"
DEFAULT_OVERLAY = "temperature"


@dataclass(frozen=True)
class Overlay:
    """Darstellbare Messgröße"""
    key: str
    label: str
    unit: str


@dataclass(frozen=True)
class ColorBand:
    """Farbband bis einschließlich max"""
    max: float
    color: str


@dataclass(frozen=True)
class LegendEntry:
    """Ein Legendeneintrag"""
    color: str
    label: str

    def to_dict(self) -> dict:
        return {"color": self.color, "label": self.label}


OVERLAYS: Dict[str, Overlay] = {
    "temperature": Overlay("temperature", "Temperature", "°C"),
    "humidity": Overlay("humidity", "Humidity", "%"),
    "wind_speed": Overlay("wind_speed", "Wind Speed", "m/s"),
    "air_pressure": Overlay("air_pressure", "Air Pressure", "hPa"),
    "rainfall": Overlay("rainfall", "Rainfall", "mm"),
}


COLOR_SCALES: Dict[str, List[ColorBand]] = {
    "temperature": [
        ColorBand(-10, "#0066cc"),
        ColorBand(0, "#0099ff"),
        ColorBand(10, "#00ccff"),
        ColorBand(20, "#66ff66"),
        ColorBand(30, "#ffcc00"),
        ColorBand(40, "#ff6600"),
        ColorBand(math.inf, "#ff0000"),
    ],
    "humidity": [
        ColorBand(20, "#ff6600"),
        ColorBand(40, "#ffcc00"),
        ColorBand(60, "#66ff66"),
        ColorBand(80, "#0099ff"),
        ColorBand(math.inf, "#0066cc"),
    ],
    "wind_speed": [
        ColorBand(2, "#66ff66"),
        ColorBand(5, "#ffcc00"),
        ColorBand(10, "#ff6600"),
        ColorBand(15, "#ff3300"),
        ColorBand(math.inf, "#cc0000"),
    ],
    "air_pressure": [
        ColorBand(980, "#0066cc"),
        ColorBand(1000, "#0099ff"),
        ColorBand(1020, "#66ff66"),
        ColorBand(1040, "#ffcc00"),
        ColorBand(math.inf, "#ff6600"),
    ],
    "rainfall": [
        ColorBand(0.1, "#f0f0f0"),
        ColorBand(1, "#66ff66"),
        ColorBand(5, "#0099ff"),
        ColorBand(10, "#0066cc"),
        ColorBand(math.inf, "#003399"),
    ],
}


LEGENDS: Dict[str, List[LegendEntry]] = {
    "temperature": [
        LegendEntry("#0066cc", "Cold (< 0°C)"),
        LegendEntry("#00ccff", "Cool (0-10°C)"),
        LegendEntry("#66ff66", "Mild (10-20°C)"),
        LegendEntry("#ffcc00", "Warm (20-30°C)"),
        LegendEntry("#ff6600", "Hot (> 30°C)"),
    ],
    "humidity": [
        LegendEntry("#ff6600", "Very Dry (< 20%)"),
        LegendEntry("#ffcc00", "Dry (20-40%)"),
        LegendEntry("#66ff66", "Moderate (40-60%)"),
        LegendEntry("#0099ff", "Humid (60-80%)"),
        LegendEntry("#0066cc", "Very Humid (> 80%)"),
    ],
    "wind_speed": [
        LegendEntry("#66ff66", "Calm (< 2 m/s)"),
        LegendEntry("#ffcc00", "Light (2-5 m/s)"),
        LegendEntry("#ff6600", "Moderate (5-10 m/s)"),
        LegendEntry("#ff3300", "Strong (10-15 m/s)"),
        LegendEntry("#cc0000", "Very Strong (> 15 m/s)"),
    ],
    "air_pressure": [
        LegendEntry("#0066cc", "Low (< 980 hPa)"),
        LegendEntry("#0099ff", "Below Normal (980-1000 hPa)"),
        LegendEntry("#66ff66", "Normal (1000-1020 hPa)"),
        LegendEntry("#ffcc00", "Above Normal (1020-1040 hPa)"),
        LegendEntry("#ff6600", "High (> 1040 hPa)"),
    ],
    "rainfall": [
        LegendEntry("#f0f0f0", "None (0 mm)"),
        LegendEntry("#66ff66", "Light (0-1 mm)"),
        LegendEntry("#0099ff", "Moderate (1-5 mm)"),
        LegendEntry("#0066cc", "Heavy (5-10 mm)"),
        LegendEntry("#003399", "Very Heavy (> 10 mm)"),
    ],
}


def normalize_overlay(name: Optional[str]) -> str:
    """Gibt einen bekannten Overlay-Namen zurück (Fallback: temperature)"""
    if name:
        key = name.strip().lower()
        if key in OVERLAYS:
            return key
    return DEFAULT_OVERLAY


def marker_color(value: Optional[float], overlay: str) -> str:
    """
    Ermittelt die Markerfarbe für einen Messwert.

    Args:
        value: Messwert (None/NaN = keine Daten)
        overlay: Overlay-Name (unbekannt -> Temperatur-Skala)

    Returns:
        Hex-Farbe
    """
    if value is None:
        return NO_DATA_COLOR

    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return NO_DATA_COLOR

    if math.isnan(numeric):
        return NO_DATA_COLOR

    scale = COLOR_SCALES.get(overlay) or COLOR_SCALES[DEFAULT_OVERLAY]

    for band in scale:
        if numeric <= band.max:
            return band.color

    return NO_DATA_COLOR


def legend_for(overlay: str) -> List[LegendEntry]:
    """Legende für ein Overlay (unbekannt -> Temperatur)"""
    return list(LEGENDS.get(overlay) or LEGENDS[DEFAULT_OVERLAY])


def format_reading(value: Optional[float], suffix: str = "") -> str:
    """Formatiert einen Messwert für die Anzeige ("--" bei fehlenden Daten)"""
    if value is None:
        return "--"
    if isinstance(value, float) and math.isnan(value):
        return "--"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}{suffix}"
