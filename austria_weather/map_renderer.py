"""
Karten-Rendering
================

Stationen als farbcodierte Marker auf einer OpenStreetMap-Karte (Plotly).
Die Markerfarbe ergibt sich aus dem aktiven Overlay und dessen Farbskala;
die Legende wird bei jedem Overlay-Wechsel neu aufgebaut.
"""

import html
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import plotly.graph_objects as go

from .coordinates import AUSTRIA_CENTER
from .normalizer import Station
from .overlays import (
    COLOR_SCALES,
    LegendEntry,
    NO_DATA_COLOR,
    OVERLAYS,
    format_reading,
    legend_for,
    marker_color,
    normalize_overlay,
)

logger = logging.getLogger(__name__)


@dataclass
class StationMarker:
    """Ein Kreis-Marker auf der Karte"""
    station_id: str
    lat: float
    lon: float
    color: str
    value: Optional[float]
    popup: str
    hover: str
    radius: int = 8
    outline_color: str = "#fff"
    outline_weight: int = 2
    opacity: float = 1.0
    fill_opacity: float = 0.8


@dataclass
class StationInfo:
    """Inhalt des Stations-Detailpanels (formatierte Werte)"""
    location: str
    state: str
    altitude: str
    last_updated: str
    temperature: str
    humidity: str
    wind_speed: str
    air_pressure: str
    rainfall: str
    sun_watts: str

    def to_dict(self) -> dict:
        return dict(self.__dict__)


def _escape(value) -> str:
    return html.escape(str(value)) if value is not None else ""


def _has_coordinates(station: Station) -> bool:
    coords = station.coordinates
    if coords is None:
        return False
    try:
        return len(coords) == 2 and all(c is not None for c in coords)
    except TypeError:
        return False


class WeatherMap:
    """
    Interaktive Wetterkarte.

    Verwendung:
        weather_map = WeatherMap()
        weather_map.add_weather_stations(snapshot.stations, "humidity")
        fig = weather_map.to_figure()
    """

    def __init__(
        self,
        center: Tuple[float, float] = AUSTRIA_CENTER,
        zoom: float = 6,
        height: int = 650
    ):
        self.center = center
        self.zoom = zoom
        self.height = height

        self.stations: List[Station] = []
        self.markers: List[StationMarker] = []
        self.current_overlay = "temperature"
        self.legend: List[LegendEntry] = legend_for(self.current_overlay)
        self.selected: Optional[StationInfo] = None

    def clear_markers(self):
        """Entfernt alle Marker"""
        self.markers = []

    def add_weather_stations(self, stations: Sequence[Station], overlay: str = "temperature"):
        """
        Setzt die Stationen und erzeugt die Marker neu.

        Stationen ohne gültige Koordinaten (genau zwei Werte) werden übersprungen.
        """
        self.clear_markers()
        self.stations = list(stations)
        self.current_overlay = normalize_overlay(overlay)

        skipped = 0
        for station in self.stations:
            if not _has_coordinates(station):
                skipped += 1
                continue
            self.markers.append(self.create_marker(station, self.current_overlay))

        if skipped:
            logger.debug(f"{skipped} Stationen ohne Koordinaten übersprungen")

        self.update_legend(self.current_overlay)

    def create_marker(self, station: Station, overlay: str) -> StationMarker:
        """Erzeugt den Marker einer Station für ein Overlay"""
        lat, lon = station.coordinates
        value = station.weather.get(overlay)

        return StationMarker(
            station_id=station.id,
            lat=float(lat),
            lon=float(lon),
            color=marker_color(value, overlay),
            value=value,
            popup=self.popup_content(station),
            hover=self.hover_text(station, overlay),
        )

    def popup_content(self, station: Station) -> str:
        """HTML-Popup mit allen Messwerten einer Station"""
        w = station.weather
        return f"""
            <div class="weather-popup">
                <h4>{_escape(station.location)}</h4>
                <p><strong>State:</strong> {_escape(station.state)}</p>
                <p><strong>Altitude:</strong> {_escape(format_reading(station.altitude))}m</p>
                <div class="weather-popup-grid">
                    <div><strong>Temperature:</strong> {format_reading(w.temperature)}°C</div>
                    <div><strong>Humidity:</strong> {format_reading(w.humidity)}%</div>
                    <div><strong>Wind Speed:</strong> {format_reading(w.wind_speed)} m/s</div>
                    <div><strong>Pressure:</strong> {format_reading(w.air_pressure)} hPa</div>
                    <div><strong>Rainfall:</strong> {format_reading(w.rainfall)} mm</div>
                    <div><strong>Solar:</strong> {format_reading(w.sun_watts)} W/m²</div>
                </div>
                <p><small>Updated: {_escape(w.last_updated or 'N/A')}</small></p>
            </div>
        """

    def hover_text(self, station: Station, overlay: str) -> str:
        """Kurztext für den Plotly-Hover"""
        info = OVERLAYS[normalize_overlay(overlay)]
        value = format_reading(station.weather.get(overlay))
        return (
            f"<b>{_escape(station.location)}</b> ({_escape(station.state)})<br>"
            f"{info.label}: {value} {info.unit}<br>"
            f"Altitude: {format_reading(station.altitude)} m"
        )

    def station_info(self, station: Station) -> StationInfo:
        """Formatierte Werte für das Detailpanel"""
        w = station.weather
        return StationInfo(
            location=station.location,
            state=station.state,
            altitude=format_reading(station.altitude),
            last_updated=w.last_updated or "N/A",
            temperature=format_reading(w.temperature),
            humidity=format_reading(w.humidity),
            wind_speed=format_reading(w.wind_speed),
            air_pressure=format_reading(w.air_pressure),
            rainfall=format_reading(w.rainfall),
            sun_watts=format_reading(w.sun_watts),
        )

    def select_station(self, station_id: str) -> Optional[StationInfo]:
        """Wählt eine Station für das Detailpanel aus"""
        for station in self.stations:
            if station.id == str(station_id):
                self.selected = self.station_info(station)
                return self.selected

        logger.debug(f"Station {station_id} nicht auf der Karte")
        return None

    def update_legend(self, overlay: str):
        """Baut die Legende für das Overlay neu auf"""
        self.legend = legend_for(normalize_overlay(overlay))

    def legend_html(self) -> str:
        """Legende als HTML"""
        info = OVERLAYS[self.current_overlay]
        items = "".join(
            f"""
            <div class="legend-item">
                <div class="legend-color" style="background: {entry.color};"></div>
                <span>{_escape(entry.label)}</span>
            </div>"""
            for entry in self.legend
        )
        return f"""
        <div class="map-legend">
            <h4>{_escape(info.label)} ({_escape(info.unit)})</h4>
            <div class="legend-content">{items}
            </div>
        </div>
        """

    def markers_by_color(self) -> Dict[str, List[StationMarker]]:
        """Gruppiert die Marker nach Farbe (Reihenfolge der Legende, dann Rest)"""
        groups: Dict[str, List[StationMarker]] = {}
        for entry in self.legend:
            groups[entry.color] = []
        for marker in self.markers:
            groups.setdefault(marker.color, []).append(marker)
        return {color: markers for color, markers in groups.items() if markers}

    def color_label(self, color: str) -> str:
        """Legendentext einer Markerfarbe"""
        if color == NO_DATA_COLOR:
            return "No data"
        for entry in self.legend:
            if entry.color == color:
                return entry.label
        unit = OVERLAYS[self.current_overlay].unit
        bands = COLOR_SCALES[self.current_overlay]
        for i, band in enumerate(bands):
            if band.color != color:
                continue
            # oberstes Band ist nach oben offen
            if math.isinf(band.max) and i > 0:
                return f"> {bands[i - 1].max:g} {unit}"
            return f"<= {band.max:g} {unit}"
        return color

    def to_figure(self) -> go.Figure:
        """Erstellt die Plotly-Karte"""
        fig = go.Figure()

        for color, markers in self.markers_by_color().items():
            fig.add_trace(go.Scattermap(
                lat=[m.lat for m in markers],
                lon=[m.lon for m in markers],
                mode="markers",
                marker=dict(
                    size=markers[0].radius * 2,
                    color=color,
                    opacity=markers[0].fill_opacity,
                ),
                hovertext=[m.hover for m in markers],
                hoverinfo="text",
                customdata=[m.station_id for m in markers],
                name=self.color_label(color),
            ))

        fig.update_layout(
            map=dict(
                style="open-street-map",
                center=dict(lat=self.center[0], lon=self.center[1]),
                zoom=self.zoom,
            ),
            legend=dict(yanchor="top", y=0.99, xanchor="left", x=0.01),
            margin=dict(l=0, r=0, t=0, b=0),
            height=self.height,
        )

        return fig
