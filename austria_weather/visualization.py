"""
Visualisierung
==============

Ausgabeformen der Wetterkarte:
1. Streamlit Dashboard (interaktiv, siehe dashboard.py)
2. HTML Karte (statisch/offline)
3. Terminal Quick View (CLI)

Nutzung:
    # HTML Karte generieren
    austria-weather map-html --overlay humidity

    # Terminal Quick View
    austria-weather quick-view --overlay temperature
"""

import html
import logging
from datetime import datetime
from typing import Dict, Any

import pandas as pd

from .aggregation import overview, state_summary, stations_frame
from .ingest import WeatherIngester
from .map_renderer import WeatherMap
from .normalizer import Snapshot
from .overlays import OVERLAYS, normalize_overlay, format_reading

logger = logging.getLogger(__name__)


# ============================================================================
# HTML MAP REPORT
# ============================================================================

class HTMLMapReport:
    """
    Generiert eine statische HTML-Seite mit der Plotly-Karte.

    Die Seite enthält Karte, Legende, Kurzübersicht und Stationstabelle
    und ist ohne Server nutzbar.
    """

    def __init__(self, snapshot: Snapshot, overlay: str = "temperature"):
        self.snapshot = snapshot
        self.overlay = normalize_overlay(overlay)

        self.weather_map = WeatherMap()
        self.weather_map.add_weather_stations(snapshot.stations, self.overlay)

    def render(self) -> str:
        """Erzeugt das vollständige HTML-Dokument"""
        fig = self.weather_map.to_figure()
        map_html = fig.to_html(full_html=False, include_plotlyjs="cdn")

        return self._build_html(
            title="Austrian Weather Map",
            kpis=overview(self.snapshot),
            map_html=map_html,
        )

    def generate(self, output_path: str = None) -> str:
        """
        Schreibt die HTML-Karte in eine Datei.

        Returns:
            Pfad zur generierten HTML-Datei
        """
        if output_path is None:
            output_path = f"weather_map_{self.overlay}_{datetime.now().strftime('%Y%m%d_%H%M')}.html"

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(self.render())

        logger.info(f"Karte generiert: {output_path}")
        return output_path

    def _build_html(self, title: str, kpis: Dict[str, Any], map_html: str) -> str:
        """Baut das vollständige HTML-Dokument"""
        info = OVERLAYS[self.overlay]
        options = "".join(
            f'<a class="overlay-link{" active" if key == self.overlay else ""}" '
            f'href="?overlay={key}">{html.escape(o.label)}</a>'
            for key, o in OVERLAYS.items()
        )

        return f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        * {{
            margin: 0;
            padding: 0;
            box-sizing: border-box;
        }}

        body {{
            font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
            background: #f4f6f9;
            padding: 1.5rem;
        }}

        .container {{
            max-width: 1400px;
            margin: 0 auto;
        }}

        .header, .card {{
            background: white;
            border-radius: 0.75rem;
            padding: 1.5rem;
            margin-bottom: 1.5rem;
            box-shadow: 0 4px 20px rgba(0,0,0,0.08);
        }}

        .header h1 {{
            color: #1a1a2e;
            font-size: 1.8rem;
        }}

        .meta {{
            color: #666;
            font-size: 0.9rem;
            margin-top: 0.5rem;
        }}

        .overlay-link {{
            display: inline-block;
            margin: 0.75rem 0.5rem 0 0;
            padding: 0.3rem 0.8rem;
            border-radius: 1rem;
            background: #eef1f5;
            color: #333;
            text-decoration: none;
        }}

        .overlay-link.active {{
            background: #0078D7;
            color: white;
        }}

        .kpi-grid {{
            display: grid;
            grid-template-columns: repeat(3, 1fr);
            gap: 1rem;
            margin-bottom: 1.5rem;
        }}

        .kpi-card {{
            background: white;
            border-radius: 0.75rem;
            padding: 1.25rem;
            box-shadow: 0 4px 20px rgba(0,0,0,0.08);
        }}

        .kpi-card .label {{
            color: #666;
            font-size: 0.85rem;
        }}

        .kpi-card .value {{
            font-size: 1.8rem;
            font-weight: 700;
            color: #1a1a2e;
        }}

        .map-grid {{
            display: grid;
            grid-template-columns: 1fr 260px;
            gap: 1.5rem;
        }}

        .legend-item {{
            display: flex;
            align-items: center;
            margin: 0.4rem 0;
        }}

        .legend-color {{
            width: 18px;
            height: 18px;
            border-radius: 50%;
            margin-right: 0.5rem;
            border: 1px solid #ccc;
        }}

        table {{
            width: 100%;
            border-collapse: collapse;
            font-size: 0.9rem;
        }}

        th, td {{
            padding: 0.5rem;
            text-align: left;
            border-bottom: 1px solid #eee;
        }}

        th {{
            background: #f8f9fa;
        }}

        .footer {{
            text-align: center;
            color: #999;
            font-size: 0.8rem;
        }}
    </style>
</head>
<body>
    <div class="container">
        <!-- Header -->
        <div class="header">
            <h1>🌦️ {title}</h1>
            <p class="meta">
                Overlay: {html.escape(info.label)} ({html.escape(info.unit)}) |
                Snapshot: {html.escape(self.snapshot.timestamp or 'N/A')}
            </p>
            <div>{options}</div>
        </div>

        <!-- KPIs -->
        <div class="kpi-grid">
            <div class="kpi-card">
                <div class="label">📍 Total Stations</div>
                <div class="value">{kpis.get('total_stations', 0)}</div>
            </div>
            <div class="kpi-card">
                <div class="label">🌡️ Avg Temperature</div>
                <div class="value">{kpis.get('avg_temperature', 'N/A')}°C</div>
            </div>
            <div class="kpi-card">
                <div class="label">💧 Avg Humidity</div>
                <div class="value">{kpis.get('avg_humidity', 'N/A')}%</div>
            </div>
        </div>

        <!-- Map -->
        <div class="map-grid">
            <div class="card">
                {map_html}
            </div>
            <div class="card">
                {self.weather_map.legend_html()}
            </div>
        </div>

        <!-- Stations -->
        <div class="card">
            <h3>📋 Stations</h3>
            {self._generate_station_table_html()}
        </div>

        <div class="footer">
            <p>Austrian Weather Map | Generated {datetime.now().strftime('%d.%m.%Y %H:%M')}</p>
        </div>
    </div>
</body>
</html>
"""

    def _generate_station_table_html(self) -> str:
        """Generiert HTML für die Stationstabelle"""
        df = stations_frame(self.snapshot)

        if df.empty:
            return '<p>No stations available.</p>'

        df = df.sort_values(["state", "location"])

        rows = []
        for _, row in df.iterrows():
            rows.append(
                "<tr>"
                f"<td>{html.escape(str(row['location']))}</td>"
                f"<td>{html.escape(str(row['state']))}</td>"
                f"<td>{format_reading(row['altitude'])}</td>"
                f"<td>{self._cell(row['temperature'])}</td>"
                f"<td>{self._cell(row['humidity'])}</td>"
                f"<td>{self._cell(row['wind_speed'])}</td>"
                f"<td>{self._cell(row['air_pressure'])}</td>"
                f"<td>{self._cell(row['rainfall'])}</td>"
                "</tr>"
            )

        return (
            '<table><thead><tr>'
            '<th>Location</th><th>State</th><th>Altitude (m)</th>'
            '<th>Temperature (°C)</th><th>Humidity (%)</th><th>Wind (m/s)</th>'
            '<th>Pressure (hPa)</th><th>Rainfall (mm)</th>'
            '</tr></thead><tbody>'
            + "".join(rows)
            + '</tbody></table>'
        )

    @staticmethod
    def _cell(value) -> str:
        return format_reading(value) if pd.notna(value) else "--"


# ============================================================================
# TERMINAL QUICK VIEW
# ============================================================================

class TerminalQuickView:
    """
    Einfache Terminal-basierte Übersicht.
    Nutzt ASCII-Zeichen für schnelle Übersicht ohne GUI.
    """

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot

    def show(self, overlay: str = "temperature"):
        """Zeigt Quick View im Terminal"""
        if not self.snapshot.stations:
            print("❌ Keine Stationsdaten verfügbar")
            return

        overlay = normalize_overlay(overlay)

        self._print_header()
        self._print_kpis()
        self._print_states()
        self._print_color_distribution(overlay)

    def _print_header(self):
        """Druckt Header"""
        print("\n" + "=" * 60)
        print("  🌦️ Austrian Weather Quick View")
        print(f"  Snapshot: {self.snapshot.timestamp}")
        print("=" * 60)

    def _print_kpis(self):
        """Druckt KPIs"""
        kpis = overview(self.snapshot)

        print(f"\n  📊 Übersicht")
        print(f"  ├─ 📍 Stationen:    {kpis['total_stations']:>8}")
        print(f"  ├─ 🌡️ Temperatur:  {kpis['avg_temperature']:>8} °C")
        print(f"  └─ 💧 Feuchte:     {kpis['avg_humidity']:>8} %")

    def _print_states(self):
        """Druckt Stationen pro Bundesland als ASCII-Balken"""
        summary = state_summary(self.snapshot)

        if summary.empty:
            return

        max_val = summary['stations'].max()

        print(f"\n  🗺️ Stationen nach Bundesland:")
        print("  " + "-" * 50)

        for _, row in summary.iterrows():
            bar_length = int((row['stations'] / max_val) * 30)
            bar = "█" * bar_length
            print(f"  {str(row['state'] or '?'):18} {bar:30} {row['stations']:>4}")

    def _print_color_distribution(self, overlay: str):
        """Druckt die Verteilung der Stationen auf die Farbbänder"""
        weather_map = WeatherMap()
        weather_map.add_weather_stations(self.snapshot.stations, overlay)

        groups = weather_map.markers_by_color()
        total = sum(len(markers) for markers in groups.values())
        info = OVERLAYS[overlay]

        print(f"\n  🎨 {info.label} ({info.unit}):")
        print("  " + "-" * 50)

        if total == 0:
            print("  Keine Marker")
            return

        for color, markers in groups.items():
            pct = len(markers) / total * 100
            label = weather_map.color_label(color)
            print(f"  {color} {label:28} {len(markers):>4} ({pct:5.1f}%)")


# ============================================================================
# FACTORY FUNKTIONEN
# ============================================================================

def _load_snapshot(snapshot: Snapshot = None, persist: bool = False) -> Snapshot:
    if snapshot is not None:
        return snapshot

    with WeatherIngester() as ingester:
        return ingester.fetch_snapshot(persist=persist)


def create_html_map(
    output_path: str = None,
    overlay: str = "temperature",
    snapshot: Snapshot = None
) -> str:
    """
    Erstellt eine HTML-Karte (ohne Snapshot wird live abgerufen).

    Beispiel:
        create_html_map(output_path="wetter.html", overlay="rainfall")
    """
    report = HTMLMapReport(_load_snapshot(snapshot), overlay)
    return report.generate(output_path)


def show_terminal_view(overlay: str = "temperature", snapshot: Snapshot = None):
    """
    Zeigt Quick View im Terminal.

    Beispiel:
        show_terminal_view(overlay="wind_speed")
    """
    view = TerminalQuickView(_load_snapshot(snapshot))
    view.show(overlay)
