"""
Wetterkarte Österreich - Streamlit Interface
============================================

Interaktive Karte mit:
- Overlay-Auswahl (Temperatur, Feuchte, Wind, Luftdruck, Niederschlag)
- Legende und Kurzübersicht
- Stations-Detailpanel
- Historie (wenn eine Datenbank verfügbar ist)

Start: streamlit run austria_weather/dashboard.py
"""

import sys
from datetime import datetime
from pathlib import Path

import plotly.express as px
import streamlit as st

# Projekt-Pfad hinzufügen
sys.path.insert(0, str(Path(__file__).parent.parent))

from austria_weather.aggregation import (
    history,
    overview,
    snapshot_stats,
    state_summary,
    station_timeseries,
)
from austria_weather.api_client import WeatherAPIError
from austria_weather.config import get_config
from austria_weather.ingest import WeatherIngester
from austria_weather.map_renderer import WeatherMap
from austria_weather.overlays import OVERLAYS, normalize_overlay

# =============================================================================
# PAGE CONFIG
# =============================================================================
st.set_page_config(
    page_title="Austrian Weather Map",
    page_icon="🌦️",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        background: linear-gradient(135deg, #1E3A5F 0%, #2C5282 100%);
        padding: 1.5rem 2rem;
        border-radius: 12px;
        margin-bottom: 1.5rem;
        color: white;
    }

    .main-header h1 {
        margin: 0;
        font-size: 2rem;
        font-weight: 700;
    }

    .main-header p {
        margin: 0.5rem 0 0 0;
        opacity: 0.85;
    }

    .map-legend h4 {
        margin-bottom: 0.5rem;
    }

    .legend-item {
        display: flex;
        align-items: center;
        margin: 0.35rem 0;
    }

    .legend-color {
        width: 16px;
        height: 16px;
        border-radius: 50%;
        margin-right: 0.5rem;
        border: 1px solid #ccc;
    }

    .footer {
        text-align: center;
        padding: 2rem;
        color: #666;
        font-size: 0.85rem;
        border-top: 1px solid #eee;
        margin-top: 3rem;
    }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


# =============================================================================
# DATA LOADING
# =============================================================================

def get_ingester() -> WeatherIngester:
    """Ingester pro Session (hält den Snapshot-Speicher)"""
    if "ingester" not in st.session_state:
        st.session_state.ingester = WeatherIngester()
    return st.session_state.ingester


def load_snapshot():
    """Holt einen neuen Snapshot und legt ihn im Session State ab"""
    try:
        st.session_state.snapshot = get_ingester().fetch_snapshot(persist=True)
        st.session_state.loaded_at = datetime.now()
        st.session_state.load_error = None
    except WeatherAPIError as e:
        st.session_state.load_error = str(e)


def render_station_details(weather_map: WeatherMap, station_id: str):
    """Rendert das Stations-Detailpanel"""
    info = weather_map.select_station(station_id)

    if info is None:
        st.info("Station auswählen, um Details anzuzeigen.")
        return

    st.markdown(f"#### 📍 {info.location}")
    st.caption(f"{info.state} • {info.altitude} m • Aktualisiert: {info.last_updated}")

    col1, col2, col3 = st.columns(3)
    col1.metric("Temperature", f"{info.temperature} °C")
    col2.metric("Humidity", f"{info.humidity} %")
    col3.metric("Wind Speed", f"{info.wind_speed} m/s")

    col1, col2, col3 = st.columns(3)
    col1.metric("Pressure", f"{info.air_pressure} hPa")
    col2.metric("Rainfall", f"{info.rainfall} mm")
    col3.metric("Solar", f"{info.sun_watts} W/m²")


def render_history(station_options: dict, overlay: str):
    """Rendert den Historie-Tab"""
    store = get_ingester().store

    if not store.available:
        st.warning("⚠️ Keine Datenbank verfügbar - historische Daten deaktiviert.")
        return

    col1, col2 = st.columns([2, 1])
    with col1:
        label = st.selectbox("Station", list(station_options), key="history_station")
    with col2:
        limit = st.number_input(
            "Snapshots",
            min_value=1,
            max_value=get_config().history.max_limit,
            value=get_config().history.default_limit,
        )

    station_id = station_options.get(label)
    result = history(store, limit=limit, station_id=station_id)

    if not result.data:
        st.info("Noch keine Snapshots für diese Station gespeichert.")
        return

    series = station_timeseries(result.data, station_id, overlay)
    info = OVERLAYS[overlay]

    fig = px.line(
        series,
        x="created_at",
        y="value",
        markers=True,
        title=f"{info.label} - {label}",
    )
    fig.update_layout(xaxis_title="", yaxis_title=f"{info.label} ({info.unit})", hovermode="x unified")
    st.plotly_chart(fig, use_container_width=True)

    st.markdown("##### 📊 Kennzahlen des neuesten Snapshots")
    stats = snapshot_stats(result.data[-1])
    if stats:
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Ø Temperature", _fmt(stats["avg_temperature"], "°C"))
        col2.metric("Ø Humidity", _fmt(stats["avg_humidity"], "%"))
        col3.metric("Max Wind", _fmt(stats["max_wind_speed"], "m/s"))
        col4.metric("Rainfall Σ", _fmt(stats["total_rainfall"], "mm"))


def _fmt(value, unit: str) -> str:
    return f"{value:.1f} {unit}" if value is not None else "N/A"


# =============================================================================
# MAIN DASHBOARD
# =============================================================================

def main():
    """Hauptfunktion des Dashboards"""
    config = get_config()

    if "overlay" not in st.session_state:
        st.session_state.overlay = config.map.default_overlay
    if "snapshot" not in st.session_state:
        st.session_state.snapshot = None
        load_snapshot()

    st.markdown("""
        <div class="main-header">
            <h1>🌦️ Austrian Weather Map</h1>
            <p>Aktuelle Messwerte der österreichischen Wetterstationen</p>
        </div>
    """, unsafe_allow_html=True)

    # =========================================================================
    # SIDEBAR
    # =========================================================================
    with st.sidebar:
        st.markdown("#### 🎨 Overlay")
        keys = list(OVERLAYS)
        overlay = st.selectbox(
            "Overlay",
            keys,
            index=keys.index(normalize_overlay(st.session_state.overlay)),
            format_func=lambda key: OVERLAYS[key].label,
            label_visibility="collapsed",
        )
        st.session_state.overlay = overlay

        st.markdown("---")

        if st.button("🔄 Daten aktualisieren", use_container_width=True):
            load_snapshot()

        loaded_at = st.session_state.get("loaded_at")
        st.markdown("---")
        st.markdown(f"""
            <div style="font-size: 0.8rem; color: #666;">
                <strong>Datenquelle:</strong><br>
                {config.weather_api.base_url}<br><br>
                <strong>Letzte Aktualisierung:</strong><br>
                {loaded_at.strftime("%d.%m.%Y %H:%M") if loaded_at else "N/A"}
            </div>
        """, unsafe_allow_html=True)

    if st.session_state.get("load_error"):
        st.error(f"❌ Fehler beim Laden der Wetterdaten: {st.session_state.load_error}")

    snapshot = st.session_state.snapshot
    if snapshot is None:
        return

    weather_map = WeatherMap()
    weather_map.add_weather_stations(snapshot.stations, overlay)

    kpis = overview(snapshot)
    col1, col2, col3 = st.columns(3)
    col1.metric("📍 Total Stations", kpis["total_stations"])
    col2.metric("🌡️ Avg Temperature", f"{kpis['avg_temperature']} °C")
    col3.metric("💧 Avg Humidity", f"{kpis['avg_humidity']} %")

    station_options = {
        f"{s.location} ({s.state})": s.id
        for s in sorted(snapshot.stations, key=lambda s: (s.location, s.id))
    }

    tab1, tab2, tab3 = st.tabs(["🗺️ Karte", "📋 Bundesländer", "📈 Historie"])

    with tab1:
        col1, col2 = st.columns([3, 1])
        with col1:
            st.plotly_chart(weather_map.to_figure(), use_container_width=True)
        with col2:
            st.markdown(weather_map.legend_html(), unsafe_allow_html=True)
            st.markdown("---")
            if station_options:
                label = st.selectbox("Station", list(station_options), key="detail_station")
                render_station_details(weather_map, station_options[label])

    with tab2:
        summary = state_summary(snapshot)
        st.dataframe(
            summary.rename(columns={
                "state": "Bundesland",
                "stations": "Stationen",
                "avg_temperature": "Ø Temperatur (°C)",
                "avg_humidity": "Ø Feuchte (%)",
            }).round(1),
            use_container_width=True,
            hide_index=True,
        )

    with tab3:
        if station_options:
            render_history(station_options, overlay)

    st.markdown("""
        <div class="footer">
            Austrian Weather Map • Datenquelle: techweb.at Wetter-API
        </div>
    """, unsafe_allow_html=True)


if __name__ == "__main__":
    main()
