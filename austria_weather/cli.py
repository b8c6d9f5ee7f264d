"""
Command Line Interface
======================

CLI-Befehle für die Wetterkarte Österreich.
"""

import json
import logging
import sys

import click

from .aggregation import history as load_history, latest_stats
from .api_client import WeatherAPIClient, WeatherAPIError
from .config import get_config
from .db import init_database, check_connection
from .ingest import StationNotFoundError, WeatherIngester
from .overlays import OVERLAYS, format_reading
from .storage import StorageUnavailableError, create_snapshot_store


# Logging Setup
def setup_logging(level: str = "INFO"):
    """Konfiguriert das Logging"""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Weniger verbose für externe Libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

OVERLAY_CHOICE = click.Choice(list(OVERLAYS))


@click.group()
@click.option("--debug", is_flag=True, help="Debug-Modus aktivieren")
@click.pass_context
def cli(ctx, debug):
    """
    Wetterkarte Österreich

    Abruf, Speicherung und Darstellung der österreichischen Wetterstationen.
    """
    ctx.ensure_object(dict)

    config = get_config()
    level = "DEBUG" if debug else config.log_level
    setup_logging(level)

    ctx.obj["config"] = config


@cli.command()
@click.pass_context
def check(ctx):
    """Prüft die Konfiguration und Verbindungen"""
    config = ctx.obj["config"]

    click.echo("=" * 50)
    click.echo("Wetterkarte Österreich – Systemprüfung")
    click.echo("=" * 50)

    # Konfiguration validieren
    click.echo("\n📋 Konfiguration:")
    errors = config.validate()

    if errors:
        for error in errors:
            click.echo(f"  ❌ {error}")
        sys.exit(1)
    else:
        click.echo("  ✓ Konfiguration OK")

    # API prüfen
    click.echo("\n🌐 Wetter-API:")
    with WeatherAPIClient() as client:
        if client.health_check():
            click.echo("  ✓ API erreichbar")
        else:
            click.echo("  ❌ API nicht erreichbar")

    # Datenbank prüfen
    click.echo("\n🗄️ Datenbank:")
    if not config.database.enabled:
        click.echo("  ⚠ Persistenz deaktiviert")
    elif check_connection():
        click.echo("  ✓ Verbindung OK")
    else:
        click.echo("  ❌ Verbindung fehlgeschlagen")

    click.echo("\n" + "=" * 50)
    click.echo("Prüfung abgeschlossen")


@cli.command()
@click.option("--drop", is_flag=True, help="Existierende Tabellen löschen")
@click.pass_context
def init_db(ctx, drop):
    """Initialisiert die Datenbank"""
    if drop:
        if not click.confirm("⚠️ Wirklich alle Snapshots löschen?"):
            click.echo("Abgebrochen.")
            return

    click.echo("Initialisiere Datenbank...")
    init_database(drop_existing=drop)
    click.echo("✓ Datenbank initialisiert")


@cli.command()
@click.option("--no-store", is_flag=True, help="Snapshot nicht speichern")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Snapshot als JSON-Datei speichern"
)
@click.pass_context
def fetch(ctx, no_store, output):
    """
    Holt einen aktuellen Snapshot aller Stationen.

    Der Snapshot wird gespeichert, sofern eine Datenbank verfügbar ist.
    """
    config = ctx.obj["config"]

    with WeatherIngester() as ingester:
        try:
            snapshot = ingester.fetch_snapshot(persist=not no_store)
        except WeatherAPIError as e:
            click.echo(f"❌ Abruf fehlgeschlagen: {e}")
            sys.exit(1)

        stats = ingester.stats

    click.echo(f"\n✓ {snapshot.total_stations} Stationen abgerufen ({snapshot.timestamp})")

    if not no_store:
        if stats.stored:
            click.echo("  ✓ Snapshot gespeichert")
        elif stats.storage_errors:
            click.echo("  ❌ Speichern fehlgeschlagen")
        else:
            click.echo("  ⚠ Keine Datenbank - Snapshot nicht gespeichert")

    if output:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, indent=config.server.json_indent, ensure_ascii=False)
        click.echo(f"  ✓ JSON geschrieben: {output}")


@cli.command()
@click.argument("station_id")
def station(station_id):
    """Zeigt die aktuellen Messwerte einer Station"""
    with WeatherIngester() as ingester:
        try:
            result = ingester.fetch_station(station_id)
        except StationNotFoundError:
            click.echo(f"❌ Station nicht gefunden: {station_id}")
            sys.exit(1)
        except WeatherAPIError as e:
            click.echo(f"❌ Abruf fehlgeschlagen: {e}")
            sys.exit(1)

    w = result.weather
    lat, lon = result.coordinates

    click.echo(f"\n📍 {result.location} ({result.state}) - Station {result.id}")
    click.echo("=" * 50)
    click.echo(f"  Höhe:         {format_reading(result.altitude)} m")
    click.echo(f"  Koordinaten:  {lat:.4f}, {lon:.4f}")
    click.echo(f"  Temperatur:   {format_reading(w.temperature)} °C")
    click.echo(f"  Feuchte:      {format_reading(w.humidity)} %")
    click.echo(f"  Wind:         {format_reading(w.wind_speed)} m/s (Spitze {format_reading(w.wind_peak)})")
    click.echo(f"  Luftdruck:    {format_reading(w.air_pressure)} hPa")
    click.echo(f"  Niederschlag: {format_reading(w.rainfall)} mm")
    click.echo(f"  Sonne:        {format_reading(w.sun_watts)} W/m²")
    click.echo(f"  Aktualisiert: {w.last_updated or 'N/A'}")


@cli.command()
@click.option("--limit", "-n", type=int, default=None, help="Anzahl Snapshots (Standard: 24)")
@click.option("--station", "-s", "station_id", default=None, help="Nur Snapshots mit dieser Station")
def history(limit, station_id):
    """Zeigt die gespeicherten Snapshots (älteste zuerst)"""
    store = create_snapshot_store()

    try:
        result = load_history(store, limit=limit, station_id=station_id)
    except StorageUnavailableError:
        click.echo("❌ Datenbank nicht verfügbar")
        sys.exit(1)

    click.echo(f"\n📊 {result.count} Snapshots (Limit {result.limit})")
    click.echo("=" * 60)

    if not result.data:
        click.echo("Keine Daten gefunden.")
        return

    for doc in result.data:
        line = f"  #{doc['id']:<6} {doc['created_at']} | {doc['total_stations']:>4} Stationen"

        if station_id:
            match = next(
                (s for s in doc["stations"] if str(s.get("id")) == str(station_id)),
                None
            )
            if match:
                temperature = (match.get("weather") or {}).get("temperature")
                line += f" | {format_reading(temperature)} °C"

        click.echo(line)


@cli.command()
def stats():
    """Zeigt die Kennzahlen des neuesten Snapshots"""
    store = create_snapshot_store()

    try:
        result = latest_stats(store)
    except StorageUnavailableError:
        click.echo("❌ Datenbank nicht verfügbar")
        sys.exit(1)

    if not result:
        click.echo("Keine Snapshots gespeichert.")
        return

    def fmt(value):
        return f"{value:.1f}" if value is not None else "N/A"

    click.echo(f"\n📊 Kennzahlen ({result['station_count']} Stationen)")
    click.echo("=" * 50)
    click.echo(
        f"  Temperatur:   Ø {fmt(result['avg_temperature'])} | "
        f"min {fmt(result['min_temperature'])} | max {fmt(result['max_temperature'])} °C"
    )
    click.echo(
        f"  Feuchte:      Ø {fmt(result['avg_humidity'])} | "
        f"min {fmt(result['min_humidity'])} | max {fmt(result['max_humidity'])} %"
    )
    click.echo(
        f"  Wind:         Ø {fmt(result['avg_wind_speed'])} | "
        f"max {fmt(result['max_wind_speed'])} m/s"
    )
    click.echo(
        f"  Luftdruck:    Ø {fmt(result['avg_pressure'])} | "
        f"min {fmt(result['min_pressure'])} | max {fmt(result['max_pressure'])} hPa"
    )
    click.echo(f"  Niederschlag: Σ {fmt(result['total_rainfall'])} mm")


@cli.command()
@click.option("--overlay", "-m", type=OVERLAY_CHOICE, default=None, help="Overlay (Standard aus Config)")
@click.option(
    "--output", "-o",
    type=str,
    default=None,
    help="Ausgabe-Datei (Standard: weather_map_<overlay>_<zeit>.html)"
)
@click.pass_context
def map_html(ctx, overlay, output):
    """
    Generiert eine statische HTML-Karte.

    Die Karte enthält die interaktive Plotly-Karte und kann
    ohne Server geöffnet werden.
    """
    from .visualization import create_html_map

    overlay = overlay or ctx.obj["config"].map.default_overlay

    click.echo(f"\n🗺️ Generiere HTML-Karte ({overlay})")

    try:
        output_path = create_html_map(output_path=output, overlay=overlay)
        click.echo(f"\n✓ Karte generiert: {output_path}")
    except WeatherAPIError as e:
        click.echo(f"\n❌ Fehler: {e}")
        sys.exit(1)


@cli.command()
@click.option("--overlay", "-m", type=OVERLAY_CHOICE, default=None, help="Overlay (Standard aus Config)")
@click.pass_context
def quick_view(ctx, overlay):
    """
    Zeigt eine schnelle Übersicht im Terminal.

    ASCII-basierte Visualisierung ohne GUI.
    """
    from .visualization import show_terminal_view

    overlay = overlay or ctx.obj["config"].map.default_overlay

    try:
        show_terminal_view(overlay=overlay)
    except WeatherAPIError as e:
        click.echo(f"\n❌ Fehler: {e}")
        sys.exit(1)


@cli.command()
@click.option("--host", "-h", default=None, help="Host-Adresse (Standard aus Config)")
@click.option("--port", "-p", type=int, default=None, help="Port (Standard aus Config)")
@click.pass_context
def serve(ctx, host, port):
    """Startet die HTTP-API mit HTML-Karte"""
    from .server import serve as run_server

    config = ctx.obj["config"]
    host = host or config.server.host
    port = port or config.server.port

    click.echo(f"\n🌦️ Starte Wetterkarten-Server")
    click.echo(f"   API:   http://{host}:{port}/api/weather")
    click.echo(f"   Karte: http://{host}:{port}/map")
    click.echo("   Beenden mit Ctrl+C\n")

    run_server(host=host, port=port)


@cli.command()
@click.option("--port", "-p", default=8501, help="Port für das Dashboard")
@click.option("--host", "-h", default="localhost", help="Host-Adresse")
def dashboard(port, host):
    """Startet das Streamlit Dashboard"""
    import subprocess
    from pathlib import Path

    click.echo(f"\n📊 Starte Wetterkarten-Dashboard")
    click.echo(f"   URL: http://{host}:{port}")
    click.echo("   Beenden mit Ctrl+C\n")

    dashboard_path = Path(__file__).parent / "dashboard.py"

    try:
        subprocess.run([
            sys.executable, "-m", "streamlit", "run",
            str(dashboard_path),
            "--server.port", str(port),
            "--server.address", host,
            "--browser.gatherUsageStats", "false"
        ])
    except KeyboardInterrupt:
        click.echo("\n✓ Dashboard beendet")
    except FileNotFoundError:
        click.echo("❌ Streamlit nicht installiert. Installieren mit:")
        click.echo("   pip install streamlit plotly")


def main():
    """Entry Point"""
    cli(obj={})


if __name__ == "__main__":
    main()
