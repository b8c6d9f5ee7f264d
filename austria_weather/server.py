"""
HTTP API
========

JSON-API und HTML-Karte über http.server.

Routen:
    GET /api                         Info
    GET /api/weather                 Aktueller Snapshot (wird gespeichert)
    GET /api/weather/history         Historie (?limit=, ?stationId=)
    GET /api/weather/stats           Kennzahlen des neuesten Snapshots
    GET /api/weather/<stationId>     Einzelne Station
    GET /map                         HTML-Karte (?overlay=)
"""

import json
import logging
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qs, urlparse

from .aggregation import history, latest_stats
from .config import get_config
from .ingest import StationNotFoundError, WeatherIngester
from .storage import SnapshotStore
from .visualization import HTMLMapReport

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"


@dataclass
class ApiResult:
    """Antwort einer Route"""
    status: int
    body: Union[Dict[str, Any], list, str]
    content_type: str = JSON_CONTENT_TYPE

    @property
    def is_json(self) -> bool:
        return self.content_type.startswith("application/json")

    def encode(self, indent: int = 2) -> bytes:
        if self.is_json:
            return json.dumps(self.body, indent=indent, ensure_ascii=False, default=str).encode("utf-8")
        return str(self.body).encode("utf-8")


def _error(status: int, error: str, message: str = None) -> ApiResult:
    body = {"error": error}
    if message is not None:
        body["message"] = message
    return ApiResult(status, body)


class WeatherAPI:
    """
    Routing der HTTP-API, unabhängig vom Socket-Server.

    Verwendung:
        api = WeatherAPI()
        result = api.dispatch("GET", "/api/weather/stats", {})
    """

    def __init__(self, ingester: WeatherIngester = None, store: SnapshotStore = None):
        self.ingester = ingester or WeatherIngester(store=store)
        self.store = store or self.ingester.store

    def dispatch(self, method: str, path: str, query: Optional[Dict[str, str]] = None) -> ApiResult:
        """
        Führt eine Anfrage aus.

        Args:
            method: HTTP-Methode
            path: Pfad ohne Query-String
            query: Query-Parameter (jeweils erster Wert)
        """
        method = method.upper()
        query = query or {}
        normalized = path.rstrip("/") or "/"
        parts = [p for p in normalized.split("/") if p]

        if method == "GET":
            if normalized in ("/", "/map"):
                return self.weather_map(query.get("overlay"))

            if parts == ["api"]:
                return ApiResult(200, {"message": "Austrian Weather Map API"})

            if parts == ["api", "weather"]:
                return self.weather()

            # history und stats vor <stationId>
            if parts == ["api", "weather", "history"]:
                return self.weather_history(query.get("limit"), query.get("stationId"))

            if parts == ["api", "weather", "stats"]:
                return self.weather_stats()

            if len(parts) == 3 and parts[:2] == ["api", "weather"]:
                return self.station(parts[2])

        logger.debug(f"Unbekannte Route: {method} {path}")
        return _error(404, f"Endpoint not found: {method} {path}")

    # ------------------------------------------------------------------
    # Routen
    # ------------------------------------------------------------------

    def weather(self) -> ApiResult:
        try:
            snapshot = self.ingester.fetch_snapshot(persist=True)
        except Exception as e:
            logger.error(f"Fehler beim Abruf der Wetterdaten: {e}")
            return _error(500, "Failed to fetch weather data", str(e))

        return ApiResult(200, snapshot.to_dict())

    def weather_history(self, limit: Optional[str] = None, station_id: Optional[str] = None) -> ApiResult:
        if not self.store.available:
            return _error(503, "Database not available")

        try:
            result = history(self.store, limit=limit, station_id=station_id)
        except Exception as e:
            logger.error(f"Fehler beim Lesen der Historie: {e}")
            return _error(500, "Failed to fetch historical data", str(e))

        return ApiResult(200, result.to_dict())

    def weather_stats(self) -> ApiResult:
        if not self.store.available:
            return _error(503, "Database not available")

        try:
            stats = latest_stats(self.store)
        except Exception as e:
            logger.error(f"Fehler beim Berechnen der Statistik: {e}")
            return _error(500, "Failed to fetch weather statistics", str(e))

        return ApiResult(200, stats)

    def station(self, station_id: str) -> ApiResult:
        try:
            station = self.ingester.fetch_station(station_id)
        except StationNotFoundError:
            return _error(404, "Station not found")
        except Exception as e:
            logger.error(f"Fehler beim Abruf der Station {station_id}: {e}")
            return _error(500, "Failed to fetch station data", str(e))

        return ApiResult(200, station.to_dict())

    def weather_map(self, overlay: Optional[str] = None) -> ApiResult:
        overlay = overlay or get_config().map.default_overlay

        try:
            snapshot = self.ingester.fetch_snapshot(persist=True)
        except Exception as e:
            logger.error(f"Fehler beim Abruf der Wetterdaten: {e}")
            return _error(500, "Failed to fetch weather data", str(e))

        page = HTMLMapReport(snapshot, overlay).render()
        return ApiResult(200, page, HTML_CONTENT_TYPE)


# =============================================================================
# HTTP SERVER
# =============================================================================

class WeatherRequestHandler(BaseHTTPRequestHandler):
    """Request-Handler; `api` wird von serve() gesetzt"""

    api: WeatherAPI = None
    json_indent: int = 2

    def _handle(self, method: str):
        parsed = urlparse(self.path)
        query = {key: values[0] for key, values in parse_qs(parsed.query).items() if values}

        result = self.api.dispatch(method, parsed.path, query)
        payload = result.encode(self.json_indent)

        self.send_response(result.status)
        self.send_header("Content-Type", result.content_type)
        self.send_header("Content-Length", str(len(payload)))
        self._send_cors_headers()
        self.end_headers()
        self.wfile.write(payload)

    def _send_cors_headers(self):
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")

    def do_GET(self):
        self._handle("GET")

    def do_POST(self):
        self._handle("POST")

    def do_PUT(self):
        self._handle("PUT")

    def do_DELETE(self):
        self._handle("DELETE")

    def do_OPTIONS(self):
        self.send_response(204)
        self._send_cors_headers()
        self.end_headers()

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")


def serve(host: str = None, port: int = None, api: WeatherAPI = None):
    """
    Startet den HTTP-Server (blockierend).

    Args:
        host: Bind-Adresse (Standard aus Config)
        port: Port (Standard aus Config)
        api: WeatherAPI-Instanz (Standard: neu erstellt)
    """
    config = get_config()
    host = host or config.server.host
    port = port or config.server.port
    api = api or WeatherAPI()

    handler_class = type(
        "BoundWeatherRequestHandler",
        (WeatherRequestHandler,),
        {"api": api, "json_indent": config.server.json_indent},
    )

    httpd = ThreadingHTTPServer((host, port), handler_class)
    logger.info(f"Server läuft auf http://{host}:{port}")
    logger.info(f"Historische Daten {'verfügbar' if api.store.available else 'nicht verfügbar'}")

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server wird beendet...")
    finally:
        httpd.server_close()
        api.ingester.close()
