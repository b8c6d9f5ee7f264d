"""
Snapshot Cron Job - Regelmäßiger Abruf aller Stationen

Ausführung: stündlich via Vercel Cron

Holt einen Snapshot und speichert ihn in der Datenbank (DATABASE_URL).
"""
from http.server import BaseHTTPRequestHandler
import json
import os
import sys
from datetime import datetime, timezone

# Projekt-Root zum Path hinzufügen
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from api.auth import verify_cron_request
from austria_weather.api_client import WeatherAPIError
from austria_weather.ingest import WeatherIngester


def run_snapshot(ingester: WeatherIngester = None) -> dict:
    """Holt und speichert einen Snapshot"""
    ingester = ingester or WeatherIngester()

    with ingester:
        snapshot = ingester.fetch_snapshot(persist=True)
        stats = ingester.stats.to_dict()

    return {
        "status": "success",
        "timestamp": snapshot.timestamp,
        "total_stations": snapshot.total_stations,
        "persisted": stats["stored"] > 0,
        "stats": stats,
    }


class handler(BaseHTTPRequestHandler):
    @verify_cron_request
    def do_POST(self):
        try:
            result = run_snapshot()
            status = 200
        except WeatherAPIError as e:
            status = 502
            result = {
                "status": "error",
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }

        self.send_response(status)
        self.send_header('Content-type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(result).encode())

    def do_GET(self):
        """GET für Vercel Cron und manuellen Test"""
        self.do_POST()
