"""
Health Check Endpoint
"""
from http.server import BaseHTTPRequestHandler
import json
import os
import sys
from datetime import datetime, timezone

# Projekt-Root zum Path hinzufügen
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from austria_weather import __version__
from austria_weather.config import get_config


class handler(BaseHTTPRequestHandler):
    def do_GET(self):
        config = get_config()

        response = {
            "status": "healthy",
            "service": "austria-weather-map",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "persistence": "enabled" if config.database.enabled else "disabled",
            "security": "CRON_SECRET enabled" if os.getenv("CRON_SECRET") else "CRON_SECRET not set",
        }

        self.send_response(200)
        self.send_header('Content-type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(response, indent=2).encode())
