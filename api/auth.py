"""
API Authentication Module
==========================

Schützt Cron-Endpoints mit CRON_SECRET Token.

Verwendung:
- Vercel Cron-Jobs senden automatisch den Authorization-Header
- Manuelle Aufrufe benötigen: Authorization: Bearer <CRON_SECRET>
"""

import hmac
import json
import logging
import os
from functools import wraps

logger = logging.getLogger(__name__)


def get_cron_secret() -> str:
    """Holt das CRON_SECRET aus den Environment-Variablen"""
    return os.getenv("CRON_SECRET", "")


def is_production() -> bool:
    return os.getenv("VERCEL_ENV") == "production"


def _send_json(handler, status: int, body: dict, extra_headers: dict = None):
    handler.send_response(status)
    handler.send_header('Content-type', 'application/json')
    for key, value in (extra_headers or {}).items():
        handler.send_header(key, value)
    handler.end_headers()
    handler.wfile.write(json.dumps(body).encode())


def verify_cron_request(handler_method):
    """
    Decorator zur Authentifizierung von Cron-Requests.

    Ohne CRON_SECRET: in Production gesperrt, sonst offen (Dev-Mode).
    Mit CRON_SECRET: Authorization: Bearer <secret> erforderlich.

    Usage:
        @verify_cron_request
        def do_POST(self):
            ...
    """
    @wraps(handler_method)
    def wrapper(self, *args, **kwargs):
        cron_secret = get_cron_secret()

        if not cron_secret:
            if is_production():
                logger.error("CRON_SECRET ist in Production nicht gesetzt")
                _send_json(self, 500, {"error": "CRON_SECRET not configured"})
                return
            logger.warning("CRON_SECRET nicht gesetzt - Request ohne Prüfung zugelassen")
            return handler_method(self, *args, **kwargs)

        auth_header = self.headers.get("Authorization", "")

        if auth_header.startswith("Bearer "):
            token = auth_header[7:]
            if hmac.compare_digest(token.encode(), cron_secret.encode()):
                return handler_method(self, *args, **kwargs)

        logger.warning("Nicht autorisierter Cron-Request abgewiesen")
        _send_json(
            self,
            401,
            {"error": "Unauthorized", "message": "Valid CRON_SECRET required"},
            {"WWW-Authenticate": 'Bearer realm="Austrian Weather Map"'},
        )

    return wrapper


def generate_cron_secret(length: int = 32) -> str:
    """
    Generiert ein sicheres CRON_SECRET.

    Das Ergebnis als CRON_SECRET in den Vercel Environment-Variablen hinterlegen.
    """
    import secrets
    return secrets.token_urlsafe(length)
