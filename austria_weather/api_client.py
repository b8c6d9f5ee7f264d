"""
Wetter-API Client
=================

HTTP-Client für die österreichische Stationsliste mit:
- Session-Handling
- Fehlerbehandlung
- Response-Parsing
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

import requests

from .config import get_config

logger = logging.getLogger(__name__)


class WeatherAPIError(Exception):
    """Abruf der Wetterdaten fehlgeschlagen"""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class APIResponse:
    """Strukturierte API-Response"""
    success: bool
    status_code: int
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    response_time_ms: float = 0

    @property
    def station_list(self) -> List[Dict[str, Any]]:
        """Gibt die Roh-Stationsliste zurück"""
        if self.data and isinstance(self.data, dict):
            stations = self.data.get("station_list")
            if isinstance(stations, list):
                return stations
        return []

    def raise_for_error(self):
        """Wirft WeatherAPIError bei fehlgeschlagenem Abruf"""
        if not self.success:
            raise WeatherAPIError(self.error or "Unbekannter Fehler", self.status_code)


# =============================================================================
# API CLIENT
# =============================================================================

class WeatherAPIClient:
    """
    Client für die Wetter-API (Stationsliste Österreich).

    Ein Abruf liefert alle Stationen auf einmal; Einzelstationen
    werden aus der vollständigen Liste gefiltert.
    """

    def __init__(self, base_url: str = None, timeout: int = None):
        """
        Args:
            base_url: API URL (optional, aus Config)
            timeout: Timeout in Sekunden (optional, aus Config)
        """
        config = get_config()

        self.base_url = base_url or config.weather_api.base_url
        self.timeout = timeout or config.weather_api.timeout
        self.station_filter = config.weather_api.station_filter
        self.response_format = config.weather_api.response_format

        self.session = self._create_session()

        # Request Counter für Statistiken
        self._request_count = 0
        self._error_count = 0

    def _create_session(self) -> requests.Session:
        """Erstellt eine Session mit Standard-Headern"""
        session = requests.Session()
        session.headers.update({
            "Accept": "application/json",
            "User-Agent": "Austria-Weather-Map/1.0"
        })
        return session

    def _make_request(self, params: Dict[str, Any]) -> APIResponse:
        """
        Führt einen GET-Request auf die API durch.

        Returns:
            APIResponse mit Daten oder Fehler
        """
        try:
            start_time = time.time()
            self._request_count += 1

            response = self.session.get(
                self.base_url,
                params=params,
                timeout=self.timeout
            )

            response_time = (time.time() - start_time) * 1000

            if response.status_code != 200:
                self._error_count += 1
                error_msg = f"Weather API responded with status: {response.status_code}"
                logger.warning(f"API Fehler: {error_msg}")
                return APIResponse(
                    success=False,
                    status_code=response.status_code,
                    error=error_msg,
                    response_time_ms=response_time
                )

            try:
                data = response.json()
            except (ValueError, requests.exceptions.JSONDecodeError) as e:
                self._error_count += 1
                logger.warning(f"JSON Parse Error: {e}")
                return APIResponse(
                    success=False,
                    status_code=response.status_code,
                    error=f"Invalid JSON from weather API: {str(e)[:100]}",
                    response_time_ms=response_time
                )

            logger.debug(f"API OK: {self.base_url} | {response_time:.0f}ms")

            return APIResponse(
                success=True,
                status_code=200,
                data=data,
                response_time_ms=response_time
            )

        except requests.exceptions.Timeout:
            self._error_count += 1
            logger.error(f"API Timeout nach {self.timeout}s")
            return APIResponse(
                success=False,
                status_code=0,
                error=f"Timeout after {self.timeout}s"
            )

        except requests.exceptions.ConnectionError as e:
            self._error_count += 1
            logger.error(f"API Verbindungsfehler: {e}")
            return APIResponse(
                success=False,
                status_code=0,
                error=f"Connection error: {str(e)[:100]}"
            )

        except requests.exceptions.RequestException as e:
            self._error_count += 1
            logger.error(f"Request Fehler: {type(e).__name__}: {e}")
            return APIResponse(
                success=False,
                status_code=0,
                error=f"Request error: {str(e)[:100]}"
            )

    def fetch_station_list(self) -> APIResponse:
        """
        Holt die vollständige Stationsliste.

        Returns:
            APIResponse; bei Erfolg enthält data["station_list"] die Rohdaten
        """
        params = {
            "wst": self.station_filter,
            "format": self.response_format,
        }

        response = self._make_request(params)

        if response.success:
            logger.info(
                f"{len(response.station_list)} Stationen abgerufen "
                f"({response.response_time_ms:.0f}ms)"
            )

        return response

    def health_check(self) -> bool:
        """Prüft ob die API erreichbar ist"""
        response = self.fetch_station_list()
        return response.success

    def get_stats(self) -> Dict[str, Any]:
        """Gibt Statistiken über die API-Nutzung zurück"""
        return {
            "total_requests": self._request_count,
            "total_errors": self._error_count,
            "error_rate": self._error_count / max(1, self._request_count),
        }

    def close(self):
        """Schließt die Session"""
        if self.session:
            self.session.close()
            logger.debug(f"API Client geschlossen. Stats: {self.get_stats()}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
