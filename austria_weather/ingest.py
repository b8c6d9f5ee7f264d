"""
Daten-Ingestion
===============

Holt die Stationsliste von der API, normalisiert sie und speichert
den Snapshot (sofern ein Speicher verfügbar ist).
Fehler beim Speichern werden geloggt und brechen den Abruf nicht ab.
"""

import logging
from dataclasses import dataclass

from .api_client import WeatherAPIClient, WeatherAPIError
from .normalizer import Snapshot, Station, normalize_snapshot, normalize_station
from .storage import SnapshotStore, create_snapshot_store

logger = logging.getLogger(__name__)


class StationNotFoundError(Exception):
    """Station ist in der aktuellen Stationsliste nicht enthalten"""

    def __init__(self, station_id: str):
        super().__init__(f"Station not found: {station_id}")
        self.station_id = station_id


@dataclass
class IngestionStats:
    """Statistiken für Ingestion-Operationen"""
    fetched: int = 0
    stored: int = 0
    storage_errors: int = 0

    def to_dict(self) -> dict:
        return {
            "fetched": self.fetched,
            "stored": self.stored,
            "storage_errors": self.storage_errors,
        }


class WeatherIngester:
    """
    Orchestriert Abruf, Normalisierung und Speicherung.

    Verwendung:
        ingester = WeatherIngester()
        snapshot = ingester.fetch_snapshot()
        station = ingester.fetch_station("11035")
    """

    def __init__(self, api_client: WeatherAPIClient = None, store: SnapshotStore = None):
        self.api_client = api_client or WeatherAPIClient()
        self._store = store
        self.stats = IngestionStats()

    @property
    def store(self) -> SnapshotStore:
        """Snapshot-Speicher (wird beim ersten Zugriff erstellt)"""
        if self._store is None:
            self._store = create_snapshot_store()
        return self._store

    def _fetch_raw(self) -> dict:
        response = self.api_client.fetch_station_list()

        if not response.success:
            logger.error(f"Abruf der Wetterdaten fehlgeschlagen: {response.error}")
            response.raise_for_error()

        data = response.data
        if not isinstance(data, dict) or not isinstance(data.get("station_list"), list):
            logger.error("Antwort der Wetter-API enthält keine station_list")
            raise WeatherAPIError("Invalid payload: station_list missing", response.status_code)

        return data

    def fetch_snapshot(self, persist: bool = True) -> Snapshot:
        """
        Holt und normalisiert alle Stationen.

        Args:
            persist: Snapshot speichern (wenn Speicher verfügbar)

        Returns:
            Normalisierter Snapshot

        Raises:
            WeatherAPIError: wenn der Abruf fehlschlägt
        """
        payload = self._fetch_raw()
        snapshot = normalize_snapshot(payload)
        self.stats.fetched += 1

        logger.info(f"Snapshot erstellt: {snapshot.total_stations} Stationen")

        if persist:
            self._persist(snapshot)

        return snapshot

    def _persist(self, snapshot: Snapshot):
        """Speichert einen Snapshot; Fehler werden nur geloggt"""
        try:
            snapshot_id = self.store.save(snapshot)
        except Exception as e:
            self.stats.storage_errors += 1
            logger.error(f"Fehler beim Speichern des Snapshots: {e}")
            return

        if snapshot_id is not None:
            self.stats.stored += 1

    def fetch_station(self, station_id: str) -> Station:
        """
        Holt die aktuellen Daten einer einzelnen Station.

        Raises:
            WeatherAPIError: wenn der Abruf fehlschlägt
            StationNotFoundError: wenn die Station nicht in der Liste ist
        """
        payload = self._fetch_raw()
        station_id = str(station_id).strip()

        for raw in payload["station_list"]:
            if isinstance(raw, dict) and str(raw.get("station_id", "")) == station_id:
                return normalize_station(raw)

        logger.info(f"Station {station_id} nicht gefunden")
        raise StationNotFoundError(station_id)

    def close(self):
        self.api_client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

