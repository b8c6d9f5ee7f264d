"""
Snapshot-Speicher
=================

Persistiert normalisierte Snapshots. Ist keine Datenbank erreichbar
(oder Persistenz deaktiviert), wird ein No-Op Speicher verwendet:
Speichern wird übersprungen, Lesezugriffe melden StorageUnavailableError.
"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from .config import Config, get_config
from .db import get_session, init_database, check_connection
from .models import WeatherSnapshot, encode_station_ids, station_id_token
from .normalizer import Snapshot

logger = logging.getLogger(__name__)


class StorageUnavailableError(Exception):
    """Kein Snapshot-Speicher verfügbar"""
    pass


class SnapshotStore:
    """Schnittstelle für Snapshot-Speicher"""

    available: bool = False

    def save(self, snapshot: Snapshot) -> Optional[int]:
        raise NotImplementedError

    def recent(self, limit: int, station_id: str = None) -> List[dict]:
        """Neueste Snapshots zuerst"""
        raise NotImplementedError

    def latest(self) -> Optional[dict]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError


class NullSnapshotStore(SnapshotStore):
    """Speicher ohne Datenbank: Schreiben ist ein No-Op"""

    available = False

    def __init__(self, reason: str = "Database not available"):
        self.reason = reason

    def save(self, snapshot: Snapshot) -> Optional[int]:
        logger.debug(f"Snapshot nicht gespeichert: {self.reason}")
        return None

    def recent(self, limit: int, station_id: str = None) -> List[dict]:
        raise StorageUnavailableError(self.reason)

    def latest(self) -> Optional[dict]:
        raise StorageUnavailableError(self.reason)

    def count(self) -> int:
        raise StorageUnavailableError(self.reason)


class SQLSnapshotStore(SnapshotStore):
    """
    Snapshot-Speicher auf Basis von SQLAlchemy.

    Jeder Snapshot wird als neue Zeile eingefügt; die Reihenfolge
    ergibt sich aus created_at.
    """

    available = True

    def save(self, snapshot: Snapshot) -> Optional[int]:
        """
        Speichert einen Snapshot.

        Returns:
            ID des gespeicherten Snapshots
        """
        document = snapshot.to_dict()

        with get_session() as session:
            row = WeatherSnapshot(
                timestamp=document["timestamp"],
                total_stations=document["total_stations"],
                stations=document["stations"],
                station_ids=encode_station_ids(snapshot.station_ids),
            )
            session.add(row)
            session.flush()
            snapshot_id = row.id

        logger.info(f"Snapshot gespeichert (id={snapshot_id}, {snapshot.total_stations} Stationen)")
        return snapshot_id

    def recent(self, limit: int, station_id: str = None) -> List[dict]:
        """
        Holt die neuesten Snapshots.

        Args:
            limit: Maximale Anzahl
            station_id: Nur Snapshots, die diese Station enthalten

        Returns:
            Dokumente, neueste zuerst
        """
        with get_session() as session:
            query = session.query(WeatherSnapshot)

            if station_id:
                query = query.filter(
                    WeatherSnapshot.station_ids.contains(
                        station_id_token(station_id), autoescape=True
                    )
                )

            rows = query.order_by(
                WeatherSnapshot.created_at.desc(),
                WeatherSnapshot.id.desc()
            ).limit(limit).all()

            return [row.to_document() for row in rows]

    def latest(self) -> Optional[dict]:
        """Holt den neuesten Snapshot (None wenn leer)"""
        documents = self.recent(1)
        return documents[0] if documents else None

    def count(self) -> int:
        with get_session() as session:
            return session.query(func.count(WeatherSnapshot.id)).scalar() or 0


def create_snapshot_store(config: Config = None) -> SnapshotStore:
    """
    Erstellt den passenden Speicher.

    Returns:
        SQLSnapshotStore wenn die Datenbank erreichbar ist, sonst NullSnapshotStore
    """
    config = config or get_config()

    if not config.database.enabled:
        logger.info("Persistenz deaktiviert - historische Daten nicht verfügbar")
        return NullSnapshotStore("Persistence disabled")

    try:
        if not check_connection():
            logger.warning("Datenbank nicht erreichbar - historische Daten deaktiviert")
            return NullSnapshotStore()
        init_database()
    except (SQLAlchemyError, ImportError) as e:
        logger.warning(f"Datenbank nicht verfügbar - historische Daten deaktiviert: {e}")
        return NullSnapshotStore()

    logger.info("Snapshot-Speicher aktiv - historische Daten verfügbar")
    return SQLSnapshotStore()
