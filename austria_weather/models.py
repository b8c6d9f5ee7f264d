"""
SQLAlchemy Datenmodelle
=======================

Ein Snapshot wird als Dokument (JSON-Spalte) in einer einzigen Tabelle
gespeichert. Verwendet UTC-Timestamps für konsistente Zeitverwaltung.
"""

from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Trennzeichen für den Stations-Index
STATION_ID_SEPARATOR = "|"


def utc_now() -> datetime:
    """Gibt aktuelle UTC-Zeit zurück (timezone-aware)"""
    return datetime.now(timezone.utc)


def encode_station_ids(station_ids: Iterable[str]) -> str:
    """Baut den Stations-Index, z.B. "|11035|11036|" """
    ids = [str(s) for s in station_ids]
    if not ids:
        return ""
    return STATION_ID_SEPARATOR + STATION_ID_SEPARATOR.join(ids) + STATION_ID_SEPARATOR


def station_id_token(station_id: str) -> str:
    """Suchbegriff für eine Station im Stations-Index"""
    return f"{STATION_ID_SEPARATOR}{station_id}{STATION_ID_SEPARATOR}"


class WeatherSnapshot(Base):
    """
    Speichert einen vollständigen Abruf aller Stationen.

    Jeder Abruf wird als neue Zeile eingefügt (keine Updates).
    """
    __tablename__ = "weather_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Zeitstempel des Abrufs (ISO-String wie in der API-Antwort)
    timestamp = Column(String(40), nullable=False)
    total_stations = Column(Integer, nullable=False, default=0)

    # Dokument: Liste der normalisierten Stationen
    stations = Column(JSON, nullable=False)

    # Stations-Index für Filterung ohne JSON-Operatoren
    station_ids = Column(Text, nullable=False, default="")

    # Tracking (UTC-aware)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        Index('ix_weather_snapshots_created_at', 'created_at'),
    )

    def __repr__(self):
        return (
            f"<WeatherSnapshot(id={self.id}, timestamp={self.timestamp}, "
            f"stations={self.total_stations})>"
        )

    def to_document(self) -> dict:
        """Konvertiert zum gespeicherten Dokument"""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "total_stations": self.total_stations,
            "stations": self.stations or [],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
