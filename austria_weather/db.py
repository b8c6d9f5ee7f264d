"""
Datenbankverbindung
===================

Engine und Sessions für den Snapshot-Speicher.
SQLite lokal, PostgreSQL in Production (DATABASE_URL).
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator

from sqlalchemy import create_engine, text, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError, OperationalError

from .config import DatabaseConfig, get_config
from .models import Base

logger = logging.getLogger(__name__)


_engine = None
_SessionFactory = None


def _engine_options(db: DatabaseConfig) -> Dict[str, Any]:
    """create_engine()-Argumente je nach Datenbanktyp"""
    options: Dict[str, Any] = {"echo": db.echo, "pool_pre_ping": True}

    if db.is_sqlite:
        # Server und Streamlit greifen aus mehreren Threads zu
        options["connect_args"] = {"check_same_thread": False, "timeout": db.connect_timeout}
        return options

    options.update(
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=30,
        pool_recycle=3600,
    )
    if db.is_postgres:
        options["connect_args"] = {"connect_timeout": db.connect_timeout}

    return options


def _display_url(url: str) -> str:
    """URL ohne Zugangsdaten für Logs"""
    return url.split("@")[-1] if "@" in url else url


def reset_engine():
    """Verwirft Engine und Session Factory (Verbindungsverlust, neue Config)"""
    global _engine, _SessionFactory

    if _engine is not None:
        try:
            _engine.dispose()
        except SQLAlchemyError as e:
            logger.debug(f"Engine konnte nicht freigegeben werden: {e}")

    _engine = None
    _SessionFactory = None


def get_engine():
    """Engine zur konfigurierten DATABASE_URL (wird einmal erstellt)"""
    global _engine

    if _engine is None:
        db = get_config().database
        _engine = create_engine(db.url, **_engine_options(db))

        @event.listens_for(_engine, "connect")
        def connect(dbapi_connection, connection_record):
            logger.debug("Neue Datenbankverbindung")

        logger.info(f"Datenbank-Engine erstellt: {_display_url(db.url)}")

    return _engine


def get_session_factory():
    global _SessionFactory

    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)

    return _SessionFactory


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Session mit Commit bei Erfolg und Rollback bei Fehlern.

    Fehler werden nach dem Rollback weitergereicht; bei einem
    OperationalError wird zusätzlich die Engine verworfen.

    Beispiel:
        with get_session() as session:
            session.query(WeatherSnapshot).count()
    """
    session = get_session_factory()()

    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Datenbankfehler ({type(e).__name__}): {e}")
        if isinstance(e, OperationalError):
            reset_engine()
        raise
    finally:
        session.close()


def init_database(drop_existing: bool = False):
    """Legt die Tabelle weather_snapshots an (optional vorher löschen)"""
    engine = get_engine()

    if drop_existing:
        logger.warning("Lösche gespeicherte Snapshots...")
        Base.metadata.drop_all(engine)

    Base.metadata.create_all(engine)
    logger.info("Datenbank initialisiert.")


def check_connection() -> bool:
    """True, wenn ein SELECT 1 durchgeht"""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Datenbank nicht erreichbar: {e}")
        reset_engine()
        return False

    logger.debug("Datenbankverbindung OK")
    return True


def close_connection():
    """Gibt alle Verbindungen frei"""
    if _engine is not None:
        reset_engine()
        logger.info("Datenbankverbindung geschlossen.")
