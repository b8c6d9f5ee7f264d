"""
Konfigurationsmanagement
========================

Lädt Konfiguration aus Environment-Variablen oder .env Datei.
Mit Validierung und Type Checking.
"""

import logging
import os
import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

from .overlays import OVERLAYS

# .env Datei laden (falls vorhanden)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

class ConfigError(Exception):
    """Konfigurationsfehler"""
    pass


def validate_url(url: str, name: str) -> str:
    """Validiert eine URL"""
    if not url:
        return url

    if not re.match(r'^https?://', url):
        raise ConfigError(f"{name}: URL muss mit http:// oder https:// beginnen")

    return url.rstrip('/')


def parse_bool(value: str) -> bool:
    """Parst einen String zu Boolean"""
    return value.lower() in ('true', '1', 'yes', 'on')


def parse_int(value: str, default: int = 0) -> int:
    """Parst einen String zu Integer mit Default"""
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


# =============================================================================
# CONFIG DATACLASSES
# =============================================================================

@dataclass
class WeatherAPIConfig:
    """Wetter-API Konfiguration"""
    base_url: str = "https://cdn3.techweb.at/api/weather/at/data"
    station_filter: str = "all"  # wst Parameter
    response_format: str = "json"
    timeout: int = 15

    def validate(self) -> List[str]:
        """Validiert die API-Konfiguration"""
        errors = []

        if not self.base_url:
            errors.append("WEATHER_API_URL ist nicht gesetzt")
        else:
            try:
                validate_url(self.base_url, "WEATHER_API_URL")
            except ConfigError as e:
                errors.append(str(e))

        if self.timeout < 1:
            errors.append(f"WEATHER_API_TIMEOUT muss mindestens 1 sein (ist: {self.timeout})")

        return errors


@dataclass
class DatabaseConfig:
    """Datenbank Konfiguration (Snapshot-Speicher)"""
    url: str = "sqlite:///austria_weather.db"
    enabled: bool = True
    echo: bool = False  # SQL Logging
    pool_size: int = 5
    max_overflow: int = 10
    connect_timeout: int = 5

    def validate(self) -> List[str]:
        """Validiert die Datenbank-Konfiguration"""
        errors = []

        if not self.enabled:
            return errors

        if not self.url:
            errors.append("DATABASE_URL ist nicht gesetzt (oder PERSISTENCE_ENABLED=false setzen)")
        elif not re.match(r'^(postgresql|sqlite|mysql)', self.url):
            errors.append("DATABASE_URL: Unbekannter Datenbanktyp")

        if self.pool_size < 1:
            errors.append("DATABASE_POOL_SIZE muss mindestens 1 sein")

        return errors

    @property
    def is_sqlite(self) -> bool:
        """Prüft ob SQLite verwendet wird"""
        return 'sqlite' in self.url.lower()

    @property
    def is_postgres(self) -> bool:
        """Prüft ob PostgreSQL verwendet wird"""
        return 'postgresql' in self.url.lower() or 'postgres' in self.url.lower()


@dataclass
class HistoryConfig:
    """Limits für historische Abfragen"""
    default_limit: int = 24
    max_limit: int = 1000

    def validate(self) -> List[str]:
        errors = []

        if self.default_limit < 1:
            errors.append("HISTORY_DEFAULT_LIMIT muss mindestens 1 sein")

        if self.max_limit < self.default_limit:
            errors.append("HISTORY_MAX_LIMIT darf nicht kleiner als HISTORY_DEFAULT_LIMIT sein")

        return errors


@dataclass
class ServerConfig:
    """HTTP-Server Konfiguration"""
    host: str = "127.0.0.1"
    port: int = 8000
    json_indent: int = 2

    def validate(self) -> List[str]:
        errors = []

        if not 0 < self.port < 65536:
            errors.append(f"SERVER_PORT ungültig (ist: {self.port})")

        return errors


@dataclass
class MapConfig:
    """Karten-Konfiguration"""
    default_overlay: str = "temperature"


# =============================================================================
# MAIN CONFIG CLASS
# =============================================================================

@dataclass
class Config:
    """Hauptkonfiguration"""
    weather_api: WeatherAPIConfig = field(default_factory=WeatherAPIConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    map: MapConfig = field(default_factory=MapConfig)

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Lädt Konfiguration aus Environment-Variablen"""
        config = cls()

        # Wetter-API
        config.weather_api.base_url = os.getenv("WEATHER_API_URL", config.weather_api.base_url).rstrip('/')
        config.weather_api.station_filter = os.getenv("WEATHER_API_STATIONS", "all")
        config.weather_api.timeout = parse_int(os.getenv("WEATHER_API_TIMEOUT", "15"), 15)

        # Datenbank
        config.database.url = os.getenv("DATABASE_URL", config.database.url)
        config.database.enabled = parse_bool(os.getenv("PERSISTENCE_ENABLED", "true"))
        config.database.echo = parse_bool(os.getenv("DATABASE_ECHO", "false"))
        config.database.pool_size = parse_int(os.getenv("DATABASE_POOL_SIZE", "5"), 5)
        config.database.max_overflow = parse_int(os.getenv("DATABASE_MAX_OVERFLOW", "10"), 10)
        config.database.connect_timeout = parse_int(os.getenv("DATABASE_CONNECT_TIMEOUT", "5"), 5)

        # Historie
        config.history.default_limit = parse_int(os.getenv("HISTORY_DEFAULT_LIMIT", "24"), 24)
        config.history.max_limit = parse_int(os.getenv("HISTORY_MAX_LIMIT", "1000"), 1000)

        # Server
        config.server.host = os.getenv("SERVER_HOST", config.server.host)
        config.server.port = parse_int(os.getenv("SERVER_PORT", "8000"), 8000)

        # Karte
        overlay = os.getenv("MAP_DEFAULT_OVERLAY", "temperature").strip().lower()
        if overlay not in OVERLAYS:
            logger.warning(f"Unbekanntes Overlay ignoriert: {overlay}")
            overlay = "temperature"
        config.map.default_overlay = overlay

        # Logging
        config.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if config.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            config.log_level = "INFO"

        return config

    def validate(self) -> List[str]:
        """Validiert die gesamte Konfiguration und gibt Fehler zurück"""
        errors = []

        errors.extend(self.weather_api.validate())
        errors.extend(self.database.validate())
        errors.extend(self.history.validate())
        errors.extend(self.server.validate())

        return errors

    def is_valid(self) -> bool:
        """Prüft ob die Konfiguration valide ist"""
        return len(self.validate()) == 0

    def to_dict(self) -> dict:
        """Konvertiert zu Dictionary (ohne Zugangsdaten)"""
        return {
            "weather_api": {
                "base_url": self.weather_api.base_url,
                "station_filter": self.weather_api.station_filter,
                "timeout": self.weather_api.timeout,
            },
            "database": {
                "enabled": self.database.enabled,
                "type": "sqlite" if self.database.is_sqlite else "postgresql",
                "echo": self.database.echo,
            },
            "history": {
                "default_limit": self.history.default_limit,
                "max_limit": self.history.max_limit,
            },
            "server": {
                "host": self.server.host,
                "port": self.server.port,
            },
            "default_overlay": self.map.default_overlay,
            "log_level": self.log_level,
        }


# =============================================================================
# SINGLETON MANAGEMENT
# =============================================================================

# Globale Konfiguration (Singleton)
_config: Optional[Config] = None


def get_config() -> Config:
    """Gibt die globale Konfiguration zurück"""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config() -> Config:
    """Lädt die Konfiguration neu"""
    global _config
    _config = Config.from_env()
    return _config


def set_config(config: Config):
    """Setzt eine benutzerdefinierte Konfiguration (für Tests)"""
    global _config
    _config = config
