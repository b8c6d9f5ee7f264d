"""
Austria Weather Map
===================

Wetterstationsdaten für Österreich:
- Abfrage der Stationsliste von der Wetter-API
- Normalisierung in ein einheitliches JSON-Schema
- Optionale Speicherung von Snapshots (SQLAlchemy)
- Historische Auswertungen und Kennzahlen
- Interaktive Karte mit farbcodierten Overlays

Version: 1.0.0
"""

__version__ = "1.0.0"
