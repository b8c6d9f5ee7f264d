"""
Tests für die Koordinaten-Auflösung
===================================
"""

import pytest

from austria_weather.coordinates import (
    AUSTRIA_CENTER,
    LOCATION_COORDINATES,
    STATE_CENTROIDS,
    CoordinateSource,
    locate,
    resolve_coordinates,
)


class TestLookupTables:

    def test_known_cities(self):
        """20 Städte, 9 Bundesländer"""
        assert len(LOCATION_COORDINATES) == 20
        assert len(STATE_CENTROIDS) == 9

    def test_all_coordinates_inside_austria(self):
        for lat, lon in list(LOCATION_COORDINATES.values()) + list(STATE_CENTROIDS.values()):
            assert 46.3 <= lat <= 49.0
            assert 9.5 <= lon <= 17.2


class TestLocate:
    """Tests für die Fallback-Stufen"""

    def test_exact_match(self):
        match = locate("Graz", "Steiermark")

        assert match.source == CoordinateSource.EXACT
        assert match.coordinates == LOCATION_COORDINATES["Graz"]
        assert not match.is_approximate

    def test_exact_match_beats_partial(self):
        """'Wiener Neustadt' ist ein eigener Eintrag, nicht 'Wien'"""
        match = locate("Wiener Neustadt", "Niederösterreich")

        assert match.source == CoordinateSource.EXACT
        assert match.coordinates == LOCATION_COORDINATES["Wiener Neustadt"]

    def test_location_contains_key(self):
        match = locate("Innsbruck Flughafen", "Tirol")

        assert match.source == CoordinateSource.PARTIAL
        assert match.matched_key == "Innsbruck"

    def test_key_contains_location(self):
        match = locate("Klagen", "Kärnten")

        assert match.source == CoordinateSource.PARTIAL
        assert match.matched_key == "Klagenfurt"

    def test_partial_match_is_case_insensitive(self):
        match = locate("LINZ STADT", "Oberösterreich")

        assert match.source == CoordinateSource.PARTIAL
        assert match.coordinates == LOCATION_COORDINATES["Linz"]

    def test_first_table_entry_wins(self):
        """Bei mehreren Teilstring-Treffern gewinnt die Tabellenreihenfolge"""
        match = locate("Wien Hohe Warte Baden", "Wien")

        assert match.matched_key == "Wien"

    def test_state_centroid(self):
        match = locate("Obergurgl", "Tirol")

        assert match.source == CoordinateSource.STATE
        assert match.coordinates == STATE_CENTROIDS["Tirol"]
        assert match.is_approximate

    def test_country_center(self):
        match = locate("Nirgendwo", "Bayern")

        assert match.source == CoordinateSource.COUNTRY
        assert match.coordinates == AUSTRIA_CENTER

    @pytest.mark.parametrize("location", ["", None, "   "])
    def test_empty_location_skips_name_tiers(self, location):
        """Leerer Ort darf nicht über Teilstring auf die erste Stadt fallen"""
        match = locate(location, "Vorarlberg")

        assert match.source == CoordinateSource.STATE
        assert match.coordinates == STATE_CENTROIDS["Vorarlberg"]

    def test_resolve_coordinates(self):
        assert resolve_coordinates("Bregenz", "Vorarlberg") == LOCATION_COORDINATES["Bregenz"]
        assert resolve_coordinates(None, None) == AUSTRIA_CENTER
