"""
Tests für Farbskalen und Legenden
=================================
"""

import math

import pytest

from austria_weather.overlays import (
    COLOR_SCALES,
    LEGENDS,
    NO_DATA_COLOR,
    OVERLAYS,
    format_reading,
    legend_for,
    marker_color,
    normalize_overlay,
)


class TestMarkerColor:
    """Tests für die Schwellwert-Tabellen"""

    @pytest.mark.parametrize("value,expected", [
        (-15, "#0066cc"),
        (-10, "#0066cc"),
        (-5, "#0099ff"),
        (0, "#0099ff"),
        (5, "#00ccff"),
        (15, "#66ff66"),
        (25, "#ffcc00"),
        (35, "#ff6600"),
        (45, "#ff0000"),
    ])
    def test_temperature_bands(self, value, expected):
        assert marker_color(value, "temperature") == expected

    @pytest.mark.parametrize("overlay,value,expected", [
        ("humidity", 10, "#ff6600"),
        ("humidity", 95, "#0066cc"),
        ("wind_speed", 2, "#66ff66"),
        ("wind_speed", 12, "#ff3300"),
        ("air_pressure", 1013, "#66ff66"),
        ("air_pressure", 975, "#0066cc"),
        ("rainfall", 0, "#f0f0f0"),
        ("rainfall", 0.1, "#f0f0f0"),
        ("rainfall", 3, "#0099ff"),
        ("rainfall", 25, "#003399"),
    ])
    def test_other_overlays(self, overlay, value, expected):
        assert marker_color(value, overlay) == expected

    @pytest.mark.parametrize("value", [None, float("nan"), "abc"])
    def test_no_data(self, value):
        assert marker_color(value, "temperature") == NO_DATA_COLOR

    def test_zero_is_a_value(self):
        """0 mm Niederschlag ist kein fehlender Wert"""
        assert marker_color(0, "rainfall") != NO_DATA_COLOR

    def test_unknown_overlay_uses_temperature_scale(self):
        assert marker_color(25, "visibility") == marker_color(25, "temperature")

    def test_last_band_is_unbounded(self):
        for bands in COLOR_SCALES.values():
            assert math.isinf(bands[-1].max)
            maxima = [band.max for band in bands]
            assert maxima == sorted(maxima)


class TestLegends:

    def test_five_entries_per_overlay(self):
        for key in OVERLAYS:
            assert len(LEGENDS[key]) == 5

    def test_legend_for_unknown_overlay(self):
        assert legend_for("unknown") == LEGENDS["temperature"]

    def test_legend_entry_to_dict(self):
        entry = legend_for("humidity")[0]
        assert entry.to_dict() == {"color": "#ff6600", "label": "Very Dry (< 20%)"}

    def test_legend_is_a_copy(self):
        legend = legend_for("rainfall")
        legend.clear()
        assert len(legend_for("rainfall")) == 5


class TestHelpers:

    @pytest.mark.parametrize("name,expected", [
        ("humidity", "humidity"),
        (" Wind_Speed ", "wind_speed"),
        ("unknown", "temperature"),
        (None, "temperature"),
        ("", "temperature"),
    ])
    def test_normalize_overlay(self, name, expected):
        assert normalize_overlay(name) == expected

    @pytest.mark.parametrize("value,suffix,expected", [
        (None, "", "--"),
        (float("nan"), "°C", "--"),
        (21.4, "°C", "21.4°C"),
        (55.0, "%", "55%"),
        (0.0, "", "0"),
        (3, "", "3"),
    ])
    def test_format_reading(self, value, suffix, expected):
        assert format_reading(value, suffix) == expected
