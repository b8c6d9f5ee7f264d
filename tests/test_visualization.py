"""
Tests für HTML-Karte und Terminal Quick View
============================================
"""

import pytest
from unittest.mock import patch

from austria_weather.normalizer import normalize_snapshot
from austria_weather.visualization import (
    HTMLMapReport,
    TerminalQuickView,
    create_html_map,
    show_terminal_view,
)

from conftest import FIXED_NOW


@pytest.fixture
def empty_snapshot():
    return normalize_snapshot({"station_list": []}, now=FIXED_NOW)


class TestHTMLMapReport:
    """Tests für die statische HTML-Karte"""

    def test_render_contains_map_and_legend(self, snapshot):
        page = HTMLMapReport(snapshot, "humidity").render()

        assert page.strip().startswith("<!DOCTYPE html>")
        assert "cdn.plot.ly" in page
        assert "Humidity (%)" in page
        assert "legend-item" in page
        assert FIXED_NOW.isoformat() in page

    def test_kpis(self, snapshot):
        page = HTMLMapReport(snapshot).render()

        assert "Total Stations" in page
        assert "73.5%" in page

    def test_station_table(self, snapshot):
        page = HTMLMapReport(snapshot).render()

        assert "<td>Graz Flughafen</td>" in page
        assert "<td>Obergurgl</td>" in page
        assert "<td>-3.5</td>" in page
        assert "<td>--</td>" in page

    def test_overlay_links(self, snapshot):
        page = HTMLMapReport(snapshot, "rainfall").render()

        for key in ("temperature", "humidity", "wind_speed", "air_pressure", "rainfall"):
            assert f'href="?overlay={key}"' in page
        assert 'class="overlay-link active" href="?overlay=rainfall"' in page

    def test_unknown_overlay_uses_temperature(self, snapshot):
        report = HTMLMapReport(snapshot, "snow")
        assert report.overlay == "temperature"

    def test_empty_snapshot(self, empty_snapshot):
        page = HTMLMapReport(empty_snapshot).render()

        assert "No stations available." in page
        assert "N/A" in page

    def test_location_is_escaped(self, snapshot):
        snapshot.stations[0].location = "<script>alert(1)</script>"

        page = HTMLMapReport(snapshot).render()

        assert "<td>&lt;script&gt;alert(1)&lt;/script&gt;</td>" in page

    def test_generate_writes_file(self, snapshot, tmp_path):
        output = tmp_path / "karte.html"

        path = HTMLMapReport(snapshot, "wind_speed").generate(str(output))

        assert path == str(output)
        assert "Wind Speed (m/s)" in output.read_text(encoding="utf-8")

    def test_generate_default_filename(self, snapshot, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        path = HTMLMapReport(snapshot, "rainfall").generate()

        assert path.startswith("weather_map_rainfall_")
        assert path.endswith(".html")
        assert (tmp_path / path).exists()


class TestTerminalQuickView:
    """Tests für die Terminal-Ausgabe"""

    def test_show(self, snapshot, capsys):
        TerminalQuickView(snapshot).show("temperature")

        out = capsys.readouterr().out
        assert "Austrian Weather Quick View" in out
        assert "Wien" in out
        assert "Steiermark" in out
        assert "Tirol" in out
        assert "Temperature (°C)" in out
        assert "No data" in out

    def test_show_empty(self, empty_snapshot, capsys):
        TerminalQuickView(empty_snapshot).show()

        assert "Keine Stationsdaten verfügbar" in capsys.readouterr().out


class TestFactoryFunctions:

    def test_create_html_map_with_snapshot(self, snapshot, tmp_path):
        output = tmp_path / "map.html"

        path = create_html_map(output_path=str(output), overlay="air_pressure", snapshot=snapshot)

        assert "Air Pressure (hPa)" in open(path, encoding="utf-8").read()

    def test_create_html_map_fetches_without_snapshot(self, mock_client, tmp_path):
        output = tmp_path / "live.html"

        with patch("austria_weather.ingest.WeatherAPIClient", return_value=mock_client):
            create_html_map(output_path=str(output))

        mock_client.fetch_station_list.assert_called_once()
        assert output.exists()

    def test_show_terminal_view(self, snapshot, capsys):
        show_terminal_view(overlay="humidity", snapshot=snapshot)

        assert "Humidity (%)" in capsys.readouterr().out
