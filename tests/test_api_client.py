"""
Tests für den Wetter-API Client
===============================
"""

import pytest
import requests
from unittest.mock import Mock

from austria_weather.api_client import APIResponse, WeatherAPIClient, WeatherAPIError


class TestAPIResponse:

    def test_station_list(self, api_payload):
        response = APIResponse(success=True, status_code=200, data=api_payload)
        assert len(response.station_list) == 3

    @pytest.mark.parametrize("data", [None, {}, {"station_list": "x"}, ["a"]])
    def test_station_list_malformed(self, data):
        response = APIResponse(success=True, status_code=200, data=data)
        assert response.station_list == []

    def test_raise_for_error(self):
        response = APIResponse(success=False, status_code=502, error="Weather API responded with status: 502")

        with pytest.raises(WeatherAPIError) as exc_info:
            response.raise_for_error()

        assert exc_info.value.status_code == 502
        assert "502" in str(exc_info.value)

    def test_raise_for_error_on_success(self):
        APIResponse(success=True, status_code=200, data={}).raise_for_error()


class TestWeatherAPIClient:
    """Tests für den API Client (Session gemockt)"""

    @pytest.fixture
    def client(self):
        return WeatherAPIClient(base_url="https://example.invalid/api/weather/at/data", timeout=5)

    def _mock_session(self, client, response=None, side_effect=None):
        session = Mock()
        if side_effect is not None:
            session.get.side_effect = side_effect
        else:
            session.get.return_value = response
        client.session = session
        return session

    def test_default_config(self):
        client = WeatherAPIClient()

        assert client.base_url == "https://cdn3.techweb.at/api/weather/at/data"
        assert client.timeout == 15
        assert client.session.headers["Accept"] == "application/json"

    def test_fetch_success(self, client, api_payload):
        """Erfolgreicher Abruf mit wst/format Parametern"""
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.return_value = api_payload
        session = self._mock_session(client, mock_response)

        result = client.fetch_station_list()

        assert result.success
        assert result.status_code == 200
        assert len(result.station_list) == 3

        _, kwargs = session.get.call_args
        assert kwargs["params"] == {"wst": "all", "format": "json"}
        assert kwargs["timeout"] == 5

    def test_non_200_status(self, client):
        mock_response = Mock()
        mock_response.status_code = 503
        self._mock_session(client, mock_response)

        result = client.fetch_station_list()

        assert not result.success
        assert result.status_code == 503
        assert result.error == "Weather API responded with status: 503"

    def test_invalid_json(self, client):
        mock_response = Mock()
        mock_response.status_code = 200
        mock_response.json.side_effect = ValueError("Expecting value")
        self._mock_session(client, mock_response)

        result = client.fetch_station_list()

        assert not result.success
        assert "Invalid JSON" in result.error

    def test_timeout(self, client):
        self._mock_session(client, side_effect=requests.exceptions.Timeout())

        result = client.fetch_station_list()

        assert not result.success
        assert result.status_code == 0
        assert "Timeout" in result.error

    def test_connection_error(self, client):
        self._mock_session(client, side_effect=requests.exceptions.ConnectionError("refused"))

        result = client.fetch_station_list()

        assert not result.success
        assert "Connection error" in result.error

    def test_no_retry(self, client):
        """Ein fehlgeschlagener Abruf wird nicht wiederholt"""
        session = self._mock_session(client, side_effect=requests.exceptions.ConnectionError("x"))

        client.fetch_station_list()

        assert session.get.call_count == 1

    def test_stats_and_health_check(self, client):
        mock_response = Mock()
        mock_response.status_code = 500
        self._mock_session(client, mock_response)

        assert client.health_check() is False

        stats = client.get_stats()
        assert stats["total_requests"] == 1
        assert stats["total_errors"] == 1
        assert stats["error_rate"] == 1.0

    def test_context_manager_closes_session(self, client):
        session = Mock()
        client.session = session

        with client:
            pass

        session.close.assert_called_once()
