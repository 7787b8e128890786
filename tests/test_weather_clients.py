"""Tests for the OpenWeather client with mocked httpx."""

import httpx
import pytest

from conftest import air_payload, current_payload, forecast_payload
from weather_widget.schemas import CityQuery, CoordinatesQuery, Unit
from weather_widget.weather_clients import WeatherError


class TestCurrentWeather:
    @pytest.mark.asyncio
    async def test_city_query_params(self, owm, api):
        route = api.get("/data/2.5/weather").mock(return_value=httpx.Response(200, json=current_payload()))

        data = await owm.current_weather(CityQuery(name="Paris"), Unit.IMPERIAL)

        assert data["name"] == "Paris"
        params = route.calls[0].request.url.params
        assert params["q"] == "Paris"
        assert params["units"] == "imperial"
        assert params["appid"] == "test-weather-key"

    @pytest.mark.asyncio
    async def test_coordinates_query_params(self, owm, api):
        route = api.get("/data/2.5/weather").mock(return_value=httpx.Response(200, json=current_payload()))

        await owm.current_weather(CoordinatesQuery(lat=40.71, lon=-74.0))

        params = route.calls[0].request.url.params
        assert (params["lat"], params["lon"]) == ("40.71", "-74.0")
        assert "q" not in params
        assert params["units"] == "metric"

    @pytest.mark.asyncio
    async def test_api_message_is_surfaced(self, owm, api):
        api.get("/data/2.5/weather").mock(
            return_value=httpx.Response(404, json={"cod": "404", "message": "city not found"})
        )
        with pytest.raises(WeatherError, match="city not found"):
            await owm.current_weather(CityQuery(name="Atlantis"))

    @pytest.mark.asyncio
    async def test_default_messages(self, owm, api):
        api.get("/data/2.5/weather").mock(return_value=httpx.Response(404, json={"cod": "404"}))

        with pytest.raises(WeatherError, match="City not found."):
            await owm.current_weather(CityQuery(name="Atlantis"))
        with pytest.raises(WeatherError, match="Location not found."):
            await owm.current_weather(CoordinatesQuery(lat=0.0, lon=0.0))

    @pytest.mark.asyncio
    async def test_body_status_checked_even_on_http_200(self, owm, api):
        api.get("/data/2.5/weather").mock(
            return_value=httpx.Response(200, json={"cod": "401", "message": "Invalid API key."})
        )
        with pytest.raises(WeatherError, match="Invalid API key."):
            await owm.current_weather(CityQuery(name="Paris"))

    @pytest.mark.asyncio
    async def test_non_json_body(self, owm, api):
        api.get("/data/2.5/weather").mock(return_value=httpx.Response(502, text="<html>bad gateway</html>"))
        with pytest.raises(WeatherError, match="502"):
            await owm.current_weather(CityQuery(name="Paris"))

    @pytest.mark.asyncio
    async def test_network_errors_propagate(self, owm, api):
        api.get("/data/2.5/weather").mock(side_effect=httpx.ConnectError)
        with pytest.raises(httpx.RequestError):
            await owm.current_weather(CityQuery(name="Paris"))


class TestSecondaryEndpoints:
    @pytest.mark.asyncio
    async def test_air_pollution(self, owm, api):
        route = api.get("/data/2.5/air_pollution").mock(return_value=httpx.Response(200, json=air_payload(4)))

        data = await owm.air_pollution(48.85, 2.35)

        assert data["list"][0]["main"]["aqi"] == 4
        assert "units" not in route.calls[0].request.url.params

    @pytest.mark.asyncio
    async def test_forecast_uses_units(self, owm, api):
        route = api.get("/data/2.5/forecast").mock(return_value=httpx.Response(200, json=forecast_payload()))

        data = await owm.forecast_5day_3h(48.85, 2.35, Unit.IMPERIAL)

        assert len(data["list"]) == 9
        assert route.calls[0].request.url.params["units"] == "imperial"

    @pytest.mark.asyncio
    async def test_failure_raises_weather_error(self, owm, api):
        api.get("/data/2.5/forecast").mock(return_value=httpx.Response(500, text="oops"))
        with pytest.raises(WeatherError, match="Forecast failed"):
            await owm.forecast_5day_3h(48.85, 2.35)
