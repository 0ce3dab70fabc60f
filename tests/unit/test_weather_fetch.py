"""Unit tests for the scheduled weather fetch with a mocked provider."""

from collections.abc import AsyncGenerator
from datetime import datetime
from uuid import uuid4

import httpx
import pytest

from agri_shield.core.config import Settings
from agri_shield.core.errors import UpstreamUnavailable
from agri_shield.integrations import (
    OpenWeatherClient,
    WeatherFetchJob,
    normalise_current_weather,
)
from agri_shield.storage import InMemoryAutomationStore
from tests.fixtures.test_data import make_farm

PAYLOADS = {
    "Mysuru": {"main": {"temp": 31.5, "humidity": 64}, "rain": {"1h": 2.4}},
    "Mandya": {"main": {"temp": 29.0, "humidity": 80}},
}


def provider(request: httpx.Request) -> httpx.Response:
    location = request.url.params["q"]
    if location == "Hassan":
        raise httpx.ConnectTimeout("timed out", request=request)
    if location == "Tumakuru":
        return httpx.Response(500, json={"message": "upstream error"})
    if location not in PAYLOADS:
        return httpx.Response(404, json={"message": "city not found"})
    assert request.url.params["appid"] == "test-weather-key"
    assert request.url.params["units"] == "metric"
    return httpx.Response(200, json=PAYLOADS[location])


@pytest.fixture
async def http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(provider)) as client:
        yield client


class TestNormalise:
    """Provider payload mapping."""

    def test_rain_defaults_to_zero(self) -> None:
        farm_id = uuid4()

        observation = normalise_current_weather(farm_id, PAYLOADS["Mandya"])

        assert observation.farm_id == farm_id
        assert observation.temperature_c == 29.0
        assert observation.humidity == 80.0
        assert observation.rainfall_mm == 0.0

    def test_rain_last_hour(self) -> None:
        observation = normalise_current_weather(uuid4(), PAYLOADS["Mysuru"])

        assert observation.rainfall_mm == 2.4


class TestOpenWeatherClient:
    """Single-location requests."""

    async def test_timeout_is_an_error_value(
        self, http_client: httpx.AsyncClient
    ) -> None:
        client = OpenWeatherClient(http_client, "https://weather.test", "k", timeout=1)

        result = await client.current_conditions(uuid4(), "Hassan")

        assert result.is_err()
        assert "timed out" in result.unwrap_err()

    async def test_malformed_payload(self) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json={}))
        async with httpx.AsyncClient(transport=transport) as http_client:
            client = OpenWeatherClient(http_client, "https://weather.test", "k")

            result = await client.current_conditions(uuid4(), "Mysuru")

        assert result.is_err()
        assert "Malformed" in result.unwrap_err()


class TestWeatherFetchJob:
    """Per-farm isolation and batch ingestion."""

    async def test_failures_do_not_abort_other_farms(
        self,
        store: InMemoryAutomationStore,
        settings: Settings,
        http_client: httpx.AsyncClient,
    ) -> None:
        good = store.add_farm(make_farm(district="Mysuru"))
        no_rain = store.add_farm(make_farm(district=None, location="Mandya"))
        timed_out = store.add_farm(make_farm(district="Hassan"))
        broken = store.add_farm(make_farm(district="Tumakuru"))
        store.add_farm(make_farm(district=None, location=None))

        result = await WeatherFetchJob(store, settings, http_client=http_client).run()

        report = result.unwrap()
        assert report.farms_polled == 4
        assert report.observations_inserted == 2
        assert {f.farm_id for f in report.failures} == {timed_out.farm_id, broken.farm_id}
        stored = {o.farm_id: o for o in await store.list_observations()}
        assert set(stored) == {good.farm_id, no_rain.farm_id}
        assert stored[good.farm_id].rainfall_mm == 2.4
        assert stored[no_rain.farm_id].rainfall_mm == 0.0

    async def test_no_farms(
        self,
        store: InMemoryAutomationStore,
        settings: Settings,
        http_client: httpx.AsyncClient,
    ) -> None:
        report = (
            await WeatherFetchJob(store, settings, http_client=http_client).run()
        ).unwrap()

        assert report.farms_polled == 0
        assert report.observations_inserted == 0

    async def test_missing_api_key(
        self,
        store: InMemoryAutomationStore,
        http_client: httpx.AsyncClient,
    ) -> None:
        settings = Settings(storage_backend="memory", weather_api_key=None)

        result = await WeatherFetchJob(store, settings, http_client=http_client).run()

        assert isinstance(result.unwrap_err(), UpstreamUnavailable)

    async def test_fetched_weather_is_stamped_with_ingestion_time(
        self,
        store: InMemoryAutomationStore,
        settings: Settings,
        http_client: httpx.AsyncClient,
    ) -> None:
        store.add_farm(make_farm(district="Mysuru"))
        before = datetime.now().astimezone()

        await WeatherFetchJob(store, settings, http_client=http_client).run()

        [observation] = await store.list_observations()
        assert observation.timestamp >= before
