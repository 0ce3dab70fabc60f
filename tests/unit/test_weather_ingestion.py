"""Unit tests for the weather ingestion sink and weather reads."""

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from agri_shield.core.config import Settings
from agri_shield.core.errors import IngestionError
from agri_shield.models import FarmLocation, WeatherObservation, WeatherObservationCreate
from agri_shield.services.weather_ingestion import WeatherIngestionService
from agri_shield.storage import InMemoryAutomationStore
from tests.fixtures.test_data import make_farm, make_observation


@pytest.fixture
def service(
    store: InMemoryAutomationStore,
    settings: Settings,
    clock: Callable[[], datetime],
) -> WeatherIngestionService:
    return WeatherIngestionService(store, settings, clock=clock)


class TestIngest:
    """Batch ingestion."""

    async def test_empty_batch_is_a_no_op(
        self, service: WeatherIngestionService, store: InMemoryAutomationStore
    ) -> None:
        result = await service.ingest([])

        assert result.unwrap() == 0
        assert await store.list_observations() == []

    async def test_batch_is_timestamped_at_ingestion(
        self,
        service: WeatherIngestionService,
        store: InMemoryAutomationStore,
        farm: FarmLocation,
        now: datetime,
    ) -> None:
        result = await service.ingest(
            [
                WeatherObservationCreate(farm_id=farm.farm_id, rainfall_mm=3.2),
                WeatherObservationCreate(
                    farm_id=farm.farm_id, temperature_c=33.0, humidity=70.0
                ),
            ]
        )

        assert result.unwrap() == 2
        stored = await store.list_observations(farm.farm_id)
        assert len(stored) == 2
        assert {o.timestamp for o in stored} == {now}

    async def test_missing_fields_stay_absent(
        self,
        service: WeatherIngestionService,
        store: InMemoryAutomationStore,
        farm: FarmLocation,
    ) -> None:
        await service.record(farm.farm_id, temperature_c=28.0)

        [observation] = await store.list_observations(farm.farm_id)
        assert observation.rainfall_mm is None
        assert observation.humidity is None
        assert observation.temperature_c == 28.0

    async def test_store_failure_persists_nothing(
        self,
        service: WeatherIngestionService,
        store: InMemoryAutomationStore,
        farm: FarmLocation,
    ) -> None:
        async def failing_insert(observations):  # type: ignore[no-untyped-def]
            raise IngestionError("Weather batch could not be persisted")

        store.insert_observations = failing_insert  # type: ignore[method-assign]

        result = await service.ingest(
            [WeatherObservationCreate(farm_id=farm.farm_id, rainfall_mm=1.0)]
        )

        assert isinstance(result.unwrap_err(), IngestionError)
        assert result.unwrap_err().status_code == 502
        assert await store.list_observations() == []

    async def test_timeout_reports_ingestion_error(
        self,
        store: InMemoryAutomationStore,
        farm: FarmLocation,
        clock: Callable[[], datetime],
    ) -> None:
        async def slow_insert(observations):  # type: ignore[no-untyped-def]
            await asyncio.sleep(5)
            return len(observations)

        store.insert_observations = slow_insert  # type: ignore[method-assign]
        settings = Settings(storage_backend="memory", ingestion_timeout_seconds=0.05)
        service = WeatherIngestionService(store, settings, clock=clock)

        result = await service.ingest(
            [WeatherObservationCreate(farm_id=farm.farm_id, rainfall_mm=1.0)]
        )

        assert isinstance(result.unwrap_err(), IngestionError)
        assert "timed out" in result.unwrap_err().message

    async def test_unknown_farm_discards_whole_batch(
        self,
        service: WeatherIngestionService,
        store: InMemoryAutomationStore,
        farm: FarmLocation,
    ) -> None:
        result = await service.ingest(
            [
                WeatherObservationCreate(farm_id=farm.farm_id, rainfall_mm=1.0),
                WeatherObservationCreate(farm_id=uuid4(), rainfall_mm=2.0),
            ]
        )

        assert isinstance(result.unwrap_err(), IngestionError)
        assert "unknown farm" in result.unwrap_err().message
        assert await store.list_observations() == []


class TestReads:
    """Observation listings and statistics."""

    async def test_default_limits(
        self,
        service: WeatherIngestionService,
        store: InMemoryAutomationStore,
        farm: FarmLocation,
        now: datetime,
    ) -> None:
        other_farm = store.add_farm(make_farm()).farm_id
        await store.insert_observations(
            [
                make_observation(farm.farm_id, timestamp=now - timedelta(hours=i))
                for i in range(30)
            ]
            + [
                make_observation(other_farm, timestamp=now - timedelta(hours=i))
                for i in range(30)
            ]
        )

        per_farm = (await service.list_observations(farm.farm_id)).unwrap()
        across = (await service.list_observations()).unwrap()

        assert len(per_farm) == 20
        assert len(across) == 50
        assert per_farm[0].timestamp == now
        assert per_farm == sorted(per_farm, key=lambda o: o.timestamp, reverse=True)

    async def test_stats_drop_missing_readings(
        self,
        service: WeatherIngestionService,
        store: InMemoryAutomationStore,
        farm: FarmLocation,
        now: datetime,
    ) -> None:
        observations: list[WeatherObservation] = [
            make_observation(
                farm.farm_id, rainfall_mm=4.0, temperature_c=30.0, humidity=None
            ),
            make_observation(
                farm.farm_id, rainfall_mm=None, temperature_c=42.0, humidity=50.0
            ),
            make_observation(
                farm.farm_id, rainfall_mm=8.0, temperature_c=None, humidity=70.0
            ),
            make_observation(
                farm.farm_id,
                timestamp=now - timedelta(days=9),
                rainfall_mm=100.0,
                temperature_c=10.0,
            ),
        ]
        await store.insert_observations(observations)

        stats = (await service.weather_stats(farm.farm_id, days=7)).unwrap()

        assert stats.observation_count == 3
        assert stats.avg_rainfall == pytest.approx(6.0)
        assert stats.max_temperature == 42.0
        assert stats.min_temperature == 30.0
        assert stats.avg_humidity == pytest.approx(60.0)

    async def test_stats_without_data_are_zero(
        self, service: WeatherIngestionService, farm: FarmLocation
    ) -> None:
        stats = (await service.weather_stats(farm.farm_id)).unwrap()

        assert stats.observation_count == 0
        assert stats.avg_rainfall == 0.0
        assert stats.max_temperature == 0.0
        assert stats.avg_humidity == 0.0
