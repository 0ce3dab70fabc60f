# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Weather ingestion sink and weather read queries.

Observations are append-only. A batch is persisted as a whole or not at all;
every row is stamped with the ingestion time.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.errors import AutomationError, IngestionError
from ..core.performance_monitor import performance_monitor
from ..core.result_types import Err, Ok, Result
from ..models.weather import WeatherObservation, WeatherObservationCreate, WeatherStats
from ..storage.base import AutomationStore
from .automation.evaluator import as_utc, utc_now

logger = logging.getLogger(__name__)

FARM_OBSERVATION_LIMIT = 20
ALL_FARMS_OBSERVATION_LIMIT = 50


class WeatherIngestionService:
    """Service for weather observation writes and reads."""

    def __init__(
        self,
        store: AutomationStore,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize ingestion service with dependency validation."""
        if not store or not hasattr(store, "insert_observations"):
            raise ValueError("Automation store required")
        self._store = store
        self._settings = settings or get_settings()
        self._clock = clock

    @beartype
    @performance_monitor("ingest_weather")
    async def ingest(
        self, observations: list[WeatherObservationCreate]
    ) -> Result[int, AutomationError]:
        """Persist a batch of observations, returning the inserted count."""
        if not observations:
            return Ok(0)

        timestamp = self._clock()
        rows = [
            WeatherObservation(
                id=uuid4(),
                timestamp=timestamp,
                **observation.model_dump(),
            )
            for observation in observations
        ]
        timeout = self._settings.ingestion_timeout_seconds
        try:
            inserted = await asyncio.wait_for(
                self._store.insert_observations(rows), timeout=timeout
            )
        except asyncio.TimeoutError:
            logger.error("Weather batch of %d timed out after %ss", len(rows), timeout)
            return Err(
                IngestionError(
                    f"Weather ingestion timed out after {timeout}s; "
                    "nothing was persisted",
                    {"batch_size": len(rows)},
                )
            )
        except AutomationError as e:
            logger.error("Weather batch of %d rejected: %s", len(rows), e.message)
            return Err(e)

        logger.info("Ingested %d weather observations", inserted)
        return Ok(inserted)

    @beartype
    async def record(
        self,
        farm_id: UUID,
        rainfall_mm: float | None = None,
        temperature_c: float | None = None,
        humidity: float | None = None,
    ) -> Result[int, AutomationError]:
        """Ingest a single reading."""
        return await self.ingest(
            [
                WeatherObservationCreate(
                    farm_id=farm_id,
                    rainfall_mm=rainfall_mm,
                    temperature_c=temperature_c,
                    humidity=humidity,
                )
            ]
        )

    @beartype
    async def list_observations(
        self, farm_id: UUID | None = None, limit: int | None = None
    ) -> Result[list[WeatherObservation], AutomationError]:
        """Most recent observations, for one farm or across all farms."""
        if limit is None:
            limit = FARM_OBSERVATION_LIMIT if farm_id else ALL_FARMS_OBSERVATION_LIMIT
        try:
            return Ok(await self._store.list_observations(farm_id, limit=limit))
        except AutomationError as e:
            return Err(e)

    @beartype
    async def weather_stats(
        self, farm_id: UUID, days: int = 7, now: datetime | None = None
    ) -> Result[WeatherStats, AutomationError]:
        """Trailing statistics for a farm; zeros when there is no data."""
        now = as_utc(now or self._clock())
        try:
            observations = await self._store.observations_between(
                farm_id, now - timedelta(days=days), now
            )
        except AutomationError as e:
            return Err(e)

        rainfall = [o.rainfall_mm for o in observations if o.rainfall_mm is not None]
        temperatures = [
            o.temperature_c for o in observations if o.temperature_c is not None
        ]
        humidity = [o.humidity for o in observations if o.humidity is not None]

        return Ok(
            WeatherStats(
                farm_id=farm_id,
                days=days,
                observation_count=len(observations),
                avg_rainfall=_mean(rainfall),
                max_temperature=max(temperatures, default=0.0),
                min_temperature=min(temperatures, default=0.0),
                avg_humidity=_mean(humidity),
            )
        )


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


__all__ = ["WeatherIngestionService"]
