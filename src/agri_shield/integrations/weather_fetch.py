# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Scheduled weather fetch feeding the ingestion sink.

Each farm is fetched independently: a timeout or provider error for one
farm is logged and reported, and the remaining farms still ingest.
"""

import asyncio
import logging
from uuid import UUID

import httpx
from beartype import beartype
from pydantic import Field

from ..core.config import Settings, get_settings
from ..core.errors import AutomationError, UpstreamUnavailable
from ..core.performance_monitor import performance_monitor
from ..core.result_types import Err, Ok, Result
from ..models.base import BaseModelConfig
from ..models.weather import FarmLocation, WeatherObservationCreate
from ..services.weather_ingestion import WeatherIngestionService
from ..storage.base import AutomationStore
from .openweather import OpenWeatherClient

logger = logging.getLogger(__name__)


@beartype
class FarmFetchFailure(BaseModelConfig):
    """One farm whose weather could not be fetched."""

    farm_id: UUID
    location: str
    error: str


@beartype
class WeatherFetchReport(BaseModelConfig):
    """Outcome of one fetch run."""

    farms_polled: int = Field(..., ge=0)
    observations_inserted: int = Field(..., ge=0)
    failures: list[FarmFetchFailure] = Field(default_factory=list)


class WeatherFetchJob:
    """Polls the weather provider for every farm with a known location."""

    def __init__(
        self,
        store: AutomationStore,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._store = store
        self._settings = settings or get_settings()
        self._http_client = http_client
        self._ingestion = WeatherIngestionService(store, self._settings)

    @beartype
    @performance_monitor("weather_fetch", max_duration_ms=30000)
    async def run(self) -> Result[WeatherFetchReport, AutomationError]:
        api_key = self._settings.weather_api_key
        if not api_key:
            return Err(UpstreamUnavailable("Weather API key is not configured"))

        try:
            farms = await self._store.list_farm_locations()
        except AutomationError as e:
            return Err(e)
        targets = [farm for farm in farms if farm.query_location]
        logger.info(
            "Fetching weather for %d farms (%d without location skipped)",
            len(targets),
            len(farms) - len(targets),
        )

        if self._http_client is not None:
            outcomes = await self._fetch_all(self._http_client, api_key, targets)
        else:
            async with httpx.AsyncClient() as client:
                outcomes = await self._fetch_all(client, api_key, targets)

        observations: list[WeatherObservationCreate] = []
        failures: list[FarmFetchFailure] = []
        for farm, outcome in zip(targets, outcomes):
            if outcome.is_ok():
                observations.append(outcome.unwrap())
            else:
                logger.warning(
                    "Weather fetch failed for farm %s (%s): %s",
                    farm.farm_id,
                    farm.query_location,
                    outcome.unwrap_err(),
                )
                failures.append(
                    FarmFetchFailure(
                        farm_id=farm.farm_id,
                        location=farm.query_location or "",
                        error=outcome.unwrap_err(),
                    )
                )

        inserted = await self._ingestion.ingest(observations)
        if inserted.is_err():
            return Err(inserted.unwrap_err())

        return Ok(
            WeatherFetchReport(
                farms_polled=len(targets),
                observations_inserted=inserted.unwrap(),
                failures=failures,
            )
        )

    async def _fetch_all(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        farms: list[FarmLocation],
    ) -> list[Result[WeatherObservationCreate, str]]:
        weather = OpenWeatherClient(
            client,
            api_url=self._settings.weather_api_url,
            api_key=api_key,
            timeout=self._settings.weather_request_timeout_seconds,
        )
        semaphore = asyncio.Semaphore(self._settings.weather_fetch_concurrency)

        async def fetch(farm: FarmLocation) -> Result[WeatherObservationCreate, str]:
            async with semaphore:
                return await weather.current_conditions(
                    farm.farm_id, farm.query_location or ""
                )

        return list(await asyncio.gather(*(fetch(farm) for farm in farms)))


__all__ = ["FarmFetchFailure", "WeatherFetchJob", "WeatherFetchReport"]
