# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Weather observation endpoints and the scheduled fetch hook."""

from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import Field

from ...core.config import Settings, get_settings
from ...integrations.weather_fetch import WeatherFetchJob, WeatherFetchReport
from ...models.base import BaseModelConfig
from ...models.context import RequestContext
from ...models.weather import WeatherObservation, WeatherObservationCreate, WeatherStats
from ...services.weather_ingestion import WeatherIngestionService
from ...storage.base import AutomationStore
from ..dependencies import (
    get_automation_store,
    get_current_context,
    get_ingestion_service,
    require_reviewer,
    verify_cron_secret,
)
from ..response_patterns import ErrorResponse, handle_result

router = APIRouter()


class IngestResponse(BaseModelConfig):
    """Number of observations persisted."""

    inserted_count: int = Field(..., ge=0)


@router.get("/observations")
@beartype
async def list_observations(
    response: Response,
    farm_id: UUID | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: WeatherIngestionService = Depends(get_ingestion_service),
    context: RequestContext = Depends(get_current_context),
) -> list[WeatherObservation] | ErrorResponse:
    """Most recent observations, for one farm or across farms."""
    return handle_result(await service.list_observations(farm_id, limit), response)


@router.post("/observations", status_code=status.HTTP_201_CREATED)
@beartype
async def ingest_observations(
    observations: list[WeatherObservationCreate],
    response: Response,
    service: WeatherIngestionService = Depends(get_ingestion_service),
    context: RequestContext = Depends(require_reviewer),
) -> IngestResponse | ErrorResponse:
    """Append a batch of observations; all or nothing."""
    result = await service.ingest(observations)
    return handle_result(
        result.map(lambda count: IngestResponse(inserted_count=count)),
        response,
        success_status=status.HTTP_201_CREATED,
    )


@router.get("/stats/{farm_id}")
@beartype
async def weather_stats(
    farm_id: UUID,
    response: Response,
    days: int = Query(default=7, ge=1, le=365),
    service: WeatherIngestionService = Depends(get_ingestion_service),
    context: RequestContext = Depends(get_current_context),
) -> WeatherStats | ErrorResponse:
    """Trailing statistics for one farm."""
    return handle_result(await service.weather_stats(farm_id, days), response)


@router.post("/fetch", dependencies=[Depends(verify_cron_secret)])
@beartype
async def fetch_weather(
    response: Response,
    store: AutomationStore = Depends(get_automation_store),
    settings: Settings = Depends(get_settings),
) -> WeatherFetchReport | ErrorResponse:
    """Poll the weather provider for every farm (scheduler hook)."""
    result = await WeatherFetchJob(store, settings).run()
    return handle_result(result, response)
