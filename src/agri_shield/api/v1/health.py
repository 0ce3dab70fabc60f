# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Health check endpoint."""

import logging
from datetime import datetime, timezone

from beartype import beartype
from fastapi import APIRouter, Depends, Response, status
from pydantic import Field

from ... import __version__
from ...core.config import Settings, get_settings
from ...models.base import BaseModelConfig
from ...storage.base import AutomationStore
from ..dependencies import get_automation_store

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModelConfig):
    """Overall service health."""

    status: str = Field(..., pattern=r"^(healthy|unhealthy)$")
    timestamp: datetime
    version: str
    environment: str
    storage: str = Field(..., pattern=r"^(healthy|unhealthy)$")


@router.get("/health")
@beartype
async def health_check(
    response: Response,
    store: AutomationStore = Depends(get_automation_store),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """Report whether the service and its store are usable."""
    storage_ok = await store.health_check()
    if not storage_ok:
        logger.warning("Health check: storage unavailable")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    state = "healthy" if storage_ok else "unhealthy"
    return HealthResponse(
        status=state,
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.api_env,
        storage=state,
    )
