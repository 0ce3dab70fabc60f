# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""FastAPI dependencies for authentication, storage and services.

This module provides reusable dependencies that can be injected into
API endpoints for cross-cutting concerns.
"""

import secrets

from beartype import beartype
from fastapi import Depends, HTTPException, Query, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.config import Settings, get_settings
from ..core.events import ClaimEventBus
from ..core.security import context_from_token
from ..models.context import RequestContext
from ..services.automation import ThresholdEvaluator
from ..services.claim_lifecycle import ClaimLifecycleService
from ..services.dashboard import DashboardService
from ..services.farmer_directory import FarmerDirectoryService
from ..services.policy_catalog import PolicyCatalogService
from ..services.weather_ingestion import WeatherIngestionService
from ..storage import get_store
from ..storage.base import AutomationStore

# Security scheme
security = HTTPBearer()

_event_bus = ClaimEventBus()


def get_event_bus() -> ClaimEventBus:
    """Process-wide claim event bus."""
    return _event_bus


@beartype
async def get_current_context(
    credentials: HTTPAuthorizationCredentials = Security(security),
    settings: Settings = Depends(get_settings),
) -> RequestContext:
    """Validate the bearer token and return the caller's context.

    Raises:
        HTTPException: If token is invalid or expired
    """
    context = context_from_token(settings, credentials.credentials)
    if context is None:
        # NOTE: This is a dependency function, not an endpoint
        # We need to keep raising HTTPException here as FastAPI expects it
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context


@beartype
async def require_reviewer(
    context: RequestContext = Depends(get_current_context),
) -> RequestContext:
    """Only insurers and admins pass."""
    if not context.is_reviewer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Reviewer role required",
        )
    return context


@beartype
async def verify_cron_secret(
    secret: str = Query(..., description="Scheduler shared secret"),
    settings: Settings = Depends(get_settings),
) -> None:
    """Guard for endpoints called by the external scheduler."""
    if not secrets.compare_digest(secret, settings.cron_secret):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


@beartype
class PaginationParams:
    """Common pagination parameters for list endpoints."""

    def __init__(
        self,
        skip: int = 0,
        limit: int = 100,
    ) -> None:
        """Initialize pagination parameters.

        Args:
            skip: Number of records to skip (offset)
            limit: Maximum number of records to return

        Raises:
            HTTPException: If parameters are invalid
        """
        if skip < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Skip parameter cannot be negative",
            )
        if limit < 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Limit must be at least 1",
            )
        if limit > 1000:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Limit cannot exceed 1000",
            )

        self.skip = skip
        self.limit = limit


def get_automation_store() -> AutomationStore:
    return get_store()


def get_evaluator(
    store: AutomationStore = Depends(get_automation_store),
    settings: Settings = Depends(get_settings),
    events: ClaimEventBus = Depends(get_event_bus),
) -> ThresholdEvaluator:
    return ThresholdEvaluator(store, settings, events)


def get_lifecycle_service(
    store: AutomationStore = Depends(get_automation_store),
    events: ClaimEventBus = Depends(get_event_bus),
) -> ClaimLifecycleService:
    return ClaimLifecycleService(store, events)


def get_catalog_service(
    store: AutomationStore = Depends(get_automation_store),
) -> PolicyCatalogService:
    return PolicyCatalogService(store)


def get_ingestion_service(
    store: AutomationStore = Depends(get_automation_store),
    settings: Settings = Depends(get_settings),
) -> WeatherIngestionService:
    return WeatherIngestionService(store, settings)


def get_dashboard_service(
    store: AutomationStore = Depends(get_automation_store),
) -> DashboardService:
    return DashboardService(store)


def get_farmer_directory(
    store: AutomationStore = Depends(get_automation_store),
) -> FarmerDirectoryService:
    return FarmerDirectoryService(store)
