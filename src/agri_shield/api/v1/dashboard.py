# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Operator dashboard."""

from beartype import beartype
from fastapi import APIRouter, Depends, Response

from ...models.context import RequestContext
from ...models.dashboard import DashboardSummary
from ...services.dashboard import DashboardService
from ..dependencies import get_dashboard_service, require_reviewer
from ..response_patterns import ErrorResponse, handle_result

router = APIRouter()


@router.get("/summary")
@beartype
async def dashboard_summary(
    response: Response,
    service: DashboardService = Depends(get_dashboard_service),
    context: RequestContext = Depends(require_reviewer),
) -> DashboardSummary | ErrorResponse:
    """Headline counts for policies, farmers, claims and weather alerts."""
    return handle_result(await service.summary(), response)
