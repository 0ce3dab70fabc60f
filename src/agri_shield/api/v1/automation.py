# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Operator-triggered claim automation."""

from datetime import datetime

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response

from ...models.automation import AutomationResult
from ...models.context import RequestContext
from ...services.automation import ThresholdEvaluator
from ..dependencies import get_current_context, get_evaluator
from ..response_patterns import ErrorResponse, handle_result

router = APIRouter()


@router.post("/run")
@beartype
async def run_automation(
    response: Response,
    now: datetime | None = Query(default=None, description="Evaluation instant"),
    evaluator: ThresholdEvaluator = Depends(get_evaluator),
    context: RequestContext = Depends(get_current_context),
) -> AutomationResult | ErrorResponse:
    """Run one evaluation pass and return its report.

    A pass that could not complete still returns 200 with
    ``success=false``; claims created before the failure stand.
    """
    result = await evaluator.run(context, now)
    return handle_result(result, response)
