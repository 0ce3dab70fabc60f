# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Celery tasks for the weather fetch and the claim check.

Each task runs its own event loop and its own store, so asyncpg pools never
cross loops.
"""

import asyncio
import logging
from typing import Any

from ..core.config import get_settings
from ..core.logging_utils import configure_logging
from ..integrations.weather_fetch import WeatherFetchJob
from ..services.automation import ThresholdEvaluator
from ..storage import build_store
from .celery_app import app

logger = logging.getLogger(__name__)


async def fetch_weather_once() -> dict[str, Any]:
    """Run one weather fetch against a fresh store."""
    settings = get_settings()
    store = build_store(settings)
    await store.connect()
    try:
        result = await WeatherFetchJob(store, settings).run()
    finally:
        await store.close()

    if result.is_err():
        error = result.unwrap_err()
        return {"status": "FAILED", **error.to_dict()}
    return {"status": "SUCCESS", **result.unwrap().model_dump(mode="json")}


async def run_claim_check_once() -> dict[str, Any]:
    """Run one evaluation pass against a fresh store."""
    settings = get_settings()
    store = build_store(settings)
    await store.connect()
    try:
        report = await ThresholdEvaluator(store, settings).evaluate()
    finally:
        await store.close()
    return report.model_dump(mode="json")


@app.task(bind=True, name="agri_shield.tasks.fetch_weather")
def fetch_weather(self: Any) -> dict[str, Any]:
    """Poll the weather provider for every farm."""
    configure_logging(level=get_settings().log_level)
    logger.info("Weather fetch task %s started", self.request.id)
    outcome = asyncio.run(fetch_weather_once())
    logger.info("Weather fetch task %s finished: %s", self.request.id, outcome["status"])
    return outcome


@app.task(bind=True, name="agri_shield.tasks.run_claim_check")
def run_claim_check(self: Any) -> dict[str, Any]:
    """Evaluate every eligible policy and create claims for breaches."""
    configure_logging(level=get_settings().log_level)
    logger.info("Claim check task %s started", self.request.id)
    report = asyncio.run(run_claim_check_once())
    logger.info(
        "Claim check task %s finished: success=%s claims_created=%s",
        self.request.id,
        report["success"],
        report["claims_created"],
    )
    return report
