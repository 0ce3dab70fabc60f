# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dashboard summary for operators."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from beartype import beartype

from ..core.errors import AutomationError
from ..core.result_types import Err, Ok, Result
from ..models.claim import ClaimStatus
from ..models.dashboard import DashboardSummary
from ..models.weather import WeatherObservation
from ..storage.base import AutomationStore
from .automation.evaluator import as_utc, utc_now

logger = logging.getLogger(__name__)

CRITICAL_RAINFALL_MM = 10.0
CRITICAL_TEMPERATURE_C = 40.0
ALERT_WINDOW_DAYS = 7


@beartype
def is_critical(observation: WeatherObservation) -> bool:
    """Reading that the portal flags as a weather alert."""
    return (
        observation.rainfall_mm is not None
        and observation.rainfall_mm < CRITICAL_RAINFALL_MM
    ) or (
        observation.temperature_c is not None
        and observation.temperature_c > CRITICAL_TEMPERATURE_C
    )


class DashboardService:
    """Headline counts across policies, farmers, claims and weather."""

    def __init__(
        self, store: AutomationStore, clock: Callable[[], datetime] = utc_now
    ) -> None:
        self._store = store
        self._clock = clock

    @beartype
    async def summary(
        self, now: datetime | None = None
    ) -> Result[DashboardSummary, AutomationError]:
        now = as_utc(now or self._clock())
        try:
            total_policies = await self._store.count_policies()
            active_farmers = await self._store.count_farmers()
            by_status = await self._store.count_claims_by_status()
            recent = await self._store.observations_between(
                None, now - timedelta(days=ALERT_WINDOW_DAYS), now
            )
        except AutomationError as e:
            logger.error("Dashboard summary failed: %s", e.message)
            return Err(e)

        return Ok(
            DashboardSummary(
                total_policies=total_policies,
                active_farmers=active_farmers,
                claims_by_status={
                    status.value: by_status.get(status, 0) for status in ClaimStatus
                },
                pending_claims=by_status.get(ClaimStatus.PENDING, 0),
                approved_claims=by_status.get(ClaimStatus.APPROVED, 0),
                paid_claims=by_status.get(ClaimStatus.PAID, 0),
                rejected_claims=by_status.get(ClaimStatus.REJECTED, 0),
                weather_alerts=sum(1 for o in recent if is_critical(o)),
            )
        )


__all__ = ["DashboardService", "is_critical"]
