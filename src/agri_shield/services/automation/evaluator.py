# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Threshold evaluator: turns weather breaches into Pending claims."""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from beartype import beartype

from ...core.config import Settings, get_settings
from ...core.errors import AutomationError, PermissionDeniedError
from ...core.events import ClaimEvent, ClaimEventBus, ClaimEventKind
from ...core.performance_monitor import performance_monitor
from ...core.result_types import Err, Ok, Result
from ...models.automation import AutomationResult
from ...models.claim import Claim, ClaimStatus
from ...models.context import RequestContext
from ...models.policy import EligiblePolicy
from ...storage.base import AutomationStore
from .report import RunRecorder
from .thresholds import (
    aggregate_observations,
    compute_claim_amount,
    describe_breaches,
    detect_breaches,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@beartype
def as_utc(moment: datetime) -> datetime:
    """Normalise to UTC; naive instants are taken to already be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class ThresholdEvaluator:
    """Runs evaluation passes over every eligible policy."""

    def __init__(
        self,
        store: AutomationStore,
        settings: Settings | None = None,
        events: ClaimEventBus | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize evaluator with dependency validation."""
        if not store or not hasattr(store, "list_eligible_policies"):
            raise ValueError("Automation store required")
        self._store = store
        self._settings = settings or get_settings()
        self._events = events or ClaimEventBus()
        self._clock = clock

    @beartype
    async def run(
        self, context: RequestContext, now: datetime | None = None
    ) -> Result[AutomationResult, AutomationError]:
        """Operator-initiated pass; only reviewers may start one."""
        if not context.is_reviewer:
            return Err(
                PermissionDeniedError(
                    "Only insurers and admins can run claim automation",
                    {"role": context.role.value},
                )
            )
        logger.info("Evaluation pass requested by %s", context.user_id)
        return Ok(await self.evaluate(now))

    @beartype
    @performance_monitor("evaluate_thresholds", max_duration_ms=10000)
    async def evaluate(self, now: datetime | None = None) -> AutomationResult:
        """Evaluate every eligible policy once at ``now``.

        The pass is bounded by ``evaluation_timeout_seconds``. On timeout or
        upstream failure the result reports ``success=False``; claims
        committed before the failure stay in place and are counted.
        """
        now = as_utc(now or self._clock())
        recorder = RunRecorder(timestamp=now)
        started = time.perf_counter()
        logger.info("Starting evaluation pass at %s", now.isoformat())

        try:
            await asyncio.wait_for(
                self._evaluate_all(now, recorder),
                timeout=self._settings.evaluation_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Evaluation pass timed out after %ss with %d claims created",
                self._settings.evaluation_timeout_seconds,
                recorder.claims_created,
            )
            return recorder.failed(
                "Evaluation pass timed out after "
                f"{self._settings.evaluation_timeout_seconds}s"
            )
        except AutomationError as e:
            logger.error(
                "Evaluation pass failed after %d claims: %s",
                recorder.claims_created,
                e.message,
            )
            return recorder.failed(e.message)

        logger.info(
            "Evaluation pass finished: %d policies evaluated, %d claims created in %.2fs",
            recorder.policies_evaluated,
            recorder.claims_created,
            time.perf_counter() - started,
        )
        return recorder.succeeded()

    async def _evaluate_all(self, now: datetime, recorder: RunRecorder) -> None:
        async with self._store.evaluation_lock():
            eligible = await self._store.list_eligible_policies(now.date())
            logger.debug("%d policies eligible for evaluation", len(eligible))
            for candidate in eligible:
                claim = await self._evaluate_policy(candidate, now)
                recorder.policy_evaluated()
                if claim is not None:
                    recorder.claim_created(claim.id)
                    await self._events.publish(
                        ClaimEvent.for_claim(ClaimEventKind.CREATED, claim)
                    )

    async def _evaluate_policy(
        self, candidate: EligiblePolicy, now: datetime
    ) -> Claim | None:
        policy = candidate.policy
        config = candidate.automation_config
        window_days = self._settings.trigger_window_days

        observations = await self._store.observations_between(
            policy.farm_id, now - timedelta(days=window_days), now
        )
        aggregate = aggregate_observations(observations)
        breaches = detect_breaches(aggregate, config)
        if not breaches:
            return None

        # Enabled configs always carry a trigger percentage
        amount = compute_claim_amount(
            policy.coverage_amount, config.trigger_percentage or 0.0
        )
        claim = Claim(
            id=uuid4(),
            user_policy_id=policy.id,
            triggered_at=now,
            reason=describe_breaches(breaches, window_days),
            amount_claimed=amount,
            status=ClaimStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        created = await self._store.create_triggered_claim(claim)
        if created is None:
            logger.info(
                "Skipped policy %s: a claim is already in flight", policy.id
            )
            return None

        logger.info(
            "Created claim %s for policy %s (%s) amount %s: %s",
            created.id,
            policy.id,
            candidate.product_name,
            created.amount_claimed,
            ", ".join(b.kind.value for b in breaches),
        )
        return created


__all__ = ["ThresholdEvaluator", "as_utc", "utc_now"]
