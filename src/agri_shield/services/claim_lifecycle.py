# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Claim lifecycle state machine.

Pending -> Approved -> Paid, and Pending -> Rejected. Paid and Rejected are
terminal. Each transition is written with a compare-and-swap on the claim's
prior status, so of two racing reviewers only one can win.
"""

import logging
import secrets
import string
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from beartype import beartype

from ..core.errors import (
    AutomationError,
    ConcurrencyConflict,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ..core.events import ClaimEvent, ClaimEventBus, ClaimEventKind
from ..core.performance_monitor import performance_monitor
from ..core.result_types import Err, Ok, Result
from ..models.claim import Claim, ClaimFilter, ClaimStatus, TransitionDetails
from ..models.context import RequestContext
from ..storage.base import AutomationStore
from .automation.evaluator import utc_now

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ClaimStatus, frozenset[ClaimStatus]] = {
    ClaimStatus.PENDING: frozenset({ClaimStatus.APPROVED, ClaimStatus.REJECTED}),
    ClaimStatus.APPROVED: frozenset({ClaimStatus.PAID}),
    ClaimStatus.PAID: frozenset(),
    ClaimStatus.REJECTED: frozenset(),
}

_PAYOUT_ALPHABET = string.ascii_uppercase + string.digits


@beartype
def generate_payout_reference(now: datetime) -> str:
    """Opaque payout token: ``PAY-<epoch ms>-<9 random characters>``."""
    suffix = "".join(secrets.choice(_PAYOUT_ALPHABET) for _ in range(9))
    return f"PAY-{int(now.timestamp() * 1000)}-{suffix}"


class ClaimLifecycleService:
    """Service for reviewer-driven claim transitions."""

    def __init__(
        self,
        store: AutomationStore,
        events: ClaimEventBus | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize lifecycle service with dependency validation."""
        if not store or not hasattr(store, "replace_claim_status"):
            raise ValueError("Automation store required")
        self._store = store
        self._events = events or ClaimEventBus()
        self._clock = clock

    @beartype
    @performance_monitor("transition_claim")
    async def transition(
        self,
        claim_id: UUID,
        new_status: ClaimStatus,
        context: RequestContext,
        details: TransitionDetails | None = None,
    ) -> Result[Claim, AutomationError]:
        """Move a claim to ``new_status`` on behalf of a reviewer."""
        try:
            claim = await self._transition(
                claim_id, new_status, context, details or TransitionDetails()
            )
        except AutomationError as e:
            logger.info(
                "Transition of claim %s to %s refused: %s",
                claim_id,
                new_status.value,
                e.message,
            )
            return Err(e)
        return Ok(claim)

    async def _transition(
        self,
        claim_id: UUID,
        new_status: ClaimStatus,
        context: RequestContext,
        details: TransitionDetails,
    ) -> Claim:
        reviewer_id = context.user_id.strip()
        if not reviewer_id:
            raise ValidationError("Reviewer id is required")
        if not context.is_reviewer:
            raise PermissionDeniedError(
                "Only insurers and admins can review claims",
                {"role": context.role.value},
            )

        current = await self._store.get_claim(claim_id)
        if current is None:
            raise NotFoundError(f"Claim {claim_id} not found")

        if current.status.is_terminal:
            raise InvalidTransitionError(
                f"Claim {claim_id} is already {current.status.value}",
                {"from": current.status.value, "to": new_status.value},
            )
        if new_status not in ALLOWED_TRANSITIONS[current.status]:
            raise InvalidTransitionError(
                f"Cannot move claim from {current.status.value} "
                f"to {new_status.value}",
                {"from": current.status.value, "to": new_status.value},
            )

        updated = self._apply(current, new_status, reviewer_id, details)
        stored = await self._store.replace_claim_status(updated, current.status)
        if stored is None:
            raise ConcurrencyConflict(
                f"Claim {claim_id} changed while it was being updated; "
                "reload and retry",
                {"expected": current.status.value},
            )

        logger.info(
            "Claim %s moved %s -> %s by %s (policy shows %s)",
            claim_id,
            current.status.value,
            stored.status.value,
            reviewer_id,
            stored.status.policy_status.display_label,
        )
        await self._events.publish(
            ClaimEvent.for_claim(ClaimEventKind.TRANSITIONED, stored, current.status)
        )
        return stored

    def _apply(
        self,
        claim: Claim,
        new_status: ClaimStatus,
        reviewer_id: str,
        details: TransitionDetails,
    ) -> Claim:
        now = self._clock()
        update: dict[str, object] = {"status": new_status, "updated_at": now}

        if new_status is ClaimStatus.APPROVED:
            update.update(reviewed_by=reviewer_id, reviewed_at=now)
        elif new_status is ClaimStatus.REJECTED:
            reason = (details.rejection_reason or "").strip()
            if not reason:
                raise ValidationError("A rejection reason is required")
            update.update(
                reviewed_by=reviewer_id, reviewed_at=now, rejection_reason=reason
            )
        elif new_status is ClaimStatus.PAID:
            reference = (details.payout_reference_id or "").strip()
            update.update(
                payout_reference_id=reference or generate_payout_reference(now),
                paid_at=now,
            )

        # model_copy skips validation, so re-validate the combined fields
        return Claim.model_validate({**claim.model_dump(), **update})

    @beartype
    async def get_claim(self, claim_id: UUID) -> Result[Claim, AutomationError]:
        """Get claim by ID."""
        try:
            claim = await self._store.get_claim(claim_id)
        except AutomationError as e:
            return Err(e)
        if claim is None:
            return Err(NotFoundError(f"Claim {claim_id} not found"))
        return Ok(claim)

    @beartype
    async def list_claims(
        self,
        filters: ClaimFilter | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[list[Claim], AutomationError]:
        """List claims, most recently triggered first."""
        try:
            claims = await self._store.list_claims(
                filters or ClaimFilter(), limit=limit, offset=offset
            )
        except AutomationError as e:
            return Err(e)
        return Ok(claims)


__all__ = ["ALLOWED_TRANSITIONS", "ClaimLifecycleService", "generate_payout_reference"]
