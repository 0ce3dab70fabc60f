# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process claim change notifications.

Services publish after the store has committed a change, so a listener
never observes a claim that could still roll back. Listener failures are
logged and never propagate into the caller.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from uuid import UUID

from beartype import beartype

from ..models.base import BaseModelConfig
from ..models.claim import Claim, ClaimStatus

logger = logging.getLogger(__name__)


class ClaimEventKind(str, Enum):
    """Kinds of claim change."""

    CREATED = "created"
    TRANSITIONED = "transitioned"


@beartype
class ClaimEvent(BaseModelConfig):
    """A committed claim change."""

    kind: ClaimEventKind
    claim_id: UUID
    user_policy_id: UUID
    status: ClaimStatus
    previous_status: ClaimStatus | None = None
    occurred_at: datetime

    @classmethod
    def for_claim(
        cls,
        kind: ClaimEventKind,
        claim: Claim,
        previous_status: ClaimStatus | None = None,
    ) -> "ClaimEvent":
        return cls(
            kind=kind,
            claim_id=claim.id,
            user_policy_id=claim.user_policy_id,
            status=claim.status,
            previous_status=previous_status,
            occurred_at=claim.updated_at,
        )


ClaimListener = Callable[[ClaimEvent], Awaitable[None]]


class ClaimEventBus:
    """Fan-out of claim events to async listeners."""

    def __init__(self) -> None:
        self._listeners: list[ClaimListener] = []

    def subscribe(self, listener: ClaimListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ClaimListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def publish(self, event: ClaimEvent) -> None:
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception as e:
                logger.error(
                    "Claim listener %r failed on %s for claim %s: %s",
                    listener,
                    event.kind.value,
                    event.claim_id,
                    e,
                )


__all__ = ["ClaimEvent", "ClaimEventBus", "ClaimEventKind", "ClaimListener"]
