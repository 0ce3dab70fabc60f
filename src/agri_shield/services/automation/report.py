# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Run report for one evaluation pass.

The recorder lives outside the pass itself so that a pass cut short by a
timeout or an upstream failure still reports the claims it already
committed.
"""

from datetime import datetime
from uuid import UUID

from beartype import beartype

from ...models.automation import AutomationResult


class RunRecorder:
    """Accumulates the outcome of an evaluation pass."""

    def __init__(self, timestamp: datetime) -> None:
        self.timestamp = timestamp
        self.policies_evaluated = 0
        self.claim_ids: list[UUID] = []

    def policy_evaluated(self) -> None:
        self.policies_evaluated += 1

    def claim_created(self, claim_id: UUID) -> None:
        self.claim_ids.append(claim_id)

    @property
    def claims_created(self) -> int:
        return len(self.claim_ids)

    @beartype
    def succeeded(self) -> AutomationResult:
        return self._build(success=True, error=None)

    @beartype
    def failed(self, error: str) -> AutomationResult:
        return self._build(success=False, error=error)

    def _build(self, success: bool, error: str | None) -> AutomationResult:
        return AutomationResult(
            success=success,
            claims_created=self.claims_created,
            timestamp=self.timestamp,
            policies_evaluated=self.policies_evaluated,
            claim_ids=list(self.claim_ids),
            error=error,
        )


__all__ = ["RunRecorder"]
