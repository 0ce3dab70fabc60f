# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Claim domain models.

Claims are created by the automation pass and afterwards only change
through the lifecycle transitions in ``services.claim_lifecycle``.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field, model_validator

from .base import BaseModelConfig, IdentifiableModel
from .policy import PolicyClaimStatus


class ClaimStatus(str, Enum):
    """Enumeration of claim processing states."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PAID = "Paid"

    @property
    def is_terminal(self) -> bool:
        """Paid and Rejected claims never change again."""
        return self in (ClaimStatus.PAID, ClaimStatus.REJECTED)

    @property
    def policy_status(self) -> PolicyClaimStatus:
        """Status mirrored onto the owning policy."""
        return PolicyClaimStatus(self.value)


@beartype
class Claim(IdentifiableModel):
    """Complete claim entity."""

    user_policy_id: UUID = Field(..., description="Owning policy")
    triggered_at: datetime = Field(..., description="When the breach was detected")
    reason: str = Field(..., min_length=1, max_length=2000)
    amount_claimed: Decimal = Field(..., ge=Decimal("0"), decimal_places=2)
    status: ClaimStatus = Field(default=ClaimStatus.PENDING)
    reviewed_by: str | None = Field(default=None, description="Reviewer user id")
    reviewed_at: datetime | None = None
    rejection_reason: str | None = Field(default=None, max_length=1000)
    payout_reference_id: str | None = Field(default=None, max_length=100)
    paid_at: datetime | None = None
    updated_at: datetime

    @model_validator(mode="after")
    @beartype
    def validate_status_fields(self) -> "Claim":
        """Rejection reason iff rejected; payout reference iff paid."""
        if (self.status == ClaimStatus.REJECTED) != bool(self.rejection_reason):
            raise ValueError("rejection_reason is required exactly when Rejected")
        if (self.status == ClaimStatus.PAID) != bool(self.payout_reference_id):
            raise ValueError("payout_reference_id is required exactly when Paid")
        return self


@beartype
class TransitionDetails(BaseModelConfig):
    """Optional payload accompanying a status transition."""

    rejection_reason: str | None = Field(default=None, max_length=1000)
    payout_reference_id: str | None = Field(default=None, max_length=100)


@beartype
class ClaimTransitionRequest(TransitionDetails):
    """API body for a reviewer's status change."""

    new_status: ClaimStatus


@beartype
class ClaimFilter(BaseModelConfig):
    """Filters accepted by the claim listing."""

    user_policy_id: UUID | None = None
    status: ClaimStatus | None = None


__all__ = [
    "Claim",
    "ClaimFilter",
    "ClaimStatus",
    "ClaimTransitionRequest",
    "TransitionDetails",
]
