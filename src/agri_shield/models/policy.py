# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Policy catalog and purchased policy models.

A ``PolicyProduct`` is the insurer's product definition carrying the
automation thresholds; a ``UserPolicy`` is a farmer's purchased instance of
a product for one farm.
"""

import logging
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from beartype import beartype
from pydantic import Field, ValidationError, model_validator

from .base import BaseModelConfig, IdentifiableModel

logger = logging.getLogger(__name__)


class PaymentStatus(str, Enum):
    """Premium payment state of a purchased policy."""

    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"


class PolicyClaimStatus(str, Enum):
    """Claim status mirrored onto the purchased policy."""

    NONE = "None"
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PAID = "Paid"

    @property
    def is_in_flight(self) -> bool:
        """Whether a claim against the policy is still being processed."""
        return self in (PolicyClaimStatus.PENDING, PolicyClaimStatus.APPROVED)

    @property
    def display_label(self) -> str:
        """Label used by the portal for this status."""
        return _CLAIM_STATUS_LABELS[self]


_CLAIM_STATUS_LABELS = {
    PolicyClaimStatus.NONE: "No Claim",
    PolicyClaimStatus.PENDING: "Claim Pending",
    PolicyClaimStatus.APPROVED: "Claim Initiated",
    PolicyClaimStatus.REJECTED: "Claim Rejected",
    PolicyClaimStatus.PAID: "Claim Paid",
}


@beartype
class AutomationConfig(BaseModelConfig):
    """Weather thresholds that convert a breach into an automatic claim."""

    enabled: bool = Field(default=False, description="Whether automation runs")
    min_rainfall_7day_avg: float | None = Field(
        default=None,
        ge=0,
        description="Trigger when trailing average rainfall (mm) falls below this",
    )
    max_temperature: float | None = Field(
        default=None,
        description="Trigger when trailing maximum temperature (C) exceeds this",
    )
    trigger_percentage: float | None = Field(
        default=None,
        ge=0,
        description="Fraction of coverage claimed on breach (0.25 = 25%)",
    )

    @model_validator(mode="after")
    @beartype
    def validate_enabled_config(self) -> "AutomationConfig":
        """An enabled config needs a payout fraction and at least one threshold."""
        if not self.enabled:
            return self
        if not self.trigger_percentage:
            raise ValueError("trigger_percentage must be positive when enabled")
        if self.min_rainfall_7day_avg is None and self.max_temperature is None:
            raise ValueError("At least one threshold is required when enabled")
        return self

    @classmethod
    @beartype
    def from_storage(cls, raw: dict[str, Any] | None) -> "AutomationConfig":
        """Build from a stored JSON document, ignoring unknown keys.

        A stored config that fails validation is treated as disabled so a
        single bad product cannot break an evaluation pass.
        """
        if not raw:
            return cls()
        known = {key: raw[key] for key in cls.model_fields if key in raw}
        try:
            return cls(**known)
        except ValidationError as e:
            logger.warning("Ignoring invalid automation config %s: %s", raw, e)
            return cls()


@beartype
class PolicyProductBase(BaseModelConfig):
    """Attributes shared by product creation and the stored product."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    insurer_id: str | None = Field(default=None, description="Owning insurer")
    crop_type: str = Field(..., min_length=1, max_length=100)
    season: str = Field(..., min_length=1, max_length=50)
    base_premium: Decimal = Field(..., ge=Decimal("0"), decimal_places=2)
    coverage_amount: Decimal = Field(..., gt=Decimal("0"), decimal_places=2)
    duration_months: int = Field(..., ge=1, le=60)
    automation_config: AutomationConfig = Field(default_factory=AutomationConfig)


@beartype
class PolicyProductCreate(PolicyProductBase):
    """Model for creating a new product in the catalog."""


@beartype
class PolicyProduct(PolicyProductBase, IdentifiableModel):
    """Catalog product with automation thresholds."""


@beartype
class UserPolicy(IdentifiableModel):
    """A farmer's purchased policy for one farm."""

    user_id: str = Field(..., min_length=1, description="Farmer user id")
    farm_id: UUID = Field(..., description="Insured farm")
    policy_product_id: UUID = Field(..., description="Purchased product")
    insurer_id: str | None = Field(default=None)
    premium_amount: Decimal = Field(..., ge=Decimal("0"), decimal_places=2)
    coverage_amount: Decimal = Field(..., gt=Decimal("0"), decimal_places=2)
    purchase_date: date
    start_date: date
    end_date: date
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING)
    claim_status: PolicyClaimStatus = Field(default=PolicyClaimStatus.NONE)

    @model_validator(mode="after")
    @beartype
    def validate_dates(self) -> "UserPolicy":
        """Coverage must end on or after it starts."""
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self

    @beartype
    def is_active_on(self, day: date) -> bool:
        """Whether ``day`` falls inside the coverage period (inclusive)."""
        return self.start_date <= day <= self.end_date


@beartype
class EligiblePolicy(BaseModelConfig):
    """A purchased policy joined with its product's automation config."""

    policy: UserPolicy
    product_name: str
    automation_config: AutomationConfig


@beartype
class PolicyFilter(BaseModelConfig):
    """Filters accepted by the policy listing."""

    farm_id: UUID | None = None
    user_id: str | None = None
    payment_status: PaymentStatus | None = None
    claim_status: PolicyClaimStatus | None = None


__all__ = [
    "AutomationConfig",
    "EligiblePolicy",
    "PaymentStatus",
    "PolicyClaimStatus",
    "PolicyFilter",
    "PolicyProduct",
    "PolicyProductCreate",
    "UserPolicy",
]

