# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Portal dashboard summary."""

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig


@beartype
class DashboardSummary(BaseModelConfig):
    """Headline counts for the operator dashboard."""

    total_policies: int = Field(..., ge=0)
    active_farmers: int = Field(..., ge=0, description="Registered farmer accounts")
    claims_by_status: dict[str, int] = Field(default_factory=dict)
    pending_claims: int = Field(..., ge=0)
    approved_claims: int = Field(..., ge=0)
    paid_claims: int = Field(..., ge=0)
    rejected_claims: int = Field(..., ge=0)
    weather_alerts: int = Field(
        ..., ge=0, description="Critical observations in the trailing week"
    )
