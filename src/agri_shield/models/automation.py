# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Automation pass models: aggregates, breaches and the run report."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig


class BreachKind(str, Enum):
    """Which configured threshold was crossed."""

    LOW_RAINFALL = "low_rainfall"
    HIGH_TEMPERATURE = "high_temperature"


@beartype
class WeatherAggregate(BaseModelConfig):
    """Rolling aggregates over one farm's trigger window."""

    observation_count: int = Field(..., ge=0)
    rainfall_samples: int = Field(..., ge=0)
    temperature_samples: int = Field(..., ge=0)
    avg_rainfall_7d: float = Field(..., description="0 when no rainfall samples")
    max_temperature_7d: float | None = Field(
        default=None, description="None when no temperature samples"
    )


@beartype
class ThresholdBreach(BaseModelConfig):
    """A measured aggregate crossing its configured threshold."""

    kind: BreachKind
    measured: float
    threshold: float


@beartype
class AutomationResult(BaseModelConfig):
    """Outcome of one evaluation pass, shown to operators."""

    success: bool
    claims_created: int = Field(..., ge=0)
    timestamp: datetime
    policies_evaluated: int = Field(default=0, ge=0)
    claim_ids: list[UUID] = Field(default_factory=list)
    error: str | None = None


__all__ = [
    "AutomationResult",
    "BreachKind",
    "ThresholdBreach",
    "WeatherAggregate",
]
