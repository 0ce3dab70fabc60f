# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Weather observation models."""

from datetime import datetime
from uuid import UUID

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig


@beartype
class WeatherObservationCreate(BaseModelConfig):
    """One normalised reading for a farm.

    Missing readings stay ``None``; aggregates drop them instead of
    treating them as zero.
    """

    farm_id: UUID = Field(..., description="Farm the reading belongs to")
    rainfall_mm: float | None = Field(default=None, ge=0)
    temperature_c: float | None = Field(default=None, ge=-90, le=70)
    humidity: float | None = Field(default=None, ge=0, le=100)


@beartype
class WeatherObservation(WeatherObservationCreate):
    """Persisted, immutable observation."""

    id: UUID
    timestamp: datetime = Field(..., description="Ingestion time")


@beartype
class WeatherStats(BaseModelConfig):
    """Trailing-window statistics for one farm."""

    farm_id: UUID
    days: int = Field(..., ge=1)
    observation_count: int = Field(..., ge=0)
    avg_rainfall: float
    max_temperature: float
    min_temperature: float
    avg_humidity: float


@beartype
class FarmLocation(BaseModelConfig):
    """Farm identity and the place names usable for weather lookups."""

    farm_id: UUID
    farm_name: str | None = None
    location: str | None = None
    district: str | None = None

    @property
    def query_location(self) -> str | None:
        """District is preferred over the free-text location."""
        return self.district or self.location or None


__all__ = [
    "FarmLocation",
    "WeatherObservation",
    "WeatherObservationCreate",
    "WeatherStats",
]
