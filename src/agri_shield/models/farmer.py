# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Farmer directory models."""

from datetime import datetime

from beartype import beartype
from pydantic import Field, computed_field

from .base import BaseModelConfig
from .weather import FarmLocation


@beartype
class FarmProfile(FarmLocation):
    """Registered farm with its owner and cropping details."""

    user_id: str = Field(..., min_length=1, description="Owning farmer")
    area: float | None = Field(default=None, ge=0, description="Area in acres")
    crop_type: str | None = Field(default=None, max_length=100)
    season: str | None = Field(default=None, max_length=50)


@beartype
class FarmerProfile(BaseModelConfig):
    """A portal user with the farmer role."""

    user_id: str = Field(..., min_length=1, description="Identity provider user id")
    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)
    created_at: datetime


@beartype
class FarmerWithFarms(FarmerProfile):
    """Directory entry: a farmer and every farm they registered."""

    farms: list[FarmProfile] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_area(self) -> float:
        """Combined area of the farmer's farms; unknown areas count as zero."""
        return sum((farm.area or 0.0 for farm in self.farms), 0.0)


__all__ = ["FarmProfile", "FarmerProfile", "FarmerWithFarms"]
