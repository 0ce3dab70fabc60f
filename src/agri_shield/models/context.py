# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request-scoped caller identity."""

from enum import Enum

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig


class UserRole(str, Enum):
    """Roles issued by the identity provider."""

    FARMER = "farmer"
    INSURER = "insurer"
    ADMIN = "admin"


@beartype
class RequestContext(BaseModelConfig):
    """Authenticated caller passed explicitly into service calls."""

    user_id: str = Field(..., description="Authenticated user id")
    role: UserRole

    @property
    def is_reviewer(self) -> bool:
        """Insurers and admins may review claims and edit the catalog."""
        return self.role in (UserRole.INSURER, UserRole.ADMIN)


__all__ = ["RequestContext", "UserRole"]
