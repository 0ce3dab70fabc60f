# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Storage interface for the automation core.

Two guarantees every implementation must keep:

* ``create_triggered_claim`` inserts the claim and flips the policy's
  ``claim_status`` to Pending in one atomic step, re-checking inside that
  step that the policy has no claim in flight.
* ``replace_claim_status`` is a compare-and-swap on the claim's current
  status; it writes the claim and the mirrored policy status atomically
  and returns ``None`` when the stored status no longer matches.
"""

import contextlib
from abc import ABC, abstractmethod
from datetime import date, datetime
from uuid import UUID

from ..models.claim import Claim, ClaimFilter, ClaimStatus
from ..models.farmer import FarmerWithFarms
from ..models.policy import EligiblePolicy, PolicyFilter, PolicyProduct, UserPolicy
from ..models.weather import FarmLocation, WeatherObservation


class AutomationStore(ABC):
    """Persistence operations used by the automation services."""

    async def connect(self) -> None:
        """Open underlying resources."""

    async def close(self) -> None:
        """Release underlying resources."""

    async def health_check(self) -> bool:
        """Whether the backing store answers queries."""
        return True

    # Policy catalog

    @abstractmethod
    async def create_product(self, product: PolicyProduct) -> PolicyProduct: ...

    @abstractmethod
    async def get_product(self, product_id: UUID) -> PolicyProduct | None: ...

    @abstractmethod
    async def list_products(
        self, crop_type: str | None = None, season: str | None = None
    ) -> list[PolicyProduct]: ...

    @abstractmethod
    async def update_product(self, product: PolicyProduct) -> PolicyProduct | None: ...

    @abstractmethod
    async def delete_product(self, product_id: UUID) -> bool: ...

    @abstractmethod
    async def count_active_policies_for_product(
        self, product_id: UUID, on: date
    ) -> int: ...

    # Purchased policies

    @abstractmethod
    async def get_policy(self, policy_id: UUID) -> UserPolicy | None: ...

    @abstractmethod
    async def list_policies(
        self, filters: PolicyFilter, limit: int = 100, offset: int = 0
    ) -> list[UserPolicy]: ...

    @abstractmethod
    async def count_policies(self) -> int: ...

    @abstractmethod
    async def list_eligible_policies(self, on: date) -> list[EligiblePolicy]:
        """Active, automation-enabled policies with no claim in flight."""

    # Claims

    @abstractmethod
    async def create_triggered_claim(self, claim: Claim) -> Claim | None:
        """Insert ``claim`` and mark its policy Pending, or return None."""

    @abstractmethod
    async def get_claim(self, claim_id: UUID) -> Claim | None: ...

    @abstractmethod
    async def list_claims(
        self, filters: ClaimFilter, limit: int = 100, offset: int = 0
    ) -> list[Claim]: ...

    @abstractmethod
    async def replace_claim_status(
        self, claim: Claim, expected_status: ClaimStatus
    ) -> Claim | None:
        """Write ``claim`` if the stored status still equals ``expected_status``."""

    @abstractmethod
    async def count_claims_by_status(self) -> dict[ClaimStatus, int]: ...

    # Weather

    @abstractmethod
    async def insert_observations(self, observations: list[WeatherObservation]) -> int:
        """Persist the whole batch or nothing."""

    @abstractmethod
    async def observations_between(
        self, farm_id: UUID | None, start: datetime, end: datetime
    ) -> list[WeatherObservation]: ...

    @abstractmethod
    async def list_observations(
        self, farm_id: UUID | None = None, limit: int = 50
    ) -> list[WeatherObservation]: ...

    @abstractmethod
    async def list_farm_locations(self) -> list[FarmLocation]: ...

    # Farmers

    @abstractmethod
    async def list_farmers(
        self, search: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[FarmerWithFarms]:
        """Farmers with their farms, newest registration first.

        ``search`` matches name, email, farm name or farm location,
        ignoring case.
        """

    @abstractmethod
    async def count_farmers(self) -> int: ...

    # Coordination

    @abstractmethod
    def evaluation_lock(self) -> contextlib.AbstractAsyncContextManager[None]:
        """Held for the duration of one evaluation pass."""


__all__ = ["AutomationStore"]
