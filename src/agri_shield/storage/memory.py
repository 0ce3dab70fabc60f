# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process automation store for tests and local development.

Keeps the same atomicity guarantees as the PostgreSQL store by doing the
check and the write for a claim or policy under that row's lock.
"""

import asyncio
import contextlib
from collections import defaultdict
from collections.abc import AsyncIterator
from datetime import date, datetime
from uuid import UUID

from ..core.errors import IngestionError
from ..models.claim import Claim, ClaimFilter, ClaimStatus
from ..models.farmer import FarmerProfile, FarmerWithFarms, FarmProfile
from ..models.policy import EligiblePolicy, PolicyFilter, PolicyProduct, UserPolicy
from ..models.weather import FarmLocation, WeatherObservation
from .base import AutomationStore


class InMemoryAutomationStore(AutomationStore):
    """Dictionary-backed store."""

    def __init__(self) -> None:
        self._products: dict[UUID, PolicyProduct] = {}
        self._policies: dict[UUID, UserPolicy] = {}
        self._claims: dict[UUID, Claim] = {}
        self._observations: list[WeatherObservation] = []
        self._farms: dict[UUID, FarmProfile] = {}
        self._farmers: dict[str, FarmerProfile] = {}
        self._row_locks: defaultdict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._evaluation_lock = asyncio.Lock()

    # Seeding (purchases and farm registration live outside the core)

    def add_farmer(self, farmer: FarmerProfile) -> FarmerProfile:
        self._farmers[farmer.user_id] = farmer
        return farmer

    def add_farm(self, farm: FarmProfile) -> FarmProfile:
        self._farms[farm.farm_id] = farm
        return farm

    def add_policy(self, policy: UserPolicy) -> UserPolicy:
        self._policies[policy.id] = policy
        return policy

    # Policy catalog

    async def create_product(self, product: PolicyProduct) -> PolicyProduct:
        self._products[product.id] = product
        return product

    async def get_product(self, product_id: UUID) -> PolicyProduct | None:
        return self._products.get(product_id)

    async def list_products(
        self, crop_type: str | None = None, season: str | None = None
    ) -> list[PolicyProduct]:
        products = [
            p
            for p in self._products.values()
            if (crop_type is None or p.crop_type == crop_type)
            and (season is None or p.season == season)
        ]
        return sorted(products, key=lambda p: p.created_at, reverse=True)

    async def update_product(self, product: PolicyProduct) -> PolicyProduct | None:
        if product.id not in self._products:
            return None
        self._products[product.id] = product
        return product

    async def delete_product(self, product_id: UUID) -> bool:
        return self._products.pop(product_id, None) is not None

    async def count_active_policies_for_product(
        self, product_id: UUID, on: date
    ) -> int:
        return sum(
            1
            for p in self._policies.values()
            if p.policy_product_id == product_id and p.is_active_on(on)
        )

    # Purchased policies

    async def get_policy(self, policy_id: UUID) -> UserPolicy | None:
        return self._policies.get(policy_id)

    async def list_policies(
        self, filters: PolicyFilter, limit: int = 100, offset: int = 0
    ) -> list[UserPolicy]:
        policies = [
            p
            for p in self._policies.values()
            if (filters.farm_id is None or p.farm_id == filters.farm_id)
            and (filters.user_id is None or p.user_id == filters.user_id)
            and (
                filters.payment_status is None
                or p.payment_status == filters.payment_status
            )
            and (filters.claim_status is None or p.claim_status == filters.claim_status)
        ]
        policies.sort(key=lambda p: (p.purchase_date, p.created_at), reverse=True)
        return policies[offset : offset + limit]

    async def count_policies(self) -> int:
        return len(self._policies)

    async def list_eligible_policies(self, on: date) -> list[EligiblePolicy]:
        eligible = []
        for policy in self._policies.values():
            product = self._products.get(policy.policy_product_id)
            if product is None or not product.automation_config.enabled:
                continue
            if policy.claim_status.is_in_flight or not policy.is_active_on(on):
                continue
            eligible.append(
                EligiblePolicy(
                    policy=policy,
                    product_name=product.name,
                    automation_config=product.automation_config,
                )
            )
        return eligible

    # Claims

    async def create_triggered_claim(self, claim: Claim) -> Claim | None:
        async with self._row_locks[claim.user_policy_id]:
            policy = self._policies.get(claim.user_policy_id)
            if policy is None or policy.claim_status.is_in_flight:
                return None
            self._claims[claim.id] = claim
            self._policies[policy.id] = policy.model_copy(
                update={"claim_status": claim.status.policy_status}
            )
            return claim

    async def get_claim(self, claim_id: UUID) -> Claim | None:
        return self._claims.get(claim_id)

    async def list_claims(
        self, filters: ClaimFilter, limit: int = 100, offset: int = 0
    ) -> list[Claim]:
        claims = [
            c
            for c in self._claims.values()
            if (
                filters.user_policy_id is None
                or c.user_policy_id == filters.user_policy_id
            )
            and (filters.status is None or c.status == filters.status)
        ]
        claims.sort(key=lambda c: c.triggered_at, reverse=True)
        return claims[offset : offset + limit]

    async def replace_claim_status(
        self, claim: Claim, expected_status: ClaimStatus
    ) -> Claim | None:
        async with self._row_locks[claim.id]:
            current = self._claims.get(claim.id)
            if current is None or current.status != expected_status:
                return None
            self._claims[claim.id] = claim
            policy = self._policies.get(claim.user_policy_id)
            if policy is not None:
                self._policies[policy.id] = policy.model_copy(
                    update={"claim_status": claim.status.policy_status}
                )
            return claim

    async def count_claims_by_status(self) -> dict[ClaimStatus, int]:
        counts: dict[ClaimStatus, int] = {}
        for claim in self._claims.values():
            counts[claim.status] = counts.get(claim.status, 0) + 1
        return counts

    # Weather

    async def insert_observations(self, observations: list[WeatherObservation]) -> int:
        unknown = {o.farm_id for o in observations} - self._farms.keys()
        if unknown:
            raise IngestionError(
                "Observation references an unknown farm; batch discarded",
                {"farm_ids": sorted(str(farm_id) for farm_id in unknown)},
            )
        # list.extend is a single step, so the batch lands whole
        self._observations.extend(observations)
        return len(observations)

    async def observations_between(
        self, farm_id: UUID | None, start: datetime, end: datetime
    ) -> list[WeatherObservation]:
        return [
            o
            for o in self._observations
            if (farm_id is None or o.farm_id == farm_id) and start <= o.timestamp <= end
        ]

    async def list_observations(
        self, farm_id: UUID | None = None, limit: int = 50
    ) -> list[WeatherObservation]:
        rows = [o for o in self._observations if farm_id is None or o.farm_id == farm_id]
        rows.sort(key=lambda o: o.timestamp, reverse=True)
        return rows[:limit]

    async def list_farm_locations(self) -> list[FarmLocation]:
        return list(self._farms.values())

    # Farmers

    async def list_farmers(
        self, search: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[FarmerWithFarms]:
        entries = [
            FarmerWithFarms(
                **farmer.model_dump(),
                farms=[f for f in self._farms.values() if f.user_id == farmer.user_id],
            )
            for farmer in self._farmers.values()
        ]
        if search:
            needle = search.lower()
            entries = [e for e in entries if _matches(e, needle)]
        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries[offset : offset + limit]

    async def count_farmers(self) -> int:
        return len(self._farmers)

    # Coordination

    @contextlib.asynccontextmanager
    async def evaluation_lock(self) -> AsyncIterator[None]:
        async with self._evaluation_lock:
            yield


def _matches(entry: FarmerWithFarms, needle: str) -> bool:
    fields = [entry.full_name, entry.email]
    for farm in entry.farms:
        fields.extend([farm.farm_name or "", farm.location or ""])
    return any(needle in value.lower() for value in fields)
