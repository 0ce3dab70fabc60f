# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""PostgreSQL automation store over the shared asyncpg ``Database``."""

import asyncio
import contextlib
import logging
from collections import defaultdict
from collections.abc import AsyncIterator, Iterator
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

import asyncpg
from beartype import beartype

from ..core.database import Database
from ..core.errors import IngestionError, UpstreamUnavailable
from ..models.claim import Claim, ClaimFilter, ClaimStatus
from ..models.farmer import FarmerWithFarms, FarmProfile
from ..models.policy import (
    AutomationConfig,
    EligiblePolicy,
    PaymentStatus,
    PolicyClaimStatus,
    PolicyFilter,
    PolicyProduct,
    UserPolicy,
)
from ..models.weather import FarmLocation, WeatherObservation
from .base import AutomationStore

logger = logging.getLogger(__name__)

# pg_advisory_lock key held by the running evaluation pass
EVALUATION_LOCK_ID = 0x41475249

_DRIVER_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)

_CLAIM_COLUMNS = """
    id, user_policy_id, triggered_at, reason, amount_claimed, status,
    reviewed_by, reviewed_at, rejection_reason, payout_reference_id,
    paid_at, created_at, updated_at
"""

_FARM_COLUMNS = """
    id, user_id, farm_name, location, district, area, crop_type, season
"""

_POLICY_COLUMNS = """
    id, user_id, farm_id, policy_product_id, insurer_id, premium_amount,
    coverage_amount, purchase_date, start_date, end_date, payment_status,
    claim_status, created_at
"""

_PRODUCT_COLUMNS = """
    id, name, description, insurer_id, crop_type, season, base_premium,
    coverage_amount, duration_months, automation_config, created_at
"""


@contextlib.contextmanager
def _unavailable_on_driver_error(operation: str) -> Iterator[None]:
    """Translate driver and network failures into ``UpstreamUnavailable``."""
    try:
        yield
    except _DRIVER_ERRORS as e:
        logger.error("Store operation %s failed: %s", operation, e)
        raise UpstreamUnavailable(
            f"Data store unavailable during {operation}", {"cause": str(e)}
        ) from e


class PostgresAutomationStore(AutomationStore):
    """Automation store backed by PostgreSQL."""

    def __init__(self, db: Database) -> None:
        """Initialize store with dependency validation."""
        if not db or not hasattr(db, "transaction"):
            raise ValueError("Database connection required")
        self._db = db

    async def connect(self) -> None:
        with _unavailable_on_driver_error("connect"):
            await self._db.connect()

    async def close(self) -> None:
        await self._db.disconnect()

    async def health_check(self) -> bool:
        result = await self._db.health_check()
        return result.is_ok() and result.unwrap()

    # Policy catalog

    @beartype
    async def create_product(self, product: PolicyProduct) -> PolicyProduct:
        query = f"""
            INSERT INTO policy_products ({_PRODUCT_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
            RETURNING {_PRODUCT_COLUMNS}
        """  # nosec B608 - column list is a module constant
        with _unavailable_on_driver_error("create_product"):
            row = await self._db.fetchrow(
                query,
                product.id,
                product.name,
                product.description,
                product.insurer_id,
                product.crop_type,
                product.season,
                product.base_premium,
                product.coverage_amount,
                product.duration_months,
                product.automation_config.model_dump(),
                product.created_at,
            )
        return self._row_to_product(row)

    @beartype
    async def get_product(self, product_id: UUID) -> PolicyProduct | None:
        query = f"SELECT {_PRODUCT_COLUMNS} FROM policy_products WHERE id = $1"  # nosec B608
        with _unavailable_on_driver_error("get_product"):
            row = await self._db.fetchrow(query, product_id)
        return self._row_to_product(row) if row else None

    @beartype
    async def list_products(
        self, crop_type: str | None = None, season: str | None = None
    ) -> list[PolicyProduct]:
        query = f"""
            SELECT {_PRODUCT_COLUMNS} FROM policy_products
            WHERE ($1::text IS NULL OR crop_type = $1)
              AND ($2::text IS NULL OR season = $2)
            ORDER BY created_at DESC
        """  # nosec B608
        with _unavailable_on_driver_error("list_products"):
            rows = await self._db.fetch(query, crop_type, season)
        return [self._row_to_product(row) for row in rows]

    @beartype
    async def update_product(self, product: PolicyProduct) -> PolicyProduct | None:
        query = f"""
            UPDATE policy_products
            SET name = $2, description = $3, crop_type = $4, season = $5,
                base_premium = $6, coverage_amount = $7, duration_months = $8,
                automation_config = $9
            WHERE id = $1
            RETURNING {_PRODUCT_COLUMNS}
        """  # nosec B608
        with _unavailable_on_driver_error("update_product"):
            row = await self._db.fetchrow(
                query,
                product.id,
                product.name,
                product.description,
                product.crop_type,
                product.season,
                product.base_premium,
                product.coverage_amount,
                product.duration_months,
                product.automation_config.model_dump(),
            )
        return self._row_to_product(row) if row else None

    @beartype
    async def delete_product(self, product_id: UUID) -> bool:
        with _unavailable_on_driver_error("delete_product"):
            result = await self._db.execute(
                "DELETE FROM policy_products WHERE id = $1", product_id
            )
        return result.split()[-1] != "0"

    @beartype
    async def count_active_policies_for_product(
        self, product_id: UUID, on: date
    ) -> int:
        query = """
            SELECT COUNT(*) FROM user_policies
            WHERE policy_product_id = $1 AND start_date <= $2 AND end_date >= $2
        """
        with _unavailable_on_driver_error("count_active_policies_for_product"):
            return int(await self._db.fetchval(query, product_id, on))

    # Purchased policies

    @beartype
    async def get_policy(self, policy_id: UUID) -> UserPolicy | None:
        query = f"SELECT {_POLICY_COLUMNS} FROM user_policies WHERE id = $1"  # nosec B608
        with _unavailable_on_driver_error("get_policy"):
            row = await self._db.fetchrow(query, policy_id)
        return self._row_to_policy(row) if row else None

    @beartype
    async def list_policies(
        self, filters: PolicyFilter, limit: int = 100, offset: int = 0
    ) -> list[UserPolicy]:
        query_parts = [f"SELECT {_POLICY_COLUMNS} FROM user_policies WHERE 1=1"]
        params: list[Any] = []

        if filters.farm_id:
            params.append(filters.farm_id)
            query_parts.append(f"AND farm_id = ${len(params)}")
        if filters.user_id:
            params.append(filters.user_id)
            query_parts.append(f"AND user_id = ${len(params)}")
        if filters.payment_status:
            params.append(filters.payment_status.value)
            query_parts.append(f"AND payment_status = ${len(params)}")
        if filters.claim_status:
            params.append(filters.claim_status.value)
            query_parts.append(f"AND claim_status = ${len(params)}")

        query_parts.append("ORDER BY purchase_date DESC, created_at DESC")
        params.append(limit)
        query_parts.append(f"LIMIT ${len(params)}")
        params.append(offset)
        query_parts.append(f"OFFSET ${len(params)}")

        with _unavailable_on_driver_error("list_policies"):
            rows = await self._db.fetch(" ".join(query_parts), *params)
        return [self._row_to_policy(row) for row in rows]

    @beartype
    async def count_policies(self) -> int:
        with _unavailable_on_driver_error("count_policies"):
            return int(await self._db.fetchval("SELECT COUNT(*) FROM user_policies"))

    @beartype
    async def list_eligible_policies(self, on: date) -> list[EligiblePolicy]:
        query = """
            SELECT up.id, up.user_id, up.farm_id, up.policy_product_id,
                   up.insurer_id, up.premium_amount, up.coverage_amount,
                   up.purchase_date, up.start_date, up.end_date,
                   up.payment_status, up.claim_status, up.created_at,
                   pp.name AS product_name, pp.automation_config
            FROM user_policies up
            JOIN policy_products pp ON pp.id = up.policy_product_id
            WHERE up.claim_status NOT IN ('Pending', 'Approved')
              AND COALESCE((pp.automation_config->>'enabled')::boolean, false)
              AND up.start_date <= $1 AND up.end_date >= $1
            ORDER BY up.start_date, up.id
        """
        with _unavailable_on_driver_error("list_eligible_policies"):
            rows = await self._db.fetch(query, on)

        eligible = []
        for row in rows:
            config = AutomationConfig.from_storage(row["automation_config"])
            if not config.enabled:
                continue
            eligible.append(
                EligiblePolicy(
                    policy=self._row_to_policy(row),
                    product_name=row["product_name"],
                    automation_config=config,
                )
            )
        return eligible

    # Claims

    @beartype
    async def create_triggered_claim(self, claim: Claim) -> Claim | None:
        insert = f"""
            INSERT INTO claims ({_CLAIM_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
            RETURNING {_CLAIM_COLUMNS}
        """  # nosec B608
        with _unavailable_on_driver_error("create_triggered_claim"):
            try:
                row = await self._insert_claim_for_policy(insert, claim)
            except asyncpg.UniqueViolationError:
                # Another pass committed an in-flight claim for this policy first
                return None
        if row is None:
            return None
        return self._row_to_claim(row)

    async def _insert_claim_for_policy(
        self, insert: str, claim: Claim
    ) -> asyncpg.Record | None:
        async with self._db.transaction() as conn:
            current = await conn.fetchval(
                "SELECT claim_status FROM user_policies WHERE id = $1 FOR UPDATE",
                claim.user_policy_id,
            )
            if current is None or PolicyClaimStatus(current).is_in_flight:
                return None
            row = await conn.fetchrow(insert, *self._claim_params(claim))
            await conn.execute(
                "UPDATE user_policies SET claim_status = $2 WHERE id = $1",
                claim.user_policy_id,
                claim.status.policy_status.value,
            )
        return row

    @beartype
    async def get_claim(self, claim_id: UUID) -> Claim | None:
        query = f"SELECT {_CLAIM_COLUMNS} FROM claims WHERE id = $1"  # nosec B608
        with _unavailable_on_driver_error("get_claim"):
            row = await self._db.fetchrow(query, claim_id)
        return self._row_to_claim(row) if row else None

    @beartype
    async def list_claims(
        self, filters: ClaimFilter, limit: int = 100, offset: int = 0
    ) -> list[Claim]:
        query = f"""
            SELECT {_CLAIM_COLUMNS} FROM claims
            WHERE ($1::uuid IS NULL OR user_policy_id = $1)
              AND ($2::text IS NULL OR status = $2)
            ORDER BY triggered_at DESC
            LIMIT $3 OFFSET $4
        """  # nosec B608
        status = filters.status.value if filters.status else None
        with _unavailable_on_driver_error("list_claims"):
            rows = await self._db.fetch(
                query, filters.user_policy_id, status, limit, offset
            )
        return [self._row_to_claim(row) for row in rows]

    @beartype
    async def replace_claim_status(
        self, claim: Claim, expected_status: ClaimStatus
    ) -> Claim | None:
        # The status predicate makes the UPDATE a compare-and-swap under the row lock
        query = f"""
            UPDATE claims
            SET status = $3, reviewed_by = $4, reviewed_at = $5,
                rejection_reason = $6, payout_reference_id = $7, paid_at = $8,
                updated_at = $9
            WHERE id = $1 AND status = $2
            RETURNING {_CLAIM_COLUMNS}
        """  # nosec B608
        with _unavailable_on_driver_error("replace_claim_status"):
            async with self._db.transaction() as conn:
                row = await conn.fetchrow(
                    query,
                    claim.id,
                    expected_status.value,
                    claim.status.value,
                    claim.reviewed_by,
                    claim.reviewed_at,
                    claim.rejection_reason,
                    claim.payout_reference_id,
                    claim.paid_at,
                    claim.updated_at,
                )
                if row is None:
                    return None
                await conn.execute(
                    "UPDATE user_policies SET claim_status = $2 WHERE id = $1",
                    claim.user_policy_id,
                    claim.status.policy_status.value,
                )
        return self._row_to_claim(row)

    @beartype
    async def count_claims_by_status(self) -> dict[ClaimStatus, int]:
        with _unavailable_on_driver_error("count_claims_by_status"):
            rows = await self._db.fetch(
                "SELECT status, COUNT(*) AS total FROM claims GROUP BY status"
            )
        return {ClaimStatus(row["status"]): int(row["total"]) for row in rows}

    # Weather

    @beartype
    async def insert_observations(self, observations: list[WeatherObservation]) -> int:
        query = """
            INSERT INTO weather_observations (
                id, farm_id, timestamp, rainfall_mm, temperature_c, humidity
            )
            VALUES ($1, $2, $3, $4, $5, $6)
        """
        args = [
            (o.id, o.farm_id, o.timestamp, o.rainfall_mm, o.temperature_c, o.humidity)
            for o in observations
        ]
        try:
            async with self._db.transaction() as conn:
                await conn.executemany(query, args)
        except asyncpg.ForeignKeyViolationError as e:
            raise IngestionError(
                "Observation references an unknown farm; batch discarded",
                {"cause": str(e)},
            ) from e
        except _DRIVER_ERRORS as e:
            logger.error("Weather batch insert failed: %s", e)
            raise IngestionError(
                "Weather batch could not be persisted", {"cause": str(e)}
            ) from e
        return len(args)

    @beartype
    async def observations_between(
        self, farm_id: UUID | None, start: datetime, end: datetime
    ) -> list[WeatherObservation]:
        query = """
            SELECT id, farm_id, timestamp, rainfall_mm, temperature_c, humidity
            FROM weather_observations
            WHERE ($1::uuid IS NULL OR farm_id = $1)
              AND timestamp >= $2 AND timestamp <= $3
            ORDER BY timestamp DESC
        """
        with _unavailable_on_driver_error("observations_between"):
            rows = await self._db.fetch(query, farm_id, start, end)
        return [self._row_to_observation(row) for row in rows]

    @beartype
    async def list_observations(
        self, farm_id: UUID | None = None, limit: int = 50
    ) -> list[WeatherObservation]:
        query = """
            SELECT id, farm_id, timestamp, rainfall_mm, temperature_c, humidity
            FROM weather_observations
            WHERE ($1::uuid IS NULL OR farm_id = $1)
            ORDER BY timestamp DESC
            LIMIT $2
        """
        with _unavailable_on_driver_error("list_observations"):
            rows = await self._db.fetch(query, farm_id, limit)
        return [self._row_to_observation(row) for row in rows]

    @beartype
    async def list_farm_locations(self) -> list[FarmLocation]:
        query = f"SELECT {_FARM_COLUMNS} FROM farm_profiles"  # nosec B608
        with _unavailable_on_driver_error("list_farm_locations"):
            rows = await self._db.fetch(query)
        return [self._row_to_farm(row) for row in rows]

    # Farmers

    @beartype
    async def list_farmers(
        self, search: str | None = None, limit: int = 100, offset: int = 0
    ) -> list[FarmerWithFarms]:
        query = """
            SELECT u.id, u.full_name, u.email, u.phone, u.address, u.created_at
            FROM user_profiles u
            WHERE u.role = 'farmer'
              AND (
                $1::text IS NULL
                OR u.full_name ILIKE $1
                OR u.email ILIKE $1
                OR EXISTS (
                    SELECT 1 FROM farm_profiles f
                    WHERE f.user_id = u.id
                      AND (f.farm_name ILIKE $1 OR f.location ILIKE $1)
                )
              )
            ORDER BY u.created_at DESC
            LIMIT $2 OFFSET $3
        """
        farms_query = f"""
            SELECT {_FARM_COLUMNS} FROM farm_profiles
            WHERE user_id = ANY($1::text[])
            ORDER BY created_at
        """  # nosec B608
        pattern = f"%{_escape_like(search)}%" if search else None
        with _unavailable_on_driver_error("list_farmers"):
            farmer_rows = await self._db.fetch(query, pattern, limit, offset)
            if not farmer_rows:
                return []
            farm_rows = await self._db.fetch(
                farms_query, [row["id"] for row in farmer_rows]
            )

        farms_by_owner: defaultdict[str, list[FarmProfile]] = defaultdict(list)
        for row in farm_rows:
            farms_by_owner[row["user_id"]].append(self._row_to_farm(row))
        return [
            FarmerWithFarms(
                user_id=row["id"],
                full_name=row["full_name"],
                email=row["email"],
                phone=row["phone"],
                address=row["address"],
                created_at=row["created_at"],
                farms=farms_by_owner[row["id"]],
            )
            for row in farmer_rows
        ]

    @beartype
    async def count_farmers(self) -> int:
        with _unavailable_on_driver_error("count_farmers"):
            return int(
                await self._db.fetchval(
                    "SELECT COUNT(*) FROM user_profiles WHERE role = 'farmer'"
                )
            )

    # Coordination

    @contextlib.asynccontextmanager
    async def evaluation_lock(self) -> AsyncIterator[None]:
        with _unavailable_on_driver_error("evaluation_lock"):
            async with self._db.acquire() as conn:
                await conn.execute("SELECT pg_advisory_lock($1)", EVALUATION_LOCK_ID)
                try:
                    yield
                finally:
                    await conn.execute(
                        "SELECT pg_advisory_unlock($1)", EVALUATION_LOCK_ID
                    )

    # Row mapping

    @staticmethod
    def _claim_params(claim: Claim) -> tuple[Any, ...]:
        return (
            claim.id,
            claim.user_policy_id,
            claim.triggered_at,
            claim.reason,
            claim.amount_claimed,
            claim.status.value,
            claim.reviewed_by,
            claim.reviewed_at,
            claim.rejection_reason,
            claim.payout_reference_id,
            claim.paid_at,
            claim.created_at,
            claim.updated_at,
        )

    @staticmethod
    def _row_to_claim(row: asyncpg.Record) -> Claim:
        return Claim(
            id=row["id"],
            user_policy_id=row["user_policy_id"],
            triggered_at=row["triggered_at"],
            reason=row["reason"],
            amount_claimed=Decimal(row["amount_claimed"]),
            status=ClaimStatus(row["status"]),
            reviewed_by=row["reviewed_by"],
            reviewed_at=row["reviewed_at"],
            rejection_reason=row["rejection_reason"],
            payout_reference_id=row["payout_reference_id"],
            paid_at=row["paid_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _row_to_policy(row: asyncpg.Record) -> UserPolicy:
        return UserPolicy(
            id=row["id"],
            user_id=row["user_id"],
            farm_id=row["farm_id"],
            policy_product_id=row["policy_product_id"],
            insurer_id=row["insurer_id"],
            premium_amount=Decimal(row["premium_amount"]),
            coverage_amount=Decimal(row["coverage_amount"]),
            purchase_date=row["purchase_date"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            payment_status=PaymentStatus(row["payment_status"]),
            claim_status=PolicyClaimStatus(row["claim_status"]),
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_product(row: asyncpg.Record) -> PolicyProduct:
        return PolicyProduct(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            insurer_id=row["insurer_id"],
            crop_type=row["crop_type"],
            season=row["season"],
            base_premium=Decimal(row["base_premium"]),
            coverage_amount=Decimal(row["coverage_amount"]),
            duration_months=row["duration_months"],
            automation_config=AutomationConfig.from_storage(row["automation_config"]),
            created_at=row["created_at"],
        )

    @staticmethod
    def _row_to_farm(row: asyncpg.Record) -> FarmProfile:
        return FarmProfile(
            farm_id=row["id"],
            user_id=row["user_id"],
            farm_name=row["farm_name"],
            location=row["location"],
            district=row["district"],
            area=float(row["area"]) if row["area"] is not None else None,
            crop_type=row["crop_type"],
            season=row["season"],
        )

    @staticmethod
    def _row_to_observation(row: asyncpg.Record) -> WeatherObservation:
        return WeatherObservation(
            id=row["id"],
            farm_id=row["farm_id"],
            timestamp=row["timestamp"],
            rainfall_mm=row["rainfall_mm"],
            temperature_c=row["temperature_c"],
            humidity=row["humidity"],
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
