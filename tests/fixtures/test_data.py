"""Test data factories for the automation core.

All factories build frozen domain models with sensible defaults; pass
keyword overrides for the fields a test cares about.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from agri_shield.models import (
    AutomationConfig,
    Claim,
    ClaimStatus,
    FarmerProfile,
    FarmProfile,
    PaymentStatus,
    PolicyClaimStatus,
    PolicyProduct,
    UserPolicy,
    WeatherObservation,
)

FIXED_NOW = datetime(2025, 7, 15, 12, 0, tzinfo=timezone.utc)

DROUGHT_CONFIG = AutomationConfig(
    enabled=True,
    min_rainfall_7day_avg=10.0,
    max_temperature=45.0,
    trigger_percentage=0.25,
)


def make_farmer(**overrides: Any) -> FarmerProfile:
    data: dict[str, Any] = {
        "user_id": "farmer-1",
        "full_name": "Asha Gowda",
        "email": "asha@example.com",
        "phone": "+91 98450 00000",
        "address": "Hunsur Road, Mysuru",
        "created_at": FIXED_NOW - timedelta(days=60),
    }
    data.update(overrides)
    return FarmerProfile(**data)


def make_farm(**overrides: Any) -> FarmProfile:
    data: dict[str, Any] = {
        "farm_id": uuid4(),
        "user_id": "farmer-1",
        "farm_name": "North Field",
        "location": "Mysuru",
        "district": "Mysuru",
        "area": 4.5,
        "crop_type": "rice",
        "season": "kharif",
    }
    data.update(overrides)
    return FarmProfile(**data)


def make_product(**overrides: Any) -> PolicyProduct:
    data: dict[str, Any] = {
        "id": uuid4(),
        "created_at": FIXED_NOW - timedelta(days=90),
        "name": "Kharif Drought Cover",
        "description": "Rain-fed paddy cover",
        "insurer_id": "insurer-1",
        "crop_type": "paddy",
        "season": "kharif",
        "base_premium": Decimal("1500.00"),
        "coverage_amount": Decimal("50000.00"),
        "duration_months": 6,
        "automation_config": DROUGHT_CONFIG,
    }
    data.update(overrides)
    return PolicyProduct(**data)


def make_policy(
    product: PolicyProduct, farm_id: UUID, **overrides: Any
) -> UserPolicy:
    data: dict[str, Any] = {
        "id": uuid4(),
        "created_at": FIXED_NOW - timedelta(days=30),
        "user_id": "farmer-1",
        "farm_id": farm_id,
        "policy_product_id": product.id,
        "insurer_id": product.insurer_id,
        "premium_amount": product.base_premium,
        "coverage_amount": product.coverage_amount,
        "purchase_date": date(2025, 6, 1),
        "start_date": date(2025, 6, 1),
        "end_date": date(2025, 11, 30),
        "payment_status": PaymentStatus.PAID,
        "claim_status": PolicyClaimStatus.NONE,
    }
    data.update(overrides)
    return UserPolicy(**data)


def make_observation(farm_id: UUID, **overrides: Any) -> WeatherObservation:
    data: dict[str, Any] = {
        "id": uuid4(),
        "farm_id": farm_id,
        "timestamp": FIXED_NOW - timedelta(hours=1),
        "rainfall_mm": 20.0,
        "temperature_c": 30.0,
        "humidity": 60.0,
    }
    data.update(overrides)
    return WeatherObservation(**data)


def daily_observations(
    farm_id: UUID,
    rainfall: list[float | None],
    temperature: float | None = 30.0,
    end: datetime = FIXED_NOW,
) -> list[WeatherObservation]:
    """One observation per day, the last one an hour before ``end``."""
    return [
        make_observation(
            farm_id,
            timestamp=end - timedelta(days=offset, hours=1),
            rainfall_mm=value,
            temperature_c=temperature,
        )
        for offset, value in enumerate(reversed(rainfall))
    ]


def make_claim(user_policy_id: UUID, **overrides: Any) -> Claim:
    data: dict[str, Any] = {
        "id": uuid4(),
        "user_policy_id": user_policy_id,
        "triggered_at": FIXED_NOW,
        "reason": "Automated trigger. Low rainfall",
        "amount_claimed": Decimal("12500.00"),
        "status": ClaimStatus.PENDING,
        "created_at": FIXED_NOW,
        "updated_at": FIXED_NOW,
    }
    data.update(overrides)
    return Claim(**data)
