"""Unit tests for the operator dashboard summary."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from agri_shield.models import ClaimStatus, UserPolicy
from agri_shield.services.dashboard import DashboardService, is_critical
from agri_shield.storage import InMemoryAutomationStore
from tests.fixtures.test_data import make_claim, make_farmer, make_observation


@pytest.mark.parametrize(
    ("rainfall", "temperature", "critical"),
    [
        (5.0, 30.0, True),
        (20.0, 41.0, True),
        (10.0, 40.0, False),
        (None, None, False),
        (None, 45.0, True),
    ],
)
def test_is_critical(
    rainfall: float | None, temperature: float | None, critical: bool
) -> None:
    observation = make_observation(
        uuid4(), rainfall_mm=rainfall, temperature_c=temperature
    )

    assert is_critical(observation) is critical


async def test_summary_counts(
    store: InMemoryAutomationStore, policy: UserPolicy, now: datetime
) -> None:
    for status, extra in [
        (ClaimStatus.PENDING, {}),
        (ClaimStatus.PAID, {"payout_reference_id": "PAY-1"}),
        (ClaimStatus.REJECTED, {"rejection_reason": "No loss"}),
        (ClaimStatus.REJECTED, {"rejection_reason": "Duplicate"}),
    ]:
        claim = make_claim(policy.id, status=status, **extra)
        store._claims[claim.id] = claim
    await store.insert_observations(
        [
            make_observation(policy.farm_id, rainfall_mm=2.0),
            make_observation(policy.farm_id, rainfall_mm=25.0, temperature_c=30.0),
            make_observation(
                policy.farm_id,
                rainfall_mm=0.0,
                timestamp=now - timedelta(days=12),
            ),
        ]
    )

    store.add_farmer(make_farmer(user_id="farmer-1"))
    store.add_farmer(make_farmer(user_id="farmer-2", email="ravi@example.com"))

    summary = (await DashboardService(store).summary(now)).unwrap()

    assert summary.total_policies == 1
    assert summary.active_farmers == 2
    assert summary.pending_claims == 1
    assert summary.approved_claims == 0
    assert summary.paid_claims == 1
    assert summary.rejected_claims == 2
    assert summary.claims_by_status == {
        "Pending": 1,
        "Approved": 0,
        "Rejected": 2,
        "Paid": 1,
    }
    assert summary.weather_alerts == 1
