"""Unit tests for domain model validation."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from agri_shield.models import (
    AutomationConfig,
    ClaimStatus,
    PolicyClaimStatus,
    RequestContext,
    UserRole,
    WeatherObservationCreate,
)
from tests.fixtures.test_data import make_claim, make_policy, make_product


class TestAutomationConfig:
    """Threshold configuration rules."""

    def test_disabled_config_needs_nothing(self) -> None:
        assert AutomationConfig().enabled is False

    def test_enabled_requires_trigger_percentage(self) -> None:
        with pytest.raises(ValidationError):
            AutomationConfig(enabled=True, min_rainfall_7day_avg=10.0)

    def test_enabled_requires_a_threshold(self) -> None:
        with pytest.raises(ValidationError):
            AutomationConfig(enabled=True, trigger_percentage=0.25)

    def test_negative_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AutomationConfig(min_rainfall_7day_avg=-1.0)

    def test_from_storage_ignores_unknown_keys(self) -> None:
        config = AutomationConfig.from_storage(
            {
                "enabled": True,
                "min_rainfall_7day_avg": 12,
                "trigger_percentage": 0.3,
                "notes": "legacy field",
            }
        )

        assert config.enabled
        assert config.min_rainfall_7day_avg == 12.0

    @pytest.mark.parametrize("raw", [None, {}, {"enabled": True}])
    def test_from_storage_falls_back_to_disabled(self, raw: dict | None) -> None:
        assert AutomationConfig.from_storage(raw) == AutomationConfig()

    def test_is_immutable(self) -> None:
        config = AutomationConfig()

        with pytest.raises(ValidationError):
            config.enabled = True  # type: ignore[misc]


class TestUserPolicy:
    """Purchased policy rules."""

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(ValidationError):
            make_policy(
                make_product(),
                uuid4(),
                start_date=date(2025, 6, 1),
                end_date=date(2025, 5, 1),
            )

    def test_active_period_is_inclusive(self) -> None:
        policy = make_policy(make_product(), uuid4())

        assert policy.is_active_on(policy.start_date)
        assert policy.is_active_on(policy.end_date)
        assert not policy.is_active_on(date(2025, 12, 1))


class TestClaim:
    """Claim field invariants."""

    def test_rejected_claim_requires_reason(self) -> None:
        with pytest.raises(ValidationError):
            make_claim(uuid4(), status=ClaimStatus.REJECTED)

    def test_paid_claim_requires_payout_reference(self) -> None:
        with pytest.raises(ValidationError):
            make_claim(uuid4(), status=ClaimStatus.PAID)

    def test_payout_reference_only_when_paid(self) -> None:
        with pytest.raises(ValidationError):
            make_claim(uuid4(), payout_reference_id="PAY-1")

    def test_amount_has_two_decimal_places(self) -> None:
        with pytest.raises(ValidationError):
            make_claim(uuid4(), amount_claimed=Decimal("10.001"))

    def test_status_mirrors_onto_policy(self) -> None:
        assert ClaimStatus.PAID.policy_status is PolicyClaimStatus.PAID
        assert PolicyClaimStatus.PAID.display_label == "Claim Paid"
        assert PolicyClaimStatus.REJECTED.display_label == "Claim Rejected"

    def test_terminal_states(self) -> None:
        assert {s for s in ClaimStatus if s.is_terminal} == {
            ClaimStatus.PAID,
            ClaimStatus.REJECTED,
        }


class TestWeatherObservation:
    """Observation input bounds."""

    def test_only_farm_id_required(self) -> None:
        observation = WeatherObservationCreate(farm_id=uuid4())

        assert observation.rainfall_mm is None

    def test_humidity_bounds(self) -> None:
        with pytest.raises(ValidationError):
            WeatherObservationCreate(farm_id=uuid4(), humidity=120.0)

    def test_negative_rainfall_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WeatherObservationCreate(farm_id=uuid4(), rainfall_mm=-0.5)


class TestRequestContext:
    """Caller identity."""

    @pytest.mark.parametrize(
        ("role", "reviewer"),
        [(UserRole.FARMER, False), (UserRole.INSURER, True), (UserRole.ADMIN, True)],
    )
    def test_reviewer_roles(self, role: UserRole, reviewer: bool) -> None:
        assert RequestContext(user_id="u-1", role=role).is_reviewer is reviewer

    def test_unknown_role_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RequestContext(user_id="u-1", role="superuser")
