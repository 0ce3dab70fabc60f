# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Threshold arithmetic for the automation pass.

Everything here is pure: aggregates are computed from observations already
loaded for one farm's trigger window, so the rules can be tested without a
store.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from beartype import beartype

from ...models.automation import BreachKind, ThresholdBreach, WeatherAggregate
from ...models.policy import AutomationConfig
from ...models.weather import WeatherObservation

CENTS = Decimal("0.01")


@beartype
def aggregate_observations(
    observations: Iterable[WeatherObservation],
) -> WeatherAggregate:
    """Compute rolling rainfall average and temperature maximum.

    Missing readings are dropped before aggregating, never counted as zero.
    """
    count = 0
    rainfall: list[float] = []
    temperatures: list[float] = []
    for observation in observations:
        count += 1
        if observation.rainfall_mm is not None:
            rainfall.append(observation.rainfall_mm)
        if observation.temperature_c is not None:
            temperatures.append(observation.temperature_c)

    return WeatherAggregate(
        observation_count=count,
        rainfall_samples=len(rainfall),
        temperature_samples=len(temperatures),
        avg_rainfall_7d=sum(rainfall) / len(rainfall) if rainfall else 0.0,
        max_temperature_7d=max(temperatures) if temperatures else None,
    )


@beartype
def detect_breaches(
    aggregate: WeatherAggregate, config: AutomationConfig
) -> list[ThresholdBreach]:
    """Return every configured threshold the aggregate crosses.

    Either breach alone is enough to trigger a claim. A window without
    observations never breaches, and a condition whose reading is missing
    from every observation is not evaluated.
    """
    if not config.enabled or aggregate.observation_count == 0:
        return []

    breaches: list[ThresholdBreach] = []
    if (
        config.min_rainfall_7day_avg is not None
        and aggregate.rainfall_samples > 0
        and aggregate.avg_rainfall_7d < config.min_rainfall_7day_avg
    ):
        breaches.append(
            ThresholdBreach(
                kind=BreachKind.LOW_RAINFALL,
                measured=aggregate.avg_rainfall_7d,
                threshold=config.min_rainfall_7day_avg,
            )
        )
    if (
        config.max_temperature is not None
        and aggregate.max_temperature_7d is not None
        and aggregate.max_temperature_7d > config.max_temperature
    ):
        breaches.append(
            ThresholdBreach(
                kind=BreachKind.HIGH_TEMPERATURE,
                measured=aggregate.max_temperature_7d,
                threshold=config.max_temperature,
            )
        )
    return breaches


@beartype
def compute_claim_amount(
    coverage_amount: Decimal, trigger_percentage: float
) -> Decimal:
    """Coverage times the trigger fraction, capped at the coverage amount."""
    raw = coverage_amount * Decimal(str(trigger_percentage))
    return min(raw, coverage_amount).quantize(CENTS, rounding=ROUND_HALF_UP)


@beartype
def describe_breaches(breaches: list[ThresholdBreach], window_days: int = 7) -> str:
    """Human readable claim reason naming each breach and its measurement."""
    parts = []
    for breach in breaches:
        if breach.kind is BreachKind.LOW_RAINFALL:
            parts.append(
                f"Low rainfall: {window_days}-day average {breach.measured:.1f} mm "
                f"below threshold {breach.threshold:.1f} mm"
            )
        else:
            parts.append(
                f"High temperature: {window_days}-day maximum {breach.measured:.1f}°C "
                f"above threshold {breach.threshold:.1f}°C"
            )
    return "Automated trigger. " + "; ".join(parts)


__all__ = [
    "aggregate_observations",
    "compute_claim_amount",
    "describe_breaches",
    "detect_breaches",
]
