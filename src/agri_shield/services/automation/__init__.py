# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Weather-threshold claim automation."""

from .evaluator import ThresholdEvaluator, as_utc, utc_now
from .report import RunRecorder
from .thresholds import (
    aggregate_observations,
    compute_claim_amount,
    describe_breaches,
    detect_breaches,
)

__all__ = [
    "RunRecorder",
    "ThresholdEvaluator",
    "aggregate_observations",
    "as_utc",
    "compute_claim_amount",
    "describe_breaches",
    "detect_breaches",
    "utc_now",
]
