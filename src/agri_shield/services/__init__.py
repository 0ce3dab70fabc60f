# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Business services for the automation core."""

from .automation import ThresholdEvaluator
from .claim_lifecycle import ClaimLifecycleService
from .dashboard import DashboardService
from .farmer_directory import FarmerDirectoryService
from .policy_catalog import PolicyCatalogService
from .weather_ingestion import WeatherIngestionService

__all__ = [
    "ClaimLifecycleService",
    "DashboardService",
    "FarmerDirectoryService",
    "PolicyCatalogService",
    "ThresholdEvaluator",
    "WeatherIngestionService",
]
