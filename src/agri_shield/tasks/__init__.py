# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Scheduled background tasks."""

from .automation import fetch_weather, run_claim_check
from .celery_app import app as celery_app

__all__ = ["celery_app", "fetch_weather", "run_claim_check"]
