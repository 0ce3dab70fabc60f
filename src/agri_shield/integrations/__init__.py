# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""External weather provider integration."""

from .openweather import OpenWeatherClient, normalise_current_weather
from .weather_fetch import FarmFetchFailure, WeatherFetchJob, WeatherFetchReport

__all__ = [
    "FarmFetchFailure",
    "OpenWeatherClient",
    "WeatherFetchJob",
    "WeatherFetchReport",
    "normalise_current_weather",
]
