# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later
"""OpenWeatherMap current-conditions client."""

from typing import Any
from uuid import UUID

import httpx
from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..models.weather import WeatherObservationCreate


class OpenWeatherClient:
    """Thin async client for the provider's current-weather endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_url: str,
        api_key: str,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the client.

        Args:
            client: Shared httpx client (the caller owns its lifetime)
            api_url: Current-weather endpoint
            api_key: Provider API key
            timeout: Per-request timeout in seconds
        """
        self._client = client
        self._api_url = api_url
        self._api_key = api_key
        self._timeout = timeout

    @beartype
    async def current_conditions(
        self, farm_id: UUID, location: str
    ) -> Result[WeatherObservationCreate, str]:
        """Fetch and normalise current conditions for one location."""
        try:
            response = await self._client.get(
                self._api_url,
                params={"q": location, "appid": self._api_key, "units": "metric"},
                timeout=self._timeout,
            )
            if response.status_code != 200:
                return Err(f"Weather provider returned HTTP {response.status_code}")
            return Ok(normalise_current_weather(farm_id, response.json()))
        except httpx.TimeoutException:
            return Err("Weather request timed out")
        except httpx.RequestError as e:
            return Err(f"Network error fetching weather: {str(e)}")
        except (ValueError, KeyError, TypeError) as e:
            return Err(f"Malformed weather response: {str(e)}")


@beartype
def normalise_current_weather(
    farm_id: UUID, payload: dict[str, Any]
) -> WeatherObservationCreate:
    """Map a provider payload onto the observation triple.

    Rainfall is the last hour's volume and is 0 when the provider omits it.
    """
    main = payload["main"]
    rain = payload.get("rain") or {}
    return WeatherObservationCreate(
        farm_id=farm_id,
        temperature_c=main.get("temp"),
        humidity=main.get("humidity"),
        rainfall_mm=rain.get("1h") or 0.0,
    )


__all__ = ["OpenWeatherClient", "normalise_current_weather"]
