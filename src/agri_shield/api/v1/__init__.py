# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""API v1 router aggregation.

This module combines all v1 API routers into a single router
that can be mounted on the main FastAPI application.
"""

from fastapi import APIRouter

from .automation import router as automation_router
from .claims import router as claims_router
from .dashboard import router as dashboard_router
from .farmers import router as farmers_router
from .health import router as health_router
from .policies import router as policies_router
from .products import router as products_router
from .weather import router as weather_router

# Create main v1 router
router = APIRouter(prefix="/api/v1")

# Include all sub-routers
router.include_router(health_router, tags=["health"])
router.include_router(automation_router, prefix="/automation", tags=["automation"])
router.include_router(claims_router, prefix="/claims", tags=["claims"])
router.include_router(policies_router, prefix="/policies", tags=["policies"])
router.include_router(products_router, prefix="/products", tags=["products"])
router.include_router(weather_router, prefix="/weather", tags=["weather"])
router.include_router(farmers_router, prefix="/farmers", tags=["farmers"])
router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])


__all__ = ["router"]
