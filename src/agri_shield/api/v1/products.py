# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Policy catalog endpoints."""

from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response, status

from ...models.context import RequestContext
from ...models.policy import AutomationConfig, PolicyProduct, PolicyProductCreate
from ...services.policy_catalog import PolicyCatalogService
from ..dependencies import get_catalog_service, get_current_context
from ..response_patterns import ErrorResponse, handle_result

router = APIRouter()


@router.get("")
@beartype
async def list_products(
    response: Response,
    crop_type: str | None = Query(default=None),
    season: str | None = Query(default=None),
    service: PolicyCatalogService = Depends(get_catalog_service),
) -> list[PolicyProduct] | ErrorResponse:
    """Browse the catalog; public."""
    return handle_result(await service.list_products(crop_type, season), response)


@router.post("", status_code=status.HTTP_201_CREATED)
@beartype
async def create_product(
    data: PolicyProductCreate,
    response: Response,
    service: PolicyCatalogService = Depends(get_catalog_service),
    context: RequestContext = Depends(get_current_context),
) -> PolicyProduct | ErrorResponse:
    """Add a product (insurers and admins)."""
    result = await service.create_product(context, data)
    return handle_result(result, response, success_status=status.HTTP_201_CREATED)


@router.get("/{product_id}")
@beartype
async def get_product(
    product_id: UUID,
    response: Response,
    service: PolicyCatalogService = Depends(get_catalog_service),
) -> PolicyProduct | ErrorResponse:
    """Get a single product."""
    return handle_result(await service.get_product(product_id), response)


@router.put("/{product_id}/automation")
@beartype
async def update_automation_config(
    product_id: UUID,
    config: AutomationConfig,
    response: Response,
    service: PolicyCatalogService = Depends(get_catalog_service),
    context: RequestContext = Depends(get_current_context),
) -> PolicyProduct | ErrorResponse:
    """Replace a product's automation thresholds."""
    result = await service.update_automation_config(context, product_id, config)
    return handle_result(result, response)


@router.delete("/{product_id}")
@beartype
async def delete_product(
    product_id: UUID,
    response: Response,
    service: PolicyCatalogService = Depends(get_catalog_service),
    context: RequestContext = Depends(get_current_context),
) -> bool | ErrorResponse:
    """Delete a product no active policy references."""
    return handle_result(await service.delete_product(context, product_id), response)
