# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Purchased policy reads."""

from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response

from ...models.context import RequestContext
from ...models.policy import (
    PaymentStatus,
    PolicyClaimStatus,
    PolicyFilter,
    UserPolicy,
)
from ...services.policy_catalog import PolicyCatalogService
from ..dependencies import PaginationParams, get_catalog_service, get_current_context
from ..response_patterns import ErrorResponse, handle_result

router = APIRouter()


@router.get("")
@beartype
async def list_policies(
    response: Response,
    farm_id: UUID | None = Query(default=None),
    payment_status: PaymentStatus | None = Query(default=None),
    claim_status: PolicyClaimStatus | None = Query(default=None),
    pagination: PaginationParams = Depends(),
    service: PolicyCatalogService = Depends(get_catalog_service),
    context: RequestContext = Depends(get_current_context),
) -> list[UserPolicy] | ErrorResponse:
    """List purchased policies, most recent purchase first.

    Farmers only see their own policies.
    """
    filters = PolicyFilter(
        farm_id=farm_id,
        user_id=None if context.is_reviewer else context.user_id,
        payment_status=payment_status,
        claim_status=claim_status,
    )
    result = await service.list_policies(
        filters, limit=pagination.limit, offset=pagination.skip
    )
    return handle_result(result, response)


@router.get("/{policy_id}")
@beartype
async def get_policy(
    policy_id: UUID,
    response: Response,
    service: PolicyCatalogService = Depends(get_catalog_service),
    context: RequestContext = Depends(get_current_context),
) -> UserPolicy | ErrorResponse:
    """Get a single purchased policy."""
    return handle_result(await service.get_policy(policy_id), response)
