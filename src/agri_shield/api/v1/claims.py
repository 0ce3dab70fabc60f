# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Claim listing and reviewer transitions."""

from uuid import UUID

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response

from ...models.claim import (
    Claim,
    ClaimFilter,
    ClaimStatus,
    ClaimTransitionRequest,
    TransitionDetails,
)
from ...models.context import RequestContext
from ...services.claim_lifecycle import ClaimLifecycleService
from ..dependencies import (
    PaginationParams,
    get_current_context,
    get_lifecycle_service,
)
from ..response_patterns import ErrorResponse, handle_result

router = APIRouter()


@router.get("")
@beartype
async def list_claims(
    response: Response,
    user_policy_id: UUID | None = Query(default=None),
    claim_status: ClaimStatus | None = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    service: ClaimLifecycleService = Depends(get_lifecycle_service),
    context: RequestContext = Depends(get_current_context),
) -> list[Claim] | ErrorResponse:
    """List claims, most recently triggered first."""
    result = await service.list_claims(
        ClaimFilter(user_policy_id=user_policy_id, status=claim_status),
        limit=pagination.limit,
        offset=pagination.skip,
    )
    return handle_result(result, response)


@router.get("/{claim_id}")
@beartype
async def get_claim(
    claim_id: UUID,
    response: Response,
    service: ClaimLifecycleService = Depends(get_lifecycle_service),
    context: RequestContext = Depends(get_current_context),
) -> Claim | ErrorResponse:
    """Get a single claim."""
    return handle_result(await service.get_claim(claim_id), response)


@router.post("/{claim_id}/transition")
@beartype
async def transition_claim(
    claim_id: UUID,
    request: ClaimTransitionRequest,
    response: Response,
    service: ClaimLifecycleService = Depends(get_lifecycle_service),
    context: RequestContext = Depends(get_current_context),
) -> Claim | ErrorResponse:
    """Approve, reject or pay a claim.

    Invalid transitions and lost races answer 409; a missing rejection
    reason answers 400.
    """
    result = await service.transition(
        claim_id,
        request.new_status,
        context,
        TransitionDetails(
            rejection_reason=request.rejection_reason,
            payout_reference_id=request.payout_reference_id,
        ),
    )
    return handle_result(result, response)
