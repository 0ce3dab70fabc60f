# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Farmer directory for reviewers."""

from beartype import beartype
from fastapi import APIRouter, Depends, Query, Response

from ...models.context import RequestContext
from ...models.farmer import FarmerWithFarms
from ...services.farmer_directory import FarmerDirectoryService
from ..dependencies import PaginationParams, get_farmer_directory, require_reviewer
from ..response_patterns import ErrorResponse, handle_result

router = APIRouter()


@router.get("")
@beartype
async def list_farmers(
    response: Response,
    search: str | None = Query(default=None, max_length=100),
    pagination: PaginationParams = Depends(),
    service: FarmerDirectoryService = Depends(get_farmer_directory),
    context: RequestContext = Depends(require_reviewer),
) -> list[FarmerWithFarms] | ErrorResponse:
    """List farmers with their farms, newest registration first."""
    result = await service.list_farmers(
        search, limit=pagination.limit, offset=pagination.skip
    )
    return handle_result(result, response)
