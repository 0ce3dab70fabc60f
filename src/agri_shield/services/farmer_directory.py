# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Farmer directory: registered farmers and their farms."""

import logging

from beartype import beartype

from ..core.errors import AutomationError
from ..core.result_types import Err, Ok, Result
from ..models.farmer import FarmerWithFarms
from ..storage.base import AutomationStore

logger = logging.getLogger(__name__)


class FarmerDirectoryService:
    """Read-only view over farmer accounts for reviewers."""

    def __init__(self, store: AutomationStore) -> None:
        if not store or not hasattr(store, "list_farmers"):
            raise ValueError("Automation store required")
        self._store = store

    @beartype
    async def list_farmers(
        self, search: str | None = None, limit: int = 100, offset: int = 0
    ) -> Result[list[FarmerWithFarms], AutomationError]:
        """Farmers with their farms, newest registration first.

        ``search`` narrows by name, email, farm name or farm location.
        """
        term = search.strip() if search else None
        try:
            farmers = await self._store.list_farmers(
                term or None, limit=limit, offset=offset
            )
        except AutomationError as e:
            logger.error("Farmer listing failed: %s", e.message)
            return Err(e)
        return Ok(farmers)


__all__ = ["FarmerDirectoryService"]
