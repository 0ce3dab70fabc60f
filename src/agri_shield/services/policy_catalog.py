# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Policy catalog: insurer-managed products and their automation config."""

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID, uuid4

from beartype import beartype

from ..core.errors import (
    AutomationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ..core.performance_monitor import performance_monitor
from ..core.result_types import Err, Ok, Result
from ..models.context import RequestContext
from ..models.policy import (
    AutomationConfig,
    PolicyFilter,
    PolicyProduct,
    PolicyProductCreate,
    UserPolicy,
)
from ..storage.base import AutomationStore
from .automation.evaluator import utc_now

logger = logging.getLogger(__name__)


def _require_reviewer(context: RequestContext, action: str) -> None:
    if not context.user_id.strip():
        raise ValidationError("User id is required")
    if not context.is_reviewer:
        raise PermissionDeniedError(
            f"Only insurers and admins can {action}", {"role": context.role.value}
        )


class PolicyCatalogService:
    """Service for product catalog edits and policy reads."""

    def __init__(
        self,
        store: AutomationStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize catalog service with dependency validation."""
        if not store or not hasattr(store, "create_product"):
            raise ValueError("Automation store required")
        self._store = store
        self._clock = clock

    @beartype
    @performance_monitor("create_product")
    async def create_product(
        self, context: RequestContext, data: PolicyProductCreate
    ) -> Result[PolicyProduct, AutomationError]:
        """Add a product to the catalog."""
        try:
            _require_reviewer(context, "create products")
            product = PolicyProduct(
                id=uuid4(),
                created_at=self._clock(),
                **data.model_dump(exclude={"insurer_id"}),
                insurer_id=data.insurer_id or context.user_id,
            )
            created = await self._store.create_product(product)
        except AutomationError as e:
            return Err(e)

        logger.info(
            "Product %s (%s) created by %s", created.id, created.name, context.user_id
        )
        return Ok(created)

    @beartype
    @performance_monitor("update_automation_config")
    async def update_automation_config(
        self, context: RequestContext, product_id: UUID, config: AutomationConfig
    ) -> Result[PolicyProduct, AutomationError]:
        """Replace a product's automation thresholds.

        Allowed while policies reference the product; the next evaluation
        pass uses the new thresholds.
        """
        try:
            _require_reviewer(context, "edit automation settings")
            product = await self._store.get_product(product_id)
            if product is None:
                raise NotFoundError(f"Product {product_id} not found")
            updated = await self._store.update_product(
                product.model_copy(update={"automation_config": config})
            )
            if updated is None:
                raise NotFoundError(f"Product {product_id} not found")
        except AutomationError as e:
            return Err(e)

        logger.info(
            "Automation config of product %s set by %s: %s",
            product_id,
            context.user_id,
            config.model_dump(),
        )
        return Ok(updated)

    @beartype
    async def delete_product(
        self, context: RequestContext, product_id: UUID
    ) -> Result[bool, AutomationError]:
        """Remove a product no active policy references."""
        try:
            _require_reviewer(context, "delete products")
            if await self._store.get_product(product_id) is None:
                raise NotFoundError(f"Product {product_id} not found")
            active = await self._store.count_active_policies_for_product(
                product_id, self._clock().date()
            )
            if active:
                raise ValidationError(
                    "Product is referenced by active policies",
                    {"active_policies": active},
                )
            deleted = await self._store.delete_product(product_id)
        except AutomationError as e:
            return Err(e)

        logger.info("Product %s deleted by %s", product_id, context.user_id)
        return Ok(deleted)

    @beartype
    async def get_product(self, product_id: UUID) -> Result[PolicyProduct, AutomationError]:
        try:
            product = await self._store.get_product(product_id)
        except AutomationError as e:
            return Err(e)
        if product is None:
            return Err(NotFoundError(f"Product {product_id} not found"))
        return Ok(product)

    @beartype
    async def list_products(
        self, crop_type: str | None = None, season: str | None = None
    ) -> Result[list[PolicyProduct], AutomationError]:
        try:
            return Ok(await self._store.list_products(crop_type, season))
        except AutomationError as e:
            return Err(e)

    @beartype
    async def get_policy(self, policy_id: UUID) -> Result[UserPolicy, AutomationError]:
        try:
            policy = await self._store.get_policy(policy_id)
        except AutomationError as e:
            return Err(e)
        if policy is None:
            return Err(NotFoundError(f"Policy {policy_id} not found"))
        return Ok(policy)

    @beartype
    async def list_policies(
        self,
        filters: PolicyFilter | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[list[UserPolicy], AutomationError]:
        """List purchased policies, most recent purchase first."""
        try:
            return Ok(
                await self._store.list_policies(
                    filters or PolicyFilter(), limit=limit, offset=offset
                )
            )
        except AutomationError as e:
            return Err(e)


__all__ = ["PolicyCatalogService"]
