# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""API response patterns following Result[T, E] + HTTP semantics."""

from typing import Any, TypeVar

from beartype import beartype
from fastapi import Response
from pydantic import Field

from ..core.errors import AutomationError
from ..core.result_types import Result
from ..models.base import BaseModelConfig

T = TypeVar("T")


@beartype
class ErrorResponse(BaseModelConfig):
    """Standardized error response for business logic failures."""

    success: bool = Field(default=False, description="Always false for error responses")
    error: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(default=None, description="Machine-readable error code")
    details: dict[str, Any] | None = Field(
        default=None, description="Additional error context"
    )

    @classmethod
    def from_error(cls, error: AutomationError) -> "ErrorResponse":
        return cls(error=error.message, error_code=error.code, details=error.details)


@beartype
def handle_result(
    result: Result[T, AutomationError],
    response: Response,
    success_status: int = 200,
) -> T | ErrorResponse:
    """Convert a service Result to the response body and status code.

    Errors carry their own HTTP status, so no message sniffing is needed.
    """
    if result.is_err():
        error = result.unwrap_err()
        response.status_code = error.status_code
        return ErrorResponse.from_error(error)

    response.status_code = success_status
    return result.unwrap()


__all__ = ["ErrorResponse", "handle_result"]
