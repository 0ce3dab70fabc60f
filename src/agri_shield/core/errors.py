# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Domain error kinds surfaced by the automation services.

Services raise these internally and hand them back wrapped in ``Err`` so
callers always receive a typed error they can branch on. Each kind carries
the HTTP status the API layer should answer with.
"""

from typing import Any

from beartype import beartype


class AutomationError(Exception):
    """Base class for all automation errors."""

    code: str = "automation_error"
    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize error with a human-readable message and optional context."""
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Convert to API error payload."""
        payload: dict[str, Any] = {"error": self.message, "error_code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AutomationError):
    """A required field is missing or malformed."""

    code = "validation_error"
    status_code = 400


class PermissionDeniedError(AutomationError):
    """The caller's role may not perform the operation."""

    code = "permission_denied"
    status_code = 403


class NotFoundError(AutomationError):
    """A claim, policy, product or farm id does not resolve."""

    code = "not_found"
    status_code = 404


class InvalidTransitionError(AutomationError):
    """The requested claim status change is not a defined transition."""

    code = "invalid_transition"
    status_code = 409


class ConcurrencyConflict(AutomationError):
    """A concurrent writer changed the row first; re-read and retry."""

    code = "concurrency_conflict"
    status_code = 409


class IngestionError(AutomationError):
    """A weather batch could not be persisted; nothing from it was stored."""

    code = "ingestion_error"
    status_code = 502


class UpstreamUnavailable(AutomationError):
    """The data store or weather provider could not be reached."""

    code = "upstream_unavailable"
    status_code = 503


__all__ = [
    "AutomationError",
    "ConcurrencyConflict",
    "IngestionError",
    "InvalidTransitionError",
    "NotFoundError",
    "PermissionDeniedError",
    "UpstreamUnavailable",
    "ValidationError",
]
