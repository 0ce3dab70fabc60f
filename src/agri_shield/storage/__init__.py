# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Persistence layer for the automation core.

``build_store`` picks the backend from ``Settings.storage_backend``; the API
and the Celery tasks share one store per process through ``get_store``.
"""

from beartype import beartype

from ..core.config import Settings, get_settings
from ..core.database import Database
from .base import AutomationStore
from .memory import InMemoryAutomationStore
from .postgres import PostgresAutomationStore

_store: AutomationStore | None = None


@beartype
def build_store(settings: Settings) -> AutomationStore:
    """Create a new store for the configured backend."""
    if settings.storage_backend == "memory":
        return InMemoryAutomationStore()
    return PostgresAutomationStore(Database(settings))


@beartype
def get_store() -> AutomationStore:
    """Get the process-wide store instance."""
    global _store
    if _store is None:
        _store = build_store(get_settings())
    return _store


@beartype
def set_store(store: AutomationStore | None) -> None:
    """Replace the process-wide store (used by tests and app startup)."""
    global _store
    _store = store


__all__ = [
    "AutomationStore",
    "InMemoryAutomationStore",
    "PostgresAutomationStore",
    "build_store",
    "get_store",
    "set_store",
]
