# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Central logging configuration.

``configure_logging`` is idempotent and is called from the API lifespan
and the Celery tasks. Modules keep using ``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
from typing import Final

from beartype import beartype

__all__: Final = ["configure_logging"]

_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_is_configured: bool = False


@beartype
def configure_logging(
    *, level: int | str = logging.INFO, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Configure the root logger exactly once."""
    global _is_configured
    if _is_configured:
        return

    logging.basicConfig(level=level, format=fmt)
    # httpx logs every request at INFO; keep provider polling quiet
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _is_configured = True
