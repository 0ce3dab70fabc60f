# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Celery app driving the scheduled fetch and evaluation passes."""

from celery import Celery

from ..core.config import get_settings

settings = get_settings()

app = Celery(
    "agri_shield",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["agri_shield.tasks.automation"],
)

_schedule_seconds = settings.evaluation_schedule_minutes * 60

app.conf.update(
    task_routes={
        "agri_shield.tasks.fetch_weather": {"queue": "weather"},
        "agri_shield.tasks.run_claim_check": {"queue": "automation"},
    },
    # At most one evaluation pass queued per schedule period
    task_annotations={
        "agri_shield.tasks.run_claim_check": {"rate_limit": "1/m"},
    },
    beat_schedule={
        "fetch-weather": {
            "task": "agri_shield.tasks.fetch_weather",
            "schedule": _schedule_seconds,
        },
        "run-claim-check": {
            "task": "agri_shield.tasks.run_claim_check",
            "schedule": _schedule_seconds,
        },
    },
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Evaluation passes must not overlap
    worker_concurrency=1,
    worker_prefetch_multiplier=1,
    task_time_limit=int(settings.evaluation_timeout_seconds) + 60,
    task_soft_time_limit=int(settings.evaluation_timeout_seconds) + 30,
)

if __name__ == "__main__":
    app.start()
