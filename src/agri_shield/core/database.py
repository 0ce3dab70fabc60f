# AgriShield - Weather-Triggered Crop Insurance Automation
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.
# SPDX-License-Identifier: AGPL-3.0-or-later
"""Database connection management with asyncpg and connection pooling."""

import contextlib
import json
import logging
import time
from collections.abc import AsyncIterator
from typing import Any

import asyncpg
from attrs import field, frozen
from beartype import beartype

from .config import Settings, get_settings
from .result_types import Err, Ok, Result

logger = logging.getLogger(__name__)


@frozen
class PoolConfig:
    """Immutable pool configuration."""

    min_connections: int = field()
    max_connections: int = field()
    connection_timeout: float = field(default=10.0)
    command_timeout: float = field(default=30.0)
    server_settings: dict[str, str] = field(factory=dict)


class Database:
    """asyncpg pool manager used by the PostgreSQL automation store."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize database manager."""
        self._pool: asyncpg.Pool | None = None
        self._settings = settings or get_settings()
        self._slow_query_ms = 1000.0

    @beartype
    def _get_pool_config(self) -> PoolConfig:
        """Build pool configuration from settings."""
        return PoolConfig(
            min_connections=self._settings.database_pool_min,
            max_connections=self._settings.database_pool_max,
            connection_timeout=self._settings.database_pool_timeout,
            command_timeout=self._settings.database_command_timeout,
            server_settings={
                "jit": "off",
                "application_name": "agri_shield",
            },
        )

    @beartype
    async def _init_connection(self, conn: asyncpg.Connection) -> None:
        """Register JSONB codec on each new connection."""
        await conn.set_type_codec(
            "jsonb",
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )

    @beartype
    async def connect(self) -> None:
        """Create the connection pool."""
        if self._pool is not None:
            return

        config = self._get_pool_config()
        self._pool = await asyncpg.create_pool(
            self._settings.database_url,
            min_size=config.min_connections,
            max_size=config.max_connections,
            command_timeout=config.command_timeout,
            server_settings=config.server_settings,
            init=self._init_connection,
        )
        logger.info(
            "Database pool ready (min=%d, max=%d)",
            config.min_connections,
            config.max_connections,
        )

    @beartype
    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
        self._pool = None

    @contextlib.asynccontextmanager
    async def acquire(
        self, *, timeout: float | None = None
    ) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a pooled connection, logging slow holders."""
        if self._pool is None:
            raise RuntimeError("Database not connected")

        timeout = timeout or self._settings.database_pool_timeout
        start_time = time.perf_counter()
        async with self._pool.acquire(timeout=timeout) as conn:
            yield conn
        duration_ms = (time.perf_counter() - start_time) * 1000
        if duration_ms > self._slow_query_ms:
            logger.warning("Connection held for %.1fms", duration_ms)

    @contextlib.asynccontextmanager
    async def transaction(
        self, *, isolation: str = "read_committed"
    ) -> AsyncIterator[asyncpg.Connection]:
        """Open a transaction; commits on exit, rolls back on exception."""
        async with self.acquire() as conn:
            async with conn.transaction(isolation=isolation):
                yield conn

    @beartype
    async def execute(self, query: str, *args: Any) -> str:
        """Execute a query without returning results."""
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    @beartype
    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Execute a query and fetch all results."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    @beartype
    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """Execute a query and fetch a single row."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    @beartype
    async def fetchval(self, query: str, *args: Any) -> Any:
        """Execute a query and fetch a single value."""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    @beartype
    async def health_check(self) -> Result[bool, str]:
        """Run a trivial query against the pool."""
        try:
            async with self.acquire(timeout=5.0) as conn:
                result = await conn.fetchval("SELECT 1")
            if result != 1:
                return Err("Health check query failed")
            return Ok(True)
        except Exception as e:
            return Err(f"Health check failed: {str(e)}")
