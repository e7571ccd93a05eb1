"""
Transport Database Connection Pool

Manages the asyncpg connection pool for the transport database.
Automatically runs migrations on initialization.

Schema Evolution:
-----------------
When adding/removing/renaming tables in schema.sql:
1. Update the schema.sql file with new DDL
2. Update DomainDBPool.EXPECTED_TABLES constant with new table names
3. For existing deployments, drop and recreate the schema:
   DROP SCHEMA medride CASCADE;
   (then restart app to auto-create)
"""

from typing import Optional

import asyncpg
from loguru import logger

from medride_api.transport.db.repository_base import DB_SCHEMA


class DomainDBPool:
    """Transport database connection pool manager."""

    # Expected tables in the medride schema
    # Update this set when schema evolves (add/remove/rename tables)
    EXPECTED_TABLES = {
        "requests",
        "history",
        "reward_events",
        "notifications",
    }

    def __init__(self, connection_string: str, min_size: int = 2, max_size: int = 10):
        """
        Initialize transport DB pool.

        Args:
            connection_string: PostgreSQL connection string for the transport database
            min_size: Minimum connections kept open
            max_size: Maximum connections opened
        """
        self.connection_string = connection_string
        self.min_size = min_size
        self.max_size = max_size
        self.pool: Optional[asyncpg.Pool] = None
        self._pool_initialized = False

    async def initialize(self) -> None:
        """
        Initialize connection pool and run migrations.
        """
        if self._pool_initialized and self.pool is not None:
            logger.debug("Transport DB pool already initialized")
            return

        try:
            logger.info("Initializing transport database pool", min_size=self.min_size, max_size=self.max_size)

            self.pool = await asyncpg.create_pool(
                self.connection_string,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=60,  # Query timeout (60 seconds)
                timeout=15,  # Connection timeout (15 seconds)
            )

            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                if result != 1:
                    raise RuntimeError("Pool validation query failed")

            logger.info("Transport DB pool validated")

            await self._run_migrations()

            self._pool_initialized = True
            logger.success("Transport database initialized successfully")

        except Exception as e:
            logger.opt(exception=e).error("Failed to initialize transport DB pool")
            if self.pool:
                await self.pool.close()
                self.pool = None
            raise

    async def _run_migrations(self) -> None:
        """
        Create the schema from schema.sql unless every expected table already exists.

        Raises
        ------
        RuntimeError
            If the schema exists but its tables differ from EXPECTED_TABLES
        """
        from medride_api.transport.db.migrations import list_tables
        from medride_api.transport.db.migrations import run_migrations

        existing_tables = await list_tables(self.pool)

        if existing_tables == self.EXPECTED_TABLES:
            logger.info(f"{DB_SCHEMA} schema and all {len(existing_tables)} expected tables exist")
            return

        if existing_tables:
            missing_tables = self.EXPECTED_TABLES - existing_tables
            extra_tables = existing_tables - self.EXPECTED_TABLES
            if extra_tables:
                logger.error(
                    f"Schema mismatch detected. Missing: {missing_tables or 'None'}, Extra: {extra_tables}. "
                    f"Please review schema.sql and DomainDBPool.EXPECTED_TABLES."
                )
                raise RuntimeError(
                    f"Schema evolution detected: missing {missing_tables}, extra {extra_tables}. "
                    f"Manual migration required."
                )
            logger.warning(f"{DB_SCHEMA} schema is missing {missing_tables} - re-running schema.sql")

        await run_migrations(self.pool)

        existing_tables = await list_tables(self.pool)
        if existing_tables != self.EXPECTED_TABLES:
            raise RuntimeError(
                f"Migration incomplete: expected {sorted(self.EXPECTED_TABLES)}, found {sorted(existing_tables)}"
            )

        logger.success(f"All {len(self.EXPECTED_TABLES)} transport tables verified successfully")

    async def close(self) -> None:
        """Close the connection pool gracefully."""
        if self.pool:
            logger.info("Closing transport database pool")
            await self.pool.close()
            self.pool = None
            self._pool_initialized = False
            logger.info("Transport DB pool closed")

    def acquire(self):
        """
        Acquire a database connection from the pool.

        Usage:
            async with pool.acquire() as conn:
                result = await conn.fetchrow("SELECT * FROM ...")
        """
        if not self.pool:
            raise RuntimeError("Transport DB pool not initialized - call initialize() first")
        return self.pool.acquire()

    async def health_check(self) -> bool:
        """
        Check if database connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        try:
            if not self.pool:
                return False

            async with self.pool.acquire() as conn:
                result = await conn.fetchval("SELECT 1")
                return result == 1
        except Exception as e:
            logger.error(f"Transport DB health check failed: {e}")
            return False
