"""Database migrations for the transport schema.

This module handles schema initialization by executing the schema.sql file.
All DDL is stored in schema.sql for maintainability.
"""

from pathlib import Path

import asyncpg
from loguru import logger

from medride_api.transport.db.repository_base import DB_SCHEMA


async def run_migrations(pool: asyncpg.Pool) -> None:
    """Run database migrations to create schema and tables.

    All SQL uses IF NOT EXISTS, so it's safe to run multiple times.

    Parameters
    ----------
    pool : asyncpg.Pool
        Database connection pool

    Raises
    ------
    FileNotFoundError
        If schema.sql file not found
    """
    schema_path = Path(__file__).parent / "schema.sql"

    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    schema_sql = schema_path.read_text(encoding="utf-8")
    logger.info(f"Loaded schema from {schema_path}")

    async with pool.acquire() as conn:
        try:
            await conn.execute(schema_sql)
            logger.info("Transport database migrations completed successfully")
        except Exception as e:
            logger.error(f"Migration failed: {e}")
            raise


async def list_tables(pool: asyncpg.Pool) -> set[str]:
    """Names of the tables currently present in the transport schema."""
    async with pool.acquire() as conn:
        rows = await conn.fetch(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = $1
            ORDER BY table_name
            """,
            DB_SCHEMA,
        )
    return {row["table_name"] for row in rows}


async def get_table_counts(pool: asyncpg.Pool) -> dict:
    """Get row counts for all tables (useful for debugging).

    Returns
    -------
    dict
        {table_name: row_count, ...}
    """
    counts = {}
    tables = await list_tables(pool)

    async with pool.acquire() as conn:
        for table_name in sorted(tables):
            counts[table_name] = await conn.fetchval(f"SELECT COUNT(*) FROM {DB_SCHEMA}.{table_name}")

    return counts


if __name__ == "__main__":
    """
    Standalone script to run migrations.

    Usage:
        python -m medride_api.transport.db.migrations
    """
    import asyncio
    import sys

    from medride_api.settings import Settings

    async def main() -> int:
        settings = Settings()

        if not settings.domain_db_connection_string:
            logger.error("DOMAIN_DB_CONNECTION_STRING not set")
            return 1

        pool = await asyncpg.create_pool(
            settings.domain_db_connection_string,
            min_size=1,
            max_size=2,
            command_timeout=60,
        )

        try:
            await run_migrations(pool)

            counts = await get_table_counts(pool)
            logger.info("Table row counts:")
            for table, count in counts.items():
                logger.info(f"  - {table}: {count} rows")
        finally:
            await pool.close()

        return 0

    sys.exit(asyncio.run(main()))
