"""
History Repository

Repository for completed-trip history (append-only table).
"""

from typing import Optional

import asyncpg

from medride_api.transport.db.repository_base import DB_SCHEMA
from medride_api.transport.models.history import HistoryItem


class HistoryRepository:
    """History repository (append-only)."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool
        self.table = f"{DB_SCHEMA}.history"

    async def append(self, item: HistoryItem) -> None:
        """Insert a history item."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                INSERT INTO {self.table}
                    (history_id, request_id, completed_at, patient_name, distance_km, cost,
                     status, rider_id, pickup, destination, rating)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                """,
                item.history_id,
                item.request_id,
                item.completed_at,
                item.patient_name,
                item.distance_km,
                item.cost,
                item.status,
                item.rider_id,
                item.pickup,
                item.destination,
                item.rating,
            )

    async def list(self, rider_id: Optional[str] = None) -> list[HistoryItem]:
        """Completed trips, newest first, optionally only one rider's."""
        async with self.pool.acquire() as conn:
            if rider_id is None:
                rows = await conn.fetch(f"SELECT * FROM {self.table} ORDER BY completed_at DESC")
            else:
                rows = await conn.fetch(
                    f"SELECT * FROM {self.table} WHERE rider_id = $1 ORDER BY completed_at DESC",
                    rider_id,
                )
        return [HistoryItem.model_validate(dict(row)) for row in rows]

    async def get_by_request(self, request_id: str) -> Optional[HistoryItem]:
        """History item minted for a request, or None."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(f"SELECT * FROM {self.table} WHERE request_id = $1", request_id)
        return HistoryItem.model_validate(dict(row)) if row else None
