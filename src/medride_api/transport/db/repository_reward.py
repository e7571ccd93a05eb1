"""
Reward Repository

Repository for the reward ledger (append-only table).
"""

import json
from typing import Optional

import asyncpg

from medride_api.transport.db.repository_base import DB_SCHEMA
from medride_api.transport.enums import RewardType
from medride_api.transport.models.reward import RewardEvent


def _to_event(row) -> RewardEvent:
    data = dict(row)
    # asyncpg returns JSONB as text unless a codec is registered
    if isinstance(data.get("meta"), str):
        data["meta"] = json.loads(data["meta"])
    return RewardEvent.model_validate(data)


class RewardRepository:
    """Reward ledger repository (append-only)."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool
        self.table = f"{DB_SCHEMA}.reward_events"

    async def append(self, event: RewardEvent) -> None:
        """Insert a ledger entry."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                INSERT INTO {self.table}
                    (reward_id, actor_id, reward_type, points, meta, timestamp, description)
                VALUES ($1, $2, $3, $4, $5::jsonb, $6, $7)
                """,
                event.reward_id,
                event.actor_id,
                event.reward_type.value,
                event.points,
                json.dumps(event.meta, default=str),
                event.timestamp,
                event.description,
            )

    async def list(self, actor_id: str, reward_type: Optional[RewardType] = None) -> list[RewardEvent]:
        """Ledger entries for an actor, newest first."""
        async with self.pool.acquire() as conn:
            if reward_type is None:
                rows = await conn.fetch(
                    f"SELECT * FROM {self.table} WHERE actor_id = $1 ORDER BY timestamp DESC",
                    actor_id,
                )
            else:
                rows = await conn.fetch(
                    f"SELECT * FROM {self.table} WHERE actor_id = $1 AND reward_type = $2 ORDER BY timestamp DESC",
                    actor_id,
                    reward_type.value,
                )
        return [_to_event(row) for row in rows]

    async def total_points(self, actor_id: str, reward_type: Optional[RewardType] = None) -> int:
        """Sum of points for an actor, optionally for one reward type."""
        async with self.pool.acquire() as conn:
            if reward_type is None:
                total = await conn.fetchval(
                    f"SELECT COALESCE(SUM(points), 0) FROM {self.table} WHERE actor_id = $1",
                    actor_id,
                )
            else:
                total = await conn.fetchval(
                    f"SELECT COALESCE(SUM(points), 0) FROM {self.table} WHERE actor_id = $1 AND reward_type = $2",
                    actor_id,
                    reward_type.value,
                )
        return int(total)
