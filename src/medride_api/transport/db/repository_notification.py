"""
Notification Repository

NotificationSink backed by medride.notifications (append-only apart from the read flag).
"""

from typing import Optional

import asyncpg

from medride_api.transport.db.repository_base import DB_SCHEMA
from medride_api.transport.models.notification import Notification


class NotificationRepository:
    """Notification repository."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool
        self.table = f"{DB_SCHEMA}.notifications"

    async def send(self, notification: Notification) -> None:
        """Store a new notification."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                INSERT INTO {self.table}
                    (notification_id, title, message, severity, read, created_at,
                     related_request_id, event_type)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                """,
                notification.notification_id,
                notification.title,
                notification.message,
                notification.severity.value,
                notification.read,
                notification.created_at,
                notification.related_request_id,
                notification.event_type.value if notification.event_type else None,
            )

    async def list(self, unread_only: bool = False) -> list[Notification]:
        """Notifications, newest first."""
        query = f"SELECT * FROM {self.table}"
        if unread_only:
            query += " WHERE read = FALSE"
        query += " ORDER BY created_at DESC"

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query)
        return [Notification.model_validate(dict(row)) for row in rows]

    async def mark_read(self, notification_id: str) -> Optional[Notification]:
        """Mark a notification as read; None if it does not exist."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE {self.table}
                SET read = TRUE
                WHERE notification_id = $1
                RETURNING *
                """,
                notification_id,
            )
        return Notification.model_validate(dict(row)) if row else None
