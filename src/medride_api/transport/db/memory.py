"""
In-Memory Stores

Process-local implementations of the store protocols and of the
NotificationSink. Used for local runs (STORE_BACKEND=memory) and tests.
"""

import asyncio
from typing import Optional

from medride_api.transport.enums import RequestStatus
from medride_api.transport.enums import RewardType
from medride_api.transport.models.history import HistoryItem
from medride_api.transport.models.notification import Notification
from medride_api.transport.models.request import Request
from medride_api.transport.models.reward import RewardEvent


class InMemoryRequestStore:
    """Request store keyed by request id; writes are serialized by one lock."""

    def __init__(self):
        self._records: dict[str, Request] = {}
        self._lock = asyncio.Lock()

    async def get(self, request_id: str) -> Optional[Request]:
        return self._records.get(request_id)

    async def put(self, request: Request, expected_status: Optional[RequestStatus] = None) -> bool:
        async with self._lock:
            current = self._records.get(request.request_id)

            if expected_status is None:
                if current is not None:
                    return False
            elif current is None or current.status != expected_status:
                return False

            self._records[request.request_id] = request
            return True

    async def list(self, status: Optional[RequestStatus] = None) -> list[Request]:
        # Replacing a record keeps its key position, so this is creation order
        records = list(reversed(self._records.values()))
        if status is not None:
            records = [r for r in records if r.status == status]
        return records


class InMemoryHistoryStore:
    """Append-only completed-trip history."""

    def __init__(self):
        self._items: list[HistoryItem] = []

    async def append(self, item: HistoryItem) -> None:
        self._items.append(item)

    async def list(self, rider_id: Optional[str] = None) -> list[HistoryItem]:
        return [i for i in reversed(self._items) if rider_id is None or i.rider_id == rider_id]

    async def get_by_request(self, request_id: str) -> Optional[HistoryItem]:
        for item in self._items:
            if item.request_id == request_id:
                return item
        return None


class InMemoryRewardStore:
    """Append-only reward ledger."""

    def __init__(self):
        self._events: list[RewardEvent] = []

    async def append(self, event: RewardEvent) -> None:
        self._events.append(event)

    async def list(self, actor_id: str, reward_type: Optional[RewardType] = None) -> list[RewardEvent]:
        return [
            e
            for e in reversed(self._events)
            if e.actor_id == actor_id and (reward_type is None or e.reward_type == reward_type)
        ]

    async def total_points(self, actor_id: str, reward_type: Optional[RewardType] = None) -> int:
        return sum(e.points for e in await self.list(actor_id, reward_type))


class InMemoryNotificationSink:
    """Notification sink that keeps everything it receives."""

    def __init__(self):
        self._notifications: dict[str, Notification] = {}

    async def send(self, notification: Notification) -> None:
        self._notifications[notification.notification_id] = notification

    async def list(self, unread_only: bool = False) -> list[Notification]:
        notifications = list(reversed(self._notifications.values()))
        if unread_only:
            notifications = [n for n in notifications if not n.read]
        return notifications

    async def mark_read(self, notification_id: str) -> Optional[Notification]:
        notification = self._notifications.get(notification_id)
        if notification is None:
            return None
        notification = notification.model_copy(update={"read": True})
        self._notifications[notification_id] = notification
        return notification
