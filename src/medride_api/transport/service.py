"""
Transport Service

Facade over pricing, the request lifecycle and the reward engine. Every
operation flushes the event outbox exactly once when it finishes, so each
call produces its notifications whether it succeeded or failed.
"""

from contextlib import asynccontextmanager
from typing import Any
from typing import Optional

import asyncpg
from loguru import logger

from medride_api.errors import NotFoundError
from medride_api.transport import pricing
from medride_api.transport import scoring
from medride_api.transport.db.memory import InMemoryHistoryStore
from medride_api.transport.db.memory import InMemoryNotificationSink
from medride_api.transport.db.memory import InMemoryRequestStore
from medride_api.transport.db.memory import InMemoryRewardStore
from medride_api.transport.db.repository_base import HistoryStore
from medride_api.transport.db.repository_base import RequestStore
from medride_api.transport.db.repository_base import RewardStore
from medride_api.transport.db.repository_history import HistoryRepository
from medride_api.transport.db.repository_notification import NotificationRepository
from medride_api.transport.db.repository_request import RequestRepository
from medride_api.transport.db.repository_reward import RewardRepository
from medride_api.transport.enums import ParticipantRole
from medride_api.transport.enums import RequestStatus
from medride_api.transport.enums import RewardType
from medride_api.transport.events import EventOutbox
from medride_api.transport.events import NotificationDispatcher
from medride_api.transport.events import NotificationSink
from medride_api.transport.lifecycle import RequestLifecycle
from medride_api.transport.models.history import HistoryItem
from medride_api.transport.models.notification import Notification
from medride_api.transport.models.request import PriceEstimate
from medride_api.transport.models.request import Request
from medride_api.transport.models.reward import RewardEvent
from medride_api.transport.models.reward import RewardSummary
from medride_api.transport.rewards import RewardEngine

__all__ = ["TransportService"]


class TransportService:
    """
    Entry point for every transport operation.

    Parameters
    ----------
    requests : RequestStore
        Where transport requests live
    history : HistoryStore
        Append-only completed-trip history
    rewards : RewardStore
        Append-only reward ledger
    notifications : NotificationSink
        Receives one notification per domain event
    default_actor_id : str
        Actor credited when a reward names none
    recent_rewards_limit : int
        Number of recent ledger entries in a reward summary
    """

    def __init__(
        self,
        requests: RequestStore,
        history: HistoryStore,
        rewards: RewardStore,
        notifications: NotificationSink,
        default_actor_id: str = "anonymous",
        recent_rewards_limit: int = 5,
    ):
        self.outbox = EventOutbox()
        self.history = history
        self.notifications = notifications
        self.lifecycle = RequestLifecycle(requests, history, self.outbox)
        self.rewards = RewardEngine(rewards, self.outbox)
        self.dispatcher = NotificationDispatcher(self.outbox, notifications)
        self.default_actor_id = default_actor_id
        self.recent_rewards_limit = recent_rewards_limit

    @classmethod
    def in_memory(cls, **kwargs) -> "TransportService":
        """Service backed by process-local stores."""
        return cls(
            requests=InMemoryRequestStore(),
            history=InMemoryHistoryStore(),
            rewards=InMemoryRewardStore(),
            notifications=InMemoryNotificationSink(),
            **kwargs,
        )

    @classmethod
    def from_pool(cls, pool: asyncpg.Pool, **kwargs) -> "TransportService":
        """Service backed by the PostgreSQL repositories."""
        return cls(
            requests=RequestRepository(pool),
            history=HistoryRepository(pool),
            rewards=RewardRepository(pool),
            notifications=NotificationRepository(pool),
            **kwargs,
        )

    @asynccontextmanager
    async def _operation(self, name: str, **context):
        """Run one facade operation and flush its events when it ends."""
        with logger.contextualize(operation=name, **context):
            try:
                yield
            finally:
                await self.dispatcher.flush()

    # ════════════════════════════════════════════════════════════════════════
    # Pricing
    # ════════════════════════════════════════════════════════════════════════

    def estimate(self, distance_km: float) -> PriceEstimate:
        return pricing.estimate(distance_km)

    # ════════════════════════════════════════════════════════════════════════
    # Requests
    # ════════════════════════════════════════════════════════════════════════

    async def create_request(self, **fields: Any) -> Request:
        """Create a pending request; see RequestLifecycle.create for the fields."""
        async with self._operation("create_request"):
            return await self.lifecycle.create(**fields)

    async def list_requests(self, status: Optional[RequestStatus] = None) -> list[Request]:
        return await self.lifecycle.requests.list(status)

    async def get_request(self, request_id: str) -> Request:
        return await self.lifecycle.get(request_id)

    async def accept_request(self, request_id: str, rider_id: str) -> Request:
        async with self._operation("accept_request", request_id=request_id):
            return await self.lifecycle.accept(request_id, rider_id)

    async def reject_request(self, request_id: str, rider_id: str) -> Request:
        async with self._operation("reject_request", request_id=request_id):
            return await self.lifecycle.reject(request_id, rider_id)

    async def start_request(self, request_id: str) -> Request:
        async with self._operation("start_request", request_id=request_id):
            return await self.lifecycle.start(request_id)

    async def cancel_request(self, request_id: str) -> Request:
        async with self._operation("cancel_request", request_id=request_id):
            return await self.lifecycle.cancel(request_id)

    async def complete_request(
        self, request_id: str, rating: Optional[int] = None
    ) -> tuple[Request, HistoryItem, RewardEvent]:
        """
        Complete a trip: record its history and credit the rider.

        The rider is credited inside the completion, so a failed ledger write
        leaves the request in progress and the call can be retried.

        Returns
        -------
        tuple[Request, HistoryItem, RewardEvent]
            Completed request, its history record and the ride_completed reward
        """
        async with self._operation("complete_request", request_id=request_id):
            credited: list[RewardEvent] = []

            async def credit_rider(request: Request, item: HistoryItem) -> None:
                credited.append(
                    await self.rewards.add_reward(
                        RewardType.RIDE_COMPLETED,
                        actor_id=request.rider_id or self.default_actor_id,
                        meta={"distance_km": request.distance_km, "request_id": request.request_id},
                        description=f"Completed ride to {request.destination} ({request.distance_km:g} km)",
                    )
                )

            request, item = await self.lifecycle.complete(request_id, rating=rating, on_completed=credit_rider)
            return request, item, credited[0]

    async def list_history(self, rider_id: Optional[str] = None) -> list[HistoryItem]:
        """Completed trips, newest first, optionally only those of one rider."""
        return await self.history.list(rider_id=rider_id)

    # ════════════════════════════════════════════════════════════════════════
    # Rewards
    # ════════════════════════════════════════════════════════════════════════

    async def add_reward(
        self,
        reward_type: RewardType | str,
        meta: Optional[dict[str, Any]] = None,
        actor_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> RewardEvent:
        actor_id = actor_id or self.default_actor_id
        async with self._operation("add_reward", actor_id=actor_id):
            return await self.rewards.add_reward(reward_type, actor_id=actor_id, meta=meta, description=description)

    async def reward_events(self, actor_id: str, reward_type: Optional[RewardType | str] = None) -> list[RewardEvent]:
        if reward_type is None:
            return await self.rewards.store.list(actor_id)
        return await self.rewards.events_by_type(actor_id, reward_type)

    async def reward_summary(
        self,
        actor_id: str,
        role: ParticipantRole | str = ParticipantRole.COMMUNITY,
        recent_limit: Optional[int] = None,
    ) -> RewardSummary:
        """Total points, derived credit score, loan readiness and recent events for an actor."""
        policy_role = scoring.parse_role(role)
        total = await self.rewards.total_points(actor_id)
        limit = self.recent_rewards_limit if recent_limit is None else recent_limit
        return RewardSummary(
            actor_id=actor_id,
            role=policy_role,
            total_points=total,
            credit_score=scoring.credit_score(policy_role, total),
            loan_readiness=scoring.loan_readiness(policy_role, total),
            recent_events=await self.rewards.recent_events(actor_id, limit),
        )

    # ════════════════════════════════════════════════════════════════════════
    # Notifications
    # ════════════════════════════════════════════════════════════════════════

    async def list_notifications(self, unread_only: bool = False) -> list[Notification]:
        return await self.notifications.list(unread_only=unread_only)

    async def mark_notification_read(self, notification_id: str) -> Notification:
        notification = await self.notifications.mark_read(notification_id)
        if notification is None:
            raise NotFoundError(notification_id, entity="Notification")
        return notification
