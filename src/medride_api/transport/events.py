"""
Domain Events and Notifications

The lifecycle and the reward engine never notify anyone directly. They append
DomainEvents to an EventOutbox; the NotificationDispatcher drains the outbox,
turns each event into a Notification and hands it to the NotificationSink.
"""

from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Optional
from typing import Protocol
from uuid import uuid4

from loguru import logger
from pydantic import BaseModel
from pydantic import Field

from medride_api.transport.enums import DomainEventType
from medride_api.transport.enums import NotificationSeverity
from medride_api.transport.models.notification import Notification

__all__ = [
    "DomainEvent",
    "EventOutbox",
    "NotificationSink",
    "NotificationDispatcher",
    "to_notification",
]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DomainEvent(BaseModel):
    """Something that happened to a request or an actor's reward ledger."""

    event_type: DomainEventType
    request_id: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=utc_now)


class EventOutbox:
    """Ordered buffer of events waiting to be dispatched."""

    def __init__(self):
        self._events: list[DomainEvent] = []

    def append(self, event: DomainEvent) -> None:
        self._events.append(event)

    def discard(self, event: DomainEvent) -> None:
        """Withdraw an event whose state change was rolled back before dispatch."""
        self._events = [e for e in self._events if e is not event]

    def drain(self) -> list[DomainEvent]:
        """Remove and return every buffered event, oldest first."""
        events, self._events = self._events, []
        return events

    def __len__(self) -> int:
        return len(self._events)


class NotificationSink(Protocol):
    """Destination for user-facing notifications."""

    async def send(self, notification: Notification) -> None: ...

    async def list(self, unread_only: bool = False) -> list[Notification]: ...

    async def mark_read(self, notification_id: str) -> Optional[Notification]: ...


# event type -> (title, severity, message template)
# Templates are formatted with the event payload plus request_id.
NOTIFICATION_TEMPLATES: dict[DomainEventType, tuple[str, NotificationSeverity, str]] = {
    DomainEventType.REQUEST_CREATED: (
        "Transport Request Submitted",
        NotificationSeverity.SUCCESS,
        "Transport for {patient_name} requested, estimated cost {estimated_cost:.2f}",
    ),
    DomainEventType.REQUEST_ACCEPTED: (
        "Ride Accepted",
        NotificationSeverity.SUCCESS,
        "Rider {rider_id} accepted request {request_id}",
    ),
    DomainEventType.REQUEST_REJECTED: (
        "Ride Rejected",
        NotificationSeverity.INFO,
        "Rider {rider_id} rejected request {request_id}",
    ),
    DomainEventType.REQUEST_STARTED: (
        "Ride Started",
        NotificationSeverity.INFO,
        "Trip for request {request_id} is under way",
    ),
    DomainEventType.REQUEST_COMPLETED: (
        "Ride Completed",
        NotificationSeverity.SUCCESS,
        "Trip for request {request_id} completed, cost {cost:.2f}",
    ),
    DomainEventType.REQUEST_CANCELLED: (
        "Request Cancelled",
        NotificationSeverity.WARNING,
        "Request {request_id} was cancelled",
    ),
    DomainEventType.TRANSITION_FAILED: (
        "Action Not Allowed",
        NotificationSeverity.ERROR,
        "Cannot {action} request {request_id}: {reason}",
    ),
    DomainEventType.REWARD_EARNED: (
        "Points Earned!",
        NotificationSeverity.SUCCESS,
        "You earned {points} points: {description}",
    ),
}


def to_notification(event: DomainEvent) -> Notification:
    """Render a domain event as a notification."""
    title, severity, template = NOTIFICATION_TEMPLATES[event.event_type]
    fields = {"request_id": event.request_id or "(new)", **event.payload}
    try:
        message = template.format(**fields)
    except (KeyError, ValueError, TypeError):
        # Payload missing a templated field; fall back to the bare event
        message = f"{event.event_type.value} {event.request_id or ''}".strip()

    return Notification(
        notification_id=f"ntf_{uuid4().hex}",
        title=title,
        message=message,
        severity=severity,
        created_at=event.occurred_at,
        related_request_id=event.request_id,
        event_type=event.event_type,
    )


class NotificationDispatcher:
    """Delivers the outbox to a NotificationSink."""

    def __init__(self, outbox: EventOutbox, sink: NotificationSink):
        self.outbox = outbox
        self.sink = sink

    async def flush(self) -> list[Notification]:
        """
        Drain the outbox and send one notification per event.

        A sink failure is logged and does not stop the remaining events;
        the state change behind each event has already been committed.

        Returns
        -------
        list[Notification]
            Notifications that were delivered, in event order
        """
        delivered = []
        for event in self.outbox.drain():
            notification = to_notification(event)
            try:
                await self.sink.send(notification)
            except Exception as e:
                logger.opt(exception=e).error(
                    "Failed to deliver notification",
                    event_type=event.event_type.value,
                    request_id=event.request_id,
                    error=str(e),
                )
                continue
            delivered.append(notification)
            logger.debug(
                "Notification dispatched",
                event_type=event.event_type.value,
                request_id=event.request_id,
                notification_id=notification.notification_id,
            )
        return delivered
