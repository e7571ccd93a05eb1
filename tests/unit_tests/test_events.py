"""Unit tests for domain events, the outbox and notification dispatch."""

from unittest.mock import AsyncMock

import pytest

from medride_api.transport.enums import DomainEventType
from medride_api.transport.enums import NotificationSeverity
from medride_api.transport.events import DomainEvent
from medride_api.transport.events import EventOutbox
from medride_api.transport.events import NotificationDispatcher
from medride_api.transport.events import to_notification


class TestEventOutbox:
    """Tests for EventOutbox."""

    def test_drain_returns_events_in_order_and_empties(self):
        outbox = EventOutbox()
        outbox.append(DomainEvent(event_type=DomainEventType.REQUEST_CREATED, request_id="req_1"))
        outbox.append(DomainEvent(event_type=DomainEventType.REQUEST_ACCEPTED, request_id="req_1"))

        events = outbox.drain()

        assert [e.event_type for e in events] == [DomainEventType.REQUEST_CREATED, DomainEventType.REQUEST_ACCEPTED]
        assert len(outbox) == 0
        assert outbox.drain() == []


class TestToNotification:
    """Tests for rendering events as notifications."""

    def test_reward_notification(self):
        event = DomainEvent(
            event_type=DomainEventType.REWARD_EARNED,
            payload={"points": 18, "description": "Completed ride to Mbagathi (8 km)"},
        )

        notification = to_notification(event)

        assert notification.title == "Points Earned!"
        assert notification.message == "You earned 18 points: Completed ride to Mbagathi (8 km)"
        assert notification.severity == NotificationSeverity.SUCCESS
        assert notification.read is False

    def test_transition_failed_is_an_error(self):
        event = DomainEvent(
            event_type=DomainEventType.TRANSITION_FAILED,
            request_id="req_1",
            payload={"action": "complete", "reason": "not in progress"},
        )

        notification = to_notification(event)

        assert notification.severity == NotificationSeverity.ERROR
        assert notification.message == "Cannot complete request req_1: not in progress"
        assert notification.related_request_id == "req_1"
        assert notification.event_type == DomainEventType.TRANSITION_FAILED

    def test_missing_payload_field_falls_back(self):
        notification = to_notification(DomainEvent(event_type=DomainEventType.REQUEST_ACCEPTED, request_id="req_9"))

        assert notification.title == "Ride Accepted"
        assert "req_9" in notification.message

    def test_every_event_type_has_a_template(self):
        for event_type in DomainEventType:
            assert to_notification(DomainEvent(event_type=event_type)).title


class TestNotificationDispatcher:
    """Tests for NotificationDispatcher.flush."""

    @pytest.mark.asyncio
    async def test_flush_sends_one_notification_per_event(self, outbox, notification_sink):
        dispatcher = NotificationDispatcher(outbox, notification_sink)
        outbox.append(DomainEvent(event_type=DomainEventType.REQUEST_CANCELLED, request_id="req_1"))
        outbox.append(DomainEvent(event_type=DomainEventType.REQUEST_STARTED, request_id="req_2"))

        delivered = await dispatcher.flush()

        assert len(delivered) == 2
        assert len(await notification_sink.list()) == 2
        assert await dispatcher.flush() == []

    @pytest.mark.asyncio
    async def test_sink_failure_does_not_stop_later_events(self, outbox):
        sink = AsyncMock()
        sink.send = AsyncMock(side_effect=[RuntimeError("sink down"), None])
        dispatcher = NotificationDispatcher(outbox, sink)
        outbox.append(DomainEvent(event_type=DomainEventType.REQUEST_CANCELLED, request_id="req_1"))
        outbox.append(DomainEvent(event_type=DomainEventType.REQUEST_STARTED, request_id="req_2"))

        delivered = await dispatcher.flush()

        assert [n.related_request_id for n in delivered] == ["req_2"]
        assert sink.send.await_count == 2
        assert len(outbox) == 0
