"""Unit tests for the in-memory store adapters."""

from datetime import datetime
from datetime import timedelta
from datetime import timezone

import pydantic
import pytest

from medride_api.transport.enums import PaymentMethod
from medride_api.transport.enums import RequesterRole
from medride_api.transport.enums import RequestStatus
from medride_api.transport.enums import Urgency
from medride_api.transport.models.history import HistoryItem
from medride_api.transport.models.notification import Notification
from medride_api.transport.models.request import Request


def _request(request_id: str, minutes_ago: int = 0) -> Request:
    return Request(
        request_id=request_id,
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        requester_role=RequesterRole.CHV,
        patient_name="Patient",
        pickup="A",
        destination="B",
        distance_km=2,
        urgency=Urgency.LOW,
        payment_method=PaymentMethod.DIRECT,
        estimated_cost=50,
    )


class TestInMemoryRequestStore:
    """Tests for InMemoryRequestStore."""

    @pytest.mark.asyncio
    async def test_create_only_once(self, request_store):
        assert await request_store.put(_request("req_1")) is True
        assert await request_store.put(_request("req_1")) is False

    @pytest.mark.asyncio
    async def test_compare_and_swap(self, request_store):
        request = _request("req_1")
        await request_store.put(request)
        accepted = request.model_copy(update={"status": RequestStatus.ACCEPTED})

        assert await request_store.put(accepted, expected_status=RequestStatus.PENDING) is True
        assert await request_store.put(accepted, expected_status=RequestStatus.PENDING) is False
        assert (await request_store.get("req_1")).status == RequestStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_compare_and_swap_on_missing_record(self, request_store):
        assert await request_store.put(_request("req_x"), expected_status=RequestStatus.PENDING) is False
        assert await request_store.get("req_x") is None

    @pytest.mark.asyncio
    async def test_list_newest_first_with_filter(self, request_store):
        await request_store.put(_request("req_old", minutes_ago=10))
        await request_store.put(_request("req_new"))
        cancelled = (await request_store.get("req_old")).model_copy(update={"status": RequestStatus.CANCELLED})
        await request_store.put(cancelled, expected_status=RequestStatus.PENDING)

        assert [r.request_id for r in await request_store.list()] == ["req_new", "req_old"]
        assert [r.request_id for r in await request_store.list(RequestStatus.PENDING)] == ["req_new"]

    @pytest.mark.asyncio
    async def test_list_same_timestamp_latest_insert_first(self, request_store):
        first = _request("req_first")
        second = _request("req_second").model_copy(update={"created_at": first.created_at})
        await request_store.put(first)
        await request_store.put(second)

        assert [r.request_id for r in await request_store.list()] == ["req_second", "req_first"]

    @pytest.mark.asyncio
    async def test_stored_request_cannot_be_modified_in_place(self, request_store):
        await request_store.put(_request("req_1"))
        stored = await request_store.get("req_1")

        with pytest.raises(pydantic.ValidationError):
            stored.status = RequestStatus.COMPLETED
        with pytest.raises(pydantic.ValidationError):
            stored.estimated_cost = 0

        reloaded = await request_store.get("req_1")
        assert reloaded.status == RequestStatus.PENDING
        assert reloaded.estimated_cost == 50


class TestInMemoryHistoryStore:
    """Tests for InMemoryHistoryStore."""

    @pytest.mark.asyncio
    async def test_append_and_lookup(self, history_store):
        item = HistoryItem(
            history_id="hist_1",
            request_id="req_1",
            completed_at=datetime.now(timezone.utc),
            patient_name="Patient",
            distance_km=8,
            cost=220,
        )
        await history_store.append(item)

        assert await history_store.list() == [item]
        assert await history_store.get_by_request("req_1") == item
        assert await history_store.get_by_request("req_2") is None

    @pytest.mark.asyncio
    async def test_list_by_rider(self, history_store):
        for i, rider_id in enumerate(["rider-1", "rider-2", "rider-1"]):
            await history_store.append(
                HistoryItem(
                    history_id=f"hist_{i}",
                    request_id=f"req_{i}",
                    completed_at=datetime.now(timezone.utc),
                    patient_name="Patient",
                    distance_km=4,
                    cost=100,
                    rider_id=rider_id,
                )
            )

        assert [i.history_id for i in await history_store.list(rider_id="rider-1")] == ["hist_2", "hist_0"]
        assert len(await history_store.list()) == 3

    def test_history_items_are_frozen(self):
        item = HistoryItem(
            history_id="hist_1",
            request_id="req_1",
            completed_at=datetime.now(timezone.utc),
            patient_name="Patient",
            distance_km=8,
            cost=220,
        )
        with pytest.raises(Exception):
            item.cost = 0


class TestInMemoryNotificationSink:
    """Tests for InMemoryNotificationSink."""

    @pytest.mark.asyncio
    async def test_mark_read(self, notification_sink):
        notification = Notification(
            notification_id="ntf_1",
            title="Ride Accepted",
            message="Rider accepted",
            created_at=datetime.now(timezone.utc),
        )
        await notification_sink.send(notification)

        marked = await notification_sink.mark_read("ntf_1")

        assert marked.read is True
        assert await notification_sink.list(unread_only=True) == []
        assert await notification_sink.mark_read("ntf_missing") is None
