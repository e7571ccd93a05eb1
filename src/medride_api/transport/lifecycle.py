"""
Request Lifecycle

Guarded state machine for transport requests:

    pending -> accepted -> in_progress -> completed
    pending -> rejected
    pending -> cancelled

Every write goes through the RequestStore as a compare-and-swap on status,
and transitions on the same request id are serialized by a per-id lock.
Each call, successful or not, appends exactly one DomainEvent to the outbox.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from datetime import timezone
from typing import Awaitable
from typing import Callable
from typing import Optional
from uuid import uuid4

from loguru import logger

from medride_api.errors import InvalidStateTransition
from medride_api.errors import NotFoundError
from medride_api.errors import TransportError
from medride_api.errors import ValidationError
from medride_api.transport import pricing
from medride_api.transport.db.repository_base import HistoryStore
from medride_api.transport.db.repository_base import RequestStore
from medride_api.transport.enums import DomainEventType
from medride_api.transport.enums import PaymentMethod
from medride_api.transport.enums import RequesterRole
from medride_api.transport.enums import RequestStatus
from medride_api.transport.enums import TERMINAL_STATUSES
from medride_api.transport.enums import ServiceType
from medride_api.transport.enums import Urgency
from medride_api.transport.events import DomainEvent
from medride_api.transport.events import EventOutbox
from medride_api.transport.models.history import HistoryItem
from medride_api.transport.models.request import Request

__all__ = [
    "TRANSITIONS",
    "KeyedLocks",
    "RequestLifecycle",
]

# action -> (required current status, new status, event emitted on success)
TRANSITIONS: dict[str, tuple[RequestStatus, RequestStatus, DomainEventType]] = {
    "accept": (RequestStatus.PENDING, RequestStatus.ACCEPTED, DomainEventType.REQUEST_ACCEPTED),
    "reject": (RequestStatus.PENDING, RequestStatus.REJECTED, DomainEventType.REQUEST_REJECTED),
    "cancel": (RequestStatus.PENDING, RequestStatus.CANCELLED, DomainEventType.REQUEST_CANCELLED),
    "start": (RequestStatus.ACCEPTED, RequestStatus.IN_PROGRESS, DomainEventType.REQUEST_STARTED),
    "complete": (RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED, DomainEventType.REQUEST_COMPLETED),
}

# Called with the completed request and its history item before completion is final
CompletionHook = Callable[[Request, HistoryItem], Awaitable[None]]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field}: {value!r} (expected one of: {allowed})", field=field) from e


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required", field=field)
    return str(value).strip()


class KeyedLocks:
    """One asyncio.Lock per key, dropped once nobody holds or waits on it."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str):
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class RequestLifecycle:
    """Creates requests and applies guarded transitions to them."""

    def __init__(self, requests: RequestStore, history: HistoryStore, outbox: EventOutbox):
        self.requests = requests
        self.history = history
        self.outbox = outbox
        self.locks = KeyedLocks()

    async def create(
        self,
        requester_role: RequesterRole | str,
        patient_name: str,
        pickup: str,
        destination: str,
        distance_km: float,
        urgency: Urgency | str,
        payment_method: PaymentMethod | str,
        service_type: ServiceType | str = ServiceType.ROUTINE,
        emergency: Optional[bool] = None,
        caregiver_id: Optional[str] = None,
        notes: str = "",
    ) -> Request:
        """
        Create a pending request priced with the tiered formula.

        Raises
        ------
        ValidationError
            For blank contact fields, unknown enum values or an invalid distance
        """
        try:
            role = _parse_enum(RequesterRole, requester_role, "requester_role")
            urgency = _parse_enum(Urgency, urgency, "urgency")
            request = Request(
                request_id=f"req_{uuid4().hex}",
                created_at=utc_now(),
                requester_role=role,
                patient_name=_require_text(patient_name, "patient_name"),
                pickup=_require_text(pickup, "pickup"),
                destination=_require_text(destination, "destination"),
                distance_km=pricing.normalize_distance(distance_km),
                urgency=urgency,
                payment_method=_parse_enum(PaymentMethod, payment_method, "payment_method"),
                estimated_cost=pricing.cost(distance_km),
                status=RequestStatus.PENDING,
                service_type=_parse_enum(ServiceType, service_type, "service_type"),
                emergency=urgency == Urgency.HIGH if emergency is None else emergency,
                caregiver_id=caregiver_id,
                notes=notes or "",
            )
            if not await self.requests.put(request):
                raise ValidationError(f"Duplicate request id: {request.request_id}", request_id=request.request_id)
        except Exception as e:
            self._record_failure("create", None, e)
            raise

        self.outbox.append(
            DomainEvent(
                event_type=DomainEventType.REQUEST_CREATED,
                request_id=request.request_id,
                payload={
                    "patient_name": request.patient_name,
                    "estimated_cost": request.estimated_cost,
                    "urgency": request.urgency.value,
                },
            )
        )
        logger.info(
            "Transport request created",
            request_id=request.request_id,
            distance_km=request.distance_km,
            estimated_cost=request.estimated_cost,
            urgency=request.urgency.value,
        )
        return request

    async def get(self, request_id: str) -> Request:
        request = await self.requests.get(request_id)
        if request is None:
            raise NotFoundError(request_id)
        return request

    async def accept(self, request_id: str, rider_id: str) -> Request:
        """pending -> accepted, assigning the rider."""
        return await self._transition("accept", request_id, rider_id=rider_id)

    async def reject(self, request_id: str, rider_id: str) -> Request:
        """pending -> rejected, recording which rider declined."""
        return await self._transition("reject", request_id, rider_id=rider_id)

    async def cancel(self, request_id: str) -> Request:
        """pending -> cancelled."""
        return await self._transition("cancel", request_id)

    async def start(self, request_id: str) -> Request:
        """accepted -> in_progress."""
        return await self._transition("start", request_id)

    async def complete(
        self,
        request_id: str,
        rating: Optional[int] = None,
        on_completed: Optional[CompletionHook] = None,
    ) -> tuple[Request, HistoryItem]:
        """
        in_progress -> completed, minting the one HistoryItem for the trip.

        The status change, the history write and ``on_completed`` form one
        unit: if either write fails the request is put back in progress, so
        the caller can retry. A retry reuses a history item that was already
        written for the request instead of appending a second one.

        Parameters
        ----------
        request_id : str
            Request to complete
        rating : int, optional
            Trip rating from 1 to 5
        on_completed : callable, optional
            Coroutine called with the completed request and its history item
            before the completion is final (used to credit the rider)

        Returns
        -------
        tuple[Request, HistoryItem]
            The completed request and its history record
        """
        if rating is not None and not 1 <= rating <= 5:
            error = ValidationError(f"Rating must be between 1 and 5, got {rating}", rating=rating)
            self._record_failure("complete", request_id, error)
            raise error

        minted: list[HistoryItem] = []

        async def record_history(request: Request) -> None:
            item = await self.history.get_by_request(request.request_id)
            if item is None:
                item = _history_item(request, rating)
                await self.history.append(item)
            minted.append(item)
            if on_completed is not None:
                await on_completed(request, item)

        request = await self._transition("complete", request_id, after_commit=record_history)
        return request, minted[0]

    async def _transition(
        self,
        action: str,
        request_id: str,
        rider_id: Optional[str] = None,
        after_commit: Optional[Callable[[Request], Awaitable[None]]] = None,
    ) -> Request:
        from_status, to_status, event_type = TRANSITIONS[action]

        try:
            updates = {"status": to_status, "updated_at": utc_now()}
            if action in ("accept", "reject"):
                updates["rider_id"] = _require_text(rider_id, "rider_id")

            async with self.locks.hold(request_id):
                current = await self.get(request_id)
                if current.status != from_status:
                    raise InvalidStateTransition(
                        request_id,
                        current.status.value,
                        to_status.value,
                        closed=current.status in TERMINAL_STATUSES,
                    )

                updated = current.model_copy(update=updates)
                if not await self.requests.put(updated, expected_status=from_status):
                    # Another writer moved the record between our read and our write
                    latest = await self.requests.get(request_id)
                    latest_status = latest.status.value if latest else "missing"
                    raise InvalidStateTransition(request_id, latest_status, to_status.value)

                event = DomainEvent(
                    event_type=event_type,
                    request_id=request_id,
                    payload={
                        "rider_id": updated.rider_id,
                        "from_status": from_status.value,
                        "to_status": to_status.value,
                        "cost": updated.estimated_cost,
                    },
                )
                self.outbox.append(event)

                if after_commit is not None:
                    try:
                        await after_commit(updated)
                    except BaseException:  # includes task cancellation
                        self.outbox.discard(event)
                        await self._roll_back(current, to_status)
                        raise
        except Exception as e:
            self._record_failure(action, request_id, e)
            raise

        logger.info(
            f"Request {action} applied",
            request_id=request_id,
            from_status=from_status.value,
            to_status=to_status.value,
            rider_id=updated.rider_id,
        )
        return updated

    async def _roll_back(self, previous: Request, committed_status: RequestStatus) -> None:
        """Restore ``previous`` over a committed transition whose follow-up writes failed."""
        try:
            restored = await self.requests.put(previous, expected_status=committed_status)
        except Exception as e:
            logger.opt(exception=e).bind(request_id=previous.request_id).error(
                "Failed to roll back request after a failed transition"
            )
            return

        if restored:
            logger.warning(
                "Request rolled back",
                request_id=previous.request_id,
                status=previous.status.value,
            )
        else:
            logger.error(
                "Request changed before it could be rolled back",
                request_id=previous.request_id,
                expected_status=committed_status.value,
            )

    def _record_failure(self, action: str, request_id: Optional[str], error: Exception) -> None:
        error_type = type(error).__name__
        reason = error.message if isinstance(error, TransportError) else f"{error_type}: {error}"
        self.outbox.append(
            DomainEvent(
                event_type=DomainEventType.TRANSITION_FAILED,
                request_id=request_id,
                payload={
                    "action": action,
                    "reason": reason,
                    "error_type": error_type,
                },
            )
        )
        logger.bind(request_id=request_id, action=action, error_type=error_type).warning(
            f"Request {action} rejected: {reason}"
        )


def _history_item(request: Request, rating: Optional[int]) -> HistoryItem:
    return HistoryItem(
        history_id=f"hist_{uuid4().hex}",
        request_id=request.request_id,
        completed_at=request.updated_at or utc_now(),
        patient_name=request.patient_name,
        distance_km=request.distance_km,
        cost=request.estimated_cost,
        rider_id=request.rider_id,
        pickup=request.pickup,
        destination=request.destination,
        rating=rating,
    )
