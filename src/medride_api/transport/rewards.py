"""
Reward Engine

Converts qualifying activities into points and keeps a per-actor ledger
whose running total feeds the trust/credit score.
"""

import math
from datetime import datetime
from datetime import timezone
from numbers import Real
from typing import Any
from typing import Callable
from typing import Optional
from uuid import uuid4

from loguru import logger

from medride_api.errors import ValidationError
from medride_api.transport.db.repository_base import RewardStore
from medride_api.transport.enums import DomainEventType
from medride_api.transport.enums import RewardType
from medride_api.transport.events import DomainEvent
from medride_api.transport.events import EventOutbox
from medride_api.transport.models.reward import RewardEvent

__all__ = [
    "RIDE_BASE_POINTS",
    "FIXED_POINTS",
    "RewardEngine",
    "calculate_reward",
]

RIDE_BASE_POINTS = 10
SAVINGS_KSH_PER_POINT = 100
REPAYMENT_KSH_PER_POINT = 200

FIXED_POINTS: dict[RewardType, int] = {
    RewardType.SHA_CONTRIBUTION: 15,
    RewardType.EMERGENCY_REQUEST: 20,
    RewardType.CHV_VISIT: 10,
    RewardType.APPROVAL_ACTION: 5,
    RewardType.ALERT_SUBMIT: 8,
    RewardType.HOUSEHOLD_VISIT: 12,
    RewardType.VACCINATION_GIVEN: 15,
    RewardType.PATIENT_ADDED: 5,
}

DEFAULT_DESCRIPTIONS: dict[RewardType, str] = {
    RewardType.RIDE_COMPLETED: "Ride completed",
    RewardType.SAVINGS_ADDED: "Savings added",
    RewardType.LOAN_REPAYMENT: "Loan repayment",
    RewardType.SHA_CONTRIBUTION: "SHA contribution",
    RewardType.EMERGENCY_REQUEST: "Emergency request",
    RewardType.CHV_VISIT: "CHV visit",
    RewardType.APPROVAL_ACTION: "Approval action",
    RewardType.ALERT_SUBMIT: "Alert submitted",
    RewardType.HOUSEHOLD_VISIT: "Household visit",
    RewardType.VACCINATION_GIVEN: "Vaccination given",
    RewardType.PATIENT_ADDED: "Patient added",
}


def _meta_number(meta: dict[str, Any], *keys: str) -> Optional[float]:
    """
    Read the first present numeric field from meta.

    Returns None if none of the keys is present. Numeric strings are accepted.

    Raises
    ------
    ValidationError
        If the field is present but is not a finite number
    """
    for key in keys:
        value = meta.get(key)
        if value is None:
            continue
        if isinstance(value, bool):
            raise ValidationError(f"{key} must be a number, got {value!r}", field=key)
        if isinstance(value, Real):
            number = float(value)
        else:
            try:
                number = float(value)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"{key} must be a number, got {value!r}", field=key) from e
        if not math.isfinite(number):
            raise ValidationError(f"{key} must be finite, got {value!r}", field=key)
        return number
    return None


def _ride_points(meta: dict[str, Any]) -> int:
    distance = _meta_number(meta, "distance_km", "distanceKm")
    if distance is None:
        return RIDE_BASE_POINTS
    if distance < 0:
        return 0
    return math.floor(RIDE_BASE_POINTS + distance)


def _per_amount(ksh_per_point: int) -> Callable[[dict[str, Any]], int]:
    def calculator(meta: dict[str, Any]) -> int:
        amount = _meta_number(meta, "amount")
        if amount is None or amount < 0:
            return 0
        return math.floor(amount / ksh_per_point)

    return calculator


REWARD_CALCULATORS: dict[RewardType, Callable[[dict[str, Any]], int]] = {
    RewardType.RIDE_COMPLETED: _ride_points,
    RewardType.SAVINGS_ADDED: _per_amount(SAVINGS_KSH_PER_POINT),
    RewardType.LOAN_REPAYMENT: _per_amount(REPAYMENT_KSH_PER_POINT),
    **{reward_type: (lambda meta, points=points: points) for reward_type, points in FIXED_POINTS.items()},
}


def parse_reward_type(reward_type: RewardType | str) -> RewardType:
    try:
        return RewardType(reward_type)
    except ValueError as e:
        raise ValidationError(f"Unknown reward type: {reward_type}", reward_type=str(reward_type)) from e


def calculate_reward(reward_type: RewardType | str, meta: Optional[dict[str, Any]] = None) -> int:
    """
    Points a reward of this type and meta is worth. Never negative.

    Raises
    ------
    ValidationError
        For an unknown reward type or a non-numeric amount/distance
    """
    return REWARD_CALCULATORS[parse_reward_type(reward_type)](meta or {})


class RewardEngine:
    """Per-actor reward ledger on top of a RewardStore."""

    def __init__(self, store: RewardStore, outbox: EventOutbox):
        self.store = store
        self.outbox = outbox

    def calculate_reward(self, reward_type: RewardType | str, meta: Optional[dict[str, Any]] = None) -> int:
        """Preview the points for a reward without recording it."""
        return calculate_reward(reward_type, meta)

    async def add_reward(
        self,
        reward_type: RewardType | str,
        actor_id: str,
        meta: Optional[dict[str, Any]] = None,
        description: Optional[str] = None,
    ) -> RewardEvent:
        """
        Record a reward for an actor.

        Parameters
        ----------
        reward_type : RewardType | str
            Qualifying activity
        actor_id : str
            Participant credited with the points
        meta : dict, optional
            Context such as ``distance_km`` or ``amount``
        description : str, optional
            Human-readable text; defaults to one derived from the type

        Returns
        -------
        RewardEvent
            The ledger entry that was appended
        """
        reward_type = parse_reward_type(reward_type)
        meta = dict(meta or {})
        points = calculate_reward(reward_type, meta)

        event = RewardEvent(
            reward_id=f"reward_{uuid4().hex}",
            actor_id=actor_id,
            reward_type=reward_type,
            points=points,
            meta=meta,
            timestamp=datetime.now(timezone.utc),
            description=description or DEFAULT_DESCRIPTIONS[reward_type],
        )
        await self.store.append(event)

        self.outbox.append(
            DomainEvent(
                event_type=DomainEventType.REWARD_EARNED,
                request_id=meta.get("request_id"),
                payload={
                    "actor_id": actor_id,
                    "reward_type": reward_type.value,
                    "points": points,
                    "description": event.description,
                },
            )
        )

        logger.info(
            "Reward recorded",
            actor_id=actor_id,
            reward_type=reward_type.value,
            points=points,
        )
        return event

    async def total_points(self, actor_id: str) -> int:
        return await self.store.total_points(actor_id)

    async def events_by_type(self, actor_id: str, reward_type: RewardType | str) -> list[RewardEvent]:
        return await self.store.list(actor_id, parse_reward_type(reward_type))

    async def total_points_by_type(self, actor_id: str, reward_type: RewardType | str) -> int:
        return await self.store.total_points(actor_id, parse_reward_type(reward_type))

    async def recent_events(self, actor_id: str, limit: int = 5) -> list[RewardEvent]:
        """Newest ledger entries for an actor."""
        events = await self.store.list(actor_id)
        return events[: max(0, limit)]
