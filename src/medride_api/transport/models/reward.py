"""
Reward Model

Points ledger entries (append-only).
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from pydantic import Field

from medride_api.transport.enums import ParticipantRole
from medride_api.transport.enums import RewardType


class RewardEvent(BaseModel):
    """One reward ledger entry."""

    reward_id: str
    actor_id: str
    reward_type: RewardType
    points: int = Field(ge=0)
    meta: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
    description: str = ""

    class Config:
        from_attributes = True


class RewardSummary(BaseModel):
    """Running total and derived score for one actor."""

    actor_id: str
    role: ParticipantRole
    total_points: int
    credit_score: int
    loan_readiness: int
    recent_events: list[RewardEvent] = Field(default_factory=list)
