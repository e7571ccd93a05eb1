"""
Score Policy

Derived trust/credit score and loan readiness, computed from accumulated
reward points through one declarative table keyed by participant role.
"""

from pydantic import BaseModel
from pydantic import ConfigDict

from medride_api.errors import ValidationError
from medride_api.transport.enums import ParticipantRole

__all__ = [
    "CREDIT_SCORE_CAP",
    "LOAN_READINESS_CAP",
    "ScorePolicy",
    "ROLE_SCORE_POLICIES",
    "parse_role",
    "get_policy",
    "credit_score",
    "loan_readiness",
]

CREDIT_SCORE_CAP = 850
LOAN_READINESS_CAP = 100


class ScorePolicy(BaseModel):
    """Per-role scoring constants."""

    model_config = ConfigDict(frozen=True)

    base: int
    multiplier: float
    readiness_base: int
    readiness_divisor: int
    cap: int = CREDIT_SCORE_CAP


ROLE_SCORE_POLICIES: dict[ParticipantRole, ScorePolicy] = {
    ParticipantRole.COMMUNITY: ScorePolicy(base=300, multiplier=2.0, readiness_base=40, readiness_divisor=10),
    ParticipantRole.CAREGIVER: ScorePolicy(base=300, multiplier=2.0, readiness_base=40, readiness_divisor=10),
    ParticipantRole.RIDER: ScorePolicy(base=350, multiplier=1.5, readiness_base=60, readiness_divisor=8),
    ParticipantRole.CHV: ScorePolicy(base=400, multiplier=1.6, readiness_base=65, readiness_divisor=7),
    ParticipantRole.HEALTH_WORKER: ScorePolicy(base=450, multiplier=1.8, readiness_base=70, readiness_divisor=6),
}


def parse_role(role: ParticipantRole | str) -> ParticipantRole:
    try:
        return ParticipantRole(role)
    except ValueError as e:
        raise ValidationError(f"Unknown participant role: {role}", role=str(role)) from e


def get_policy(role: ParticipantRole | str) -> ScorePolicy:
    """Look up the score policy for a role, accepting the enum or its value."""
    return ROLE_SCORE_POLICIES[parse_role(role)]


def credit_score(role: ParticipantRole | str, total_points: int) -> int:
    """min(cap, base + points * multiplier), rounded down."""
    policy = get_policy(role)
    points = max(0, total_points)
    return int(min(policy.cap, policy.base + points * policy.multiplier))


def loan_readiness(role: ParticipantRole | str, total_points: int) -> int:
    """Loan readiness percentage: min(100, readiness_base + points / divisor), rounded down."""
    policy = get_policy(role)
    points = max(0, total_points)
    return int(min(LOAN_READINESS_CAP, policy.readiness_base + points / policy.readiness_divisor))
