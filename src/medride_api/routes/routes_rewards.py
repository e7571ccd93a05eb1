"""
Reward Routes

REST API endpoints for the reward ledger and the derived credit score.
"""

from typing import Optional

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import status

from medride_api.dependencies import get_transport_service
from medride_api.schemas.schemas_transport import AddRewardBody
from medride_api.schemas.schemas_transport import RewardEventListResponse
from medride_api.schemas.schemas_transport import RewardEventResponse
from medride_api.schemas.schemas_transport import RewardSummaryResponse
from medride_api.transport.enums import ParticipantRole
from medride_api.transport.enums import RewardType
from medride_api.transport.service import TransportService

ROUTER_REWARDS = APIRouter(tags=["Rewards"], prefix="/rewards")


@ROUTER_REWARDS.post(
    "",
    response_model=RewardEventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a reward",
    responses={
        status.HTTP_422_UNPROCESSABLE_CONTENT: {"description": "Unknown reward type or non-numeric amount"},
    },
)
async def add_reward(
    body: AddRewardBody,
    service: TransportService = Depends(get_transport_service),
) -> RewardEventResponse:
    """Record a qualifying activity; points are computed from its type and meta."""
    event = await service.add_reward(
        body.reward_type,
        meta=body.meta,
        actor_id=body.actor_id,
        description=body.description,
    )
    return RewardEventResponse.from_model(event)


@ROUTER_REWARDS.get(
    "/{actor_id}",
    response_model=RewardSummaryResponse,
    summary="Get an actor's points and credit score",
)
async def get_reward_summary(
    actor_id: str,
    role: ParticipantRole = Query(default=ParticipantRole.COMMUNITY, description="Role whose score policy applies"),
    limit: Optional[int] = Query(default=None, ge=0, le=100, description="Number of recent events to include"),
    service: TransportService = Depends(get_transport_service),
) -> RewardSummaryResponse:
    summary = await service.reward_summary(actor_id, role=role, recent_limit=limit)
    return RewardSummaryResponse.from_model(summary)


@ROUTER_REWARDS.get(
    "/{actor_id}/events",
    response_model=RewardEventListResponse,
    summary="List an actor's reward events",
)
async def list_reward_events(
    actor_id: str,
    reward_type: Optional[RewardType] = Query(default=None, description="Only events of this type"),
    service: TransportService = Depends(get_transport_service),
) -> RewardEventListResponse:
    """Ledger entries for an actor, newest first, optionally for one reward type."""
    events = await service.reward_events(actor_id, reward_type)
    return RewardEventListResponse(
        Message=f"Found {len(events)} reward event(s)",
        ActorId=actor_id,
        Count=len(events),
        TotalPoints=sum(e.points for e in events),
        Events=[RewardEventResponse.from_model(e) for e in events],
    )
