"""
Transport Request Routes

REST API endpoints for the transport request lifecycle and completed-trip history.
"""

from typing import Optional

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import Query
from fastapi import status
from loguru import logger

from medride_api.dependencies import get_transport_service
from medride_api.schemas.schemas_transport import CompleteRequestBody
from medride_api.schemas.schemas_transport import CompleteRequestResponse
from medride_api.schemas.schemas_transport import CreateTransportRequestBody
from medride_api.schemas.schemas_transport import HistoryItemResponse
from medride_api.schemas.schemas_transport import HistoryListResponse
from medride_api.schemas.schemas_transport import RewardEventResponse
from medride_api.schemas.schemas_transport import RiderActionBody
from medride_api.schemas.schemas_transport import TransportRequestListResponse
from medride_api.schemas.schemas_transport import TransportRequestResponse
from medride_api.transport.enums import RequestStatus
from medride_api.transport.service import TransportService

ROUTER_REQUESTS = APIRouter(tags=["Transport Requests"], prefix="/requests")
ROUTER_HISTORY = APIRouter(tags=["Transport Requests"], prefix="/history")

TRANSITION_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {"description": "Request not found"},
    status.HTTP_409_CONFLICT: {"description": "Request is not in a state that allows this action"},
}


@ROUTER_REQUESTS.post(
    "",
    response_model=TransportRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a transport request",
    responses={
        status.HTTP_201_CREATED: {"description": "Request created in pending state"},
        status.HTTP_422_UNPROCESSABLE_CONTENT: {"description": "Invalid distance, role or missing contact field"},
    },
)
async def create_transport_request(
    body: CreateTransportRequestBody,
    service: TransportService = Depends(get_transport_service),
) -> TransportRequestResponse:
    """
    Create a pending transport request.

    The estimated cost is fixed at creation from the tiered pricing formula
    and never changes afterwards.
    """
    request = await service.create_request(**body.model_dump())
    return TransportRequestResponse.from_model(request)


@ROUTER_REQUESTS.get(
    "",
    response_model=TransportRequestListResponse,
    summary="List transport requests",
)
async def list_transport_requests(
    request_status: Optional[RequestStatus] = Query(default=None, alias="status", description="Filter by status"),
    service: TransportService = Depends(get_transport_service),
) -> TransportRequestListResponse:
    """List transport requests, newest first."""
    requests = await service.list_requests(request_status)

    if not requests:
        message = "No transport requests found"
    else:
        message = f"Found {len(requests)} transport request(s)"

    return TransportRequestListResponse(
        Message=message,
        Count=len(requests),
        Requests=[TransportRequestResponse.from_model(r) for r in requests],
    )


@ROUTER_REQUESTS.get(
    "/{request_id}",
    response_model=TransportRequestResponse,
    summary="Get a transport request",
    responses={status.HTTP_404_NOT_FOUND: {"description": "Request not found"}},
)
async def get_transport_request(
    request_id: str,
    service: TransportService = Depends(get_transport_service),
) -> TransportRequestResponse:
    return TransportRequestResponse.from_model(await service.get_request(request_id))


@ROUTER_REQUESTS.post(
    "/{request_id}/accept",
    response_model=TransportRequestResponse,
    summary="Accept a pending request",
    responses=TRANSITION_RESPONSES,
)
async def accept_transport_request(
    request_id: str,
    body: RiderActionBody,
    service: TransportService = Depends(get_transport_service),
) -> TransportRequestResponse:
    """Assign a rider to a pending request. Only one of several concurrent accepts wins."""
    return TransportRequestResponse.from_model(await service.accept_request(request_id, body.rider_id))


@ROUTER_REQUESTS.post(
    "/{request_id}/reject",
    response_model=TransportRequestResponse,
    summary="Reject a pending request",
    responses=TRANSITION_RESPONSES,
)
async def reject_transport_request(
    request_id: str,
    body: RiderActionBody,
    service: TransportService = Depends(get_transport_service),
) -> TransportRequestResponse:
    return TransportRequestResponse.from_model(await service.reject_request(request_id, body.rider_id))


@ROUTER_REQUESTS.post(
    "/{request_id}/start",
    response_model=TransportRequestResponse,
    summary="Start an accepted trip",
    responses=TRANSITION_RESPONSES,
)
async def start_transport_request(
    request_id: str,
    service: TransportService = Depends(get_transport_service),
) -> TransportRequestResponse:
    return TransportRequestResponse.from_model(await service.start_request(request_id))


@ROUTER_REQUESTS.post(
    "/{request_id}/complete",
    response_model=CompleteRequestResponse,
    summary="Complete a trip in progress",
    responses=TRANSITION_RESPONSES,
)
async def complete_transport_request(
    request_id: str,
    body: Optional[CompleteRequestBody] = Body(default=None),
    service: TransportService = Depends(get_transport_service),
) -> CompleteRequestResponse:
    """
    Complete a trip.

    Records the trip in the history and credits the rider with a
    ride_completed reward worth 10 points plus one point per kilometre.
    """
    rating = body.rating if body else None
    request, item, reward = await service.complete_request(request_id, rating=rating)

    logger.info(
        "Trip completed",
        request_id=request_id,
        rider_id=request.rider_id,
        cost=item.cost,
        points=reward.points,
    )

    return CompleteRequestResponse(
        Message=f"Request {request_id} completed",
        Request=TransportRequestResponse.from_model(request),
        History=HistoryItemResponse.from_model(item),
        Reward=RewardEventResponse.from_model(reward),
    )


@ROUTER_REQUESTS.post(
    "/{request_id}/cancel",
    response_model=TransportRequestResponse,
    summary="Cancel a pending request",
    responses=TRANSITION_RESPONSES,
)
async def cancel_transport_request(
    request_id: str,
    service: TransportService = Depends(get_transport_service),
) -> TransportRequestResponse:
    return TransportRequestResponse.from_model(await service.cancel_request(request_id))


@ROUTER_HISTORY.get(
    "",
    response_model=HistoryListResponse,
    summary="List completed trips",
)
async def list_history(
    rider_id: Optional[str] = Query(default=None, description="Only trips completed by this rider"),
    service: TransportService = Depends(get_transport_service),
) -> HistoryListResponse:
    """Completed-trip history, newest first."""
    items = await service.list_history(rider_id=rider_id)
    return HistoryListResponse(
        Message=f"Found {len(items)} completed trip(s)",
        Count=len(items),
        History=[HistoryItemResponse.from_model(i) for i in items],
    )
