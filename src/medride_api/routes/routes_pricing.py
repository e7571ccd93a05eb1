"""Pricing endpoints: cost quotes before a request is created."""

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import status

from medride_api.dependencies import get_transport_service
from medride_api.schemas.schemas_transport import EstimateResponse
from medride_api.transport.service import TransportService

ROUTER_PRICING = APIRouter(tags=["Pricing"], prefix="/pricing")


@ROUTER_PRICING.get(
    "/estimate",
    response_model=EstimateResponse,
    summary="Estimate the cost of a trip",
    responses={
        status.HTTP_422_UNPROCESSABLE_CONTENT: {"description": "Distance missing, negative or not a number"},
    },
)
async def estimate_cost(
    distance_km: float = Query(..., description="Trip distance in kilometres; values below 1 are charged as 1"),
    service: TransportService = Depends(get_transport_service),
) -> EstimateResponse:
    """Quote the tiered cost for a distance."""
    return EstimateResponse.from_model(service.estimate(distance_km))
