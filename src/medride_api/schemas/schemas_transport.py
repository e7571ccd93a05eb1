"""
Transport API Schemas

Request bodies (snake_case, as callers send them) and response models
(PascalCase fields per existing pattern) for the transport endpoints.
"""

from datetime import datetime
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import Field

from medride_api.transport.enums import PaymentMethod
from medride_api.transport.enums import RequesterRole
from medride_api.transport.enums import RewardType
from medride_api.transport.enums import ServiceType
from medride_api.transport.enums import Urgency
from medride_api.transport.models.history import HistoryItem
from medride_api.transport.models.notification import Notification
from medride_api.transport.models.request import PriceEstimate
from medride_api.transport.models.request import Request
from medride_api.transport.models.reward import RewardEvent
from medride_api.transport.models.reward import RewardSummary

# ════════════════════════════════════════════════════════════════════════════
# Request Bodies
# ════════════════════════════════════════════════════════════════════════════


def _one_of(enum_cls) -> str:
    return "One of: " + ", ".join(member.value for member in enum_cls)


class CreateTransportRequestBody(BaseModel):
    """
    Body for POST /requests.

    Values are checked by the request lifecycle rather than here, so that a
    rejected create is reported through the notification feed like any other
    failed call.
    """

    requester_role: Optional[str] = Field(default=None, description=_one_of(RequesterRole))
    patient_name: Optional[str] = None
    pickup: Optional[str] = None
    destination: Optional[str] = None
    distance_km: Optional[float] = Field(default=None, description="Trip distance in kilometres")
    urgency: str = Field(default=Urgency.MEDIUM.value, description=_one_of(Urgency))
    payment_method: str = Field(default=PaymentMethod.WALLET.value, description=_one_of(PaymentMethod))
    service_type: str = Field(default=ServiceType.ROUTINE.value, description=_one_of(ServiceType))
    emergency: Optional[bool] = None
    caregiver_id: Optional[str] = None
    notes: str = ""


class RiderActionBody(BaseModel):
    """Body for accept and reject."""

    rider_id: Optional[str] = None


class CompleteRequestBody(BaseModel):
    """Optional body for complete."""

    rating: Optional[int] = Field(default=None, description="Trip rating from 1 to 5")


class AddRewardBody(BaseModel):
    """Body for POST /rewards."""

    reward_type: RewardType
    actor_id: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    description: Optional[str] = None


# ════════════════════════════════════════════════════════════════════════════
# Responses
# ════════════════════════════════════════════════════════════════════════════


class EstimateResponse(BaseModel):
    """Quoted cost for a distance."""

    DistanceKm: float
    Cost: float
    Tier: str

    @classmethod
    def from_model(cls, estimate: PriceEstimate) -> "EstimateResponse":
        return cls(DistanceKm=estimate.distance_km, Cost=estimate.cost, Tier=estimate.tier)


class TransportRequestResponse(BaseModel):
    """Transport request details."""

    RequestId: str
    Status: str
    RequesterRole: str
    PatientName: str
    Pickup: str
    Destination: str
    DistanceKm: float
    Urgency: str
    PaymentMethod: str
    EstimatedCost: float
    RiderId: Optional[str] = None
    ServiceType: str
    Emergency: bool
    CaregiverId: Optional[str] = None
    Notes: str = ""
    CreatedAt: datetime
    UpdatedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, request: Request) -> "TransportRequestResponse":
        return cls(
            RequestId=request.request_id,
            Status=request.status.value,
            RequesterRole=request.requester_role.value,
            PatientName=request.patient_name,
            Pickup=request.pickup,
            Destination=request.destination,
            DistanceKm=request.distance_km,
            Urgency=request.urgency.value,
            PaymentMethod=request.payment_method.value,
            EstimatedCost=request.estimated_cost,
            RiderId=request.rider_id,
            ServiceType=request.service_type.value,
            Emergency=request.emergency,
            CaregiverId=request.caregiver_id,
            Notes=request.notes,
            CreatedAt=request.created_at,
            UpdatedAt=request.updated_at,
        )


class TransportRequestListResponse(BaseModel):
    """List of transport requests."""

    Message: str
    Count: int
    Requests: List[TransportRequestResponse]


class HistoryItemResponse(BaseModel):
    """Completed trip."""

    HistoryId: str
    RequestId: str
    CompletedAt: datetime
    PatientName: str
    DistanceKm: float
    Cost: float
    Status: str
    RiderId: Optional[str] = None
    Pickup: str
    Destination: str
    Rating: Optional[int] = None

    @classmethod
    def from_model(cls, item: HistoryItem) -> "HistoryItemResponse":
        return cls(
            HistoryId=item.history_id,
            RequestId=item.request_id,
            CompletedAt=item.completed_at,
            PatientName=item.patient_name,
            DistanceKm=item.distance_km,
            Cost=item.cost,
            Status=item.status,
            RiderId=item.rider_id,
            Pickup=item.pickup,
            Destination=item.destination,
            Rating=item.rating,
        )


class HistoryListResponse(BaseModel):
    """Completed-trip history."""

    Message: str
    Count: int
    History: List[HistoryItemResponse]


class RewardEventResponse(BaseModel):
    """Reward ledger entry."""

    RewardId: str
    ActorId: str
    RewardType: str
    Points: int
    Meta: Dict[str, Any] = Field(default_factory=dict)
    Timestamp: datetime
    Description: str

    @classmethod
    def from_model(cls, event: RewardEvent) -> "RewardEventResponse":
        return cls(
            RewardId=event.reward_id,
            ActorId=event.actor_id,
            RewardType=event.reward_type.value,
            Points=event.points,
            Meta=event.meta,
            Timestamp=event.timestamp,
            Description=event.description,
        )


class CompleteRequestResponse(BaseModel):
    """Result of completing a trip."""

    Message: str
    Request: TransportRequestResponse
    History: HistoryItemResponse
    Reward: RewardEventResponse


class RewardEventListResponse(BaseModel):
    """Reward ledger entries for an actor."""

    Message: str
    ActorId: str
    Count: int
    TotalPoints: int
    Events: List[RewardEventResponse]


class RewardSummaryResponse(BaseModel):
    """Points, derived credit score and loan readiness for an actor."""

    ActorId: str
    Role: str
    TotalPoints: int
    CreditScore: int
    LoanReadiness: int
    RecentEvents: List[RewardEventResponse]

    @classmethod
    def from_model(cls, summary: RewardSummary) -> "RewardSummaryResponse":
        return cls(
            ActorId=summary.actor_id,
            Role=summary.role.value,
            TotalPoints=summary.total_points,
            CreditScore=summary.credit_score,
            LoanReadiness=summary.loan_readiness,
            RecentEvents=[RewardEventResponse.from_model(e) for e in summary.recent_events],
        )


class NotificationResponse(BaseModel):
    """Notification details."""

    NotificationId: str
    Title: str
    Message: str
    Severity: str
    Read: bool
    CreatedAt: datetime
    RelatedRequestId: Optional[str] = None
    EventType: Optional[str] = None

    @classmethod
    def from_model(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            NotificationId=notification.notification_id,
            Title=notification.title,
            Message=notification.message,
            Severity=notification.severity.value,
            Read=notification.read,
            CreatedAt=notification.created_at,
            RelatedRequestId=notification.related_request_id,
            EventType=notification.event_type.value if notification.event_type else None,
        )


class NotificationListResponse(BaseModel):
    """Notifications, newest first."""

    Message: str
    Count: int
    UnreadCount: int
    Notifications: List[NotificationResponse]
