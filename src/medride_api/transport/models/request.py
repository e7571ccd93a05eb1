"""
Request Model

Model for medical-transport requests.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict

from medride_api.transport.enums import PaymentMethod
from medride_api.transport.enums import RequesterRole
from medride_api.transport.enums import RequestStatus
from medride_api.transport.enums import ServiceType
from medride_api.transport.enums import Urgency


class Request(BaseModel):
    """Transport request.

    Instances are frozen. Transitions build a new one with
    ``model_copy(update=...)`` and commit it through the request store.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    request_id: str
    created_at: datetime
    requester_role: RequesterRole
    patient_name: str
    pickup: str
    destination: str
    distance_km: float
    urgency: Urgency
    payment_method: PaymentMethod
    estimated_cost: float
    status: RequestStatus = RequestStatus.PENDING
    rider_id: Optional[str] = None  # Set on accept or reject only
    service_type: ServiceType = ServiceType.ROUTINE
    emergency: bool = False
    caregiver_id: Optional[str] = None
    notes: str = ""
    updated_at: Optional[datetime] = None

    @property
    def loan_backed(self) -> bool:
        return self.payment_method == PaymentMethod.SHA_LOAN


class PriceEstimate(BaseModel):
    """Quoted cost for a distance."""

    distance_km: float  # After clamping to the 1 km minimum
    cost: float
    tier: str
