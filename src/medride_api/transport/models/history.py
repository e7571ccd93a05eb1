"""
History Model

Completed-trip record (append-only, never modified).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict

COMPLETED_LABEL = "Completed"


class HistoryItem(BaseModel):
    """Record of one completed trip, minted when a request reaches completed."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    history_id: str
    request_id: str
    completed_at: datetime
    patient_name: str
    distance_km: float
    cost: float  # The request's estimated_cost
    status: str = COMPLETED_LABEL
    rider_id: Optional[str] = None
    pickup: str = ""
    destination: str = ""
    rating: Optional[int] = None
