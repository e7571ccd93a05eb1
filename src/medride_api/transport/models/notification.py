"""
Notification Model

User-facing notifications produced from domain events.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from medride_api.transport.enums import DomainEventType
from medride_api.transport.enums import NotificationSeverity


class Notification(BaseModel):
    """Notification delivered to a NotificationSink."""

    notification_id: str
    title: str
    message: str
    severity: NotificationSeverity = NotificationSeverity.INFO
    read: bool = False
    created_at: datetime
    related_request_id: Optional[str] = None
    event_type: Optional[DomainEventType] = None

    class Config:
        from_attributes = True
