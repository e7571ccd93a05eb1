"""
Transport Models Module

All Pydantic models for the transport core:
- Transport requests (mutable through the lifecycle only)
- Completed-trip history (append-only)
- Reward ledger entries (append-only)
- Notifications
"""

from medride_api.transport.models.history import HistoryItem
from medride_api.transport.models.notification import Notification
from medride_api.transport.models.request import PriceEstimate
from medride_api.transport.models.request import Request
from medride_api.transport.models.reward import RewardEvent
from medride_api.transport.models.reward import RewardSummary

__all__ = [
    "Request",
    "PriceEstimate",
    "HistoryItem",
    "RewardEvent",
    "RewardSummary",
    "Notification",
]
