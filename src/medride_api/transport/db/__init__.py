"""
Transport Storage

Store protocols plus two families of adapters:
- In-memory stores (local runs and tests)
- asyncpg repositories backed by the medride PostgreSQL schema
"""

from medride_api.transport.db.memory import InMemoryHistoryStore
from medride_api.transport.db.memory import InMemoryNotificationSink
from medride_api.transport.db.memory import InMemoryRequestStore
from medride_api.transport.db.memory import InMemoryRewardStore
from medride_api.transport.db.pool import DomainDBPool
from medride_api.transport.db.repository_base import HistoryStore
from medride_api.transport.db.repository_base import RequestStore
from medride_api.transport.db.repository_base import RewardStore
from medride_api.transport.db.repository_history import HistoryRepository
from medride_api.transport.db.repository_notification import NotificationRepository
from medride_api.transport.db.repository_request import RequestRepository
from medride_api.transport.db.repository_reward import RewardRepository

__all__ = [
    "RequestStore",
    "HistoryStore",
    "RewardStore",
    "InMemoryRequestStore",
    "InMemoryHistoryStore",
    "InMemoryRewardStore",
    "InMemoryNotificationSink",
    "DomainDBPool",
    "RequestRepository",
    "HistoryRepository",
    "RewardRepository",
    "NotificationRepository",
]
