"""
Store Protocols

Interfaces the lifecycle, the reward engine and the service depend on.
Every adapter (in-memory or asyncpg) implements these coroutines.
"""

from typing import Optional
from typing import Protocol

from medride_api.transport.enums import RequestStatus
from medride_api.transport.enums import RewardType
from medride_api.transport.models.history import HistoryItem
from medride_api.transport.models.request import Request
from medride_api.transport.models.reward import RewardEvent

# PostgreSQL schema holding every transport table
DB_SCHEMA = "medride"


class RequestStore(Protocol):
    """Keyed store of transport requests."""

    async def get(self, request_id: str) -> Optional[Request]: ...

    async def put(self, request: Request, expected_status: Optional[RequestStatus] = None) -> bool:
        """
        Write a request.

        With ``expected_status`` the write is a compare-and-swap: it only
        happens if the stored record still has that status, and the return
        value says whether it happened. Without it the record is created.
        """
        ...

    async def list(self, status: Optional[RequestStatus] = None) -> list[Request]: ...


class HistoryStore(Protocol):
    """Append-only store of completed trips."""

    async def append(self, item: HistoryItem) -> None: ...

    async def list(self, rider_id: Optional[str] = None) -> list[HistoryItem]:
        """Completed trips, newest first, optionally only one rider's."""
        ...

    async def get_by_request(self, request_id: str) -> Optional[HistoryItem]: ...


class RewardStore(Protocol):
    """Append-only reward ledger, partitioned by actor."""

    async def append(self, event: RewardEvent) -> None: ...

    async def list(self, actor_id: str, reward_type: Optional[RewardType] = None) -> list[RewardEvent]:
        """Ledger entries for an actor, newest first."""
        ...

    async def total_points(self, actor_id: str, reward_type: Optional[RewardType] = None) -> int: ...
