"""
Request Repository

Repository for transport requests. Status changes are compare-and-swap
updates so that two writers can never both move a request out of the same state.
"""

from typing import Optional

import asyncpg

from medride_api.transport.db.repository_base import DB_SCHEMA
from medride_api.transport.enums import RequestStatus
from medride_api.transport.models.request import Request

REQUEST_COLUMNS = (
    "request_id",
    "created_at",
    "updated_at",
    "requester_role",
    "patient_name",
    "pickup",
    "destination",
    "distance_km",
    "urgency",
    "payment_method",
    "estimated_cost",
    "status",
    "rider_id",
    "service_type",
    "emergency",
    "caregiver_id",
    "notes",
)


def _values(request: Request) -> list:
    data = request.model_dump(mode="python")
    return [getattr(data[col], "value", data[col]) for col in REQUEST_COLUMNS]


class RequestRepository:
    """Request repository backed by medride.requests."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool
        self.table = f"{DB_SCHEMA}.requests"

    async def get(self, request_id: str) -> Optional[Request]:
        """Get a request by id, or None."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(f"SELECT * FROM {self.table} WHERE request_id = $1", request_id)
        return Request.model_validate(dict(row)) if row else None

    async def put(self, request: Request, expected_status: Optional[RequestStatus] = None) -> bool:
        """
        Insert a new request, or update an existing one if its status still matches.

        Parameters
        ----------
        request : Request
            Full record to write
        expected_status : RequestStatus, optional
            Status the stored record must have for the update to apply.
            When omitted the request is inserted and must not exist yet.

        Returns
        -------
        bool
            True if a row was written
        """
        values = _values(request)

        async with self.pool.acquire() as conn:
            if expected_status is None:
                placeholders = ", ".join(f"${i}" for i in range(1, len(REQUEST_COLUMNS) + 1))
                written = await conn.fetchval(
                    f"""
                    INSERT INTO {self.table} ({", ".join(REQUEST_COLUMNS)})
                    VALUES ({placeholders})
                    ON CONFLICT (request_id) DO NOTHING
                    RETURNING request_id
                    """,
                    *values,
                )
            else:
                # $1 is request_id; the remaining columns follow in order
                assignments = ", ".join(f"{col} = ${i}" for i, col in enumerate(REQUEST_COLUMNS[1:], start=2))
                written = await conn.fetchval(
                    f"""
                    UPDATE {self.table}
                    SET {assignments}
                    WHERE request_id = $1 AND status = ${len(REQUEST_COLUMNS) + 1}
                    RETURNING request_id
                    """,
                    *values,
                    expected_status.value,
                )

        return written is not None

    async def list(self, status: Optional[RequestStatus] = None) -> list[Request]:
        """List requests, newest first, optionally filtered by status."""
        async with self.pool.acquire() as conn:
            if status is None:
                rows = await conn.fetch(f"SELECT * FROM {self.table} ORDER BY created_at DESC")
            else:
                rows = await conn.fetch(
                    f"SELECT * FROM {self.table} WHERE status = $1 ORDER BY created_at DESC",
                    status.value,
                )
        return [Request.model_validate(dict(row)) for row in rows]
