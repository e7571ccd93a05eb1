"""Notification endpoints."""

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import status

from medride_api.dependencies import get_transport_service
from medride_api.schemas.schemas_transport import NotificationListResponse
from medride_api.schemas.schemas_transport import NotificationResponse
from medride_api.transport.service import TransportService

ROUTER_NOTIFICATIONS = APIRouter(tags=["Notifications"], prefix="/notifications")


@ROUTER_NOTIFICATIONS.get(
    "",
    response_model=NotificationListResponse,
    summary="List notifications",
)
async def list_notifications(
    unread_only: bool = Query(default=False, description="Only unread notifications"),
    service: TransportService = Depends(get_transport_service),
) -> NotificationListResponse:
    notifications = await service.list_notifications(unread_only=unread_only)
    return NotificationListResponse(
        Message=f"Found {len(notifications)} notification(s)",
        Count=len(notifications),
        UnreadCount=sum(1 for n in notifications if not n.read),
        Notifications=[NotificationResponse.from_model(n) for n in notifications],
    )


@ROUTER_NOTIFICATIONS.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark a notification as read",
    responses={status.HTTP_404_NOT_FOUND: {"description": "Notification not found"}},
)
async def mark_notification_read(
    notification_id: str,
    service: TransportService = Depends(get_transport_service),
) -> NotificationResponse:
    return NotificationResponse.from_model(await service.mark_notification_read(notification_id))
