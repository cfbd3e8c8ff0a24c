from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from push_api.api import deps
from push_api.core.errors import NotificationError
from push_api.db.session import get_db
from push_api.models.domain import Recipient
from push_api.schemas.notifications import (
    BroadcastNotificationRequest,
    BroadcastNotificationResponse,
    DeliveryRecordRead,
    NotificationHistory,
    SendBulkNotificationRequest,
    SendBulkNotificationResponse,
    SendNotificationRequest,
    SendNotificationResponse,
)
from push_api.services import dispatch_service
from push_api.services.dispatch_service import PushGateway
from push_api.services.ledger_service import list_history

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/send", response_model=SendNotificationResponse)
def send_notification(
    payload: SendNotificationRequest,
    db: Session = Depends(get_db),
    gateway: PushGateway = Depends(deps.get_gateway),
    current: Recipient = Depends(deps.get_current_recipient),
):
    try:
        result = dispatch_service.send_to_recipient(
            db,
            payload.user_id,
            payload.title,
            payload.body,
            payload.data,
            gateway=gateway,
        )
    except NotificationError as exc:
        raise deps.to_http_error(exc) from exc
    return SendNotificationResponse(message="Notification sent", **result.model_dump())


@router.post("/send-bulk", response_model=SendBulkNotificationResponse)
def send_bulk_notification(
    payload: SendBulkNotificationRequest,
    db: Session = Depends(get_db),
    gateway: PushGateway = Depends(deps.get_gateway),
    current: Recipient = Depends(deps.get_current_recipient),
):
    try:
        result = dispatch_service.send_to_recipients(
            db,
            payload.user_ids,
            payload.title,
            payload.body,
            payload.data,
            gateway=gateway,
        )
    except NotificationError as exc:
        raise deps.to_http_error(exc) from exc
    return SendBulkNotificationResponse(
        message=f"{result.sent_count} notifications sent",
        **result.model_dump(),
    )


@router.post("/send-all", response_model=BroadcastNotificationResponse)
def send_all_notification(
    payload: BroadcastNotificationRequest,
    db: Session = Depends(get_db),
    gateway: PushGateway = Depends(deps.get_gateway),
    current: Recipient = Depends(deps.get_current_recipient),
):
    try:
        result = dispatch_service.send_to_all(
            db,
            payload.title,
            payload.body,
            payload.data,
            gateway=gateway,
        )
    except NotificationError as exc:
        raise deps.to_http_error(exc) from exc
    return BroadcastNotificationResponse(
        message=f"{result.sent_count} notifications sent to all recipients",
        **result.model_dump(),
    )


@router.get("/history", response_model=NotificationHistory)
def notification_history(
    db: Session = Depends(get_db),
    current: Recipient = Depends(deps.get_current_recipient),
):
    try:
        records = list_history(db, current.id)
    except NotificationError as exc:
        raise deps.to_http_error(exc) from exc
    return NotificationHistory(
        notifications=[DeliveryRecordRead.model_validate(record) for record in records]
    )
