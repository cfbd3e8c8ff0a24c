from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class PushTicketRead(BaseModel):
    model_config = {"from_attributes": True}

    status: str
    id: str | None = None
    message: str | None = None
    details: Dict[str, Any] | None = None


class SendNotificationRequest(BaseModel):
    user_id: int = Field(..., description="Recipient id")
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    data: Dict[str, Any] | None = None


class SendBulkNotificationRequest(BaseModel):
    user_ids: List[int] = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    data: Dict[str, Any] | None = None


class BroadcastNotificationRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    data: Dict[str, Any] | None = None


class SingleSendResult(BaseModel):
    record_id: int
    result: PushTicketRead | None = None


class BulkSendResult(BaseModel):
    sent_count: int
    results: List[PushTicketRead]


class BroadcastResult(BaseModel):
    sent_count: int


class SendNotificationResponse(SingleSendResult):
    message: str


class SendBulkNotificationResponse(BulkSendResult):
    message: str


class BroadcastNotificationResponse(BroadcastResult):
    message: str


class DeliveryRecordRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    title: str
    body: str
    data: str | None
    status: str
    ticket_id: str | None
    sent_at: datetime | None
    created_at: datetime


class NotificationHistory(BaseModel):
    notifications: List[DeliveryRecordRead]
