from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PushTokenUpdate(BaseModel):
    push_token: str = Field(..., min_length=1, max_length=255)


class RecipientRead(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    email: str
    push_token: str | None = Field(default=None, validation_alias="expo_push_token")
    created_at: datetime
