from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from push_api.api import deps
from push_api.core.errors import NotificationError
from push_api.db.session import get_db
from push_api.models.domain import Recipient
from push_api.schemas.recipients import PushTokenUpdate, RecipientRead
from push_api.services.recipient_service import register_push_token

router = APIRouter(prefix="/recipients", tags=["recipients"])


@router.get("/me", response_model=RecipientRead)
def read_me(current: Recipient = Depends(deps.get_current_recipient)):
    return RecipientRead.model_validate(current)


@router.post("/me/push-token", response_model=RecipientRead)
def register_push_token_endpoint(
    payload: PushTokenUpdate,
    db: Session = Depends(get_db),
    current: Recipient = Depends(deps.get_current_recipient),
):
    """
    Store (or replace) the caller's Expo push token. Validity is checked at dispatch time.
    """
    try:
        recipient = register_push_token(db, current, payload.push_token)
    except NotificationError as exc:
        raise deps.to_http_error(exc) from exc
    return RecipientRead.model_validate(recipient)
