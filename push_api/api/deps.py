from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from push_api.core.errors import NotificationError
from push_api.core.security import TokenDecodeError, decode_access_token
from push_api.db.session import get_db
from push_api.models.domain import Recipient
from push_api.services.dispatch_service import PushGateway
from push_api.services.expo_service import get_push_gateway
from push_api.services.recipient_service import get_recipient

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_recipient(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Recipient:
    unauthorized = HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required.")
    try:
        payload = decode_access_token(token)
    except TokenDecodeError as exc:
        raise unauthorized from exc

    try:
        recipient_id = int(payload.subject)
    except ValueError as exc:
        raise unauthorized from exc

    try:
        recipient = get_recipient(db, recipient_id)
    except NotificationError as exc:
        raise to_http_error(exc) from exc
    if not recipient:
        raise unauthorized
    return recipient


def get_gateway() -> PushGateway:
    return get_push_gateway()


def to_http_error(exc: NotificationError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())
