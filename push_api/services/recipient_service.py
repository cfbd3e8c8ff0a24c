from __future__ import annotations

from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from push_api.models.domain import Recipient
from push_api.services.storage import storage_errors


def get_recipient(db: Session, recipient_id: int) -> Recipient | None:
    with storage_errors(db, "recipient lookup", recipient_id=recipient_id):
        return db.get(Recipient, recipient_id)


def list_recipients_by_ids(db: Session, recipient_ids: Iterable[int]) -> List[Recipient]:
    """
    Recipients holding an endpoint, in the order their ids were requested.
    """
    ordered_ids = list(dict.fromkeys(recipient_ids))
    if not ordered_ids:
        return []
    with storage_errors(db, "recipient lookup", requested=len(ordered_ids)):
        rows = db.scalars(
            select(Recipient).where(
                Recipient.id.in_(ordered_ids),
                Recipient.expo_push_token.is_not(None),
            )
        ).all()
    by_id = {row.id: row for row in rows}
    return [by_id[recipient_id] for recipient_id in ordered_ids if recipient_id in by_id]


def list_recipients_with_endpoint(db: Session) -> List[Recipient]:
    with storage_errors(db, "recipient listing"):
        return list(
            db.scalars(
                select(Recipient)
                .where(Recipient.expo_push_token.is_not(None))
                .order_by(Recipient.id)
            ).all()
        )


def register_push_token(db: Session, recipient: Recipient, push_token: str) -> Recipient:
    with storage_errors(db, "push token registration"):
        recipient.expo_push_token = push_token
        db.commit()
        db.refresh(recipient)
    return recipient
