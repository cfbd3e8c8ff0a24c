from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from push_api.core.config import settings
from push_api.models.domain import DeliveryRecord
from push_api.services.storage import storage_errors


@dataclass(frozen=True)
class LedgerEntry:
    recipient_id: int
    title: str
    body: str
    data: str
    status: str
    ticket_id: str | None


def serialize_payload(data: Dict[str, Any] | None) -> str:
    return json.dumps(data or {}, ensure_ascii=False, sort_keys=True)


def record_many(
    db: Session,
    entries: Sequence[LedgerEntry],
    *,
    sent_at: datetime | None = None,
) -> List[DeliveryRecord]:
    """
    Persist every entry in one transaction. Either all rows are committed or none are.
    """
    if not entries:
        raise ValueError("record_many requires at least one entry")

    sent_at = sent_at or datetime.now(timezone.utc)
    records = [
        DeliveryRecord(
            user_id=entry.recipient_id,
            title=entry.title,
            body=entry.body,
            data=entry.data,
            status=entry.status,
            ticket_id=entry.ticket_id,
            sent_at=sent_at,
        )
        for entry in entries
    ]

    with storage_errors(db, "delivery ledger write", entries=len(records)):
        db.add_all(records)
        db.flush()
        db.commit()
    return records


def list_history(db: Session, recipient_id: int, limit: int | None = None) -> List[DeliveryRecord]:
    if limit is None:
        limit = settings.notification_history_limit
    with storage_errors(db, "history query", recipient_id=recipient_id):
        return list(
            db.scalars(
                select(DeliveryRecord)
                .where(DeliveryRecord.user_id == recipient_id)
                .order_by(DeliveryRecord.created_at.desc(), DeliveryRecord.id.desc())
                .limit(limit)
            ).all()
        )
