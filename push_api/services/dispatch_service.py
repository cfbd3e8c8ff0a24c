from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Protocol, Sequence

from sqlalchemy.orm import Session

from push_api.core.errors import (
    GatewayResultMismatch,
    InvalidEndpoint,
    InvalidRequestError,
    NoEndpoint,
    NoValidRecipients,
    RecipientNotFound,
)
from push_api.models.domain import Recipient
from push_api.schemas.notifications import (
    BroadcastResult,
    BulkSendResult,
    PushTicketRead,
    SingleSendResult,
)
from push_api.services import ledger_service, recipient_service
from push_api.services.batching import chunk_messages
from push_api.services.endpoint_validator import is_valid_endpoint
from push_api.services.expo_service import (
    TICKET_STATUS_ERROR,
    PushMessage,
    PushTicket,
    get_push_gateway,
)
from push_api.services.ledger_service import LedgerEntry, serialize_payload

logger = logging.getLogger(__name__)


class PushGateway(Protocol):
    max_chunk_size: int

    def is_valid_endpoint(self, token: Any) -> bool: ...

    def submit(self, chunk: Sequence[PushMessage]) -> List[PushTicket]: ...


def send_to_recipient(
    db: Session,
    recipient_id: int,
    title: str,
    body: str,
    data: Dict[str, Any] | None = None,
    *,
    gateway: PushGateway | None = None,
) -> SingleSendResult:
    gateway = gateway or get_push_gateway()
    _validate_content(title, body)

    recipient = recipient_service.get_recipient(db, recipient_id)
    if recipient is None:
        raise RecipientNotFound("Recipient not found.", recipient_id=recipient_id)
    token = recipient.expo_push_token
    if not token:
        raise NoEndpoint("Recipient has no registered push token.", recipient_id=recipient_id)
    if not is_valid_endpoint(token, gateway):
        raise InvalidEndpoint("Recipient push token is not valid.", recipient_id=recipient_id)

    message = PushMessage(to=token, title=title, body=body, data=dict(data or {}))
    tickets = _submit_chunks(gateway, [message])

    # the gateway owes exactly one ticket here; record an error if it did not send one
    ticket = tickets[0] if tickets else None
    if ticket is None:
        logger.warning("Gateway returned no ticket for recipient %s", recipient_id)

    records = ledger_service.record_many(
        db,
        [
            LedgerEntry(
                recipient_id=recipient.id,
                title=title,
                body=body,
                data=serialize_payload(data),
                status=ticket.status if ticket else TICKET_STATUS_ERROR,
                ticket_id=ticket.id if ticket else None,
            )
        ],
    )
    _log_dispatch("single", resolved=1, valid=1, gateway=gateway)
    return SingleSendResult(
        record_id=records[0].id,
        result=PushTicketRead.model_validate(ticket) if ticket else None,
    )


def send_to_recipients(
    db: Session,
    recipient_ids: Iterable[int],
    title: str,
    body: str,
    data: Dict[str, Any] | None = None,
    *,
    gateway: PushGateway | None = None,
) -> BulkSendResult:
    gateway = gateway or get_push_gateway()
    _validate_content(title, body)
    recipient_ids = list(recipient_ids)
    if not recipient_ids:
        raise InvalidRequestError("user_ids must contain at least one id.")

    candidates = recipient_service.list_recipients_by_ids(db, recipient_ids)
    recipients = _with_valid_endpoint(candidates, gateway)
    if not recipients:
        raise NoValidRecipients("No recipient has a valid push token.", requested=len(recipient_ids))

    tickets = _dispatch(recipients, title, body, data, gateway, mode="bulk", resolved=len(candidates))

    payload = serialize_payload(data)
    ledger_service.record_many(
        db,
        [
            LedgerEntry(
                recipient_id=recipient.id,
                title=title,
                body=body,
                data=payload,
                status=ticket.status,
                ticket_id=ticket.id,
            )
            for recipient, ticket in zip(recipients, tickets)
        ],
    )
    return BulkSendResult(
        sent_count=len(tickets),
        results=[PushTicketRead.model_validate(ticket) for ticket in tickets],
    )


def send_to_all(
    db: Session,
    title: str,
    body: str,
    data: Dict[str, Any] | None = None,
    *,
    gateway: PushGateway | None = None,
) -> BroadcastResult:
    """
    Broadcast to every recipient with a valid token. Outcomes are reported, not recorded.
    """
    gateway = gateway or get_push_gateway()
    _validate_content(title, body)

    candidates = recipient_service.list_recipients_with_endpoint(db)
    recipients = _with_valid_endpoint(candidates, gateway)
    if not recipients:
        raise NoValidRecipients("No recipient has a valid push token.")

    tickets = _dispatch(
        recipients, title, body, data, gateway, mode="broadcast", resolved=len(candidates)
    )
    return BroadcastResult(sent_count=len(tickets))


def _validate_content(title: str, body: str) -> None:
    if not isinstance(title, str) or not title.strip():
        raise InvalidRequestError("title is required.")
    if not isinstance(body, str) or not body.strip():
        raise InvalidRequestError("body is required.")


def _with_valid_endpoint(recipients: Sequence[Recipient], gateway: PushGateway) -> List[Recipient]:
    return [
        recipient
        for recipient in recipients
        if is_valid_endpoint(recipient.expo_push_token, gateway)
    ]


def _dispatch(
    recipients: Sequence[Recipient],
    title: str,
    body: str,
    data: Dict[str, Any] | None,
    gateway: PushGateway,
    *,
    mode: str,
    resolved: int,
) -> List[PushTicket]:
    messages = [
        PushMessage(
            to=recipient.expo_push_token,
            title=title,
            body=body,
            data={**(data or {}), "userId": recipient.id},
        )
        for recipient in recipients
    ]
    tickets = _submit_chunks(gateway, messages)
    if len(tickets) != len(messages):
        logger.warning(
            "Gateway result count mismatch (mode=%s, messages=%s, tickets=%s)",
            mode,
            len(messages),
            len(tickets),
        )
        raise GatewayResultMismatch(
            "Gateway returned a different number of tickets than messages sent.",
            messages=len(messages),
            tickets=len(tickets),
        )
    _log_dispatch(mode, resolved=resolved, valid=len(messages), gateway=gateway)
    return tickets


def _log_dispatch(mode: str, *, resolved: int, valid: int, gateway: PushGateway) -> None:
    logger.info(
        "Notifications dispatched (mode=%s, resolved=%s, valid=%s, chunks=%s)",
        mode,
        resolved,
        valid,
        math.ceil(valid / gateway.max_chunk_size),
    )


def _submit_chunks(gateway: PushGateway, messages: Sequence[PushMessage]) -> List[PushTicket]:
    # chunks go out one after another so tickets line up with messages by position
    tickets: List[PushTicket] = []
    for index, chunk in enumerate(chunk_messages(messages, gateway.max_chunk_size)):
        logger.debug("Submitting chunk %s (%s messages)", index, len(chunk))
        tickets.extend(gateway.submit(chunk))
    return tickets
