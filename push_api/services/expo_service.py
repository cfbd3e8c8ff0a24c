from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

import httpx
from exponent_server_sdk import PushClient

from push_api.core.config import settings
from push_api.core.errors import GatewayError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_SIZE = PushClient.DEFAULT_MAX_MESSAGE_COUNT
TICKET_STATUS_OK = "ok"
TICKET_STATUS_ERROR = "error"


class ExpoAPIError(GatewayError):
    """Expo push API call failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.http_status = status_code
        self.payload = payload


@dataclass
class PushMessage:
    to: str
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)
    sound: str | None = "default"

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "to": self.to,
            "title": self.title,
            "body": self.body,
            "data": self.data,
        }
        if self.sound:
            payload["sound"] = self.sound
        return payload


@dataclass
class PushTicket:
    status: str
    id: Optional[str] = None
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    @property
    def is_ok(self) -> bool:
        return self.status == TICKET_STATUS_OK

    @classmethod
    def from_payload(cls, item: Dict[str, Any]) -> "PushTicket":
        status = item.get("status") or TICKET_STATUS_ERROR
        return cls(
            status=str(status),
            id=item.get("id") if status == TICKET_STATUS_OK else None,
            message=item.get("message"),
            details=item.get("details"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"status": self.status}
        if self.id is not None:
            data["id"] = self.id
        if self.message is not None:
            data["message"] = self.message
        if self.details is not None:
            data["details"] = self.details
        return data


def is_expo_push_token(token: Any) -> bool:
    """
    Push token grammar, owned by the Expo server SDK.
    """
    return isinstance(token, str) and bool(PushClient.is_exponent_push_token(token))


class ExpoPushGateway:
    """Client for the Expo push service send endpoint."""

    def __init__(
        self,
        *,
        push_url: str = "https://exp.host/--/api/v2/push/send",
        access_token: str | None = None,
        timeout: float = 10.0,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        mock_mode: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if max_chunk_size < 1:
            raise ValueError("max_chunk_size must be positive")
        self.push_url = push_url
        self.access_token = access_token
        self.timeout = timeout
        self.max_chunk_size = max_chunk_size
        self.mock_mode = mock_mode
        self._transport = transport

    def is_valid_endpoint(self, token: Any) -> bool:
        return is_expo_push_token(token)

    def submit(self, chunk: Sequence[PushMessage]) -> List[PushTicket]:
        if not chunk:
            return []
        if len(chunk) > self.max_chunk_size:
            raise ValueError(
                f"chunk of {len(chunk)} messages exceeds the limit of {self.max_chunk_size}"
            )
        if self.mock_mode:
            return _mock_tickets(chunk)

        body = self._post([message.to_payload() for message in chunk])
        return _parse_tickets(body)

    # ----------------------------------------------------------------------- #
    # Internal helpers

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    def _post(self, payload: List[Dict[str, Any]]) -> Dict[str, Any]:
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.push_url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:  # network/timeout
            raise ExpoAPIError(f"Expo push request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            raise ExpoAPIError(
                f"Expo push HTTP error: {response.status_code}",
                status_code=response.status_code,
                payload=body,
            )
        if not isinstance(body, dict):
            raise ExpoAPIError("Expo push response is not a JSON object", payload=body)
        return body


def _parse_tickets(body: Dict[str, Any]) -> List[PushTicket]:
    errors = body.get("errors")
    data = body.get("data")
    if errors and data is None:
        first = errors[0] if isinstance(errors, list) and errors else {}
        code = first.get("code") if isinstance(first, dict) else None
        message = first.get("message") if isinstance(first, dict) else None
        raise ExpoAPIError(
            f"Expo push request rejected ({code or 'UNKNOWN'}): {message or 'no message'}",
            payload=body,
        )

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise ExpoAPIError("Expo push response has no ticket list", payload=body)
    return [PushTicket.from_payload(item if isinstance(item, dict) else {}) for item in data]


def _mock_tickets(chunk: Sequence[PushMessage]) -> List[PushTicket]:
    logger.debug("EXPO_MOCK_MODE: answering %s messages locally", len(chunk))
    return [PushTicket(status=TICKET_STATUS_OK, id=str(uuid4())) for _ in chunk]


@lru_cache(maxsize=1)
def get_push_gateway() -> ExpoPushGateway:
    return ExpoPushGateway(
        push_url=settings.expo_push_url,
        access_token=settings.expo_access_token,
        timeout=settings.expo_timeout,
        max_chunk_size=settings.expo_max_chunk_size,
        mock_mode=settings.expo_mock_mode,
    )
