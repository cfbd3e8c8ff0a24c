from __future__ import annotations

from typing import Any, Dict


class NotificationError(RuntimeError):
    """Failure of a notification request, reported to the caller by `kind`."""

    kind = "NotificationError"
    status_code = 400

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_detail(self) -> Dict[str, Any]:
        detail: Dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.context:
            detail["context"] = self.context
        return detail


class InvalidRequestError(NotificationError):
    kind = "ValidationError"


class RecipientNotFound(NotificationError):
    kind = "RecipientNotFound"
    status_code = 404


class NoEndpoint(NotificationError):
    kind = "NoEndpoint"


class InvalidEndpoint(NotificationError):
    kind = "InvalidEndpoint"


class NoValidRecipients(NotificationError):
    kind = "NoValidRecipients"


class GatewayError(NotificationError):
    kind = "GatewayError"
    status_code = 502


class GatewayResultMismatch(GatewayError):
    """The gateway answered with a different number of results than messages sent."""

    kind = "GatewayResultMismatch"


class StorageError(NotificationError):
    kind = "StorageError"
    status_code = 500
