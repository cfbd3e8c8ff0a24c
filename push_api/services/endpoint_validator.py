from __future__ import annotations

from typing import Any, Protocol


class EndpointGrammar(Protocol):
    def is_valid_endpoint(self, token: Any) -> bool: ...


def is_valid_endpoint(token: str | None, gateway: EndpointGrammar) -> bool:
    # the token grammar belongs to the gateway; we only guard the obvious cases
    if not token or not isinstance(token, str):
        return False
    return bool(gateway.is_valid_endpoint(token))
