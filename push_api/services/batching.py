from __future__ import annotations

from typing import List, Sequence, TypeVar

T = TypeVar("T")


def chunk_messages(messages: Sequence[T], max_size: int) -> List[List[T]]:
    """
    Split messages into consecutive chunks of at most ``max_size`` items.

    Order is preserved and only the last chunk may be short. An empty input yields no chunks.
    """
    if max_size < 1:
        raise ValueError("max_size must be at least 1")
    return [list(messages[start:start + max_size]) for start in range(0, len(messages), max_size)]
