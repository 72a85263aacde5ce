"""Tick feed protocol"""

from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class TickFeed(Protocol):
    """Source of ``{channel, data}`` feed messages"""

    def messages(self) -> AsyncIterator[dict[str, Any]]:
        """Yield decoded messages until the feed ends or is stopped"""
        ...

    def stop(self) -> None:
        """Ask the feed to end after the current message"""
        ...
