"""Notification sink protocol"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Notifier(Protocol):
    """Fire-and-forget message sink.

    Implementations must log delivery failures and never raise.
    """

    def notify(self, text: str, category: str) -> bool:
        """Send ``text`` to the channel for ``category``"""
        ...
