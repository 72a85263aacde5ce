"""Notification protocol"""

from .protocol import Notifier

__all__ = ["Notifier"]
