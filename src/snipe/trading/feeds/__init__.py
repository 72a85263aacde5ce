"""Tick feeds"""

from .jsonl import JsonlTickFeed
from .protocol import TickFeed
from .websocket import WebSocketTickFeed

__all__ = ["JsonlTickFeed", "TickFeed", "WebSocketTickFeed"]
