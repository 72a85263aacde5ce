"""Live feed over a WebSocket connection"""

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any

import websockets
from loguru import logger


class WebSocketTickFeed:
    """Streams feed messages from a WebSocket, reconnecting on disconnect.

    Non-JSON frames are ignored.
    """

    def __init__(
        self,
        url: str,
        reconnect_delay_seconds: float = 5.0,
        subscribe_message: dict[str, Any] | None = None,
    ):
        """Initialise WebSocket feed

        Args:
            url: WebSocket endpoint
            reconnect_delay_seconds: Wait before reconnecting after a drop
            subscribe_message: Optional message sent after each connect
        """
        self.url = url
        self.reconnect_delay_seconds = reconnect_delay_seconds
        self.subscribe_message = subscribe_message
        self._running = False

    async def messages(self) -> AsyncIterator[dict[str, Any]]:
        self._running = True

        while self._running:
            try:
                async with websockets.connect(self.url) as ws:
                    logger.info(f"Connected to feed: {self.url}")
                    if self.subscribe_message is not None:
                        await ws.send(json.dumps(self.subscribe_message))

                    async for frame in ws:
                        if not self._running:
                            break
                        message = self._decode(frame)
                        if message is not None:
                            yield message

            except websockets.exceptions.ConnectionClosed as e:
                logger.warning(f"Feed connection closed: {e}")
            except OSError as e:
                logger.error(f"Feed connection failed: {e}")

            if self._running:
                logger.info(
                    f"Reconnecting to feed in {self.reconnect_delay_seconds}s"
                )
                await asyncio.sleep(self.reconnect_delay_seconds)

    def stop(self) -> None:
        self._running = False

    @staticmethod
    def _decode(frame: str | bytes) -> dict[str, Any] | None:
        try:
            message = json.loads(frame)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return message if isinstance(message, dict) else None
