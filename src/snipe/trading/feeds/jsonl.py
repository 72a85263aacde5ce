"""Replay of recorded feed messages from a JSON Lines file"""

import asyncio
import json
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from loguru import logger

from snipe.shared.exceptions import FeedError


class JsonlTickFeed:
    """Yields one feed message per line of a ``.jsonl`` recording"""

    def __init__(self, path: str | Path, delay_seconds: float = 0.0):
        """Initialise replay feed

        Args:
            path: Recording with one JSON message per line
            delay_seconds: Pause between messages
        """
        self.path = Path(path)
        self.delay_seconds = delay_seconds
        self._running = False

    async def messages(self) -> AsyncIterator[dict[str, Any]]:
        if not self.path.exists():
            raise FeedError(f"Feed recording not found: {self.path}")

        self._running = True
        logger.info(f"Replaying feed from {self.path}")

        with self.path.open(encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                if not self._running:
                    break
                line = line.strip()
                if not line:
                    continue

                try:
                    message = json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"Skipping invalid JSON at line {line_number}: {e}")
                    continue

                if isinstance(message, dict):
                    yield message
                if self.delay_seconds > 0:
                    await asyncio.sleep(self.delay_seconds)

        self._running = False

    def stop(self) -> None:
        self._running = False
