"""Discord webhook notification service for Snipe trading bot"""

from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import requests
from loguru import logger

from snipe.shared.constants import (
    CATEGORY_INC,
    CATEGORY_SIGNAL,
    CATEGORY_STOP_LOSS,
    CATEGORY_TAKE_PROFIT,
    CATEGORY_TRADE,
)

CATEGORY_COLORS = {
    CATEGORY_SIGNAL: 0x3498DB,
    CATEGORY_TRADE: 0x00FF00,
    CATEGORY_STOP_LOSS: 0xFF0000,
    CATEGORY_TAKE_PROFIT: 0xFFAA00,
    CATEGORY_INC: 0x9B59B6,
}
DEFAULT_COLOR = 0x95A5A6

# Discord rejects embed descriptions longer than this
MAX_DESCRIPTION_LENGTH = 4096


def _handle_discord_errors(func: Callable) -> Callable:
    """Decorator to handle Discord webhook errors"""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> bool:
        try:
            return func(*args, **kwargs)
        except requests.exceptions.ConnectionError as e:
            logger.error(
                f"Failed to send Discord notification (connection error): {e}"
            )
            return False
        except requests.exceptions.Timeout as e:
            logger.error(f"Failed to send Discord notification (timeout): {e}")
            return False
        except requests.exceptions.HTTPError as e:
            logger.error(
                f"Failed to send Discord notification (HTTP error): {e}"
            )
            return False
        except Exception as e:
            logger.error(
                f"Failed to send Discord notification (unexpected error): {e}"
            )
            return False

    return wrapper


def build_embed(text: str, category: str) -> dict[str, Any]:
    """Turn a multi-line message into a Discord embed

    The first line becomes the title, the rest the description.
    """
    title, _, body = text.partition("\n")
    if len(body) > MAX_DESCRIPTION_LENGTH:
        body = body[: MAX_DESCRIPTION_LENGTH - 16] + "\n... (truncated)"

    embed: dict[str, Any] = {
        "title": title[:256],
        "color": CATEGORY_COLORS.get(category, DEFAULT_COLOR),
        "footer": {"text": category},
        "timestamp": datetime.now().isoformat(),
    }
    if body:
        embed["description"] = body
    return embed


class DiscordNotifier:
    """Discord webhook notification service"""

    def __init__(
        self,
        webhook_url: str | None,
        category_webhooks: dict[str, str] | None = None,
    ):
        """Initialise Discord notifier

        Args:
            webhook_url: Default Discord webhook URL
            category_webhooks: Webhook URLs overriding the default per category
        """
        self.webhook_url = webhook_url
        self.category_webhooks = category_webhooks or {}

    def webhook_for(self, category: str) -> str | None:
        return self.category_webhooks.get(category) or self.webhook_url

    @_handle_discord_errors
    def notify(self, text: str, category: str) -> bool:
        """Send a message to the webhook for ``category``

        Returns:
            True if notification sent successfully, False otherwise
        """
        webhook_url = self.webhook_for(category)
        if not webhook_url:
            logger.debug(
                "No Discord webhook URL configured, skipping notification"
            )
            return False

        response = requests.post(
            webhook_url,
            json={"embeds": [build_embed(text, category)]},
            headers={"Content-Type": "application/json"},
            timeout=10,
        )
        response.raise_for_status()

        logger.info(f"Discord {category} notification sent successfully")
        return True
