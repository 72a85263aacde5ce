"""Notification services"""

from .discord import DiscordNotifier

__all__ = ["DiscordNotifier"]
