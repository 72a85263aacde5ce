"""Data layer for Snipe trading bot"""

from .database import Database

__all__ = ["Database"]
