"""Trade executors"""

from .paper import PaperTradeExecutor
from .protocols import TradeExecutor

__all__ = ["PaperTradeExecutor", "TradeExecutor"]
