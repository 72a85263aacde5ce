"""Trading database persistence models and mappers"""

from .mappers import (
    map_order_to_table,
    map_position_to_table,
    map_table_to_order,
    map_table_to_position,
    map_table_to_trade,
    map_trade_to_table,
)
from .models import (
    OrderTable,
    PaperBalanceTable,
    PositionTable,
    TradeHistoryTable,
)

__all__ = [
    "OrderTable",
    "PaperBalanceTable",
    "PositionTable",
    "TradeHistoryTable",
    "map_order_to_table",
    "map_position_to_table",
    "map_table_to_order",
    "map_table_to_position",
    "map_table_to_trade",
    "map_trade_to_table",
]
