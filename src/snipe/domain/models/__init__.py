"""Domain models"""

from .execution import ExecutionOutcome, ExecutionResult
from .order import (
    ORDER_TRANSITIONS,
    Order,
    OrderCreationParams,
    OrderStatus,
    OrderType,
    TriggerCondition,
    TriggerType,
    validate_order_params,
)
from .position import (
    Position,
    PositionDetails,
    PositionStatus,
    calculate_drawdown,
    calculate_gain,
)
from .stats import TradingStats
from .token import TokenTick
from .trade import TradeHistoryRecord

__all__ = [
    "ORDER_TRANSITIONS",
    "ExecutionOutcome",
    "ExecutionResult",
    "Order",
    "OrderCreationParams",
    "OrderStatus",
    "OrderType",
    "Position",
    "PositionDetails",
    "PositionStatus",
    "TokenTick",
    "TradeHistoryRecord",
    "TradingStats",
    "TriggerCondition",
    "TriggerType",
    "calculate_drawdown",
    "calculate_gain",
    "validate_order_params",
]
