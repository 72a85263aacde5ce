"""Order and position engines"""

from .order_engine import OrderEngine, check_condition, sell_amount, should_trigger
from .position_engine import PositionEngine
from .retry import is_retry_eligible, retry_delay

__all__ = [
    "OrderEngine",
    "PositionEngine",
    "check_condition",
    "is_retry_eligible",
    "retry_delay",
    "sell_amount",
    "should_trigger",
]
