"""Consolidated exceptions for Snipe trading bot.

All custom exceptions are defined here to provide a single source of truth
for error handling across the application.
"""


class SnipeError(Exception):
    """Base exception for Snipe errors"""

    pass


class ConfigurationError(SnipeError):
    """Raised when configuration is invalid or missing"""

    pass


class TradingError(SnipeError):
    """Base trading error"""

    pass


class OrderError(TradingError):
    """Raised when an order operation fails"""

    pass


class OrderValidationError(OrderError):
    """Raised when order creation parameters are invalid"""

    pass


class InvalidOrderTransitionError(OrderError):
    """Raised when an order status change is not allowed"""

    def __init__(self, order_id: str, current: str, target: str):
        self.order_id = order_id
        self.current = current
        self.target = target
        super().__init__(
            f"Order {order_id}: illegal transition {current} -> {target}"
        )


class FeedError(SnipeError):
    """Raised when the tick feed cannot be read"""

    pass
