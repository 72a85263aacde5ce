"""Retry policy for FAILED orders"""

from datetime import datetime, timedelta

from snipe.domain.models import Order, OrderStatus, OrderType, TriggerType
from snipe.trading.core.config import RetryConfig


def retry_delay(retry_count: int, config: RetryConfig) -> timedelta:
    """Backoff before the next attempt, doubling per failed attempt

    >>> retry_delay(1, RetryConfig(backoff_seconds=30))
    datetime.timedelta(seconds=30)
    >>> retry_delay(2, RetryConfig(backoff_seconds=30))
    datetime.timedelta(seconds=60)
    """
    return timedelta(seconds=config.backoff_seconds * 2 ** max(retry_count - 1, 0))


def is_retry_eligible(order: Order, config: RetryConfig, now: datetime) -> bool:
    """Whether a FAILED order may go back to PENDING

    Only conditional sell orders are retried. Buys are compensated by
    deleting the position and immediate orders are operator actions.
    """
    if order.status is not OrderStatus.FAILED:
        return False
    if order.type is OrderType.MARKET_BUY:
        return False
    if order.trigger_type is TriggerType.IMMEDIATE:
        return False
    if order.retry_count > config.max_retries:
        return False

    failed_at = order.failed_at or order.created_at
    return now - failed_at >= retry_delay(order.retry_count, config)
