"""Tests for the FAILED order retry policy"""

from datetime import datetime, timedelta

from snipe.domain.models import OrderStatus, OrderType, TriggerType
from snipe.trading.core.config import RetryConfig
from snipe.trading.engine import is_retry_eligible, retry_delay
from tests.factories import OrderFactory

NOW = datetime(2026, 1, 1, 12, 0, 0)


def _failed(retry_count=1, seconds_ago=300, **kwargs):
    return OrderFactory.order(
        status=OrderStatus.FAILED,
        failed_at=NOW - timedelta(seconds=seconds_ago),
        retry_count=retry_count,
        **kwargs,
    )


def test_retry_delay_doubles():
    config = RetryConfig(backoff_seconds=10)

    assert retry_delay(0, config) == timedelta(seconds=10)
    assert retry_delay(1, config) == timedelta(seconds=10)
    assert retry_delay(2, config) == timedelta(seconds=20)
    assert retry_delay(3, config) == timedelta(seconds=40)


class TestIsRetryEligible:
    def test_failed_sell_after_backoff(self):
        assert is_retry_eligible(_failed(), RetryConfig(), NOW)

    def test_backoff_not_elapsed(self):
        order = _failed(retry_count=2, seconds_ago=59)

        assert not is_retry_eligible(order, RetryConfig(backoff_seconds=30), NOW)

    def test_backoff_boundary_is_inclusive(self):
        order = _failed(retry_count=2, seconds_ago=60)

        assert is_retry_eligible(order, RetryConfig(backoff_seconds=30), NOW)

    def test_exhausted_retries(self):
        assert is_retry_eligible(_failed(retry_count=2), RetryConfig(max_retries=2), NOW)
        assert not is_retry_eligible(
            _failed(retry_count=3), RetryConfig(max_retries=2), NOW
        )

    def test_retries_disabled(self):
        assert not is_retry_eligible(
            _failed(retry_count=1), RetryConfig(max_retries=0), NOW
        )

    def test_not_failed(self):
        order = OrderFactory.order(status=OrderStatus.PENDING)

        assert not is_retry_eligible(order, RetryConfig(), NOW)

    def test_buy_is_never_retried(self):
        order = _failed(type=OrderType.MARKET_BUY)

        assert not is_retry_eligible(order, RetryConfig(), NOW)

    def test_immediate_is_never_retried(self):
        order = _failed(trigger_type=TriggerType.IMMEDIATE)

        assert not is_retry_eligible(order, RetryConfig(), NOW)
