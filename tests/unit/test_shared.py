"""Tests for shared helpers"""

import pytest

from snipe.shared.format import (
    format_market_cap,
    format_percentage,
    format_value,
    generate_token_message,
)
from snipe.shared.guard import InFlightGuard
from tests.factories import FeedFactory


class TestInFlightGuard:
    def test_second_acquire_is_refused(self):
        guard = InFlightGuard()

        assert guard.try_acquire("order-1")
        assert not guard.try_acquire("order-1")
        assert guard.try_acquire("order-2")
        assert len(guard) == 2

    def test_release_allows_reacquire(self):
        guard = InFlightGuard()
        guard.try_acquire("order-1")

        guard.release("order-1")

        assert "order-1" not in guard
        assert guard.try_acquire("order-1")

    def test_hold_releases_on_error(self):
        guard = InFlightGuard()

        with pytest.raises(RuntimeError):
            with guard.hold("MintAAA") as acquired:
                assert acquired
                assert "MintAAA" in guard
                raise RuntimeError("boom")

        assert "MintAAA" not in guard

    def test_nested_hold_does_not_release_outer(self):
        guard = InFlightGuard()

        with guard.hold("MintAAA") as outer:
            with guard.hold("MintAAA") as inner:
                assert outer
                assert not inner
            assert "MintAAA" in guard

        assert len(guard) == 0


class TestFormatting:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (999, "$999.00"),
            (25000, "$25.00K"),
            (1_500_000, "$1.50M"),
            (2_000_000_000, "$2.00B"),
            ("30000", "$30.00K"),
            (None, "$0"),
            ("n/a", "$0"),
        ],
    )
    def test_format_market_cap(self, value, expected):
        assert format_market_cap(value) == expected

    def test_negative_values_keep_sign(self):
        assert format_value(-2500, "$", 1) == "-$2.5K"

    def test_format_percentage(self):
        assert format_percentage(0.2) == "20.00%"
        assert format_percentage("0.05", 1) == "5.0%"
        assert format_percentage("bad") == "N/A"

    def test_token_message(self):
        entry = FeedFactory.admissible_entry(symbol="PEPE", market_cap=42000, hd=512)

        message = generate_token_message(entry)

        assert message.splitlines()[0] == "🎯 New token matched the admission filter"
        assert "PEPE" in message
        assert "MintAAA" in message
        assert "$42.00K" in message
        assert "Holders: 512" in message
        assert "Bundled: N/A" in message
