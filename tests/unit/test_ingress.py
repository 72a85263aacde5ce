"""Unit tests for the ingress dispatcher"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from snipe.shared.constants import CATEGORY_SIGNAL
from snipe.trading.filters import NewPairFilter
from snipe.trading.ingress import IngressDispatcher
from tests.factories import FeedFactory, TickFactory


@pytest.fixture
def dispatcher(position_engine, notifier):
    return IngressDispatcher(
        position_engine,
        NewPairFilter(),
        sol_investment_amount=0.01,
        notifier=notifier,
    )


@pytest.mark.asyncio
class TestHandleMessage:
    """Tests for message routing"""

    async def test_other_channels_are_ignored(self, dispatcher, test_db):
        await dispatcher.handle_message(
            FeedFactory.message(FeedFactory.admissible_entry(), channel="trending")
        )

        assert test_db.count_active_positions() == 0

    async def test_admitted_token_opens_position_and_signals(
        self, dispatcher, test_db, notifier
    ):
        await dispatcher.handle_message(
            FeedFactory.message(FeedFactory.admissible_entry())
        )

        assert test_db.get_position("MintAAA") is not None
        signals = [
            c.args for c in notifier.notify.call_args_list if c.args[1] == CATEGORY_SIGNAL
        ]
        assert len(signals) == 1
        assert "MintAAA" in signals[0][0]

    async def test_rejected_token_is_not_opened(self, dispatcher, test_db, notifier):
        await dispatcher.handle_message(
            FeedFactory.message(FeedFactory.admissible_entry(hd=10))
        )

        assert test_db.count_active_positions() == 0
        notifier.notify.assert_not_called()

    async def test_existing_position_is_updated(self, dispatcher, test_db):
        await dispatcher.handle_message(
            FeedFactory.message(FeedFactory.admissible_entry(market_cap=30000))
        )

        # No longer admissible, but the position already exists
        await dispatcher.handle_message(
            FeedFactory.message(FeedFactory.admissible_entry(market_cap=45000, hd=1))
        )

        position = test_db.get_position("MintAAA")
        assert position.current_price == 45000
        assert position.highest_price == 45000

    async def test_invalid_entries_are_skipped(self, dispatcher, test_db):
        await dispatcher.handle_message(
            FeedFactory.message(
                FeedFactory.admissible_entry(address="bad", mc=float("nan")),
                {"s": "NOADDR", "mc": 30000},
                "not-a-dict",
                FeedFactory.admissible_entry(address="MintOK", symbol="OK"),
            )
        )

        assert [p.address for p in test_db.get_active_positions()] == ["MintOK"]

    async def test_malformed_payload(self, dispatcher, test_db):
        await dispatcher.handle_message({"channel": "new_pair_update", "data": "oops"})

        assert test_db.count_active_positions() == 0

    async def test_last_tick_per_address_wins(self, dispatcher, position_engine):
        position_engine.get_position = MagicMock(return_value=object())
        position_engine.update = AsyncMock()

        await dispatcher.handle_message(
            FeedFactory.message(
                FeedFactory.admissible_entry(market_cap=30000),
                FeedFactory.admissible_entry(market_cap=31000),
            )
        )

        position_engine.update.assert_awaited_once_with("MintAAA", 31000, 0)

    async def test_error_in_one_token_does_not_stop_others(
        self, dispatcher, position_engine, test_db
    ):
        original_create = position_engine.create

        async def create(tick, sol):
            if tick.address == "MintBAD":
                raise RuntimeError("database locked")
            return await original_create(tick, sol)

        position_engine.create = create

        await dispatcher.handle_message(
            FeedFactory.message(
                FeedFactory.admissible_entry(address="MintBAD", symbol="BAD"),
                FeedFactory.admissible_entry(address="MintOK", symbol="OK"),
            )
        )

        assert [p.address for p in test_db.get_active_positions()] == ["MintOK"]
        assert not dispatcher.is_processing("MintBAD")


@pytest.mark.asyncio
class TestProcessingGuard:
    """Tests for per-address serialisation"""

    async def test_tick_dropped_while_same_address_processing(
        self, dispatcher, position_engine
    ):
        release = asyncio.Event()

        async def slow_update(address, price, lfg):
            await release.wait()

        position_engine.get_position = MagicMock(return_value=object())
        position_engine.update = AsyncMock(side_effect=slow_update)

        first = asyncio.create_task(
            dispatcher.process_tick(TickFactory.tick(price=21000))
        )
        await asyncio.sleep(0)
        assert dispatcher.is_processing("MintAAA")

        await dispatcher.process_tick(TickFactory.tick(price=22000))
        release.set()
        await first

        position_engine.update.assert_awaited_once_with("MintAAA", 21000, 0)
        assert not dispatcher.is_processing("MintAAA")

    async def test_different_addresses_run_concurrently(
        self, dispatcher, position_engine
    ):
        release = asyncio.Event()
        started = []

        async def slow_update(address, price, lfg):
            started.append(address)
            await release.wait()

        position_engine.get_position = MagicMock(return_value=object())
        position_engine.update = AsyncMock(side_effect=slow_update)

        task = asyncio.create_task(
            dispatcher.handle_message(
                FeedFactory.message(
                    FeedFactory.admissible_entry(address="A"),
                    FeedFactory.admissible_entry(address="B"),
                )
            )
        )
        for _ in range(5):
            await asyncio.sleep(0)

        assert sorted(started) == ["A", "B"]
        release.set()
        await task
