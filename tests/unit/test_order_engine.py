"""Unit tests for the order engine"""

import asyncio
import time
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from snipe.domain.models import (
    ExecutionOutcome,
    ExecutionResult,
    OrderStatus,
    OrderType,
    TriggerCondition,
    TriggerType,
)
from snipe.shared.constants import CATEGORY_STOP_LOSS, CATEGORY_TAKE_PROFIT, CATEGORY_TRADE
from snipe.shared.exceptions import OrderValidationError
from snipe.trading.core.config import StrategyConfig
from snipe.trading.engine import OrderEngine, check_condition, sell_amount, should_trigger
from snipe.trading.engine.order_engine import ALREADY_EXECUTING
from tests.factories import OrderFactory, PositionFactory


@pytest.fixture
def position(test_db, paper_executor):
    """Stored position holding 1000 raw token units"""
    position = PositionFactory.position()
    test_db.insert_position(position)
    paper_executor.balances[position.address] = 1000
    return position


def _triggered(order_engine, **params):
    order = order_engine.create_order(OrderFactory.params(**params))
    order_engine._mark_triggered(order)
    return order


class TestTriggerPredicates:
    """Tests for trigger evaluation"""

    @pytest.mark.parametrize(
        "actual,condition,target,expected",
        [
            (10, TriggerCondition.GTE, 10, True),
            (9, TriggerCondition.GTE, 10, False),
            (-65, TriggerCondition.LTE, -65, True),
            (-64, TriggerCondition.LTE, -65, False),
            (1, TriggerCondition.EQ, 1, True),
            (0, TriggerCondition.EQ, 1, False),
        ],
    )
    def test_check_condition(self, actual, condition, target, expected):
        assert check_condition(actual, condition, target) is expected

    def test_price_trigger(self):
        position = PositionFactory.position(entry_price=20000, current_price=200000)
        order = OrderFactory.order(trigger_value=200000)

        assert should_trigger(order, position)

    def test_gain_trigger(self):
        position = PositionFactory.position(entry_price=20000, current_price=7000)
        order = OrderFactory.order(
            type=OrderType.STOP_LOSS,
            trigger_type=TriggerType.GAIN_PERCENT,
            trigger_condition=TriggerCondition.LTE,
            trigger_value=-65,
        )

        assert should_trigger(order, position)

    def test_lfg_trigger(self):
        order = OrderFactory.order(
            type=OrderType.LFG_SELL,
            trigger_type=TriggerType.LFG_FLAG,
            trigger_condition=TriggerCondition.EQ,
            trigger_value=1,
        )

        assert should_trigger(order, PositionFactory.position(lfg=1))
        assert not should_trigger(order, PositionFactory.position(lfg=0))

    def test_immediate_trigger_always_fires(self):
        order = OrderFactory.order(
            trigger_type=TriggerType.IMMEDIATE,
            trigger_condition=TriggerCondition.EQ,
            trigger_value=0,
        )

        assert should_trigger(order, PositionFactory.position())

    @pytest.mark.parametrize(
        "balance,ratio,expected",
        [(1000, 50, 500), (999, 33.3, 332), (1, 50, 0), (10**18, 65, 65 * 10**16)],
    )
    def test_sell_amount_floors(self, balance, ratio, expected):
        assert sell_amount(balance, ratio) == expected


class TestOrderCreation:
    """Tests for order creation"""

    def test_create_order_persists_pending(self, order_engine, position, test_db):
        order = order_engine.create_order(OrderFactory.params())

        stored = test_db.get_order(order.id)
        assert stored.status is OrderStatus.PENDING
        assert stored.sell_ratio == 50

    def test_order_ids_are_unique(self, order_engine, position):
        ids = {
            order_engine.create_order(OrderFactory.params()).id for _ in range(20)
        }

        assert len(ids) == 20
        assert all(i.startswith("MintAAA_TAKE_PROFIT_") for i in ids)

    def test_invalid_order_is_not_persisted(self, order_engine, position, test_db):
        with pytest.raises(OrderValidationError):
            order_engine.create_order(OrderFactory.params(sell_ratio=0))

        assert test_db.get_position_orders(position.id) == []

    def test_default_orders(self, order_engine, position):
        orders = order_engine.create_default_orders(position)

        summary = [(o.type, o.trigger_type, o.trigger_value, o.sell_ratio) for o in orders]
        assert summary == [
            (OrderType.STOP_LOSS, TriggerType.GAIN_PERCENT, -65, 100),
            (OrderType.TAKE_PROFIT, TriggerType.GAIN_PERCENT, 100, 50),
            (OrderType.TAKE_PROFIT, TriggerType.PRICE, 200000, 50),
            (OrderType.TAKE_PROFIT, TriggerType.PRICE, 900000, 100),
            (OrderType.LFG_SELL, TriggerType.LFG_FLAG, 1, 65),
        ]

    def test_default_orders_skip_doubling_above_entry_ceiling(
        self, order_engine, test_db
    ):
        position = PositionFactory.position(address="pricey", entry_price=45000)
        test_db.insert_position(position)

        orders = order_engine.create_default_orders(position)

        assert len(orders) == 4
        assert not any(o.trigger_type is TriggerType.GAIN_PERCENT and o.sell_ratio == 50 for o in orders)

    def test_default_orders_skip_zero_ratios(self, test_db, paper_executor, position):
        engine = OrderEngine(
            test_db,
            paper_executor,
            strategy_config=StrategyConfig(double_sell_ratio=0, lfg_sell_ratio=0),
        )

        orders = engine.create_default_orders(position)

        assert [o.type for o in orders] == [
            OrderType.STOP_LOSS,
            OrderType.TAKE_PROFIT,
            OrderType.TAKE_PROFIT,
        ]


@pytest.mark.asyncio
class TestExecute:
    """Tests for order execution"""

    async def test_sell_completes_and_records_history(
        self, order_engine, position, test_db, paper_executor, notifier
    ):
        order = _triggered(order_engine)

        result = await order_engine.execute(order, position)

        assert result.outcome is ExecutionOutcome.EXECUTED
        stored = test_db.get_order(order.id)
        assert stored.status is OrderStatus.COMPLETED
        assert stored.signature == result.signature
        assert stored.executed_at is not None
        assert paper_executor.balances[position.address] == 500

        history = test_db.get_trade_history()
        assert len(history) == 1
        assert history[0].order_id == order.id
        assert history[0].signature == result.signature

        text, category = notifier.notify.call_args.args
        assert text.startswith("🔴 TAKE_PROFIT Executed")
        assert category == CATEGORY_TAKE_PROFIT

    async def test_stop_loss_notifies_stop_loss_channel(
        self, order_engine, position, notifier
    ):
        order = _triggered(
            order_engine,
            type=OrderType.STOP_LOSS,
            sell_ratio=100,
            trigger_type=TriggerType.GAIN_PERCENT,
            trigger_condition=TriggerCondition.LTE,
            trigger_value=-65,
        )

        await order_engine.execute(order, position)

        assert notifier.notify.call_args.args[1] == CATEGORY_STOP_LOSS

    async def test_zero_balance_completes_without_history(
        self, order_engine, position, test_db, paper_executor, notifier
    ):
        paper_executor.balances[position.address] = 0
        order = _triggered(order_engine)

        result = await order_engine.execute(order, position)

        assert result.should_close_position
        assert test_db.get_order(order.id).status is OrderStatus.COMPLETED
        assert test_db.get_trade_history() == []
        notifier.notify.assert_not_called()

    async def test_executor_failure_marks_failed(
        self, order_engine, position, test_db, paper_executor, notifier
    ):
        paper_executor.sell = AsyncMock(return_value=ExecutionResult.failed("slippage"))
        order = _triggered(order_engine)

        result = await order_engine.execute(order, position)

        assert not result.succeeded
        stored = test_db.get_order(order.id)
        assert stored.status is OrderStatus.FAILED
        assert stored.error == "slippage"
        assert stored.retry_count == 1
        assert stored.failed_at is not None
        assert notifier.notify.call_args.args[1] == CATEGORY_TRADE

    async def test_executor_exception_marks_failed(
        self, order_engine, position, test_db, paper_executor
    ):
        paper_executor.get_balance = AsyncMock(side_effect=RuntimeError("rpc down"))
        order = _triggered(order_engine)

        result = await order_engine.execute(order, position)

        assert result.error == "rpc down"
        assert test_db.get_order(order.id).status is OrderStatus.FAILED
        assert not order_engine.is_executing(order.id)

    async def test_unavailable_balance_fails(
        self, order_engine, position, test_db, paper_executor
    ):
        paper_executor.get_balance = AsyncMock(return_value=None)
        order = _triggered(order_engine)

        result = await order_engine.execute(order, position)

        assert result.outcome is ExecutionOutcome.FAILED
        assert test_db.get_order(order.id).status is OrderStatus.FAILED

    async def test_sell_amount_rounding_to_zero_fails(
        self, order_engine, position, paper_executor
    ):
        paper_executor.balances[position.address] = 1
        order = _triggered(order_engine, sell_ratio=50)

        result = await order_engine.execute(order, position)

        assert result.outcome is ExecutionOutcome.FAILED
        assert paper_executor.balances[position.address] == 1

    async def test_pending_order_is_not_executed(
        self, order_engine, position, test_db, paper_executor
    ):
        order = order_engine.create_order(OrderFactory.params())

        result = await order_engine.execute(order, position)

        assert not result.succeeded
        assert test_db.get_order(order.id).status is OrderStatus.PENDING
        assert paper_executor.fills == []

    async def test_lfg_sell_waits_before_balance_check(
        self, test_db, paper_executor, position
    ):
        sleep = AsyncMock()
        engine = OrderEngine(
            test_db,
            paper_executor,
            strategy_config=StrategyConfig(lfg_sell_delay_seconds=2.0),
            sleep=sleep,
        )
        order = engine.create_order(
            OrderFactory.params(
                type=OrderType.LFG_SELL,
                sell_ratio=65,
                trigger_type=TriggerType.LFG_FLAG,
                trigger_condition=TriggerCondition.EQ,
                trigger_value=1,
            )
        )
        engine._mark_triggered(order)

        await engine.execute(order, position)

        sleep.assert_awaited_once_with(2.0)
        assert paper_executor.balances[position.address] == 350

    async def test_concurrent_execution_of_same_order(
        self, order_engine, position, test_db, paper_executor
    ):
        """Only one of two concurrent requests performs the sell"""
        release = asyncio.Event()
        original_sell = paper_executor.sell

        async def slow_sell(*args, **kwargs):
            await release.wait()
            return await original_sell(*args, **kwargs)

        paper_executor.sell = AsyncMock(side_effect=slow_sell)
        order = _triggered(order_engine)

        first = asyncio.create_task(order_engine.execute(order, position))
        await asyncio.sleep(0)
        assert order_engine.is_executing(order.id)

        second = await order_engine.execute(order, position)
        release.set()
        first_result = await first

        assert second.error == ALREADY_EXECUTING
        assert first_result.outcome is ExecutionOutcome.EXECUTED
        assert paper_executor.sell.await_count == 1
        assert test_db.get_order(order.id).status is OrderStatus.COMPLETED
        assert not order_engine.is_executing(order.id)

    async def test_buy_executes_without_history(
        self, order_engine, position, test_db, notifier
    ):
        result = await order_engine.execute_buy(position)

        assert result.outcome is ExecutionOutcome.EXECUTED
        buy = test_db.get_position_orders(position.id)[0]
        assert buy.type is OrderType.MARKET_BUY
        assert buy.status is OrderStatus.COMPLETED
        assert test_db.get_trade_history() == []
        text, category = notifier.notify.call_args.args
        assert text.startswith("✅ Buy Order Executed")
        assert category == CATEGORY_TRADE

    async def test_slow_notifier_does_not_block_other_work(
        self, test_db, paper_executor, position
    ):
        class SlowNotifier:
            def notify(self, text, category):
                time.sleep(0.3)
                return True

        engine = OrderEngine(test_db, paper_executor, notifier=SlowNotifier())
        beats = []

        async def heartbeat():
            for _ in range(8):
                beats.append(time.monotonic())
                await asyncio.sleep(0.02)

        await asyncio.gather(engine.execute_buy(position), heartbeat())

        gaps = [later - earlier for earlier, later in zip(beats, beats[1:])]
        assert max(gaps) < 0.2


@pytest.mark.asyncio
class TestEvaluateAndExecute:
    """Tests for the per-tick evaluation pass"""

    async def test_untriggered_orders_stay_pending(self, order_engine, position, test_db):
        order_engine.create_default_orders(position)

        should_close = await order_engine.evaluate_and_execute(position)

        assert should_close is False
        assert len(test_db.get_pending_orders(position.id)) == 5

    async def test_multiple_partial_sells_in_one_pass(
        self, order_engine, position, paper_executor
    ):
        order_engine.create_order(OrderFactory.params(trigger_value=30000))
        order_engine.create_order(OrderFactory.params(trigger_value=35000))
        position.apply_tick(40000, 0, datetime.now())

        should_close = await order_engine.evaluate_and_execute(position)

        assert should_close is False
        assert paper_executor.balances[position.address] == 250

    async def test_full_sell_stops_the_pass(
        self, order_engine, position, test_db, paper_executor
    ):
        order_engine.create_order(OrderFactory.params(sell_ratio=100, trigger_value=30000))
        later = order_engine.create_order(OrderFactory.params(trigger_value=30000))
        position.apply_tick(40000, 0, datetime.now())

        should_close = await order_engine.evaluate_and_execute(position)

        assert should_close is True
        assert test_db.get_order(later.id).status is OrderStatus.PENDING
        assert paper_executor.balances[position.address] == 0

    async def test_failed_full_sell_does_not_close(
        self, order_engine, position, paper_executor
    ):
        paper_executor.sell = AsyncMock(return_value=ExecutionResult.failed("no route"))
        order_engine.create_order(OrderFactory.params(sell_ratio=100, trigger_value=30000))
        position.apply_tick(40000, 0, datetime.now())

        assert await order_engine.evaluate_and_execute(position) is False

    async def test_order_cancelled_during_pass_is_skipped(
        self, order_engine, position, test_db, paper_executor
    ):
        first = order_engine.create_order(OrderFactory.params(trigger_value=30000))
        cancelled = order_engine.create_order(OrderFactory.params(trigger_value=30000))
        last = order_engine.create_order(OrderFactory.params(trigger_value=30000))
        original_sell = paper_executor.sell

        async def sell_and_cancel(*args, **kwargs):
            order_engine.cancel(cancelled.id)
            return await original_sell(*args, **kwargs)

        paper_executor.sell = AsyncMock(side_effect=sell_and_cancel)
        position.apply_tick(40000, 0, datetime.now())

        should_close = await order_engine.evaluate_and_execute(position)

        assert should_close is False
        assert test_db.get_order(first.id).status is OrderStatus.COMPLETED
        assert test_db.get_order(cancelled.id).status is OrderStatus.CANCELLED
        assert test_db.get_order(last.id).status is OrderStatus.COMPLETED
        assert paper_executor.balances[position.address] == 250


class TestCancelAndRetry:
    """Tests for cancellation and the retry pass"""

    def test_cancel(self, order_engine, position):
        order = order_engine.create_order(OrderFactory.params())

        assert order_engine.cancel(order.id) is True
        assert order_engine.cancel(order.id) is False

    def test_cancel_all_for_position(self, order_engine, position):
        order_engine.create_default_orders(position)

        assert order_engine.cancel_all_for_position(position.id) == 5

    def _failed_order(self, test_db, retry_count=1, failed_minutes_ago=5, **kwargs):
        order = OrderFactory.order(
            status=OrderStatus.FAILED,
            retry_count=retry_count,
            failed_at=datetime.now() - timedelta(minutes=failed_minutes_ago),
            **kwargs,
        )
        test_db.insert_order(order)
        return order

    def test_retry_requeues_eligible_order(self, order_engine, position, test_db):
        order = self._failed_order(test_db)

        assert order_engine.retry_failed_orders() == 1
        assert test_db.get_order(order.id).status is OrderStatus.PENDING

    def test_retry_skips_exhausted_order(self, order_engine, position, test_db):
        order = self._failed_order(test_db, retry_count=3)

        assert order_engine.retry_failed_orders() == 0
        assert test_db.get_order(order.id).status is OrderStatus.FAILED

    def test_retry_waits_for_backoff(self, order_engine, position, test_db):
        self._failed_order(test_db, failed_minutes_ago=0)

        assert order_engine.retry_failed_orders() == 0

    def test_retry_skips_buys_and_immediate_orders(self, order_engine, position, test_db):
        self._failed_order(test_db, id="buy", type=OrderType.MARKET_BUY)
        self._failed_order(
            test_db,
            id="manual",
            trigger_type=TriggerType.IMMEDIATE,
            trigger_condition=TriggerCondition.EQ,
            trigger_value=0,
        )

        assert order_engine.retry_failed_orders() == 0
