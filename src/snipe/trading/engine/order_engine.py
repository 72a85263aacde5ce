"""Order engine: creation, trigger evaluation and execution of orders.

Every status change goes through the order state machine and is written to
the database before the next step runs. Execution of a given order is
mutually exclusive: a second request while the first is in flight is
refused without side effects.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from loguru import logger

from snipe.domain.models import (
    ExecutionOutcome,
    ExecutionResult,
    Order,
    OrderCreationParams,
    OrderStatus,
    OrderType,
    Position,
    TradeHistoryRecord,
    TriggerCondition,
    TriggerType,
    calculate_gain,
    validate_order_params,
)
from snipe.domain.notifications import Notifier
from snipe.infrastructure.executors import TradeExecutor
from snipe.shared.constants import (
    CATEGORY_STOP_LOSS,
    CATEGORY_TAKE_PROFIT,
    CATEGORY_TRADE,
)
from snipe.shared.guard import InFlightGuard
from snipe.trading.core.config import RetryConfig, StrategyConfig
from snipe.trading.data import Database
from snipe.trading.engine.retry import is_retry_eligible

ALREADY_EXECUTING = "Order already executing"


def check_condition(
    actual: float, condition: TriggerCondition, target: float
) -> bool:
    """Compare an observed value against an order threshold"""
    if condition is TriggerCondition.GTE:
        return actual >= target
    if condition is TriggerCondition.LTE:
        return actual <= target
    if condition is TriggerCondition.EQ:
        return actual == target
    return False


def should_trigger(order: Order, position: Position) -> bool:
    """Evaluate an order's trigger predicate against the position"""
    if order.trigger_type is TriggerType.PRICE:
        return check_condition(
            position.current_price, order.trigger_condition, order.trigger_value
        )
    if order.trigger_type is TriggerType.GAIN_PERCENT:
        return check_condition(
            calculate_gain(position), order.trigger_condition, order.trigger_value
        )
    if order.trigger_type is TriggerType.LFG_FLAG:
        return position.lfg == order.trigger_value
    if order.trigger_type is TriggerType.IMMEDIATE:
        return True
    return False


def sell_amount(balance: int, sell_ratio: float) -> int:
    """Raw token units to sell: floor(balance * ratio / 100)

    >>> sell_amount(1000, 50)
    500
    >>> sell_amount(999, 33.3)
    332
    """
    return int(Decimal(balance) * Decimal(str(sell_ratio)) / 100)


class OrderEngine:
    """Creates orders and drives them through PENDING to a final state"""

    def __init__(
        self,
        db: Database,
        executor: TradeExecutor,
        notifier: Notifier | None = None,
        strategy_config: StrategyConfig | None = None,
        retry_config: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialise order engine

        Args:
            db: Database holding orders and positions
            executor: Swap venue used for buys, sells and balance lookups
            notifier: Optional sink for trade notifications
            strategy_config: Default order settings (LFG sell delay)
            retry_config: Requeue policy for FAILED orders
            sleep: Coroutine used for the LFG pre-sell delay
            clock: Source of timestamps
        """
        self.db = db
        self.executor = executor
        self.notifier = notifier
        self.strategy_config = strategy_config or StrategyConfig()
        self.retry_config = retry_config or RetryConfig()
        self._sleep = sleep
        self._clock = clock
        self._executing = InFlightGuard()
        self._order_counter = 0

    # Creation

    def generate_order_id(self, position_id: str, order_type: OrderType) -> str:
        self._order_counter += 1
        millis = int(time.time() * 1000)
        return (
            f"{position_id}_{order_type.value}_{millis}_"
            f"{self._order_counter}_{uuid4().hex[:5]}"
        )

    def create_order(self, params: OrderCreationParams) -> Order:
        """Validate and persist a new PENDING order

        Raises:
            OrderValidationError: If the parameters are not allowed
        """
        validate_order_params(params)

        order = Order(
            id=self.generate_order_id(params.position_id, params.type),
            position_id=params.position_id,
            type=params.type,
            sell_ratio=params.sell_ratio,
            trigger_type=params.trigger_type,
            trigger_condition=params.trigger_condition,
            trigger_value=params.trigger_value,
            trigger_description=params.trigger_description,
            description=params.description,
            created_at=self._clock(),
        )
        self.db.insert_order(order)
        logger.info(
            f"Created order: {order.type.value} ({order.sell_ratio}%) "
            f"for {order.position_id}"
        )
        return order

    def create_default_orders(self, position: Position) -> list[Order]:
        """Attach the configured exit orders to a new position"""
        config = self.strategy_config
        params = []

        params.append(
            OrderCreationParams(
                position_id=position.id,
                type=OrderType.STOP_LOSS,
                sell_ratio=100,
                trigger_type=TriggerType.GAIN_PERCENT,
                trigger_condition=TriggerCondition.LTE,
                trigger_value=config.initial_stop_loss,
                trigger_description=f"Gain <= {config.initial_stop_loss}%",
                description="Initial stop loss",
            )
        )

        if (
            config.double_sell_ratio > 0
            and position.entry_price < config.double_profit_max_entry
        ):
            params.append(
                OrderCreationParams(
                    position_id=position.id,
                    type=OrderType.TAKE_PROFIT,
                    sell_ratio=config.double_sell_ratio,
                    trigger_type=TriggerType.GAIN_PERCENT,
                    trigger_condition=TriggerCondition.GTE,
                    trigger_value=config.double_profit_threshold,
                    trigger_description=f"Gain >= {config.double_profit_threshold}%",
                    description="Double profit take profit",
                )
            )

        targets = (
            (config.target_mc_1, config.target_mc_1_ratio, "Target MC 1"),
            (config.target_mc_2, config.target_mc_2_ratio, "Target MC 2"),
        )
        for target, ratio, label in targets:
            if target > 0 and ratio > 0:
                params.append(
                    OrderCreationParams(
                        position_id=position.id,
                        type=OrderType.TAKE_PROFIT,
                        sell_ratio=ratio,
                        trigger_type=TriggerType.PRICE,
                        trigger_condition=TriggerCondition.GTE,
                        trigger_value=target,
                        trigger_description=f"MC >= {target:,.0f}",
                        description=f"{label} take profit",
                    )
                )

        if config.lfg_sell_ratio > 0:
            params.append(
                OrderCreationParams(
                    position_id=position.id,
                    type=OrderType.LFG_SELL,
                    sell_ratio=config.lfg_sell_ratio,
                    trigger_type=TriggerType.LFG_FLAG,
                    trigger_condition=TriggerCondition.EQ,
                    trigger_value=1,
                    trigger_description="LFG flag raised",
                    description="LFG sell",
                )
            )

        orders = [self.create_order(p) for p in params]
        logger.info(f"Created {len(orders)} default orders for {position.symbol}")
        return orders

    # Evaluation and execution

    async def evaluate_and_execute(self, position: Position) -> bool:
        """Run every triggered PENDING order of a position, in creation order

        Returns:
            True if the position must be closed: a 100% order executed or
            the wallet holds no balance
        """
        for order in self.db.get_pending_orders(position.id):
            if not should_trigger(order, position):
                continue

            # An earlier execution in this pass may have cancelled it
            current = self.db.get_order(order.id)
            if current is None or current.status is not OrderStatus.PENDING:
                logger.info(f"Order {order.id} is no longer pending, skipping")
                continue
            order = current

            logger.info(
                f"Order triggered: {order.type.value} for {position.symbol} "
                f"({order.trigger_description})"
            )
            self._mark_triggered(order)
            result = await self.execute(order, position)

            if result.should_close_position:
                logger.info(
                    f"No balance left for {position.symbol}, closing position"
                )
                return True

            if result.outcome is ExecutionOutcome.EXECUTED and order.sell_ratio >= 100:
                logger.info(
                    f"Position {position.symbol} will be closed due to 100% sell order"
                )
                return True

        return False

    async def execute(self, order: Order, position: Position) -> ExecutionResult:
        """Execute a TRIGGERED order and record the outcome

        Executor errors become a FAILED order; database errors propagate.
        """
        if not self._executing.try_acquire(order.id):
            logger.warning(f"Order {order.id} is already executing, skipping")
            return ExecutionResult.failed(ALREADY_EXECUTING)

        try:
            if order.status is not OrderStatus.TRIGGERED:
                return ExecutionResult.failed(
                    f"Order {order.id} is {order.status.value}, not TRIGGERED"
                )

            order.transition_to(OrderStatus.EXECUTING)
            self.db.update_order(order)

            try:
                result = await self._dispatch(order, position)
            except Exception as e:
                logger.error(f"Order {order.id} execution raised: {e}")
                result = ExecutionResult.failed(str(e))

            await self._record_outcome(order, position, result)
            return result
        finally:
            self._executing.release(order.id)

    async def create_and_execute_immediate(
        self, params: OrderCreationParams, position: Position
    ) -> bool:
        """Create an order and execute it straight away

        Returns:
            True if the execution succeeded (including no balance left)
        """
        order = self.create_order(params)
        self._mark_triggered(order)
        result = await self.execute(order, position)
        return result.succeeded

    async def execute_buy(self, position: Position) -> ExecutionResult:
        """Open a position with an immediate market buy"""
        order = self.create_order(
            OrderCreationParams(
                position_id=position.id,
                type=OrderType.MARKET_BUY,
                sell_ratio=100,
                trigger_type=TriggerType.IMMEDIATE,
                trigger_condition=TriggerCondition.EQ,
                trigger_value=0,
                trigger_description="Immediate",
                description="Opening buy",
            )
        )
        self._mark_triggered(order)
        return await self.execute(order, position)

    def is_executing(self, order_id: str) -> bool:
        return order_id in self._executing

    async def _dispatch(self, order: Order, position: Position) -> ExecutionResult:
        if order.type is OrderType.MARKET_BUY:
            return await self.executor.buy(position)

        if (
            order.type is OrderType.LFG_SELL
            and self.strategy_config.lfg_sell_delay_seconds > 0
        ):
            await self._sleep(self.strategy_config.lfg_sell_delay_seconds)

        balance = await self.executor.get_balance(position.address)
        if balance is None:
            return ExecutionResult.failed("Token balance unavailable")
        if balance <= 0:
            return ExecutionResult.no_balance()

        amount = sell_amount(balance, order.sell_ratio)
        if amount <= 0:
            return ExecutionResult.failed(
                f"Sell amount rounds to zero (balance {balance})"
            )

        return await self.executor.sell(
            position.address,
            position.symbol,
            calculate_gain(position),
            amount,
            order.sell_ratio,
            order.description,
        )

    def _mark_triggered(self, order: Order) -> None:
        order.transition_to(OrderStatus.TRIGGERED)
        order.triggered_at = self._clock()
        self.db.update_order(order)

    async def _record_outcome(
        self, order: Order, position: Position, result: ExecutionResult
    ) -> None:
        now = self._clock()

        if result.outcome is ExecutionOutcome.FAILED:
            order.transition_to(OrderStatus.FAILED)
            order.failed_at = now
            order.error = result.error
            order.retry_count += 1
            self.db.update_order(order)
            logger.error(
                f"Order {order.type.value} failed for {position.symbol}: {result.error}"
            )
            await self._notify(
                f"❌ {order.type.value} Failed\n"
                f"Symbol: {position.symbol}\n"
                f"Error: {result.error}",
                CATEGORY_TRADE,
            )
            return

        order.transition_to(OrderStatus.COMPLETED)
        order.executed_at = now

        if result.outcome is ExecutionOutcome.NO_BALANCE:
            order.error = "No token balance available"
            self.db.update_order(order)
            return

        order.signature = result.signature
        self.db.update_order(order)
        logger.info(
            f"Order {order.type.value} executed for {position.symbol}: {result.signature}"
        )

        if not order.is_sell:
            await self._notify(
                f"✅ Buy Order Executed\n"
                f"Symbol: {position.symbol}\n"
                f"SOL Invested: {position.sol_invested}\n"
                f"Tx: {result.signature}",
                CATEGORY_TRADE,
            )
            return

        gain = calculate_gain(position)
        if result.signature:
            self.db.insert_trade_history(
                TradeHistoryRecord(
                    position_id=position.id,
                    order_id=order.id,
                    symbol=position.symbol,
                    address=position.address,
                    type=order.type,
                    sell_ratio=order.sell_ratio,
                    entry_price=position.entry_price,
                    exit_price=position.current_price,
                    gain_percent=gain,
                    executed_at=now,
                    signature=result.signature,
                    reason=order.description,
                )
            )

        category = (
            CATEGORY_STOP_LOSS
            if order.type is OrderType.STOP_LOSS
            else CATEGORY_TAKE_PROFIT
        )
        await self._notify(
            f"🔴 {order.type.value} Executed\n"
            f"Symbol: {position.symbol}\n"
            f"Gain: {gain:.2f}%\n"
            f"Sell Ratio: {order.sell_ratio}%\n"
            f"Reason: {order.description}\n"
            f"Tx: {result.signature}",
            category,
        )

    # Cancellation and retry

    def cancel(self, order_id: str) -> bool:
        """Cancel a PENDING order

        Returns:
            True if the order was cancelled, False if it was not PENDING
        """
        cancelled = self.db.cancel_order(order_id)
        if cancelled:
            logger.info(f"Cancelled order {order_id}")
        return cancelled

    def cancel_all_for_position(self, position_id: str) -> int:
        count = self.db.cancel_position_orders(position_id)
        if count:
            logger.info(f"Cancelled {count} orders for {position_id}")
        return count

    def retry_failed_orders(self) -> int:
        """Requeue eligible FAILED orders back to PENDING

        Returns:
            Number of orders requeued
        """
        now = self._clock()
        requeued = 0

        for order in self.db.get_failed_orders():
            if not is_retry_eligible(order, self.retry_config, now):
                continue
            if self.db.get_position(order.position_id) is None:
                continue

            order.transition_to(OrderStatus.PENDING)
            self.db.update_order(order)
            requeued += 1
            logger.info(
                f"Requeued order {order.id} (attempt {order.retry_count + 1})"
            )

        return requeued

    async def _notify(self, text: str, category: str) -> None:
        """Deliver ``text`` from a worker thread, the notifier may block"""
        if self.notifier is not None:
            await asyncio.to_thread(self.notifier.notify, text, category)
