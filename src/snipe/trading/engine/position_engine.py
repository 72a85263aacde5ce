"""Position engine: opening, updating and closing positions"""

from datetime import datetime

from loguru import logger

from snipe.domain.models import (
    OrderCreationParams,
    OrderType,
    Position,
    PositionDetails,
    TokenTick,
    TradingStats,
    TriggerCondition,
    TriggerType,
)
from snipe.shared.exceptions import OrderValidationError
from snipe.shared.format import format_market_cap
from snipe.trading.data import Database
from snipe.trading.engine.order_engine import OrderEngine


class PositionEngine:
    """Owns position identity, risk limits and the close decision"""

    def __init__(
        self,
        db: Database,
        order_engine: OrderEngine,
        max_positions: int = 30,
    ):
        self.db = db
        self.order_engine = order_engine
        self.max_positions = max_positions

    async def create(self, tick: TokenTick, sol_invested: float) -> Position | None:
        """Open a position for a newly admitted token

        The position and its default orders are written before the buy. If
        the buy fails, or storing the orders raises, both are deleted again
        and any exception is re-raised.

        Returns:
            The new position, or None if rejected or the buy failed
        """
        active_count = self.db.count_active_positions()
        if active_count >= self.max_positions:
            logger.warning(
                f"Risk limit reached ({active_count}/{self.max_positions}), "
                f"skipping {tick.symbol}"
            )
            return None

        if self.db.get_position(tick.address) is not None:
            logger.warning(
                f"Position already exists for {tick.symbol} at {tick.address}"
            )
            return None

        now = datetime.now()
        position = Position(
            address=tick.address,
            symbol=tick.symbol,
            entry_price=tick.price,
            current_price=tick.price,
            highest_price=tick.price,
            lowest_price=tick.price,
            sol_invested=sol_invested,
            entry_time=now,
            last_updated=now,
        )
        self.db.insert_position(position)
        try:
            self.order_engine.create_default_orders(position)
            result = await self.order_engine.execute_buy(position)
        except Exception:
            logger.error(f"Opening {tick.symbol} failed, removing position")
            self.db.delete_position(position.id)
            raise

        if not result.succeeded:
            self.db.delete_position(position.id)
            logger.error(f"Buy failed for {tick.symbol}: {result.error}")
            return None

        logger.info(
            f"Position created: {tick.symbol} @ {format_market_cap(tick.price)} "
            f"(invested: {sol_invested} SOL)"
        )
        return position

    async def update(
        self, address: str, price: float, lfg: int | bool | None = 0
    ) -> Position | None:
        """Apply a tick to a position and run its triggered orders

        Returns:
            The refreshed position, or None if it does not exist or was
            closed by this update
        """
        position = self.db.get_position(address)
        if position is None:
            return None

        position.apply_tick(price, lfg, datetime.now())
        self.db.update_position(position)

        if await self.order_engine.evaluate_and_execute(position):
            self.close(address)
            return None

        return position

    def close(self, address: str) -> None:
        """Cancel pending orders and delete the position. No-op if absent."""
        position = self.db.get_position(address)
        if position is None:
            return

        cancelled = self.order_engine.cancel_all_for_position(position.id)
        self.db.delete_position(position.id)
        logger.info(
            f"Position closed: {position.symbol}, cancelled {cancelled} orders"
        )

    async def close_manually(self, address: str) -> bool:
        """Sell 100% immediately, then close the position if the sell succeeded

        Returns:
            Whether the forced sell succeeded
        """
        position = self.db.get_position(address)
        if position is None:
            return False

        success = await self.order_engine.create_and_execute_immediate(
            OrderCreationParams(
                position_id=position.id,
                type=OrderType.TAKE_PROFIT,
                sell_ratio=100,
                trigger_type=TriggerType.IMMEDIATE,
                trigger_condition=TriggerCondition.EQ,
                trigger_value=0,
                trigger_description="Manual close",
                description="Manual position close",
            ),
            position,
        )

        if success:
            self.close(address)
        else:
            logger.error(f"Manual close failed for {position.symbol}")
        return success

    async def emergency_close_all(self) -> int:
        """Manually close every active position, one at a time

        Returns:
            Number of positions closed
        """
        closed = 0
        for position in self.db.get_active_positions():
            if await self.close_manually(position.address):
                closed += 1

        logger.warning(f"Emergency close all positions executed ({closed} closed)")
        return closed

    def get_position(self, address: str) -> Position | None:
        return self.db.get_position(address)

    def get_active_positions(self) -> list[Position]:
        return self.db.get_active_positions()

    def get_position_details(self, address: str) -> PositionDetails | None:
        position = self.db.get_position(address)
        if position is None:
            return None
        return PositionDetails(
            position=position, orders=self.db.get_position_orders(position.id)
        )

    def add_custom_order(self, address: str, params: OrderCreationParams) -> bool:
        """Attach an ad hoc order to an existing position

        Returns:
            True if the order was created
        """
        position = self.db.get_position(address)
        if position is None:
            return False

        params.position_id = position.id
        try:
            self.order_engine.create_order(params)
        except OrderValidationError as e:
            logger.error(f"Failed to add custom order for {position.symbol}: {e}")
            return False
        return True

    def remove_order(self, address: str, order_id: str) -> bool:
        """Cancel one PENDING order of a position"""
        position = self.db.get_position(address)
        if position is None:
            return False

        order = self.db.get_order(order_id)
        if order is None or order.position_id != position.id:
            return False
        return self.order_engine.cancel(order_id)

    def get_stats(self) -> TradingStats:
        return self.db.get_stats()
