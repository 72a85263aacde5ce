"""Database layer using SQLModel for Snipe trading bot.

Inherits from BaseDatabase for common connection logic. The store is the
single source of truth: every read maps fresh rows to domain objects and
nothing is cached between calls.
"""

import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

from loguru import logger
from sqlalchemy import literal_column, text
from sqlmodel import col, delete, func, select

from snipe.domain.models import (
    Order,
    OrderStatus,
    Position,
    TradeHistoryRecord,
    TradingStats,
    calculate_gain,
)
from snipe.infrastructure.database.base import BaseDatabase
from snipe.infrastructure.database.trading.mappers import (
    map_order_to_table,
    map_position_to_table,
    map_table_to_order,
    map_table_to_position,
    map_table_to_trade,
    map_trade_to_table,
)
from snipe.infrastructure.database.trading.models import (
    OrderTable,
    PositionTable,
    TradeHistoryTable,
)
from snipe.shared.exceptions import InvalidOrderTransitionError

# Orders are returned in creation order; rowid breaks created_at ties
_ORDER_SEQUENCE = (col(OrderTable.created_at), literal_column("orders.rowid"))


class Database(BaseDatabase):
    """SQLite database manager for positions, orders and trade history.

    Inherits connection management from BaseDatabase.
    """

    # Position methods

    def insert_position(self, position: Position) -> Position:
        """Persist a new position

        Raises:
            sqlalchemy.exc.IntegrityError: If the address already has a position
        """
        with self.get_session() as session:
            session.add(map_position_to_table(position))
            session.commit()
        return position

    def update_position(self, position: Position) -> bool:
        """Write the mutable price and flag fields of a position

        Returns:
            True if the position row exists
        """
        with self.get_session() as session:
            table = session.get(PositionTable, position.id)
            if table is None:
                return False

            table.current_price = position.current_price
            table.highest_price = position.highest_price
            table.lowest_price = position.lowest_price
            table.last_updated = position.last_updated.isoformat()
            table.lfg = position.lfg
            session.add(table)
            session.commit()
            return True

    def get_position(self, address: str) -> Position | None:
        """Get position by token address"""
        with self.get_session() as session:
            table = session.exec(
                select(PositionTable).where(PositionTable.address == address)
            ).first()
            return map_table_to_position(table) if table else None

    def get_active_positions(self) -> list[Position]:
        """Get all active positions, newest first"""
        with self.get_session() as session:
            results = session.exec(
                select(PositionTable)
                .where(PositionTable.status == "ACTIVE")
                .order_by(col(PositionTable.entry_time).desc())
            ).all()
            return [map_table_to_position(table) for table in results]

    def count_active_positions(self) -> int:
        with self.get_session() as session:
            return session.exec(
                select(func.count())
                .select_from(PositionTable)
                .where(PositionTable.status == "ACTIVE")
            ).one()

    def delete_position(self, position_id: str) -> int:
        """Delete a position and all of its orders in one transaction

        Args:
            position_id: Position ID (token address)

        Returns:
            Number of position rows deleted (0 or 1)
        """
        with self.get_session() as session:
            orders_result = session.exec(
                delete(OrderTable).where(
                    col(OrderTable.position_id) == position_id
                )
            )
            position_result = session.exec(
                delete(PositionTable).where(col(PositionTable.id) == position_id)
            )
            session.commit()

        logger.info(
            f"Deleted position {position_id} "
            f"({orders_result.rowcount} orders removed)"
        )
        return position_result.rowcount

    # Order methods

    def insert_order(self, order: Order) -> Order:
        with self.get_session() as session:
            session.add(map_order_to_table(order))
            session.commit()
        return order

    def update_order(self, order: Order) -> bool:
        """Write the mutable lifecycle fields of an order

        The stored status may only move along the order state machine; an
        unchanged status is accepted.

        Returns:
            True if the order row exists

        Raises:
            InvalidOrderTransitionError: If the stored status cannot move to
                ``order.status``
        """
        with self.get_session() as session:
            table = session.get(OrderTable, order.id)
            if table is None:
                return False

            stored = OrderStatus(table.status)
            if stored is not order.status and not stored.can_transition_to(
                order.status
            ):
                raise InvalidOrderTransitionError(
                    order.id, stored.value, order.status.value
                )

            updated = map_order_to_table(order)
            table.status = updated.status
            table.triggered_at = updated.triggered_at
            table.executed_at = updated.executed_at
            table.failed_at = updated.failed_at
            table.signature = updated.signature
            table.error = updated.error
            table.retry_count = updated.retry_count
            session.add(table)
            session.commit()
            return True

    def update_order_status(self, order_id: str, status: OrderStatus) -> bool:
        """Move a stored order to ``status``

        Returns:
            True if the order exists and was updated

        Raises:
            InvalidOrderTransitionError: If the transition is not allowed
        """
        order = self.get_order(order_id)
        if order is None:
            return False
        order.transition_to(status)
        return self.update_order(order)

    def get_order(self, order_id: str) -> Order | None:
        with self.get_session() as session:
            table = session.get(OrderTable, order_id)
            return map_table_to_order(table) if table else None

    def get_position_orders(self, position_id: str) -> list[Order]:
        """Get every order of a position in creation order"""
        with self.get_session() as session:
            results = session.exec(
                select(OrderTable)
                .where(OrderTable.position_id == position_id)
                .order_by(*_ORDER_SEQUENCE)
            ).all()
            return [map_table_to_order(table) for table in results]

    def get_pending_orders(self, position_id: str | None = None) -> list[Order]:
        """Get PENDING orders, optionally limited to one position"""
        return self._get_orders_by_status(OrderStatus.PENDING, position_id)

    def get_failed_orders(self) -> list[Order]:
        return self._get_orders_by_status(OrderStatus.FAILED)

    def _get_orders_by_status(
        self, status: OrderStatus, position_id: str | None = None
    ) -> list[Order]:
        with self.get_session() as session:
            stmt = select(OrderTable).where(OrderTable.status == status.value)
            if position_id is not None:
                stmt = stmt.where(OrderTable.position_id == position_id)
            results = session.exec(stmt.order_by(*_ORDER_SEQUENCE)).all()
            return [map_table_to_order(table) for table in results]

    def count_orders(self, status: OrderStatus) -> int:
        with self.get_session() as session:
            return session.exec(
                select(func.count())
                .select_from(OrderTable)
                .where(OrderTable.status == status.value)
            ).one()

    def cancel_order(self, order_id: str) -> bool:
        """Cancel an order if it is still PENDING

        Returns:
            True if the order was cancelled
        """
        with self.get_session() as session:
            table = session.exec(
                select(OrderTable).where(
                    OrderTable.id == order_id,
                    OrderTable.status == OrderStatus.PENDING.value,
                )
            ).first()
            if table is None:
                return False

            table.status = OrderStatus.CANCELLED.value
            session.add(table)
            session.commit()
            return True

    def cancel_position_orders(self, position_id: str) -> int:
        """Cancel every PENDING order of a position

        Returns:
            Number of orders cancelled
        """
        with self.get_session() as session:
            pending = session.exec(
                select(OrderTable).where(
                    OrderTable.position_id == position_id,
                    OrderTable.status == OrderStatus.PENDING.value,
                )
            ).all()
            for table in pending:
                table.status = OrderStatus.CANCELLED.value
                session.add(table)
            session.commit()
            return len(pending)

    # Trade history methods

    def insert_trade_history(self, record: TradeHistoryRecord) -> int:
        """Append a trade history row

        Returns:
            ID of the new row
        """
        with self.get_session() as session:
            table = map_trade_to_table(record)
            session.add(table)
            session.commit()
            session.refresh(table)
            return table.id or 0

    def get_trade_history(self, limit: int = 100) -> list[TradeHistoryRecord]:
        """Most recent trades first"""
        with self.get_session() as session:
            results = session.exec(
                select(TradeHistoryTable)
                .order_by(col(TradeHistoryTable.executed_at).desc())
                .limit(limit)
            ).all()
            return [map_table_to_trade(table) for table in results]

    def count_trades_since(self, since: datetime) -> int:
        with self.get_session() as session:
            return session.exec(
                select(func.count())
                .select_from(TradeHistoryTable)
                .where(TradeHistoryTable.executed_at > since.isoformat())
            ).one()

    # Statistics and maintenance

    def get_stats(self, now: datetime | None = None) -> TradingStats:
        """Aggregate statistics over active positions and recent trades"""
        now = now or datetime.now()
        positions = self.get_active_positions()
        gains = [calculate_gain(p) for p in positions]

        return TradingStats(
            active_positions=len(positions),
            pending_orders=self.count_orders(OrderStatus.PENDING),
            completed_trades_24h=self.count_trades_since(now - timedelta(days=1)),
            total_sol_invested=sum(p.sol_invested for p in positions),
            average_gain=sum(gains) / len(gains) if gains else 0.0,
        )

    def clean_old_data(self, days: int = 30) -> int:
        """Delete trade history older than ``days``

        Returns:
            Number of rows deleted
        """
        cutoff = (datetime.now() - timedelta(days=days)).isoformat()
        with self.get_session() as session:
            result = session.exec(
                delete(TradeHistoryTable).where(
                    col(TradeHistoryTable.executed_at) < cutoff
                )
            )
            session.commit()

        logger.info(f"Cleaned {result.rowcount} old trade history records")
        return result.rowcount

    def backup(self, backup_path: str | Path) -> None:
        """Copy the live database to ``backup_path`` using SQLite's backup API"""
        backup_path = Path(backup_path)
        backup_path.parent.mkdir(parents=True, exist_ok=True)

        destination = sqlite3.connect(str(backup_path))
        raw = self.engine.raw_connection()
        try:
            raw.driver_connection.backup(destination)
        finally:
            raw.close()
            destination.close()

        logger.info(f"Database backed up to {backup_path}")

    def get_db_size(self) -> dict[str, str | int]:
        """Size of the database file as reported by SQLite pragmas"""
        with self.engine.connect() as conn:
            page_count = conn.execute(text("PRAGMA page_count")).scalar_one()
            page_size = conn.execute(text("PRAGMA page_size")).scalar_one()

        size_mb = page_count * page_size / 1024 / 1024
        return {"size": f"{size_mb:.2f} MB", "page_count": page_count}
