"""Mappers for converting between domain and persistence models"""

from datetime import datetime

from snipe.domain.models import (
    Order,
    OrderStatus,
    OrderType,
    Position,
    PositionStatus,
    TradeHistoryRecord,
    TriggerCondition,
    TriggerType,
)
from snipe.infrastructure.database.trading.models import (
    OrderTable,
    PositionTable,
    TradeHistoryTable,
)


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _from_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def map_table_to_position(table: PositionTable) -> Position:
    """Map database table to domain Position"""
    return Position(
        address=table.address,
        symbol=table.symbol,
        entry_price=table.entry_price,
        current_price=table.current_price,
        highest_price=table.highest_price,
        lowest_price=table.lowest_price,
        sol_invested=table.sol_invested,
        entry_time=datetime.fromisoformat(table.entry_time),
        last_updated=datetime.fromisoformat(table.last_updated),
        lfg=int(table.lfg or 0),
        status=PositionStatus(table.status),
    )


def map_position_to_table(position: Position) -> PositionTable:
    """Map domain Position to database table"""
    return PositionTable(
        id=position.id,
        address=position.address,
        symbol=position.symbol,
        entry_price=position.entry_price,
        current_price=position.current_price,
        highest_price=position.highest_price,
        lowest_price=position.lowest_price,
        sol_invested=position.sol_invested,
        entry_time=position.entry_time.isoformat(),
        last_updated=position.last_updated.isoformat(),
        status=position.status.value,
        lfg=position.lfg,
    )


def map_table_to_order(table: OrderTable) -> Order:
    """Map database table to domain Order"""
    return Order(
        id=table.id,
        position_id=table.position_id,
        type=OrderType(table.type),
        sell_ratio=table.sell_ratio,
        trigger_type=TriggerType(table.trigger_type),
        trigger_condition=TriggerCondition(table.trigger_condition),
        trigger_value=table.trigger_value,
        trigger_description=table.trigger_description or "",
        description=table.description or "",
        status=OrderStatus(table.status),
        created_at=datetime.fromisoformat(table.created_at),
        triggered_at=_from_iso(table.triggered_at),
        executed_at=_from_iso(table.executed_at),
        failed_at=_from_iso(table.failed_at),
        signature=table.signature,
        error=table.error,
        retry_count=table.retry_count,
    )


def map_order_to_table(order: Order) -> OrderTable:
    """Map domain Order to database table"""
    return OrderTable(
        id=order.id,
        position_id=order.position_id,
        type=order.type.value,
        status=order.status.value,
        sell_ratio=order.sell_ratio,
        trigger_type=order.trigger_type.value,
        trigger_condition=order.trigger_condition.value,
        trigger_value=order.trigger_value,
        trigger_description=order.trigger_description,
        created_at=order.created_at.isoformat(),
        triggered_at=_to_iso(order.triggered_at),
        executed_at=_to_iso(order.executed_at),
        failed_at=_to_iso(order.failed_at),
        signature=order.signature,
        error=order.error,
        retry_count=order.retry_count,
        description=order.description,
    )


def map_table_to_trade(table: TradeHistoryTable) -> TradeHistoryRecord:
    """Map database table to domain TradeHistoryRecord"""
    return TradeHistoryRecord(
        id=table.id,
        position_id=table.position_id,
        order_id=table.order_id,
        symbol=table.symbol,
        address=table.address,
        type=OrderType(table.type),
        sell_ratio=table.sell_ratio,
        entry_price=table.entry_price,
        exit_price=table.exit_price,
        gain_percent=table.gain_percent,
        executed_at=datetime.fromisoformat(table.executed_at),
        signature=table.signature,
        reason=table.reason,
    )


def map_trade_to_table(record: TradeHistoryRecord) -> TradeHistoryTable:
    """Map domain TradeHistoryRecord to database table"""
    return TradeHistoryTable(
        position_id=record.position_id,
        order_id=record.order_id,
        symbol=record.symbol,
        address=record.address,
        type=record.type.value,
        sell_ratio=record.sell_ratio,
        entry_price=record.entry_price,
        exit_price=record.exit_price,
        gain_percent=record.gain_percent,
        executed_at=record.executed_at.isoformat(),
        signature=record.signature,
        reason=record.reason,
    )
