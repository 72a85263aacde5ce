"""Position domain model"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .order import Order, OrderStatus


class PositionStatus(str, Enum):
    """Positions have a single live state; closing deletes the row"""

    ACTIVE = "ACTIVE"


@dataclass
class Position:
    """Open stake in one token, keyed by the token address"""

    address: str
    symbol: str
    entry_price: float
    current_price: float
    highest_price: float
    lowest_price: float
    sol_invested: float
    entry_time: datetime
    last_updated: datetime
    lfg: int = 0
    status: PositionStatus = field(default=PositionStatus.ACTIVE)

    @property
    def id(self) -> str:
        return self.address

    @property
    def gain_percent(self) -> float:
        return calculate_gain(self)

    @property
    def drawdown_percent(self) -> float:
        return calculate_drawdown(self)

    def apply_tick(self, price: float, lfg: int | bool | None, at: datetime) -> None:
        """Record a new observed price and flag value"""
        self.current_price = price
        self.highest_price = max(self.highest_price, price)
        self.lowest_price = min(self.lowest_price, price)
        self.last_updated = at
        self.lfg = 1 if lfg else 0


def calculate_gain(position: Position) -> float:
    """Gain since entry, in percent"""
    if position.entry_price <= 0:
        return 0.0
    return (
        (position.current_price - position.entry_price)
        / position.entry_price
        * 100
    )


def calculate_drawdown(position: Position) -> float:
    """Distance below the high-water mark, in percent"""
    if position.highest_price <= 0:
        return 0.0
    return (
        (position.highest_price - position.current_price)
        / position.highest_price
        * 100
    )


@dataclass
class PositionDetails:
    """Position with derived metrics and attached orders"""

    position: Position
    orders: list[Order]

    @property
    def gain(self) -> float:
        return calculate_gain(self.position)

    @property
    def drawdown(self) -> float:
        return calculate_drawdown(self.position)

    @property
    def order_count(self) -> int:
        return len(self.orders)

    @property
    def pending_order_count(self) -> int:
        return sum(1 for o in self.orders if o.status is OrderStatus.PENDING)
