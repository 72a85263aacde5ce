"""Trade history domain model"""

from dataclasses import dataclass
from datetime import datetime

from .order import OrderType


@dataclass(frozen=True)
class TradeHistoryRecord:
    """Audit row for one executed sell (append-only)"""

    position_id: str
    order_id: str
    symbol: str
    address: str
    type: OrderType
    sell_ratio: float
    entry_price: float
    exit_price: float
    gain_percent: float
    executed_at: datetime
    signature: str
    reason: str | None = None
    id: int | None = None
