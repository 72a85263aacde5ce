"""Trading database persistence models (SQLModel tables)"""

from datetime import datetime

from sqlmodel import Field, SQLModel


class PositionTable(SQLModel, table=True):
    """Position database table"""

    __tablename__ = "positions"

    id: str = Field(primary_key=True)
    address: str = Field(unique=True, index=True)
    symbol: str
    entry_price: float
    current_price: float
    highest_price: float
    lowest_price: float
    sol_invested: float
    entry_time: str
    last_updated: str
    status: str = Field(default="ACTIVE", index=True)
    lfg: int = 0
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())


class OrderTable(SQLModel, table=True):
    """Order database table"""

    __tablename__ = "orders"

    id: str = Field(primary_key=True)
    position_id: str = Field(foreign_key="positions.id", index=True)
    type: str
    status: str = Field(default="PENDING", index=True)
    sell_ratio: float
    trigger_type: str
    trigger_condition: str
    trigger_value: float
    trigger_description: str | None = None
    created_at: str = Field(index=True)
    triggered_at: str | None = None
    executed_at: str | None = None
    failed_at: str | None = None
    signature: str | None = None
    error: str | None = None
    retry_count: int = 0
    description: str | None = None


class TradeHistoryTable(SQLModel, table=True):
    """Trade history database table (append-only)"""

    __tablename__ = "trade_history"

    id: int | None = Field(default=None, primary_key=True)
    position_id: str
    order_id: str
    symbol: str = Field(index=True)
    address: str
    type: str
    sell_ratio: float
    entry_price: float
    exit_price: float
    gain_percent: float
    executed_at: str = Field(index=True)
    signature: str
    reason: str | None = None
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())


class PaperBalanceTable(SQLModel, table=True):
    """Simulated token balances held by the paper trading wallet"""

    __tablename__ = "paper_balances"

    address: str = Field(primary_key=True)
    balance: int = 0
    updated_at: str = Field(default_factory=lambda: datetime.now().isoformat())
