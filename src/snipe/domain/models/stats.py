"""Aggregate statistics"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TradingStats:
    """Snapshot of bot activity"""

    active_positions: int
    pending_orders: int
    completed_trades_24h: int
    total_sol_invested: float
    average_gain: float
