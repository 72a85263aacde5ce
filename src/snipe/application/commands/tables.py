"""Rich table rendering for operator commands"""

from rich.console import Console
from rich.table import Table

from snipe.domain.models import (
    Order,
    OrderStatus,
    Position,
    TradeHistoryRecord,
    TradingStats,
    calculate_drawdown,
    calculate_gain,
)
from snipe.shared.format import format_market_cap

console = Console()

STATUS_STYLES = {
    OrderStatus.PENDING: "yellow",
    OrderStatus.TRIGGERED: "cyan",
    OrderStatus.EXECUTING: "cyan",
    OrderStatus.COMPLETED: "green",
    OrderStatus.FAILED: "red",
    OrderStatus.CANCELLED: "dim",
}


def _gain_cell(gain: float) -> str:
    color = "green" if gain >= 0 else "red"
    return f"[{color}]{gain:+.2f}%[/{color}]"


def positions_table(positions: list[Position]) -> Table:
    table = Table(title=f"Active Positions ({len(positions)})")
    table.add_column("Symbol", style="cyan")
    table.add_column("Address", overflow="fold")
    table.add_column("Entry MC")
    table.add_column("Current MC")
    table.add_column("Gain", justify="right")
    table.add_column("Drawdown", justify="right")
    table.add_column("SOL", justify="right")
    table.add_column("LFG", justify="center")
    table.add_column("Entered", style="yellow")

    for p in positions:
        table.add_row(
            p.symbol,
            p.address,
            format_market_cap(p.entry_price),
            format_market_cap(p.current_price),
            _gain_cell(calculate_gain(p)),
            f"{calculate_drawdown(p):.2f}%",
            f"{p.sol_invested}",
            "yes" if p.lfg else "",
            p.entry_time.strftime("%Y-%m-%d %H:%M"),
        )
    return table


def orders_table(orders: list[Order], title: str = "Orders") -> Table:
    table = Table(title=f"{title} ({len(orders)})")
    table.add_column("ID", overflow="fold")
    table.add_column("Type", style="cyan")
    table.add_column("Status")
    table.add_column("Ratio", justify="right")
    table.add_column("Trigger")
    table.add_column("Retries", justify="right")
    table.add_column("Error", overflow="fold")

    for o in orders:
        style = STATUS_STYLES.get(o.status, "")
        table.add_row(
            o.id,
            o.type.value,
            f"[{style}]{o.status.value}[/{style}]" if style else o.status.value,
            f"{o.sell_ratio:g}%",
            o.trigger_description
            or f"{o.trigger_type.value} {o.trigger_condition.value} {o.trigger_value:g}",
            str(o.retry_count),
            o.error or "",
        )
    return table


def history_table(trades: list[TradeHistoryRecord]) -> Table:
    table = Table(title=f"Trade History ({len(trades)})")
    table.add_column("Executed", style="yellow")
    table.add_column("Symbol", style="cyan")
    table.add_column("Type")
    table.add_column("Ratio", justify="right")
    table.add_column("Entry MC")
    table.add_column("Exit MC")
    table.add_column("Gain", justify="right")
    table.add_column("Reason")

    for t in trades:
        table.add_row(
            t.executed_at.strftime("%Y-%m-%d %H:%M:%S"),
            t.symbol,
            t.type.value,
            f"{t.sell_ratio:g}%",
            format_market_cap(t.entry_price),
            format_market_cap(t.exit_price),
            _gain_cell(t.gain_percent),
            t.reason or "",
        )
    return table


def stats_table(stats: TradingStats) -> Table:
    table = Table(title="Trading Stats", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Active positions", str(stats.active_positions))
    table.add_row("Pending orders", str(stats.pending_orders))
    table.add_row("Trades (24h)", str(stats.completed_trades_24h))
    table.add_row("SOL invested", f"{stats.total_sol_invested:.4f}")
    table.add_row("Average gain", _gain_cell(stats.average_gain))
    return table
