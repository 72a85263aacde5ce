from snipe.application.commands.base import (
    HistoryCommand,
    OrdersCommand,
    PositionCommand,
    PositionsCommand,
)
from snipe.application.commands.tables import (
    console,
    history_table,
    orders_table,
    positions_table,
)


async def handle_positions(trading_bot, command: PositionsCommand) -> int:
    positions = trading_bot.get_active_positions()
    if not positions:
        console.print("[yellow]No active positions[/yellow]")
        return 0
    console.print(positions_table(positions))
    return 0


async def handle_position(trading_bot, command: PositionCommand) -> int:
    """Print one position with derived metrics and every order it owns

    Returns:
        Exit code (0 for success, 1 if the position does not exist)
    """
    details = trading_bot.get_position_details(command.address)
    if details is None:
        console.print(f"[red]No position for {command.address}[/red]")
        return 1

    console.print(positions_table([details.position]))
    console.print(
        f"Orders: {details.order_count} total, {details.pending_order_count} pending"
    )
    console.print(orders_table(details.orders, title=details.position.symbol))
    return 0


async def handle_orders(trading_bot, command: OrdersCommand) -> int:
    orders = trading_bot.get_pending_orders()
    if not orders:
        console.print("[yellow]No pending orders[/yellow]")
        return 0
    console.print(orders_table(orders, title="Pending Orders"))
    return 0


async def handle_history(trading_bot, command: HistoryCommand) -> int:
    trades = trading_bot.get_trade_history(command.limit)
    if not trades:
        console.print("[yellow]No trades recorded[/yellow]")
        return 0
    console.print(history_table(trades))
    return 0
