from loguru import logger

from snipe.application.commands.base import (
    CancelCommand,
    CloseAllCommand,
    CloseCommand,
)


async def handle_close(trading_bot, command: CloseCommand) -> int:
    """Sell 100% of a position and close it

    Returns:
        Exit code (0 if the sell succeeded, 1 otherwise)
    """
    if await trading_bot.close_position(command.address):
        logger.info(f"Closed position {command.address}")
        return 0

    logger.error(f"Could not close position {command.address}")
    return 1


async def handle_close_all(trading_bot, command: CloseAllCommand) -> int:
    total = len(trading_bot.get_active_positions())
    closed = await trading_bot.emergency_close_all()
    logger.warning(f"Emergency close: {closed}/{total} positions closed")
    return 0 if closed == total else 1


async def handle_cancel(trading_bot, command: CancelCommand) -> int:
    if trading_bot.cancel_order(command.order_id):
        logger.info(f"Cancelled order {command.order_id}")
        return 0

    logger.error(f"Order {command.order_id} is not pending or does not exist")
    return 1
