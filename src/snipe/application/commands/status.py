from loguru import logger

from snipe.application.commands.base import StatusCommand
from snipe.application.commands.tables import console, stats_table


async def handle_status(trading_bot, command: StatusCommand) -> int:
    """Perform health check and print aggregate stats

    Returns:
        Exit code (0 for success, 1 for error)
    """
    health = trading_bot.health_check()
    if health["status"] != "healthy":
        logger.error(f"Health check failed: {health['details'].get('error')}")
        return 1

    console.print(stats_table(trading_bot.get_stats()))

    metrics = trading_bot.get_performance_metrics()
    console.print(
        f"Success rate: {metrics['success_rate']:.2f}% "
        f"over {metrics['total_trades']} trades"
    )

    info = trading_bot.get_database_info()
    console.print(f"Database size: {info['size']} ({info['page_count']} pages)")

    logger.info("Health check passed")
    return 0
