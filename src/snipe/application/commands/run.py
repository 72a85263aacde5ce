from loguru import logger

from snipe.application.commands.base import RunCommand
from snipe.shared.exceptions import ConfigurationError, FeedError


async def handle_run(trading_bot, command: RunCommand) -> int:
    """Consume the feed until it ends or the process is interrupted

    Args:
        trading_bot: TradingBot instance
        command: RunCommand with optional JSONL recording path

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        feed = trading_bot.build_feed(command.jsonl_path)
    except ConfigurationError as e:
        logger.error(f"Cannot start feed: {e}")
        return 1

    source = command.jsonl_path or trading_bot.config.feed_url
    logger.info(f"Running trading bot on {source}")
    try:
        await trading_bot.run(feed)
    except FeedError as e:
        logger.error(f"Feed error: {e}")
        return 1
    return 0
