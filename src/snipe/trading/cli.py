import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from snipe.application.services.command_dispatcher import CommandDispatcher
from snipe.shared.exceptions import ConfigurationError
from snipe.trading.core.bot import TradingBot
from snipe.trading.core.config import Config


def main() -> int:
    """CLI entry point for the trading bot

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    load_dotenv()
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    logger.add(
        str(log_dir / "snipe_{time}.log"),
        rotation="1 day",
        retention="14 days",
        compression="gz",
        level="INFO",
    )
    logger.info("=" * 60)
    logger.info("SNIPE TRADING BOT")
    logger.info("=" * 60)

    try:
        config = Config.from_env()
        bot = TradingBot(config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    dispatcher = CommandDispatcher(bot)

    async def run():
        try:
            return await dispatcher.dispatch(sys.argv)
        finally:
            bot.stop()

    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        logger.warning("Bot stopped manually.")
        return 1
    except Exception as e:
        logger.critical(f"Unhandled exception in bot execution: {e}")
        return 1
    finally:
        bot.close()
        logger.info("Bot shutdown complete.")


if __name__ == "__main__":
    sys.exit(main())
