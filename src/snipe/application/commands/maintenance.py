import sqlite3

from loguru import logger

from snipe.application.commands.base import BackupCommand, CleanupCommand


async def handle_cleanup(trading_bot, command: CleanupCommand) -> int:
    deleted = trading_bot.clean_old_data(command.days)
    logger.info(
        f"Removed {deleted} trade history records older than {command.days} days"
    )
    return 0


async def handle_backup(trading_bot, command: BackupCommand) -> int:
    """Copy the database to ``command.path``

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        trading_bot.backup(command.path)
    except (OSError, sqlite3.Error) as e:
        logger.error(f"Backup failed: {e}")
        return 1
    return 0
