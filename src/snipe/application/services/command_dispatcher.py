from loguru import logger

from snipe.application.commands.base import (
    BackupCommand,
    CancelCommand,
    CleanupCommand,
    CloseAllCommand,
    CloseCommand,
    HistoryCommand,
    OrdersCommand,
    PositionCommand,
    PositionsCommand,
    RunCommand,
    StatusCommand,
)
from snipe.application.commands.maintenance import handle_backup, handle_cleanup
from snipe.application.commands.manage import (
    handle_cancel,
    handle_close,
    handle_close_all,
)
from snipe.application.commands.positions import (
    handle_history,
    handle_orders,
    handle_position,
    handle_positions,
)
from snipe.application.commands.run import handle_run
from snipe.application.commands.status import handle_status

USAGE = (
    "Available: run [jsonl], status, positions, position <address>, orders, "
    "history [limit], close <address>, close_all, cancel <order_id>, "
    "cleanup [days], backup <path>"
)


class CommandDispatcher:
    """Dispatches CLI commands to appropriate handlers"""

    def __init__(self, trading_bot) -> None:
        self.trading_bot = trading_bot
        self._handlers = {
            "run": self._handle_run,
            "status": self._handle_status,
            "positions": self._handle_positions,
            "position": self._handle_position,
            "orders": self._handle_orders,
            "history": self._handle_history,
            "close": self._handle_close,
            "close_all": self._handle_close_all,
            "cancel": self._handle_cancel,
            "cleanup": self._handle_cleanup,
            "backup": self._handle_backup,
        }

    async def dispatch(self, argv: list[str]) -> int:
        """Parse and execute command

        Args:
            argv: Command line arguments (sys.argv)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        if len(argv) < 2:
            self._print_usage()
            return 1

        method = argv[1]
        handler = self._handlers.get(method)

        if handler is None:
            logger.error(f"Unknown method: {method}")
            self._print_usage()
            return 1

        try:
            return await handler(argv)
        except _UsageError as e:
            logger.error(str(e))
            return 1

    def _print_usage(self) -> None:
        """Print available commands"""
        logger.error(f"No method specified. {USAGE}")

    async def _handle_run(self, argv: list[str]) -> int:
        command = RunCommand(name="run", jsonl_path=_optional(argv))
        return await handle_run(self.trading_bot, command)

    async def _handle_status(self, argv: list[str]) -> int:
        return await handle_status(self.trading_bot, StatusCommand(name="status"))

    async def _handle_positions(self, argv: list[str]) -> int:
        command = PositionsCommand(name="positions")
        return await handle_positions(self.trading_bot, command)

    async def _handle_position(self, argv: list[str]) -> int:
        command = PositionCommand(name="position", address=_required(argv, "address"))
        return await handle_position(self.trading_bot, command)

    async def _handle_orders(self, argv: list[str]) -> int:
        return await handle_orders(self.trading_bot, OrdersCommand(name="orders"))

    async def _handle_history(self, argv: list[str]) -> int:
        command = HistoryCommand(name="history", limit=_optional_int(argv, "limit", 20))
        return await handle_history(self.trading_bot, command)

    async def _handle_close(self, argv: list[str]) -> int:
        command = CloseCommand(name="close", address=_required(argv, "address"))
        return await handle_close(self.trading_bot, command)

    async def _handle_close_all(self, argv: list[str]) -> int:
        command = CloseAllCommand(name="close_all")
        return await handle_close_all(self.trading_bot, command)

    async def _handle_cancel(self, argv: list[str]) -> int:
        command = CancelCommand(name="cancel", order_id=_required(argv, "order_id"))
        return await handle_cancel(self.trading_bot, command)

    async def _handle_cleanup(self, argv: list[str]) -> int:
        command = CleanupCommand(name="cleanup", days=_optional_int(argv, "days", 30))
        return await handle_cleanup(self.trading_bot, command)

    async def _handle_backup(self, argv: list[str]) -> int:
        command = BackupCommand(name="backup", path=_required(argv, "path"))
        return await handle_backup(self.trading_bot, command)


class _UsageError(Exception):
    pass


def _optional(argv: list[str]) -> str | None:
    return argv[2] if len(argv) > 2 else None


def _required(argv: list[str], name: str) -> str:
    value = _optional(argv)
    if value is None:
        raise _UsageError(f"{argv[1]} requires <{name}>")
    return value


def _optional_int(argv: list[str], name: str, default: int) -> int:
    value = _optional(argv)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise _UsageError(f"{name} must be an integer, got {value!r}") from None
    if parsed <= 0:
        raise _UsageError(f"{name} must be positive, got {parsed}")
    return parsed
