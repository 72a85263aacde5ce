from snipe.application.commands.base import (
    BackupCommand,
    CancelCommand,
    CleanupCommand,
    CloseAllCommand,
    CloseCommand,
    Command,
    HistoryCommand,
    OrdersCommand,
    PositionCommand,
    PositionsCommand,
    RunCommand,
    StatusCommand,
)

__all__ = [
    "BackupCommand",
    "CancelCommand",
    "CleanupCommand",
    "CloseAllCommand",
    "CloseCommand",
    "Command",
    "HistoryCommand",
    "OrdersCommand",
    "PositionCommand",
    "PositionsCommand",
    "RunCommand",
    "StatusCommand",
]
