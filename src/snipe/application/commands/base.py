from dataclasses import dataclass


@dataclass
class Command:
    """Base command class"""

    name: str


@dataclass
class RunCommand(Command):
    """Consume the feed, live or replayed from a recording"""

    jsonl_path: str | None = None


@dataclass
class StatusCommand(Command):
    """Perform health check and print stats"""


@dataclass
class PositionsCommand(Command):
    """List active positions"""


@dataclass
class PositionCommand(Command):
    """Show one position with its orders"""

    address: str


@dataclass
class OrdersCommand(Command):
    """List pending orders"""


@dataclass
class HistoryCommand(Command):
    """List recent trades"""

    limit: int = 20


@dataclass
class CloseCommand(Command):
    """Sell 100% of a position and close it"""

    address: str


@dataclass
class CloseAllCommand(Command):
    """Emergency close every active position"""


@dataclass
class CancelCommand(Command):
    """Cancel a pending order"""

    order_id: str


@dataclass
class CleanupCommand(Command):
    """Delete old trade history"""

    days: int = 30


@dataclass
class BackupCommand(Command):
    """Copy the database to a file"""

    path: str
