"""Trade executor protocol.

The swap venue is a black box to the engines. Concrete executors perform
the swap and report a transaction signature or a failure reason.
"""

from typing import Protocol, runtime_checkable

from snipe.domain.models import ExecutionResult, Position


@runtime_checkable
class TradeExecutor(Protocol):
    """Protocol for swap execution and balance lookup."""

    async def buy(self, position: Position) -> ExecutionResult:
        """Spend ``position.sol_invested`` SOL on the position's token."""
        ...

    async def sell(
        self,
        address: str,
        symbol: str,
        gain_percent: float,
        amount: int,
        sell_ratio: float,
        reason: str,
    ) -> ExecutionResult:
        """Sell ``amount`` raw token units back to SOL."""
        ...

    async def get_balance(self, address: str) -> int | None:
        """Raw token balance held by the wallet, None if unavailable."""
        ...
