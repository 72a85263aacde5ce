"""Paper trading executor backed by a simulated token ledger"""

from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

from loguru import logger

from snipe.domain.models import ExecutionResult, Position
from snipe.infrastructure.database.base import BaseDatabase
from snipe.infrastructure.database.trading.models import PaperBalanceTable
from snipe.shared.constants import LAMPORTS_PER_SOL
from snipe.shared.format import format_market_cap


@dataclass(frozen=True)
class PaperFill:
    """Simulated swap"""

    address: str
    side: str
    amount: int
    signature: str
    timestamp: datetime


class PaperTradeExecutor:
    """Simulates swaps without touching the chain.

    Buys credit ``sol_invested * tokens_per_sol`` raw units to the token's
    ledger entry, sells debit it. Every fill gets a synthetic signature so
    it is recorded like a live trade.

    With a database the ledger lives in the ``paper_balances`` table, so
    balances survive a restart and are shared with other processes using
    the same file. Without one, ``balances`` holds it in memory.
    """

    def __init__(
        self,
        tokens_per_sol: int = LAMPORTS_PER_SOL,
        db: BaseDatabase | None = None,
    ):
        self.tokens_per_sol = tokens_per_sol
        self.db = db
        self.balances: dict[str, int] = {}
        self.fills: list[PaperFill] = []

    async def buy(self, position: Position) -> ExecutionResult:
        amount = int(position.sol_invested * self.tokens_per_sol)
        if amount <= 0:
            return ExecutionResult.failed("Buy amount rounds to zero")

        logger.info(
            f"[paper] Buying {position.symbol} with {position.sol_invested} SOL "
            f"@ MC {format_market_cap(position.entry_price)}"
        )
        self._set_balance(position.address, self._balance(position.address) + amount)
        return ExecutionResult.executed(
            self._record(position.address, "BUY", amount)
        )

    async def sell(
        self,
        address: str,
        symbol: str,
        gain_percent: float,
        amount: int,
        sell_ratio: float,
        reason: str,
    ) -> ExecutionResult:
        balance = self._balance(address)
        if amount <= 0 or amount > balance:
            return ExecutionResult.failed(
                f"Insufficient paper balance: need {amount}, have {balance}"
            )

        logger.info(
            f"[paper] Selling {symbol} {sell_ratio}% gain:{gain_percent:.0f}% reason: {reason}"
        )
        self._set_balance(address, balance - amount)
        return ExecutionResult.executed(self._record(address, "SELL", amount))

    async def get_balance(self, address: str) -> int | None:
        return self._balance(address)

    def _balance(self, address: str) -> int:
        if self.db is None:
            return self.balances.get(address, 0)

        with self.db.get_session() as session:
            row = session.get(PaperBalanceTable, address)
            return row.balance if row is not None else 0

    def _set_balance(self, address: str, balance: int) -> None:
        if self.db is None:
            self.balances[address] = balance
            return

        with self.db.get_session() as session:
            row = session.get(PaperBalanceTable, address)
            if row is None:
                row = PaperBalanceTable(address=address, balance=balance)
            else:
                row.balance = balance
                row.updated_at = datetime.now().isoformat()
            session.add(row)
            session.commit()

    def _record(self, address: str, side: str, amount: int) -> str:
        signature = f"paper-{uuid4().hex}"
        self.fills.append(
            PaperFill(
                address=address,
                side=side,
                amount=amount,
                signature=signature,
                timestamp=datetime.now(),
            )
        )
        return signature
