"""Order execution result"""

from dataclasses import dataclass
from enum import Enum


class ExecutionOutcome(str, Enum):
    """How an execution attempt ended.

    NO_BALANCE is not a failure: the wallet already holds nothing, so the
    position is effectively closed on-chain and must be closed locally.
    """

    EXECUTED = "executed"
    NO_BALANCE = "no_balance"
    FAILED = "failed"


@dataclass(frozen=True)
class ExecutionResult:
    """Result of executing an order"""

    outcome: ExecutionOutcome
    signature: str | None = None
    error: str | None = None

    @classmethod
    def executed(cls, signature: str | None = None) -> "ExecutionResult":
        return cls(outcome=ExecutionOutcome.EXECUTED, signature=signature)

    @classmethod
    def no_balance(cls) -> "ExecutionResult":
        return cls(outcome=ExecutionOutcome.NO_BALANCE)

    @classmethod
    def failed(cls, reason: str) -> "ExecutionResult":
        return cls(outcome=ExecutionOutcome.FAILED, error=reason)

    @property
    def succeeded(self) -> bool:
        return self.outcome is not ExecutionOutcome.FAILED

    @property
    def should_close_position(self) -> bool:
        return self.outcome is ExecutionOutcome.NO_BALANCE
