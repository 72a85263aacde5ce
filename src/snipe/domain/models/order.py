"""Order domain model and lifecycle state machine"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from snipe.shared.exceptions import (
    InvalidOrderTransitionError,
    OrderValidationError,
)


class OrderType(str, Enum):
    """Kind of instruction an order carries"""

    MARKET_BUY = "MARKET_BUY"
    STOP_LOSS = "STOP_LOSS"
    TAKE_PROFIT = "TAKE_PROFIT"
    LFG_SELL = "LFG_SELL"


class OrderStatus(str, Enum):
    """Order lifecycle states.

    State Machine:
        PENDING -> TRIGGERED (trigger predicate matched)
        PENDING -> CANCELLED (explicit cancel or position close)
        TRIGGERED -> EXECUTING (execution started)
        EXECUTING -> COMPLETED (swap executed, or no balance left)
        EXECUTING -> FAILED (executor failed or raised)
        FAILED -> PENDING (requeued by the retry pass)

    Terminal States: COMPLETED, CANCELLED
    """

    PENDING = "PENDING"
    TRIGGERED = "TRIGGERED"
    EXECUTING = "EXECUTING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    def can_transition_to(self, target: "OrderStatus") -> bool:
        return target in ORDER_TRANSITIONS[self]

    @property
    def is_terminal(self) -> bool:
        return not ORDER_TRANSITIONS[self]


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.TRIGGERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.TRIGGERED: frozenset({OrderStatus.EXECUTING}),
    OrderStatus.EXECUTING: frozenset(
        {OrderStatus.COMPLETED, OrderStatus.FAILED}
    ),
    OrderStatus.FAILED: frozenset({OrderStatus.PENDING}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class TriggerType(str, Enum):
    """What an order's trigger threshold is compared against"""

    PRICE = "PRICE"
    GAIN_PERCENT = "GAIN_PERCENT"
    LFG_FLAG = "LFG_FLAG"
    IMMEDIATE = "IMMEDIATE"


class TriggerCondition(str, Enum):
    """Comparison applied between the observed value and the threshold"""

    GTE = "GTE"
    LTE = "LTE"
    EQ = "EQ"


# EQ is exact float equality, so it is only accepted on integer flag triggers
EQ_TRIGGER_TYPES = frozenset({TriggerType.LFG_FLAG, TriggerType.IMMEDIATE})


@dataclass
class OrderCreationParams:
    """Parameters for creating an order"""

    position_id: str
    type: OrderType
    sell_ratio: float
    trigger_type: TriggerType
    trigger_condition: TriggerCondition
    trigger_value: float
    trigger_description: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        self.type = OrderType(self.type)
        self.trigger_type = TriggerType(self.trigger_type)
        self.trigger_condition = TriggerCondition(self.trigger_condition)


def validate_order_params(params: OrderCreationParams) -> None:
    """Reject order parameters the engine cannot evaluate safely

    Raises:
        OrderValidationError: If the sell ratio is out of range or the
            trigger comparison is not allowed for the trigger type
    """
    if not 0 < params.sell_ratio <= 100:
        raise OrderValidationError(
            f"sell_ratio must be in (0, 100], got {params.sell_ratio}"
        )

    if (
        params.trigger_condition is TriggerCondition.EQ
        and params.trigger_type not in EQ_TRIGGER_TYPES
    ):
        raise OrderValidationError(
            f"EQ comparison is not allowed for {params.trigger_type.value} triggers"
        )

    if params.trigger_type is TriggerType.LFG_FLAG and params.trigger_value not in (0, 1):
        raise OrderValidationError(
            f"LFG_FLAG trigger value must be 0 or 1, got {params.trigger_value}"
        )


@dataclass
class Order:
    """Conditional or immediate instruction against one position"""

    id: str
    position_id: str
    type: OrderType
    sell_ratio: float
    trigger_type: TriggerType
    trigger_condition: TriggerCondition
    trigger_value: float
    trigger_description: str = ""
    description: str = ""
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)
    triggered_at: datetime | None = None
    executed_at: datetime | None = None
    failed_at: datetime | None = None
    signature: str | None = None
    error: str | None = None
    retry_count: int = 0

    @property
    def is_sell(self) -> bool:
        return self.type is not OrderType.MARKET_BUY

    @property
    def is_pending(self) -> bool:
        return self.status is OrderStatus.PENDING

    def transition_to(self, target: OrderStatus) -> None:
        """Move to ``target`` if the state machine allows it

        Raises:
            InvalidOrderTransitionError: If the transition is not allowed
        """
        if not self.status.can_transition_to(target):
            raise InvalidOrderTransitionError(
                self.id, self.status.value, target.value
            )
        self.status = target
