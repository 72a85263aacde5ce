"""Token tick parsed from the new-pair feed"""

import math
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TokenTick:
    """One token update from the feed.

    Attributes:
        address: Token mint address (position key)
        symbol: Token symbol
        price: Observed price (market cap in the feed)
        lfg: External flag value latched onto positions
        raw: Full feed payload, used by the admission filter
    """

    address: str
    symbol: str
    price: float
    lfg: int = 0
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_feed(cls, data: dict[str, Any]) -> "TokenTick | None":
        """Parse a short-key feed entry

        Returns:
            TokenTick, or None when address/symbol are missing or the price
            is not a positive number
        """
        address = data.get("a")
        symbol = data.get("s")
        if not address or not symbol:
            return None

        try:
            price = float(data.get("mc"))
        except (TypeError, ValueError):
            return None

        if math.isnan(price) or price <= 0:
            return None

        return cls(
            address=address,
            symbol=symbol,
            price=price,
            lfg=1 if data.get("lc_flg") else 0,
            raw=data,
        )
