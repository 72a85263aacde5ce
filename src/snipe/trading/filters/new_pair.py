"""Admission filter for new-pair feed tokens"""

import time
from collections.abc import Callable
from typing import Any

from loguru import logger

from snipe.domain.models import TokenTick
from snipe.trading.core.config import FilterConfig

SOCIAL_KEYS = ("m_t", "m_w", "m_x")


def _number(raw: dict[str, Any], key: str) -> float | None:
    try:
        return float(raw[key])
    except (KeyError, TypeError, ValueError):
        return None


class NewPairFilter:
    """Accepts tokens whose feed metrics sit inside the configured bounds.

    Missing or non-numeric metrics reject the token.
    """

    name = "new_pair"

    def __init__(
        self,
        config: FilterConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or FilterConfig()
        self._clock = clock

    def accepts(self, tick: TokenTick) -> bool:
        reason = self.rejection_reason(tick)
        if reason is not None:
            logger.debug(f"{self.name} filter rejected {tick.symbol}: {reason}")
            return False
        return True

    def rejection_reason(self, tick: TokenTick) -> str | None:
        """First failed check for ``tick``, or None if it passes"""
        cfg = self.config
        raw = tick.raw

        if not cfg.min_market_cap <= tick.price <= cfg.max_market_cap:
            return f"market cap {tick.price:.0f} out of range"

        bounds = (
            ("hd", lambda v: v > cfg.min_holders, "holders"),
            ("pg", lambda v: 0 < v < cfg.max_progress, "progress"),
            ("etpr", lambda v: v < cfg.max_entry_price_ratio, "entry price ratio"),
            ("rat", lambda v: v < cfg.max_rat, "rat"),
            ("v1h", lambda v: v > cfg.min_volume_1h, "1h volume"),
            ("t70_shr", lambda v: v < cfg.max_top70_share, "top 70 share"),
            ("kol", lambda v: v >= cfg.min_kol, "kol count"),
            (
                "t10",
                lambda v: cfg.min_top10_share <= v <= cfg.max_top10_share,
                "top 10 share",
            ),
        )
        for key, check, label in bounds:
            value = _number(raw, key)
            if value is None or not check(value):
                return f"{label} ({raw.get(key)!r})"

        created = _number(raw, "ct")
        if created is None:
            return "missing creation time"
        age_minutes = (self._clock() - created) / 60
        if age_minutes <= cfg.min_age_minutes:
            return f"too young ({age_minutes:.1f} min)"

        if raw.get("d_ts") != cfg.dev_status:
            return f"dev status {raw.get('d_ts')!r}"
        if raw.get("s_brs") != cfg.burn_status:
            return f"pool status {raw.get('s_brs')!r}"
        if raw.get("mt") != cfg.mint_type:
            return f"mint type {raw.get('mt')!r}"
        if tick.lfg:
            return "LFG flag already raised"
        if not any(raw.get(key) for key in SOCIAL_KEYS):
            return "no socials"

        return None
