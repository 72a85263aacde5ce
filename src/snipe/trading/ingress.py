"""Ingress dispatcher routing feed messages into the engines"""

import asyncio
from typing import Any

from loguru import logger

from snipe.domain.filters import AdmissionFilter
from snipe.domain.models import TokenTick
from snipe.domain.notifications import Notifier
from snipe.shared.constants import CATEGORY_SIGNAL, NEW_PAIR_CHANNEL
from snipe.shared.format import generate_token_message
from snipe.shared.guard import InFlightGuard
from snipe.trading.engine import PositionEngine


class IngressDispatcher:
    """Fan-in point for feed messages.

    Tokens in one message are processed concurrently. Work for a single
    address is never overlapped: a tick that arrives while the previous one
    for the same address is still running is dropped.
    """

    def __init__(
        self,
        position_engine: PositionEngine,
        admission_filter: AdmissionFilter,
        sol_investment_amount: float,
        notifier: Notifier | None = None,
    ):
        self.position_engine = position_engine
        self.admission_filter = admission_filter
        self.sol_investment_amount = sol_investment_amount
        self.notifier = notifier
        self._processing = InFlightGuard()

    def is_processing(self, address: str) -> bool:
        return address in self._processing

    async def handle_message(self, message: dict[str, Any]) -> None:
        """Process one ``{channel, data}`` feed message"""
        if message.get("channel") != NEW_PAIR_CHANNEL:
            return

        entries = message.get("data") or []
        if not isinstance(entries, list):
            logger.warning(f"Ignoring malformed {NEW_PAIR_CHANNEL} payload")
            return

        # Last tick per address wins within one message
        ticks: dict[str, TokenTick] = {}
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            tick = TokenTick.from_feed(entry)
            if tick is not None:
                ticks[tick.address] = tick

        if ticks:
            await asyncio.gather(*(self.process_tick(t) for t in ticks.values()))

    async def process_tick(self, tick: TokenTick) -> None:
        """Open or update the position for one token

        Errors are logged per token and never reach the caller.
        """
        with self._processing.hold(tick.address) as acquired:
            if not acquired:
                logger.debug(f"{tick.symbol} still processing, dropping tick")
                return

            try:
                await self._route(tick)
            except Exception as e:
                logger.error(f"Error processing token {tick.symbol}: {e}")

    async def _route(self, tick: TokenTick) -> None:
        engine = self.position_engine

        if engine.get_position(tick.address) is not None:
            await engine.update(tick.address, tick.price, tick.lfg)
            return

        if not self.admission_filter.accepts(tick):
            return

        position = await engine.create(tick, self.sol_investment_amount)
        if position is not None and self.notifier is not None:
            await asyncio.to_thread(
                self.notifier.notify, generate_token_message(tick.raw), CATEGORY_SIGNAL
            )
