"""Monitor module - runs the feed ingestion loop and the order retry pass"""

import asyncio
from contextlib import suppress

from loguru import logger

from snipe.trading.engine import OrderEngine
from snipe.trading.feeds import TickFeed
from snipe.trading.ingress import IngressDispatcher


class Monitor:
    """Feeds messages into the dispatcher until stopped"""

    def __init__(
        self,
        dispatcher: IngressDispatcher,
        feed: TickFeed,
        order_engine: OrderEngine,
        retry_interval_seconds: float = 60.0,
    ):
        """Initialise monitor

        Args:
            dispatcher: Receives every feed message
            feed: Message source
            order_engine: Runs the periodic FAILED order retry pass
            retry_interval_seconds: Time between retry passes
        """
        self.dispatcher = dispatcher
        self.feed = feed
        self.order_engine = order_engine
        self.retry_interval_seconds = retry_interval_seconds
        self._running = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """Consume the feed until it ends or ``stop()`` is called

        Messages are dispatched as tasks so a slow token does not hold up
        the feed. In-flight tasks are awaited, never cancelled, on exit.
        """
        self._running = True
        logger.info("Starting monitor...")
        retry_task = asyncio.create_task(self._retry_loop())

        try:
            async for message in self.feed.messages():
                if not self._running:
                    break
                task = asyncio.create_task(self.dispatcher.handle_message(message))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
                # Let the new task start before reading the next message
                await asyncio.sleep(0)
        finally:
            self._running = False
            if self._tasks:
                logger.info(f"Waiting for {len(self._tasks)} in-flight messages")
                await asyncio.gather(*self._tasks, return_exceptions=True)

            retry_task.cancel()
            with suppress(asyncio.CancelledError):
                await retry_task

            logger.info("Monitor stopped")

    def stop(self) -> None:
        self._running = False
        self.feed.stop()

    async def _retry_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.retry_interval_seconds)
            self.run_retry_pass()

    def run_retry_pass(self) -> int:
        """Requeue eligible FAILED orders

        Returns:
            Number of orders requeued, 0 if the pass failed
        """
        try:
            requeued = self.order_engine.retry_failed_orders()
        except Exception as e:
            logger.error(f"Failed order retry pass failed: {e}")
            return 0

        if requeued:
            logger.info(f"Requeued {requeued} failed orders")
        return requeued
