"""Snipe - new token trading bot

Thin orchestrator wiring the database, engines, ingress and feed together
and exposing the operator queries and actions.
"""

from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from snipe.domain.filters import AdmissionFilter
from snipe.domain.models import (
    Order,
    OrderCreationParams,
    Position,
    PositionDetails,
    TradeHistoryRecord,
    TradingStats,
    calculate_drawdown,
    calculate_gain,
)
from snipe.domain.notifications import Notifier
from snipe.infrastructure.executors import PaperTradeExecutor, TradeExecutor
from snipe.shared.exceptions import ConfigurationError
from snipe.trading.core.config import Config
from snipe.trading.data import Database
from snipe.trading.engine import OrderEngine, PositionEngine
from snipe.trading.feeds import JsonlTickFeed, TickFeed, WebSocketTickFeed
from snipe.trading.filters import NewPairFilter
from snipe.trading.ingress import IngressDispatcher
from snipe.trading.monitor import Monitor
from snipe.trading.notifications import DiscordNotifier


class TradingBot:
    """Minimal trading bot orchestrator"""

    def __init__(
        self,
        config: Config,
        db: Database | None = None,
        executor: TradeExecutor | None = None,
        notifier: Notifier | None = None,
        admission_filter: AdmissionFilter | None = None,
    ):
        """Initialise bot with configuration

        Raises:
            ConfigurationError: If live trading is requested without an
                executor
        """
        logger.info("Initialising Snipe Trading Bot...")
        self.config = config

        if executor is None and not config.paper_trading:
            raise ConfigurationError(
                "Live trading requires a TradeExecutor; set PAPER_TRADING=true "
                "or provide one"
            )

        self.db = db or Database(config.db_path)
        # Paper balances share the trading database so they survive restarts
        self.executor = executor or PaperTradeExecutor(db=self.db)
        self.notifier = notifier or DiscordNotifier(
            config.discord_webhook_url, config.category_webhooks
        )

        # --- Engines ---
        self.order_engine = OrderEngine(
            self.db,
            self.executor,
            notifier=self.notifier,
            strategy_config=config.strategy_config,
            retry_config=config.retry_config,
        )
        self.position_engine = PositionEngine(
            self.db, self.order_engine, max_positions=config.max_positions
        )
        self.dispatcher = IngressDispatcher(
            self.position_engine,
            admission_filter or NewPairFilter(config.filter_config),
            config.sol_investment_amount,
            notifier=self.notifier,
        )
        self.monitor: Monitor | None = None

        logger.info("Bot initialised successfully")

    # --- Runtime ---

    def build_feed(self, jsonl_path: str | Path | None = None) -> TickFeed:
        """Replay feed for ``jsonl_path``, otherwise the live feed

        Raises:
            ConfigurationError: If no recording is given and FEED_URL is unset
        """
        if jsonl_path is not None:
            return JsonlTickFeed(jsonl_path)
        if not self.config.feed_url:
            raise ConfigurationError("FEED_URL is not configured")
        return WebSocketTickFeed(self.config.feed_url)

    async def run(self, feed: TickFeed) -> None:
        """Consume ``feed`` until it ends or ``stop()`` is called"""
        self.monitor = Monitor(
            self.dispatcher,
            feed,
            self.order_engine,
            retry_interval_seconds=self.config.retry_config.interval_seconds,
        )
        await self.monitor.run()

    def stop(self) -> None:
        if self.monitor is not None:
            self.monitor.stop()

    async def handle_message(self, message: dict[str, Any]) -> None:
        await self.dispatcher.handle_message(message)

    def close(self) -> None:
        self.db.close()
        logger.info("Trading bot closed")

    # --- Position queries and actions ---

    def get_active_positions(self) -> list[Position]:
        return self.position_engine.get_active_positions()

    def get_position_details(self, address: str) -> PositionDetails | None:
        return self.position_engine.get_position_details(address)

    async def close_position(self, address: str) -> bool:
        return await self.position_engine.close_manually(address)

    async def emergency_close_all(self) -> int:
        return await self.position_engine.emergency_close_all()

    def add_custom_order(self, address: str, params: OrderCreationParams) -> bool:
        return self.position_engine.add_custom_order(address, params)

    def remove_order(self, address: str, order_id: str) -> bool:
        return self.position_engine.remove_order(address, order_id)

    # --- Order queries and actions ---

    def get_position_orders(self, address: str) -> list[Order]:
        return self.db.get_position_orders(address)

    def get_pending_orders(self) -> list[Order]:
        return self.db.get_pending_orders()

    def get_order(self, order_id: str) -> Order | None:
        return self.db.get_order(order_id)

    def cancel_order(self, order_id: str) -> bool:
        return self.order_engine.cancel(order_id)

    def cancel_position_orders(self, address: str) -> int:
        return self.order_engine.cancel_all_for_position(address)

    # --- Reporting ---

    def get_trade_history(self, limit: int = 100) -> list[TradeHistoryRecord]:
        return self.db.get_trade_history(limit)

    def get_stats(self) -> TradingStats:
        return self.position_engine.get_stats()

    def get_performance_metrics(self) -> dict[str, Any]:
        """Average gain over active positions and the win rate of recent sells"""
        positions = self.get_active_positions()
        gains = [calculate_gain(p) for p in positions]
        trades = self.db.get_trade_history(1000)
        winners = [t for t in trades if t.gain_percent > 0]

        return {
            "total_positions": len(positions),
            "average_gain": sum(gains) / len(gains) if gains else 0.0,
            "success_rate": len(winners) / len(trades) * 100 if trades else 0.0,
            "total_trades": len(trades),
        }

    def get_real_time_data(self) -> dict[str, Any]:
        """Snapshot of positions with derived metrics and pending orders"""
        positions = self.get_active_positions()
        by_id = {p.id: p for p in positions}

        return {
            "positions": [
                {
                    **asdict(p),
                    "gain": calculate_gain(p),
                    "drawdown": calculate_drawdown(p),
                }
                for p in positions
            ],
            "pending_orders": [
                {**asdict(o), "position": by_id.get(o.position_id)}
                for o in self.get_pending_orders()
            ],
            "stats": self.get_stats(),
            "timestamp": datetime.now(),
        }

    def health_check(self) -> dict[str, Any]:
        """Report whether the database answers queries"""
        try:
            stats = self.get_stats()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {
                "status": "unhealthy",
                "details": {"error": str(e), "last_check": datetime.now().isoformat()},
            }

        return {
            "status": "healthy",
            "details": {**asdict(stats), "last_check": datetime.now().isoformat()},
        }

    # --- Maintenance ---

    def clean_old_data(self, days: int = 30) -> int:
        return self.db.clean_old_data(days)

    def backup(self, backup_path: str | Path) -> None:
        self.db.backup(backup_path)

    def get_database_info(self) -> dict[str, Any]:
        return {**self.db.get_db_size(), **asdict(self.get_stats())}

    def export_data(self) -> dict[str, Any]:
        """Everything an offline analysis needs, as plain dicts"""
        return {
            "positions": [asdict(p) for p in self.get_active_positions()],
            "orders": [asdict(o) for o in self.get_pending_orders()],
            "trade_history": [asdict(t) for t in self.db.get_trade_history(1000)],
            "stats": asdict(self.get_stats()),
            "export_time": datetime.now().isoformat(),
        }
