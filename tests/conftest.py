"""Pytest fixtures for Snipe trading bot tests"""

from unittest.mock import MagicMock

import pytest

from snipe.infrastructure.executors import PaperTradeExecutor
from snipe.trading.core.config import Config, RetryConfig, StrategyConfig
from snipe.trading.data import Database
from snipe.trading.engine import OrderEngine, PositionEngine


@pytest.fixture
def test_db():
    """In-memory SQLite database for testing"""
    db = Database(":memory:")
    yield db
    db.close()


@pytest.fixture
def paper_executor() -> PaperTradeExecutor:
    return PaperTradeExecutor()


@pytest.fixture
def notifier() -> MagicMock:
    """Notifier double that records every message"""
    mock = MagicMock()
    mock.notify.return_value = True
    return mock


@pytest.fixture
def strategy_config() -> StrategyConfig:
    """Default strategy without the LFG pre-sell wait"""
    return StrategyConfig(lfg_sell_delay_seconds=0)


@pytest.fixture
def retry_config() -> RetryConfig:
    return RetryConfig(max_retries=2, backoff_seconds=30)


@pytest.fixture
def order_engine(
    test_db, paper_executor, notifier, strategy_config, retry_config
) -> OrderEngine:
    return OrderEngine(
        test_db,
        paper_executor,
        notifier=notifier,
        strategy_config=strategy_config,
        retry_config=retry_config,
    )


@pytest.fixture
def position_engine(test_db, order_engine) -> PositionEngine:
    return PositionEngine(test_db, order_engine, max_positions=3)


@pytest.fixture
def bot_config(strategy_config) -> Config:
    """Paper trading config backed by an in-memory database"""
    return Config(
        discord_webhook_url=None,
        db_path=":memory:",
        max_positions=3,
        sol_investment_amount=0.01,
        strategy_config=strategy_config,
    )
