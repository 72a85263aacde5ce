"""Configuration management for Snipe trading bot"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from snipe.shared.constants import NOTIFICATION_CATEGORIES
from snipe.shared.exceptions import ConfigurationError


@dataclass
class StrategyConfig:
    """Default exit orders attached to every new position"""

    # Stop loss on gain percent (negative)
    initial_stop_loss: float = -65.0

    # Sell part of the position once it has doubled
    double_profit_threshold: float = 100.0
    double_sell_ratio: float = 50.0
    # Doubling order is skipped above this entry price
    double_profit_max_entry: float = 30000.0

    # Market cap take-profit tiers
    target_mc_1: float = 200000.0
    target_mc_1_ratio: float = 50.0
    target_mc_2: float = 900000.0
    target_mc_2_ratio: float = 100.0

    # Sell when the feed raises the LFG flag
    lfg_sell_ratio: float = 65.0
    # Wait before the balance check on LFG sells (seconds)
    lfg_sell_delay_seconds: float = 2.0


@dataclass
class FilterConfig:
    """Thresholds for the new-pair admission filter"""

    min_market_cap: float = 20000.0
    max_market_cap: float = 50000.0
    min_holders: int = 200
    # Bonding curve progress, as a fraction
    max_progress: float = 1.0
    max_entry_price_ratio: float = 8.0
    max_rat: float = 8.0
    min_volume_1h: float = 10000.0
    max_top70_share: float = 0.25
    min_kol: int = 4
    min_top10_share: float = 0.15
    max_top10_share: float = 0.30
    min_age_minutes: float = 3.0
    dev_status: str = "creator_close"
    burn_status: str = "burn"
    mint_type: str = "full"


@dataclass
class RetryConfig:
    """Requeue policy for FAILED sell orders"""

    # 0 disables retries
    max_retries: int = 2
    # Wait backoff * 2**(attempt - 1) after a failure
    backoff_seconds: float = 30.0
    # How often the monitor runs the retry pass
    interval_seconds: float = 60.0


def get_db_path() -> Path:
    """Get database path that works both locally and in production.

    Priority order:
    1. Production path: /opt/snipe/data/trading.db (production deployment)
    2. Local development path: project_root/data/trading.db (development)

    Returns:
        Path object for the database file
    """
    production_path = Path("/opt/snipe/data/trading.db")
    if production_path.parent.exists():
        logger.debug(f"Using production database path: {production_path}")
        return production_path

    # src/snipe/trading/core/config.py -> project root
    project_root = Path(__file__).resolve().parents[4]
    local_path = project_root / "data" / "trading.db"
    local_path.parent.mkdir(parents=True, exist_ok=True)

    logger.debug(f"Using local database path: {local_path}")
    return local_path


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


@dataclass
class Config:
    """Configuration for Snipe trading bot loaded from environment variables"""

    discord_webhook_url: str | None = None
    # Per-category webhook overrides, keyed by category name
    category_webhooks: dict[str, str] = field(default_factory=dict)

    paper_trading: bool = True
    sol_investment_amount: float = 0.01
    max_positions: int = 30
    db_path: str = "/opt/snipe/data/trading.db"
    feed_url: str | None = None
    log_dir: str = "logs"

    strategy_config: StrategyConfig = field(default_factory=StrategyConfig)
    filter_config: FilterConfig = field(default_factory=FilterConfig)
    retry_config: RetryConfig = field(default_factory=RetryConfig)

    def validate(self) -> list[str]:
        """Check settings for values the engines cannot run with

        Returns:
            List of error messages, empty when the config is usable
        """
        errors = []
        strategy = self.strategy_config

        if self.sol_investment_amount <= 0:
            errors.append("SOL investment amount must be positive")
        if self.max_positions <= 0:
            errors.append("Max positions must be positive")
        if strategy.initial_stop_loss >= 0:
            errors.append("Initial stop loss must be negative")
        if strategy.double_profit_threshold <= 0:
            errors.append("Double profit threshold must be positive")
        if self.retry_config.max_retries < 0:
            errors.append("Max retries cannot be negative")

        ratios = {
            "Double sell ratio": strategy.double_sell_ratio,
            "Target MC 1 ratio": strategy.target_mc_1_ratio,
            "Target MC 2 ratio": strategy.target_mc_2_ratio,
            "LFG sell ratio": strategy.lfg_sell_ratio,
        }
        for name, ratio in ratios.items():
            if not 0 <= ratio <= 100:
                errors.append(f"{name} must be between 0 and 100")

        return errors

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables

        Returns:
            Config instance with values from environment

        Raises:
            ConfigurationError: If a variable is malformed or the resulting
                settings fail validation
        """
        category_webhooks = {}
        for category in NOTIFICATION_CATEGORIES:
            url = os.getenv(f"DISCORD_WEBHOOK_URL_{category.upper()}")
            if url:
                category_webhooks[category] = url

        config = cls(
            discord_webhook_url=os.getenv("DISCORD_WEBHOOK_URL"),
            category_webhooks=category_webhooks,
            paper_trading=os.getenv("PAPER_TRADING", "true").lower() == "true",
            sol_investment_amount=_env_float("SOL_INVESTMENT_AMOUNT", 0.01),
            max_positions=_env_int("MAX_POSITIONS", 30),
            db_path=os.getenv("DB_PATH") or str(get_db_path()),
            feed_url=os.getenv("FEED_URL"),
            log_dir=os.getenv("LOG_DIR", "logs"),
            strategy_config=StrategyConfig(
                initial_stop_loss=_env_float("INITIAL_STOP_LOSS", -65.0),
                double_profit_threshold=_env_float("DOUBLE_PROFIT_THRESHOLD", 100.0),
                double_sell_ratio=_env_float("DOUBLE_SELL_RATIO", 50.0),
                double_profit_max_entry=_env_float("DOUBLE_PROFIT_MAX_ENTRY", 30000.0),
                target_mc_1=_env_float("TARGET_MC_1", 200000.0),
                target_mc_1_ratio=_env_float("TARGET_MC_1_RATIO", 50.0),
                target_mc_2=_env_float("TARGET_MC_2", 900000.0),
                target_mc_2_ratio=_env_float("TARGET_MC_2_RATIO", 100.0),
                lfg_sell_ratio=_env_float("LFG_SELL_RATIO", 65.0),
                lfg_sell_delay_seconds=_env_float("LFG_SELL_DELAY_SECONDS", 2.0),
            ),
            retry_config=RetryConfig(
                max_retries=_env_int("ORDER_MAX_RETRIES", 2),
                backoff_seconds=_env_float("ORDER_RETRY_BACKOFF_SECONDS", 30.0),
            ),
        )

        errors = config.validate()
        if errors:
            raise ConfigurationError(
                "Invalid configuration: " + "; ".join(errors)
            )

        strategy = config.strategy_config
        logger.info("Configuration loaded:")
        logger.info(f"  Paper Trading: {config.paper_trading}")
        logger.info(f"  SOL Investment: {config.sol_investment_amount} SOL")
        logger.info(f"  Max Positions: {config.max_positions}")
        logger.info(f"  Database: {config.db_path}")
        logger.info(f"  Feed: {config.feed_url or 'Not configured'}")
        logger.info(
            f"  Discord Webhook: {'Configured' if config.discord_webhook_url else 'Not configured'}"
        )
        if category_webhooks:
            logger.info(
                f"  Category Webhooks: {', '.join(sorted(category_webhooks))}"
            )
        logger.info(f"  Stop Loss: {strategy.initial_stop_loss}%")
        logger.info(
            f"  Double Profit: {strategy.double_profit_threshold}% "
            f"(sell {strategy.double_sell_ratio}%)"
        )
        logger.info(
            f"  Target MC 1: {strategy.target_mc_1:,.0f} "
            f"(sell {strategy.target_mc_1_ratio}%)"
        )
        logger.info(
            f"  Target MC 2: {strategy.target_mc_2:,.0f} "
            f"(sell {strategy.target_mc_2_ratio}%)"
        )
        logger.info(f"  LFG Sell Ratio: {strategy.lfg_sell_ratio}%")
        logger.info(
            f"  Order Retries: {config.retry_config.max_retries} "
            f"(backoff {config.retry_config.backoff_seconds}s)"
        )

        return config
