"""
Position manager process: close open positions once they reach the profit target.
"""

from __future__ import annotations

from dotenv import load_dotenv

# Load environment variables before other imports that may read them.
load_dotenv()

from config import settings
from config.bot_config import ExitConfig, require_credentials
from core.manager import PositionManager
from core.scheduler import Scheduler
from exchange.account import AccountService
from exchange.binance_client import BinanceClient
from exchange.order_manager import OrderManager
from execution.exit import PositionCloser
from execution.margin import MarginSupport
from infra.logger import get_logger, set_process_name
from infra.notifier import TelegramNotifier
from pnl.funding import FundingService
from position.tracker import PositionTracker


def build_manager(client: BinanceClient, notifier: TelegramNotifier, config: ExitConfig) -> PositionManager:
    order_manager = OrderManager(client)
    margin_support = None
    if config.margin_top_up_enabled:
        margin_support = MarginSupport(
            order_manager, AccountService(client, config.quote_asset), notifier, config.support_ratio
        )
    return PositionManager(
        positions=PositionTracker(client),
        funding=FundingService(client),
        closer=PositionCloser(client, order_manager, notifier, reduce_only=config.reduce_only),
        config=config,
        margin_support=margin_support,
    )


def main() -> None:
    set_process_name("manager")
    logger = get_logger("Main")
    api_key, api_secret = require_credentials(settings.TESTNET)
    config = ExitConfig.from_settings()

    client = BinanceClient(api_key, api_secret)
    manager = build_manager(client, TelegramNotifier(), config)

    logger.info(
        "Starting position manager (testnet=%s, profit_ratio=%s, margin_top_up=%s)",
        client.use_testnet,
        config.profit_ratio,
        config.margin_top_up_enabled,
    )
    try:
        Scheduler("position manager", manager.run_cycle, error_delay_sec=config.error_delay_sec).run()
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")


if __name__ == "__main__":
    main()
