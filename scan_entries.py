"""
Entry scanner process: scan perpetual USDT symbols for RSI extremes and open a position.
"""

from __future__ import annotations

from dotenv import load_dotenv

# Load environment variables before other imports that may read them.
load_dotenv()

from config import settings
from config.bot_config import EntryConfig, require_credentials
from core.scanner import EntryScanner
from core.scheduler import Scheduler
from exchange.account import AccountService
from exchange.binance_client import BinanceClient
from exchange.market_data import MarketDataService
from exchange.order_manager import OrderManager
from execution.entry import EntryExecutor
from infra.logger import get_logger, set_process_name
from infra.notifier import TelegramNotifier
from position.tracker import PositionTracker
from strategy.rsi_extreme import RsiExtremeStrategy


def build_scanner(client: BinanceClient, notifier: TelegramNotifier, config: EntryConfig) -> EntryScanner:
    account = AccountService(client, config.quote_asset)
    executor = EntryExecutor(client, OrderManager(client), account, notifier, config)
    return EntryScanner(
        market_data=MarketDataService(client),
        positions=PositionTracker(client),
        account=account,
        strategy=RsiExtremeStrategy(config),
        executor=executor,
        notifier=notifier,
        config=config,
    )


def main() -> None:
    set_process_name("scanner")
    logger = get_logger("Main")
    api_key, api_secret = require_credentials(settings.TESTNET)
    config = EntryConfig.from_settings()

    client = BinanceClient(api_key, api_secret)
    notifier = TelegramNotifier()
    scanner = build_scanner(client, notifier, config)

    logger.info(
        "Starting entry scanner (testnet=%s, rsi<%s long=%s, rsi>=%s short=%s, price<%s, max_positions=%s)",
        client.use_testnet,
        config.buy_threshold,
        config.long_enabled,
        config.sell_threshold,
        config.short_enabled,
        config.price_ceiling,
        config.max_positions,
    )
    try:
        Scheduler("entry scanner", scanner.run_cycle).run()
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")


if __name__ == "__main__":
    main()
