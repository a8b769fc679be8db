#!/usr/bin/env python3
"""
dualbot.py
DualBot - Entry Point
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Runs the spot and leverage trading bots until SIGINT/SIGTERM.

Features:
- Config (config/main.yaml + config/trading.yaml + config/.env)
- Logging (Rich console, optional JSON files)
- SQLite persistence (DataManager)
- CCXT market data / order gateway per market category
- EventBus log stream
- Graceful shutdown (stops both bots, waits for in-flight ticks)

Usage:
    python dualbot.py                          # both bots
    python dualbot.py --modes spot             # spot only
    python dualbot.py --interval 30 --verbose
    python dualbot.py --config config --user-id alice

Dependencies:
    - python>=3.10
    - ccxt, sqlalchemy, pandas, pyyaml, python-dotenv, pydantic, rich
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# Add project root to path
ROOT_DIR = Path(__file__).parent
sys.path.insert(0, str(ROOT_DIR))

from core.config_engine import CONFIG_FILES, ConfigEngine
from core.event_bus import EventBus
from core.graceful_shutdown import GracefulShutdown
from core.logger_engine import get_logger, get_logger_engine

from components.datamanager import DataManager
from components.exchanges.base_api import CATEGORY_LINEAR, CATEGORY_SPOT
from components.exchanges.ccxt_wrapper import CCXTWrapper
from components.strategies.trading_types import TradingMode
from modules.trading.bot_manager import BotManager


def _resolved(value: Optional[str]) -> Optional[str]:
    """Unresolved ${VAR} placeholders count as missing"""
    if not value or str(value).startswith("${"):
        return None
    return value


def build_exchange_config(config: ConfigEngine) -> Dict[str, Any]:
    exchange = dict(config.get("exchange", {}) or {})
    exchange["api_key"] = _resolved(exchange.get("api_key"))
    exchange["api_secret"] = _resolved(exchange.get("api_secret"))
    return exchange


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='DualBot - spot & leverage trading bots')
    parser.add_argument('--modes', nargs='+', choices=[m.value for m in TradingMode],
                        default=[m.value for m in TradingMode], help='Bots to start')
    parser.add_argument('--config', default='config', help='Config directory path')
    parser.add_argument('--user-id', default=None, help='Settings owner (overrides engine.user_id)')
    parser.add_argument('--interval', type=float, default=None,
                        help='Seconds between ticks (overrides engine.tick_interval)')
    parser.add_argument('--verbose', action='store_true', help='Verbose logging')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    config = ConfigEngine(base_path=args.config)
    config.load_all(CONFIG_FILES)

    logger_engine = get_logger_engine(config.get("logging", {}) or {})
    if args.verbose:
        logger_engine.set_verbose_mode(True)
    logger = get_logger("dualbot")

    engine_config = config.get_engine_config()
    if args.user_id:
        engine_config["user_id"] = args.user_id
    if args.interval:
        engine_config["tick_interval"] = args.interval

    modes = [TradingMode(m) for m in args.modes]

    data_manager = DataManager(config.get("database", {}) or {})
    data_manager.start()

    exchange_config = build_exchange_config(config)
    feeds = {
        TradingMode.SPOT: CCXTWrapper(exchange_config, category=CATEGORY_SPOT),
        TradingMode.LEVERAGE: CCXTWrapper(exchange_config, category=CATEGORY_LINEAR),
    }
    feeds = {mode: feed for mode, feed in feeds.items() if mode in modes}

    event_bus = EventBus(config.get("eventbus", {}) or {})
    manager = BotManager(
        data_manager=data_manager,
        market_data=feeds,
        gateways=feeds,
        event_bus=event_bus,
        engine_config=engine_config,
        modes=modes,
    )

    shutdown = GracefulShutdown(logger)
    shutdown.register_handlers()
    shutdown.add_pre_shutdown_callback(manager.stop_all)
    for feed in feeds.values():
        shutdown.add_post_shutdown_callback(feed.close)
    shutdown.add_post_shutdown_callback(data_manager.stop)

    for mode in modes:
        status = manager.start(mode)
        logger.info(f"✅ {mode.value}: {status['message']}")

    logger.info("📺 Running, press Ctrl+C to stop")
    shutdown.wait()
    return 0


if __name__ == '__main__':
    sys.exit(main())
