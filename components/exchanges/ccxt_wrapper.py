#!/usr/bin/env python3
"""
components/exchanges/ccxt_wrapper.py
DualBot - CCXT Wrapper
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

CCXT-backed MarketDataAdapter and OrderGateway.

Features:
- Synchronous ccxt client (each bot controller runs on its own thread)
- Supports testnet/production environments
- Config-driven credentials
- Rate limiting (ccxt enableRateLimit)
- Exchange-style symbols (BTCUSDT) mapped to ccxt markets
  (BTC/USDT for spot, BTC/USDT:USDT for linear)

Usage:
    from components.exchanges.ccxt_wrapper import CCXTWrapper

    spot_feed = CCXTWrapper(config['exchange'], category='spot')
    quote = spot_feed.get_latest_quote('BTCUSDT')
    df = spot_feed.get_price_history('BTCUSDT', '15m', 200)

Dependencies:
    - ccxt>=4.0.0
    - pandas>=2.0.0
"""

from __future__ import annotations

import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional

import ccxt
import pandas as pd

# Add project root to path for direct execution
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent
    sys.path.insert(0, str(project_root))

from components.exchanges.base_api import (
    CATEGORY_LINEAR,
    CATEGORY_SPOT,
    MarketDataAdapter,
    OrderAck,
    OrderGateway,
)
from components.indicators.indicator_manager import candles_to_frame
from components.strategies.trading_types import HistoryUnavailable, Quote, QuoteUnavailable, utc_now
from core.logger_engine import get_logger

QUOTE_CURRENCIES = ("USDT", "USDC", "BTC", "ETH")


def to_market_symbol(symbol: str, category: str = CATEGORY_SPOT) -> str:
    """
    BTCUSDT -> BTC/USDT (spot) or BTC/USDT:USDT (linear)

    Symbols already in ccxt form are returned unchanged.
    """
    if "/" in symbol:
        return symbol

    for quote in QUOTE_CURRENCIES:
        if symbol.endswith(quote) and len(symbol) > len(quote):
            base = symbol[:-len(quote)]
            market = f"{base}/{quote}"
            return f"{market}:{quote}" if category == CATEGORY_LINEAR else market
    return symbol


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


# ============================================================================
# CCXT WRAPPER
# ============================================================================

class CCXTWrapper(MarketDataAdapter, OrderGateway):
    """
    CCXT exchange wrapper

    One instance per market category: the spot bot reads spot markets,
    the leverage bot reads linear (USDT-margined perpetual) markets.
    """

    def __init__(self, config: Dict[str, Any], category: str = CATEGORY_SPOT):
        """
        Args:
            config: exchange section (id, api_key, api_secret, testnet, timeout)
            category: 'spot' or 'linear'

        Raises:
            ValueError: The exchange is not supported by CCXT.
        """
        self.config = config or {}
        self.category = category
        self.exchange_name = str(self.config.get("id", "bybit")).lower()
        self.testnet = bool(self.config.get("testnet", True))
        self.logger = get_logger(f"{__name__}.{self.exchange_name}")

        exchange_class = getattr(ccxt, self.exchange_name, None)
        if not exchange_class:
            raise ValueError(f"Exchange '{self.exchange_name}' is not supported by CCXT")

        ccxt_config = {
            'enableRateLimit': True,
            'timeout': int(self.config.get('timeout', 30)) * 1000,  # ms
            'options': {'defaultType': 'swap' if category == CATEGORY_LINEAR else 'spot'},
        }

        api_key = self.config.get("api_key")
        api_secret = self.config.get("api_secret")
        if api_key and api_secret:
            ccxt_config['apiKey'] = api_key
            ccxt_config['secret'] = api_secret

        self.exchange = exchange_class(ccxt_config)
        if self.testnet:
            self.exchange.set_sandbox_mode(True)

        self.stats = {
            "total_requests": 0,
            "total_errors": 0,
        }

        env = "testnet" if self.testnet else "production"
        self.logger.info(f"✅ {self.exchange_name.upper()} {category} adapter started ({env})")

    # ========================================================================
    # MARKET DATA
    # ========================================================================

    def get_latest_quote(self, symbol: str) -> Quote:
        market = to_market_symbol(symbol, self.category)
        try:
            ticker = self.exchange.fetch_ticker(market)
            self.stats["total_requests"] += 1
        except ccxt.BaseError as e:
            self.stats["total_errors"] += 1
            raise QuoteUnavailable(symbol, str(e)) from e

        price = _decimal(ticker.get("last") or ticker.get("close"))
        if price is None or price <= 0:
            raise QuoteUnavailable(symbol, "no last price")

        return Quote(
            symbol=symbol,
            price=price,
            volume=_decimal(ticker.get("baseVolume")),
            timestamp=utc_now(),
        )

    def get_price_history(self, symbol: str, timeframe: str, limit: int) -> pd.DataFrame:
        market = to_market_symbol(symbol, self.category)
        try:
            candles = self.exchange.fetch_ohlcv(market, timeframe=timeframe, limit=limit)
            self.stats["total_requests"] += 1
        except ccxt.BaseError as e:
            self.logger.error(f"❌ Kline error ({symbol}): {e}")
            self.stats["total_errors"] += 1
            raise HistoryUnavailable(symbol, str(e)) from e

        return candles_to_frame(candles)

    def get_top_symbols(self, limit: int = 10) -> List[str]:
        """Most traded USDT markets of this category, exchange-style names"""
        try:
            tickers = self.exchange.fetch_tickers()
            self.stats["total_requests"] += 1
        except ccxt.BaseError as e:
            self.logger.error(f"❌ Tickers error: {e}")
            self.stats["total_errors"] += 1
            return []

        suffix = ":USDT" if self.category == CATEGORY_LINEAR else "/USDT"
        ranked = sorted(
            (t for s, t in tickers.items() if s.endswith(suffix)),
            key=lambda t: t.get("quoteVolume") or 0,
            reverse=True
        )
        return [t["symbol"].split(":")[0].replace("/", "") for t in ranked[:limit]]

    # ========================================================================
    # TRADING
    # ========================================================================

    def submit_order(self, symbol: str, side: str, quantity: Decimal, category: str) -> OrderAck:
        """
        Market order, single attempt

        Raises:
            ccxt.BaseError: Exchange rejected the order / network failure
        """
        market = to_market_symbol(symbol, category)
        params = {'category': category}
        try:
            result = self.exchange.create_order(
                symbol=market,
                type='market',
                side=side.lower(),
                amount=float(quantity),
                params=params
            )
            self.stats["total_requests"] += 1
        except ccxt.BaseError as e:
            self.logger.error(f"❌ Error creating order ({symbol}): {e}")
            self.stats["total_errors"] += 1
            raise

        self.logger.info(f"📝 Order created: {symbol} {side} {quantity}")
        return OrderAck(
            order_id=result.get("id"),
            price=_decimal(result.get("average") or result.get("price")),
            quantity=_decimal(result.get("filled") or result.get("amount")),
            raw=result,
        )

    # ========================================================================
    # UTILITY
    # ========================================================================

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self.stats,
            "exchange": self.exchange_name,
            "category": self.category,
            "testnet": self.testnet,
        }

    def close(self):
        """Release the HTTP session"""
        session = getattr(self.exchange, "session", None)
        if session is not None:
            session.close()
        self.logger.info(f"🛑 Connection to {self.exchange_name.upper()} closed")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'CCXTWrapper',
    'to_market_symbol',
]


# ============================================================================
# TEST
# ============================================================================

if __name__ == "__main__":
    print("=" * 60)
    print("🧪 CCXTWrapper Test")
    print("=" * 60)

    print(f"   BTCUSDT spot:   {to_market_symbol('BTCUSDT')}")
    print(f"   BTCUSDT linear: {to_market_symbol('BTCUSDT', CATEGORY_LINEAR)}")

    feed = CCXTWrapper({"id": "bybit", "testnet": True})
    print(f"   Stats: {feed.get_stats()}")
    feed.close()

    print("\n✅ All tests completed!")
    print("=" * 60)
