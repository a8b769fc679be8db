#!/usr/bin/env python3
"""
components/exchanges/base_api.py
DualBot - Exchange Interfaces
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Abstract interfaces the trading engine consumes.

Features:
- MarketDataAdapter: latest quote + price history (read side)
- OrderGateway: market order submission (write side, live mode only)
- OrderAck: normalized exchange acknowledgement

Paper trading only needs a MarketDataAdapter; the gateway is injected
into live execution only.

Usage:
    from components.exchanges.base_api import MarketDataAdapter

    class MyFeed(MarketDataAdapter):
        def get_latest_quote(self, symbol):
            ...

        def get_price_history(self, symbol, timeframe, limit):
            ...

Dependencies:
    - python>=3.10
    - pandas>=2.0.0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pandas as pd

from components.strategies.trading_types import Quote

# Order sides
BUY = "buy"
SELL = "sell"

# Order categories
CATEGORY_SPOT = "spot"
CATEGORY_LINEAR = "linear"


@dataclass(frozen=True)
class OrderAck:
    """Exchange acknowledgement of a submitted order"""
    order_id: Optional[str]
    price: Optional[Decimal]
    quantity: Optional[Decimal]
    raw: Optional[Dict[str, Any]] = None


# ============================================================================
# MARKET DATA
# ============================================================================

class MarketDataAdapter(ABC):
    """Read side of an exchange"""

    @abstractmethod
    def get_latest_quote(self, symbol: str) -> Quote:
        """
        Raises:
            QuoteUnavailable: No usable price
        """
        raise NotImplementedError

    @abstractmethod
    def get_price_history(self, symbol: str, timeframe: str, limit: int) -> pd.DataFrame:
        """
        OHLCV DataFrame (timestamp, open, high, low, close, volume), oldest first

        Raises:
            HistoryUnavailable: Candles could not be fetched
        """
        raise NotImplementedError

    def get_top_symbols(self, limit: int = 10) -> List[str]:
        """Optional symbol discovery (highest quote volume)"""
        return []


# ============================================================================
# ORDER GATEWAY
# ============================================================================

class OrderGateway(ABC):
    """Write side of an exchange"""

    @abstractmethod
    def submit_order(self, symbol: str, side: str, quantity: Decimal, category: str) -> OrderAck:
        """
        Submit a market order

        Args:
            side: 'buy' or 'sell'
            category: 'spot' or 'linear'
        """
        raise NotImplementedError


__all__ = [
    'MarketDataAdapter',
    'OrderGateway',
    'OrderAck',
    'BUY',
    'SELL',
    'CATEGORY_SPOT',
    'CATEGORY_LINEAR',
]
