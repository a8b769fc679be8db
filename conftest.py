"""
Shared pytest fixtures

- data_manager: in-memory SQLite DataManager
- market_data: FakeMarketData (scripted quotes and histories)
- gateway: FakeGateway (records submitted orders)
- make_history: OHLCV DataFrame factory
"""

import itertools
from decimal import Decimal
from typing import Dict, List, Optional

import pandas as pd
import pytest

from components.datamanager import DataManager
from components.exchanges.base_api import MarketDataAdapter, OrderAck, OrderGateway
from components.strategies.trading_types import Quote, QuoteUnavailable
from core.event_bus import EventBus


def build_history(
    closes: List[float],
    volumes: Optional[List[float]] = None,
    spread: float = 0.5,
) -> pd.DataFrame:
    """OHLCV frame with high/low at close +/- spread"""
    volumes = volumes or [100.0] * len(closes)
    return pd.DataFrame({
        'timestamp': [i * 60_000 for i in range(len(closes))],
        'open': closes,
        'high': [c + spread for c in closes],
        'low': [c - spread for c in closes],
        'close': closes,
        'volume': volumes,
    })


def breakout_history(bars: int = 60, jump: float = 110.0, volume_ratio: float = 5.0) -> pd.DataFrame:
    """Sideways zigzag around 100, then one wide high-volume bar closing at `jump`"""
    closes = [100.0 if i % 2 == 0 else 100.5 for i in range(bars - 1)] + [jump]
    volumes = [100.0] * (bars - 1) + [100.0 * volume_ratio]
    return build_history(closes, volumes)


class FakeMarketData(MarketDataAdapter):
    """Scripted quotes/histories; unknown symbols raise QuoteUnavailable, history_errors are raised as is"""

    def __init__(self):
        self.quotes: Dict[str, Decimal] = {}
        self.histories: Dict[str, pd.DataFrame] = {}
        self.history_errors: Dict[str, Exception] = {}
        self.quote_calls: List[str] = []

    def set_quote(self, symbol: str, price):
        self.quotes[symbol] = Decimal(str(price))

    def get_latest_quote(self, symbol: str) -> Quote:
        self.quote_calls.append(symbol)
        if symbol not in self.quotes:
            raise QuoteUnavailable(symbol, "not scripted")
        return Quote(symbol=symbol, price=self.quotes[symbol])

    def get_price_history(self, symbol: str, timeframe: str, limit: int) -> pd.DataFrame:
        if symbol in self.history_errors:
            raise self.history_errors[symbol]
        return self.histories.get(symbol, build_history([100.0] * 5)).tail(limit)


class FakeGateway(OrderGateway):
    """Records orders; fills at fill_price unless fail is set"""

    def __init__(self, fill_price: Optional[Decimal] = Decimal("100")):
        self.fill_price = fill_price
        self.fail: Optional[Exception] = None
        self.orders: List[dict] = []
        self._ids = itertools.count(1)

    def submit_order(self, symbol: str, side: str, quantity: Decimal, category: str) -> OrderAck:
        self.orders.append({"symbol": symbol, "side": side, "quantity": quantity, "category": category})
        if self.fail is not None:
            raise self.fail
        return OrderAck(order_id=f"EX-{next(self._ids)}", price=self.fill_price, quantity=quantity)


@pytest.fixture
def data_manager():
    dm = DataManager({"path": ":memory:"})
    dm.start()
    yield dm
    dm.stop()


@pytest.fixture
def market_data():
    return FakeMarketData()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def event_bus():
    return EventBus({"history_size": 100, "subscriber_queue_size": 100})


@pytest.fixture
def make_history():
    return build_history


@pytest.fixture
def make_breakout_history():
    return breakout_history
