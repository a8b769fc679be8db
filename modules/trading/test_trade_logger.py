#!/usr/bin/env python3
"""
modules/trading/test_trade_logger.py
DualBot - Trade Logger Tests
"""

from components.strategies.trading_types import ErrorLevel, TradingMode
from modules.trading.trade_logger import TradeLogger


def test_mirror_keeps_latest_hundred(data_manager):
    trade_logger = TradeLogger(TradingMode.SPOT, data_manager)

    for i in range(150):
        trade_logger.log("SCAN", f"entry {i}")

    assert len(trade_logger.mirror) == 100
    assert trade_logger.mirror[0].message == "entry 50"
    assert trade_logger.mirror[-1].message == "entry 149"
    assert len(data_manager.logs.get_logs("default", limit=None)) == 150


def test_entries_reach_store_and_bus(data_manager, event_bus):
    trade_logger = TradeLogger(TradingMode.LEVERAGE, data_manager, event_bus)
    logs = event_bus.subscribe("log.leverage")
    errors = event_bus.subscribe("error.*")

    entry = trade_logger.log("SIGNAL", "BTCUSDT LONG", symbol="BTCUSDT", data={"confidence": 80.0})
    trade_logger.error(ErrorLevel.WARNING, "Quote Unavailable", "BTCUSDT")

    assert entry.message == "[LEVERAGE] BTCUSDT LONG"
    assert data_manager.logs.get_logs("default")[0].data == {"confidence": 80.0}
    assert logs.get(timeout=1).data["message"] == "[LEVERAGE] BTCUSDT LONG"
    assert errors.get(timeout=1).topic == "error.leverage"
    assert data_manager.logs.get_errors("default")[0].message == "[LEVERAGE] BTCUSDT"
