#!/usr/bin/env python3
"""
components/strategies/test_position_manager.py
DualBot - Position Manager Tests
"""

import threading
from decimal import Decimal

import pytest

from components.strategies.position_manager import MANUAL, STOP_LOSS, TAKE_PROFIT, PositionManager
from components.strategies.risk_manager import RiskManager
from components.strategies.trading_types import (
    Direction,
    Position,
    PositionStatus,
    StrategyName,
    TradingMode,
    TradingOpportunity,
    TradingSettings,
    utc_now,
)
from modules.trading.modes import select_mode
from modules.trading.trade_logger import TradeLogger


def opportunity(direction=Direction.LONG, price="30000") -> TradingOpportunity:
    return TradingOpportunity(
        symbol="BTCUSDT", strategy=StrategyName.TREND_FOLLOWING, direction=direction,
        confidence=82.0, description="test", price=Decimal(price),
    )


@pytest.fixture
def pm(data_manager, gateway):
    mode = TradingMode.LEVERAGE
    return PositionManager(
        mode,
        data_manager,
        lambda paper: select_mode(paper, gateway, mode),
        TradeLogger(mode, data_manager),
    )


def open_paper(pm, direction=Direction.LONG, settings=None):
    view = (settings or TradingSettings()).for_mode(pm.mode)
    opp = opportunity(direction)
    sizing = RiskManager().assess(opp, view, [])
    return pm.open_position(opp, sizing, view)


def test_open_persists_paper_position(pm, data_manager):
    position = open_paper(pm)

    stored = data_manager.position.get_position(position.id)
    assert stored.is_open
    assert stored.order_id.startswith("PAPER-")
    assert stored.is_paper_trade is True
    assert stored.entry_price == Decimal("30000")
    assert stored.quantity == Decimal("0.00277777")
    assert stored.stop_loss == Decimal("29100")
    assert stored.strategy == "trend_following"

    logs = data_manager.logs.get_logs("default")
    assert logs[0].level == "TRADE"
    assert logs[0].message.startswith("[LEVERAGE]")


def test_refresh_marks_to_market(pm, data_manager):
    position = open_paper(pm)

    marked = pm.refresh([position], {"BTCUSDT": Decimal("30900")})

    assert len(marked) == 1
    stored = data_manager.position.get_position(position.id)
    assert stored.current_price == Decimal("30900")
    assert stored.pnl == Decimal("900") * Decimal("0.00277777")


def test_refresh_skips_missing_quotes(pm):
    position = open_paper(pm)
    assert pm.refresh([position], {}) == []


def test_check_exit_by_direction(pm):
    long = Position(
        symbol="BTCUSDT", direction=Direction.LONG, entry_price=Decimal("30000"),
        quantity=Decimal("1"), trading_mode=TradingMode.LEVERAGE,
        stop_loss=Decimal("29100"), take_profit=Decimal("31800"),
    )
    assert pm.check_exit(long, Decimal("29100")) == STOP_LOSS
    assert pm.check_exit(long, Decimal("31800")) == TAKE_PROFIT
    assert pm.check_exit(long, Decimal("30000")) is None

    short = Position(
        symbol="BTCUSDT", direction=Direction.SHORT, entry_price=Decimal("30000"),
        quantity=Decimal("1"), trading_mode=TradingMode.LEVERAGE,
        stop_loss=Decimal("30900"), take_profit=Decimal("28200"),
    )
    assert pm.check_exit(short, Decimal("31000")) == STOP_LOSS
    assert pm.check_exit(short, Decimal("28000")) == TAKE_PROFIT
    assert pm.check_exit(short, Decimal("30000")) is None


def test_monitor_closes_on_take_profit(pm, data_manager):
    position = open_paper(pm, Direction.SHORT)

    trades = pm.monitor({"BTCUSDT": Decimal("28000")})

    assert len(trades) == 1
    assert trades[0].close_reason == TAKE_PROFIT
    assert trades[0].pnl == Decimal("2000") * Decimal("0.00277777")
    assert data_manager.position.get_position(position.id).status == PositionStatus.CLOSED


def test_second_close_is_a_noop(pm, data_manager):
    position = open_paper(pm)

    trade = pm.close_position(position.id, MANUAL, Decimal("31000"))
    assert trade is not None
    assert trade.duration >= 0
    assert trade.pnl == Decimal("1000") * Decimal("0.00277777")

    assert pm.close_position(position.id, MANUAL, Decimal("32000")) is None
    assert len(data_manager.trading.get_trades_for_position(position.id)) == 1

    info = [log for log in data_manager.logs.get_logs("default") if log.level == "INFO"]
    assert any("already closed" in log.message for log in info)


def test_concurrent_close_creates_one_trade(pm, data_manager):
    position = open_paper(pm)
    barrier = threading.Barrier(2)
    results = []

    def close():
        barrier.wait()
        results.append(pm.close_position(position.id, MANUAL, Decimal("30500")))

    threads = [threading.Thread(target=close) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert len([r for r in results if r is not None]) == 1
    assert len(data_manager.trading.get_trades_for_position(position.id)) == 1


def test_live_close_failure_keeps_position_open(pm, data_manager, gateway):
    gateway.fill_price = Decimal("30010")
    live = TradingSettings().with_mode(TradingMode.LEVERAGE, paper_trading=False)
    position = open_paper(pm, settings=live)

    assert position.order_id == "EX-1"
    assert position.entry_price == Decimal("30010")
    assert position.is_paper_trade is False
    assert gateway.orders[0]["side"] == "buy"
    assert gateway.orders[0]["category"] == "linear"

    gateway.fail = RuntimeError("exchange down")
    assert pm.close_position(position.id, MANUAL, Decimal("30500")) is None
    assert data_manager.position.get_position(position.id).is_open

    errors = data_manager.logs.get_errors("default")
    assert errors[0].title == "Close Order Failed"
    assert str(errors[0].level) == "WARNING"

    gateway.fail = None
    trade = pm.close_position(position.id, MANUAL)
    assert trade is not None
    assert gateway.orders[-1]["side"] == "sell"


def test_refresh_drops_lock_of_position_closed_elsewhere(pm, data_manager):
    position = open_paper(pm)
    data_manager.position.close_position(
        position.id, exit_price=Decimal("30100"), pnl=Decimal("0.277777"),
        closed_at=utc_now(), close_reason=MANUAL,
    )

    assert pm.refresh([position], {"BTCUSDT": Decimal("30200")}) == []
    assert position.id not in pm._locks


def test_close_without_quote_falls_back_to_last_mark(data_manager, gateway, market_data):
    mode = TradingMode.SPOT
    pm = PositionManager(
        mode, data_manager, lambda paper: select_mode(paper, gateway, mode),
        TradeLogger(mode, data_manager), market_data=market_data,
    )
    position = open_paper(pm)
    pm.refresh([position], {"BTCUSDT": Decimal("30900")})

    trade = pm.close_position(position.id)

    assert trade is not None
    assert trade.exit_price == Decimal("30900")
    warnings = [log for log in data_manager.logs.get_logs("default") if log.level == "WARNING"]
    assert any("last mark 30900" in log.message for log in warnings)


def test_live_close_without_gateway_keeps_position_open(pm, data_manager):
    live = TradingSettings().with_mode(TradingMode.LEVERAGE, paper_trading=False)
    position = open_paper(pm, settings=live)
    no_gateway = PositionManager(
        pm.mode, data_manager, lambda paper: select_mode(paper, None, pm.mode),
        TradeLogger(pm.mode, data_manager),
    )

    assert no_gateway.close_position(position.id, MANUAL, Decimal("30500")) is None
    assert data_manager.position.get_position(position.id).is_open
    error = data_manager.logs.get_errors("default")[0]
    assert error.title == "Close Failed"
    assert "requires an order gateway" in error.message
