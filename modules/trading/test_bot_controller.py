#!/usr/bin/env python3
"""
modules/trading/test_bot_controller.py
DualBot - Bot Controller Tests

Ticks are driven with run_tick() directly; the threaded loop is covered
by the lifecycle tests against a file database.
"""

import threading
import time
from decimal import Decimal

import pytest

from components.datamanager import DataManager
from components.strategies.position_manager import PositionManager
from components.strategies.trading_types import (
    Direction,
    HistoryUnavailable,
    StrategyName,
    StrategyToggles,
    TradingMode,
    TradingOpportunity,
    TradingSettings,
)
from modules.trading.bot_controller import BotController
from modules.trading.modes import select_mode
from modules.trading.trade_logger import TradeLogger


def make_controller(dm, market_data, gateway, mode=TradingMode.SPOT, symbols=("BTCUSDT",),
                    settings_provider=None, event_bus=None, **kwargs):
    dm.settings.ensure_settings("default")
    trade_logger = TradeLogger(mode, dm, event_bus)
    position_manager = PositionManager(
        mode, dm, lambda paper: select_mode(paper, gateway, mode), trade_logger, market_data=market_data
    )
    return BotController(
        mode=mode,
        settings_provider=settings_provider or dm.settings.get_settings,
        market_data=market_data,
        data_manager=dm,
        trade_logger=trade_logger,
        position_manager=position_manager,
        symbols=list(symbols),
        tick_interval=kwargs.pop("tick_interval", 0.05),
        **kwargs,
    )


def messages(dm):
    return [log.message for log in dm.logs.get_logs("default", limit=None)]


def script_breakout(market_data, breakout_history, symbol="BTCUSDT", price=110):
    market_data.histories[symbol] = breakout_history()
    market_data.set_quote(symbol, price)


# ============================================================================
# TICK
# ============================================================================

def test_breakout_opens_spot_position(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    controller = make_controller(data_manager, market_data, gateway)

    summary = controller.run_tick()

    assert summary == {"scanned": 1, "signals": 1, "opened": 1, "closed": 0}
    positions = data_manager.position.get_open_positions("default", TradingMode.SPOT)
    assert len(positions) == 1
    assert positions[0].direction == Direction.UP
    assert positions[0].entry_price == Decimal("110")
    assert positions[0].is_paper_trade is True
    assert gateway.orders == []

    levels = [log.level for log in data_manager.logs.get_logs("default", limit=None)]
    assert {"SIGNAL", "TRADE", "SCAN"} <= set(levels)
    assert controller.get_status()["lastActivity"] is not None


def test_duplicate_signal_is_logged_not_opened(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    controller = make_controller(data_manager, market_data, gateway)

    controller.run_tick()
    summary = controller.run_tick()

    assert summary["opened"] == 0
    assert summary["signals"] == 1
    assert data_manager.position.count_open("default", TradingMode.SPOT) == 1
    assert any("Already have an open" in m for m in messages(data_manager))


def test_take_profit_closes_on_next_tick(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    controller = make_controller(data_manager, market_data, gateway)
    controller.run_tick()

    market_data.set_quote("BTCUSDT", 120)
    summary = controller.run_tick()

    assert summary["closed"] == 1
    trades = data_manager.trading.get_trades("default", TradingMode.SPOT)
    assert len(trades) == 1
    assert trades[0].close_reason == "take_profit"
    assert trades[0].pnl > 0


def test_leverage_logs_are_prefixed(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    controller = make_controller(data_manager, market_data, gateway, mode=TradingMode.LEVERAGE)

    controller.run_tick()

    assert all(m.startswith("[LEVERAGE]") for m in messages(data_manager))
    assert data_manager.position.count_open("default", TradingMode.LEVERAGE) == 1
    assert data_manager.position.count_open("default", TradingMode.SPOT) == 0


def test_live_mode_submits_order(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    live = TradingSettings().with_mode(TradingMode.SPOT, paper_trading=False)
    controller = make_controller(
        data_manager, market_data, gateway, settings_provider=lambda user_id: live
    )
    gateway.fill_price = Decimal("110.5")

    controller.run_tick()

    assert gateway.orders[0]["category"] == "spot"
    assert gateway.orders[0]["side"] == "buy"
    position = data_manager.position.get_open_positions("default", TradingMode.SPOT)[0]
    assert position.entry_price == Decimal("110.5")
    assert position.order_id == "EX-1"


def test_failed_live_order_creates_nothing(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    live = TradingSettings().with_mode(TradingMode.SPOT, paper_trading=False)
    controller = make_controller(
        data_manager, market_data, gateway, settings_provider=lambda user_id: live
    )
    gateway.fail = RuntimeError("insufficient balance")

    summary = controller.run_tick()

    assert summary["opened"] == 0
    assert data_manager.position.count_open("default", TradingMode.SPOT) == 0
    assert data_manager.logs.get_errors("default")[0].title == "Order Failed"


def test_quote_unavailable_is_a_warning(data_manager, market_data, gateway):
    controller = make_controller(data_manager, market_data, gateway, symbols=("NOPEUSDT",))

    summary = controller.run_tick()

    assert summary["scanned"] == 1
    assert summary["signals"] == 0
    error = data_manager.logs.get_errors("default")[0]
    assert error.title == "Quote Unavailable"
    assert str(error.level) == "WARNING"


def test_insufficient_history_is_a_scan_log(data_manager, market_data, gateway):
    market_data.set_quote("BTCUSDT", 100)
    controller = make_controller(data_manager, market_data, gateway)

    summary = controller.run_tick()

    assert summary["signals"] == 0
    assert any("not enough history (5/34)" in m for m in messages(data_manager))
    assert data_manager.logs.get_errors("default") == []


def test_invalid_settings_skip_the_tick_only(data_manager, market_data, gateway):
    current = {"settings": TradingSettings(usdt_per_trade=Decimal("0"))}
    controller = make_controller(
        data_manager, market_data, gateway, symbols=(),
        settings_provider=lambda user_id: current["settings"],
    )

    assert controller.run_tick() is None
    error = data_manager.logs.get_errors("default")[0]
    assert error.title == "Invalid Settings"
    assert str(error.level) == "ERROR"

    current["settings"] = TradingSettings()
    assert controller.run_tick() == {"scanned": 0, "signals": 0, "opened": 0, "closed": 0}


def test_missing_settings_are_invalid(data_manager, market_data, gateway):
    controller = make_controller(
        data_manager, market_data, gateway, settings_provider=lambda user_id: None
    )
    assert controller.run_tick() is None
    assert data_manager.logs.get_errors("default")[0].title == "Invalid Settings"


def test_unexpected_failure_becomes_system_error(data_manager, market_data, gateway):
    def broken(user_id):
        raise RuntimeError("database locked")

    controller = make_controller(data_manager, market_data, gateway, settings_provider=broken)

    assert controller.run_tick() is None
    error = data_manager.logs.get_errors("default")[0]
    assert error.title == "Tick Failed"
    assert "database locked" in error.message


def test_overlapping_tick_is_skipped(data_manager, market_data, gateway):
    controller = make_controller(data_manager, market_data, gateway, symbols=())

    controller._tick_lock.acquire()
    try:
        assert controller.run_tick() is None
    finally:
        controller._tick_lock.release()
    assert controller.run_tick() is not None


def test_stop_request_interrupts_scan(data_manager, market_data, gateway):
    controller = make_controller(data_manager, market_data, gateway, symbols=("BTCUSDT", "ETHUSDT"))
    controller._stop_event.set()

    summary = controller.run_tick()

    assert summary["scanned"] == 0
    assert market_data.quote_calls == []
    assert any("scan interrupted" in m for m in messages(data_manager))


def test_disabled_strategies_produce_no_signal(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    settings = TradingSettings().with_mode(
        TradingMode.SPOT, strategies=StrategyToggles(
            trend_following=False, mean_reversion=False, breakout_trading=False, pullback_trading=False,
        )
    )
    controller = make_controller(
        data_manager, market_data, gateway, settings_provider=lambda user_id: settings
    )

    assert controller.run_tick()["signals"] == 0


def test_history_failure_skips_only_that_symbol(data_manager, market_data, gateway, make_breakout_history):
    market_data.set_quote("BTCUSDT", 100)
    market_data.history_errors["BTCUSDT"] = HistoryUnavailable("BTCUSDT", "timeout")
    script_breakout(market_data, make_breakout_history, symbol="ETHUSDT")
    controller = make_controller(data_manager, market_data, gateway, symbols=("BTCUSDT", "ETHUSDT"))

    summary = controller.run_tick()

    assert summary == {"scanned": 2, "signals": 1, "opened": 1, "closed": 0}
    positions = data_manager.position.get_open_positions("default", TradingMode.SPOT)
    assert [p.symbol for p in positions] == ["ETHUSDT"]
    error = data_manager.logs.get_errors("default")[0]
    assert error.title == "History Unavailable"
    assert str(error.level) == "WARNING"
    assert controller.get_status()["lastActivity"] is not None


def test_unexpected_symbol_failure_does_not_stop_the_scan(data_manager, market_data, gateway,
                                                          make_breakout_history):
    market_data.set_quote("BTCUSDT", 100)
    market_data.history_errors["BTCUSDT"] = KeyError("close")
    script_breakout(market_data, make_breakout_history, symbol="ETHUSDT")
    controller = make_controller(data_manager, market_data, gateway, symbols=("BTCUSDT", "ETHUSDT"))

    summary = controller.run_tick()

    assert summary["scanned"] == 2
    assert summary["opened"] == 1
    errors = data_manager.logs.get_errors("default")
    assert [e.title for e in errors] == ["Symbol Scan Failed"]
    assert str(errors[0].level) == "ERROR"
    assert errors[0].message.startswith("BTCUSDT: KeyError")


def test_live_mode_without_gateway_is_invalid_settings(data_manager, market_data, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    live = TradingSettings().with_mode(TradingMode.SPOT, paper_trading=False)
    controller = make_controller(
        data_manager, market_data, None, settings_provider=lambda user_id: live
    )

    assert controller.run_tick() is None
    error = data_manager.logs.get_errors("default")[0]
    assert error.title == "Invalid Settings"
    assert str(error.level) == "ERROR"
    assert "requires an order gateway" in error.message
    assert data_manager.position.count_open("default", TradingMode.SPOT) == 0


def test_max_positions_blocks_new_symbol(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history, symbol="BTCUSDT")
    script_breakout(market_data, make_breakout_history, symbol="ETHUSDT")
    settings = TradingSettings().with_mode(TradingMode.SPOT, max_positions=1)
    controller = make_controller(
        data_manager, market_data, gateway, symbols=("BTCUSDT", "ETHUSDT"),
        settings_provider=lambda user_id: settings,
    )

    summary = controller.run_tick()

    assert summary["signals"] == 2
    assert summary["opened"] == 1
    positions = data_manager.position.get_open_positions("default", TradingMode.SPOT)
    assert [p.symbol for p in positions] == ["BTCUSDT"]
    info = [log for log in data_manager.logs.get_logs("default", limit=None) if log.level == "INFO"]
    assert any("Max positions reached for spot: 1/1" in log.message and log.symbol == "ETHUSDT" for log in info)
    assert data_manager.logs.get_errors("default") == []


def test_missing_quote_for_open_position_is_reported_once(data_manager, market_data, gateway,
                                                          make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    controller = make_controller(data_manager, market_data, gateway)
    controller.run_tick()

    market_data.quotes.clear()
    summary = controller.run_tick()

    assert summary["scanned"] == 1
    assert market_data.quote_calls == ["BTCUSDT", "BTCUSDT"]
    titles = [e.title for e in data_manager.logs.get_errors("default")]
    assert titles == ["Quote Unavailable"]
    assert data_manager.position.count_open("default", TradingMode.SPOT) == 1


# ============================================================================
# AI SOURCE
# ============================================================================

class FixedAI:
    def __init__(self, confidence=99.0):
        self.confidence = confidence
        self.calls = 0

    def evaluate(self, symbol, snapshot, settings):
        self.calls += 1
        return TradingOpportunity(
            symbol=symbol, strategy=StrategyName.AI, direction=Direction.LONG,
            confidence=self.confidence, description="model", price=Decimal(str(snapshot.price)),
        )


def ai_settings():
    return TradingSettings().with_mode(TradingMode.SPOT, ai_trading_enabled=True)


def test_ai_notice_once_per_tick(data_manager, market_data, gateway):
    settings = ai_settings()
    controller = make_controller(
        data_manager, market_data, gateway, symbols=("AUSDT", "BUSDT"),
        settings_provider=lambda user_id: settings,
    )

    controller.run_tick()

    notices = [m for m in messages(data_manager) if "no AI source" in m]
    assert len(notices) == 1


def test_ai_source_joins_aggregation(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    settings = ai_settings()
    ai = FixedAI()
    controller = make_controller(
        data_manager, market_data, gateway, ai_source=ai,
        settings_provider=lambda user_id: settings,
    )

    controller.run_tick()

    assert ai.calls == 1
    position = data_manager.position.get_open_positions("default", TradingMode.SPOT)[0]
    assert position.strategy == "ai"


def test_ai_source_ignored_when_disabled(data_manager, market_data, gateway, make_breakout_history):
    script_breakout(market_data, make_breakout_history)
    ai = FixedAI()
    controller = make_controller(data_manager, market_data, gateway, ai_source=ai)

    controller.run_tick()

    assert ai.calls == 0


# ============================================================================
# LIFECYCLE
# ============================================================================

@pytest.fixture
def file_data_manager(tmp_path):
    dm = DataManager({"path": str(tmp_path / "bot.db")})
    dm.start()
    yield dm
    dm.stop()


def wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_start_stop_idempotent(file_data_manager, market_data, gateway):
    controller = make_controller(file_data_manager, market_data, gateway, symbols=())

    first = controller.start()
    second = controller.start()
    assert first["isRunning"] is True
    assert first["message"] == "Spot bot running"
    assert second["startedAt"] == first["startedAt"]

    assert wait_for(lambda: controller.tick_count >= 2)

    stopped = controller.stop()
    assert stopped["isRunning"] is False
    assert stopped["startedAt"] is None
    assert stopped["lastActivity"] is not None
    assert stopped["message"] == "Spot bot stopped"

    ticks = controller.tick_count
    assert controller.stop() == stopped
    time.sleep(0.1)
    assert controller.tick_count == ticks


def test_restart_after_stop(file_data_manager, market_data, gateway):
    controller = make_controller(file_data_manager, market_data, gateway, symbols=())

    controller.start()
    controller.stop()
    restarted = controller.start()
    try:
        assert restarted["isRunning"] is True
        assert wait_for(lambda: controller.tick_count >= 1)
    finally:
        controller.stop()


def test_stop_timeout_keeps_a_single_loop(file_data_manager, market_data, gateway):
    entered, release = threading.Event(), threading.Event()

    def slow_settings(user_id):
        entered.set()
        release.wait(5)
        return file_data_manager.settings.get_settings(user_id)

    controller = make_controller(
        file_data_manager, market_data, gateway, symbols=(), settings_provider=slow_settings
    )
    controller.start()
    loop = controller._thread
    assert entered.wait(3)

    status = controller.stop(timeout=0.05)
    assert status["isRunning"] is True
    assert "stopping" in status["message"]

    assert controller.start()["isRunning"] is True
    assert controller._thread is loop

    release.set()
    assert wait_for(lambda: not controller.is_running)
    loop.join(3)
    assert not loop.is_alive()
    assert controller.get_status()["message"] == "Spot bot stopped"
    assert controller.tick_count == 1
