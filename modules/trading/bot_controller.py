#!/usr/bin/env python3
"""
modules/trading/bot_controller.py
DualBot - Bot Controller
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

One trading bot (spot or leverage) on its own thread.

Lifecycle:
    Stopped --start()--> Running --stop()--> Stopped
    start()/stop() are idempotent; stop() waits for the in-flight tick.
    A stop(timeout) that expires leaves the bot Running ("stopping") until
    the loop thread exits, so start() never runs a second loop.

Tick:
    1. Settings   -> load, validate, take this mode's view
    2. Monitor    -> mark open positions, close on SL/TP
    3. Scan       -> quote, history, indicators, strategies, aggregation,
                     risk check, execution (stop flag checked per symbol)
                     A failing symbol is skipped, the rest are still scanned.
    4. Summary    -> last activity + closing SCAN log

Every expected failure is turned into a log or a system error and the
loop keeps running. Overrun deadlines are skipped, never queued.

Usage:
    controller = BotController(
        mode=TradingMode.SPOT,
        settings_provider=dm.settings.get_settings,
        market_data=spot_feed,
        data_manager=dm,
        trade_logger=trade_logger,
        position_manager=position_manager,
        symbols=["BTCUSDT", "ETHUSDT"],
    )
    controller.start()
    controller.get_status()   # {isRunning, startedAt, lastActivity, message}
    controller.stop()
"""

from __future__ import annotations

import sys
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

# Add project root to path for direct execution
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent
    sys.path.insert(0, str(project_root))

from components.indicators.indicator_manager import IndicatorEngine, IndicatorParams
from components.indicators.indicator_types import IndicatorError, InsufficientHistory
from components.strategies.risk_manager import RiskManager
from components.strategies.signal_manager import SignalManager
from components.strategies.templates import build_strategies
from components.strategies.trading_types import (
    DuplicatePosition,
    ErrorLevel,
    HistoryUnavailable,
    InvalidSettings,
    MaxPositionsReached,
    ModeSettingsView,
    OrderSubmissionFailed,
    QuoteUnavailable,
    TradingMode,
    utc_now,
)
from core.logger_engine import correlation_context, get_logger

DEFAULT_TICK_INTERVAL = 60.0
DEFAULT_HISTORY_LIMIT = 200


class BotController:
    """
    Bot controller for one trading mode

    Attributes:
        mode: spot / leverage
        symbols: Symbol universe scanned each tick
        ai_source: Optional extra evaluator, used when ai_trading_enabled
    """

    def __init__(
        self,
        mode: TradingMode,
        settings_provider: Callable,
        market_data,
        data_manager,
        trade_logger,
        position_manager,
        symbols: List[str],
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        user_id: str = "default",
        ai_source=None,
        indicator_engine: Optional[IndicatorEngine] = None,
        signal_manager: Optional[SignalManager] = None,
        risk_manager: Optional[RiskManager] = None,
        strategies: Optional[list] = None,
    ):
        self.mode = TradingMode(mode)
        self.settings_provider = settings_provider
        self.market_data = market_data
        self.data_manager = data_manager
        self.trade_logger = trade_logger
        self.position_manager = position_manager
        self.symbols = list(symbols)
        self.tick_interval = float(tick_interval)
        self.history_limit = int(history_limit)
        self.user_id = user_id
        self.ai_source = ai_source

        self.indicator_engine = indicator_engine or IndicatorEngine()
        self.signal_manager = signal_manager or SignalManager()
        self.risk_manager = risk_manager or RiskManager()
        self.strategies = strategies if strategies is not None else build_strategies()

        self.logger = get_logger(f"modules.trading.bot_controller.{self.mode.value}")

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()
        self._tick_lock = threading.Lock()

        self._running = False
        self._started_at = None
        self._last_activity = None
        self._message = f"{self.label} bot stopped"
        self.tick_count = 0

    @property
    def label(self) -> str:
        return self.mode.value.capitalize()

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def get_status(self) -> Dict[str, Any]:
        with self._state_lock:
            return self._status_unlocked()

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> Dict[str, Any]:
        """Start the loop thread (no-op when already running)"""
        with self._state_lock:
            if self._running:
                return self._status_unlocked()

            self._stop_event.clear()
            self._running = True
            self._started_at = utc_now()
            self._message = f"{self.label} bot running"
            self._thread = threading.Thread(
                target=self._run, name=f"{self.mode.value}-bot", daemon=True
            )
            self._thread.start()

        self.trade_logger.log("INFO", f"🚀 {self.label} bot started ({len(self.symbols)} symbols)")
        return self.get_status()

    def stop(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Request stop and wait for the in-flight tick (no-op when stopped)"""
        with self._state_lock:
            if not self._running:
                return self._status_unlocked()
            self._stop_event.set()
            thread = self._thread

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                # Still running until the loop thread exits on its own
                with self._state_lock:
                    if self._thread is thread:
                        self._message = f"{self.label} bot stopping, tick still in flight"
                self.logger.warning(f"⚠️ {self.label} bot did not stop within {timeout}s")
                return self.get_status()

        self._mark_stopped(thread)
        return self.get_status()

    def _mark_stopped(self, thread: Optional[threading.Thread]):
        with self._state_lock:
            if not self._running or self._thread is not thread:
                return
            self._running = False
            self._started_at = None
            self._thread = None
            self._message = f"{self.label} bot stopped"

        self.trade_logger.log("INFO", f"🛑 {self.label} bot stopped")

    def _status_unlocked(self) -> Dict[str, Any]:
        return {
            "isRunning": self._running,
            "startedAt": self._started_at.isoformat() if self._started_at else None,
            "lastActivity": self._last_activity.isoformat() if self._last_activity else None,
            "message": self._message,
        }

    def _run(self):
        next_deadline = time.monotonic()
        while not self._stop_event.is_set():
            self.run_tick()

            next_deadline += self.tick_interval
            now = time.monotonic()
            if now > next_deadline:
                missed = int((now - next_deadline) // self.tick_interval) + 1
                next_deadline += missed * self.tick_interval
                self.logger.debug(f"⚠️ Tick overran, skipping {missed} deadline(s)")

            self._stop_event.wait(max(0.0, next_deadline - now))

        self._mark_stopped(threading.current_thread())

    # ========================================================================
    # TICK
    # ========================================================================

    def run_tick(self) -> Optional[Dict[str, int]]:
        """
        One evaluation cycle

        Returns:
            Dict: Tick summary, None if the tick was skipped
        """
        if not self._tick_lock.acquire(blocking=False):
            self.logger.debug("Tick already in flight, skipping")
            return None

        try:
            with correlation_context(f"{self.mode.value}-{self.tick_count + 1}"):
                self.tick_count += 1
                return self._tick()
        except Exception as e:
            self.logger.exception(f"❌ {self.label} tick failed")
            self.trade_logger.error(
                ErrorLevel.ERROR, "Tick Failed", f"{type(e).__name__}: {e}"
            )
            return None
        finally:
            self._tick_lock.release()

    def _load_settings(self) -> Optional[ModeSettingsView]:
        try:
            settings = self.settings_provider(self.user_id)
            if settings is None:
                raise InvalidSettings(f"No trading settings for user '{self.user_id}'")
            view = settings.validate().for_mode(self.mode)
            # live execution without a gateway raises InvalidSettings
            self.position_manager.execution_provider(view.paper_trading)
            return view
        except InvalidSettings as e:
            self.trade_logger.error(ErrorLevel.ERROR, "Invalid Settings", str(e))
            return None

    def _tick(self) -> Optional[Dict[str, int]]:
        view = self._load_settings()
        if view is None:
            return None

        summary = {"scanned": 0, "signals": 0, "opened": 0, "closed": 0}
        quotes: Dict[str, Any] = {}
        summary["closed"] = self._monitor(quotes)

        ai_notice_sent = False
        for symbol in self.symbols:
            if self._stop_event.is_set():
                self.trade_logger.log("INFO", f"🛑 Stop requested, scan interrupted at {symbol}")
                break

            if view.ai_trading_enabled and self.ai_source is None and not ai_notice_sent:
                self.trade_logger.log("INFO", "AI trading enabled but no AI source available, technical analysis only")
                ai_notice_sent = True

            summary["scanned"] += 1
            try:
                outcome = self._scan_symbol(symbol, view, quotes)
            except Exception as e:
                self.logger.exception(f"❌ {symbol} scan failed")
                self.trade_logger.error(
                    ErrorLevel.ERROR, "Symbol Scan Failed", f"{symbol}: {type(e).__name__}: {e}"
                )
                continue
            if outcome in ("signal", "opened"):
                summary["signals"] += 1
            if outcome == "opened":
                summary["opened"] += 1

        with self._state_lock:
            self._last_activity = utc_now()

        self.trade_logger.log(
            "SCAN",
            f"📊 Scan complete: {summary['scanned']} symbols, {summary['signals']} signals, "
            f"{summary['opened']} opened, {summary['closed']} closed",
            data=summary,
        )
        return summary

    def _monitor(self, quotes: Dict[str, Any]) -> int:
        """
        Mark and exit-check open positions

        Args:
            quotes: Filled with this tick's quote per symbol (None when unavailable),
                reused by the scan

        Returns:
            int: Number of positions closed
        """
        positions = self.data_manager.position.get_open_positions(self.user_id, self.mode)
        if not positions:
            return 0

        for symbol in sorted({p.symbol for p in positions}):
            quotes[symbol] = self._fetch_quote(symbol)

        self.trade_logger.log("MONITOR", f"📊 Monitoring {len(positions)} open positions")
        prices = {symbol: quote.price for symbol, quote in quotes.items() if quote is not None}
        trades = self.position_manager.monitor(prices)
        return len(trades)

    def _fetch_quote(self, symbol: str):
        try:
            return self.market_data.get_latest_quote(symbol)
        except QuoteUnavailable as e:
            self.trade_logger.error(ErrorLevel.WARNING, "Quote Unavailable", str(e))
            return None

    def _evaluate(self, symbol: str, snapshot, view: ModeSettingsView) -> list:
        candidates = [
            strategy.evaluate(symbol, snapshot, view)
            for strategy in self.strategies
            if strategy.is_enabled(view)
        ]
        if view.ai_trading_enabled and self.ai_source is not None:
            candidates.append(self.ai_source.evaluate(symbol, snapshot, view))
        return candidates

    def _scan_symbol(self, symbol: str, view: ModeSettingsView, quotes: Dict[str, Any]) -> str:
        """
        Returns:
            str: skipped / no_signal / signal / opened
        """
        if symbol not in quotes:
            quotes[symbol] = self._fetch_quote(symbol)
        quote = quotes[symbol]
        if quote is None:
            return "skipped"

        try:
            history = self.market_data.get_price_history(symbol, view.timeframe, self.history_limit)
            snapshot = self.indicator_engine.compute(history, IndicatorParams.from_settings(view))
        except HistoryUnavailable as e:
            self.trade_logger.error(ErrorLevel.WARNING, "History Unavailable", str(e))
            return "skipped"
        except InsufficientHistory as e:
            self.trade_logger.log(
                "SCAN", f"{symbol}: not enough history ({e.available}/{e.required})", symbol=symbol
            )
            return "skipped"
        except IndicatorError as e:
            self.trade_logger.log("SCAN", f"{symbol}: indicators unavailable ({e})", symbol=symbol)
            return "skipped"

        best = self.signal_manager.select_best(
            self._evaluate(symbol, snapshot, view), view.min_confidence, view.allowed_directions
        )
        if best is None:
            self.trade_logger.log("SCAN", f"{symbol}: no signal", symbol=symbol)
            return "no_signal"

        best.price = quote.price
        self.trade_logger.log(
            "SIGNAL",
            f"🎯 {symbol} {best.direction} by {best.strategy} "
            f"(confidence {best.confidence:.1f}): {best.description}",
            symbol=symbol,
            data={"strategy": str(best.strategy), "confidence": best.confidence, **best.indicators},
        )

        try:
            open_positions = self.data_manager.position.get_open_positions(self.user_id, self.mode)
            sizing = self.risk_manager.assess(best, view, open_positions)
        except (MaxPositionsReached, DuplicatePosition) as e:
            self.trade_logger.log("INFO", str(e), symbol=symbol)
            return "signal"

        try:
            self.position_manager.open_position(best, sizing, view)
        except OrderSubmissionFailed as e:
            self.trade_logger.error(ErrorLevel.WARNING, "Order Failed", str(e))
            return "signal"

        return "opened"


__all__ = ['BotController']
