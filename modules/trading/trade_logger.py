#!/usr/bin/env python3
"""
modules/trading/trade_logger.py
DualBot - Trade Logger
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Producer side of the activity log. One instance per bot.

Features:
- Bot logs (SCAN, SIGNAL, TRADE, ORDER, MONITOR, INFO, WARNING, ERROR)
- System errors (INFO/WARNING/ERROR, resolvable)
- Every entry goes to three places:
    1. DataManager (durable history)
    2. EventBus topics log.<mode> / error.<mode> (live observers)
    3. Python logger with the matching custom level (console/file)
- Optional shared ring buffer with the most recent entries
- Leverage messages carry the [LEVERAGE] prefix

A persistence failure is reported on the Python logger only; the tick
that produced the entry keeps going.

Usage:
    from modules.trading.trade_logger import TradeLogger

    trade_logger = TradeLogger(TradingMode.SPOT, data_manager, event_bus)
    trade_logger.log("SCAN", "No signal for BTCUSDT", symbol="BTCUSDT")
    trade_logger.error(ErrorLevel.WARNING, "Quote Unavailable", "...", source="spot_bot")

Dependencies:
    - python>=3.10
"""

from __future__ import annotations

import sys
from collections import deque
from pathlib import Path
from typing import Any, Deque, Dict, Optional

# Add project root to path for direct execution
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent
    sys.path.insert(0, str(project_root))

from components.strategies.trading_types import BotLog, ErrorLevel, SystemErrorEntry, TradingMode
from core.logger_engine import get_logger

LEVERAGE_PREFIX = "[LEVERAGE]"

ERROR_LOG_LEVELS = {
    ErrorLevel.INFO: "INFO",
    ErrorLevel.WARNING: "WARNING",
    ErrorLevel.ERROR: "ERROR",
}


def log_topic(mode: TradingMode) -> str:
    return f"log.{TradingMode(mode).value}"


def error_topic(mode: TradingMode) -> str:
    return f"error.{TradingMode(mode).value}"


class TradeLogger:
    """
    Bot log / system error emitter

    Attributes:
        mode: Owning bot
        user_id: Owner of the stored rows
        mirror: Shared deque with the latest entries (optional)
    """

    def __init__(
        self,
        mode: TradingMode,
        data_manager,
        event_bus=None,
        user_id: str = "default",
        mirror: Optional[Deque[BotLog]] = None,
    ):
        self.mode = TradingMode(mode)
        self.data_manager = data_manager
        self.event_bus = event_bus
        self.user_id = user_id
        self.mirror = mirror if mirror is not None else deque(maxlen=100)
        self.source = f"{self.mode.value}_bot"
        self.logger = get_logger(f"modules.trading.{self.mode.value}")

    def _prefixed(self, message: str) -> str:
        if self.mode == TradingMode.LEVERAGE and not message.startswith(LEVERAGE_PREFIX):
            return f"{LEVERAGE_PREFIX} {message}"
        return message

    # ========================================================================
    # BOT LOGS
    # ========================================================================

    def log(
        self,
        level: str,
        message: str,
        symbol: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        mode: Optional[TradingMode] = None,
    ) -> BotLog:
        """
        Emit one bot log entry

        Returns:
            BotLog: The entry (id is None when persistence failed)
        """
        mode = TradingMode(mode) if mode else self.mode
        entry = BotLog(
            level=level.upper(),
            message=self._prefixed(message),
            symbol=symbol,
            data=data,
            trading_mode=mode.value,
            user_id=self.user_id,
        )

        try:
            self.data_manager.logs.create_log(entry)
        except Exception as e:
            self.logger.error(f"❌ Bot log could not be stored: {e}")

        self.mirror.append(entry)
        if self.event_bus is not None:
            self.event_bus.publish(log_topic(mode), entry.to_dict(), source=self.source)

        if data:
            self.logger.tagged(entry.level, entry.message, symbol=symbol, data=data)
        else:
            self.logger.tagged(entry.level, entry.message)
        return entry

    # ========================================================================
    # SYSTEM ERRORS
    # ========================================================================

    def error(
        self,
        level: ErrorLevel,
        title: str,
        message: str,
        source: Optional[str] = None,
        error_code: Optional[str] = None,
    ) -> SystemErrorEntry:
        """
        Record a system error (never auto-resolved)

        Returns:
            SystemErrorEntry
        """
        level = ErrorLevel(level)
        entry = SystemErrorEntry(
            level=level,
            title=title,
            message=self._prefixed(message),
            source=source or self.source,
            error_code=error_code,
            user_id=self.user_id,
        )

        try:
            self.data_manager.logs.create_error(entry)
        except Exception as e:
            self.logger.error(f"❌ System error could not be stored: {e}")

        if self.event_bus is not None:
            self.event_bus.publish(error_topic(self.mode), entry.to_dict(), source=self.source)

        marker = "❌" if level == ErrorLevel.ERROR else "⚠️"
        self.logger.tagged(ERROR_LOG_LEVELS[level], f"{marker} {title}: {entry.message}")
        return entry


__all__ = ['TradeLogger', 'log_topic', 'error_topic', 'LEVERAGE_PREFIX']
