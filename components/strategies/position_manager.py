#!/usr/bin/env python3
"""
components/strategies/position_manager.py
DualBot - Position Manager
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Position Manager - open/mark/close lifecycle of one bot's positions

Responsibilities:
- open_position: execution fill -> persisted Position -> TRADE log
- refresh: mark open positions to market (current_price, pnl)
- check_exit: stop loss / take profit trigger for the position's direction
- close_position: exit fill -> atomic close + Trade -> TRADE log

Concurrency:
- Writes for one position id are serialized by a per-id lock
  (the bot thread and a manual close may race)
- The store is re-read under the lock; a position that is no longer
  open is an INFO no-op
- The store close itself is conditional (status='open'), so even two
  managers sharing a database create exactly one Trade

PnL:
    UP / LONG:  (current - entry) * quantity
    SHORT:      (entry - current) * quantity

Usage:
    pm = PositionManager(TradingMode.SPOT, data_manager, execution_provider, trade_logger)

    position = pm.open_position(opportunity, sizing, view)
    pm.refresh(open_positions, {"BTCUSDT": Decimal("30900")})
    reason = pm.check_exit(position, Decimal("31800"))   # "take_profit"
    trade = pm.close_position(position.id, reason, Decimal("31800"))
"""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from components.strategies.pnl_calculator import PnLCalculator
from components.strategies.trading_types import (
    Direction,
    ErrorLevel,
    InvalidSettings,
    ModeSettingsView,
    OrderSubmissionFailed,
    Position,
    PositionSizing,
    QuoteUnavailable,
    Trade,
    TradingMode,
    TradingOpportunity,
    utc_now,
)
from core.logger_engine import get_logger

logger = get_logger("components.strategies.position_manager")

STOP_LOSS = "stop_loss"
TAKE_PROFIT = "take_profit"
MANUAL = "manual"


class PositionManager:
    """
    Position Manager for one trading mode

    Args:
        mode: Owning bot
        data_manager: DataManager (position service is the source of truth)
        execution_provider: callable(paper: bool) -> ExecutionMode
        event_logger: TradeLogger of the owning bot
        market_data: MarketDataAdapter, used when a close has no price
    """

    def __init__(
        self,
        mode: TradingMode,
        data_manager,
        execution_provider: Callable,
        event_logger,
        market_data=None,
        user_id: str = "default",
    ):
        self.mode = TradingMode(mode)
        self.data_manager = data_manager
        self.execution_provider = execution_provider
        self.event_logger = event_logger
        self.market_data = market_data
        self.user_id = user_id

        self._locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, position_id: int) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(position_id)
            if lock is None:
                lock = self._locks[position_id] = threading.Lock()
            return lock

    def _release_lock(self, position_id: int):
        with self._locks_guard:
            self._locks.pop(position_id, None)

    # ========================================================================
    # OPEN
    # ========================================================================

    def open_position(
        self,
        opportunity: TradingOpportunity,
        sizing: PositionSizing,
        settings: ModeSettingsView,
    ) -> Position:
        """
        Execute and persist a new position

        Raises:
            OrderSubmissionFailed: Nothing is persisted
        """
        execution = self.execution_provider(settings.paper_trading)
        fill = execution.open(opportunity, sizing, sizing.direction)

        position = Position(
            symbol=opportunity.symbol,
            direction=sizing.direction,
            entry_price=fill.price,
            quantity=fill.quantity,
            trading_mode=self.mode,
            stop_loss=sizing.stop_loss,
            take_profit=sizing.take_profit,
            current_price=fill.price,
            pnl=Decimal("0"),
            strategy=str(opportunity.strategy),
            order_id=fill.order_id,
            is_paper_trade=fill.is_paper,
            user_id=self.user_id,
            created_at=fill.timestamp,
        )
        position = self.data_manager.position.create_position(position)

        kind = "paper" if fill.is_paper else "live"
        self.event_logger.log(
            "TRADE",
            f"✅ Opened {position.direction} {position.symbol} ({kind}) "
            f"qty {position.quantity} @ {position.entry_price} "
            f"SL {position.stop_loss} TP {position.take_profit}",
            symbol=position.symbol,
            data={
                "positionId": position.id,
                "strategy": position.strategy,
                "confidence": opportunity.confidence,
                "orderId": position.order_id,
            },
        )
        return position

    # ========================================================================
    # MONITOR
    # ========================================================================

    def refresh(self, positions: List[Position], quotes: Dict[str, Decimal]) -> List[Position]:
        """
        Mark open positions to market

        Positions without a quote are left untouched.

        Returns:
            List[Position]: Positions that were marked
        """
        marked = []
        for position in positions:
            price = quotes.get(position.symbol)
            if price is None or not position.is_open:
                continue

            price = Decimal(price)
            pnl = PnLCalculator.for_position(position, price)
            with self._lock_for(position.id):
                updated = self.data_manager.position.update_mark(position.id, price, pnl)
            if not updated:
                logger.debug(f"Position #{position.id} closed elsewhere, mark skipped")
                self._release_lock(position.id)
                continue

            position.current_price = price
            position.pnl = pnl
            marked.append(position)

        return marked

    def check_exit(self, position: Position, price: Decimal) -> Optional[str]:
        """
        Returns:
            "stop_loss", "take_profit" or None
        """
        price = Decimal(price)
        sl, tp = position.stop_loss, position.take_profit

        if Direction(position.direction).is_long:
            if sl is not None and price <= sl:
                return STOP_LOSS
            if tp is not None and price >= tp:
                return TAKE_PROFIT
        else:
            if sl is not None and price >= sl:
                return STOP_LOSS
            if tp is not None and price <= tp:
                return TAKE_PROFIT
        return None

    def monitor(self, quotes: Dict[str, Decimal]) -> List[Trade]:
        """
        Refresh this mode's open positions and close the ones that hit SL/TP

        Returns:
            List[Trade]: Trades created in this pass
        """
        positions = self.data_manager.position.get_open_positions(self.user_id, self.mode)
        trades = []

        for position in self.refresh(positions, quotes):
            reason = self.check_exit(position, position.current_price)
            if reason is None:
                continue
            trade = self.close_position(position.id, reason, position.current_price)
            if trade is not None:
                trades.append(trade)

        return trades

    # ========================================================================
    # CLOSE
    # ========================================================================

    def _resolve_price(self, position: Position, price: Optional[Decimal]) -> Decimal:
        """Explicit price, else the latest quote, else the last marked price"""
        if price is not None:
            return Decimal(price)
        if self.market_data is not None:
            try:
                return self.market_data.get_latest_quote(position.symbol).price
            except QuoteUnavailable as e:
                if position.current_price is None:
                    raise
                self.event_logger.log(
                    "WARNING",
                    f"⚠️ {e}, closing #{position.id} at last mark {position.current_price}",
                    symbol=position.symbol,
                )
        if position.current_price is not None:
            return position.current_price
        raise QuoteUnavailable(position.symbol, "no price to close at")

    def close_position(
        self,
        position_id: int,
        reason: str = MANUAL,
        price: Optional[Decimal] = None,
    ) -> Optional[Trade]:
        """
        Close one position

        Returns:
            Trade: Created trade, None when the position was not open
            (already closed, lost race), no exit price or execution was
            available, or the exit order failed
        """
        lock = self._lock_for(position_id)
        with lock:
            position = self.data_manager.position.get_position(position_id)
            if position is None or not position.is_open:
                self.event_logger.log(
                    "INFO",
                    f"Position #{position_id} already closed, nothing to do",
                    symbol=position.symbol if position else None,
                )
                return None

            try:
                exit_price = self._resolve_price(position, price)
                execution = self.execution_provider(position.is_paper_trade)
            except (QuoteUnavailable, InvalidSettings) as e:
                self.event_logger.error(
                    ErrorLevel.WARNING,
                    "Close Failed",
                    f"{position.symbol} #{position.id} stays open: {e}",
                )
                return None

            try:
                fill = execution.close(position, exit_price)
            except OrderSubmissionFailed as e:
                self.event_logger.error(
                    ErrorLevel.WARNING,
                    "Close Order Failed",
                    f"{position.symbol} #{position.id} stays open: {e.reason}",
                )
                return None

            result = PnLCalculator.calculate_detailed(
                position.entry_price, fill.price, position.quantity, position.direction
            )
            pnl = result.pnl
            trade = self.data_manager.position.close_position(
                position.id,
                exit_price=fill.price,
                pnl=pnl,
                closed_at=utc_now(),
                close_reason=reason,
            )

        if trade is None:
            self.event_logger.log(
                "INFO",
                f"Position #{position_id} was closed concurrently, nothing to do",
                symbol=position.symbol,
            )
            return None

        self._release_lock(position_id)
        marker = "📈" if trade.pnl > 0 else "📉"
        self.event_logger.log(
            "TRADE",
            f"{marker} Closed {trade.direction} {trade.symbol} ({reason}) "
            f"@ {trade.exit_price} PnL {trade.pnl}",
            symbol=trade.symbol,
            data={
                "positionId": position_id,
                "tradeId": trade.id,
                "pnl": str(trade.pnl),
                "pnlPct": str(result.pnl_pct),
                "duration": trade.duration,
                "reason": reason,
            },
        )
        return trade


__all__ = ['PositionManager', 'STOP_LOSS', 'TAKE_PROFIT', 'MANUAL']
