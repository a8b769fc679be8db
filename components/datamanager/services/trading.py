#!/usr/bin/env python3
"""
components/datamanager/services/trading.py
DualBot - Trade Models & Service
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Trade history - model, queries and performance aggregates

Features:
- TradeRecord model (one row per closed position, never updated)
- Trade history per user / trading mode
- Trading summary (won/lost, profit factor, averages)
- Per-strategy performance

Trades are only written by PositionService.close_position, inside the
same transaction that closes the position.

Usage:
    from components.datamanager.services.trading import TradingService

    service = TradingService(db_manager)
    trades = service.get_trades("default", TradingMode.SPOT, limit=50)
    summary = service.get_trading_summary("default")

Dependencies:
    - python>=3.10
    - sqlalchemy>=2.0.0
"""

from __future__ import annotations

import sys
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, Column, Integer, String, select

if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent.parent
    sys.path.insert(0, str(project_root))

from components.datamanager.base import Base, BaseService, from_decimal_str, from_iso
from components.strategies.trading_types import Direction, Trade, TradingMode
from core.logger_engine import get_logger

logger = get_logger("components.datamanager.services.trading")

ZERO = Decimal("0")


# ============================================
# MODELS
# ============================================

class TradeRecord(Base):
    """Closed position projection"""
    __tablename__ = "trades"

    id = Column(Integer, primary_key=True, autoincrement=True)
    position_id = Column(Integer, nullable=False, unique=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    symbol = Column(String(30), nullable=False, index=True)
    direction = Column(String(10), nullable=False)
    entry_price = Column(String(40), nullable=False)
    exit_price = Column(String(40), nullable=False)
    quantity = Column(String(40), nullable=False)
    pnl = Column(String(40), nullable=False)
    duration = Column(Integer, nullable=False)  # seconds
    strategy = Column(String(40))
    trading_mode = Column(String(10), nullable=False, index=True)
    is_paper_trade = Column(Boolean, nullable=False, default=True)
    close_reason = Column(String(40))
    entry_time = Column(String(40), nullable=False)
    exit_time = Column(String(40), nullable=False, index=True)


def trade_from_record(record: TradeRecord) -> Trade:
    return Trade(
        id=record.id,
        position_id=record.position_id,
        user_id=record.user_id,
        symbol=record.symbol,
        direction=Direction(record.direction),
        entry_price=from_decimal_str(record.entry_price),
        exit_price=from_decimal_str(record.exit_price),
        quantity=from_decimal_str(record.quantity),
        pnl=from_decimal_str(record.pnl),
        duration=record.duration,
        strategy=record.strategy,
        trading_mode=TradingMode(record.trading_mode),
        is_paper_trade=bool(record.is_paper_trade),
        close_reason=record.close_reason,
        entry_time=from_iso(record.entry_time),
        exit_time=from_iso(record.exit_time),
    )


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 2) if total else 0.0


# ============================================
# SERVICE
# ============================================

class TradingService(BaseService):
    """Trade history service"""

    def get_trades(
        self,
        user_id: Optional[str] = None,
        trading_mode: Optional[TradingMode] = None,
        limit: Optional[int] = 50,
    ) -> List[Trade]:
        """Trades, newest first"""
        query = select(TradeRecord)
        if user_id is not None:
            query = query.where(TradeRecord.user_id == user_id)
        if trading_mode is not None:
            query = query.where(TradeRecord.trading_mode == str(TradingMode(trading_mode)))
        query = query.order_by(TradeRecord.id.desc())
        if limit:
            query = query.limit(limit)

        try:
            with self.session() as session:
                return [trade_from_record(r) for r in session.scalars(query).all()]
        except Exception as e:
            logger.error(f"❌ Trades get error: {e}")
            return []

    def get_trades_for_position(self, position_id: int) -> List[Trade]:
        query = select(TradeRecord).where(TradeRecord.position_id == position_id)
        with self.session() as session:
            return [trade_from_record(r) for r in session.scalars(query).all()]

    def get_trading_summary(
        self,
        user_id: Optional[str] = None,
        trading_mode: Optional[TradingMode] = None,
    ) -> Dict[str, Any]:
        """
        Aggregate closed trade performance

        Returns:
            Dict: total_trades, won, lost, total_profit, total_loss, net_pnl,
                  avg_win, avg_loss, profit_factor, win_rate
        """
        trades = self.get_trades(user_id, trading_mode, limit=None)

        wins = [t.pnl for t in trades if t.pnl > 0]
        losses = [t.pnl for t in trades if t.pnl < 0]
        total_profit = sum(wins, ZERO)
        total_loss = abs(sum(losses, ZERO))

        if total_loss > 0:
            profit_factor = float(round(total_profit / total_loss, 2))
        else:
            profit_factor = None if total_profit == 0 else float("inf")

        return {
            "total_trades": len(trades),
            "won": len(wins),
            "lost": len(losses),
            "total_profit": str(total_profit),
            "total_loss": str(total_loss),
            "net_pnl": str(total_profit - total_loss),
            "avg_win": str(total_profit / len(wins)) if wins else "0",
            "avg_loss": str(total_loss / len(losses)) if losses else "0",
            "profit_factor": profit_factor,
            "win_rate": _rate(len(wins), len(trades)),
        }

    def get_realized_pnl_since(
        self,
        since: datetime,
        user_id: Optional[str] = None,
        trading_mode: Optional[TradingMode] = None,
    ) -> Decimal:
        trades = self.get_trades(user_id, trading_mode, limit=None)
        return sum((t.pnl for t in trades if t.exit_time >= since), ZERO)

    def get_strategy_performance(
        self,
        user_id: Optional[str] = None,
        trading_mode: Optional[TradingMode] = None,
    ) -> Dict[str, Dict[str, Any]]:
        """Per strategy: trades, wins, win_rate, total_pnl"""
        buckets: Dict[str, List[Trade]] = defaultdict(list)
        for trade in self.get_trades(user_id, trading_mode, limit=None):
            buckets[trade.strategy or "manual"].append(trade)

        performance = {}
        for strategy, trades in buckets.items():
            wins = sum(1 for t in trades if t.pnl > 0)
            performance[strategy] = {
                "trades": len(trades),
                "wins": wins,
                "win_rate": _rate(wins, len(trades)),
                "total_pnl": str(sum((t.pnl for t in trades), ZERO)),
            }
        return performance
