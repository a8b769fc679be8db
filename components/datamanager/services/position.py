#!/usr/bin/env python3
"""
components/datamanager/services/position.py
DualBot - Position Models & Service
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Position tracking - models and CRUD operations

Features:
- PositionRecord model (money/quantity as decimal strings, ISO timestamps)
- Create positions, mark-to-market updates
- Open position queries per user and trading mode
- Atomic close: conditional status update + Trade insert in one transaction

Usage:
    from components.datamanager.services.position import PositionService

    service = PositionService(db_manager)
    position = service.create_position(position)
    trade = service.close_position(position.id, exit_price, pnl, closed_at)

Dependencies:
    - python>=3.10
    - sqlalchemy>=2.0.0
"""

from __future__ import annotations

import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from sqlalchemy import Boolean, Column, Integer, String, func, select, update

if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent.parent
    sys.path.insert(0, str(project_root))

from components.datamanager.base import (
    Base, BaseService, from_decimal_str, from_iso, to_decimal_str, to_iso,
)
from components.datamanager.services.trading import TradeRecord, trade_from_record
from components.strategies.trading_types import (
    Direction, Position, PositionStatus, Trade, TradingMode,
)
from core.logger_engine import get_logger

logger = get_logger("components.datamanager.services.position")


# ============================================
# MODELS
# ============================================

class PositionRecord(Base):
    """Position row"""
    __tablename__ = "positions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    symbol = Column(String(30), nullable=False, index=True)
    direction = Column(String(10), nullable=False)  # UP/LONG/SHORT
    entry_price = Column(String(40), nullable=False)
    current_price = Column(String(40))
    stop_loss = Column(String(40))
    take_profit = Column(String(40))
    quantity = Column(String(40), nullable=False)
    pnl = Column(String(40), nullable=False, default="0")
    status = Column(String(10), nullable=False, index=True)  # open/closed
    trading_mode = Column(String(10), nullable=False, index=True)  # spot/leverage
    strategy = Column(String(40))
    order_id = Column(String(80))
    is_paper_trade = Column(Boolean, nullable=False, default=True)
    created_at = Column(String(40), nullable=False)
    closed_at = Column(String(40))


def position_from_record(record: PositionRecord) -> Position:
    return Position(
        id=record.id,
        user_id=record.user_id,
        symbol=record.symbol,
        direction=Direction(record.direction),
        entry_price=from_decimal_str(record.entry_price),
        current_price=from_decimal_str(record.current_price),
        stop_loss=from_decimal_str(record.stop_loss),
        take_profit=from_decimal_str(record.take_profit),
        quantity=from_decimal_str(record.quantity),
        pnl=from_decimal_str(record.pnl) or Decimal("0"),
        status=PositionStatus(record.status),
        trading_mode=TradingMode(record.trading_mode),
        strategy=record.strategy,
        order_id=record.order_id,
        is_paper_trade=bool(record.is_paper_trade),
        created_at=from_iso(record.created_at),
        closed_at=from_iso(record.closed_at),
    )


# ============================================
# SERVICE
# ============================================

class PositionService(BaseService):
    """Position management service"""

    def create_position(self, position: Position) -> Position:
        """
        Insert a new open position

        Returns:
            Position: The same position with its id assigned
        """
        record = PositionRecord(
            user_id=position.user_id,
            symbol=position.symbol,
            direction=str(position.direction),
            entry_price=to_decimal_str(position.entry_price),
            current_price=to_decimal_str(position.current_price or position.entry_price),
            stop_loss=to_decimal_str(position.stop_loss),
            take_profit=to_decimal_str(position.take_profit),
            quantity=to_decimal_str(position.quantity),
            pnl=to_decimal_str(position.pnl),
            status=str(PositionStatus.OPEN),
            trading_mode=str(position.trading_mode),
            strategy=position.strategy,
            order_id=position.order_id,
            is_paper_trade=position.is_paper_trade,
            created_at=to_iso(position.created_at),
        )
        with self.session() as session:
            session.add(record)
            session.commit()
            position.id = record.id

        logger.debug(f"✅ Position saved: #{position.id} {position.symbol} {position.direction}")
        return position

    def get_position(self, position_id: int) -> Optional[Position]:
        try:
            with self.session() as session:
                record = session.get(PositionRecord, position_id)
                return position_from_record(record) if record else None
        except Exception as e:
            logger.error(f"❌ Position get error: {e}")
            return None

    def get_positions(
        self,
        user_id: Optional[str] = None,
        trading_mode: Optional[TradingMode] = None,
        status: Optional[PositionStatus] = None,
        symbol: Optional[str] = None,
    ) -> List[Position]:
        """Positions filtered by user, mode, status and symbol (newest first)"""
        query = select(PositionRecord)
        if user_id is not None:
            query = query.where(PositionRecord.user_id == user_id)
        if trading_mode is not None:
            query = query.where(PositionRecord.trading_mode == str(TradingMode(trading_mode)))
        if status is not None:
            query = query.where(PositionRecord.status == str(PositionStatus(status)))
        if symbol is not None:
            query = query.where(PositionRecord.symbol == symbol)
        query = query.order_by(PositionRecord.id.desc())

        try:
            with self.session() as session:
                return [position_from_record(r) for r in session.scalars(query).all()]
        except Exception as e:
            logger.error(f"❌ Positions get error: {e}")
            return []

    def get_open_positions(self, user_id: str, trading_mode: TradingMode) -> List[Position]:
        return self.get_positions(user_id, trading_mode, PositionStatus.OPEN)

    def count_open(self, user_id: str, trading_mode: TradingMode) -> int:
        query = (
            select(func.count(PositionRecord.id))
            .where(PositionRecord.user_id == user_id)
            .where(PositionRecord.trading_mode == str(TradingMode(trading_mode)))
            .where(PositionRecord.status == str(PositionStatus.OPEN))
        )
        with self.session() as session:
            return session.scalar(query) or 0

    def update_mark(self, position_id: int, current_price: Decimal, pnl: Decimal) -> bool:
        """
        Mark-to-market update (open positions only)

        Returns:
            bool: False when the position is no longer open
        """
        try:
            with self.session() as session:
                result = session.execute(
                    update(PositionRecord)
                    .where(PositionRecord.id == position_id)
                    .where(PositionRecord.status == str(PositionStatus.OPEN))
                    .values(current_price=to_decimal_str(current_price), pnl=to_decimal_str(pnl))
                    .execution_options(synchronize_session=False)
                )
                session.commit()
                return result.rowcount == 1
        except Exception as e:
            logger.error(f"❌ Position mark update error #{position_id}: {e}")
            return False

    def close_position(
        self,
        position_id: int,
        exit_price: Decimal,
        pnl: Decimal,
        closed_at: datetime,
        close_reason: Optional[str] = None,
    ) -> Optional[Trade]:
        """
        Close a position and create its Trade atomically

        The status update only matches rows still open; when it matches
        nothing (already closed, or lost a race) no Trade is created.

        Returns:
            Trade: The created trade, or None if the position was not open
        """
        with self.session() as session, session.begin():
            result = session.execute(
                update(PositionRecord)
                .where(PositionRecord.id == position_id)
                .where(PositionRecord.status == str(PositionStatus.OPEN))
                .values(
                    status=str(PositionStatus.CLOSED),
                    current_price=to_decimal_str(exit_price),
                    pnl=to_decimal_str(pnl),
                    closed_at=to_iso(closed_at),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                return None

            record = session.get(PositionRecord, position_id)
            created_at = from_iso(record.created_at)
            trade_record = TradeRecord(
                position_id=record.id,
                user_id=record.user_id,
                symbol=record.symbol,
                direction=record.direction,
                entry_price=record.entry_price,
                exit_price=to_decimal_str(exit_price),
                quantity=record.quantity,
                pnl=to_decimal_str(pnl),
                duration=max(int((closed_at - created_at).total_seconds()), 0),
                strategy=record.strategy,
                trading_mode=record.trading_mode,
                is_paper_trade=record.is_paper_trade,
                close_reason=close_reason,
                entry_time=record.created_at,
                exit_time=to_iso(closed_at),
            )
            session.add(trade_record)
            session.flush()
            trade = trade_from_record(trade_record)

        logger.debug(f"✅ Position closed: #{position_id} (PnL: {pnl})")
        return trade


if __name__ == "__main__":
    from components.datamanager.base import DatabaseManager, MEMORY_PATH
    from components.strategies.trading_types import utc_now

    print("=" * 60)
    print("🧪 PositionService Test")
    print("=" * 60)

    db = DatabaseManager({"path": MEMORY_PATH})
    db.start()
    service = PositionService(db)

    pos = service.create_position(Position(
        symbol="BTCUSDT", direction=Direction.LONG, entry_price=Decimal("30000"),
        quantity=Decimal("0.01"), trading_mode=TradingMode.LEVERAGE,
    ))
    print(f"   ✅ Position saved: #{pos.id}")
    print(f"   Open: {service.count_open('default', TradingMode.LEVERAGE)}")
    trade = service.close_position(pos.id, Decimal("30900"), Decimal("9.00"), utc_now())
    print(f"   ✅ Trade: {trade.to_dict() if trade else None}")
    print(f"   Second close: {service.close_position(pos.id, Decimal('30900'), Decimal('9.00'), utc_now())}")

    db.stop()
    print("\n✅ All tests completed!")
    print("=" * 60)
