#!/usr/bin/env python3
"""
modules/trading/modes/live_mode.py
DualBot - Live Trading Mode
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Live Trading Mode - Real Execution

LIVE MODE:
- Market orders through the OrderGateway
- Spot bot: category 'spot', leverage bot: category 'linear'
- Exactly one submission per call, no retry
- Any failure (exception, missing order id, missing fill price)
  raises OrderSubmissionFailed

Usage:
    mode = LiveMode(gateway, TradingMode.LEVERAGE)
    fill = mode.open(opportunity, sizing, Direction.SHORT)

Dependencies:
    - python>=3.10
"""

from __future__ import annotations

from decimal import Decimal

from components.exchanges.base_api import OrderAck, OrderGateway
from components.strategies.trading_types import (
    Direction,
    Fill,
    OrderSubmissionFailed,
    Position,
    PositionSizing,
    TradingMode,
    TradingOpportunity,
    utc_now,
)
from core.logger_engine import get_logger
from modules.trading.modes.base_mode import ExecutionMode, close_side, open_side

logger = get_logger("modules.trading.modes.live_mode")


class LiveMode(ExecutionMode):
    """Live Trading Mode - Real Execution"""

    is_paper = False

    def __init__(self, gateway: OrderGateway, trading_mode: TradingMode = TradingMode.SPOT):
        super().__init__(trading_mode)
        self.gateway = gateway

    def _submit(self, symbol: str, side: str, quantity: Decimal) -> Fill:
        try:
            ack: OrderAck = self.gateway.submit_order(symbol, side, quantity, self.category)
        except Exception as e:
            logger.error(f"❌ {self.trading_mode} order failed: {symbol} {side} {quantity}: {e}")
            raise OrderSubmissionFailed(symbol, str(e)) from e

        if ack is None or not ack.order_id:
            raise OrderSubmissionFailed(symbol, "no order id in acknowledgement")
        if ack.price is None or ack.price <= 0:
            raise OrderSubmissionFailed(symbol, f"no fill price for order {ack.order_id}")

        logger.order(f"📝 {self.trading_mode} order filled: {symbol} {side} {quantity} @ {ack.price}")
        return Fill(
            order_id=str(ack.order_id),
            symbol=symbol,
            price=ack.price,
            quantity=ack.quantity if ack.quantity else Decimal(quantity),
            is_paper=False,
            timestamp=utc_now(),
        )

    def open(
        self,
        opportunity: TradingOpportunity,
        sizing: PositionSizing,
        direction: Direction
    ) -> Fill:
        return self._submit(opportunity.symbol, open_side(direction), sizing.quantity)

    def close(self, position: Position, price: Decimal) -> Fill:
        return self._submit(position.symbol, close_side(position.direction), position.quantity)
