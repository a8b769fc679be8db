#!/usr/bin/env python3
"""
modules/trading/modes/paper_mode.py
DualBot - Paper Trading Mode
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Paper Trading Mode - Simulated Execution

PAPER MODE:
- Production data (quotes from the MarketDataAdapter)
- Virtual money
- Immediate fill at the quoted price (never reaches an exchange)
- order_id: PAPER-<uuid>

Usage:
    mode = PaperMode(TradingMode.SPOT)
    fill = mode.open(opportunity, sizing, Direction.UP)

Dependencies:
    - python>=3.10
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from components.strategies.trading_types import (
    Direction,
    Fill,
    Position,
    PositionSizing,
    TradingOpportunity,
    utc_now,
)
from modules.trading.modes.base_mode import ExecutionMode

PAPER_PREFIX = "PAPER-"


def paper_order_id() -> str:
    return f"{PAPER_PREFIX}{uuid.uuid4()}"


class PaperMode(ExecutionMode):
    """Paper Trading Mode - Simulated Execution"""

    is_paper = True

    def open(
        self,
        opportunity: TradingOpportunity,
        sizing: PositionSizing,
        direction: Direction
    ) -> Fill:
        return Fill(
            order_id=paper_order_id(),
            symbol=opportunity.symbol,
            price=Decimal(sizing.entry_price),
            quantity=Decimal(sizing.quantity),
            is_paper=True,
            timestamp=utc_now(),
        )

    def close(self, position: Position, price: Decimal) -> Fill:
        return Fill(
            order_id=paper_order_id(),
            symbol=position.symbol,
            price=Decimal(price),
            quantity=Decimal(position.quantity),
            is_paper=True,
            timestamp=utc_now(),
        )
