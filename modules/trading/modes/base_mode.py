#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
modules/trading/modes/base_mode.py

DualBot - Base Execution Mode (Abstract Interface)
Date: 2025-11-02
Version: 1.0.0

Abstract base class for the execution adapters.

MODES:
    PAPER  - Real data, virtual money, simulated fill at the quoted price
    LIVE   - Real data, real money, market order through the OrderGateway

INTERFACE:
    open()   - Fill for a new position
    close()  - Fill for closing an existing position (opposite side)

Both bots pick their adapter per tick from their own paper_trading switch,
so flipping spot to live never affects the leverage bot.

Usage:
    from modules.trading.modes import select_mode

    mode = select_mode(paper=True, trading_mode=TradingMode.SPOT)
    fill = mode.open(opportunity, sizing, sizing.direction)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from components.exchanges.base_api import BUY, CATEGORY_LINEAR, CATEGORY_SPOT, SELL, OrderGateway
from components.strategies.trading_types import (
    Direction,
    Fill,
    InvalidSettings,
    Position,
    PositionSizing,
    TradingMode,
    TradingOpportunity,
)


def open_side(direction: Direction) -> str:
    return BUY if Direction(direction).is_long else SELL


def close_side(direction: Direction) -> str:
    return SELL if Direction(direction).is_long else BUY


def order_category(trading_mode: TradingMode) -> str:
    return CATEGORY_SPOT if TradingMode(trading_mode) == TradingMode.SPOT else CATEGORY_LINEAR


class ExecutionMode(ABC):
    """
    Execution adapter base class

    Attributes:
        trading_mode: Owning bot (spot/leverage)
        is_paper: Fills are simulated
    """

    is_paper: bool = False

    def __init__(self, trading_mode: TradingMode = TradingMode.SPOT):
        self.trading_mode = TradingMode(trading_mode)

    @property
    def category(self) -> str:
        return order_category(self.trading_mode)

    @abstractmethod
    def open(
        self,
        opportunity: TradingOpportunity,
        sizing: PositionSizing,
        direction: Direction
    ) -> Fill:
        """
        Raises:
            OrderSubmissionFailed: No usable fill, no position must be created
        """
        raise NotImplementedError

    @abstractmethod
    def close(self, position: Position, price: Decimal) -> Fill:
        """
        Raises:
            OrderSubmissionFailed: Position must stay open
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.trading_mode}>"


def select_mode(
    paper: bool,
    gateway: Optional[OrderGateway] = None,
    trading_mode: TradingMode = TradingMode.SPOT
) -> ExecutionMode:
    """
    Mode selector (factory function).

    Args:
        paper: Simulated fills
        gateway: Required for live execution
        trading_mode: Owning bot

    Raises:
        InvalidSettings: Live execution without a gateway
    """
    if paper:
        from modules.trading.modes.paper_mode import PaperMode
        return PaperMode(trading_mode)

    if gateway is None:
        raise InvalidSettings(f"Live {TradingMode(trading_mode)} trading requires an order gateway")

    from modules.trading.modes.live_mode import LiveMode
    return LiveMode(gateway, trading_mode)
