#!/usr/bin/env python3
"""
components/strategies/risk_manager.py
DualBot - Risk Manager
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Risk Manager - position limits and sizing

Features:
- Max open positions per mode
- One open position per symbol per mode
- Risk-capped notional (loss at the stop never exceeds risk_per_trade %)
- Direction-correct stop loss / take profit

Risk Parameters (from ModeSettingsView):
    usdt_per_trade: 100     # Allocation per trade
    risk_per_trade: 2.5     # Max loss at the stop, % of the allocation
    stop_loss: 3.0          # Stop distance, %
    take_profit: 6.0        # Target distance, %
    max_positions: 10       # Per mode

Usage:
    rm = RiskManager()

    sizing = rm.assess(opportunity, view, open_positions)
    sizing.quantity, sizing.stop_loss, sizing.take_profit
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import List

from components.strategies.trading_types import (
    Direction,
    DuplicatePosition,
    MaxPositionsReached,
    ModeSettingsView,
    Position,
    PositionSizing,
    TradingMode,
    TradingOpportunity,
)

QUANTUM = Decimal("0.00000001")
HUNDRED = Decimal("100")


class RiskManager:
    """
    Risk Manager

    Risk Checks:
    1. Max open positions (MaxPositionsReached)
    2. Duplicate symbol (DuplicatePosition)
    """

    def check_limits(
        self,
        symbol: str,
        settings: ModeSettingsView,
        open_positions: List[Position]
    ) -> None:
        own = [p for p in open_positions if p.is_open and p.trading_mode == settings.mode]

        if len(own) >= settings.max_positions:
            raise MaxPositionsReached(settings.mode, len(own), settings.max_positions)

        if any(p.symbol == symbol for p in own):
            raise DuplicatePosition(symbol, settings.mode)

    def position_direction(self, opportunity: TradingOpportunity, mode: TradingMode) -> Direction:
        """Spot buys are recorded as UP"""
        if TradingMode(mode) == TradingMode.SPOT:
            return Direction.UP
        return opportunity.direction

    def notional(self, settings: ModeSettingsView) -> Decimal:
        """
        Allocation for one trade

        With stop_loss above risk_per_trade the allocation is scaled down
        so that a stop-out loses at most risk_per_trade % of usdt_per_trade.
        """
        notional = settings.usdt_per_trade
        if settings.stop_loss > settings.risk_per_trade:
            notional = settings.usdt_per_trade * settings.risk_per_trade / settings.stop_loss
        return notional

    def exit_levels(self, price: Decimal, direction: Direction, settings: ModeSettingsView):
        sl_pct = settings.stop_loss / HUNDRED
        tp_pct = settings.take_profit / HUNDRED

        if direction.is_long:
            stop_loss = price * (1 - sl_pct)
            take_profit = price * (1 + tp_pct)
        else:
            stop_loss = price * (1 + sl_pct)
            take_profit = price * (1 - tp_pct)

        return (
            stop_loss.quantize(QUANTUM, rounding=ROUND_HALF_UP),
            take_profit.quantize(QUANTUM, rounding=ROUND_HALF_UP),
        )

    def assess(
        self,
        opportunity: TradingOpportunity,
        settings: ModeSettingsView,
        open_positions: List[Position]
    ) -> PositionSizing:
        """
        Args:
            opportunity: Selected opportunity
            settings: Settings view of the acting mode
            open_positions: Current open positions of the mode

        Returns:
            PositionSizing

        Raises:
            MaxPositionsReached, DuplicatePosition
        """
        self.check_limits(opportunity.symbol, settings, open_positions)

        price = Decimal(opportunity.price)
        if price <= 0:
            raise ValueError(f"Invalid price for {opportunity.symbol}: {price}")

        direction = self.position_direction(opportunity, settings.mode)
        notional = self.notional(settings)
        quantity = (notional / price).quantize(QUANTUM, rounding=ROUND_DOWN)
        stop_loss, take_profit = self.exit_levels(price, direction, settings)

        return PositionSizing(
            quantity=quantity,
            notional=notional.quantize(QUANTUM, rounding=ROUND_DOWN),
            stop_loss=stop_loss,
            take_profit=take_profit,
            direction=direction,
            entry_price=price,
        )


__all__ = ['RiskManager']
