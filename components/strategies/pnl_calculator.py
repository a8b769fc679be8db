#!/usr/bin/env python3
"""
components/strategies/pnl_calculator.py
DualBot - PnL Calculator
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

PnL (Profit and Loss) utility class, used for both mark-to-market on open
positions and realized PnL at close. Decimal only: stored values are
decimal strings and repeated recomputation must not drift.

Usage:
    from components.strategies.pnl_calculator import PnLCalculator

    pnl = PnLCalculator.calculate(
        entry_price=Decimal("30000"),
        current_price=Decimal("30900"),
        quantity=Decimal("0.01"),
        direction=Direction.LONG
    )   # Decimal("9.00")
"""

from dataclasses import dataclass
from decimal import Decimal

from components.strategies.trading_types import Direction, Position

ZERO = Decimal("0")


@dataclass(frozen=True)
class PnLResult:
    """PnL result"""
    pnl: Decimal              # Signed PnL
    pnl_pct: Decimal          # PnL relative to entry value (%)
    position_value: Decimal   # entry_price * quantity
    is_profitable: bool       # pnl > 0


class PnLCalculator:
    """
    PnL Calculator

    Static utility class.

    UP / LONG:  PnL = (current_price - entry_price) * quantity
    SHORT:      PnL = (entry_price - current_price) * quantity
    """

    @staticmethod
    def calculate(
        entry_price: Decimal,
        current_price: Decimal,
        quantity: Decimal,
        direction: Direction
    ) -> Decimal:
        entry_price = Decimal(entry_price)
        current_price = Decimal(current_price)
        quantity = Decimal(quantity)

        if Direction(direction).is_long:
            return (current_price - entry_price) * quantity
        return (entry_price - current_price) * quantity

    @staticmethod
    def calculate_detailed(
        entry_price: Decimal,
        current_price: Decimal,
        quantity: Decimal,
        direction: Direction
    ) -> PnLResult:
        pnl = PnLCalculator.calculate(entry_price, current_price, quantity, direction)
        position_value = Decimal(entry_price) * Decimal(quantity)
        pnl_pct = (pnl / position_value * 100) if position_value else ZERO

        return PnLResult(
            pnl=pnl,
            pnl_pct=pnl_pct.quantize(Decimal("0.01")),
            position_value=position_value,
            is_profitable=pnl > 0
        )

    @staticmethod
    def for_position(position: Position, price: Decimal) -> Decimal:
        """PnL of a position at the given price"""
        return PnLCalculator.calculate(
            position.entry_price, price, position.quantity, position.direction
        )


if __name__ == "__main__":
    print("=" * 60)
    print("🧪 PnLCalculator Test")
    print("=" * 60)

    long_pnl = PnLCalculator.calculate(Decimal("30000"), Decimal("30900"), Decimal("0.01"), Direction.LONG)
    short_pnl = PnLCalculator.calculate(Decimal("30000"), Decimal("29100"), Decimal("0.01"), Direction.SHORT)
    print(f"   LONG:  {long_pnl}")
    print(f"   SHORT: {short_pnl}")

    print("\n✅ Test completed!")
    print("=" * 60)
