#!/usr/bin/env python3
"""
components/strategies/templates/breakout.py
DualBot - Breakout Strategy
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Logic: Close beyond the recent range on expanded volume.
The range covers the previous bars only (see IndicatorSnapshot).

LONG:  price > range_high + volume >= 1.5x average
SHORT: price < range_low  + volume >= 1.5x average

Confidence: 70 + volume bonus (max 15) + ADX bonus (max 15), capped at 95.
"""

from components.strategies.base_strategy import BaseStrategy, Verdict
from components.strategies.trading_types import StrategyName

VOLUME_MULTIPLIER = 1.5
CONFIDENCE_CAP = 95.0


class BreakoutStrategy(BaseStrategy):
    name = StrategyName.BREAKOUT

    def _volume_confirmed(self, snapshot) -> bool:
        return snapshot.avg_volume > 0 and snapshot.volume >= snapshot.avg_volume * VOLUME_MULTIPLIER

    def _confidence(self, snapshot) -> float:
        volume_bonus = min(snapshot.volume_ratio - VOLUME_MULTIPLIER, 1.5) * 10
        adx_bonus = max(0.0, min(snapshot.adx - 20.0, 15.0))
        return min(70.0 + volume_bonus + adx_bonus, CONFIDENCE_CAP)

    def check_long(self, snapshot, settings) -> Verdict:
        if snapshot.price > snapshot.range_high and self._volume_confirmed(snapshot):
            return self._confidence(snapshot), (
                f"Breakout above {snapshot.range_high:.8g} on {snapshot.volume_ratio:.1f}x volume"
            )
        return None

    def check_short(self, snapshot, settings) -> Verdict:
        if snapshot.price < snapshot.range_low and self._volume_confirmed(snapshot):
            return self._confidence(snapshot), (
                f"Breakdown below {snapshot.range_low:.8g} on {snapshot.volume_ratio:.1f}x volume"
            )
        return None
