#!/usr/bin/env python3
"""
components/strategies/templates/pullback.py
DualBot - Pullback Strategy
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Logic: Join an established trend after price returns to the fast EMA
with neutral momentum.

LONG:  EMA fast > EMA slow + 40 < RSI < 60 + MACD histogram > 0
       + price within 1.5% of EMA fast
SHORT: mirror (EMA fast < EMA slow, histogram < 0)

Confidence: 65 + half of (60 - |RSI - 50|), capped at 90.
"""

from components.strategies.base_strategy import BaseStrategy, Verdict
from components.strategies.trading_types import StrategyName

RSI_NEUTRAL_LOW = 40.0
RSI_NEUTRAL_HIGH = 60.0
MAX_EMA_DISTANCE = 0.015
CONFIDENCE_CAP = 90.0


class PullbackStrategy(BaseStrategy):
    name = StrategyName.PULLBACK

    def _near_fast_ema(self, snapshot) -> bool:
        if snapshot.ema_fast <= 0:
            return False
        return abs(snapshot.price - snapshot.ema_fast) / snapshot.ema_fast <= MAX_EMA_DISTANCE

    def _neutral_rsi(self, snapshot) -> bool:
        return RSI_NEUTRAL_LOW < snapshot.rsi < RSI_NEUTRAL_HIGH

    def _confidence(self, snapshot) -> float:
        return min(65.0 + (60.0 - abs(snapshot.rsi - 50.0)) * 0.5, CONFIDENCE_CAP)

    def check_long(self, snapshot, settings) -> Verdict:
        if (snapshot.ema_fast > snapshot.ema_slow and snapshot.macd_histogram > 0
                and self._neutral_rsi(snapshot) and self._near_fast_ema(snapshot)):
            return self._confidence(snapshot), "Pullback to fast EMA in uptrend"
        return None

    def check_short(self, snapshot, settings) -> Verdict:
        if (snapshot.ema_fast < snapshot.ema_slow and snapshot.macd_histogram < 0
                and self._neutral_rsi(snapshot) and self._near_fast_ema(snapshot)):
            return self._confidence(snapshot), "Pullback to fast EMA in downtrend"
        return None
