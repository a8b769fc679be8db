#!/usr/bin/env python3
"""
components/strategies/templates/trend_following.py
DualBot - Trend Following Strategy
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Logic: Only trade strong trends (ADX above the floor) when EMA alignment
and MACD agree.

LONG:  ADX > 25 + EMA fast > EMA slow + MACD > signal
SHORT: ADX > 25 + EMA fast < EMA slow + MACD < signal

Confidence: 60 + min(ADX - 25, 30), +10 when RSI still has room
(below rsi_high for LONG, above rsi_low for SHORT).
"""

from components.strategies.base_strategy import BaseStrategy, Verdict
from components.strategies.trading_types import StrategyName

ADX_FLOOR = 25.0
ADX_BONUS_CAP = 30.0
RSI_ROOM_BONUS = 10.0


class TrendFollowingStrategy(BaseStrategy):
    name = StrategyName.TREND_FOLLOWING

    def _base_confidence(self, adx: float) -> float:
        return 60.0 + min(adx - ADX_FLOOR, ADX_BONUS_CAP)

    def check_long(self, snapshot, settings) -> Verdict:
        if snapshot.adx <= ADX_FLOOR:
            return None
        if not (snapshot.ema_fast > snapshot.ema_slow and snapshot.macd > snapshot.macd_signal):
            return None

        confidence = self._base_confidence(snapshot.adx)
        if snapshot.rsi < settings.rsi_high:
            confidence += RSI_ROOM_BONUS
        return confidence, f"Strong uptrend (ADX {snapshot.adx:.1f}), EMA and MACD bullish"

    def check_short(self, snapshot, settings) -> Verdict:
        if snapshot.adx <= ADX_FLOOR:
            return None
        if not (snapshot.ema_fast < snapshot.ema_slow and snapshot.macd < snapshot.macd_signal):
            return None

        confidence = self._base_confidence(snapshot.adx)
        if snapshot.rsi > settings.rsi_low:
            confidence += RSI_ROOM_BONUS
        return confidence, f"Strong downtrend (ADX {snapshot.adx:.1f}), EMA and MACD bearish"
