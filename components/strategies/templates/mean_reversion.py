#!/usr/bin/env python3
"""
components/strategies/templates/mean_reversion.py
DualBot - Mean Reversion Strategy
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Logic: Fade extremes. RSI beyond its band and price outside the
Bollinger envelope.

LONG:  RSI < rsi_low  + price < lower band
SHORT: RSI > rsi_high + price > upper band

Confidence: 70 + 2 per RSI point beyond the threshold, capped at 95.
"""

from components.strategies.base_strategy import BaseStrategy, Verdict
from components.strategies.trading_types import StrategyName

CONFIDENCE_CAP = 95.0


class MeanReversionStrategy(BaseStrategy):
    name = StrategyName.MEAN_REVERSION

    def check_long(self, snapshot, settings) -> Verdict:
        if snapshot.rsi < settings.rsi_low and snapshot.price < snapshot.bb_lower:
            confidence = min(70.0 + (settings.rsi_low - snapshot.rsi) * 2, CONFIDENCE_CAP)
            return confidence, f"Oversold: RSI {snapshot.rsi:.1f} below lower Bollinger band"
        return None

    def check_short(self, snapshot, settings) -> Verdict:
        if snapshot.rsi > settings.rsi_high and snapshot.price > snapshot.bb_upper:
            confidence = min(70.0 + (snapshot.rsi - settings.rsi_high) * 2, CONFIDENCE_CAP)
            return confidence, f"Overbought: RSI {snapshot.rsi:.1f} above upper Bollinger band"
        return None
