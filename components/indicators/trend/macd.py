"""
indicators/trend/macd.py - Moving Average Convergence Divergence

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    MACD - trend momentum from the fast/slow EMA spread.

Formula:
    MACD Line = EMA(fast) - EMA(slow)
    Signal Line = EMA(MACD Line, signal_period)
    Histogram = MACD Line - Signal Line

Dependencies:
    - pandas>=2.0.0
"""

import pandas as pd

from components.indicators.base_indicator import BaseIndicator
from components.indicators.indicator_types import (
    IndicatorCategory,
    IndicatorType,
    InvalidParameterError,
)
from components.indicators.trend.ema import ema_series


class MACD(BaseIndicator):
    """
    MACD

    Args:
        fast_period: Fast EMA (default: 12)
        slow_period: Slow EMA (default: 26)
        signal_period: Signal EMA (default: 9)
    """

    def __init__(self, fast_period: int = 12, slow_period: int = 26, signal_period: int = 9):
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.signal_period = signal_period
        super().__init__(
            name='macd',
            category=IndicatorCategory.TREND,
            indicator_type=IndicatorType.MULTIPLE_VALUES,
            params={
                'fast_period': fast_period,
                'slow_period': slow_period,
                'signal_period': signal_period
            }
        )

    def validate_params(self) -> bool:
        super().validate_params()
        if self.fast_period >= self.slow_period:
            raise InvalidParameterError(
                self.name, 'fast_period', self.fast_period,
                f"must be smaller than slow_period ({self.slow_period})"
            )
        return True

    def get_required_periods(self) -> int:
        # Signal EMA starts once the slow EMA is defined
        return self.slow_period + self.signal_period - 1

    def calculate_batch(self, data: pd.DataFrame) -> pd.DataFrame:
        close = data['close'].astype(float)
        macd_line = ema_series(close, self.fast_period) - ema_series(close, self.slow_period)
        signal_line = ema_series(macd_line.dropna(), self.signal_period).reindex(data.index)

        return pd.DataFrame({
            'macd': macd_line,
            'signal': signal_line,
            'histogram': macd_line - signal_line
        }, index=data.index)


__all__ = ['MACD']
