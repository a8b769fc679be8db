"""
indicators/trend/ema.py - Exponential Moving Average

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    EMA (Exponential Moving Average)
    Weights recent prices more; the fast/slow pair drives the
    trend-following and pullback strategies.

Formula:
    EMA = (Close - EMA_prev) × Multiplier + EMA_prev
    Multiplier = 2 / (Period + 1)

Dependencies:
    - pandas>=2.0.0
"""

import pandas as pd

from components.indicators.base_indicator import BaseIndicator
from components.indicators.indicator_types import IndicatorCategory, IndicatorType


def ema_series(values: pd.Series, period: int) -> pd.Series:
    """EMA of an arbitrary series (NaN until `period` values are seen)"""
    return values.ewm(span=period, adjust=False, min_periods=period).mean()


class EMA(BaseIndicator):
    """
    Exponential Moving Average

    Args:
        period: EMA period (default: 20)
        source: Input column (default: close)
    """

    def __init__(self, period: int = 20, source: str = 'close'):
        self.period = period
        self.source = source
        self.required_columns = (source,)
        super().__init__(
            name=f'ema_{period}',
            category=IndicatorCategory.TREND,
            indicator_type=IndicatorType.SINGLE_VALUE,
            params={'period': period}
        )

    def get_required_periods(self) -> int:
        return self.period

    def calculate_batch(self, data: pd.DataFrame) -> pd.Series:
        return ema_series(data[self.source].astype(float), self.period).rename(self.name)


__all__ = ['EMA', 'ema_series']
