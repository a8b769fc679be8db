"""
indicators/volatility/bollinger.py - Bollinger Bands

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    Bollinger Bands - volatility envelope around an SMA.
    The mean-reversion strategy requires price outside the bands.

Formula:
    Middle Band = SMA(close, period)
    Upper Band = Middle + (std_dev * σ)
    Lower Band = Middle - (std_dev * σ)

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


class BollingerBands(BaseIndicator):
    """
    Bollinger Bands

    Args:
        period: SMA period (default: 20)
        std_dev: Standard deviation multiplier (default: 2.0)
    """

    def __init__(self, period: int = 20, std_dev: float = 2.0):
        self.period = period
        self.std_dev = std_dev
        super().__init__(
            name='bollinger',
            category=IndicatorCategory.VOLATILITY,
            indicator_type=IndicatorType.BANDS,
            params={'period': period, 'std_dev': std_dev}
        )

    def validate_params(self) -> bool:
        super().validate_params()
        if self.std_dev <= 0:
            raise InvalidParameterError(self.name, 'std_dev', self.std_dev, "must be positive")
        return True

    def get_required_periods(self) -> int:
        return self.period

    def calculate_batch(self, data: pd.DataFrame) -> pd.DataFrame:
        close = data['close'].astype(float)
        middle = close.rolling(window=self.period).mean()
        std = close.rolling(window=self.period).std(ddof=0)

        return pd.DataFrame({
            'upper': middle + (self.std_dev * std),
            'middle': middle,
            'lower': middle - (self.std_dev * std)
        }, index=data.index)


__all__ = ['BollingerBands']
