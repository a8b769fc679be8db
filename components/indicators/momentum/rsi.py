"""
indicators/momentum/rsi.py - Relative Strength Index

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    RSI (Relative Strength Index) - Momentum oscillator
    Range: 0-100
    Overbought: > rsi_high (70)
    Oversold: < rsi_low (30)

Formula:
    RSI = 100 - (100 / (1 + RS))
    RS = Average Gain / Average Loss (Wilder smoothing)
"""

import numpy as np
import pandas as pd

from components.indicators.base_indicator import BaseIndicator
from components.indicators.indicator_types import IndicatorCategory, IndicatorType


def calculate_rsi_values(close: np.ndarray, period: int = 14) -> np.ndarray:
    """
    RSI - Wilder's smoothed method (TA-Lib compatible)

    Args:
        close: Close prices
        period: RSI period

    Returns:
        RSI values, NaN for the first `period` bars
    """
    close = np.asarray(close, dtype=float)
    rsi_values = np.full(len(close), np.nan)
    if len(close) < period + 1:
        return rsi_values

    delta = np.diff(close, prepend=close[0])
    gains = np.where(delta > 0, delta, 0.0)
    losses = np.where(delta < 0, -delta, 0.0)

    # First average is a plain mean
    avg_gain = np.mean(gains[1:period + 1])
    avg_loss = np.mean(losses[1:period + 1])

    for i in range(period, len(close)):
        if i > period:
            avg_gain = (avg_gain * (period - 1) + gains[i]) / period
            avg_loss = (avg_loss * (period - 1) + losses[i]) / period

        if avg_loss == 0:
            rsi_values[i] = 100.0 if avg_gain > 0 else 50.0
        else:
            rs = avg_gain / avg_loss
            rsi_values[i] = 100 - (100 / (1 + rs))

    return rsi_values


class RSI(BaseIndicator):
    """
    Relative Strength Index

    Args:
        period: RSI period (default: 14)
    """

    def __init__(self, period: int = 14):
        self.period = period
        super().__init__(
            name='rsi',
            category=IndicatorCategory.MOMENTUM,
            indicator_type=IndicatorType.SINGLE_VALUE,
            params={'period': period}
        )

    def get_required_periods(self) -> int:
        return self.period + 1

    def calculate_batch(self, data: pd.DataFrame) -> pd.Series:
        values = calculate_rsi_values(data['close'].to_numpy(dtype=float), self.period)
        return pd.Series(values, index=data.index, name='rsi')


__all__ = ['RSI', 'calculate_rsi_values']
