"""
indicators/trend/adx.py - Average Directional Index

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    ADX - trend strength (not direction), plus the +DI / -DI lines.
    Range: 0-100
    > 25: trending market (trend-following floor)
    < 20: ranging market

Formula:
    TR  = max(high - low, |high - prev_close|, |low - prev_close|)
    +DM = high - prev_high (if > prev_low - low and > 0)
    -DM = prev_low - low  (if > high - prev_high and > 0)
    +DI = 100 * Wilder(+DM) / Wilder(TR)
    -DI = 100 * Wilder(-DM) / Wilder(TR)
    DX  = 100 * |+DI - -DI| / (+DI + -DI)
    ADX = Wilder(DX)

Dependencies:
    - pandas>=2.0.0
    - numpy>=1.24.0
"""

import numpy as np
import pandas as pd

from components.indicators.base_indicator import BaseIndicator
from components.indicators.indicator_types import IndicatorCategory, IndicatorType


class ADX(BaseIndicator):
    """
    Average Directional Index

    Args:
        period: ADX period (default: 14)
    """

    required_columns = ('high', 'low', 'close')

    def __init__(self, period: int = 14):
        self.period = period
        super().__init__(
            name='adx',
            category=IndicatorCategory.TREND,
            indicator_type=IndicatorType.MULTIPLE_VALUES,
            params={'period': period}
        )

    def get_required_periods(self) -> int:
        # DI needs `period` bars, ADX averages another `period` DX values
        return self.period * 2

    def _calculate_tr(self, high: np.ndarray, low: np.ndarray, close: np.ndarray) -> np.ndarray:
        """True Range"""
        prev_close = np.concatenate(([close[0]], close[:-1]))
        tr = np.maximum.reduce([
            high - low,
            np.abs(high - prev_close),
            np.abs(low - prev_close)
        ])
        tr[0] = high[0] - low[0]
        return tr

    def _smooth_series(self, dm: np.ndarray, tr: np.ndarray, period: int) -> np.ndarray:
        """DI line: Wilder-smoothed DM over Wilder-smoothed TR"""
        di = np.full(len(dm), np.nan)
        if len(dm) < period:
            return di

        sum_dm = np.sum(dm[:period])
        sum_tr = np.sum(tr[:period])
        di[period - 1] = 100 * sum_dm / sum_tr if sum_tr > 0 else 0.0

        for i in range(period, len(dm)):
            sum_dm = sum_dm - sum_dm / period + dm[i]
            sum_tr = sum_tr - sum_tr / period + tr[i]
            di[i] = 100 * sum_dm / sum_tr if sum_tr > 0 else 0.0

        return di

    def _smooth_dx(self, dx: np.ndarray, period: int) -> np.ndarray:
        """ADX: first value is the mean of `period` DX values, then Wilder smoothing"""
        adx = np.full(len(dx), np.nan)
        first_adx_idx = period * 2 - 1
        if first_adx_idx >= len(dx):
            return adx

        adx[first_adx_idx] = np.mean(dx[period:first_adx_idx + 1])
        for i in range(first_adx_idx + 1, len(dx)):
            adx[i] = (adx[i - 1] * (period - 1) + dx[i]) / period

        return adx

    def calculate_batch(self, data: pd.DataFrame) -> pd.DataFrame:
        high = data['high'].to_numpy(dtype=float)
        low = data['low'].to_numpy(dtype=float)
        close = data['close'].to_numpy(dtype=float)

        high_diff = np.diff(high, prepend=high[0])
        low_diff = -np.diff(low, prepend=low[0])

        plus_dm = np.where((high_diff > low_diff) & (high_diff > 0), high_diff, 0.0)
        minus_dm = np.where((low_diff > high_diff) & (low_diff > 0), low_diff, 0.0)

        tr = self._calculate_tr(high, low, close)

        plus_di = self._smooth_series(plus_dm, tr, self.period)
        minus_di = self._smooth_series(minus_dm, tr, self.period)

        di_sum = plus_di + minus_di
        with np.errstate(divide='ignore', invalid='ignore'):
            dx = np.where(di_sum > 0, 100 * np.abs(plus_di - minus_di) / di_sum, 0.0)
        dx[np.isnan(plus_di)] = np.nan

        return pd.DataFrame({
            'adx': self._smooth_dx(dx, self.period),
            'plus_di': plus_di,
            'minus_di': minus_di
        }, index=data.index)


__all__ = ['ADX']
