"""
indicators/indicator_manager.py - Indicator Engine

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    Derives the indicator snapshot one symbol needs for one tick.

    Tasks:
    1. Builds RSI, fast/slow EMA, MACD, ADX and Bollinger from the settings
    2. Rejects short histories with InsufficientHistory (the longest period wins)
    3. Adds price/volume context for the breakout strategy
       (range extremes and average volume of the previous bars)

    Pure function of (history, params): no I/O, no state between calls.

    Usage:
        engine = IndicatorEngine()
        params = IndicatorParams.from_settings(settings_view)
        snapshot = engine.compute(history_df, params)
        snapshot.rsi, snapshot.ema_fast, snapshot.adx

Dependencies:
    - pandas>=2.0.0
"""

from dataclasses import asdict, dataclass
from typing import Dict, List

import pandas as pd

from components.indicators.base_indicator import BaseIndicator
from components.indicators.indicator_types import IndicatorError, InsufficientHistory
from components.indicators.momentum.rsi import RSI
from components.indicators.trend.adx import ADX
from components.indicators.trend.ema import EMA
from components.indicators.trend.macd import MACD
from components.indicators.volatility.bollinger import BollingerBands

BOLLINGER_PERIOD = 20
BOLLINGER_STD = 2.0
RANGE_LOOKBACK = 20


@dataclass(frozen=True)
class IndicatorParams:
    rsi_period: int = 14
    ema_fast: int = 12
    ema_slow: int = 26
    macd_signal: int = 9
    adx_period: int = 14
    bollinger_period: int = BOLLINGER_PERIOD
    bollinger_std: float = BOLLINGER_STD
    range_lookback: int = RANGE_LOOKBACK

    @classmethod
    def from_settings(cls, settings) -> 'IndicatorParams':
        """Build from a ModeSettingsView (or anything with the same fields)"""
        return cls(
            rsi_period=settings.rsi_period,
            ema_fast=settings.ema_fast,
            ema_slow=settings.ema_slow,
            macd_signal=settings.macd_signal,
            adx_period=settings.adx_period,
        )


@dataclass(frozen=True)
class IndicatorSnapshot:
    """Last-bar indicator values for one symbol"""
    price: float
    volume: float
    rsi: float
    ema_fast: float
    ema_slow: float
    macd: float
    macd_signal: float
    macd_histogram: float
    adx: float
    plus_di: float
    minus_di: float
    bb_upper: float
    bb_middle: float
    bb_lower: float
    range_high: float
    range_low: float
    avg_volume: float

    @property
    def volume_ratio(self) -> float:
        return self.volume / self.avg_volume if self.avg_volume > 0 else 0.0

    def to_dict(self) -> Dict[str, float]:
        return {k: round(v, 8) for k, v in asdict(self).items()}


class IndicatorEngine:
    """
    Indicator engine

    Example:
        engine = IndicatorEngine()
        snapshot = engine.compute(df, IndicatorParams(rsi_period=14))
    """

    def build_indicators(self, params: IndicatorParams) -> Dict[str, BaseIndicator]:
        return {
            'rsi': RSI(params.rsi_period),
            'ema_fast': EMA(params.ema_fast),
            'ema_slow': EMA(params.ema_slow),
            'macd': MACD(params.ema_fast, params.ema_slow, params.macd_signal),
            'adx': ADX(params.adx_period),
            'bollinger': BollingerBands(params.bollinger_period, params.bollinger_std),
        }

    def required_history(self, params: IndicatorParams) -> int:
        """Longest lookback over all indicators (+1 bar for the range window)"""
        indicators = self.build_indicators(params)
        return max(
            max(ind.get_required_periods() for ind in indicators.values()),
            params.range_lookback + 1
        )

    def compute(self, history: pd.DataFrame, params: IndicatorParams) -> IndicatorSnapshot:
        """
        Args:
            history: OHLCV DataFrame, oldest first

        Raises:
            InsufficientHistory: len(history) below the longest configured period
            IndicatorError: Missing columns / NaN result
        """
        missing = {'high', 'low', 'close', 'volume'} - set(history.columns)
        if missing:
            raise IndicatorError(f"Missing columns: {sorted(missing)}", 'indicator_engine')

        required = self.required_history(params)
        if len(history) < required:
            raise InsufficientHistory('indicator_engine', required, len(history))

        history = history.reset_index(drop=True)
        indicators = self.build_indicators(params)
        values = {name: ind.calculate(history) for name, ind in indicators.items()}

        # Previous bars only: the current bar is what breaks out of the range
        previous = history.iloc[-(params.range_lookback + 1):-1]

        macd = values['macd']
        adx = values['adx']
        bands = values['bollinger']

        return IndicatorSnapshot(
            price=float(history['close'].iloc[-1]),
            volume=float(history['volume'].iloc[-1]),
            rsi=values['rsi'],
            ema_fast=values['ema_fast'],
            ema_slow=values['ema_slow'],
            macd=macd['macd'],
            macd_signal=macd['signal'],
            macd_histogram=macd['histogram'],
            adx=adx['adx'],
            plus_di=adx['plus_di'],
            minus_di=adx['minus_di'],
            bb_upper=bands['upper'],
            bb_middle=bands['middle'],
            bb_lower=bands['lower'],
            range_high=float(previous['high'].max()),
            range_low=float(previous['low'].min()),
            avg_volume=float(previous['volume'].mean()),
        )


def candles_to_frame(candles: List[List[float]]) -> pd.DataFrame:
    """ccxt OHLCV rows -> DataFrame"""
    return pd.DataFrame(candles, columns=['timestamp', 'open', 'high', 'low', 'close', 'volume'])


__all__ = ['IndicatorEngine', 'IndicatorParams', 'IndicatorSnapshot', 'candles_to_frame']
