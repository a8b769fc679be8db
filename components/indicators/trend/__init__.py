"""
indicators/trend/__init__.py - Trend Indicators Package

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    - EMA: Exponential Moving Average (fast/slow)
    - MACD: MACD line, signal line, histogram
    - ADX: Average Directional Index with +DI / -DI
"""

from components.indicators.trend.ema import EMA, ema_series
from components.indicators.trend.macd import MACD
from components.indicators.trend.adx import ADX

__all__ = ['EMA', 'ema_series', 'MACD', 'ADX']
