"""
indicators/momentum/__init__.py - Momentum Indicators Package

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team
"""

from components.indicators.momentum.rsi import RSI, calculate_rsi_values

__all__ = ['RSI', 'calculate_rsi_values']
