"""
indicators/volatility/__init__.py - Volatility Indicators Package

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team
"""

from components.indicators.volatility.bollinger import BollingerBands

__all__ = ['BollingerBands']
