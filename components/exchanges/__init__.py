"""
components/exchanges/__init__.py
DualBot - Exchange Adapters

Usage:
    from components.exchanges import CCXTWrapper, MarketDataAdapter, OrderGateway
"""

from components.exchanges.base_api import (
    MarketDataAdapter,
    OrderGateway,
    OrderAck,
    BUY,
    SELL,
    CATEGORY_SPOT,
    CATEGORY_LINEAR,
)
from components.exchanges.ccxt_wrapper import CCXTWrapper

__all__ = [
    'MarketDataAdapter',
    'OrderGateway',
    'OrderAck',
    'CCXTWrapper',
    'BUY',
    'SELL',
    'CATEGORY_SPOT',
    'CATEGORY_LINEAR',
]
