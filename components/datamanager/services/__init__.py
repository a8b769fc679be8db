#!/usr/bin/env python3
"""
components/datamanager/services/__init__.py
DualBot - Services Package Exports
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Central exports for all datamanager services.

Usage:
    from components.datamanager.services import (
        PositionService, PositionRecord,
        TradingService, TradeRecord,
        LogService, SettingsService,
    )
"""

# =============================================================================
# Trading Service
# =============================================================================
from components.datamanager.services.trading import (
    TradeRecord,
    TradingService,
)

# =============================================================================
# Position Service
# =============================================================================
from components.datamanager.services.position import (
    PositionRecord,
    PositionService,
)

# =============================================================================
# Log Service
# =============================================================================
from components.datamanager.services.logs import (
    BotLogRecord,
    SystemErrorRecord,
    LogService,
)

# =============================================================================
# Settings Service
# =============================================================================
from components.datamanager.services.settings import (
    TradingSettingsRecord,
    SettingsService,
)

__all__ = [
    "TradeRecord", "TradingService",
    "PositionRecord", "PositionService",
    "BotLogRecord", "SystemErrorRecord", "LogService",
    "TradingSettingsRecord", "SettingsService",
]
