#!/usr/bin/env python3
"""
components/datamanager/services/settings.py
DualBot - Trading Settings Model & Service
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Per-user trading settings storage.

Features:
- TradingSettingsRecord model (one row per user)
- Disjoint spot_* / leverage_* columns for strategy toggles, paper and AI flags
- Defaults seeded on first use

Usage:
    from components.datamanager.services.settings import SettingsService

    service = SettingsService(db_manager)
    settings = service.ensure_settings("default")
    view = settings.for_mode(TradingMode.SPOT)

Dependencies:
    - python>=3.10
    - sqlalchemy>=2.0.0
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from sqlalchemy import Boolean, Column, Float, Integer, String, Text, select

if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent.parent
    sys.path.insert(0, str(project_root))

from components.datamanager.base import (
    Base, BaseService, from_decimal_str, to_decimal_str, to_iso,
)
from components.strategies.trading_types import (
    ModeSettings, StrategyToggles, TradingMode, TradingSettings, utc_now,
)
from core.logger_engine import get_logger

logger = get_logger("components.datamanager.services.settings")


# ============================================
# MODELS
# ============================================

class TradingSettingsRecord(Base):
    __tablename__ = "trading_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)

    usdt_per_trade = Column(String(40), nullable=False)
    max_positions = Column(Integer, nullable=False)
    risk_per_trade = Column(String(40), nullable=False)
    stop_loss = Column(String(40), nullable=False)
    take_profit = Column(String(40), nullable=False)

    rsi_period = Column(Integer, nullable=False)
    rsi_low = Column(Float, nullable=False)
    rsi_high = Column(Float, nullable=False)
    ema_fast = Column(Integer, nullable=False)
    ema_slow = Column(Integer, nullable=False)
    macd_signal = Column(Integer, nullable=False)
    adx_period = Column(Integer, nullable=False)
    timeframe = Column(String(10), nullable=False)
    min_confidence = Column(Float, nullable=False)

    api_key = Column(String(200))
    api_secret = Column(String(200))

    spot_strategies = Column(Text, nullable=False)  # JSON
    spot_paper_trading = Column(Boolean, nullable=False, default=True)
    spot_ai_trading_enabled = Column(Boolean, nullable=False, default=False)

    leverage_strategies = Column(Text, nullable=False)  # JSON
    leverage_paper_trading = Column(Boolean, nullable=False, default=True)
    leverage_ai_trading_enabled = Column(Boolean, nullable=False, default=False)

    updated_at = Column(String(40))


SHARED_FIELDS = (
    "max_positions", "rsi_period", "rsi_low", "rsi_high", "ema_fast", "ema_slow",
    "macd_signal", "adx_period", "timeframe", "min_confidence", "api_key", "api_secret",
)
DECIMAL_FIELDS = ("usdt_per_trade", "risk_per_trade", "stop_loss", "take_profit")


def _mode_from_record(record: TradingSettingsRecord, prefix: str) -> ModeSettings:
    return ModeSettings(
        strategies=StrategyToggles.from_dict(json.loads(getattr(record, f"{prefix}_strategies"))),
        paper_trading=bool(getattr(record, f"{prefix}_paper_trading")),
        ai_trading_enabled=bool(getattr(record, f"{prefix}_ai_trading_enabled")),
    )


def settings_from_record(record: TradingSettingsRecord) -> TradingSettings:
    values = {name: getattr(record, name) for name in SHARED_FIELDS}
    values.update({name: from_decimal_str(getattr(record, name)) for name in DECIMAL_FIELDS})
    return TradingSettings(
        **values,
        spot=_mode_from_record(record, TradingMode.SPOT.value),
        leverage=_mode_from_record(record, TradingMode.LEVERAGE.value),
    )


def _apply_settings(record: TradingSettingsRecord, settings: TradingSettings):
    for name in SHARED_FIELDS:
        setattr(record, name, getattr(settings, name))
    for name in DECIMAL_FIELDS:
        setattr(record, name, to_decimal_str(getattr(settings, name)))
    for mode in TradingMode:
        own = settings.mode_settings(mode)
        setattr(record, f"{mode.value}_strategies", json.dumps(asdict(own.strategies)))
        setattr(record, f"{mode.value}_paper_trading", own.paper_trading)
        setattr(record, f"{mode.value}_ai_trading_enabled", own.ai_trading_enabled)
    record.updated_at = to_iso(utc_now())


# ============================================
# SERVICE
# ============================================

class SettingsService(BaseService):
    """Trading settings service"""

    def get_settings(self, user_id: str) -> Optional[TradingSettings]:
        with self.session() as session:
            record = session.scalars(
                select(TradingSettingsRecord).where(TradingSettingsRecord.user_id == user_id)
            ).first()
            return settings_from_record(record) if record else None

    def save_settings(self, user_id: str, settings: TradingSettings) -> TradingSettings:
        """Insert or replace the user's settings (no validation here)"""
        with self.session() as session:
            record = session.scalars(
                select(TradingSettingsRecord).where(TradingSettingsRecord.user_id == user_id)
            ).first()
            if record is None:
                record = TradingSettingsRecord(user_id=user_id)
                session.add(record)
            _apply_settings(record, settings)
            session.commit()

        logger.debug(f"✅ Trading settings saved: {user_id}")
        return settings

    def ensure_settings(self, user_id: str) -> TradingSettings:
        """Return stored settings, seeding defaults when absent"""
        settings = self.get_settings(user_id)
        if settings is None:
            settings = self.save_settings(user_id, TradingSettings())
            logger.info(f"✅ Default trading settings created for {user_id}")
        return settings
