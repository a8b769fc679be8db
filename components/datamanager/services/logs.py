#!/usr/bin/env python3
"""
components/datamanager/services/logs.py
DualBot - Bot Log & System Error Models & Service
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Durable storage behind the live log mirror.

Features:
- BotLogRecord: append-only activity log (full history until cleared)
- SystemErrorRecord: never deleted, only the resolved flag changes
- Filters by user, resolved state, limit

Usage:
    from components.datamanager.services.logs import LogService

    service = LogService(db_manager)
    service.create_log(BotLog(level="SCAN", message="..."))
    errors = service.get_errors("default", resolved=False)

Dependencies:
    - python>=3.10
    - sqlalchemy>=2.0.0
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List, Optional

from sqlalchemy import Boolean, Column, Integer, String, Text, delete, select

if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent.parent
    sys.path.insert(0, str(project_root))

from components.datamanager.base import Base, BaseService, from_iso, to_iso
from components.strategies.trading_types import BotLog, ErrorLevel, SystemErrorEntry, utc_now
from core.logger_engine import get_logger

logger = get_logger("components.datamanager.services.logs")


# ============================================
# MODELS
# ============================================

class BotLogRecord(Base):
    __tablename__ = "bot_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    level = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)
    symbol = Column(String(30))
    data = Column(Text)  # JSON
    trading_mode = Column(String(10))
    created_at = Column(String(40), nullable=False)


class SystemErrorRecord(Base):
    __tablename__ = "system_errors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    level = Column(String(10), nullable=False)  # INFO/WARNING/ERROR
    title = Column(String(120), nullable=False)
    message = Column(Text, nullable=False)
    source = Column(String(80), nullable=False)
    error_code = Column(String(40))
    resolved = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(String(40), nullable=False)
    resolved_at = Column(String(40))


def log_from_record(record: BotLogRecord) -> BotLog:
    return BotLog(
        id=record.id,
        user_id=record.user_id,
        level=record.level,
        message=record.message,
        symbol=record.symbol,
        data=json.loads(record.data) if record.data else None,
        trading_mode=record.trading_mode,
        created_at=from_iso(record.created_at),
    )


def error_from_record(record: SystemErrorRecord) -> SystemErrorEntry:
    return SystemErrorEntry(
        id=record.id,
        user_id=record.user_id,
        level=ErrorLevel(record.level),
        title=record.title,
        message=record.message,
        source=record.source,
        error_code=record.error_code,
        resolved=bool(record.resolved),
        created_at=from_iso(record.created_at),
        resolved_at=from_iso(record.resolved_at),
    )


# ============================================
# SERVICE
# ============================================

class LogService(BaseService):
    """Bot log and system error service"""

    # ============================================
    # Bot logs
    # ============================================

    def create_log(self, entry: BotLog) -> BotLog:
        record = BotLogRecord(
            user_id=entry.user_id,
            level=entry.level,
            message=entry.message,
            symbol=entry.symbol,
            data=json.dumps(entry.data, default=str) if entry.data is not None else None,
            trading_mode=entry.trading_mode,
            created_at=to_iso(entry.created_at),
        )
        with self.session() as session:
            session.add(record)
            session.commit()
            entry.id = record.id
        return entry

    def get_logs(self, user_id: Optional[str] = None, limit: Optional[int] = 100) -> List[BotLog]:
        """Most recent logs, newest first"""
        query = select(BotLogRecord)
        if user_id is not None:
            query = query.where(BotLogRecord.user_id == user_id)
        query = query.order_by(BotLogRecord.id.desc())
        if limit:
            query = query.limit(limit)

        try:
            with self.session() as session:
                return [log_from_record(r) for r in session.scalars(query).all()]
        except Exception as e:
            logger.error(f"❌ Bot logs get error: {e}")
            return []

    def clear_logs(self, user_id: Optional[str] = None) -> int:
        """
        Returns:
            int: Number of deleted rows
        """
        query = delete(BotLogRecord)
        if user_id is not None:
            query = query.where(BotLogRecord.user_id == user_id)

        with self.session() as session:
            result = session.execute(query)
            session.commit()
            logger.info(f"✅ Bot logs cleared ({result.rowcount} rows)")
            return result.rowcount

    # ============================================
    # System errors
    # ============================================

    def create_error(self, entry: SystemErrorEntry) -> SystemErrorEntry:
        record = SystemErrorRecord(
            user_id=entry.user_id,
            level=str(entry.level),
            title=entry.title,
            message=entry.message,
            source=entry.source,
            error_code=entry.error_code,
            resolved=entry.resolved,
            created_at=to_iso(entry.created_at),
        )
        with self.session() as session:
            session.add(record)
            session.commit()
            entry.id = record.id
        return entry

    def get_errors(
        self,
        user_id: Optional[str] = None,
        resolved: Optional[bool] = None,
        limit: Optional[int] = 100,
    ) -> List[SystemErrorEntry]:
        query = select(SystemErrorRecord)
        if user_id is not None:
            query = query.where(SystemErrorRecord.user_id == user_id)
        if resolved is not None:
            query = query.where(SystemErrorRecord.resolved == resolved)
        query = query.order_by(SystemErrorRecord.id.desc())
        if limit:
            query = query.limit(limit)

        try:
            with self.session() as session:
                return [error_from_record(r) for r in session.scalars(query).all()]
        except Exception as e:
            logger.error(f"❌ System errors get error: {e}")
            return []

    def resolve_error(self, error_id: int) -> Optional[SystemErrorEntry]:
        """
        Mark an error resolved (resolving twice keeps the first resolved_at)

        Returns:
            SystemErrorEntry: Updated entry, None if not found
        """
        with self.session() as session:
            record = session.get(SystemErrorRecord, error_id)
            if record is None:
                logger.warning(f"⚠️ System error not found: #{error_id}")
                return None
            if not record.resolved:
                record.resolved = True
                record.resolved_at = to_iso(utc_now())
                session.commit()
            return error_from_record(record)
