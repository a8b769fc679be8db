#!/usr/bin/env python3
"""
components/datamanager/base.py
DualBot - DataManager Base Classes
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Database connection management and base service class.

Features:
- SQLAlchemy engine management (SQLite file or in-memory)
- Session factory (one short session per operation)
- Base service class for all services
- Decimal/ISO-8601 column helpers (money never stored as float)

Usage:
    from components.datamanager.base import Base, DatabaseManager, BaseService

    db = DatabaseManager({"path": "data/db/dualbot.db"})
    db.start()

Dependencies:
    - python>=3.10
    - sqlalchemy>=2.0.0
"""

from __future__ import annotations

import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent
    sys.path.insert(0, str(project_root))

from core.logger_engine import get_logger

logger = get_logger("components.datamanager.base")

# SQLAlchemy Base - all models use this
Base = declarative_base()

MEMORY_PATH = ":memory:"


# ============================================
# COLUMN HELPERS
# ============================================

def to_decimal_str(value: Optional[Decimal]) -> Optional[str]:
    """Decimal -> decimal-preserving string"""
    if value is None:
        return None
    return str(Decimal(value))


def from_decimal_str(value: Optional[str]) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return Decimal(value)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class DatabaseManager:
    """
    Database connection and engine management

    SQLite backend; both bot threads share the engine, each operation
    opens its own session.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            config: database section
                - path: SQLite database path, or ":memory:"
                - echo: SQL echo (debug)
        """
        self.config = config or {}
        self.engine = None
        self.session_factory = None
        self._build_database_url()

    def _build_database_url(self):
        db_path = self.config.get("path", "data/db/dualbot.db")
        if db_path == MEMORY_PATH:
            self.db_path = None
            self.database_url = "sqlite://"
        else:
            self.db_path = Path(db_path)
            self.database_url = f"sqlite:///{self.db_path}"

    def start(self):
        """Create the engine, tables and the session factory"""
        try:
            if self.db_path is None:
                # One shared connection, otherwise every session sees an empty database
                self.engine = create_engine(
                    self.database_url,
                    echo=self.config.get("echo", False),
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            else:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                self.engine = create_engine(
                    self.database_url,
                    echo=self.config.get("echo", False),
                    connect_args={"check_same_thread": False, "timeout": 30},
                )

            Base.metadata.create_all(self.engine)

            self.session_factory = sessionmaker(self.engine, expire_on_commit=False)
            logger.debug(f"✅ Database started: {self.database_url}")

        except Exception as e:
            logger.error(f"❌ Database start error: {e}")
            raise

    def stop(self):
        if self.engine:
            self.engine.dispose()
            self.engine = None
        logger.debug("🛑 Database closed")


class BaseService:
    """
    Base service class with session management

    All domain services extend this class.
    """

    def __init__(self, db_manager: DatabaseManager):
        self._db = db_manager

    def session(self):
        """Session context manager"""
        return self._db.session_factory()


if __name__ == "__main__":
    print("=" * 60)
    print("🧪 DatabaseManager Test")
    print("=" * 60)

    db = DatabaseManager({"path": MEMORY_PATH})
    db.start()
    with db.session_factory() as session:
        print(f"   ✅ Session created: {type(session)}")
    db.stop()

    print("\n✅ All tests completed!")
    print("=" * 60)
