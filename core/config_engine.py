#!/usr/bin/env python3
"""
core/config_engine.py
DualBot - Config Management
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Features:
- Multi-YAML support (main.yaml + trading.yaml)
- Environment variable substitution (${BYBIT_API_KEY})
- Schema validation (pydantic) for the engine section
- Nested key access (dot notation: engine.tick_interval)
- Thread-safe config access

Usage:
    from core.config_engine import CONFIG_FILES, ConfigEngine

    config = ConfigEngine("config")
    config.load_all(CONFIG_FILES)
    interval = config.get("engine.tick_interval", 60)
    spot_symbols = config.get("engine.symbols.spot", [])

Dependencies:
    - pyyaml
    - python-dotenv
    - pydantic
"""

import copy
import os
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

if __name__ == "__main__" and __package__ is None:  # pragma: no cover
    import sys

    project_root = Path(__file__).resolve().parent.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

from core.logger_engine import get_logger

logger = get_logger(__name__)

CONFIG_FILES = ["main.yaml", "trading.yaml"]


# ============================================================================
# SCHEMAS
# ============================================================================

class ConfigSchema(BaseModel):
    """Base schema: unknown keys are allowed"""
    model_config = ConfigDict(extra="allow", validate_assignment=True)


class SymbolUniverseSchema(ConfigSchema):
    spot: List[str] = Field(default_factory=list)
    leverage: List[str] = Field(default_factory=list)


class EngineConfigSchema(ConfigSchema):
    """engine section of trading.yaml"""
    user_id: str = Field("default")
    tick_interval: float = Field(60.0, gt=0, description="Seconds between ticks")
    history_limit: int = Field(200, ge=50, description="Candles fetched per symbol")
    log_mirror_size: int = Field(100, ge=1)
    symbols: SymbolUniverseSchema = Field(default_factory=SymbolUniverseSchema)

    @field_validator('symbols')
    @classmethod
    def validate_symbols(cls, v):
        for symbol in v.spot + v.leverage:
            if not symbol or symbol != symbol.strip():
                raise ValueError(f"Invalid symbol: {symbol!r}")
        return v


class ConfigEngine:
    """
    Config management

    - Multi-YAML loading with deep merge
    - Environment variable substitution
    - Thread-safe access
    """

    def __init__(self, base_path: str = "config/", env_file: str = ".env"):
        self.base_path = Path(base_path)
        self.env_file = self.base_path / env_file

        self._config: Dict[str, Any] = {}
        self._config_lock = threading.RLock()
        self._loaded_files: List[str] = []

        if self.env_file.exists():
            load_dotenv(self.env_file)
        else:
            logger.debug(f".env file not found: {self.env_file}")

    def load(self, filename: str) -> bool:
        """
        Load a single config file

        Returns:
            bool: True on success
        """
        file_path = self.base_path / filename

        if not file_path.exists():
            logger.error(f"❌ Config file not found: {file_path}")
            return False

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}

            data = self._substitute_env_vars(data)

            with self._config_lock:
                self._config = self._deep_merge(self._config, data)
                if filename not in self._loaded_files:
                    self._loaded_files.append(filename)

            return True

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"❌ Config load error {filename}: {e}")
            return False

    def load_all(self, filenames: List[str]) -> bool:
        success = True
        for filename in filenames:
            if not self.load(filename):
                success = False

        if success:
            logger.debug(f"✅ All configs loaded ({len(filenames)} files)")
        else:
            logger.warning("⚠️  Some configs could not be loaded")

        return success

    def get(self, key: str, default: Any = None) -> Any:
        """
        Nested key access

        Example:
            interval = config.get("engine.tick_interval", default=60)
        """
        with self._config_lock:
            value = self._get_nested_value(self._config, key)
            return default if value is None else value

    def set(self, key: str, value: Any) -> bool:
        """Runtime override"""
        with self._config_lock:
            keys = key.split('.')
            config = self._config
            for k in keys[:-1]:
                if not isinstance(config.get(k), dict):
                    config[k] = {}
                config = config[k]
            config[keys[-1]] = value

        logger.debug(f"✅ Config updated: {key} = {value}")
        return True

    def get_all(self) -> Dict[str, Any]:
        with self._config_lock:
            return copy.deepcopy(self._config)

    def get_loaded_files(self) -> List[str]:
        return self._loaded_files.copy()

    def validate(self, schema: type[BaseModel], config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Validate a config section against a pydantic schema

        Raises:
            ValidationError: When validation fails
        """
        config_data = self.get(config_path, {}) if config_path else self.get_all()

        try:
            validated = schema(**config_data)
        except ValidationError as e:
            logger.error(f"❌ Config validation error: {schema.__name__}")
            for error in e.errors():
                field = " -> ".join(str(x) for x in error['loc'])
                logger.error(f"   • {field}: {error['msg']}")
            raise

        logger.debug(f"✅ Config validation passed: {schema.__name__}")
        return validated.model_dump()

    def get_engine_config(self) -> Dict[str, Any]:
        """Validated engine section with defaults filled in"""
        return self.validate(EngineConfigSchema, "engine")

    def _deep_merge(self, base: Dict, update: Dict) -> Dict:
        result = copy.deepcopy(base)
        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _substitute_env_vars(self, data: Any) -> Any:
        """${VAR_NAME} -> os.getenv("VAR_NAME"), unresolved vars are kept verbatim"""
        if isinstance(data, dict):
            return {k: self._substitute_env_vars(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        if isinstance(data, str):
            return re.sub(
                r'\$\{([^}]+)\}',
                lambda match: os.getenv(match.group(1), match.group(0)),
                data
            )
        return data

    def _get_nested_value(self, data: Dict, key: str) -> Any:
        value = data
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return None
        return value


if __name__ == "__main__":
    print("=" * 60)
    print("🧪 ConfigEngine Test")
    print("=" * 60)

    config = ConfigEngine("config")
    config.load_all(CONFIG_FILES)
    print(f"   Loaded: {config.get_loaded_files()}")
    print(f"   engine: {config.get_engine_config()}")

    print("\n✅ Test completed!")
    print("=" * 60)
