#!/usr/bin/env python3
"""
core/test_config_engine.py
DualBot - ConfigEngine Tests
"""

import pytest
from pydantic import ValidationError

from core.config_engine import CONFIG_FILES, ConfigEngine


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "main.yaml").write_text(
        "logging:\n  level: INFO\n"
        "database:\n  path: ':memory:'\n"
        "eventbus:\n  history_size: 50\n",
        encoding="utf-8",
    )
    (tmp_path / "trading.yaml").write_text(
        "engine:\n"
        "  tick_interval: 30\n"
        "  symbols:\n"
        "    spot: [BTCUSDT]\n"
        "    leverage: [ETHUSDT]\n"
        "exchange:\n"
        "  id: bybit\n"
        "  api_key: ${DUALBOT_TEST_KEY}\n",
        encoding="utf-8",
    )
    return tmp_path


def test_load_all_merges_files_and_substitutes_env(config_dir, monkeypatch):
    monkeypatch.setenv("DUALBOT_TEST_KEY", "abc123")
    config = ConfigEngine(base_path=str(config_dir))

    assert config.load_all(CONFIG_FILES)
    assert config.get("database.path") == ":memory:"
    assert config.get("eventbus.history_size") == 50
    assert config.get("exchange.api_key") == "abc123"
    assert config.get("missing.key", "fallback") == "fallback"


def test_engine_config_fills_defaults(config_dir):
    config = ConfigEngine(base_path=str(config_dir))
    config.load_all(CONFIG_FILES)

    engine = config.get_engine_config()
    assert engine["tick_interval"] == 30
    assert engine["history_limit"] == 200
    assert engine["user_id"] == "default"
    assert engine["symbols"]["spot"] == ["BTCUSDT"]
    assert engine["symbols"]["leverage"] == ["ETHUSDT"]


def test_engine_config_rejects_bad_interval(config_dir):
    config = ConfigEngine(base_path=str(config_dir))
    config.load_all(CONFIG_FILES)
    config.set("engine.tick_interval", 0)

    with pytest.raises(ValidationError):
        config.get_engine_config()


def test_set_overrides_nested_key(config_dir):
    config = ConfigEngine(base_path=str(config_dir))
    config.load_all(CONFIG_FILES)

    assert config.set("engine.tick_interval", 5)
    config.set("engine.new_section.flag", True)

    assert config.get("engine.tick_interval") == 5
    assert config.get("engine.new_section.flag") is True
    assert config.get_engine_config()["tick_interval"] == 5
