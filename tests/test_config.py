import json
from pathlib import Path

import pytest

from gacha_api.config import load_settings
from gacha_api.drop_engine import DrawMode
from gacha_api.gacha_loader import DEFAULT_GACHA_PATH
from gacha_api.import_rules import DEFAULT_STARTING_CURRENCY
from gacha_api.services.state import build_state


ENV_VARS = [
    "GACHA_CONFIG_PATH",
    "GACHA_PULL_COST",
    "GACHA_REFUND_PERCENT",
    "GACHA_DRAW_MODE",
    "GACHA_ALLOW_NEGATIVE_CURRENCY",
    "GACHA_STARTING_CURRENCY",
    "GACHA_EVENT_HISTORY",
    "GACHA_LOG_LEVEL",
]


def _clear(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    settings = load_settings()

    assert settings.config_path is None
    assert settings.pull_cost is None
    assert settings.refund_percent is None
    assert settings.draw_mode == DrawMode.cumulative
    assert settings.allow_negative_currency is True
    assert settings.starting_currency == DEFAULT_STARTING_CURRENCY
    assert settings.log_level == "INFO"


def test_env_overrides(monkeypatch, tmp_path):
    _clear(monkeypatch)
    monkeypatch.setenv("GACHA_CONFIG_PATH", str(tmp_path / "gacha.json"))
    monkeypatch.setenv("GACHA_PULL_COST", "250")
    monkeypatch.setenv("GACHA_REFUND_PERCENT", "0.1")
    monkeypatch.setenv("GACHA_DRAW_MODE", "Legacy")
    monkeypatch.setenv("GACHA_ALLOW_NEGATIVE_CURRENCY", "no")
    monkeypatch.setenv("GACHA_STARTING_CURRENCY", "42")
    monkeypatch.setenv("GACHA_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.config_path == Path(tmp_path / "gacha.json")
    assert settings.pull_cost == 250
    assert settings.refund_percent == 0.1
    assert settings.draw_mode == DrawMode.legacy
    assert settings.allow_negative_currency is False
    assert settings.starting_currency == 42
    assert settings.log_level == "DEBUG"


def test_invalid_values_fall_back(monkeypatch, caplog):
    _clear(monkeypatch)
    monkeypatch.setenv("GACHA_STARTING_CURRENCY", "lots")
    monkeypatch.setenv("GACHA_DRAW_MODE", "fair")
    monkeypatch.setenv("GACHA_ALLOW_NEGATIVE_CURRENCY", "maybe")
    monkeypatch.setenv("GACHA_REFUND_PERCENT", "2")

    settings = load_settings()

    assert settings.starting_currency == DEFAULT_STARTING_CURRENCY
    assert settings.draw_mode == DrawMode.cumulative
    assert settings.allow_negative_currency is True
    # out of range: the config file value is kept
    assert settings.refund_percent is None
    assert "Falling back" in caplog.text


@pytest.mark.parametrize("raw", ["abc", "0", "-5", "1.5"])
def test_invalid_pull_cost_keeps_configured_value(monkeypatch, tmp_path, caplog, raw):
    _clear(monkeypatch)
    path = tmp_path / "gacha.json"
    payload = json.loads(DEFAULT_GACHA_PATH.read_text())
    payload["pullCost"] = 300
    payload["refundPercent"] = 0.2
    path.write_text(json.dumps(payload))
    monkeypatch.setenv("GACHA_CONFIG_PATH", str(path))
    monkeypatch.setenv("GACHA_PULL_COST", raw)
    monkeypatch.setenv("GACHA_REFUND_PERCENT", "-1")

    settings = load_settings()
    state = build_state(settings)

    assert settings.pull_cost is None
    assert state.picker.pull_cost == 300
    assert state.picker.refund_percent == 0.2
    assert "GACHA_PULL_COST" in caplog.text
    assert "Falling back to 0" not in caplog.text
