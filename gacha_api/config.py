import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gacha_api.drop_engine import DrawMode
from gacha_api.import_rules import DEFAULT_STARTING_CURRENCY

logger = logging.getLogger(__name__)


def int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%s. Falling back to %s.", name, raw, default)
        return default


def bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    logger.warning("Invalid boolean for %s=%s. Falling back to %s.", name, raw, default)
    return default


def override_from_env(name: str, parse):
    """Parsed value of an optional override, or None when unset or unparsable."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return parse(raw)
    except ValueError:
        logger.warning("Invalid value for %s=%s. Ignoring the override.", name, raw)
        return None


def path_from_env(name: str) -> Optional[Path]:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    return Path(value).expanduser()


def draw_mode_from_env(name: str, default: DrawMode) -> DrawMode:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return DrawMode(raw.strip().lower())
    except ValueError:
        logger.warning("Invalid draw mode for %s=%s. Falling back to %s.", name, raw, default.value)
        return default


@dataclass(frozen=True)
class Settings:
    config_path: Optional[Path] = None
    # None keeps whatever the config file says
    pull_cost: Optional[int] = None
    refund_percent: Optional[float] = None
    draw_mode: DrawMode = DrawMode.cumulative
    allow_negative_currency: bool = True
    starting_currency: int = DEFAULT_STARTING_CURRENCY
    event_history: int = 100
    log_level: str = "INFO"


def load_settings() -> Settings:
    # invalid overrides are ignored so the config file value stays in effect
    pull_cost = override_from_env("GACHA_PULL_COST", int)
    if pull_cost is not None and pull_cost < 1:
        logger.warning("GACHA_PULL_COST must be positive. Keeping the configured pull cost.")
        pull_cost = None

    refund_percent = override_from_env("GACHA_REFUND_PERCENT", float)
    if refund_percent is not None and not 0.0 <= refund_percent <= 1.0:
        logger.warning("GACHA_REFUND_PERCENT must be between 0 and 1. Keeping the configured refund percent.")
        refund_percent = None

    return Settings(
        config_path=path_from_env("GACHA_CONFIG_PATH"),
        pull_cost=pull_cost,
        refund_percent=refund_percent,
        draw_mode=draw_mode_from_env("GACHA_DRAW_MODE", DrawMode.cumulative),
        allow_negative_currency=bool_from_env("GACHA_ALLOW_NEGATIVE_CURRENCY", True),
        starting_currency=int_from_env("GACHA_STARTING_CURRENCY", DEFAULT_STARTING_CURRENCY),
        event_history=max(1, int_from_env("GACHA_EVENT_HISTORY", 100)),
        log_level=os.getenv("GACHA_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level_name: Optional[str] = None) -> None:
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )
