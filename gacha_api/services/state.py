import logging
from dataclasses import dataclass
from typing import Optional

from gacha_api.config import Settings, load_settings
from gacha_api.gacha_loader import load_gacha_model
from gacha_api.notifier import FanoutNotifier, RecentEvents
from gacha_api.requesters import RequesterRegistry
from gacha_api.services.gacha_service import GachaPicker

logger = logging.getLogger(__name__)


@dataclass
class GachaState:
    """Everything the HTTP layer shares between requests."""

    settings: Settings
    picker: GachaPicker
    # also routes each pull to that requester's own observers
    registry: RequesterRegistry
    # server-side broadcast of every pull
    events: RecentEvents


def build_state(settings: Optional[Settings] = None, rng=None) -> GachaState:
    settings = settings or load_settings()
    model = load_gacha_model(settings.config_path)

    if settings.pull_cost is not None:
        model = model.model_copy(update={"pull_cost": settings.pull_cost})
    if settings.refund_percent is not None:
        model = model.model_copy(update={"refund_percent": settings.refund_percent})

    events = RecentEvents(maxlen=settings.event_history)
    registry = RequesterRegistry()
    picker = GachaPicker.from_gacha_model(
        model,
        notifier=FanoutNotifier(events, registry),
        rng=rng,
        draw_mode=settings.draw_mode,
        allow_negative_currency=settings.allow_negative_currency,
    )
    logger.info(
        "Gacha %s ready: %d items, cost=%s, refund=%s, mode=%s",
        picker.id, len(picker.item_pool), picker.pull_cost, picker.refund_percent, picker.draw_mode.value,
    )
    return GachaState(
        settings=settings,
        picker=picker,
        registry=registry,
        events=events,
    )


_state: Optional[GachaState] = None


def get_state() -> GachaState:
    global _state
    if _state is None:
        _state = build_state()
    return _state


def reset_state(state: Optional[GachaState] = None) -> None:
    global _state
    _state = state
