import logging
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException
from pydantic import ValidationError

from gacha_api.config import configure_logging, load_settings
from gacha_api.errors import DuplicateItemError, EmptyPoolError, InsufficientFundsError, UnknownRarityError
from gacha_api.import_validator import validate_gacha_payload
from gacha_api.models.gacha_models import GachaModel, PullResult, WardrobeItem, WardrobeModel
from gacha_api.routes import balance, simulation
from gacha_api.schemas import RegisterRequest
from gacha_api.services.state import GachaState, get_state

configure_logging(load_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Gacha Pull API",
    description="Weighted wardrobe gacha: rarity-weighted pulls, duplicate refunds and pull broadcasts.",
    version="1.0.0",
)

app.include_router(simulation.router)
app.include_router(balance.router)

# ============================================================
# HEALTH CHECK
# ============================================================

@app.get("/health", tags=["Health"], response_model=dict)
def health_check():
    return {"status": "ok"}


# ============================================================
# METADATA ENDPOINTS
# ============================================================

@app.get(
    "/info",
    tags=["Metadata"],
    summary="API Info + pool metadata",
    description="Returns API version, item count and pull economics.",
    response_model=dict
)
def info(state: GachaState = Depends(get_state)):
    picker = state.picker
    return {
        "name": "Gacha Pull API",
        "version": app.version,
        "gacha_id": picker.id,
        "item_count": len(picker.item_pool),
        "pull_cost": picker.pull_cost,
        "refund_percent": picker.refund_percent,
        "draw_mode": picker.draw_mode.value,
        "allow_negative_currency": picker.allow_negative_currency,
        "requesters": len(state.registry),
    }


# ============================================================
# GACHA CONFIGURATION
# ============================================================

@app.get(
    "/gacha",
    tags=["Gacha"],
    summary="Current gacha configuration",
    response_model=GachaModel,
    response_model_by_alias=True,
)
def get_gacha(state: GachaState = Depends(get_state)):
    return state.picker.to_gacha_model()


@app.post(
    "/gacha/validate",
    tags=["Gacha"],
    summary="Validate a gacha config without applying it",
    description="Returns errors, warnings and a rarity summary.",
    response_model=dict
)
def validate_gacha(payload: Any = Body(...)):
    return validate_gacha_payload(payload)


@app.put(
    "/gacha",
    tags=["Gacha"],
    summary="Replace the gacha configuration",
    description="Validates the record first; nothing changes unless it is fully valid.",
    response_model=GachaModel,
    response_model_by_alias=True,
)
def replace_gacha(payload: Dict[str, Any] = Body(...), state: GachaState = Depends(get_state)):
    report = validate_gacha_payload(payload)
    if not report["valid"]:
        logger.warning("Rejected gacha config with %d error(s)", len(report["errors"]))
        raise HTTPException(status_code=400, detail=report["errors"])

    try:
        model = GachaModel.model_validate(payload)
        state.picker.apply_model(model)
    except (ValidationError, ValueError, UnknownRarityError, DuplicateItemError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return state.picker.to_gacha_model()


@app.post(
    "/gacha/items",
    tags=["Gacha"],
    summary="Add an item to the pool",
    description="The item's rarity must have a weight, and its id must be new to the pool.",
    response_model=GachaModel,
    response_model_by_alias=True,
)
def add_item(item: WardrobeItem, state: GachaState = Depends(get_state)):
    try:
        state.picker.add_item(item)
    except UnknownRarityError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DuplicateItemError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return state.picker.to_gacha_model()


# ============================================================
# REQUESTERS
# ============================================================

@app.post(
    "/requesters/{requester_id}",
    tags=["Requesters"],
    summary="Register a requester",
    response_model=WardrobeModel,
    response_model_by_alias=True,
    status_code=201,
)
def register_requester(
    requester_id: str,
    req: Optional[RegisterRequest] = None,
    state: GachaState = Depends(get_state),
):
    currency = state.settings.starting_currency
    if req is not None and req.currency is not None:
        currency = req.currency
    try:
        player = state.registry.register(requester_id, currency)
    except KeyError:
        raise HTTPException(status_code=409, detail=f"Requester '{requester_id}' already exists")

    return player.wardrobe.to_wardrobe_model()


@app.get(
    "/requesters/{requester_id}",
    tags=["Requesters"],
    summary="Wardrobe snapshot for a requester",
    response_model=WardrobeModel,
    response_model_by_alias=True,
)
def get_requester(requester_id: str, state: GachaState = Depends(get_state)):
    if requester_id not in state.registry:
        raise HTTPException(status_code=404, detail=f"Unknown requester '{requester_id}'")

    return state.registry.get(requester_id).wardrobe.to_wardrobe_model()


# ============================================================
# PULLS
# ============================================================

@app.post(
    "/requesters/{requester_id}/pull",
    tags=["Pulls"],
    summary="Pull once from the gacha",
    description="Charges the pull cost, refunds part of it on a duplicate, and broadcasts the new wardrobe.",
    response_model=PullResult,
    response_model_by_alias=True,
)
def pull(requester_id: str, state: GachaState = Depends(get_state)):
    if requester_id not in state.registry:
        raise HTTPException(status_code=404, detail=f"Unknown requester '{requester_id}'")

    # one pull per requester at a time
    with state.registry.locked(requester_id) as player:
        try:
            return state.picker.pull(player)
        except EmptyPoolError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except InsufficientFundsError as e:
            raise HTTPException(status_code=409, detail=str(e))


@app.get(
    "/events",
    tags=["Pulls"],
    summary="Recent pull broadcasts",
    description="Newest last. Each entry is the full pull result, not a diff.",
    response_model=List[PullResult],
    response_model_by_alias=True,
)
def recent_events(limit: int = 20, state: GachaState = Depends(get_state)):
    return state.events.snapshot(limit)
