from fastapi import APIRouter, Depends

from gacha_api.drop_engine import DrawMode, draw_probabilities
from gacha_api.import_rules import RARITY_KEYS
from gacha_api.services.state import GachaState, get_state

router = APIRouter(prefix="/balance", tags=["Balance Tools"])


@router.get(
    "/overview",
    summary="Exact pull odds for the live pool",
    description="Per-item and per-rarity probability (%) under the configured draw mode, "
                "next to the proportional (cumulative) reference.",
    response_model=dict
)
def balance_overview(state: GachaState = Depends(get_state)):
    picker = state.picker
    pool = picker.item_pool
    weights = picker.rarity_mapping
    mode = picker.draw_mode

    configured = draw_probabilities(pool, weights, mode)
    proportional = draw_probabilities(pool, weights, DrawMode.cumulative)

    items = []
    rarity_odds = {r: 0.0 for r in RARITY_KEYS}
    rarity_counts = {r: 0 for r in RARITY_KEYS}

    for item, p_mode, p_ref in zip(pool, configured, proportional):
        items.append({
            "id": item.id,
            "rarity": item.rarity.value,
            "probability": round(p_mode * 100, 4),
            "proportional_probability": round(p_ref * 100, 4),
        })
        rarity_odds[item.rarity.value] += p_mode * 100
        rarity_counts[item.rarity.value] += 1

    warnings = []
    skewed = [i["id"] for i in items if abs(i["probability"] - i["proportional_probability"]) >= 0.01]
    if skewed:
        warnings.append(f"{len(skewed)} item(s) deviate from weight-proportional odds under '{mode.value}' mode.")

    unreachable = [i["id"] for i in items if i["probability"] == 0]
    if unreachable:
        warnings.append(f"Unreachable items: {', '.join(unreachable)}")

    return {
        "mode": mode.value,
        "total_items": len(pool),
        "pull_cost": picker.pull_cost,
        "duplicate_refund": picker.refund_amount(),
        "rarity_counts": rarity_counts,
        "rarity_probability": {r: round(v, 4) for r, v in rarity_odds.items()},
        "items": items,
        "warnings": warnings,
    }
