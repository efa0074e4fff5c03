from fastapi import APIRouter, Depends, HTTPException

from gacha_api.drop_engine import simulate_drops
from gacha_api.import_rules import RARITY_KEYS
from gacha_api.rng import get_rng
from gacha_api.schemas import SimulationRequest
from gacha_api.services.state import GachaState, get_state

router = APIRouter(prefix="/simulate", tags=["Simulation"])


@router.post(
    "",
    summary="Run probability simulation",
    description="Draws from the live pool without charging anyone. Returns rarity distribution and top items.",
    response_model=dict
)
def simulate(req: SimulationRequest, state: GachaState = Depends(get_state)):
    picker = state.picker
    pool = picker.item_pool

    if not pool:
        raise HTTPException(400, "No items in the pool.")

    mode = req.mode or picker.draw_mode
    rng = get_rng(req.seed)
    drops = simulate_drops(pool, picker.rarity_mapping, rng, req.simulations, mode)

    rarity_counts = {}
    item_counts = {}
    item_rarity = {}

    for item in drops:
        rar = item.rarity.value
        rarity_counts[rar] = rarity_counts.get(rar, 0) + 1

        item_counts[item.id] = item_counts.get(item.id, 0) + 1
        item_rarity[item.id] = rar

    # enforce rarity order
    rarity_distribution = {
        r: round((rarity_counts.get(r, 0) / req.simulations) * 100, 2)
        for r in RARITY_KEYS
        if r in rarity_counts
    }

    def top_by_rarity(target, limit=3):
        return [
            (name, count)
            for name, count in sorted(
                item_counts.items(),
                key=lambda x: x[1],
                reverse=True
            )
            if item_rarity.get(name) == target
        ][:limit]

    warnings = []

    has_ultra_rare = any(item.rarity.value == "ultraRare" for item in pool)
    if has_ultra_rare and rarity_distribution.get("ultraRare", 0) < 0.5:
        warnings.append("Ultra rare items drop less than 0.5% of the time.")

    never_drawn = [item.id for item in pool if item.id not in item_counts]
    if never_drawn:
        warnings.append(f"{len(never_drawn)} item(s) were never drawn: {', '.join(never_drawn)}")

    return {
        "simulations": req.simulations,
        "mode": mode.value,
        "rarity_distribution": rarity_distribution,
        "top_items_overall": sorted(
            item_counts.items(),
            key=lambda x: x[1],
            reverse=True
        )[:10],
        "top_rare_items": top_by_rarity("rare"),
        "top_ultra_rare_items": top_by_rarity("ultraRare"),
        "warnings": warnings
    }
