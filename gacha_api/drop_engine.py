from enum import Enum
from typing import List, Mapping, Sequence

from gacha_api.errors import EmptyPoolError, UnknownRarityError
from gacha_api.models.gacha_models import WardrobeItem


class DrawMode(str, Enum):
    # compares the roll against each item's own weight, falling back to the first item
    legacy = "legacy"
    # compares the roll against the running total, exactly proportional to weight
    cumulative = "cumulative"


def weight_of(item: WardrobeItem, weights: Mapping) -> int:
    weight = weights.get(item.rarity)
    if weight is None:
        raise UnknownRarityError(item.rarity)
    return weight


def validate_rarities(items: Sequence[WardrobeItem], weights: Mapping) -> None:
    for item in items:
        weight_of(item, weights)


def build_cumulative_weights(pool: Sequence[WardrobeItem], weights: Mapping) -> List[int]:
    cumulative = []
    for i, item in enumerate(pool):
        previous = cumulative[i - 1] if i > 0 else 0
        cumulative.append(weight_of(item, weights) + previous)
    return cumulative


def draw_one(pool, weights, rng, mode: DrawMode = DrawMode.cumulative) -> WardrobeItem:
    """
    Returns a random item from the pool, accounting for item rarity.

    Legacy mode selects the first item whose own weight exceeds the roll and
    falls back to the first item when none does, so its distribution is
    skewed toward the front of the pool and toward heavy tiers.
    """
    if not pool:
        raise EmptyPoolError()

    cumulative = build_cumulative_weights(pool, weights)
    roll = rng.random() * cumulative[-1]

    if mode == DrawMode.cumulative:
        for index, bound in enumerate(cumulative):
            if bound > roll:
                return pool[index]
        return pool[-1]

    for index, item in enumerate(pool):
        if weight_of(item, weights) > roll:
            return pool[index]
    return pool[0]


def draw_probabilities(pool, weights, mode: DrawMode = DrawMode.cumulative) -> List[float]:
    """Exact selection probability of each pool index under the given mode."""
    if not pool:
        return []

    item_weights = [weight_of(item, weights) for item in pool]
    total = sum(item_weights)

    if mode == DrawMode.cumulative:
        return [w / total for w in item_weights]

    # index i wins for rolls in [max weight before i, own weight)
    probabilities = []
    prefix_max = 0
    for w in item_weights:
        probabilities.append(max(0, w - prefix_max) / total)
        prefix_max = max(prefix_max, w)

    # rolls at or above the heaviest single weight fall back to index 0
    probabilities[0] += (total - prefix_max) / total
    return probabilities


def simulate_drops(pool, weights, rng, simulations: int, mode: DrawMode = DrawMode.cumulative):
    results = []

    for _ in range(simulations):
        results.append(draw_one(pool, weights, rng, mode))

    return results
