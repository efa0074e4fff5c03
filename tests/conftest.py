import pytest

from gacha_api.models.gacha_models import Rarity, WardrobeItem
from gacha_api.requesters import Player, Wardrobe
from gacha_api.services.gacha_service import GachaPicker


class FixedRng:
    """Returns the given values from random(), cycling when exhausted."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


@pytest.fixture
def item_a():
    return WardrobeItem(id="A", rarity=Rarity.common, name="Overalls")


@pytest.fixture
def item_b():
    return WardrobeItem(id="B", rarity=Rarity.rare, name="Pumpkin Head")


@pytest.fixture
def weights():
    return {Rarity.common: 10, Rarity.rare: 5}


@pytest.fixture
def player():
    return Player("p1", Wardrobe(currency=5000))


@pytest.fixture
def make_picker(item_a, item_b, weights):
    def _make(pool=None, rng=None, **kwargs):
        return GachaPicker(
            [item_a, item_b] if pool is None else pool,
            kwargs.pop("pull_cost", 1000),
            kwargs.pop("refund_percent", 0.5),
            kwargs.pop("rarity_mapping", weights),
            rng=rng if rng is not None else FixedRng(0.0),
            **kwargs,
        )
    return _make
