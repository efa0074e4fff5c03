import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from gacha_api.drop_engine import DrawMode, draw_one, validate_rarities
from gacha_api.errors import DuplicateItemError, EmptyPoolError, InsufficientFundsError
from gacha_api.import_rules import DEFAULT_RARITY_MAPPING
from gacha_api.models.gacha_models import GachaModel, PullResult, Rarity, RarityMapping, WardrobeItem
from gacha_api.notifier import Notifier, ObserverList
from gacha_api.requesters import Requester
from gacha_api.rng import get_rng

logger = logging.getLogger(__name__)


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _check_pull_cost(pull_cost: int) -> int:
    if pull_cost <= 0:
        raise ValueError("pull cost must be positive")
    return pull_cost


def _check_refund_percent(refund_percent: float) -> float:
    if not 0.0 <= refund_percent <= 1.0:
        raise ValueError("refund percent must be between 0 and 1")
    return refund_percent


def _check_unique_ids(items) -> None:
    seen = set()
    for item in items:
        if item.id in seen:
            raise DuplicateItemError(item.id)
        seen.add(item.id)


def _check_rarity_mapping(mapping) -> RarityMapping:
    checked = {}
    for rarity, weight in mapping.items():
        if int(weight) != weight or weight < 1:
            raise ValueError(f"weight for '{rarity}' must be a positive integer")
        checked[Rarity(rarity)] = int(weight)
    return checked


class GachaPicker:
    """
    A randomized gacha pull system for handing out wardrobe items.

    The picker owns the item pool and the pull economics. Each pull draws one
    item weighted by rarity, charges the requester, refunds part of the cost
    for a duplicate (or adds the item otherwise) and publishes the resulting
    PullResult to its notifier.

    The picker does not lock. Callers must run at most one pull per requester
    at a time; pool and pricing setters are admin-time reconfiguration.
    """

    def __init__(
        self,
        item_pool: Iterable[WardrobeItem],
        pull_cost: int,
        refund_percent: float,
        rarity_mapping: Optional[RarityMapping] = None,
        *,
        picker_id: str = "gacha",
        notifier: Optional[Notifier] = None,
        rng=None,
        draw_mode: DrawMode = DrawMode.cumulative,
        allow_negative_currency: bool = True,
    ) -> None:
        self._id = picker_id
        self._pull_cost = _check_pull_cost(pull_cost)
        self._refund_percent = _check_refund_percent(refund_percent)
        self._rarity_mapping = _check_rarity_mapping(
            rarity_mapping if rarity_mapping is not None else DEFAULT_RARITY_MAPPING
        )
        self._item_pool: List[WardrobeItem] = []
        for item in item_pool:
            self._append(item)

        self._notifier = notifier if notifier is not None else ObserverList()
        self._rng = rng if rng is not None else get_rng()
        self.draw_mode = DrawMode(draw_mode)
        self.allow_negative_currency = allow_negative_currency
        # subscribers receive a GachaModel whenever the configuration changes
        self.updates = ObserverList()

    @property
    def id(self) -> str:
        return self._id

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    @property
    def item_pool(self) -> List[WardrobeItem]:
        return list(self._item_pool)

    @item_pool.setter
    def item_pool(self, new_pool: Iterable[WardrobeItem]) -> None:
        new_pool = list(new_pool)
        validate_rarities(new_pool, self._rarity_mapping)
        _check_unique_ids(new_pool)
        self._item_pool = new_pool
        self._config_changed("item pool replaced (%d items)" % len(new_pool))

    @property
    def pull_cost(self) -> int:
        return self._pull_cost

    @pull_cost.setter
    def pull_cost(self, new_cost: int) -> None:
        self._pull_cost = _check_pull_cost(new_cost)
        self._config_changed(f"pull cost set to {new_cost}")

    @property
    def refund_percent(self) -> float:
        return self._refund_percent

    @refund_percent.setter
    def refund_percent(self, new_refund: float) -> None:
        self._refund_percent = _check_refund_percent(new_refund)
        self._config_changed(f"refund percent set to {new_refund}")

    @property
    def rarity_mapping(self) -> RarityMapping:
        return dict(self._rarity_mapping)

    @rarity_mapping.setter
    def rarity_mapping(self, new_mapping) -> None:
        checked = _check_rarity_mapping(new_mapping)
        validate_rarities(self._item_pool, checked)
        self._rarity_mapping = checked
        self._config_changed("rarity mapping replaced")

    def _append(self, item: WardrobeItem) -> None:
        validate_rarities([item], self._rarity_mapping)
        if any(existing.id == item.id for existing in self._item_pool):
            raise DuplicateItemError(item.id)
        self._item_pool.append(item)

    def add_item(self, item: WardrobeItem) -> None:
        """
        Adds a new WardrobeItem to this picker.

        Raises UnknownRarityError if the item's rarity has no weight, and
        DuplicateItemError if the id is already pooled. The pool is unchanged
        on failure.
        """
        self._append(item)
        self._config_changed(f"added item {item.id}")

    def refund_amount(self) -> int:
        return round_half_up(Decimal(self._pull_cost) * Decimal(str(self._refund_percent)))

    def draw(self) -> WardrobeItem:
        return draw_one(self._item_pool, self._rarity_mapping, self._rng, self.draw_mode)

    def pull(self, requester: Requester) -> PullResult:
        """
        Draws one item for the requester and settles the cost.

        The cost is debited unconditionally unless ``allow_negative_currency``
        is off, in which case a requester who cannot cover it gets
        InsufficientFundsError and nothing changes. A duplicate refunds
        ``round_half_up(pull_cost * refund_percent)``; a new item is added
        to the requester's inventory.

        Raises EmptyPoolError, without touching the requester, if the pool is empty.
        """
        if not self._item_pool:
            raise EmptyPoolError()

        wardrobe = requester.wardrobe
        if not self.allow_negative_currency and wardrobe.currency < self._pull_cost:
            raise InsufficientFundsError(wardrobe.currency, self._pull_cost)

        pulled_item = self.draw()
        currency_before = wardrobe.currency
        wardrobe.currency -= self._pull_cost

        refund = 0
        is_duplicate = not wardrobe.add_wardrobe_item(pulled_item)
        if is_duplicate:
            refund = self.refund_amount()
            wardrobe.currency += refund

        result = PullResult(
            requester_id=requester.id,
            item=pulled_item,
            is_duplicate=is_duplicate,
            refund=refund,
            wardrobe=wardrobe.to_wardrobe_model(),
        )
        logger.debug(
            "Pull by %s: item=%s duplicate=%s currency %s -> %s",
            requester.id, pulled_item.id, is_duplicate, currency_before, wardrobe.currency,
        )

        self._publish(result)
        return result

    def _publish(self, result: PullResult) -> None:
        # the mutation is already applied; a failing sink must not undo it
        try:
            self._notifier.publish(result)
        except Exception:
            logger.exception("Failed to publish pull result for %s", result.requester_id)

    def _config_changed(self, reason: str) -> None:
        logger.info("Gacha %s: %s", self._id, reason)
        self.updates.publish(self.to_gacha_model())

    def to_gacha_model(self) -> GachaModel:
        return GachaModel(
            id=self._id,
            item_pool=list(self._item_pool),
            pull_cost=self._pull_cost,
            refund_percent=self._refund_percent,
            rarity_mapping=dict(self._rarity_mapping),
        )

    def apply_model(self, model: GachaModel) -> None:
        """Replaces pool and economics from a transfer record, all or nothing."""
        mapping = _check_rarity_mapping(model.rarity_mapping)
        validate_rarities(model.item_pool, mapping)
        _check_unique_ids(model.item_pool)
        pull_cost = _check_pull_cost(model.pull_cost)
        refund_percent = _check_refund_percent(model.refund_percent)

        self._id = model.id
        self._rarity_mapping = mapping
        self._item_pool = list(model.item_pool)
        self._pull_cost = pull_cost
        self._refund_percent = refund_percent
        self._config_changed(f"configuration applied ({len(model.item_pool)} items)")

    @classmethod
    def from_gacha_model(cls, model: GachaModel, **kwargs) -> "GachaPicker":
        return cls(
            model.item_pool,
            model.pull_cost,
            model.refund_percent,
            model.rarity_mapping,
            picker_id=model.id,
            **kwargs,
        )
