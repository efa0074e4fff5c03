import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Protocol

from gacha_api.models.gacha_models import WardrobeItem, WardrobeModel
from gacha_api.notifier import ObserverList

logger = logging.getLogger(__name__)


class Wardrobe:
    """Mutable economy state of one requester: coin balance plus owned items."""

    def __init__(
        self,
        currency: int = 0,
        inventory: Optional[List[WardrobeItem]] = None,
        current_skin: Optional[str] = None,
        current_outfit: Optional[str] = None,
    ) -> None:
        self.currency = currency
        self.inventory: List[WardrobeItem] = list(inventory or [])
        self.current_skin = current_skin
        self.current_outfit = current_outfit

    def has_item(self, item_id: str) -> bool:
        # membership is by identifier, never by object identity
        return any(owned.id == item_id for owned in self.inventory)

    def add_wardrobe_item(self, item: WardrobeItem) -> bool:
        """Adds the item unless one with the same id is owned. Returns whether it was added."""
        if self.has_item(item.id):
            return False
        self.inventory.append(item)
        return True

    def to_wardrobe_model(self) -> WardrobeModel:
        return WardrobeModel(
            currency=self.currency,
            inventory=list(self.inventory),
            current_skin=self.current_skin,
            current_outfit=self.current_outfit,
        )


class Requester(Protocol):
    id: str
    wardrobe: Wardrobe


class Player:
    def __init__(self, player_id: str, wardrobe: Optional[Wardrobe] = None) -> None:
        self.id = player_id
        self.wardrobe = wardrobe if wardrobe is not None else Wardrobe()
        # this requester's own UI hooks; they only see this requester's pulls
        self.observers = ObserverList()

    def __repr__(self) -> str:
        return f"Player(id={self.id!r}, currency={self.wardrobe.currency})"


class RequesterRegistry:
    """
    In-memory requesters keyed by id, with one lock per requester.

    The picker does no locking of its own; callers hold ``locked(id)`` around
    a pull so at most one pull per requester is in flight.

    As a notification sink, ``publish`` routes each pull result to the
    observers of the requester it belongs to.
    """

    def __init__(self) -> None:
        self._requesters: Dict[str, Player] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def register(self, player_id: str, currency: int = 0) -> Player:
        with self._guard:
            if player_id in self._requesters:
                raise KeyError(f"Requester '{player_id}' already exists")
            player = Player(player_id, Wardrobe(currency=currency))
            self._requesters[player_id] = player
            self._locks[player_id] = threading.Lock()
        logger.info("Registered requester %s with %s coins", player_id, currency)
        return player

    def get(self, player_id: str) -> Player:
        with self._guard:
            player = self._requesters.get(player_id)
        if player is None:
            raise KeyError(f"Unknown requester '{player_id}'")
        return player

    def __contains__(self, player_id: str) -> bool:
        return player_id in self._requesters

    def __len__(self) -> int:
        return len(self._requesters)

    @contextmanager
    def locked(self, player_id: str) -> Iterator[Player]:
        with self._guard:
            player = self._requesters.get(player_id)
            lock = self._locks.get(player_id)
        if player is None or lock is None:
            raise KeyError(f"Unknown requester '{player_id}'")
        with lock:
            yield player

    def publish(self, snapshot) -> None:
        with self._guard:
            player = self._requesters.get(getattr(snapshot, "requester_id", None))
        if player is None:
            logger.debug("No registered requester for %r; skipping local observers", snapshot)
            return
        player.observers.publish(snapshot)

    def clear(self) -> None:
        with self._guard:
            self._requesters.clear()
            self._locks.clear()
