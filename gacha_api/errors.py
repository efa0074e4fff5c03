class GachaError(Exception):
    """Base class for failures raised by the gacha picker."""


class EmptyPoolError(GachaError):
    def __init__(self, message: str = "No items in the pool."):
        super().__init__(message)


class UnknownRarityError(GachaError):
    def __init__(self, rarity):
        self.rarity = rarity
        name = getattr(rarity, "value", rarity)
        super().__init__(f"Rarity '{name}' has no entry in the rarity mapping")


class DuplicateItemError(GachaError):
    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item '{item_id}' is already in the pool")


class InsufficientFundsError(GachaError):
    def __init__(self, currency: int, cost: int):
        self.currency = currency
        self.cost = cost
        super().__init__(f"Insufficient currency: have {currency}, need {cost}")
