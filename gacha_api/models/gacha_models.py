from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class Rarity(str, Enum):
    common = "common"
    rare = "rare"
    ultraRare = "ultraRare"


# Weight per tier. The higher the number, the more likely an item of that tier is pulled.
RarityMapping = Dict[Rarity, int]


class WardrobeItem(BaseModel):
    model_config = {"frozen": True}

    id: str = Field(..., min_length=1, description="Identifier, unique within a pool")
    rarity: Rarity = Field(..., description="Rarity tier controlling draw weight")
    name: str = Field("", description="Display name")


class WardrobeModel(BaseModel):
    model_config = {"populate_by_name": True}

    currency: int = Field(..., description="Coin balance; may be negative under the lenient funds policy")
    inventory: List[WardrobeItem] = Field(default_factory=list)
    current_skin: Optional[str] = Field(None, alias="currentSkin")
    current_outfit: Optional[str] = Field(None, alias="currentOutfit")


class GachaModel(BaseModel):
    """Plain record of a picker's full state, used for persistence and transfer."""

    model_config = {"populate_by_name": True}

    id: str = Field(..., min_length=1)
    item_pool: List[WardrobeItem] = Field(default_factory=list, alias="itemPool")
    pull_cost: int = Field(..., gt=0, alias="pullCost")
    refund_percent: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        alias="refundPercent",
        description="Fraction of the pull cost refunded on a duplicate (0.1 = 10%)",
    )
    rarity_mapping: RarityMapping = Field(..., alias="rarityMapping")

    @field_validator("rarity_mapping")
    @classmethod
    def positive_weights(cls, v):
        for rarity, weight in v.items():
            if weight < 1:
                raise ValueError(f"weight for '{rarity.value}' must be a positive integer")
        return v


class PullResult(BaseModel):
    model_config = {"populate_by_name": True}

    requester_id: str = Field(..., alias="requesterId")
    item: WardrobeItem
    is_duplicate: bool = Field(..., alias="isDuplicate")
    refund: int = Field(0, description="Coins credited back for a duplicate")
    wardrobe: WardrobeModel
