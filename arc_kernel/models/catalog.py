"""Venture catalog models — static, read-only game data."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class VentureCategory(str, Enum):
    MINING = "mining"
    BOTANY = "botany"
    FISHING = "fishing"
    COMBAT = "combat"       # Every non-gathering venture

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES[self]

    @property
    def is_gathering(self) -> bool:
        return self != VentureCategory.COMBAT


_SHORT_NAMES = {
    VentureCategory.MINING: "MIN",
    VentureCategory.BOTANY: "BTN",
    VentureCategory.FISHING: "FSH",
    VentureCategory.COMBAT: "DoWM",
}


class RewardTier(BaseModel):
    """Quantity produced once the worker meets the tier's stat thresholds."""

    quantity: int = Field(ge=0)
    item_level_combat: int = Field(ge=0, default=0)
    perception_gatherer: int = Field(ge=0, default=0)
    perception_fisher: int = Field(ge=0, default=0)


class VentureDefinition(BaseModel):
    """A task a worker can be sent on, producing one item."""

    venture_id: int
    item_id: int
    name: str
    level: int = Field(ge=0, default=1)
    category: VentureCategory
    required_gathering: int = Field(ge=0, default=0)
    item_level_combat: int = Field(ge=0, default=0)
    rewards: List[RewardTier]

    @property
    def label(self) -> str:
        return f"{self.name} ({self.category.short_name})"
