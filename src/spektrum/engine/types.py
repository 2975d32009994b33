from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .conditions import Condition, SkillEffect

Element = Literal["fire", "water", "ground", "air", "neutral"]
Subtype = Literal["kobar", "borah", "kuhaka", "kujana", "kuku"]
ActionCategory = Literal["spell", "quick-spell", "ritual-armor", "field", "equipment", "item"]
Rarity = Literal["common", "uncommon", "rare", "epic", "legendary"]

ADD_ENERGY = "add_energy"


@dataclass(frozen=True)
class Skill:
    name: str
    energy_cost: tuple[Element, ...]
    damage: int
    effect: str | None = None
    conditions: tuple[Condition, ...] = ()
    effects: tuple[SkillEffect, ...] = ()

    @property
    def cost(self) -> int:
        return len(self.energy_cost)


@dataclass(frozen=True)
class AvatarCard:
    id: str
    name: str
    element: Element
    level: Literal[1, 2]
    subtype: Subtype
    health: int
    skill1: Skill
    skill2: Skill | None = None
    base_type: Subtype | None = None
    rarity: Rarity = "common"
    category: Literal["avatar"] = "avatar"

    def skill(self, index: int) -> Skill | None:
        if index == 1:
            return self.skill1
        if index == 2:
            return self.skill2
        return None

    def skills(self) -> tuple[Skill, ...]:
        return tuple(s for s in (self.skill1, self.skill2) if s is not None)

    @property
    def cost(self) -> int:
        # Avatars are placed for free.
        return 0


@dataclass(frozen=True)
class ActionCard:
    id: str
    name: str
    category: ActionCategory
    element: Element
    energy_cost: tuple[Element, ...]
    effect: str
    conditions: tuple[Condition, ...] = ()
    rarity: Rarity = "common"

    @property
    def cost(self) -> int:
        return len(self.energy_cost)

    @property
    def adds_energy(self) -> bool:
        return self.category == "item" and self.effect.strip().lower() == ADD_ENERGY


Card = AvatarCard | ActionCard


@dataclass(frozen=True)
class CardDatabase:
    """Immutable card catalog consumed by the engine."""

    cards: dict[str, Card]

    def get(self, card_id: str) -> Card:
        return self.cards[card_id]

    def avatar(self, card_id: str) -> AvatarCard:
        card = self.cards[card_id]
        if not isinstance(card, AvatarCard):
            raise KeyError(f"{card_id} is not an avatar card")
        return card
