from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from .conditions import COUNTER_KINDS, CounterKind
from .types import AvatarCard, CardDatabase


class Zone(str, Enum):
    DECK = "deck"
    HAND = "hand"
    FIELD = "field"
    LIFE = "life"
    ENERGY = "energy"
    GRAVEYARD = "graveyard"


def _empty_counters() -> dict[CounterKind, int]:
    return {k: 0 for k in COUNTER_KINDS}


@dataclass
class AvatarInstance:
    card_id: str
    tapped: bool = False
    damage: int = 0
    counters: dict[CounterKind, int] = field(default_factory=_empty_counters)
    attached: list[str] = field(default_factory=list)
    # Cards this avatar evolved from, bottom first.
    evolved_from: list[str] = field(default_factory=list)
    entered_turn: int = 0

    def counter(self, kind: CounterKind) -> int:
        return self.counters.get(kind, 0)

    @property
    def bleed(self) -> int:
        return self.counter("bleed")

    @property
    def shield(self) -> int:
        return self.counter("shield")

    def card_ids(self) -> list[str]:
        """Every card identity this instance holds, including attachments."""
        return [self.card_id, *self.evolved_from, *self.attached]


@dataclass
class PlayerState:
    deck: list[str]
    hand: list[str] = field(default_factory=list)
    active: AvatarInstance | None = None
    reserve: list[AvatarInstance] = field(default_factory=list)
    field_cards: list[str] = field(default_factory=list)
    life: list[str] = field(default_factory=list)
    energy: list[str] = field(default_factory=list)
    graveyard: list[str] = field(default_factory=list)
    # Superseded by life cards as the loss condition; kept for display.
    health: int = 20
    avatars_to_energy: int = 0
    turns_taken: int = 0
    # The first avatar a player fields as active must be level 1.
    starter_placed: bool = False

    def zone(self, zone: Zone) -> list[str]:
        if zone is Zone.DECK:
            return self.deck
        if zone is Zone.HAND:
            return self.hand
        if zone is Zone.FIELD:
            return self.field_cards
        if zone is Zone.LIFE:
            return self.life
        if zone is Zone.ENERGY:
            return self.energy
        return self.graveyard

    def avatars(self) -> list[AvatarInstance]:
        out = [self.active] if self.active is not None else []
        out.extend(self.reserve)
        return out

    def all_card_ids(self) -> list[str]:
        ids = [*self.deck, *self.hand, *self.field_cards, *self.life, *self.energy, *self.graveyard]
        for inst in self.avatars():
            ids.extend(inst.card_ids())
        return ids


def move_card(ps: PlayerState, from_zone: Zone, to_zone: Zone, index: int = 0) -> str:
    """Move the card at `index` of one zone to the end of another.

    Index 0 is the top of the deck and life stacks.
    """
    src = ps.zone(from_zone)
    if index < 0 or index >= len(src):
        raise IndexError(f"No card at {from_zone.value}[{index}]")
    card_id = src.pop(index)
    ps.zone(to_zone).append(card_id)
    return card_id


def tap_avatar(inst: AvatarInstance) -> None:
    inst.tapped = True


def untap_avatar(inst: AvatarInstance) -> None:
    inst.tapped = False


def apply_counters(inst: AvatarInstance, delta: Mapping[str, int]) -> None:
    """Add (or remove) counters. `damage` is accepted as a key; nothing drops below zero."""
    for key, amount in delta.items():
        if key == "damage":
            inst.damage = max(0, inst.damage + amount)
            continue
        if key not in COUNTER_KINDS:
            raise KeyError(f"Unknown counter: {key}")
        inst.counters[key] = max(0, inst.counters.get(key, 0) + amount)  # type: ignore[index]


def effective_health(inst: AvatarInstance, cards: CardDatabase) -> int:
    card = cards.get(inst.card_id)
    assert isinstance(card, AvatarCard)
    return card.health


def is_defeated(inst: AvatarInstance, cards: CardDatabase) -> bool:
    return inst.damage >= effective_health(inst, cards)


def pay_energy(ps: PlayerState, amount: int) -> list[str]:
    """Spend `amount` energy, oldest first, into the graveyard.

    Callers must check availability beforehand; payment is all or nothing.
    """
    if amount > len(ps.energy):
        raise ValueError("Not enough energy to pay")
    paid: list[str] = []
    for _ in range(amount):
        paid.append(move_card(ps, Zone.ENERGY, Zone.GRAVEYARD, 0))
    return paid


def absorb_damage(inst: AvatarInstance, amount: int) -> tuple[int, int]:
    """Apply `amount` damage after shield counters. Returns (dealt, blocked)."""
    if amount <= 0:
        return 0, 0
    blocked = min(inst.shield, amount)
    dealt = amount - blocked
    apply_counters(inst, {"shield": -blocked, "damage": dealt})
    return dealt, blocked
