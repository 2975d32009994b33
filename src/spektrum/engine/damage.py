"""Final damage for a skill, from its conditional rules and passive boosts.

Evaluation order:

1. "Become" rules, in the fixed order discard, opponent counter, opponent
   element, opponent subtype, attached equipment. The first satisfied rule
   replaces the base damage; later ones are ignored.
2. Self-counter rules add their bonus on top.
3. Passive boosts are collected from every avatar or field card the attacker's
   owner holds in hand, on the field, and from the active avatar itself.
   They stack.

The result is floored at zero. Nothing here mutates the match.
"""

from __future__ import annotations

from collections.abc import Iterable

from .actions import Side
from .conditions import (
    BECOME_ORDER,
    Condition,
    DiscardOccurred,
    OpponentHasCounter,
    OpponentHasElement,
    OpponentHasSubtype,
    PassiveTypeBoost,
    SelfHasCounter,
    SelfHasEquipment,
)
from .state import MatchState
from .types import AvatarCard, Card, Skill
from .zones import AvatarInstance


def _become_satisfied(cond: Condition, state: MatchState, side: Side, attacker: AvatarInstance) -> bool:
    owner = state.players[side]
    defender = state.players[state.opponent(side)].active
    defender_card = state.cards.get(defender.card_id) if defender is not None else None

    if isinstance(cond, DiscardOccurred):
        return len(owner.graveyard) > 0
    if isinstance(cond, OpponentHasCounter):
        return defender is not None and defender.counter(cond.counter) > 0
    if isinstance(cond, OpponentHasElement):
        return isinstance(defender_card, AvatarCard) and defender_card.element == cond.element
    if isinstance(cond, OpponentHasSubtype):
        return isinstance(defender_card, AvatarCard) and defender_card.subtype == cond.subtype
    if isinstance(cond, SelfHasEquipment):
        return len(attacker.attached) > 0
    return False


def _conditions_of(card: Card) -> Iterable[Condition]:
    if isinstance(card, AvatarCard):
        for skill in card.skills():
            yield from skill.conditions
    else:
        yield from card.conditions


def passive_bonus(state: MatchState, side: Side, attacker: AvatarInstance) -> int:
    owner = state.players[side]
    attacker_card = state.cards.get(attacker.card_id)
    if not isinstance(attacker_card, AvatarCard):
        return 0

    sources: list[str] = [*owner.hand, *owner.field_cards]
    if owner.active is not None:
        sources.append(owner.active.card_id)

    total = 0
    for card_id in sources:
        for cond in _conditions_of(state.cards.get(card_id)):
            if not isinstance(cond, PassiveTypeBoost):
                continue
            if cond.kind == "type" and attacker_card.element == cond.value:
                total += cond.bonus
            elif cond.kind == "subtype" and attacker_card.subtype == cond.value:
                total += cond.bonus
    return total


def evaluate_damage(
    state: MatchState,
    side: Side,
    attacker: AvatarInstance,
    skill: Skill,
    base_damage: int | None = None,
) -> int:
    damage = skill.damage if base_damage is None else base_damage

    for rule_type in BECOME_ORDER:
        matched = False
        for cond in skill.conditions:
            if isinstance(cond, rule_type) and _become_satisfied(cond, state, side, attacker):
                damage = cond.damage  # type: ignore[union-attr]
                matched = True
                break
        if matched:
            break

    for cond in skill.conditions:
        if isinstance(cond, SelfHasCounter) and attacker.counter(cond.counter) > 0:
            damage += cond.bonus

    damage += passive_bonus(state, side, attacker)
    return max(0, damage)
