"""Conditional damage rules and skill side effects.

Card text is parsed once, when the catalog is loaded, into the small closed
set of variants below. The damage evaluator and the resolver only ever see
these variants and never look at the text again.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

CounterKind = Literal["bleed", "burn", "freeze", "poison", "stun", "shield"]
COUNTER_KINDS: tuple[CounterKind, ...] = ("bleed", "burn", "freeze", "poison", "stun", "shield")

BoostKind = Literal["type", "subtype"]
EffectTarget = Literal["opponent", "self"]


@dataclass(frozen=True)
class DiscardOccurred:
    type: Literal["discard_occurred"]
    damage: int


@dataclass(frozen=True)
class OpponentHasCounter:
    type: Literal["opponent_has_counter"]
    counter: CounterKind
    damage: int


@dataclass(frozen=True)
class OpponentHasElement:
    type: Literal["opponent_has_element"]
    element: str
    damage: int


@dataclass(frozen=True)
class OpponentHasSubtype:
    type: Literal["opponent_has_subtype"]
    subtype: str
    damage: int


@dataclass(frozen=True)
class SelfHasEquipment:
    type: Literal["self_has_equipment"]
    damage: int


@dataclass(frozen=True)
class SelfHasCounter:
    type: Literal["self_has_counter"]
    counter: CounterKind
    bonus: int


@dataclass(frozen=True)
class PassiveTypeBoost:
    type: Literal["passive_type_boost"]
    kind: BoostKind
    value: str
    bonus: int


BecomeCondition = (
    DiscardOccurred | OpponentHasCounter | OpponentHasElement | OpponentHasSubtype | SelfHasEquipment
)
Condition = BecomeCondition | SelfHasCounter | PassiveTypeBoost

# "Become" rules are tried in this order; the first satisfied one wins.
BECOME_ORDER: tuple[type, ...] = (
    DiscardOccurred,
    OpponentHasCounter,
    OpponentHasElement,
    OpponentHasSubtype,
    SelfHasEquipment,
)


@dataclass(frozen=True)
class ApplyCounter:
    type: Literal["apply_counter"]
    counter: CounterKind
    amount: int
    target: EffectTarget


@dataclass(frozen=True)
class HealSelf:
    type: Literal["heal_self"]
    amount: int


@dataclass(frozen=True)
class DrawCards:
    type: Literal["draw_cards"]
    count: int


SkillEffect = ApplyCounter | HealSelf | DrawCards


_DISCARD = re.compile(r"if\b.*\bplayer\b.*\bdiscards?\b.*\bcard\b.*\bdamage\b.*\bbecomes?\D*(\d+)")
_OPP_COUNTER = re.compile(
    r"if\b.*\bopponent\b.*\bavatar\b.*\bhas\s+-?(\w+) counters?-?.*\bdamage\b.*\bbecomes?\D*(\d+)"
)
_OPP_TYPE = re.compile(r"if\b.*\bopponent\b.*\bavatar\b.*\bhas\s+(\w+)\s+type\b.*\bdamage\b.*\bbecomes?\D*(\d+)")
_OPP_SUBTYPE = re.compile(
    r"if\b.*\bopponent\b.*\bavatar\b.*\bhas\s+(\w+)\s+subtype\b.*\bdamage\b.*\bbecomes?\D*(\d+)"
)
_EQUIPMENT = re.compile(r"if\b.*\bcard\b.*\bhas\b.*\bequipment\b.*\battached\b.*\bdamage\b.*\bbecomes?\D*(\d+)")
_SELF_COUNTER = re.compile(r"if\b.*\bthis card\b.*\bhas\s+-?(\w+) counters?-?.*\bdamage\b.*\bgets?\D*\+(\d+)")
_PASSIVE = re.compile(
    r"if\b.*\byour active avatar\b.*\bhas\s+(\w+)\s+(type|subtype)\b.*\battack damage\b.*\bgets?\D*\+(\d+)"
)

_APPLY_TO_OPPONENT = (
    re.compile(r"target opponent(?: active avatar)? gets? (\d+) (\w+) counters?"),
    re.compile(r"apply (\d+) (\w+) counters? to (?:the )?opponent"),
)
_APPLY_TO_SELF = re.compile(r"apply (\d+) (\w+) counters? to this card")
_HEAL = re.compile(r"\bheals? (\d+) damage")
_DRAW = re.compile(r"\bdraw (\d+) cards?")


def _counter(word: str) -> CounterKind | None:
    w = word.lower()
    for kind in COUNTER_KINDS:
        if w == kind:
            return kind
    return None


def parse_conditions(text: str | None) -> tuple[Condition, ...]:
    """Extract conditional damage rules from a piece of card text.

    Text that matches none of the known shapes yields no conditions.
    """
    if not text:
        return ()
    t = text.lower()

    # Passive boosts talk about "your active avatar"; keep them from being
    # read as an opponent rule as well.
    m = _PASSIVE.search(t)
    if m:
        kind: BoostKind = "type" if m.group(2) == "type" else "subtype"
        return (PassiveTypeBoost(type="passive_type_boost", kind=kind, value=m.group(1), bonus=int(m.group(3))),)

    out: list[Condition] = []
    m = _DISCARD.search(t)
    if m:
        out.append(DiscardOccurred(type="discard_occurred", damage=int(m.group(1))))

    m = _OPP_COUNTER.search(t)
    if m:
        counter = _counter(m.group(1))
        if counter is not None:
            out.append(OpponentHasCounter(type="opponent_has_counter", counter=counter, damage=int(m.group(2))))

    m = _OPP_SUBTYPE.search(t)
    if m:
        out.append(OpponentHasSubtype(type="opponent_has_subtype", subtype=m.group(1), damage=int(m.group(2))))
    else:
        m = _OPP_TYPE.search(t)
        if m:
            out.append(OpponentHasElement(type="opponent_has_element", element=m.group(1), damage=int(m.group(2))))

    m = _EQUIPMENT.search(t)
    if m:
        out.append(SelfHasEquipment(type="self_has_equipment", damage=int(m.group(1))))

    m = _SELF_COUNTER.search(t)
    if m:
        counter = _counter(m.group(1))
        if counter is not None:
            out.append(SelfHasCounter(type="self_has_counter", counter=counter, bonus=int(m.group(2))))

    return tuple(out)


def parse_skill_effects(text: str | None) -> tuple[SkillEffect, ...]:
    """Extract the side effects a skill applies after its damage."""
    if not text:
        return ()
    t = text.lower()
    out: list[SkillEffect] = []

    for pattern in _APPLY_TO_OPPONENT:
        m = pattern.search(t)
        if m:
            counter = _counter(m.group(2))
            if counter is not None:
                out.append(ApplyCounter(type="apply_counter", counter=counter, amount=int(m.group(1)), target="opponent"))
            break

    m = _APPLY_TO_SELF.search(t)
    if m:
        counter = _counter(m.group(2))
        if counter is not None:
            out.append(ApplyCounter(type="apply_counter", counter=counter, amount=int(m.group(1)), target="self"))

    m = _HEAL.search(t)
    if m:
        out.append(HealSelf(type="heal_self", amount=int(m.group(1))))

    m = _DRAW.search(t)
    if m:
        out.append(DrawCards(type="draw_cards", count=int(m.group(1))))

    return tuple(out)
