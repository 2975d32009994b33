from __future__ import annotations

from spektrum.engine.conditions import (
    ApplyCounter,
    DiscardOccurred,
    DrawCards,
    HealSelf,
    OpponentHasCounter,
    OpponentHasElement,
    OpponentHasSubtype,
    PassiveTypeBoost,
    SelfHasCounter,
    SelfHasEquipment,
    parse_conditions,
    parse_skill_effects,
)


def test_discard_rule() -> None:
    conds = parse_conditions("If the player discard a card, then this attack damage become 6")
    assert conds == (DiscardOccurred(type="discard_occurred", damage=6),)


def test_opponent_counter_rule_with_dashes() -> None:
    conds = parse_conditions("If the opponent active avatar has -bleed counter- this attack damage become 8")
    assert conds == (OpponentHasCounter(type="opponent_has_counter", counter="bleed", damage=8),)


def test_opponent_type_and_subtype_rules() -> None:
    by_type = parse_conditions("If the opponent active avatar has fire type this attack damage become 9")
    assert by_type == (OpponentHasElement(type="opponent_has_element", element="fire", damage=9),)

    by_subtype = parse_conditions("If the opponent active avatar has kobar subtype this attack damage become 12")
    assert by_subtype == (OpponentHasSubtype(type="opponent_has_subtype", subtype="kobar", damage=12),)


def test_equipment_rule() -> None:
    conds = parse_conditions("If this card has equipment card attached, this attack damage become 7")
    assert conds == (SelfHasEquipment(type="self_has_equipment", damage=7),)


def test_self_counter_rule_is_additive() -> None:
    conds = parse_conditions("If this card has bleed counter, then this attack damage get +4")
    assert conds == (SelfHasCounter(type="self_has_counter", counter="bleed", bonus=4),)


def test_passive_rule_is_not_read_as_opponent_rule() -> None:
    conds = parse_conditions("If your active avatar has borah subtype that cards attack damage get +3")
    assert conds == (PassiveTypeBoost(type="passive_type_boost", kind="subtype", value="borah", bonus=3),)

    conds = parse_conditions("If your active avatar has fire type, that cards attack damage get +1")
    assert conds == (PassiveTypeBoost(type="passive_type_boost", kind="type", value="fire", bonus=1),)


def test_unrecognised_text_yields_nothing() -> None:
    assert parse_conditions("Basic attack damage.") == ()
    assert parse_conditions("") == ()
    assert parse_conditions(None) == ()
    # Unknown counter names are dropped
    assert parse_conditions("If the opponent active avatar has glitter counter this attack damage become 8") == ()


def test_skill_side_effects() -> None:
    assert parse_skill_effects("Target opponent gets 1 Bleed Counter.") == (
        ApplyCounter(type="apply_counter", counter="bleed", amount=1, target="opponent"),
    )
    assert parse_skill_effects("Target opponent Active Avatar get 2 Bleed Counters.") == (
        ApplyCounter(type="apply_counter", counter="bleed", amount=2, target="opponent"),
    )
    assert parse_skill_effects("Apply 1 poison counter to opponent active avatar") == (
        ApplyCounter(type="apply_counter", counter="poison", amount=1, target="opponent"),
    )
    assert parse_skill_effects("Apply 2 bleed counters to this card, then draw 1 card") == (
        ApplyCounter(type="apply_counter", counter="bleed", amount=2, target="self"),
        DrawCards(type="draw_cards", count=1),
    )
    assert parse_skill_effects("Heal 3 damage from this avatar.") == (HealSelf(type="heal_self", amount=3),)
    assert parse_skill_effects("Basic attack damage.") == ()
