from __future__ import annotations

from .actions import (
    DiscardCardAction,
    EvolveAvatarAction,
    PlayCardAction,
    SetEnergyAction,
    Side,
    SwitchAvatarAction,
    Target,
    UseSkillAction,
)
from .conditions import ApplyCounter, DrawCards, HealSelf, SkillEffect
from .damage import evaluate_damage
from .errors import ErrorKind, MalformedActionError, RuleViolation
from .state import MatchState
from .types import ActionCard, AvatarCard, Card
from .victory import check_avatar_loss, check_draw_loss
from .zones import (
    AvatarInstance,
    PlayerState,
    Zone,
    absorb_damage,
    apply_counters,
    is_defeated,
    move_card,
    pay_energy,
    tap_avatar,
)


def _require(cond: bool, kind: ErrorKind, message: str) -> None:
    if not cond:
        raise RuleViolation(kind, message)


def _hand_card(state: MatchState, ps: PlayerState, hand_index: int) -> Card:
    if hand_index < 0 or hand_index >= len(ps.hand):
        raise MalformedActionError(f"Invalid hand index: {hand_index}")
    return state.cards.get(ps.hand[hand_index])


def _target_side(state: MatchState, side: Side, target: Target) -> Side:
    return side if target == "player-avatar" else state.opponent(side)


def draw_card(state: MatchState, side: Side) -> str | None:
    """Draw the top card of `side`'s deck.

    An empty deck is refilled with the top life card first. With neither deck
    nor life cards left the player loses and None is returned.
    """
    ps = state.players[side]
    if not ps.deck:
        if check_draw_loss(state, side):
            return None
        life_card = move_card(ps, Zone.LIFE, Zone.DECK, 0)
        state.emit({"type": "LIFE_CARD_TO_DECK", "player": side, "card_id": life_card, "life_cards": len(ps.life)})
    card_id = move_card(ps, Zone.DECK, Zone.HAND, 0)
    state.emit({"type": "CARD_DRAWN", "player": side, "card_id": card_id})
    return card_id


def defeat_active(state: MatchState, side: Side) -> None:
    ps = state.players[side]
    inst = ps.active
    if inst is None:
        return
    ps.active = None
    ps.graveyard.extend(inst.card_ids())
    state.emit({"type": "AVATAR_DEFEATED", "player": side, "card_id": inst.card_id})

    if ps.life:
        life_card = move_card(ps, Zone.LIFE, Zone.HAND, 0)
        state.emit({"type": "LIFE_CARD_LOST", "player": side, "card_id": life_card, "remaining": len(ps.life)})
    check_avatar_loss(state, side)


def damage_avatar(state: MatchState, side: Side, amount: int) -> int:
    """Deal damage to `side`'s active avatar, resolving defeat at once."""
    inst = state.players[side].active
    if inst is None or amount <= 0:
        return 0
    dealt, blocked = absorb_damage(inst, amount)
    state.emit(
        {
            "type": "DAMAGE_AVATAR",
            "player": side,
            "card_id": inst.card_id,
            "amount": amount,
            "dealt": dealt,
            "blocked": blocked,
        }
    )
    if is_defeated(inst, state.cards):
        defeat_active(state, side)
    return dealt


def heal_avatar(state: MatchState, side: Side, amount: int) -> int:
    inst = state.players[side].active
    if inst is None or amount <= 0:
        return 0
    healed = min(inst.damage, amount)
    apply_counters(inst, {"damage": -healed})
    if healed > 0:
        state.emit({"type": "HEAL_AVATAR", "player": side, "card_id": inst.card_id, "amount": healed})
    return healed


def _play_avatar(state: MatchState, side: Side, hand_index: int, card: AvatarCard) -> None:
    ps = state.players[side]
    if ps.active is None:
        _require(
            ps.starter_placed or card.level == 1,
            ErrorKind.INVALID_TARGET,
            "Your first active avatar must be a level 1 avatar.",
        )
        ps.hand.pop(hand_index)
        ps.active = AvatarInstance(card_id=card.id, entered_turn=state.turn)
        ps.starter_placed = True
        state.emit({"type": "AVATAR_PLACED", "player": side, "card_id": card.id, "slot": "active"})
        return
    _require(
        len(ps.reserve) < state.config.max_reserve_avatars,
        ErrorKind.ZONE_FULL,
        "You already have an active avatar and a full reserve.",
    )
    ps.hand.pop(hand_index)
    ps.reserve.append(AvatarInstance(card_id=card.id, entered_turn=state.turn))
    state.emit({"type": "AVATAR_PLACED", "player": side, "card_id": card.id, "slot": len(ps.reserve) - 1})


def _play_action_card(state: MatchState, side: Side, action: PlayCardAction, card: ActionCard) -> None:
    ps = state.players[side]
    cfg = state.config
    _require(card.cost <= len(ps.energy), ErrorKind.INSUFFICIENT_ENERGY, "Not enough energy.")

    if card.category == "field":
        pay_energy(ps, card.cost)
        move_card(ps, Zone.HAND, Zone.FIELD, action.hand_index)
        return

    if card.category in ("equipment", "ritual-armor"):
        _require(
            action.target == "player-avatar" and ps.active is not None,
            ErrorKind.INVALID_TARGET,
            "Attach this card to your active avatar.",
        )
        assert ps.active is not None
        pay_energy(ps, card.cost)
        ps.hand.pop(action.hand_index)
        ps.active.attached.append(card.id)
        state.emit({"type": "CARD_ATTACHED", "player": side, "card_id": card.id, "avatar": ps.active.card_id})
        if card.category == "ritual-armor":
            apply_counters(ps.active, {"shield": cfg.ritual_armor_shield})
            state.emit({"type": "SHIELD_ADDED", "player": side, "amount": cfg.ritual_armor_shield})
        return

    if card.category in ("spell", "quick-spell"):
        _require(action.target is not None, ErrorKind.INVALID_TARGET, "Select a target avatar.")
        assert action.target is not None
        target_side = _target_side(state, side, action.target)
        _require(
            state.players[target_side].active is not None,
            ErrorKind.INVALID_TARGET,
            "There is no avatar to target.",
        )
        pay_energy(ps, card.cost)
        move_card(ps, Zone.HAND, Zone.GRAVEYARD, action.hand_index)
        if action.target == "opponent-avatar":
            damage_avatar(state, target_side, cfg.spell_damage)
        else:
            heal_avatar(state, target_side, cfg.spell_heal)
        return

    # item
    pay_energy(ps, card.cost)
    if card.adds_energy:
        move_card(ps, Zone.HAND, Zone.ENERGY, action.hand_index)
        state.emit({"type": "ENERGY_ADDED", "player": side, "card_id": card.id})
    else:
        move_card(ps, Zone.HAND, Zone.GRAVEYARD, action.hand_index)


def play_card(state: MatchState, action: PlayCardAction) -> None:
    side = action.player
    ps = state.players[side]
    card = _hand_card(state, ps, action.hand_index)

    if isinstance(card, AvatarCard):
        _play_avatar(state, side, action.hand_index, card)
    else:
        _play_action_card(state, side, action, card)
    state.emit({"type": "CARD_PLAYED", "player": side, "card_id": card.id, "category": card.category})


def use_skill(state: MatchState, action: UseSkillAction) -> None:
    side = action.player
    ps = state.players[side]
    attacker = ps.active
    _require(attacker is not None, ErrorKind.SKILL_UNAVAILABLE, "No active avatar to use skills.")
    assert attacker is not None
    _require(not attacker.tapped, ErrorKind.ALREADY_TAPPED, "This avatar has already used a skill this turn.")
    _require(
        action.target == "opponent-avatar", ErrorKind.INVALID_TARGET, "Skills can only target the opponent's avatar."
    )

    card = state.cards.get(attacker.card_id)
    assert isinstance(card, AvatarCard)
    skill = card.skill(action.skill_index)
    _require(skill is not None, ErrorKind.SKILL_UNAVAILABLE, "This avatar doesn't have that skill.")
    assert skill is not None

    target_side = state.opponent(side)
    _require(state.players[target_side].active is not None, ErrorKind.INVALID_TARGET, "No target avatar to attack.")
    _require(skill.cost <= len(ps.energy), ErrorKind.INSUFFICIENT_ENERGY, "Not enough energy to use this skill.")

    # Evaluated before the cost lands in the graveyard.
    amount = evaluate_damage(state, side, attacker, skill)

    pay_energy(ps, skill.cost)
    tap_avatar(attacker)
    target = state.players[target_side].active
    state.emit(
        {
            "type": "SKILL_USED",
            "player": side,
            "card_id": attacker.card_id,
            "skill": skill.name,
            "base_damage": skill.damage,
            "damage": amount,
        }
    )
    damage_avatar(state, target_side, amount)
    _apply_skill_effects(state, side, target_side, attacker, target, skill.effects)


def _apply_skill_effects(
    state: MatchState,
    side: Side,
    target_side: Side,
    attacker: AvatarInstance,
    target: AvatarInstance | None,
    effects: tuple[SkillEffect, ...],
) -> None:
    for eff in effects:
        if state.winner is not None:
            return
        if isinstance(eff, ApplyCounter):
            inst = target if eff.target == "opponent" else attacker
            owner = target_side if eff.target == "opponent" else side
            if inst is None or state.players[owner].active is not inst:
                continue
            apply_counters(inst, {eff.counter: eff.amount})
            state.emit({"type": "COUNTER_ADDED", "player": owner, "counter": eff.counter, "amount": eff.amount})
        elif isinstance(eff, HealSelf):
            if state.players[side].active is attacker:
                heal_avatar(state, side, eff.amount)
        elif isinstance(eff, DrawCards):
            for _ in range(eff.count):
                if draw_card(state, side) is None:
                    return


def set_energy(state: MatchState, action: SetEnergyAction) -> None:
    ps = state.players[action.player]
    card = _hand_card(state, ps, action.hand_index)
    _require(isinstance(card, AvatarCard), ErrorKind.INVALID_TARGET, "Only avatar cards can be set as energy.")
    _require(
        ps.avatars_to_energy < state.config.avatars_to_energy_per_turn,
        ErrorKind.LIMIT_REACHED,
        "You can only add one avatar card to energy per turn.",
    )
    move_card(ps, Zone.HAND, Zone.ENERGY, action.hand_index)
    ps.avatars_to_energy += 1
    state.emit({"type": "ENERGY_ADDED", "player": action.player, "card_id": card.id})


def switch_avatar(state: MatchState, action: SwitchAvatarAction) -> None:
    ps = state.players[action.player]
    if action.reserve_index < 0 or action.reserve_index >= len(ps.reserve):
        raise MalformedActionError(f"Invalid reserve index: {action.reserve_index}")
    cost = state.config.switch_cost
    _require(cost <= len(ps.energy), ErrorKind.INSUFFICIENT_ENERGY, "Switching avatars costs 1 energy.")

    pay_energy(ps, cost)
    incoming = ps.reserve[action.reserve_index]
    outgoing = ps.active
    if outgoing is None:
        ps.reserve.pop(action.reserve_index)
    else:
        ps.reserve[action.reserve_index] = outgoing
    ps.active = incoming
    state.emit(
        {
            "type": "AVATAR_SWITCHED",
            "player": action.player,
            "active": incoming.card_id,
            "benched": outgoing.card_id if outgoing is not None else None,
        }
    )


def evolve_avatar(state: MatchState, action: EvolveAvatarAction) -> None:
    ps = state.players[action.player]
    card = _hand_card(state, ps, action.hand_index)
    _require(
        isinstance(card, AvatarCard) and card.level == 2,
        ErrorKind.INVALID_TARGET,
        "You can only evolve using a Level 2 avatar card.",
    )
    assert isinstance(card, AvatarCard)

    if action.target == "active":
        inst = ps.active
    else:
        if action.target < 0 or action.target >= len(ps.reserve):
            raise MalformedActionError(f"Invalid reserve index: {action.target}")
        inst = ps.reserve[action.target]
    _require(inst is not None, ErrorKind.INVALID_TARGET, "There is no avatar to evolve.")
    assert inst is not None

    base = state.cards.avatar(inst.card_id)
    _require(base.level == 1, ErrorKind.INVALID_TARGET, "You can only evolve Level 1 avatars.")
    _require(
        card.element == "neutral" or card.element == base.element,
        ErrorKind.INVALID_TARGET,
        "The elements must match to evolve.",
    )
    _require(card.base_type == base.subtype, ErrorKind.INVALID_TARGET, "The subtypes must match to evolve.")
    _require(
        inst.entered_turn != state.turn,
        ErrorKind.ILLEGAL_PHASE,
        "An avatar cannot evolve on the turn it was played.",
    )

    ps.hand.pop(action.hand_index)
    inst.evolved_from.append(inst.card_id)
    inst.card_id = card.id
    state.emit({"type": "AVATAR_EVOLVED", "player": action.player, "from": base.id, "to": card.id})


def discard_card(state: MatchState, action: DiscardCardAction) -> None:
    ps = state.players[action.player]
    card = _hand_card(state, ps, action.hand_index)
    move_card(ps, Zone.HAND, Zone.GRAVEYARD, action.hand_index)
    state.emit({"type": "CARD_DISCARDED", "player": action.player, "card_id": card.id})
