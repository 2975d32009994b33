"""Turn structure: refresh, draw, main1, battle, damage, main2, end.

Refresh and damage never wait for input. Draw waits for the mover to take
the forced draw (either a draw or an advance action performs it). Main and
battle phases stay open until the mover advances.

Skill damage resolves the moment the skill is used, so the damage phase is
only a marker passed through on the way from battle to main2.

`turn` counts rounds: it increments when control returns to the player who
started the match.
"""

from __future__ import annotations

from .actions import (
    Action,
    AdvancePhaseAction,
    DiscardCardAction,
    DrawCardAction,
    EndTurnAction,
    EvolveAvatarAction,
    PlayCardAction,
    SetEnergyAction,
    SwitchAvatarAction,
    UseSkillAction,
)
from .errors import ErrorKind, RuleViolation
from .resolver import damage_avatar, draw_card
from .state import MatchState, Phase
from .zones import Zone, move_card, untap_avatar

_MAIN = frozenset({Phase.MAIN1, Phase.MAIN2})
_OPEN = frozenset({Phase.DRAW, Phase.MAIN1, Phase.BATTLE, Phase.MAIN2})

LEGAL_PHASES: dict[type, frozenset[Phase]] = {
    DrawCardAction: frozenset({Phase.DRAW}),
    PlayCardAction: _MAIN,
    UseSkillAction: frozenset({Phase.MAIN1, Phase.BATTLE, Phase.MAIN2}),
    SetEnergyAction: _MAIN,
    SwitchAvatarAction: _MAIN,
    EvolveAvatarAction: _MAIN,
    DiscardCardAction: _MAIN,
    AdvancePhaseAction: _OPEN,
    EndTurnAction: _OPEN,
}


def _is_quick_spell(state: MatchState, action: PlayCardAction) -> bool:
    hand = state.players[action.player].hand
    if action.hand_index < 0 or action.hand_index >= len(hand):
        return False
    return state.cards.get(hand[action.hand_index]).category == "quick-spell"


def check_legal(state: MatchState, action: Action) -> None:
    if action.player != state.current_player:
        raise RuleViolation(ErrorKind.ILLEGAL_PHASE, "Not your turn.")
    allowed = LEGAL_PHASES.get(type(action), frozenset())
    if state.phase in allowed:
        return
    if isinstance(action, PlayCardAction) and state.phase is Phase.BATTLE and _is_quick_spell(state, action):
        return
    raise RuleViolation(
        ErrorKind.ILLEGAL_PHASE,
        f"{type(action).__name__} is not allowed during the {state.phase.value} phase.",
    )


def _set_phase(state: MatchState, phase: Phase) -> None:
    state.phase = phase
    state.emit({"type": "PHASE_CHANGED", "player": state.current_player, "phase": phase.value})


def _refresh(state: MatchState) -> None:
    side = state.current_player
    ps = state.players[side]
    for inst in ps.avatars():
        untap_avatar(inst)
    ps.avatars_to_energy = 0

    active = ps.active
    if state.config.bleed_tick and active is not None and active.bleed > 0:
        active.counters["bleed"] -= 1
        state.emit({"type": "BLEED_TICK", "player": side, "card_id": active.card_id})
        damage_avatar(state, side, 1)


def begin_turn(state: MatchState) -> None:
    side = state.current_player
    ps = state.players[side]
    state.emit({"type": "TURN_STARTED", "player": side, "turn": state.turn})
    _set_phase(state, Phase.REFRESH)
    _refresh(state)
    if state.winner is not None:
        return

    first_turn = ps.turns_taken == 0 and side == state.starting_player
    ps.turns_taken += 1
    if first_turn and not state.config.first_turn_draw:
        _set_phase(state, Phase.MAIN1)
        return
    _set_phase(state, Phase.DRAW)


def run_draw_phase(state: MatchState) -> bool:
    """Take the forced draw and move on to main1. False if the draw lost the game."""
    if draw_card(state, state.current_player) is None:
        return False
    _set_phase(state, Phase.MAIN1)
    return True


def _end_phase_cleanup(state: MatchState) -> None:
    limit = state.config.hand_limit
    if limit is None:
        return
    side = state.current_player
    ps = state.players[side]
    while len(ps.hand) > limit:
        card_id = move_card(ps, Zone.HAND, Zone.GRAVEYARD, len(ps.hand) - 1)
        state.emit({"type": "CARD_DISCARDED", "player": side, "card_id": card_id, "reason": "hand_limit"})


def end_turn(state: MatchState) -> None:
    _set_phase(state, Phase.END)
    _end_phase_cleanup(state)
    state.emit({"type": "TURN_ENDED", "player": state.current_player, "turn": state.turn})

    state.current_player = state.opponent(state.current_player)
    if state.current_player == state.starting_player:
        state.turn += 1
    begin_turn(state)


def advance(state: MatchState) -> bool:
    """Move the mover to their next input-awaiting phase."""
    phase = state.phase
    if phase is Phase.DRAW:
        return run_draw_phase(state)
    if phase is Phase.MAIN1:
        _set_phase(state, Phase.BATTLE)
    elif phase is Phase.BATTLE:
        _set_phase(state, Phase.DAMAGE)
        _set_phase(state, Phase.MAIN2)
    elif phase is Phase.MAIN2:
        end_turn(state)
    return True


def pass_turn(state: MatchState) -> bool:
    """Advance until control changes hands (or the match ends)."""
    side = state.current_player
    while state.winner is None and state.current_player == side:
        if not advance(state):
            return False
    return True
