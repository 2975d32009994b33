from __future__ import annotations

from dataclasses import asdict

from .actions import Action
from .state import MatchState
from .zones import AvatarInstance, PlayerState

_ACTION_TYPES: dict[str, str] = {
    "DrawCardAction": "draw",
    "PlayCardAction": "play",
    "UseSkillAction": "use_skill",
    "SetEnergyAction": "set_energy",
    "SwitchAvatarAction": "switch",
    "EvolveAvatarAction": "evolve",
    "DiscardCardAction": "discard",
    "AdvancePhaseAction": "advance",
    "EndTurnAction": "end_turn",
}


def action_to_dict(a: Action) -> dict[str, object]:
    out: dict[str, object] = {"type": _ACTION_TYPES.get(type(a).__name__, "unknown")}
    out.update(asdict(a))
    return out


def _avatar_to_dict(inst: AvatarInstance | None) -> dict[str, object] | None:
    if inst is None:
        return None
    return {
        "card_id": inst.card_id,
        "tapped": inst.tapped,
        "damage": inst.damage,
        "counters": {k: v for k, v in sorted(inst.counters.items()) if v > 0},
        "attached": list(inst.attached),
        "evolved_from": list(inst.evolved_from),
        "entered_turn": inst.entered_turn,
    }


def _player_to_dict(p: PlayerState) -> dict[str, object]:
    return {
        "health": p.health,
        "deck": list(p.deck),
        "hand": list(p.hand),
        "active": _avatar_to_dict(p.active),
        "reserve": [_avatar_to_dict(r) for r in p.reserve],
        "field": list(p.field_cards),
        "life_cards": list(p.life),
        "energy": list(p.energy),
        "graveyard": list(p.graveyard),
        "avatars_to_energy": p.avatars_to_energy,
        "turns_taken": p.turns_taken,
        "starter_placed": p.starter_placed,
    }


def snapshot(state: MatchState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current match state."""
    return {
        "seed": state.seed,
        "turn": state.turn,
        "phase": state.phase.value,
        "current_player": state.current_player,
        "starting_player": state.starting_player,
        "winner": state.winner,
        "selected_card": state.selected_card,
        "selected_target": state.selected_target,
        "players": {side: _player_to_dict(p) for side, p in state.players.items()},
        "action_log": [action_to_dict(a) for a in state.action_log],
    }
