from __future__ import annotations

from dataclasses import dataclass

from .actions import (
    Action,
    DrawCardAction,
    EndTurnAction,
    PlayCardAction,
    SetEnergyAction,
    Side,
    UseSkillAction,
)
from .damage import evaluate_damage
from .match import step
from .state import MatchState, Phase, StepResult
from .types import AvatarCard


@dataclass(frozen=True)
class AISpec:
    """Opponent controller tuning.

    aggressive:
      False = the baseline script: draw, field an avatar if none is active, pass
      True  = also fuels energy with a spare avatar and attacks with the
              affordable skill that deals the most damage
    """

    aggressive: bool = False
    max_actions_per_turn: int = 32


def _first_avatar_in_hand(state: MatchState, side: Side) -> int | None:
    ps = state.players[side]
    for idx, card_id in enumerate(ps.hand):
        card = state.cards.get(card_id)
        if isinstance(card, AvatarCard) and (ps.starter_placed or card.level == 1):
            return idx
    return None


def _pick_energy(state: MatchState, side: Side) -> SetEnergyAction | None:
    ps = state.players[side]
    if ps.avatars_to_energy >= state.config.avatars_to_energy_per_turn:
        return None
    # Keep one avatar in hand as a replacement for the active one
    avatar_slots = [i for i, cid in enumerate(ps.hand) if isinstance(state.cards.get(cid), AvatarCard)]
    if len(avatar_slots) < 2:
        return None
    return SetEnergyAction(player=side, hand_index=avatar_slots[-1])


def _pick_skill(state: MatchState, side: Side) -> UseSkillAction | None:
    ps = state.players[side]
    attacker = ps.active
    if attacker is None or attacker.tapped:
        return None
    if state.players[state.opponent(side)].active is None:
        return None

    card = state.cards.avatar(attacker.card_id)
    best: tuple[int, UseSkillAction] | None = None
    for index in (1, 2):
        skill = card.skill(index)
        if skill is None or skill.cost > len(ps.energy):
            continue
        dmg = evaluate_damage(state, side, attacker, skill)
        cand = UseSkillAction(player=side, skill_index=index, target="opponent-avatar")  # type: ignore[arg-type]
        if best is None or dmg > best[0]:
            best = (dmg, cand)
    return best[1] if best is not None else None


def choose_action(state: MatchState, side: Side, spec: AISpec | None = None) -> Action:
    """Pick the next action for `side`. Never mutates `state`."""
    spec = spec or AISpec()
    ps = state.players[side]

    if state.phase is Phase.DRAW:
        return DrawCardAction(player=side)

    if state.phase in (Phase.MAIN1, Phase.MAIN2) and ps.active is None:
        idx = _first_avatar_in_hand(state, side)
        if idx is not None:
            return PlayCardAction(player=side, hand_index=idx)

    if spec.aggressive and state.phase in (Phase.MAIN1, Phase.MAIN2):
        energy = _pick_energy(state, side)
        if energy is not None:
            return energy
        skill = _pick_skill(state, side)
        if skill is not None:
            return skill

    return EndTurnAction(player=side)


def ai_take_turn(state: MatchState, side: Side, spec: AISpec | None = None) -> list[StepResult]:
    """Play out `side`'s turn through `step`, one action at a time.

    Stops when control passes, the match ends, or an action is rejected
    (in which case the turn is ended instead).
    """
    spec = spec or AISpec()
    results: list[StepResult] = []
    for _ in range(spec.max_actions_per_turn):
        if state.winner is not None or state.current_player != side:
            break
        action = choose_action(state, side, spec)
        res = step(state, action)
        results.append(res)
        if not res.ok and state.winner is None and not isinstance(action, EndTurnAction):
            results.append(step(state, EndTurnAction(player=side)))
    else:
        if state.winner is None and state.current_player == side:
            results.append(step(state, EndTurnAction(player=side)))
    return results
