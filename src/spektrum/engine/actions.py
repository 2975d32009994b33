from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Side = Literal["player", "opponent"]

Target = Literal["opponent-avatar", "player-avatar"]
EvolveTarget = Literal["active"] | int


def other_side(side: Side) -> Side:
    return "opponent" if side == "player" else "player"


@dataclass(frozen=True)
class DrawCardAction:
    player: Side


@dataclass(frozen=True)
class PlayCardAction:
    player: Side
    hand_index: int
    target: Target | None = None


@dataclass(frozen=True)
class UseSkillAction:
    player: Side
    skill_index: Literal[1, 2]
    target: Target = "opponent-avatar"


@dataclass(frozen=True)
class SetEnergyAction:
    player: Side
    hand_index: int


@dataclass(frozen=True)
class SwitchAvatarAction:
    player: Side
    reserve_index: int


@dataclass(frozen=True)
class EvolveAvatarAction:
    player: Side
    hand_index: int
    target: EvolveTarget = "active"


@dataclass(frozen=True)
class DiscardCardAction:
    player: Side
    hand_index: int


@dataclass(frozen=True)
class AdvancePhaseAction:
    player: Side


@dataclass(frozen=True)
class EndTurnAction:
    player: Side


Action = (
    DrawCardAction
    | PlayCardAction
    | UseSkillAction
    | SetEnergyAction
    | SwitchAvatarAction
    | EvolveAvatarAction
    | DiscardCardAction
    | AdvancePhaseAction
    | EndTurnAction
)
