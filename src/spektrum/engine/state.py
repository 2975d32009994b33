from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum

from .actions import Action, Side, Target, other_side
from .errors import ErrorKind
from .types import CardDatabase
from .zones import PlayerState

Event = dict[str, object]


class Phase(str, Enum):
    REFRESH = "refresh"
    DRAW = "draw"
    MAIN1 = "main1"
    BATTLE = "battle"
    DAMAGE = "damage"
    MAIN2 = "main2"
    END = "end"


@dataclass(frozen=True)
class MatchConfig:
    life_cards: int = 4
    starting_hand: int = 5
    min_deck_size: int = 40
    max_reserve_avatars: int = 2
    avatars_to_energy_per_turn: int = 1
    switch_cost: int = 1
    spell_damage: int = 2
    spell_heal: int = 3
    ritual_armor_shield: int = 2
    hand_limit: int | None = None
    bleed_tick: bool = True
    first_turn_draw: bool = True
    max_mulligans: int = 3


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None
    error_kind: ErrorKind | None = None


@dataclass
class MatchState:
    cards: CardDatabase
    config: MatchConfig
    seed: int
    rng: random.Random
    players: dict[Side, PlayerState]
    current_player: Side = "player"
    starting_player: Side = "player"
    phase: Phase = Phase.REFRESH
    turn: int = 1
    winner: Side | None = None
    # UI selection pointers; never consulted by the rules.
    selected_card: int | None = None
    selected_target: Target | None = None
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    def opponent(self, side: Side) -> Side:
        return other_side(side)

    def emit(self, event: Event) -> None:
        self.event_log.append(event)
