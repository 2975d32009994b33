from __future__ import annotations

import random
from typing import Iterable, Sequence

from . import phases, resolver
from .actions import (
    Action,
    AdvancePhaseAction,
    DiscardCardAction,
    DrawCardAction,
    EndTurnAction,
    EvolveAvatarAction,
    PlayCardAction,
    SetEnergyAction,
    Side,
    SwitchAvatarAction,
    Target,
    UseSkillAction,
)
from .errors import ErrorKind, MalformedActionError, RuleViolation
from .state import MatchConfig, MatchState, StepResult
from .types import AvatarCard, CardDatabase
from .zones import PlayerState


def _shuffle(rng: random.Random, items: list[str]) -> None:
    rng.shuffle(items)


def _is_starter(cards: CardDatabase, card_id: str) -> bool:
    card = cards.get(card_id)
    return isinstance(card, AvatarCard) and card.level == 1


def _deal(deck: list[str], cfg: MatchConfig) -> PlayerState:
    life = deck[: cfg.life_cards]
    rest = deck[cfg.life_cards :]
    hand = rest[: cfg.starting_hand]
    return PlayerState(deck=rest[cfg.starting_hand :], hand=hand, life=life)


def _deal_opening(
    cards: CardDatabase, rng: random.Random, deck: list[str], cfg: MatchConfig
) -> tuple[PlayerState, int]:
    """Deal an opening hand holding at least one level 1 avatar.

    A hand without one is shuffled back and redealt, up to `cfg.max_mulligans`
    times. After that a level 1 avatar from the undealt cards is swapped for
    the last card of the hand. Returns the player and the mulligans taken.
    """
    ps = _deal(deck, cfg)
    mulligans = 0
    while not any(_is_starter(cards, cid) for cid in ps.hand) and mulligans < cfg.max_mulligans:
        mulligans += 1
        _shuffle(rng, deck)
        ps = _deal(deck, cfg)
    if not ps.hand or any(_is_starter(cards, cid) for cid in ps.hand):
        return ps, mulligans

    for zone in (ps.deck, ps.life):
        starters = [i for i, cid in enumerate(zone) if _is_starter(cards, cid)]
        if starters:
            i = starters[rng.randrange(len(starters))]
            zone[i], ps.hand[-1] = ps.hand[-1], zone[i]
            break
    return ps, mulligans


def new_match(
    cards: CardDatabase,
    deck_player: Sequence[str],
    deck_opponent: Sequence[str],
    seed: int,
    config: MatchConfig | None = None,
    starting_player: Side = "player",
) -> MatchState:
    """Build, shuffle and deal both decks, then open the first turn.

    Each side sets aside its life cards before drawing its opening hand, and
    every opening hand holds a level 1 avatar to start with.
    """
    cfg = config or MatchConfig()
    for deck in (deck_player, deck_opponent):
        if len(deck) < cfg.min_deck_size:
            raise ValueError(f"Decks must have at least {cfg.min_deck_size} cards.")
        unknown = sorted({cid for cid in deck if cid not in cards.cards})
        if unknown:
            raise ValueError(f"Unknown card ids in deck: {', '.join(unknown)}")
        if not any(_is_starter(cards, cid) for cid in deck):
            raise ValueError("Decks must contain at least one level 1 avatar.")

    rng = random.Random(seed)
    d0 = list(deck_player)
    d1 = list(deck_opponent)
    _shuffle(rng, d0)
    _shuffle(rng, d1)
    p0, m0 = _deal_opening(cards, rng, d0, cfg)
    p1, m1 = _deal_opening(cards, rng, d1, cfg)

    state = MatchState(
        cards=cards,
        config=cfg,
        seed=seed,
        rng=rng,
        players={"player": p0, "opponent": p1},
        current_player=starting_player,
        starting_player=starting_player,
    )
    state.emit({"type": "MATCH_STARTED", "seed": seed, "starting_player": starting_player})
    for side, count in (("player", m0), ("opponent", m1)):
        if count:
            state.emit({"type": "MULLIGAN", "player": side, "count": count})
    phases.begin_turn(state)
    return state


def _dispatch(state: MatchState, action: Action) -> bool:
    if isinstance(action, DrawCardAction):
        return phases.run_draw_phase(state)
    if isinstance(action, AdvancePhaseAction):
        return phases.advance(state)
    if isinstance(action, EndTurnAction):
        return phases.pass_turn(state)
    if isinstance(action, PlayCardAction):
        resolver.play_card(state, action)
    elif isinstance(action, UseSkillAction):
        resolver.use_skill(state, action)
    elif isinstance(action, SetEnergyAction):
        resolver.set_energy(state, action)
    elif isinstance(action, SwitchAvatarAction):
        resolver.switch_avatar(state, action)
    elif isinstance(action, EvolveAvatarAction):
        resolver.evolve_avatar(state, action)
    elif isinstance(action, DiscardCardAction):
        resolver.discard_card(state, action)
    else:
        raise MalformedActionError(f"Unknown action: {action!r}")
    return True


def step(state: MatchState, action: Action) -> StepResult:
    """Apply a single action to the match state.

    This mutates `state` in place. An action either applies completely or is
    rejected with the state untouched; the result carries the error kind.
    """
    if state.winner is not None:
        return StepResult(ok=False, events=[], error="Match already ended.", error_kind=ErrorKind.ILLEGAL_PHASE)

    # The log only keeps actions that changed the state
    state.action_log.append(action)
    start = len(state.event_log)
    try:
        phases.check_legal(state, action)
        completed = _dispatch(state, action)
    except RuleViolation as e:
        state.action_log.pop()
        return StepResult(ok=False, events=[], error=e.message, error_kind=e.kind)
    except MalformedActionError:
        state.action_log.pop()
        raise

    events = state.event_log[start:]
    if not completed:
        return StepResult(
            ok=False,
            events=events,
            error="No cards left to draw.",
            error_kind=ErrorKind.EMPTY_RESOURCE_LOSS,
        )
    return StepResult(ok=True, events=events)


def replay(
    cards: CardDatabase,
    deck_player: Sequence[str],
    deck_opponent: Sequence[str],
    seed: int,
    actions: Iterable[Action],
    config: MatchConfig | None = None,
    starting_player: Side = "player",
) -> MatchState:
    state = new_match(cards, deck_player, deck_opponent, seed, config=config, starting_player=starting_player)
    for a in actions:
        step(state, a)
        if state.winner is not None:
            break
    return state


def select_card(state: MatchState, hand_index: int | None) -> None:
    state.selected_card = hand_index


def select_target(state: MatchState, target: Target | None) -> None:
    state.selected_target = target
