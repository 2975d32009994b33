from __future__ import annotations

from .actions import Side
from .state import MatchState


def declare_winner(state: MatchState, winner: Side, reason: str) -> bool:
    """Set the winner once. Later calls are ignored and return False."""
    if state.winner is not None:
        return False
    state.winner = winner
    state.emit({"type": "GAME_ENDED", "winner": winner, "reason": reason})
    return True


def check_avatar_loss(state: MatchState, side: Side) -> None:
    """Called after `side` lost an active avatar: no life cards left means defeat."""
    if not state.players[side].life:
        declare_winner(state, state.opponent(side), "life_cards_exhausted")


def check_draw_loss(state: MatchState, side: Side) -> bool:
    """A draw is impossible when both deck and life cards are empty."""
    ps = state.players[side]
    if ps.deck or ps.life:
        return False
    declare_winner(state, state.opponent(side), "deck_and_life_exhausted")
    return True
