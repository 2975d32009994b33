from __future__ import annotations

from spektrum.engine.actions import DrawCardAction, EndTurnAction, PlayCardAction
from spektrum.engine.errors import ErrorKind
from spektrum.engine.match import new_match, step
from spektrum.engine.resolver import draw_card
from spektrum.engine.serialize import snapshot
from spektrum.engine.state import Phase
from spektrum.paths import get_paths
from spektrum.services.content import ContentService


def _load_cards():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_cards_db()


def _new():
    cards = _load_cards()
    return new_match(cards, ["kobar-002"] * 40, ["borah-002"] * 40, seed=5)


def test_start_deals_life_cards_and_hand() -> None:
    state = _new()
    for side in ("player", "opponent"):
        ps = state.players[side]  # type: ignore[index]
        assert len(ps.life) == 4
        assert len(ps.hand) == 5
        assert len(ps.deck) == 31
        assert ps.energy == []
    assert state.turn == 1
    assert state.current_player == "player"
    assert state.phase is Phase.DRAW


def test_draw_takes_top_of_deck() -> None:
    state = _new()
    ps = state.players["player"]
    top = ps.deck[0]
    res = step(state, DrawCardAction(player="player"))
    assert res.ok
    assert ps.hand[-1] == top
    assert len(ps.hand) == 6
    assert state.phase is Phase.MAIN1
    assert any(e["type"] == "CARD_DRAWN" for e in res.events)


def test_empty_deck_pulls_a_life_card_then_draws_it() -> None:
    state = _new()
    ps = state.players["player"]
    ps.deck = []
    ps.life = ["kobar-001"]
    before = len(ps.hand)

    drawn = draw_card(state, "player")

    assert drawn == "kobar-001"
    assert ps.deck == []
    assert ps.life == []
    assert len(ps.hand) == before + 1
    assert ps.hand[-1] == "kobar-001"
    assert state.winner is None


def test_empty_deck_and_life_loses_without_mutation() -> None:
    state = _new()
    ps = state.players["player"]
    ps.deck = []
    ps.life = []
    hand = list(ps.hand)

    assert draw_card(state, "player") is None
    assert state.winner == "opponent"
    assert ps.hand == hand
    assert state.event_log[-1] == {"type": "GAME_ENDED", "winner": "opponent", "reason": "deck_and_life_exhausted"}


def test_forced_draw_reports_empty_resource_loss() -> None:
    state = _new()
    state.players["player"].deck = []
    state.players["player"].life = []

    res = step(state, DrawCardAction(player="player"))
    assert not res.ok
    assert res.error_kind is ErrorKind.EMPTY_RESOURCE_LOSS
    assert state.winner == "opponent"
    assert any(e["type"] == "GAME_ENDED" for e in res.events)

    # Nothing is legal once the match has ended
    before = snapshot(state)
    res2 = step(state, EndTurnAction(player="opponent"))
    assert not res2.ok
    assert res2.error_kind is ErrorKind.ILLEGAL_PHASE
    assert snapshot(state) == before


def test_draw_only_in_draw_phase() -> None:
    state = _new()
    step(state, DrawCardAction(player="player"))
    res = step(state, DrawCardAction(player="player"))
    assert not res.ok
    assert res.error_kind is ErrorKind.ILLEGAL_PHASE

    res2 = step(state, PlayCardAction(player="player", hand_index=0))
    assert res2.ok


def test_life_cards_never_increase_over_a_match() -> None:
    state = _new()
    counts = {side: [len(state.players[side].life)] for side in ("player", "opponent")}  # type: ignore[index]
    for _ in range(120):
        if state.winner is not None:
            break
        step(state, EndTurnAction(player=state.current_player))
        for side in counts:
            counts[side].append(len(state.players[side].life))  # type: ignore[index]

    # Passing every turn exhausts deck then life cards
    assert state.winner is not None
    for series in counts.values():
        assert all(a >= b for a, b in zip(series, series[1:]))
