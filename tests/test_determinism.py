from __future__ import annotations

import json

from spektrum.engine.ai import AISpec, ai_take_turn
from spektrum.engine.match import new_match, replay
from spektrum.engine.serialize import snapshot
from spektrum.paths import get_paths
from spektrum.services.content import ContentService


def _load_content():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    cards = content.load_cards_db()
    return cards, content.load_decks(cards)


def test_engine_determinism_replay() -> None:
    cards, decks = _load_content()
    deck0 = decks["kobar_borah_starter"].card_ids()
    deck1 = decks["conditional_starter"].card_ids()

    seed = 424242
    state1 = new_match(cards, deck0, deck1, seed=seed)
    spec = AISpec(aggressive=True)
    for _ in range(30):
        if state1.winner is not None:
            break
        ai_take_turn(state1, state1.current_player, spec)

    snap1 = snapshot(state1)
    state2 = replay(cards, deck0, deck1, seed=seed, actions=list(state1.action_log))
    snap2 = snapshot(state2)

    assert snap1 == snap2
    assert state1.event_log == state2.event_log
    # Snapshots are plain JSON
    assert json.loads(json.dumps(snap1)) == snap1


def test_seed_controls_shuffle() -> None:
    cards, decks = _load_content()
    deck0 = decks["kobar_borah_starter"].card_ids()
    deck1 = decks["conditional_starter"].card_ids()

    a = new_match(cards, deck0, deck1, seed=1)
    b = new_match(cards, deck0, deck1, seed=1)
    c = new_match(cards, deck0, deck1, seed=2)
    assert snapshot(a) == snapshot(b)
    assert snapshot(a) != snapshot(c)
