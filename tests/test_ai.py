from __future__ import annotations

from spektrum.engine.actions import DrawCardAction, EndTurnAction, PlayCardAction, SetEnergyAction, UseSkillAction
from spektrum.engine.ai import AISpec, ai_take_turn, choose_action
from spektrum.engine.match import new_match, step
from spektrum.engine.serialize import snapshot
from spektrum.engine.state import Phase
from spektrum.engine.zones import AvatarInstance
from spektrum.paths import get_paths
from spektrum.services.content import ContentService


def _load_content():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    cards = content.load_cards_db()
    return cards, content.load_decks(cards)


def test_baseline_controller_fields_an_avatar_then_passes() -> None:
    cards, _ = _load_content()
    state = new_match(cards, ["kobar-002"] * 40, ["borah-002"] * 40, seed=9)
    step(state, EndTurnAction(player="player"))
    assert state.current_player == "opponent"

    assert isinstance(choose_action(state, "opponent"), DrawCardAction)
    results = ai_take_turn(state, "opponent")

    assert all(r.ok for r in results)
    ops = state.players["opponent"]
    assert ops.active is not None and ops.active.card_id == "borah-002"
    assert len(ops.hand) == 5  # 5 dealt + 1 drawn - 1 played
    assert ops.energy == []
    assert state.current_player == "player"


def test_baseline_controller_passes_when_avatar_present() -> None:
    cards, _ = _load_content()
    state = new_match(cards, ["kobar-002"] * 40, ["borah-002"] * 40, seed=9)
    step(state, EndTurnAction(player="player"))
    step(state, DrawCardAction(player="opponent"))
    state.players["opponent"].active = AvatarInstance(card_id="borah-002")
    assert isinstance(choose_action(state, "opponent"), EndTurnAction)


def test_choose_action_does_not_mutate() -> None:
    cards, _ = _load_content()
    state = new_match(cards, ["kobar-002"] * 40, ["borah-002"] * 40, seed=9)
    step(state, DrawCardAction(player="player"))
    before = snapshot(state)
    choose_action(state, "player", AISpec(aggressive=True))
    assert snapshot(state) == before


def test_aggressive_controller_fuels_energy_and_attacks() -> None:
    cards, _ = _load_content()
    state = new_match(cards, ["kobar-002"] * 40, ["borah-002"] * 40, seed=9)
    step(state, DrawCardAction(player="player"))
    assert state.phase is Phase.MAIN1
    state.players["opponent"].active = AvatarInstance(card_id="borah-002")
    spec = AISpec(aggressive=True)

    assert isinstance(choose_action(state, "player", spec), PlayCardAction)
    step(state, choose_action(state, "player", spec))
    assert isinstance(choose_action(state, "player", spec), SetEnergyAction)
    step(state, choose_action(state, "player", spec))
    action = choose_action(state, "player", spec)
    assert isinstance(action, UseSkillAction) and action.skill_index == 1
    assert step(state, action).ok
    assert state.players["opponent"].active.damage == 2  # type: ignore[union-attr]
    assert isinstance(choose_action(state, "player", spec), EndTurnAction)


def test_aggressive_match_runs_to_a_winner() -> None:
    cards, decks = _load_content()
    state = new_match(
        cards,
        decks["kobar_borah_starter"].card_ids(),
        decks["conditional_starter"].card_ids(),
        seed=2024,
    )
    spec = AISpec(aggressive=True)
    life = {side: len(state.players[side].life) for side in ("player", "opponent")}  # type: ignore[index]
    for _ in range(200):
        if state.winner is not None:
            break
        ai_take_turn(state, state.current_player, spec)
        for side in life:
            ps = state.players[side]  # type: ignore[index]
            assert len(ps.life) <= life[side]
            life[side] = len(ps.life)
            assert ps.active is None or ps.active.damage >= 0
            assert len(ps.reserve) <= state.config.max_reserve_avatars

    # Every turn draws, so deck and life cards run out eventually
    assert state.winner in ("player", "opponent")
    assert sum(1 for e in state.event_log if e["type"] == "GAME_ENDED") == 1


def test_card_identities_are_conserved() -> None:
    cards, decks = _load_content()
    deck0 = decks["kobar_borah_starter"].card_ids()
    deck1 = decks["conditional_starter"].card_ids()
    state = new_match(cards, deck0, deck1, seed=77)
    spec = AISpec(aggressive=True)
    for _ in range(200):
        if state.winner is not None:
            break
        ai_take_turn(state, state.current_player, spec)
        assert sorted(state.players["player"].all_card_ids()) == sorted(deck0)
        assert sorted(state.players["opponent"].all_card_ids()) == sorted(deck1)
