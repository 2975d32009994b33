from __future__ import annotations

import logging
import threading
from pathlib import Path

import pytest

from spektrum.engine.actions import DrawCardAction, EndTurnAction, PlayCardAction
from spektrum.engine.errors import ErrorKind
from spektrum.paths import get_paths
from spektrum.services.content import ContentService
from spektrum.services.session import MatchSession
from spektrum.services.telemetry import TelemetryService


def _load_cards():
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    return content.load_cards_db()


def _session(tmp_path: Path) -> MatchSession:
    cards = _load_cards()
    telemetry = TelemetryService(tmp_path / "telemetry.jsonl")
    return MatchSession.start(cards, ["kobar-002"] * 40, ["borah-002"] * 40, seed=3, telemetry=telemetry)


def test_controller_plays_opponent_turn_after_submit(tmp_path: Path) -> None:
    session = _session(tmp_path)
    res = session.submit(EndTurnAction(player="player"))
    assert res.ok

    snap = session.snapshot()
    assert snap["current_player"] == "player"
    assert snap["turn"] == 2
    opp = snap["players"]["opponent"]  # type: ignore[index]
    assert opp["active"]["card_id"] == "borah-002"  # type: ignore[index]


def test_rejections_are_logged_and_recorded(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    session = _session(tmp_path)
    with caplog.at_level(logging.WARNING, logger="spektrum.services.session"):
        res = session.submit(PlayCardAction(player="player", hand_index=0))
    assert not res.ok
    assert res.error_kind is ErrorKind.ILLEGAL_PHASE
    assert session.rejected == 1
    assert "IllegalPhase" in caplog.text

    records = session.telemetry.read_all()  # type: ignore[union-attr]
    rejected = [r for r in records if r["type"] == "ACTION_REJECTED"]
    assert len(rejected) == 1
    assert rejected[0]["payload"]["action"]["type"] == "play"  # type: ignore[index]


def test_events_reach_telemetry(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.submit(DrawCardAction(player="player"))
    types = [r["type"] for r in session.telemetry.read_all()]  # type: ignore[union-attr]
    assert types[0] == "MATCH_STARTED"
    assert "CARD_DRAWN" in types
    assert all(r["payload"]["match_id"] == session.id for r in session.telemetry.read_all())  # type: ignore[index,union-attr]


def test_single_writer_under_concurrent_submits(tmp_path: Path) -> None:
    session = _session(tmp_path)
    results = []
    barrier = threading.Barrier(4)

    def worker() -> None:
        barrier.wait()
        results.append(session.submit(DrawCardAction(player="player")))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.ok) == 1
    assert len(session.state.players["player"].hand) == 6


def test_disabled_telemetry_writes_nothing(tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "t.jsonl", enabled=False)
    telemetry.log("X", {"a": 1})
    assert not (tmp_path / "t.jsonl").exists()
    assert telemetry.read_all() == []
