"""Match session: the single authoritative owner of one MatchState.

Every mutation goes through `submit`, which holds the session lock for the
whole step so two actions never interleave against the same match.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Sequence
from uuid import uuid4

from spektrum.engine.actions import Action, Side
from spektrum.engine.ai import AISpec, ai_take_turn
from spektrum.engine.match import new_match, step
from spektrum.engine.serialize import action_to_dict, snapshot
from spektrum.engine.state import MatchConfig, MatchState, StepResult
from spektrum.engine.types import CardDatabase

from .telemetry import TelemetryService

logger = logging.getLogger(__name__)


def generate_id() -> str:
    return str(uuid4())[:8]


@dataclass
class MatchSession:
    state: MatchState
    telemetry: TelemetryService | None = None
    # Side driven by the opponent controller, if any.
    ai_side: Side | None = "opponent"
    ai_spec: AISpec = field(default_factory=AISpec)
    id: str = field(default_factory=generate_id)
    rejected: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def start(
        cls,
        cards: CardDatabase,
        deck_player: Sequence[str],
        deck_opponent: Sequence[str],
        seed: int,
        *,
        config: MatchConfig | None = None,
        telemetry: TelemetryService | None = None,
        ai_side: Side | None = "opponent",
        ai_spec: AISpec | None = None,
        starting_player: Side = "player",
    ) -> MatchSession:
        state = new_match(cards, deck_player, deck_opponent, seed, config=config, starting_player=starting_player)
        session = cls(state=state, telemetry=telemetry, ai_side=ai_side, ai_spec=ai_spec or AISpec())
        logger.info("Match %s started (seed=%s, starting=%s)", session.id, seed, starting_player)
        session._record(state.event_log)
        with session._lock:
            session._run_ai()
        return session

    @property
    def finished(self) -> bool:
        return self.state.winner is not None

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            return snapshot(self.state)

    def submit(self, action: Action) -> StepResult:
        """Apply one action, then let the opponent controller play out its turn."""
        with self._lock:
            result = self._apply(action)
            if result.ok:
                self._run_ai()
            return result

    def autoplay_turn(self, side: Side, spec: AISpec | None = None) -> list[StepResult]:
        """Let the opponent controller play `side`'s current turn, e.g. for scripted matches."""
        with self._lock:
            if self.finished or self.state.current_player != side:
                return []
            start = len(self.state.event_log)
            results = ai_take_turn(self.state, side, spec or self.ai_spec)
            self._record(self.state.event_log[start:])
            self._run_ai()
            return results

    def _apply(self, action: Action) -> StepResult:
        result = step(self.state, action)
        if result.ok:
            logger.info("Match %s: %s applied (%d events)", self.id, type(action).__name__, len(result.events))
        else:
            self.rejected += 1
            kind = result.error_kind.value if result.error_kind is not None else "unknown"
            logger.warning("Match %s: %s rejected [%s] %s", self.id, type(action).__name__, kind, result.error)
            if self.telemetry is not None:
                self.telemetry.log(
                    "ACTION_REJECTED",
                    {"match_id": self.id, "action": action_to_dict(action), "error_kind": kind, "error": result.error},
                )
        self._record(result.events)
        if result.events and self.finished:
            logger.info("Match %s ended, winner: %s", self.id, self.state.winner)
        return result

    def _run_ai(self) -> None:
        side = self.ai_side
        if side is None:
            return
        while not self.finished and self.state.current_player == side:
            start = len(self.state.event_log)
            results = ai_take_turn(self.state, side, self.ai_spec)
            for res in results:
                if not res.ok and res.error_kind is not None:
                    logger.warning("Match %s: controller action rejected [%s]", self.id, res.error_kind.value)
            self._record(self.state.event_log[start:])
            if not results:
                break

    def _record(self, events: Sequence[dict[str, object]]) -> None:
        if self.telemetry is None or not events:
            return
        records = []
        for ev in events:
            payload = {k: v for k, v in ev.items() if k != "type"}
            payload["match_id"] = self.id
            records.append((str(ev.get("type", "EVENT")), payload))
        self.telemetry.log_many(records)
