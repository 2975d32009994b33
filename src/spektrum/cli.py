from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from spektrum.engine.ai import AISpec
from spektrum.engine.serialize import snapshot
from spektrum.engine.state import MatchConfig
from spektrum.paths import get_paths
from spektrum.services.content import ContentError, ContentService
from spektrum.services.session import MatchSession
from spektrum.services.telemetry import TelemetryService

logger = logging.getLogger("spektrum.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spektrum-sim", description="Play a scripted headless Spektrum match.")
    parser.add_argument("--seed", type=int, default=1)
    parser.add_argument("--player-deck", default="kobar_borah_starter")
    parser.add_argument("--opponent-deck", default="conditional_starter")
    parser.add_argument("--max-turns", type=int, default=60, help="stop after this many rounds")
    parser.add_argument("--passive", action="store_true", help="use the baseline draw-and-pass controller")
    parser.add_argument("--hand-limit", type=int, default=None)
    parser.add_argument(
        "--telemetry",
        nargs="?",
        const="",
        default=None,
        help="append events to this JSONL file (userdata/telemetry.jsonl when no path is given)",
    )
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--validate", action="store_true", help="only validate content files and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    try:
        if args.validate:
            content.validate_all()
            print("content OK")
            return 0
        cards = content.load_cards_db()
        decks = content.load_decks(cards)
    except ContentError as e:
        print(str(e), file=sys.stderr)
        return 2

    for deck_id in (args.player_deck, args.opponent_deck):
        if deck_id not in decks:
            print(f"Unknown deck: {deck_id} (known: {', '.join(sorted(decks))})", file=sys.stderr)
            return 2

    telemetry = None
    if args.telemetry is not None:
        target = Path(args.telemetry) if args.telemetry else paths.userdata_dir / "telemetry.jsonl"
        telemetry = TelemetryService(target)
    spec = AISpec(aggressive=not args.passive)
    session = MatchSession.start(
        cards,
        decks[args.player_deck].card_ids(),
        decks[args.opponent_deck].card_ids(),
        args.seed,
        config=MatchConfig(hand_limit=args.hand_limit),
        telemetry=telemetry,
        ai_side="opponent",
        ai_spec=spec,
    )

    # The player side is scripted with the same controller, through the session.
    state = session.state
    while not session.finished and state.turn <= args.max_turns:
        if not session.autoplay_turn("player", spec):
            break

    if not session.finished:
        logger.warning("No winner after %d rounds", args.max_turns)
    print(json.dumps(snapshot(state), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
