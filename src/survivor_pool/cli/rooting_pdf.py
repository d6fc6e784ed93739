"""Parse consensus-PDF text and manage the stored rooting override."""

import argparse
import datetime
import json
import sys
from typing import Sequence

from dotenv import load_dotenv

from survivor_pool.classes.consensus import ConsensusGame
from survivor_pool.classes.rooting_pdf import ParsedConsensus, build_manual_snapshot, parse_consensus_pdf_text
from survivor_pool.config import load_and_apply_settings
from survivor_pool.logging import configure_logging
from survivor_pool.services.override_store import OverrideError, OverrideStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="survivor-rooting")
    parser.add_argument("text", nargs="?", help="Text extracted from a consensus PDF ('-' for stdin)")
    parser.add_argument("--save-override", action="store_true", help="Store the parsed games as the rooting override")
    parser.add_argument("--expires-hours", type=float, help="Override lifetime in hours (defaults to the configured TTL)")
    parser.add_argument("--clear", action="store_true", help="Remove the stored rooting override and exit")
    parser.add_argument("--show", action="store_true", help="Print the active rooting override and exit")
    parser.add_argument("--store", help="Path to dashboard.json (defaults to the data directory)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    return parser


def _format_percent(value: float | None) -> str:
    return "-" if value is None else f"{value:g}%"


def _format_pair(first: float | None, second: float | None) -> str:
    if first is None and second is None:
        return "-"
    return f"{_format_percent(first)}/{_format_percent(second)}"


def format_game(game: ConsensusGame) -> str:
    away, home = game.teams
    return (
        f"  {game.matchup}: bets {_format_pair(away.bet_percent, home.bet_percent)}, "
        f"money {_format_pair(away.money_percent, home.money_percent)}"
    )


def format_parsed(parsed: ParsedConsensus) -> str:
    lines = []
    for market, games in parsed.markets.items():
        lines.append(f"{market} ({len(games)})")
        lines.extend(format_game(game) for game in games)
    for warning in parsed.warnings:
        lines.append(f"warning: {warning}")
    return "\n".join(lines)


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    settings = load_and_apply_settings()
    configure_logging(settings.logger_levels)
    parser = build_parser()
    args = parser.parse_args(argv)

    store = OverrideStore(args.store, ttl_hours=settings.override_ttl_hours)
    if args.clear:
        store.clear()
        print("Rooting override cleared")
        return 0
    if args.show:
        override = store.get_active()
        if override is None:
            print("No active rooting override")
            return 0
        print(json.dumps(override.to_dict(), indent=2))
        return 0
    if not args.text:
        parser.error("a text file is required unless --clear or --show is given")

    try:
        text = _read_text(args.text)
    except OSError as exc:
        print(f"Unable to read {args.text}: {exc}", file=sys.stderr)
        return 1

    parsed = parse_consensus_pdf_text(text)
    if args.json:
        print(
            json.dumps(
                {
                    "markets": {market: [game.to_dict() for game in games] for market, games in parsed.markets.items()},
                    "warnings": parsed.warnings,
                },
                indent=2,
            )
        )
    else:
        print(format_parsed(parsed))

    if args.save_override:
        if not parsed.game_count:
            print("No matchups parsed; override not saved", file=sys.stderr)
            return 1
        now = datetime.datetime.now(datetime.timezone.utc)
        expires_at = now + datetime.timedelta(hours=args.expires_hours) if args.expires_hours is not None else None
        source_path = None if args.text == "-" else args.text
        try:
            override = store.set(
                build_manual_snapshot(parsed, now),
                expires_at=expires_at,
                source_name=source_path or "stdin",
                source_path=source_path,
                now=now,
            )
        except OverrideError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        print(f"Saved rooting override, expires {override.expires_at}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
