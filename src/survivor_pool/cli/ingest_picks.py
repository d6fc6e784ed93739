"""Upload a weekly picks file for a contest, or set a single entry's pick."""

import argparse
import json
import sys
from typing import Sequence

from dotenv import load_dotenv

from survivor_pool.classes.contest import UnknownContestError, UnknownEntryError
from survivor_pool.classes.pick_ingest import IngestError, IngestResult
from survivor_pool.config import load_and_apply_settings
from survivor_pool.logging import configure_logging
from survivor_pool.services.contest_store import ContestStore


def build_parser(default_contest: str = "circa") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="survivor-ingest")
    parser.add_argument("file", help="Uploaded picks file (CSV/TSV, JSON or pick-count report)")
    parser.add_argument("--contest", default=default_contest, help="Contest id, e.g. circa or scs")
    parser.add_argument("--week", help="Target week (defaults to the contest's current week)")
    parser.add_argument("--source-name", help="Label stored with the week summary (defaults to the file name)")
    parser.add_argument("--store", help="Path to picks.json (defaults to the data directory)")
    parser.add_argument("--json", action="store_true", help="Print the ingest result as JSON")
    return parser


def build_pick_parser(default_contest: str = "circa") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="survivor-ingest pick")
    parser.add_argument("--contest", default=default_contest, help="Contest id, e.g. circa or scs")
    parser.add_argument("--entry", required=True, help="Exact entry name from the roster")
    parser.add_argument("--week", required=True, help="Week key, e.g. 4, TG or XMAS")
    parser.add_argument("--team", required=True, help="Team code, e.g. KC")
    parser.add_argument("--result", default="P", choices=("W", "L", "T", "P"), help="Pick result")
    parser.add_argument("--store", help="Path to picks.json (defaults to the data directory)")
    return parser


def format_result(result: IngestResult) -> str:
    lines = [
        f"{result.contest_id} week {result.week}: {result.summary.total_entries} picks ({result.mode})",
    ]
    for team, count in result.summary.picks_by_team.items():
        lines.append(f"  {team:<4} {count}")
    if result.mode == "entries":
        lines.append(f"Matched entries: {len(result.matched_entries)}")
        if result.missing_entries:
            lines.append(f"Missing entries: {', '.join(result.missing_entries)}")
    if result.unknown_teams:
        lines.append(f"Unknown teams: {', '.join(result.unknown_teams)}")
    return "\n".join(lines)


def run_pick(argv: Sequence[str], default_contest: str) -> int:
    args = build_pick_parser(default_contest).parse_args(argv)
    store = ContestStore(args.store)
    try:
        entry = store.upsert_pick(args.contest, args.entry, args.week, args.team, args.result)
    except (UnknownContestError, UnknownEntryError) as exc:
        print(exc.args[0], file=sys.stderr)
        return 1
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    picks = ", ".join(f"{pick.week}:{pick.team}({pick.result})" for pick in entry.picks)
    print(f"{entry.name}: {picks}")
    return 0


def run_ingest(argv: Sequence[str], default_contest: str) -> int:
    args = build_parser(default_contest).parse_args(argv)
    try:
        with open(args.file, "rb") as f:
            content = f.read()
    except OSError as exc:
        print(f"Unable to read {args.file}: {exc}", file=sys.stderr)
        return 1

    store = ContestStore(args.store)
    source_name = args.source_name or args.file
    try:
        result = store.ingest_week_picks(args.contest, content, args.week, source_name=source_name)
    except UnknownContestError as exc:
        print(exc.args[0], file=sys.stderr)
        return 1
    except IngestError as exc:
        print(f"Ingest failed: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result(result))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    settings = load_and_apply_settings()
    configure_logging(settings.logger_levels)

    argv_list = list(argv) if argv is not None else sys.argv[1:]
    if argv_list and argv_list[0] == "pick":
        return run_pick(argv_list[1:], settings.default_contest)
    return run_ingest(argv_list, settings.default_contest)


if __name__ == "__main__":
    raise SystemExit(main())
