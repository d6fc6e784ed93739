"""Print a contest's entry state and, optionally, this week's rooting guide."""

import argparse
import json
import sys
from typing import Sequence

from dotenv import load_dotenv

from survivor_pool.classes.contest import UnknownContestError, implied_prize
from survivor_pool.classes.rooting import RootingGuide, build_rooting_rows
from survivor_pool.classes.survivor import ContestView, EntryView
from survivor_pool.config import load_and_apply_settings
from survivor_pool.logging import configure_logging
from survivor_pool.services.contest_store import ContestStore


def build_parser(default_contest: str = "circa") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="survivor-view")
    parser.add_argument("contest", nargs="?", default=default_contest, help="Contest id, e.g. circa or scs")
    parser.add_argument("--entry", help="Only show this entry")
    parser.add_argument("--rooting", action="store_true", help="Show root-for / root-against rows for the current week")
    parser.add_argument("--store", help="Path to picks.json (defaults to the data directory)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    return parser


def format_entry(entry: EntryView) -> list[str]:
    status = f"OUT ({entry.elimination_reason})" if entry.eliminated else "alive"
    used = ", ".join(f"{pick.week}:{pick.team}" for pick in entry.used) or "-"
    lines = [f"{entry.name} [{status}]", f"  used: {used}"]
    if not entry.eliminated:
        lines.append(f"  available: {len(entry.available_teams)} teams")
    for usage in entry.special.values():
        lines.append(
            f"  {usage.key}: used {usage.used}/{usage.threshold}, {len(usage.available)} left"
        )
    return lines


def format_view(view: ContestView, entries: Sequence[EntryView]) -> str:
    config = view.config
    header = f"{config.title} | {view.current_week_label}"
    if view.current_week_date_label:
        header += f" ({view.current_week_date_label})"
    lines = [
        header,
        f"Our entries alive: {view.active_count}/{view.total_entries}",
        f"Field: {config.live_entries}/{config.initial_entries} live, "
        f"${implied_prize(config.total_prize_pool, config.live_entries):,.0f} per entry",
    ]
    for entry in entries:
        lines.extend(format_entry(entry))
    return "\n".join(lines)


def format_rooting(guide: RootingGuide) -> str:
    lines = [f"{guide.total_picks} picks captured, ours {guide.our_total}", "Root for:"]
    for row in guide.root_for:
        lines.append(f"  {row.team:<4} ours {row.our_count}, field {row.total} ({row.percent_of_field:.1f}%)")
    lines.append("Root against:")
    for row in guide.root_against:
        lines.append(f"  {row.team:<4} field {row.total} ({row.percent_of_field:.1f}%)")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    settings = load_and_apply_settings()
    configure_logging(settings.logger_levels)
    args = build_parser(settings.default_contest).parse_args(argv)

    store = ContestStore(args.store, special_threshold=settings.special_week_threshold)
    try:
        view = store.get_contest_view(args.contest)
    except UnknownContestError as exc:
        print(exc.args[0], file=sys.stderr)
        return 1

    entries = list(view.entries)
    if args.entry:
        entry = view.entry(args.entry)
        if entry is None:
            print(f"Entry not found: {args.entry}", file=sys.stderr)
            return 1
        entries = [entry]

    guide = None
    if args.rooting:
        if view.current_week_summary is None:
            print(f"No pick summary uploaded for {view.current_week_label}", file=sys.stderr)
            return 1
        guide = build_rooting_rows(view, view.current_week_summary)

    if args.json:
        payload = view.to_dict()
        payload["entries"] = [entry.to_dict() for entry in entries]
        if guide is not None:
            payload["rooting"] = guide.to_dict()
        print(json.dumps(payload, indent=2))
        return 0

    print(format_view(view, entries))
    if guide is not None:
        print(format_rooting(guide))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
