"""Parse uploaded weekly pick files into roster picks or field-wide team counts.

An upload is one of three shapes, tried in order:

1. an aggregated standings report (``SEAHAWKS 412 11.2%`` lines, optionally a
   "current live entries" total),
2. JSON, either a bare array of records or ``{"rows": [...]}``,
3. delimited text (comma, tab, pipe or semicolon) with or without a header.

Unresolvable team labels never abort an upload; they are reported back in
``unknown_teams``. Whole-upload problems raise an ``IngestError`` subclass.
"""

from __future__ import annotations

import csv
import datetime
import json
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Literal, Mapping, Sequence

from survivor_pool.classes.contest import (
    EntryConfig,
    WeekPickSummary,
    get_contest,
    normalize_entry_key,
    normalize_week_input,
    sorted_team_counts,
)
from survivor_pool.classes.teams import resolve_team_from_wordmark, resolve_upload_team

logger = logging.getLogger(__name__)

IngestMode = Literal["entries", "summary"]

ENTRY_HEADER_TOKENS = frozenset({"entry", "entryname", "entryid", "entry#", "name"})
TEAM_HEADER_TOKENS = frozenset({"team", "teamname", "teamcode", "selection", "pick", "pickteam"})
WEEK_HEADER_TOKENS = frozenset({"week", "weeknumber", "weekid", "week#", "weekkey"})

# first present key wins
ENTRY_FIELD_KEYS = ("entryName", "entry_name", "entry", "name", "Entry", "EntryName", "entry_id", "entryId")
TEAM_FIELD_KEYS = ("team", "Team", "pick", "Pick", "selection", "Selection", "teamCode", "team_code")
WEEK_FIELD_KEYS = ("week", "Week", "weekNumber", "week_number", "weekId", "week_id", "weekKey")

DELIMITERS = (",", "\t", "|", ";")
DELIMITER_SAMPLE_LINES = 10

_LIVE_ENTRIES_RE = re.compile(r"(?:current|total)\s+live\s+entries", re.IGNORECASE)
_TOTAL_RE = re.compile(r"(\d{3,})")
_REPORT_ROW_RE = re.compile(
    r"^([A-Z0-9&'.\-\s]+?)\s+([\d,]{1,6})(?:\s+(\d+(?:\.\d+)?)%?)?$",
    re.IGNORECASE,
)
_REPORT_NOISE_RE = re.compile(r"TEAM|SELECTIONS|%")
_HEADER_KEY_RE = re.compile(r"[^a-z0-9#]+")
_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")


class IngestError(ValueError):
    """An upload that cannot produce any picks."""


class EmptyUploadError(IngestError):
    pass


class NoTeamCountsError(IngestError):
    pass


class NoPicksDetectedError(IngestError):
    pass


class NoWeekPicksError(IngestError):
    pass


class NoValidPicksError(IngestError):
    pass


class MalformedRowError(IngestError):
    pass


@dataclass(frozen=True)
class PickRow:
    entry_name: str
    team: str
    week: str | None = None


@dataclass
class AggregateSummary:
    picks_by_team: dict[str, int]
    total_entries: int | None = None
    unknown_labels: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class MatchedEntry:
    name: str
    team: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "team": self.team}


@dataclass
class IngestResult:
    contest_id: str
    week: str
    mode: IngestMode
    summary: WeekPickSummary
    matched_entries: list[MatchedEntry]
    missing_entries: list[str]
    unknown_teams: list[str]
    entries: list[EntryConfig]

    def to_dict(self) -> dict[str, Any]:
        return {
            "contest_id": self.contest_id,
            "week": self.week,
            "mode": self.mode,
            "summary": self.summary.to_dict(),
            "matched_entries": [entry.to_dict() for entry in self.matched_entries],
            "missing_entries": list(self.missing_entries),
            "unknown_teams": list(self.unknown_teams),
        }


def decode_upload(raw_content: bytes | str) -> str:
    if isinstance(raw_content, bytes):
        return raw_content.decode("utf-8-sig", errors="replace")
    return raw_content.lstrip("\ufeff")


def _non_empty_lines(content: str) -> list[str]:
    return [line.strip() for line in _LINE_SPLIT_RE.split(content) if line.strip()]


def parse_aggregate_report(content: str) -> AggregateSummary | None:
    """Parse a field-wide standings report, or return None if no line names a team."""
    lines = _non_empty_lines(content.replace("\u00a0", " "))

    total_entries: int | None = None
    report_lines: list[str] = []
    for line in lines:
        if _LIVE_ENTRIES_RE.search(line):
            total_match = _TOTAL_RE.search(line.replace(",", ""))
            if total_match:
                total_entries = int(total_match.group(1))
            continue
        report_lines.append(line)

    picks_by_team: Counter[str] = Counter()
    unknown_labels: set[str] = set()
    for line in report_lines:
        match = _REPORT_ROW_RE.match(line)
        if not match:
            continue
        label = match.group(1).strip()
        count = int(match.group(2).replace(",", "") or 0)
        if count <= 0:
            continue
        code = resolve_team_from_wordmark(label)
        if code:
            picks_by_team[code] += count
        elif not _REPORT_NOISE_RE.search(label.upper()):
            unknown_labels.add(label)

    if not picks_by_team:
        return None

    return AggregateSummary(
        picks_by_team=dict(picks_by_team),
        total_entries=total_entries,
        unknown_labels=sorted(unknown_labels, key=str.lower),
    )


def pick_first(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the value of the first key present (and not None) in ``record``."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _cell_text(value: Any) -> str:
    if value is None or value is False or value == "":
        return ""
    return str(value).strip()


def parse_json_rows(content: str) -> list[PickRow] | None:
    try:
        parsed = json.loads(content)
    except ValueError:
        return None

    if isinstance(parsed, list):
        records = parsed
    elif isinstance(parsed, dict) and isinstance(parsed.get("rows"), list):
        records = parsed["rows"]
    else:
        return None

    rows: list[PickRow] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        entry_name = _cell_text(pick_first(record, ENTRY_FIELD_KEYS))
        team = _cell_text(pick_first(record, TEAM_FIELD_KEYS))
        # records missing an entry or team are skipped
        if not entry_name or not team:
            continue
        rows.append(PickRow(entry_name, team, normalize_week_input(pick_first(record, WEEK_FIELD_KEYS))))
    return rows or None


def detect_delimiter(lines: Iterable[str]) -> str:
    sample = list(lines)
    counts = [(delimiter, sum(line.count(delimiter) for line in sample)) for delimiter in DELIMITERS]
    # stable sort keeps DELIMITERS order on ties
    counts.sort(key=lambda item: item[1], reverse=True)
    return counts[0][0]


def split_delimited_line(line: str, delimiter: str) -> list[str]:
    """Quote-aware split; a doubled quote inside a quoted field is a literal quote."""
    try:
        cells = next(csv.reader([line], delimiter=delimiter, skipinitialspace=True), [])
    except csv.Error as exc:
        raise MalformedRowError(f"Unreadable row: {line[:40]!r} ({exc})") from exc
    return [cell.strip() for cell in cells]


def normalize_header_key(value: str) -> str:
    return _HEADER_KEY_RE.sub("", value.lower())


def _first_index(tokens: list[str], wanted: frozenset[str]) -> int | None:
    for index, token in enumerate(tokens):
        if token in wanted:
            return index
    return None


def _cell(row: list[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index].strip()


def parse_delimited_rows(content: str) -> list[PickRow] | None:
    lines = _non_empty_lines(content)
    if not lines:
        return None

    delimiter = detect_delimiter(lines[:DELIMITER_SAMPLE_LINES])
    table = [split_delimited_line(line, delimiter) for line in lines]

    start = 0
    entry_index: int | None = 0
    team_index: int | None = 1
    week_index: int | None = None

    header_tokens = [normalize_header_key(cell) for cell in table[0]]
    has_header = any(token in ENTRY_HEADER_TOKENS or token in TEAM_HEADER_TOKENS for token in header_tokens)
    if has_header:
        entry_index = _first_index(header_tokens, ENTRY_HEADER_TOKENS)
        team_index = _first_index(header_tokens, TEAM_HEADER_TOKENS)
        week_index = _first_index(header_tokens, WEEK_HEADER_TOKENS)
        if entry_index is None:
            entry_index = 0
        if team_index is None:
            team_index = 1
        start = 1
    elif len(table[0]) > 2:
        # headerless three-plus columns: assume entry, team, week
        week_index = 2

    rows: list[PickRow] = []
    for row in table[start:]:
        entry_name = _cell(row, entry_index)
        team = _cell(row, team_index)
        if not entry_name or not team:
            continue
        week = normalize_week_input(_cell(row, week_index)) if week_index is not None else None
        rows.append(PickRow(entry_name, team, week))
    return rows


UploadParser = Callable[[str], "AggregateSummary | list[PickRow] | None"]

# evaluated top to bottom, first non-None result wins
FORMAT_PARSERS: tuple[tuple[str, UploadParser], ...] = (
    ("aggregate", parse_aggregate_report),
    ("json", parse_json_rows),
    ("delimited", parse_delimited_rows),
)


def detect_upload(content: str) -> tuple[str, AggregateSummary | list[PickRow]] | None:
    for name, parser in FORMAT_PARSERS:
        parsed = parser(content)
        if parsed is not None:
            return name, parsed
    return None


def _utc_stamp(now: datetime.datetime | None) -> str:
    stamp = now or datetime.datetime.now(datetime.timezone.utc)
    return stamp.isoformat()


def _summary_result(
    contest_id: str,
    week: str,
    aggregate: AggregateSummary,
    roster: Sequence[EntryConfig],
    source_name: str | None,
    now: datetime.datetime | None,
) -> IngestResult:
    aggregate_total = sum(aggregate.picks_by_team.values())
    if not aggregate_total:
        raise NoTeamCountsError("Unable to recognize any team counts in uploaded file.")

    summary = WeekPickSummary(
        week=week,
        total_entries=aggregate.total_entries if aggregate.total_entries is not None else aggregate_total,
        uploaded_at=_utc_stamp(now),
        picks_by_team=sorted_team_counts(aggregate.picks_by_team),
        source_name=source_name,
    )
    return IngestResult(
        contest_id=contest_id,
        week=week,
        mode="summary",
        summary=summary,
        matched_entries=[],
        missing_entries=[],
        unknown_teams=list(aggregate.unknown_labels),
        entries=[entry.copy() for entry in roster],
    )


def _entries_result(
    contest_id: str,
    week: str,
    rows: list[PickRow],
    roster: Sequence[EntryConfig],
    source_name: str | None,
    now: datetime.datetime | None,
) -> IngestResult:
    if not rows:
        raise NoPicksDetectedError("No picks detected in uploaded file.")

    week_rows = [row for row in rows if (row.week or week) == week]
    if not week_rows:
        raise NoWeekPicksError(f"No picks found for week {week}.")

    entry_key_to_index = {normalize_entry_key(entry.name): index for index, entry in enumerate(roster)}
    matched: dict[int, str] = {}
    unknown_teams: set[str] = set()
    picks_by_team: Counter[str] = Counter()

    for row in week_rows:
        team_code = resolve_upload_team(row.team)
        if not team_code:
            unknown_teams.add(row.team.strip())
            continue
        picks_by_team[team_code] += 1
        entry_index = entry_key_to_index.get(normalize_entry_key(row.entry_name))
        if entry_index is not None:
            matched[entry_index] = team_code

    total_entries = sum(picks_by_team.values())
    if total_entries == 0:
        raise NoValidPicksError(f"No valid picks found for week {week}.")

    entries = [entry.copy() for entry in roster]
    for index, team_code in matched.items():
        entries[index] = entries[index].upsert_pick(week, team_code, "P")

    summary = WeekPickSummary(
        week=week,
        total_entries=total_entries,
        uploaded_at=_utc_stamp(now),
        picks_by_team=sorted_team_counts(picks_by_team),
        source_name=source_name,
    )
    return IngestResult(
        contest_id=contest_id,
        week=week,
        mode="entries",
        summary=summary,
        matched_entries=sorted(
            (MatchedEntry(roster[index].name, team) for index, team in matched.items()),
            key=lambda item: item.name.lower(),
        ),
        missing_entries=sorted(
            (entry.name for index, entry in enumerate(roster) if index not in matched),
            key=str.lower,
        ),
        unknown_teams=sorted((team for team in unknown_teams if team), key=str.lower),
        entries=entries,
    )


def ingest_week_picks(
    contest_id: str,
    raw_content: bytes | str,
    target_week: str | None,
    roster: Sequence[EntryConfig],
    *,
    source_name: str | None = None,
    now: datetime.datetime | None = None,
) -> IngestResult:
    """Parse one uploaded picks file for ``target_week`` (default: the contest's current week).

    The returned ``entries`` is an updated copy of ``roster``; ``roster`` itself is untouched.
    """
    week = normalize_week_input(target_week) if target_week else None
    if week is None:
        week = get_contest(contest_id).current_week

    content = decode_upload(raw_content).strip()
    if not content:
        raise EmptyUploadError("Uploaded file is empty.")

    detected = detect_upload(content)
    if detected is None:
        raise NoPicksDetectedError("No picks detected in uploaded file.")

    format_name, parsed = detected
    logger.info("Parsed %s upload for %s week %s as %s", source_name or "unnamed", contest_id, week, format_name)

    if isinstance(parsed, AggregateSummary):
        result = _summary_result(contest_id, week, parsed, roster, source_name, now)
    else:
        result = _entries_result(contest_id, week, parsed, roster, source_name, now)

    if result.unknown_teams:
        logger.warning("Unrecognized team labels in upload: %s", ", ".join(result.unknown_teams))
    return result
