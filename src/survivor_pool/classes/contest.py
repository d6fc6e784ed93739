"""Survivor contest configuration: picks, entries, week order and built-in contests."""

from __future__ import annotations

import copy
import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Mapping

Result = Literal["W", "L", "T", "P"]
RESULTS: tuple[str, ...] = ("W", "L", "T", "P")

SPECIAL_WEEK_LABELS = {
    "TG": "Thanksgiving + Black Friday",
    "XMAS": "Christmas",
}

_DIGITS_RE = re.compile(r"\d+")
_WHITESPACE_RE = re.compile(r"\s+")


class UnknownContestError(KeyError):
    """Raised when a contest id is not one of the configured contests."""


class UnknownEntryError(KeyError):
    """Raised when an entry name is not on the contest roster."""


def _coerce_result(value: Any) -> str:
    result = str(value or "P").strip().upper()
    if result not in RESULTS:
        raise ValueError(f"Invalid pick result: {value!r}")
    return result


@dataclass
class Pick:
    week: str
    team: str
    result: str = "P"

    def to_dict(self) -> dict[str, str]:
        return {"week": self.week, "team": self.team, "result": self.result}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pick":
        return cls(
            week=str(data["week"]).strip(),
            team=str(data["team"]).strip().upper(),
            result=_coerce_result(data.get("result")),
        )


@dataclass
class EntryConfig:
    name: str
    picks: list[Pick] = field(default_factory=list)

    def pick_for_week(self, week: str) -> Pick | None:
        for pick in self.picks:
            if pick.week == week:
                return pick
        return None

    def upsert_pick(self, week: str, team: str, result: str = "P") -> "EntryConfig":
        """Return a copy with the week's pick replaced, or appended when new."""
        updated = Pick(week=week, team=team.strip().upper(), result=_coerce_result(result))
        picks = [copy.copy(pick) for pick in self.picks]
        for index, pick in enumerate(picks):
            if pick.week == week:
                picks[index] = updated
                break
        else:
            picks.append(updated)
        return EntryConfig(name=self.name, picks=picks)

    def copy(self) -> "EntryConfig":
        return EntryConfig(name=self.name, picks=[copy.copy(pick) for pick in self.picks])

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "picks": [pick.to_dict() for pick in self.picks]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EntryConfig":
        return cls(
            name=str(data["name"]),
            picks=[Pick.from_dict(pick) for pick in data.get("picks") or []],
        )


@dataclass
class ContestConfig:
    """Static contest metadata plus the entry roster.

    ``week_dates`` is ordered: its key order is the contest's week sequence.
    """

    id: str
    title: str
    short_title: str
    season: int
    current_week: str
    week_dates: dict[str, str]
    entries: list[EntryConfig]
    buy_in: int
    initial_entries: int
    live_entries: int
    total_prize_pool: int

    def week_order(self) -> list[str]:
        return list(self.week_dates)

    def with_entries(self, entries: Iterable[EntryConfig]) -> "ContestConfig":
        return dataclasses.replace(
            self,
            week_dates=dict(self.week_dates),
            entries=[entry.copy() for entry in entries],
        )

    def with_current_week(self, week: str) -> "ContestConfig":
        return dataclasses.replace(self, current_week=week)


@dataclass
class WeekPickSummary:
    week: str
    total_entries: int
    uploaded_at: str
    picks_by_team: dict[str, int]
    source_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "week": self.week,
            "total_entries": self.total_entries,
            "uploaded_at": self.uploaded_at,
            "picks_by_team": dict(self.picks_by_team),
        }
        if self.source_name:
            data["source_name"] = self.source_name
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WeekPickSummary":
        return cls(
            week=str(data["week"]),
            total_entries=int(data.get("total_entries") or 0),
            uploaded_at=str(data.get("uploaded_at") or ""),
            picks_by_team={str(k): int(v) for k, v in (data.get("picks_by_team") or {}).items()},
            source_name=data.get("source_name") or None,
        )


def sorted_team_counts(counts: Mapping[str, int]) -> dict[str, int]:
    """Order team counts by count descending, ties alphabetical by code."""
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def week_label(week: str) -> str:
    return SPECIAL_WEEK_LABELS.get(week, f"Week {week}")


def normalize_week_input(value: Any) -> str | None:
    """Normalize a week cell: 4, "4", "Week 4", "wk4", "tg" -> "4" / "TG"."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return str(int(value))
    text = str(value).strip()
    if not text:
        return None
    upper = text.upper()
    if upper in SPECIAL_WEEK_LABELS:
        return upper
    digits = _DIGITS_RE.search(upper)
    return digits.group(0) if digits else None


def normalize_entry_key(value: str | None) -> str:
    """Trim, lowercase and collapse whitespace so roster names match uploads."""
    if not value:
        return ""
    return _WHITESPACE_RE.sub(" ", value.strip().lower())


def merge_entries(
    base_entries: Iterable[EntryConfig], persisted_entries: Iterable[EntryConfig] | None = None
) -> list[EntryConfig]:
    """Overlay persisted entries on the base roster by exact name, keeping roster order."""
    overrides = {entry.name: entry for entry in persisted_entries or []}
    return [overrides.get(entry.name, entry).copy() for entry in base_entries]


def implied_prize(pool: float, live: int) -> float:
    """Prize equity per live entry."""
    return pool / live if live > 0 else 0.0


def _picks(*items: tuple[str, str, str]) -> list[Pick]:
    return [Pick(week=week, team=team, result=result) for week, team, result in items]


CIRCA_WEEK_DATES = {
    "1": "2025-09-07",
    "2": "2025-09-14",
    "3": "2025-09-21",
    "4": "2025-09-28",
    "5": "2025-10-05",
    "6": "2025-10-12",
    "7": "2025-10-19",
    "8": "2025-10-26",
    "9": "2025-11-02",
    "10": "2025-11-09",
    "11": "2025-11-16",
    "12": "2025-11-23",
    "TG": "2025-11-27",
    "13": "2025-11-30",
    "14": "2025-12-07",
    "15": "2025-12-14",
    "XMAS": "2025-12-25",
    "16": "2025-12-28",
    "17": "2026-01-04",
}

SCS_WEEK_DATES = {week: date for week, date in CIRCA_WEEK_DATES.items() if week not in SPECIAL_WEEK_LABELS}

CIRCA_CONTEST = ContestConfig(
    id="circa",
    title="DeadlineNoon \u2014 Circa Survivor",
    short_title="Circa Survivor",
    season=2025,
    current_week="4",
    week_dates=CIRCA_WEEK_DATES,
    entries=[
        EntryConfig("Cremaster Reflex 1", _picks(("1", "ARI", "W"), ("2", "LAR", "W"), ("3", "SEA", "W"))),
        EntryConfig("Cremaster Reflex 2", _picks(("1", "DEN", "W"), ("2", "ARI", "W"), ("3", "TB", "W"))),
        EntryConfig("BulletProof Tiger 1", _picks(("1", "DEN", "W"), ("2", "ARI", "W"), ("3", "KC", "W"))),
        EntryConfig("BulletProof Tiger 2", _picks(("1", "DEN", "W"), ("2", "BAL", "W"), ("3", "SEA", "W"))),
        EntryConfig("BulletProof Tiger 3", _picks(("1", "ARI", "W"), ("2", "DAL", "W"), ("3", "BUF", "W"))),
        EntryConfig("ChiPhi 1", _picks(("1", "JAX", "W"), ("2", "DET", "W"), ("3", "KC", "W"))),
        EntryConfig("Creamsicle Cabana", _picks(("1", "WAS", "W"), ("2", "DAL", "W"), ("3", "SEA", "W"))),
        EntryConfig("Gambling Grocer-7", _picks(("1", "CIN", "W"), ("2", "DET", "W"), ("3", "KC", "W"))),
        EntryConfig("SlyBiz", _picks(("1", "ARI", "W"), ("2", "DAL", "W"), ("3", "GB", "L"))),
    ],
    buy_in=1000,
    initial_entries=18718,
    live_entries=16908,
    total_prize_pool=18718000,
)

SCS_CONTEST = ContestConfig(
    id="scs",
    title="DeadlineNoon \u2014 SuperContest Survivor",
    short_title="SuperContest Survivor",
    season=2025,
    current_week="4",
    week_dates=SCS_WEEK_DATES,
    entries=[
        EntryConfig("Doigetashirtwiththat", _picks(("1", "JAX", "W"), ("2", "DET", "W"), ("3", "KC", "W"))),
    ],
    buy_in=5000,
    initial_entries=111,
    live_entries=81,
    total_prize_pool=555000,
)

CONTESTS: Mapping[str, ContestConfig] = {
    CIRCA_CONTEST.id: CIRCA_CONTEST,
    SCS_CONTEST.id: SCS_CONTEST,
}


def get_contest(contest_id: str) -> ContestConfig:
    """Return a private copy of a built-in contest."""
    key = (contest_id or "").strip().lower()
    if key not in CONTESTS:
        raise UnknownContestError(f"Unknown contest: {contest_id}")
    base = CONTESTS[key]
    return base.with_entries(base.entries)
