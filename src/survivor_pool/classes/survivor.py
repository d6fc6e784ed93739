"""Derive per-entry survivor state from a contest config and its picks."""

from __future__ import annotations

import datetime
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from survivor_pool.classes.contest import ContestConfig, EntryConfig, Pick, WeekPickSummary, week_label
from survivor_pool.classes.teams import SPECIAL_POOLS, pool_for_week, team_name

logger = logging.getLogger(__name__)

SPECIAL_THRESHOLD = 0.4
ELIMINATING_RESULTS = {"L": "Loss", "T": "Tie"}


@dataclass(frozen=True)
class TeamRef:
    code: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "name": self.name}


@dataclass(frozen=True)
class UsedPick:
    week: str
    label: str
    team: str
    team_name: str
    result: str

    def to_dict(self) -> dict[str, str]:
        return {
            "week": self.week,
            "label": self.label,
            "team": self.team,
            "team_name": self.team_name,
            "result": self.result,
        }


@dataclass(frozen=True)
class SpecialUsage:
    key: str
    used: int
    available: tuple[TeamRef, ...]
    threshold: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "used": self.used,
            "available": [team.to_dict() for team in self.available],
            "threshold": self.threshold,
        }


@dataclass(frozen=True)
class EntryView:
    name: str
    eliminated: bool
    elimination_reason: str | None
    used: tuple[UsedPick, ...]
    available_teams: tuple[TeamRef, ...]
    special: Mapping[str, SpecialUsage]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "eliminated": self.eliminated,
            "elimination_reason": self.elimination_reason,
            "used": [pick.to_dict() for pick in self.used],
            "available_teams": [team.to_dict() for team in self.available_teams],
            "special": {key: usage.to_dict() for key, usage in self.special.items()},
        }


@dataclass(frozen=True)
class ContestView:
    config: ContestConfig
    active_count: int
    total_entries: int
    current_week_label: str
    current_week_date_label: str
    entries: tuple[EntryView, ...]
    week_order: tuple[str, ...]
    week_summaries: Mapping[str, WeekPickSummary] = field(default_factory=dict)
    current_week_summary: WeekPickSummary | None = None

    def entry(self, name: str) -> EntryView | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "contest_id": self.config.id,
            "title": self.config.title,
            "current_week": self.config.current_week,
            "active_count": self.active_count,
            "total_entries": self.total_entries,
            "current_week_label": self.current_week_label,
            "current_week_date_label": self.current_week_date_label,
            "week_order": list(self.week_order),
            "entries": [entry.to_dict() for entry in self.entries],
            "week_summaries": {week: summary.to_dict() for week, summary in self.week_summaries.items()},
            "current_week_summary": self.current_week_summary.to_dict() if self.current_week_summary else None,
        }


def format_date_label(date_iso: str | None) -> str:
    """Format an ISO date as e.g. "Sep 28"; unparseable input is returned as-is."""
    if not date_iso:
        return ""
    try:
        parsed = datetime.date.fromisoformat(date_iso)
    except ValueError:
        return date_iso
    return f"{parsed:%b} {parsed.day}"


def _team_refs(teams) -> tuple[TeamRef, ...]:
    return tuple(TeamRef(code=team, name=team_name(team)) for team in teams)


def _elimination_reason(pick: Pick) -> str:
    outcome = ELIMINATING_RESULTS.get(pick.result, "Loss")
    return f"{outcome} in {week_label(pick.week)} ({team_name(pick.team)})"


def compute_entry_view(
    entry: EntryConfig,
    order_index: Mapping[str, int],
    current_week: str,
    current_index: int,
    special_threshold: float = SPECIAL_THRESHOLD,
) -> EntryView:
    # weeks missing from the contest order sort after every known week
    unknown_index = len(order_index)

    def index_of(pick: Pick) -> int:
        return order_index.get(pick.week, unknown_index)

    unknown_weeks = sorted({pick.week for pick in entry.picks if pick.week not in order_index})
    if unknown_weeks:
        logger.warning("Entry %s has picks in unknown weeks: %s", entry.name, ", ".join(unknown_weeks))

    ordered = sorted(entry.picks, key=index_of)
    through_current = [pick for pick in ordered if index_of(pick) <= current_index]

    elimination_pick = next((pick for pick in through_current if pick.result in ELIMINATING_RESULTS), None)
    eliminated = elimination_pick is not None

    used_set = {pick.team for pick in through_current}
    prior_set = {pick.team for pick in ordered if index_of(pick) < current_index}

    available: tuple[str, ...] = ()
    if not eliminated:
        available = tuple(team for team in pool_for_week(current_week) if team not in prior_set)

    special = {
        key: SpecialUsage(
            key=key,
            used=sum(1 for team in used_set if team in subset),
            available=_team_refs(team for team in subset if team not in prior_set),
            threshold=math.ceil(len(subset) * special_threshold),
        )
        for key, subset in SPECIAL_POOLS.items()
    }

    return EntryView(
        name=entry.name,
        eliminated=eliminated,
        elimination_reason=_elimination_reason(elimination_pick) if elimination_pick else None,
        used=tuple(
            UsedPick(
                week=pick.week,
                label=week_label(pick.week),
                team=pick.team,
                team_name=team_name(pick.team),
                result=pick.result,
            )
            for pick in through_current
        ),
        available_teams=_team_refs(available),
        special=special,
    )


def compute_contest_view(
    config: ContestConfig,
    week_summaries: Mapping[str, WeekPickSummary] | None = None,
    *,
    special_threshold: float = SPECIAL_THRESHOLD,
) -> ContestView:
    """Recompute the full contest view; never mutates ``config``."""
    order = config.week_order()
    order_index = {week: index for index, week in enumerate(order)}
    if config.current_week not in order_index:
        logger.warning("Current week %s not in week order for %s", config.current_week, config.id)
    current_index = order_index.get(config.current_week, len(order) - 1)

    entries = tuple(
        compute_entry_view(entry, order_index, config.current_week, current_index, special_threshold)
        for entry in config.entries
    )
    summaries = dict(week_summaries or {})

    return ContestView(
        config=config,
        active_count=sum(1 for entry in entries if not entry.eliminated),
        total_entries=len(config.entries),
        current_week_label=week_label(config.current_week),
        current_week_date_label=format_date_label(config.week_dates.get(config.current_week)),
        entries=entries,
        week_order=tuple(order),
        week_summaries=summaries,
        current_week_summary=summaries.get(config.current_week),
    )
