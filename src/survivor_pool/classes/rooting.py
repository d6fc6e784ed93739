"""Who to root for and against this week, from our picks and the field's pick counts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from survivor_pool.classes.contest import WeekPickSummary
from survivor_pool.classes.survivor import ContestView
from survivor_pool.classes.teams import team_name

ROOT_AGAINST_LIMIT = 6


@dataclass(frozen=True)
class RootingRow:
    team: str
    team_name: str
    our_count: int
    opponent_count: int
    total: int
    percent_of_field: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "team": self.team,
            "team_name": self.team_name,
            "our_count": self.our_count,
            "opponent_count": self.opponent_count,
            "total": self.total,
            "percent_of_field": self.percent_of_field,
        }


@dataclass(frozen=True)
class RootingGuide:
    root_for: tuple[RootingRow, ...]
    root_against: tuple[RootingRow, ...]
    total_picks: int
    our_total: int

    @property
    def opponent_total(self) -> int:
        return max(self.total_picks - self.our_total, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_for": [row.to_dict() for row in self.root_for],
            "root_against": [row.to_dict() for row in self.root_against],
            "total_picks": self.total_picks,
            "our_total": self.our_total,
            "opponent_total": self.opponent_total,
        }


def _field_counts(summary: WeekPickSummary) -> dict[str, int]:
    counts: dict[str, int] = {}
    for team, count in summary.picks_by_team.items():
        code = team.upper()
        counts[code] = counts.get(code, 0) + max(int(count or 0), 0)
    return counts


def _percent(total: int, field_total: int) -> float:
    return total / field_total * 100 if field_total > 0 else 0.0


def our_pick_counts(view: ContestView) -> dict[str, int]:
    """Count our entries' picks for the view's current week, in roster order."""
    current_week = view.config.current_week
    counts: dict[str, int] = {}
    for entry in view.entries:
        pick = next((used for used in entry.used if used.week == current_week), None)
        if pick is None or not pick.team:
            continue
        code = pick.team.upper()
        counts[code] = counts.get(code, 0) + 1
    return counts


def build_rooting_rows(
    view: ContestView,
    summary: WeekPickSummary,
    against_limit: int = ROOT_AGAINST_LIMIT,
) -> RootingGuide:
    field_counts = _field_counts(summary)
    total_picks = summary.total_entries or sum(field_counts.values())
    ours = our_pick_counts(view)

    root_for = []
    for team, our_count in ours.items():
        total = field_counts.get(team) or our_count
        if total <= 0:
            continue
        root_for.append(
            RootingRow(
                team=team,
                team_name=team_name(team),
                our_count=our_count,
                opponent_count=max(total - our_count, 0),
                total=total,
                percent_of_field=_percent(total, total_picks),
            )
        )
    root_for.sort(key=lambda row: (-row.our_count, -row.total))

    root_against = [
        RootingRow(
            team=team,
            team_name=team_name(team),
            our_count=0,
            opponent_count=total,
            total=total,
            percent_of_field=_percent(total, total_picks),
        )
        for team, total in field_counts.items()
        if total > 0 and team not in ours
    ]
    root_against.sort(key=lambda row: -row.total)

    return RootingGuide(
        root_for=tuple(root_for),
        root_against=tuple(root_against[: max(against_limit, 0)]),
        total_picks=total_picks,
        our_total=sum(ours.values()),
    )
