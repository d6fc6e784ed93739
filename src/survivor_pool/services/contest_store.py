"""JSON-file persistence for contest rosters and weekly pick summaries.

The store file maps each contest id to ``{entries, updated_at, week_summaries}``.
Persisted entries are overlaid on the base roster by name, so renaming or
dropping an entry from the roster hides its persisted picks. Writes replace the
whole file; the last writer wins.
"""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from survivor_pool.classes import pick_ingest
from survivor_pool.classes.contest import (
    CONTESTS,
    ContestConfig,
    EntryConfig,
    UnknownEntryError,
    WeekPickSummary,
    get_contest,
    merge_entries,
    normalize_week_input,
)
from survivor_pool.classes.pick_ingest import IngestResult
from survivor_pool.classes.survivor import SPECIAL_THRESHOLD, ContestView, compute_contest_view
from survivor_pool.paths import data_file, repo_file

PICKS_FILE = "picks.json"
ROSTERS_FILE = "rosters.yaml"


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def load_rosters(path: Path, logger: logging.Logger | None = None) -> dict[str, list[EntryConfig]]:
    """Read seed rosters from YAML; a missing or malformed file yields no overrides."""
    log = logger or logging.getLogger(__name__)
    if not path.is_file():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        log.warning("Ignoring unreadable roster file %s: %s", path, exc)
        return {}
    if not isinstance(raw, dict):
        log.warning("Ignoring roster file %s: expected a mapping of contest ids", path)
        return {}

    rosters: dict[str, list[EntryConfig]] = {}
    for contest_id, entries in raw.items():
        key = str(contest_id).strip().lower()
        if key not in CONTESTS:
            log.warning("Ignoring roster for unknown contest %s", contest_id)
            continue
        try:
            rosters[key] = [EntryConfig.from_dict(entry) for entry in entries or []]
        except (KeyError, TypeError, ValueError) as exc:
            log.warning("Ignoring malformed roster for %s: %s", key, exc)
    return rosters


class ContestStore:
    def __init__(
        self,
        path: Path | str | None = None,
        *,
        roster_path: Path | str | None = None,
        special_threshold: float = SPECIAL_THRESHOLD,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.path = Path(path) if path else data_file(PICKS_FILE)
        self.roster_path = Path(roster_path) if roster_path else repo_file(ROSTERS_FILE)
        self.special_threshold = special_threshold
        self._rosters: dict[str, list[EntryConfig]] | None = None

    def base_entries(self, contest_id: str) -> list[EntryConfig]:
        """Seed roster for a contest: rosters.yaml when it lists the contest, else the built-in one."""
        config = get_contest(contest_id)
        if self._rosters is None:
            self._rosters = load_rosters(self.roster_path, self.logger)
        roster = self._rosters.get(config.id)
        return [entry.copy() for entry in roster] if roster else config.entries

    def _seed(self) -> dict[str, Any]:
        stamp = _now_iso()
        return {
            contest_id: {
                "entries": [entry.to_dict() for entry in self.base_entries(contest_id)],
                "updated_at": stamp,
                "week_summaries": {},
            }
            for contest_id in CONTESTS
        }

    def read(self) -> dict[str, Any]:
        if not self.path.is_file():
            self.logger.info("Seeding contest store at %s", self.path)
            data = self._seed()
            self.write(data)
            return data
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Contest store {self.path} must contain a JSON object")
        for contest in data.values():
            if isinstance(contest, dict):
                contest.setdefault("week_summaries", {})
        return data

    def write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def _entries(self, contest_id: str, data: dict[str, Any]) -> list[EntryConfig]:
        persisted = (data.get(contest_id) or {}).get("entries") or []
        return merge_entries(
            self.base_entries(contest_id),
            [EntryConfig.from_dict(entry) for entry in persisted],
        )

    def get_contest_config(self, contest_id: str) -> ContestConfig:
        config = get_contest(contest_id)
        return config.with_entries(self._entries(config.id, self.read()))

    def get_week_summaries(self, contest_id: str) -> dict[str, WeekPickSummary]:
        config = get_contest(contest_id)
        raw = (self.read().get(config.id) or {}).get("week_summaries") or {}
        return {str(week): WeekPickSummary.from_dict(summary) for week, summary in raw.items()}

    def get_contest_view(self, contest_id: str) -> ContestView:
        config = self.get_contest_config(contest_id)
        return compute_contest_view(
            config,
            self.get_week_summaries(config.id),
            special_threshold=self.special_threshold,
        )

    def updated_at(self, contest_id: str) -> str | None:
        config = get_contest(contest_id)
        return (self.read().get(config.id) or {}).get("updated_at")

    def _persist(
        self,
        contest_id: str,
        data: dict[str, Any],
        entries: list[EntryConfig],
        summary: WeekPickSummary | None = None,
    ) -> None:
        existing = data.get(contest_id) or {}
        summaries = dict(existing.get("week_summaries") or {})
        if summary is not None:
            summaries[summary.week] = summary.to_dict()
        data[contest_id] = {
            "entries": [entry.to_dict() for entry in entries],
            "updated_at": _now_iso(),
            "week_summaries": summaries,
        }
        self.write(data)

    def upsert_pick(
        self,
        contest_id: str,
        entry_name: str,
        week: str,
        team: str,
        result: str = "P",
    ) -> EntryConfig:
        """Set (or replace) one entry's pick for a week and persist it."""
        config = get_contest(contest_id)
        week_key = normalize_week_input(week)
        if week_key is None:
            raise ValueError(f"Invalid week: {week!r}")
        if not team or not team.strip():
            raise ValueError("Team is required")

        data = self.read()
        entries = self._entries(config.id, data)
        for index, entry in enumerate(entries):
            if entry.name == entry_name:
                break
        else:
            raise UnknownEntryError(f"Entry not found: {entry_name}")

        updated = entries[index].upsert_pick(week_key, team, result or "P")
        entries[index] = updated
        self._persist(config.id, data, entries)
        self.logger.info("Saved %s week %s pick for %s", config.id, week_key, entry_name)
        return updated

    def ingest_week_picks(
        self,
        contest_id: str,
        raw_content: bytes | str,
        week: str | None = None,
        *,
        source_name: str | None = None,
        now: datetime.datetime | None = None,
    ) -> IngestResult:
        """Run an upload through the pick pipeline and persist entries plus the week summary."""
        config = get_contest(contest_id)
        data = self.read()
        roster = self._entries(config.id, data)
        result = pick_ingest.ingest_week_picks(
            config.id,
            raw_content,
            week,
            roster,
            source_name=source_name,
            now=now,
        )
        self._persist(config.id, data, result.entries, result.summary)
        self.logger.info(
            "Stored %s week %s summary (%s mode, %d entries)",
            config.id,
            result.week,
            result.mode,
            result.summary.total_entries,
        )
        return result
