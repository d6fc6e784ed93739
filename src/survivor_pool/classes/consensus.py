"""Betting-consensus data model shared by the PDF parser, override store and rooting guide."""

from __future__ import annotations

import dataclasses
import datetime
import math
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

MarketKey = Literal["moneyline", "spread"]
MARKETS: tuple[str, ...] = ("moneyline", "spread")
SOURCE_KEYS: tuple[str, ...] = ("scoresandodds", "vsin", "manual")
MANUAL_SOURCE = "manual"

PERCENT_SUM_TOLERANCE = 1.0


def normalize_percent(value: Any) -> float | None:
    """Coerce to a number clamped to [-100, 100]; non-numeric input gives None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return max(-100.0, min(100.0, number))


def clamp_percent(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return max(0.0, min(100.0, value))


@dataclass
class ConsensusTeam:
    team: str
    label: str | None = None
    bet_percent: float | None = None
    money_percent: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "team": self.team,
            "bet_percent": self.bet_percent,
            "money_percent": self.money_percent,
        }
        if self.label is not None:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsensusTeam":
        return cls(
            team=str(data["team"]),
            label=data.get("label"),
            bet_percent=normalize_percent(data.get("bet_percent")),
            money_percent=normalize_percent(data.get("money_percent")),
        )


@dataclass
class ConsensusGame:
    """One matchup in one market; ``teams`` is always (away, home)."""

    market: str
    matchup: str
    teams: tuple[ConsensusTeam, ConsensusTeam]
    start_iso: str | None = None
    event_id: str | None = None

    def __post_init__(self) -> None:
        if self.market not in MARKETS:
            raise ValueError(f"Unknown market: {self.market!r}")
        self.teams = tuple(self.teams)
        if len(self.teams) != 2:
            raise ValueError(f"Consensus game needs exactly two teams, got {len(self.teams)}")

    def clone(self) -> "ConsensusGame":
        return ConsensusGame(
            market=self.market,
            matchup=self.matchup,
            teams=tuple(dataclasses.replace(team) for team in self.teams),
            start_iso=self.start_iso,
            event_id=self.event_id,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "market": self.market,
            "matchup": self.matchup,
            "start_iso": self.start_iso,
            "teams": [team.to_dict() for team in self.teams],
        }
        if self.event_id is not None:
            data["event_id"] = self.event_id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsensusGame":
        return cls(
            market=str(data["market"]),
            matchup=str(data.get("matchup") or ""),
            teams=tuple(ConsensusTeam.from_dict(team) for team in data.get("teams") or []),
            start_iso=data.get("start_iso"),
            event_id=data.get("event_id"),
        )


def percent_pair_sum_ok(game: ConsensusGame, tolerance: float = PERCENT_SUM_TOLERANCE) -> bool:
    """Check that each present bet/money pair sums to roughly 100."""
    away, home = game.teams
    for first, second in (
        (away.bet_percent, home.bet_percent),
        (away.money_percent, home.money_percent),
    ):
        if first is None or second is None:
            continue
        if abs(first + second - 100) > tolerance:
            return False
    return True


def empty_markets() -> dict[str, list[ConsensusGame]]:
    return {market: [] for market in MARKETS}


@dataclass
class ConsensusSource:
    source: str
    fetched_at: str
    markets: dict[str, list[ConsensusGame]] = field(default_factory=empty_markets)

    def clone(self) -> "ConsensusSource":
        return ConsensusSource(
            source=self.source,
            fetched_at=self.fetched_at,
            markets={market: [game.clone() for game in self.markets.get(market, [])] for market in MARKETS},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "fetched_at": self.fetched_at,
            "markets": {market: [game.to_dict() for game in self.markets.get(market, [])] for market in MARKETS},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsensusSource":
        markets = data.get("markets") or {}
        return cls(
            source=str(data["source"]),
            fetched_at=str(data.get("fetched_at") or ""),
            markets={market: [ConsensusGame.from_dict(game) for game in markets.get(market) or []] for market in MARKETS},
        )


@dataclass
class ConsensusSnapshot:
    """Consensus keyed by provider; a provider with nothing to report maps to None."""

    sources: dict[str, ConsensusSource | None] = field(
        default_factory=lambda: {key: None for key in SOURCE_KEYS}
    )

    @property
    def manual(self) -> ConsensusSource | None:
        return self.sources.get(MANUAL_SOURCE)

    def clone(self) -> "ConsensusSnapshot":
        return ConsensusSnapshot(
            sources={key: source.clone() if source else None for key, source in self.sources.items()}
        )

    def to_dict(self) -> dict[str, Any]:
        return {"sources": {key: source.to_dict() if source else None for key, source in self.sources.items()}}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsensusSnapshot":
        raw_sources = data.get("sources")
        if not isinstance(raw_sources, Mapping):
            raise ValueError("Consensus snapshot requires a sources mapping")
        sources: dict[str, ConsensusSource | None] = {key: None for key in SOURCE_KEYS}
        for key, source in raw_sources.items():
            sources[str(key)] = ConsensusSource.from_dict(source) if source else None
        return cls(sources=sources)


def parse_timestamp(value: str | None) -> datetime.datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed); naive values are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def format_timestamp(value: datetime.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class RootingOverride:
    data: ConsensusSnapshot
    uploaded_at: str
    expires_at: str
    source_name: str | None = None
    source_path: str | None = None

    def is_expired(self, now: datetime.datetime | None = None) -> bool:
        expires = parse_timestamp(self.expires_at)
        if expires is None:
            return True
        now = now or utc_now()
        if now.tzinfo is None:
            now = now.replace(tzinfo=datetime.timezone.utc)
        return expires <= now

    def is_active(self, now: datetime.datetime | None = None) -> bool:
        return not self.is_expired(now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data.to_dict(),
            "uploaded_at": self.uploaded_at,
            "expires_at": self.expires_at,
            "source_name": self.source_name,
            "source_path": self.source_path,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RootingOverride":
        return cls(
            data=ConsensusSnapshot.from_dict(data["data"]),
            uploaded_at=str(data.get("uploaded_at") or ""),
            expires_at=str(data.get("expires_at") or ""),
            source_name=data.get("source_name"),
            source_path=data.get("source_path"),
        )
