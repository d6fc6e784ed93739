"""Parse betting-consensus text extracted from a PDF into per-market games.

The text arrives already extracted; blocks are separated by blank lines and
each block is expected to describe one matchup followed by lines carrying a
pair of percentages (away first, home second). Problems with individual
blocks are collected as warnings instead of failing the whole document.
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass, field

from survivor_pool.classes.consensus import (
    MANUAL_SOURCE,
    MARKETS,
    ConsensusGame,
    ConsensusSnapshot,
    ConsensusSource,
    ConsensusTeam,
    clamp_percent,
    format_timestamp,
    utc_now,
)
from survivor_pool.classes.teams import resolve_team, team_name

logger = logging.getLogger(__name__)

PercentPair = tuple[float | None, float | None]

MARKET_KEYWORDS = {
    "spread": (re.compile(r"\bspread\b"), re.compile(r"\bats\b")),
    "moneyline": (re.compile(r"\bmoneyline\b"), re.compile(r"\bmoney line\b"), re.compile(r"\bml\b")),
}
BET_KEYWORDS = (re.compile(r"\bbets?\b"), re.compile(r"\bticket?s?\b"))
MONEY_KEYWORDS = (re.compile(r"\bhandle\b"), re.compile(r"\bmoney\b"))

PERCENT_RE = re.compile(r"-?\d{1,3}(?:\.\d+)?%")
_BLOCK_SPLIT_RE = re.compile(r"\n{2,}")
_LINE_SPLIT_RE = re.compile(r"\n+")
_CURLY_QUOTE_RE = re.compile("[\u2018\u2019]")
_DASH_RE = re.compile("[\u2013\u2014]")
_IDENTIFIER_NOISE_RE = re.compile(r"[^a-zA-Z0-9\s@]")
_WHITESPACE_RE = re.compile(r"\s+")
_MONEYLINE_RE = re.compile(r"moneyline")
_MATCHUP_RE = re.compile(r"^(?P<away>.+?)(?:\s*@\s*|\s+(?:vs\.?|at)\s+)(?P<home>.+)$", re.IGNORECASE)

MAX_SPAN = 3

NO_TEAMS_WARNING = "Unable to locate two NFL teams in block"
NO_MATCHUPS_WARNING = "No matchups detected in PDF"


@dataclass
class MarketPercents:
    bet: PercentPair | None = None
    money: PercentPair | None = None

    def set_if_absent(self, metric: str, pair: PercentPair | None) -> bool:
        """Fill ``metric`` only when it is still empty; returns True if filled."""
        if pair is None or getattr(self, metric) is not None:
            return False
        setattr(self, metric, pair)
        return True

    def fill_next(self, pair: PercentPair) -> None:
        """Place an unlabelled pair in the bet slot, then the money slot."""
        if not self.set_if_absent("bet", pair):
            self.set_if_absent("money", pair)

    def merge(self, other: "MarketPercents") -> None:
        self.set_if_absent("bet", other.bet)
        self.set_if_absent("money", other.money)

    @property
    def empty(self) -> bool:
        return self.bet is None and self.money is None


@dataclass
class GameAccumulator:
    away: str
    home: str
    start_iso: str | None = None
    markets: dict[str, MarketPercents] = field(default_factory=lambda: {market: MarketPercents() for market in MARKETS})

    @property
    def key(self) -> str:
        return f"{self.away}_{self.home}"

    def merge(self, other: "GameAccumulator") -> None:
        for market, percents in self.markets.items():
            percents.merge(other.markets[market])


@dataclass
class ParsedConsensus:
    markets: dict[str, list[ConsensusGame]]
    warnings: list[str]
    text: str = ""

    @property
    def game_count(self) -> int:
        return sum(len(games) for games in self.markets.values())


def resolve_identifier(value: str) -> str | None:
    """Resolve free text to a team code; no bare-letter fallback."""
    cleaned = _CURLY_QUOTE_RE.sub("'", value)
    cleaned = _IDENTIFIER_NOISE_RE.sub(" ", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    if not cleaned:
        return None
    return resolve_team(cleaned)


def parse_percent_pair(line: str) -> PercentPair | None:
    matches = PERCENT_RE.findall(line)
    if len(matches) < 2:
        return None
    away, home = (clamp_percent(float(match.rstrip("%"))) for match in matches[:2])
    return away, home


def detect_market(line: str) -> str | None:
    lower = line.lower()
    for market, patterns in MARKET_KEYWORDS.items():
        if any(pattern.search(lower) for pattern in patterns):
            return market
    return None


def detect_metric(line: str) -> str | None:
    lower = line.lower()
    if any(pattern.search(lower) for pattern in BET_KEYWORDS):
        return "bet"
    without_moneyline = _MONEYLINE_RE.sub("", lower)
    if any(pattern.search(without_moneyline) for pattern in MONEY_KEYWORDS):
        return "money"
    return None


def _teams_from_matchup_line(lines: list[str]) -> tuple[str, str] | None:
    for line in lines:
        match = _MATCHUP_RE.match(_WHITESPACE_RE.sub(" ", line))
        if not match:
            continue
        away = resolve_identifier(match.group("away"))
        home = resolve_identifier(match.group("home"))
        if away and home and away != home:
            return away, home
    return None


def _teams_from_token_scan(block: str) -> tuple[str, str] | None:
    tokens = _DASH_RE.sub(" ", block).split()
    found: list[str] = []
    index = 0
    while index < len(tokens) and len(found) < 2:
        for span in range(MAX_SPAN, 0, -1):
            if index + span > len(tokens):
                continue
            code = resolve_identifier(" ".join(tokens[index : index + span]))
            if code and code not in found:
                found.append(code)
                index += span
                break
        else:
            index += 1
    if len(found) < 2:
        return None
    return found[0], found[1]


def find_teams(block: str) -> tuple[str, str] | None:
    """Locate the (away, home) pair of a block."""
    lines = [line.strip() for line in _LINE_SPLIT_RE.split(block) if line.strip()]
    return _teams_from_matchup_line(lines) or _teams_from_token_scan(block)


def parse_block(block: str) -> tuple[GameAccumulator | None, list[str]]:
    teams = find_teams(block)
    if teams is None:
        return None, [NO_TEAMS_WARNING]

    game = GameAccumulator(away=teams[0], home=teams[1])
    for line in _LINE_SPLIT_RE.split(block):
        line = line.strip()
        if not line:
            continue
        pair = parse_percent_pair(line)
        if pair is None:
            continue
        market = detect_market(line)
        if market is None:
            continue
        metric = detect_metric(line)
        if metric:
            game.markets[market].set_if_absent(metric, pair)
        else:
            game.markets[market].fill_next(pair)

    warnings = [
        f"No {market} percentages detected for {game.away} @ {game.home}"
        for market, percents in game.markets.items()
        if percents.empty
    ]
    return game, warnings


def _consensus_game(game: GameAccumulator, market: str) -> ConsensusGame | None:
    percents = game.markets[market]
    if percents.empty:
        return None
    bet = percents.bet or (None, None)
    money = percents.money or (None, None)
    return ConsensusGame(
        market=market,
        matchup=f"{team_name(game.away)} @ {team_name(game.home)}",
        start_iso=game.start_iso,
        teams=(
            ConsensusTeam(team=game.away, label=team_name(game.away), bet_percent=bet[0], money_percent=money[0]),
            ConsensusTeam(team=game.home, label=team_name(game.home), bet_percent=bet[1], money_percent=money[1]),
        ),
    )


def parse_consensus_pdf_text(text: str) -> ParsedConsensus:
    """Parse extracted PDF text into moneyline/spread consensus games plus warnings."""
    blocks = [block.strip() for block in _BLOCK_SPLIT_RE.split(text or "") if block.strip()]

    warnings: list[str] = []
    games: dict[str, GameAccumulator] = {}
    for block in blocks:
        game, block_warnings = parse_block(block)
        warnings.extend(block_warnings)
        if game is None:
            continue
        if game.key in games:
            games[game.key].merge(game)
        else:
            games[game.key] = game

    markets: dict[str, list[ConsensusGame]] = {market: [] for market in MARKETS}
    for game in games.values():
        for market in MARKETS:
            consensus_game = _consensus_game(game, market)
            if consensus_game is not None:
                markets[market].append(consensus_game)
    for market_games in markets.values():
        market_games.sort(key=lambda item: item.matchup)

    if not any(markets.values()):
        warnings.append(NO_MATCHUPS_WARNING)

    logger.info(
        "Parsed %d blocks into %d moneyline and %d spread games (%d warnings)",
        len(blocks),
        len(markets["moneyline"]),
        len(markets["spread"]),
        len(warnings),
    )
    return ParsedConsensus(markets=markets, warnings=warnings, text=text or "")


def build_manual_source(parsed: ParsedConsensus, fetched_at: datetime.datetime | None = None) -> ConsensusSource:
    return ConsensusSource(
        source=MANUAL_SOURCE,
        fetched_at=format_timestamp(fetched_at or utc_now()),
        markets={market: [game.clone() for game in parsed.markets.get(market, [])] for market in MARKETS},
    )


def build_manual_snapshot(parsed: ParsedConsensus, fetched_at: datetime.datetime | None = None) -> ConsensusSnapshot:
    """Snapshot carrying only the manual source, ready for a rooting override."""
    snapshot = ConsensusSnapshot()
    snapshot.sources[MANUAL_SOURCE] = build_manual_source(parsed, fetched_at)
    return snapshot
