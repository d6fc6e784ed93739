"""Static NFL team lookup tables and label resolution."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping

TEAM_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "ARI": "Cardinals",
        "ATL": "Falcons",
        "BAL": "Ravens",
        "BUF": "Bills",
        "CAR": "Panthers",
        "CHI": "Bears",
        "CIN": "Bengals",
        "CLE": "Browns",
        "DAL": "Cowboys",
        "DEN": "Broncos",
        "DET": "Lions",
        "GB": "Packers",
        "HOU": "Texans",
        "IND": "Colts",
        "JAX": "Jaguars",
        "KC": "Chiefs",
        "LV": "Raiders",
        "LAC": "Chargers",
        "LAR": "Rams",
        "MIA": "Dolphins",
        "MIN": "Vikings",
        "NE": "Patriots",
        "NO": "Saints",
        "NYG": "Giants",
        "NYJ": "Jets",
        "PHI": "Eagles",
        "PIT": "Steelers",
        "SEA": "Seahawks",
        "SF": "49ers",
        "TB": "Buccaneers",
        "TEN": "Titans",
        "WAS": "Commanders",
    }
)

NFL_TEAMS: tuple[str, ...] = tuple(TEAM_NAMES)

_FULL_NAMES = {
    "arizona cardinals": "ARI",
    "atlanta falcons": "ATL",
    "baltimore ravens": "BAL",
    "buffalo bills": "BUF",
    "carolina panthers": "CAR",
    "chicago bears": "CHI",
    "cincinnati bengals": "CIN",
    "cleveland browns": "CLE",
    "dallas cowboys": "DAL",
    "denver broncos": "DEN",
    "detroit lions": "DET",
    "green bay packers": "GB",
    "houston texans": "HOU",
    "indianapolis colts": "IND",
    "jacksonville jaguars": "JAX",
    "kansas city chiefs": "KC",
    "las vegas raiders": "LV",
    "los angeles chargers": "LAC",
    "los angeles rams": "LAR",
    "miami dolphins": "MIA",
    "minnesota vikings": "MIN",
    "new england patriots": "NE",
    "new orleans saints": "NO",
    "new york giants": "NYG",
    "new york jets": "NYJ",
    "philadelphia eagles": "PHI",
    "pittsburgh steelers": "PIT",
    "san francisco 49ers": "SF",
    "seattle seahawks": "SEA",
    "tampa bay buccaneers": "TB",
    "tennessee titans": "TEN",
    "washington commanders": "WAS",
}

# lower-cased nickname, full name or legacy code -> canonical code
TEAM_CODE_FROM_NAME: Mapping[str, str] = MappingProxyType(
    {
        **{name.lower(): code for code, name in TEAM_NAMES.items()},
        **_FULL_NAMES,
        "jac": "JAX",
        "wsh": "WAS",
    }
)

# upper-cased wordmarks seen on standings reports that omit the city
TEAM_WORDMARK_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "SEAHAWKS": "SEA",
        "BILLS": "BUF",
        "BUCS": "TB",
        "BUCCANEERS": "TB",
        "PACKERS": "GB",
        "FALCONS": "ATL",
        "COLTS": "IND",
        "CHIEFS": "KC",
        "VIKINGS": "MIN",
        "COMMANDERS": "WAS",
        "49ERS": "SF",
        "NINERS": "SF",
        "CHARGERS": "LAC",
        "TEXANS": "HOU",
        "COWBOYS": "DAL",
        "RAVENS": "BAL",
        "STEELERS": "PIT",
        "BEARS": "CHI",
        "PATRIOTS": "NE",
        "EAGLES": "PHI",
        "JAGUARS": "JAX",
        "RAIDERS": "LV",
        "PANTHERS": "CAR",
        "TITANS": "TEN",
        "RAMS": "LAR",
        "SAINTS": "NO",
        "DOLPHINS": "MIA",
        "CARDINALS": "ARI",
        "BRONCOS": "DEN",
        "BROWNS": "CLE",
        "GIANTS": "NYG",
        "JETS": "NYJ",
        "LIONS": "DET",
        "PACK": "GB",
        "BENGALS": "CIN",
        "CHARGER": "LAC",
        "TEXAN": "HOU",
        "COWBOY": "DAL",
        "RAVEN": "BAL",
        "STEELER": "PIT",
    }
)

TG_BF: tuple[str, ...] = ("GB", "DET", "KC", "DAL", "CIN", "BAL", "CHI", "PHI")
XMAS: tuple[str, ...] = ("DAL", "WAS", "DET", "MIN", "DEN", "KC")

# holiday week key -> the only teams playing that slate
SPECIAL_POOLS: Mapping[str, tuple[str, ...]] = MappingProxyType({"TG": TG_BF, "XMAS": XMAS})

_NON_ALNUM_RE = re.compile(r"[^A-Z0-9]")
_BARE_CODE_RE = re.compile(r"^[A-Z]{2,3}$")


def team_name(code: str) -> str:
    return TEAM_NAMES.get(code, code)


def pool_for_week(week: str) -> tuple[str, ...]:
    """Teams eligible in a week: the holiday subset for special weeks, else the league."""
    return SPECIAL_POOLS.get(week, NFL_TEAMS)


def resolve_team(identifier: str | None) -> str | None:
    """Resolve a code, nickname or full franchise name to a canonical code."""
    if not identifier:
        return None
    trimmed = identifier.strip()
    if not trimmed:
        return None
    upper = trimmed.upper()
    if upper in TEAM_NAMES:
        return upper
    return TEAM_CODE_FROM_NAME.get(trimmed.lower())


def resolve_team_from_wordmark(label: str | None) -> str | None:
    """Resolve report labels that may only carry a wordmark (e.g. "SEAHAWKS")."""
    if not label:
        return None
    upper = label.strip().upper()
    cleaned = _NON_ALNUM_RE.sub("", upper)
    return TEAM_WORDMARK_ALIASES.get(cleaned) or TEAM_WORDMARK_ALIASES.get(upper) or resolve_team(label)


def resolve_upload_team(value: str | None) -> str | None:
    """Resolve a team cell from an uploaded picks file.

    Falls back to accepting any bare 2-3 letter token as a code. That fallback
    is only meant for roster uploads, never for free-text consensus parsing.
    """
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    resolved = resolve_team(trimmed) or resolve_team_from_wordmark(trimmed)
    if resolved:
        return resolved
    upper = trimmed.upper()
    if _BARE_CODE_RE.match(upper):
        return upper
    return None
