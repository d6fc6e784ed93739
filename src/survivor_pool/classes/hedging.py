"""Hedge and stake sizing for a live survivor entry.

All functions are pure. Odds are American (``-120``, ``+150``); anything that
is missing, zero or non-finite converts to ``None`` rather than a guessed
number, and stake solvers return zero stakes instead of dividing by zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

DEFAULT_DECIMAL_ODDS = 2.2
MIN_DECIMAL_ODDS = 1.01
MIN_WIN_PROBABILITY = 0.01
MAX_WIN_PROBABILITY = 0.99
FLOOR_TOLERANCE = 1e-6
HEAVY_SPLIT_RATIO = 0.75


class ChicagoMode(str, Enum):
    CHIRAQI = "CHIRAQI"
    SOLDIER = "SOLDIER"
    OBLOCK = "OBLOCK"
    CCC = "CCC"


MODE_INFO = {
    ChicagoMode.CHIRAQI: "Full moneyline hedge \u2014 every dollar rides the opponent ML.",
    ChicagoMode.SOLDIER: "Even 50/50 split between opponent ML and spread to balance win-or-cover.",
    ChicagoMode.OBLOCK: "Seventy-five / twenty-five ML-heavy blend that tightens the downside.",
    ChicagoMode.CCC: "Twenty-five / seventy-five spread-weighted mix to bank when the dog covers.",
}


@dataclass(frozen=True)
class HedgeSchedule:
    """Breakpoints and ramps for the weekly cumulative hedge target.

    Weeks up to ``early_cutoff_week`` amortize the unrecouped entry fee over the
    weeks left before ``early_horizon_week`` (Thanksgiving), never below a
    geometric minimum ramp. The mid and late phases step to fixed fractions of
    the entry fee with their own ramps.
    """

    early_cutoff_week: float = 11
    early_horizon_week: float = 12
    early_ramp_fraction: float = 0.08
    early_ramp_base: float = 1.15
    early_ramp_start_week: float = 1
    mid_cutoff_week: float = 14
    mid_floor_fraction: float = 0.35
    mid_ramp_fraction: float = 0.30
    mid_ramp_base: float = 1.25
    mid_ramp_start_week: float = 12
    late_floor_fraction: float = 0.60
    late_ramp_fraction: float = 0.45
    late_ramp_base: float = 1.30
    late_ramp_start_week: float = 15


DEFAULT_SCHEDULE = HedgeSchedule()


@dataclass(frozen=True)
class HedgeInputs:
    opponent_ml: float | str | None
    stake: float
    win_probability: float
    equity_if_win: float
    buy_in: float


@dataclass(frozen=True)
class HedgeOutcomes:
    decimal_odds: float
    net_win: float
    net_lose: float
    after_win: float
    after_lose: float
    expected_value: float
    expected_after: float
    floor_before_buy: float
    floor_after_buy: float
    equalized_floor: float | None


@dataclass(frozen=True)
class FloorStake:
    feasible: bool
    stake: float
    max_floor: float


@dataclass(frozen=True)
class ChicagoInputs:
    mode: ChicagoMode | str
    week: float
    opponent_ml: float | str | None
    spread_price: float | str | None
    entry_fee: float
    recouped: float = 0.0


@dataclass(frozen=True)
class ChicagoRecommendation:
    stake_ml: float
    stake_spread: float
    dog_wins: float
    dog_covers: float
    fav_wins: float
    target: float


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def american_to_decimal(american: float | str | None) -> float | None:
    """Convert American odds to decimal odds; ``None`` for missing, zero or non-finite odds."""
    value = _to_float(american)
    if value is None or value == 0:
        return None
    if value > 0:
        return 1 + value / 100
    return 1 + 100 / abs(value)


def pay_per_dollar(american: float | str | None) -> float:
    """Profit per dollar staked, 0 when the odds carry no value."""
    decimal = american_to_decimal(american)
    if not decimal or decimal <= 1:
        return 0.0
    return decimal - 1


def implied_probability(american: float | str | None) -> float:
    decimal = american_to_decimal(american)
    if not decimal:
        return 0.0
    return 1 / decimal


def profit_for_american(american: float | str | None, stake: float) -> float | None:
    value = _to_float(american)
    if value is None:
        return None
    if value > 0:
        return stake * (value / 100)
    if value < 0:
        return stake * (100 / abs(value))
    return None


def compute_hedge_outcomes(inputs: HedgeInputs) -> HedgeOutcomes:
    """Project both branches of a moneyline hedge against our own pick.

    "Win" means our pick wins and the hedge loses; "lose" means the hedge cashes.
    """
    decimal_odds = max(MIN_DECIMAL_ODDS, american_to_decimal(inputs.opponent_ml) or DEFAULT_DECIMAL_ODDS)
    stake = max(0.0, inputs.stake)
    p_win = min(MAX_WIN_PROBABILITY, max(MIN_WIN_PROBABILITY, inputs.win_probability))
    equity = max(0.0, inputs.equity_if_win)
    buy_in = max(0.0, inputs.buy_in)

    net_win = -stake
    net_lose = stake * (decimal_odds - 1)
    after_win = equity - stake - buy_in
    after_lose = net_lose - buy_in
    floor_before_buy = min(equity - stake, net_lose)

    return HedgeOutcomes(
        decimal_odds=decimal_odds,
        net_win=net_win,
        net_lose=net_lose,
        after_win=after_win,
        after_lose=after_lose,
        expected_value=p_win * net_win + (1 - p_win) * net_lose,
        expected_after=p_win * after_win + (1 - p_win) * after_lose,
        floor_before_buy=floor_before_buy,
        floor_after_buy=floor_before_buy - buy_in,
        equalized_floor=equity * (decimal_odds - 1) / decimal_odds if equity else None,
    )


def equalize_stake(decimal_odds: float, equity: float) -> float:
    """Stake that pays the same whether our pick wins or the hedge cashes."""
    if not math.isfinite(decimal_odds) or decimal_odds <= 1:
        return 0.0
    return equity / decimal_odds


def floor_stake(target_floor: float, decimal_odds: float, equity: float) -> FloorStake:
    """Smallest stake that guarantees ``target_floor`` on both branches.

    The best achievable floor is ``equity * (d - 1) / d``; targets above it are
    reported infeasible along with that maximum.
    """
    slope = decimal_odds - 1
    if not math.isfinite(slope) or slope <= 0:
        return FloorStake(feasible=False, stake=0.0, max_floor=0.0)

    max_floor = equity * slope / decimal_odds if equity else 0.0
    if target_floor > max_floor + FLOOR_TOLERANCE:
        return FloorStake(feasible=False, stake=0.0, max_floor=max_floor)

    min_stake = target_floor / slope
    max_stake = max(0.0, equity - target_floor)
    return FloorStake(feasible=True, stake=min(max(min_stake, 0.0), max_stake), max_floor=max_floor)


def weekly_hedge_target(
    entry_fee: float,
    week: float,
    recouped: float = 0.0,
    schedule: HedgeSchedule = DEFAULT_SCHEDULE,
) -> float:
    """Recommended cumulative hedge target for a week of the season."""
    fee = max(0.0, _to_float(entry_fee) or 0.0)
    banked = max(0.0, _to_float(recouped) or 0.0)
    w = _to_float(week)
    if w is None:
        return max(0.0, fee - banked)

    if w <= schedule.early_cutoff_week:
        need = max(0.0, fee - banked)
        weeks_left = max(1.0, schedule.early_horizon_week - w)
        ramp_min = (
            schedule.early_ramp_fraction
            * fee
            * schedule.early_ramp_base ** max(0.0, w - schedule.early_ramp_start_week)
        )
        return max(need / weeks_left, ramp_min)

    if w <= schedule.mid_cutoff_week:
        return max(
            schedule.mid_floor_fraction * fee,
            schedule.mid_ramp_fraction * fee * schedule.mid_ramp_base ** (w - schedule.mid_ramp_start_week),
        )

    return max(
        schedule.late_floor_fraction * fee,
        schedule.late_ramp_fraction * fee * schedule.late_ramp_base ** (w - schedule.late_ramp_start_week),
    )


def _zero_recommendation(target: float) -> ChicagoRecommendation:
    return ChicagoRecommendation(
        stake_ml=0.0, stake_spread=0.0, dog_wins=0.0, dog_covers=0.0, fav_wins=0.0, target=target
    )


def _blend(target: float, ml_ratio: float, p_ml: float, p_sp: float) -> ChicagoRecommendation:
    total_stake = target / (ml_ratio * p_ml + (1 - ml_ratio) * p_sp)
    stake_ml = ml_ratio * total_stake
    stake_sp = (1 - ml_ratio) * total_stake
    return ChicagoRecommendation(
        stake_ml=stake_ml,
        stake_spread=stake_sp,
        dog_wins=target,
        dog_covers=stake_sp * p_sp - stake_ml,
        fav_wins=-total_stake,
        target=target,
    )


def compute_chicago_recommendation(
    inputs: ChicagoInputs, schedule: HedgeSchedule = DEFAULT_SCHEDULE
) -> ChicagoRecommendation:
    """Size moneyline/spread hedge stakes so the "dog wins" branch nets this week's target."""
    mode = ChicagoMode(inputs.mode)
    target = weekly_hedge_target(inputs.entry_fee, inputs.week, inputs.recouped, schedule)
    p_ml = pay_per_dollar(inputs.opponent_ml)
    p_sp = pay_per_dollar(inputs.spread_price)

    if mode is ChicagoMode.CHIRAQI or p_sp <= 0:
        if p_ml <= 0:
            return _zero_recommendation(target)
        stake_ml = target / p_ml
        return ChicagoRecommendation(
            stake_ml=stake_ml,
            stake_spread=0.0,
            dog_wins=target,
            dog_covers=-stake_ml,
            fav_wins=-stake_ml,
            target=target,
        )

    if p_ml <= 0:
        return _zero_recommendation(target)

    if mode is ChicagoMode.SOLDIER:
        stake_ml = target / (1 + p_ml)
        stake_sp = target / (p_sp * (1 + p_ml))
        return ChicagoRecommendation(
            stake_ml=stake_ml,
            stake_spread=stake_sp,
            dog_wins=target,
            dog_covers=stake_sp * p_sp - stake_ml,
            fav_wins=-(stake_ml + stake_sp),
            target=target,
        )

    if mode is ChicagoMode.OBLOCK:
        return _blend(target, HEAVY_SPLIT_RATIO, p_ml, p_sp)
    return _blend(target, 1 - HEAVY_SPLIT_RATIO, p_ml, p_sp)
