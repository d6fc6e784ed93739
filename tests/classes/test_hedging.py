import math

import pytest

from survivor_pool.classes import hedging
from survivor_pool.classes.hedging import ChicagoInputs, ChicagoMode, HedgeInputs


@pytest.mark.parametrize(
    "american, expected",
    [
        (-120, pytest.approx(1.8333333)),
        (150, 2.5),
        ("+150", 2.5),
        (-100, 2.0),
        (0, None),
        (None, None),
        ("", None),
        ("abc", None),
        (float("nan"), None),
        (float("inf"), None),
    ],
)
def test_american_to_decimal(american, expected):
    assert hedging.american_to_decimal(american) == expected


def test_pay_per_dollar_and_implied_probability():
    assert hedging.pay_per_dollar(150) == pytest.approx(1.5)
    assert hedging.pay_per_dollar(-110) == pytest.approx(100 / 110)
    assert hedging.pay_per_dollar(0) == 0.0
    assert hedging.implied_probability(-200) == pytest.approx(2 / 3)
    assert hedging.implied_probability(None) == 0.0


def test_profit_for_american():
    assert hedging.profit_for_american(150, 100) == pytest.approx(150)
    assert hedging.profit_for_american(-200, 100) == pytest.approx(50)
    assert hedging.profit_for_american(0, 100) is None
    assert hedging.profit_for_american(float("nan"), 100) is None


def test_compute_hedge_outcomes_branches():
    outcomes = hedging.compute_hedge_outcomes(
        HedgeInputs(opponent_ml=150, stake=100, win_probability=0.6, equity_if_win=1000, buy_in=50)
    )
    assert outcomes.decimal_odds == 2.5
    assert outcomes.net_win == -100
    assert outcomes.net_lose == pytest.approx(150)
    assert outcomes.after_win == pytest.approx(850)
    assert outcomes.after_lose == pytest.approx(100)
    assert outcomes.expected_value == pytest.approx(0.6 * -100 + 0.4 * 150)
    assert outcomes.expected_after == pytest.approx(0.6 * 850 + 0.4 * 100)
    assert outcomes.floor_before_buy == pytest.approx(150)
    assert outcomes.floor_after_buy == pytest.approx(100)
    assert outcomes.equalized_floor == pytest.approx(600)


def test_compute_hedge_outcomes_clamps_inputs():
    outcomes = hedging.compute_hedge_outcomes(
        HedgeInputs(opponent_ml=None, stake=-5, win_probability=2.0, equity_if_win=0, buy_in=-1)
    )
    assert outcomes.decimal_odds == hedging.DEFAULT_DECIMAL_ODDS
    assert outcomes.net_win == 0
    assert outcomes.expected_value == pytest.approx(0)
    assert outcomes.equalized_floor is None
    for value in (outcomes.expected_after, outcomes.floor_after_buy):
        assert math.isfinite(value)


def test_equalize_stake_balances_branches():
    decimal = hedging.american_to_decimal(150)
    stake = hedging.equalize_stake(decimal, 1000)
    outcomes = hedging.compute_hedge_outcomes(
        HedgeInputs(opponent_ml=150, stake=stake, win_probability=0.5, equity_if_win=1000, buy_in=0)
    )
    assert stake == pytest.approx(400)
    assert outcomes.after_win == pytest.approx(outcomes.after_lose)


@pytest.mark.parametrize("decimal", [1.0, 0.5, float("nan"), float("inf")])
def test_equalize_stake_degenerate_odds(decimal):
    assert hedging.equalize_stake(decimal, 1000) == 0.0


def test_floor_stake_feasible():
    result = hedging.floor_stake(300, 2.5, 1000)
    assert result.feasible
    assert result.stake == pytest.approx(200)
    assert result.max_floor == pytest.approx(600)
    # both branches clear the target
    assert 1000 - result.stake >= 300
    assert result.stake * 1.5 >= 300 - 1e-9


def test_floor_stake_infeasible_reports_max_floor():
    result = hedging.floor_stake(700, 2.5, 1000)
    assert not result.feasible
    assert result.stake == 0.0
    assert result.max_floor == pytest.approx(600)


def test_floor_stake_degenerate_slope():
    assert hedging.floor_stake(10, 1.0, 1000) == hedging.FloorStake(False, 0.0, 0.0)


def test_weekly_hedge_target_early_amortizes_need():
    # week 2: need 1000 over 10 weeks vs 0.08 * 1000 * 1.15
    assert hedging.weekly_hedge_target(1000, 2) == pytest.approx(100)
    # week 11: need 1000 over one week
    assert hedging.weekly_hedge_target(1000, 11) == pytest.approx(1000)
    # fully recouped falls back to the minimum ramp
    assert hedging.weekly_hedge_target(1000, 3, recouped=1000) == pytest.approx(80 * 1.15**2)


def test_weekly_hedge_target_mid_and_late_phases():
    assert hedging.weekly_hedge_target(1000, 12) == pytest.approx(350)
    assert hedging.weekly_hedge_target(1000, 14) == pytest.approx(300 * 1.25**2)
    assert hedging.weekly_hedge_target(1000, 15) == pytest.approx(600)
    assert hedging.weekly_hedge_target(1000, 17) == pytest.approx(max(600, 450 * 1.3**2))


def test_weekly_hedge_target_invalid_week_returns_need():
    assert hedging.weekly_hedge_target(1000, float("nan"), recouped=250) == 750
    assert hedging.weekly_hedge_target(-5, "TG") == 0


def test_weekly_hedge_target_honors_custom_schedule():
    schedule = hedging.HedgeSchedule(mid_floor_fraction=0.5)
    assert hedging.weekly_hedge_target(1000, 12, schedule=schedule) == pytest.approx(500)


def _chicago(mode, ml=150, spread="-110", week=12, fee=1000):
    return hedging.compute_chicago_recommendation(
        ChicagoInputs(mode=mode, week=week, opponent_ml=ml, spread_price=spread, entry_fee=fee)
    )


def test_chiraqi_puts_everything_on_moneyline():
    rec = _chicago(ChicagoMode.CHIRAQI)
    assert rec.target == pytest.approx(350)
    assert rec.stake_ml == pytest.approx(350 / 1.5)
    assert rec.stake_spread == 0
    assert rec.dog_wins == pytest.approx(350)
    assert rec.dog_covers == pytest.approx(-rec.stake_ml)
    assert rec.fav_wins == pytest.approx(-rec.stake_ml)


def test_missing_spread_price_falls_back_to_moneyline_only():
    rec = _chicago("SOLDIER", spread=None)
    assert rec.stake_spread == 0
    assert rec.stake_ml == pytest.approx(350 / 1.5)


def test_soldier_split():
    rec = _chicago("SOLDIER")
    p_sp = 100 / 110
    assert rec.stake_ml == pytest.approx(350 / 2.5)
    assert rec.stake_spread == pytest.approx(350 / (p_sp * 2.5))
    assert rec.dog_covers == pytest.approx(rec.stake_spread * p_sp - rec.stake_ml)
    assert rec.fav_wins == pytest.approx(-(rec.stake_ml + rec.stake_spread))


@pytest.mark.parametrize("mode, ml_share", [(ChicagoMode.OBLOCK, 0.75), (ChicagoMode.CCC, 0.25)])
def test_weighted_splits(mode, ml_share):
    rec = _chicago(mode)
    p_ml, p_sp = 1.5, 100 / 110
    total = 350 / (ml_share * p_ml + (1 - ml_share) * p_sp)
    assert rec.stake_ml == pytest.approx(ml_share * total)
    assert rec.stake_spread == pytest.approx((1 - ml_share) * total)
    assert rec.fav_wins == pytest.approx(-total)
    assert rec.dog_wins == pytest.approx(350)


def test_zero_value_odds_return_zero_stakes_with_target():
    rec = _chicago(ChicagoMode.OBLOCK, ml=0)
    assert rec.stake_ml == rec.stake_spread == rec.dog_wins == rec.fav_wins == 0
    assert rec.target == pytest.approx(350)


def test_unknown_mode_raises():
    with pytest.raises(ValueError):
        _chicago("WRIGLEY")


def test_every_mode_has_description():
    assert set(hedging.MODE_INFO) == set(ChicagoMode)
