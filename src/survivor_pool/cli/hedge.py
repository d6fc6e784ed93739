"""Hedge and stake calculators for a surviving entry."""

import argparse
import dataclasses
import json
from typing import Any, Sequence

from dotenv import load_dotenv

from survivor_pool.classes import hedging
from survivor_pool.config import load_and_apply_settings
from survivor_pool.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="survivor-hedge")
    subparsers = parser.add_subparsers(dest="command", required=True)

    outcomes = subparsers.add_parser("outcomes", help="Both branches of a moneyline hedge")
    outcomes.add_argument("--ml", required=True, help="Opponent moneyline in American odds, e.g. +150")
    outcomes.add_argument("--stake", type=float, required=True)
    outcomes.add_argument("--p-win", type=float, required=True, help="Probability our pick wins (0-1)")
    outcomes.add_argument("--equity", type=float, required=True, help="Equity if our pick wins")
    outcomes.add_argument("--buy-in", type=float, default=0.0)

    equalize = subparsers.add_parser("equalize", help="Stake that pays the same on both branches")
    equalize.add_argument("--ml", required=True)
    equalize.add_argument("--equity", type=float, required=True)

    floor = subparsers.add_parser("floor", help="Smallest stake that guarantees a floor")
    floor.add_argument("--ml", required=True)
    floor.add_argument("--equity", type=float, required=True)
    floor.add_argument("--target", type=float, required=True, help="Guaranteed floor to reach")

    target = subparsers.add_parser("target", help="Weekly cumulative hedge target")
    target.add_argument("--fee", type=float, required=True, help="Entry fee")
    target.add_argument("--week", type=float, required=True)
    target.add_argument("--recouped", type=float, default=0.0)

    chicago = subparsers.add_parser("chicago", help="Moneyline/spread stake split for a weekly target")
    chicago.add_argument("--mode", choices=[mode.value for mode in hedging.ChicagoMode], default="CHIRAQI")
    chicago.add_argument("--week", type=float, required=True)
    chicago.add_argument("--ml", required=True, help="Opponent moneyline")
    chicago.add_argument("--spread-price", help="Opponent spread price, e.g. -110")
    chicago.add_argument("--fee", type=float, required=True, help="Entry fee")
    chicago.add_argument("--recouped", type=float, default=0.0)

    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    return parser


def _decimal_or_zero(ml: str) -> float:
    return hedging.american_to_decimal(ml) or 0.0


def run_command(args: argparse.Namespace, schedule: hedging.HedgeSchedule) -> dict[str, Any]:
    if args.command == "outcomes":
        outcomes = hedging.compute_hedge_outcomes(
            hedging.HedgeInputs(
                opponent_ml=args.ml,
                stake=args.stake,
                win_probability=args.p_win,
                equity_if_win=args.equity,
                buy_in=args.buy_in,
            )
        )
        return dataclasses.asdict(outcomes)
    if args.command == "equalize":
        return {"stake": hedging.equalize_stake(_decimal_or_zero(args.ml), args.equity)}
    if args.command == "floor":
        return dataclasses.asdict(hedging.floor_stake(args.target, _decimal_or_zero(args.ml), args.equity))
    if args.command == "target":
        return {"target": hedging.weekly_hedge_target(args.fee, args.week, args.recouped, schedule)}

    mode = hedging.ChicagoMode(args.mode)
    recommendation = hedging.compute_chicago_recommendation(
        hedging.ChicagoInputs(
            mode=mode,
            week=args.week,
            opponent_ml=args.ml,
            spread_price=args.spread_price,
            entry_fee=args.fee,
            recouped=args.recouped,
        ),
        schedule,
    )
    result = dataclasses.asdict(recommendation)
    result["mode"] = mode.value
    result["description"] = hedging.MODE_INFO[mode]
    return result


def _format_value(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    settings = load_and_apply_settings()
    configure_logging(settings.logger_levels)
    args = build_parser().parse_args(argv)

    result = run_command(args, settings.hedge_schedule)
    if args.json:
        print(json.dumps(result, indent=2))
    else:
        for key, value in result.items():
            print(f"{key}: {_format_value(value)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
