#!/usr/bin/env python3
"""
Strategy optimization CLI.

Runs one local-search pass over a strategy's parameter neighbors on one
symbol and optionally saves the improved version as YAML.
"""
import argparse
import sys

from cli.common import (
    add_common_arguments,
    add_strategy_arguments,
    configure_logging,
    provider_from_args,
    strategy_from_args,
)
from vectorflux.context import TradingContext
from vectorflux.optimization import OptimizationReport
from vectorflux.shared.defaults import OPTIMIZER_WINDOW_BARS
from vectorflux.shared.errors import VectorFluxError
from vectorflux.signals import save_strategy_to_yaml


def print_report(report: OptimizationReport):
    print("=" * 60)
    print(f"OPTIMIZATION: {report.original.id} v{report.original.version}")
    print(f"Baseline return: {report.baseline_score:+.2f}%")
    print("=" * 60)
    for score in report.scores:
        if score.ok:
            marker = " *" if score is report.best else ""
            print(f"  {score.label:<26} {score.score:+8.2f}%{marker}")
        else:
            print(f"  {score.label:<26} {score.error_kind.value}: {score.result.message}")
    print()
    if report.accepted:
        print(f"Accepted {report.best.label}: version {report.original.version} -> {report.definition.version}")
    else:
        print("No neighbor beat the baseline; strategy unchanged")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Optimize a strategy's parameters on one symbol",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m cli.optimize --symbol AAPL --type swing --risk low
    python -m cli.optimize --symbol ETH --config configs/momentum_medium.yaml --output configs/momentum_v2.yaml
        """
    )
    parser.add_argument("--symbol", "-s", required=True, help="Symbol to optimize on")
    add_strategy_arguments(parser)
    add_common_arguments(parser)
    parser.add_argument(
        "--window",
        type=int,
        default=OPTIMIZER_WINDOW_BARS,
        help=f"Simulated bars per neighbor backtest (default: {OPTIMIZER_WINDOW_BARS})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Parallel workers for neighbor backtests (default: sequential)",
    )
    parser.add_argument("--output", "-o", type=str, help="Save the resulting strategy to this YAML file")
    args = parser.parse_args(argv)

    configure_logging(args)

    try:
        definition = strategy_from_args(args)
        context = TradingContext(
            provider=provider_from_args(args),
            window_bars=args.window,
            max_workers=args.workers,
        )
        bars = context.provider.fetch(args.symbol, args.period)
        report = context.optimizer().run(bars, definition, symbol=args.symbol)
    except (VectorFluxError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_report(report)

    if args.output:
        save_strategy_to_yaml(report.definition, args.output)
        print(f"\nStrategy saved to: {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
