#!/usr/bin/env python3
"""
Single strategy backtest CLI.

Backtests one strategy (from YAML or the factory) on one symbol and
prints the performance summary.
"""
import argparse
import sys
from pathlib import Path

from cli.common import (
    add_common_arguments,
    add_strategy_arguments,
    configure_logging,
    provider_from_args,
    strategy_from_args,
)
from vectorflux.context import TradingContext
from vectorflux.evaluation import BacktestResult
from vectorflux.shared.defaults import INITIAL_CAPITAL
from vectorflux.shared.errors import VectorFluxError


def print_summary(result: BacktestResult):
    m = result.metrics
    print("=" * 60)
    print(f"BACKTEST: {result.strategy_id} v{result.strategy_version} on {result.symbol}")
    print(f"Period: {result.start_date.date()} to {result.end_date.date()}")
    print("=" * 60)
    print(f"  Initial capital:   {result.initial_capital:,.2f}")
    print(f"  Final capital:     {result.final_capital:,.2f}")
    print(f"  Total return:      {m.total_return:+.2f}%")
    print(f"  Annualized return: {m.annualized_return:+.2f}%")
    print(f"  Max drawdown:      {m.max_drawdown:.2f}%")
    print(f"  Sharpe ratio:      {m.sharpe_ratio:.2f}")
    print(f"  Profit factor:     {m.profit_factor:.2f}")
    print(f"  Trades:            {m.total_trades} ({m.winning_trades} won, {m.losing_trades} lost)")
    print(f"  Win rate:          {m.win_rate:.1%}")
    if result.trades:
        print()
        print("Trades:")
        for t in result.trades:
            print(
                f"  {t.entry_date.date()} -> {t.exit_date.date()}  "
                f"{t.quantity} @ {t.entry_price:.2f} -> {t.exit_price:.2f}  "
                f"{t.pnl:+.2f} ({t.pnl_percent:+.2f}%)  {t.reason.value}"
            )


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Backtest a trading strategy on one symbol",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Medium-risk momentum strategy on AAPL, one year from Yahoo Finance
    python -m cli.backtest --symbol AAPL

    # Strategy from YAML on a local CSV directory
    python -m cli.backtest --symbol BTC --config configs/momentum_medium.yaml --data-dir data
        """
    )
    parser.add_argument("--symbol", "-s", required=True, help="Symbol to backtest")
    add_strategy_arguments(parser)
    add_common_arguments(parser)
    parser.add_argument(
        "--initial-capital",
        type=float,
        default=INITIAL_CAPITAL,
        help=f"Starting cash (default: {INITIAL_CAPITAL:.0f})",
    )
    parser.add_argument("--fee-pct", type=float, help="Fee per side as a fraction of trade value")
    parser.add_argument("--fee-absolute", type=float, help="Fixed fee per side")
    parser.add_argument("--trades-csv", type=str, help="Save trades to this CSV file")
    args = parser.parse_args(argv)

    configure_logging(args)

    try:
        definition = strategy_from_args(args)
        context = TradingContext(
            provider=provider_from_args(args),
            initial_capital=args.initial_capital,
            fee_pct=args.fee_pct,
            fee_absolute=args.fee_absolute,
        )
        bars = context.provider.fetch(args.symbol, args.period)
        result = context.simulator().run(bars, definition, symbol=args.symbol)
    except (VectorFluxError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_summary(result)

    if args.trades_csv:
        trades_path = Path(args.trades_csv)
        trades_path.parent.mkdir(parents=True, exist_ok=True)
        result.trades_frame().to_csv(trades_path, index=False)
        print(f"\nTrades saved to: {trades_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
