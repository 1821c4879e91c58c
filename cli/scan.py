#!/usr/bin/env python3
"""
Market scan CLI.

Scores a symbol universe and prints the ranked opportunities, top movers
and overall market sentiment.
"""
import argparse
import sys

from cli.common import configure_logging, provider_from_args
from vectorflux.context import TradingContext
from vectorflux.scanner import DEFAULT_UNIVERSE, ScanResults
from vectorflux.shared.defaults import DEFAULT_CRYPTO, SCANNER_MIN_CONFIDENCE, SCANNER_PERIOD, SCANNER_TOP_N
from vectorflux.shared.errors import VectorFluxError
from vectorflux.shared.types import AssetType


def universe_from_args(args: argparse.Namespace):
    if args.symbols:
        return {s: AssetType.CRYPTO if s in DEFAULT_CRYPTO else AssetType.STOCK for s in args.symbols}
    if args.data_dir:
        symbols = provider_from_args(args).list_symbols()
        if symbols:
            return {s: AssetType.CRYPTO if s in DEFAULT_CRYPTO else AssetType.STOCK for s in symbols}
    return DEFAULT_UNIVERSE


def print_results(results: ScanResults):
    print("=" * 60)
    print(f"MARKET SCAN ({results.scan_time:%Y-%m-%d %H:%M})")
    print(f"Scanned {results.scanned} symbols, sentiment: {results.market_sentiment.value.upper()}")
    print("=" * 60)
    if not results.opportunities:
        print("No opportunities above the confidence threshold")
    for opp in results.opportunities:
        print(
            f"  {opp.symbol:<6} {opp.opportunity.value:<9} {opp.confidence:>3}%  "
            f"{opp.predicted_change:+6.1f}%  {opp.timeframe}"
        )
        for reason in opp.reasoning:
            print(f"         - {reason}")
    if results.top_movers:
        print()
        print("Top movers:")
        for mover in results.top_movers:
            print(f"  {mover.symbol:<6} {mover.change:+6.2f}%  {mover.analysis}")
    if results.failures:
        print()
        print(f"Failed: {', '.join(f.symbol for f in results.failures)}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Scan a symbol universe for trading opportunities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Default stock + crypto universe from Yahoo Finance
    python -m cli.scan

    # Every CSV in a local directory
    python -m cli.scan --data-dir data --min-confidence 70
        """
    )
    parser.add_argument("symbols", nargs="*", help="Symbols to scan (default: all in --data-dir, else built-in universe)")
    parser.add_argument("--data-dir", type=str, help="Directory of <SYMBOL>.csv files (default: Yahoo Finance)")
    parser.add_argument("--period", default=SCANNER_PERIOD, help=f"History per symbol (default: {SCANNER_PERIOD})")
    parser.add_argument(
        "--min-confidence",
        type=float,
        default=SCANNER_MIN_CONFIDENCE,
        help=f"Keep opportunities above this confidence (default: {SCANNER_MIN_CONFIDENCE})",
    )
    parser.add_argument("--top", type=int, default=SCANNER_TOP_N, help=f"Maximum opportunities (default: {SCANNER_TOP_N})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")
    args = parser.parse_args(argv)

    configure_logging(args)

    try:
        context = TradingContext(provider=provider_from_args(args))
        scanner = context.scanner(
            universe=universe_from_args(args),
            min_confidence=args.min_confidence,
            top_n=args.top,
            period=args.period,
        )
        results = scanner.scan()
    except VectorFluxError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_results(results)
    if results.failures and len(results.failures) == results.scanned:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
