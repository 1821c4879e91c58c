#!/usr/bin/env python3
"""
Data download CLI.

Downloads daily bars from Yahoo Finance and saves one <SYMBOL>.csv per
symbol, ready for --data-dir.
"""
import argparse
import sys
from pathlib import Path

from cli.common import setup_logging
from vectorflux.data import download_symbols
from vectorflux.data.download import DATA_DIR
from vectorflux.shared.defaults import DEFAULT_CRYPTO, DEFAULT_STOCKS


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Download historical bars for symbols",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Default stock + crypto universe
    python -m cli.download

    # Specific symbols, two years
    python -m cli.download AAPL BTC --period 2y
        """
    )
    parser.add_argument(
        "symbols",
        nargs="*",
        help="Symbols to download (default: built-in stock and crypto universe)",
    )
    parser.add_argument("--period", default="1y", help="History to download (default: 1y)")
    parser.add_argument(
        "--data-dir",
        type=str,
        default=str(DATA_DIR),
        help=f"Output directory (default: {DATA_DIR})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose)

    symbols = args.symbols or DEFAULT_STOCKS + DEFAULT_CRYPTO
    print(f"Downloading {len(symbols)} symbols ({args.period}) to {args.data_dir}...")
    results = download_symbols(symbols, period=args.period, data_dir=Path(args.data_dir))

    for symbol in symbols:
        if symbol in results:
            print(f"  ✓ {symbol}: {len(results[symbol])} bars")
        else:
            print(f"  ✗ {symbol}")
    print(f"Downloaded {len(results)}/{len(symbols)} symbols")

    if not results:
        print("Failed to download any symbols")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
