"""
Helpers shared by the CLI entry points: logging setup, strategy and
data-provider selection.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from vectorflux.data import CsvDataProvider, YahooDataProvider
from vectorflux.signals import StrategyDefinition, create_strategy, load_strategy_from_yaml
from vectorflux.shared.types import RiskLevel, StrategyType


def setup_logging(log_path: Optional[Path] = None, verbose: bool = False):
    """
    Setup logging to stdout and optionally to file.

    Args:
        log_path: Path to log file (None = stdout only)
        verbose: If True, use DEBUG level, otherwise WARNING
    """
    level = logging.DEBUG if verbose else logging.WARNING

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def add_common_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--data-dir",
        type=str,
        help="Directory of <SYMBOL>.csv files (default: download from Yahoo Finance)",
    )
    parser.add_argument(
        "--period",
        default="1y",
        help="History to use, e.g. 90d, 6mo, 1y (default: 1y)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")


def add_strategy_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Load the strategy from a YAML file",
    )
    parser.add_argument(
        "--type", "-t",
        choices=[t.value for t in StrategyType],
        default=StrategyType.MOMENTUM.value,
        help="Strategy type when no --config is given (default: momentum)",
    )
    parser.add_argument(
        "--risk", "-r",
        choices=[r.value for r in RiskLevel],
        default=RiskLevel.MEDIUM.value,
        help="Risk level when no --config is given (default: medium)",
    )


def configure_logging(args: argparse.Namespace):
    setup_logging(Path(args.log_file) if args.log_file else None, args.verbose)


def strategy_from_args(args: argparse.Namespace) -> StrategyDefinition:
    """YAML strategy when --config is given, else a factory strategy for --type/--risk."""
    if args.config:
        return load_strategy_from_yaml(args.config)
    return create_strategy(args.type, args.risk)


def provider_from_args(args: argparse.Namespace):
    """CSV directory provider when --data-dir is given, else Yahoo Finance."""
    if args.data_dir:
        return CsvDataProvider(args.data_dir)
    return YahooDataProvider()
