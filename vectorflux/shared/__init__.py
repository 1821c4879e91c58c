"""
Shared types, errors and defaults for the trading core.

This module provides:
- StrategyType, RiskLevel, AssetType, SignalLabel enums and the PriceBar record
- ErrorKind, the exception hierarchy and Result
- Centralized default values (see defaults.py)
"""
from .types import StrategyType, RiskLevel, AssetType, SignalLabel, PriceBar
from .errors import (
    ErrorKind,
    VectorFluxError,
    InsufficientDataError,
    InvalidParametersError,
    ComputationError,
    Result,
    error_for_kind,
)

__all__ = [
    'StrategyType',
    'RiskLevel',
    'AssetType',
    'SignalLabel',
    'PriceBar',
    'ErrorKind',
    'VectorFluxError',
    'InsufficientDataError',
    'InvalidParametersError',
    'ComputationError',
    'Result',
    'error_for_kind',
]
