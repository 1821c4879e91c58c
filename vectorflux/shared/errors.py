"""
Error kinds, exceptions and a typed Result for outcomes that are data.

Indicator functions never raise for short input (they return empty arrays).
The simulator and optimizer raise InsufficientDataError / InvalidParametersError.
Where a failure is an expected outcome (optimizer neighbors, scanner symbols),
it is carried as a Result with an explicit ErrorKind instead of a sentinel value.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Why a computation could not produce a value."""
    INSUFFICIENT_DATA = "insufficient_data"
    INVALID_PARAMETERS = "invalid_parameters"
    COMPUTATION_ERROR = "computation_error"


class VectorFluxError(Exception):
    """Base class for all errors raised by the trading core."""
    kind: ErrorKind = ErrorKind.COMPUTATION_ERROR


class InsufficientDataError(VectorFluxError):
    """Series is shorter than the lookback required."""
    kind = ErrorKind.INSUFFICIENT_DATA


class InvalidParametersError(VectorFluxError, ValueError):
    """Non-positive period, inconsistent thresholds, empty universe, unordered bars."""
    kind = ErrorKind.INVALID_PARAMETERS


class ComputationError(VectorFluxError):
    """Unexpected numeric failure (e.g. NaN propagation)."""
    kind = ErrorKind.COMPUTATION_ERROR


_ERRORS_BY_KIND = {
    ErrorKind.INSUFFICIENT_DATA: InsufficientDataError,
    ErrorKind.INVALID_PARAMETERS: InvalidParametersError,
    ErrorKind.COMPUTATION_ERROR: ComputationError,
}


def error_for_kind(kind: ErrorKind, message: str) -> VectorFluxError:
    """Build the exception matching an ErrorKind."""
    return _ERRORS_BY_KIND[kind](message)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an (error_kind, message) pair."""
    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    def unwrap(self) -> T:
        """Return the value or raise the exception matching error_kind."""
        if self.error_kind is not None:
            raise error_for_kind(self.error_kind, self.message)
        return self.value

    @classmethod
    def success(cls, value: Any) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result":
        return cls(error_kind=kind, message=message)

    @classmethod
    def from_exception(cls, exc: Exception) -> "Result":
        """Map a raised exception to a failed Result (non-core errors count as computation errors)."""
        kind = exc.kind if isinstance(exc, VectorFluxError) else ErrorKind.COMPUTATION_ERROR
        return cls(error_kind=kind, message=str(exc) or exc.__class__.__name__)
