"""Error hierarchy for the hexbin pipeline."""

import functools
from typing import Any, Dict, Optional


class HexbinError(Exception):
    """Base error for every failure surfaced by the pipeline."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for callers rendering user messages."""
        return {
            'kind': type(self).__name__,
            'message': self.message,
            'details': dict(self.details)
        }


class ValidationError(HexbinError):
    """Raised when an input parameter or region is malformed."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None,
                 details: Optional[Dict[str, Any]] = None):
        merged = {'field': field, 'value': value}
        merged.update(details or {})
        super().__init__(message, merged)
        self.field = field
        self.value = value


class InvalidBinParametersError(ValidationError):
    """Raised when bin step or bin count are not positive integers."""
    pass


class InvalidRegionError(ValidationError):
    """Raised when a region cannot be interpreted as a box or polygon."""
    pass


class EmptyRegionError(HexbinError):
    """Raised when the selected region contains no points.

    Recoverable: the caller should discard the selection and prompt for a
    larger region.
    """

    def __init__(self, points_in: int, region_kind: str):
        super().__init__(
            f"No points found within the selected {region_kind} "
            f"({points_in:,} points checked)",
            {'points_in': points_in, 'region_kind': region_kind}
        )
        self.points_in = points_in
        self.region_kind = region_kind


class LimitExceededError(HexbinError):
    """Advisory raised-never: a soft limit was exceeded."""

    def __init__(self, limit_name: str, limit: int, actual: int, hint: str = ""):
        message = f"{actual:,} {limit_name} exceeds the advisory limit of {limit:,}"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message, {'limit_name': limit_name, 'limit': limit, 'actual': actual})
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual


class ComputationError(HexbinError):
    """Raised when an internal invariant is violated."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        details = {}
        if original_exception is not None:
            details['original_type'] = type(original_exception).__name__
        super().__init__(message, details)
        self.original_exception = original_exception


class PipelineCancelledError(HexbinError):
    """Raised inside a run that was superseded by a newer request."""

    def __init__(self, generation: int, stage: Optional[str] = None):
        where = f" before stage '{stage}'" if stage else ""
        super().__init__(f"Run {generation} was superseded{where}",
                         {'generation': generation, 'stage': stage})
        self.generation = generation
        self.stage = stage


def handle_computation_error(operation_name: str):
    """Decorator that wraps unexpected failures in ComputationError.

    HexbinError subclasses pass through untouched so callers still see the
    precise kind.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except HexbinError:
                raise
            except Exception as e:
                raise ComputationError(
                    f"{operation_name} failed: {type(e).__name__}: {e}", e
                ) from e
        return wrapper
    return decorator
