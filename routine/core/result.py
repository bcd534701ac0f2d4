"""Tagged success/failure values returned across the engine's public boundary."""

import dataclasses
import functools
import logging
from collections.abc import Callable
from typing import Generic, ParamSpec, TypeVar

from .errors import RoutineError

__all__ = ["Result", "expect", "fail", "ok", "operation"]

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = ParamSpec("P")


@dataclasses.dataclass(frozen=True)
class Result(Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None

    def __bool__(self) -> bool:
        return self.success


def ok(data: T | None = None) -> Result[T]:
    return Result(success=True, data=data)


def fail(error: str) -> Result:
    return Result(success=False, error=error)


def operation(action: str) -> Callable[[Callable[P, T]], Callable[P, Result[T]]]:
    """Wrap an operation so raised errors come back as failure results.

    RoutineError messages are passed through as-is. Anything else is logged
    with its traceback and reported as ``Unknown error <action>``.
    """

    def decorator(fn: Callable[P, T]) -> Callable[P, Result[T]]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> Result[T]:
            try:
                return ok(fn(*args, **kwargs))
            except RoutineError as e:
                logger.info("%s failed: %s", fn.__name__, e)
                return fail(str(e) or f"Unknown error {action}")
            except Exception:
                logger.exception("unexpected error %s", action)
                return fail(f"Unknown error {action}")

        return wrapper

    return decorator


def expect(result: Result[T], error: type[RoutineError] = RoutineError) -> T | None:
    """Return the data of a successful result, raise ``error`` with its message otherwise."""
    if not result.success:
        raise error(result.error or "unknown error")
    return result.data
