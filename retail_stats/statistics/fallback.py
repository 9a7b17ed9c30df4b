"""
Fallback Fetching and Soft Failure

Two pieces keep report calls from ever raising to their caller:

- ``run_fetch_chain`` tries an ordered list of named fetch steps. Each step
  names where to go next when it comes back empty or raises, so the whole
  fallback policy of a report reads as one table instead of nested handlers.
- ``soft_fail`` wraps a public report coroutine and maps any exception to the
  report's documented default value.
"""

import functools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class FetchStep:
    """
    One strategy in a fallback chain.

    Attributes:
        name: Step name used for transitions and logging
        fetch: Zero-argument coroutine function returning rows
        on_empty: Step to run when this one returns no rows (None ends the chain)
        on_error: Step to run when this one raises (None ends the chain)
        diagnostic: Rows are only counted and logged, never returned
    """
    name: str
    fetch: Callable[[], Awaitable[Sequence[Any]]]
    on_empty: Optional[str] = None
    on_error: Optional[str] = None
    diagnostic: bool = False


async def run_fetch_chain(steps: Sequence[FetchStep], report: str = "report") -> List[Any]:
    """
    Run ``steps`` starting from the first one until a step yields rows.

    Returns the rows of the first non-diagnostic step that produced any, or
    an empty list when the chain ends without one. A step never runs twice.
    """
    by_name = {step.name: step for step in steps}
    visited = set()
    current: Optional[FetchStep] = steps[0] if steps else None

    while current is not None and current.name not in visited:
        visited.add(current.name)
        try:
            rows = list(await current.fetch())
        except Exception as e:
            logger.warning(
                "Fetch step failed",
                report=report,
                step=current.name,
                next_step=current.on_error,
                error=str(e),
                error_type=type(e).__name__,
            )
            current = by_name.get(current.on_error) if current.on_error else None
            continue

        if current.diagnostic:
            logger.warning(
                "Diagnostic fetch only, returning no rows",
                report=report,
                step=current.name,
                rows=len(rows),
            )
            return []

        if rows:
            logger.info("Fetch step succeeded", report=report, step=current.name, rows=len(rows))
            return rows

        logger.info("Fetch step returned no rows", report=report, step=current.name, next_step=current.on_empty)
        current = by_name.get(current.on_empty) if current.on_empty else None

    return []


def soft_fail(default: Callable[..., T]):
    """
    Map any exception raised by the wrapped report coroutine to ``default``.

    ``default`` receives the same arguments as the report so a default can
    echo caller input (for example the requested period).
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "Report failed, returning default",
                    report=func.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                return default(*args, **kwargs)
        return wrapper
    return decorator
