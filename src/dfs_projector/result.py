"""Result type and the fallback combinators built on it.

Every calculator failure and every provider failure in the projection
pipelines is funnelled through this module, so the defaulting policy lives
in one place:

    fetched = await capture_async(provider.pitcher_stats(pid, season), label="pitcher_stats")
    stats = unwrap_or(fetched, None)

    result = recover(lambda: hits.calculate(inputs), hits.default, label="hits")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E


type Result[T, E] = Ok[T] | Err[E]


def unwrap_or[T, D](result: Result[T, Exception], default: D) -> T | D:
    match result:
        case Ok(value):
            return value
        case _:
            return default


def capture[T](fn: Callable[[], T]) -> Result[T, Exception]:
    """Run ``fn`` and wrap its return value or raised exception."""
    try:
        return Ok(fn())
    except Exception as e:
        return Err(e)


async def capture_async[T](awaitable: Awaitable[T], *, label: str) -> Result[T, Exception]:
    """Await ``awaitable``; a raised exception becomes ``Err`` and is logged."""
    try:
        return Ok(await awaitable)
    except Exception as e:
        logger.warning("Fetch %s failed: %s", label, e)
        return Err(e)


def recover[T](fn: Callable[[], T], default: Callable[[], T], *, label: str) -> T:
    """Return ``fn()``, or ``default()`` when ``fn`` raises.

    The failure is logged once at WARNING with ``label`` so a defaulted
    category is always traceable to its cause.
    """
    match capture(fn):
        case Ok(value):
            return value
        case Err(error):
            logger.warning("Falling back to default for %s: %s", label, error)
            return default()
