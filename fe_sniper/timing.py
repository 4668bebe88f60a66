"""Timing utilities: poll sleeps, jittered backoff and drop-time waits."""
from __future__ import annotations

import asyncio
import random
import time
from datetime import datetime
from typing import Callable, Optional

# Drop-mode backoff: base plus a uniform random extra, in milliseconds
BACKOFF_BASE_MS = 1000
BACKOFF_JITTER_MS = 2000

SPIN_STEP_MS = 100


def backoff_delay(base_ms: float = BACKOFF_BASE_MS, jitter_ms: float = BACKOFF_JITTER_MS) -> float:
    """
    Jittered backoff between drop-page reloads.

    Returns:
        Delay in seconds (for asyncio.sleep)
    """
    return (base_ms + random.uniform(0, jitter_ms)) / 1000


async def human_delay(action: str = "default") -> None:
    """
    Add a human-like pause between browser actions.

    Different actions have different typical delays.
    """
    delays = {
        "click": (80, 250),
        "type": (40, 120),
        "move": (8, 25),         # Between pointer steps
        "default": (100, 400),
    }

    min_ms, max_ms = delays.get(action, delays["default"])
    await asyncio.sleep(random.uniform(min_ms, max_ms) / 1000)


async def sleep_or_stop(seconds: float, stop: Optional[asyncio.Event]) -> bool:
    """Sleep for an interval. Returns True if `stop` fired meanwhile."""
    if stop is None:
        await asyncio.sleep(seconds)
        return False

    try:
        await asyncio.wait_for(stop.wait(), timeout=seconds)
        return True
    except asyncio.TimeoutError:
        return False


def now_epoch() -> float:
    """Current time as a timezone-neutral epoch timestamp in seconds."""
    return time.time()


def to_epoch(when: datetime) -> float:
    """
    Convert a drop time to an epoch timestamp.

    Naive datetimes are taken as local wall-clock time, which is how drop
    times are announced.
    """
    if when.tzinfo is None:
        when = when.astimezone()
    return when.timestamp()


async def wait_until(
    target: float,
    step_ms: float = SPIN_STEP_MS,
    clock: Callable[[], float] = now_epoch,
) -> int:
    """
    Spin in fixed small steps until `clock()` reaches `target`.

    Returns:
        Number of steps slept
    """
    steps = 0
    while clock() < target:
        await asyncio.sleep(step_ms / 1000)
        steps += 1
    return steps
