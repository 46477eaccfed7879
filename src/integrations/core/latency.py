"""Bounded random delay used by stub providers."""

from __future__ import annotations

import asyncio
import random


async def simulate_latency(min_ms: int, max_ms: int) -> None:
    """Sleep for a random interval in [min_ms, max_ms] milliseconds.

    A zero upper bound returns immediately without yielding to the loop.
    """
    if max_ms <= 0:
        return
    delay_ms = random.randint(max(0, min_ms), max_ms)
    await asyncio.sleep(delay_ms / 1000)
