"""Ordered try-next-on-empty execution of retrieval strategies."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Sequence

from .core.models import RawItem

logger = logging.getLogger(__name__)

StrategyFn = Callable[[], Awaitable[List[RawItem]]]


@dataclass(frozen=True, slots=True)
class Strategy:
    """One named step of a fallback chain."""

    name: str
    run: StrategyFn


async def first_non_empty(strategies: Sequence[Strategy], *, timeout: float, label: str = "") -> List[RawItem]:
    """Run strategies in order and return the first non-empty result.

    Each attempt is cancelled after ``timeout`` seconds. Errors and timeouts
    count as empty so the next strategy still runs; exhaustion returns [].
    """
    for strategy in strategies:
        try:
            items = await asyncio.wait_for(strategy.run(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("%s: %s timed out after %.1fs", label or "fallback", strategy.name, timeout)
            continue
        except Exception as exc:
            logger.warning("%s: %s failed: %s", label or "fallback", strategy.name, exc)
            continue
        if items:
            logger.debug("%s: %s produced %d items", label or "fallback", strategy.name, len(items))
            return list(items)
        logger.info("%s: %s returned nothing, trying next", label or "fallback", strategy.name)
    return []
