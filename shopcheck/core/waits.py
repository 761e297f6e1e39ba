"""
Bounded waits.

The storefront gives no completion signal after navigation or form actions,
so every "is it there yet?" question goes through await_condition: poll a
predicate until it holds or the budget runs out. A timeout is an ordinary
False, never an exception; callers decide what absence means.
"""

import asyncio
import inspect
import time
from typing import Awaitable, Callable, Union

DEFAULT_POLL_INTERVAL = 250  # ms

Predicate = Callable[[], Union[bool, Awaitable[bool]]]


class SystemClock:
    """Wall clock backed by time.monotonic and asyncio.sleep."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000

    async def sleep_ms(self, ms: float) -> None:
        await asyncio.sleep(ms / 1000)


SYSTEM_CLOCK = SystemClock()


async def await_condition(
    predicate: Predicate,
    timeout_ms: float,
    *,
    clock=None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> bool:
    """
    Wait until predicate() is truthy or timeout_ms elapses.

    The predicate is always evaluated at least once, so a zero budget is a
    plain check.

    Args:
        predicate: Sync or async callable returning a bool
        timeout_ms: Wait budget in milliseconds
        clock: Object with now_ms() and async sleep_ms(); defaults to the
            system clock
        poll_interval: Delay between evaluations in milliseconds

    Returns:
        True if the condition held within the budget, False on timeout
    """
    clock = clock or SYSTEM_CLOCK
    deadline = clock.now_ms() + timeout_ms

    while True:
        result = predicate()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return True

        remaining = deadline - clock.now_ms()
        if remaining <= 0:
            return False
        await clock.sleep_ms(min(poll_interval, remaining))


async def settle(ms: float, clock=None) -> None:
    """Fixed delay for DOM updates that have no readiness signal."""
    clock = clock or SYSTEM_CLOCK
    if ms > 0:
        await clock.sleep_ms(ms)
