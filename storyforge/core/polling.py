"""
Polling utilities for long-running provider operations.

Video generation returns an operation handle that must be re-fetched until it
reports completion. Polling here is a scheduled retry on the event loop: the
wait between fetches is an ``asyncio`` timer that an AbortToken can cut short,
so outstanding polls never block other work and can be cancelled.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from storyforge.core.exceptions import OperationAbortedError, PollTimeoutError
from storyforge.core.logging_config import get_logger

logger = get_logger("core.polling")

T = TypeVar("T")


class AbortToken:
    """Cooperative cancellation flag shared between a caller and a poll loop."""

    def __init__(self):
        self._event = asyncio.Event()

    def abort(self) -> None:
        self._event.set()

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    async def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; return True if aborted meanwhile."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


async def poll_until_done(
    operation: T,
    fetch: Callable[[T], Awaitable[T]],
    is_done: Callable[[T], bool],
    interval: float,
    abort_token: Optional[AbortToken] = None,
    max_wait: Optional[float] = None,
    name: str = "operation",
) -> T:
    """
    Re-fetch ``operation`` every ``interval`` seconds until ``is_done`` holds.

    Args:
        operation: Initial operation handle
        fetch: Async callable returning the refreshed handle
        is_done: Predicate on a handle
        interval: Fixed delay between fetches (seconds)
        abort_token: Optional token; aborting raises OperationAbortedError
        max_wait: Optional deadline in seconds; exceeding raises PollTimeoutError
        name: Label used in logs and errors

    Returns:
        The first handle for which ``is_done`` is true
    """
    loop = asyncio.get_running_loop()
    started = loop.time()
    polls = 0

    while not is_done(operation):
        if abort_token is not None and abort_token.aborted:
            raise OperationAbortedError(name)

        waited = loop.time() - started
        if max_wait is not None and waited >= max_wait:
            raise PollTimeoutError(name, waited)

        if abort_token is not None:
            if await abort_token.wait(interval):
                raise OperationAbortedError(name)
        else:
            await asyncio.sleep(interval)

        polls += 1
        logger.debug(f"Polling {name} (#{polls})")
        operation = await fetch(operation)

    logger.debug(f"{name} finished after {polls} poll(s)")
    return operation
