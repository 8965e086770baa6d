"""
Advanced modes of sleeping.
"""
import asyncio
from collections.abc import Collection


async def sleep(
        delays: float | None | Collection[float | None],
) -> None:
    """
    Sleep for the shortest of the delays, skipping the unset (``None``) ones.

    Negative or zero delays are treated as already passed: the sleep is skipped
    entirely, without even yielding to the event loop for a zero-time sleep.
    """
    if delays is None or isinstance(delays, (int, float)):
        delays = [delays]
    actual_delays = [delay for delay in delays if delay is not None]
    minimal_delay = min(actual_delays) if actual_delays else 0

    # Do not go for the real low-level system sleep if there is no need to sleep.
    if minimal_delay > 0:
        await asyncio.sleep(minimal_delay)
