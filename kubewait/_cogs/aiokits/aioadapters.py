"""
Cancellation flags of the waiting, as raised by the callers.

The waiting only checks the flags on its ticks and never awaits them.
So, the flags raised from other threads work as well as the asyncio ones:
e.g. when an application runs the waiting in a dedicated thread & event loop
(as :func:`kubewait.run` does) and stops it from its main thread.
"""
import asyncio
import threading
from typing import Any

# An asyncio future is raised when it is done in any way: with a result, an error, or cancelled.
Flag = asyncio.Event | asyncio.Future[Any] | threading.Event


def is_raised(flag: Flag | None) -> bool:
    """
    Check if a flag is raised. Never blocks. No flag is never raised.
    """
    if flag is None:
        return False
    elif isinstance(flag, asyncio.Future):
        return flag.done()
    elif isinstance(flag, (asyncio.Event, threading.Event)):
        return flag.is_set()
    else:
        raise TypeError(f"Unsupported cancellation flag: {flag!r}")
