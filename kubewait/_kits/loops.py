import asyncio
import contextlib
from collections.abc import Callable, Iterator


@contextlib.contextmanager
def proper_runner(*, use_uvloop: bool = True) -> Iterator[asyncio.Runner]:
    """
    Ensure that we have the proper loop runner, properly managed and closed.

    If ``uvloop`` is installed, it is used for the new loop.
    Otherwise, the default loop factory of the event loop policy is used.

    This loop manager is usually used in CLI only, not deeper than that;
    the embedding applications run the waiting coroutines in their own loops.
    """
    loop_factory: Callable[[], asyncio.AbstractEventLoop] | None = None
    if use_uvloop:
        try:
            import uvloop
        except ImportError:
            pass
        else:
            loop_factory = uvloop.new_event_loop

    with asyncio.Runner(loop_factory=loop_factory) as runner:
        yield runner
