"""
Invoking the callbacks: the predicates & the progress sinks.

Both sync & async functions are supported, so as their partials.
Also, decorated wrappers and lambdas are recognized.
All of this goes via the same invocation logic and protocol.
"""
import asyncio
import contextvars
import functools
import inspect
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from kubewait._cogs.configs import configuration

# An internal typing hack shows that the callback can be sync fn with the result,
# or an async fn which returns a coroutine which, in turn, returns the result.
_R = TypeVar('_R')
SyncOrAsync = _R | Coroutine[None, None, _R]

# A generic sync-or-async callable with no args/kwargs checks (unlike in protocols).
Invokable = Callable[..., SyncOrAsync[object | None]]


async def invoke(
        fn: Invokable,
        *args: Any,
        settings: configuration.WaitSettings | None = None,
) -> Any:
    """
    Invoke a single function, but safely for the main asyncio process.

    The synchronous functions are executed in the executor (threads),
    thus making it non-blocking for the event loop and for other waits
    running in parallel in the same loop.
    """
    if is_async_fn(fn):
        result = await fn(*args)
    else:
        real_fn = functools.partial(fn, *args)

        # Copy the asyncio context from current thread to the callback's thread.
        context = contextvars.copy_context()
        real_fn = functools.partial(context.run, real_fn)

        # Prevent orphaned threads during cancellation. It is better to be stuck
        # in the task than to have orphan threads which deplete the executor's pool capacity.
        # Cancellation is postponed until the thread exits, but it happens anyway (for consistency).
        loop = asyncio.get_running_loop()
        executor = settings.execution.executor if settings is not None else None
        future = loop.run_in_executor(executor, real_fn)
        cancellation: asyncio.CancelledError | None = None
        while not future.done():
            try:
                await asyncio.shield(future)  # slightly expensive: creates tasks
            except asyncio.CancelledError as e:
                cancellation = e
        if cancellation is not None:
            raise cancellation
        result = future.result()

    # Some callables are sync by signature but return awaitables (e.g. lambdas over coroutines).
    if inspect.isawaitable(result):
        result = await result
    return result


def is_async_fn(
        fn: Invokable | None,
) -> bool:
    if fn is None:
        return False
    elif isinstance(fn, functools.partial):
        return is_async_fn(fn.func)
    elif hasattr(fn, '__wrapped__'):  # @functools.wraps()
        return is_async_fn(fn.__wrapped__)
    elif inspect.iscoroutinefunction(fn):
        return True
    elif not inspect.isroutine(fn) and callable(fn):  # callable objects with async __call__
        return inspect.iscoroutinefunction(type(fn).__call__)
    else:
        return False
