"""
Progress sinks: the consumers of the per-tick progress events.

A sink is any callable (sync or async) that accepts a `ProgressEvent`.
The sync sinks are called directly in the event loop, so they must be fast.
Their results are ignored. Their failures are logged and ignored too:
the reporting is best-effort and never affects the outcome of waiting.
"""
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable

import click

from kubewait._cogs.helpers import typedefs
from kubewait._core.intents import outcomes

ProgressSink = Callable[[outcomes.ProgressEvent], Awaitable[object | None] | object | None]


def format_event(event: outcomes.ProgressEvent) -> str:
    """
    Render an event as a human-readable line.

    E.g.: ``Waiting for Service my-svc: attempt 3, 45s elapsed``.
    """
    target = f" for {event.description}" if event.description else ""
    text = f"Waiting{target}: attempt {event.attempt}, {event.elapsed:.0f}s elapsed"
    if event.state is outcomes.ProgressState.TRANSIENT_ERROR:
        text += f" (retrying after an error: {event.error})"
    return text


class LoggingProgressSink:
    """ Report the progress to a logger (or to the package's default logger). """

    def __init__(
            self,
            logger: typedefs.Logger | None = None,
            *,
            level: int = logging.INFO,
    ) -> None:
        super().__init__()
        self.logger = logger if logger is not None else logging.getLogger('kubewait.progress')
        self.level = level

    def __call__(self, event: outcomes.ProgressEvent) -> None:
        self.logger.log(self.level, format_event(event))


class EchoProgressSink:
    """ Report the progress to the terminal, for humans (stderr by default). """

    def __init__(self, *, err: bool = True) -> None:
        super().__init__()
        self.err = err

    def __call__(self, event: outcomes.ProgressEvent) -> None:
        click.echo(format_event(event), err=self.err)


class MultiProgressSink:
    """
    Fan the events out to several sinks, isolating their failures.

    A failure of one sink does not prevent other sinks from getting the event.
    """

    def __init__(
            self,
            sinks: Iterable[ProgressSink],
            *,
            logger: typedefs.Logger | None = None,
    ) -> None:
        super().__init__()
        self.sinks = list(sinks)
        self.logger = logger if logger is not None else logging.getLogger('kubewait.progress')

    async def __call__(self, event: outcomes.ProgressEvent) -> None:
        for sink in self.sinks:
            await report(sink, event, logger=self.logger)


async def report(
        sink: ProgressSink | None,
        event: outcomes.ProgressEvent,
        *,
        logger: typedefs.Logger,
) -> None:
    """
    Deliver the event to the sink, if any. Never raises for the sink's failures.
    """
    if sink is None:
        return
    try:
        result = sink(event)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.warning(f"Progress sink {sink!r} failed to accept the progress; ignoring: {e!r}")
