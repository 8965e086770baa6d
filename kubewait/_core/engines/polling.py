"""
Bounded polling: waiting until a predicate is satisfied, within a deadline.

The waiting is a cooperative tick loop in the event loop, not a busy-polling:
between the ticks, the waiting task sleeps and does not occupy the loop.
On every tick, in this strict order:

* the cancellation flag is checked (the cancellation goes first);
* the deadline is checked (no predicate calls at or after the deadline);
* the predicate is invoked, once;
* a satisfied predicate completes the waiting immediately;
* an error is classified: fatal errors complete the waiting immediately,
  transient errors are treated as "not yet" until the next tick;
* the progress is reported to the sink (if any), best-effort.

The first tick happens one interval after the start, not immediately:
the resources are usually mutated right before the waiting, and there is
no need to hammer them instantly. The following ticks happen one interval
after the previous scheduled ticks. If a predicate is slower than the interval,
the next tick starts late (right away), and the schedule shifts from there.
The ticks are never dropped, and the overrun time is counted toward the deadline.

The cancellation is cooperative and is checked only on the ticks: a raised flag
is noticed on the next tick boundary, and slow predicates are not interrupted.
Cancelling the waiting asyncio task itself works as usual in asyncio:
the `asyncio.CancelledError` is propagated, and no outcome is produced.

Every waiting produces exactly one outcome. The observation errors are never
raised from the waiting; they are returned as a failed observation instead.
"""
import asyncio
import dataclasses
import logging
import math
from collections.abc import Awaitable, Collection

from kubewait._cogs.aiokits import aioadapters, aiotime
from kubewait._cogs.configs import configuration
from kubewait._cogs.helpers import typedefs
from kubewait._core.actions import classification, invocation
from kubewait._core.engines import progress
from kubewait._core.intents import outcomes

logger = logging.getLogger(__name__)

# A sync or async callable with no arguments. See `outcomes.Observation` for the results.
Predicate = invocation.Invokable


@dataclasses.dataclass(frozen=True)
class PollSpec:
    """
    The immutable configuration of one waiting.

    The timeout can be shorter than the interval: then, the waiting times out
    without invoking the predicate at all (the deadline comes before any tick).
    """
    interval: float
    timeout: float
    predicate: Predicate

    def __post_init__(self) -> None:
        for name in ['interval', 'timeout']:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise TypeError(f"The {name} must be a number of seconds, got {value!r}.")
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"The {name} must be a positive finite number, got {value!r}.")
        if not callable(self.predicate):
            raise TypeError(f"The predicate must be callable, got {self.predicate!r}.")

    @classmethod
    def from_settings(
            cls,
            predicate: Predicate,
            settings: configuration.WaitSettings,
    ) -> "PollSpec":
        return cls(
            interval=settings.polling.interval,
            timeout=settings.polling.timeout,
            predicate=predicate,
        )


async def wait(
        spec: PollSpec,
        cancel_flag: aioadapters.Flag | None = None,
        *,
        progress_sink: progress.ProgressSink | None = None,
        classifier: classification.Classifier | None = None,
        settings: configuration.WaitSettings | None = None,
        description: str | None = None,
        logger: typedefs.Logger = logger,
) -> outcomes.Outcome:
    """
    Wait until the predicate is satisfied, the deadline is reached, or cancelled.
    """
    settings = settings if settings is not None else configuration.WaitSettings()
    classifier = classifier if classifier is not None else classification.classify
    target = f" for {description}" if description else ""

    loop = asyncio.get_running_loop()
    started = loop.time()
    deadline = started + spec.timeout
    attempts = 0
    last_error: BaseException | None = None

    # The flag could be raised long before the waiting: no need to wait for the 1st tick then.
    if aioadapters.is_raised(cancel_flag):
        logger.info(f"Waiting{target} is cancelled before it has started.")
        return outcomes.Cancelled(attempts=attempts, elapsed=0.0)

    # The schedule is (re)based on the start or on the latest overrun tick, never drifting.
    base = started
    tick_no = 0
    while True:
        tick_no += 1
        tick_at = base + tick_no * spec.interval
        now = loop.time()
        if tick_at < now:
            logger.debug(f"Tick #{tick_no} is late by {now - tick_at:.3f}s; starting it now.")
            base, tick_no, tick_at = now, 0, now
        await aiotime.sleep([tick_at - now, deadline - now])

        # If the deadline comes at or before the scheduled tick, it is the deadline's tick.
        elapsed = loop.time() - started
        if aioadapters.is_raised(cancel_flag):
            logger.info(f"Waiting{target} is cancelled after {attempts} attempts in {elapsed:.1f}s.")
            return outcomes.Cancelled(attempts=attempts, elapsed=elapsed)
        if deadline <= tick_at or loop.time() >= deadline:
            logger.warning(f"Waiting{target} has timed out after {attempts} attempts in {elapsed:.1f}s.")
            return outcomes.TimedOut(attempts=attempts, elapsed=elapsed, last_error=last_error)

        attempts += 1
        state = outcomes.ProgressState.NOT_YET
        error: BaseException | None = None
        try:
            result = await invocation.invoke(spec.predicate, settings=settings)
        except Exception as e:
            elapsed = loop.time() - started
            extra = dict(attempt=attempts, elapsed=round(elapsed, 3))
            error_class = classifier(e, settings)
            if error_class is classification.ErrorClass.FATAL:
                logger.error(f"Waiting{target} has failed on attempt #{attempts}: {e!r}", extra=extra)
                return outcomes.ObservationFailed(attempts=attempts, elapsed=elapsed, cause=e)
            logger.debug(f"Attempt #{attempts}{target} has failed with a transient error: {e!r}",
                         extra=extra)
            state = outcomes.ProgressState.TRANSIENT_ERROR
            error = last_error = e
        else:
            elapsed = loop.time() - started
            extra = dict(attempt=attempts, elapsed=round(elapsed, 3))
            if result:
                logger.info(f"Waiting{target} is satisfied after {attempts} attempts in {elapsed:.1f}s.",
                            extra=extra)
                return outcomes.Satisfied(attempts=attempts, elapsed=elapsed, result=result)
            logger.debug(f"Attempt #{attempts}{target} is not satisfied yet.", extra=extra)

        if settings.progress.enabled:
            event = outcomes.ProgressEvent(
                attempt=attempts,
                elapsed=elapsed,
                state=state,
                error=error,
                description=description,
            )
            await progress.report(progress_sink, event, logger=logger)


class Poller:
    """
    A reusable configuration for multiple independent waits.

    The poller itself has no state of the waits: every call to :meth:`wait`
    is fully independent, so several waits can run concurrently.
    """

    def __init__(
            self,
            *,
            interval: float | None = None,
            timeout: float | None = None,
            settings: configuration.WaitSettings | None = None,
            classifier: classification.Classifier | None = None,
            logger: typedefs.Logger = logger,
    ) -> None:
        super().__init__()
        self.settings = settings if settings is not None else configuration.WaitSettings()
        self.interval = interval if interval is not None else self.settings.polling.interval
        self.timeout = timeout if timeout is not None else self.settings.polling.timeout
        self.classifier = classifier
        self.logger = logger

    @classmethod
    def from_settings(cls, settings: configuration.WaitSettings) -> "Poller":
        return cls(settings=settings)

    async def wait(
            self,
            predicate: Predicate,
            cancel_flag: aioadapters.Flag | None = None,
            *,
            progress_sink: progress.ProgressSink | None = None,
            description: str | None = None,
    ) -> outcomes.Outcome:
        spec = PollSpec(interval=self.interval, timeout=self.timeout, predicate=predicate)
        return await wait(
            spec,
            cancel_flag,
            progress_sink=progress_sink,
            classifier=self.classifier,
            settings=self.settings,
            description=description,
            logger=self.logger,
        )


async def wait_all(
        *waits: Awaitable[outcomes.Outcome],
) -> Collection[outcomes.Outcome]:
    """
    Wait for all the waits concurrently, and return all their outcomes in order.
    """
    return list(await asyncio.gather(*waits))


async def wait_any(
        *waits: Awaitable[outcomes.Outcome],
) -> outcomes.Outcome:
    """
    Wait until any of the waits is satisfied; cancel the rest of them.

    If none of them is satisfied, the last completed outcome is returned:
    it is the moment when there is nothing else to wait for.
    """
    if not waits:
        raise ValueError("Nothing to wait for: at least one wait is required.")

    tasks = [asyncio.ensure_future(coro) for coro in waits]
    outcome: outcomes.Outcome | None = None
    try:
        for future in asyncio.as_completed(tasks):
            outcome = await future
            if outcome.satisfied:
                break
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    if outcome is None:  # impossible, but needed for type-checking.
        raise RuntimeError("No outcome is produced by the waits.")
    return outcome
