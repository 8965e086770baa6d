"""
Sync predicates run in the thread executors, so the loop time is real here.
The intervals are short to keep the tests fast.
"""
import threading

from kubewait._core.actions.classification import TemporaryObservationError
from kubewait._core.engines.polling import Poller, PollSpec, wait
from kubewait._core.intents.outcomes import ObservationFailed, Satisfied


async def test_sync_predicate_is_satisfied():
    threads = []

    def predicate():
        threads.append(threading.current_thread())
        return {'kind': 'Pod'}

    outcome = await wait(PollSpec(interval=0.01, timeout=5, predicate=predicate))
    assert isinstance(outcome, Satisfied)
    assert outcome.result == {'kind': 'Pod'}
    assert outcome.attempts == 1
    assert threads and threads[0] is not threading.main_thread()


async def test_sync_predicate_errors_are_classified():
    results = iter([TemporaryObservationError("blip"), PermissionError("denied")])

    def predicate():
        raise next(results)

    outcome = await Poller(interval=0.01, timeout=5).wait(predicate)
    assert isinstance(outcome, ObservationFailed)
    assert isinstance(outcome.cause, PermissionError)
    assert outcome.attempts == 2


async def test_sync_lambdas_over_coroutines_are_awaited():

    async def check():
        return True

    outcome = await wait(PollSpec(interval=0.01, timeout=5, predicate=lambda: check()))
    assert isinstance(outcome, Satisfied)
    assert outcome.result is True
