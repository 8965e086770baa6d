import pytest

from kubewait._cogs.clients.errors import APIForbiddenError, APIServerError
from kubewait._cogs.clients.scanning import ResourceResolutionError
from kubewait._cogs.structs.credentials import LoginError
from kubewait._core.intents.conditions import ConditionError
from kubewait._core.intents.outcomes import Cancelled, ObservationFailed, Satisfied, TimedOut
from kubewait.cli import describe


@pytest.mark.parametrize('outcome, exit_code, message', [
    (Satisfied(attempts=1, elapsed=1.0),
     0, "pods/pod1 condition met"),
    (TimedOut(attempts=2, elapsed=3.0),
     124, "pods/pod1: timed out waiting for the condition"),
    (TimedOut(attempts=2, elapsed=3.0, last_error=APIServerError(None, status=503)),
     124, "pods/pod1: timed out waiting for the condition (last error: 503: no details)"),
    (Cancelled(attempts=0, elapsed=0.0),
     130, "pods/pod1: cancelled"),
    (ObservationFailed(attempts=1, elapsed=1.0, cause=APIForbiddenError(None, status=403)),
     1, "pods/pod1: failed to observe: 403: no details"),
])
def test_outcomes_to_exit_codes(invoke, real_run, outcome, exit_code, message):
    real_run.return_value = outcome
    result = invoke(['for', '-f', 'create', 'pods', 'pod1'])
    assert result.exit_code == exit_code
    assert message in result.output


@pytest.mark.parametrize('error, message', [
    (LoginError("Cannot authenticate."), "Error: Cannot authenticate."),
    (ResourceResolutionError("Unresolved resource."), "Error: Unresolved resource."),
])
def test_setup_errors_are_reported(invoke, real_run, error, message):
    real_run.side_effect = error
    result = invoke(['for', '-f', 'create', 'pods', 'pod1'])
    assert result.exit_code == 1
    assert message in result.output


def test_condition_errors_are_usage_errors(invoke, real_run):
    real_run.side_effect = ConditionError("Unknown condition 'xyz'; known: create.")
    result = invoke(['for', '-f', 'xyz', 'pods', 'pod1'])
    assert result.exit_code == 2
    assert "Invalid value for '--for'" in result.output
    assert "Unknown condition 'xyz'" in result.output


def test_unexpected_errors_are_not_hidden(invoke, real_run):
    real_run.side_effect = RuntimeError("boo!")
    result = invoke(['for', '-f', 'create', 'pods', 'pod1'])
    assert result.exit_code == 1
    assert isinstance(result.exception, RuntimeError)


def test_describing_of_unknown_outcomes():
    with pytest.raises(TypeError, match=r"Unknown outcome"):
        describe(object(), resource='pods', name='pod1')  # type: ignore
