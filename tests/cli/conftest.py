import functools

import click.testing
import pytest

from kubewait._core.intents.outcomes import Satisfied
from kubewait.cli import main


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture()
def real_run(mocker):
    return mocker.patch('kubewait._core.reactor.running.run',
                        return_value=Satisfied(attempts=1, elapsed=1.0))
