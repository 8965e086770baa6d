import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logger():
    logger = logging.getLogger()
    original_handlers = logger.handlers[:]
    original_level = logger.level
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(original_level)


@pytest.mark.parametrize('expect_debug, expect_info, options, envvars', [
    (False, True, [], {}),
    (False, False, ['-q'], {}),
    (False, False, ['--quiet'], {}),
    (False, False, [], {'KUBEWAIT_FOR_QUIET': 'true'}),
    (True, True, ['-d'], {}),
    (True, True, ['--debug'], {}),
    (True, True, [], {'KUBEWAIT_FOR_DEBUG': 'true'}),
    (True, True, ['-v'], {}),
    (True, True, ['--verbose'], {}),
    (True, True, [], {'KUBEWAIT_FOR_VERBOSE': 'true'}),
], ids=[
    'default',
    'opt-short-q', 'opt-long-quiet', 'env-quiet-true',
    'opt-short-d', 'opt-long-debug', 'env-debug-true',
    'opt-short-v', 'opt-long-verbose', 'env-verbose-true',
])
def test_verbosity(invoke, caplog, options, envvars, expect_debug, expect_info, real_run):
    result = invoke(['for', '-f', 'create', *options, 'pods', 'pod1'], env=envvars)
    assert result.exit_code == 0

    logger = logging.getLogger()
    logger.debug('some debug')
    logger.info('some info')
    logger.warning('some warning')
    logger.error('some error')

    assert len(caplog.records) >= 2 + int(expect_info) + int(expect_debug)
    assert caplog.records[-1].message == 'some error'
    assert caplog.records[-2].message == 'some warning'
    if expect_info:
        assert caplog.records[-3].message == 'some info'
    if expect_debug:
        assert caplog.records[-4].message == 'some debug'


@pytest.mark.parametrize('options', [
    ([]),
    (['-q']),
    (['--quiet']),
    (['-v']),
    (['--verbose']),
], ids=['default', 'q', 'quiet', 'v', 'verbose'])
def test_no_lowlevel_dumps_in_nondebug(invoke, caplog, options, real_run):
    result = invoke(['for', '-f', 'create', *options, 'pods', 'pod1'])
    assert result.exit_code == 0

    logging.getLogger('aiohttp').error('boom!')
    logging.getLogger('asyncio').error('boom!')

    assert len(caplog.records) == 0


@pytest.mark.parametrize('options', [
    (['-d']),
    (['--debug']),
], ids=['d', 'debug'])
def test_lowlevel_dumps_in_debug_mode(invoke, caplog, options, real_run):
    result = invoke(['for', '-f', 'create', *options, 'pods', 'pod1'])
    assert result.exit_code == 0

    logging.getLogger('aiohttp').debug('hello!')
    logging.getLogger('asyncio').debug('hello!')

    assert len(caplog.records) == 2


@pytest.mark.parametrize('log_format', ['plain', 'full', 'json'])
def test_log_formats(invoke, real_run, log_format):
    result = invoke(['for', '-f', 'create', f'--log-format={log_format}', 'pods', 'pod1'])
    assert result.exit_code == 0


def test_unknown_log_format(invoke, real_run):
    result = invoke(['for', '-f', 'create', '--log-format=xml', 'pods', 'pod1'])
    assert result.exit_code == 2
    assert not real_run.called
