import asyncio
import dataclasses
import logging
import re
from collections.abc import Mapping
from typing import Any

import aiohttp.test_utils
import aiohttp.web
import pytest

from kubewait._cogs.configs.configuration import WaitSettings
from kubewait._cogs.structs.credentials import ConnectionInfo
from kubewait._cogs.structs.references import Resource, Selector
from kubewait._core.intents.registries import ConditionRegistry, get_default_registry, \
                                              set_default_registry


def pytest_configure(config):
    config.addinivalue_line('markers', "e2e: end-to-end tests with real clusters.")


@pytest.fixture()
def namespaced_resource():
    """ The resource used in the tests. Usually faked, so it does not matter. """
    return Resource('kubewait.dev', 'v1', 'kubewaitexamples', kind='KubeWaitExample',
                    singular='kubewaitexample', shortcuts=frozenset({'kwe'}), namespaced=True)


@pytest.fixture()
def cluster_resource():
    """ The resource used in the tests. Usually faked, so it does not matter. """
    return Resource('kubewait.dev', 'v1', 'clusterkubewaitexamples', kind='ClusterKubeWaitExample',
                    singular='clusterkubewaitexample', namespaced=False)


@pytest.fixture(params=[True, False], ids=['namespaced', 'cluster'])
def resource(request, namespaced_resource, cluster_resource):
    """ The resource used in the tests. Usually faked, so it does not matter. """
    return namespaced_resource if request.param else cluster_resource


@pytest.fixture()
def selector(resource):
    """ The selector used in the tests. Usually faked, so it does not matter. """
    return Selector(name=resource.plural, group=resource.group, version=resource.version)


@pytest.fixture()
def namespace(resource):
    return 'ns' if resource.namespaced else None


@pytest.fixture()
def settings():
    return WaitSettings()


@pytest.fixture()
def logger():
    return logging.getLogger('kubewait.test.fake.logger')


#
# Mocks for the kubewait's internal but global variables.
#

@pytest.fixture(autouse=True)
def registry():
    """
    Ensure that the tests have a fresh new global (not re-used) registry.
    """
    old_registry = get_default_registry()
    new_registry = ConditionRegistry()
    set_default_registry(new_registry)
    yield new_registry
    set_default_registry(old_registry)


#
# A fake K8s API. Reasons:
# 1. We do not test aiohttp, we test the layers on top of it,
#    so the HTTP level is real, but the server's responses are pre-programmed.
# 2. No external calls must be made under any circumstances.
#    The unit-tests must be fully isolated from the environment.
#

@dataclasses.dataclass(frozen=True)
class FakeRequest:
    method: str
    path: str
    query: Mapping[str, str]
    headers: Mapping[str, str]


class FakeAPI:
    """
    A fake K8s API with the pre-programmed responses per method & path.

    The responses for the same method & path are served in the order they were
    added; the last one is then served forever. The unexpected requests get
    HTTP 418, which is not retried and is a fatal error for the waiting.
    The responses can be delayed to simulate a slow or hanging API.

    Sample usage::

        async def test_me(fake_api):
            fake_api.add('get', '/api/v1/namespaces/ns/pods/pod1', {'kind': 'Pod'})
            fake_api.add_status('get', '/api/v1/namespaces/ns/pods/pod2', 404)
            ...
            assert len(fake_api.requests) == 2
    """

    def __init__(self) -> None:
        super().__init__()
        self.url = ''
        self.requests: list[FakeRequest] = []
        self._responses: dict[tuple[str, str], list[tuple[int, Any, float]]] = {}

    def add(self, method: str, path: str, body: Any = None, *, status: int = 200, delay: float = 0) -> None:
        self._responses.setdefault((method.upper(), path), []).append((status, body, delay))

    def add_status(self, method: str, path: str, status: int, message: str = 'fake', *, delay: float = 0) -> None:
        body = {'apiVersion': 'v1', 'kind': 'Status', 'code': status, 'message': message}
        self.add(method, path, body, status=status, delay=delay)

    def add_discovery(self, *resources: Resource) -> None:
        core_versions = sorted({r.version for r in resources if r.group == ''})
        self.add('get', '/api', {'versions': core_versions})
        for version in core_versions:
            items = [r for r in resources if r.group == '' and r.version == version]
            self.add('get', f'/api/{version}', {'resources': [_discovered(r) for r in items]})

        groups: dict[str, dict[str, list[Resource]]] = {}
        for r in resources:
            if r.group:
                groups.setdefault(r.group, {}).setdefault(r.version, []).append(r)
        self.add('get', '/apis', {'groups': [
            {
                'name': group,
                'preferredVersion': {'version': _preferred_version(versions)},
                'versions': [{'version': version} for version in versions],
            }
            for group, versions in groups.items()
        ]})
        for group, versions in groups.items():
            for version, items in versions.items():
                self.add('get', f'/apis/{group}/{version}', {'resources': [_discovered(r) for r in items]})

    async def handle(self, request: aiohttp.web.Request) -> aiohttp.web.StreamResponse:
        self.requests.append(FakeRequest(
            method=request.method,
            path=request.path,
            query=dict(request.query),
            headers=dict(request.headers),
        ))
        queue = self._responses.get((request.method, request.path))
        if not queue:
            body = {'kind': 'Status', 'code': 418, 'message': f'Unexpected {request.method} {request.path}'}
            return aiohttp.web.json_response(body, status=418)
        status, body, delay = queue.pop(0) if len(queue) > 1 else queue[0]
        if delay:
            await asyncio.sleep(delay)
        return aiohttp.web.json_response(body, status=status)


def _discovered(resource: Resource) -> dict[str, Any]:
    return {
        'name': resource.plural,
        'singularName': resource.singular or '',
        'kind': resource.kind,
        'namespaced': bool(resource.namespaced),
        'shortNames': sorted(resource.shortcuts),
    }


def _preferred_version(versions: Mapping[str, list[Resource]]) -> str:
    preferred = [version for version, items in versions.items() if any(r.preferred for r in items)]
    return (preferred or list(versions))[0]


@pytest.fixture()
async def fake_api():
    api = FakeAPI()
    app = aiohttp.web.Application()
    app.router.add_route('*', '/{path:.*}', api.handle)
    async with aiohttp.test_utils.TestServer(app) as server:
        api.url = f'http://{server.host}:{server.port}'
        yield api


@pytest.fixture()
def info(fake_api):
    """ The credentials for the fake API. Use with `authenticate()` in the tests. """
    return ConnectionInfo(server=fake_api.url, default_namespace='default-ns')


#
# Helpers for the logging checks.
#

@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    def assert_logs_fn(patterns, prohibited=[], strict=False):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # The expected pattern is at position 0.
            # Looking-ahead: if one of the following patterns matches, while the
            # 0th does not, then the log message is missing, and we fail the test.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
                elif strict:
                    raise AssertionError(f"Unexpected log message: {message!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        # If all patterns have been matched in order, we are done.
        # if some are left, but the messages are over, then we fail.
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
