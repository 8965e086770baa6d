"""
Requests to K8s API within the current session (see :mod:`auth`).

The errors of K8s API are raised as our own errors (see :mod:`errors`),
the network errors are raised as they come from aiohttp.

The waiting retries the transient errors on its own on every tick,
so the requests are not retried by default. If the retries are configured
(``settings.networking.error_backoffs``), the caller's ``timeout`` limits
the request together with all its retries and the pauses between them.
"""
import asyncio
from collections.abc import Mapping
from typing import Any

import aiohttp

from kubewait._cogs.clients import auth, errors
from kubewait._cogs.configs import configuration
from kubewait._cogs.helpers import typedefs

RETRIED_ERRORS = (aiohttp.ClientConnectionError, asyncio.TimeoutError, errors.APIServerError)


async def get_default_namespace(
        *,
        context: auth.APIContext | None = None,
) -> str | None:
    context = context if context is not None else auth.get_context()
    return context.default_namespace


async def request(
        method: str,
        url: str,  # relative to the server's root, or absolute.
        *,
        settings: configuration.WaitSettings,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        context: auth.APIContext | None = None,
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    """
    Make a request and check its response; the response is not read.

    The ``timeout`` (in seconds) limits all the attempts of the request
    together; `asyncio.TimeoutError` is raised when it is exceeded.
    """
    context = context if context is not None else auth.get_context()
    if '://' not in url:
        url = context.server.rstrip('/') + '/' + url.lstrip('/')

    backoffs = get_backoffs(settings)
    what = f"{method.upper()} {url}"
    async with asyncio.timeout(timeout):
        for attempt, backoff in enumerate(backoffs, start=1):
            try:
                return await _send(context, method, url, headers=headers, settings=settings)
            except RETRIED_ERRORS as e:
                logger.warning(f"{what} failed on attempt {attempt}/{len(backoffs) + 1}; "
                               f"retrying in {backoff}s: {e!r}")
                await asyncio.sleep(backoff)

        # The last or the only attempt: its errors go to the caller as they are.
        return await _send(context, method, url, headers=headers, settings=settings)


async def get(
        url: str,  # relative to the server's root, or absolute.
        *,
        settings: configuration.WaitSettings,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
        logger: typedefs.Logger,
) -> Any:
    """
    Get the parsed JSON body of a URL. The ``timeout`` includes reading the body.
    """
    async with asyncio.timeout(timeout):
        response = await request('get', url, headers=headers, settings=settings, logger=logger)
        async with response:
            return await response.json()


def get_backoffs(settings: configuration.WaitSettings) -> list[float]:
    backoffs = settings.networking.error_backoffs
    match backoffs:
        case None:
            return []
        case int() | float():
            return [backoffs]
        case _:
            return list(backoffs)


async def _send(
        context: auth.APIContext,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None,
        settings: configuration.WaitSettings,
) -> aiohttp.ClientResponse:
    response = await context.session.request(
        method=method,
        url=url,
        headers=headers,
        timeout=aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        ),
    )
    await errors.check_response(response)
    return response
