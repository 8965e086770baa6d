"""
Authenticated sessions to K8s API.

One session is opened per waiting (see :func:`authenticate`) and is kept
in a context variable until the waiting is over: the API calls inside
the predicates pick it up from there, so that the conditions do not need
to know anything about the credentials.
"""
import base64
import contextlib
import ssl
import tempfile
from collections.abc import AsyncIterator
from contextvars import ContextVar

import aiohttp

from kubewait._cogs.helpers import versions
from kubewait._cogs.structs import credentials

_current: ContextVar['APIContext'] = ContextVar('_current')


def get_context() -> 'APIContext':
    """ Get the session of the current waiting; fail if there is none. """
    try:
        return _current.get()
    except LookupError:
        raise credentials.LoginError("No credentials are available: not logged in.") from None


@contextlib.asynccontextmanager
async def authenticate(info: credentials.ConnectionInfo) -> AsyncIterator['APIContext']:
    """
    Open a session for the credentials, and make it current for the API calls inside.

    The session is closed when the block exits, regardless of the reason.
    """
    context = APIContext(info)
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)
        await context.close()


class APIContext:
    """
    An aiohttp session together with the connection info it is made for.

    All the requests of one waiting (the discovery and all the attempts)
    share the same session and, therefore, the same pool of connections.
    """

    def __init__(self, info: credentials.ConnectionInfo) -> None:
        super().__init__()
        self.server = info.server
        self.default_namespace = info.default_namespace
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=0, ssl=make_ssl_context(info)),
            headers=make_headers(info),
            auth=make_basic_auth(info),
        )

    async def close(self) -> None:
        await self.session.close()


def make_headers(info: credentials.ConnectionInfo) -> dict[str, str]:
    headers = {'User-Agent': f'kubewait/{versions.version or "unknown"}'}

    # RFC-7235: "Authorization: <scheme> [<token>]"; the bare tokens are of the Bearer scheme.
    scheme = info.scheme or ('Bearer' if info.token else None)
    if scheme:
        headers['Authorization'] = f'{scheme} {info.token}' if info.token else scheme
    return headers


def make_basic_auth(info: credentials.ConnectionInfo) -> aiohttp.BasicAuth | None:
    if info.username and info.password:
        return aiohttp.BasicAuth(info.username, info.password)
    return None


def make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    context = ssl.create_default_context(
        purpose=ssl.Purpose.SERVER_AUTH,
        cafile=info.ca_path,
        cadata=decode_to_pem(info.ca_data) if info.ca_data else None,
    )
    if info.insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    # The client certificates are only loaded from files. The files for
    # the inline data are created only when needed: the disk can be read-only.
    with contextlib.ExitStack() as stack:
        certfile = info.certificate_path or _store_pem(stack, info.certificate_data)
        keyfile = info.private_key_path or _store_pem(stack, info.private_key_data)
        if certfile and keyfile:
            context.load_cert_chain(certfile=certfile, keyfile=keyfile)
    return context


def _store_pem(stack: contextlib.ExitStack, data: bytes | None) -> str | None:
    if not data:
        return None
    file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
    file.write(decode_to_pem(data).encode('ascii'))
    return file.name


def decode_to_pem(data: str | bytes) -> str:
    """ Accept the PEM data as they are, or base64-encoded as in kubeconfigs. """
    text = data.decode('ascii') if isinstance(data, bytes) else data
    if text.startswith('-----BEGIN '):
        return text
    return base64.b64decode(text).decode('ascii')
