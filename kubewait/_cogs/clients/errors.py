"""
K8s API errors, as explained by K8s API in its ``Status`` responses.

Only the errors that the conditions or the users need to tell apart
have their own classes: e.g. the absence of an object is a legitimate
observation for some conditions. The rest are distinguishable by their
HTTP status, which is what the errors classification looks at.

Network-level errors are not wrapped: they come from aiohttp as they are.
The aiohttp's error of a response is chained as the cause of our own error.
"""
import json
from typing import TypedDict

import aiohttp


# https://kubernetes.io/docs/reference/kubernetes-api/common-definitions/status/
class RawStatus(TypedDict, total=False):
    apiVersion: str
    kind: str
    code: int
    reason: str
    message: str


class APIError(Exception):

    def __init__(self, payload: RawStatus | None, *, status: int) -> None:
        super().__init__(status, payload)
        self.status = status
        self.payload = payload

    def __str__(self) -> str:
        return f"{self.status}: {self.message or 'no details'}"

    @property
    def reason(self) -> str | None:
        return self.payload.get('reason') if self.payload else None

    @property
    def message(self) -> str | None:
        return self.payload.get('message') if self.payload else None


class APIClientError(APIError):
    pass


class APIServerError(APIError):
    pass


class APIUnauthorizedError(APIClientError):
    pass


class APIForbiddenError(APIClientError):
    pass


class APINotFoundError(APIClientError):
    pass


_SPECIFIC_ERRORS: dict[int, type[APIError]] = {
    401: APIUnauthorizedError,
    403: APIForbiddenError,
    404: APINotFoundError,
}


async def check_response(response: aiohttp.ClientResponse) -> None:
    """
    Raise an API error for the failed responses; pass the successful ones.
    """
    if response.status < 400:
        return

    payload = await _read_status(response)
    generic = APIClientError if response.status < 500 else APIServerError
    cls = _SPECIFIC_ERRORS.get(response.status, generic)

    # The body must be read before this: raise_for_status() releases the response.
    try:
        response.raise_for_status()
    except aiohttp.ClientResponseError as e:
        raise cls(payload, status=response.status) from e


async def _read_status(response: aiohttp.ClientResponse) -> RawStatus | None:
    try:
        payload = await response.json()
    except (json.JSONDecodeError, aiohttp.ContentTypeError, aiohttp.ClientConnectionError):
        return None

    # Other kinds can carry sensitive data (e.g. a Secret behind a proxy); never expose them.
    if isinstance(payload, dict) and payload.get('kind') == 'Status':
        status: RawStatus = payload  # type: ignore[assignment]
        return status
    return None
