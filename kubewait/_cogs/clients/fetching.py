from kubewait._cogs.clients import api
from kubewait._cogs.configs import configuration
from kubewait._cogs.helpers import typedefs
from kubewait._cogs.structs import bodies, references


async def fetch_by_name(
        *,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        settings: configuration.WaitSettings,
        timeout: float | None = None,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Read one specific object of a resource by its name.

    The absence of the object is signalled with `errors.APINotFoundError`,
    as well as all other K8s API errors: it is the caller's decision
    whether the absence is an expected observation or an error.

    The ``timeout`` limits the whole reading, including the retries (if any):
    the predicates use the polling interval here, so that the ticks never overrun.
    """
    url = resource.get_url(namespace=namespace, name=name)
    body: bodies.RawBody = await api.get(url, settings=settings, timeout=timeout, logger=logger)
    return body
