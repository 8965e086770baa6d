import asyncio
from collections.abc import Collection

from kubewait._cogs.clients import api, errors
from kubewait._cogs.configs import configuration
from kubewait._cogs.helpers import typedefs
from kubewait._cogs.structs import references


class ResourceResolutionError(Exception):
    """ Raised when a resource selector matches no resources or too many. """


async def resolve_resource(
        selector: references.Selector,
        *,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
) -> references.Resource:
    """
    Resolve a user-typed selector into a specific resource via the discovery.

    Only the selector's API group is scanned if it is specified;
    otherwise, all API groups of the cluster are scanned.
    """
    groups = {selector.group} if selector.group is not None else None
    resources = await scan_resources(groups=groups, settings=settings, logger=logger)
    selected = selector.select(resources)
    if not selected:
        raise ResourceResolutionError(f"Unresolved resource: {selector}")
    if len(selected) > 1:
        names = ', '.join(sorted(repr(resource) for resource in selected))
        raise ResourceResolutionError(f"Ambiguous resource {selector}: {names}")
    resource, = selected
    logger.debug(f"Resolved {selector} to {resource!r}.")
    return resource


async def scan_resources(
        *,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
        groups: Collection[str] | None = None,
) -> Collection[references.Resource]:
    coros = {
        _read_old_api(groups=groups, settings=settings, logger=logger),
        _read_new_apis(groups=groups, settings=settings, logger=logger),
    }
    resources: set[references.Resource] = set()
    for coro in asyncio.as_completed(coros):
        resources.update(await coro)
    return resources


async def _read_old_api(
        *,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
        groups: Collection[str] | None,
) -> Collection[references.Resource]:
    resources: set[references.Resource] = set()
    if groups is None or '' in groups:
        rsp = await api.get('/api', settings=settings, logger=logger)
        coros = {
            _read_version(
                url=f'/api/{version_name}',
                group='',
                version=version_name,
                preferred=True,
                settings=settings,
                logger=logger,
            )
            for version_name in rsp['versions']
        }
        for coro in asyncio.as_completed(coros):
            resources.update(await coro)
    return resources


async def _read_new_apis(
        *,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
        groups: Collection[str] | None,
) -> Collection[references.Resource]:
    resources: set[references.Resource] = set()
    if groups is None or set(groups) - {''}:
        rsp = await api.get('/apis', settings=settings, logger=logger)
        items = [d for d in rsp['groups'] if groups is None or d['name'] in groups]
        coros = {
            _read_version(
                url=f'/apis/{group_dat["name"]}/{version["version"]}',
                group=group_dat['name'],
                version=version['version'],
                preferred=version['version'] == group_dat['preferredVersion']['version'],
                settings=settings,
                logger=logger,
            )
            for group_dat in items
            for version in group_dat['versions']
        }
        for coro in asyncio.as_completed(coros):
            resources.update(await coro)
    return resources


async def _read_version(
        *,
        url: str,
        group: str,
        version: str,
        preferred: bool,
        settings: configuration.WaitSettings,
        logger: typedefs.Logger,
) -> Collection[references.Resource]:
    try:
        rsp = await api.get(url, settings=settings, logger=logger)
    except errors.APINotFoundError:
        # This happens when the last and the only resource of a group/version
        # has been deleted, and the whole group/version is gone while scanning.
        return set()
    else:
        # Note: builtins' singulars are empty strings in K3s (reasons unknown):
        # fall back to the lowercased kind so that the selectors could match.
        return {
            references.Resource(
                group=group,
                version=version,
                kind=resource['kind'],
                plural=resource['name'],
                singular=resource.get('singularName') or resource['kind'].lower(),
                shortcuts=frozenset(resource.get('shortNames', [])),
                namespaced=resource['namespaced'],
                preferred=preferred,
            )
            for resource in rsp.get('resources', [])
            if '/' not in resource['name']
        }
