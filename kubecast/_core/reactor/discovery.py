"""
Discovery of the kinds & versions served by the cluster.

The discovery goes in two passes, strictly one after another:

* First, the resource lists of all the API clients are fetched: every listed
  resource registers its kind as served by the list's group-version and by
  the API client. Every group-version is self-preferred at this stage, since
  some groups (notably the core one) never appear in the second pass.
* Second, the group catalogs are fetched: their preferred versions overwrite
  the self-preferences of all the group-versions of the group.

Within each pass, the API clients are queried concurrently, but the results
are applied in the order of the API clients, so that the inventory is stable.

The API clients that do not expose a catalog, that need arguments for it
(e.g. the custom objects' catalogs of a specific group), or for which the cluster
responds with "not found" (e.g. the API group is not enabled), are skipped.
Any other failure aborts the discovery.
"""
import functools
import inspect
import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from kubecast._cogs.clients import errors
from kubecast._cogs.configs import configuration
from kubecast._cogs.structs import kinds
from kubecast._core.actions import execution, materialization
from kubecast._core.reactor import inventory

logger = logging.getLogger(__name__)

RESOURCE_LIST_FN = 'get_api_resources'
GROUP_CATALOG_FN = 'get_api_group'


async def discover(
        *,
        handles: Sequence[Any],
        kinds: kinds.KindRegistry,
        versions: inventory.ApiVersionRegistry,
        clients: inventory.ClientRegistry,
        settings: configuration.ClientSettings,
) -> None:
    resource_lists = await fetch_catalogs(handles, RESOURCE_LIST_FN, settings=settings)
    for handle, resource_list in resource_lists:
        apply_resource_list(handle, resource_list, kinds=kinds, versions=versions, clients=clients,
                            skip_subresources=settings.discovery.skip_subresources)

    group_catalogs = await fetch_catalogs(handles, GROUP_CATALOG_FN, settings=settings)
    for _, group_catalog in group_catalogs:
        apply_group_catalog(group_catalog, versions=versions)

    logger.debug(f"Discovered {len(resource_lists)} resource lists and {len(group_catalogs)} groups.")


async def fetch_catalogs(
        handles: Iterable[Any],
        fn_name: str,
        *,
        settings: configuration.ClientSettings,
) -> List[Tuple[Any, Any]]:
    """
    Fetch a catalog from every API client that exposes it, as raw data.
    """
    strategies: List[execution.Strategy] = []
    for handle in handles:
        fn = getattr(handle, fn_name, None)
        if not callable(fn):
            continue
        if _requires_arguments(fn):
            logger.debug(f"The catalog {fn_name}() of {type(handle).__name__} needs arguments; skipping.")
            continue
        strategies.append(functools.partial(_fetch, handle, fn_name, settings=settings))
    return await execution.execute(strategies)


def _requires_arguments(fn: Any) -> bool:
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):  # builtins & C-level callables
        return False
    return any(
        param.default is param.empty
        for param in signature.parameters.values()
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY)
    )


async def _fetch(
        handle: Any,
        fn_name: str,
        *,
        settings: configuration.ClientSettings,
) -> Tuple[Any, Any]:
    try:
        catalog = await execution.call(getattr(handle, fn_name), settings=settings)
    except errors.APINotFoundError:
        logger.debug(f"The catalog {fn_name}() of {type(handle).__name__} is absent; skipping.")
        raise
    return handle, materialization.to_raw(catalog)


def apply_resource_list(
        handle: Any,
        resource_list: Any,
        *,
        kinds: kinds.KindRegistry,
        versions: inventory.ApiVersionRegistry,
        clients: inventory.ClientRegistry,
        skip_subresources: bool = True,
) -> None:
    group_version: Optional[str] = resource_list.get('groupVersion')
    if not group_version:
        return

    clients.register_api_version(group_version, handle)
    for resource in resource_list.get('resources') or []:
        if skip_subresources and '/' in (resource.get('name') or ''):
            continue
        kind = kinds.canonicalize(resource['kind'])
        versions.register_resource(kind, group_version)
        clients.register(kind, handle)


def apply_group_catalog(
        group_catalog: Any,
        *,
        versions: inventory.ApiVersionRegistry,
) -> None:
    preferred: Optional[str] = (group_catalog.get('preferredVersion') or {}).get('groupVersion')
    if not preferred:
        return

    for entry in group_catalog.get('versions') or []:
        group_version = entry.get('groupVersion')
        if group_version:
            versions.register_preference(group_version, preferred)
