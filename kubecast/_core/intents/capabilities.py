"""
Capabilities: which verbs every API client exposes for which kinds.

The API clients of the client library have no common interface: every verb
of every kind is a separately generated function, named by convention::

    create_namespaced_service(namespace, body)
    read_namespace(name)
    patch_namespaced_deployment(name, namespace, body)
    list_namespaced_pod(namespace) & list_pod_for_all_namespaces()
    delete_cluster_role(name)

The functions are looked up once, when the API clients are registered
for the kinds, and are kept in the capability table afterwards.
A capability binds the call arguments into a strategy: a zero-argument
deferred call, which is then executed in a broadcast (see `execution`).
"""
import dataclasses
import enum
import functools
from typing import Any, Callable, Optional

from kubecast._cogs.configs import configuration
from kubecast._cogs.structs import kinds
from kubecast._core.actions import execution


class Verb(str, enum.Enum):
    CREATE = 'create'
    READ = 'read'
    PATCH = 'patch'
    LIST = 'list'
    DELETE = 'delete'


@dataclasses.dataclass(frozen=True)
class Capability:
    handle: Any
    kind: str
    verb: Verb
    namespaced: Optional[Callable[..., Any]]
    clusterwide: Optional[Callable[..., Any]]

    def create(
            self,
            *,
            body: Any,
            namespace: Optional[str],
            settings: configuration.ClientSettings,
    ) -> execution.Strategy:
        if self.namespaced is not None:
            namespace = namespace or settings.namespaces.default
            return _bind(self.namespaced, namespace, body, settings=settings)
        else:
            return _bind(self.clusterwide, body, settings=settings)

    def read(
            self,
            *,
            name: str,
            namespace: Optional[str],
            settings: configuration.ClientSettings,
    ) -> execution.Strategy:
        if self.namespaced is not None:
            namespace = namespace or settings.namespaces.default
            return _bind(self.namespaced, name, namespace, settings=settings)
        else:
            return _bind(self.clusterwide, name, settings=settings)

    def patch(
            self,
            *,
            name: str,
            namespace: Optional[str],
            body: Any,
            settings: configuration.ClientSettings,
    ) -> execution.Strategy:
        kwargs = {}
        if settings.patching.content_type is not None:
            kwargs['_content_type'] = settings.patching.content_type
        if self.namespaced is not None:
            namespace = namespace or settings.namespaces.default
            return _bind(self.namespaced, name, namespace, body, settings=settings, **kwargs)
        else:
            return _bind(self.clusterwide, name, body, settings=settings, **kwargs)

    def list(
            self,
            *,
            namespace: Optional[str],
            settings: configuration.ClientSettings,
    ) -> execution.Strategy:
        if namespace is not None and self.namespaced is not None:
            return _bind(self.namespaced, namespace, settings=settings)
        elif self.clusterwide is not None:
            return _bind(self.clusterwide, settings=settings)
        else:
            return _bind(self.namespaced, settings.namespaces.default, settings=settings)

    def delete(
            self,
            *,
            name: str,
            namespace: Optional[str],
            settings: configuration.ClientSettings,
    ) -> execution.Strategy:
        return self.read(name=name, namespace=namespace, settings=settings)


def _bind(
        fn: Optional[Callable[..., Any]],
        *args: Any,
        settings: configuration.ClientSettings,
        **kwargs: Any,
) -> execution.Strategy:
    if fn is None:
        raise RuntimeError("A capability is bound with no function. This is a bug.")
    return functools.partial(execution.call, fn, *args, settings=settings, **kwargs)


def probe(handle: Any, kind: str, verb: Verb) -> Optional[Capability]:
    """
    Look up the verb's functions for a kind on an API client, if there are any.

    The namespaced function goes first, the cluster-wide one goes second.
    For listing, the cluster-wide function lists across all namespaces.
    """
    snake = kinds.snake_case(kind)
    namespaced = _lookup(handle, f'{verb.value}_namespaced_{snake}')
    if verb is Verb.LIST:
        clusterwide = (_lookup(handle, f'list_{snake}_for_all_namespaces') or
                       _lookup(handle, f'list_{snake}'))
    else:
        clusterwide = _lookup(handle, f'{verb.value}_{snake}')

    if namespaced is None and clusterwide is None:
        return None
    return Capability(handle=handle, kind=kind, verb=verb, namespaced=namespaced, clusterwide=clusterwide)


def _lookup(handle: Any, name: str) -> Optional[Callable[..., Any]]:
    fn = getattr(handle, name, None)
    return fn if callable(fn) else None
