"""
The API clients ("handles") of the client library.

Every API group-version has its own generated class in ``kubernetes.client``:
``CoreV1Api``, ``AppsV1Api``, ``BatchV1Api``, etc., plus the per-group classes
with the group catalogs only: ``AppsApi``, ``BatchApi``, etc. All of them are
instantiated over the same ``ApiClient`` (i.e. the same credentials & pool).
"""
import inspect
from typing import Any, Collection, List, Optional


def get_api_classes() -> List[type]:
    """
    All the generated API classes of ``kubernetes.client``, in a stable order.
    """
    import kubernetes.client

    # Newer releases export the classes lazily, so they are listed via dir(), not vars().
    classes = [getattr(kubernetes.client, name, None) for name in sorted(dir(kubernetes.client))
               if name.endswith('Api')]
    return [
        cls
        for cls in classes
        if inspect.isclass(cls)
        if cls.__module__.startswith('kubernetes.client.api.')
    ]


def make_handles(
        api_client: Any,
        api_classes: Optional[Collection[type]] = None,
) -> List[Any]:
    api_classes = get_api_classes() if api_classes is None else api_classes
    return [cls(api_client) for cls in api_classes]
