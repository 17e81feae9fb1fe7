"""
All the structures coming from/to the Kubernetes API, and the accessors to them.

The manifests can come in two forms: as raw dicts (e.g. parsed from YAML,
or decoded from JSON), or as typed objects of the ``kubernetes`` client models.
The raw dicts use the JSON keys (``apiVersion``), the typed objects use
the Python attributes (``api_version``). The accessors in this module hide
the difference, so that the rest of the code can work with either of them.

For strict type-checking, the raw structures are detailed to the per-field level
(`TypedDict` instead of just ``Mapping[Any, Any]``) as used by the library.
Arbitrary fields are allowed at runtime.
"""
from typing import Any, List, Mapping, MutableMapping, Optional, Union

from typing_extensions import TypedDict

from kubecast._cogs.helpers import thirdparty

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    resourceVersion: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta


# Whatever the callers pass as a manifest, either before or after the materialization.
Manifest = Union[RawBody, Mapping[str, Any], thirdparty.KubernetesModel]


def _get(body: Any, raw_key: str, attr: str) -> Any:
    if isinstance(body, Mapping):
        return body.get(raw_key)
    else:
        return getattr(body, attr, None)


def _set(body: Any, raw_key: str, attr: str, value: Any) -> None:
    if isinstance(body, MutableMapping):
        body[raw_key] = value
    else:
        setattr(body, attr, value)


def get_kind(body: Any) -> Optional[str]:
    return _get(body, 'kind', 'kind')


def get_api_version(body: Any) -> Optional[str]:
    return _get(body, 'apiVersion', 'api_version')


def set_kind(body: Any, kind: str) -> None:
    _set(body, 'kind', 'kind', kind)


def set_api_version(body: Any, api_version: str) -> None:
    _set(body, 'apiVersion', 'api_version', api_version)


def get_metadata(body: Any) -> Any:
    return _get(body, 'metadata', 'metadata')


def get_name(body: Any) -> Optional[str]:
    metadata = get_metadata(body)
    return _get(metadata, 'name', 'name') if metadata is not None else None


def get_namespace(body: Any) -> Optional[str]:
    metadata = get_metadata(body)
    return _get(metadata, 'namespace', 'namespace') if metadata is not None else None


def get_items(body: Any) -> List[Any]:
    """ The items of a list result (e.g. of ``V1PodList``); never ``None``. """
    return list(_get(body, 'items', 'items') or [])
