"""
The inventory of the cluster: which kinds are served by which API versions and clients.

The inventory is filled once, during the discovery (see `discovery`),
and is only read afterwards. The only exception is the memo of the API versions
observed on the actual objects: it only grows, and never shrinks.

All the lookups by kinds are case-insensitive and version-neutral (canonicalized),
all the lookups by group-versions are case-insensitive.
"""
import logging
from typing import Any, Dict, List, MutableMapping, Optional, Tuple

from kubecast._cogs.clients import errors
from kubecast._cogs.structs import kinds, references
from kubecast._core.intents import capabilities

logger = logging.getLogger(__name__)

# Ordered sets: the dicts keep the insertion order, and the values are the original spelling.
_OrderedGroupVersions = MutableMapping[references.GroupVersionKey, references.GroupVersion]


class ApiVersionRegistry:
    """
    Per kind: which group-versions serve it, and which versions are preferred.
    """

    def __init__(self, kinds: kinds.KindRegistry) -> None:
        super().__init__()
        self._kinds = kinds
        self._group_versions: Dict[str, _OrderedGroupVersions] = {}
        self._preferred: Dict[references.GroupVersionKey, references.GroupVersion] = {}
        self._observed: Dict[str, _OrderedGroupVersions] = {}

    def _key(self, kind: str) -> str:
        return self._kinds.canonicalize(kind).lower()

    def register_resource(self, kind: str, group_version: str) -> None:
        """
        Register a kind as served by a group-version; it is self-preferred until told otherwise.
        """
        gv = references.GroupVersion(group_version)
        gvkey = references.key(gv)
        self._group_versions.setdefault(self._key(kind), {}).setdefault(gvkey, gv)
        self._preferred[gvkey] = gv

    def register_preference(self, group_version: str, preferred: str) -> None:
        self._preferred[references.key(group_version)] = references.GroupVersion(preferred)

    def observe(self, kind: str, api_version: Optional[str]) -> None:
        """
        Remember an API version as seen on an actual object of a kind.
        """
        if kind and api_version:
            gv = references.GroupVersion(api_version)
            self._observed.setdefault(self._key(kind), {}).setdefault(references.key(gv), gv)

    def group_versions(self, kind: str) -> List[references.GroupVersion]:
        return list(self._group_versions.get(self._key(kind), {}).values())

    def preferred_api_versions(self, kind: str) -> List[references.GroupVersion]:
        """
        The preferred versions of all the groups serving the kind, without duplicates.
        """
        result: Dict[references.GroupVersionKey, references.GroupVersion] = {}
        for gvkey, gv in self._group_versions.get(self._key(kind), {}).items():
            preferred = self._preferred.get(gvkey, gv)
            result.setdefault(references.key(preferred), preferred)
        return list(result.values())

    def observed_api_versions(self, kind: str) -> List[references.GroupVersion]:
        return list(self._observed.get(self._key(kind), {}).values())

    def infer_api_version(self, kind: str) -> Optional[references.GroupVersion]:
        candidates = self.preferred_api_versions(kind) + self.observed_api_versions(kind)
        return candidates[0] if candidates else None

    def __bool__(self) -> bool:
        return bool(self._group_versions) and bool(self._preferred)


class ClientRegistry:
    """
    Per kind: which API clients ("handles") serve it, and with which verbs.

    Every handle is also registered under the group-version it serves,
    exactly one handle per group-version.
    """

    def __init__(self, kinds: kinds.KindRegistry) -> None:
        super().__init__()
        self._kinds = kinds
        self._handles: Dict[str, List[Any]] = {}
        self._by_api_version: Dict[references.GroupVersionKey, Any] = {}
        self._capabilities: Dict[Tuple[str, capabilities.Verb], List[capabilities.Capability]] = {}

    def _key(self, kind: str) -> str:
        return self._kinds.canonicalize(kind).lower()

    def register_api_version(self, group_version: str, handle: Any) -> None:
        self._by_api_version[references.key(group_version)] = handle

    def register(self, kind: str, handle: Any) -> None:
        key = self._key(kind)
        handles = self._handles.setdefault(key, [])
        if any(known is handle for known in handles):
            return
        handles.append(handle)

        canonical = self._kinds.canonicalize(kind)
        for verb in capabilities.Verb:
            capability = capabilities.probe(handle, canonical, verb)
            if capability is not None:
                self._capabilities.setdefault((key, verb), []).append(capability)

    def handles_for(self, kind: str) -> List[Any]:
        return list(self._handles.get(self._key(kind), []))

    def handle_for(self, api_version: str) -> Any:
        try:
            return self._by_api_version[references.key(api_version)]
        except KeyError:
            raise errors.NotFoundError(
                f"The API version {api_version!r} is not served by the cluster. "
                f"Are you sure you spelled it correctly?") from None

    def operations(self, kind: str, verb: capabilities.Verb) -> List[capabilities.Capability]:
        """
        All the capabilities of all the handles of a kind for a verb, in the discovery order.
        """
        key = self._key(kind)
        if key not in self._handles:
            raise errors.UnsupportedKindError(f"The kind {kind!r} is not served by the cluster.")
        found = self._capabilities.get((key, verb), [])
        if not found:
            raise errors.UnsupportedOperationError(
                f"No API client supports {verb.value!r} for the kind {kind!r}.")
        return list(found)

    def operation(self, kind: str, verb: capabilities.Verb, handle: Any) -> capabilities.Capability:
        """
        The capability of a specific handle, e.g. of the one serving an API version.
        """
        for capability in self.operations(kind, verb):
            if capability.handle is handle:
                return capability
        raise errors.UnsupportedOperationError(
            f"The API client {type(handle).__name__} does not support "
            f"{verb.value!r} for the kind {kind!r}.")

    def __bool__(self) -> bool:
        return bool(self._handles) and bool(self._by_api_version)
