"""
Kinds: canonicalization of the free-text kinds and of the versioned type names.

The client library's types are named with the version embedded into them:
e.g. ``V1Service``, ``V1beta1CronJob``, ``V2HorizontalPodAutoscaler``,
or even with the API group prepended: ``CoreV1Event``, ``EventsV1Event``.
The kind of all of them is the part after the version: ``Service``, ``CronJob``,
``HorizontalPodAutoscaler``, ``Event``.

The kinds coming from the users are free-text: ``service``, ``Service``,
``V1Service``: all refer to the same canonical kind ``Service``.
The canonical spelling is taken from the known type names (case-insensitively),
or is the version-neutral input itself if no type is known for it
(e.g. for the custom resources, which have no generated types).
"""
import re
import threading
from typing import Callable, Collection, Dict, FrozenSet, Iterable, Mapping, NamedTuple, \
                   Optional

from kubecast._cogs.clients import errors
from kubecast._cogs.structs import references

VersionStripper = Callable[[str], str]

# The last digit which is followed by nothing but letters till the end: "V1beta1<here>CronJob".
_LAST_DIGIT = re.compile(r'\d(?=[A-Za-z]+$)')

# The first run of letters not followed by a digit and followed by letters only till the end.
_LETTER_TAIL = re.compile(r'[A-Za-z]+(?!\d+)(?=[A-Za-z]*$)')

_SNAKE_HEAD = re.compile(r'(.)([A-Z][a-z]+)')
_SNAKE_TAIL = re.compile(r'([a-z0-9])([A-Z])')


def strip_version(name: str) -> str:
    """
    Strip the version qualifier: take the letters after the last embedded digit.

    The names without digits, or with digits at the end only, are returned as is.
    """
    match = _LAST_DIGIT.search(name)
    return name[match.end():] if match else name


def strip_version_by_tail(name: str) -> str:
    """
    The same as `strip_version`, but by looking for the trailing letter run.

    An alternative policy, which gives the same results for the generated names.
    """
    match = _LETTER_TAIL.search(name)
    return match.group(0) if match else name


def snake_case(kind: str) -> str:
    """
    Convert a kind to the spelling used in the client library's function names.

    E.g.: ``CronJob`` -> ``cron_job``, ``CSIDriver`` -> ``csi_driver``,
    ``APIService`` -> ``api_service``, ``Endpoints`` -> ``endpoints``.
    """
    return _SNAKE_TAIL.sub(r'\1_\2', _SNAKE_HEAD.sub(r'\1_\2', kind)).lower()


class KindRegistryEntry(NamedTuple):
    kind: str  # canonical, version-neutral: "CronJob"
    type_names: FrozenSet[str]  # version-qualified: {"V1CronJob", "V1beta1CronJob"}


class KindRegistry:
    """
    The index of the canonical kinds to the known version-qualified type names.

    The index is built lazily on the first use by enumerating all the known
    type names once, and is immutable afterwards. Rebuilding it from the same
    enumeration gives the same index.
    """

    def __init__(
            self,
            type_names: Callable[[], Iterable[str]],
            *,
            stripper: VersionStripper = strip_version,
    ) -> None:
        super().__init__()
        self._type_names = type_names
        self._stripper = stripper
        self._lock = threading.Lock()
        self._entries: Optional[Mapping[str, KindRegistryEntry]] = None

    @property
    def entries(self) -> Mapping[str, KindRegistryEntry]:
        if self._entries is None:
            with self._lock:
                if self._entries is None:
                    self._entries = self._build()
        return self._entries

    def _build(self) -> Mapping[str, KindRegistryEntry]:
        kinds: Dict[str, str] = {}
        names: Dict[str, set] = {}
        for type_name in sorted(self._type_names()):
            kind = self._stripper(type_name)
            key = kind.lower()
            kinds.setdefault(key, kind)
            names.setdefault(key, set()).add(type_name)
        return {key: KindRegistryEntry(kind=kinds[key], type_names=frozenset(names[key]))
                for key in kinds}

    def __contains__(self, kind: object) -> bool:
        return isinstance(kind, str) and self._stripper(kind).lower() in self.entries

    def canonicalize(self, prospective_kind: str) -> str:
        """
        Get the canonical kind, or the version-neutral input if it is unknown.
        """
        versionless = self._stripper(prospective_kind)
        entry = self.entries.get(versionless.lower())
        return entry.kind if entry is not None else versionless

    def kind(self, prospective_kind: str) -> str:
        """
        Get the canonical kind, or fail if it is unknown to the type system.
        """
        versionless = self._stripper(prospective_kind)
        entry = self.entries.get(versionless.lower())
        if entry is None:
            raise errors.UnsupportedKindError(
                f"The kind {prospective_kind!r} is not known to the client library. "
                f"Are you sure you supplied an accepted kind?")
        return entry.kind

    def type_names(self, kind: str) -> Collection[str]:
        entry = self.entries.get(self._stripper(kind).lower())
        return entry.type_names if entry is not None else frozenset()

    def type_name(self, kind: str, api_version: str) -> str:
        """
        Resolve the version-qualified type name for a kind in an API version.

        The plain name goes first (``V1`` + ``Deployment``). If there is no such
        type, the group-qualified one is tried (``Events`` + ``V1`` + ``Event``).
        The core group's types are qualified as ``Core`` (``CoreV1Event``).
        """
        canonical = self.kind(kind)
        known = self.type_names(canonical)
        group, version = references.split(api_version)
        prefix = version[:1].upper() + version[1:]
        group_prefix = (group.split('.')[0] or 'core').capitalize()
        for candidate in [f'{prefix}{canonical}', f'{group_prefix}{prefix}{canonical}']:
            if candidate in known:
                return candidate
        raise errors.UnsupportedKindError(
            f"The kind {canonical!r} has no type for the API version {api_version!r}. "
            f"Known types: {sorted(known)!r}")
