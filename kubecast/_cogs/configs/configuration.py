"""
All configuration flags, options, settings to fine-tune the client layer.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).

The settings are created once per `ResourceClient` and are threaded through
all the calls explicitly: there are no module-level globals to patch.
"""
import concurrent.futures
import dataclasses
from typing import Any, Collection, Optional

DEFAULT_NAMESPACE = 'default'
MERGE_PATCH_CONTENT_TYPE = 'application/merge-patch+json'


@dataclasses.dataclass
class NamespaceSettings:

    _default: str = DEFAULT_NAMESPACE

    @property
    def default(self) -> str:
        """
        The namespace used when a manifest or a call does not specify one.

        Setting it to ``None`` or to an empty string restores ``"default"``.
        """
        return self._default or DEFAULT_NAMESPACE

    @default.setter
    def default(self, value: Optional[str]) -> None:
        self._default = value or DEFAULT_NAMESPACE


@dataclasses.dataclass
class ExecutionSettings:
    """
    Settings for running the synchronous API calls in the background.

    The official client is synchronous, so every call is made in the executor
    to let the broadcasts fan out to all API clients concurrently.
    """

    executor: concurrent.futures.Executor = dataclasses.field(
        default_factory=concurrent.futures.ThreadPoolExecutor)
    """
    The executor for the synchronous API calls.

    It can be replaced at any time; the calls in progress finish in the old one.
    """

    _max_workers: Optional[int] = None

    @property
    def max_workers(self) -> Optional[int]:
        """
        The limit of the parallel synchronous API calls (threads in the pool).

        Raising or lowering it affects only the new calls; no threads are killed.
        """
        return self._max_workers

    @max_workers.setter
    def max_workers(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"The limit of parallel API calls must be 1 or more, got {value!r}.")
        if not hasattr(self.executor, '_max_workers'):
            raise TypeError(f"The executor {type(self.executor).__name__} has no workers limit to adjust.")
        self._max_workers = value
        self.executor._max_workers = value  # type: ignore


@dataclasses.dataclass
class DiscoverySettings:
    """
    Settings for the initial discovery of the cluster's kinds and versions.
    """

    apis: Optional[Collection[Any]] = None
    """
    The API classes to instantiate and to probe for the catalogs.

    If ``None`` (the default), all API classes generated in ``kubernetes.client``
    are used. Narrow it down to speed up the initialization in small scripts.
    """

    skip_subresources: bool = True
    """
    Should the subresources (e.g. ``pods/status``, ``deployments/scale``) be
    ignored when the resource lists are processed? Their kinds are usually
    the kinds of the main resources or of the auxiliary types (``Scale``),
    which cannot be created/listed via the subresource's handle anyway.
    """


@dataclasses.dataclass
class MaterializationSettings:

    client_side_validation: bool = False
    """
    Should the typed objects validate the required and enum fields on creation?

    It is off by default: partial documents (e.g. the items of the lists,
    or the patches) must materialize without the full schema validation.
    The validation is left to the cluster.
    """


@dataclasses.dataclass
class PatchingSettings:

    content_type: Optional[str] = MERGE_PATCH_CONTENT_TYPE
    """
    The content type of the patches sent on ``patch`` & ``apply``.

    If ``None``, the client library decides on its own (usually, it selects
    the strategic merge patch for the built-in resources).
    """


@dataclasses.dataclass
class ClientSettings:
    namespaces: NamespaceSettings = dataclasses.field(default_factory=NamespaceSettings)
    execution: ExecutionSettings = dataclasses.field(default_factory=ExecutionSettings)
    discovery: DiscoverySettings = dataclasses.field(default_factory=DiscoverySettings)
    materialization: MaterializationSettings = dataclasses.field(default_factory=MaterializationSettings)
    patching: PatchingSettings = dataclasses.field(default_factory=PatchingSettings)
