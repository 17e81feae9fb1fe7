"""
The resource client: the typed CRUD operations over the discovered cluster.

Usage::

    import kubecast

    async def main():
        client = await kubecast.ResourceClient().init()
        svc = await client.apply('''
            kind: Service
            metadata:
              name: my-service
            spec:
              ports:
                - port: 80
        ''')
        print(svc.api_version, svc.metadata.name)

The manifests can be given as YAML/JSON texts, as parsed dicts, or as typed
objects of the ``kubernetes`` client. The kinds are version-neutral
and case-insensitive. The API versions are inferred if absent.

Every operation on a kind is broadcast to all the API clients serving it.
The results are always typed objects, with ``kind`` & ``api_version`` set.
"""
import collections.abc
import logging
from typing import Any, Iterable, List, Optional

from kubecast._cogs.clients import apis, errors
from kubecast._cogs.configs import configuration
from kubecast._cogs.helpers import loaders, thirdparty
from kubecast._cogs.structs import bodies, kinds, references
from kubecast._core.actions import execution, loggers, materialization
from kubecast._core.intents import capabilities, descriptors, piggybacking
from kubecast._core.reactor import discovery, inventory

logger = logging.getLogger(__name__)


class ResourceClient:

    def __init__(
            self,
            settings: Optional[configuration.ClientSettings] = None,
            *,
            models: Optional[descriptors.TypeDescriptorSource] = None,
            handles: Optional[Iterable[Any]] = None,
    ) -> None:
        super().__init__()
        self.settings = settings if settings is not None else configuration.ClientSettings()
        self.models = models if models is not None else descriptors.KubernetesModels()
        self.kinds = kinds.KindRegistry(self.models.type_names)
        self.versions = inventory.ApiVersionRegistry(self.kinds)
        self.clients = inventory.ClientRegistry(self.kinds)
        self.materializer = materialization.Materializer(
            models=self.models, kinds=self.kinds, settings=self.settings)
        self._handles: Optional[List[Any]] = list(handles) if handles is not None else None
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self, api_client: Any = None) -> "ResourceClient":
        """
        Discover the cluster's kinds & versions. Repeated calls do nothing.

        If neither the handles nor the ``ApiClient`` are given, the client
        library is configured from the cluster environment or kubeconfig.
        """
        if self._initialized:
            return self

        handles = self._handles
        if handles is None:
            if api_client is None:
                api_client = piggybacking.login_via_client(logger=logger)
            handles = apis.make_handles(api_client, self.settings.discovery.apis)

        await discovery.discover(
            handles=handles,
            kinds=self.kinds,
            versions=self.versions,
            clients=self.clients,
            settings=self.settings,
        )
        self._handles = handles
        self._initialized = True
        logger.debug(f"The resource client is initialized with {len(handles)} API clients.")
        return self

    @property
    def default_namespace(self) -> str:
        return self.settings.namespaces.default

    @default_namespace.setter
    def default_namespace(self, value: Optional[str]) -> None:
        self.settings.namespaces.default = value

    def preferred_api_versions(self, kind: str) -> List[str]:
        return list(self.versions.preferred_api_versions(kind))

    def infer_api_version(self, kind: str) -> Optional[str]:
        return self.versions.infer_api_version(kind)

    async def exists(self, kind: str, name: str, namespace: Optional[str] = None) -> bool:
        try:
            await self.read(kind, name, namespace)
        except errors.NotFoundError:
            return False
        else:
            return True

    async def read(self, kind: str, name: str, namespace: Optional[str] = None) -> Any:
        kind = self.kinds.canonicalize(kind)
        strategies = [
            capability.read(name=name, namespace=namespace, settings=self.settings)
            for capability in self.clients.operations(kind, capabilities.Verb.READ)
        ]
        results = await execution.execute(strategies)
        if not results:
            where = f" in the namespace {namespace!r}" if namespace else ""
            raise errors.NotFoundError(f"The {kind} {name!r}{where} is not found.")
        return self._adopt(results[0], kind=kind)

    get = read

    async def list(self, kind: str, namespace: Optional[str] = None) -> List[Any]:
        """
        List the objects of a kind from all the API clients serving it.

        Without a namespace, the objects are listed cluster-wide (if possible).
        """
        kind = self.kinds.canonicalize(kind)
        strategies = [
            capability.list(namespace=namespace, settings=self.settings)
            for capability in self.clients.operations(kind, capabilities.Verb.LIST)
        ]
        results = await execution.execute(strategies)

        # The lists' kinds are "...List", the items usually have neither kind nor apiVersion.
        items: List[Any] = []
        for result in results:
            api_version = bodies.get_api_version(result)
            for item in bodies.get_items(result):
                items.append(self._adopt(item, kind=kind, api_version=api_version, stamp=True))
        return items

    get_all = list

    async def create(self, manifest: Any) -> Any:
        """
        Create an object via the API client of its API version.

        If the object already exists, the locally materialized one is returned.
        """
        obj = self._prepare(manifest)
        kind = self.kinds.canonicalize(bodies.get_kind(obj) or '')
        api_version = bodies.get_api_version(obj) or ''
        handle = self.clients.handle_for(api_version)
        capability = self.clients.operation(kind, capabilities.Verb.CREATE, handle)
        strategy = capability.create(body=obj, namespace=bodies.get_namespace(obj), settings=self.settings)

        object_logger = loggers.ObjectLogger(body=obj)
        try:
            results = await execution.execute([strategy])
        except errors.APIConflictError:
            results = []

        if not results:
            object_logger.warning(f"The {kind} already exists or was not created. "
                                  f"Returning the local manifest as is.")
            return obj

        object_logger.info(f"The {kind} is created.")
        return self._adopt(results[0], kind=kind, api_version=api_version)

    async def patch(self, manifest: Any) -> Any:
        """
        Merge-patch an object via all the API clients serving its kind.
        """
        obj = self._prepare(manifest)
        kind = self.kinds.canonicalize(bodies.get_kind(obj) or '')
        name = bodies.get_name(obj)
        namespace = bodies.get_namespace(obj)
        if not name:
            raise errors.NotFoundError(f"The {kind} to patch has no name.")

        strategies = [
            capability.patch(name=name, namespace=namespace, body=obj, settings=self.settings)
            for capability in self.clients.operations(kind, capabilities.Verb.PATCH)
        ]
        results = await execution.execute(strategies)
        if not results:
            raise errors.NotFoundError(f"The {kind} {name!r} to patch is not found.")

        loggers.ObjectLogger(body=obj).info(f"The {kind} is patched.")
        return self._adopt(results[0], kind=kind)

    async def apply(self, manifest: Any) -> Any:
        """
        Create an object if it does not exist, patch it otherwise.

        It is not atomic: if the object is deleted between the check
        and the patch, the patch fails with `NotFoundError`.
        """
        obj = self._prepare(manifest)
        kind = bodies.get_kind(obj) or ''
        name = bodies.get_name(obj) or ''
        if await self.exists(kind, name, bodies.get_namespace(obj)):
            return await self.patch(obj)
        else:
            return await self.create(obj)

    async def delete(self, manifest: Any) -> None:
        obj = self._prepare(manifest)
        kind = self.kinds.canonicalize(bodies.get_kind(obj) or '')
        name = bodies.get_name(obj)
        if not name:
            raise errors.NotFoundError(f"The {kind} to delete has no name.")

        strategies = [
            capability.delete(name=name, namespace=bodies.get_namespace(obj), settings=self.settings)
            for capability in self.clients.operations(kind, capabilities.Verb.DELETE)
        ]
        results = await execution.execute(strategies)

        object_logger = loggers.ObjectLogger(body=obj)
        if results:
            object_logger.info(f"The {kind} is deleted.")
        else:
            object_logger.debug(f"The {kind} is already absent.")

    async def create_all(self, manifests: Iterable[Any]) -> List[Any]:
        return [await self.create(manifest) for manifest in manifests]

    async def patch_all(self, manifests: Iterable[Any]) -> List[Any]:
        return [await self.patch(manifest) for manifest in manifests]

    async def apply_all(self, manifests: Iterable[Any]) -> List[Any]:
        return [await self.apply(manifest) for manifest in manifests]

    async def delete_all(self, manifests: Iterable[Any]) -> None:
        for manifest in manifests:
            await self.delete(manifest)

    def _prepare(self, manifest: Any) -> Any:
        """
        Turn any supported manifest into a typed object with kind & API version.
        """
        if isinstance(manifest, str):
            manifest = loaders.parse_manifest(manifest)

        if isinstance(manifest, thirdparty.KubernetesModel):
            kind = bodies.get_kind(manifest) or self.kinds.canonicalize(type(manifest).__name__)
            bodies.set_kind(manifest, kind)
            if not bodies.get_api_version(manifest):
                bodies.set_api_version(manifest, self._infer_api_version(kind))
            return manifest

        elif isinstance(manifest, collections.abc.Mapping):
            body = dict(manifest)
            kind = body.get('kind')
            if not kind:
                raise errors.UnsupportedKindError(f"The manifest has no kind: {manifest!r}")
            body['kind'] = self.kinds.canonicalize(kind)
            if not body.get('apiVersion'):
                body['apiVersion'] = self._infer_api_version(kind)
            return self.materializer.materialize_manifest(body)

        else:
            raise TypeError(f"Unsupported manifest type: {type(manifest).__name__}")

    def _infer_api_version(self, kind: str) -> references.GroupVersion:
        api_version = self.versions.infer_api_version(kind)
        if api_version is None:
            raise errors.NotFoundError(
                f"Cannot infer the API version of {kind!r}. "
                f"Specify it explicitly in the manifest.")
        return api_version

    def _adopt(
            self,
            result: Any,
            *,
            kind: str,
            api_version: Optional[str] = None,
            stamp: bool = False,
    ) -> Any:
        """
        Make a typed object from a call's result, and remember its API version.

        The kind & API version are filled in if absent, or forcedly if stamped.
        """
        if stamp or not bodies.get_kind(result):
            result = _with(result, 'kind', 'kind', kind)
        if api_version and (stamp or not bodies.get_api_version(result)):
            result = _with(result, 'apiVersion', 'api_version', api_version)
        if not bodies.get_api_version(result):
            result = _with(result, 'apiVersion', 'api_version', self._infer_api_version(kind))

        if isinstance(result, collections.abc.Mapping) and not isinstance(result, thirdparty.KubernetesModel):
            result = self.materializer.materialize_manifest(result)

        self.versions.observe(kind, bodies.get_api_version(result))
        return result


def _with(body: Any, raw_key: str, attr: str, value: Any) -> Any:
    # Never modify the raw results in place: they can be shared with the caller.
    if isinstance(body, collections.abc.Mapping):
        return dict(body, **{raw_key: value})
    else:
        setattr(body, attr, value)
        return body
