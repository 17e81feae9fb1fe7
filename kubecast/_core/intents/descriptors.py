"""
Type descriptors: how to populate a typed object from a generic value.

The descriptors are not declared by us: they are taken from the generated
models of the client library at runtime. Every model class of ``kubernetes``
has ``openapi_types`` (python attribute -> type spelling) and ``attribute_map``
(python attribute -> JSON key); we merge them into an ordered sequence
of attribute descriptors, in the order as declared by the generator.

The type spellings are as the generator produces them::

    str, int, float, bool       -- primitives
    datetime, date              -- temporal values, as ISO-8601 strings in JSON
    object                      -- a free-form value, never checked
    list[V1Container]           -- arrays of elements of the inner type
    dict(str, str)              -- maps of string keys to the inner type
    V1ObjectMeta                -- nominal types, i.e. other models
"""
import inspect
import types
from typing import Any, Dict, Iterable, NamedTuple, Optional, Sequence

from typing_extensions import Protocol

from kubecast._cogs.helpers import thirdparty


class AttributeDescriptor(NamedTuple):
    name: str  # as in JSON/YAML: "apiVersion"
    type: str  # as spelled by the generator: "list[V1Container]"
    attr: str  # as in Python: "api_version"


class TypeDescriptorSource(Protocol):
    """
    A source of all the known types and their attribute descriptors.
    """

    def type_names(self) -> Iterable[str]:
        ...

    def get_type(self, type_name: str) -> Optional[type]:
        ...

    def describe(self, type_name: str) -> Sequence[AttributeDescriptor]:
        ...


class KubernetesModels:
    """
    The type descriptors as exposed by the generated models of a client library.

    By default, the models of the official ``kubernetes`` client are used.
    Other modules with the same generated protocol can be used instead
    (e.g. the generated clients of custom resources).
    """

    def __init__(self, module: Optional[types.ModuleType] = None) -> None:
        super().__init__()
        if module is None:
            import kubernetes.client.models
            module = kubernetes.client.models
        self._module = module
        self._descriptors: Dict[str, Sequence[AttributeDescriptor]] = {}

    def type_names(self) -> Iterable[str]:
        # The module can export its models lazily: only dir() lists them all, not vars().
        for name in dir(self._module):
            if not name.startswith('_') and self.get_type(name) is not None:
                yield name

    def get_type(self, type_name: str) -> Optional[type]:
        obj = getattr(self._module, type_name, None)
        if inspect.isclass(obj) and issubclass(obj, thirdparty.KubernetesModel):
            return obj
        return None

    def describe(self, type_name: str) -> Sequence[AttributeDescriptor]:
        try:
            return self._descriptors[type_name]
        except KeyError:
            pass

        cls: Any = self.get_type(type_name)
        if cls is None:
            return []

        descriptors = [
            AttributeDescriptor(name=cls.attribute_map.get(attr, attr), type=spelling, attr=attr)
            for attr, spelling in cls.openapi_types.items()
        ]
        self._descriptors[type_name] = descriptors
        return descriptors
