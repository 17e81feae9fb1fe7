"""
Materialization: converting the generic documents into the typed object graphs.

The generic documents are the nested dicts/lists/scalars as they come from
YAML/JSON. The typed object graphs are the models of the client library,
populated recursively, as guided by the type descriptors (`descriptors`).

Every value falls into one of the mutually exclusive shapes by its type name:

* temporal types (``datetime``, ``date``) parse the non-empty strings;
* arrays (``list[T]``) materialize every element as ``T``, in order;
* maps (``dict(str, T)``) keep the keys, and materialize the values as ``T``;
* arrays and maps fail on the values of other shapes (e.g. strings for lists);
* primitives and non-mapping values are returned as is;
* the free-form ``object`` is returned as is (labels, annotations, etc);
* nominal types construct a new model from the declared attributes only.

Dematerialization (`to_raw`) goes the opposite direction: from the typed
object graphs to the JSON-compatible data with the JSON keys, as the API
and the users see it (e.g. for dumping as YAML).
"""
import collections.abc
import datetime
import re
from typing import Any, Dict, Mapping, Optional

import iso8601
import kubernetes.client

from kubecast._cogs.clients import errors
from kubecast._cogs.configs import configuration
from kubecast._cogs.helpers import thirdparty
from kubecast._cogs.structs import bodies, kinds
from kubecast._core.intents import descriptors

ARRAY_TYPE = re.compile(r'^list\[(?P<item>.*)\]$')
MAP_TYPE = re.compile(r'^dict\((?P<key>[^,]*),\s*(?P<value>.*)\)$')

UNTYPED = 'object'
TEMPORAL_TYPES = frozenset({'datetime', 'date'})
PRIMITIVE_TYPES = frozenset({'str', 'int', 'float', 'bool', 'bytes', 'long', 'file'})


class Materializer:
    """
    Convert the generic documents into the typed objects of the known types.
    """

    def __init__(
            self,
            *,
            models: descriptors.TypeDescriptorSource,
            kinds: kinds.KindRegistry,
            settings: Optional[configuration.ClientSettings] = None,
    ) -> None:
        super().__init__()
        settings = settings if settings is not None else configuration.ClientSettings()
        self._models = models
        self._kinds = kinds
        self._configuration = kubernetes.client.Configuration()
        self._configuration.client_side_validation = settings.materialization.client_side_validation

    def materialize_manifest(self, manifest: Mapping[str, Any]) -> Any:
        """
        Materialize a full manifest into the type of its kind & API version.

        Both ``kind`` and ``apiVersion`` must be present in the manifest.
        """
        kind = bodies.get_kind(manifest)
        api_version = bodies.get_api_version(manifest)
        if not kind:
            raise errors.UnsupportedKindError(f"The manifest has no kind: {manifest!r}")
        if not api_version:
            raise errors.NotFoundError(f"The manifest of kind {kind!r} has no API version.")
        type_name = self._kinds.type_name(kind, api_version)
        return self.materialize(type_name, manifest)

    def materialize(self, type_name: str, value: Any) -> Any:
        if value is None:
            return None

        if type_name in TEMPORAL_TYPES:
            return self._materialize_temporal(type_name, value)

        array_match = ARRAY_TYPE.match(type_name)
        if array_match:
            item_type = array_match.group('item').strip()
            if not item_type:
                raise errors.MalformedTypeNameError(f"No element type in {type_name!r}.")
            if isinstance(value, (str, bytes, collections.abc.Mapping)) or \
                    not isinstance(value, collections.abc.Iterable):
                raise errors.MismatchedValueError(
                    f"The type {type_name!r} expects a list, got {type(value).__name__}: {value!r}")
            return [self.materialize(item_type, item) for item in value]

        map_match = MAP_TYPE.match(type_name)
        if map_match:
            value_type = map_match.group('value').strip()
            if not value_type:
                raise errors.MalformedTypeNameError(f"No value type in {type_name!r}.")
            if not isinstance(value, collections.abc.Mapping):
                raise errors.MismatchedValueError(
                    f"The type {type_name!r} expects a mapping, got {type(value).__name__}: {value!r}")
            return {key: self.materialize(value_type, val) for key, val in value.items()}

        if type_name.startswith(('list[', 'dict(')):
            raise errors.MalformedTypeNameError(f"Cannot parse the container type {type_name!r}.")

        if type_name == UNTYPED or type_name in PRIMITIVE_TYPES:
            return value

        if not isinstance(value, collections.abc.Mapping) or isinstance(value, thirdparty.KubernetesModel):
            return value

        return self._materialize_object(type_name, value)

    def _materialize_temporal(self, type_name: str, value: Any) -> Any:
        if not value or not isinstance(value, str):
            return value
        parsed = iso8601.parse_date(value)
        return parsed.date() if type_name == 'date' else parsed

    def _materialize_object(self, type_name: str, value: Mapping[str, Any]) -> Any:
        cls = self._models.get_type(type_name)
        if cls is None:
            raise errors.MalformedTypeNameError(f"The type {type_name!r} is not known.")

        attributes: Dict[str, descriptors.AttributeDescriptor] = {}
        for descriptor in self._models.describe(type_name):
            attributes.setdefault(descriptor.attr, descriptor)
            attributes[descriptor.name] = descriptor

        kwargs: Dict[str, Any] = {}
        for key, val in value.items():
            descriptor = attributes.get(key)
            if descriptor is None:
                raise errors.UnknownAttributeError(
                    f"The attribute {key!r} is not declared for the type {type_name!r}. "
                    f"Are you sure it is accepted in the manifests of this kind?")
            kwargs[descriptor.attr] = self.materialize(descriptor.type, val)

        return cls(local_vars_configuration=self._configuration, **kwargs)


def to_raw(obj: Any) -> Any:
    """
    Convert a typed object graph to the JSON-compatible data with the JSON keys.

    The unset attributes (``None``) are omitted. The temporal values are
    formatted as ISO-8601. The raw data pass through as is (recursively).
    """
    if obj is None:
        return None
    elif isinstance(obj, thirdparty.KubernetesModel):
        cls: Any = type(obj)
        result: Dict[str, Any] = {}
        for attr in cls.openapi_types:
            value = getattr(obj, attr, None)
            if value is not None:
                result[cls.attribute_map.get(attr, attr)] = to_raw(value)
        return result
    elif isinstance(obj, (datetime.datetime, datetime.date)):
        return obj.isoformat()
    elif isinstance(obj, collections.abc.Mapping):
        return {key: to_raw(val) for key, val in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [to_raw(item) for item in obj]
    else:
        return obj
