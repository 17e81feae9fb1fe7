"""
Type definitions for the generated models of the 3rd-party client libraries.

The official ``kubernetes`` client has no common base class for its models:
the code is fully generated by the OpenAPI generator. Still, all the models
follow the same protocol: a class-level ``openapi_types`` mapping of python
attributes to the type spellings, and an ``attribute_map`` mapping of python
attributes to the JSON keys. The same protocol is followed by other clients
generated by the same tooling, so we recognise the protocol, not the module.
"""
import abc
from typing import Any


# Only recognise classes with both generated maps. Ignore all API/HTTP/auth-related tools,
# which are generated by the same tooling, but have no attribute descriptors.
class KubernetesModel(abc.ABC):
    @classmethod
    def __subclasshook__(cls, subcls: Any) -> Any:  # suppress types in this hack
        if cls is KubernetesModel:
            if any(C.__module__.startswith('kubernetes.client.models.') for C in subcls.__mro__):
                return True
            if all(isinstance(getattr(subcls, name, None), dict)
                   for name in ['openapi_types', 'attribute_map']):
                return True
        return NotImplemented
