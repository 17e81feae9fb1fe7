"""
The main kubecast module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the library's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kubecast._cogs.configs.configuration import (
    ClientSettings,
    NamespaceSettings,
    ExecutionSettings,
    DiscoverySettings,
    MaterializationSettings,
    PatchingSettings,
)
from kubecast._cogs.clients.errors import (
    NotFoundError,
    UnsupportedKindError,
    UnsupportedOperationError,
    LoginError,
    MaterializationError,
    UnknownAttributeError,
    MalformedTypeNameError,
    MismatchedValueError,
    APIError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
)
from kubecast._cogs.helpers.loaders import (
    load_manifests,
    parse_manifest,
)
from kubecast._cogs.helpers.typedefs import (
    Logger,
)
from kubecast._cogs.helpers.versions import (
    version as __version__,
)
from kubecast._cogs.structs.kinds import (
    KindRegistry,
    strip_version,
    strip_version_by_tail,
)
from kubecast._core.actions.execution import (
    execute,
)
from kubecast._core.actions.loggers import (
    configure,
    LogFormat,
    ObjectLogger,
)
from kubecast._core.actions.materialization import (
    Materializer,
    to_raw,
)
from kubecast._core.intents.descriptors import (
    AttributeDescriptor,
    KubernetesModels,
)
from kubecast._core.intents.piggybacking import (
    login_via_client,
)
from kubecast._core.reactor.inventory import (
    ApiVersionRegistry,
    ClientRegistry,
)
from kubecast._kits.clients import (
    ResourceClient,
)

__all__ = [
    'ResourceClient',
    'ClientSettings', 'NamespaceSettings', 'ExecutionSettings',
    'DiscoverySettings', 'MaterializationSettings', 'PatchingSettings',
    'KindRegistry', 'strip_version', 'strip_version_by_tail',
    'ApiVersionRegistry', 'ClientRegistry',
    'Materializer', 'KubernetesModels', 'AttributeDescriptor', 'to_raw',
    'execute',
    'load_manifests', 'parse_manifest',
    'login_via_client',
    'configure', 'LogFormat', 'ObjectLogger', 'Logger',
    'NotFoundError',
    'UnsupportedKindError',
    'UnsupportedOperationError',
    'LoginError',
    'MaterializationError',
    'UnknownAttributeError',
    'MalformedTypeNameError',
    'MismatchedValueError',
    'APIError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
]
