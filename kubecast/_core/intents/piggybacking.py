"""
Rudimentary piggybacking on the official client library for authentication.

The client layer does not authenticate on its own: it lets the ``kubernetes``
client load its configuration (in-cluster service account or kubeconfig),
with all the complex auth-providers supported there, and uses the result.
"""
from typing import Any, Optional

from kubecast._cogs.clients import errors
from kubecast._cogs.helpers import typedefs


def login_via_client(
        *,
        logger: typedefs.Logger,
        context: Optional[str] = None,
        **_: Any,
) -> Any:
    """
    Configure the client library and return a new ``ApiClient`` over it.
    """

    # Keep imports in the function, as module imports are mocked in some tests.
    import kubernetes.client
    import kubernetes.config

    try:
        kubernetes.config.load_incluster_config()  # cluster env vars
        logger.debug("Client is configured in cluster with service account.")
    except kubernetes.config.ConfigException:
        try:
            kubernetes.config.load_kube_config(context=context)  # developer's config files
            logger.debug("Client is configured via kubeconfig file.")
        except kubernetes.config.ConfigException as e2:
            raise errors.LoginError("Cannot authenticate the client library "
                                    "neither in-cluster, nor via kubeconfig.") from e2

    return kubernetes.client.ApiClient()
