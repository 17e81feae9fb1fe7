import io
import json
import logging
import re
import sys
from typing import Any, Collection, Dict, Iterable, Mapping, Optional, Tuple
from unittest.mock import Mock

import kubernetes.client
import pytest

from kubecast._cogs.configs.configuration import ClientSettings
from kubecast._cogs.structs.kinds import KindRegistry
from kubecast._core.actions.loggers import ObjectPrefixingTextFormatter, configure
from kubecast._core.actions.materialization import to_raw
from kubecast._core.intents.descriptors import KubernetesModels
from kubecast._core.reactor.inventory import ApiVersionRegistry, ClientRegistry
from kubecast._kits.clients import ResourceClient


@pytest.fixture()
def settings():
    return ClientSettings()


@pytest.fixture(scope='session')
def models():
    return KubernetesModels()


@pytest.fixture()
def kinds(models):
    return KindRegistry(models.type_names)


@pytest.fixture()
def versions(kinds):
    return ApiVersionRegistry(kinds)


@pytest.fixture()
def clients(kinds):
    return ClientRegistry(kinds)


#
# Fake API clients ("handles"): only the declared functions exist on them.
#


def make_api_exception(status: int, payload: Optional[Mapping[str, Any]] = None) -> Exception:
    exc = kubernetes.client.ApiException(status=status, reason='Fake')
    exc.body = json.dumps(payload) if payload is not None else None
    return exc


@pytest.fixture()
def api_exception():
    return make_api_exception


def make_fake_api(
        *,
        group_version: Optional[str] = None,
        resources: Iterable[Tuple[str, str]] = (),
        group: Optional[Mapping[str, Any]] = None,
        functions: Collection[str] = (),
) -> Mock:
    """
    A fake API client with the catalogs and the verb functions as requested.

    The resources are the pairs of the plural names and the kinds,
    as they are listed in the resource lists: ``('pods', 'Pod')``.
    """
    names = list(functions)
    names += ['get_api_resources'] if group_version is not None else []
    names += ['get_api_group'] if group is not None else []
    api = Mock(spec_set=names)
    if group_version is not None:
        api.get_api_resources.return_value = {
            'kind': 'APIResourceList',
            'groupVersion': group_version,
            'resources': [{'name': name, 'kind': kind} for name, kind in resources],
        }
    if group is not None:
        api.get_api_group.return_value = group
    return api


@pytest.fixture()
def fake_api():
    return make_fake_api


def make_group(name: str, *versions: str) -> Mapping[str, Any]:
    """ A group catalog with the first version as the preferred one. """
    return {
        'kind': 'APIGroup',
        'name': name,
        'versions': [{'groupVersion': f'{name}/{v}', 'version': v} for v in versions],
        'preferredVersion': {'groupVersion': f'{name}/{versions[0]}', 'version': versions[0]},
    }


@pytest.fixture()
def fake_group():
    return make_group


SERVICE_FUNCTIONS = [
    'create_namespaced_service',
    'read_namespaced_service',
    'patch_namespaced_service',
    'list_namespaced_service',
    'list_service_for_all_namespaces',
    'delete_namespaced_service',
]


class FakeServices:
    """
    The services' storage of a fake cluster, as served by ``CoreV1Api``.
    """

    def __init__(self) -> None:
        super().__init__()
        self.objects: Dict[Tuple[str, str], Dict[str, Any]] = {}

    def create(self, namespace, body):
        raw = to_raw(body)
        key = (namespace, raw['metadata']['name'])
        if key in self.objects:
            raise make_api_exception(409, {'reason': 'AlreadyExists', 'message': 'exists'})
        raw['metadata'].setdefault('namespace', namespace)
        raw['metadata'].setdefault('uid', 'uid-1')
        self.objects[key] = raw
        return raw

    def read(self, name, namespace):
        try:
            return self.objects[(namespace, name)]
        except KeyError:
            raise make_api_exception(404, {'reason': 'NotFound', 'message': 'absent'}) from None

    def patch(self, name, namespace, body, **kwargs):
        current = self.read(name, namespace)
        patch = to_raw(body)
        merged = dict(current, **{k: v for k, v in patch.items() if k != 'metadata'})
        self.objects[(namespace, name)] = merged
        return merged

    def delete(self, name, namespace):
        self.read(name, namespace)
        del self.objects[(namespace, name)]
        return {'kind': 'Status', 'apiVersion': 'v1', 'status': 'Success'}

    def list(self, namespace=None):
        return {
            'kind': 'ServiceList',
            'apiVersion': 'v1',
            'items': [
                {k: v for k, v in obj.items() if k not in {'kind', 'apiVersion'}}
                for (ns, _), obj in self.objects.items()
                if namespace is None or ns == namespace
            ],
        }


@pytest.fixture()
def services():
    return FakeServices()


@pytest.fixture()
def core_api(services):
    """ A fake ``CoreV1Api`` serving the services only, backed by the fake storage. """
    api = make_fake_api(
        group_version='v1',
        resources=[('services', 'Service'), ('services/status', 'Service')],
        functions=SERVICE_FUNCTIONS,
    )
    api.create_namespaced_service.side_effect = services.create
    api.read_namespaced_service.side_effect = services.read
    api.patch_namespaced_service.side_effect = services.patch
    api.delete_namespaced_service.side_effect = services.delete
    api.list_namespaced_service.side_effect = services.list
    api.list_service_for_all_namespaces.side_effect = services.list
    return api


@pytest.fixture()
def handles(core_api):
    return [core_api]


@pytest.fixture()
async def client(settings, models, handles):
    return await ResourceClient(settings, models=models, handles=handles).init()


#
# Helpers for the logging checks.
#


@pytest.fixture()
def logstream(caplog):
    """ Prefixing is done at the final output. We have to intercept it. """

    logger = logging.getLogger()
    handlers = list(logger.handlers)

    # Setup all log levels of sub-libraries. A sife-effect: the handlers are also added.
    configure(verbose=True)

    # Remove any stream handlers added in the step above. But keep the caplog's handlers.
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stderr:
            logger.removeHandler(handler)

    # Inject our stream-intercepting handler.
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    formatter = ObjectPrefixingTextFormatter('prefix %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    try:
        with caplog.at_level(logging.DEBUG):
            yield stream
    finally:
        logger.removeHandler(handler)
        logger.handlers[:] = handlers  # undo `configure()`


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    def assert_logs_fn(patterns, prohibited=[], strict=False):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # The expected pattern is at position 0.
            # Looking-ahead: if one of the following patterns matches, while the
            # 0th does not, then the log message is missing, and we fail the test.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
                elif strict:
                    raise AssertionError(f"Unexpected log message: {message!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        # If all patterns have been matched in order, we are done.
        # if some are left, but the messages are over, then we fail.
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
