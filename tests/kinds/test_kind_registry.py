from unittest.mock import Mock

import pytest

from kubecast._cogs.clients.errors import UnsupportedKindError
from kubecast._cogs.structs.kinds import KindRegistry, snake_case, strip_version_by_tail

TYPE_NAMES = [
    'V1Service', 'V1ServiceList', 'V1ServiceAccount',
    'V1Deployment', 'V1beta1CronJob', 'V1CronJob',
    'CoreV1Event', 'EventsV1Event',
    'V1CSIDriver',
]


@pytest.fixture()
def type_names():
    return Mock(return_value=TYPE_NAMES)


@pytest.fixture()
def registry(type_names):
    return KindRegistry(type_names)


def test_index_is_built_lazily_and_once(registry, type_names):
    assert not type_names.called
    registry.canonicalize('service')
    registry.canonicalize('deployment')
    assert registry.kind('cronjob') == 'CronJob'
    assert type_names.call_count == 1


def test_rebuilding_gives_the_same_index(type_names):
    registry1 = KindRegistry(type_names)
    registry2 = KindRegistry(type_names)
    assert registry1.entries == registry2.entries


@pytest.mark.parametrize('kind, expected', [
    ('Service', 'Service'),
    ('service', 'Service'),
    ('SERVICE', 'Service'),
    ('V1Service', 'Service'),
    ('v1service', 'Service'),
    ('cronjob', 'CronJob'),
    ('V1beta1CronJob', 'CronJob'),
    ('event', 'Event'),
    ('csidriver', 'CSIDriver'),
])
def test_known_kinds_are_canonicalized(registry, kind, expected):
    assert registry.canonicalize(kind) == expected
    assert registry.canonicalize(registry.canonicalize(kind)) == expected


def test_unknown_kinds_are_versionless_but_kept_as_is(registry):
    assert registry.canonicalize('Widget') == 'Widget'
    assert registry.canonicalize('V1Widget') == 'Widget'


def test_unknown_kinds_fail_in_strict_mode(registry):
    with pytest.raises(UnsupportedKindError, match=r"Widget"):
        registry.kind('Widget')


def test_containment(registry):
    assert 'service' in registry
    assert 'V1Deployment' in registry
    assert 'Widget' not in registry
    assert None not in registry


def test_type_names_of_a_kind(registry):
    assert registry.type_names('cronjob') == {'V1CronJob', 'V1beta1CronJob'}
    assert registry.type_names('event') == {'CoreV1Event', 'EventsV1Event'}
    assert registry.type_names('unknown') == set()


@pytest.mark.parametrize('kind, api_version, expected', [
    ('Deployment', 'apps/v1', 'V1Deployment'),
    ('cronjob', 'batch/v1', 'V1CronJob'),
    ('CronJob', 'batch/v1beta1', 'V1beta1CronJob'),
    ('Service', 'v1', 'V1Service'),
    ('Event', 'v1', 'CoreV1Event'),
    ('Event', 'events.k8s.io/v1', 'EventsV1Event'),
    ('Deployment', ' apps/v1 ', 'V1Deployment'),
])
def test_type_name_resolution(registry, kind, api_version, expected):
    assert registry.type_name(kind, api_version) == expected


def test_type_name_resolution_fails_for_unknown_versions(registry):
    with pytest.raises(UnsupportedKindError, match=r"v2alpha1"):
        registry.type_name('Deployment', 'apps/v2alpha1')


def test_alternative_stripping_policy(type_names):
    registry = KindRegistry(type_names, stripper=strip_version_by_tail)
    assert registry.canonicalize('v1beta1cronjob') == 'CronJob'
    assert registry.canonicalize('CoreV1Event') == 'Event'


def test_real_models_are_indexed(kinds):
    assert kinds.canonicalize('deployment') == 'Deployment'
    assert kinds.canonicalize('configmap') == 'ConfigMap'
    assert kinds.type_name('Service', 'v1') == 'V1Service'
    assert kinds.type_name('Event', 'events.k8s.io/v1') == 'EventsV1Event'


@pytest.mark.parametrize('kind, expected', [
    ('Service', 'service'),
    ('CronJob', 'cron_job'),
    ('CSIDriver', 'csi_driver'),
    ('APIService', 'api_service'),
    ('Endpoints', 'endpoints'),
    ('HorizontalPodAutoscaler', 'horizontal_pod_autoscaler'),
])
def test_snake_case(kind, expected):
    assert snake_case(kind) == expected
