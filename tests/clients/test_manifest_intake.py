import kubernetes.client
import pytest

from kubecast._cogs.clients.errors import NotFoundError, UnknownAttributeError, \
                                          UnsupportedKindError


async def test_typed_objects_get_the_kind_and_api_version(client, core_api):
    svc = await client.create(kubernetes.client.V1Service(
        metadata=kubernetes.client.V1ObjectMeta(name='svc'),
    ))
    assert svc.kind == 'Service'
    assert svc.api_version == 'v1'
    body = core_api.create_namespaced_service.call_args[0][1]
    assert body.kind == 'Service'
    assert body.api_version == 'v1'


async def test_typed_objects_keep_the_explicit_api_version(client, core_api):
    svc = kubernetes.client.V1Service(
        api_version='v1',
        kind='Service',
        metadata=kubernetes.client.V1ObjectMeta(name='svc'),
    )
    await client.create(svc)
    assert core_api.create_namespaced_service.call_args[0][1] is svc


async def test_yaml_texts_are_parsed(client):
    svc = await client.create("""
        kind: service
        metadata:
          name: svc
        spec:
          ports:
            - port: 443
              targetPort: 8443
    """)
    assert isinstance(svc, kubernetes.client.V1Service)
    assert svc.kind == 'Service'
    assert svc.spec.ports[0].target_port == 8443


async def test_json_texts_are_parsed(client):
    svc = await client.create('{"kind": "Service", "apiVersion": "v1", "metadata": {"name": "svc"}}')
    assert svc.metadata.name == 'svc'


async def test_dicts_are_not_modified(client):
    manifest = {'kind': 'service', 'metadata': {'name': 'svc'}}
    await client.create(manifest)
    assert manifest == {'kind': 'service', 'metadata': {'name': 'svc'}}


async def test_manifests_without_kinds_fail(client):
    with pytest.raises(UnsupportedKindError):
        await client.create({'metadata': {'name': 'svc'}})


async def test_manifests_with_uninferrable_api_versions_fail(client):
    with pytest.raises(NotFoundError, match=r"Cannot infer the API version of 'Deployment'"):
        await client.create({'kind': 'Deployment', 'metadata': {'name': 'deploy'}})


async def test_manifests_with_unserved_api_versions_fail(client):
    with pytest.raises(NotFoundError, match=r"apps/v1"):
        await client.create(kubernetes.client.V1Service(
            api_version='apps/v1',
            metadata=kubernetes.client.V1ObjectMeta(name='svc'),
        ))


async def test_manifests_with_unknown_attributes_fail(client):
    with pytest.raises(UnknownAttributeError, match=r"'replicas'"):
        await client.create({'kind': 'Service', 'metadata': {'name': 'svc'}, 'spec': {'replicas': 1}})


@pytest.mark.parametrize('manifest', [123, None, ['kind', 'Service']])
async def test_unsupported_manifests_fail(client, manifest):
    with pytest.raises(TypeError):
        await client.create(manifest)


async def test_non_mapping_texts_fail(client):
    with pytest.raises(ValueError):
        await client.create("- kind: Service")
