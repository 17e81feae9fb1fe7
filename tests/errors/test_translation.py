import pytest

from kubecast._cogs.clients.errors import APIConflictError, APIError, APIForbiddenError, \
                                          APINotFoundError, APIUnauthorizedError, \
                                          NotFoundError, get_status, parse_payload, translate


@pytest.mark.parametrize('status, cls', [
    (400, APIError),
    (401, APIUnauthorizedError),
    (403, APIForbiddenError),
    (404, APINotFoundError),
    (409, APIConflictError),
    (422, APIError),
    (500, APIError),
    (666, APIError),
])
def test_client_errors_are_translated(api_exception, status, cls):
    error = translate(api_exception(status))
    assert type(error) is cls
    assert error.status == status


@pytest.mark.parametrize('status', [200, 201, 304])
def test_success_statuses_are_not_translated(api_exception, status):
    assert translate(api_exception(status)) is None


def test_statusless_errors_are_not_translated():
    assert translate(ConnectionError("boo!")) is None


def test_own_errors_are_kept_as_is():
    error = APIConflictError(None, status=409)
    assert translate(error) is error


def test_not_found_is_recoverable_as_a_generic_not_found(api_exception):
    error = translate(api_exception(404))
    assert isinstance(error, NotFoundError)
    assert isinstance(error, LookupError)


def test_status_payload_is_parsed(api_exception):
    payload = {
        'kind': 'Status',
        'apiVersion': 'v1',
        'status': 'Failure',
        'code': 409,
        'reason': 'AlreadyExists',
        'message': 'services "svc" already exists',
        'details': {'name': 'svc', 'kind': 'services'},
    }
    error = translate(api_exception(409, payload))
    assert error.code == 409
    assert error.message == 'services "svc" already exists'
    assert error.details == {'name': 'svc', 'kind': 'services'}
    assert str(error.args[0]) == 'services "svc" already exists'


@pytest.mark.parametrize('payload', [
    {'kind': 'Pod', 'secret': 'sensitive'},
    ['a', 'list'],
    None,
])
def test_non_status_payloads_are_ignored(api_exception, payload):
    error = translate(api_exception(500, payload))
    assert error.code is None
    assert error.message is None
    assert error.details is None


def test_unparseable_payloads_are_ignored(api_exception):
    exc = api_exception(500)
    exc.body = b'{not json'
    assert parse_payload(exc) is None


class ResponseCarrier(Exception):
    def __init__(self, status):
        super().__init__()
        self.response = type('Response', (), {'status_code': status})()


def test_status_is_taken_from_the_response_if_absent_on_the_error():
    assert get_status(ResponseCarrier(404)) == 404
    assert isinstance(translate(ResponseCarrier(404)), APINotFoundError)
