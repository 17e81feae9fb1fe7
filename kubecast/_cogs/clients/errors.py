"""
K8s API errors and the client layer's own errors.

The underlying client library (now, ``kubernetes``) can be replaced in the future.
We cannot rely on embedding its exceptions all over the code of the library.
Hence, we have our own hierarchy of exceptions for K8s API errors.

Low-level errors, such as the network connectivity issues, SSL/HTTPS issues,
etc, are escalated from the client library as is, since they are related not
to the domain of K8s API, but rather to the networking and encryption.

The original errors of the client library are chained as the causes of our own
specialised errors, and are visible in the stack traces.

Some selected reasons of K8s API errors are made into their own classes,
so that they could be intercepted and handled in other places of the library:
specifically, "not found" is filtered out in the broadcasts, and "conflict"
(i.e. "already exists") is tolerated on creation.

Besides the API errors, the resource model's errors are defined here:
unknown kinds, unsupported verbs, and materialization failures.
"""
import collections.abc
import json
from typing import Any, Collection, Optional

from typing_extensions import Literal, TypedDict


class RawStatusCause(TypedDict):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict):
    name: str
    uid: str
    retryAfterSeconds: int
    kind: str
    group: str
    causes: Collection[RawStatusCause]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.19/#status-v1-meta
class RawStatus(TypedDict):
    apiVersion: str
    kind: Literal["Status"]
    code: int
    status: Literal["Success", "Failure"]
    reason: str
    message: str
    details: RawStatusDetails


class NotFoundError(LookupError):
    """ A resource, a kind's handle, or an API version is absent. Recoverable. """


class UnsupportedKindError(LookupError):
    """ A kind is not known to the type system or not served by the cluster. """


class UnsupportedOperationError(Exception):
    """ No API client registered for a kind exposes the requested verb. """


class LoginError(Exception):
    """ Raised when the client library cannot authenticate by any means. """


class MaterializationError(ValueError):
    pass


class UnknownAttributeError(MaterializationError):
    """ A document has an attribute that the type's descriptor does not declare. """


class MalformedTypeNameError(MaterializationError):
    """ A type spelling cannot be parsed or does not resolve to a known type. """


class MismatchedValueError(MaterializationError):
    """ A value does not have the shape of its declared array or map type. """


class APIError(Exception):

    def __init__(
            self,
            payload: Optional[RawStatus],
            *,
            status: int,
    ) -> None:
        message = payload.get('message') if payload else None
        super().__init__(message, payload)
        self._status = status
        self._payload = payload

    @property
    def status(self) -> int:
        return self._status

    @property
    def code(self) -> Optional[int]:
        return self._payload.get('code') if self._payload else None

    @property
    def message(self) -> Optional[str]:
        return self._payload.get('message') if self._payload else None

    @property
    def details(self) -> Optional[RawStatusDetails]:
        return self._payload.get('details') if self._payload else None


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError, NotFoundError):
    pass


class APIConflictError(APIError):
    pass


def get_status(exc: BaseException) -> Optional[int]:
    """
    Get the HTTP status of a client library's error, if it has any.

    ``kubernetes.client.ApiException`` keeps it in ``.status``; some other
    clients keep it in the response object. Anything without a status
    is not an API error (e.g. connectivity issues) and is not translated.
    """
    status = getattr(exc, 'status', None)
    if not isinstance(status, int):
        response = getattr(exc, 'response', None)
        status = getattr(response, 'status', getattr(response, 'status_code', None))
    return status if isinstance(status, int) and not isinstance(status, bool) else None


def parse_payload(exc: BaseException) -> Optional[RawStatus]:
    body: Any = getattr(exc, 'body', None)
    if isinstance(body, bytes):
        body = body.decode('utf-8', errors='replace')

    payload: Any
    try:
        payload = json.loads(body) if isinstance(body, str) else body
    except json.JSONDecodeError:
        payload = None

    # Better be safe: who knows which sensitive information can be dumped unless kind==Status.
    if not isinstance(payload, collections.abc.Mapping) or payload.get('kind') != 'Status':
        payload = None
    return payload


def translate(exc: BaseException) -> Optional[APIError]:
    """
    Convert a client library's error to our own error, if it is status-bearing.

    The result is not raised here: the caller raises it ``from`` the original,
    so that the original error is kept in the chain of causes.
    """
    if isinstance(exc, APIError):
        return exc

    status = get_status(exc)
    if status is None or status < 400:
        return None

    cls = (
        APIUnauthorizedError if status == 401 else
        APIForbiddenError if status == 403 else
        APINotFoundError if status == 404 else
        APIConflictError if status == 409 else
        APIError
    )
    return cls(parse_payload(exc), status=status)
