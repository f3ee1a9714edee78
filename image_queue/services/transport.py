"""
Typed classification of outbound HTTP failures.

Every client in this package converts `requests` exceptions and non-2xx
responses into a `TransportError` at the point where the call is made, so
retry policies and error messages work from a closed set of kinds instead
of matching on exception text.
"""
import socket
from enum import Enum
from typing import Any, Iterator, Optional

import requests
from urllib3.exceptions import NameResolutionError, ProtocolError


class TransportErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECTION_RESET = "connection_reset"
    DNS_FAILURE = "dns_failure"
    NETWORK = "network"
    HTTP_4XX = "http_4xx"
    HTTP_5XX = "http_5xx"


NETWORK_KINDS = frozenset({
    TransportErrorKind.TIMEOUT,
    TransportErrorKind.CONNECTION_RESET,
    TransportErrorKind.DNS_FAILURE,
    TransportErrorKind.NETWORK,
})


class TransportError(Exception):
    def __init__(
        self,
        kind: TransportErrorKind,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def is_network(self) -> bool:
        """True for failures that never produced an HTTP response."""
        return self.kind in NETWORK_KINDS

    def __repr__(self) -> str:
        return f"TransportError(kind={self.kind.value!r}, status_code={self.status_code!r}, message={self.message!r})"


def _causes(exc: BaseException) -> Iterator[BaseException]:
    """Walk an exception, its chained causes and urllib3's wrapped reasons."""
    seen = set()
    stack = [exc]
    while stack:
        current = stack.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        stack.append(current.__cause__)
        stack.append(current.__context__)
        reason = getattr(current, "reason", None)
        if isinstance(reason, BaseException):
            stack.append(reason)
        for arg in getattr(current, "args", ()):
            if isinstance(arg, BaseException):
                stack.append(arg)


def classify_exception(exc: requests.RequestException) -> TransportError:
    """Map a `requests` exception raised before any response arrived."""
    if isinstance(exc, requests.Timeout):
        return TransportError(TransportErrorKind.TIMEOUT, str(exc))

    for cause in _causes(exc):
        if isinstance(cause, (NameResolutionError, socket.gaierror)):
            return TransportError(TransportErrorKind.DNS_FAILURE, str(exc))
        if isinstance(cause, (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)):
            return TransportError(TransportErrorKind.CONNECTION_RESET, str(exc))
        if isinstance(cause, socket.timeout):
            return TransportError(TransportErrorKind.TIMEOUT, str(exc))

    for cause in _causes(exc):
        if isinstance(cause, ProtocolError):
            # Remote end closed the connection mid-request
            return TransportError(TransportErrorKind.CONNECTION_RESET, str(exc))

    return TransportError(TransportErrorKind.NETWORK, str(exc))


def _response_payload(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def error_from_response(response: requests.Response) -> TransportError:
    """Build a TransportError for a non-2xx response."""
    kind = TransportErrorKind.HTTP_4XX if response.status_code < 500 else TransportErrorKind.HTTP_5XX
    payload = _response_payload(response)
    message = f"{response.status_code} {response.reason or ''}".strip()

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            message = f"{message}: {error['message']}"
        elif isinstance(error, str):
            message = f"{message}: {error}"

    return TransportError(kind, message, status_code=response.status_code, payload=payload)


def send(session: requests.Session, method: str, url: str, **kwargs) -> requests.Response:
    """Perform a request, raising TransportError on network failure or non-2xx status."""
    try:
        response = session.request(method, url, **kwargs)
    except requests.RequestException as exc:
        raise classify_exception(exc) from exc

    if not response.ok:
        raise error_from_response(response)
    return response
