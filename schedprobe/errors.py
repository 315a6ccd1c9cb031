"""Error taxonomy for schedprobe.

Every error aborts the operation that raised it; nothing here is retried.
"""

from __future__ import annotations


class ProbeError(Exception):
    """Base class for every failure a probe run can report."""


class TransportError(ProbeError):
    """The HTTP round trip itself failed (connection refused, reset, DNS)."""

    def __init__(self, method: str, url: str, cause: Exception) -> None:
        super().__init__(f"{method} {url} failed: {cause}")
        self.method = method
        self.url = url
        self.cause = cause


class UnexpectedStatus(ProbeError):
    """The server answered with a status outside the expected set."""

    def __init__(self, method: str, url: str, status: int, body: str, expected: tuple[int, ...] = ()) -> None:
        wanted = "/".join(str(s) for s in expected) or "2xx"
        super().__init__(f"{method} {url} returned {status} (expected {wanted}): {body}")
        self.method = method
        self.url = url
        self.status = status
        self.body = body
        self.expected = expected


class MissingLocationHeader(ProbeError):
    """A deferred call was accepted but carried no Location header."""

    def __init__(self, url: str) -> None:
        super().__init__(f"no Location header in response from {url}")
        self.url = url


class MalformedLocationHeader(ProbeError):
    """The Location header is not of the form /{resource}/{requestId}."""

    def __init__(self, location: str) -> None:
        super().__init__(f"invalid Location header format: {location!r}")
        self.location = location


class PollFetchError(ProbeError):
    """Fetching the async task returned something other than 200."""

    def __init__(self, request_id: str, status: int, body: str) -> None:
        super().__init__(f"failed to get async task {request_id} ({status}): {body}")
        self.request_id = request_id
        self.status = status
        self.body = body


class OperationFailed(ProbeError):
    """The server reported the deferred operation as failed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"async operation failed: {message}")
        self.message = message


class UnknownState(ProbeError):
    """The async task reported a state code we do not know."""

    def __init__(self, value: object) -> None:
        super().__init__(f"unknown async task state: {value!r}")
        self.value = value


class DecodeError(ProbeError):
    """A payload was not valid JSON or did not have the expected shape."""


class PollTimeout(ProbeError):
    """The async task did not reach a terminal state within the budget."""

    def __init__(self, request_id: str, attempts: int, interval_s: float) -> None:
        super().__init__(
            f"async task {request_id} not finished after {attempts} attempts "
            f"({attempts * interval_s:g}s)"
        )
        self.request_id = request_id
        self.attempts = attempts
        self.interval_s = interval_s


class ExpectationFailed(ProbeError):
    """A response was well-formed but not what the scenario expected."""
