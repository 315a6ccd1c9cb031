"""HTTP client for the scheduling API.

One requests.Session is reused for every call. Calls are synchronous and
blocking with no per-call timeout; only the async-task wait is bounded.
"""

from __future__ import annotations

from typing import Callable, Generic, Optional, TypeVar
from urllib.parse import urlparse

import requests

from schedprobe.config import Settings
from schedprobe.errors import (
    DecodeError,
    MalformedLocationHeader,
    MissingLocationHeader,
    PollFetchError,
    TransportError,
    UnexpectedStatus,
)
from schedprobe.models import AsyncTask, Credential, Executor, Job, JobCreateRequest, Page, Project
from schedprobe.poller import poll_result

T = TypeVar("T")


def parse_location(location: Optional[str], url: str = "") -> tuple[str, str]:
    """Split a Location header into (resource, request_id).

    Only the exact two-segment shape ``/{resource}/{requestId}`` is accepted.
    An absolute URL is reduced to its path first.
    """
    if not location or not location.strip():
        raise MissingLocationHeader(url)
    path = urlparse(location.strip()).path
    parts = path.split("/")
    if len(parts) != 3 or parts[0] != "" or not parts[1] or not parts[2]:
        raise MalformedLocationHeader(location)
    return parts[1], parts[2]


def _decode_json(resp: requests.Response):
    try:
        return resp.json()
    except ValueError as e:
        raise DecodeError(f"{resp.url}: response is not JSON: {e}") from e


def _envelope_data(body: object, url: str) -> object:
    """Unwrap the ``{"success": ..., "data": ...}`` envelope."""
    if not isinstance(body, dict) or "data" not in body:
        raise DecodeError(f"{url}: response has no 'data' envelope")
    return body["data"]


class ApiClient:
    """Authenticated client for one account on one host."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()
        self.session.headers.update(settings.auth_headers())

        self.credentials = Resource(self, "credentials", "credentials", Credential)
        self.projects = Resource(self, "projects", "projects", Project)
        self.jobs = Resource(self, "jobs", "jobs", Job)
        self.executors = Resource(self, "executors", "executors", Executor)

    def url(self, path: str) -> str:
        return f"{self.settings.base_url}/{path.lstrip('/')}"

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Raw requests
    # ------------------------------------------------------------------

    def send(
        self,
        method: str,
        path: str,
        json_body: object = None,
        params: Optional[dict] = None,
    ) -> requests.Response:
        """Issue one request; only transport failures raise."""
        url = self.url(path)
        try:
            return self.session.request(method, url, json=json_body, params=params)
        except requests.RequestException as e:
            raise TransportError(method, url, e) from e

    def request(
        self,
        method: str,
        path: str,
        expected: tuple[int, ...],
        json_body: object = None,
        params: Optional[dict] = None,
    ) -> requests.Response:
        """Issue one request and require its status to be in ``expected``."""
        resp = self.send(method, path, json_body=json_body, params=params)
        if resp.status_code not in expected:
            raise UnexpectedStatus(method, resp.url or self.url(path), resp.status_code, resp.text, expected)
        return resp

    # ------------------------------------------------------------------
    # Async operations
    # ------------------------------------------------------------------

    def submit(self, path: str, payload: object) -> str:
        """Submit a deferred operation and return its async-task request id."""
        resp = self.request("POST", path, (202,), json_body=payload)
        _, request_id = parse_location(resp.headers.get("Location"), self.url(path))
        return request_id

    def get_async_task(self, request_id: str) -> AsyncTask:
        path = f"async-tasks/{request_id}"
        resp = self.send("GET", path)
        if resp.status_code != 200:
            raise PollFetchError(request_id, resp.status_code, resp.text)
        data = _envelope_data(_decode_json(resp), self.url(path))
        try:
            return AsyncTask.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"async task {request_id}: {e}") from e

    def wait_kwargs(self, on_poll: Optional[Callable[[int, AsyncTask], None]] = None) -> dict:
        return {
            "attempts": self.settings.poll_attempts,
            "interval_s": self.settings.poll_interval_s,
            "on_poll": on_poll,
        }

    def create_jobs(
        self,
        jobs: list[JobCreateRequest],
        on_poll: Optional[Callable[[int, AsyncTask], None]] = None,
        **wait_kwargs,
    ) -> list[Job]:
        """Bulk-create jobs through the async-task flow.

        Returns the created jobs in submission order.
        """
        request_id = self.submit("jobs", [j.to_dict() for j in jobs])
        kwargs = {**self.wait_kwargs(on_poll), **wait_kwargs}
        return poll_result(self.get_async_task, request_id, Job, many=True, **kwargs)


class Resource(Generic[T]):
    """Synchronous REST collection: 201 create, 200 read/update, 204 delete."""

    def __init__(self, client: ApiClient, path: str, list_key: str, record_type: type[T]):
        self.client = client
        self.path = path
        self.list_key = list_key
        self.record_type = record_type

    def _record(self, resp: requests.Response) -> T:
        data = _envelope_data(_decode_json(resp), resp.url)
        try:
            return self.record_type.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"{resp.url}: {e}") from e

    def create(self, body: Optional[dict] = None) -> T:
        resp = self.client.request("POST", self.path, (201,), json_body=body or {})
        return self._record(resp)

    def get(self, record_id: int) -> T:
        resp = self.client.request("GET", f"{self.path}/{record_id}", (200,))
        return self._record(resp)

    def list(
        self,
        limit: int = 10,
        offset: int = 0,
        order_by: Optional[str] = None,
        direction: Optional[str] = None,
        **filters,
    ) -> Page[T]:
        params = {**filters, "limit": limit, "offset": offset}
        if order_by:
            params["orderBy"] = order_by
        if direction:
            params["orderByDirection"] = direction
        resp = self.client.request("GET", self.path, (200,), params=params)
        data = _envelope_data(_decode_json(resp), resp.url)
        try:
            items = data.get(self.list_key) or []
            counts = {key: data[key] for key in ("total", "offset", "limit")}
            for key, value in counts.items():
                if not isinstance(value, int) or isinstance(value, bool):
                    raise TypeError(f"{key} must be an integer, got {value!r}")
            return Page(
                total=counts["total"],
                offset=counts["offset"],
                limit=counts["limit"],
                items=[self.record_type.from_dict(item) for item in items],
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"{resp.url}: malformed page: {e}") from e

    def update(self, record_id: int, body: dict) -> None:
        self.client.request("PUT", f"{self.path}/{record_id}", (200,), json_body=body)

    def delete(self, record_id: int) -> None:
        self.client.request("DELETE", f"{self.path}/{record_id}", (204,))
