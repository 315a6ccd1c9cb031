"""Shared fixtures: a scripted requests.Session and API payload builders."""

import json

import pytest
import requests

from schedprobe.client import ApiClient
from schedprobe.config import Settings

HOST = "http://api.test"


def make_response(status, body=None, headers=None, url=f"{HOST}/api/v1/"):
    """Build a real requests.Response without touching the network."""
    resp = requests.Response()
    resp.status_code = status
    if body is None:
        resp._content = b""
    elif isinstance(body, (bytes, str)):
        resp._content = body.encode() if isinstance(body, str) else body
    else:
        resp._content = json.dumps(body).encode()
    resp.encoding = "utf-8"
    resp.headers.update(headers or {})
    resp.url = url
    return resp


class FakeSession(requests.Session):
    """Answers requests from a queue and records what was sent.

    Queue entries are Responses, exceptions to raise, or callables taking
    (method, url, kwargs) and returning a Response.
    """

    def __init__(self, replies=None):
        super().__init__()
        self.replies = list(replies or [])
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    def request(self, method, url, **kwargs):
        self.calls.append({
            "method": method,
            "url": url,
            "params": kwargs.get("params"),
            "json": kwargs.get("json"),
            "data": kwargs.get("data"),
            "headers": dict(self.headers),
        })
        if not self.replies:
            raise AssertionError(f"unexpected request: {method} {url}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(method, url, kwargs)
        reply.url = url
        return reply


def envelope(data):
    return {"success": True, "data": data}


def page(key, items, limit=10, offset=0, total=None):
    return envelope({
        "total": len(items) if total is None else total,
        "offset": offset,
        "limit": limit,
        key: items,
    })


def credential(id, **extra):
    d = {
        "id": id,
        "accountId": 7,
        "apiKey": f"key-{id}",
        "apiSecret": f"secret-{id}",
        "dateCreated": f"2024-01-0{id % 9 + 1}T00:00:00Z",
    }
    d.update(extra)
    return d


def job(id, description, project_id=1):
    return {
        "id": id,
        "accountId": 7,
        "projectId": project_id,
        "description": description,
        "spec": "@every 1m",
        "timezone": "UTC",
        "dateCreated": "2024-01-01T00:00:00Z",
    }


def task(state, output="", request_id="abc123"):
    return envelope({
        "id": 1,
        "requestId": request_id,
        "input": "[]",
        "output": output,
        "service": "jobs",
        "state": state,
        "dateCreated": "2024-01-01T00:00:00Z",
    })


@pytest.fixture
def settings(tmp_path):
    return Settings(
        host=HOST,
        api_key="test-key",
        api_secret="test-secret",
        account_id="7",
        results_dir=tmp_path / "results",
        poll_interval_s=0.0,
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(settings, session):
    return ApiClient(settings, session=session)


@pytest.fixture
def sleeps():
    """Pass ``sleeps.append`` as the poller's sleep to record instead of sleeping."""
    return []
