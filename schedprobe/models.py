"""Data models for schedprobe.

API records (Credential, Project, Job, Executor, AsyncTask), the paginated
Page envelope, and the StepResult / RunResult structures that flow through
runner → report → CLI.

Wire keys are camelCase; attributes are snake_case. Timestamps stay as the
ISO-8601 strings the API sends.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Generic, Optional, TypeVar


class AsyncTaskState(IntEnum):
    """Lifecycle states of a server-side async task."""

    NOT_STARTED = 0
    IN_PROGRESS = 1
    SUCCESS = 2
    FAILED = 3

    @property
    def is_terminal(self) -> bool:
        return self in (AsyncTaskState.SUCCESS, AsyncTaskState.FAILED)


def _require_object(d: object, kind: str) -> dict:
    if not isinstance(d, dict):
        raise TypeError(f"{kind} must be a JSON object, got {type(d).__name__}")
    if "id" not in d:
        raise KeyError(f"{kind} is missing 'id'")
    return d


@dataclass
class AsyncTask:
    """Status of a deferred operation, polled by request id."""

    id: int
    request_id: str = ""
    input: str = ""
    output: str = ""
    service: str = ""
    # Raw int so undocumented codes survive decoding.
    state: int = AsyncTaskState.NOT_STARTED
    date_created: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> AsyncTask:
        d = _require_object(d, "async task")
        state = d.get("state", 0)
        if not isinstance(state, int) or isinstance(state, bool):
            raise TypeError(f"async task state must be an integer, got {state!r}")
        return cls(
            id=d["id"],
            request_id=d.get("requestId", ""),
            input=d.get("input", ""),
            output=d.get("output", ""),
            service=d.get("service", ""),
            state=state,
            date_created=d.get("dateCreated", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "requestId": self.request_id,
            "input": self.input,
            "output": self.output,
            "service": self.service,
            "state": self.state,
            "dateCreated": self.date_created,
        }


@dataclass
class Credential:
    id: int
    account_id: int = 0
    api_key: str = ""
    api_secret: str = ""
    date_created: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Credential:
        d = _require_object(d, "credential")
        return cls(
            id=d["id"],
            account_id=d.get("accountId", 0),
            api_key=d.get("apiKey", ""),
            api_secret=d.get("apiSecret", ""),
            date_created=d.get("dateCreated", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "accountId": self.account_id,
            "apiKey": self.api_key,
            "apiSecret": self.api_secret,
            "dateCreated": self.date_created,
        }


@dataclass
class Project:
    id: int
    account_id: int = 0
    name: str = ""
    description: str = ""
    date_created: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Project:
        d = _require_object(d, "project")
        return cls(
            id=d["id"],
            account_id=d.get("accountId", 0),
            name=d.get("name", ""),
            description=d.get("description", ""),
            date_created=d.get("dateCreated", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "accountId": self.account_id,
            "name": self.name,
            "description": self.description,
            "dateCreated": self.date_created,
        }


@dataclass
class Executor:
    id: int
    account_id: int = 0
    name: str = ""
    description: str = ""
    date_created: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Executor:
        d = _require_object(d, "executor")
        return cls(
            id=d["id"],
            account_id=d.get("accountId", 0),
            name=d.get("name", ""),
            description=d.get("description", ""),
            date_created=d.get("dateCreated", ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "accountId": self.account_id,
            "name": self.name,
            "description": self.description,
            "dateCreated": self.date_created,
        }


# snake_case attribute -> camelCase wire key
_JOB_FIELDS = {
    "account_id": "accountId",
    "project_id": "projectId",
    "description": "description",
    "executor_id": "executorId",
    "data": "data",
    "spec": "spec",
    "start_date": "startDate",
    "end_date": "endDate",
    "timezone": "timezone",
    "date_created": "dateCreated",
    "date_modified": "dateModified",
    "date_deleted": "dateDeleted",
    "created_by": "createdBy",
    "modified_by": "modifiedBy",
    "deleted_by": "deletedBy",
}


@dataclass
class Job:
    """A scheduled job. Created in bulk through the async-task flow."""

    id: int
    account_id: int = 0
    project_id: int = 0
    description: str = ""
    executor_id: int = 0
    data: str = ""
    spec: str = ""
    start_date: str = ""
    end_date: str = ""
    timezone: str = ""
    date_created: str = ""
    date_modified: str = ""
    date_deleted: str = ""
    created_by: str = ""
    modified_by: str = ""
    deleted_by: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Job:
        d = _require_object(d, "job")
        values = {attr: d[key] for attr, key in _JOB_FIELDS.items() if d.get(key) is not None}
        return cls(id=d["id"], **values)

    def to_dict(self) -> dict:
        d = {"id": self.id}
        for attr, key in _JOB_FIELDS.items():
            d[key] = getattr(self, attr)
        return d


@dataclass
class JobCreateRequest:
    """One entry of a bulk job-creation request."""

    project_id: int
    description: str
    callback_url: str = ""
    spec: str = ""
    timezone: str = "UTC"

    def to_dict(self) -> dict:
        return {
            "projectId": self.project_id,
            "description": self.description,
            "callbackUrl": self.callback_url,
            "spec": self.spec,
            "timezone": self.timezone,
        }


T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a paginated list response."""

    total: int
    offset: int
    limit: int
    items: list[T] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class StepResult:
    """Outcome of a single probe step (one or a few HTTP calls)."""

    label: str
    ok: bool = True
    elapsed_s: float = 0.0
    detail: str = ""

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "ok": self.ok,
            "elapsed_s": self.elapsed_s,
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, d: dict) -> StepResult:
        return cls(
            label=d.get("label", ""),
            ok=d.get("ok", False),
            elapsed_s=d.get("elapsed_s", 0.0),
            detail=d.get("detail", ""),
        )


@dataclass
class RunResult:
    """Complete result of a single scenario run."""

    scenario: str
    timestamp: str
    host: str = ""
    wall_clock_s: float = 0.0
    steps: list[StepResult] = field(default_factory=list)
    # Exception class and message of the error that stopped the run
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error and all(s.ok for s in self.steps)

    @property
    def verdict(self) -> str:
        if not self.steps and not self.error:
            return "empty"
        return "pass" if self.ok else "fail"

    @property
    def passed_steps(self) -> int:
        return sum(1 for s in self.steps if s.ok)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "scenario": self.scenario,
            "timestamp": self.timestamp,
            "host": self.host,
            "wall_clock_s": self.wall_clock_s,
            "verdict": self.verdict,
            "error": self.error,
            "steps": [s.to_dict() for s in self.steps],
        }

    @classmethod
    def from_dict(cls, d: dict) -> RunResult:
        """Deserialize from a JSON dict (metrics.json)."""
        return cls(
            scenario=d.get("scenario", ""),
            timestamp=d.get("timestamp", ""),
            host=d.get("host", ""),
            wall_clock_s=d.get("wall_clock_s", 0.0),
            steps=[StepResult.from_dict(s) for s in d.get("steps", [])],
            error=d.get("error", ""),
        )

    def save(self, result_dir: Path) -> None:
        """Write metrics.json to the result directory."""
        result_dir.mkdir(parents=True, exist_ok=True)
        (result_dir / "metrics.json").write_text(
            json.dumps(self.to_dict(), indent=2), encoding="utf-8"
        )

    @classmethod
    def load(cls, result_dir: Path) -> Optional[RunResult]:
        """Load metrics.json from a result directory."""
        p = result_dir / "metrics.json"
        if not p.exists():
            return None
        try:
            return cls.from_dict(json.loads(p.read_text(encoding="utf-8")))
        except (json.JSONDecodeError, OSError):
            return None
