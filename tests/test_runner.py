"""Tests for scenario discovery, the runner, and the bundled scenarios.

Each scenario runs against a FakeSession scripted with the exact sequence of
responses the real API would give.
"""

import io
import json

import pytest
from rich.console import Console

from conftest import credential, envelope, job, make_response, page, task
from schedprobe.models import RunResult
from schedprobe.runner import run_all, run_scenario
from schedprobe.scenarios import list_scenarios, load_scenario


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120)


def output_of(console):
    return console.file.getvalue()


# --- Discovery (3 tests) ---

def test_list_scenarios_in_order():
    names = [s.name for s in list_scenarios()]
    assert names == ["credentials", "projects", "jobs", "executors", "pagination"]


def test_load_scenario_metadata():
    info = load_scenario("jobs")
    assert info.name == "jobs"
    assert "async" in info.description
    assert callable(info.run)


def test_load_unknown_scenario():
    assert load_scenario("nope") is None


# --- run_scenario (5 tests) ---

def test_credentials_scenario_passes(client, session, console, settings):
    session.queue(
        make_response(201, envelope(credential(1))),
        make_response(200, page("credentials", [credential(1)])),
        make_response(200, envelope({})),
        make_response(204),
    )
    result = run_scenario("credentials", client, console, results_dir=settings.results_dir)

    assert result.ok
    assert result.verdict == "pass"
    assert [s.label for s in result.steps] == [
        "Creating a credential",
        "Getting all credentials",
        "Archiving the credential",
        "Deleting the credential",
    ]
    assert session.calls[2]["json"] == {"archived": True}
    assert session.calls[3]["method"] == "DELETE"


def test_first_error_stops_the_scenario(client, session, console):
    session.queue(
        make_response(201, envelope(credential(1))),
        make_response(500, "database down"),
    )
    result = run_scenario("credentials", client, console)

    assert not result.ok
    assert result.error.startswith("UnexpectedStatus")
    assert len(result.steps) == 2
    assert result.steps[1].ok is False
    assert "database down" in result.steps[1].detail
    # Nothing after the failing step was attempted
    assert len(session.calls) == 2
    assert "FAILED" in output_of(console)


def test_missing_generated_keys_fails_expectation(client, session, console):
    session.queue(make_response(201, envelope({"id": 1, "apiKey": "", "apiSecret": ""})))
    result = run_scenario("credentials", client, console)
    assert result.error.startswith("ExpectationFailed")
    assert "apiKey" in result.error


def test_unknown_scenario(client, console):
    result = run_scenario("nope", client, console)
    assert not result.ok
    assert "unknown scenario" in result.error


def test_metrics_saved(client, session, console, settings):
    session.queue(
        make_response(201, envelope({"id": 4, "name": "Test Project"})),
        make_response(200, page("projects", [])),
        make_response(200, envelope({})),
        make_response(204),
    )
    result = run_scenario("projects", client, console, results_dir=settings.results_dir)

    loaded = RunResult.load(settings.results_dir / "projects" / result.timestamp)
    assert loaded is not None
    assert loaded.verdict == "pass"
    assert len(loaded.steps) == 4
    assert loaded.host == settings.host


# --- Jobs scenario (2 tests) ---

def _jobs_replies(output):
    return [
        make_response(201, envelope({"id": 1, "name": "Job Test Project"})),
        make_response(202, headers={"Location": "/async-tasks/abc123"}),
        make_response(200, task(1)),
        make_response(200, task(2, output=output)),
    ]


def test_jobs_scenario_async_flow(client, session, console):
    created = [job(101, "Test Job 1"), job(102, "Test Job 2")]
    session.queue(
        *_jobs_replies(json.dumps(created)),
        make_response(200, page("jobs", created)),
        make_response(200, envelope({})),
        make_response(204),
        make_response(204),
        make_response(204),
    )
    result = run_scenario("jobs", client, console)

    assert result.ok, result.error
    assert session.calls[4]["params"]["projectId"] == 1
    deleted = [c["url"] for c in session.calls if c["method"] == "DELETE"]
    assert deleted[0].endswith("/jobs/101")
    assert deleted[1].endswith("/jobs/102")
    assert deleted[2].endswith("/projects/1")
    assert "poll 1: in_progress" in output_of(console)


def test_jobs_scenario_out_of_order_output(client, session, console):
    created = [job(102, "Test Job 2"), job(101, "Test Job 1")]
    session.queue(*_jobs_replies(json.dumps(created)))
    result = run_scenario("jobs", client, console)
    assert result.error.startswith("ExpectationFailed")


# --- Pagination scenario (4 tests) ---

def test_pagination_tops_up_and_checks_order(client, session, console):
    existing = [credential(i) for i in range(1, 4)]
    full = existing + [credential(4), credential(5)]
    session.queue(
        make_response(200, page("credentials", existing, limit=5)),
        make_response(201, envelope(credential(4))),
        make_response(201, envelope(credential(5))),
        make_response(200, page("credentials", full, limit=5)),
        make_response(200, page("credentials", full, limit=5)),
        make_response(200, page("credentials", list(reversed(full)), limit=5)),
        make_response(204),
        make_response(204),
    )
    result = run_scenario("pagination", client, console)

    assert result.ok, result.error
    assert session.calls[3]["params"] == {"limit": 5, "offset": 0}
    assert session.calls[4]["params"]["orderByDirection"] == "asc"
    assert session.calls[5]["params"]["orderByDirection"] == "desc"


def test_pagination_short_page_fails(client, session, console):
    items = [credential(i) for i in range(1, 6)]
    session.queue(
        make_response(200, page("credentials", items, limit=5)),
        make_response(200, page("credentials", items[:4], limit=5, total=5)),
    )
    result = run_scenario("pagination", client, console)
    assert result.error.startswith("ExpectationFailed")
    assert "expected 5 credentials, got 4" in result.error


def test_pagination_orders_by_instant_not_text(client, session, console):
    # 23:00Z written with a +02:00 offset sorts after 23:30Z as text
    early = credential(1, dateCreated="2024-01-02T01:00:00+02:00")
    late = credential(2, dateCreated="2024-01-01T23:30:00.5Z")
    rest = [credential(i) for i in range(3, 6)]
    session.queue(
        make_response(200, page("credentials", [early, late] + rest, limit=5)),
        make_response(200, page("credentials", [early, late] + rest, limit=5)),
        make_response(200, page("credentials", [early, late], limit=5)),
        make_response(200, page("credentials", [late, early], limit=5)),
    )
    result = run_scenario("pagination", client, console)
    assert result.ok, result.error


def test_pagination_null_total_is_a_decode_failure(client, session, console, settings):
    body = page("credentials", [], limit=5)
    body["data"]["total"] = None
    session.queue(make_response(200, body))
    result = run_scenario("pagination", client, console, results_dir=settings.results_dir)

    assert result.error.startswith("DecodeError")
    assert "total" in result.error
    assert (settings.results_dir / "pagination" / result.timestamp / "metrics.json").exists()


# --- Unexpected errors (1 test) ---

def test_unexpected_exception_is_recorded_as_failed_run(client, session, console, settings):
    session.queue(RuntimeError("boom"))
    result = run_scenario("credentials", client, console, results_dir=settings.results_dir)

    assert not result.ok
    assert result.error == "unexpected RuntimeError: boom"
    assert result.steps[0].ok is False
    assert "FAILED" in output_of(console)
    loaded = RunResult.load(settings.results_dir / "credentials" / result.timestamp)
    assert loaded.verdict == "fail"


# --- run_all (1 test) ---

def test_run_all_stops_after_first_failed_scenario(client, session, console):
    session.queue(make_response(401, "bad credentials"))
    results = run_all(client, console)
    assert len(results) == 1
    assert results[0].scenario == "credentials"
    assert not results[0].ok


# --- Executors scenario (1 test) ---

def test_executors_scenario(client, session, console):
    executor = {"id": 3, "name": "Test Executor", "description": "This is a test executor"}
    session.queue(
        make_response(201, envelope(executor)),
        make_response(200, envelope(executor)),
        make_response(200, page("executors", [executor])),
        make_response(200, envelope({})),
        make_response(204),
    )
    result = run_scenario("executors", client, console)

    assert result.ok, result.error
    assert session.calls[1]["url"].endswith("/api/v1/executors/3")
    assert session.calls[3]["json"] == {"description": "Updated Test Executor"}
