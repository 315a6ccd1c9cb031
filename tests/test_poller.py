"""Tests for the async task poller and the two-stage output decoder.

The poller is fed scripted AsyncTask sequences; sleeping is recorded, never
performed.
"""

import json

import pytest

from schedprobe.errors import DecodeError, OperationFailed, PollFetchError, PollTimeout, UnknownState
from schedprobe.models import AsyncTask, Credential, Job
from schedprobe.poller import decode_output, parse_output, poll_result, wait_for_task


def scripted(*states, output=""):
    """A fetch function returning tasks in the given states, in order."""
    seen = []

    def fetch(request_id):
        seen.append(request_id)
        state = states[len(seen) - 1]
        return AsyncTask(id=1, request_id=request_id, state=state, output=output if state in (2, 3) else "")

    fetch.seen = seen
    return fetch


# --- wait_for_task (9 tests) ---

def test_success_after_in_progress(sleeps):
    fetch = scripted(0, 1, 1, 2, output="[]")
    task = wait_for_task(fetch, "abc123", sleep=sleeps.append)
    assert task.state == 2
    assert fetch.seen == ["abc123"] * 4
    assert sleeps == [1.0, 1.0, 1.0, 1.0]


def test_immediate_success_still_waits_one_interval(sleeps):
    wait_for_task(scripted(2, output="{}"), "r1", sleep=sleeps.append)
    assert sleeps == [1.0]


def test_failed_carries_literal_output(sleeps):
    fetch = scripted(1, 3, output="executor 42 not found")
    with pytest.raises(OperationFailed) as exc:
        wait_for_task(fetch, "r1", sleep=sleeps.append)
    assert exc.value.message == "executor 42 not found"
    assert len(fetch.seen) == 2


def test_unknown_state(sleeps):
    with pytest.raises(UnknownState) as exc:
        wait_for_task(scripted(1, 7), "r1", sleep=sleeps.append)
    assert exc.value.value == 7


def test_timeout_after_thirty_attempts(sleeps):
    fetch = scripted(*([1] * 30))
    with pytest.raises(PollTimeout) as exc:
        wait_for_task(fetch, "r1", sleep=sleeps.append)
    assert len(fetch.seen) == 30
    assert sleeps == [1.0] * 30
    assert exc.value.attempts == 30
    assert "(30s)" in str(exc.value)


def test_last_look_happens_at_full_budget():
    clock = [0.0]
    fetched_at = []

    def sleep(seconds):
        clock[0] += seconds

    def fetch(request_id):
        fetched_at.append(clock[0])
        state = 2 if clock[0] >= 29.5 else 1
        return AsyncTask(id=1, request_id=request_id, state=state, output="[]" if state == 2 else "")

    task = wait_for_task(fetch, "r1", sleep=sleep)
    assert task.state == 2
    assert fetched_at[0] == 1.0
    assert fetched_at[-1] == 30.0


def test_not_started_forever_times_out(sleeps):
    with pytest.raises(PollTimeout):
        wait_for_task(scripted(0, 0, 0), "r1", attempts=3, sleep=sleeps.append)


def test_fetch_error_aborts_immediately(sleeps):
    calls = []

    def fetch(request_id):
        calls.append(request_id)
        raise PollFetchError(request_id, 502, "bad gateway")

    with pytest.raises(PollFetchError):
        wait_for_task(fetch, "r1", sleep=sleeps.append)
    assert len(calls) == 1
    assert sleeps == [1.0]


def test_on_poll_sees_every_attempt(sleeps):
    seen = []
    wait_for_task(
        scripted(0, 1, 2, output="{}"), "r1",
        sleep=sleeps.append, on_poll=lambda n, t: seen.append((n, t.state)),
    )
    assert seen == [(1, 0), (2, 1), (3, 2)]


# --- decode_output (6 tests) ---

def test_decode_list_keeps_order():
    output = json.dumps([
        {"id": 11, "description": "Test Job 1"},
        {"id": 12, "description": "Test Job 2"},
    ])
    jobs = decode_output(output, Job, many=True)
    assert [j.id for j in jobs] == [11, 12]
    assert [j.description for j in jobs] == ["Test Job 1", "Test Job 2"]


def test_decode_single_record():
    cred = decode_output(json.dumps({"id": 3, "apiKey": "k"}), Credential)
    assert cred.id == 3
    assert cred.api_key == "k"


def test_decode_invalid_json():
    with pytest.raises(DecodeError):
        decode_output("not json", Job, many=True)


def test_decode_object_when_list_expected():
    with pytest.raises(DecodeError):
        decode_output(json.dumps({"id": 1}), Job, many=True)


def test_decode_record_without_id():
    with pytest.raises(DecodeError):
        decode_output(json.dumps([{"description": "no id"}]), Job, many=True)


def test_parse_output_rejects_already_decoded_payload():
    # The output field must still be a string at this stage
    with pytest.raises(DecodeError):
        parse_output([{"id": 1}])


# --- poll_result (1 test) ---

def test_poll_result_waits_then_decodes(sleeps):
    fetch = scripted(1, 2, output=json.dumps([{"id": 5}]))
    jobs = poll_result(fetch, "r1", Job, many=True, sleep=sleeps.append)
    assert [j.id for j in jobs] == [5]
    assert sleeps == [1.0, 1.0]
