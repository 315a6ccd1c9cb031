"""Async operation poller: wait on an async task, then decode its output.

The task's ``output`` field is double-encoded. The task resource is JSON,
and on success its ``output`` member is itself a *string* holding another
JSON document (one record or an array of records). Decoding therefore
happens in two stages: the envelope is decoded by the client into an
AsyncTask whose ``output`` is a plain ``str``, and ``decode_output`` then
parses that string into the caller's record type.

Polling is fixed-interval and blocking: each attempt sleeps one interval and
then fetches, so the last look happens a full ``attempts * interval_s`` after
submission. No backoff and no cancellation beyond process exit.
"""

from __future__ import annotations

import json
import time
from typing import Callable, Optional, TypeVar

from schedprobe.config import POLL_ATTEMPTS, POLL_INTERVAL_S
from schedprobe.errors import DecodeError, OperationFailed, PollTimeout, UnknownState
from schedprobe.models import AsyncTask, AsyncTaskState

T = TypeVar("T")

_KNOWN_STATES = {s.value for s in AsyncTaskState}


def wait_for_task(
    fetch: Callable[[str], AsyncTask],
    request_id: str,
    attempts: int = POLL_ATTEMPTS,
    interval_s: float = POLL_INTERVAL_S,
    sleep: Callable[[float], None] = time.sleep,
    on_poll: Optional[Callable[[int, AsyncTask], None]] = None,
) -> AsyncTask:
    """Poll ``fetch(request_id)`` until the task succeeds.

    Args:
        fetch: Returns the current AsyncTask. Any error it raises (for
            example PollFetchError) aborts the wait immediately.
        request_id: Correlation id taken from the Location header.
        attempts: Maximum number of fetches.
        interval_s: Blocking sleep before every fetch.
        sleep: Sleep function, injectable for tests.
        on_poll: Called with (attempt_number, task) after every fetch.

    Returns:
        The task in state SUCCESS.

    Raises:
        OperationFailed: the task reached FAILED; carries ``output`` verbatim.
        UnknownState: the task reported an undocumented state code.
        PollTimeout: no terminal state within ``attempts`` fetches.
    """
    for attempt in range(1, attempts + 1):
        sleep(interval_s)
        task = fetch(request_id)
        if on_poll:
            on_poll(attempt, task)

        if task.state not in _KNOWN_STATES:
            raise UnknownState(task.state)
        state = AsyncTaskState(task.state)

        if state == AsyncTaskState.SUCCESS:
            return task
        if state == AsyncTaskState.FAILED:
            raise OperationFailed(task.output)

    raise PollTimeout(request_id, attempts, interval_s)


def parse_output(output: str):
    """Second decoding stage: the ``output`` string is itself JSON."""
    if not isinstance(output, str):
        raise DecodeError(f"task output must be a JSON string, got {type(output).__name__}")
    try:
        return json.loads(output)
    except json.JSONDecodeError as e:
        raise DecodeError(f"task output is not valid JSON: {e}") from e


def decode_output(output: str, record_type: type[T], many: bool = False):
    """Parse a task's JSON-in-a-string ``output`` into records.

    Args:
        output: The ``output`` string of a successful AsyncTask.
        record_type: A model class with a ``from_dict`` classmethod.
        many: Expect a JSON array and return a list in payload order.

    Raises:
        DecodeError: invalid JSON, or a payload of the wrong shape.
    """
    payload = parse_output(output)
    name = record_type.__name__
    try:
        if many:
            if not isinstance(payload, list):
                raise TypeError(f"expected a JSON array of {name}, got {type(payload).__name__}")
            return [record_type.from_dict(item) for item in payload]
        return record_type.from_dict(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"task output does not match {name}: {e}") from e


def poll_result(
    fetch: Callable[[str], AsyncTask],
    request_id: str,
    record_type: type[T],
    many: bool = False,
    **wait_kwargs,
):
    """Wait for the task, then decode its output into ``record_type``."""
    task = wait_for_task(fetch, request_id, **wait_kwargs)
    return decode_output(task.output, record_type, many=many)
