from __future__ import annotations

import re
from datetime import datetime, timezone

from schedprobe.errors import ExpectationFailed

PAGE_SIZE = 5

# orderBy value -> record attribute it sorts on
ORDER_FIELDS = {
    "date_created": "date_created",
}

# Fractional seconds of any precision; fromisoformat wants exactly six digits
_FRACTION = re.compile(r"\.(\d+)")


def _timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _check_order(probe, items: list, attr: str, direction: str) -> None:
    """Only the first two records are compared, as instants rather than strings."""
    if len(items) < 2:
        return
    raw = getattr(items[0], attr), getattr(items[1], attr)
    try:
        first, second = (_timestamp(v) for v in raw)
    except (AttributeError, ValueError) as e:
        raise ExpectationFailed(f"{attr} is not an ISO-8601 timestamp: {e}") from e
    if direction == "asc":
        probe.expect(first <= second, f"ascending {attr}: {raw[0]!r} sorted before {raw[1]!r}")
    else:
        probe.expect(first >= second, f"descending {attr}: {raw[0]!r} sorted before {raw[1]!r}")


def run(probe) -> None:
    creds = probe.client.credentials
    created = []

    with probe.step(f"Ensuring at least {PAGE_SIZE} credentials exist") as step:
        total = creds.list(limit=PAGE_SIZE, offset=0).total
        for _ in range(max(0, PAGE_SIZE - total)):
            created.append(creds.create({}))
        step.detail = f"had {total}, created {len(created)}"

    with probe.step(f"Listing with limit={PAGE_SIZE}&offset=0") as step:
        page = creds.list(limit=PAGE_SIZE, offset=0)
        probe.expect(len(page) == PAGE_SIZE, f"expected {PAGE_SIZE} credentials, got {len(page)}")
        probe.expect(page.limit == PAGE_SIZE, f"expected limit {PAGE_SIZE}, got {page.limit}")
        probe.expect(page.offset == 0, f"expected offset 0, got {page.offset}")
        step.detail = f"total={page.total}"

    for order_by, attr in ORDER_FIELDS.items():
        for direction in ("asc", "desc"):
            with probe.step(f"Ordering by {order_by} {direction}"):
                page = creds.list(limit=PAGE_SIZE, offset=0, order_by=order_by, direction=direction)
                _check_order(probe, page.items, attr, direction)

    if created:
        with probe.step(f"Deleting {len(created)} credentials"):
            for credential in created:
                creds.delete(credential.id)
