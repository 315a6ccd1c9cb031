"""schedprobe — CRUD and async-task probe harness for the scheduling API.

Walks credentials, projects, jobs and executors through create / list /
update / delete against a live host, and drives the deferred job-creation
flow: submit, read the Location header, poll the async task once a second
for up to 30 seconds, decode its output.

Usage:
    python -m schedprobe list                 # Show scenarios
    python -m schedprobe run jobs             # Single scenario
    python -m schedprobe run --all            # Every scenario
    python -m schedprobe task <request-id>    # Wait on an async task
"""

__version__ = "0.1.0"
