"""Jobs scenario — bulk job creation through the async-task flow.

POST /jobs answers 202 with a Location header; the created jobs only become
visible once the async task reaches SUCCESS and its output is decoded.
"""

NAME = "jobs"
DESCRIPTION = "Jobs CRUD with async bulk creation and task polling"
ORDER = 30
