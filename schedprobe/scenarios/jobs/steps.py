from __future__ import annotations

from schedprobe.models import JobCreateRequest


def job_requests(project_id: int) -> list[JobCreateRequest]:
    """The two jobs the scenario submits in one bulk request."""
    return [
        JobCreateRequest(
            project_id=project_id,
            description="Test Job 1",
            callback_url="This is test job 1",
            spec="@every 1m",
            timezone="UTC",
        ),
        JobCreateRequest(
            project_id=project_id,
            description="Test Job 2",
            callback_url="This is test job 2",
            spec="@every 2m",
            timezone="UTC",
        ),
    ]


def run(probe) -> None:
    client = probe.client

    with probe.step("Creating a project for jobs") as step:
        project = client.projects.create({"name": "Job Test Project", "description": "Project for testing jobs"})
        step.detail = f"id={project.id}"

    submitted = job_requests(project.id)
    with probe.step("Creating multiple jobs") as step:
        jobs = client.create_jobs(submitted, on_poll=probe.on_poll)
        probe.expect(len(jobs) == len(submitted), f"submitted {len(submitted)} jobs, got {len(jobs)} back")
        got = [j.description for j in jobs]
        want = [r.description for r in submitted]
        probe.expect(got == want, f"jobs came back as {got}, expected {want}")
        step.detail = "ids=" + ",".join(str(j.id) for j in jobs)

    with probe.step("Getting all jobs") as step:
        page = client.jobs.list(limit=10, offset=0, projectId=project.id)
        step.detail = f"found {len(page)} of {page.total}"

    with probe.step("Updating the first job"):
        client.jobs.update(jobs[0].id, {"description": "Updated Test Job 1"})

    for job in jobs:
        with probe.step(f"Deleting job {job.id}"):
            client.jobs.delete(job.id)

    with probe.step("Cleaning up the test project"):
        client.projects.delete(project.id)
