from __future__ import annotations


def run(probe) -> None:
    projects = probe.client.projects

    with probe.step("Creating a project") as step:
        project = projects.create({"name": "Test Project", "description": "This is a test project"})
        probe.expect(project.name == "Test Project", f"project name came back as {project.name!r}")
        step.detail = f"id={project.id}"

    with probe.step("Getting all projects") as step:
        page = projects.list(limit=10, offset=0)
        step.detail = f"found {len(page)} of {page.total}"

    with probe.step("Updating the project"):
        projects.update(project.id, {"description": "Updated Test Project"})

    with probe.step("Deleting the project"):
        projects.delete(project.id)
