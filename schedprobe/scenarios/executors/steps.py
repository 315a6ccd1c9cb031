from __future__ import annotations


def run(probe) -> None:
    executors = probe.client.executors

    with probe.step("Creating an executor") as step:
        executor = executors.create({"name": "Test Executor", "description": "This is a test executor"})
        step.detail = f"id={executor.id}"

    with probe.step("Getting the executor"):
        fetched = executors.get(executor.id)
        probe.expect(fetched.id == executor.id, f"asked for executor {executor.id}, got {fetched.id}")

    with probe.step("Getting all executors") as step:
        page = executors.list(limit=10, offset=0)
        step.detail = f"found {len(page)} of {page.total}"

    with probe.step("Updating the executor"):
        executors.update(executor.id, {"description": "Updated Test Executor"})

    with probe.step("Deleting the executor"):
        executors.delete(executor.id)
