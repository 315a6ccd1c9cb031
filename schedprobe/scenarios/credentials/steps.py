from __future__ import annotations


def run(probe) -> None:
    creds = probe.client.credentials

    with probe.step("Creating a credential") as step:
        credential = creds.create({})
        probe.expect(bool(credential.api_key), "created credential has no apiKey")
        probe.expect(bool(credential.api_secret), "created credential has no apiSecret")
        step.detail = f"id={credential.id}"

    with probe.step("Getting all credentials") as step:
        page = creds.list(limit=10, offset=0)
        probe.expect(len(page) <= 10, f"asked for 10 credentials, got {len(page)}")
        step.detail = f"found {len(page)} of {page.total}"

    with probe.step("Archiving the credential"):
        creds.update(credential.id, {"archived": True})

    with probe.step("Deleting the credential"):
        creds.delete(credential.id)
