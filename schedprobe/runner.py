"""schedprobe runner — orchestrates scenario → steps → metrics.

Data flow per run:
1. Load the scenario and create result_dir for this run
2. Hand the scenario a Probe (client + console + step recorder)
3. Run its steps in order; the first error stops the scenario
4. Assemble RunResult, save as metrics.json

Nothing already created on the server is rolled back when a step fails.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from rich.console import Console
from rich.markup import escape

from schedprobe.client import ApiClient
from schedprobe.errors import ExpectationFailed, ProbeError
from schedprobe.models import AsyncTask, AsyncTaskState, RunResult, StepResult
from schedprobe.scenarios import list_scenarios, load_scenario


class Probe:
    """What a scenario's run() gets: the client plus step bookkeeping."""

    def __init__(self, client: ApiClient, console: Console, result: RunResult):
        self.client = client
        self.console = console
        self.result = result

    @contextmanager
    def step(self, label: str) -> Iterator[StepResult]:
        """Time one step and record it; a failing step is recorded, then re-raised."""
        step = StepResult(label=label)
        self.console.print(f"  {escape(label)}...")
        start = time.monotonic()
        try:
            yield step
        except Exception as e:
            step.ok = False
            step.detail = str(e)
            raise
        finally:
            step.elapsed_s = round(time.monotonic() - start, 3)
            self.result.steps.append(step)
        if step.detail:
            self.console.print(f"    [green]ok[/green] [dim]{escape(step.detail)}[/dim]")
        else:
            self.console.print("    [green]ok[/green]")

    def expect(self, condition: bool, message: str) -> None:
        if not condition:
            raise ExpectationFailed(message)

    def on_poll(self, attempt: int, task: AsyncTask) -> None:
        print_poll(self.console, attempt, task)


def state_name(state: int) -> str:
    try:
        return AsyncTaskState(state).name.lower()
    except ValueError:
        return str(state)


def print_poll(console: Console, attempt: int, task: AsyncTask) -> None:
    console.print(f"    [dim]poll {attempt}: {state_name(task.state)}[/dim]")


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def run_scenario(
    scenario_name: str,
    client: ApiClient,
    console: Console,
    results_dir: Optional[Path] = None,
) -> RunResult:
    """Execute one scenario against the API.

    Args:
        scenario_name: Name of the scenario (e.g., 'jobs').
        client: Authenticated ApiClient.
        console: Rich Console for status output.
        results_dir: Where to store metrics.json; nothing is saved when None.

    Returns:
        RunResult with every attempted step. ``error`` is set when a step
        failed; the scenario stops at that step.
    """
    timestamp = _timestamp()
    scenario = load_scenario(scenario_name)
    result = RunResult(scenario=scenario_name, timestamp=timestamp, host=client.settings.host)
    if not scenario:
        console.print(f"[red]Error:[/red] Unknown scenario: {scenario_name}")
        result.error = f"unknown scenario: {scenario_name}"
        return result

    console.print(f"\n[bold]Running:[/bold] {scenario.name}")
    console.print(f"  [dim]{scenario.description}[/dim]")

    probe = Probe(client, console, result)
    start = time.monotonic()
    try:
        scenario.run(probe)
    except ProbeError as e:
        result.error = f"{type(e).__name__}: {e}"
        console.print(f"  [red]FAILED[/red] {escape(result.error)}")
    except Exception as e:
        # A bug in a scenario or an unanticipated payload; still one failed run
        result.error = f"unexpected {type(e).__name__}: {e}"
        console.print(f"  [red]FAILED[/red] {escape(result.error)}")
    result.wall_clock_s = round(time.monotonic() - start, 1)

    if results_dir is not None:
        run_dir = results_dir / scenario.name / timestamp
        result.save(run_dir)
        console.print(f"  [dim]Metrics saved to {run_dir / 'metrics.json'}[/dim]")

    if result.ok:
        console.print(f"  [bold green]Done.[/bold green] {result.passed_steps} steps in {result.wall_clock_s}s")
    return result


def run_all(
    client: ApiClient,
    console: Console,
    results_dir: Optional[Path] = None,
) -> list[RunResult]:
    """Run every scenario in order, stopping after the first failed one.

    Returns list of RunResults in execution order.
    """
    results = []
    for scenario in list_scenarios():
        result = run_scenario(scenario.name, client, console, results_dir=results_dir)
        results.append(result)
        if not result.ok:
            break
    return results
