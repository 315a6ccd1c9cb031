"""CLI for the schedprobe API harness.

Usage:
    python -m schedprobe list                      # Show available scenarios
    python -m schedprobe run jobs                  # Single scenario
    python -m schedprobe run --all                 # Every scenario, stop at first failure
    python -m schedprobe task <request-id>         # Wait on an async task
    python -m schedprobe results                   # List all stored results
    python -m schedprobe report                    # Generate RESULTS.md

Connection settings come from --host/--api-key/--api-secret/--account-id or
the matching SCHEDPROBE_* environment variables.
"""

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.json import JSON
from rich.table import Table

from schedprobe.client import ApiClient
from schedprobe.config import Settings
from schedprobe.errors import ProbeError
from schedprobe.models import AsyncTaskState
from schedprobe.poller import parse_output, wait_for_task
from schedprobe.report import generate_report, list_all_results, render_run, render_summary
from schedprobe.runner import print_poll, run_all, run_scenario, state_name
from schedprobe.scenarios import list_scenarios

app = typer.Typer(
    name="schedprobe",
    help="CRUD and async-task probe harness for the scheduling API",
    no_args_is_help=True,
)
console = Console(stderr=True)


@app.callback()
def main(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", envvar="SCHEDPROBE_HOST", help="API host (e.g., http://localhost:3002)"),
    api_key: Optional[str] = typer.Option(None, "--api-key", envvar="SCHEDPROBE_API_KEY", help="API key"),
    api_secret: Optional[str] = typer.Option(None, "--api-secret", envvar="SCHEDPROBE_API_SECRET", help="API secret"),
    account_id: Optional[str] = typer.Option(None, "--account-id", envvar="SCHEDPROBE_ACCOUNT_ID", help="Account ID"),
    results_dir: Optional[Path] = typer.Option(None, "--results-dir", envvar="SCHEDPROBE_RESULTS_DIR", help="Where run metrics are stored"),
) -> None:
    ctx.obj = Settings.from_env().override(
        host=host,
        api_key=api_key,
        api_secret=api_secret,
        account_id=account_id,
        results_dir=results_dir,
    )


def _client(ctx: typer.Context) -> ApiClient:
    """Build a client, or exit 1 when a connection setting is missing."""
    settings: Settings = ctx.obj
    missing = settings.missing()
    if missing:
        flags = ", ".join(f"--{name}" for name in missing)
        console.print(f"[red]All connection settings are required.[/red] Missing: {flags}")
        raise typer.Exit(1)
    return ApiClient(settings)


@app.command("list")
def cmd_list() -> None:
    """Show available scenarios."""
    scenarios = list_scenarios()
    if not scenarios:
        console.print("[yellow]No scenarios found.[/yellow]")
        raise typer.Exit(1)

    table = Table(title="Available Scenarios", show_header=True, header_style="bold")
    table.add_column("Name", style="green", min_width=12)
    table.add_column("Description", min_width=30)

    for s in scenarios:
        table.add_row(s.name, s.description)

    console.print()
    console.print(table)
    console.print()


@app.command("run")
def cmd_run(
    ctx: typer.Context,
    scenario: Optional[str] = typer.Argument(None, help="Scenario name (e.g., 'jobs')"),
    all_scenarios: bool = typer.Option(False, "--all", "-a", help="Run every scenario in order"),
) -> None:
    """Run one scenario or all of them; exits 1 on the first failure."""
    if not all_scenarios and not scenario:
        console.print("[red]Specify a scenario or --all[/red]")
        raise typer.Exit(1)

    settings: Settings = ctx.obj
    with _client(ctx) as client:
        if all_scenarios:
            results = run_all(client, console, results_dir=settings.results_dir)
            render_summary(results, console)
        else:
            results = [run_scenario(scenario, client, console, results_dir=settings.results_dir)]
            render_run(results[0], console)

    if not all(r.ok for r in results):
        raise typer.Exit(1)


@app.command("task")
def cmd_task(
    ctx: typer.Context,
    request_id: str = typer.Argument(help="Async task request id (last segment of the Location header)"),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Poll until the task finishes"),
) -> None:
    """Show an async task, by default waiting for it to finish."""
    on_poll = partial(print_poll, console)
    with _client(ctx) as client:
        try:
            if wait:
                task = wait_for_task(client.get_async_task, request_id, **client.wait_kwargs(on_poll))
            else:
                task = client.get_async_task(request_id)
            console.print(
                f"[bold]{task.request_id or request_id}[/bold] {task.service} "
                f"[cyan]{state_name(task.state)}[/cyan]"
            )
            if task.state == AsyncTaskState.SUCCESS and task.output:
                console.print(JSON.from_data(parse_output(task.output)))
            elif task.output:
                console.print(escape(task.output))
        except ProbeError as e:
            console.print(f"[red]{type(e).__name__}:[/red] {escape(str(e))}")
            raise typer.Exit(1)


@app.command("results")
def cmd_results(ctx: typer.Context) -> None:
    """List all stored results."""
    list_all_results(ctx.obj.results_dir, console)


@app.command("report")
def cmd_report(ctx: typer.Context) -> None:
    """Generate RESULTS.md with the run history of every scenario."""
    path = generate_report(ctx.obj.results_dir)
    console.print(f"Report written to {path}")


if __name__ == "__main__":
    app()
