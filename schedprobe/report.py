"""schedprobe report — loads results, renders Rich tables, generates markdown reports.

Results are stored as <results_dir>/<scenario>/<timestamp>/metrics.json.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schedprobe.models import RunResult

_VERDICT_COLORS = {"pass": "green", "fail": "red"}


def _fmt_verdict(verdict: str) -> str:
    color = _VERDICT_COLORS.get(verdict, "white")
    return f"[{color}]{verdict}[/{color}]"


def render_run(result: RunResult, console: Console) -> None:
    """Render a Rich table of one run's steps."""
    table = Table(
        title=f"{result.scenario} ({_fmt_verdict(result.verdict)})",
        show_header=True,
        header_style="bold",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Step", min_width=30)
    table.add_column("Result", justify="center")
    table.add_column("Time", justify="right")
    table.add_column("Detail", style="dim")

    for i, step in enumerate(result.steps, 1):
        status = "[green]ok[/green]" if step.ok else "[red]FAIL[/red]"
        table.add_row(str(i), escape(step.label), status, f"{step.elapsed_s:.2f}s", escape(step.detail))

    console.print()
    console.print(table)
    if result.error:
        console.print(f"[red]{escape(result.error)}[/red]")
    console.print()


def render_summary(results: list[RunResult], console: Console) -> None:
    """One row per scenario run."""
    table = Table(title="schedprobe", show_header=True, header_style="bold")
    table.add_column("Scenario", style="green", min_width=12)
    table.add_column("Verdict", justify="center")
    table.add_column("Steps", justify="right")
    table.add_column("Wall clock", justify="right")

    for r in results:
        table.add_row(r.scenario, _fmt_verdict(r.verdict), f"{r.passed_steps}/{len(r.steps)}", f"{r.wall_clock_s}s")

    console.print()
    console.print(table)
    console.print()


def _load_all_runs(results_dir: Path, scenario: str) -> list[RunResult]:
    """Load every run for a scenario, sorted by timestamp."""
    root = results_dir / scenario
    if not root.is_dir():
        return []
    runs: list[RunResult] = []
    for run_dir in sorted(root.iterdir()):
        result = RunResult.load(run_dir)
        if result:
            runs.append(result)
    runs.sort(key=lambda r: r.timestamp)
    return runs


def list_all_results(results_dir: Path, console: Console) -> None:
    """List all stored results across all scenarios."""
    if not results_dir.is_dir():
        console.print("[yellow]No results yet. Run a scenario first.[/yellow]")
        return

    for scenario_dir in sorted(results_dir.iterdir()):
        if not scenario_dir.is_dir():
            continue
        console.print(f"\n[bold]{scenario_dir.name}[/bold]")
        for result in reversed(_load_all_runs(results_dir, scenario_dir.name)):
            steps = f"{result.passed_steps}/{len(result.steps)}"
            console.print(
                f"  {result.timestamp}  {result.verdict:6s} {steps:6s} "
                f"{result.wall_clock_s:>6.1f}s  {result.host}"
            )


def generate_report(results_dir: Path) -> Path:
    """Generate RESULTS.md with the run history of every scenario.

    Returns the path to the generated file.
    """
    scenarios = sorted(d.name for d in results_dir.iterdir() if d.is_dir()) if results_dir.is_dir() else []

    lines: list[str] = []
    lines.append("# schedprobe Results")
    lines.append("")
    lines.append(f"*Generated {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}*")
    lines.append("")

    if not scenarios:
        lines.append("No results yet.")

    for scenario in scenarios:
        lines.append(f"## {scenario}")
        lines.append("")

        runs = _load_all_runs(results_dir, scenario)
        if not runs:
            lines.append("No runs recorded.")
            lines.append("")
            continue

        lines.append("| # | Timestamp | Host | Verdict | Steps | Wall Clock | Error |")
        lines.append("|---|-----------|------|---------|-------|------------|-------|")
        for i, r in enumerate(runs, 1):
            error = r.error.replace("|", "\\|")
            lines.append(
                f"| {i} | `{r.timestamp}` | {r.host} | **{r.verdict}** "
                f"| {r.passed_steps}/{len(r.steps)} | {r.wall_clock_s}s | {error} |"
            )
        lines.append("")

    results_dir.mkdir(parents=True, exist_ok=True)
    out = results_dir / "RESULTS.md"
    out.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return out
