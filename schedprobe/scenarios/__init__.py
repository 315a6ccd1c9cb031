"""Scenario discovery and loading for schedprobe.

Each scenario is a subdirectory of schedprobe/scenarios/ containing:
    __init__.py  — NAME, DESCRIPTION, ORDER constants
    steps.py     — run(probe): the sequential calls and their assertions
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional


@dataclass
class ScenarioInfo:
    """Metadata about a discovered scenario."""

    name: str
    description: str
    order: int
    path: Path
    run: Callable


def _scenarios_root() -> Path:
    """Absolute path to the scenarios/ directory."""
    return Path(__file__).parent


def list_scenarios() -> list[ScenarioInfo]:
    """Discover all available scenarios, sorted by ORDER then name."""
    root = _scenarios_root()
    scenarios = []

    for child in sorted(root.iterdir()):
        if not child.is_dir():
            continue
        if not (child / "__init__.py").exists() or not (child / "steps.py").exists():
            continue

        info = load_scenario(child.name)
        if info:
            scenarios.append(info)

    scenarios.sort(key=lambda s: (s.order, s.name))
    return scenarios


def load_scenario(name: str) -> Optional[ScenarioInfo]:
    """Load a single scenario by name.

    Args:
        name: Directory name under schedprobe/scenarios/ (e.g., 'jobs').

    Returns:
        ScenarioInfo if the scenario exists and is valid, None otherwise.
    """
    scenario_dir = _scenarios_root() / name
    if not scenario_dir.is_dir() or not (scenario_dir / "steps.py").exists():
        return None

    try:
        mod = importlib.import_module(f"schedprobe.scenarios.{name}")
        steps = importlib.import_module(f"schedprobe.scenarios.{name}.steps")
    except ImportError:
        return None

    run = getattr(steps, "run", None)
    if not callable(run):
        return None

    return ScenarioInfo(
        name=getattr(mod, "NAME", name),
        description=getattr(mod, "DESCRIPTION", ""),
        order=getattr(mod, "ORDER", 100),
        path=scenario_dir,
        run=run,
    )
