"""
Subcommand handlers for the simulator CLI.

Each handler takes the parsed Namespace and returns a process exit code.
"""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config.config import get_config
from ..engine.recorder import HeadlessRun, SimulatedClock, run_headless
from ..engine.simulation import SimulationEngine
from ..model.regime_model import load_regime_model
from ..scenario.loader import list_scenarios, load_scenario
from ..scenario.scheduler import RegimeScheduler
from ..scenario.spec import ScenarioSpec

console = Console()


def _make_rng(seed: int | None) -> np.random.Generator:
    if seed is None:
        seed = get_config().model.seed
    return np.random.default_rng(seed)


def _load(args) -> ScenarioSpec | None:
    try:
        return load_scenario(args.scenario, base_dir=args.scenario_dir)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"\n[bold red]FAIL {e}[/]")
        return None


def _fmt(value: float | None, spec: str = ".2f") -> str:
    return "-" if value is None else format(value, spec)


# =============================================================================
# run
# =============================================================================

def handle_run(args) -> int:
    """Handle `run` subcommand."""
    config = get_config()

    scenario = _load(args)
    if scenario is None:
        return 1

    rng = _make_rng(args.seed)
    model_path = args.model_path or config.model.model_path
    try:
        model = load_regime_model(model_path, rng=rng)
    except ValueError as e:
        console.print(f"\n[bold red]FAIL {e}[/]")
        return 1

    window = args.window or config.engine.window_seconds
    step_seconds = args.step_seconds or 1.0 / config.engine.refresh_rate
    steps = args.steps if args.steps is not None else int(scenario.duration / step_seconds)

    clock = SimulatedClock()
    engine = SimulationEngine(
        model,
        scenario,
        window_seconds=window,
        clock=clock,
        rng=rng,
        warning_throttle=config.engine.warning_throttle,
        progress_throttle=config.engine.progress_throttle,
    )

    if not args.json_output:
        console.print(Panel(
            f"[bold cyan]SIMULATION RUN[/]\n"
            f"Scenario: {scenario.name} | Start: {scenario.start_price:.2f} | Duration: {scenario.duration:g}s\n"
            f"Model: {model_path} ({'loaded' if model.has_data else 'empty - fallback ticks'}) | "
            f"Window: {window} | Steps: {steps} x {step_seconds:g}s",
            border_style="cyan"
        ))

    run = run_headless(engine, steps, step_seconds=step_seconds)

    if args.csv_path:
        csv_path = Path(args.csv_path)
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        run.frame.to_csv(csv_path, index=False)

    summary = _run_summary(engine, run)

    if args.json_output:
        print(json.dumps({
            "status": "pass",
            "summary": summary,
            "events": [e.to_dict() for e in run.events],
        }, indent=2, default=str))
        return 0

    _print_run(run, summary, args.tail)
    if args.csv_path:
        console.print(f"[dim]Frame written to {args.csv_path}[/]")
    return 0


def _run_summary(engine: SimulationEngine, run: HeadlessRun) -> dict:
    frame = run.frame
    event = engine.scheduler.get_breakout_event()
    pivots = frame["pivot"].value_counts().to_dict() if not frame.empty else {}
    return {
        "scenario": engine.scenario.name,
        "steps": len(frame),
        "final_bid": float(frame["bid"].iloc[-1]) if not frame.empty else engine.best_bid,
        "final_ask": float(frame["ask"].iloc[-1]) if not frame.empty else engine.best_ask,
        "min_mid": float(frame["mid"].min()) if not frame.empty else None,
        "max_mid": float(frame["mid"].max()) if not frame.empty else None,
        "ticks": int(frame["n_ticks"].sum()) if not frame.empty else 0,
        "breakout_steps": int(frame["in_breakout"].sum()) if not frame.empty else 0,
        "pivot_highs": int(pivots.get("PH", 0)),
        "pivot_lows": int(pivots.get("PL", 0)),
        "breakout_start": event.start_time if event else None,
        "breakout_target": event.target_price if event else None,
    }


def _print_run(run: HeadlessRun, summary: dict, tail: int) -> None:
    table = Table(show_header=True, header_style="bold magenta", title="Run Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in summary.items():
        table.add_row(key, _fmt(value) if isinstance(value, float) else str(value))
    console.print(table)

    if tail > 0 and not run.frame.empty:
        frame_table = Table(show_header=True, header_style="bold magenta", title=f"Last {tail} steps")
        for column in ("elapsed", "bid", "ask", "mid", "regime", "pivot", "n_ticks"):
            frame_table.add_column(column, justify="right")
        for row in run.frame.tail(tail).itertuples(index=False):
            frame_table.add_row(
                f"{row.elapsed:.1f}",
                f"{row.bid:.2f}",
                f"{row.ask:.2f}",
                f"{row.mid:.3f}",
                row.regime,
                row.pivot or "",
                str(row.n_ticks),
            )
        console.print(frame_table)

    if run.events:
        events_table = Table(show_header=True, header_style="bold magenta", title="Breakout Events")
        events_table.add_column("t", justify="right")
        events_table.add_column("Kind", style="cyan")
        events_table.add_column("Type")
        events_table.add_column("Price", justify="right")
        events_table.add_column("Target", justify="right")
        events_table.add_column("Progress", justify="right")
        for e in run.events:
            events_table.add_row(
                f"{e.timestamp:.1f}",
                e.kind.value,
                e.breakout_type,
                _fmt(e.current_price),
                _fmt(e.target_price),
                _fmt(e.progress),
            )
        console.print(events_table)
    else:
        console.print("[dim]No breakout events emitted[/]")


# =============================================================================
# timeline
# =============================================================================

def handle_timeline(args) -> int:
    """Handle `timeline` subcommand."""
    scenario = _load(args)
    if scenario is None:
        return 1

    scheduler = RegimeScheduler(rng=_make_rng(args.seed))
    timeline = scheduler.schedule(scenario)
    event = scheduler.get_breakout_event()

    if args.json_output:
        print(json.dumps({
            "scenario": scenario.name,
            "breakout": None if event is None else {
                "type": event.type.value,
                "start_time": event.start_time,
                "end_time": event.end_time,
                "target_price": event.target_price,
                "speed": event.speed.value,
            },
            "segments": [
                {
                    "start_time": s.start_time,
                    "end_time": s.end_time,
                    "regime": s.regime.key,
                    "sign": s.sign.value,
                    "target_price": s.target_price,
                    "description": s.description,
                }
                for s in timeline
            ],
        }, indent=2))
        return 0

    table = Table(show_header=True, header_style="bold magenta", title=f"Timeline: {scenario.name}")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Regime", style="cyan")
    table.add_column("Sign")
    table.add_column("Target", justify="right")
    table.add_column("Description")
    for s in timeline:
        table.add_row(
            f"{s.start_time:.1f}",
            f"{s.end_time:.1f}",
            s.regime.key,
            s.sign.value,
            _fmt(s.target_price),
            s.description,
        )
    console.print(table)

    if event is not None:
        console.print(
            f"[bold]Primary breakout:[/] {event.type.value} {event.speed.value} "
            f"{event.start_time:.1f}s -> {event.end_time:.1f}s, target {event.target_price:.2f}"
        )
    return 0


# =============================================================================
# scenarios
# =============================================================================

def handle_scenarios(args) -> int:
    """Handle `scenarios` subcommand."""
    names = list_scenarios(args.scenario_dir)

    if args.json_output:
        print(json.dumps({"scenarios": names}, indent=2))
        return 0

    console.print("\n[bold cyan]Available Scenarios:[/]")
    directory = args.scenario_dir or get_config().scenario.scenario_dir
    console.print(f"[dim]Directory: {directory}[/]\n")
    for name in names:
        console.print(f"  - {name}")
    console.print(f"\n[dim]Total: {len(names)} scenarios[/]")
    return 0
