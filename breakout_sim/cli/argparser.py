"""
Argument parser setup for the simulator CLI.

Subcommands:
- run: Run a scenario headless and summarize prices, pivots and events
- timeline: Schedule a scenario and print its regime segments
- scenarios: List presets and scenario files
"""

import argparse


def setup_argparse(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments for sim_cli.

    Supports:
      run        --scenario bullish [--steps N] [--csv out.csv]
      timeline   --scenario fake_then_real
      scenarios  [--dir scenarios/]
    """
    parser = argparse.ArgumentParser(
        description="Breakout simulator - synthetic bid/ask with scheduled breakouts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python sim_cli.py scenarios                          # List presets and YAML scenarios
  python sim_cli.py timeline --scenario bullish --seed 7
  python sim_cli.py run --scenario fake_then_real --seed 7 --csv run.csv
  python sim_cli.py run --scenario scenarios/sharp_drop.yml --window 5 --steps 120
        """
    )

    # Verbosity: mutually exclusive group (-q / -v / --debug)
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Quiet mode: WARNING only"
    )
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Verbose mode: INFO"
    )
    verbosity.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Debug mode: DEBUG, includes breakout progress lines"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    _setup_run_subcommand(subparsers)
    _setup_timeline_subcommand(subparsers)
    _setup_scenarios_subcommand(subparsers)

    return parser.parse_args(argv)


def _add_scenario_args(sub) -> None:
    sub.add_argument("--scenario", required=True, help="Preset name, scenario id or YAML path")
    sub.add_argument("--dir", dest="scenario_dir", help="Override scenario directory")
    sub.add_argument("--seed", type=int, default=None, help="Random seed (default: SIM_SEED or random)")


def _setup_run_subcommand(subparsers) -> None:
    run_parser = subparsers.add_parser("run", help="Run a scenario headless")
    _add_scenario_args(run_parser)
    run_parser.add_argument("--model", dest="model_path", help="Model JSON path (default: SIM_MODEL_PATH)")
    run_parser.add_argument("--window", type=int, default=None, help="Pivot window in steps (default: SIM_WINDOW_SECONDS)")
    run_parser.add_argument("--steps", type=int, default=None, help="Number of steps (default: scenario duration)")
    run_parser.add_argument("--step-seconds", type=float, default=None, help="Simulated seconds per step (default: 1 / SIM_REFRESH_RATE)")
    run_parser.add_argument("--csv", dest="csv_path", help="Write the per-step frame to this CSV file")
    run_parser.add_argument("--tail", type=int, default=10, help="Rows of the frame to print (default: 10)")
    run_parser.add_argument("--json", action="store_true", dest="json_output", help="Output summary as JSON")


def _setup_timeline_subcommand(subparsers) -> None:
    timeline_parser = subparsers.add_parser("timeline", help="Print a scenario's regime timeline")
    _add_scenario_args(timeline_parser)
    timeline_parser.add_argument("--json", action="store_true", dest="json_output", help="Output timeline as JSON")


def _setup_scenarios_subcommand(subparsers) -> None:
    list_parser = subparsers.add_parser("scenarios", help="List available scenarios")
    list_parser.add_argument("--dir", dest="scenario_dir", help="Override scenario directory")
    list_parser.add_argument("--json", action="store_true", dest="json_output", help="Output as JSON")
