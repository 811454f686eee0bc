#!/usr/bin/env python3
"""
Breakout simulator CLI.

Non-interactive entry point:
  python sim_cli.py scenarios
  python sim_cli.py timeline --scenario bullish --seed 7
  python sim_cli.py run --scenario fake_then_real --seed 7 --csv run.csv
"""

import sys

from breakout_sim.cli import (
    console,
    handle_run,
    handle_scenarios,
    handle_timeline,
    setup_argparse,
)
from breakout_sim.config.config import get_config
from breakout_sim.utils.logger import setup_logger


def main() -> int:
    """Main entry point."""
    # Parse CLI arguments FIRST (before any config or logging)
    args = setup_argparse()
    config = get_config()

    if args.quiet:
        level = "WARNING"
    elif args.debug:
        level = "DEBUG"
    elif args.verbose:
        level = "INFO"
    else:
        level = config.log.level
    setup_logger(log_dir=config.log.log_dir, log_level=level)

    if args.command == "run":
        return handle_run(args)
    elif args.command == "timeline":
        return handle_timeline(args)
    elif args.command == "scenarios":
        return handle_scenarios(args)

    console.print("[yellow]Usage: sim_cli.py {run|timeline|scenarios} --help[/]")
    return 1


if __name__ == "__main__":
    sys.exit(main())
