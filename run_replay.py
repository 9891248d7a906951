#!/usr/bin/env python3
"""
Magnetic Grid - Gesture Replay Runner

Replays a scripted gesture session against the layout engine and prints
the committed layout.

Usage:
    python run_replay.py --script configs/example_script.yaml
    python run_replay.py --config configs/default.yaml --script my_session.yaml --output output/replay
"""

import os
import sys
import argparse
from datetime import datetime

from dotenv import load_dotenv

from magnetic_grid.audit.journal import AuditJournal
from magnetic_grid.config.loader import compute_config_hash, load_config, save_config_snapshot
from magnetic_grid.config.validator import ConfigValidator, ConfigValidationError
from magnetic_grid.models.field import ConfigMap
from magnetic_grid.models.grid import TOTAL_COLUMNS, column_span
from magnetic_grid.runtime.event_loop import ReplayEventLoop, load_script
from magnetic_grid.utils.geometry import round_half_up
from magnetic_grid.utils.timeutils import generate_session_id


def print_layout(configs: ConfigMap, row_height: float) -> None:
    """Print the layout as a 6-column text grid."""
    rows = {}
    for config in configs.values():
        rows.setdefault(config.row(row_height), []).append(config)

    print(f"\n{'=' * 60}")
    print("Final layout")
    print(f"{'=' * 60}")
    for row in sorted(rows):
        cells = ["." * 8] * TOTAL_COLUMNS
        for config in sorted(rows[row], key=lambda c: c.x):
            start = round_half_up(config.x * TOTAL_COLUMNS)
            for col in range(start, min(TOTAL_COLUMNS, start + column_span(config.width))):
                cells[col] = config.id[:8].ljust(8)
        print(f"  row {row:2d} | " + " ".join(cells))
    print(f"{'=' * 60}\n")

    for config in configs.values():
        print(
            f"  {config.id:<16} width={config.width:.4f} "
            f"x={config.x:.4f} y={config.y:.1f}"
        )


def main():
    """Main entry point."""
    # Load environment variables from .env file
    load_dotenv()

    parser = argparse.ArgumentParser(description="Magnetic Grid gesture replay")
    parser.add_argument(
        "--config", type=str,
        default=os.getenv("MAGNETIC_GRID_CONFIG", "configs/default.yaml"),
        help="Engine config YAML",
    )
    parser.add_argument(
        "--script", type=str,
        default=os.getenv("MAGNETIC_GRID_SCRIPT", "configs/example_script.yaml"),
        help="Gesture script YAML",
    )
    parser.add_argument(
        "--output", type=str,
        default=os.getenv("MAGNETIC_GRID_OUTPUT", "output/replay"),
        help="Output directory (audit log, saved layouts)",
    )
    parser.add_argument("--session-id", type=str, default=None, help="Session ID")
    parser.add_argument("--debug", action="store_true", help="Verbose audit details")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"\n[ERROR] {e}")
        sys.exit(1)

    if args.debug:
        config.behavior.debug = True

    validator = ConfigValidator()
    try:
        validator.validate_or_raise(config)
    except ConfigValidationError as e:
        with AuditJournal(args.output) as journal:
            journal.write(validator.create_invalid_config_event(
                session_id=args.session_id or generate_session_id(),
                timestamp=datetime.now(),
                violations=e.violations,
                config_hash=compute_config_hash(config),
            ))
        print("\n[ERROR] Invalid config:")
        for violation in e.violations:
            print(f"  - {violation}")
        sys.exit(1)

    try:
        script = load_script(args.script)
    except FileNotFoundError as e:
        print(f"\n[ERROR] {e}")
        sys.exit(1)

    save_config_snapshot(config, os.path.join(args.output, "config_snapshot.yaml"))

    loop = ReplayEventLoop(
        config,
        args.output,
        session_id=args.session_id,
        default_configs=script.default_configs,
        container_width=script.container_width,
    )
    final_configs = loop.run(script.events)

    print_layout(final_configs, config.grid.row_height)

    if not loop.session.is_layout_valid():
        print("[ERROR] Final layout violates layout invariants")
        sys.exit(1)


if __name__ == "__main__":
    main()
