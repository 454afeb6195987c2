"""Command-line interface for irqscan."""

import argparse
import contextlib
import json
import sys
from pathlib import Path

from irqscan import __version__
from irqscan.core import DetailsPipeline, counters_for, all_counters
from irqscan.core.config import ConfigError, load_settings
from irqscan.core.logging import DiagnosticLogger, get_log_path
from irqscan.lib import format_range_list


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="irqscan",
        description="Show per-CPU interrupt counters and IRQ details",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"irqscan {__version__}",
    )
    parser.add_argument(
        "--root",
        help="Path prefix of the proc and sys trees (default: live system)",
    )
    parser.add_argument(
        "--format",
        choices=["plain", "json"],
        default="plain",
        help="Output format (default: plain)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        help="Write JSONL diagnostics below this directory",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # counters command
    counters_parser = subparsers.add_parser(
        "counters", help="Show per-CPU counters from /proc/interrupts"
    )
    counters_parser.add_argument(
        "--irq",
        "-i",
        type=int,
        action="append",
        dest="irqs",
        help="Only show this IRQ (can be specified multiple times)",
    )

    # details command
    details_parser = subparsers.add_parser(
        "details", help="Show IRQ actions and effective CPU affinities"
    )
    details_parser.add_argument(
        "--workers",
        "-w",
        type=int,
        help="Number of concurrent reader threads (default: 16)",
    )
    details_parser.add_argument(
        "--queue-size",
        type=int,
        help="Capacity of the job and result queues (default: 16)",
    )

    return parser


def cmd_counters(args: argparse.Namespace, settings, observer) -> int:
    """Show per-CPU interrupt counters."""
    if args.irqs:
        irqs = counters_for(sorted(set(args.irqs)), root=settings.root, observer=observer)
    else:
        irqs = all_counters(root=settings.root, observer=observer)

    for irq in irqs:
        if args.format == "json":
            print(json.dumps({
                "irq": irq.num,
                "cpus": irq.cpus,
                "counters": irq.counters,
            }))
        else:
            counts = " ".join(
                f"CPU{cpu}={count}" for cpu, count in zip(irq.cpus, irq.counters)
            )
            print(f"{irq.num:>5}: {counts}")

    return 0


def cmd_details(args: argparse.Namespace, settings, observer) -> int:
    """Show IRQ actions and effective CPU affinities."""
    pipeline = DetailsPipeline(
        root=settings.root,
        workers=settings.workers,
        queue_size=settings.queue_size,
        observer=observer,
    )

    for details in sorted(pipeline, key=lambda d: d.num):
        if args.format == "json":
            print(json.dumps({
                "irq": details.num,
                "actions": details.actions,
                "affinities": [[r.low, r.high] for r in details.affinities],
            }))
        else:
            affinity = format_range_list(details.affinities)
            print(f"{details.num:>5}: {affinity:<16} {','.join(details.actions)}")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings(
            root=args.root,
            workers=getattr(args, "workers", None),
            queue_size=getattr(args, "queue_size", None),
            log_dir=args.log_dir,
        )
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    commands = {
        "counters": cmd_counters,
        "details": cmd_details,
    }

    with contextlib.ExitStack() as stack:
        observer = None
        if settings.log_dir is not None:
            logger = stack.enter_context(
                DiagnosticLogger(
                    args.command,
                    log_path=get_log_path(args.command, base_path=settings.log_dir),
                )
            )
            observer = logger.debug
        try:
            return commands[args.command](args, settings, observer)
        except BrokenPipeError:
            return 0
        except OSError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
