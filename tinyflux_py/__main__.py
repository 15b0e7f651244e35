#!/usr/bin/env python3
"""
tinyflux-py CLI Entry Point

Runs the bundled counter example, optionally journaling its actions.
"""

import argparse
import asyncio
import logging
import sys
import uuid
from typing import Optional

from . import __version__
from .examples import counter
from .logs import create_journal


async def run_demo(api_delay: float, journal_dir: Optional[str]) -> int:
    """Run the counter scenario, journaling to journal_dir if given."""
    journal = None
    if journal_dir:
        journal = create_journal(f"demo-{uuid.uuid4().hex[:8]}", base_dir=journal_dir)

    try:
        await counter.main(api_delay, journal)
    finally:
        if journal is not None:
            journal.close()
            print(f"\n📝 Journal written to: {journal.log_path}")

    return 0


def main():
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="tinyflux-py reactive state container",
        prog="tinyflux_py"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    demo_parser = subparsers.add_parser("demo", help="Run the counter example")
    demo_parser.add_argument(
        "--delay",
        type=float,
        default=0.5,
        help="Simulated API latency in seconds (default: 0.5)"
    )
    demo_parser.add_argument(
        "--journal",
        metavar="DIR",
        help="Write an NDJSON action journal under DIR"
    )

    args = parser.parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.command == "demo":
        if args.delay < 0:
            print(f"Error: --delay must not be negative: {args.delay}", file=sys.stderr)
            return 1
        return asyncio.run(run_demo(args.delay, args.journal))

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
