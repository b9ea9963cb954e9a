"""Main CLI entry point for comfyrun."""

import argparse
import sys

from comfyrun.logging_utils import setup_logging

from .commands.run import setup_run_commands
from .commands.server import setup_server_commands


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(prog="comfyrun", description="Run ComfyUI workflows and collect their outputs")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    setup_run_commands(subparsers)
    setup_server_commands(subparsers)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.log_level, json_output=args.log_json)

    # Execute command
    if hasattr(args, "func"):
        return args.func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
