#!/usr/bin/env python3
"""
fintoc-sync CLI - Synchronize Fintoc accounts and movements into Actual Budget.

Usage:
    python -m cli <command> [options]

Commands:
    sync         Run one synchronization
    accounts     Inspect the saved account mapping

Examples:
    python -m cli sync
    python -m cli sync --since 2024-01-01
    python -m cli accounts list
"""

import sys
import argparse
from cli import accounts, sync
from config import load_config
from services.base import Services
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="fintoc-sync - Fintoc to Actual Budget synchronization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    sync.setup_parser(subparsers)
    accounts.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            if hasattr(args, "apply_overrides"):
                config = args.apply_overrides(args, config)

            setup_logging(config)

            services = Services(config)
            args.func(args, services)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
