#!/usr/bin/env python3

from dataclasses import replace
from config import validate_since
from logger import get_logger

logger = get_logger()


def cmd_sync(args, services):
    """Run one Fintoc to Actual synchronization."""
    config = services.config
    logger.info("Starting Fintoc to Actual sync")
    logger.info(f"Budget: {config.budget_name}")
    logger.info(f"Movements since: {config.movements_since}")
    logger.info(f"Links configured: {len(config.link_tokens)}")
    logger.info("-" * 80)

    report = services.sync.run()

    logger.info("-" * 80)
    logger.info(f"Mode: {report.mode or 'unknown'}")
    logger.info(f"Accounts found in Fintoc: {report.accounts_found}")
    logger.info(f"Accounts created in Actual: {report.accounts_created}")
    logger.info(f"Transactions processed: {report.transactions_processed}")
    if report.account_failures or report.transaction_failures:
        logger.warning(
            f"Failures: {report.account_failures} account(s), "
            f"{report.transaction_failures} transaction batch(es)"
        )
    if report.mode and not report.mapping_saved:
        logger.warning(f"Account mapping was not saved to {config.accounts_json_file}")

    if report.succeeded:
        logger.info("Sync completed successfully")
    else:
        logger.error(f"Sync failed: {report.error}")


def apply_overrides(args, config):
    """Apply --since and --budget to a copy of the loaded config."""
    overrides = {}
    if args.since:
        overrides["movements_since"] = validate_since(args.since)
    if args.budget:
        overrides["budget_name"] = args.budget
    return replace(config, **overrides) if overrides else config


def setup_parser(subparsers):
    """Setup sync subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "sync",
        help="Run one synchronization",
        description="Create or update the Actual budget from Fintoc data",
    )
    parser.add_argument(
        "--since",
        help="Fetch movements posted on or after this date (YYYY-MM-DD)",
    )
    parser.add_argument("--budget", help="Actual budget name")
    parser.set_defaults(func=cmd_sync, apply_overrides=apply_overrides)
