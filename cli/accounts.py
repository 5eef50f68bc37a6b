#!/usr/bin/env python3

from logger import get_logger

logger = get_logger()


def cmd_list(args, services):
    """List the accounts in the saved mapping file."""
    config = services.config
    mapping = services.mapping_store.load(config.accounts_json_file, config.budget_name)

    if not mapping.accounts:
        logger.info("No accounts found.")
        return

    logger.info(f"\nAccounts in budget {mapping.budget_name}:")
    logger.info("=" * 80)
    for account in mapping.accounts:
        logger.info(f"Name: {account.display_name}")
        logger.info(f"Fintoc ID: {account.source_id}")
        logger.info(f"Actual ID: {account.actual_id or '(not created)'}")
        logger.info(f"Type: {account.type} -> {account.actual_account_type}")
        logger.info(f"Balance: {account.balance} {account.currency}")
        logger.info("-" * 80)

    logger.info(f"\nTotal accounts: {len(mapping.accounts)}")
    unmapped = mapping.unmapped_accounts()
    if unmapped:
        logger.warning(f"{len(unmapped)} account(s) have no Actual id")


def setup_parser(subparsers):
    """Setup accounts subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "accounts",
        help="Inspect the account mapping",
        description="Show accounts known to the Fintoc <-> Actual mapping",
    )

    accounts_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available account commands",
        dest="subcommand",
        required=True,
    )

    list_parser = accounts_subparsers.add_parser("list", help="List mapped accounts")
    list_parser.set_defaults(func=cmd_list)
