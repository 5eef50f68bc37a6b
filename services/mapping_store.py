"""Persistence of the Fintoc <-> Actual account mapping."""

import json
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from models.account import Account
from models.mapping import MappingDocument
from models.source import SourceAccount
from logger import get_logger

logger = get_logger()


class BudgetMapping:
    """The accounts known to belong to one Actual budget.

    Args:
        budget_name: Name of the Actual budget.
    """

    def __init__(self, budget_name: str, accounts: Optional[List[Account]] = None):
        self.budget_name = budget_name
        self.accounts: List[Account] = list(accounts or [])

    def add_account(self, account: Account) -> None:
        self.accounts.append(account)

    def has_account(self, source_id: str) -> bool:
        """Check whether an account with the given Fintoc id is mapped."""
        return any(account.source_id == source_id for account in self.accounts)

    def get_account(self, source_id: str) -> Optional[Account]:
        """Get a mapped account by Fintoc id, None if not mapped."""
        for account in self.accounts:
            if account.source_id == source_id:
                return account
        return None

    def unmapped_accounts(self) -> List[Account]:
        """Accounts that never got an Actual id."""
        return [account for account in self.accounts if not account.actual_id]

    def to_document(self) -> dict:
        return {
            "budgetName": self.budget_name,
            "accounts": [account.to_dict() for account in self.accounts],
        }


class MappingStore:
    """Loads and saves BudgetMapping objects as JSON files.

    There is no locking and no atomic replace: the last writer wins.
    """

    def load(
        self,
        path: Path,
        default_budget_name: str,
        source_accounts: Optional[List[SourceAccount]] = None,
    ) -> BudgetMapping:
        """Load a mapping, reconciling it against current Fintoc accounts.

        Never raises. A missing, unreadable, unparsable or invalid file is
        treated as "no prior mapping" and yields an empty BudgetMapping.

        Args:
            path: Mapping file location.
            default_budget_name: Budget name used when the file has none.
            source_accounts: Accounts fetched from Fintoc in this run.

        Returns:
            BudgetMapping with reconciled accounts.
        """
        path = Path(path)
        source_accounts = source_accounts or []

        if not path.exists():
            logger.info(f"Mapping file not found at {path}, starting a new mapping")
            return BudgetMapping(default_budget_name)

        try:
            with open(path, "r", encoding="utf-8") as f:
                document = MappingDocument.model_validate_json(f.read())
        except (OSError, ValueError, ValidationError) as e:
            logger.error(f"Failed to load mapping from {path}: {e}")
            return BudgetMapping(default_budget_name)

        mapping = BudgetMapping(document.budget_name or default_budget_name)
        for record in document.accounts:
            mapping.add_account(
                Account.from_record(record.model_dump(by_alias=True), source_accounts)
            )

        logger.info(
            f"Loaded mapping for budget {mapping.budget_name} "
            f"with {len(mapping.accounts)} accounts"
        )
        for account in mapping.unmapped_accounts():
            logger.warning(
                f"Account {account.source_id} ({account.display_name}) has no Actual id"
            )
        return mapping

    def save(self, path: Path, mapping: BudgetMapping) -> bool:
        """Write the full mapping to disk.

        Returns:
            True if the file was written, False otherwise.
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(mapping.to_document(), f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save mapping to {path}: {e}")
            return False

        logger.info(f"Mapping saved to {path}")
        return True
