"""Fintoc to Actual synchronization.

One run decides up front whether the configured budget already exists:

- CREATE: the budget is new. Every Fintoc account is created in Actual and
  its movements are appended, all inside a single import scope.
- UPDATE: the budget exists. The saved mapping is loaded, accounts that
  appeared in Fintoc since the last run are created, and movements for every
  mapped account are imported (Actual skips those it already has).

Failures of a single link or account are logged and counted; they never
abort the run. The Actual connection is always shut down at the end.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from config import Config
from models.account import Account
from models.source import SourceAccount
from services.actual import ActualService
from services.fintoc import FintocService
from services.mapping_store import BudgetMapping, MappingStore
from logger import get_logger

logger = get_logger()


class SyncState(str, Enum):
    INIT = "init"
    FETCH_SOURCE = "fetch_source"
    CREATE = "create"
    UPDATE = "update"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SyncReport:
    """Summary of one sync run."""

    mode: Optional[str] = None  # "create" or "update"
    state: SyncState = SyncState.INIT
    accounts_found: int = 0
    accounts_created: int = 0
    account_failures: int = 0
    transactions_processed: int = 0
    transaction_failures: int = 0
    mapping_saved: bool = False
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state == SyncState.DONE


class SyncOrchestrator:
    """Drives one sync run between Fintoc and Actual.

    Args:
        config: Application configuration.
        fintoc: Source service.
        actual: Destination service.
        mapping_store: Store for the account mapping file.
    """

    def __init__(
        self,
        config: Config,
        fintoc: FintocService,
        actual: ActualService,
        mapping_store: MappingStore,
    ):
        self.config = config
        self.fintoc = fintoc
        self.actual = actual
        self.mapping_store = mapping_store
        self.state = SyncState.INIT

    def run(self) -> SyncReport:
        """Run a full sync. Never raises; failures are reported.

        Returns:
            SyncReport describing what happened.
        """
        report = SyncReport()
        self.state = SyncState.INIT

        try:
            self.actual.initialize()
            budget_exists = self.actual.budget_exists(self.config.budget_name)
            report.mode = "update" if budget_exists else "create"
            logger.info(
                f"Budget '{self.config.budget_name}' "
                f"{'exists' if budget_exists else 'does not exist'}, mode: {report.mode}"
            )

            self._transition(SyncState.FETCH_SOURCE)
            logger.info("Fetching Fintoc accounts...")
            source_accounts = self.fintoc.get_accounts(self.config.link_tokens)
            report.accounts_found = len(source_accounts)
            logger.info(f"Found {len(source_accounts)} accounts in Fintoc")

            if budget_exists:
                self._transition(SyncState.UPDATE)
                self._update_existing_budget(source_accounts, report)
            else:
                self._transition(SyncState.CREATE)
                self._create_new_budget(source_accounts, report)

            self._transition(SyncState.DONE)
        except Exception as e:
            logger.error(f"Sync process failed during {self.state.value}: {e}")
            report.error = str(e)
            self.state = SyncState.FAILED
        finally:
            try:
                self.actual.shutdown()
            except Exception as e:
                logger.error(f"Failed to shut down Actual API: {e}")

        report.state = self.state
        return report

    def _create_new_budget(
        self, source_accounts: List[SourceAccount], report: SyncReport
    ) -> None:
        logger.info("Creating new budget...")
        budget_name = self.config.budget_name
        mapping = BudgetMapping(budget_name)

        with self.actual.import_scope(budget_name):
            for source in source_accounts:
                account = Account.from_source(source)
                if not self._create_account(account, mapping, report):
                    continue
                self._sync_transactions(account, source, report, is_update=False)

        report.mapping_saved = self.mapping_store.save(
            self.config.accounts_json_file, mapping
        )
        logger.info(
            f"Created {report.accounts_created} accounts with "
            f"{report.transactions_processed} transactions"
        )

    def _update_existing_budget(
        self, source_accounts: List[SourceAccount], report: SyncReport
    ) -> None:
        logger.info("Updating existing budget...")
        budget_name = self.config.budget_name
        mapping = self.mapping_store.load(
            self.config.accounts_json_file, budget_name, source_accounts
        )

        # Lookup failures propagate and fail the run
        self.actual.load_budget(budget_name)

        # Accounts linked in Fintoc since the last run
        new_accounts = 0
        for source in source_accounts:
            if mapping.has_account(source.id):
                continue
            if self._create_account(Account.from_source(source), mapping, report):
                new_accounts += 1
        if new_accounts:
            self.actual.commit()
            logger.info(f"Created {new_accounts} new accounts")

        sources_by_id = {source.id: source for source in source_accounts}
        for account in mapping.accounts:
            if not account.actual_id:
                logger.warning(
                    f"Account {account.source_id} has no Actual id, skipping transactions"
                )
                continue
            source = sources_by_id.get(account.source_id)
            if source is None:
                logger.warning(
                    f"No matching Fintoc data for account {account.source_id}, "
                    f"skipping transactions"
                )
                continue
            self._sync_transactions(account, source, report, is_update=True)

        report.mapping_saved = self.mapping_store.save(
            self.config.accounts_json_file, mapping
        )
        logger.info(
            f"Budget update completed with {report.transactions_processed} "
            f"total transactions processed"
        )

    def _create_account(
        self, account: Account, mapping: BudgetMapping, report: SyncReport
    ) -> bool:
        result = self.actual.create_account(account)
        if not result.ok:
            report.account_failures += 1
            return False
        mapping.add_account(account)
        report.accounts_created += 1
        return True

    def _sync_transactions(
        self,
        account: Account,
        source: SourceAccount,
        report: SyncReport,
        is_update: bool,
    ) -> None:
        movements = self.fintoc.get_movements(source, self.config.movements_since)
        if not movements.ok:
            report.transaction_failures += 1
            return

        result = self.actual.add_transactions(account.actual_id, movements.value, is_update)
        if result.ok:
            report.transactions_processed += result.value
        else:
            report.transaction_failures += 1

    def _transition(self, state: SyncState) -> None:
        logger.debug(f"Sync state: {self.state.value} -> {state.value}")
        self.state = state
