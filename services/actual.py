"""Read-write access to an Actual Budget server."""

from contextlib import ExitStack, contextmanager
from decimal import Decimal
from typing import Any, Iterator, List, Optional

from actual import Actual
from actual.queries import create_account, create_transaction, reconcile_transaction

from config import Config
from models.account import Account
from models.result import Result
from models.source import Movement
from models.transaction import ActualTransaction
from logger import get_logger

logger = get_logger()


class BudgetNotFoundError(LookupError):
    """Raised when the configured budget does not exist on the server."""


class ActualService:
    """Service wrapping a single actualpy connection.

    The connection is opened by initialize() and must be closed with
    shutdown(). It is not meant to be shared between runs.

    Args:
        config: Application configuration.
    """

    def __init__(self, config: Config):
        self.config = config
        self.actual: Optional[Actual] = None
        self._stack: Optional[ExitStack] = None

    def initialize(self) -> None:
        """Log in to the Actual server."""
        self.config.actual_data_dir.mkdir(parents=True, exist_ok=True)
        self._stack = ExitStack()
        self.actual = self._stack.enter_context(
            Actual(
                base_url=self.config.actual_server_url,
                password=self.config.actual_password,
                encryption_password=self.config.actual_encryption_password,
                data_dir=str(self.config.actual_data_dir),
            )
        )
        logger.info("Actual API initialized")

    def shutdown(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._stack is None:
            return
        try:
            self._stack.close()
        finally:
            self._stack = None
            self.actual = None
        logger.info("Actual API shut down")

    def budget_exists(self, budget_name: str) -> bool:
        """Check whether a (non-deleted) budget with this name exists."""
        return self._find_budget_file(budget_name) is not None

    def load_budget(self, budget_name: str) -> str:
        """Select and download a budget.

        Returns:
            The budget's file id.

        Raises:
            BudgetNotFoundError: If no budget has this name.
        """
        budget_file = self._find_budget_file(budget_name)
        if budget_file is None:
            raise BudgetNotFoundError(f"Budget not found: {budget_name}")

        self._connection.set_file(budget_file)
        self._connection.download_budget(self.config.actual_encryption_password)
        logger.info(f"Loaded budget: {budget_name}")
        return budget_file.file_id

    @contextmanager
    def import_scope(self, budget_name: str) -> Iterator[None]:
        """Create a new budget and commit everything done inside the block once.

        Nothing is committed if the block raises.
        """
        self._connection.create_budget(budget_name)
        self._connection.upload_budget()
        logger.info(f"Created budget: {budget_name}")
        yield
        self._connection.commit()
        logger.info(f"Committed import into budget: {budget_name}")

    def commit(self) -> None:
        """Push pending changes to the server."""
        self._connection.commit()

    def create_account(self, account: Account) -> Result:
        """Create the account in Actual and record its id on the account.

        Returns:
            Result wrapping the updated Account.
        """
        try:
            account_data = account.to_actual_format()
            created = create_account(self._connection.session, account_data["name"])
            account.actual_id = str(created.id)
        except Exception as e:
            logger.error(f"Error creating account {account.display_name}: {e}")
            return Result.failure(e, f"create account {account.source_id}")

        logger.info(
            f"Created account: {account.actual_id} ({account.display_name}, "
            f"{account.actual_account_type})"
        )
        return Result.success(account)

    def add_transactions(
        self, account_id: str, movements: List[Movement], is_update: bool = False
    ) -> Result:
        """Send Fintoc movements to an Actual account.

        With is_update=False every movement is appended as a new transaction.
        With is_update=True movements are imported: Actual matches them by
        imported_id, already known ones are left untouched, and the batch is
        committed. A batch that fails part way is rolled back as a whole.

        Returns:
            Result wrapping the number of transactions processed.
        """
        transactions = [
            ActualTransaction.from_movement(account_id, movement) for movement in movements
        ]
        dated = [t for t in transactions if t.date is not None]
        if len(dated) < len(transactions):
            logger.warning(
                f"Skipping {len(transactions) - len(dated)} movements without a "
                f"post date for account: {account_id}"
            )

        if not dated:
            logger.info(f"No transactions to add for account: {account_id}")
            return Result.success(0)

        # One savepoint per batch: a failing row discards the whole batch
        savepoint = self._connection.session.begin_nested()
        try:
            if is_update:
                self._import(account_id, dated)
            else:
                for transaction in dated:
                    create_transaction(
                        self._connection.session,
                        transaction.date,
                        account_id,
                        payee=transaction.imported_payee,
                        notes=transaction.notes,
                        amount=_to_decimal(transaction.amount),
                        imported_id=transaction.imported_id or None,
                        imported_payee=transaction.imported_payee,
                    )
            savepoint.commit()
            if is_update:
                self._connection.commit()
        except Exception as e:
            if savepoint.is_active:
                savepoint.rollback()
            logger.error(f"Error processing transactions for account {account_id}: {e}")
            return Result.failure(e, f"transactions for {account_id}")

        action = "Imported" if is_update else "Added"
        logger.info(f"{action} {len(dated)} transactions for account: {account_id}")
        return Result.success(len(dated))

    def _import(self, account_id: str, transactions: List[ActualTransaction]) -> None:
        already_matched: List[Any] = []
        for transaction in transactions:
            reconciled = reconcile_transaction(
                self._connection.session,
                transaction.date,
                account_id,
                payee=transaction.imported_payee,
                notes=transaction.notes,
                amount=_to_decimal(transaction.amount),
                imported_id=transaction.imported_id or None,
                imported_payee=transaction.imported_payee,
                update_existing=False,
                already_matched=already_matched,
            )
            already_matched.append(reconciled)

    def _find_budget_file(self, budget_name: str) -> Any:
        files = self._connection.list_user_files().data
        for budget_file in files:
            if budget_file.name == budget_name and not getattr(budget_file, "deleted", 0):
                return budget_file
        return None

    @property
    def _connection(self) -> Actual:
        if self.actual is None:
            raise RuntimeError("Actual API is not initialized")
        return self.actual


def _to_decimal(minor_units: int) -> Decimal:
    """actualpy takes major units and stores cents itself."""
    return Decimal(minor_units) / 100
