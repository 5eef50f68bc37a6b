"""In-memory stand-ins for the Fintoc SDK and the actualpy connection."""

from types import SimpleNamespace
from typing import Dict, List, Optional


# ---------------------------------------------------------------- Fintoc SDK


class FakeMovementManager:
    """Mimics account.movements on a fintoc account resource."""

    def __init__(self, movements=None, error: Optional[Exception] = None):
        self.movements = list(movements or [])
        self.error = error
        self.calls: List[dict] = []

    def list(self, since=None, lazy=True):
        self.calls.append({"since": since, "lazy": lazy})
        if self.error:
            raise self.error
        return list(self.movements)


class FakeAccountManager:
    """Mimics link.accounts on a fintoc link resource."""

    def __init__(self, accounts=None, error: Optional[Exception] = None):
        self.accounts = list(accounts or [])
        self.error = error

    def list(self, lazy=True):
        if self.error:
            raise self.error
        return list(self.accounts)


class FakeLinkManager:
    """Mimics client.links."""

    def __init__(self, links: Dict[str, SimpleNamespace], errors=None):
        self.links = links
        self.errors = set(errors or [])
        self.requested: List[str] = []

    def get(self, token):
        self.requested.append(token)
        if token in self.errors or token not in self.links:
            raise RuntimeError(f"link {token} unavailable")
        return self.links[token]


class FakeFintocClient:
    def __init__(self, links=None, errors=None):
        self.links = FakeLinkManager(links or {}, errors)


def make_movement(
    movement_id="mov_1",
    amount=10.0,
    post_date="2024-01-15T00:00:00Z",
    description="COFFEE SHOP",
):
    return SimpleNamespace(
        id=movement_id, amount=amount, post_date=post_date, description=description
    )


def make_fintoc_account(
    account_id,
    name="Cuenta Corriente",
    type="checking_account",
    balance=None,
    currency="CLP",
    movements=None,
    movements_error=None,
):
    if balance is None:
        balance = SimpleNamespace(available=1000, current=1200, limit=1000)
    return SimpleNamespace(
        id=account_id,
        name=name,
        type=type,
        balance=balance,
        currency=currency,
        movements=FakeMovementManager(movements, movements_error),
    )


def make_link(token, accounts, institution_name="Banco Estado", accounts_error=None):
    return SimpleNamespace(
        link_token=token,
        institution=SimpleNamespace(id="cl_banco_estado", name=institution_name),
        accounts=FakeAccountManager(accounts, accounts_error),
    )


# ------------------------------------------------------------------ actualpy


class FakeBudget:
    def __init__(self, name, file_id):
        self.name = name
        self.file_id = file_id
        self.accounts: Dict[str, str] = {}
        self.transactions: List[dict] = []


class FakeActualServer:
    """Budget state shared by every FakeActual connection in a test."""

    def __init__(self):
        self.budgets: Dict[str, FakeBudget] = {}
        self.connections: List["FakeActual"] = []
        self.fail_account_names = set()
        self.fail_transaction_accounts = set()
        self.fail_imported_ids = set()
        self.fail_list_files = False
        self._next_id = 0

    def next_id(self, prefix):
        self._next_id += 1
        return f"{prefix}-{self._next_id}"

    def add_budget(self, name):
        budget = FakeBudget(name, self.next_id("file"))
        self.budgets[name] = budget
        return budget

    def connect(self, **kwargs):
        connection = FakeActual(self, **kwargs)
        self.connections.append(connection)
        return connection


class FakeSavepoint:
    """Mimics the SAVEPOINT returned by session.begin_nested()."""

    def __init__(self, connection):
        self.connection = connection
        self.accounts = dict(connection.pending_accounts)
        self.transactions = len(connection.pending_transactions)
        self.is_active = True

    def commit(self):
        self.is_active = False

    def rollback(self):
        self.connection.pending_accounts = self.accounts
        del self.connection.pending_transactions[self.transactions :]
        self.is_active = False


class FakeActual:
    """Mimics actual.Actual: it is also used as its own session."""

    def __init__(self, server, **kwargs):
        self.server = server
        self.kwargs = kwargs
        self.budget: Optional[FakeBudget] = None
        self.file = None
        self.closed = False
        self.commits = 0
        self.pending_accounts: Dict[str, str] = {}
        self.pending_transactions: List[dict] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    @property
    def session(self):
        return self

    def begin_nested(self):
        return FakeSavepoint(self)

    def list_user_files(self):
        if self.server.fail_list_files:
            raise ConnectionError("server unreachable")
        return SimpleNamespace(
            data=[
                SimpleNamespace(name=b.name, file_id=b.file_id, deleted=0)
                for b in self.server.budgets.values()
            ]
        )

    def set_file(self, budget_file):
        self.file = budget_file

    def download_budget(self, encryption_password=None):
        self.budget = self.server.budgets[self.file.name]

    def create_budget(self, budget_name):
        self.budget = FakeBudget(budget_name, self.server.next_id("file"))

    def upload_budget(self):
        self.server.budgets[self.budget.name] = self.budget

    def commit(self):
        self.commits += 1
        self.budget.accounts.update(self.pending_accounts)
        self.budget.transactions.extend(self.pending_transactions)
        self.pending_accounts = {}
        self.pending_transactions = []

    def all_transactions(self):
        return self.budget.transactions + self.pending_transactions


def fake_create_account(s, name, initial_balance=0, off_budget=False):
    if name in s.server.fail_account_names:
        raise RuntimeError(f"cannot create {name}")
    account_id = s.server.next_id("acct")
    s.pending_accounts[account_id] = name
    return SimpleNamespace(id=account_id, name=name)


def fake_create_transaction(
    s,
    date,
    account,
    payee="",
    notes="",
    category=None,
    amount=0,
    imported_id=None,
    cleared=False,
    imported_payee=None,
):
    if account in s.server.fail_transaction_accounts:
        raise RuntimeError(f"cannot add transactions to {account}")
    if imported_id in s.server.fail_imported_ids:
        raise RuntimeError(f"cannot add transaction {imported_id}")
    transaction = {
        "id": s.server.next_id("txn"),
        "date": date,
        "account": account,
        "payee": payee,
        "notes": notes,
        "amount": amount,
        "imported_id": imported_id,
        "imported_payee": imported_payee,
    }
    s.pending_transactions.append(transaction)
    return SimpleNamespace(**transaction)


def fake_reconcile_transaction(
    s,
    date,
    account,
    payee="",
    notes="",
    category=None,
    amount=0,
    imported_id=None,
    cleared=False,
    imported_payee=None,
    update_existing=True,
    already_matched=None,
):
    matched_ids = {t.id for t in (already_matched or [])}
    for existing in s.all_transactions():
        if (
            imported_id
            and existing["account"] == account
            and existing["imported_id"] == imported_id
            and existing["id"] not in matched_ids
        ):
            return SimpleNamespace(**existing)
    return fake_create_transaction(
        s,
        date,
        account,
        payee=payee,
        notes=notes,
        amount=amount,
        imported_id=imported_id,
        imported_payee=imported_payee,
    )
