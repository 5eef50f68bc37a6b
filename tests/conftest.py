"""Shared pytest fixtures for all tests."""

import pytest

from config import Config
from services.base import Services
from tests.helpers import (
    FakeActualServer,
    FakeFintocClient,
    fake_create_account,
    fake_create_transaction,
    fake_reconcile_transaction,
)


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to temporary directories.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    base_dir = tmp_path / "fintoc-sync"
    return Config(
        base_dir=base_dir,
        fintoc_api_key="sk_test_123",
        link_tokens=["link_token_one"],
        actual_server_url="http://actual.test:5006",
        actual_password="secret",
        actual_data_dir=base_dir / "actual",
        budget_name="Test Budget",
        movements_since="2024-01-01",
        accounts_json_file=base_dir / "accounts.json",
        log_level="DEBUG",
        log_dir=base_dir / "logs",
        max_workers=2,
    )


@pytest.fixture
def actual_server(monkeypatch):
    """Replace actualpy with an in-memory server.

    Returns:
        FakeActualServer: State shared by every connection opened in the test.
    """
    server = FakeActualServer()
    monkeypatch.setattr("services.actual.Actual", server.connect)
    monkeypatch.setattr("services.actual.create_account", fake_create_account)
    monkeypatch.setattr("services.actual.create_transaction", fake_create_transaction)
    monkeypatch.setattr(
        "services.actual.reconcile_transaction", fake_reconcile_transaction
    )
    return server


@pytest.fixture
def make_services(test_config, actual_server):
    """Build a Services container around a fake Fintoc client.

    Returns:
        Callable taking (links, errors) and returning Services.
    """

    def _make(links=None, errors=None, config=None):
        client = FakeFintocClient(links, errors)
        return Services(config or test_config, fintoc_client=client)

    return _make
