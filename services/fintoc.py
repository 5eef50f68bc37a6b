"""Read-only access to the Fintoc API."""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, List

from fintoc import Fintoc

from config import Config, DEFAULT_MOVEMENTS_SINCE
from models.result import Result
from models.source import Movement, SourceAccount
from logger import get_logger

logger = get_logger()


class FintocService:
    """Service for fetching links, accounts and movements from Fintoc.

    Args:
        config: Application configuration.
        client: Optional Fintoc client, mainly for tests. If None, one is
                built from config.fintoc_api_key.
    """

    def __init__(self, config: Config, client: Any = None):
        self.config = config
        self.client = client or Fintoc(config.fintoc_api_key)
        self.max_workers = max(1, config.max_workers)
        logger.info("Fintoc service initialized")

    def get_accounts(self, link_tokens: List[str]) -> List[SourceAccount]:
        """Fetch all accounts reachable through the given link tokens.

        Links are fetched concurrently, then each link's accounts are listed
        concurrently. A link that fails at either step is logged and
        contributes no accounts. The result keeps the order of link_tokens.

        Args:
            link_tokens: Fintoc link tokens.

        Returns:
            Flat list of SourceAccount objects.
        """
        if not link_tokens:
            logger.warning("No Fintoc link tokens configured")
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            links = list(executor.map(self._fetch_link, link_tokens))
            fetched = [result.value for result in links if result.ok]
            account_lists = list(executor.map(self._fetch_link_accounts, fetched))

        accounts = []
        for result in account_lists:
            accounts.extend(result.unwrap_or([]))
        return accounts

    def get_movements(
        self, source_account: SourceAccount, since: str = DEFAULT_MOVEMENTS_SINCE
    ) -> Result:
        """Fetch movements for an account.

        Args:
            source_account: Account to fetch movements for.
            since: Cutoff date (YYYY-MM-DD).

        Returns:
            Result wrapping a list of Movement objects.
        """
        try:
            logger.info(f"Fetching movements for account: {source_account.id}")
            resource = source_account.resource
            if resource is None:
                raise ValueError(f"Account {source_account.id} has no Fintoc resource")
            movements = [
                Movement.from_resource(movement)
                for movement in resource.movements.list(since=since, lazy=False)
            ]
        except Exception as e:
            logger.error(f"Error fetching movements for account {source_account.id}: {e}")
            return Result.failure(e, f"movements for {source_account.id}")

        logger.info(f"Fetched {len(movements)} movements")
        return Result.success(movements)

    def _fetch_link(self, token: str) -> Result:
        try:
            link = self.client.links.get(token)
        except Exception as e:
            logger.error(f"Failed to fetch link {_mask(token)}: {e}")
            return Result.failure(e, f"link {_mask(token)}")

        logger.info(f"Link fetched: {_mask(token)}")
        return Result.success(link)

    def _fetch_link_accounts(self, link: Any) -> Result:
        token = getattr(link, "link_token", None) or getattr(link, "id", "?")
        try:
            institution = getattr(link, "institution", None)
            accounts = [
                SourceAccount.from_resource(account, institution)
                for account in link.accounts.list(lazy=False)
            ]
        except Exception as e:
            logger.error(f"Error fetching accounts for link {_mask(token)}: {e}")
            return Result.failure(e, f"accounts for link {_mask(token)}")

        logger.info(f"Fetched {len(accounts)} accounts for link {_mask(token)}")
        return Result.success(accounts)


def _mask(token: str) -> str:
    """Shorten a link token for logging."""
    token = str(token)
    if len(token) <= 8:
        return token
    return f"{token[:8]}..."
