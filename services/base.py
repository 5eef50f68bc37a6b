"""Base services container for dependency injection."""

from config import Config


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to inject fake clients for testing.

    Args:
        config: Application configuration object.
        fintoc_client: Optional Fintoc client. If None, one is built from config.
        actual_service: Optional destination service. If None, an
                        ActualService is built from config.
    """

    def __init__(self, config: Config, fintoc_client=None, actual_service=None):
        self.config = config

        # Lazy import to avoid circular dependencies
        from services.actual import ActualService
        from services.fintoc import FintocService
        from services.mapping_store import MappingStore
        from services.sync import SyncOrchestrator

        self.mapping_store = MappingStore()
        self.fintoc = FintocService(config, client=fintoc_client)
        self.actual = actual_service or ActualService(config)
        self.sync = SyncOrchestrator(config, self.fintoc, self.actual, self.mapping_store)
