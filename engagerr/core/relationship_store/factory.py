"""Factory for creating relationship stores."""

from engagerr.config import Config
from engagerr.core.relationship_store.base import RelationshipStore
from engagerr.core.relationship_store.sqlite_store import SQLiteRelationshipStore
from engagerr.utils.exceptions import ConfigurationError


def create_relationship_store(backend: str = "sqlite", **kwargs) -> RelationshipStore:
    """
    Factory function to create relationship stores.

    Args:
        backend: Type of backend ("sqlite")
        **kwargs: Backend-specific arguments

    Returns:
        RelationshipStore instance

    Raises:
        ConfigurationError: If backend is not supported
    """
    if backend == "sqlite":
        return SQLiteRelationshipStore(db_path=kwargs.get("db_path", "data/engagerr.db"))
    raise ConfigurationError(f"Unknown relationship store backend: {backend}")


class RelationshipStoreFactory:
    """Factory for creating relationship store backends from configuration."""

    @staticmethod
    def create(config: Config) -> RelationshipStore:
        """
        Create relationship store from configuration.

        Args:
            config: Main configuration object

        Returns:
            Relationship store instance
        """
        return create_relationship_store(config.store.backend, db_path=config.store.db_path)
