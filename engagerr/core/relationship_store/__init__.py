"""
Relationship store implementations for Engagerr.

Provides abstract base and concrete implementations for relationship storage.

Available backends:
- SQLiteRelationshipStore: Local aiosqlite database with validated writes
"""

from engagerr.core.relationship_store.base import RelationshipStore
from engagerr.core.relationship_store.factory import (
    RelationshipStoreFactory,
    create_relationship_store,
)
from engagerr.core.relationship_store.sqlite_store import SQLiteRelationshipStore

__all__ = [
    "RelationshipStore",
    "SQLiteRelationshipStore",
    "RelationshipStoreFactory",
    "create_relationship_store",
]
