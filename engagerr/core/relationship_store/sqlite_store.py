"""
SQLite relationship store implementation.

Writes are serialised by a single asyncio lock and run inside
``BEGIN IMMEDIATE`` transactions, so validation always sees the latest
committed graph. A partial unique index on parent-class targets backs the
single-parent rule at the database level.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from engagerr.core.hierarchy import validate_relationship
from engagerr.core.relationship_store.base import RelationshipStore
from engagerr.models import (
    ContentItem,
    ContentRelationship,
    ContentSuggestion,
    CreationMethod,
    RelationshipType,
    parse_suggestion,
)
from engagerr.utils.exceptions import (
    ContentNotFoundError,
    RelationshipNotFoundError,
    StoreError,
    StructuralConflictError,
    SuggestionNotFoundError,
)
from engagerr.utils.logger import get_logger

logger = get_logger(__name__)

_COMPONENT_QUERY = """
    WITH RECURSIVE component(id) AS (
        SELECT id FROM content WHERE id IN ({seeds})
        UNION
        SELECT CASE WHEN r.source_id = c.id THEN r.target_id ELSE r.source_id END
        FROM relationships r JOIN component c
            ON r.source_id = c.id OR r.target_id = c.id
    )
"""


class SQLiteRelationshipStore(RelationshipStore):
    """
    SQLite-based store for content, relationships and pending suggestions.

    Features:
    - Validated writes under one write lock
    - Connected-component loading via recursive CTE
    - Atomic suggestion approval
    """

    def __init__(self, db_path: str = "data/engagerr.db"):
        """
        Initialize SQLite relationship store.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            # Autocommit mode; write transactions are opened explicitly
            self.connection = await aiosqlite.connect(self.db_path, isolation_level=None)
            await self.connection.execute("PRAGMA foreign_keys = ON")
            if self.db_path != ":memory:":
                await self.connection.execute("PRAGMA journal_mode = WAL")

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS content (
                id TEXT PRIMARY KEY,
                creator_id TEXT NOT NULL,
                platform_type TEXT NOT NULL,
                content_type TEXT NOT NULL,
                published_at TEXT NOT NULL,
                data TEXT NOT NULL
            )
        """
        )

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS relationships (
                id TEXT PRIMARY KEY,
                source_id TEXT NOT NULL,
                target_id TEXT NOT NULL,
                type TEXT NOT NULL,
                confidence REAL NOT NULL DEFAULT 1.0,
                creation_method TEXT NOT NULL,
                created_at TEXT NOT NULL,
                UNIQUE (source_id, target_id),
                FOREIGN KEY (source_id) REFERENCES content(id) ON DELETE CASCADE,
                FOREIGN KEY (target_id) REFERENCES content(id) ON DELETE CASCADE
            )
        """
        )

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS suggestions (
                id TEXT PRIMARY KEY,
                source_id TEXT NOT NULL,
                suggested_id TEXT NOT NULL,
                type TEXT NOT NULL,
                confidence REAL NOT NULL,
                reason TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """
        )

        await self.connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_content_creator ON content(creator_id)"
        )
        await self.connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_relationships_source ON relationships(source_id)"
        )
        await self.connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_relationships_target ON relationships(target_id)"
        )
        await self.connection.execute(
            "CREATE UNIQUE INDEX IF NOT EXISTS idx_relationships_single_parent "
            "ON relationships(target_id) WHERE type != 'reference'"
        )
        await self.connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_suggestions_source ON suggestions(source_id)"
        )
        await self.connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_suggestions_suggested ON suggestions(suggested_id)"
        )

        logger.info(f"Relationship store initialized at {self.db_path}")

    async def close(self) -> None:
        """Close the connection."""
        if self.connection is not None:
            await self.connection.close()
            self.connection = None

    @asynccontextmanager
    async def _write(self) -> AsyncIterator[aiosqlite.Connection]:
        """Serialised write transaction."""
        await self.connect()
        async with self._write_lock:
            await self.connection.execute("BEGIN IMMEDIATE")
            try:
                yield self.connection
            except aiosqlite.IntegrityError as e:
                await self.connection.execute("ROLLBACK")
                raise StructuralConflictError(
                    f"Change conflicts with a concurrent edit: {e}", context={"detail": str(e)}
                ) from e
            except aiosqlite.Error as e:
                await self.connection.execute("ROLLBACK")
                raise StoreError(f"Relationship store write failed: {e}") from e
            except BaseException:
                await self.connection.execute("ROLLBACK")
                raise
            else:
                await self.connection.execute("COMMIT")

    # ═══════════════════════════════════════════════════════════
    # CONTENT OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def upsert_content(self, items: list[ContentItem]) -> int:
        """Insert or refresh content items."""
        async with self._write() as conn:
            await conn.executemany(
                """
                INSERT INTO content (id, creator_id, platform_type, content_type, published_at, data)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    creator_id = excluded.creator_id,
                    platform_type = excluded.platform_type,
                    content_type = excluded.content_type,
                    published_at = excluded.published_at,
                    data = excluded.data
                """,
                [
                    (
                        item.id,
                        item.creator_id,
                        item.platform_type.value,
                        item.content_type.value,
                        item.published_at.isoformat(),
                        item.model_dump_json(),
                    )
                    for item in items
                ],
            )
        logger.debug(f"Upserted {len(items)} content items")
        return len(items)

    async def get_content(self, content_id: str) -> ContentItem | None:
        """Retrieve a content item by ID."""
        await self.connect()

        cursor = await self.connection.execute(
            "SELECT data FROM content WHERE id = ?", (content_id,)
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return ContentItem.model_validate_json(row[0])

    async def get_contents(self, content_ids: list[str]) -> list[ContentItem]:
        """Retrieve several content items in one query."""
        await self.connect()

        if not content_ids:
            return []

        placeholders = ", ".join("?" for _ in content_ids)
        cursor = await self.connection.execute(
            f"SELECT data FROM content WHERE id IN ({placeholders}) ORDER BY published_at, id",
            list(content_ids),
        )
        rows = await cursor.fetchall()
        return [ContentItem.model_validate_json(row[0]) for row in rows]

    # ═══════════════════════════════════════════════════════════
    # RELATIONSHIP OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_relationship(self, relationship: ContentRelationship) -> ContentRelationship:
        """Validate and commit a new relationship."""
        async with self._write() as conn:
            await self._insert_validated(conn, relationship)

        logger.info(
            f"Added {relationship.relationship_type.value} relationship "
            f"{relationship.source_content_id} -> {relationship.target_content_id}"
        )
        return relationship

    async def update_relationship(
        self,
        relationship_id: str,
        relationship_type: RelationshipType | None = None,
        confidence: float | None = None,
    ) -> ContentRelationship:
        """Validate and commit a change to an existing relationship."""
        async with self._write() as conn:
            current = await self._fetch_relationship(conn, relationship_id)
            if current is None:
                raise RelationshipNotFoundError(
                    f"Relationship '{relationship_id}' not found",
                    context={"relationship_id": relationship_id},
                )

            update = {}
            if relationship_type is not None:
                update["relationship_type"] = relationship_type
            if confidence is not None:
                update["confidence"] = confidence
            updated = current.model_copy(update=update)

            existing = await self._component_edges(
                conn, [updated.source_content_id, updated.target_content_id]
            )
            validate_relationship(updated, existing)

            await conn.execute(
                "UPDATE relationships SET type = ?, confidence = ? WHERE id = ?",
                (updated.relationship_type.value, updated.confidence, relationship_id),
            )

        logger.info(f"Updated relationship {relationship_id}")
        return updated

    async def delete_relationship(self, relationship_id: str) -> None:
        """Delete a relationship."""
        async with self._write() as conn:
            cursor = await conn.execute(
                "DELETE FROM relationships WHERE id = ?", (relationship_id,)
            )
            if cursor.rowcount == 0:
                raise RelationshipNotFoundError(
                    f"Relationship '{relationship_id}' not found",
                    context={"relationship_id": relationship_id},
                )
        logger.info(f"Deleted relationship {relationship_id}")

    async def get_relationship(self, relationship_id: str) -> ContentRelationship | None:
        """Retrieve a relationship by ID."""
        await self.connect()
        return await self._fetch_relationship(self.connection, relationship_id)

    async def remove_from_hierarchy(
        self, content_id: str, preserve_descendants: bool = True
    ) -> list[ContentRelationship]:
        """Detach a content item, optionally reattaching its children to its parent."""
        async with self._write() as conn:
            cursor = await conn.execute("SELECT 1 FROM content WHERE id = ?", (content_id,))
            if await cursor.fetchone() is None:
                raise ContentNotFoundError(
                    f"Content '{content_id}' not found", context={"content_id": content_id}
                )

            edges = await self._component_edges(conn, [content_id])
            if not preserve_descendants:
                removed = [e for e in edges if e.target_content_id == content_id]
                await self._delete_edges(conn, removed)
                logger.info(f"Removed {content_id} and its descendants from their family")
                return []

            touching = [
                e for e in edges if content_id in (e.source_content_id, e.target_content_id)
            ]
            parents = [
                e.source_content_id
                for e in touching
                if e.target_content_id == content_id and e.is_parent_class
            ]
            parent_id = parents[0] if parents else None
            children = [
                e for e in touching if e.source_content_id == content_id and e.is_parent_class
            ]

            reattached: list[ContentRelationship] = []
            if parent_id is not None:
                touching_ids = {e.id for e in touching}
                remaining = [e for e in edges if e.id not in touching_ids]
                for edge in children:
                    moved = edge.model_copy(update={"source_content_id": parent_id})
                    validate_relationship(moved, remaining + reattached)
                    reattached.append(moved)

            await self._delete_edges(conn, touching)
            for edge in reattached:
                await self._insert_row(conn, edge)

        logger.info(
            f"Removed {content_id} from hierarchy; reattached {len(reattached)} children"
            + (f" to {parent_id}" if parent_id else "")
        )
        return reattached

    async def list_family_roots(self, creator_id: str) -> list[str]:
        """Creator content with no incoming parent-class relationship."""
        await self.connect()

        cursor = await self.connection.execute(
            """
            SELECT c.id FROM content c
            WHERE c.creator_id = ?
              AND NOT EXISTS (
                  SELECT 1 FROM relationships r
                  WHERE r.target_id = c.id AND r.type != 'reference'
              )
            ORDER BY c.published_at, c.id
            """,
            (creator_id,),
        )
        rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def get_component(
        self, content_id: str
    ) -> tuple[list[ContentItem], list[ContentRelationship]]:
        """Load the connected component around a content item."""
        await self.connect()

        if await self.get_content(content_id) is None:
            raise ContentNotFoundError(
                f"Content '{content_id}' not found", context={"content_id": content_id}
            )

        cursor = await self.connection.execute(
            _COMPONENT_QUERY.format(seeds="?")
            + "SELECT data FROM content WHERE id IN (SELECT id FROM component) ORDER BY published_at, id",
            (content_id,),
        )
        items = [ContentItem.model_validate_json(row[0]) for row in await cursor.fetchall()]
        edges = await self._component_edges(self.connection, [content_id])
        return items, edges

    # ═══════════════════════════════════════════════════════════
    # SUGGESTION OPERATIONS
    # ═══════════════════════════════════════════════════════════

    async def add_suggestions(self, suggestions: list[ContentSuggestion]) -> int:
        """Store pending suggestions, replacing any with the same id."""
        async with self._write() as conn:
            await conn.executemany(
                """
                INSERT OR REPLACE INTO suggestions
                    (id, source_id, suggested_id, type, confidence, reason, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        s.id,
                        s.source_content_id,
                        s.suggested_content_id,
                        s.relationship_type,
                        s.confidence,
                        s.reason,
                        s.created_at.isoformat(),
                    )
                    for s in suggestions
                ],
            )
        logger.debug(f"Stored {len(suggestions)} suggestions")
        return len(suggestions)

    async def get_suggestion(self, suggestion_id: str) -> ContentSuggestion | None:
        """Retrieve a pending suggestion by ID."""
        await self.connect()
        return await self._fetch_suggestion(self.connection, suggestion_id)

    async def list_suggestions(
        self, content_id: str, min_confidence: float = 0.0, limit: int | None = None
    ) -> list[ContentSuggestion]:
        """Pending suggestions touching a content item, highest confidence first."""
        await self.connect()

        query = (
            "SELECT * FROM suggestions WHERE (source_id = ? OR suggested_id = ?) "
            "AND confidence >= ? ORDER BY confidence DESC, created_at, id"
        )
        params: list = [content_id, content_id, min_confidence]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor = await self.connection.execute(query, params)
        rows = await cursor.fetchall()
        return [self._row_to_suggestion(row) for row in rows]

    async def delete_suggestion(self, suggestion_id: str) -> None:
        """Remove a pending suggestion."""
        async with self._write() as conn:
            cursor = await conn.execute("DELETE FROM suggestions WHERE id = ?", (suggestion_id,))
            if cursor.rowcount == 0:
                raise SuggestionNotFoundError(
                    f"Suggestion '{suggestion_id}' not found or already resolved",
                    context={"suggestion_id": suggestion_id},
                )

    async def accept_suggestion(self, suggestion_id: str) -> ContentRelationship:
        """Atomically convert a suggestion into a relationship."""
        async with self._write() as conn:
            suggestion = await self._fetch_suggestion(conn, suggestion_id)
            if suggestion is None:
                raise SuggestionNotFoundError(
                    f"Suggestion '{suggestion_id}' not found or already resolved",
                    context={"suggestion_id": suggestion_id},
                )
            relationship = suggestion.to_relationship(CreationMethod.AI_SUGGESTED)
            await self._insert_validated(conn, relationship)
            await conn.execute("DELETE FROM suggestions WHERE id = ?", (suggestion_id,))

        logger.info(
            f"Accepted suggestion {suggestion_id}: {relationship.relationship_type.value} "
            f"{relationship.source_content_id} -> {relationship.target_content_id}"
        )
        return relationship

    # ═══════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════

    async def _insert_validated(
        self, conn: aiosqlite.Connection, relationship: ContentRelationship
    ) -> None:
        """Validate against the committed component, then insert. Caller holds the lock."""
        for content_id in (relationship.source_content_id, relationship.target_content_id):
            cursor = await conn.execute("SELECT 1 FROM content WHERE id = ?", (content_id,))
            if await cursor.fetchone() is None:
                raise ContentNotFoundError(
                    f"Content '{content_id}' not found", context={"content_id": content_id}
                )

        existing = await self._component_edges(
            conn, [relationship.source_content_id, relationship.target_content_id]
        )
        validate_relationship(relationship, existing)
        await self._insert_row(conn, relationship)

    async def _insert_row(
        self, conn: aiosqlite.Connection, relationship: ContentRelationship
    ) -> None:
        await conn.execute(
            """
            INSERT INTO relationships
                (id, source_id, target_id, type, confidence, creation_method, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                relationship.id,
                relationship.source_content_id,
                relationship.target_content_id,
                relationship.relationship_type.value,
                relationship.confidence,
                relationship.creation_method.value,
                relationship.created_at.isoformat(),
            ),
        )

    async def _delete_edges(
        self, conn: aiosqlite.Connection, edges: list[ContentRelationship]
    ) -> None:
        await conn.executemany("DELETE FROM relationships WHERE id = ?", [(e.id,) for e in edges])

    async def _component_edges(
        self, conn: aiosqlite.Connection, seeds: list[str]
    ) -> list[ContentRelationship]:
        placeholders = ", ".join("?" for _ in seeds)
        cursor = await conn.execute(
            _COMPONENT_QUERY.format(seeds=placeholders)
            + "SELECT * FROM relationships "
            "WHERE source_id IN (SELECT id FROM component) OR target_id IN (SELECT id FROM component) "
            "ORDER BY created_at, id",
            seeds,
        )
        rows = await cursor.fetchall()
        return [self._row_to_relationship(row) for row in rows]

    async def _fetch_relationship(
        self, conn: aiosqlite.Connection, relationship_id: str
    ) -> ContentRelationship | None:
        cursor = await conn.execute("SELECT * FROM relationships WHERE id = ?", (relationship_id,))
        row = await cursor.fetchone()
        return self._row_to_relationship(row) if row else None

    async def _fetch_suggestion(
        self, conn: aiosqlite.Connection, suggestion_id: str
    ) -> ContentSuggestion | None:
        cursor = await conn.execute("SELECT * FROM suggestions WHERE id = ?", (suggestion_id,))
        row = await cursor.fetchone()
        return self._row_to_suggestion(row) if row else None

    def _row_to_relationship(self, row: tuple) -> ContentRelationship:
        """Convert database row to ContentRelationship."""
        return ContentRelationship(
            id=row[0],
            source_content_id=row[1],
            target_content_id=row[2],
            relationship_type=RelationshipType(row[3]),
            confidence=row[4],
            creation_method=CreationMethod(row[5]),
            created_at=row[6],
        )

    def _row_to_suggestion(self, row: tuple) -> ContentSuggestion:
        """Convert database row to a tagged suggestion."""
        return parse_suggestion(
            {
                "id": row[0],
                "source_content_id": row[1],
                "suggested_content_id": row[2],
                "relationship_type": row[3],
                "confidence": row[4],
                "reason": row[5],
                "created_at": row[6],
            }
        )
