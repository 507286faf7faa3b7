"""
Base interface for relationship storage.

The store is the single authority on edge validity: every relationship write
is validated against the committed graph and serialised with every other
write, so of two conflicting edits exactly one succeeds.
"""

from abc import ABC, abstractmethod

from engagerr.models import (
    ContentItem,
    ContentRelationship,
    ContentSuggestion,
    RelationshipType,
)


class RelationshipStore(ABC):
    """Abstract base class for relationship store implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (create tables/schema)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass

    # ═══════════════════════════════════════════════════════════
    # CONTENT OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def upsert_content(self, items: list[ContentItem]) -> int:
        """
        Insert or refresh content items.

        Args:
            items: Content items to store

        Returns:
            Number of items written
        """
        pass

    @abstractmethod
    async def get_content(self, content_id: str) -> ContentItem | None:
        """
        Retrieve a content item by ID.

        Args:
            content_id: Content identifier

        Returns:
            ContentItem or None if not found
        """
        pass

    @abstractmethod
    async def get_contents(self, content_ids: list[str]) -> list[ContentItem]:
        """Retrieve several content items; unknown ids are skipped."""
        pass

    # ═══════════════════════════════════════════════════════════
    # RELATIONSHIP OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_relationship(self, relationship: ContentRelationship) -> ContentRelationship:
        """
        Validate and commit a new relationship.

        Args:
            relationship: Edge to add

        Returns:
            The committed relationship

        Raises:
            ContentNotFoundError: If either endpoint is unknown
            CycleDetectedError, MultipleParentsError, DuplicateRelationshipError:
                If the edge would break the hierarchy
        """
        pass

    @abstractmethod
    async def update_relationship(
        self,
        relationship_id: str,
        relationship_type: RelationshipType | None = None,
        confidence: float | None = None,
    ) -> ContentRelationship:
        """
        Validate and commit a change to an existing relationship.

        Raises:
            RelationshipNotFoundError: If the relationship does not exist
            GraphError: If the change would break the hierarchy
        """
        pass

    @abstractmethod
    async def delete_relationship(self, relationship_id: str) -> None:
        """
        Delete a relationship.

        Raises:
            RelationshipNotFoundError: If the relationship does not exist
        """
        pass

    @abstractmethod
    async def get_relationship(self, relationship_id: str) -> ContentRelationship | None:
        """Retrieve a relationship by ID."""
        pass

    @abstractmethod
    async def remove_from_hierarchy(
        self, content_id: str, preserve_descendants: bool = True
    ) -> list[ContentRelationship]:
        """
        Take a content item out of its family.

        With ``preserve_descendants`` every relationship touching the item is
        removed and its children are reattached to its parent (or become
        roots when the item was a root). Otherwise only the item's incoming
        relationships are removed and its subtree leaves the family with it.
        The content item itself is kept.

        Returns:
            The reattached child relationships

        Raises:
            ContentNotFoundError: If the content does not exist
            GraphError: If a reattached relationship would break the hierarchy
        """
        pass

    @abstractmethod
    async def list_family_roots(self, creator_id: str) -> list[str]:
        """
        Ids of a creator's content that head a family.

        A family root has no incoming parent-class relationship; content with
        no relationships at all is a family of one.
        """
        pass

    @abstractmethod
    async def get_component(
        self, content_id: str
    ) -> tuple[list[ContentItem], list[ContentRelationship]]:
        """
        Everything connected to ``content_id`` through any relationship.

        Returns:
            (content items, relationships) of the connected component

        Raises:
            ContentNotFoundError: If the content does not exist
        """
        pass

    # ═══════════════════════════════════════════════════════════
    # SUGGESTION OPERATIONS
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def add_suggestions(self, suggestions: list[ContentSuggestion]) -> int:
        """Store pending suggestions; returns the number written."""
        pass

    @abstractmethod
    async def get_suggestion(self, suggestion_id: str) -> ContentSuggestion | None:
        """Retrieve a pending suggestion by ID."""
        pass

    @abstractmethod
    async def list_suggestions(
        self, content_id: str, min_confidence: float = 0.0, limit: int | None = None
    ) -> list[ContentSuggestion]:
        """
        Pending suggestions touching ``content_id``, highest confidence first.

        Args:
            content_id: Content on either end of the suggestion
            min_confidence: Inclusive lower bound on confidence
            limit: Maximum results
        """
        pass

    @abstractmethod
    async def delete_suggestion(self, suggestion_id: str) -> None:
        """
        Remove a pending suggestion.

        Raises:
            SuggestionNotFoundError: If it does not exist
        """
        pass

    @abstractmethod
    async def accept_suggestion(self, suggestion_id: str) -> ContentRelationship:
        """
        Atomically turn a pending suggestion into an AI-suggested relationship.

        The edge goes through the same validation as ``add_relationship``;
        on failure the suggestion stays pending.

        Raises:
            SuggestionNotFoundError: If the suggestion does not exist
            GraphError: If the edge would break the hierarchy
        """
        pass
