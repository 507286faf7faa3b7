"""
AI suggestion engine.

Surfaces pending relationship suggestions and resolves them. Approval goes
through the store's validated write, so a suggestion can never introduce an
edge the graph builder would reject.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from engagerr.config import Config
from engagerr.core.relationship_store import RelationshipStore
from engagerr.models import (
    ContentItem,
    ContentRelationship,
    ContentSuggestion,
    parse_suggestion,
)
from engagerr.services.suggestion_classifier import HeuristicSuggestionClassifier
from engagerr.utils.exceptions import GraphError, ValidationError
from engagerr.utils.logger import get_logger

logger = get_logger(__name__)


def _suggestion_id(suggestion: ContentSuggestion | str) -> str:
    return suggestion if isinstance(suggestion, str) else suggestion.id


class SuggestionEngine:
    """
    Lists, ingests, approves and rejects relationship suggestions.
    """

    def __init__(
        self,
        store: RelationshipStore,
        config: Config | None = None,
        classifier: HeuristicSuggestionClassifier | None = None,
    ):
        """
        Initialize suggestion engine.

        Args:
            store: Relationship store holding pending suggestions
            config: Configuration (thresholds, limits)
            classifier: Producer used by ``generate``
        """
        self.store = store
        self.config = config or Config()
        self.classifier = classifier or HeuristicSuggestionClassifier(self.config.suggestions)

    async def list_suggestions(
        self,
        content_id: str,
        confidence_threshold: float | None = None,
        limit: int | None = None,
    ) -> list[ContentSuggestion]:
        """
        Pending suggestions for a content item.

        Args:
            content_id: Content on either end of the suggestion
            confidence_threshold: Minimum confidence (default from config)
            limit: Maximum results (default from config)

        Returns:
            Suggestions sorted by confidence, highest first

        Raises:
            ValidationError: If the threshold is outside [0, 1] or limit < 1
        """
        threshold = (
            self.config.suggestions.default_confidence_threshold
            if confidence_threshold is None
            else confidence_threshold
        )
        limit = self.config.suggestions.max_suggestions if limit is None else limit

        if not 0.0 <= threshold <= 1.0:
            raise ValidationError(
                f"Confidence threshold must be between 0 and 1, got {threshold}",
                context={"confidence_threshold": threshold},
            )
        if limit < 1:
            raise ValidationError(f"Limit must be positive, got {limit}", context={"limit": limit})

        return await self.store.list_suggestions(content_id, threshold, limit)

    async def approve(self, suggestion: ContentSuggestion | str) -> ContentRelationship:
        """
        Accept a suggestion as an AI-suggested relationship.

        Raises:
            SuggestionNotFoundError: If the suggestion is no longer pending
            GraphError: If the edge would break the hierarchy; the suggestion
                stays pending
        """
        suggestion_id = _suggestion_id(suggestion)
        try:
            relationship = await self.store.accept_suggestion(suggestion_id)
        except GraphError as e:
            logger.warning(f"Rejected approval of {suggestion_id}: {e.message}")
            raise

        logger.info(f"Approved suggestion {suggestion_id} as relationship {relationship.id}")
        return relationship

    async def reject(self, suggestion: ContentSuggestion | str) -> None:
        """
        Discard a suggestion. It may be suggested again later.

        Raises:
            SuggestionNotFoundError: If the suggestion is no longer pending
        """
        suggestion_id = _suggestion_id(suggestion)
        await self.store.delete_suggestion(suggestion_id)
        logger.info(f"Rejected suggestion {suggestion_id}")

    async def ingest(self, payloads: list[dict[str, Any] | ContentSuggestion]) -> list[ContentSuggestion]:
        """
        Validate classifier output at the boundary and store it as pending.

        Self-suggestions are dropped.

        Raises:
            ValidationError: If any payload is malformed
        """
        suggestions: list[ContentSuggestion] = []
        for index, payload in enumerate(payloads):
            try:
                suggestion = parse_suggestion(payload)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"Invalid suggestion at index {index}: {e.error_count()} error(s)",
                    context={
                        "index": index,
                        "errors": e.errors(
                            include_url=False, include_context=False, include_input=False
                        ),
                    },
                ) from e
            if suggestion.source_content_id == suggestion.suggested_content_id:
                logger.debug(f"Dropping self-suggestion {suggestion.id}")
                continue
            suggestions.append(suggestion)

        if suggestions:
            await self.store.add_suggestions(suggestions)
        logger.info(f"Ingested {len(suggestions)} suggestions")
        return suggestions

    async def generate(
        self, source: ContentItem, candidates: list[ContentItem]
    ) -> list[ContentSuggestion]:
        """Run the heuristic classifier and ingest its output."""
        suggestions = self.classifier.classify(source, candidates)
        return await self.ingest(suggestions)
