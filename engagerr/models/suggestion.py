"""
AI relationship suggestion models.

Suggestions arrive from an external classifier. They are parsed at the
boundary into a closed tagged union, one variant per relationship kind,
discriminated on ``relationship_type``. Nothing downstream handles a raw
payload.
"""

from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from engagerr.models.relationships import (
    ContentRelationship,
    CreationMethod,
    RelationshipType,
)
from engagerr.utils.id_generator import generate_suggestion_id


class _SuggestionBase(BaseModel):
    """Fields shared by every suggestion variant."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default_factory=generate_suggestion_id)
    source_content_id: str
    suggested_content_id: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    reason: str = Field(..., description="Human-readable rationale for the suggestion")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def kind(self) -> RelationshipType:
        """Relationship type as an enum member."""
        return RelationshipType(self.relationship_type)

    def to_relationship(
        self, creation_method: CreationMethod = CreationMethod.AI_SUGGESTED
    ) -> ContentRelationship:
        """Materialize this suggestion as a relationship edge."""
        return ContentRelationship(
            source_content_id=self.source_content_id,
            target_content_id=self.suggested_content_id,
            relationship_type=self.kind,
            confidence=self.confidence,
            creation_method=creation_method,
        )


class ParentSuggestion(_SuggestionBase):
    """Source is the parent of the suggested content."""

    relationship_type: Literal["parent"] = "parent"


class ChildSuggestion(_SuggestionBase):
    """Suggested content is a child piece of the source."""

    relationship_type: Literal["child"] = "child"


class DerivativeSuggestion(_SuggestionBase):
    """Suggested content was derived (clipped, excerpted) from the source."""

    relationship_type: Literal["derivative"] = "derivative"


class RepurposedSuggestion(_SuggestionBase):
    """Suggested content repurposes the source for another platform."""

    relationship_type: Literal["repurposed"] = "repurposed"


class ReactionSuggestion(_SuggestionBase):
    """Suggested content reacts to the source."""

    relationship_type: Literal["reaction"] = "reaction"


class ReferenceSuggestion(_SuggestionBase):
    """Suggested content references the source without deriving from it."""

    relationship_type: Literal["reference"] = "reference"


ContentSuggestion = Annotated[
    ParentSuggestion
    | ChildSuggestion
    | DerivativeSuggestion
    | RepurposedSuggestion
    | ReactionSuggestion
    | ReferenceSuggestion,
    Field(discriminator="relationship_type"),
]

_suggestion_adapter: TypeAdapter[ContentSuggestion] = TypeAdapter(ContentSuggestion)
_suggestion_list_adapter: TypeAdapter[list[ContentSuggestion]] = TypeAdapter(
    list[ContentSuggestion]
)


def parse_suggestion(payload: dict[str, Any] | BaseModel) -> ContentSuggestion:
    """
    Validate a raw suggestion payload into its tagged variant.

    Raises:
        pydantic.ValidationError: If the payload is malformed or the
            relationship type is unknown
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    return _suggestion_adapter.validate_python(payload)


def parse_suggestions(payloads: list[dict[str, Any]]) -> list[ContentSuggestion]:
    """Validate a list of raw suggestion payloads."""
    return _suggestion_list_adapter.validate_python(payloads)


def dump_suggestions(suggestions: list[ContentSuggestion]) -> list[dict[str, Any]]:
    """Serialize suggestions to JSON-compatible dicts."""
    return _suggestion_list_adapter.dump_python(suggestions, mode="json")
