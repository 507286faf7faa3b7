"""
Relationship models and types for the content graph.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from engagerr.utils.id_generator import generate_relationship_id


class RelationshipType(str, Enum):
    """Semantic label on an edge between two content items."""

    PARENT = "parent"
    CHILD = "child"
    DERIVATIVE = "derivative"
    REPURPOSED = "repurposed"
    REACTION = "reaction"
    REFERENCE = "reference"


class CreationMethod(str, Enum):
    """How a relationship came into existence."""

    SYSTEM_DETECTED = "system_detected"
    AI_SUGGESTED = "ai_suggested"
    USER_DEFINED = "user_defined"
    PLATFORM_LINKED = "platform_linked"


# Types that place the target under the source in the family hierarchy.
# A content item may have at most one incoming edge of these types.
PARENT_CLASS_TYPES = frozenset(
    {
        RelationshipType.PARENT,
        RelationshipType.CHILD,
        RelationshipType.DERIVATIVE,
        RelationshipType.REPURPOSED,
        RelationshipType.REACTION,
    }
)

RELATIONSHIP_LABELS = {
    RelationshipType.PARENT: "Parent",
    RelationshipType.CHILD: "Child",
    RelationshipType.DERIVATIVE: "Derivative",
    RelationshipType.REPURPOSED: "Repurposed",
    RelationshipType.REACTION: "Reaction",
    RelationshipType.REFERENCE: "Reference",
}


def is_parent_class(relationship_type: RelationshipType) -> bool:
    """Whether edges of this type form the family hierarchy."""
    return relationship_type in PARENT_CLASS_TYPES


def relationship_label(relationship_type: RelationshipType) -> str:
    """Human-readable label for a relationship type."""
    return RELATIONSHIP_LABELS.get(relationship_type, str(relationship_type.value))


class ContentRelationship(BaseModel):
    """Directed edge: source content → target content."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_relationship_id)
    source_content_id: str
    target_content_id: str
    relationship_type: RelationshipType
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    creation_method: CreationMethod = CreationMethod.USER_DEFINED
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_parent_class(self) -> bool:
        """Whether this edge forms part of the family hierarchy."""
        return is_parent_class(self.relationship_type)

    @property
    def is_auto_detected(self) -> bool:
        """Whether the edge was created without direct user action."""
        return self.creation_method != CreationMethod.USER_DEFINED


class CreateRelationshipRequest(BaseModel):
    """Payload for creating a relationship."""

    source_content_id: str
    target_content_id: str
    relationship_type: RelationshipType


class UpdateRelationshipRequest(BaseModel):
    """Payload for updating a relationship."""

    relationship_type: RelationshipType | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
