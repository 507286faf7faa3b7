"""
ID generation utilities for Engagerr.

Provides consistent ID generation for graph entities:
- Relationships: rel_xxx
- Suggestions: sug_xxx
- Content items ingested without a platform id: content_xxx
"""

from uuid import uuid4


def generate_relationship_id() -> str:
    """
    Generate unique ContentRelationship ID.

    Returns:
        ID in format "rel_xxx" where xxx is 12 hex characters
    """
    return f"rel_{uuid4().hex[:12]}"


def generate_suggestion_id() -> str:
    """
    Generate unique ContentSuggestion ID.

    Returns:
        ID in format "sug_xxx" where xxx is 12 hex characters
    """
    return f"sug_{uuid4().hex[:12]}"


def generate_content_id() -> str:
    """
    Generate unique ContentItem ID.

    Returns:
        ID in format "content_xxx" where xxx is 12 hex characters
    """
    return f"content_{uuid4().hex[:12]}"
