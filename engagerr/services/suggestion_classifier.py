"""
Heuristic relationship classifier.

Produces ContentSuggestions for one creator's content from cheap signals:
title and description word overlap, publish-time proximity and common
repurposing patterns (long-form to short-form, article to post, YouTube to
Instagram/TikTok). Stands in for an AI model behind the same suggestion
boundary.
"""

import re

from engagerr.config import SuggestionConfig
from engagerr.models import (
    LONG_FORM_TYPES,
    ContentItem,
    ContentSuggestion,
    ContentType,
    PlatformType,
    RelationshipType,
    parse_suggestion,
)
from engagerr.utils.exceptions import SuggestionBelowThresholdError
from engagerr.utils.logger import get_logger

logger = get_logger(__name__)

MAX_CONFIDENCE = 0.99

TITLE_WEIGHT = 0.3
DESCRIPTION_WEIGHT = 0.2
TIME_WEIGHT = 0.2

LONG_TO_SHORT_BONUS = 0.2
ARTICLE_TO_POST_BONUS = 0.2
YOUTUBE_TO_SHORT_PLATFORM_BONUS = 0.15
PUBLISHED_BEFORE_BONUS = 0.1
PUBLISHED_AFTER_BONUS = 0.05

_WRITTEN_TYPES = frozenset({ContentType.ARTICLE, ContentType.BLOG_POST})
_SOCIAL_POST_TYPES = frozenset({ContentType.POST, ContentType.TWEET})
_SHORT_PLATFORMS = frozenset({PlatformType.INSTAGRAM, PlatformType.TIKTOK})

_WORD = re.compile(r"[a-z0-9']+")


def significant_words(text: str | None) -> set[str]:
    """Lower-cased words longer than three characters."""
    if not text:
        return set()
    return {w for w in _WORD.findall(text.lower()) if len(w) > 3}


def word_overlap(a: str | None, b: str | None) -> float:
    """Jaccard overlap of significant words, 0 when either side is empty."""
    left, right = significant_words(a), significant_words(b)
    if not left or not right:
        return 0.0
    return len(left & right) / len(left | right)


class HeuristicSuggestionClassifier:
    """
    Scores candidate relationships between one creator's content items.

    Parent signals favour a PARENT suggestion, a later-published source
    favours REFERENCE, anything else falls back to DERIVATIVE.
    """

    def __init__(self, config: SuggestionConfig | None = None):
        """
        Initialize classifier.

        Args:
            config: Suggestion config (threshold, time window)
        """
        self.config = config or SuggestionConfig()

    def score(self, source: ContentItem, candidate: ContentItem) -> tuple[RelationshipType, float, list[str]]:
        """
        Score one ordered pair.

        Returns:
            (relationship type, confidence, human-readable reasons)
        """
        reasons: list[str] = []
        base = 0.0

        title = word_overlap(source.title, candidate.title)
        if title > 0:
            base += TITLE_WEIGHT * title
            reasons.append("Similar titles")

        description = word_overlap(source.description, candidate.description)
        if description > 0:
            base += DESCRIPTION_WEIGHT * description
            reasons.append("Similar descriptions")

        window = self.config.time_window_days
        gap_days = (candidate.published_at - source.published_at).total_seconds() / 86400
        within_window = abs(gap_days) < window
        if within_window:
            base += TIME_WEIGHT * (window - abs(gap_days)) / window
            reasons.append(f"Published {abs(gap_days):.1f} days apart")

        parent_bonus = 0.0
        if source.content_type in LONG_FORM_TYPES and candidate.content_type not in LONG_FORM_TYPES:
            parent_bonus += LONG_TO_SHORT_BONUS
            reasons.append("Long-form content commonly cut into short-form")
        if source.content_type in _WRITTEN_TYPES and candidate.content_type in _SOCIAL_POST_TYPES:
            parent_bonus += ARTICLE_TO_POST_BONUS
            reasons.append("Article commonly promoted through social posts")
        if source.platform_type == PlatformType.YOUTUBE and candidate.platform_type in _SHORT_PLATFORMS:
            parent_bonus += YOUTUBE_TO_SHORT_PLATFORM_BONUS
            reasons.append("YouTube content commonly repurposed to short-form platforms")

        reference_bonus = 0.0
        if within_window and gap_days > 0:
            parent_bonus += PUBLISHED_BEFORE_BONUS
        elif within_window and gap_days < 0:
            reference_bonus += PUBLISHED_AFTER_BONUS

        if parent_bonus > 0:
            relationship_type = RelationshipType.PARENT
            confidence = base + parent_bonus
        elif reference_bonus > 0:
            relationship_type = RelationshipType.REFERENCE
            confidence = base + reference_bonus
        else:
            relationship_type = RelationshipType.DERIVATIVE
            confidence = base

        return relationship_type, min(MAX_CONFIDENCE, confidence), reasons

    def _check_threshold(self, suggestion: ContentSuggestion, threshold: float) -> None:
        if suggestion.confidence < threshold:
            raise SuggestionBelowThresholdError(
                f"Suggestion {suggestion.id} below threshold",
                context={"confidence": suggestion.confidence, "threshold": threshold},
            )

    def classify(
        self,
        source: ContentItem,
        candidates: list[ContentItem],
        confidence_threshold: float | None = None,
    ) -> list[ContentSuggestion]:
        """
        Suggest relationships from ``source`` to each candidate.

        Candidates from other creators, and the source itself, are skipped.

        Args:
            source: Content to find relatives for
            candidates: Other content by the same creator
            confidence_threshold: Minimum confidence to keep

        Returns:
            Suggestions sorted by confidence, highest first
        """
        threshold = (
            self.config.default_confidence_threshold
            if confidence_threshold is None
            else confidence_threshold
        )

        suggestions: list[ContentSuggestion] = []
        for candidate in candidates:
            if candidate.id == source.id or candidate.creator_id != source.creator_id:
                continue

            relationship_type, confidence, reasons = self.score(source, candidate)
            suggestion = parse_suggestion(
                {
                    "source_content_id": source.id,
                    "suggested_content_id": candidate.id,
                    "relationship_type": relationship_type.value,
                    "confidence": confidence,
                    "reason": "; ".join(reasons) or "Same creator",
                }
            )
            try:
                self._check_threshold(suggestion, threshold)
            except SuggestionBelowThresholdError as e:
                logger.debug(f"Dropping {candidate.id}: {e.message}")
                continue
            suggestions.append(suggestion)

        suggestions.sort(key=lambda s: (-s.confidence, s.suggested_content_id))
        logger.debug(f"Classified {len(suggestions)} suggestions for {source.id}")
        return suggestions
