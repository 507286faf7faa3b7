"""
Family metric aggregation.

A pure fold over every node of a family. Totals are recomputed from scratch
on each call; nothing is cached or mutated, so repeat calls on the same
family return identical results.
"""

from engagerr.models import AggregateMetrics, ContentFamily, PlatformBreakdown, PlatformType


def _percentage(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def aggregate(family: ContentFamily) -> AggregateMetrics:
    """
    Roll up metrics across a content family.

    Content without metrics counts towards content and platform totals with
    zero views and engagements.

    Args:
        family: Built content family

    Returns:
        AggregateMetrics with per-platform breakdown ordered by views
        (descending), then platform name
    """
    total_views = 0
    total_likes = 0
    total_comments = 0
    total_shares = 0
    estimated_value = 0.0

    buckets: dict[PlatformType, dict[str, int]] = {}

    for node in family.nodes:
        item = node.content
        bucket = buckets.setdefault(
            item.platform_type, {"content_count": 0, "views": 0, "engagements": 0}
        )
        bucket["content_count"] += 1

        metrics = item.metrics
        if metrics is None:
            continue

        total_views += metrics.views
        total_likes += metrics.likes
        total_comments += metrics.comments
        total_shares += metrics.shares
        if metrics.estimated_value is not None:
            estimated_value += metrics.estimated_value

        bucket["views"] += metrics.views
        bucket["engagements"] += metrics.engagements

    total_engagements = total_likes + total_comments + total_shares

    breakdown = [
        PlatformBreakdown(
            platform=platform,
            content_count=bucket["content_count"],
            views=bucket["views"],
            engagements=bucket["engagements"],
            views_percentage=_percentage(bucket["views"], total_views),
            engagements_percentage=_percentage(bucket["engagements"], total_engagements),
        )
        for platform, bucket in buckets.items()
    ]
    breakdown.sort(key=lambda b: (-b.views, b.platform.value))

    return AggregateMetrics(
        total_views=total_views,
        total_engagements=total_engagements,
        total_likes=total_likes,
        total_shares=total_shares,
        total_comments=total_comments,
        overall_engagement_rate=total_engagements / total_views if total_views else 0.0,
        estimated_total_value=estimated_value,
        platform_breakdown=breakdown,
        content_count=family.size,
        platform_count=len(buckets),
    )


def with_aggregate(family: ContentFamily) -> ContentFamily:
    """Return the family with freshly computed aggregate metrics attached."""
    return family.with_aggregate(aggregate(family))
