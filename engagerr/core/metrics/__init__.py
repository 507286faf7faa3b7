"""Family metric aggregation."""

from engagerr.core.metrics.aggregator import aggregate, with_aggregate

__all__ = ["aggregate", "with_aggregate"]
