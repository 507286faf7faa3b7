"""
Content hierarchy construction and validation.

- build_family: Assign paths from a root and collect orphans
- validate_relationship: Single-parent DAG check shared by every write
- find_root_id: Resolve the family root of any content item
"""

from engagerr.core.hierarchy.builder import (
    build_family,
    find_cycle,
    find_root_id,
    parent_edges,
    validate_relationship,
)

__all__ = [
    "build_family",
    "find_cycle",
    "find_root_id",
    "parent_edges",
    "validate_relationship",
]
