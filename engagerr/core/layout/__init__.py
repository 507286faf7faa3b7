"""
Graph layout algorithms.

- hierarchical_layout: Pure tidy-tree placement
- advance / initial_state: Pure force-directed physics
- ForceSimulation, AnimationLoop: Frame-driven simulation runner
"""

from engagerr.core.layout.animation import AnimationLoop, ForceSimulation
from engagerr.core.layout.force import (
    ForceParams,
    ForceState,
    advance,
    initial_state,
    pin,
    reheat,
    simulate,
    unpin,
)
from engagerr.core.layout.hierarchical import hierarchical_layout

__all__ = [
    "AnimationLoop",
    "ForceSimulation",
    "ForceParams",
    "ForceState",
    "advance",
    "initial_state",
    "pin",
    "unpin",
    "reheat",
    "simulate",
    "hierarchical_layout",
]
