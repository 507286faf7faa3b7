"""
Force-directed layout physics.

A velocity-Verlet style simulation modelled on the classic link / many-body
/ centering force trio. ``advance`` is pure: it takes a state and returns the
next one, so the physics can be stepped and tested without a render loop.
"""

import math

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from engagerr.models import GraphEdge

# Golden-angle spiral used for initial placement
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


class ForceParams(BaseModel):
    """Tuning for the force simulation."""

    model_config = ConfigDict(frozen=True)

    link_distance: float = Field(default=100.0, gt=0)
    default_link_strength: float = Field(default=0.5, ge=0.0)
    charge_strength: float = -50.0
    charge_distance_min: float = Field(default=1.0, gt=0)
    center_x: float = 0.0
    center_y: float = 0.0
    velocity_decay: float = Field(default=0.4, ge=0.0, le=1.0)
    alpha_min: float = Field(default=0.001, gt=0)
    alpha_decay: float = Field(default=1 - 0.001 ** (1 / 300), ge=0.0, le=1.0)
    drag_alpha_target: float = Field(default=0.3, ge=0.0, le=1.0)


class ForceState(BaseModel):
    """Positions, velocities and heat of a running simulation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ids: list[str]
    positions: np.ndarray
    velocities: np.ndarray
    alpha: float = 1.0
    alpha_target: float = 0.0
    # id -> pinned (x, y); pinned nodes ignore forces
    pinned: dict[str, tuple[float, float]] = Field(default_factory=dict)

    def index(self, node_id: str) -> int:
        return self.ids.index(node_id)

    def position_of(self, node_id: str) -> tuple[float, float]:
        x, y = self.positions[self.index(node_id)]
        return float(x), float(y)

    def as_dict(self) -> dict[str, tuple[float, float]]:
        return {nid: (float(x), float(y)) for nid, (x, y) in zip(self.ids, self.positions, strict=True)}

    def is_settled(self, params: ForceParams) -> bool:
        return self.alpha < params.alpha_min and self.alpha_target < params.alpha_min


def initial_state(
    ids: list[str],
    previous: dict[str, tuple[float, float]] | None = None,
    params: ForceParams | None = None,
) -> ForceState:
    """
    Seed a simulation.

    Nodes with a known previous position keep it; new nodes are placed on a
    phyllotaxis spiral around the center.
    """
    params = params or ForceParams()
    previous = previous or {}
    positions = np.zeros((len(ids), 2), dtype=float)
    for i, node_id in enumerate(ids):
        if node_id in previous:
            positions[i] = previous[node_id]
            continue
        radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
        angle = i * INITIAL_ANGLE
        positions[i] = (
            params.center_x + radius * math.cos(angle),
            params.center_y + radius * math.sin(angle),
        )
    return ForceState(
        ids=list(ids),
        positions=positions,
        velocities=np.zeros_like(positions),
    )


def _apply_links(
    positions: np.ndarray,
    velocities: np.ndarray,
    index: dict[str, int],
    edges: list[GraphEdge],
    params: ForceParams,
    alpha: float,
) -> None:
    links = [
        (
            index[e.source],
            index[e.target],
            e.confidence if e.confidence is not None else params.default_link_strength,
        )
        for e in edges
        if e.source in index and e.target in index and e.source != e.target
    ]
    if not links:
        return

    degree = np.zeros(len(positions))
    for s, t, _ in links:
        degree[s] += 1
        degree[t] += 1

    for s, t, strength in links:
        delta = (positions[t] + velocities[t]) - (positions[s] + velocities[s])
        length = float(np.hypot(*delta))
        if length == 0.0:
            # Deterministic nudge for coincident endpoints
            delta = np.array([1e-6, 1e-6])
            length = float(np.hypot(*delta))
        factor = (length - params.link_distance) / length * alpha * strength
        delta = delta * factor
        bias = degree[s] / (degree[s] + degree[t])
        velocities[t] -= delta * bias
        velocities[s] += delta * (1 - bias)


def _apply_charge(
    positions: np.ndarray, velocities: np.ndarray, params: ForceParams, alpha: float
) -> None:
    if len(positions) < 2:
        return
    # diff[i, j] = positions[j] - positions[i]
    diff = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    dist_sq = np.sum(diff**2, axis=-1)
    dist_sq = np.maximum(dist_sq, params.charge_distance_min**2)
    np.fill_diagonal(dist_sq, np.inf)
    velocities += np.sum(diff * (params.charge_strength * alpha / dist_sq)[..., np.newaxis], axis=1)


def _apply_center(positions: np.ndarray, params: ForceParams) -> None:
    if len(positions) == 0:
        return
    shift = positions.mean(axis=0) - np.array([params.center_x, params.center_y])
    positions -= shift


def advance(
    state: ForceState, edges: list[GraphEdge], params: ForceParams, dt: float = 1.0
) -> ForceState:
    """
    Step the simulation once.

    Args:
        state: Current state, left untouched
        edges: Springs between nodes; strength is the edge confidence
        params: Force tuning
        dt: Integration step in ticks

    Returns:
        The next state
    """
    alpha = state.alpha + (state.alpha_target - state.alpha) * params.alpha_decay
    positions = state.positions.copy()
    velocities = state.velocities.copy()
    index = {node_id: i for i, node_id in enumerate(state.ids)}

    _apply_links(positions, velocities, index, edges, params, alpha)
    _apply_charge(positions, velocities, params, alpha)

    velocities *= 1 - params.velocity_decay
    positions += velocities * dt
    _apply_center(positions, params)

    for node_id, (x, y) in state.pinned.items():
        if node_id in index:
            positions[index[node_id]] = (x, y)
            velocities[index[node_id]] = (0.0, 0.0)

    return state.model_copy(update={"positions": positions, "velocities": velocities, "alpha": alpha})


def pin(state: ForceState, node_id: str, x: float, y: float) -> ForceState:
    """Fix a node in place (drag)."""
    return state.model_copy(update={"pinned": {**state.pinned, node_id: (x, y)}})


def unpin(state: ForceState, node_id: str) -> ForceState:
    pinned = {k: v for k, v in state.pinned.items() if k != node_id}
    return state.model_copy(update={"pinned": pinned})


def reheat(state: ForceState, alpha_target: float, alpha: float | None = None) -> ForceState:
    """Change the target heat, optionally restarting the simulation."""
    update: dict = {"alpha_target": alpha_target}
    if alpha is not None:
        update["alpha"] = alpha
    return state.model_copy(update=update)


def simulate(
    state: ForceState, edges: list[GraphEdge], params: ForceParams, max_ticks: int = 300
) -> ForceState:
    """Run ``advance`` until the simulation cools or ``max_ticks`` elapse."""
    for _ in range(max_ticks):
        if state.is_settled(params):
            break
        state = advance(state, edges, params)
    return state
