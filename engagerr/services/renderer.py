"""
Interactive content graph renderer.

GraphRenderer is an explicit state container for one content family view:
it fetches the family, projects it through the visualization adapter, runs
the layout and tracks viewport, selection and collapse state. All mutable
view state lives here; layout and projection are pure functions.

States:
    IDLE -> LOADING -> READY <-> (ZOOMING | PANNING | DRAGGING | NODE_SELECTED)
    LOADING -> ERROR (fetch failure), READY -> ERROR (render failure),
    ERROR -> LOADING (retry)
"""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from engagerr.config import Config
from engagerr.core.hierarchy import build_family
from engagerr.core.layout import AnimationLoop, ForceParams, ForceSimulation, hierarchical_layout
from engagerr.core.metrics import aggregate
from engagerr.core.visualization import to_graph_data
from engagerr.models import (
    ContentFamily,
    ContentRelationship,
    ContentSuggestion,
    CreateRelationshipRequest,
    GraphData,
    GraphEdge,
    GraphNode,
    LayoutType,
    VisualizationOptions,
)
from engagerr.services.client import EngagerrClient
from engagerr.utils.exceptions import (
    EngagerrError,
    FetchFailureError,
    GraphError,
    InvalidStateTransitionError,
    MutationInProgressError,
    RenderFailureError,
)
from engagerr.utils.logger import get_logger


class RendererState(str, Enum):
    """Lifecycle and interaction states of the renderer."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ZOOMING = "zooming"
    PANNING = "panning"
    DRAGGING = "dragging"
    NODE_SELECTED = "node_selected"
    ERROR = "error"


_S = RendererState
_GESTURES = frozenset({_S.ZOOMING, _S.PANNING, _S.DRAGGING})

TRANSITIONS: dict[RendererState, frozenset[RendererState]] = {
    _S.IDLE: frozenset({_S.LOADING}),
    _S.LOADING: frozenset({_S.LOADING, _S.READY, _S.NODE_SELECTED, _S.ERROR}),
    _S.READY: frozenset(
        {_S.LOADING, _S.ZOOMING, _S.PANNING, _S.DRAGGING, _S.NODE_SELECTED, _S.ERROR}
    ),
    _S.NODE_SELECTED: frozenset(
        {_S.LOADING, _S.READY, _S.ZOOMING, _S.PANNING, _S.DRAGGING, _S.NODE_SELECTED, _S.ERROR}
    ),
    _S.ZOOMING: frozenset({_S.ZOOMING, _S.READY, _S.NODE_SELECTED, _S.LOADING, _S.ERROR}),
    _S.PANNING: frozenset({_S.READY, _S.NODE_SELECTED, _S.LOADING, _S.ERROR}),
    _S.DRAGGING: frozenset({_S.READY, _S.NODE_SELECTED, _S.LOADING, _S.ERROR}),
    _S.ERROR: frozenset({_S.LOADING}),
}


class ViewTransform(BaseModel):
    """Viewport translation and scale."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    @classmethod
    def identity(cls) -> "ViewTransform":
        return cls()

    def interpolate(self, target: "ViewTransform", t: float) -> "ViewTransform":
        return ViewTransform(
            x=self.x + (target.x - self.x) * t,
            y=self.y + (target.y - self.y) * t,
            k=self.k + (target.k - self.k) * t,
        )


class GraphViewProps(BaseModel):
    """Inputs to one graph view."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    content_id: str
    options: VisualizationOptions = Field(default_factory=VisualizationOptions)
    confidence_threshold: float | None = None
    on_node_click: Callable[[GraphNode], Any] | None = None
    on_edge_click: Callable[[GraphEdge], Any] | None = None


class MutationResult(BaseModel):
    """Outcome of a structural edit submitted from the view."""

    ok: bool
    reason: str | None = None
    error_type: str | None = None
    relationship: ContentRelationship | None = None


class GraphRenderer:
    """
    State container for an interactive content family graph.

    Only the most recent load is applied; a response to any earlier request,
    or any request in flight when the renderer is closed, is discarded.
    """

    def __init__(
        self, props: GraphViewProps, client: EngagerrClient, config: Config | None = None
    ):
        """
        Initialize renderer.

        Args:
            props: View inputs (content id, options, callbacks)
            client: API client used for fetches and mutations
            config: Renderer and layout configuration
        """
        self.props = props
        self.client = client
        self.config = config or Config()

        self.state = RendererState.IDLE
        self.family: ContentFamily | None = None
        self.graph = GraphData.empty()
        self.positions: dict[str, tuple[float, float]] = {}
        self.transform = ViewTransform.identity()
        self.collapsed: set[str] = set()
        self.selected_id: str | None = None
        self.suggestions: list[ContentSuggestion] = []
        self.error: EngagerrError | None = None

        self._request_token = 0
        self._suggestion_token = 0
        self._mutation_pending = False
        self._closed = False
        self._simulation: ForceSimulation | None = None
        self._zoom_loop: AnimationLoop | None = None
        self.logger = get_logger(__name__, content_id=props.content_id)

    # ═══════════════════════════════════════════════════════════
    # STATE MACHINE
    # ═══════════════════════════════════════════════════════════

    def _transition(self, target: RendererState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidStateTransitionError(
                f"Cannot move renderer from {self.state.value} to {target.value}",
                context={"from": self.state.value, "to": target.value},
            )
        self.state = target

    @property
    def resting_state(self) -> RendererState:
        """State to return to once a gesture ends."""
        return RendererState.NODE_SELECTED if self.selected_id else RendererState.READY

    def _settle(self) -> None:
        if self.state in _GESTURES:
            self._transition(self.resting_state)

    def _fail(self, error: EngagerrError) -> None:
        self.logger.warning(f"Renderer entered error state: {error.message}")
        self.error = error
        if self.state != RendererState.ERROR:
            self._transition(RendererState.ERROR)

    @property
    def mutation_pending(self) -> bool:
        return self._mutation_pending

    # ═══════════════════════════════════════════════════════════
    # LOADING
    # ═══════════════════════════════════════════════════════════

    async def load(self) -> None:
        """
        Fetch the family and render it.

        Later calls supersede earlier ones still in flight.
        """
        if self._closed:
            return

        self._request_token += 1
        token = self._request_token
        self._transition(RendererState.LOADING)

        try:
            snapshot = await self.client.get_family_snapshot(self.props.content_id)
        except EngagerrError as e:
            if token == self._request_token and not self._closed:
                self._fail(e)
            return

        if token != self._request_token or self._closed:
            self.logger.debug(f"Discarding stale family response (request {token})")
            return

        try:
            family = build_family(snapshot.root_id, snapshot.items, snapshot.relationships)
        except GraphError as e:
            self._fail(e)
            return

        self.error = None
        self._apply_family(family.with_aggregate(aggregate(family)))
        if self.state == RendererState.LOADING:
            self._transition(self.resting_state)

    async def retry(self) -> None:
        """Reload after an error."""
        if self.state != RendererState.ERROR:
            raise InvalidStateTransitionError(
                "Retry is only possible from the error state",
                context={"from": self.state.value},
            )
        await self.load()

    async def load_suggestions(self) -> list[ContentSuggestion]:
        """Fetch pending suggestions; a failed fetch keeps the current list."""
        if self._closed:
            return self.suggestions

        self._suggestion_token += 1
        token = self._suggestion_token
        try:
            suggestions = await self.client.list_suggestions(
                self.props.content_id, self.props.confidence_threshold
            )
        except FetchFailureError as e:
            self.logger.warning(f"Could not load suggestions: {e.message}")
            return self.suggestions

        if token == self._suggestion_token and not self._closed:
            self.suggestions = suggestions
        return self.suggestions

    async def close(self) -> None:
        """Stop animations and discard in-flight requests."""
        self._closed = True
        self._request_token += 1
        self._suggestion_token += 1
        await self._stop_simulation()
        if self._zoom_loop is not None:
            await self._zoom_loop.stop()
            self._zoom_loop = None

    # ═══════════════════════════════════════════════════════════
    # RENDERING
    # ═══════════════════════════════════════════════════════════

    def _apply_family(self, family: ContentFamily) -> None:
        self._cancel_simulation()
        self.family = family
        self.collapsed &= {node.id for node in family.nodes}
        if self.selected_id and self.selected_id not in family:
            self.selected_id = None
        self._render()

    def _render(self) -> None:
        """Regenerate graph and layout; any failure degrades to an empty graph."""
        if self.family is None:
            return
        try:
            self.graph = to_graph_data(self.family, self.props.options, self.collapsed)
            self._layout()
        except RenderFailureError as e:
            self._render_failed(e)
        except Exception as e:
            self._render_failed(
                RenderFailureError(f"Rendering failed: {e}", context={"family_id": self.family.id})
            )

    def _render_failed(self, error: RenderFailureError) -> None:
        self._cancel_simulation()
        self.graph = GraphData.empty()
        self.positions = {}
        self._fail(error)

    def _layout(self) -> None:
        options = self.props.options
        if options.layout == LayoutType.HIERARCHICAL:
            self.positions = hierarchical_layout(
                self.graph,
                node_spacing=options.node_spacing,
                rank_spacing=options.rank_spacing,
                direction=options.direction,
            )
            return

        self._cancel_simulation()
        layout = self.config.layout
        self._simulation = ForceSimulation(
            node_ids=[n.id for n in self.graph.nodes],
            edges=self.graph.edges,
            params=ForceParams(
                link_distance=layout.link_distance,
                charge_strength=layout.charge_strength,
                velocity_decay=layout.velocity_decay,
                alpha_min=layout.alpha_min,
                alpha_decay=layout.alpha_decay,
                drag_alpha_target=layout.drag_alpha_target,
            ),
            on_tick=self._on_tick,
            frame_interval=self.config.renderer.frame_interval,
            previous=self.positions,
        )
        self.positions = self._simulation.positions
        self._simulation.start()

    def _on_tick(self, positions: dict[str, tuple[float, float]]) -> None:
        self.positions = positions

    def _cancel_simulation(self) -> None:
        if self._simulation is not None:
            self._simulation.cancel()

    async def _stop_simulation(self) -> None:
        if self._simulation is not None:
            await self._simulation.stop()
            self._simulation = None

    @property
    def simulation(self) -> ForceSimulation | None:
        return self._simulation

    @property
    def nodes(self) -> list[GraphNode]:
        """Visible nodes with their current positions."""
        placed = []
        for node in self.graph.nodes:
            x, y = self.positions.get(node.id, (node.x, node.y))
            placed.append(node.model_copy(update={"x": x, "y": y}))
        return placed

    @property
    def edges(self) -> list[GraphEdge]:
        return list(self.graph.edges)

    # ═══════════════════════════════════════════════════════════
    # ZOOM AND PAN
    # ═══════════════════════════════════════════════════════════

    def _clamp_zoom(self, k: float) -> float:
        renderer = self.config.renderer
        return min(renderer.max_zoom, max(renderer.min_zoom, k))

    def zoom_to(self, k: float, animate: bool = True) -> None:
        """Zoom about the origin to scale ``k`` (clamped to the zoom bounds)."""
        k = self._clamp_zoom(k)
        current = self.transform
        ratio = k / current.k
        target = ViewTransform(x=current.x * ratio, y=current.y * ratio, k=k)
        self._animate_to(target, animate)

    def zoom_in(self, animate: bool = True) -> None:
        self.zoom_to(self.transform.k * self.config.renderer.zoom_step, animate)

    def zoom_out(self, animate: bool = True) -> None:
        self.zoom_to(self.transform.k / self.config.renderer.zoom_step, animate)

    def reset_zoom(self, animate: bool = True) -> None:
        self._animate_to(ViewTransform.identity(), animate)

    def _animate_to(self, target: ViewTransform, animate: bool) -> None:
        self._transition(RendererState.ZOOMING)
        if self._zoom_loop is not None:
            self._zoom_loop.cancel()

        if not animate:
            self.transform = target
            self._settle()
            return

        start = self.transform
        frames = self.config.renderer.transition_frames

        def step(frame: int) -> bool:
            t = (frame + 1) / frames
            self.transform = start.interpolate(target, t) if t < 1 else target
            if t >= 1:
                self._settle()
                return False
            return True

        self._zoom_loop = AnimationLoop(
            step, frame_interval=self.config.renderer.frame_interval, max_frames=frames
        )
        self._zoom_loop.start()

    async def wait_for_transition(self) -> None:
        """Wait for a running zoom animation to finish."""
        if self._zoom_loop is not None:
            await self._zoom_loop.wait()

    def begin_pan(self) -> None:
        self._transition(RendererState.PANNING)

    def pan_by(self, dx: float, dy: float) -> None:
        if self.state != RendererState.PANNING:
            raise InvalidStateTransitionError("pan_by called outside a pan gesture")
        self.transform = self.transform.model_copy(
            update={"x": self.transform.x + dx, "y": self.transform.y + dy}
        )

    def end_pan(self) -> None:
        self._settle()

    # ═══════════════════════════════════════════════════════════
    # DRAG
    # ═══════════════════════════════════════════════════════════

    def begin_drag(self, node_id: str) -> None:
        if node_id not in self.positions:
            raise KeyError(node_id)
        self._transition(RendererState.DRAGGING)
        if self._simulation is not None:
            self._simulation.drag_start(node_id)

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        if self.state != RendererState.DRAGGING:
            raise InvalidStateTransitionError("drag_to called outside a drag gesture")
        if self._simulation is not None:
            self._simulation.drag_to(node_id, x, y)
        self.positions = {**self.positions, node_id: (x, y)}

    def end_drag(self, node_id: str) -> None:
        if self._simulation is not None:
            self._simulation.drag_end(node_id)
        self._settle()

    # ═══════════════════════════════════════════════════════════
    # SELECTION AND COLLAPSE
    # ═══════════════════════════════════════════════════════════

    def click_node(self, node_id: str) -> GraphNode | None:
        """
        Select a node, notify ``on_node_click`` and toggle its subtree.

        Returns:
            The clicked node, or None if it is not visible
        """
        node = self.graph.node(node_id)
        if node is None:
            return None

        self.selected_id = node_id
        self._transition(RendererState.NODE_SELECTED)
        if self.props.on_node_click:
            self.props.on_node_click(node)
        if self.family is not None and self.family.has_descendants(node_id):
            self.toggle_collapse(node_id)
        return node

    def clear_selection(self) -> None:
        self.selected_id = None
        if self.state == RendererState.NODE_SELECTED:
            self._transition(RendererState.READY)

    def click_edge(self, edge_id: str) -> GraphEdge | None:
        edge = self.graph.edge(edge_id)
        if edge is not None and self.props.on_edge_click:
            self.props.on_edge_click(edge)
        return edge

    def toggle_collapse(self, node_id: str) -> bool:
        """
        Collapse or expand the subtree under ``node_id``.

        Returns:
            True if the node is now collapsed
        """
        if node_id in self.collapsed:
            self.collapsed.discard(node_id)
        else:
            self.collapsed.add(node_id)
        self._render()
        return node_id in self.collapsed

    def expand_all(self) -> None:
        self.collapsed.clear()
        self._render()

    # ═══════════════════════════════════════════════════════════
    # MUTATIONS
    # ═══════════════════════════════════════════════════════════

    async def _mutate(
        self,
        action: Callable[[], Awaitable[ContentRelationship | None]],
        optimistic_remove: str | None = None,
    ) -> MutationResult:
        if self._mutation_pending:
            raise MutationInProgressError(
                "Another change to this family is still being saved",
                context={"content_id": self.props.content_id},
            )

        self._mutation_pending = True
        previous = list(self.suggestions)
        if optimistic_remove is not None:
            self.suggestions = [s for s in self.suggestions if s.id != optimistic_remove]

        try:
            relationship = await action()
        except EngagerrError as e:
            self.suggestions = previous
            self.logger.warning(f"Change rejected: {e.message}")
            return MutationResult(ok=False, reason=e.message, error_type=e.error_type)
        except Exception:
            self.suggestions = previous
            raise
        finally:
            self._mutation_pending = False

        await self.load()
        return MutationResult(ok=True, relationship=relationship)

    async def approve_suggestion(self, suggestion: ContentSuggestion) -> MutationResult:
        return await self._mutate(
            lambda: self.client.approve_suggestion(suggestion.id), optimistic_remove=suggestion.id
        )

    async def reject_suggestion(self, suggestion: ContentSuggestion) -> MutationResult:
        return await self._mutate(
            lambda: self.client.reject_suggestion(suggestion.id), optimistic_remove=suggestion.id
        )

    async def create_relationship(self, request: CreateRelationshipRequest) -> MutationResult:
        return await self._mutate(lambda: self.client.create_relationship(request))

    async def delete_relationship(self, relationship_id: str) -> MutationResult:
        return await self._mutate(lambda: self.client.delete_relationship(relationship_id))
