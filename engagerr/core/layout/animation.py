"""
Frame loop and force simulation driver.

The AnimationLoop runs a step callback once per frame on an asyncio task
until the callback reports it is done or the loop is cancelled. The
ForceSimulation owns a ForceState and steps it through ``advance``.
"""

import asyncio
from collections.abc import Callable

from engagerr.core.layout.force import (
    ForceParams,
    ForceState,
    advance,
    initial_state,
    pin,
    reheat,
    unpin,
)
from engagerr.models import GraphEdge
from engagerr.utils.logger import get_logger

logger = get_logger(__name__)

# step(frame_index) -> keep running?
FrameStep = Callable[[int], bool]


class AnimationLoop:
    """Cancellable per-frame callback runner."""

    def __init__(self, step: FrameStep, frame_interval: float = 1 / 60, max_frames: int | None = None):
        """
        Initialize animation loop.

        Args:
            step: Called once per frame with the frame index; return False to stop
            frame_interval: Seconds between frames
            max_frames: Hard stop after this many frames
        """
        self._step = step
        self.frame_interval = frame_interval
        self.max_frames = max_frames
        self.frames = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop on the running event loop; no-op if already running."""
        if not self.running:
            self.frames = 0
            self._task = asyncio.create_task(self._run())

    def cancel(self) -> None:
        """Request cancellation without waiting."""
        if self._task and not self._task.done():
            self._task.cancel()

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task = self._task
        self.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def wait(self) -> None:
        """Wait for the loop to finish on its own."""
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        while self.max_frames is None or self.frames < self.max_frames:
            await asyncio.sleep(self.frame_interval)
            keep_going = self._step(self.frames)
            self.frames += 1
            if not keep_going:
                break


class ForceSimulation:
    """
    Force-directed layout running on an AnimationLoop.

    ``on_tick`` receives the node positions after every step.
    """

    def __init__(
        self,
        node_ids: list[str],
        edges: list[GraphEdge],
        params: ForceParams | None = None,
        on_tick: Callable[[dict[str, tuple[float, float]]], None] | None = None,
        frame_interval: float = 1 / 60,
        previous: dict[str, tuple[float, float]] | None = None,
    ):
        self.params = params or ForceParams()
        self.edges = edges
        self.state: ForceState = initial_state(node_ids, previous, self.params)
        self.on_tick = on_tick
        self._loop = AnimationLoop(self._frame, frame_interval=frame_interval)

    @property
    def running(self) -> bool:
        return self._loop.running

    @property
    def positions(self) -> dict[str, tuple[float, float]]:
        return self.state.as_dict()

    def tick(self) -> ForceState:
        """Advance one step synchronously."""
        self.state = advance(self.state, self.edges, self.params)
        if self.on_tick:
            self.on_tick(self.state.as_dict())
        return self.state

    def _frame(self, _frame_index: int) -> bool:
        self.tick()
        return not self.state.is_settled(self.params)

    def start(self) -> None:
        logger.debug(f"Starting force simulation for {len(self.state.ids)} nodes")
        self._loop.start()

    def cancel(self) -> None:
        self._loop.cancel()

    async def stop(self) -> None:
        await self._loop.stop()

    async def wait(self) -> None:
        await self._loop.wait()

    # ═══════════════════════════════════════════════════════════════════════
    # DRAG HANDLING
    # ═══════════════════════════════════════════════════════════════════════

    def drag_start(self, node_id: str) -> None:
        x, y = self.state.position_of(node_id)
        self.state = reheat(pin(self.state, node_id, x, y), self.params.drag_alpha_target)
        self._loop.start()

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        self.state = pin(self.state, node_id, x, y)

    def drag_end(self, node_id: str) -> None:
        self.state = reheat(unpin(self.state, node_id), 0.0)
