"""
Grid container and grid cells.

A GridCell binds its content's size into every slot of its span and reads
its own position back from the resulting slot geometry. Retargeting a cell
to a new coordinate blends between the old and new slot positions with a
shift weight instead of interpolating the coordinate, so the position stays
continuous while the slot sizes themselves are changing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from adagrid import CellHandle, GridArrayCell, GridManager
from grid_types import CoordLike, GridSettings, Point, Span, check_effect, parse_coord
from reactive import Signal, computed
from tween import Task, TimingFunction, ease_in_out_cubic, tween

logger = logging.getLogger(__name__)


# =============================================================================
# Nodes
# =============================================================================


class Node:
    """Minimal tree node: a parent, ordered children and a position."""

    def __init__(self, children: Iterable[Node] = (), name: str | None = None) -> None:
        self.name = name or type(self).__name__
        self.parent: Node | None = None
        self.children: list[Node] = []
        self.position: Signal[Point] = Signal(Point(0.0, 0.0), name=f"{self.name}.position")
        Node.insert(self, list(children), len(self.children))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def insert(self, node: Node | Sequence[Node], index: int = 0) -> Node:
        nodes = list(node) if isinstance(node, (list, tuple)) else [node]
        for child in nodes:
            if child.parent is self:
                # Reordering within this node; subclass remove hooks must not run
                Node.remove(self, child)
            elif child.parent is not None:
                child.parent.remove(child)
            child.parent = self
        self.children[index:index] = nodes
        return self

    def add(self, node: Node | Sequence[Node]) -> Node:
        return self.insert(node, len(self.children))

    def remove(self, node: Node) -> Node:
        self.children.remove(node)
        node.parent = None
        return self


class Box(Node):
    """Content with a size, the thing a grid cell measures."""

    def __init__(
        self,
        size: float | tuple[float, float] = 100,
        children: Iterable[Node] = (),
        name: str | None = None,
    ) -> None:
        super().__init__(children, name)
        if not isinstance(size, tuple):
            size = (size, size)
        self.size: Signal[tuple[float, float]] = Signal(size, name=f"{self.name}.size")


# =============================================================================
# Grid container
# =============================================================================


class CenteredGrid(Node):
    """
    A node holding a GridManager. Its size follows the grid's total extent
    and any GridCell inserted into it is bound to the grid first.
    """

    def __init__(
        self,
        settings: GridSettings,
        children: Iterable[Node] = (),
        show_coords: bool = False,
        name: str | None = None,
    ) -> None:
        super().__init__(children, name)
        self.manager = GridManager(settings)
        self.show_coords = show_coords
        self.width: Signal[float] = Signal(self.manager.get_total_width, name=f"{self.name}.width")
        self.height: Signal[float] = Signal(self.manager.get_total_height, name=f"{self.name}.height")
        for child in self.children:
            if isinstance(child, GridCell):
                child.setup(self)

    def cells(self) -> list[GridCell]:
        return [child for child in self.children if isinstance(child, GridCell)]

    def insert(self, node: Node | Sequence[Node], index: int = 0) -> Node:
        nodes = list(node) if isinstance(node, (list, tuple)) else [node]
        for child in nodes:
            if isinstance(child, GridCell):
                child.setup(self)
        return super().insert(nodes, index)

    def remove(self, node: Node) -> Node:
        if isinstance(node, GridCell) and node.grid is self:
            node.teardown()
        return super().remove(node)


class CenteredGridWithGridlines(CenteredGrid):
    """A CenteredGrid that also exposes the line segments between its slots."""

    @computed
    def column_lines(self) -> tuple[tuple[Point, Point], ...]:
        rows = self.manager.row_amount
        return tuple(
            (self.manager.get_corner_position(col, 0), self.manager.get_corner_position(col, rows))
            for col in range(self.manager.column_amount + 1)
        )

    @computed
    def row_lines(self) -> tuple[tuple[Point, Point], ...]:
        cols = self.manager.column_amount
        return tuple(
            (self.manager.get_corner_position(0, row), self.manager.get_corner_position(cols, row))
            for row in range(self.manager.row_amount + 1)
        )

    def gridlines(self) -> tuple[tuple[Point, Point], ...]:
        return self.column_lines() + self.row_lines()


# =============================================================================
# Grid cells
# =============================================================================

DemandPair = tuple[GridArrayCell, GridArrayCell]


@dataclass
class Transition:
    """The binding a retarget is moving away from."""

    span: Span
    pair: DemandPair
    handles: list[CellHandle]


class GridCell(Node):
    """
    One placed element, covering a single slot or a span of slots.

    The content size is split evenly over the span, and that per-slot demand
    is registered in every slot the span covers, weighted by
    combined_effect = shift * effect. At rest shift is 1.

    During tween_coord the previous demand pair stays in the old span with
    combined_effect while the new pair enters the new span with
    incoming_effect = (1 - shift) * effect, and shift runs from 1 to 0.
    At shift 0 the incoming effect equals the resting combined_effect, so
    finishing the transition changes no value.
    """

    def __init__(
        self,
        coord: CoordLike | Span,
        content: Box | None = None,
        effect: float | Callable[[], float] = 1.0,
        name: str | None = None,
    ) -> None:
        check_effect(effect)
        self.layout = content if content is not None else Box()
        super().__init__([self.layout], name)
        self.coord: Signal[Span] = Signal(parse_coord(coord), name=f"{self.name}.coord")
        self.effect: Signal[float] = Signal(effect, name=f"{self.name}.effect")
        self.shift: Signal[float] = Signal(1.0, name=f"{self.name}.shift")
        self.combined_effect: Signal[float] = Signal(
            lambda: self.shift() * self.effect(), name=f"{self.name}.combined_effect"
        )
        self.incoming_effect: Signal[float] = Signal(
            lambda: (1 - self.shift()) * self.effect(), name=f"{self.name}.incoming_effect"
        )
        self.grid: CenteredGrid | None = None
        self._pair: DemandPair | None = None
        self._handles: list[CellHandle] = []
        self._transition: Transition | None = None

    @property
    def transitioning(self) -> bool:
        return self._transition is not None

    def coord_label(self) -> str:
        return self.coord().label()

    # -------------------------------------------------------------------------
    # Binding
    # -------------------------------------------------------------------------

    def setup(self, grid: CenteredGrid) -> None:
        """
        Bind this cell into grid. A cell bound to another grid is moved.

        Raises:
            ValueError: If the cell's coordinate lies outside grid
        """
        if self.grid is grid:
            logger.debug("setup: %r already bound", self)
            return
        span = self.coord.peek()
        grid.manager.settings.check_span(span)
        if self.grid is not None:
            self.teardown()

        self.grid = grid
        self._pair = self._make_pair(span, self.combined_effect)
        self._handles = self._register(span, self._pair)
        self.position.set(self._average(span))
        logger.debug("setup: %r bound at %s", self, span.label())

    def teardown(self) -> None:
        """Unregister every demand this cell holds. The position freezes where it is."""
        if self.grid is None:
            return
        self.position.set(self.position.peek())
        if self._transition is not None:
            self._unregister(self._transition.handles)
            self._transition = None
            self.shift.set(1.0)
        self._unregister(self._handles)
        self._handles = []
        self._pair = None
        logger.debug("teardown: %r unbound from %r", self, self.grid)
        self.grid = None

    def _require_grid(self) -> CenteredGrid:
        if self.grid is None:
            raise RuntimeError(f"{self!r} is not bound to a grid; add it to a CenteredGrid first")
        return self.grid

    def _make_pair(self, span: Span, effect: Signal[float]) -> DemandPair:
        col_span, row_span = span.col_span, span.row_span
        column_cell = GridArrayCell(
            Signal(lambda: self.layout.size()[0] / col_span, name=f"{self.name}.column_demand"),
            Signal(effect, name=f"{self.name}.column_effect"),
        )
        row_cell = GridArrayCell(
            Signal(lambda: self.layout.size()[1] / row_span, name=f"{self.name}.row_demand"),
            Signal(effect, name=f"{self.name}.row_effect"),
        )
        return (column_cell, row_cell)

    def _register(self, span: Span, pair: DemandPair) -> list[CellHandle]:
        manager = self._require_grid().manager
        return [manager.add_cell(pair[0], pair[1], col, row) for col, row in span.slots()]

    def _unregister(self, handles: list[CellHandle]) -> None:
        manager = self._require_grid().manager
        for handle in handles:
            manager.remove_cell(handle)

    def _average(self, span: Span) -> Callable[[], Point]:
        """Live mean of the slot centres span covers."""
        manager = self._require_grid().manager
        slots = list(span.slots())
        return lambda: Point.mean(manager.get_position(col, row) for col, row in slots)

    # -------------------------------------------------------------------------
    # Retargeting
    # -------------------------------------------------------------------------

    def tween_coord(
        self,
        coord: CoordLike | Span,
        duration: float,
        timing: TimingFunction = ease_in_out_cubic,
    ) -> Task:
        """
        Task moving this cell to coord over duration seconds.

        The coordinate is validated now; the move itself starts when the
        task is first run. Starting another move before this one finishes
        completes this one at once and ends its task.

        Raises:
            RuntimeError: If the cell is not bound to a grid
            ValueError: If coord is malformed or outside the grid
        """
        grid = self._require_grid()
        target = parse_coord(coord)
        grid.manager.settings.check_span(target)
        return self._run_transition(target, duration, timing)

    def tween_effect(
        self,
        value: float,
        duration: float,
        timing: TimingFunction = ease_in_out_cubic,
    ) -> Task:
        check_effect(value)
        return self.effect.tween(value, duration, timing)

    def _run_transition(self, target: Span, duration: float, timing: TimingFunction) -> Task:
        # The cell may have been moved to another grid since the task was created
        self._require_grid().manager.settings.check_span(target)
        if self._transition is not None:
            logger.debug("tween_coord: %r interrupted on its way to %s", self, self.coord.peek().label())
            self._finish_transition(self._transition)

        assert self._pair is not None
        self.shift.set(1.0)
        for cell in self._pair:
            cell.effect.set(self.combined_effect)

        previous = self.coord.peek()
        transition = Transition(previous, self._pair, self._handles)
        self.coord.set(target)
        self._pair = self._make_pair(target, self.incoming_effect)
        self._handles = self._register(target, self._pair)
        self._transition = transition

        new_average = self._average(target)
        old_average = self._average(previous)
        self.position.set(
            lambda: new_average().scale(1 - self.shift()) + old_average().scale(self.shift())
        )
        logger.debug("tween_coord: %r %s -> %s over %.3fs", self, previous.label(), target.label(), duration)

        yield from tween(
            duration,
            lambda t: self.shift.set(1.0 - t),
            timing,
            active=lambda: self._transition is transition,
        )
        if self._transition is transition:
            self._finish_transition(transition)

    def _finish_transition(self, transition: Transition) -> None:
        """Drop the previous binding and return the live pair to its resting effect."""
        assert self._pair is not None
        self._unregister(transition.handles)
        self._transition = None
        self.shift.set(1.0)
        for cell in self._pair:
            cell.effect.set(self.combined_effect)
        self.position.set(self._average(self.coord.peek()))
        logger.debug("tween_coord: %r settled at %s", self, self.coord.peek().label())
