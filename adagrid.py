"""
Content-adaptive grid sizing.

Column widths and row heights are derived from the cells placed in them,
blended against a default size by each cell's effect weight. Each axis is
solved independently (GridArrayManager) and the two solutions are composed
into 2D positions (GridManager). Every derived quantity is a memoized
reactive value, so reads after a change recompute only what the change
touched.
"""

from __future__ import annotations

import functools
import itertools
import logging
from dataclasses import dataclass

from grid_types import GridSettings, Point
from reactive import Signal, computed

logger = logging.getLogger(__name__)

_handle_counter = itertools.count(1)


# =============================================================================
# Slot aggregation
# =============================================================================


@dataclass(eq=False)
class GridArrayCell:
    """One element's demand on one slot along one axis."""

    width: Signal[float]
    effect: Signal[float]


class GridArray:
    """
    One column or one row.

    min_width_from_start / min_width_from_end are wired by the owning
    GridArrayManager; min_width() combines them into the floor this slot
    cannot shrink below.
    """

    def __init__(self, name: str = "slot") -> None:
        self.name = name
        self.cells: Signal[tuple[tuple[int, GridArrayCell], ...]] = Signal((), name=f"{name}.cells")
        self.min_width_from_start: Signal[float] = Signal(0.0, name=f"{name}.min_width_from_start")
        self.min_width_from_end: Signal[float] = Signal(0.0, name=f"{name}.min_width_from_end")

    def __repr__(self) -> str:
        return f"GridArray({self.name!r}, cells={len(self.cells.peek())})"

    def add(self, cell: GridArrayCell) -> int:
        """Register a demand; returns the handle to remove it with."""
        handle = next(_handle_counter)
        self.cells.set(self.cells.peek() + ((handle, cell),))
        return handle

    def remove(self, handle: int) -> None:
        cells = self.cells.peek()
        remaining = tuple(entry for entry in cells if entry[0] != handle)
        if len(remaining) == len(cells):
            raise KeyError(f"No cell with handle {handle} in {self.name}")
        self.cells.set(remaining)

    @computed
    def min_width(self) -> float:
        return min(self.min_width_from_start(), self.min_width_from_end())

    @computed
    def get_max_effect(self) -> float:
        """The strongest claim any occupant makes on this slot."""
        return max([0.0, *(cell.effect() for _, cell in self.cells())])

    @computed
    def get_max_width(self) -> float:
        """
        Effective size of this slot: a soft maximum of the occupant widths.

        Occupants wider than the floor are folded in ascending width order,
        each pulling the running size toward its own width by its effect.
        Effect 1 reaches the occupant's width, effect 0 leaves the size alone.
        The result never decreases when a width or an effect grows, and moves
        continuously with every effect.
        """
        floor = self.min_width()
        demands = sorted(
            (width, cell.effect())
            for _, cell in self.cells()
            if (width := cell.width()) > floor
        )
        size = floor
        for width, effect in demands:
            size = (width - size) * effect + size
        return size


# =============================================================================
# Axis propagation
# =============================================================================


class GridArrayManager:
    """
    All slots of one axis, with neighbour-to-neighbour floor propagation.

    A slot's floor is pulled toward the default width by its own effect and
    otherwise inherits a blend of its neighbour's floor and the neighbour's
    effect. Walking from the start gives one floor, walking from the end
    the other; a slot takes the smaller. A strong occupant therefore widens
    the slots next to it smoothly instead of only its own slot.
    """

    def __init__(
        self,
        amount: int,
        default_width: float = 100,
        always_use_default: bool = False,
        name: str = "axis",
    ) -> None:
        if amount < 1:
            raise ValueError(f"A grid axis needs at least one slot, got {amount}")
        self.name = name
        self.default_width = default_width
        self.always_use_default = always_use_default
        self.arrays: tuple[GridArray, ...] = tuple(GridArray(f"{name}[{i}]") for i in range(amount))

        for index, array in enumerate(self.arrays):
            array.min_width_from_start.set(functools.partial(self._floor_at, self._floors_from_start, index))
            array.min_width_from_end.set(functools.partial(self._floor_at, self._floors_from_end, index))

    def __len__(self) -> int:
        return len(self.arrays)

    @staticmethod
    def _floor_at(floors: Signal[tuple[float, ...]], index: int) -> float:
        return floors()[index]

    @computed
    def _floors_from_start(self) -> tuple[float, ...]:
        return self._propagate(self.arrays)

    @computed
    def _floors_from_end(self) -> tuple[float, ...]:
        return self._propagate(self.arrays[::-1])[::-1]

    def _propagate(self, arrays: tuple[GridArray, ...]) -> tuple[float, ...]:
        """
        Floors of arrays in walking order, each inherited from the one before.

        The walk is a loop over the whole axis, so its depth does not grow
        with the number of slots.
        """
        if self.always_use_default:
            return (self.default_width,) * len(arrays)
        floors: list[float] = []
        from_neighbour = 0.0
        for array in arrays:
            effect = array.get_max_effect()
            floor = self.default_width * effect
            if floors:
                floor += (1 - effect) * from_neighbour
            floors.append(floor)
            from_neighbour = effect * self.default_width + (1 - effect) * floor
        return tuple(floors)

    @computed
    def get_total_width(self) -> float:
        return sum(array.get_max_width() for array in self.arrays)

    @computed
    def get_positions(self) -> tuple[float, ...]:
        """Centre of every slot, the axis being centred on 0."""
        positions: list[float] = []
        centre = -self.get_total_width() / 2
        previous_width = 0.0
        for array in self.arrays:
            width = array.get_max_width()
            centre += previous_width / 2 + width / 2
            positions.append(centre)
            previous_width = width
        return tuple(positions)

    @computed
    def get_corner_positions(self) -> tuple[float, ...]:
        """The len + 1 slot edges, from -total/2 to total/2."""
        corners = [-self.get_total_width() / 2]
        for array in self.arrays:
            corners.append(corners[-1] + array.get_max_width())
        return tuple(corners)


# =============================================================================
# 2D composition
# =============================================================================


@dataclass(frozen=True)
class CellHandle:
    """Registration of one column/row demand pair in one grid slot."""

    col: int
    row: int
    column_handle: int
    row_handle: int


class GridManager:
    """Column and row axes of one grid."""

    def __init__(self, settings: GridSettings) -> None:
        self.settings = settings
        self.column_manager = GridArrayManager(
            settings.column_amount,
            settings.column_default_width,
            settings.always_use_default,
            name="column",
        )
        self.row_manager = GridArrayManager(
            settings.row_amount,
            settings.row_default_width,
            settings.always_use_default,
            name="row",
        )

    @property
    def column_amount(self) -> int:
        return self.settings.column_amount

    @property
    def row_amount(self) -> int:
        return self.settings.row_amount

    def get_position(self, col: int, row: int) -> Point:
        """Centre of the slot at (col, row)."""
        return Point(
            self.column_manager.get_positions()[col],
            self.row_manager.get_positions()[row],
        )

    def get_corner_position(self, col: int, row: int) -> Point:
        """Top-left corner of slot (col, row); col/row may equal the amount for the far edge."""
        return Point(
            self.column_manager.get_corner_positions()[col],
            self.row_manager.get_corner_positions()[row],
        )

    def get_total_width(self) -> float:
        return self.column_manager.get_total_width()

    def get_total_height(self) -> float:
        return self.row_manager.get_total_width()

    def add_cell(self, column_cell: GridArrayCell, row_cell: GridArrayCell, col: int, row: int) -> CellHandle:
        """
        Register a demand pair in column col and row row.

        Raises:
            ValueError: If (col, row) is outside the grid
        """
        if not (0 <= col < self.column_amount and 0 <= row < self.row_amount):
            raise ValueError(
                f"Slot ({col}, {row}) is outside the grid\n"
                f"  Grid size: {self.column_amount} columns x {self.row_amount} rows"
            )
        handle = CellHandle(
            col,
            row,
            self.column_manager.arrays[col].add(column_cell),
            self.row_manager.arrays[row].add(row_cell),
        )
        logger.debug("add_cell: %s", handle)
        return handle

    def remove_cell(self, handle: CellHandle) -> None:
        self.column_manager.arrays[handle.col].remove(handle.column_handle)
        self.row_manager.arrays[handle.row].remove(handle.row_handle)
        logger.debug("remove_cell: %s", handle)
