"""
Test suite for the adagrid sizing engine.
"""

import pytest

from adagrid import CellHandle, GridArray, GridArrayCell, GridArrayManager, GridManager
from grid_types import GridSettings, Point
from reactive import Signal


def make_cell(width: float, effect: float = 1.0) -> GridArrayCell:
    return GridArrayCell(Signal(width), Signal(effect))


def array_with_floor(floor: float) -> GridArray:
    array = GridArray()
    array.min_width_from_start.set(floor)
    array.min_width_from_end.set(floor)
    return array


# =============================================================================
# Test Slot Aggregation
# =============================================================================


class TestGridArray:
    """Tests for GridArray min width, max effect and soft maximum."""

    def test_min_width_takes_smaller_direction(self) -> None:
        """The floor is the smaller of the two propagated floors."""
        array = GridArray()
        array.min_width_from_start.set(50.0)
        array.min_width_from_end.set(80.0)
        assert array.min_width() == 50.0

    def test_empty_array_is_its_floor(self) -> None:
        """With no occupants the slot is exactly as wide as its floor."""
        array = array_with_floor(120.0)
        assert array.get_max_width() == 120.0
        assert array.get_max_effect() == 0.0

    def test_max_effect(self) -> None:
        """The max effect is the strongest occupant's effect."""
        array = array_with_floor(0.0)
        array.add(make_cell(10, 0.3))
        array.add(make_cell(10, 0.7))
        assert array.get_max_effect() == pytest.approx(0.7)

    def test_full_effect_reaches_occupant_width(self) -> None:
        """An occupant with effect 1 pins the slot to its width."""
        array = array_with_floor(100.0)
        array.add(make_cell(300, 1.0))
        assert array.get_max_width() == pytest.approx(300.0)

    def test_partial_effect_blends(self) -> None:
        """Effect 0.5 lands halfway between floor and occupant width."""
        array = array_with_floor(100.0)
        array.add(make_cell(300, 0.5))
        assert array.get_max_width() == pytest.approx(200.0)

    def test_zero_effect_contributes_nothing(self) -> None:
        """Effect 0 leaves the slot at its floor."""
        array = array_with_floor(100.0)
        array.add(make_cell(300, 0.0))
        assert array.get_max_width() == pytest.approx(100.0)

    def test_fold_in_ascending_width_order(self) -> None:
        """Each occupant pulls from the floor already raised by narrower ones."""
        array = array_with_floor(100.0)
        array.add(make_cell(300, 0.5))
        array.add(make_cell(200, 0.5))
        # 200 first: 100 -> 150, then 300: 150 -> 225
        assert array.get_max_width() == pytest.approx(225.0)

    def test_occupants_below_floor_are_ignored(self) -> None:
        """Narrow occupants never shrink a slot."""
        array = array_with_floor(100.0)
        array.add(make_cell(50, 1.0))
        assert array.get_max_width() == pytest.approx(100.0)

    def test_equal_width_ties_are_order_independent(self) -> None:
        """Two occupants of equal width give the same result in either order."""
        first = array_with_floor(100.0)
        first.add(make_cell(200, 0.3))
        first.add(make_cell(200, 0.6))

        second = array_with_floor(100.0)
        second.add(make_cell(200, 0.6))
        second.add(make_cell(200, 0.3))

        # w - (w - floor)(1 - e1)(1 - e2)
        assert first.get_max_width() == pytest.approx(200 - 100 * 0.7 * 0.4)
        assert second.get_max_width() == pytest.approx(first.get_max_width())

    def test_monotone_in_effect(self) -> None:
        """Raising an occupant's effect never narrows the slot."""
        array = array_with_floor(100.0)
        array.add(make_cell(180, 0.8))
        cell = make_cell(400, 0.0)
        array.add(cell)

        widths = []
        for step in range(11):
            cell.effect.set(step / 10)
            widths.append(array.get_max_width())

        assert all(w >= array.min_width() for w in widths)
        assert widths == sorted(widths)

    def test_monotone_in_width(self) -> None:
        """Widening an occupant never narrows the slot."""
        array = array_with_floor(100.0)
        array.add(make_cell(250, 0.6))
        cell = make_cell(50, 0.4)
        array.add(cell)

        widths = []
        for width in range(50, 500, 25):
            cell.width.set(float(width))
            widths.append(array.get_max_width())

        assert widths == sorted(widths)

    def test_continuous_in_effect(self) -> None:
        """A tiny change in effect gives a tiny change in width."""
        array = array_with_floor(100.0)
        cell = make_cell(300, 0.0)
        array.add(cell)

        for step in range(10):
            effect = step / 10
            cell.effect.set(effect)
            before = array.get_max_width()
            cell.effect.set(effect + 1e-6)
            assert abs(array.get_max_width() - before) < 1e-3

    def test_membership_changes_are_visible(self) -> None:
        """Adding and removing occupants updates the next read."""
        array = array_with_floor(100.0)
        handle = array.add(make_cell(300, 1.0))
        assert array.get_max_width() == pytest.approx(300.0)
        array.remove(handle)
        assert array.get_max_width() == pytest.approx(100.0)

    def test_remove_unknown_handle(self) -> None:
        """Removing a handle that is not registered raises KeyError."""
        array = GridArray("column[0]")
        with pytest.raises(KeyError, match="No cell with handle"):
            array.remove(12345)

    def test_max_width_is_memoized(self) -> None:
        """The soft maximum is recomputed only when an input changed."""
        calls: list[int] = []
        base = Signal(300.0)

        def width() -> float:
            calls.append(1)
            return base()

        array = array_with_floor(100.0)
        array.add(GridArrayCell(Signal(width), Signal(1.0)))

        assert array.get_max_width() == pytest.approx(300.0)
        assert array.get_max_width() == pytest.approx(300.0)
        assert len(calls) == 1

        # The floor changed but the width's own input did not
        array.min_width_from_start.set(90.0)
        assert array.get_max_width() == pytest.approx(300.0)
        assert len(calls) == 1

        base.set(250.0)
        assert array.get_max_width() == pytest.approx(250.0)
        assert len(calls) == 2


# =============================================================================
# Test Axis Propagation
# =============================================================================


class TestGridArrayManager:
    """Tests for neighbour propagation and axis geometry."""

    def test_needs_at_least_one_slot(self) -> None:
        """An axis with no slots is rejected."""
        with pytest.raises(ValueError, match="at least one slot"):
            GridArrayManager(0)

    def test_single_slot_with_zero_effect(self) -> None:
        """A lone effect-0 occupant propagates a floor of 0."""
        manager = GridArrayManager(1, 100)
        manager.arrays[0].add(make_cell(50, 0.0))
        assert manager.arrays[0].get_max_width() == pytest.approx(0.0)

    def test_single_slot_always_use_default(self) -> None:
        """With always_use_default the floor is the default width."""
        manager = GridArrayManager(1, 100, always_use_default=True)
        manager.arrays[0].add(make_cell(50, 0.0))
        assert manager.arrays[0].get_max_width() == pytest.approx(100.0)

    def test_strong_middle_column(self) -> None:
        """One full-effect occupant in the middle of three columns."""
        manager = GridArrayManager(3, 100)
        manager.arrays[1].add(make_cell(300, 1.0))

        starts = [array.min_width_from_start() for array in manager.arrays]
        ends = [array.min_width_from_end() for array in manager.arrays]
        assert starts == pytest.approx([0.0, 100.0, 100.0])
        assert ends == pytest.approx([100.0, 100.0, 0.0])

        widths = [array.get_max_width() for array in manager.arrays]
        assert widths == pytest.approx([0.0, 300.0, 0.0])
        assert manager.get_total_width() == pytest.approx(300.0)

    def test_partial_effect_propagation(self) -> None:
        """A half-effect occupant pushes a blended floor into its neighbours."""
        manager = GridArrayManager(3, 100)
        manager.arrays[1].add(make_cell(300, 0.5))

        starts = [array.min_width_from_start() for array in manager.arrays]
        ends = [array.min_width_from_end() for array in manager.arrays]
        assert starts == pytest.approx([0.0, 50.0, 75.0])
        assert ends == pytest.approx([75.0, 50.0, 0.0])
        assert manager.arrays[1].get_max_width() == pytest.approx(175.0)

    def test_occupied_slots_reach_default(self) -> None:
        """Full-effect occupants narrower than the default still get the default."""
        manager = GridArrayManager(2, 100)
        manager.arrays[0].add(make_cell(50, 1.0))
        manager.arrays[1].add(make_cell(50, 1.0))
        assert [array.get_max_width() for array in manager.arrays] == pytest.approx([100.0, 100.0])

    def test_total_is_sum_of_slots(self) -> None:
        """Total width equals the sum of slot widths."""
        manager = GridArrayManager(4, 80)
        manager.arrays[0].add(make_cell(200, 0.7))
        manager.arrays[2].add(make_cell(40, 1.0))
        manager.arrays[3].add(make_cell(150, 0.2))
        assert manager.get_total_width() == pytest.approx(
            sum(array.get_max_width() for array in manager.arrays)
        )

    def test_symmetric_positions(self) -> None:
        """Symmetric slot widths give centres symmetric about 0."""
        manager = GridArrayManager(3, 100, always_use_default=True)
        manager.arrays[1].add(make_cell(300, 1.0))

        assert manager.get_total_width() == pytest.approx(500.0)
        assert manager.get_positions() == pytest.approx((-200.0, 0.0, 200.0))
        assert manager.get_corner_positions() == pytest.approx((-250.0, -150.0, 150.0, 250.0))

    def test_asymmetric_positions(self) -> None:
        """A wide first slot shifts every centre."""
        manager = GridArrayManager(3, 100, always_use_default=True)
        manager.arrays[0].add(make_cell(300, 1.0))

        assert manager.get_positions() == pytest.approx((-100.0, 100.0, 200.0))
        corners = manager.get_corner_positions()
        assert len(corners) == 4
        assert corners == pytest.approx((-250.0, 50.0, 150.0, 250.0))
        total = manager.get_total_width()
        assert corners[-1] == pytest.approx(-total / 2 + total)

    def test_positions_are_memoized(self) -> None:
        """Positions are cached until a slot changes."""
        manager = GridArrayManager(2, 100, always_use_default=True)
        first = manager.get_positions()
        assert manager.get_positions() is first

        manager.arrays[1].add(make_cell(300, 1.0))
        assert manager.get_positions() is not first
        assert manager.get_positions() == pytest.approx((-150.0, 50.0))

    def test_wide_axis(self) -> None:
        """Propagation across hundreds of slots reaches the far ends."""
        manager = GridArrayManager(600, 100)
        manager.arrays[300].add(make_cell(300, 1.0))

        assert manager.get_total_width() == pytest.approx(300.0)
        assert manager.arrays[0].min_width_from_end() == pytest.approx(100.0)
        assert manager.arrays[599].min_width_from_start() == pytest.approx(100.0)
        assert manager.arrays[0].min_width_from_start() == pytest.approx(0.0)
        assert len(manager.get_positions()) == 600

        # Every slot between two strong occupants is held at the default
        manager.arrays[0].add(make_cell(50, 1.0))
        assert manager.arrays[150].get_max_width() == pytest.approx(100.0)
        assert manager.get_total_width() == pytest.approx(300 * 100.0 + 300.0)


# =============================================================================
# Test 2D Composition
# =============================================================================


class TestGridManager:
    """Tests for composing the two axes."""

    def make_manager(self) -> GridManager:
        return GridManager(GridSettings(2, 2, always_use_default=True))

    def test_get_position(self) -> None:
        """Positions combine the column and row centres."""
        manager = self.make_manager()
        assert manager.get_position(0, 0) == Point(-50.0, -50.0)
        assert manager.get_position(1, 0) == Point(50.0, -50.0)
        assert manager.get_position(1, 1) == Point(50.0, 50.0)

    def test_get_corner_position(self) -> None:
        """Corner indices run one past the last slot."""
        manager = self.make_manager()
        assert manager.get_corner_position(0, 0) == Point(-100.0, -100.0)
        assert manager.get_corner_position(2, 2) == Point(100.0, 100.0)

    def test_totals(self) -> None:
        """Totals come from each axis."""
        manager = GridManager(GridSettings(3, 2, column_default_width=50, row_default_width=70, always_use_default=True))
        assert manager.get_total_width() == pytest.approx(150.0)
        assert manager.get_total_height() == pytest.approx(140.0)

    def test_add_and_remove_cell(self) -> None:
        """A registered pair widens its column and row until removed."""
        manager = self.make_manager()
        handle = manager.add_cell(make_cell(300), make_cell(200), 1, 0)

        assert isinstance(handle, CellHandle)
        assert (handle.col, handle.row) == (1, 0)
        assert manager.get_total_width() == pytest.approx(400.0)
        assert manager.get_total_height() == pytest.approx(300.0)

        manager.remove_cell(handle)
        assert manager.get_total_width() == pytest.approx(200.0)
        assert manager.get_total_height() == pytest.approx(200.0)

    def test_add_cell_out_of_bounds(self) -> None:
        """Slots outside the grid are rejected."""
        manager = self.make_manager()
        with pytest.raises(ValueError, match="outside the grid"):
            manager.add_cell(make_cell(10), make_cell(10), 2, 0)
        with pytest.raises(ValueError, match="outside the grid"):
            manager.add_cell(make_cell(10), make_cell(10), 0, -1)
