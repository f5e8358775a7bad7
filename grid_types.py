"""
Shared type definitions for the adagrid system.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator

Coord = tuple[int, int]  # (col, row)
SpanCoord = tuple[Coord, Coord]  # inclusive ((col0, row0), (col1, row1))
CoordLike = Coord | SpanCoord


@dataclass(frozen=True)
class Point:
    """A 2D position in grid space, origin at the grid centre."""

    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def scale(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    @staticmethod
    def mean(points: Iterable[Point]) -> Point:
        total = Point(0.0, 0.0)
        count = 0
        for point in points:
            total = total + point
            count += 1
        if count == 0:
            raise ValueError("Cannot average an empty set of points")
        return total.scale(1 / count)


@dataclass(frozen=True)
class Span:
    """An inclusive rectangular block of slots. A single cell is a 1x1 span."""

    start: Coord
    end: Coord

    @property
    def col_span(self) -> int:
        return self.end[0] - self.start[0] + 1

    @property
    def row_span(self) -> int:
        return self.end[1] - self.start[1] + 1

    @property
    def is_single(self) -> bool:
        return self.start == self.end

    def slots(self) -> Iterator[Coord]:
        """Every (col, row) the span covers, column by column."""
        for col in range(self.start[0], self.end[0] + 1):
            for row in range(self.start[1], self.end[1] + 1):
                yield (col, row)

    def label(self) -> str:
        """Coordinate text as written by the user: (2, 1) or ((4, 2), (5, 3))."""
        if self.is_single:
            return f"({self.start[0]}, {self.start[1]})"
        return f"(({self.start[0]}, {self.start[1]}), ({self.end[0]}, {self.end[1]}))"


def _is_index_pair(value: Any) -> bool:
    return (
        isinstance(value, (tuple, list))
        and len(value) == 2
        and all(isinstance(v, int) and not isinstance(v, bool) for v in value)
    )


def parse_coord(coord: CoordLike | Span) -> Span:
    """
    Normalise a coordinate to a Span.

    Accepts (col, row), ((col0, row0), (col1, row1)) or an existing Span.
    Lists are accepted in place of tuples.

    Raises:
        ValueError: If the shape is wrong, an index is negative, or the span is
            degenerate (end before start on either axis)
    """
    if isinstance(coord, Span):
        span = coord
    elif _is_index_pair(coord):
        start = (coord[0], coord[1])
        span = Span(start, start)
    elif (
        isinstance(coord, (tuple, list))
        and len(coord) == 2
        and _is_index_pair(coord[0])
        and _is_index_pair(coord[1])
    ):
        span = Span((coord[0][0], coord[0][1]), (coord[1][0], coord[1][1]))
    else:
        raise ValueError(
            f"Invalid coordinate: {coord!r}\n"
            f"  Valid formats:\n"
            f"    - (col, row): a single cell, e.g. (2, 1)\n"
            f"    - ((col0, row0), (col1, row1)): an inclusive span, e.g. ((4, 2), (5, 3))"
        )

    if min(*span.start, *span.end) < 0:
        raise ValueError(f"Negative index in coordinate {span.label()}")
    if span.col_span < 1 or span.row_span < 1:
        raise ValueError(
            f"Degenerate span {span.label()}\n"
            f"  Column span: {span.col_span}, row span: {span.row_span}\n"
            f"  The end coordinate must not be before the start on either axis"
        )
    return span


def check_effect(effect: Any) -> None:
    """Constant effect weights must lie in [0, 1]. Functions are not checked."""
    if callable(effect):
        return
    if isinstance(effect, bool) or not isinstance(effect, (int, float)):
        raise ValueError(f"Effect must be a number, got {type(effect).__name__}: {effect!r}")
    if not 0 <= effect <= 1:
        raise ValueError(f"Effect must be within [0, 1], got {effect}")


@dataclass(frozen=True)
class GridSettings:
    """Dimensions and default slot sizes of a grid. Fixed for the grid's lifetime."""

    column_amount: int
    row_amount: int
    column_default_width: float = 100
    row_default_width: float = 100
    always_use_default: bool = False

    def __post_init__(self) -> None:
        for field_name in ("column_amount", "row_amount"):
            value = getattr(self, field_name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{field_name} must be a positive integer, got {value!r}")
        for field_name in ("column_default_width", "row_default_width"):
            value = getattr(self, field_name)
            if not isinstance(value, (int, float)) or value < 0:
                raise ValueError(f"{field_name} must be a non-negative number, got {value!r}")

    def check_span(self, span: Span) -> None:
        """
        Raises:
            ValueError: If any slot of span lies outside the grid
        """
        col_end, row_end = span.end
        if col_end >= self.column_amount or row_end >= self.row_amount:
            raise ValueError(
                f"Coordinate {span.label()} is outside the grid\n"
                f"  Grid size: {self.column_amount} columns x {self.row_amount} rows\n"
                f"  Valid columns: 0..{self.column_amount - 1}, valid rows: 0..{self.row_amount - 1}"
            )
