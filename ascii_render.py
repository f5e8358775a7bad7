"""
ASCII snapshots of adagrid layouts.

Draws the slot boundaries and the outline of every cell's content at its
current position, so a layout (or one frame of an animation) can be
inspected in a terminal. Grid space is mapped to characters with a fixed
scale; y grows downward.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import simple_chalk as chalk  # type: ignore[import-untyped]

from grid_cell import CenteredGrid, CenteredGridWithGridlines
from grid_types import Point

logger = logging.getLogger(__name__)

COLORS: list[Callable[[str], str]] = [
    chalk.red,
    chalk.green,
    chalk.yellow,
    chalk.blue,
    chalk.magenta,
    chalk.cyan,
    chalk.redBright,
    chalk.greenBright,
    chalk.yellowBright,
    chalk.blueBright,
]


@dataclass(frozen=True)
class RenderOptions:
    """How grid units map to characters."""

    scale: float = 0.1  # characters per grid unit, horizontally
    aspect: float = 0.5  # terminal rows per column of the same length
    color: bool = True


def outline_segments(grid: CenteredGrid) -> tuple[tuple[Point, Point], ...]:
    """Line segments to draw: every gridline if the grid has them, else the border."""
    if isinstance(grid, CenteredGridWithGridlines):
        return grid.gridlines()
    manager = grid.manager
    cols, rows = manager.column_amount, manager.row_amount
    top_left = manager.get_corner_position(0, 0)
    top_right = manager.get_corner_position(cols, 0)
    bottom_left = manager.get_corner_position(0, rows)
    bottom_right = manager.get_corner_position(cols, rows)
    return (
        (top_left, top_right),
        (bottom_left, bottom_right),
        (top_left, bottom_left),
        (top_right, bottom_right),
    )


def render_layout(grid: CenteredGrid, options: RenderOptions = RenderOptions()) -> str:
    """
    Render the current state of grid to a string.

    Args:
        grid: The grid to snapshot
        options: Scale and colour settings

    Returns:
        Rendered text, with ANSI colour codes unless options.color is False
    """
    half_width = grid.width() / 2
    half_height = grid.height() / 2

    def to_col(x: float) -> int:
        return round((x + half_width) * options.scale)

    def to_row(y: float) -> int:
        return round((y + half_height) * options.scale * options.aspect)

    char_w = to_col(half_width) + 1
    char_h = to_row(half_height) + 1
    buffer: list[list[str]] = [[" " for _ in range(char_w)] for _ in range(char_h)]

    def paint(col: int, row: int, char: str) -> None:
        if 0 <= row < char_h and 0 <= col < char_w:
            buffer[row][col] = char

    # Slot boundaries
    for start, end in outline_segments(grid):
        if start.x == end.x:
            col = to_col(start.x)
            for row in range(to_row(start.y), to_row(end.y) + 1):
                crossing = 0 <= row < char_h and 0 <= col < char_w and buffer[row][col] == "-"
                paint(col, row, "+" if crossing else "|")
        else:
            row = to_row(start.y)
            for col in range(to_col(start.x), to_col(end.x) + 1):
                crossing = 0 <= row < char_h and 0 <= col < char_w and buffer[row][col] == "|"
                paint(col, row, "+" if crossing else "-")

    # Cell contents
    for i, cell in enumerate(grid.cells()):
        colorize = COLORS[i % len(COLORS)] if options.color else (lambda s: s)
        char = colorize(cell.name[0] if cell.name else "?")
        centre = cell.position()
        width, height = cell.layout.size()
        left, right = to_col(centre.x - width / 2), to_col(centre.x + width / 2)
        top, bottom = to_row(centre.y - height / 2), to_row(centre.y + height / 2)
        for col in range(left, right + 1):
            paint(col, top, char)  # top edge
            paint(col, bottom, char)  # bottom edge
        for row in range(top, bottom + 1):
            paint(left, row, char)  # left edge
            paint(right, row, char)  # right edge

        if grid.show_coords:
            label = cell.coord_label()
            label_col = to_col(centre.x) - len(label) // 2
            for offset, label_char in enumerate(label):
                paint(label_col + offset, to_row(centre.y), colorize(label_char))

    logger.info(
        "render_layout: %dx%d characters for %.1fx%.1f grid units (scale=%s)",
        char_w,
        char_h,
        half_width * 2,
        half_height * 2,
        options.scale,
    )
    return "\n".join("".join(row) for row in buffer)
