"""
Placement parsing utilities for adagrid.

A concise text format for describing which cells sit where in a grid, used
by the demos and tests to set up scenes quickly.
"""

from __future__ import annotations

from dataclasses import dataclass

from grid_cell import Box, CenteredGrid, CenteredGridWithGridlines, GridCell
from grid_types import GridSettings, Span, check_effect, parse_coord

__all__ = ["Placement", "parse_placements", "build_grid"]


@dataclass(frozen=True)
class Placement:
    """A named cell: where it sits, how big its content is, how strongly it claims space."""

    name: str
    span: Span
    size: tuple[float, float] = (100.0, 100.0)
    effect: float = 1.0


def _parse_index_pair(text: str) -> tuple[int, int]:
    parts = text.split(",")
    if len(parts) != 2:
        raise ValueError(f"expected 'col,row', got '{text}'")
    col, row = (int(part) for part in parts)
    return (col, row)


def _parse_size(text: str) -> tuple[float, float]:
    parts = text.lower().split("x")
    if len(parts) == 1:
        parts = parts * 2
    if len(parts) != 2:
        raise ValueError(f"expected 'WxH' or a single number, got '{text}'")
    width, height = float(parts[0]), float(parts[1])
    if width <= 0 or height <= 0:
        raise ValueError(f"size must be positive, got '{text}'")
    return (width, height)


def parse_placements(definition: str) -> list[Placement]:
    """
    Parse cell placements from a multi-line format.

    Format:
    - One placement per line: "name: coord [size WxH] [effect E]"
    - coord is "col,row" for a single cell or "col0,row0-col1,row1" for an
      inclusive span
    - size defaults to 100x100; a single number means a square
    - effect defaults to 1 and must lie within [0, 1]
    - Blank lines and lines starting with # are ignored

    Example:
        \"\"\"
        red: 2,1 size 100
        green: 4,2-5,3 size 100x100
        orange: 1,3 size 400x400 effect 0
        \"\"\"

    Args:
        definition: Multi-line string with one placement per line

    Returns:
        Placements in the order they were written

    Raises:
        ValueError: If a line is malformed or a name is used twice
    """
    placements: list[Placement] = []
    seen: set[str] = set()

    for line_idx, raw_line in enumerate(definition.strip().split("\n")):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if ":" not in line:
            raise ValueError(
                f"Invalid placement on line {line_idx + 1}: '{line}'\n"
                f"  Expected format: 'name: col,row [size WxH] [effect E]'"
            )
        name, rest = (part.strip() for part in line.split(":", 1))
        if not name:
            raise ValueError(f"Empty cell name on line {line_idx + 1}: '{line}'")
        if name in seen:
            raise ValueError(
                f"Duplicate cell name '{name}' on line {line_idx + 1}\n"
                f"  Cell names must be unique"
            )

        tokens = rest.split()
        if not tokens:
            raise ValueError(f"Missing coordinate for '{name}' on line {line_idx + 1}")

        try:
            if "-" in tokens[0]:
                start_text, end_text = tokens[0].split("-", 1)
                span = parse_coord((_parse_index_pair(start_text), _parse_index_pair(end_text)))
            else:
                span = parse_coord(_parse_index_pair(tokens[0]))
        except ValueError as e:
            raise ValueError(
                f"Invalid coordinate '{tokens[0]}' for '{name}' on line {line_idx + 1}\n"
                f"  {e}"
            ) from e

        size = (100.0, 100.0)
        effect = 1.0
        options = tokens[1:]
        if len(options) % 2:
            raise ValueError(
                f"Dangling option '{options[-1]}' for '{name}' on line {line_idx + 1}\n"
                f"  Options come in pairs: 'size WxH', 'effect E'"
            )
        for key, value in zip(options[::2], options[1::2]):
            try:
                if key == "size":
                    size = _parse_size(value)
                elif key == "effect":
                    effect = float(value)
                    check_effect(effect)
                else:
                    raise ValueError(f"unknown option '{key}' (valid: size, effect)")
            except ValueError as e:
                raise ValueError(
                    f"Invalid option '{key} {value}' for '{name}' on line {line_idx + 1}\n"
                    f"  {e}"
                ) from e

        seen.add(name)
        placements.append(Placement(name, span, size, effect))

    return placements


def build_grid(
    settings: GridSettings,
    placements: list[Placement],
    gridlines: bool = False,
    show_coords: bool = False,
) -> tuple[CenteredGrid, dict[str, GridCell]]:
    """
    Create a grid holding one GridCell per placement.

    Returns:
        The grid and its cells keyed by placement name
    """
    cells = {
        p.name: GridCell(p.span, Box(p.size, name=f"{p.name}.box"), effect=p.effect, name=p.name)
        for p in placements
    }
    grid_class = CenteredGridWithGridlines if gridlines else CenteredGrid
    grid = grid_class(settings, children=list(cells.values()), show_coords=show_coords, name="grid")
    return grid, cells
