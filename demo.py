"""
Demonstration scripts for the adagrid layout system.
"""

from __future__ import annotations

import logging
import sys

from ascii_render import RenderOptions, render_layout
from grid_cell import Box, CenteredGrid, GridCell
from grid_types import GridSettings
from layout_parser import build_grid, parse_placements
from tween import Timeline, chain, sequence, wait_for

SETTINGS = GridSettings(
    column_amount=6,
    row_amount=6,
    column_default_width=150,
    row_default_width=150,
)

SCENE = """
red: 2,1 size 100
yellow: 3,3 size 100
green: 4,2-5,3 size 100
pink: 1,1 size 200
"""


def snapshot(title: str, grid: CenteredGrid, timeline: Timeline) -> None:
    print(f"--- {title} (t={timeline.time:.2f}s) ---")
    print(f"Grid size: {grid.width():.1f} x {grid.height():.1f}")
    for cell in grid.cells():
        position = cell.position()
        print(f"  {cell.name:<7} {cell.coord_label():<18} at ({position.x:8.2f}, {position.y:8.2f})")
    print(render_layout(grid, RenderOptions(scale=0.06)))
    print()


def scene_demo() -> None:
    """Resize, move and fade cells the way an animated scene would."""
    grid, cells = build_grid(SETTINGS, parse_placements(SCENE), gridlines=True, show_coords=True)
    timeline = Timeline(fps=30)
    snapshot("Initial layout", grid, timeline)

    timeline.run(wait_for(1))
    timeline.run(
        sequence(
            0.2,
            cells["red"].layout.size.tween((200, 300), 1),
            cells["yellow"].layout.size.tween((200, 300), 1),
            cells["pink"].layout.size.tween((400, 200), 1),
        )
    )
    snapshot("After growing red, yellow and pink", grid, timeline)

    orange = GridCell((1, 3), Box((400, 400), name="orange.box"), effect=0, name="orange")
    grid.add(orange)
    snapshot("Orange added with effect 0", grid, timeline)

    timeline.run(wait_for(1))
    timeline.run(
        sequence(
            0.2,
            chain(cells["red"].tween_coord((4, 4), 1), cells["red"].tween_coord((1, 5), 1)),
            cells["green"].tween_coord((3, 5), 1),
            cells["pink"].tween_coord(((2, 0), (3, 1)), 1),
            cells["yellow"].layout.size.tween((300, 200), 1),
            orange.tween_effect(1, 3),
        )
    )
    snapshot("After moving cells and raising orange's effect", grid, timeline)

    timeline.run(wait_for(1))
    timeline.run(
        sequence(
            0.2,
            cells["yellow"].layout.size.tween((100, 100), 1),
            cells["red"].layout.size.tween((100, 100), 1),
            orange.layout.size.tween((100, 100), 1),
            cells["pink"].layout.size.tween((200, 200), 1),
        )
    )
    snapshot("After shrinking everything back", grid, timeline)


def propagation_demo() -> None:
    """Show how one strong cell widens its neighbouring columns."""
    settings = GridSettings(column_amount=5, row_amount=1)
    grid, cells = build_grid(settings, parse_placements("wide: 2,0 size 300x100"))
    columns = grid.manager.column_manager
    timeline = Timeline(fps=4)

    def report(tl: Timeline) -> None:
        widths = ", ".join(f"{array.get_max_width():6.1f}" for array in columns.arrays)
        print(f"  t={tl.time:4.2f} effect={cells['wide'].effect():4.2f} widths=[{widths}]")

    print("Sweeping the effect of the middle cell from 1 to 0:")
    timeline.run(cells["wide"].tween_effect(0, 1), on_frame=report)


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "verbose":
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    scene_demo()
    print()
    propagation_demo()
