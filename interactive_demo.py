"""
Interactive demo for adagrid.
Display a grid and move, resize and fade its cells with keyboard commands.
"""

import logging
import time

import readchar, sys
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ascii_render import RenderOptions, render_layout
from grid_cell import CenteredGrid, GridCell
from grid_types import GridSettings
from layout_parser import build_grid, parse_placements
from tween import Task, Timeline

MOVE_DURATION = 0.4
RESIZE_STEP = 50


class InteractiveDemo:
    """Interactive demo for retargeting and resizing cells."""

    def __init__(self, grid: CenteredGrid, fps: int = 30) -> None:
        self.grid = grid
        self.timeline = Timeline(fps=fps)
        self.console = Console()
        self.selected = 0
        self.status_message = "Ready"

    @property
    def cell(self) -> GridCell:
        return self.grid.cells()[self.selected]

    def generate_display(self) -> Panel:
        """Generate the current display with grid and status."""
        cell = self.cell
        status = Text()
        status.append("Selected: ", style="bold")
        status.append(f"{cell.name} at {cell.coord_label()}\n")
        status.append("Content: ", style="bold")
        width, height = cell.layout.size()
        status.append(f"{width:.0f}x{height:.0f}, effect {cell.effect():.2f}\n")
        status.append("Grid: ", style="bold")
        status.append(f"{self.grid.width():.0f}x{self.grid.height():.0f}\n\n")

        status.append(Text.from_ansi(render_layout(self.grid, RenderOptions(scale=0.08))))
        status.append("\n\n")
        status.append("Keys:\n", style="bold cyan")
        status.append("  Tab   - Select next cell\n")
        status.append("  WASD  - Move selected cell\n")
        status.append("  + / - - Grow / shrink content\n")
        status.append("  E     - Toggle effect between 0 and 1\n")
        status.append("  Q     - Quit\n\n")

        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.status_message)

        return Panel(status, title="adagrid Interactive Demo", border_style="green", width=100)

    def play(self, task: Task, live: Live) -> None:
        """Drive an animation to completion, redrawing every frame."""
        alive = self.timeline.start(task)
        live.update(self.generate_display())
        while alive:
            time.sleep(self.timeline.frame_duration)
            alive = self.timeline.step()
            live.update(self.generate_display())

    def move(self, d_col: int, d_row: int, live: Live) -> None:
        span = self.cell.coord()
        target = (
            (span.start[0] + d_col, span.start[1] + d_row),
            (span.end[0] + d_col, span.end[1] + d_row),
        )
        try:
            task = self.cell.tween_coord(target, MOVE_DURATION)
        except ValueError as e:
            self.status_message = f"✗ Cannot move: {str(e).splitlines()[0]}"
            return
        self.play(task, live)
        self.status_message = f"✓ Moved {self.cell.name} to {self.cell.coord_label()}"

    def resize(self, delta: float, live: Live) -> None:
        width, height = self.cell.layout.size()
        target = (max(RESIZE_STEP, width + delta), max(RESIZE_STEP, height + delta))
        self.play(self.cell.layout.size.tween(target, MOVE_DURATION), live)
        self.status_message = f"✓ Resized {self.cell.name} to {target[0]:.0f}x{target[1]:.0f}"

    def toggle_effect(self, live: Live) -> None:
        target = 0.0 if self.cell.effect() > 0.5 else 1.0
        self.play(self.cell.tween_effect(target, MOVE_DURATION), live)
        self.status_message = f"✓ Effect of {self.cell.name} is now {target:.0f}"

    def run(self) -> None:
        """Run the interactive demo."""
        if not self.grid.cells():
            print("ERROR: The grid has no cells to move.")
            return

        with Live(self.generate_display(), console=self.console, refresh_per_second=30) as live:
            try:
                while True:
                    live.update(self.generate_display())
                    key = readchar.readkey()

                    if key.lower() == 'q':
                        self.status_message = "Quitting..."
                        live.update(self.generate_display())
                        break
                    elif key == readchar.key.TAB:
                        self.selected = (self.selected + 1) % len(self.grid.cells())
                        self.status_message = f"Selected {self.cell.name}"
                    elif key.lower() == 'w':
                        self.move(0, -1, live)
                    elif key.lower() == 's':
                        self.move(0, 1, live)
                    elif key.lower() == 'a':
                        self.move(-1, 0, live)
                    elif key.lower() == 'd':
                        self.move(1, 0, live)
                    elif key in ('+', '='):
                        self.resize(RESIZE_STEP, live)
                    elif key == '-':
                        self.resize(-RESIZE_STEP, live)
                    elif key.lower() == 'e':
                        self.toggle_effect(live)
                    else:
                        self.status_message = f"Unknown key: {repr(key)}"

            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.update(self.generate_display())


LAYOUTS = dict(
    scene = """
        red: 2,1 size 100
        yellow: 3,3 size 100
        green: 4,2-5,3 size 100
        pink: 1,1 size 200
    """,
    strip = """
        wide: 2,0 size 300x100
        narrow: 0,0 size 50x100 effect 0.5
    """,
)

SETTINGS = dict(
    scene = GridSettings(6, 6, 150, 150),
    strip = GridSettings(5, 1),
)


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == 'sublime':
        # Running from IDE - just render the initial state
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

        print('Running from IDE - rendering initial state')
        print()

        grid, _ = build_grid(SETTINGS['scene'], parse_placements(LAYOUTS['scene']), gridlines=True, show_coords=True)
        print(render_layout(grid, RenderOptions(scale=0.08)))
    else:
        name = sys.argv[1] if len(sys.argv) > 1 else 'scene'
        grid, _ = build_grid(SETTINGS[name], parse_placements(LAYOUTS[name]), gridlines=True, show_coords=True)
        InteractiveDemo(grid).run()
