"""
ASCII plotting for capacity test progress.

Creates terminal-friendly charts of weekly test results, model scores and
training volume.
"""

from typing import Sequence

from .metrics import week_feedback
from .models import WeekRecord


def _put(grid: list[list[str]], x: int, y: int, ch: str) -> None:
    if 0 <= y < len(grid) and 0 <= x < len(grid[0]) and grid[y][x] == " ":
        grid[y][x] = ch


def _connect(grid: list[list[str]], start: tuple[int, int], end: tuple[int, int]) -> None:
    """Join two points with an elbow that turns at the middle column."""
    x1, y1 = start
    x2, y2 = end
    if y1 == y2:
        for x in range(x1 + 1, x2):
            _put(grid, x, y1, "─")
        return

    mid = (x1 + x2) // 2
    rising = y2 < y1  # row 0 is the top of the chart
    for x in range(x1 + 1, mid):
        _put(grid, x, y1, "─")
    _put(grid, mid, y1, "╯" if rising else "╮")
    for y in range(min(y1, y2) + 1, max(y1, y2)):
        _put(grid, mid, y, "│")
    _put(grid, mid, y2, "╭" if rising else "╰")
    for x in range(mid + 1, x2):
        _put(grid, x, y2, "─")


def create_test_max_plot(
    history: Sequence[WeekRecord],
    width: int = 60,
    height: int = 20,
    trajectory: Sequence[tuple[int, float]] | None = None,
) -> str:
    """
    Create an ASCII plot of capacity test results by week.

    Args:
        history: Training weeks, ascending
        width: Plot width in characters
        height: Plot height in lines
        trajectory: Projected (week, reps) points; plotted as ·

    Returns:
        ASCII art string
    """
    points = [(w.week_number, w.test_max) for w in history if w.test_max]
    if not points:
        return "No capacity tests recorded yet."

    min_week = points[0][0]
    max_week = points[-1][0]
    if trajectory:
        max_week = max(max_week, int(trajectory[-1][0]))
    week_range = max(1, max_week - min_week)

    values = [reps for _, reps in points]
    if trajectory:
        values += [v for _, v in trajectory]
    y_min = max(0, int(min(values)) - 2)
    y_max = int(max(values)) + 2
    y_range = max(1, y_max - y_min)

    plot_width = width - 6  # Room for y-axis labels
    plot_height = height - 3  # Room for x-axis and title
    grid = [[" " for _ in range(plot_width)] for _ in range(plot_height)]

    def _grid_pos(week: float, value: float) -> tuple[int, int]:
        x = int(((week - min_week) / week_range) * (plot_width - 1))
        y = plot_height - 1 - int(((value - y_min) / y_range) * (plot_height - 1))
        return x, y

    plot_points = [(*_grid_pos(week, reps), reps) for week, reps in points]

    if trajectory:
        for week, value in trajectory:
            x, y = _grid_pos(week, value)
            _put(grid, x, y, "·")

    for (x1, y1, _), (x2, y2, _) in zip(plot_points, plot_points[1:]):
        _connect(grid, (x1, y1), (x2, y2))

    for x, y, _ in plot_points:
        if 0 <= x < plot_width and 0 <= y < plot_height:
            grid[y][x] = "●"

    lines = ["Capacity Test Progress (max reps)", "─" * width]
    for i, row in enumerate(grid):
        y_val = y_max - int((i / (plot_height - 1)) * y_range) if plot_height > 1 else y_max
        row_chars = list(row)

        # Reps label next to each data point on this row
        for x, py, reps in plot_points:
            if py != i:
                continue
            text = f"({reps})"
            start = x + 2 if x + 2 + len(text) < plot_width else x - len(text) - 1
            if start >= 0:
                for j, c in enumerate(text):
                    if start + j < plot_width:
                        row_chars[start + j] = c

        lines.append(f"{y_val:3d} ┤" + "".join(row_chars))

    lines.append("─" * width)

    label_line = [" "] * plot_width
    mid_week = min_week + week_range // 2
    for x_pos, week in ((0, min_week), (plot_width // 2, mid_week), (plot_width - 4, max_week)):
        for i, c in enumerate(f"W{week}"):
            if 0 <= x_pos + i < plot_width:
                label_line[x_pos + i] = c
    lines.append("    " + "".join(label_line))

    if trajectory:
        lines.append("● test max   · regression trajectory")

    return "\n".join(lines)


def create_simple_bar_chart(
    labels: list[str],
    values: list[float],
    width: int = 40,
    title: str = "",
) -> str:
    """
    Create a simple horizontal bar chart.

    Args:
        labels: Labels for each bar
        values: Values for each bar
        width: Maximum bar width
        title: Chart title

    Returns:
        ASCII bar chart string
    """
    if not values:
        return "No data to display."

    max_val = max(values)
    max_label_len = max(len(label) for label in labels) if labels else 0

    lines = []
    if title:
        lines.append(title)
        lines.append("─" * (max_label_len + width + 5))

    for label, value in zip(labels, values):
        bar_len = int((value / max_val) * width) if max_val > 0 else 0
        lines.append(f"{label:>{max_label_len}} │{'█' * bar_len} {value:.1f}")

    return "\n".join(lines)


def create_weekly_volume_chart(history: Sequence[WeekRecord], weeks: int = 4) -> str:
    """Bar chart of completed reps for the last `weeks` training weeks."""
    if not history:
        return "No training history."

    recent = list(history)[-weeks:]
    labels = [f"Week {w.week_number}" for w in recent]
    values = [float(week_feedback(w).volume_actual) for w in recent]
    return create_simple_bar_chart(labels, values, title="Weekly Volume (Total Reps)")
