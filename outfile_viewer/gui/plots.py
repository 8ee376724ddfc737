"""
Stack plots -- matplotlib rendering of assembled stacks.

Design goals:
- Read-only with respect to the session: traces are drawn, never modified.
- No synthetic time: the x axis is the Time column of each file as downsampled.
- One subplot per parameter, sharing the time axis, one line per trace.
- Hidden traces are drawn but not visible, so toggling does not change axes order.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from matplotlib.figure import Figure

from outfile_viewer.models.traces import Stack


def format_point(time: float, value: float) -> str:
    """Cursor read-out used for every stack axis."""
    return f"X: {time:.2f} s, Y: {value:.2f}"


def stack_ylabel(stack: Stack) -> str:
    return f"{stack.parameter_name} [{stack.unit}]" if stack.unit else stack.parameter_name


def _trace_arrays(points) -> Tuple[np.ndarray, np.ndarray]:
    if not points:
        return np.empty(0), np.empty(0)
    arr = np.asarray(points, dtype=np.float64)
    return arr[:, 0], arr[:, 1]


def render_stacks(
    stacks: Sequence[Stack],
    fig: Optional[Figure] = None,
    *,
    height_per_stack: float = 2.8,
) -> Tuple[Figure, Dict[str, object]]:
    """
    Draw ``stacks`` into ``fig`` (a new Figure when None).

    Returns:
        (fig, lines) where ``lines`` maps trace id -> Line2D.
    """
    n = len(stacks)
    if fig is None:
        fig = Figure(figsize=(10.0, max(height_per_stack, height_per_stack * n)))
    else:
        fig.clear()

    lines: Dict[str, object] = {}

    if n == 0:
        ax = fig.add_subplot(1, 1, 1)
        ax.set_axis_off()
        ax.text(0.5, 0.5, "Select files and parameters to plot", ha="center", va="center", color="#666")
        return fig, lines

    first_ax = None
    for i, stack in enumerate(stacks):
        ax = fig.add_subplot(n, 1, i + 1, sharex=first_ax)
        if first_ax is None:
            first_ax = ax

        for trace in stack.traces:
            xs, ys = _trace_arrays(trace.points)
            (line,) = ax.plot(xs, ys, color=trace.color, label=trace.name, linewidth=1.2)
            line.set_visible(bool(trace.visible))
            lines[trace.id] = line

        ax.set_title(stack.parameter_name, fontsize="medium")
        ax.set_ylabel(stack_ylabel(stack))
        ax.grid(True, alpha=0.4)
        ax.format_coord = format_point
        if stack.traces:
            ax.legend(loc="upper right", fontsize="small")
        if i == n - 1:
            ax.set_xlabel("Time (s)")

    fig.tight_layout()
    return fig, lines
