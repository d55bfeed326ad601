"""
Visualization helpers for the boxstack project.

These helpers are thin convenience wrappers around matplotlib for:
- A side elevation of a stack (each box drawn as depth x height).
- A top view of the nested footprints.
- Several stacks side-by-side for comparison.

Typical usage in a notebook
---------------------------

    import matplotlib.pyplot as plt
    from boxstack.utils.plotting import plot_stack

    fig, ax = plt.subplots(figsize=(4, 8))
    plot_stack(result.stack, ax=ax, title="Best stack")

You remain in control of figure creation and display.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
from shapely.geometry import Polygon

from ..geometry import Orientation, footprint_polygon, stack_height


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _plot_polygon(ax, poly: Polygon, **kwargs) -> None:
    """
    Plot a single shapely Polygon on the given Axes.
    """
    xs, ys = poly.exterior.xy
    ax.fill(xs, ys, alpha=kwargs.pop("alpha", 0.4))
    ax.plot(xs, ys, linewidth=kwargs.pop("linewidth", 0.8))


# ---------------------------------------------------------------------------
# Public plotting helpers
# ---------------------------------------------------------------------------

def plot_stack(
    stack: Sequence[Orientation],
    ax=None,
    title: Optional[str] = None,
    annotate: bool = True,
    padding: float = 0.5,
):
    """
    Draw a side elevation of `stack` (bottom-to-top), boxes centred on x=0.

    Parameters
    ----------
    stack:
        The stack to draw.
    ax:
        Optional matplotlib Axes. If None, a new figure and axes are created.
    title:
        Optional plot title. Defaults to the total height.
    annotate:
        If True, label each box with its footprint and height.
    padding:
        Extra margin around the drawing.
    """
    if not stack:
        raise ValueError("plot_stack called with an empty stack.")

    if ax is None:
        _, ax = plt.subplots(figsize=(4, 8))

    z = 0.0
    for o in stack:
        ax.add_patch(
            plt.Rectangle(
                (-o.depth / 2.0, z),
                o.depth,
                o.height,
                alpha=0.4,
                edgecolor="black",
                linewidth=0.8,
            )
        )
        if annotate:
            ax.text(
                0.0,
                z + o.height / 2.0,
                f"{o.width}x{o.depth}x{o.height}",
                ha="center",
                va="center",
                fontsize=8,
            )
        z += o.height

    half = max(o.depth for o in stack) / 2.0
    ax.set_xlim(-half - padding, half + padding)
    ax.set_ylim(0.0, z + padding)
    ax.set_aspect("equal", adjustable="box")
    ax.set_title(title if title is not None else f"height = {stack_height(stack)}")

    return ax


def plot_footprints(
    stack: Sequence[Orientation],
    ax=None,
    title: Optional[str] = None,
    padding: float = 0.5,
):
    """
    Top view of the stack: every footprint drawn centred on the origin.

    In a valid stack the rectangles are strictly nested.
    """
    if not stack:
        raise ValueError("plot_footprints called with an empty stack.")

    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    for o in stack:
        _plot_polygon(ax, footprint_polygon(o.width, o.depth), alpha=0.25)

    minx, miny, maxx, maxy = footprint_polygon(
        max(o.width for o in stack), max(o.depth for o in stack)
    ).bounds
    ax.set_xlim(minx - padding, maxx + padding)
    ax.set_ylim(miny - padding, maxy + padding)
    ax.set_aspect("equal", adjustable="box")
    if title is not None:
        ax.set_title(title)

    return ax


def plot_stacks_grid(
    stacks: Sequence[Sequence[Orientation]],
    titles: Optional[Sequence[str]] = None,
    ncols: int = 3,
    figsize_per_plot: Tuple[float, float] = (3.0, 6.0),
):
    """
    Plot several stacks side-by-side for visual comparison.

    Returns
    -------
    (fig, axes):
        The matplotlib Figure and 2D array of Axes.
    """
    num = len(stacks)
    if num == 0:
        raise ValueError("plot_stacks_grid called with an empty list of stacks.")

    if titles is not None and len(titles) != num:
        raise ValueError("If provided, 'titles' must match the number of stacks.")

    nrows = (num + ncols - 1) // ncols
    fig, axes = plt.subplots(
        nrows,
        ncols,
        figsize=(figsize_per_plot[0] * ncols, figsize_per_plot[1] * nrows),
        squeeze=False,
    )
    axes_flat = axes.ravel()

    for i, stack in enumerate(stacks):
        title_i = titles[i] if titles is not None else None
        plot_stack(stack, ax=axes_flat[i], title=title_i)

    # Hide any unused axes
    for j in range(num, len(axes_flat)):
        axes_flat[j].axis("off")

    fig.tight_layout()
    return fig, axes


__all__ = [
    "plot_stack",
    "plot_footprints",
    "plot_stacks_grid",
]
