"""Visualization helpers that turn a run history into a lightweight GIF."""
from __future__ import annotations

import io
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from PIL import Image

from .grid import CellType

# Indexed by CellType value.
CELL_COLOURS: List[str] = [
    "#f4f4f4",  # EMPTY
    "#333333",  # WALL
    "#9ecae1",  # START
    "#2ca02c",  # EXIT
    "#a6a6a6",  # SMOKE
    "#d62728",  # FIRE
]
MODE_COLOURS = {"NORMAL": "#1f77b4", "ALERT": "#ff7f0e", "PANIC": "#9467bd"}


def _draw_frame(record, trail: Sequence[tuple], title: str, dpi: int) -> Image.Image:
    grid = record.grid_state
    rows, cols = grid.shape
    size = max(3.0, min(8.0, 0.3 * max(rows, cols)))
    fig, ax = plt.subplots(figsize=(size, size))
    cmap = ListedColormap(CELL_COLOURS)
    ax.imshow(grid, cmap=cmap, vmin=0, vmax=len(CellType) - 1, interpolation="nearest")

    if len(trail) > 1:
        ax.plot([c for _, c in trail], [r for r, _ in trail], color="#1f77b4", linewidth=1.5, alpha=0.6)
    colour = MODE_COLOURS.get(record.mode.value, "#000000")
    ax.scatter([record.agent_pos.col], [record.agent_pos.row], s=80, color=colour, edgecolors="white", zorder=3)

    ax.set_title(f"{title} | t={record.time_step} {record.mode.value} {record.action}", fontsize=9)
    ax.set_xticks([])
    ax.set_yticks([])
    fig.tight_layout()

    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=dpi)
    plt.close(fig)
    buf.seek(0)
    frame = Image.open(buf).convert("P")
    buf.close()
    return frame


def render_history_gif(
    history: Sequence,
    output_path: str,
    title: str = "",
    max_frames: int = 60,
    dpi: int = 80,
    duration: Optional[int] = None,
) -> None:
    """Render one frame per tick (subsampled to ``max_frames``) as a GIF."""

    if not history:
        return

    stride = max(1, -(-len(history) // max_frames))
    indices = list(range(0, len(history), stride))
    if indices[-1] != len(history) - 1:
        indices.append(len(history) - 1)

    frames: List[Image.Image] = []
    for idx in indices:
        trail = [tuple(rec.agent_pos) for rec in history[: idx + 1]]
        frames.append(_draw_frame(history[idx], trail, title, dpi))

    first, *rest = frames
    first.save(output_path, format="GIF", save_all=True, append_images=rest, duration=duration or 150, loop=0)


__all__ = ["render_history_gif"]
