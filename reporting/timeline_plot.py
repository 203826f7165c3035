"""
Per-layer time chart.

Stacked bars show laser and layer change seconds for every layer, a second
axis shows the cumulative print time in minutes. Drawn on a bare matplotlib
Figure so it works without a display and from worker threads.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
from matplotlib.figure import Figure

from estimator.gcode_model import TimeBreakdown


def layer_arrays(breakdown: TimeBreakdown):
    """Return ``(indices, laser, layer_change, cumulative_minutes)`` arrays."""
    layers = breakdown.layers
    indices = np.array([layer.index for layer in layers], dtype=int)
    laser = np.array([layer.laser_seconds for layer in layers], dtype=float)
    change = np.array([layer.layer_change_seconds for layer in layers], dtype=float)
    cumulative = np.cumsum(laser + change) / 60.0
    return indices, laser, change, cumulative


def plot_layers(breakdown: TimeBreakdown, out_path: Path, title: str = "") -> Path:
    indices, laser, change, cumulative = layer_arrays(breakdown)

    fig = Figure(figsize=(10, 5))
    ax = fig.add_subplot(111)
    ax.set_title(title or "Estimated time per layer")
    ax.set_xlabel("Layer")
    ax.set_ylabel("Seconds")
    ax.bar(indices, laser, color="tab:purple", label="Laser")
    ax.bar(indices, change, bottom=laser, color="tab:blue", label="Layer change")
    ax.grid(True, linestyle=":")
    ax.legend(loc="upper left")

    total_ax = ax.twinx()
    total_ax.plot(indices, cumulative, color="red")
    total_ax.set_ylabel("Cumulative minutes")

    fig.tight_layout()
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=100)
    return out_path
