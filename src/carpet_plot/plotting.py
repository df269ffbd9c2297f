"""Carpet plot rendering on matplotlib."""

from __future__ import annotations

import math
from pathlib import Path

from matplotlib import pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from carpet_plot.models import ReconciledDataset

TITLE = "$I_{sp}$ vs $T_c$ for Various Chamber Pressures"
X_LABEL = "Chamber Temperature $T_c$ [K]"
Y_LABEL = "Specific Impulse $I_{sp}$ [s]"
CONNECTOR_COLOR = (0.7, 0.7, 0.7)


def pressure_label(pc: float) -> str:
    return f"Pc = {pc:g} psi"


def of_label(of: float) -> str:
    return f"O/F={of:.1f}"


def label_index(n_pc: int) -> int:
    """Zero-based column at which each O/F connector is annotated."""
    return max(math.ceil(n_pc / 2) - 1, 0)


def render_carpet(dataset: ReconciledDataset, ax: Axes | None = None) -> Figure:
    """Draw constant-Pc curves plus dashed constant-O/F connectors.

    Returns the figure holding *ax* (a new one when *ax* is None).
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 7))
    else:
        fig = ax.get_figure()

    colors = plt.rcParams["axes.prop_cycle"].by_key().get("color", ["C0"])

    # Constant pressure
    for j, pc in enumerate(dataset.pc):
        ax.plot(
            dataset.tc[:, j],
            dataset.isp[:, j],
            "-o",
            lw=2,
            color=colors[j % len(colors)],
            label=pressure_label(pc),
        )

    ax.set_xlabel(X_LABEL)
    ax.set_ylabel(Y_LABEL)
    ax.set_title(TITLE)
    ax.grid(True, alpha=0.3)
    ax.legend(loc="lower right")

    # Constant O/F
    mid = label_index(len(dataset.pc))
    for i, of in enumerate(dataset.of):
        tc_row = dataset.tc[i, :]
        isp_row = dataset.isp[i, :]
        ax.plot(tc_row, isp_row, "--", color=CONNECTOR_COLOR, label="_nolegend_")
        if len(tc_row):
            ax.text(tc_row[mid], isp_row[mid], of_label(of), fontsize=8, ha="left")

    fig.tight_layout()
    return fig


def save_figure(fig: Figure, path: Path, dpi: int = 150) -> Path:
    """Export *fig* to *path*; the format follows the suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    return path


def show() -> None:
    plt.show()
