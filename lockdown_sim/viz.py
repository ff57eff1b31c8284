"""Outbreak line chart.

Plots the SICK / RECOVERED / DEAD series kept by HistoryRecorder, with the
stats-panel colors (red, green, black).
"""

from __future__ import annotations

from typing import Optional

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from lockdown_sim.history import SERIES, HistoryRecorder

SERIES_COLORS = {
    'sick': 'red',
    'recovered': 'green',
    'dead': 'black',
}


def plot_history(
    history: HistoryRecorder,
    save_path: Optional[str] = None,
    title: str = 'Outbreak over time',
) -> plt.Figure:
    """Line chart of compartment counts per tick.

    Args:
        history: Recorded series.
        save_path: Optional path to save figure.
        title: Axes title.

    Returns:
        matplotlib Figure.
    """
    data = history.as_arrays()
    fig, ax = plt.subplots(figsize=(6, 4))
    ticks = data['tick']
    for name in SERIES:
        ax.plot(ticks, data[name], color=SERIES_COLORS[name],
                linewidth=1.5, label=name.capitalize())

    ax.set_xlabel('Tick')
    ax.set_ylabel('Agents')
    ax.set_title(title)
    if ticks.size:
        ax.set_xlim(ticks[0], max(ticks[-1], ticks[0] + 1))
    ax.set_ylim(bottom=0)
    ax.yaxis.get_major_locator().set_params(integer=True)
    ax.legend(loc='upper right', fontsize=8)
    ax.grid(True, alpha=0.3, linewidth=0.5)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=120)
    return fig
