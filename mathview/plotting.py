"""Matplotlib rendering for sampled series."""

from io import BytesIO

import numpy as np
from matplotlib.figure import Figure


def render_figure(plot, interval=None, title="Formula viewer"):
    """Draw f(x), f'(x) if sampled, and the shaded area over interval=(a, b)."""
    fig = Figure(figsize=(8, 5))
    ax = fig.subplots()

    x = plot.series.xs
    y = plot.series.ys
    ax.plot(x, y, linewidth=2, color="#6366f1", label="f(x)")

    if len(plot.derivative):
        ax.plot(plot.derivative.xs, plot.derivative.ys, linestyle="--", linewidth=1.5,
                color="#10b981", label="f'(x)")

    # area under curve (signed) between a and b
    if interval is not None and len(x):
        a, b = sorted(interval)
        where = (x >= a) & (x <= b) & np.isfinite(y)
        ax.fill_between(x, np.where(where, y, 0.0), where=where, alpha=0.15, color="#6366f1",
                        label=f"∫ from {interval[0]:g} to {interval[1]:g}")

    ax.axhline(0, color="black", linewidth=0.8)
    ax.axvline(0, color="black", linewidth=0.8)
    if len(x):
        ax.set_xlim([np.nanmin(x), np.nanmax(x)])

    ax.set_xlabel("x")
    ax.set_ylabel("f(x)")
    ax.set_title(title)

    ax.grid(True, which="both", linestyle="--", linewidth=0.4)
    ax.legend(loc="upper right", fontsize="small")
    return fig


def figure_to_png(fig, dpi=150):
    buf = BytesIO()
    fig.savefig(buf, format="png", dpi=dpi, bbox_inches="tight")
    buf.seek(0)
    return buf.getvalue()
